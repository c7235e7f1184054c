from pydantic import BaseModel, Field
from typing import Optional

from .scheduling import TimeSlot


class BookingCreate(BaseModel):
    announcer_id: str
    category_slug: str
    slot: TimeSlot
    client_id: Optional[str] = None
    animal_id: Optional[str] = None


class AvailabilityCheck(BaseModel):
    announcer_id: str
    category_slug: str
    slot: TimeSlot
    # Si no se indican, se usan los márgenes del perfil del cuidador
    buffer_before_minutes: Optional[int] = Field(None, ge=0)
    buffer_after_minutes: Optional[int] = Field(None, ge=0)
