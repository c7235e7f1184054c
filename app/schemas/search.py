from pydantic import BaseModel, Field
from typing import List

from .scheduling import TimeSlot


class AnnouncerSearch(BaseModel):
    # Candidatos ya filtrados por ciudad/servicio fuera del motor
    announcer_ids: List[str] = Field(..., min_length=1, max_length=500)
    category_slug: str
    slot: TimeSlot
    include_unavailable: bool = False
