from pydantic import BaseModel, Field, field_validator, model_validator
from enum import Enum
from datetime import date
from typing import Annotated, List, Literal, Optional, Union

from ..scheduling.constants import (
    DEFAULT_BUFFER_MINUTES,
    DEFAULT_MAX_ANIMALS_PER_SLOT,
    INACTIVE_STATUSES,
    TIME_FORMAT,
)
from ..scheduling.errors import InvalidSlot, InvalidTimeFormat


def check_time(value: Optional[str]) -> Optional[str]:
    """Valida 'HH:MM' (00:00-23:59). None se deja pasar."""
    if value is None:
        return value
    match = TIME_FORMAT.match(value) if isinstance(value, str) else None
    if not match or int(match.group(1)) > 23 or int(match.group(2)) > 59:
        raise InvalidTimeFormat(value)
    return value


# ---------- Horarios ----------

class TimeRange(BaseModel):
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return check_time(v)

    @model_validator(mode="after")
    def _ordered(self):
        if self.end_time <= self.start_time:
            raise InvalidSlot(f"end_time debe ser posterior a start_time ({self.start_time}-{self.end_time})")
        return self


class TimeSlot(BaseModel):
    """
    Franja reservable. Fechas inclusivas; las horas sólo tienen sentido
    cuando start_date == end_date. Una franja de varios días bloquea
    los días completos, tenga o no horas.
    """
    start_date: date
    end_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return check_time(v)

    @model_validator(mode="after")
    def _ordered(self):
        if self.end_date < self.start_date:
            raise InvalidSlot("end_date debe ser igual o posterior a start_date")
        if (
            not self.is_multi_day
            and self.start_time is not None
            and self.end_time is not None
            and self.end_time <= self.start_time
        ):
            raise InvalidSlot("end_time debe ser posterior a start_time")
        return self

    @property
    def is_multi_day(self) -> bool:
        return self.start_date != self.end_date

    @property
    def has_time_window(self) -> bool:
        return not self.is_multi_day and (self.start_time is not None or self.end_time is not None)

    @property
    def blocks_whole_day(self) -> bool:
        return not self.has_time_window

    def covers(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


class BufferedTimeRange(BaseModel):
    start_time: str
    end_time: str
    original_start_time: str
    original_end_time: str


# ---------- Reservas ----------

class BookingStatus(str, Enum):
    pending_acceptance   = "pending_acceptance"
    pending_confirmation = "pending_confirmation"
    upcoming             = "upcoming"
    in_progress          = "in_progress"
    completed            = "completed"
    cancelled            = "cancelled"
    refused              = "refused"


class Booking(BaseModel):
    id: Optional[str] = None
    announcer_id: str
    category_slug: str
    slot: TimeSlot
    status: BookingStatus = BookingStatus.pending_acceptance
    client_id: Optional[str] = None
    animal_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status.value not in INACTIVE_STATUSES


# ---------- Indisponibilidades manuales ----------

class ExceptionStatus(str, Enum):
    unavailable = "unavailable"
    partial     = "partial"


class AvailabilityException(BaseModel):
    announcer_id: str
    day: date
    status: ExceptionStatus
    # Franjas explícitamente disponibles cuando status == partial
    time_slots: List[TimeRange] = Field(default_factory=list)
    reason: Optional[str] = None


# ---------- Perfil del cuidador ----------

class AnnouncerCapacityProfile(BaseModel):
    buffer_before_minutes: int = Field(DEFAULT_BUFFER_MINUTES, ge=0)
    buffer_after_minutes: int = Field(DEFAULT_BUFFER_MINUTES, ge=0)
    max_animals_per_slot: int = Field(DEFAULT_MAX_ANIMALS_PER_SLOT, ge=1)
    accept_reservations_from: Optional[str] = None  # sólo informativo
    accept_reservations_to: Optional[str] = None

    @field_validator("accept_reservations_from", "accept_reservations_to")
    @classmethod
    def validate_time(cls, v: Optional[str]) -> Optional[str]:
        return check_time(v)


# ---------- Categorías (árbol de dos niveles) ----------

class ParentCategory(BaseModel):
    kind: Literal["parent"] = "parent"
    slug: str
    name: Optional[str] = None
    is_capacity_based: bool = False


class ChildCategory(BaseModel):
    # Una subcategoría hereda el modo de capacidad de su padre
    kind: Literal["child"] = "child"
    slug: str
    parent_slug: str
    name: Optional[str] = None


ServiceCategory = Annotated[Union[ParentCategory, ChildCategory], Field(discriminator="kind")]


# ---------- Resultados ----------

class CapacityInfo(BaseModel):
    current_count: int
    max_capacity: int
    remaining_capacity: int


class CapacityResult(CapacityInfo):
    is_capacity_based: bool
    is_available: bool


class ConflictResult(BaseModel):
    has_conflict: bool
    is_capacity_based: bool
    capacity_info: Optional[CapacityInfo] = None
    conflict_message: Optional[str] = None


class DayStatusValue(str, Enum):
    past        = "past"
    unavailable = "unavailable"
    partial     = "partial"
    available   = "available"


class DayCapacity(BaseModel):
    current: int
    max: int
    remaining: int


class DayStatus(BaseModel):
    day: date
    status: DayStatusValue
    booked_ranges: List[BufferedTimeRange] = Field(default_factory=list)
    time_slots: Optional[List[TimeRange]] = None
    capacity: Optional[DayCapacity] = None
    reason: Optional[str] = None


AvailabilityLabel = Literal["available", "partial", "unavailable"]


class AnnouncerAvailability(BaseModel):
    announcer_id: str
    status: AvailabilityLabel
    next_available: Optional[date] = None
    available_slots: Optional[List[TimeRange]] = None
    conflict: Optional[ConflictResult] = None


class PartialDay(BaseModel):
    day: date
    time_slots: List[TimeRange] = Field(default_factory=list)


class AlternativeSlots(BaseModel):
    available_dates: List[date] = Field(default_factory=list)
    partial_slots: List[PartialDay] = Field(default_factory=list)
