# app/scheduling/calendar.py
"""
Calendario de disponibilidad de un cuidador para una categoría.

Proyecta día a día las mismas reglas que el ConflictChecker:
- past: fecha anterior a hoy
- unavailable: indisponibilidad manual, reserva que ocupa el día entero
  (categoría estándar) o cupo agotado (categoría con capacidad)
- partial: parte del día comprometida, o indisponibilidad parcial manual
- available: nada reservado
Una reserva de varios días cuenta en cada uno de los días que cubre.
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from .capacity import capacity_result, resolve_profile
from .categories import CategoryResolver
from .constants import DAY_END, DAY_START
from .errors import InvalidSlot
from .timeutils import apply_buffers_to_time_slot, dates_between, slots_overlap_with_buffers, whole_day
from ..repositories.base import Repositories
from ..schemas.scheduling import (
    AvailabilityException,
    Booking,
    BufferedTimeRange,
    DayCapacity,
    DayStatus,
    DayStatusValue,
    ExceptionStatus,
)

logger = logging.getLogger(__name__)


def booked_range(booking: Booking, buffer_before: int, buffer_after: int) -> BufferedTimeRange:
    slot = booking.slot
    if slot.blocks_whole_day:
        return BufferedTimeRange(
            start_time=DAY_START,
            end_time=DAY_END,
            original_start_time=DAY_START,
            original_end_time=DAY_END,
        )
    return apply_buffers_to_time_slot(
        slot.start_time or DAY_START,
        slot.end_time or DAY_END,
        buffer_before,
        buffer_after,
    )


class CalendarBuilder:

    def __init__(self, repositories: Repositories, resolver: CategoryResolver, max_days: int = 366):
        self._repos = repositories
        self._resolver = resolver
        self._max_days = max_days

    async def build(
        self,
        announcer_id: str,
        category_slug: str,
        start: date,
        end: date,
        today: Optional[date] = None,
    ) -> List[DayStatus]:
        if end < start:
            raise InvalidSlot("end debe ser igual o posterior a start")
        if (end - start).days + 1 > self._max_days:
            raise InvalidSlot(f"El rango no puede superar {self._max_days} días")
        today = today or date.today()

        capacity_based = await self._resolver.is_capacity_based(category_slug)
        profile = await resolve_profile(self._repos.profiles, announcer_id)
        slugs = await self._resolver.sibling_slugs(category_slug) if capacity_based else [category_slug]
        bookings = [
            b for b in await self._repos.bookings.list_active(announcer_id, slugs)
            if b.category_slug in slugs and b.slot.start_date <= end and b.slot.end_date >= start
        ]
        exceptions: Dict[date, AvailabilityException] = {
            e.day: e for e in await self._repos.exceptions.list_between(announcer_id, start, end)
        }

        calendar: List[DayStatus] = []
        for day in dates_between(start, end):
            if day < today:
                calendar.append(DayStatus(day=day, status=DayStatusValue.past))
                continue

            day_slot = whole_day(day)
            day_bookings = [
                b for b in bookings
                if slots_overlap_with_buffers(
                    b.slot, day_slot, profile.buffer_before_minutes, profile.buffer_after_minutes
                )
            ]
            entry = DayStatus(
                day=day,
                status=DayStatusValue.available,
                booked_ranges=[
                    booked_range(b, profile.buffer_before_minutes, profile.buffer_after_minutes)
                    for b in day_bookings
                ],
            )

            if capacity_based:
                result = capacity_result(profile.max_animals_per_slot, len(day_bookings))
                entry.capacity = DayCapacity(
                    current=result.current_count,
                    max=result.max_capacity,
                    remaining=result.remaining_capacity,
                )
                if not result.is_available:
                    entry.status = DayStatusValue.unavailable
                elif result.current_count > 0:
                    entry.status = DayStatusValue.partial
            elif any(b.slot.blocks_whole_day for b in day_bookings):
                entry.status = DayStatusValue.unavailable
            elif day_bookings:
                entry.status = DayStatusValue.partial

            exception = exceptions.get(day)
            if exception is not None:
                entry.reason = exception.reason
                if exception.status == ExceptionStatus.unavailable:
                    entry.status = DayStatusValue.unavailable
                elif entry.status != DayStatusValue.unavailable:
                    entry.status = DayStatusValue.partial
                    entry.time_slots = exception.time_slots

            calendar.append(entry)

        return calendar
