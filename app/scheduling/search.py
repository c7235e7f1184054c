# app/scheduling/search.py
"""
Filtro de disponibilidad para la búsqueda de cuidadores.

Usa el mismo ConflictChecker que la creación de reservas, de modo que un
cuidador que aparece como disponible en la búsqueda también lo está al
reservar (salvo reservas concurrentes, ver reservations.py).
"""
import logging
from datetime import date, timedelta
from typing import Iterable, List, Optional

from .engine import SchedulingEngine
from .timeutils import whole_day
from .unavailability import exceptions_for_slot, fits_partial_windows
from ..schemas.scheduling import (
    AlternativeSlots,
    AnnouncerAvailability,
    DayStatusValue,
    ExceptionStatus,
    PartialDay,
    TimeSlot,
)

logger = logging.getLogger(__name__)

_STATUS_ORDER = {"available": 0, "partial": 1, "unavailable": 2}


class AvailabilitySearch:

    def __init__(self, engine: SchedulingEngine, lookahead_days: int = 30):
        self._engine = engine
        self._exceptions = engine.repositories.exceptions
        self._lookahead_days = lookahead_days

    async def announcer_availability(
        self,
        announcer_id: str,
        category_slug: str,
        slot: TimeSlot,
        today: Optional[date] = None,
    ) -> AnnouncerAvailability:
        exceptions = await exceptions_for_slot(self._exceptions, announcer_id, slot)
        blocked = any(e.status == ExceptionStatus.unavailable for e in exceptions)

        conflict = None
        if not blocked:
            conflict = await self._engine.check_booking_conflict(announcer_id, category_slug, slot)

        if blocked or conflict.has_conflict:
            return AnnouncerAvailability(
                announcer_id=announcer_id,
                status="unavailable",
                next_available=await self.next_available_date(announcer_id, category_slug, today),
                conflict=conflict,
            )

        for exception in exceptions:
            if exception.status == ExceptionStatus.partial and not fits_partial_windows(exception, slot):
                return AnnouncerAvailability(
                    announcer_id=announcer_id,
                    status="partial",
                    available_slots=exception.time_slots,
                    conflict=conflict,
                )

        return AnnouncerAvailability(announcer_id=announcer_id, status="available", conflict=conflict)

    async def next_available_date(
        self,
        announcer_id: str,
        category_slug: str,
        today: Optional[date] = None,
    ) -> Optional[date]:
        """Primer día libre entero tras `today`, dentro del horizonte configurado."""
        today = today or date.today()
        first, last = today + timedelta(days=1), today + timedelta(days=self._lookahead_days)
        # Un día parcial tampoco admite una reserva de día completo
        closed = {e.day for e in await self._exceptions.list_between(announcer_id, first, last)}
        for offset in range(1, self._lookahead_days + 1):
            day = today + timedelta(days=offset)
            if day in closed:
                continue
            result = await self._engine.check_booking_conflict(announcer_id, category_slug, whole_day(day))
            if not result.has_conflict:
                return day
        return None

    async def filter_available_announcers(
        self,
        announcer_ids: Iterable[str],
        category_slug: str,
        slot: TimeSlot,
        include_unavailable: bool = False,
        today: Optional[date] = None,
    ) -> List[AnnouncerAvailability]:
        results: List[AnnouncerAvailability] = []
        for announcer_id in announcer_ids:
            availability = await self.announcer_availability(announcer_id, category_slug, slot, today)
            if availability.status == "unavailable" and not include_unavailable:
                continue
            results.append(availability)

        # Disponibles primero
        results.sort(key=lambda a: _STATUS_ORDER[a.status])
        logger.info(
            "Búsqueda %s %s: %s cuidadores con hueco",
            category_slug, slot.start_date, sum(1 for r in results if r.status != "unavailable"),
        )
        return results

    async def alternative_slots(
        self,
        announcer_id: str,
        category_slug: str,
        start: date,
        end: date,
        today: Optional[date] = None,
    ) -> AlternativeSlots:
        calendar = await self._engine.build_availability_calendar(
            announcer_id, category_slug, start, end, today=today
        )
        open_days = [d for d in calendar if d.status in (DayStatusValue.available, DayStatusValue.partial)]
        return AlternativeSlots(
            available_dates=[d.day for d in open_days],
            partial_slots=[PartialDay(day=d.day, time_slots=d.time_slots) for d in open_days if d.time_slots],
        )
