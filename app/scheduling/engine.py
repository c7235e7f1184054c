# app/scheduling/engine.py
from datetime import date
from typing import List, Optional

from .calendar import CalendarBuilder
from .capacity import CapacityCounter
from .categories import CategoryResolver
from .conflicts import ConflictChecker
from ..repositories.base import Repositories
from ..schemas.scheduling import CapacityResult, ConflictResult, DayStatus, TimeSlot


class SchedulingEngine:
    """
    Punto de entrada del motor: cablea resolver, contador de capacidad,
    comprobador de conflictos y calendario sobre un mismo juego de
    repositorios, para que reserva, búsqueda y calendario respondan igual.
    """

    def __init__(
        self,
        repositories: Repositories,
        strict_categories: bool = False,
        calendar_max_days: int = 366,
    ):
        self.repositories = repositories
        self.resolver = CategoryResolver(repositories.categories, strict=strict_categories)
        self.capacity = CapacityCounter(repositories.bookings, repositories.profiles, self.resolver)
        self.conflicts = ConflictChecker(
            repositories.bookings, repositories.profiles, self.resolver, self.capacity
        )
        self.calendar = CalendarBuilder(repositories, self.resolver, max_days=calendar_max_days)

    async def is_capacity_based(self, category_slug: str) -> bool:
        return await self.resolver.is_capacity_based(category_slug)

    async def sibling_slugs(self, category_slug: str) -> List[str]:
        return await self.resolver.sibling_slugs(category_slug)

    async def count_concurrent_bookings(
        self,
        announcer_id: str,
        category_slug: str,
        slot: TimeSlot,
        buffer_before: int = 0,
        buffer_after: int = 0,
    ) -> int:
        return await self.capacity.count_concurrent_bookings(
            announcer_id, category_slug, slot, buffer_before, buffer_after
        )

    async def check_capacity_availability(
        self,
        announcer_id: str,
        category_slug: str,
        slot: TimeSlot,
        buffer_before: Optional[int] = None,
        buffer_after: Optional[int] = None,
    ) -> CapacityResult:
        return await self.capacity.check_capacity_availability(
            announcer_id, category_slug, slot, buffer_before, buffer_after
        )

    async def check_booking_conflict(
        self,
        announcer_id: str,
        category_slug: str,
        slot: TimeSlot,
        buffer_before: Optional[int] = None,
        buffer_after: Optional[int] = None,
    ) -> ConflictResult:
        return await self.conflicts.check_booking_conflict(
            announcer_id, category_slug, slot, buffer_before, buffer_after
        )

    async def build_availability_calendar(
        self,
        announcer_id: str,
        category_slug: str,
        start: date,
        end: date,
        today: Optional[date] = None,
    ) -> List[DayStatus]:
        return await self.calendar.build(announcer_id, category_slug, start, end, today=today)
