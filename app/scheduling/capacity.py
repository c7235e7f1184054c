# app/scheduling/capacity.py
"""
Gestión de capacidad para categorías "capacity-based" (guarda de animales).

En estas categorías un cuidador puede atender varios animales a la vez
hasta `max_animals_per_slot`, y el cupo se comparte entre todas las
subcategorías de la misma categoría padre. Cada reserva ocupa una plaza,
sea cual sea su duración.
"""
import logging
from typing import Optional, Tuple

from .categories import CategoryResolver
from .constants import DEFAULT_MAX_ANIMALS_PER_SLOT
from .timeutils import slots_overlap_with_buffers
from ..repositories.base import BookingRepository, CapacityProfileRepository
from ..schemas.scheduling import AnnouncerCapacityProfile, CapacityResult, TimeSlot

logger = logging.getLogger(__name__)


async def resolve_profile(profiles: CapacityProfileRepository, announcer_id: str) -> AnnouncerCapacityProfile:
    """Perfil del cuidador o, si no existe, los valores por defecto."""
    profile = await profiles.get(announcer_id)
    return profile if profile is not None else AnnouncerCapacityProfile()


async def resolve_buffers(
    profiles: CapacityProfileRepository,
    announcer_id: str,
    buffer_before: Optional[int] = None,
    buffer_after: Optional[int] = None,
) -> Tuple[int, int]:
    """Márgenes explícitos o, si faltan, los del perfil del cuidador."""
    if buffer_before is None or buffer_after is None:
        profile = await resolve_profile(profiles, announcer_id)
        if buffer_before is None:
            buffer_before = profile.buffer_before_minutes
        if buffer_after is None:
            buffer_after = profile.buffer_after_minutes
    return buffer_before, buffer_after


def capacity_result(max_capacity: int, current_count: int, is_capacity_based: bool = True) -> CapacityResult:
    remaining = max(0, max_capacity - current_count)
    return CapacityResult(
        is_capacity_based=is_capacity_based,
        is_available=remaining > 0,
        current_count=current_count,
        max_capacity=max_capacity,
        remaining_capacity=remaining,
    )


class CapacityCounter:

    def __init__(
        self,
        bookings: BookingRepository,
        profiles: CapacityProfileRepository,
        resolver: CategoryResolver,
    ):
        self._bookings = bookings
        self._profiles = profiles
        self._resolver = resolver

    async def count_concurrent_bookings(
        self,
        announcer_id: str,
        category_slug: str,
        candidate: TimeSlot,
        buffer_before: int = 0,
        buffer_after: int = 0,
    ) -> int:
        slugs = await self._resolver.sibling_slugs(category_slug)
        bookings = await self._bookings.list_active(announcer_id, slugs)
        return sum(
            1
            for b in bookings
            if b.category_slug in slugs
            and slots_overlap_with_buffers(b.slot, candidate, buffer_before, buffer_after)
        )

    async def check_capacity_availability(
        self,
        announcer_id: str,
        category_slug: str,
        candidate: TimeSlot,
        buffer_before: Optional[int] = None,
        buffer_after: Optional[int] = None,
    ) -> CapacityResult:
        if not await self._resolver.is_capacity_based(category_slug):
            # Categoría estándar: la exclusividad la comprueba el ConflictChecker
            return capacity_result(DEFAULT_MAX_ANIMALS_PER_SLOT, 0, is_capacity_based=False)

        profile = await resolve_profile(self._profiles, announcer_id)
        if buffer_before is None:
            buffer_before = profile.buffer_before_minutes
        if buffer_after is None:
            buffer_after = profile.buffer_after_minutes
        current = await self.count_concurrent_bookings(
            announcer_id, category_slug, candidate, buffer_before, buffer_after
        )
        result = capacity_result(profile.max_animals_per_slot, current)
        logger.debug(
            "Capacidad %s/%s para %s en %s: %s/%s",
            announcer_id, category_slug, candidate.start_date, candidate.end_date,
            result.current_count, result.max_capacity,
        )
        return result
