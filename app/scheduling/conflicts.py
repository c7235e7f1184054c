# app/scheduling/conflicts.py
import logging
from typing import Optional

from .capacity import CapacityCounter, resolve_buffers
from .categories import CategoryResolver
from .timeutils import slots_overlap_with_buffers
from ..repositories.base import BookingRepository, CapacityProfileRepository
from ..schemas.scheduling import CapacityInfo, ConflictResult, TimeSlot

logger = logging.getLogger(__name__)

CAPACITY_MESSAGE = (
    "Capacidad máxima alcanzada ({max} animales). "
    "El cuidador no puede aceptar más animales en este horario."
)
OVERLAP_MESSAGE = "El cuidador ya tiene una reserva en este horario (tiempo de preparación incluido)"


class ConflictChecker:
    """
    Única autoridad para decidir si una franja es reservable.

    - categoría con capacidad: conflicto sólo si el cupo compartido
      entre subcategorías hermanas está agotado
    - categoría estándar: conflicto ante cualquier solapamiento con una
      reserva activa de la misma categoría exacta

    Es una lectura pura: mismas entradas y mismos datos, mismo resultado.
    """

    def __init__(
        self,
        bookings: BookingRepository,
        profiles: CapacityProfileRepository,
        resolver: CategoryResolver,
        counter: CapacityCounter,
    ):
        self._bookings = bookings
        self._profiles = profiles
        self._resolver = resolver
        self._counter = counter

    async def check_booking_conflict(
        self,
        announcer_id: str,
        category_slug: str,
        slot: TimeSlot,
        buffer_before: Optional[int] = None,
        buffer_after: Optional[int] = None,
    ) -> ConflictResult:
        # Sin márgenes explícitos se usan los del perfil del cuidador
        buffer_before, buffer_after = await resolve_buffers(
            self._profiles, announcer_id, buffer_before, buffer_after
        )

        if await self._resolver.is_capacity_based(category_slug):
            capacity = await self._counter.check_capacity_availability(
                announcer_id, category_slug, slot, buffer_before, buffer_after
            )
            info = CapacityInfo(
                current_count=capacity.current_count,
                max_capacity=capacity.max_capacity,
                remaining_capacity=capacity.remaining_capacity,
            )
            if not capacity.is_available:
                logger.info("Cupo agotado para %s en %s (%s)", announcer_id, category_slug, slot.start_date)
                return ConflictResult(
                    has_conflict=True,
                    is_capacity_based=True,
                    capacity_info=info,
                    conflict_message=CAPACITY_MESSAGE.format(max=capacity.max_capacity),
                )
            return ConflictResult(has_conflict=False, is_capacity_based=True, capacity_info=info)

        bookings = await self._bookings.list_active(announcer_id, [category_slug])
        for booking in bookings:
            if booking.category_slug != category_slug:
                continue
            if slots_overlap_with_buffers(booking.slot, slot, buffer_before, buffer_after):
                logger.info("Solapamiento con la reserva %s de %s", booking.id, announcer_id)
                return ConflictResult(
                    has_conflict=True,
                    is_capacity_based=False,
                    conflict_message=OVERLAP_MESSAGE,
                )

        return ConflictResult(has_conflict=False, is_capacity_based=False)
