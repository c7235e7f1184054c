# app/scheduling/reservations.py
"""
Creación de reservas con la comprobación de conflictos dentro de la
misma transacción que la inserción.

Sin esto, dos solicitudes simultáneas podían pasar ambas la comprobación
antes de que ninguna se guardara (doble reserva en categorías estándar,
exceso de cupo en las de capacidad). La unidad de trabajo bloquea al
cuidador y la comprobación se repite contra los datos confirmados.
"""
import logging
from datetime import date
from typing import Optional

from .engine import SchedulingEngine
from .errors import AnnouncerUnavailable, BookingConflict, InvalidSlot
from .unavailability import find_blocking_exception
from ..repositories.base import ReservationTransaction, ReservationUnitOfWork
from ..schemas.booking import BookingCreate
from ..schemas.scheduling import Booking, BookingStatus

logger = logging.getLogger(__name__)


class ReservationService:

    def __init__(self, uow: ReservationUnitOfWork, strict_categories: bool = False):
        self._uow = uow
        self._strict_categories = strict_categories

    async def reserve(self, request: BookingCreate, today: Optional[date] = None) -> Booking:
        today = today or date.today()
        if request.slot.start_date < today:
            raise InvalidSlot("No se puede reservar en una fecha pasada")

        async def _work(tx: ReservationTransaction) -> Booking:
            engine = SchedulingEngine(tx.repositories, strict_categories=self._strict_categories)

            blocking = await find_blocking_exception(
                tx.repositories.exceptions, request.announcer_id, request.slot
            )
            if blocking is not None:
                logger.info("Reserva rechazada: %s no disponible el %s", request.announcer_id, blocking.day)
                raise AnnouncerUnavailable(blocking.day, blocking.reason)

            result = await engine.check_booking_conflict(
                request.announcer_id, request.category_slug, request.slot
            )
            if result.has_conflict:
                logger.info("Reserva rechazada para %s: %s", request.announcer_id, result.conflict_message)
                raise BookingConflict(result)

            booking = Booking(
                announcer_id=request.announcer_id,
                category_slug=request.category_slug,
                slot=request.slot,
                status=BookingStatus.pending_acceptance,
                client_id=request.client_id,
                animal_id=request.animal_id,
            )
            return await tx.insert_booking(booking)

        created = await self._uow.run(request.announcer_id, _work)
        logger.info("Reserva %s creada para %s (%s)", created.id, created.announcer_id, created.category_slug)
        return created
