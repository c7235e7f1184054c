"""
Interfaces de sólo lectura que consume el motor de disponibilidad.

El motor no conoce MongoDB: recibe estos repositorios ya construidos
(ver app/repositories/mongo.py) y así se puede probar sin base de datos.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable, Iterable, List, Optional, TypeVar

from ..schemas.scheduling import (
    AnnouncerCapacityProfile,
    AvailabilityException,
    Booking,
    ChildCategory,
    ServiceCategory,
)

T = TypeVar("T")


class BookingRepository(ABC):

    @abstractmethod
    async def list_active(
        self,
        announcer_id: str,
        category_slugs: Optional[Iterable[str]] = None,
    ) -> List[Booking]:
        """Reservas no canceladas ni rechazadas del cuidador (opcionalmente por categorías)."""


class AvailabilityExceptionRepository(ABC):

    @abstractmethod
    async def get(self, announcer_id: str, day: date) -> Optional[AvailabilityException]:
        ...

    @abstractmethod
    async def list_between(self, announcer_id: str, start: date, end: date) -> List[AvailabilityException]:
        ...


class CapacityProfileRepository(ABC):

    @abstractmethod
    async def get(self, announcer_id: str) -> Optional[AnnouncerCapacityProfile]:
        ...


class CategoryRepository(ABC):

    @abstractmethod
    async def get(self, slug: str) -> Optional[ServiceCategory]:
        ...

    @abstractmethod
    async def children_of(self, parent_slug: str) -> List[ChildCategory]:
        ...


@dataclass
class Repositories:
    bookings: BookingRepository
    exceptions: AvailabilityExceptionRepository
    profiles: CapacityProfileRepository
    categories: CategoryRepository


class ReservationTransaction(ABC):
    """Vista transaccional: lecturas y escritura dentro del mismo bloqueo."""

    repositories: Repositories

    @abstractmethod
    async def insert_booking(self, booking: Booking) -> Booking:
        ...


class ReservationUnitOfWork(ABC):
    """
    Ejecuta `work` con el cuidador bloqueado para escritura.

    Dos llamadas concurrentes sobre el mismo cuidador no pueden pasar la
    comprobación de conflictos a la vez: una de ellas espera o se reintenta
    y vuelve a validar contra los datos ya confirmados.
    """

    @abstractmethod
    async def run(
        self,
        announcer_id: str,
        work: Callable[[ReservationTransaction], Awaitable[T]],
    ) -> T:
        ...
