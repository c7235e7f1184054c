# app/repositories/mongo.py
"""
Repositorios sobre MongoDB (Motor).

Colecciones:
- bookings: announcer_id, category_slug, start_date, end_date, start_time, end_time, status
- availability: announcer_id, date ("YYYY-MM-DD"), status, time_slots, reason
- profiles: user_id, buffer_before_minutes, buffer_after_minutes, max_animals_per_slot
- service_categories: slug, name, parent_slug, is_capacity_based
- booking_locks: announcer_id, version (sólo para serializar reservas)

Todas las consultas aceptan una sesión opcional para leer dentro de una
transacción.
"""
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase

from .base import (
    AvailabilityExceptionRepository,
    BookingRepository,
    CapacityProfileRepository,
    CategoryRepository,
    Repositories,
    ReservationTransaction,
    ReservationUnitOfWork,
)
from ..scheduling.constants import INACTIVE_STATUSES
from ..schemas.scheduling import (
    AnnouncerCapacityProfile,
    AvailabilityException,
    Booking,
    ChildCategory,
    ParentCategory,
    TimeSlot,
)
from ..utils import to_id

PROFILE_FIELDS = (
    "buffer_before_minutes",
    "buffer_after_minutes",
    "max_animals_per_slot",
    "accept_reservations_from",
    "accept_reservations_to",
)


# ---------- Conversión documento <-> modelo ----------

def booking_to_doc(booking: Booking) -> Dict[str, Any]:
    slot = booking.slot
    return {
        "announcer_id": booking.announcer_id,
        "category_slug": booking.category_slug,
        "start_date": slot.start_date.isoformat(),
        "end_date": slot.end_date.isoformat(),
        "start_time": slot.start_time,
        "end_time": slot.end_time,
        "status": booking.status.value,
        "client_id": booking.client_id,
        "animal_id": booking.animal_id,
        "created_at": datetime.utcnow(),
    }


def booking_from_doc(doc: Dict[str, Any]) -> Booking:
    d = to_id(doc)
    return Booking(
        id=d.get("id"),
        announcer_id=str(d["announcer_id"]),
        category_slug=d["category_slug"],
        slot=TimeSlot(
            start_date=d["start_date"],
            end_date=d["end_date"],
            start_time=d.get("start_time"),
            end_time=d.get("end_time"),
        ),
        status=d["status"],
        client_id=d.get("client_id"),
        animal_id=d.get("animal_id"),
    )


def exception_from_doc(doc: Dict[str, Any]) -> AvailabilityException:
    return AvailabilityException(
        announcer_id=str(doc["announcer_id"]),
        day=doc["date"],
        status=doc["status"],
        time_slots=doc.get("time_slots") or [],
        reason=doc.get("reason"),
    )


def category_from_doc(doc: Dict[str, Any]):
    if doc.get("parent_slug"):
        return ChildCategory(slug=doc["slug"], parent_slug=doc["parent_slug"], name=doc.get("name"))
    return ParentCategory(
        slug=doc["slug"],
        name=doc.get("name"),
        is_capacity_based=bool(doc.get("is_capacity_based", False)),
    )


# ---------- Repositorios ----------

class _MongoRepository:
    def __init__(self, db: AsyncIOMotorDatabase, session: Optional[AsyncIOMotorClientSession] = None):
        self._db = db
        self._session = session


class MongoBookingRepository(_MongoRepository, BookingRepository):

    async def list_active(self, announcer_id: str, category_slugs: Optional[Iterable[str]] = None) -> List[Booking]:
        q: Dict[str, Any] = {
            "announcer_id": announcer_id,
            "status": {"$nin": sorted(INACTIVE_STATUSES)},
        }
        if category_slugs is not None:
            q["category_slug"] = {"$in": list(category_slugs)}
        docs = await self._db.bookings.find(q, session=self._session).to_list(None)
        return [booking_from_doc(d) for d in docs]


class MongoAvailabilityExceptionRepository(_MongoRepository, AvailabilityExceptionRepository):

    async def get(self, announcer_id: str, day: date) -> Optional[AvailabilityException]:
        doc = await self._db.availability.find_one(
            {"announcer_id": announcer_id, "date": day.isoformat()}, session=self._session
        )
        return exception_from_doc(doc) if doc else None

    async def list_between(self, announcer_id: str, start: date, end: date) -> List[AvailabilityException]:
        docs = await self._db.availability.find(
            {
                "announcer_id": announcer_id,
                "date": {"$gte": start.isoformat(), "$lte": end.isoformat()},
                "status": {"$in": ["unavailable", "partial"]},
            },
            session=self._session,
        ).sort("date", 1).to_list(None)
        return [exception_from_doc(d) for d in docs]


class MongoCapacityProfileRepository(_MongoRepository, CapacityProfileRepository):

    async def get(self, announcer_id: str) -> Optional[AnnouncerCapacityProfile]:
        doc = await self._db.profiles.find_one({"user_id": announcer_id}, session=self._session)
        if not doc:
            return None
        # Campos ausentes o a null -> valores por defecto del modelo
        return AnnouncerCapacityProfile(**{k: doc[k] for k in PROFILE_FIELDS if doc.get(k) is not None})


class MongoCategoryRepository(_MongoRepository, CategoryRepository):

    async def get(self, slug: str):
        doc = await self._db.service_categories.find_one({"slug": slug}, session=self._session)
        return category_from_doc(doc) if doc else None

    async def children_of(self, parent_slug: str) -> List[ChildCategory]:
        docs = await self._db.service_categories.find(
            {"parent_slug": parent_slug}, session=self._session
        ).sort("slug", 1).to_list(None)
        return [category_from_doc(d) for d in docs]


def mongo_repositories(db: AsyncIOMotorDatabase, session: Optional[AsyncIOMotorClientSession] = None) -> Repositories:
    return Repositories(
        bookings=MongoBookingRepository(db, session),
        exceptions=MongoAvailabilityExceptionRepository(db, session),
        profiles=MongoCapacityProfileRepository(db, session),
        categories=MongoCategoryRepository(db, session),
    )


# ---------- Transacción de reserva ----------

class MongoReservationTransaction(ReservationTransaction):

    def __init__(self, db: AsyncIOMotorDatabase, session: AsyncIOMotorClientSession):
        self._db = db
        self._session = session
        self.repositories = mongo_repositories(db, session)

    async def insert_booking(self, booking: Booking) -> Booking:
        res = await self._db.bookings.insert_one(booking_to_doc(booking), session=self._session)
        return booking.model_copy(update={"id": str(res.inserted_id)})


class MongoReservationUnitOfWork(ReservationUnitOfWork):
    """
    Transacción multi-documento (requiere replica set).

    Antes de leer se incrementa booking_locks[announcer_id]: dos
    transacciones del mismo cuidador escriben el mismo documento, MongoDB
    aborta una con WriteConflict y with_transaction la reintenta desde el
    principio, repitiendo la comprobación de conflictos.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self._db = db

    async def run(self, announcer_id, work):
        async with await self._db.client.start_session() as session:

            async def _callback(s: AsyncIOMotorClientSession):
                await self._db.booking_locks.update_one(
                    {"announcer_id": announcer_id},
                    {"$inc": {"version": 1}, "$set": {"updated_at": datetime.utcnow()}},
                    upsert=True,
                    session=s,
                )
                return await work(MongoReservationTransaction(self._db, s))

            return await session.with_transaction(_callback)
