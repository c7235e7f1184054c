"""
Configuración de pytest para tests

Los repositorios en memoria sustituyen a MongoDB: el motor sólo conoce
las interfaces de app/repositories/base.py.
"""
import asyncio
import uuid
from collections import defaultdict
from datetime import date

import pytest
from httpx import AsyncClient, ASGITransport

from app.repositories.base import (
    AvailabilityExceptionRepository,
    BookingRepository,
    CapacityProfileRepository,
    CategoryRepository,
    Repositories,
    ReservationTransaction,
    ReservationUnitOfWork,
)
from app.schemas.scheduling import (
    AnnouncerCapacityProfile,
    AvailabilityException,
    Booking,
    BookingStatus,
    ChildCategory,
    ParentCategory,
    TimeRange,
    TimeSlot,
)
from app.scheduling.engine import SchedulingEngine

ANNOUNCER = "announcer-1"
TODAY = date(2025, 5, 1)


# ---------- Repositorios en memoria ----------

class InMemoryBookingRepository(BookingRepository):
    def __init__(self):
        self.bookings: list[Booking] = []

    async def list_active(self, announcer_id, category_slugs=None):
        # Punto de suspensión, como una consulta real
        await asyncio.sleep(0)
        slugs = set(category_slugs) if category_slugs is not None else None
        return [
            b for b in self.bookings
            if b.announcer_id == announcer_id
            and b.is_active
            and (slugs is None or b.category_slug in slugs)
        ]

    def add(self, category_slug, start, end=None, start_time=None, end_time=None,
            status=BookingStatus.upcoming, announcer_id=ANNOUNCER) -> Booking:
        booking = Booking(
            id=uuid.uuid4().hex,
            announcer_id=announcer_id,
            category_slug=category_slug,
            slot=TimeSlot(start_date=start, end_date=end or start, start_time=start_time, end_time=end_time),
            status=status,
        )
        self.bookings.append(booking)
        return booking


class InMemoryExceptionRepository(AvailabilityExceptionRepository):
    def __init__(self):
        self.items: dict[tuple[str, date], AvailabilityException] = {}

    async def get(self, announcer_id, day):
        return self.items.get((announcer_id, day))

    async def list_between(self, announcer_id, start, end):
        await asyncio.sleep(0)
        return sorted(
            (e for (a, d), e in self.items.items() if a == announcer_id and start <= d <= end),
            key=lambda e: e.day,
        )

    def block(self, day, reason=None, announcer_id=ANNOUNCER):
        self.items[(announcer_id, day)] = AvailabilityException(
            announcer_id=announcer_id, day=day, status="unavailable", reason=reason
        )

    def partial(self, day, *windows, announcer_id=ANNOUNCER):
        self.items[(announcer_id, day)] = AvailabilityException(
            announcer_id=announcer_id,
            day=day,
            status="partial",
            time_slots=[TimeRange(start_time=s, end_time=e) for s, e in windows],
        )


class InMemoryProfileRepository(CapacityProfileRepository):
    def __init__(self):
        self.profiles: dict[str, AnnouncerCapacityProfile] = {}

    async def get(self, announcer_id):
        return self.profiles.get(announcer_id)

    def set(self, announcer_id=ANNOUNCER, **fields):
        self.profiles[announcer_id] = AnnouncerCapacityProfile(**fields)


class InMemoryCategoryRepository(CategoryRepository):
    def __init__(self, categories):
        self.categories = {c.slug: c for c in categories}

    async def get(self, slug):
        return self.categories.get(slug)

    async def children_of(self, parent_slug):
        return sorted(
            (c for c in self.categories.values()
             if isinstance(c, ChildCategory) and c.parent_slug == parent_slug),
            key=lambda c: c.slug,
        )


class InMemoryTransaction(ReservationTransaction):
    def __init__(self, repositories):
        self.repositories = repositories
        self._pending: list[Booking] = []

    async def insert_booking(self, booking):
        await asyncio.sleep(0)
        created = booking.model_copy(update={"id": uuid.uuid4().hex})
        self._pending.append(created)
        return created

    def commit(self):
        self.repositories.bookings.bookings.extend(self._pending)


class InMemoryReservationUnitOfWork(ReservationUnitOfWork):
    """Bloqueo por cuidador con asyncio.Lock; `locking=False` reproduce la carrera."""

    def __init__(self, repositories, locking=True):
        self._repositories = repositories
        self._locking = locking
        self._locks = defaultdict(asyncio.Lock)

    async def _run(self, work):
        tx = InMemoryTransaction(self._repositories)
        result = await work(tx)
        tx.commit()
        return result

    async def run(self, announcer_id, work):
        if not self._locking:
            return await self._run(work)
        async with self._locks[announcer_id]:
            return await self._run(work)


def default_categories():
    return [
        ParentCategory(slug="garde", name="Garde", is_capacity_based=True),
        ChildCategory(slug="garde-chien", parent_slug="garde"),
        ChildCategory(slug="garde-chat", parent_slug="garde"),
        ParentCategory(slug="promenade", name="Promenade"),
        ParentCategory(slug="pension", name="Pension"),
        ParentCategory(slug="toilettage", name="Toilettage"),
        ChildCategory(slug="toilettage-chien", parent_slug="toilettage"),
        ChildCategory(slug="toilettage-chat", parent_slug="toilettage"),
        ParentCategory(slug="garderie", name="Garderie", is_capacity_based=True),
    ]


# ---------- Fixtures ----------

@pytest.fixture
def bookings():
    return InMemoryBookingRepository()

@pytest.fixture
def exceptions():
    return InMemoryExceptionRepository()

@pytest.fixture
def profiles():
    return InMemoryProfileRepository()

@pytest.fixture
def categories():
    return InMemoryCategoryRepository(default_categories())

@pytest.fixture
def repos(bookings, exceptions, profiles, categories):
    return Repositories(bookings=bookings, exceptions=exceptions, profiles=profiles, categories=categories)

@pytest.fixture
def engine(repos):
    return SchedulingEngine(repos)

@pytest.fixture
def uow(repos):
    return InMemoryReservationUnitOfWork(repos)

@pytest.fixture
async def client(repos, uow):
    """Cliente HTTP contra la app con los repositorios en memoria"""
    from app.main import app
    from app.dependencies import get_repositories, get_reservation_uow, get_today

    # Deshabilitar rate limiting en tests
    app.state.limiter = None
    app.dependency_overrides[get_repositories] = lambda: repos
    app.dependency_overrides[get_reservation_uow] = lambda: uow
    app.dependency_overrides[get_today] = lambda: TODAY

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
