# app/dependencies.py
from datetime import date
from fastapi import Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from .config import Settings, get_settings
from .db import get_db
from .repositories.base import Repositories, ReservationUnitOfWork
from .repositories.mongo import MongoReservationUnitOfWork, mongo_repositories
from .scheduling.engine import SchedulingEngine
from .scheduling.reservations import ReservationService
from .scheduling.search import AvailabilitySearch


def get_today() -> date:
    return date.today()


async def get_repositories(db: AsyncIOMotorDatabase = Depends(get_db)) -> Repositories:
    return mongo_repositories(db)


async def get_reservation_uow(db: AsyncIOMotorDatabase = Depends(get_db)) -> ReservationUnitOfWork:
    return MongoReservationUnitOfWork(db)


def get_engine(
    repositories: Repositories = Depends(get_repositories),
    settings: Settings = Depends(get_settings),
) -> SchedulingEngine:
    return SchedulingEngine(
        repositories,
        strict_categories=settings.strict_category_lookup,
        calendar_max_days=settings.calendar_max_days,
    )


def get_search(
    engine: SchedulingEngine = Depends(get_engine),
    settings: Settings = Depends(get_settings),
) -> AvailabilitySearch:
    return AvailabilitySearch(engine, lookahead_days=settings.next_available_lookahead_days)


def get_reservation_service(
    uow: ReservationUnitOfWork = Depends(get_reservation_uow),
    settings: Settings = Depends(get_settings),
) -> ReservationService:
    return ReservationService(uow, strict_categories=settings.strict_category_lookup)
