# app/routers/availability.py
from fastapi import APIRouter, Depends, Query, Path
from datetime import date
from typing import List

from ..dependencies import get_engine, get_search, get_today
from ..schemas.booking import AvailabilityCheck
from ..schemas.scheduling import AlternativeSlots, CapacityResult, ConflictResult, DayStatus
from ..scheduling.engine import SchedulingEngine
from ..scheduling.search import AvailabilitySearch

router = APIRouter()

# ---------- Comprobaciones puntuales ----------

@router.post("/check", response_model=ConflictResult)
async def check_conflict(
    payload: AvailabilityCheck,
    engine: SchedulingEngine = Depends(get_engine),
):
    return await engine.check_booking_conflict(
        payload.announcer_id,
        payload.category_slug,
        payload.slot,
        payload.buffer_before_minutes,
        payload.buffer_after_minutes,
    )

@router.post("/capacity", response_model=CapacityResult)
async def check_capacity(
    payload: AvailabilityCheck,
    engine: SchedulingEngine = Depends(get_engine),
):
    return await engine.check_capacity_availability(
        payload.announcer_id,
        payload.category_slug,
        payload.slot,
        payload.buffer_before_minutes,
        payload.buffer_after_minutes,
    )

# ---------- Calendario ----------

@router.get("/{announcer_id}/calendar", response_model=List[DayStatus])
async def get_calendar(
    announcer_id: str = Path(...),
    category: str = Query(..., description="slug de la categoría del servicio"),
    start: date = Query(...),
    end: date = Query(...),
    engine: SchedulingEngine = Depends(get_engine),
    today: date = Depends(get_today),
):
    return await engine.build_availability_calendar(announcer_id, category, start, end, today=today)

@router.get("/{announcer_id}/alternatives", response_model=AlternativeSlots)
async def get_alternatives(
    announcer_id: str = Path(...),
    category: str = Query(...),
    start: date = Query(...),
    end: date = Query(...),
    search: AvailabilitySearch = Depends(get_search),
    today: date = Depends(get_today),
):
    return await search.alternative_slots(announcer_id, category, start, end, today=today)
