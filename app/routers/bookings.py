# app/routers/bookings.py
from fastapi import APIRouter, Depends, Request, status
from datetime import date

from ..config import Settings, get_settings
from ..dependencies import get_reservation_service, get_today
from ..middleware.rate_limit import apply_rate_limit
from ..schemas.booking import BookingCreate
from ..schemas.scheduling import Booking
from ..scheduling.reservations import ReservationService

router = APIRouter()

@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: Request,
    payload: BookingCreate,
    service: ReservationService = Depends(get_reservation_service),
    settings: Settings = Depends(get_settings),
    today: date = Depends(get_today),
):
    apply_rate_limit(request, settings.booking_rate_limit)
    # Conflictos e indisponibilidades -> 409 (ver handlers en app.main)
    return await service.reserve(payload, today=today)
