# app/routers/search.py
from fastapi import APIRouter, Depends
from datetime import date
from typing import List

from ..dependencies import get_search, get_today
from ..schemas.scheduling import AnnouncerAvailability
from ..schemas.search import AnnouncerSearch
from ..scheduling.search import AvailabilitySearch

router = APIRouter()

@router.post("/announcers", response_model=List[AnnouncerAvailability])
async def search_announcers(
    payload: AnnouncerSearch,
    search: AvailabilitySearch = Depends(get_search),
    today: date = Depends(get_today),
):
    """
    Devuelve la disponibilidad de cada cuidador candidato para la franja
    pedida. Los no disponibles se omiten salvo include_unavailable.
    """
    return await search.filter_available_announcers(
        payload.announcer_ids,
        payload.category_slug,
        payload.slot,
        include_unavailable=payload.include_unavailable,
        today=today,
    )
