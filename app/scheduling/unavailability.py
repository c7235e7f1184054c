# app/scheduling/unavailability.py
from typing import List, Optional

from .constants import DAY_END, DAY_START
from .timeutils import parse_time_to_minutes
from ..repositories.base import AvailabilityExceptionRepository
from ..schemas.scheduling import AvailabilityException, ExceptionStatus, TimeSlot


def fits_partial_windows(exception: AvailabilityException, slot: TimeSlot) -> bool:
    """
    True si la franja pedida cabe entera en alguna franja abierta del día.

    Un día completo (o varios días) nunca cabe en una disponibilidad
    parcial. Una hora ausente se toma como 00:00 / 23:59.
    """
    if not slot.has_time_window:
        return False
    start = parse_time_to_minutes(slot.start_time or DAY_START)
    end = parse_time_to_minutes(slot.end_time or DAY_END)
    for window in exception.time_slots:
        w_start = parse_time_to_minutes(window.start_time)
        w_end = parse_time_to_minutes(window.end_time)
        if w_start <= start < w_end and end <= w_end:
            return True
    return False


def exception_blocks_slot(exception: AvailabilityException, slot: TimeSlot) -> bool:
    if exception.status == ExceptionStatus.unavailable:
        return True
    return not fits_partial_windows(exception, slot)


async def exceptions_for_slot(
    exceptions: AvailabilityExceptionRepository,
    announcer_id: str,
    slot: TimeSlot,
) -> List[AvailabilityException]:
    # Un solo día -> búsqueda directa
    if not slot.is_multi_day:
        exception = await exceptions.get(announcer_id, slot.start_date)
        return [exception] if exception is not None else []
    return await exceptions.list_between(announcer_id, slot.start_date, slot.end_date)


async def find_blocking_exception(
    exceptions: AvailabilityExceptionRepository,
    announcer_id: str,
    slot: TimeSlot,
) -> Optional[AvailabilityException]:
    """Primera indisponibilidad manual que impide reservar `slot`."""
    for exception in await exceptions_for_slot(exceptions, announcer_id, slot):
        if exception_blocks_slot(exception, slot):
            return exception
    return None
