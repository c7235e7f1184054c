# app/scheduling/timeutils.py
"""
Primitivas de tiempo y solapamiento.

Las horas viajan como 'HH:MM' y las fechas como `datetime.date`.
Reglas de solapamiento entre dos franjas:
- fechas disjuntas -> no hay conflicto
- alguna franja de varios días -> bloquea los días completos
- mismo día único -> se comparan las horas (sin horas = 00:00-23:59)
"""
from datetime import date, timedelta
from typing import Iterator

from .constants import DAY_END, DAY_START, MINUTES_PER_DAY, TIME_FORMAT
from .errors import InvalidTimeFormat, InvalidSlot
from ..schemas.scheduling import BufferedTimeRange, TimeSlot


def parse_time_to_minutes(time: str) -> int:
    """Convierte 'HH:MM' en minutos desde medianoche."""
    match = TIME_FORMAT.match(time) if isinstance(time, str) else None
    if not match:
        raise InvalidTimeFormat(time)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidTimeFormat(time)
    return hours * 60 + minutes


def format_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes_to_time(time: str, minutes: int) -> str:
    """Suma minutos a 'HH:MM'. El resultado da la vuelta a las 24h."""
    total = (parse_time_to_minutes(time) + minutes) % MINUTES_PER_DAY
    return format_minutes(total)


def time_slots_overlap(start1: str, end1: str, start2: str, end2: str) -> bool:
    # Intervalos semiabiertos: tocarse en el borde no es conflicto
    s1 = parse_time_to_minutes(start1)
    e1 = parse_time_to_minutes(end1)
    s2 = parse_time_to_minutes(start2)
    e2 = parse_time_to_minutes(end2)
    return s1 < e2 and e1 > s2


def dates_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    return not (start1 > end2 or end1 < start2)


def dates_between(start: date, end: date) -> Iterator[date]:
    """Fechas de start a end, ambas incluidas."""
    if end < start:
        raise InvalidSlot("end debe ser igual o posterior a start")
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def slots_overlap(a: TimeSlot, b: TimeSlot) -> bool:
    if not dates_overlap(a.start_date, a.end_date, b.start_date, b.end_date):
        return False

    # Varios días: no se puede estar en dos sitios a la vez
    if a.is_multi_day or b.is_multi_day:
        return True

    if a.start_date == b.start_date:
        return time_slots_overlap(
            a.start_time or DAY_START,
            a.end_time or DAY_END,
            b.start_time or DAY_START,
            b.end_time or DAY_END,
        )

    return False


def apply_buffers_to_time_slot(
    start_time: str,
    end_time: str,
    buffer_before: int = 0,
    buffer_after: int = 0,
) -> BufferedTimeRange:
    """
    Amplía una franja con el tiempo de preparación del cuidador.

    El resultado se recorta a la jornada (00:00-23:59): un margen no
    puede pasar al día anterior o siguiente. Se conservan las horas
    originales para mostrarlas en el calendario.
    """
    start = parse_time_to_minutes(start_time)
    end = parse_time_to_minutes(end_time)
    padded_start = max(0, start - buffer_before)
    padded_end = min(parse_time_to_minutes(DAY_END), end + buffer_after)
    return BufferedTimeRange(
        start_time=format_minutes(padded_start),
        end_time=format_minutes(padded_end),
        original_start_time=start_time,
        original_end_time=end_time,
    )


def buffered_slot(slot: TimeSlot, buffer_before: int = 0, buffer_after: int = 0) -> TimeSlot:
    """
    Copia de `slot` con los márgenes aplicados a sus horas.
    Las franjas sin horas o de varios días ya ocupan el día entero.
    """
    if not slot.has_time_window or (buffer_before == 0 and buffer_after == 0):
        return slot
    padded = apply_buffers_to_time_slot(
        slot.start_time or DAY_START,
        slot.end_time or DAY_END,
        buffer_before,
        buffer_after,
    )
    return slot.model_copy(update={
        "start_time": padded.start_time if slot.start_time is not None else None,
        "end_time": padded.end_time if slot.end_time is not None else None,
    })


def slots_overlap_with_buffers(
    existing: TimeSlot,
    candidate: TimeSlot,
    buffer_before: int = 0,
    buffer_after: int = 0,
) -> bool:
    # Los márgenes rodean la reserva que ya existe, nunca la solicitud nueva
    return slots_overlap(buffered_slot(existing, buffer_before, buffer_after), candidate)


def whole_day(day: date) -> TimeSlot:
    return TimeSlot(start_date=day, end_date=day)
