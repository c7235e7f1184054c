"""
Tests del filtro de disponibilidad de la búsqueda
"""
import pytest
from datetime import date

from app.schemas.scheduling import TimeSlot
from app.scheduling.search import AvailabilitySearch
from conftest import ANNOUNCER, TODAY

OTHER = "announcer-2"
DAY = date(2025, 6, 1)


def day_slot(day=DAY, start_time=None, end_time=None):
    return TimeSlot(start_date=day, end_date=day, start_time=start_time, end_time=end_time)


@pytest.fixture
def search(engine):
    return AvailabilitySearch(engine, lookahead_days=30)


@pytest.mark.asyncio
async def test_unavailable_announcers_are_filtered(search, bookings):
    bookings.add("promenade", DAY)

    results = await search.filter_available_announcers([ANNOUNCER, OTHER], "promenade", day_slot(), today=TODAY)

    assert [r.announcer_id for r in results] == [OTHER]
    assert results[0].status == "available"


@pytest.mark.asyncio
async def test_include_unavailable_sorts_available_first(search, bookings):
    bookings.add("promenade", DAY)

    results = await search.filter_available_announcers(
        [ANNOUNCER, OTHER], "promenade", day_slot(), include_unavailable=True, today=TODAY
    )

    assert [(r.announcer_id, r.status) for r in results] == [(OTHER, "available"), (ANNOUNCER, "unavailable")]
    assert results[1].conflict.has_conflict


@pytest.mark.asyncio
async def test_next_available_skips_blocked_days(search, bookings, exceptions):
    bookings.add("pension", date(2025, 5, 2), date(2025, 5, 3))
    exceptions.block(date(2025, 5, 4))
    exceptions.partial(date(2025, 5, 5), ("09:00", "12:00"))

    availability = await search.announcer_availability(ANNOUNCER, "pension", day_slot(date(2025, 5, 2)), today=TODAY)

    assert availability.status == "unavailable"
    assert availability.next_available == date(2025, 5, 6)


@pytest.mark.asyncio
async def test_manual_block_marks_unavailable(search, exceptions):
    exceptions.block(DAY)
    availability = await search.announcer_availability(ANNOUNCER, "promenade", day_slot(), today=TODAY)
    assert availability.status == "unavailable"
    assert availability.conflict is None


@pytest.mark.asyncio
async def test_requested_time_outside_partial_windows(search, exceptions):
    exceptions.partial(DAY, ("14:00", "18:00"))

    outside = await search.announcer_availability(
        ANNOUNCER, "promenade", day_slot(start_time="09:00", end_time="10:00"), today=TODAY
    )
    assert outside.status == "partial"
    assert outside.available_slots[0].start_time == "14:00"

    inside = await search.announcer_availability(
        ANNOUNCER, "promenade", day_slot(start_time="15:00", end_time="16:00"), today=TODAY
    )
    assert inside.status == "available"


@pytest.mark.asyncio
async def test_capacity_search_uses_shared_pool(search, bookings, profiles):
    profiles.set(max_animals_per_slot=2)
    bookings.add("garde-chien", DAY)

    availability = await search.announcer_availability(ANNOUNCER, "garde-chat", day_slot(), today=TODAY)
    assert availability.status == "available"
    assert availability.conflict.capacity_info.remaining_capacity == 1

    bookings.add("garde-chat", DAY)
    availability = await search.announcer_availability(ANNOUNCER, "garde-chat", day_slot(), today=TODAY)
    assert availability.status == "unavailable"


@pytest.mark.asyncio
async def test_alternative_slots(search, bookings, exceptions):
    bookings.add("promenade", date(2025, 6, 1))
    bookings.add("promenade", date(2025, 6, 2), start_time="10:00", end_time="11:00")
    exceptions.partial(date(2025, 6, 3), ("09:00", "12:00"))
    exceptions.block(date(2025, 6, 4))

    alternatives = await search.alternative_slots(
        ANNOUNCER, "promenade", date(2025, 6, 1), date(2025, 6, 5), today=TODAY
    )

    assert alternatives.available_dates == [date(2025, 6, 2), date(2025, 6, 3), date(2025, 6, 5)]
    assert [p.day for p in alternatives.partial_slots] == [date(2025, 6, 3)]


@pytest.mark.asyncio
async def test_whole_day_on_partial_day_matches_calendar(search, engine, exceptions):
    exceptions.partial(DAY, ("14:00", "18:00"))

    availability = await search.announcer_availability(ANNOUNCER, "promenade", day_slot(), today=TODAY)
    calendar = await engine.build_availability_calendar(ANNOUNCER, "promenade", DAY, DAY, today=TODAY)

    assert availability.status == "partial"
    assert availability.available_slots[0].end_time == "18:00"
    assert calendar[0].status.value == availability.status
