"""Tests for seat assignment and the allocation lifecycle"""

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest
from sqlalchemy import select

from seating.exceptions import ConflictError, NotFoundError, PartySizeMismatchError, ValidationError
from seating.models.seat_allocation import AllocationStatus, OccupantKind, SeatAllocation
from seating.services.allocation_engine import allowed_actions
from seating.services.occupants import OccupantRef
from tests.conftest import FIXED_NOW

NY = ZoneInfo("America/New_York")
SERVICE_DAY = date(2030, 6, 1)


def local(hour: int, minute: int = 0, day: date = SERVICE_DAY) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=NY)


def reservation_ref(reservation) -> OccupantRef:
    return OccupantRef(OccupantKind.RESERVATION, reservation.id)


async def all_allocations(db):
    result = await db.execute(select(SeatAllocation).order_by(SeatAllocation.id))
    return list(result.scalars().all())


def assert_no_overlaps(allocations):
    active = [a for a in allocations if a.released_at is None]
    for i, a in enumerate(active):
        for b in active[i + 1:]:
            if a.seat_id == b.seat_id:
                assert not a.overlaps(b.start_time, b.end_time)


@pytest.mark.asyncio
async def test_abutting_windows_do_not_conflict(test_db, allocation_engine, make_reservation):
    """Test overlap rejection and the half-open boundary on a shared seat"""
    party = await make_reservation(party_size=2)
    rows = await allocation_engine.reserve(
        reservation_ref(party), ["A1", "A2"], start_time=local(18), end_time=local(19)
    )
    assert len(rows) == 2
    assert {row.occupant_status for row in rows} == {"reserved"}
    assert party.status == "reserved"

    other = await make_reservation(party_size=1, contact_name="Other Guest")
    with pytest.raises(ConflictError) as exc_info:
        await allocation_engine.reserve(
            reservation_ref(other), ["A1"], start_time=local(18, 30), end_time=local(19, 30)
        )
    assert exc_info.value.seat_label == "A1"
    assert "A1" in str(exc_info.value)

    rows = await allocation_engine.reserve(
        reservation_ref(other), ["A1"], start_time=local(19), end_time=local(20)
    )
    assert rows[0].start_time == local(19)

    allocations = await all_allocations(test_db)
    assert len(allocations) == 3
    assert_no_overlaps(allocations)


@pytest.mark.asyncio
async def test_conflicting_batch_writes_nothing(test_db, allocation_engine, make_reservation):
    """Test that one taken seat rejects the whole batch"""
    holder = await make_reservation(party_size=1, contact_name="Holder")
    await allocation_engine.reserve(reservation_ref(holder), ["B2"], start_time=local(18))

    party = await make_reservation(party_size=3)
    with pytest.raises(ConflictError) as exc_info:
        await allocation_engine.reserve(reservation_ref(party), ["B1", "B2", "B3"], start_time=local(18))
    assert exc_info.value.seat_label == "B2"

    allocations = await all_allocations(test_db)
    assert len(allocations) == 1
    assert allocations[0].occupant_id == holder.id
    assert party.status == "booked"


@pytest.mark.asyncio
async def test_waitlist_party_size_mismatch(test_db, allocation_engine, test_waitlist_entry):
    """Test that seat count must equal party size"""
    ref = OccupantRef(OccupantKind.WAITLIST, test_waitlist_entry.id)

    with pytest.raises(PartySizeMismatchError) as exc_info:
        await allocation_engine.seat_now(ref, ["A1", "A2"])

    assert exc_info.value.expected == 3
    assert exc_info.value.got == 2
    assert await all_allocations(test_db) == []
    assert test_waitlist_entry.status == "waiting"


@pytest.mark.asyncio
async def test_seat_now_starts_now(allocation_engine, test_waitlist_entry):
    """Test the default window for today is now plus the seating length"""
    ref = OccupantRef(OccupantKind.WAITLIST, test_waitlist_entry.id)

    rows = await allocation_engine.seat_now(ref, ["A1", "A2", "A3"])

    assert len(rows) == 3
    for row in rows:
        assert row.occupant_status == "seated"
        assert row.occupant_name == "Walk-in Lee"
        assert row.occupant_party_size == 3
        assert row.start_time == FIXED_NOW
        assert row.end_time == FIXED_NOW + timedelta(minutes=60)
    assert test_waitlist_entry.status == "seated"


@pytest.mark.asyncio
async def test_reserve_other_day_starts_at_service_time(allocation_engine, make_reservation):
    """Test the default window for another day starts at the service time"""
    party = await make_reservation(party_size=1)

    rows = await allocation_engine.reserve(
        reservation_ref(party), ["A1"], day=date(2030, 6, 3), duration_minutes=90
    )

    assert rows[0].start_time == local(18, day=date(2030, 6, 3))
    assert rows[0].end_time == local(19, 30, day=date(2030, 6, 3))


@pytest.mark.asyncio
async def test_seat_now_by_seat_ids(allocation_engine, test_layout, make_reservation):
    """Test seats can be addressed by id"""
    party = await make_reservation(party_size=2)
    table = test_layout.seat_sections[1]
    seat_ids = [seat.id for seat in table.seats[:2]]

    rows = await allocation_engine.seat_now(reservation_ref(party), seat_ids=seat_ids)

    assert [row.seat_id for row in rows] == seat_ids
    assert party.status == "seated"


@pytest.mark.asyncio
async def test_invalid_seat_selections(test_db, allocation_engine, make_reservation):
    """Test empty, repeated and unknown seat selections are rejected"""
    party = await make_reservation(party_size=2)
    ref = reservation_ref(party)

    with pytest.raises(ValidationError):
        await allocation_engine.reserve(ref, [])
    with pytest.raises(ValidationError):
        await allocation_engine.reserve(ref, ["A1", "A1"])
    with pytest.raises(ValidationError):
        await allocation_engine.reserve(ref, ["A1", "Z9"])
    with pytest.raises(ValidationError):
        await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(19), end_time=local(18))

    assert await all_allocations(test_db) == []


@pytest.mark.asyncio
async def test_unknown_occupant(allocation_engine):
    """Test assigning seats to a missing occupant"""
    with pytest.raises(NotFoundError):
        await allocation_engine.seat_now(OccupantRef(OccupantKind.RESERVATION, 999), ["A1"])


@pytest.mark.asyncio
async def test_arrive_then_finish(allocation_engine, test_reservation):
    """Test the reserved -> seated -> finished path"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(18))

    seated = await allocation_engine.arrive(ref)
    assert {row.occupant_status for row in seated} == {"seated"}
    assert all(row.released_at is None for row in seated)
    assert test_reservation.status == "seated"

    finished = await allocation_engine.finish(ref)
    assert {row.occupant_status for row in finished} == {"finished"}
    assert all(row.released_at == FIXED_NOW for row in finished)
    assert test_reservation.status == "finished"


@pytest.mark.asyncio
async def test_arrive_requires_reserved(allocation_engine, test_reservation):
    """Test arrive with nothing reserved"""
    ref = reservation_ref(test_reservation)

    with pytest.raises(NotFoundError):
        await allocation_engine.arrive(ref)

    await allocation_engine.seat_now(ref, ["A1", "A2"])
    with pytest.raises(NotFoundError):
        await allocation_engine.arrive(ref)


@pytest.mark.asyncio
async def test_finish_requires_seated(test_db, allocation_engine, test_reservation):
    """Test finish is refused while the party is only reserved"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(18))

    with pytest.raises(NotFoundError):
        await allocation_engine.finish(ref)

    allocations = await all_allocations(test_db)
    assert all(a.released_at is None for a in allocations)
    assert {a.occupant_status for a in allocations} == {"reserved"}


@pytest.mark.asyncio
async def test_second_finish_is_not_found(test_db, allocation_engine, test_reservation):
    """Test finishing twice never releases twice"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.seat_now(ref, ["A1", "A2"])
    await allocation_engine.finish(ref)

    with pytest.raises(NotFoundError):
        await allocation_engine.finish(ref)

    allocations = await all_allocations(test_db)
    assert {a.occupant_status for a in allocations} == {"finished"}
    assert all(a.released_at == FIXED_NOW for a in allocations)


@pytest.mark.asyncio
async def test_second_cancel_is_not_found(test_db, allocation_engine, test_waitlist_entry):
    """Test canceling twice never releases twice"""
    ref = OccupantRef(OccupantKind.WAITLIST, test_waitlist_entry.id)
    await allocation_engine.seat_now(ref, ["A1", "A2", "A3"])

    canceled = await allocation_engine.cancel(ref)
    assert len(canceled) == 3
    assert test_waitlist_entry.status == "waiting"

    with pytest.raises(NotFoundError):
        await allocation_engine.cancel(ref)

    allocations = await all_allocations(test_db)
    assert {a.occupant_status for a in allocations} == {"canceled"}


@pytest.mark.asyncio
async def test_no_show_releases_reserved_seats(allocation_engine, test_reservation):
    """Test a no-show frees the seats for someone else"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(18))

    released = await allocation_engine.no_show(ref)
    assert {row.occupant_status for row in released} == {"no_show"}
    assert test_reservation.status == "no_show"

    active = await allocation_engine.active_allocations_for(SERVICE_DAY)
    assert active == {}


@pytest.mark.asyncio
async def test_released_seats_can_be_reassigned(allocation_engine, test_reservation, make_reservation):
    """Test a released window no longer blocks the seat"""
    await allocation_engine.reserve(reservation_ref(test_reservation), ["A1", "A2"], start_time=local(18))
    await allocation_engine.cancel(reservation_ref(test_reservation))

    other = await make_reservation(party_size=2, contact_name="Second Party")
    rows = await allocation_engine.reserve(reservation_ref(other), ["A1", "A2"], start_time=local(18))
    assert len(rows) == 2


@pytest.mark.asyncio
async def test_unknown_status_allows_only_cancel(test_db, allocation_engine, test_reservation):
    """Test an unrecognized stored status can still be canceled"""
    ref = reservation_ref(test_reservation)
    rows = await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(18))
    for row in rows:
        row.occupant_status = "pending_review"
    await test_db.commit()

    assert allowed_actions(rows[0].status) == ["cancel"]
    with pytest.raises(NotFoundError):
        await allocation_engine.arrive(ref)
    with pytest.raises(NotFoundError):
        await allocation_engine.finish(ref)

    canceled = await allocation_engine.cancel(ref)
    assert {row.occupant_status for row in canceled} == {"canceled"}


@pytest.mark.asyncio
async def test_legacy_occupied_can_finish(test_db, allocation_engine, test_reservation):
    """Test occupied is treated as seated"""
    ref = reservation_ref(test_reservation)
    rows = await allocation_engine.seat_now(ref, ["A1", "A2"])
    for row in rows:
        row.occupant_status = "occupied"
    await test_db.commit()

    finished = await allocation_engine.finish(ref)
    assert {row.occupant_status for row in finished} == {"finished"}


def test_allowed_actions():
    """Test the actions offered per status"""
    assert allowed_actions(AllocationStatus.RESERVED) == ["arrive", "no_show", "cancel"]
    assert allowed_actions(AllocationStatus.SEATED) == ["finish", "cancel"]
    assert allowed_actions(AllocationStatus.OCCUPIED) == ["finish", "cancel"]
    assert allowed_actions(AllocationStatus.UNKNOWN) == ["cancel"]
    assert allowed_actions(AllocationStatus.FINISHED) == []


@pytest.mark.asyncio
async def test_active_allocations_by_date_and_section(allocation_engine, test_layout, make_reservation):
    """Test the per-date occupancy query and its section filter"""
    counter, table = test_layout.seat_sections
    first = await make_reservation(party_size=1, contact_name="Counter Guest")
    second = await make_reservation(party_size=1, contact_name="Table Guest")
    await allocation_engine.reserve(reservation_ref(first), ["A1"], start_time=local(18))
    await allocation_engine.reserve(reservation_ref(second), ["B1"], start_time=local(20))

    active = await allocation_engine.active_allocations_for(SERVICE_DAY)
    assert set(active) == {counter.seats[0].id, table.seats[0].id}

    only_table = await allocation_engine.active_allocations_for(SERVICE_DAY, section_ids=[table.id])
    assert set(only_table) == {table.seats[0].id}

    assert await allocation_engine.active_allocations_for(date(2030, 6, 2)) == {}


@pytest.mark.asyncio
async def test_window_across_midnight_shows_on_both_days(allocation_engine, make_reservation):
    """Test a late window counts toward both local dates it touches"""
    party = await make_reservation(party_size=1)
    await allocation_engine.reserve(
        reservation_ref(party), ["A4"], start_time=local(23, 30), duration_minutes=60
    )

    assert len(await allocation_engine.active_allocations_for(SERVICE_DAY)) == 1
    assert len(await allocation_engine.active_allocations_for(date(2030, 6, 2))) == 1
    assert await allocation_engine.active_allocations_for(date(2030, 6, 3)) == {}


@pytest.mark.asyncio
async def test_seat_map_uses_live_occupant(test_db, allocation_engine, test_reservation):
    """Test the floor view re-resolves the occupant instead of the snapshot"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(18))

    test_reservation.contact_name = "Aiko T."
    test_reservation.party_size = 3
    await test_db.commit()

    entries = {entry.label: entry for entry in await allocation_engine.seat_map(SERVICE_DAY)}

    assert len(entries) == 8
    assert entries["A1"].status == "reserved"
    assert entries["A1"].occupant_name == "Aiko T."
    assert entries["A1"].occupant_party_size == 3
    assert entries["A1"].actions == ["arrive", "no_show", "cancel"]
    assert entries["A3"].status == "free"
    assert entries["A3"].occupant_name is None
    assert entries["B1"].section_name == "Table 1"


@pytest.mark.asyncio
async def test_history_includes_released(allocation_engine, test_reservation):
    """Test the history view keeps released rows"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.seat_now(ref, ["A1", "A2"])
    await allocation_engine.finish(ref)

    history = await allocation_engine.allocation_history(SERVICE_DAY)
    assert len(history) == 2
    assert all(a.released_at is not None for a in history)
    assert await allocation_engine.active_allocations_for(SERVICE_DAY) == {}


@pytest.mark.asyncio
async def test_occupant_of_other_restaurant(test_db, allocation_engine):
    """Test occupants are scoped to the engine's restaurant"""
    from seating.models.reservation import Reservation
    from seating.models.restaurant import Restaurant

    other = Restaurant(name="Other Restaurant", timezone="Europe/London")
    test_db.add(other)
    await test_db.flush()
    foreign = Reservation(
        restaurant_id=other.id,
        contact_name="Elsewhere",
        party_size=1,
        start_time=datetime(2030, 6, 1, 18, 0, tzinfo=timezone.utc),
    )
    test_db.add(foreign)
    await test_db.commit()

    with pytest.raises(NotFoundError):
        await allocation_engine.reserve(reservation_ref(foreign), ["A1"])


@pytest.mark.asyncio
async def test_party_cannot_take_extra_seats(test_db, allocation_engine, test_reservation):
    """Test a party holding seats is refused a second batch"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(18))

    with pytest.raises(ValidationError):
        await allocation_engine.reserve(ref, ["B1", "B2"], start_time=local(18))
    with pytest.raises(ValidationError):
        await allocation_engine.seat_now(ref, ["B3", "B4"])

    allocations = await all_allocations(test_db)
    assert len(allocations) == 2
    assert test_reservation.status == "reserved"


@pytest.mark.asyncio
async def test_closed_reservation_cannot_be_reseated(test_db, allocation_engine, test_reservation):
    """Test a finished party cannot be given seats again"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.seat_now(ref, ["A1", "A2"])
    await allocation_engine.finish(ref)

    with pytest.raises(ValidationError):
        await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(20))

    assert test_reservation.status == "finished"
    assert len(await all_allocations(test_db)) == 2


@pytest.mark.asyncio
async def test_cancel_returns_reservation_to_booked(allocation_engine, test_reservation):
    """Test releasing a reservation's seats keeps the booking open for new seats"""
    ref = reservation_ref(test_reservation)
    await allocation_engine.reserve(ref, ["A1", "A2"], start_time=local(18))

    await allocation_engine.cancel(ref)
    assert test_reservation.status == "booked"

    rows = await allocation_engine.reserve(ref, ["B1", "B2"], start_time=local(18))
    assert len(rows) == 2
    assert test_reservation.status == "reserved"


@pytest.mark.asyncio
async def test_label_repeated_across_sections_is_rejected(
    test_db, allocation_engine, test_layout, make_reservation
):
    """Test a label used by two sections of one layout cannot be assigned"""
    from seating.models.layout import Seat, SeatSection

    patio = SeatSection(name="Patio", section_type="counter", offset_x=600, offset_y=80, sort_order=2)
    patio.seats.append(Seat(label="A1", position_x=0, position_y=0))
    test_layout.seat_sections.append(patio)
    await test_db.commit()

    party = await make_reservation(party_size=1)
    with pytest.raises(ValidationError) as exc_info:
        await allocation_engine.reserve(reservation_ref(party), ["A1"], start_time=local(18))

    assert "not unique" in str(exc_info.value)
    assert await all_allocations(test_db) == []
