from datetime import date, timedelta

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import Query

from rentals.errors import CapacityExceeded, Conflict, InvalidDateRange, NotFound, ValidationError
from rentals.models.booking import BookingStatus
from rentals.schemas.property import parse_property_input
from rentals.services.availability import check_availability
from rentals.services.bookings import create_booking, update_booking_status
from rentals.services.properties import create_property

from conftest import house_payload, make_user

TODAY = date(2024, 6, 1)


@pytest.fixture
def host(db):
    return make_user(db, "Hana Host", "host@example.com", is_host=True)


@pytest.fixture
def guest(db):
    return make_user(db, "Gus Guest", "guest@example.com")


@pytest.fixture
def prop(db, host):
    return create_property(db, host, parse_property_input(house_payload()))


def test_scenario_free_property_is_available(db, prop):
    result = check_availability(db, prop.id, date(2024, 6, 10), date(2024, 6, 13), guests=2, today=TODAY)
    assert result.available is True
    assert result.number_of_days == 3
    assert result.total_price == 300
    assert result.conflicts == []


def test_overlapping_pending_booking_blocks(db, prop, guest):
    create_booking(db, guest, prop.id, date(2024, 6, 10), date(2024, 6, 13), today=TODAY)

    result = check_availability(db, prop.id, date(2024, 6, 12), date(2024, 6, 14), today=TODAY)
    assert result.available is False
    assert len(result.conflicts) == 1
    assert result.total_price is None


def test_touching_ranges_conflict_closed_intervals(db, prop, guest):
    create_booking(db, guest, prop.id, date(2024, 6, 10), date(2024, 6, 13), today=TODAY)

    assert check_availability(db, prop.id, date(2024, 6, 13), date(2024, 6, 15), today=TODAY).available is False
    assert check_availability(db, prop.id, date(2024, 6, 14), date(2024, 6, 16), today=TODAY).available is True


def test_cancelled_booking_frees_the_dates(db, prop, guest):
    booking, _ = create_booking(db, guest, prop.id, date(2024, 6, 10), date(2024, 6, 13), today=TODAY)
    update_booking_status(db, guest, booking.id, "Cancelled")

    result = check_availability(db, prop.id, date(2024, 6, 10), date(2024, 6, 13), today=TODAY)
    assert result.available is True


def test_upcoming_bookings_are_listed(db, prop, guest):
    for offset in range(0, 35, 5):
        start = date(2024, 7, 1) + timedelta(days=offset)
        create_booking(db, guest, prop.id, start, start + timedelta(days=2), today=TODAY)

    result = check_availability(db, prop.id, date(2024, 6, 10), date(2024, 6, 12), today=TODAY)
    assert len(result.upcoming) == 5
    assert [b.start_date for b in result.upcoming] == sorted(b.start_date for b in result.upcoming)


@pytest.mark.parametrize(
    "start, end",
    [
        (TODAY, TODAY + timedelta(days=1)),
        (TODAY, TODAY + timedelta(days=365)),
    ],
)
def test_accepted_boundaries(db, prop, start, end):
    assert check_availability(db, prop.id, start, end, today=TODAY).available is True


@pytest.mark.parametrize(
    "start, end, message",
    [
        (TODAY - timedelta(days=1), TODAY + timedelta(days=2), "Start date cannot be in the past"),
        (TODAY + timedelta(days=3), TODAY + timedelta(days=3), "End date must be after start date"),
        (TODAY + timedelta(days=3), TODAY + timedelta(days=1), "End date must be after start date"),
        (TODAY, TODAY + timedelta(days=366), "Booking cannot exceed 365 days"),
    ],
)
def test_rejected_date_ranges(db, prop, start, end, message):
    with pytest.raises(InvalidDateRange) as exc:
        check_availability(db, prop.id, start, end, today=TODAY)
    assert exc.value.message == message


def test_missing_fields(db, prop):
    with pytest.raises(ValidationError) as exc:
        check_availability(db, prop.id, None, date(2024, 6, 13), today=TODAY)
    assert exc.value.message == "Property ID, start date, and end date are required"


def test_unknown_property(db):
    with pytest.raises(NotFound):
        check_availability(db, 999, date(2024, 6, 10), date(2024, 6, 13), today=TODAY)


def test_guests_over_capacity(db, prop):
    with pytest.raises(CapacityExceeded) as exc:
        check_availability(db, prop.id, date(2024, 6, 10), date(2024, 6, 13), guests=5, today=TODAY)
    assert exc.value.status_code == 400
    assert exc.value.extra == {"max_guests": 4, "requested_guests": 5}


def test_date_checks_run_before_property_lookup(db):
    with pytest.raises(InvalidDateRange):
        check_availability(db, 999, date(2024, 5, 1), date(2024, 5, 3), today=TODAY)


def test_second_booking_for_same_dates_conflicts(db, prop, guest):
    booking, days = create_booking(db, guest, prop.id, date(2024, 6, 10), date(2024, 6, 13), guests=2, today=TODAY)
    assert booking.status == BookingStatus.pending
    assert days == 3
    assert booking.total_amount == 300

    with pytest.raises(Conflict):
        create_booking(db, guest, prop.id, date(2024, 6, 11), date(2024, 6, 12), today=TODAY)


def test_create_booking_locks_the_property_row(db, prop, guest, monkeypatch):
    locked = []
    original = Query.with_for_update

    def recording(self, *args, **kwargs):
        query = original(self, *args, **kwargs)
        locked.append(query)
        return query

    monkeypatch.setattr(Query, "with_for_update", recording)
    create_booking(db, guest, prop.id, date(2024, 6, 10), date(2024, 6, 13), today=TODAY)

    assert len(locked) == 1
    sql = str(locked[0].statement.compile(dialect=postgresql.dialect()))
    assert "FROM properties" in sql
    assert sql.rstrip().endswith("FOR UPDATE")


def test_availability_check_does_not_lock(db, prop, monkeypatch):
    locked = []
    monkeypatch.setattr(Query, "with_for_update", lambda self, *a, **kw: locked.append(self) or self)
    check_availability(db, prop.id, date(2024, 6, 10), date(2024, 6, 13), today=TODAY)
    assert locked == []
