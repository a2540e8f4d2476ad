"""Unit tests for the Reservation aggregate."""

from dataclasses import replace
from datetime import date, datetime, time, timedelta

import pytest

from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.reservation import Reservation, ReservationStatus
from ordercore.domain.model.value_objects import ContactInfo

NOW = datetime(2025, 6, 1, 12, 0)
TOMORROW = date(2025, 6, 2)
CONTACT = ContactInfo(email="ann@example.com", name="Ann", phone="555-0100")


def _book(**overrides) -> Reservation:
    fields = dict(
        user_id="u1",
        contact=CONTACT,
        reservation_date=TOMORROW,
        reservation_time=time(19, 0),
        party_size=4,
        now=NOW,
    )
    fields.update(overrides)
    return Reservation.book(**fields)


class TestBooking:

    def test_happy_path(self):
        r = _book(special_requests="  window seat ")
        assert r.status == ReservationStatus.PENDING
        assert r.special_requests == "window seat"
        assert r.is_active

    def test_blank_special_requests_dropped(self):
        assert _book(special_requests="   ").special_requests is None

    def test_name_checked_before_email(self):
        with pytest.raises(ValidationError, match="customer_name is required"):
            _book(contact=ContactInfo(email="", name="", phone=""))

    def test_phone_required(self):
        with pytest.raises(ValidationError, match="customer_phone is required"):
            _book(contact=ContactInfo(email="a@b.c", name="Ann", phone=None))

    @pytest.mark.parametrize("size", [0, 21, True])
    def test_party_size_bounds(self, size):
        with pytest.raises(ValidationError, match="between 1 and 20"):
            _book(party_size=size)

    @pytest.mark.parametrize("size", [1, 20])
    def test_party_size_edges_accepted(self, size):
        assert _book(party_size=size).party_size == size

    def test_party_size_checked_before_date(self):
        with pytest.raises(ValidationError, match="party_size"):
            _book(party_size=0, reservation_date=date(2020, 1, 1))

    def test_past_date(self):
        with pytest.raises(ValidationError, match="past dates"):
            _book(reservation_date=NOW.date() - timedelta(days=1))

    def test_past_time_today(self):
        with pytest.raises(ValidationError, match="past times"):
            _book(reservation_date=NOW.date(), reservation_time=time(11, 30))

    def test_later_today_accepted(self):
        assert _book(reservation_date=NOW.date(), reservation_time=time(18, 0))


class TestConflicts:

    def test_within_window_conflicts(self):
        existing = _book(reservation_time=time(19, 0))
        new = _book(reservation_time=time(19, 20))
        assert new.conflicts_with(existing)

    def test_outside_window_is_fine(self):
        existing = _book(reservation_time=time(19, 0))
        new = _book(reservation_time=time(19, 35))
        assert not new.conflicts_with(existing)

    def test_exactly_thirty_minutes_is_fine(self):
        existing = _book(reservation_time=time(19, 0))
        new = _book(reservation_time=time(19, 30))
        assert not new.conflicts_with(existing)

    def test_email_compared_case_insensitively(self):
        existing = _book(contact=replace(CONTACT, email="ANN@Example.com"))
        assert _book().conflicts_with(existing)

    def test_other_date_is_fine(self):
        existing = _book(reservation_date=TOMORROW + timedelta(days=1))
        assert not _book().conflicts_with(existing)

    def test_cancelled_booking_does_not_hold_slot(self):
        existing = _book()
        existing.cancel()
        assert not _book().conflicts_with(existing)


class TestTransitions:

    def test_cancel_pending(self):
        r = _book()
        r.cancel()
        assert r.status == ReservationStatus.CANCELLED
        assert r.is_terminal

    def test_cancel_confirmed(self):
        r = _book()
        r.transition_to(ReservationStatus.CONFIRMED)
        r.cancel()
        assert r.status == ReservationStatus.CANCELLED

    @pytest.mark.parametrize("terminal", [
        ReservationStatus.DECLINED,
        ReservationStatus.COMPLETED,
        ReservationStatus.NO_SHOW,
        ReservationStatus.CANCELLED,
    ])
    def test_terminal_is_immutable(self, terminal):
        r = _book()
        r.status = terminal
        with pytest.raises(ValidationError, match="can no longer change"):
            r.transition_to(ReservationStatus.CONFIRMED)

    def test_same_status_rejected(self):
        with pytest.raises(ValidationError, match="already pending"):
            _book().transition_to(ReservationStatus.PENDING)

    def test_follows_normal_flow(self):
        r = _book()
        assert r.follows_normal_flow(ReservationStatus.CONFIRMED)
        assert not r.follows_normal_flow(ReservationStatus.COMPLETED)
