from datetime import timedelta

from labbooker.config import BookingPolicy
from labbooker.utils.cooldown import check_cooldown

from tests.conf_tests import (
    NOW,
    at,
    clear_db,
    make_booking_type,
    make_reservation,
    make_resource,
    test_db,
    test_user,
)


def book_created(db, user, created_at, status="scheduled"):
    resource = make_resource(db)
    booking_type = make_booking_type(db, [resource])
    return make_reservation(
        db, user, booking_type, at(10, day=5), at(12, day=5),
        resource=resource, status=status, created_at=created_at,
    )


def test_user_without_bookings_is_allowed(test_db, test_user):
    result = check_cooldown(test_db, test_user.id, now=NOW)
    assert result.allowed
    assert result.days_remaining == 0


def test_recent_booking_is_denied_with_days_remaining(test_db, test_user):
    book_created(test_db, test_user, NOW - timedelta(days=1))
    result = check_cooldown(test_db, test_user.id, now=NOW, policy=BookingPolicy(cooldown_days=3))
    assert not result.allowed
    assert result.remaining == timedelta(days=2)
    assert result.days_remaining == 2


def test_partial_days_round_up(test_db, test_user):
    book_created(test_db, test_user, NOW - timedelta(days=2, hours=23))
    result = check_cooldown(test_db, test_user.id, now=NOW, policy=BookingPolicy(cooldown_days=3))
    assert not result.allowed
    assert result.days_remaining == 1


def test_cooldown_boundary_is_allowed(test_db, test_user):
    book_created(test_db, test_user, NOW - timedelta(days=3))
    policy = BookingPolicy(cooldown_days=3)
    assert check_cooldown(test_db, test_user.id, now=NOW, policy=policy).allowed
    assert not check_cooldown(test_db, test_user.id, now=NOW - timedelta(seconds=1), policy=policy).allowed


def test_expired_booking_still_counts(test_db, test_user):
    book_created(test_db, test_user, NOW - timedelta(days=1), status="expired")
    assert not check_cooldown(test_db, test_user.id, now=NOW).allowed


def test_cancelled_booking_is_ignored_by_default(test_db, test_user):
    book_created(test_db, test_user, NOW - timedelta(days=1), status="cancelled")
    assert check_cooldown(test_db, test_user.id, now=NOW, policy=BookingPolicy(cooldown_counts_cancelled=False)).allowed
    assert not check_cooldown(test_db, test_user.id, now=NOW, policy=BookingPolicy(cooldown_counts_cancelled=True)).allowed


def test_exclude_id_skips_the_booking_being_edited(test_db, test_user):
    reservation = book_created(test_db, test_user, NOW - timedelta(days=1))
    assert check_cooldown(test_db, test_user.id, now=NOW, exclude_id=reservation.id).allowed
