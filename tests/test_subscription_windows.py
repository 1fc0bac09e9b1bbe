from datetime import datetime, timedelta

import pytest

from app.models.group import Group
from app.models.subscription import (
    UserSubscription,
    SUBSCRIPTION_STATUS_ACTIVE,
    SUBSCRIPTION_STATUS_SUSPENDED,
)

NOW = datetime(2025, 1, 15, 12, 0, 0)
ONE_SECOND = timedelta(seconds=1)


def make_subscription(**overrides):
    values = dict(
        id=1,
        user_id=10,
        group_id=20,
        status=SUBSCRIPTION_STATUS_ACTIVE,
        starts_at=NOW - timedelta(days=1),
        expires_at=NOW + timedelta(days=30),
        daily_usage_usd=0.0,
        weekly_usage_usd=0.0,
        monthly_usage_usd=0.0,
    )
    values.update(overrides)
    return UserSubscription(**values)


def test_unset_anchor_never_needs_reset():
    sub = make_subscription()

    assert not sub.is_window_activated()
    assert sub.needs_daily_reset(NOW) is False
    assert sub.needs_weekly_reset(NOW) is False
    assert sub.needs_monthly_reset(NOW) is False
    assert sub.daily_reset_time() is None
    assert sub.weekly_reset_time() is None
    assert sub.monthly_reset_time() is None


@pytest.mark.parametrize(
    "field, method, period",
    [
        ("daily_window_start", "needs_daily_reset", timedelta(hours=24)),
        ("weekly_window_start", "needs_weekly_reset", timedelta(days=7)),
        ("monthly_window_start", "needs_monthly_reset", timedelta(days=30)),
    ],
)
def test_reset_due_exactly_at_period_boundary(field, method, period):
    due = make_subscription(**{field: NOW - period})
    not_due = make_subscription(**{field: NOW - period + ONE_SECOND})

    assert getattr(due, method)(NOW) is True
    assert getattr(not_due, method)(NOW) is False


def test_windows_are_independent():
    sub = make_subscription(
        daily_window_start=NOW - timedelta(hours=25),
        weekly_window_start=NOW - timedelta(days=2),
        monthly_window_start=NOW - timedelta(days=31),
    )

    assert sub.needs_daily_reset(NOW)
    assert not sub.needs_weekly_reset(NOW)
    assert sub.needs_monthly_reset(NOW)


def test_reset_times_are_anchor_plus_period():
    anchor = datetime(2025, 1, 1, 8, 30, 0)
    sub = make_subscription(
        daily_window_start=anchor,
        weekly_window_start=anchor,
        monthly_window_start=anchor,
    )

    assert sub.is_window_activated()
    assert sub.daily_reset_time() == datetime(2025, 1, 2, 8, 30, 0)
    assert sub.weekly_reset_time() == datetime(2025, 1, 8, 8, 30, 0)
    assert sub.monthly_reset_time() == datetime(2025, 1, 31, 8, 30, 0)


def test_limit_reached_exactly_is_allowed():
    group = Group(name="pro", daily_limit_usd=10.0)
    sub = make_subscription(daily_usage_usd=7.5)

    assert sub.check_daily_limit(group, 2.5) is True
    assert sub.check_daily_limit(group, 2.5 + 1e-9) is False


def test_missing_limit_means_unlimited():
    group = Group(name="free")
    sub = make_subscription(daily_usage_usd=1e6, weekly_usage_usd=1e6, monthly_usage_usd=1e6)

    assert not group.has_daily_limit()
    assert sub.check_all_limits(group, 1e6) == (True, True, True)


def test_check_all_limits_reports_every_window():
    group = Group(name="team", daily_limit_usd=5.0, weekly_limit_usd=50.0, monthly_limit_usd=100.0)
    sub = make_subscription(daily_usage_usd=4.0, weekly_usage_usd=10.0, monthly_usage_usd=99.5)

    assert sub.check_all_limits(group, 2.0) == (False, True, False)


def test_is_active_requires_status_and_future_expiry():
    assert make_subscription().is_active(NOW)
    assert not make_subscription(status=SUBSCRIPTION_STATUS_SUSPENDED).is_active(NOW)
    assert not make_subscription(expires_at=NOW - ONE_SECOND).is_active(NOW)
    assert not make_subscription(expires_at=NOW).is_active(NOW)


def test_days_remaining_floors_and_stops_at_zero():
    assert make_subscription(expires_at=NOW + timedelta(days=2, hours=23)).days_remaining(NOW) == 2
    assert make_subscription(expires_at=NOW + timedelta(hours=23)).days_remaining(NOW) == 0
    assert make_subscription(expires_at=NOW - timedelta(days=3)).days_remaining(NOW) == 0
    assert make_subscription(expires_at=NOW - timedelta(days=3)).is_expired(NOW)
