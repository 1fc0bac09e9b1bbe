from datetime import datetime, timedelta

import pytest

from app.models.group import Group
from app.models.subscription import (
    UserSubscription,
    SUBSCRIPTION_STATUS_ACTIVE,
    SUBSCRIPTION_STATUS_EXPIRED,
)
from app.repositories import UserSubscriptionRepository

NOW = datetime(2025, 1, 15, 12, 0, 0)


@pytest.fixture
def repo(session_factory):
    with session_factory() as db:
        db.add(Group(id=1, name="pro", daily_limit_usd=10.0))
        db.add(UserSubscription(
            id=1,
            user_id=5,
            group_id=1,
            status=SUBSCRIPTION_STATUS_ACTIVE,
            expires_at=NOW + timedelta(days=10),
            daily_window_start=NOW - timedelta(hours=1),
            weekly_window_start=NOW - timedelta(days=1),
            monthly_window_start=NOW - timedelta(days=1),
            daily_usage_usd=1.0,
            weekly_usage_usd=4.0,
            monthly_usage_usd=9.0,
        ))
        db.commit()
    return UserSubscriptionRepository(session_factory)


def test_get_by_id_loads_group(repo):
    sub = repo.get_by_id(1)

    assert sub.group.daily_limit_usd == 10.0
    assert repo.get_by_id(404) is None


def test_increment_usage_adds_to_all_counters(repo):
    repo.increment_usage(1, 1.25)
    repo.increment_usage(1, 1.25)

    sub = repo.get_by_id(1)
    assert sub.daily_usage_usd == pytest.approx(3.5)
    assert sub.weekly_usage_usd == pytest.approx(6.5)
    assert sub.monthly_usage_usd == pytest.approx(11.5)


def test_reset_daily_usage_leaves_other_windows(repo):
    repo.reset_daily_usage(1, NOW)

    sub = repo.get_by_id(1)
    assert sub.daily_usage_usd == 0
    assert sub.daily_window_start == NOW
    assert sub.weekly_usage_usd == pytest.approx(4.0)
    assert sub.weekly_window_start == NOW - timedelta(days=1)


def test_reset_weekly_and_monthly(repo):
    repo.reset_weekly_usage(1, NOW)
    repo.reset_monthly_usage(1, NOW)

    sub = repo.get_by_id(1)
    assert (sub.weekly_usage_usd, sub.monthly_usage_usd) == (0, 0)
    assert sub.weekly_window_start == NOW
    assert sub.monthly_window_start == NOW
    assert sub.daily_usage_usd == pytest.approx(1.0)


def test_activate_windows_sets_all_anchors(repo):
    start = NOW + timedelta(minutes=5)
    assert repo.activate_windows(1, start) == 1

    sub = repo.get_by_id(1)
    assert sub.daily_window_start == sub.weekly_window_start == sub.monthly_window_start == start


def test_get_active_by_user_and_group_respects_expiry(repo):
    assert repo.get_active_by_user_and_group(5, 1, now=NOW).id == 1
    assert repo.get_active_by_user_and_group(5, 1, now=NOW + timedelta(days=11)) is None
    assert repo.get_active_by_user_and_group(6, 1, now=NOW) is None


def test_batch_update_expired_status(repo, session_factory):
    with session_factory() as db:
        db.add(UserSubscription(id=2, user_id=6, group_id=1, expires_at=NOW - timedelta(seconds=1)))
        db.add(UserSubscription(
            id=3, user_id=7, group_id=1, expires_at=NOW - timedelta(days=5), status=SUBSCRIPTION_STATUS_EXPIRED,
        ))
        db.commit()

    assert repo.batch_update_expired_status(now=NOW) == 1
    assert repo.get_by_id(1).status == SUBSCRIPTION_STATUS_ACTIVE
    assert repo.get_by_id(2).status == SUBSCRIPTION_STATUS_EXPIRED
    assert repo.batch_update_expired_status(now=NOW) == 0
