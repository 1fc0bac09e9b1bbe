from datetime import datetime

import pytest

from app.models.usage_log import UsageLog
from app.repositories import UsageLogRepository


def log(account_id, model, created_at, tokens=100, cost=0.01, actual=0.008):
    return UsageLog(
        user_id=1,
        account_id=account_id,
        model=model,
        input_tokens=tokens,
        output_tokens=0,
        cache_creation_tokens=0,
        cache_read_tokens=0,
        total_cost=cost,
        actual_cost=actual,
        created_at=created_at,
    )


@pytest.fixture
def repo(session_factory):
    with session_factory() as db:
        db.add_all([
            log(1, "claude-sonnet-4-5", datetime(2025, 1, 14, 9, 0)),
            log(1, "claude-sonnet-4-5", datetime(2025, 1, 15, 8, 0), tokens=300, cost=0.03),
            log(1, "claude-opus-4-1", datetime(2025, 1, 15, 11, 30), tokens=1000, cost=0.5),
            log(2, "claude-sonnet-4-5", datetime(2025, 1, 15, 11, 0)),
        ])
        db.commit()
    return UsageLogRepository(session_factory)


def test_window_stats_since(repo):
    stats = repo.get_account_window_stats(1, datetime(2025, 1, 15, 7, 0))

    assert stats.requests == 2
    assert stats.tokens == 1300
    assert stats.cost == pytest.approx(0.53)


def test_window_stats_empty(repo):
    stats = repo.get_account_window_stats(3, datetime(2025, 1, 1))

    assert (stats.requests, stats.tokens, stats.cost) == (0, 0, 0.0)


def test_today_stats_start_at_utc_midnight(repo):
    stats = repo.get_account_today_stats(1, now=datetime(2025, 1, 15, 12, 0))

    assert stats.requests == 2


def test_usage_stats_history_models_and_summary(repo):
    resp = repo.get_account_usage_stats(1, datetime(2025, 1, 14), datetime(2025, 1, 16))

    assert [(p.date, p.requests, p.tokens) for p in resp.history] == [
        ("2025-01-14", 1, 100),
        ("2025-01-15", 2, 1300),
    ]
    assert [(m.model, m.requests) for m in resp.models] == [
        ("claude-sonnet-4-5", 2),
        ("claude-opus-4-1", 1),
    ]
    assert resp.summary.days == 2
    assert resp.summary.total_requests == 3
    assert resp.summary.total_cost == pytest.approx(0.54)
    assert resp.summary.avg_daily_requests == pytest.approx(1.5)
