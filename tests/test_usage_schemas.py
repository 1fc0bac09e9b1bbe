import json
from datetime import datetime, timezone

from app.schemas.account_extra import AntigravityQuotaExtra, ModelQuota
from app.schemas.usage import UsageInfo, UsageProgress, WindowStats


def test_optional_usage_fields_are_omitted():
    info = UsageInfo(five_hour=UsageProgress(utilization=10.0))

    assert info.model_dump() == {
        "five_hour": {"utilization": 10.0, "resets_at": None, "remaining_seconds": 0},
    }


def test_empty_usage_still_has_five_hour_key():
    assert json.loads(UsageInfo().model_dump_json()) == {"five_hour": None}


def test_populated_usage_serialises_everything():
    reset = datetime(2025, 1, 15, 14, 0, tzinfo=timezone.utc)
    info = UsageInfo(
        updated_at=reset,
        five_hour=UsageProgress(
            utilization=50.0,
            resets_at=reset,
            remaining_seconds=60,
            window_stats=WindowStats(requests=1, tokens=2, cost=0.5),
        ),
        seven_day=UsageProgress(utilization=5.0),
    )

    data = json.loads(info.model_dump_json())

    assert set(data) == {"updated_at", "five_hour", "seven_day"}
    assert data["five_hour"]["window_stats"] == {"requests": 1, "tokens": 2, "cost": 0.5}
    assert data["five_hour"]["resets_at"] == "2025-01-15T14:00:00Z"
    assert "window_stats" not in data["seven_day"]


def test_quota_extra_merges_over_existing_keys():
    extra = {"tier": "old", "custom": 1}
    staged = AntigravityQuotaExtra(tier="g1-pro-tier", quota={"m": ModelQuota(remaining=40)})

    merged = staged.apply_to(extra)

    assert merged == {"tier": "g1-pro-tier", "custom": 1, "quota": {"m": {"remaining": 40, "reset_time": ""}}}
    assert extra == {"tier": "old", "custom": 1}
    assert AntigravityQuotaExtra().apply_to(None) == {}
