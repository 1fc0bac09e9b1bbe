"""Account usage read models and the Claude usage API payload."""

from datetime import datetime
from typing import ClassVar, FrozenSet, List, Optional

from pydantic import BaseModel, Field, field_validator, model_serializer


class _OmitEmptyModel(BaseModel):
    """Drops the fields named in ``omit_if_none`` from dumps when they are None."""

    omit_if_none: ClassVar[FrozenSet[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _drop_empty_fields(self, handler):
        data = handler(self)
        for name in self.omit_if_none:
            if data.get(name) is None:
                data.pop(name, None)
        return data


class WindowStats(BaseModel):
    """Requests, tokens and cost accumulated inside a window."""

    requests: int = 0
    tokens: int = 0
    cost: float = 0.0


class UsageProgress(_OmitEmptyModel):
    """Utilization of one provider window (100 means 100%)."""

    omit_if_none: ClassVar[FrozenSet[str]] = frozenset({"window_stats"})

    utilization: float = 0.0
    resets_at: Optional[datetime] = None
    remaining_seconds: int = 0
    window_stats: Optional[WindowStats] = None


class UsageInfo(_OmitEmptyModel):
    """Usage snapshot of one upstream account."""

    omit_if_none: ClassVar[FrozenSet[str]] = frozenset(
        {"updated_at", "seven_day", "seven_day_sonnet"}
    )

    updated_at: Optional[datetime] = None
    five_hour: Optional[UsageProgress] = None
    seven_day: Optional[UsageProgress] = None
    seven_day_sonnet: Optional[UsageProgress] = None


# =============================================================================
# Claude OAuth usage API
# =============================================================================


class ClaudeUsageWindow(BaseModel):
    utilization: float = 0.0
    resets_at: str = ""

    @field_validator("utilization", mode="before")
    @classmethod
    def _null_utilization(cls, value):
        return 0.0 if value is None else value

    @field_validator("resets_at", mode="before")
    @classmethod
    def _null_resets_at(cls, value):
        return "" if value is None else value


class ClaudeUsageResponse(BaseModel):
    """Body of GET /api/oauth/usage."""

    five_hour: ClaudeUsageWindow = Field(default_factory=ClaudeUsageWindow)
    seven_day: ClaudeUsageWindow = Field(default_factory=ClaudeUsageWindow)
    seven_day_sonnet: ClaudeUsageWindow = Field(default_factory=ClaudeUsageWindow)

    @field_validator("five_hour", "seven_day", "seven_day_sonnet", mode="before")
    @classmethod
    def _null_window(cls, value):
        return {} if value is None else value


# =============================================================================
# Usage log aggregates
# =============================================================================


class DailyUsagePoint(BaseModel):
    date: str  # YYYY-MM-DD
    requests: int = 0
    tokens: int = 0
    cost: float = 0.0
    actual_cost: float = 0.0


class ModelUsage(BaseModel):
    model: str
    requests: int = 0
    tokens: int = 0
    cost: float = 0.0
    actual_cost: float = 0.0


class AccountUsageSummary(BaseModel):
    days: int = 0
    total_requests: int = 0
    total_tokens: int = 0
    total_cost: float = 0.0
    total_actual_cost: float = 0.0
    avg_daily_requests: float = 0.0
    avg_daily_cost: float = 0.0


class AccountUsageStatsResponse(BaseModel):
    """Per-day history, per-model breakdown and totals for one account."""

    history: List[DailyUsagePoint] = Field(default_factory=list)
    models: List[ModelUsage] = Field(default_factory=list)
    summary: AccountUsageSummary = Field(default_factory=AccountUsageSummary)
