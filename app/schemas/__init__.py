"""Pydantic schemas for read models and upstream payloads."""

from app.schemas.usage import (
    WindowStats,
    UsageProgress,
    UsageInfo,
    ClaudeUsageResponse,
    AccountUsageStatsResponse,
)
from app.schemas.antigravity import (
    LoadCodeAssistResponse,
    FetchAvailableModelsResponse,
)
from app.schemas.account_extra import AntigravityQuotaExtra, ModelQuota

__all__ = [
    # Usage
    "WindowStats",
    "UsageProgress",
    "UsageInfo",
    "ClaudeUsageResponse",
    "AccountUsageStatsResponse",
    # Antigravity
    "LoadCodeAssistResponse",
    "FetchAvailableModelsResponse",
    # Account extra
    "AntigravityQuotaExtra",
    "ModelQuota",
]
