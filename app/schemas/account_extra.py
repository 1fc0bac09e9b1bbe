"""Structured view of the quota metadata kept in ``Account.extra``."""

from typing import Any, Dict, Optional

from pydantic import BaseModel


class ModelQuota(BaseModel):
    remaining: int  # percent, 0-100
    reset_time: str = ""


class AntigravityQuotaExtra(BaseModel):
    """
    Tier and quota fields written by the quota refresher.

    Serialises with the exact keys stored in ``extra`` so existing rows keep
    round-tripping. Fields left as None are not written.
    """

    tier: Optional[str] = None
    ineligible_reason_code: Optional[str] = None
    ineligible_reason_message: Optional[str] = None
    quota: Optional[Dict[str, ModelQuota]] = None
    last_quota_check: Optional[str] = None

    def apply_to(self, extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Return a new extra dict with these fields merged over ``extra``."""
        merged = dict(extra or {})
        merged.update(self.model_dump(exclude_none=True))
        return merged
