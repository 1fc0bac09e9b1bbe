"""Antigravity (Cloud Code Assist) API payloads."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TierInfo(_CamelModel):
    id: str = ""
    name: str = ""
    description: str = ""


class IneligibleTier(_CamelModel):
    tier_id: str = Field("", alias="tierId")
    reason_code: str = Field("", alias="reasonCode")
    reason_message: str = Field("", alias="reasonMessage")


class LoadCodeAssistResponse(_CamelModel):
    """Response of ``:loadCodeAssist``; tells us which tier the account is on."""

    current_tier: Optional[TierInfo] = Field(None, alias="currentTier")
    paid_tier: Optional[TierInfo] = Field(None, alias="paidTier")
    ineligible_tiers: List[Optional[IneligibleTier]] = Field(default_factory=list, alias="ineligibleTiers")
    cloudaicompanion_project: Any = Field(None, alias="cloudaicompanionProject")

    def get_tier(self) -> str:
        """Paid tier wins over the current (free) tier."""
        if self.paid_tier and self.paid_tier.id:
            return self.paid_tier.id
        if self.current_tier and self.current_tier.id:
            return self.current_tier.id
        return ""

    def first_ineligible(self) -> Optional[IneligibleTier]:
        if self.ineligible_tiers:
            return self.ineligible_tiers[0]
        return None


class QuotaInfo(_CamelModel):
    remaining_fraction: Optional[float] = Field(None, alias="remainingFraction")
    reset_time: str = Field("", alias="resetTime")


class ModelInfo(_CamelModel):
    display_name: str = Field("", alias="displayName")
    quota_info: Optional[QuotaInfo] = Field(None, alias="quotaInfo")


class FetchAvailableModelsResponse(_CamelModel):
    """Response of ``:fetchAvailableModels``, keyed by model name."""

    models: Dict[str, ModelInfo] = Field(default_factory=dict)
