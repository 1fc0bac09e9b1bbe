"""Service layer for sub2api."""

from app.services.account_usage_service import AccountUsageService
from app.services.antigravity_quota_refresher import AntigravityQuotaRefresher
from app.services.subscription_usage_service import SubscriptionUsageService
from app.services.token_refresh_service import TokenRefreshService
from app.services.token_refresher import TokenRefresher, AntigravityTokenRefresher

__all__ = [
    "AccountUsageService",
    "AntigravityQuotaRefresher",
    "SubscriptionUsageService",
    "TokenRefreshService",
    "TokenRefresher",
    "AntigravityTokenRefresher",
]
