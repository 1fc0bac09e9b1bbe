"""Persistence adapters used by the services."""

from app.repositories.account_repo import AccountRepository
from app.repositories.proxy_repo import ProxyRepository
from app.repositories.subscription_repo import UserSubscriptionRepository
from app.repositories.usage_log_repo import UsageLogRepository

__all__ = [
    "AccountRepository",
    "ProxyRepository",
    "UserSubscriptionRepository",
    "UsageLogRepository",
]
