"""
Service-layer errors.

Every error carries a stable ``code`` the HTTP layer can hand back to
clients unchanged.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for errors surfaced by sub2api services."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountNotFoundError(ServiceError):
    code = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: int):
        super().__init__(f"account {account_id} not found")
        self.account_id = account_id


class UnsupportedAccountTypeError(ServiceError):
    """Raised when an account type cannot answer usage queries (e.g. api_key)."""

    code = "UNSUPPORTED_ACCOUNT_TYPE"

    def __init__(self, account_type: str):
        super().__init__(f"account type {account_type} does not support usage query")
        self.account_type = account_type


class UsageQueryError(ServiceError):
    code = "USAGE_QUERY_FAILED"


class UpstreamError(ServiceError):
    """Non-2xx or undecodable response from an upstream provider API."""

    code = "UPSTREAM_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body[:500]


class TokenRefreshError(ServiceError):
    code = "TOKEN_REFRESH_FAILED"


class SubscriptionInactiveError(ServiceError):
    code = "SUBSCRIPTION_INACTIVE"

    def __init__(self, subscription_id: int):
        super().__init__(f"subscription {subscription_id} is not active")
        self.subscription_id = subscription_id


class UsageLimitExceededError(ServiceError):
    """A pre-flight window check rejected the requested cost."""

    code = "USAGE_LIMIT_EXCEEDED"

    def __init__(self, period: str, limit: float, current: float, cost: float):
        super().__init__(
            f"{period} usage limit exceeded: {current:.4f} + {cost:.4f} > {limit:.4f} USD"
        )
        self.period = period
        self.limit = limit
        self.current = current
        self.cost = cost
