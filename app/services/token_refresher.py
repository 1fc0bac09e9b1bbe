"""
Token refreshers.

A refresher decides whether an account's OAuth token is close enough to
expiry to renew, and performs the renewal. ``TokenRefreshService`` walks the
account pool with a list of them.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, Dict

from app.exceptions import ServiceError, TokenRefreshError
from app.models.account import Account, ACCOUNT_TYPE_OAUTH, PLATFORM_ANTIGRAVITY
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


class TokenRefresher(ABC):
    @abstractmethod
    def can_refresh(self, account: Account) -> bool:
        """Whether this refresher handles ``account`` at all."""

    @abstractmethod
    def needs_refresh(self, account: Account, refresh_window: timedelta) -> bool:
        """Whether the token expires within ``refresh_window``. Never raises."""

    @abstractmethod
    def refresh(self, account: Account) -> Dict[str, str]:
        """Return the complete new credential map; ``account`` is not modified."""


class AntigravityTokenRefresher(TokenRefresher):
    def __init__(self, oauth_service, clock: Callable[[], datetime] = utcnow):
        self.oauth_service = oauth_service
        self.clock = clock

    def can_refresh(self, account: Account) -> bool:
        return account.platform == PLATFORM_ANTIGRAVITY and account.type == ACCOUNT_TYPE_OAUTH

    def needs_refresh(self, account: Account, refresh_window: timedelta) -> bool:
        if not self.can_refresh(account):
            return False
        # Missing or unparsable expiry is treated as "no refresh needed".
        expires_at = account.credential_expires_at()
        if expires_at is None:
            return False
        return expires_at - self.clock() < refresh_window

    def refresh(self, account: Account) -> Dict[str, str]:
        try:
            token_info = self.oauth_service.refresh_account_token(account)
        except TokenRefreshError:
            raise
        except ServiceError as e:
            raise TokenRefreshError(e.message) from e
        except Exception as e:
            raise TokenRefreshError(f"token refresh failed: {e}") from e

        new_credentials = self.oauth_service.build_account_credentials(token_info)
        for key, value in (account.credentials or {}).items():
            if key not in new_credentials:
                new_credentials[key] = value

        logger.debug(f"Refreshed token for account {account.id}, keys: {sorted(new_credentials)}")
        return new_credentials
