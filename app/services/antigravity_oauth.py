"""
Antigravity OAuth Service

Exchanges an account's refresh token for a new access token at Google's
OAuth token endpoint. Only the refresh grant is handled here; the initial
login flow lives elsewhere.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Optional

import httpx
from pydantic import BaseModel, ValidationError

from app.config import settings
from app.exceptions import TokenRefreshError
from app.models.account import Account
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


class TokenInfo(BaseModel):
    """Result of a successful token exchange."""

    access_token: str
    refresh_token: str = ""
    token_type: str = "Bearer"
    expires_in: int = 0
    expires_at: int = 0  # Unix seconds


class _TokenResponse(BaseModel):
    access_token: str
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: int = 3600


class AntigravityOAuthService:
    def __init__(
        self,
        proxy_repo=None,
        token_url: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.proxy_repo = proxy_repo
        self.token_url = token_url or settings.antigravity_oauth_token_url
        self.client_id = client_id if client_id is not None else settings.antigravity_oauth_client_id
        self.client_secret = client_secret if client_secret is not None else settings.antigravity_oauth_client_secret
        self.timeout = timeout or settings.upstream_timeout_seconds
        self.transport = transport
        self.clock = clock

    def _proxy_url(self, account: Account) -> Optional[str]:
        if account.proxy_id is None or self.proxy_repo is None:
            return None
        try:
            proxy = self.proxy_repo.get_by_id(account.proxy_id)
        except Exception as e:
            logger.warning(f"Proxy {account.proxy_id} lookup failed for account {account.id}: {e}")
            return None
        return proxy.url if proxy else None

    def refresh_account_token(self, account: Account) -> TokenInfo:
        """
        Exchange the account's refresh token.

        Raises:
            TokenRefreshError: missing refresh token, transport failure or
                non-200 response.
        """
        refresh_token = account.get_credential("refresh_token")
        if not refresh_token:
            raise TokenRefreshError(f"account {account.id} has no refresh_token")

        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }

        try:
            with httpx.Client(
                timeout=self.timeout,
                proxy=self._proxy_url(account),
                transport=self.transport,
            ) as client:
                response = client.post(self.token_url, data=data)
        except httpx.HTTPError as e:
            raise TokenRefreshError(f"token request failed: {e}") from e

        if response.status_code != 200:
            raise TokenRefreshError(
                f"token endpoint returned HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = _TokenResponse.model_validate_json(response.content)
        except ValidationError as e:
            raise TokenRefreshError(f"token response malformed: {e}") from e

        now = self.clock().replace(tzinfo=timezone.utc)
        return TokenInfo(
            access_token=payload.access_token,
            # Google omits refresh_token when it is not rotated
            refresh_token=payload.refresh_token or refresh_token,
            token_type=payload.token_type or "Bearer",
            expires_in=payload.expires_in,
            expires_at=int(now.timestamp()) + payload.expires_in,
        )

    def build_account_credentials(self, token_info: TokenInfo) -> Dict[str, str]:
        """Credential map for an account, every value rendered as a string."""
        credentials = {
            "access_token": token_info.access_token,
            "token_type": token_info.token_type,
            "expires_at": str(token_info.expires_at),
        }
        if token_info.refresh_token:
            credentials["refresh_token"] = token_info.refresh_token
        return credentials
