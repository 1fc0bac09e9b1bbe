"""
Account Model

One upstream-provider credential set in the account pool.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.db_types import JSONDict

# Platforms
PLATFORM_ANTHROPIC = "anthropic"
PLATFORM_OPENAI = "openai"
PLATFORM_GEMINI = "gemini"
PLATFORM_ANTIGRAVITY = "antigravity"

# Credential types
ACCOUNT_TYPE_OAUTH = "oauth"
ACCOUNT_TYPE_SETUP_TOKEN = "setup_token"
ACCOUNT_TYPE_API_KEY = "api_key"

ACCOUNT_STATUS_ACTIVE = "active"
ACCOUNT_STATUS_DISABLED = "disabled"
ACCOUNT_STATUS_ERROR = "error"


class Account(Base):
    """
    Upstream account.

    ``credentials`` holds string values only (access_token, refresh_token,
    expires_at as Unix seconds, project_id, ...). ``extra`` is an open JSON
    object used for tier and quota metadata written by the refreshers.
    """

    __tablename__ = "accounts"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(100), nullable=False)
    platform = Column(String(50), nullable=False, index=True)
    type = Column(String(20), nullable=False)

    credentials = Column(JSONDict(), nullable=False, default=dict)
    extra = Column(JSONDict(), nullable=False, default=dict)

    proxy_id = Column(Integer, ForeignKey("proxies.id"), nullable=True)
    status = Column(String(20), nullable=False, default=ACCOUNT_STATUS_ACTIVE, index=True)
    error_message = Column(String(500), nullable=True)

    # Provider session window (e.g. Claude's 5 hour window)
    session_window_start = Column(DateTime, nullable=True)
    session_window_end = Column(DateTime, nullable=True)
    session_window_status = Column(String(20), nullable=False, default="")

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    proxy = relationship("Proxy", lazy="joined")

    def __repr__(self):
        return f"<Account {self.id} {self.platform}/{self.type} {self.name}>"

    @property
    def is_active(self) -> bool:
        return self.status == ACCOUNT_STATUS_ACTIVE

    def get_credential(self, key: str) -> str:
        """Credential value as a string, empty when missing."""
        value = (self.credentials or {}).get(key)
        if value is None:
            return ""
        return str(value)

    def credential_expires_at(self) -> Optional[datetime]:
        """
        Token expiry from the ``expires_at`` credential (Unix seconds).

        Returns None when the value is missing or not a number; callers treat
        that as "unknown" rather than as an error.
        """
        raw = self.get_credential("expires_at").strip()
        if not raw:
            return None
        try:
            seconds = int(raw)
        except ValueError:
            return None
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)
        except (OverflowError, OSError, ValueError):
            return None

    def can_get_usage(self) -> bool:
        """Only OAuth accounts carry the profile scope the usage API needs."""
        return self.type == ACCOUNT_TYPE_OAUTH
