"""
Account Usage Service

Answers "how much of its provider windows has this account used?":
- OAuth accounts: live data from the Claude usage API, cached for 10 min
- Setup-token accounts: estimated from the session window the gateway
  recorded (the token lacks the profile scope the usage API needs)
- API key accounts: not supported
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.exceptions import (
    AccountNotFoundError,
    UnsupportedAccountTypeError,
    UsageQueryError,
)
from app.models.account import Account, ACCOUNT_TYPE_SETUP_TOKEN
from app.schemas.usage import (
    AccountUsageStatsResponse,
    ClaudeUsageResponse,
    ClaudeUsageWindow,
    UsageInfo,
    UsageProgress,
    WindowStats,
)
from app.utils.cache import TTLCache
from app.utils.clock import as_utc, utcnow

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 600
DEFAULT_SESSION_WINDOW = timedelta(hours=5)

# Tried in order
TIME_FORMATS = (
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
)

# Session window status -> estimated utilization (percent)
SESSION_STATUS_UTILIZATION = {
    "rejected": 100.0,
    "allowed_warning": 80.0,
}


def parse_time(value: str) -> datetime:
    """
    Parse an upstream timestamp to an aware UTC datetime.

    Raises:
        ValueError: none of the accepted layouts match
    """
    # strptime's %f takes at most 6 digits
    trimmed = re.sub(r"(\.\d{6})\d+", r"\1", value)
    for fmt in TIME_FORMATS:
        try:
            parsed = datetime.strptime(trimmed, fmt)
        except ValueError:
            continue
        return as_utc(parsed)
    raise ValueError(f"unable to parse time: {value}")


class AccountUsageService:
    def __init__(
        self,
        account_repo,
        usage_log_repo,
        usage_fetcher,
        cache: Optional[TTLCache] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.account_repo = account_repo
        self.usage_log_repo = usage_log_repo
        self.usage_fetcher = usage_fetcher
        self.clock = clock
        self.cache = cache if cache is not None else TTLCache(default_ttl=CACHE_TTL_SECONDS, clock=clock)

    def get_usage(self, account_id: int) -> UsageInfo:
        """
        Usage snapshot for one account.

        Raises:
            UsageQueryError: account lookup failed
            AccountNotFoundError: no such account
            UnsupportedAccountTypeError: API key accounts
            UpstreamError: the usage API call failed
        """
        try:
            account = self.account_repo.get_by_id(account_id)
        except Exception as e:
            raise UsageQueryError(f"get account failed: {e}") from e

        if account is None:
            raise AccountNotFoundError(account_id)

        if account.can_get_usage():
            cached = self.cache.get(account_id)
            if cached is not None:
                return cached

            usage = self._fetch_oauth_usage(account)
            self._add_window_stats(account, usage)
            self.cache.set(account_id, usage)
            return usage

        if account.type == ACCOUNT_TYPE_SETUP_TOKEN:
            usage = self.estimate_setup_token_usage(account)
            self._add_window_stats(account, usage)
            return usage

        raise UnsupportedAccountTypeError(account.type)

    def get_today_stats(self, account_id: int) -> WindowStats:
        """Requests, tokens and cost since UTC midnight."""
        try:
            return self.usage_log_repo.get_account_today_stats(account_id)
        except Exception as e:
            raise UsageQueryError(f"get today stats failed: {e}") from e

    def get_account_usage_stats(
        self,
        account_id: int,
        start: datetime,
        end: datetime,
    ) -> AccountUsageStatsResponse:
        try:
            return self.usage_log_repo.get_account_usage_stats(account_id, start, end)
        except Exception as e:
            raise UsageQueryError(f"get account usage stats failed: {e}") from e

    def _fetch_oauth_usage(self, account: Account) -> UsageInfo:
        access_token = account.get_credential("access_token")
        if not access_token:
            raise UsageQueryError("no access token available")

        proxy_url = account.proxy.url if account.proxy_id is not None and account.proxy else None
        response = self.usage_fetcher.fetch_usage(access_token, proxy_url)
        return self.build_usage_info(response, self.clock())

    def build_usage_info(self, response: ClaudeUsageResponse, updated_at: datetime) -> UsageInfo:
        """Convert the usage API payload; windows without a reset time are left out."""
        return UsageInfo(
            updated_at=as_utc(updated_at),
            five_hour=self._build_progress("five_hour", response.five_hour),
            seven_day=self._build_progress("seven_day", response.seven_day),
            seven_day_sonnet=self._build_progress("seven_day_sonnet", response.seven_day_sonnet),
        )

    def _build_progress(self, name: str, window: ClaudeUsageWindow) -> Optional[UsageProgress]:
        if not window.resets_at:
            return None

        try:
            resets_at = parse_time(window.resets_at)
        except ValueError as e:
            # Utilization is still worth returning
            logger.warning(f"Failed to parse {name}.resets_at: {e}")
            return UsageProgress(utilization=window.utilization)

        now = as_utc(self.clock())
        return UsageProgress(
            utilization=window.utilization,
            resets_at=resets_at,
            remaining_seconds=int((resets_at - now).total_seconds()),
        )

    def estimate_setup_token_usage(self, account: Account) -> UsageInfo:
        """
        Estimate the 5 hour window from the recorded session window.

        Seven day data is unavailable for setup tokens.
        """
        if account.session_window_end is None:
            return UsageInfo(five_hour=UsageProgress(utilization=0.0, remaining_seconds=0))

        remaining = int((account.session_window_end - self.clock()).total_seconds())
        return UsageInfo(
            five_hour=UsageProgress(
                utilization=SESSION_STATUS_UTILIZATION.get(account.session_window_status, 0.0),
                resets_at=as_utc(account.session_window_end),
                remaining_seconds=max(0, remaining),
            )
        )

    def _add_window_stats(self, account: Account, usage: UsageInfo) -> None:
        """Attach usage-log stats for the current 5 hour window. Failures are logged only."""
        if usage.five_hour is None:
            return

        since = account.session_window_start or (self.clock() - DEFAULT_SESSION_WINDOW)
        try:
            stats = self.usage_log_repo.get_account_window_stats(account.id, since)
        except Exception as e:
            logger.warning(f"Failed to get window stats for account {account.id}: {e}")
            return

        usage.five_hour.window_stats = WindowStats(
            requests=stats.requests,
            tokens=stats.tokens,
            cost=stats.cost,
        )
