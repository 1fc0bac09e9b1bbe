"""
Token Refresh Service

Renews OAuth tokens shortly before they expire so request-path code never
sees an expired credential.
"""

import logging
from datetime import timedelta
from typing import List, Optional

from app.config import TokenRefreshConfig, settings
from app.exceptions import TokenRefreshError
from app.services.scheduler import PeriodicTask
from app.services.token_refresher import TokenRefresher

logger = logging.getLogger(__name__)


class TokenRefreshService:
    def __init__(
        self,
        account_repo,
        refreshers: List[TokenRefresher],
        config: Optional[TokenRefreshConfig] = None,
    ):
        self.account_repo = account_repo
        self.refreshers = refreshers
        self.config = config or settings.token_refresh
        self.refresh_window = timedelta(hours=self.config.refresh_before_expiry_hours)
        self.task = PeriodicTask(
            "Token refresh service",
            self.process_refresh,
            self.config.check_interval_minutes,
            enabled=self.config.enabled,
        )

    def start(self) -> None:
        self.task.start()

    def stop(self) -> None:
        self.task.stop()

    def get_status(self) -> dict:
        return self.task.get_status()

    def _refresher_for(self, account) -> Optional[TokenRefresher]:
        for refresher in self.refreshers:
            if refresher.can_refresh(account):
                return refresher
        return None

    def process_refresh(self) -> dict:
        """Refresh every active account whose token is inside the refresh window."""
        stats = {"total": 0, "refreshed": 0, "failed": 0}

        try:
            accounts = self.account_repo.list_active()
        except Exception as e:
            logger.error(f"[TokenRefresh] Failed to list accounts: {e}")
            return stats

        for account in accounts:
            refresher = self._refresher_for(account)
            if refresher is None or not refresher.needs_refresh(account, self.refresh_window):
                continue

            stats["total"] += 1
            try:
                self.refresh_account(account, refresher)
                stats["refreshed"] += 1
            except TokenRefreshError as e:
                logger.warning(f"[TokenRefresh] Account {account.id} ({account.name}) failed: {e.message}")
                stats["failed"] += 1
            except Exception as e:
                logger.error(f"[TokenRefresh] Account {account.id} ({account.name}) failed: {e}")
                stats["failed"] += 1

        if stats["total"]:
            logger.info(
                f"[TokenRefresh] Cycle complete: total={stats['total']}, "
                f"refreshed={stats['refreshed']}, failed={stats['failed']}"
            )
        return stats

    def refresh_account(self, account, refresher: TokenRefresher) -> None:
        """Swap in fresh credentials and persist. ``account`` is untouched if the refresh fails."""
        credentials = refresher.refresh(account)
        account.credentials = credentials
        self.account_repo.update(account)
        logger.info(f"[TokenRefresh] Account {account.id} token refreshed")
