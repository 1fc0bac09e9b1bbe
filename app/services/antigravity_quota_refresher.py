"""
Antigravity Quota Refresher

Periodically polls the Antigravity API for each active Antigravity
account and records its tier and per-model remaining quota in
``Account.extra``.

Token renewal is not done here: accounts whose token is about to expire
are skipped and left to TokenRefreshService.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from app.config import TokenRefreshConfig, settings
from app.models.account import Account, PLATFORM_ANTIGRAVITY
from app.schemas.account_extra import AntigravityQuotaExtra, ModelQuota
from app.schemas.antigravity import FetchAvailableModelsResponse, LoadCodeAssistResponse
from app.services.antigravity_client import AntigravityClient
from app.services.scheduler import PeriodicTask
from app.utils.clock import format_rfc3339, utcnow

logger = logging.getLogger(__name__)

# Tokens this close to expiry are treated as already expired.
EXPIRY_BUFFER = timedelta(minutes=5)


class AntigravityQuotaRefresher:
    """
    Background quota poller.

    Usage:
        refresher = AntigravityQuotaRefresher(AccountRepository(), ProxyRepository())
        refresher.start()
        ...
        refresher.stop()
    """

    def __init__(
        self,
        account_repo,
        proxy_repo,
        config: Optional[TokenRefreshConfig] = None,
        client_factory: Callable[[Optional[str]], AntigravityClient] = AntigravityClient,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.account_repo = account_repo
        self.proxy_repo = proxy_repo
        self.config = config or settings.token_refresh
        self.client_factory = client_factory
        self.clock = clock
        self.task = PeriodicTask(
            "Antigravity quota refresher",
            self.process_refresh,
            self.config.check_interval_minutes,
            enabled=self.config.enabled,
        )

    def start(self) -> None:
        """Run one cycle now, then every ``check_interval_minutes``."""
        self.task.start()

    def stop(self) -> None:
        self.task.stop()

    def get_status(self) -> dict:
        return self.task.get_status()

    def process_refresh(self) -> dict:
        """
        Run one refresh cycle over all active Antigravity accounts.

        Returns:
            Dict with total/refreshed/skipped/failed counts
        """
        stats = {"total": 0, "refreshed": 0, "skipped": 0, "failed": 0}

        try:
            all_accounts = self.account_repo.list_active()
        except Exception as e:
            logger.error(f"[AntigravityQuota] Failed to list accounts: {e}")
            return stats

        accounts = [acc for acc in all_accounts if acc.platform == PLATFORM_ANTIGRAVITY]
        if not accounts:
            return stats

        stats["total"] = len(accounts)

        for account in accounts:
            try:
                if self.refresh_account_quota(account):
                    stats["refreshed"] += 1
                else:
                    stats["skipped"] += 1
            except Exception as e:
                logger.warning(f"[AntigravityQuota] Account {account.id} ({account.name}) failed: {e}")
                stats["failed"] += 1

        logger.info(
            f"[AntigravityQuota] Cycle complete: total={stats['total']}, "
            f"refreshed={stats['refreshed']}, skipped={stats['skipped']}, failed={stats['failed']}"
        )
        return stats

    def refresh_account_quota(self, account: Account) -> bool:
        """
        Refresh tier and quota for one account.

        Returns False when the account was skipped (missing credentials or
        token about to expire). Raises when the quota fetch or the save fails;
        in that case nothing is written.
        """
        access_token = account.get_credential("access_token")
        project_id = account.get_credential("project_id")

        if not access_token or not project_id:
            logger.debug(f"[AntigravityQuota] Account {account.id} has no access_token/project_id, skipping")
            return False

        if self.is_token_expired(account):
            logger.debug(f"[AntigravityQuota] Account {account.id} token expiring, skipping")
            return False

        staged = AntigravityQuotaExtra()

        with self.client_factory(self._proxy_url(account)) as client:
            # Tier lookup is best-effort
            try:
                self._stage_tier(staged, client.load_code_assist(access_token))
            except Exception as e:
                logger.debug(f"[AntigravityQuota] Account {account.id} loadCodeAssist failed: {e}")

            models = client.fetch_available_models(access_token, project_id)

        self._stage_quota(staged, models)

        account.extra = staged.apply_to(account.extra)
        self.account_repo.update(account)
        return True

    def is_token_expired(self, account: Account) -> bool:
        """Unknown expiry counts as not expired."""
        expires_at = account.credential_expires_at()
        if expires_at is None:
            return False
        return self.clock() + EXPIRY_BUFFER > expires_at

    def _proxy_url(self, account: Account) -> Optional[str]:
        if account.proxy_id is None:
            return None
        try:
            proxy = self.proxy_repo.get_by_id(account.proxy_id)
        except Exception as e:
            logger.warning(f"[AntigravityQuota] Proxy {account.proxy_id} lookup failed, going direct: {e}")
            return None
        return proxy.url if proxy else None

    @staticmethod
    def _stage_tier(staged: AntigravityQuotaExtra, load_resp: LoadCodeAssistResponse) -> None:
        tier = load_resp.get_tier()
        if tier:
            staged.tier = tier

        # e.g. INELIGIBLE_ACCOUNT
        ineligible = load_resp.first_ineligible()
        if ineligible is not None:
            if ineligible.reason_code:
                staged.ineligible_reason_code = ineligible.reason_code
            if ineligible.reason_message:
                staged.ineligible_reason_message = ineligible.reason_message

    def _stage_quota(self, staged: AntigravityQuotaExtra, models_resp: FetchAvailableModelsResponse) -> None:
        quota = {}
        for model_name, model_info in models_resp.models.items():
            if model_info.quota_info is None:
                continue
            # remainingFraction 0.0-1.0 -> percent, truncated
            fraction = model_info.quota_info.remaining_fraction or 0.0
            quota[model_name] = ModelQuota(
                remaining=int(fraction * 100),
                reset_time=model_info.quota_info.reset_time,
            )

        staged.quota = quota
        staged.last_quota_check = format_rfc3339(self.clock())
