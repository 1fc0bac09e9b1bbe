"""
Subscription Usage Service

Billing-path helpers around the rolling usage windows of a subscription:
window activation/rollover before a request, limit checks, and debiting
the actual cost afterwards.
"""

import logging
from datetime import datetime
from typing import Callable

from app.exceptions import SubscriptionInactiveError, UsageLimitExceededError
from app.models.group import Group
from app.models.subscription import UserSubscription
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)


class SubscriptionUsageService:
    def __init__(self, subscription_repo, clock: Callable[[], datetime] = utcnow):
        self.subscription_repo = subscription_repo
        self.clock = clock

    def prepare_windows(self, sub: UserSubscription) -> UserSubscription:
        """
        Make sure the windows of ``sub`` are current.

        First use anchors all three windows at now. After that, each window
        whose period has elapsed is zeroed and re-anchored at now; the others
        are left alone.
        """
        now = self.clock()

        if not sub.is_window_activated():
            self.subscription_repo.activate_windows(sub.id, now)
            sub.daily_window_start = now
            sub.weekly_window_start = now
            sub.monthly_window_start = now
            logger.info(f"Activated usage windows for subscription {sub.id}")
            return sub

        if sub.needs_daily_reset(now):
            self.subscription_repo.reset_daily_usage(sub.id, now)
            sub.daily_window_start = now
            sub.daily_usage_usd = 0.0

        if sub.needs_weekly_reset(now):
            self.subscription_repo.reset_weekly_usage(sub.id, now)
            sub.weekly_window_start = now
            sub.weekly_usage_usd = 0.0

        if sub.needs_monthly_reset(now):
            self.subscription_repo.reset_monthly_usage(sub.id, now)
            sub.monthly_window_start = now
            sub.monthly_usage_usd = 0.0

        return sub

    def check_limits(self, sub: UserSubscription, group: Group, cost: float) -> None:
        """
        Raise if ``sub`` cannot take ``cost`` more spend.

        Raises:
            SubscriptionInactiveError: not active or past expiry
            UsageLimitExceededError: first failing window, daily before weekly before monthly
        """
        if not sub.is_active(self.clock()):
            raise SubscriptionInactiveError(sub.id)

        daily_ok, weekly_ok, monthly_ok = sub.check_all_limits(group, cost)
        if not daily_ok:
            raise UsageLimitExceededError("daily", group.daily_limit_usd, sub.daily_usage_usd or 0.0, cost)
        if not weekly_ok:
            raise UsageLimitExceededError("weekly", group.weekly_limit_usd, sub.weekly_usage_usd or 0.0, cost)
        if not monthly_ok:
            raise UsageLimitExceededError("monthly", group.monthly_limit_usd, sub.monthly_usage_usd or 0.0, cost)

    def record_usage(self, sub: UserSubscription, cost: float) -> None:
        """Debit ``cost`` to all three windows atomically."""
        if cost < 0:
            raise ValueError(f"usage cost must not be negative, got {cost}")
        if cost == 0:
            return

        self.subscription_repo.increment_usage(sub.id, cost)
        sub.daily_usage_usd = (sub.daily_usage_usd or 0.0) + cost
        sub.weekly_usage_usd = (sub.weekly_usage_usd or 0.0) + cost
        sub.monthly_usage_usd = (sub.monthly_usage_usd or 0.0) + cost

    def expire_subscriptions(self) -> int:
        """Mark active subscriptions past expiry as expired."""
        expired = self.subscription_repo.batch_update_expired_status(self.clock())
        if expired:
            logger.info(f"Expired {expired} subscriptions")
        return expired
