"""
User subscription persistence.

Window resets and usage increments are single UPDATE statements so
concurrent requests never lose a debit.
"""

from datetime import datetime
from typing import Optional

from app.database import SessionLocal
from app.models.subscription import (
    UserSubscription,
    SUBSCRIPTION_STATUS_ACTIVE,
    SUBSCRIPTION_STATUS_EXPIRED,
)
from app.utils.clock import utcnow


class UserSubscriptionRepository:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_by_id(self, subscription_id: int) -> Optional[UserSubscription]:
        with self.session_factory() as db:
            return db.query(UserSubscription).filter(UserSubscription.id == subscription_id).first()

    def get_active_by_user_and_group(
        self,
        user_id: int,
        group_id: int,
        now: Optional[datetime] = None,
    ) -> Optional[UserSubscription]:
        """The user's unexpired active subscription to ``group_id``, if any."""
        now = now or utcnow()
        with self.session_factory() as db:
            return db.query(UserSubscription).filter(
                UserSubscription.user_id == user_id,
                UserSubscription.group_id == group_id,
                UserSubscription.status == SUBSCRIPTION_STATUS_ACTIVE,
                UserSubscription.expires_at > now,
            ).first()

    def _update(self, subscription_id: int, values: dict) -> int:
        values["updated_at"] = utcnow()
        with self.session_factory() as db:
            updated = db.query(UserSubscription).filter(
                UserSubscription.id == subscription_id
            ).update(values, synchronize_session=False)
            db.commit()
        return updated

    def activate_windows(self, subscription_id: int, start: datetime) -> int:
        """Anchor all three windows at ``start``."""
        return self._update(subscription_id, {
            "daily_window_start": start,
            "weekly_window_start": start,
            "monthly_window_start": start,
        })

    def reset_daily_usage(self, subscription_id: int, new_window_start: datetime) -> int:
        return self._update(subscription_id, {
            "daily_usage_usd": 0,
            "daily_window_start": new_window_start,
        })

    def reset_weekly_usage(self, subscription_id: int, new_window_start: datetime) -> int:
        return self._update(subscription_id, {
            "weekly_usage_usd": 0,
            "weekly_window_start": new_window_start,
        })

    def reset_monthly_usage(self, subscription_id: int, new_window_start: datetime) -> int:
        return self._update(subscription_id, {
            "monthly_usage_usd": 0,
            "monthly_window_start": new_window_start,
        })

    def increment_usage(self, subscription_id: int, cost_usd: float) -> int:
        """Add ``cost_usd`` to all three counters in one statement."""
        return self._update(subscription_id, {
            "daily_usage_usd": UserSubscription.daily_usage_usd + cost_usd,
            "weekly_usage_usd": UserSubscription.weekly_usage_usd + cost_usd,
            "monthly_usage_usd": UserSubscription.monthly_usage_usd + cost_usd,
        })

    def batch_update_expired_status(self, now: Optional[datetime] = None) -> int:
        """Flip active subscriptions past ``expires_at`` to expired; returns the count."""
        now = now or utcnow()
        with self.session_factory() as db:
            expired = db.query(UserSubscription).filter(
                UserSubscription.status == SUBSCRIPTION_STATUS_ACTIVE,
                UserSubscription.expires_at <= now,
            ).update(
                {"status": SUBSCRIPTION_STATUS_EXPIRED, "updated_at": utcnow()},
                synchronize_session=False,
            )
            db.commit()
        return expired
