"""
User Subscription Model

Binds a user to a group (rate plan) and tracks spend in three rolling
usage windows.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric, Text
from sqlalchemy.orm import relationship

from app.database import Base
from app.utils.clock import utcnow

SUBSCRIPTION_STATUS_ACTIVE = "active"
SUBSCRIPTION_STATUS_EXPIRED = "expired"
SUBSCRIPTION_STATUS_SUSPENDED = "suspended"

# Months are a fixed 30 days, not calendar months.
DAILY_WINDOW = timedelta(hours=24)
WEEKLY_WINDOW = timedelta(days=7)
MONTHLY_WINDOW = timedelta(days=30)


def _window_elapsed(start: Optional[datetime], period: timedelta, now: Optional[datetime]) -> bool:
    if start is None:
        return False
    return (now or utcnow()) - start >= period


def _window_end(start: Optional[datetime], period: timedelta) -> Optional[datetime]:
    if start is None:
        return None
    return start + period


def _within_limit(usage: float, limit: Optional[float], additional_cost: float) -> bool:
    if limit is None:
        return True
    return usage + additional_cost <= limit


class UserSubscription(Base):
    """
    A user's subscription to a group.

    Each window counter only means something relative to its own anchor.
    Anchors stay NULL until the windows are first activated, and a counter is
    only ever zeroed together with moving its anchor forward.
    """

    __tablename__ = "user_subscriptions"

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Ownership
    user_id = Column(Integer, nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)

    # Validity
    starts_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=SUBSCRIPTION_STATUS_ACTIVE, index=True)

    # Rolling window anchors
    daily_window_start = Column(DateTime, nullable=True)
    weekly_window_start = Column(DateTime, nullable=True)
    monthly_window_start = Column(DateTime, nullable=True)

    # Usage counters (USD)
    daily_usage_usd = Column(Numeric(20, 10, asdecimal=False), nullable=False, default=0)
    weekly_usage_usd = Column(Numeric(20, 10, asdecimal=False), nullable=False, default=0)
    monthly_usage_usd = Column(Numeric(20, 10, asdecimal=False), nullable=False, default=0)

    # Assignment
    assigned_by = Column(Integer, nullable=True)
    assigned_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    notes = Column(Text, nullable=False, default="")

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    group = relationship("Group", lazy="joined")

    def __repr__(self):
        return f"<UserSubscription {self.id} user={self.user_id} group={self.group_id} {self.status}>"

    # -------------------------------------------------------------------------
    # Lifetime
    # -------------------------------------------------------------------------

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Active status alone is not enough: the row may be stale past expiry."""
        now = now or utcnow()
        return self.status == SUBSCRIPTION_STATUS_ACTIVE and now < self.expires_at

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > self.expires_at

    def days_remaining(self, now: Optional[datetime] = None) -> int:
        """Whole days until expiry, floored; 0 once expired."""
        now = now or utcnow()
        if self.is_expired(now):
            return 0
        return int((self.expires_at - now).total_seconds() // 86400)

    # -------------------------------------------------------------------------
    # Windows
    # -------------------------------------------------------------------------

    def is_window_activated(self) -> bool:
        return (
            self.daily_window_start is not None
            or self.weekly_window_start is not None
            or self.monthly_window_start is not None
        )

    def needs_daily_reset(self, now: Optional[datetime] = None) -> bool:
        return _window_elapsed(self.daily_window_start, DAILY_WINDOW, now)

    def needs_weekly_reset(self, now: Optional[datetime] = None) -> bool:
        return _window_elapsed(self.weekly_window_start, WEEKLY_WINDOW, now)

    def needs_monthly_reset(self, now: Optional[datetime] = None) -> bool:
        return _window_elapsed(self.monthly_window_start, MONTHLY_WINDOW, now)

    def daily_reset_time(self) -> Optional[datetime]:
        return _window_end(self.daily_window_start, DAILY_WINDOW)

    def weekly_reset_time(self) -> Optional[datetime]:
        return _window_end(self.weekly_window_start, WEEKLY_WINDOW)

    def monthly_reset_time(self) -> Optional[datetime]:
        return _window_end(self.monthly_window_start, MONTHLY_WINDOW)

    # -------------------------------------------------------------------------
    # Limits
    # -------------------------------------------------------------------------

    def check_daily_limit(self, group, additional_cost: float) -> bool:
        """
        Pre-flight check: would adding ``additional_cost`` stay within the
        group's daily limit? Reaching the limit exactly is allowed.
        """
        return _within_limit(self.daily_usage_usd or 0.0, group.daily_limit_usd, additional_cost)

    def check_weekly_limit(self, group, additional_cost: float) -> bool:
        return _within_limit(self.weekly_usage_usd or 0.0, group.weekly_limit_usd, additional_cost)

    def check_monthly_limit(self, group, additional_cost: float) -> bool:
        return _within_limit(self.monthly_usage_usd or 0.0, group.monthly_limit_usd, additional_cost)

    def check_all_limits(self, group, additional_cost: float) -> Tuple[bool, bool, bool]:
        """Evaluate all three windows; returns (daily, weekly, monthly)."""
        daily = self.check_daily_limit(group, additional_cost)
        weekly = self.check_weekly_limit(group, additional_cost)
        monthly = self.check_monthly_limit(group, additional_cost)
        return daily, weekly, monthly
