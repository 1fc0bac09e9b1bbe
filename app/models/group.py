"""
Group Model

A rate plan. Subscriptions to a group are capped by its optional
per-window spend limits.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text

from app.database import Base


class Group(Base):
    """Rate plan with optional daily/weekly/monthly USD limits (NULL = unlimited)."""

    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    platform = Column(String(50), nullable=False, default="anthropic")
    status = Column(String(20), nullable=False, default="active")

    # Limits
    daily_limit_usd = Column(Numeric(20, 8, asdecimal=False), nullable=True)
    weekly_limit_usd = Column(Numeric(20, 8, asdecimal=False), nullable=True)
    monthly_limit_usd = Column(Numeric(20, 8, asdecimal=False), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Group {self.name}>"

    def has_daily_limit(self) -> bool:
        return self.daily_limit_usd is not None

    def has_weekly_limit(self) -> bool:
        return self.weekly_limit_usd is not None

    def has_monthly_limit(self) -> bool:
        return self.monthly_limit_usd is not None
