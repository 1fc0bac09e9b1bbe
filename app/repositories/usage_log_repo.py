"""Aggregations over usage logs for account statistics."""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func

from app.database import SessionLocal
from app.models.usage_log import UsageLog
from app.schemas.usage import (
    AccountUsageStatsResponse,
    AccountUsageSummary,
    DailyUsagePoint,
    ModelUsage,
    WindowStats,
)
from app.utils.clock import utcnow


def _token_sum():
    return func.coalesce(
        func.sum(
            UsageLog.input_tokens
            + UsageLog.output_tokens
            + UsageLog.cache_creation_tokens
            + UsageLog.cache_read_tokens
        ),
        0,
    )


class UsageLogRepository:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_account_window_stats(self, account_id: int, since: datetime) -> WindowStats:
        """Requests, tokens and list-price cost since ``since``."""
        with self.session_factory() as db:
            requests, tokens, cost = db.query(
                func.count(UsageLog.id),
                _token_sum(),
                func.coalesce(func.sum(UsageLog.total_cost), 0),
            ).filter(
                UsageLog.account_id == account_id,
                UsageLog.created_at >= since,
            ).one()

        return WindowStats(requests=requests or 0, tokens=int(tokens or 0), cost=float(cost or 0))

    def get_account_today_stats(self, account_id: int, now: Optional[datetime] = None) -> WindowStats:
        """Stats since UTC midnight."""
        now = now or utcnow()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return self.get_account_window_stats(account_id, midnight)

    def get_account_usage_stats(
        self,
        account_id: int,
        start: datetime,
        end: datetime,
    ) -> AccountUsageStatsResponse:
        """Per-day history and per-model breakdown for ``start <= created_at < end``."""
        day = func.date(UsageLog.created_at)

        with self.session_factory() as db:
            daily_rows = db.query(
                day.label("day"),
                func.count(UsageLog.id),
                _token_sum(),
                func.coalesce(func.sum(UsageLog.total_cost), 0),
                func.coalesce(func.sum(UsageLog.actual_cost), 0),
            ).filter(
                UsageLog.account_id == account_id,
                UsageLog.created_at >= start,
                UsageLog.created_at < end,
            ).group_by(day).order_by(day).all()

            model_rows = db.query(
                UsageLog.model,
                func.count(UsageLog.id),
                _token_sum(),
                func.coalesce(func.sum(UsageLog.total_cost), 0),
                func.coalesce(func.sum(UsageLog.actual_cost), 0),
            ).filter(
                UsageLog.account_id == account_id,
                UsageLog.created_at >= start,
                UsageLog.created_at < end,
            ).group_by(UsageLog.model).order_by(func.count(UsageLog.id).desc()).all()

        history = [
            DailyUsagePoint(
                date=str(row_day),
                requests=requests,
                tokens=int(tokens),
                cost=float(cost),
                actual_cost=float(actual_cost),
            )
            for row_day, requests, tokens, cost, actual_cost in daily_rows
        ]
        models = [
            ModelUsage(
                model=model,
                requests=requests,
                tokens=int(tokens),
                cost=float(cost),
                actual_cost=float(actual_cost),
            )
            for model, requests, tokens, cost, actual_cost in model_rows
        ]

        days = max(1, ((end - timedelta(microseconds=1)).date() - start.date()).days + 1)
        total_requests = sum(point.requests for point in history)
        total_cost = sum(point.cost for point in history)
        summary = AccountUsageSummary(
            days=days,
            total_requests=total_requests,
            total_tokens=sum(point.tokens for point in history),
            total_cost=total_cost,
            total_actual_cost=sum(point.actual_cost for point in history),
            avg_daily_requests=total_requests / days,
            avg_daily_cost=total_cost / days,
        )

        return AccountUsageStatsResponse(history=history, models=models, summary=summary)
