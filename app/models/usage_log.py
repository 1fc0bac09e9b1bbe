"""
Usage Log Model

One row per proxied request, written by the gateway and read here for
account window statistics.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey, Numeric

from app.database import Base


class UsageLog(Base):
    """Per-request token and cost record."""

    __tablename__ = "usage_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(Integer, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    model = Column(String(100), nullable=False)

    # Tokens
    input_tokens = Column(BigInteger, nullable=False, default=0)
    output_tokens = Column(BigInteger, nullable=False, default=0)
    cache_creation_tokens = Column(BigInteger, nullable=False, default=0)
    cache_read_tokens = Column(BigInteger, nullable=False, default=0)

    # Cost (USD). total_cost is list price, actual_cost after rate multipliers.
    total_cost = Column(Numeric(20, 10, asdecimal=False), nullable=False, default=0)
    actual_cost = Column(Numeric(20, 10, asdecimal=False), nullable=False, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    def __repr__(self):
        return f"<UsageLog account={self.account_id} model={self.model}>"

    @property
    def total_tokens(self) -> int:
        return (
            (self.input_tokens or 0)
            + (self.output_tokens or 0)
            + (self.cache_creation_tokens or 0)
            + (self.cache_read_tokens or 0)
        )
