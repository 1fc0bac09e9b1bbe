"""
sub2api Database Models

All SQLAlchemy models are imported here for easy access.
"""

from app.models.proxy import Proxy
from app.models.account import Account
from app.models.group import Group
from app.models.subscription import UserSubscription
from app.models.usage_log import UsageLog

__all__ = [
    "Proxy",
    "Account",
    "Group",
    "UserSubscription",
    "UsageLog",
]
