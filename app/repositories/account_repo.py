"""Account persistence."""

from typing import List, Optional

from app.database import SessionLocal
from app.models.account import Account, ACCOUNT_STATUS_ACTIVE


class AccountRepository:
    """Loads and saves upstream accounts. Returned rows are detached."""

    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_by_id(self, account_id: int) -> Optional[Account]:
        with self.session_factory() as db:
            return db.query(Account).filter(Account.id == account_id).first()

    def list_active(self) -> List[Account]:
        with self.session_factory() as db:
            return (
                db.query(Account)
                .filter(Account.status == ACCOUNT_STATUS_ACTIVE)
                .order_by(Account.id)
                .all()
            )

    def update(self, account: Account) -> Account:
        """Persist every column of ``account``; returns the saved row."""
        with self.session_factory() as db:
            saved = db.merge(account)
            db.commit()
            return saved
