"""Proxy persistence."""

from typing import Optional

from app.database import SessionLocal
from app.models.proxy import Proxy


class ProxyRepository:
    def __init__(self, session_factory=SessionLocal):
        self.session_factory = session_factory

    def get_by_id(self, proxy_id: int) -> Optional[Proxy]:
        with self.session_factory() as db:
            return db.query(Proxy).filter(Proxy.id == proxy_id).first()
