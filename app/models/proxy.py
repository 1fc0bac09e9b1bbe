"""
Proxy Model

Outbound HTTP/SOCKS proxy that upstream accounts can be pinned to.
"""

from datetime import datetime
from urllib.parse import quote

from sqlalchemy import Column, Integer, String, DateTime

from app.database import Base


class Proxy(Base):
    """Outbound proxy configuration."""

    __tablename__ = "proxies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    protocol = Column(String(20), nullable=False, default="http")  # http, https, socks5
    host = Column(String(255), nullable=False)
    port = Column(Integer, nullable=False)
    username = Column(String(100), nullable=True)
    password = Column(String(100), nullable=True)
    status = Column(String(20), nullable=False, default="active", index=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Proxy {self.name} {self.protocol}://{self.host}:{self.port}>"

    @property
    def url(self) -> str:
        """Proxy URL in the form httpx expects."""
        auth = ""
        if self.username:
            auth = quote(self.username, safe="")
            if self.password:
                auth += ":" + quote(self.password, safe="")
            auth += "@"
        return f"{self.protocol}://{auth}{self.host}:{self.port}"
