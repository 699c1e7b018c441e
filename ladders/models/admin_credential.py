"""Singleton admin credential."""
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, Integer, String

from ladders.database import Base

ADMIN_CREDENTIAL_ID = 1


class AdminCredential(Base):
    """Shared admin username and bcrypt password hash (row id 1)."""

    __tablename__ = "admin_credentials"

    id = Column(Integer, primary_key=True, default=ADMIN_CREDENTIAL_ID)
    username = Column(String(80), nullable=False)
    password_hash = Column(String(255), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, onupdate=lambda: datetime.now(UTC)
    )

    def __repr__(self) -> str:
        return f"<AdminCredential(id={self.id}, username={self.username})>"
