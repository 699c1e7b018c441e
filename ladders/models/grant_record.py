"""Ledger entry for the most recent admin roll grant in an area."""
from datetime import datetime, UTC

from sqlalchemy import Column, DateTime, Integer, JSON, String

from ladders.database import Base


class GrantRecord(Base):
    """Undoable grant. The unique area key keeps at most one pending entry per area."""

    __tablename__ = "grant_records"

    grant_id = Column(Integer, primary_key=True, autoincrement=True)
    area = Column(String(20), unique=True, nullable=False)
    affected_emails = Column(JSON, nullable=False, default=list)
    rolls_granted = Column(Integer, nullable=False)  # signed amount requested
    applied_deltas = Column(JSON, nullable=False, default=dict)  # email -> change actually made after clamping
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)

    def __repr__(self) -> str:
        return (
            f"<GrantRecord(grant_id={self.grant_id}, area={self.area}, rolls_granted={self.rolls_granted}, "
            f"affected={len(self.affected_emails or [])})>"
        )
