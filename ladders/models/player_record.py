"""Player record: one row per (email, area)."""
from datetime import datetime, UTC

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String

from ladders.database import Base


class PlayerRecord(Base):
    """Board progress, roll allowance and reward for a registered player."""

    __tablename__ = "players"

    email = Column(String(255), primary_key=True)  # lower-cased
    area = Column(String(20), primary_key=True)  # upper-cased
    position = Column(Integer, default=0, nullable=False)
    rolls_used = Column(Integer, default=0, nullable=False)
    rolls_granted = Column(Integer, default=0, nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    reward = Column(Integer, nullable=True)
    high_tier = Column(Boolean, default=False, nullable=False)  # reward came from the capped pool
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, onupdate=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        CheckConstraint("position >= 0", name="ck_players_position_non_negative"),
        CheckConstraint("position <= 30", name="ck_players_position_max"),
        CheckConstraint("rolls_used >= 0", name="ck_players_rolls_used_non_negative"),
        CheckConstraint("rolls_granted >= 0", name="ck_players_rolls_granted_non_negative"),
        Index("ix_players_area_high_tier", "area", "high_tier"),
    )

    @property
    def available_rolls(self) -> int:
        return max(0, (self.rolls_granted or 0) - (self.rolls_used or 0))

    def __repr__(self) -> str:
        return (
            f"<PlayerRecord(email={self.email}, area={self.area}, position={self.position}, "
            f"rolls_used={self.rolls_used}, rolls_granted={self.rolls_granted}, "
            f"completed={self.completed}, reward={self.reward}, high_tier={self.high_tier})>"
        )
