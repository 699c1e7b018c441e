"""Per-area cap on high-tier rewards."""
from datetime import datetime, UTC

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, String

from ladders.database import Base


class AreaPrizeConfig(Base):
    """How many players in an area may receive the high-tier reward."""

    __tablename__ = "area_prize_configs"

    area = Column(String(20), primary_key=True)
    max_high_tier_winners = Column(Integer, default=0, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC), nullable=False, onupdate=lambda: datetime.now(UTC)
    )

    __table_args__ = (
        CheckConstraint("max_high_tier_winners >= 0", name="ck_area_prize_configs_max_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<AreaPrizeConfig(area={self.area}, max_high_tier_winners={self.max_high_tier_winners})>"
