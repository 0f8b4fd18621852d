"""Gathering List ORM — roster membership of an individual in a gathering."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lmpg.db.base import Base
from lmpg.models._columns import utcnow


class GatheringList(Base):
    __tablename__ = "gathering_lists"
    __table_args__ = (
        UniqueConstraint(
            "gathering_type_id", "individual_id", name="unique_gathering_individual",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    gathering_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("gathering_types.id", ondelete="CASCADE"), nullable=False,
    )
    individual_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("individuals.id", ondelete="CASCADE"), nullable=False,
    )
    added_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
