"""User ↔ Gathering assignment — which gatherings a non-admin user may see and edit."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from lmpg.db.base import Base
from lmpg.models._columns import utcnow


class UserGatheringAssignment(Base):
    __tablename__ = "user_gathering_assignments"
    __table_args__ = (
        UniqueConstraint("user_id", "gathering_type_id", name="unique_user_gathering"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False,
    )
    gathering_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("gathering_types.id", ondelete="CASCADE"), nullable=False,
    )
    assigned_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
