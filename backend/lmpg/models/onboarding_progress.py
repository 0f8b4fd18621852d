"""Onboarding Progress ORM — where each admin is in the setup wizard.

Invariants:
    - One row per user (user_id unique)
    - completed_steps is a JSON list of step numbers without duplicates
"""

from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from lmpg.db.base import Base
from lmpg.models._columns import utcnow


class OnboardingProgress(Base):
    __tablename__ = "onboarding_progress"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True,
    )
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    church_info: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    gatherings: Mapped[list | None] = mapped_column(JSON, nullable=True)
    csv_upload: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    completed_steps: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "current_step": self.current_step,
            "church_info": self.church_info,
            "gatherings": self.gatherings,
            "csv_upload": self.csv_upload,
            "completed_steps": self.completed_steps or [],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
