"""Church Settings ORM — one row per church, written by the onboarding wizard."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from lmpg.db.base import Base
from lmpg.models._columns import utcnow


class ChurchSettings(Base):
    __tablename__ = "church_settings"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    church_id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    church_name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False, default="AU")
    timezone: Mapped[str] = mapped_column(
        String(50), nullable=False, default="America/New_York",
    )
    email_from_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email_from_address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "church_name": self.church_name,
            "country_code": self.country_code,
            "timezone": self.timezone,
            "email_from_name": self.email_from_name,
            "email_from_address": self.email_from_address,
            "onboarding_completed": self.onboarding_completed,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
