"""Onboarding Schemas — wizard step bodies for /api/onboarding."""

from pydantic import EmailStr, Field, field_validator

from lmpg.core.countries import supports_mobile_numbers
from lmpg.core.domain_types import DayOfWeek, Frequency
from lmpg.core.schedule import TIME_PATTERN
from lmpg.schemas.base import CamelModel, Name


class ChurchInfo(CamelModel):
    church_name: Name
    country_code: str = Field(pattern=r"^[A-Za-z]{2}$")
    timezone: str | None = None
    email_from_name: str | None = Field(None, max_length=255)
    email_from_address: EmailStr | None = None

    @field_validator("country_code")
    @classmethod
    def supported_country(cls, v: str) -> str:
        if not supports_mobile_numbers(v):
            raise ValueError("Country not supported")
        return v.upper()


class OnboardingGathering(CamelModel):
    name: Name
    description: str | None = None
    day_of_week: DayOfWeek
    start_time: str = Field(pattern=TIME_PATTERN)
    duration_minutes: int = Field(ge=15, le=480)
    frequency: Frequency

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str | None) -> str | None:
        return v.strip() if v is not None else v


class ProgressData(CamelModel):
    church_info: dict | None = None
    gatherings: list | None = None
    csv_upload: dict | None = None


class SaveProgress(CamelModel):
    current_step: int = Field(ge=1, le=4)
    data: ProgressData | None = None
