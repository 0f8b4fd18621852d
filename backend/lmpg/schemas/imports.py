"""Roster import bodies — pasted spreadsheet text and bulk individual id lists."""

from pydantic import Field, field_validator

from lmpg.schemas.base import CamelModel


class PastedRoster(CamelModel):
    data: str = Field(min_length=1)

    @field_validator("data")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Data is required")
        return v


class IndividualIds(CamelModel):
    individual_ids: list[int] = Field(min_length=1)
