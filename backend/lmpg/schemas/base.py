"""Shared pydantic base: camelCase aliases on the wire, snake_case in Python."""

from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, use_enum_values=True,
    )


def strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be empty or whitespace")
    return v


# 1-255 chars, surrounding whitespace removed
Name = Annotated[str, Field(min_length=1, max_length=255), AfterValidator(strip_required)]
