"""Response key casing — database rows are snake_case, the web client reads camelCase."""

import re
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any

_SNAKE_RE = re.compile(r"_([a-z0-9])")


def snake_to_camel(name: str) -> str:
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), name)


def to_camel_keys(value: Any) -> Any:
    """Recursively camelCase dict keys; normalize dates, times and decimals for JSON."""
    if isinstance(value, dict):
        return {snake_to_camel(str(k)): to_camel_keys(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_camel_keys(v) for v in value]
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value
