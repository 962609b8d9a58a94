#nodeconfig_engine\core\validation.py
import re
from typing import Optional

from nodeconfig_engine.core import messages
from nodeconfig_engine.core.errors import ValidationError


UNSAFE_NAME_CHARACTERS = "?*/\\%!@#$^&|<>[]:;"

CRON_ALIASES = {"@yearly", "@annually", "@monthly", "@weekly", "@daily", "@midnight", "@hourly"}
CRON_FIELD = re.compile(r"^[0-9A-Za-z*/,\-()]+$")
INTEGER = re.compile(r"-?[0-9]+")


def check_good_name(name: str) -> None:
    """Reject node names the master cannot store."""
    if name is None or not name.strip():
        raise ValidationError("Name is required")

    name = name.strip()
    if name in (".", ".."):
        raise ValidationError(f"{name!r} is not an allowed name")

    for char in name:
        if char in UNSAFE_NAME_CHARACTERS:
            raise ValidationError(messages.unsafe_character(name, char))


def parse_num_executors(value) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid number of executors: {value!r}")
    try:
        num_executors = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid number of executors: {value!r}")

    if num_executors <= 0:
        raise ValidationError("Invalid number of executors: must be at least 1")
    return num_executors


def check_start_time_spec(spec: str) -> None:
    """
    Validate a cron-like schedule.

    One entry per line, five whitespace-separated fields or an @alias.
    Blank lines and # comments are ignored; an empty schedule is allowed.
    """
    for line_no, line in enumerate((spec or "").splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        fields = line.split()
        if len(fields) == 1 and fields[0] in CRON_ALIASES:
            continue

        if len(fields) != 5:
            raise ValidationError(
                f"Invalid schedule at line {line_no}: expected 5 fields, got {len(fields)}"
            )

        for cron_field in fields:
            if not CRON_FIELD.match(cron_field):
                raise ValidationError(
                    f"Invalid schedule at line {line_no}: bad field {cron_field!r}"
                )


def check_non_negative(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")

    if number < 0:
        raise ValidationError(f"{field_name} must not be negative")
    return number


def parse_integer(value) -> Optional[int]:
    """Plain decimal integer (optional minus, ASCII digits only), None otherwise."""
    if not isinstance(value, str) or not INTEGER.fullmatch(value):
        return None
    return int(value)
