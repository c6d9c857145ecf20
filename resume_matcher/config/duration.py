"""Duration parsing for the dispatch interval setting."""

import re

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}

_ISO_PATTERN = re.compile(
    r"^P(?:(?P<d>\d+)D)?(?:T(?:(?P<h>\d+)H)?(?:(?P<m>\d+)M)?(?:(?P<s>\d+)S)?)?$"
)
_HUMAN_PATTERN = re.compile(r"(\d+)([smhd])")


class DurationParseError(ValueError):
    """Raised when a duration string cannot be parsed or is out of range."""


def parse_duration(duration_str: str) -> int:
    """Parse a duration string to seconds.

    Accepts human-readable values ("30m", "6h", "1d", "1h30m") and ISO-8601
    durations ("PT6H", "P1D", "PT1H30M").

    Raises:
        DurationParseError: If the string is empty, malformed or zero

    Examples:
        >>> parse_duration("6h")
        21600
        >>> parse_duration("PT15M")
        900
    """
    cleaned = re.sub(r"\s+", "", duration_str or "").lower()
    if not cleaned:
        raise DurationParseError("Duration string cannot be empty")

    if cleaned.startswith("p"):
        match = _ISO_PATTERN.match(cleaned.upper())
        if not match:
            raise DurationParseError(
                f"Invalid ISO-8601 duration format: '{duration_str}'. "
                "Expected format like 'P1D', 'PT6H' or 'PT30M'"
            )
        total = sum(
            int(value) * _UNIT_SECONDS[unit.lower()]
            for unit, value in match.groupdict().items()
            if value
        )
    else:
        pieces = _HUMAN_PATTERN.findall(cleaned)
        if not pieces or "".join(num + unit for num, unit in pieces) != cleaned:
            raise DurationParseError(
                f"Invalid duration format: '{duration_str}'. "
                "Use digits with units s, m, h or d (e.g. '30m', '6h', '1h30m')"
            )
        total = sum(int(num) * _UNIT_SECONDS[unit] for num, unit in pieces)

    if total == 0:
        raise DurationParseError(f"Duration cannot be zero: '{duration_str}'")
    return total


def validate_duration_range(
    duration_seconds: int,
    min_seconds: int = 300,
    max_seconds: int = 86400,
) -> None:
    """Check that a duration lies within [min_seconds, max_seconds].

    Raises:
        DurationParseError: If the duration is outside the range
    """
    if duration_seconds < min_seconds:
        raise DurationParseError(
            f"Dispatch interval too short: {describe_seconds(duration_seconds)}. "
            f"Minimum is {describe_seconds(min_seconds)}."
        )
    if duration_seconds > max_seconds:
        raise DurationParseError(
            f"Dispatch interval too long: {describe_seconds(duration_seconds)}. "
            f"Maximum is {describe_seconds(max_seconds)}."
        )


def describe_seconds(seconds: int) -> str:
    """Render seconds with the largest whole unit ("15 minutes", "1 day")."""
    for name, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {name}{'s' if count != 1 else ''}"
    return f"{seconds} second{'s' if seconds != 1 else ''}"
