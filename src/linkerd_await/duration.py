"""Parsing for human-written durations such as ``500ms`` or ``1m``."""

from linkerd_await.exceptions import InvalidDurationError

_UNIT_MILLISECONDS: dict[str, int] = {
    "ms": 1,
    "s": 1000,
    "m": 1000 * 60,
    "h": 1000 * 60 * 60,
    "d": 1000 * 60 * 60 * 24,
}

# Largest magnitude accepted, matching an unsigned 64-bit millisecond count.
_MAX_MILLISECONDS: int = 2**64 - 1


def parse_duration(text: str) -> float:
    """Parse a duration into seconds.

    The format is an integer magnitude followed by one of ``ms``, ``s``,
    ``m``, ``h`` or ``d``. Surrounding whitespace is ignored. A bare ``0`` is
    accepted without a unit.

    Args:
        text: The duration to parse.

    Returns:
        The duration in seconds.

    Raises:
        InvalidDurationError: If the text is not a valid duration.
    """
    stripped = text.strip()

    # Split after the last digit into magnitude and unit
    split_at = len(stripped)
    while split_at > 0 and not stripped[split_at - 1].isdigit():
        split_at -= 1
    magnitude_text, unit = stripped[:split_at], stripped[split_at:]

    if not magnitude_text or not magnitude_text.isascii() or not magnitude_text.isdigit():
        msg = f"invalid duration: {text!r}"
        raise InvalidDurationError(msg, value=text)

    magnitude = int(magnitude_text)
    if unit == "" and magnitude == 0:
        return 0.0

    multiplier = _UNIT_MILLISECONDS.get(unit)
    if multiplier is None:
        msg = f"invalid duration unit in {text!r}"
        raise InvalidDurationError(msg, value=text)

    milliseconds = magnitude * multiplier
    if milliseconds > _MAX_MILLISECONDS:
        msg = f"duration out of range: {text!r}"
        raise InvalidDurationError(msg, value=text)

    return milliseconds / 1000
