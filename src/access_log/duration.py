"""Human-readable duration strings.

Renders elapsed nanoseconds as ``"850ns"``, ``"1.5ms"``, ``"2.003s"``,
``"1m4s"`` or ``"1h0m0s"``: the largest unit wins below one second,
``h``/``m``/``s`` components above it. Trailing fractional zeros are dropped.
"""

_NANOSECOND = 1
_MICROSECOND = 1_000
_MILLISECOND = 1_000_000
_SECOND = 1_000_000_000

_SUBSECOND_UNITS: tuple[tuple[int, str], ...] = (
    (_MILLISECOND, "ms"),
    (_MICROSECOND, "µs"),
    (_NANOSECOND, "ns"),
)


def _with_fraction(value: int, scale: int) -> str:
    """Format ``value / scale`` without trailing zeros in the fraction."""
    whole, remainder = divmod(value, scale)
    if not remainder:
        return str(whole)
    width = len(str(scale)) - 1
    digits = str(remainder).rjust(width, "0").rstrip("0")
    return f"{whole}.{digits}"


def format_duration(nanoseconds: int) -> str:
    """Render a nanosecond count as a compact duration string.

    Args:
        nanoseconds: Elapsed time in nanoseconds. Negative values
            are prefixed with ``-``.

    Returns:
        Duration string, ``"0s"`` for zero.
    """
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    magnitude = abs(nanoseconds)

    if magnitude < _SECOND:
        for scale, unit in _SUBSECOND_UNITS:
            if magnitude >= scale:
                return f"{sign}{_with_fraction(magnitude, scale)}{unit}"

    total_seconds, fraction = divmod(magnitude, _SECOND)
    minutes, seconds = divmod(total_seconds, 60)
    hours, minutes = divmod(minutes, 60)

    text = f"{_with_fraction(seconds * _SECOND + fraction, _SECOND)}s"
    if hours:
        text = f"{hours}h{minutes}m{text}"
    elif minutes:
        text = f"{minutes}m{text}"
    return sign + text
