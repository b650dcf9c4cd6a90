"""Byte size constants and human-readable formatting."""

KiB = 1024
MiB = 1024 * KiB
GiB = 1024 * MiB

_PREFIXES = ("", "Ki", "Mi", "Gi", "Ti", "Pi", "Ei")


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def format_iec(num_bytes: int) -> str:
    """Render a byte count with binary prefixes, e.g. ``4.0GiB``.

    Follows ``numfmt --to=iec``: one decimal below ten, whole numbers
    above, always rounded away from zero.
    """
    sign = "-" if num_bytes < 0 else ""
    value = abs(int(num_bytes))
    if value < KiB:
        return f"{sign}{value}B"

    exponent = 0
    while value >= 1024 ** (exponent + 1) and exponent < len(_PREFIXES) - 1:
        exponent += 1
    divisor = 1024**exponent

    tenths = _ceil_div(value * 10, divisor)
    if tenths < 100:
        return f"{sign}{tenths // 10}.{tenths % 10}{_PREFIXES[exponent]}B"

    whole = _ceil_div(value, divisor)
    if whole >= 1024 and exponent < len(_PREFIXES) - 1:
        return f"{sign}1.0{_PREFIXES[exponent + 1]}B"
    return f"{sign}{whole}{_PREFIXES[exponent]}B"
