"""
Human-readable formatting of byte counts, rates, durations and percentages
"""

import math
from typing import Union

Number = Union[int, float]

_UNITS = " KMGTPEZY"


def _round_down(number: float, precision: int) -> float:
    factor = 10 ** precision
    # Nudge so that e.g. 1.15 * 100 == 114.999... still floors to 115
    return math.floor(number * factor + 1e-9) / factor


def format_number(n: Number, decimals: int = 0, integers: int = 1) -> str:
    """Round down to `decimals` places and group thousands"""
    n = _round_down(n, decimals)
    text = f"{n:,.{decimals}f}"
    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]
    whole, _, frac = text.partition(".")
    digits = len(whole.replace(",", ""))
    if digits < integers:
        whole = "0" * (integers - digits) + whole
    return sign + (f"{whole}.{frac}" if frac else whole)


def format_bytes(n: Number) -> str:
    """Format bytes with a 1000 divisor, e.g. 1234567 -> '1.23 MB'"""
    i = 0
    while abs(n) >= 1000 ** (i + 1) and i < len(_UNITS) - 1:
        i += 1
    if i == 0:
        return f"{format_number(n, 0)} B"
    return f"{format_number(n / 1000 ** i, 2)} {_UNITS[i]}B"


def format_rate(bytes_per_second: float) -> str:
    if not math.isfinite(bytes_per_second):
        return "infinite"
    return f"{format_bytes(bytes_per_second)}/s"


def format_duration(seconds: float) -> str:
    """Format as H:MM:SS, or 'forever' for a non-finite duration"""
    if not math.isfinite(seconds):
        return "forever"
    # Hours keep counting past a day
    hours, rest = divmod(int(max(seconds, 0)), 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_percent(ratio: float) -> str:
    if not math.isfinite(ratio):
        ratio = 1.0
    return f"{format_number(ratio * 100, 2)}%"


def parse_size(size_str: str) -> int:
    """Parse human-readable size"""
    size_str = size_str.strip().upper()

    # Order matters: longer suffixes first to avoid 'B' matching 'MB'
    multipliers = [
        ('TB', 1000**4),
        ('GB', 1000**3),
        ('MB', 1000**2),
        ('KB', 1000),
        ('B', 1),
    ]

    for suffix, multiplier in multipliers:
        if size_str.endswith(suffix):
            number = size_str[:-len(suffix)].strip()
            return int(float(number) * multiplier)

    return int(size_str)
