"""
Small helpers that turn the modem's string values into numbers.

Everything the CODA56 sends back is a string, and not always a well-behaved one.
None of these raise: a value that can't be parsed becomes 0 so a single garbled field
never costs us the rest of the scrape.
"""

import math
import re

from coda56.util.const import LARGE_COUNTER_LIMIT

# Plain ASCII decimal, optional sign. int() alone would also take "1_000", " 12" and non-ASCII digits
_INTEGER = re.compile(r"[+-]?[0-9]+")


def to_float(raw: str) -> float:
    """Best effort float(); 0.0 on failure."""
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def to_int(raw: str) -> int:
    """Strict base 10 int(); 0 for anything that isn't a bare integer."""
    if not isinstance(raw, str) or not _INTEGER.fullmatch(raw):
        return 0
    return int(raw)


def parse_counter(raw: str) -> int:
    """OFDM octet counters are just plain integers, e.g. '53196813856'"""
    return to_int(raw)


def parse_large_counter(raw: str) -> int:
    """
    Decodes the QAM downstream octet counter.

    Firmware can't fit the byte count in a native int so once it rolls over, the value comes back as
        '53 * 2e32 + 4142950845'
    which is `multiplier * factor + remainder`. Before the first roll over it's just a plain integer.

    If the product blows past int64 max we only keep the remainder.
    The high-order term would represent an absurd amount of traffic so it's treated as a firmware artifact.
    """
    if isinstance(raw, str) and _INTEGER.fullmatch(raw):
        return int(raw)

    parts = raw.split(" + ")
    if len(parts) != 2:
        return 0

    high_parts = parts[0].split(" * ")
    if len(high_parts) != 2:
        return 0

    try:
        multiplier = float(high_parts[0])
        factor = float(high_parts[1])
        remainder = float(parts[1])
    except ValueError:
        return 0

    result = multiplier * factor + remainder

    if result > LARGE_COUNTER_LIMIT:
        # 'inf' remainder would make int() blow up
        if not math.isfinite(remainder):
            return 0
        return int(remainder)

    if not math.isfinite(result):
        return 0
    return int(result)


def strip_suffix_float(raw: str, suffix: str) -> float:
    """E.G.: '2500Mbps' -> 2500.0"""
    return to_float(raw.removesuffix(suffix))


def token_flag(raw: str, token: str) -> float:
    """1.0 if the (trimmed) value is exactly `token`, 0.0 otherwise.

    Comparison is case-sensitive; 'yes' is not 'YES'.
    """
    return 1.0 if raw.strip() == token else 0.0


def clean_label(raw: str) -> str:
    """Some fields come back padded with whitespace; we don't want that in label values."""
    return raw.strip()
