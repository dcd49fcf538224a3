"""
Text helpers shared by the grading engine and the result models.

Normalization is the single rule used for every free-text comparison:
lower-case, collapse whitespace runs to one space, trim.
"""

import math
import re
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

_WHITESPACE = re.compile(r"\s+")


def normalize(value: Any) -> str:
    """Normalize a value for comparison. ``None`` becomes the empty string."""
    if value is None:
        return ""
    return _WHITESPACE.sub(" ", str(value).lower()).strip()


def normalize_set(values: Any) -> frozenset[str]:
    """
    Normalize every item of a selection into a set.

    Duplicates collapse after normalization. Anything that is not a
    list, tuple or set is treated as an empty selection.
    """
    if not isinstance(values, (list, tuple, set, frozenset)):
        return frozenset()
    return frozenset(normalize(v) for v in values)


def pretty_print(value: Any) -> str:
    """
    Render an answer as a single display string.

    Lists join with ", " and ``None`` renders as "".
    """
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    if value is None:
        return ""
    return str(value)


def percent(correct: int, total: int) -> int:
    """
    Integer percentage rounded to the nearest whole number.

    Returns 0 when ``total`` is 0. Halves round up, so percent(1, 8) == 13.
    """
    if not total:
        return 0
    ratio = Decimal(correct) / Decimal(total) * 100
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def count_words(normalized_text: str) -> int:
    """Count words in already-normalized text."""
    return len([w for w in normalized_text.split(" ") if w])


def coerce_int(value: Any, default: int = 0) -> int:
    """
    Leniently parse an integer from JSON-ish input.

    Accepts ints, integral floats and numeric strings ("3", " 4 ", "5.0").
    Booleans, ``None`` and anything unparseable give ``default``.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return int(float(text))
        except (ValueError, OverflowError):
            return default
    return default
