from __future__ import annotations
import re
from .utils import DASH_RE

def parse_count(s: str | None) -> int | None:
    """
    Value of a counter token: all digits (thousands separators allowed) or a
    lone dash for zero. Anything else, labels like "2穴" included, is None.
    """
    if not s:
        return None
    s = re.sub(r"[\s,，]+", "", s)
    if DASH_RE.fullmatch(s):
        return 0
    if re.fullmatch(r"\d+", s):
        return int(s)
    return None

def in_range(value: int, bounds: tuple[int, int] | None) -> bool:
    if bounds is None:
        return True
    lo, hi = bounds
    return lo <= value <= hi

def apply_ranges(
    values: dict[str, int],
    ranges: dict[str, tuple[int, int]],
) -> tuple[dict[str, int], dict[str, int]]:
    """
    Drop (never clamp) values outside their field's [min, max].
    Fields without a configured range pass through.
    Returns (kept, dropped).
    """
    kept: dict[str, int] = {}
    dropped: dict[str, int] = {}
    for field, v in values.items():
        if in_range(v, ranges.get(field)):
            kept[field] = v
        else:
            dropped[field] = v
    return kept, dropped
