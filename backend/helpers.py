# helpers.py
from typing import Any, Optional
from datetime import datetime, timezone
import math

DEFAULT_LENGTH = 4
MIN_LENGTH, MAX_LENGTH = 2, 6

def _now() -> datetime:
    return datetime.now(timezone.utc)

def sanitize(value: Any, limit: Optional[int] = None) -> str:
    """Strip angle brackets and surrounding whitespace, then truncate to `limit` chars."""
    # non-strings (lists, numbers, objects) count as empty
    s = value if isinstance(value, str) else ""
    s = s.replace("<", "").replace(">", "").strip()
    return s[:limit] if limit is not None else s

def clamp(n: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, n))

def coerce_length(value: Any, default: int = DEFAULT_LENGTH) -> int:
    # bool is an int subclass; a checkbox-ish true/false is not a sentence count
    if value is None or isinstance(value, bool):
        return default
    try:
        num = float(str(value).strip())
    except ValueError:
        return default
    if math.isnan(num) or math.isinf(num):
        return default
    return clamp(int(num), MIN_LENGTH, MAX_LENGTH)
