import math
from typing import Any


def js_number(value: Any) -> str:
    """Render a value the way ``String(value)`` does in a browser for plain numbers."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if value.is_integer():
            return str(int(value))
    return str(value)


def round_half_up(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return math.floor(number + 0.5)


def grouped_count(value: Any) -> str:
    """Grouped-digit rendering (en-US), at most three fraction digits; missing -> "0"."""
    if value is None or isinstance(value, bool):
        return "0"
    if isinstance(value, int):
        return f"{value:,}"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "0"
    if math.isnan(number) or math.isinf(number):
        return "0"
    if number.is_integer():
        return f"{int(number):,}"
    return f"{number:,.3f}".rstrip("0").rstrip(".")
