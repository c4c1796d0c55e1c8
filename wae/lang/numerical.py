"""Numbers in WAE are IEEE 754 doubles (Python floats). Python's float division raises on a zero divisor instead of
producing an infinity or NaN, so division is implemented here.

Source: https://en.wikipedia.org/wiki/IEEE_754#Exception_handling
"""

import math


def divide(left, right):
    """Returns left / right, with x / 0 = ±inf and 0 / 0 = nan."""
    try:
        return left / right
    except ZeroDivisionError:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)  # right is ±0.0


def numberify(value):
    """Returns str(value), without the trailing '.0' for integral values. The result is valid WAE number grammar if
    value is finite and non-negative.
    """
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    return repr(value)
