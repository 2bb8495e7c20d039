from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Optional

# Plain decimal literal: sign, digits with optional fraction, optional exponent.
_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_finite(text: Optional[str]) -> Optional[float]:
    """
    Parse a decimal number from a query value.

    Returns None for missing/blank values, anything that is not a plain decimal
    literal (hex, underscores, 'nan', 'inf'), and values that overflow to inf.
    """
    if text is None:
        return None
    s = text.strip()
    if not _NUMBER_RE.fullmatch(s):
        return None
    v = float(s)
    if not math.isfinite(v):
        return None
    return v


def format_number(x: float) -> str:
    """
    Render a float the way ECMAScript Number#toString does.

    Shortest round-trip digits, integers without a trailing '.0', plain
    notation for 1e-7 < |x| < 1e21 and exponent notation ('1e-7', '1.5e+21')
    outside that band.
        format_number(5.0)      -> '5'
        format_number(-12.5)    -> '-12.5'
        format_number(0.00005)  -> '0.00005'
    """
    if not math.isfinite(x):
        raise ValueError("format_number requires a finite value")
    if x == 0:
        return "0"

    sign = "-" if x < 0 else ""
    dec = Decimal(repr(abs(x))).normalize()
    _, digit_tuple, exp = dec.as_tuple()
    digits = "".join(str(d) for d in digit_tuple)
    k = len(digits)
    n = k + int(exp)  # position of the decimal point relative to the digits

    if k <= n <= 21:
        out = digits + "0" * (n - k)
    elif 0 < n <= 21:
        out = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        out = "0." + "0" * (-n) + digits
    else:
        e = n - 1
        mantissa = digits[0] if k == 1 else digits[0] + "." + digits[1:]
        out = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
    return sign + out
