"""Fixed-point money in paise (1/100 rupee).

Every amount is a plain non-negative ``int`` of the smallest currency unit.
Floats never enter the arithmetic; decimal text is parsed digit by digit.
"""

import re

PAISE_PER_RUPEE = 100

# Largest amount a stored money column (signed 64-bit) can hold
MAX_PAISE = 2**63 - 1

# ASCII digits only; other scripts' numerals are stripped like any symbol
_NON_NUMERIC = re.compile(r"[^0-9.]")


def parse_money(text) -> int:
    """
    Convert human decimal text to paise. Never raises.

    Everything except digits and the decimal point is stripped first. The
    fractional part is padded or truncated to exactly two digits.

    Example:
        "12.5"     -> 1250
        "₹1,250.999" -> 125099
        "abc"      -> 0
    """
    if text is None:
        return 0

    cleaned = _NON_NUMERIC.sub("", str(text))
    if not cleaned or cleaned == ".":
        return 0

    parts = cleaned.split(".")
    try:
        whole = int(parts[0]) if parts[0] else 0
    except ValueError:
        # Beyond the interpreter's int-conversion digit limit
        return 0
    fraction = (parts[1] if len(parts) > 1 else "") + "00"

    return whole * PAISE_PER_RUPEE + int(fraction[:2])


def format_money(paise: int) -> str:
    """Render paise as "rupees.paise" with two fractional digits, no symbol"""
    if paise < 0:
        raise ValueError(f"Money cannot be negative: {paise}")
    return f"{paise // PAISE_PER_RUPEE}.{paise % PAISE_PER_RUPEE:02d}"


def add_money(a: int, b: int) -> int:
    return a + b


def subtract_money(a: int, b: int) -> int:
    """a - b, refusing to go below zero"""
    if b > a:
        raise ValueError(f"Cannot subtract {b} from {a}: result would be negative")
    return a - b


def multiply_then_scale_down(a: int, b: int) -> int:
    """
    Multiply two paise-scaled values and scale the product back to paise.

    Quantity and unit price are both parsed into smallest units, so their
    product is in paise squared. One division by 100 brings it back; floor
    division drops the sub-paise remainder.

    Example:
        quantity "10" -> 1000, price "250.00" -> 25000
        1000 * 25000 // 100 = 250000 (2500.00)
    """
    return (a * b) // PAISE_PER_RUPEE
