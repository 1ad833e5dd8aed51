from __future__ import annotations

from decimal import Decimal
from enum import Enum

from ..excel.money import round_amount

"""Vietnamese amount-in-words.

``amount_to_words(1001)`` -> ``"Một nghìn không trăm linh một đồng"``

The amount is split into base-1000 groups, most significant first, each read
by ``read_three_digits`` and followed by its scale word. Every group after the
leading one is read in full form, so a zero hundreds digit still says
"không trăm". Zero groups are skipped. The result is capitalized and the
currency suffix appended ("đồng" by default, "đồng chẵn." on some notices).

Pure and reentrant.
"""

__all__ = [
    "DIGIT_WORDS",
    "MAX_AMOUNT",
    "SCALE_WORDS",
    "TensContext",
    "UNIT_WORDS",
    "amount_to_words",
    "read_three_digits",
    "read_units",
]

DIGIT_WORDS: tuple[str, ...] = (
    "không", "một", "hai", "ba", "bốn", "năm", "sáu", "bảy", "tám", "chín",
)

# index = group position, 0 = least significant
SCALE_WORDS: tuple[str, ...] = ("", "nghìn", "triệu", "tỷ", "nghìn tỷ", "triệu tỷ")

MAX_AMOUNT = 1000 ** len(SCALE_WORDS) - 1

DEFAULT_SUFFIX = "đồng"


class TensContext(Enum):
    """Which tens digit precedes the units digit being read."""
    ABOVE_ONE = "tens>=2"
    ONE = "tens==1"
    ZERO = "tens==0"


# Irregular units readings; digits not listed read as DIGIT_WORDS[digit]
UNIT_WORDS: dict[tuple[TensContext, int], str] = {
    (TensContext.ABOVE_ONE, 0): "",
    (TensContext.ABOVE_ONE, 1): "mốt",
    (TensContext.ABOVE_ONE, 4): "tư",
    (TensContext.ABOVE_ONE, 5): "lăm",
    (TensContext.ONE, 0): "",
    (TensContext.ONE, 1): "một",
    (TensContext.ONE, 4): "bốn",
    (TensContext.ONE, 5): "lăm",
    (TensContext.ZERO, 0): "",
    (TensContext.ZERO, 5): "năm",
}


def read_units(context: TensContext, digit: int) -> str:
    return UNIT_WORDS.get((context, digit), DIGIT_WORDS[digit])


def read_three_digits(n: int, force_full_form: bool = False) -> str:
    """Read 0-999.

    ``force_full_form`` is set for every group that follows a higher one:
    ``read_three_digits(5, True)`` -> ``"không trăm linh năm"``.
    """
    if not 0 <= n <= 999:
        raise ValueError(f"three-digit group out of range: {n}")
    hundreds, tens, units = n // 100, (n % 100) // 10, n % 10

    words: list[str] = []
    if hundreds > 0:
        words.append(f"{DIGIT_WORDS[hundreds]} trăm")
    elif force_full_form and (tens > 0 or units > 0):
        words.append("không trăm")

    if tens > 1:
        words.append(f"{DIGIT_WORDS[tens]} mươi")
        words.append(read_units(TensContext.ABOVE_ONE, units))
    elif tens == 1:
        words.append("mười")
        words.append(read_units(TensContext.ONE, units))
    elif units > 0:
        if words:
            words.append("linh")
        words.append(read_units(TensContext.ZERO, units))

    return " ".join(w for w in words if w)


def _groups(amount: int) -> list[int]:
    groups: list[int] = []
    while amount > 0:
        groups.append(amount % 1000)
        amount //= 1000
    return groups[::-1]


def amount_to_words(amount: int | Decimal, suffix: str = DEFAULT_SUFFIX) -> str:
    """Render ``amount`` as Vietnamese text ending in ``suffix``.

    Amounts that round (half away from zero) to zero or below read as
    ``"Không <suffix>"``.

    Raises:
        ValueError: amount of 10^18 or more, or not a finite number
    """
    amount = Decimal(amount)
    if not amount.is_finite():
        raise ValueError(f"amount is not a number: {amount}")
    if amount <= 0:
        return f"Không {suffix}".rstrip()
    # checked before rounding: huge values overflow the decimal context
    if amount > MAX_AMOUNT + 1:
        raise ValueError(f"amount too large to read: {amount}")
    value = int(round_amount(amount))
    if value <= 0:
        return f"Không {suffix}".rstrip()
    if value > MAX_AMOUNT:
        raise ValueError(f"amount too large to read: {value}")

    groups = _groups(value)
    parts: list[str] = []
    for i, group in enumerate(groups):
        if group == 0:
            continue
        scale = SCALE_WORDS[len(groups) - 1 - i]
        text = read_three_digits(group, force_full_form=i > 0)
        parts.append(f"{text} {scale}".strip())

    result = " ".join(parts)
    result = result[0].upper() + result[1:]
    return f"{result} {suffix}".rstrip()
