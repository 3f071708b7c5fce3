"""Amounts in figures → words, on the Indian numbering scale."""

from __future__ import annotations

import math

from loan_register.models import _to_non_negative_int

_ONES = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine"]
_TEENS = [
    "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen",
    "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

# (unit size, unit name, joiner before a non-zero remainder)
_SCALE: list[tuple[int, str, str]] = [
    (10_000_000, "Crore", " "),
    (100_000, "Lakh", " "),
    (1_000, "Thousand", " "),
    (100, "Hundred", " and "),
]

RUPEES_SUFFIX = " Rupees Only"


def words_of(n: int) -> str:
    """Return *n* spelled out in words, e.g. ``101`` → ``"One Hundred and One"``.

    Raises
    ------
    TypeError
        If *n* is not an integer.
    ValueError
        If *n* is negative.
    """
    n = _to_non_negative_int(n, "n")
    if n == 0:
        return "Zero"
    return _spell(n)


def _spell(n: int) -> str:
    if n < 10:
        return _ONES[n]
    if n < 20:
        return _TEENS[n - 10]
    if n < 100:
        tens, ones = divmod(n, 10)
        return _TENS[tens] + (f" {_ONES[ones]}" if ones else "")
    for size, name, joiner in _SCALE:
        if n >= size:
            head, rest = divmod(n, size)
            # Hundreds take a single digit; larger units recurse on the quotient.
            head_words = _ONES[head] if size == 100 else _spell(head)
            words = f"{head_words} {name}"
            if rest:
                words += joiner + _spell(rest)
            return words
    raise AssertionError("unreachable")  # pragma: no cover


def parse_figures(text: object) -> int | None:
    """Parse a figures field into a non-negative whole amount.

    Returns ``None`` (never raises) for empty, non-numeric, negative or
    non-finite input. Fractions are truncated: ``"12.9"`` → ``12``.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text if text >= 0 else None
    token = str(text).strip()
    if not token or "_" in token:
        return None
    if token.isascii() and token.isdigit():
        return int(token)
    try:
        value = float(token)
    except ValueError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return int(value)


def amount_in_words(text: object) -> str:
    """Words for a figures field (``"... Rupees Only"``), or ``""`` if unparseable."""
    amount = parse_figures(text)
    if amount is None:
        return ""
    return words_of(amount) + RUPEES_SUFFIX
