"""
Price Parser
============

Extracts prices from the loose strings found in catalog text.

Example inputs:
- "$79.99" → amount=79.99, currency_code="USD"
- "1,299.00" → amount=1299.00
- "USD 12" → amount=12, currency_code="USD"
- "49,90 €" → amount=49.90, currency_code="EUR"

Also locates price-like tokens inside a free-text line, which the
heuristic extraction strategy uses to split a line into title and price.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Annotated, Final

from pydantic import Field
from pydantic.dataclasses import dataclass


CURRENCY_CODES: Final[dict[str, str]] = {
    "$": "USD",
    "€": "EUR",
    "£": "GBP",
    "¥": "JPY",
    "₹": "INR",
    "usd": "USD",
    "dollar": "USD",
    "dollars": "USD",
    "eur": "EUR",
    "euro": "EUR",
    "euros": "EUR",
    "gbp": "GBP",
    "inr": "INR",
    "rs": "INR",
}

_SYMBOLS: Final[str] = "$€£¥₹"

# A price-like token inside free text: currency-marked amounts, or bare
# amounts with exactly two decimals. Bare integers are too ambiguous
# (sizes, model numbers, years) to count as prices.
_AMOUNT: Final[str] = r"(?:\d{1,3}(?:,\d{3})+|\d+)"

PRICE_TOKEN_PATTERN: Final[re.Pattern[str]] = re.compile(
    rf"[$€£¥₹]\s?{_AMOUNT}(?:[.,]\d{{1,2}})?(?!\d)"
    rf"|(?i:\b(?:usd|eur|gbp|inr|rs\.?))\s?{_AMOUNT}(?:[.,]\d{{1,2}})?(?!\d)"
    rf"|(?<![\w.,]){_AMOUNT}(?:[.,]\d{{1,2}})?\s?(?:[€£]|(?i:usd|eur|dollars?)\b)"
    rf"|(?<![\w.,]){_AMOUNT}\.\d{{2}}(?![\w.])"
)


@dataclass(frozen=True)
class PriceResult:
    """
    Parsed price, or the reason there is none.

    Attributes:
        amount: Parsed amount
        currency_code: ISO 4217 code when a symbol or word named one
        raw_value: Input as received, stripped
        was_parsed: False when no amount could be read
    """

    amount: Annotated[
        Decimal | None,
        Field(default=None, description="Parsed amount"),
    ] = None
    currency_code: Annotated[
        str | None,
        Field(default=None, min_length=3, max_length=3, description="ISO 4217 code"),
    ] = None
    raw_value: Annotated[
        str | None,
        Field(default=None, description="Input as received"),
    ] = None
    was_parsed: Annotated[
        bool,
        Field(default=False, description="Amount was read"),
    ] = False


def detect_currency(value: str) -> str | None:
    """
    Return the ISO code named by a symbol or word in ``value``.

    Examples:
        >>> detect_currency("$79.99")
        'USD'
        >>> detect_currency("12 euros")
        'EUR'
        >>> detect_currency("79.99")
        None
    """
    if not value:
        return None

    for symbol in _SYMBOLS:
        if symbol in value:
            return CURRENCY_CODES[symbol]

    words = re.findall(r"[a-z]+", value.lower())
    for word in words:
        if word in CURRENCY_CODES:
            return CURRENCY_CODES[word]

    return None


def extract_price(value: str | int | float | Decimal | None) -> PriceResult:
    """
    Read an amount and currency from a catalog price field.

    Args:
        value: Raw field; numbers are taken as-is

    Returns:
        PriceResult; ``was_parsed`` is False when no amount could be read.
    """
    if value is None or isinstance(value, bool):
        return PriceResult(raw_value=None if value is None else str(value), was_parsed=False)

    if isinstance(value, (int, float, Decimal)):
        try:
            return PriceResult(amount=Decimal(str(value)), raw_value=str(value), was_parsed=True)
        except (InvalidOperation, ValueError):
            return PriceResult(raw_value=str(value), was_parsed=False)

    if not isinstance(value, str):
        return PriceResult(raw_value=str(value), was_parsed=False)

    raw_value = value.strip()
    if not raw_value:
        return PriceResult(raw_value=raw_value, was_parsed=False)

    currency_code = detect_currency(raw_value)
    cleaned = _strip_to_number(raw_value)

    try:
        amount = Decimal(cleaned) if cleaned else None
    except (InvalidOperation, ValueError):
        amount = None

    return PriceResult(
        amount=amount,
        currency_code=currency_code,
        raw_value=raw_value,
        was_parsed=amount is not None,
    )


def find_price_token(line: str) -> tuple[re.Match[str], Decimal] | None:
    """
    Find the first price-like token in a line of text.

    Args:
        line: A single line of catalog text

    Returns:
        ``(match, amount)`` for the first parseable token, or None.
    """
    for match in PRICE_TOKEN_PATTERN.finditer(line):
        result = extract_price(match.group(0))
        if result.was_parsed and result.amount is not None:
            return match, result.amount
    return None


def _strip_to_number(value: str) -> str:
    """Strip currency markers and normalize separators for Decimal conversion."""
    cleaned = re.sub(f"[{re.escape(_SYMBOLS)}]", "", value)
    cleaned = re.sub(r"(?i)\b(usd|dollars?|eur|euros?|gbp|inr|rs)\b\.?", "", cleaned)
    cleaned = re.sub(r"\s+", "", cleaned)

    # Ranges like "10-15": keep the lower bound
    if re.fullmatch(r"[\d.,]+-[\d.,]+", cleaned):
        cleaned = cleaned.split("-")[0]

    if not re.fullmatch(r"[\d.,]+", cleaned or ""):
        return ""

    return _to_decimal_syntax(cleaned)


def _to_decimal_syntax(value: str) -> str:
    """
    Rewrite a digits-and-separators string into Decimal syntax.

    - "1,234.56" → "1234.56" (comma thousands)
    - "1.234,56" → "1234.56" (dot thousands)
    - "1234,56" → "1234.56"
    - "1,234,567" → "1234567"
    """
    has_comma = "," in value
    has_dot = "." in value

    if has_comma and has_dot:
        # The last separator is the decimal one
        if value.rfind(",") > value.rfind("."):
            return value.replace(".", "").replace(",", ".")
        return value.replace(",", "")

    if has_comma:
        parts = value.split(",")
        if len(parts) == 2 and len(parts[1]) <= 2:
            return value.replace(",", ".")
        return value.replace(",", "")

    if has_dot:
        parts = value.split(".")
        if len(parts) > 2:
            if len(parts[-1]) <= 2:
                return "".join(parts[:-1]) + "." + parts[-1]
            return "".join(parts)

    return value
