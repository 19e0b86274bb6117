"""
Price Parser — multi-currency price detection on OCR fragments.

Patterns are tried in order and the FIRST pattern with a hit wins:
  1. $-prefixed      "$12.99", "$ 12,99", "$12"
  2. €-prefixed      "€7,50"
  3. £-prefixed      "£9.00"
  4. ¥-prefixed      "¥1299", "¥12.99"
  5. symbol-suffixed "12.99$", "12,99 €"
  6. bare decimal    "12.99"
  7. bare comma      "12,99"

A hit is split into (value, currency). Currency is None for bare forms.
"""

from __future__ import annotations

import re
from typing import Iterable, List, NamedTuple, Optional, Tuple

from ..ocr_types import PriceInfo, TextFragment


class PricePattern(NamedTuple):
    label: str
    regex: "re.Pattern[str]"
    suffix: bool = False


PRICE_PATTERNS: Tuple[PricePattern, ...] = (
    PricePattern("USD", re.compile(r"[\$]\s*\d+(?:[.,]\d{2})?")),
    PricePattern("EUR", re.compile(r"[€]\s*\d+(?:[.,]\d{2})?")),
    PricePattern("GBP", re.compile(r"[£]\s*\d+(?:[.,]\d{2})?")),
    PricePattern("JPY/CNY", re.compile(r"[¥]\s*\d+(?:[.,]\d{2})?")),
    PricePattern("suffix", re.compile(r"\d+(?:[.,]\d{2})?\s*[\$€£¥]"), suffix=True),
    PricePattern("decimal", re.compile(r"\d+\.\d{2}")),
    PricePattern("comma", re.compile(r"\d+,\d{2}")),
)

CURRENCY_SYMBOLS: Tuple[str, ...] = ("$", "€", "£", "¥")


class PriceMatch(NamedTuple):
    value: str
    currency: Optional[str]
    original_text: str
    suffix: bool
    pattern: str


def find_price(text: str) -> Optional[PriceMatch]:
    """Return the first price hit in text, or None."""
    if not text:
        return None
    for pattern in PRICE_PATTERNS:
        m = pattern.regex.search(text)
        if not m:
            continue
        matched = m.group(0)
        value, currency = parse_price(matched)
        return PriceMatch(
            value=value,
            currency=currency,
            original_text=matched,
            suffix=pattern.suffix and currency is not None,
            pattern=pattern.label,
        )
    return None


def parse_price(price_text: str) -> Tuple[str, Optional[str]]:
    """
    Split a matched price into its numeric text and currency symbol.

      "$12.99"  -> ("12.99", "$")
      "12,99 €" -> ("12,99", "€")
      "12.99"   -> ("12.99", None)
    """
    for symbol in CURRENCY_SYMBOLS:
        if symbol in price_text:
            value = price_text.replace(symbol, "").strip()
            return value, symbol
    return price_text, None


def contains_price(text: str) -> bool:
    if not text:
        return False
    return any(p.regex.search(text) for p in PRICE_PATTERNS)


def strip_prices(text: str) -> str:
    """Remove every price substring (all patterns, applied in order)."""
    cleaned = text or ""
    for pattern in PRICE_PATTERNS:
        cleaned = pattern.regex.sub("", cleaned)
    return cleaned


def price_to_cents(value: str) -> Optional[int]:
    """
    Best-effort numeric normalization of a parsed price value.

      "12.99" -> 1299, "7,50" -> 750, "1299" -> 129900
    """
    raw = (value or "").strip().replace(" ", "")
    if not raw:
        return None
    m = re.fullmatch(r"(\d+)(?:[.,](\d{2}))?", raw)
    if not m:
        return None
    whole = int(m.group(1))
    cents = int(m.group(2) or "0")
    return whole * 100 + cents


# ------------------------
# Fragment-level extraction
# ------------------------

def extract_price_info(fragment: TextFragment) -> Optional[PriceInfo]:
    hit = find_price(fragment.text)
    if hit is None:
        return None
    return PriceInfo(
        value=hit.value,
        currency=hit.currency,
        bounding_box=fragment.bounding_box,
        confidence=fragment.confidence,
        original_text=hit.original_text,
        currency_suffix=hit.suffix,
    )


def extract_price_infos(fragments: Iterable[TextFragment]) -> List[PriceInfo]:
    """One PriceInfo per price-bearing fragment, in input order."""
    out: List[PriceInfo] = []
    for frag in fragments:
        info = extract_price_info(frag)
        if info is not None:
            out.append(info)
    return out
