"""Map provider-specific result payloads onto ProductRecord.

Coles and Woolworths disagree on field names and casing (``productName`` vs
``Name`` vs ``product_name``), so each logical field is resolved from an
ordered list of candidate keys.
"""
import logging
import math
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

from grocery_proxy.app.schemas import ProductRecord

logger = logging.getLogger(__name__)

NAME_KEYS = ("productName", "name")
SIZE_KEYS = ("productSize", "packageSize", "size")
PRICE_KEYS = ("currentPrice", "price", "Price")
URL_KEYS = ("productUrl", "url", "link")
ID_KEYS = ("productId", "id", "sku")

_NON_NUMERIC = re.compile(r"[^\d.]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")
_KEY_SEPARATORS = re.compile(r"[\s_\-]")


def _fold_key(key: Any) -> str:
    return _KEY_SEPARATORS.sub("", str(key)).lower()


def fold_keys(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """Index a payload by case- and separator-insensitive key. The first spelling wins."""
    folded: Dict[str, Any] = {}
    for key, value in payload.items():
        folded.setdefault(_fold_key(key), value)
    return folded


def pick(payload: Mapping[str, Any], candidates: Sequence[str]) -> Any:
    """Return the first candidate field holding a value (not None, not "")."""
    folded = fold_keys(payload)
    for name in candidates:
        value = folded.get(_fold_key(name))
        if value is not None and value != "":
            return value
    return None


def to_number(value: Any) -> Optional[float]:
    """Coerce a provider price to float, tolerating "$", "," and stray whitespace."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(_NON_NUMERIC.sub("", value))
        if not match:
            return None
        number = float(match.group())
    else:
        try:
            number = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
    return number if math.isfinite(number) else None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def normalize_record(raw: Any) -> ProductRecord:
    if not isinstance(raw, Mapping):
        logger.debug("Skipping fields of non-object result: %r", raw)
        raw = {}

    url = pick(raw, URL_KEYS)
    return ProductRecord(
        product=_text(pick(raw, NAME_KEYS)),
        size=_text(pick(raw, SIZE_KEYS)),
        price=to_number(pick(raw, PRICE_KEYS)),
        url=None if url is None else str(url),
        id=_text(pick(raw, ID_KEYS)),
    )


def normalize_results(body: Any) -> List[ProductRecord]:
    """Normalize the ``results`` array of an upstream body; a missing array is an empty result."""
    results = body.get("results") if isinstance(body, Mapping) else None
    if not isinstance(results, list):
        return []
    return [normalize_record(raw) for raw in results]
