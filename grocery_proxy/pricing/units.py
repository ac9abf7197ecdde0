"""Package-size parsing.

Sizes are reduced to a kilogram-equivalent scalar so differently sized packs
can be compared by unit price. Mass and volume are treated as interchangeable
(1 g == 1 ml), which is close enough for grocery comparisons but not exact
for anything much denser or lighter than water.
"""
import re
from typing import Optional

MULTI_PACK_RE = re.compile(r"(\d+)\s*x\s*(\d*\.?\d+)\s*(g|kg|ml|l)\b", re.IGNORECASE)
SINGLE_RE = re.compile(r"(\d*\.?\d+)\s*(g|kg|ml|l)\b", re.IGNORECASE)

UNIT_TO_KG = {
    "g": 0.001,
    "kg": 1.0,
    "ml": 0.001,
    "l": 1.0,
}


def unit_to_kg(amount: float, unit: Optional[str]) -> Optional[float]:
    factor = UNIT_TO_KG.get((unit or "").lower())
    if factor is None:
        return None
    if factor == 1.0:
        return amount
    return amount / 1000


def parse_size_to_kg(text: Optional[str]) -> Optional[float]:
    """Return the kilogram equivalent of a size string such as "2 x 250g" or "1L".

    Multi-pack notation is tried first, so "6 x 250g" is 1.5 and not 0.25.
    Returns None when nothing recognisable is found.
    """
    if not text:
        return None

    match = MULTI_PACK_RE.search(text)
    if match:
        per_pack = unit_to_kg(float(match.group(2)), match.group(3))
        return None if per_pack is None else int(match.group(1)) * per_pack

    match = SINGLE_RE.search(text)
    if match:
        return unit_to_kg(float(match.group(1)), match.group(2))
    return None
