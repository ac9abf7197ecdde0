"""Pick the cheapest records across stores.

Records are tagged with the store they were fetched from. Untagged records
fall back to a URL heuristic, which only works while every store's name
appears in its product links and no two names overlap.
"""
from typing import Iterable, List, NamedTuple, Optional, Sequence

from grocery_proxy.app.schemas import AttributedRecord, ComparisonResult, ProductRecord
from grocery_proxy.tools.store_client import Store


class Candidate(NamedTuple):
    store: Optional[Store]
    record: ProductRecord


def tag(store: Optional[Store], records: Iterable[ProductRecord]) -> List[Candidate]:
    return [Candidate(store, record) for record in records]


def infer_store(url: Optional[str]) -> Optional[Store]:
    lowered = (url or "").lower()
    # first match wins
    for store in (Store.WOOLWORTHS, Store.COLES):
        if store.value in lowered:
            return store
    return None


def attribute(candidate: Optional[Candidate]) -> Optional[AttributedRecord]:
    if candidate is None:
        return None
    store = candidate.store or infer_store(candidate.record.url)
    return AttributedRecord.from_record(candidate.record, store.value if store else None)


def _priced(candidate_lists: Sequence[Iterable[Candidate]]) -> List[Candidate]:
    merged = [candidate for candidates in candidate_lists for candidate in candidates]
    return [c for c in merged if c.record.price is not None]


def _cheapest_per_kg(priced: List[Candidate]) -> Optional[Candidate]:
    with_kg = [c for c in priced if c.record.price_per_kg is not None]
    # min() keeps the first of equal keys, so ties go to the earlier record
    return min(with_kg, key=lambda c: c.record.price_per_kg, default=None)


def compare(*candidate_lists: Iterable[Candidate]) -> ComparisonResult:
    """Cheapest by absolute price and by unit price over all lists, in argument order."""
    priced = _priced(candidate_lists)
    by_item = min(priced, key=lambda c: c.record.price, default=None)
    return ComparisonResult(
        cheapest_by_item=attribute(by_item),
        cheapest_by_kg=attribute(_cheapest_per_kg(priced)),
    )


def cheapest_by_kg(*candidate_lists: Iterable[Candidate]) -> Optional[AttributedRecord]:
    return attribute(_cheapest_per_kg(_priced(candidate_lists)))
