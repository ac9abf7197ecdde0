"""Fan-out/fan-in over both stores, for one query or a batch of item names."""
import asyncio
import logging
from typing import List, Optional, Tuple

from grocery_proxy.app.errors import UnsupportedProviderError, UpstreamError
from grocery_proxy.app.schemas import BatchItem, ComparisonResult, ProductRecord
from grocery_proxy.pricing.compare import cheapest_by_kg, compare, tag
from grocery_proxy.tools.store_client import Store, StoreSearchClient

logger = logging.getLogger(__name__)

STORES: Tuple[Store, ...] = (Store.COLES, Store.WOOLWORTHS)


async def fetch_both(client: StoreSearchClient, query: str, page_size: int = 15) -> List[List[ProductRecord]]:
    """Search every store concurrently. Any store failing fails the whole call."""
    return list(
        await asyncio.gather(*(client.search(store, query, 1, page_size) for store in STORES))
    )


async def cheapest_for_query(client: StoreSearchClient, query: str, page_size: int = 15) -> ComparisonResult:
    results = await fetch_both(client, query, page_size)
    return compare(*(tag(store, records) for store, records in zip(STORES, results)))


def parse_item_names(raw: Optional[str]) -> List[str]:
    return [name.strip() for name in (raw or "").split(",") if name.strip()]


async def compare_batch(
    client: StoreSearchClient,
    names: List[str],
    concurrency: int = 4,
    page_size: int = 15,
) -> List[BatchItem]:
    """Cheapest-per-kg for each item, in input order.

    A provider failure for one item is reported on that item (``error`` set,
    ``cheapestPerKg`` null) and does not affect the others. A missing API key
    fails the whole batch up front since every item would fail the same way.
    """
    client.ensure_configured()
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def run_item(name: str) -> BatchItem:
        async with semaphore:
            try:
                results = await fetch_both(client, name, page_size)
            except (UpstreamError, UnsupportedProviderError) as exc:
                logger.warning("bulk item %r failed: %s", name, exc)
                return BatchItem(name=name, cheapest_per_kg=None, error=exc.public_message)
        best = cheapest_by_kg(*(tag(store, records) for store, records in zip(STORES, results)))
        return BatchItem(name=name, cheapest_per_kg=best)

    return list(await asyncio.gather(*(run_item(name) for name in names)))
