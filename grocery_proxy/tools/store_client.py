"""RapidAPI client for the Coles and Woolworths product-search APIs.

Both providers sit behind RapidAPI and authenticate with the same pair of
headers (``x-rapidapi-key`` / ``x-rapidapi-host``). Results are normalized
into ProductRecord and cached per (store, query, page, size).
"""
import logging
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

import httpx

from grocery_proxy.app.errors import ConfigurationError, UnsupportedProviderError, UpstreamError
from grocery_proxy.app.schemas import ProductRecord
from grocery_proxy.app.settings import Settings
from grocery_proxy.pricing.normalize import normalize_results
from grocery_proxy.tools.cache import ResponseCache, cache_key

logger = logging.getLogger(__name__)


class Store(str, Enum):
    COLES = "coles"
    WOOLWORTHS = "woolworths"

    @classmethod
    def parse(cls, value: Any) -> "Store":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise UnsupportedProviderError(value) from None


class StoreApi(NamedTuple):
    host: str
    path: str

    @property
    def url(self) -> str:
        return f"https://{self.host}{self.path}"


STORE_APIS: Dict[Store, StoreApi] = {
    Store.COLES: StoreApi("coles-product-price-api.p.rapidapi.com", "/coles/product-search"),
    Store.WOOLWORTHS: StoreApi("woolworths-products-api.p.rapidapi.com", "/woolworths/product-search/"),
}


class StoreSearchClient:
    """Searches one store at a time; owns the response cache."""

    def __init__(
        self,
        api_key: Optional[str],
        cache: ResponseCache,
        timeout: float = 12.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.cache = cache
        self.timeout = timeout
        self.client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StoreSearchClient":
        cache = ResponseCache(default_ttl=settings.cache_ttl_seconds)
        return cls(api_key=settings.rapidapi_key, cache=cache, timeout=settings.request_timeout)

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def ensure_configured(self) -> None:
        if not self.is_configured():
            raise ConfigurationError("RAPIDAPI_KEY missing (set it in the environment or .env)")

    async def search(
        self,
        store: Any,
        query: str,
        page: int = 1,
        page_size: int = 15,
    ) -> List[ProductRecord]:
        self.ensure_configured()
        store = Store.parse(store)

        key = cache_key(store.value, query, page, page_size)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("cache hit key=%s", key)
            return cached

        body = await self._fetch(store, query, page, page_size)
        records = normalize_results(body)
        self.cache.put(key, records)
        logger.info("store=%s query=%r results=%d", store.value, query, len(records))
        return records

    async def _fetch(self, store: Store, query: str, page: int, page_size: int) -> Any:
        api = STORE_APIS[store]
        # Providers disagree on the search parameter name; each ignores the one it does not use.
        params = {"query": query, "search": query, "page": page, "size": page_size}
        headers = {
            "x-rapidapi-key": self.api_key,
            "x-rapidapi-host": api.host,
        }
        try:
            response = await self.client.get(api.url, params=params, headers=headers)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            raise UpstreamError(store.value, f"{store.value} search timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                store.value,
                f"{store.value} search failed (HTTP {e.response.status_code})",
                status=e.response.status_code,
                body=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(store.value, f"{store.value} search request failed: {e}") from e
        except ValueError as e:
            raise UpstreamError(
                store.value,
                f"{store.value} returned a non-JSON body",
                status=response.status_code,
                body=response.text,
            ) from e

    async def aclose(self) -> None:
        await self.client.aclose()
