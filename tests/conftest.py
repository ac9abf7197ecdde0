from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from grocery_proxy.app.main import app, get_store_client
from grocery_proxy.tools.cache import ResponseCache
from grocery_proxy.tools.store_client import STORE_APIS, Store, StoreSearchClient


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStores:
    """httpx.MockTransport handler that serves canned RapidAPI bodies per store."""

    def __init__(self):
        self.bodies: Dict[Store, Any] = {Store.COLES: {"results": []}, Store.WOOLWORTHS: {"results": []}}
        self.failures: Dict[Tuple[Store, Optional[str]], Any] = {}
        self.requests: List[httpx.Request] = []

    def serve(self, store: Store, results: List[Dict[str, Any]]) -> None:
        self.bodies[store] = {"results": results}

    def fail(self, store: Store, failure: Any, query: Optional[str] = None) -> None:
        """``failure`` is an httpx.Response to return or an exception to raise."""
        self.failures[(store, query)] = failure

    def calls(self, store: Optional[Store] = None) -> int:
        if store is None:
            return len(self.requests)
        return sum(1 for r in self.requests if r.url.host == STORE_APIS[store].host)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        store = next(s for s, api in STORE_APIS.items() if api.host == request.url.host)
        query = request.url.params.get("query")
        failure = self.failures.get((store, query), self.failures.get((store, None)))
        if isinstance(failure, Exception):
            raise failure
        if failure is not None:
            return failure
        return httpx.Response(200, json=self.bodies[store])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stores():
    return FakeStores()


@pytest.fixture
def store_client(stores, clock):
    cache = ResponseCache(default_ttl=45.0, clock=clock)
    return StoreSearchClient(api_key="test-key", cache=cache, transport=httpx.MockTransport(stores))


@pytest.fixture
def api(store_client):
    app.dependency_overrides[get_store_client] = lambda: store_client
    yield TestClient(app)
    app.dependency_overrides.clear()
