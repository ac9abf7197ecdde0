import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from grocery_proxy.app.errors import PriceProxyError, UpstreamError, ValidationError
from grocery_proxy.app.logging import configure_logging
from grocery_proxy.app.schemas import BatchResponse, CheapestResponse, HealthResponse, ProductRecord
from grocery_proxy.app.settings import settings
from grocery_proxy.observability.trace import trace_request
from grocery_proxy.orchestration.pipeline import cheapest_for_query, compare_batch, parse_item_names
from grocery_proxy.tools.store_client import StoreSearchClient

configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One client (and so one cache) per process.
    client = StoreSearchClient.from_settings(settings)
    if not client.is_configured():
        logger.warning("RAPIDAPI_KEY is not set; store searches will fail until it is configured")
    app.state.store_client = client
    yield
    await client.aclose()


app = FastAPI(title="Grocery Price Proxy", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)
app.middleware("http")(trace_request)


def get_store_client(request: Request) -> StoreSearchClient:
    return request.app.state.store_client


def require_query(value: Optional[str], message: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(message)
    return value


@app.exception_handler(PriceProxyError)
async def price_proxy_error_handler(request: Request, exc: PriceProxyError):
    if isinstance(exc, UpstreamError):
        logger.error(
            "%s %s -> %s (status=%s body=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.status,
            exc.body,
        )
    else:
        logger.warning("%s %s -> %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": details or "Invalid request"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    # Starlette still re-raises after this response is sent, so the server logs it too.
    logger.error("%s %s failed", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Server error"})


@app.get("/health", response_model=HealthResponse)
def health():
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return HealthResponse(ok=True, time=now)


@app.get("/search", response_model=List[ProductRecord])
async def search(
    store: str = "coles",
    q: Optional[str] = None,
    page: int = Query(1, ge=1),
    size: Optional[int] = Query(None, ge=1, le=100),
    client: StoreSearchClient = Depends(get_store_client),
):
    query = require_query(q, "Missing ?q=")
    try:
        return await client.search(store, query, page, size or settings.page_size)
    except PriceProxyError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("GET /search failed")
        raise HTTPException(status_code=500, detail="Server error") from exc


@app.get("/cheapest", response_model=CheapestResponse)
async def cheapest(
    q: Optional[str] = None,
    client: StoreSearchClient = Depends(get_store_client),
):
    query = require_query(q, "Missing ?q=")
    try:
        result = await cheapest_for_query(client, query, settings.page_size)
    except PriceProxyError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("GET /cheapest failed")
        raise HTTPException(status_code=500, detail="Server error") from exc
    return CheapestResponse(
        query=query,
        cheapest_by_item=result.cheapest_by_item,
        cheapest_by_kg=result.cheapest_by_kg,
    )


@app.get("/bulk-cheapest-perkg", response_model=BatchResponse)
async def bulk_cheapest_per_kg(
    items: Optional[str] = None,
    client: StoreSearchClient = Depends(get_store_client),
):
    names = parse_item_names(items)
    if not names:
        raise ValidationError("Provide ?items=Flour,Sugar,...")
    try:
        report = await compare_batch(client, names, settings.batch_concurrency, settings.page_size)
    except PriceProxyError:
        raise
    except Exception as exc:  # noqa: BLE001
        logger.exception("GET /bulk-cheapest-perkg failed")
        raise HTTPException(status_code=500, detail="Server error") from exc
    return BatchResponse(items=report)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)
