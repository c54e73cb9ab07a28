"""HTTP application hosting the relay pipeline.

Routes (all under /api):
- GET  /api/run?code=...  compile and return the assembled page
- POST /api/run           same, with the source as the raw request body
- GET  /api/hello         fixed BSON sample for connectivity checks
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI, Query, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from opentelemetry.trace import SpanKind

from wasm_relay import __version__
from wasm_relay.client import RelayClient, create_client
from wasm_relay.config import RelayConfig
from wasm_relay.errors import (
    BackendError,
    DecodeError,
    MalformedScriptError,
    NetworkError,
    RelayError,
)
from wasm_relay.observability import excerpt, get_logger, span
from wasm_relay.pipeline import run_job
from wasm_relay.protocol import Job, encode_sample

BSON_MEDIA_TYPE = "application/bson"

# Status for a job abandoned because the caller went away
CLIENT_CLOSED_REQUEST = 499

DISCONNECT_POLL_SECONDS = 0.1

# Error type -> (HTTP status, category, caller-visible message or None for exc text)
ERROR_RESPONSES: dict[type[RelayError], tuple[int, str, str | None]] = {
    NetworkError: (502, "network_error", "Failed to reach compiler backend"),
    BackendError: (502, "backend_error", None),
    DecodeError: (500, "decode_error", "Internal server error"),
    MalformedScriptError: (500, "malformed_script", "Internal server error"),
}


def error_response(exc: RelayError) -> JSONResponse:
    """Map a relay error to the single caller-visible failure response.

    Args:
        exc: Error raised while handling a job.

    Returns:
        JSON response with ``error`` category and ``message``.
    """
    status, category, message = next(
        (v for cls, v in ERROR_RESPONSES.items() if isinstance(exc, cls)),
        (500, "relay_error", "Internal server error"),
    )
    if isinstance(exc, BackendError):
        message = exc.body

    get_logger().error(
        "job_failed",
        category=category,
        status_code=status,
        error_type=type(exc).__name__,
        error=excerpt(exc.message),
        details=exc.details,
    )
    return JSONResponse(status_code=status, content={"error": category, "message": message})


async def _run_until_disconnect(request: Request, job: Job, client: RelayClient) -> Response:
    """Run a job, cancelling it if the caller disconnects first."""
    task = asyncio.ensure_future(run_job(job, client))
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                break
            if await request.is_disconnected():
                task.cancel()
                get_logger().warning("job_cancelled", reason="client_disconnected")
                return Response(status_code=CLIENT_CLOSED_REQUEST)
    except asyncio.CancelledError:
        task.cancel()
        raise

    return HTMLResponse(task.result())


def _relay_client(request: Request) -> RelayClient:
    client: RelayClient = request.app.state.relay_client
    return client


router = APIRouter(prefix="/api")


@router.get("/run", response_class=HTMLResponse)
async def run_query(request: Request, code: str = Query(...)) -> Response:
    """Compile ``code`` and return the self-contained page."""
    return await _run_until_disconnect(request, Job(code=code), _relay_client(request))


@router.post("/run", response_class=HTMLResponse)
async def run_body(request: Request) -> Response:
    """Compile the raw request body and return the self-contained page."""
    raw = await request.body()
    try:
        code = raw.decode("utf-8")
    except UnicodeDecodeError:
        return JSONResponse(
            status_code=400,
            content={"error": "invalid_body", "message": "Request body must be UTF-8 text"},
        )
    return await _run_until_disconnect(request, Job(code=code), _relay_client(request))


@router.get("/hello")
async def hello() -> Response:
    """Return the fixed connectivity-check payload."""
    return Response(content=encode_sample(), media_type=BSON_MEDIA_TYPE)


def create_app(config: RelayConfig, *, client: RelayClient | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Relay configuration.
        client: Optional pre-built relay client. When omitted one is created
            at startup and closed at shutdown.

    Returns:
        Configured FastAPI instance.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        relay_client = client or create_client(config)
        app.state.relay_client = relay_client
        get_logger().info("relay_started", host=config.host, port=config.port)
        try:
            yield
        finally:
            if client is None:
                await relay_client.aclose()
            get_logger().info("relay_stopped")

    app = FastAPI(
        title="wasm-relay",
        description="Relays source code to a compiler backend and returns runnable HTML.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.include_router(router)

    @app.exception_handler(RelayError)
    async def handle_relay_error(request: Request, exc: RelayError) -> JSONResponse:
        return error_response(exc)

    @app.middleware("http")
    async def trace_requests(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        attrs = {"http.method": request.method, "http.route": request.url.path}
        with span(
            "http.request",
            kind=SpanKind.SERVER,
            attributes=attrs,
            log_start=False,
            log_end=False,
        ) as s:
            response = await call_next(request)
            s.set_attribute("http.status_code", response.status_code)
        get_logger().info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response

    return app
