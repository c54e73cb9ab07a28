"""Shared pytest fixtures for wasm-relay tests.

Backend calls are served by httpx.MockTransport so no compiler needs to run.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from wasm_relay.client import RelayClient
from wasm_relay.config import RelayConfig
from wasm_relay.protocol import CompileError, Output, encode_response

COMPILER_URL = "http://compiler.test:8080"

Handler = Callable[[httpx.Request], httpx.Response]

RELAY_ENV_VARS = ("HOST", "PORT", "COMPILER_URL", "COMPILER_TIMEOUT", "LOG_LEVEL", "LOG_JSON")


@pytest.fixture(autouse=True)
def clean_relay_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the host environment out of RelayConfig."""
    for var in RELAY_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def relay_config() -> RelayConfig:
    """Return a config pointing at the fake compiler."""
    return RelayConfig(compiler_url=COMPILER_URL, compiler_timeout_seconds=5.0)


@pytest.fixture
def sample_output() -> Output:
    """Return a minimal successful compiler output."""
    return Output(
        index_html="<html></html>",
        script="function f(){} export default f;",
        module=bytes([1, 2, 3]),
    )


@pytest.fixture
def sample_compile_error() -> CompileError:
    """Return a compile error response."""
    return CompileError(message="syntax error on line 3")


@pytest.fixture
def make_client(relay_config: RelayConfig) -> Callable[[Handler], RelayClient]:
    """Return a factory building a RelayClient over a mock transport.

    The factory also records every request the handler saw on
    ``client.requests``.
    """

    def factory(handler: Handler) -> RelayClient:
        requests: list[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(recording_handler))
        client = RelayClient(relay_config, http_client=http_client)
        client.requests = requests  # type: ignore[attr-defined]
        return client

    return factory


@pytest.fixture
def respond_with() -> Callable[..., Handler]:
    """Return a factory for handlers answering with a fixed response."""

    def factory(
        response: Output | CompileError | None = None,
        *,
        status_code: int = 200,
        content: bytes | None = None,
    ) -> Handler:
        body = content if content is not None else encode_response(response)  # type: ignore[arg-type]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, content=body)

        return handler

    return factory
