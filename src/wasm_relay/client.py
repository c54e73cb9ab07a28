"""Compiler backend client.

This module provides RelayClient, which forwards source code to the compiler
backend over a shared httpx connection pool and decodes its BSON reply.
"""

from __future__ import annotations

from types import TracebackType
from typing import TYPE_CHECKING

import httpx

from wasm_relay.config import RelayConfig
from wasm_relay.errors import BackendError, DecodeError, NetworkError
from wasm_relay.observability import excerpt, get_logger, relay_operation
from wasm_relay.protocol import BackendResponse, decode_response

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


class RelayClient:
    """Compiler backend client with observability.

    One instance is shared by every job. The underlying httpx.AsyncClient
    is safe for concurrent use and is never re-created per job.

    Attributes:
        config: Relay configuration.

    Note:
        No retries are attempted. A failed call raises immediately and
        any retry policy belongs to the caller.

    Example:
        >>> config = RelayConfig(compiler_url="http://compiler:8080")
        >>> async with create_client(config) as client:
        ...     response = await client.submit("fn main() {}")
    """

    def __init__(
        self,
        config: RelayConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize RelayClient.

        Args:
            config: Relay configuration with backend URL and timeout.
            http_client: Optional pre-built AsyncClient. The caller keeps
                ownership and must close it.
            logger: Optional structlog logger. Uses default if not provided.
        """
        self.config = config
        self._logger = logger or get_logger()
        self._owns_http = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(config.compiler_timeout_seconds),
        )

    async def submit(self, code: str) -> BackendResponse:
        """Send source code to the backend and decode its reply.

        Cancelling the awaiting task aborts the in-flight request.

        Args:
            code: Source text, sent as the raw request body.

        Returns:
            Decoded Output or CompileError.

        Raises:
            NetworkError: If the backend cannot be reached.
            BackendError: If the backend returns a non-success status.
            DecodeError: If the success body is not a valid BackendResponse.
        """
        url = self.config.run_url
        payload = code.encode("utf-8")

        with relay_operation("submit", url=url, code_size=len(payload)):
            try:
                response = await self._http.post(
                    url,
                    content=payload,
                    headers={"Content-Type": "text/plain; charset=utf-8"},
                )
            except httpx.RequestError as exc:
                self._logger.error(
                    "compiler_unreachable",
                    url=url,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                raise NetworkError(url=url, cause=str(exc) or type(exc).__name__) from exc

            self._logger.debug(
                "compiler_responded",
                status_code=response.status_code,
                body_bytes=len(response.content),
            )

            if not response.is_success:
                body = response.text
                self._logger.error(
                    "compiler_returned_error",
                    status_code=response.status_code,
                    body_bytes=len(response.content),
                    body=excerpt(body),
                )
                raise BackendError(response.status_code, body)

            try:
                return decode_response(response.content)
            except DecodeError as exc:
                self._logger.error(
                    "compiler_response_undecodable",
                    body_bytes=len(response.content),
                    reason=exc.reason,
                    body=excerpt(response.content),
                )
                raise

    async def aclose(self) -> None:
        """Close the connection pool if this client created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> RelayClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


def create_client(
    config: RelayConfig,
    *,
    http_client: httpx.AsyncClient | None = None,
) -> RelayClient:
    """Create a relay client from configuration.

    This is the primary entry point for constructing the shared client at
    startup.

    Args:
        config: Relay configuration.
        http_client: Optional pre-built AsyncClient (tests inject one backed
            by httpx.MockTransport).

    Returns:
        RelayClient bound to the configured backend.
    """
    get_logger().info(
        "creating_relay_client",
        compiler_url=config.compiler_url,
        timeout_seconds=config.compiler_timeout_seconds,
    )
    return RelayClient(config, http_client=http_client)
