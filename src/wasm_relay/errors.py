"""Custom exceptions for wasm-relay.

This module defines the exception hierarchy:
- RelayError (base)
- ConfigurationError
- NetworkError
- BackendError
- DecodeError
- MalformedScriptError
"""

from __future__ import annotations


class RelayError(Exception):
    """Base exception for all relay operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.

    Example:
        >>> try:
        ...     html = await run_job(job, client)
        ... except RelayError as e:
        ...     print(f"Relay error: {e}")
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize RelayError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ConfigurationError(RelayError):
    """Startup configuration is missing or invalid.

    Raised by RelayConfig.from_env() so the process can fail fast before
    it starts listening.
    """

    def __init__(self, message: str, *, variable: str | None = None) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            variable: Environment variable at fault, if known.
        """
        details: dict[str, str] = {}
        if variable:
            details["variable"] = variable
        super().__init__(message, details=details)
        self.variable = variable


class NetworkError(RelayError):
    """Failed to reach the compiler backend.

    Raised when:
    - The connection is refused or reset
    - The request times out
    - The backend hostname does not resolve

    Example:
        >>> try:
        ...     await client.submit(code)
        ... except NetworkError as e:
        ...     print(f"Cannot reach compiler: {e.url}")
    """

    def __init__(
        self,
        message: str = "Failed to reach compiler backend",
        *,
        url: str | None = None,
        cause: str | None = None,
    ) -> None:
        """Initialize NetworkError.

        Args:
            message: Human-readable error description.
            url: The backend URL that was unreachable.
            cause: The underlying cause of the transport failure.
        """
        details: dict[str, str] = {}
        if url:
            details["url"] = url
        if cause:
            details["cause"] = cause
        super().__init__(message, details=details)
        self.url = url
        self.cause = cause


class BackendError(RelayError):
    """The compiler backend answered with a non-success status.

    The response body is kept verbatim in ``body`` for diagnostics.

    Example:
        >>> try:
        ...     await client.submit(code)
        ... except BackendError as e:
        ...     print(e.status_code, e.body)
        500 internal compiler error
    """

    def __init__(self, status_code: int, body: str, message: str | None = None) -> None:
        """Initialize BackendError.

        Args:
            status_code: HTTP status returned by the backend.
            body: Response body text, unmodified.
            message: Optional custom error message.
        """
        msg = message or f"Compiler service returned an error: {body}"
        super().__init__(msg, details={"status_code": str(status_code)})
        self.status_code = status_code
        self.body = body


class DecodeError(RelayError):
    """The backend payload could not be decoded into a BackendResponse.

    Indicates a protocol mismatch between relay and backend, as opposed to
    BackendError where the backend itself reported a failure.
    """

    def __init__(self, reason: str, *, payload_size: int | None = None) -> None:
        """Initialize DecodeError.

        Args:
            reason: What was wrong with the payload.
            payload_size: Size of the offending payload in bytes.
        """
        details: dict[str, str] = {}
        if payload_size is not None:
            details["payload_size"] = str(payload_size)
        super().__init__(f"Failed to decode compiler response: {reason}", details=details)
        self.reason = reason
        self.payload_size = payload_size


class MalformedScriptError(RelayError):
    """Generated script lacks a default-exported entry point.

    Fatal for the job: the backend violated its output contract and no
    fallback page is rendered.
    """

    def __init__(
        self,
        message: str = "no default-exported entry point found",
        *,
        excerpt: str | None = None,
    ) -> None:
        """Initialize MalformedScriptError.

        Args:
            message: Human-readable error description.
            excerpt: Truncated tail of the script text, for logs.
        """
        details: dict[str, str] = {}
        if excerpt is not None:
            details["excerpt"] = excerpt
        super().__init__(message, details=details)
        self.excerpt = excerpt
