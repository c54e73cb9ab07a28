"""wasm-relay: compiler relay that returns runnable HTML pages.

This package forwards source code to a compiler backend and turns its BSON
reply into a self-contained HTML document with:
- The generated glue script inlined in a module script element
- The WebAssembly module embedded as an Int8Array literal
- Structured logging via structlog
- OpenTelemetry span tracing

Example:
    >>> from wasm_relay import RelayConfig, create_client, assemble
    >>> config = RelayConfig(compiler_url="http://localhost:8080")
    >>> async with create_client(config) as client:
    ...     html = assemble(await client.submit("fn main() {}"))
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    # Factory function
    "create_client",
    # Client class
    "RelayClient",
    # Assembly
    "assemble",
    "run_job",
    # Configuration
    "RelayConfig",
    # Data models
    "Job",
    "Output",
    "CompileError",
    # Exceptions
    "RelayError",
    "ConfigurationError",
    "NetworkError",
    "BackendError",
    "DecodeError",
    "MalformedScriptError",
]


def __getattr__(name: str) -> object:
    """Lazy import of public API members."""
    if name in ("create_client", "RelayClient"):
        from wasm_relay import client as client_module

        return getattr(client_module, name)
    if name == "assemble":
        from wasm_relay.assembler import assemble

        return assemble
    if name == "run_job":
        from wasm_relay.pipeline import run_job

        return run_job
    if name == "RelayConfig":
        from wasm_relay.config import RelayConfig

        return RelayConfig
    if name in ("Job", "Output", "CompileError"):
        from wasm_relay import protocol as protocol_module

        return getattr(protocol_module, name)
    if name in (
        "RelayError",
        "ConfigurationError",
        "NetworkError",
        "BackendError",
        "DecodeError",
        "MalformedScriptError",
    ):
        from wasm_relay import errors as errors_module

        return getattr(errors_module, name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
