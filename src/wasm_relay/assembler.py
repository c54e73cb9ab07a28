"""Response assembly: BackendResponse -> self-contained HTML page.

This module provides:
- extract_entry_point: find the default-exported init function in glue script
- build_init_expression: call the entry point with the module bytes inlined
- assemble: produce the final HTML for either response variant

All functions are pure; the same input always yields the same HTML.
"""

from __future__ import annotations

import re

from wasm_relay.errors import MalformedScriptError
from wasm_relay.observability import excerpt, get_logger
from wasm_relay.protocol import BackendResponse, CompileError, Output
from wasm_relay.template import render_page

DEFAULT_EXPORT_MARKER = "export default"

_IDENTIFIER = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


def extract_entry_point(script: str) -> str:
    """Return the identifier named by the script's default export.

    Everything after the first ``export default`` is taken, whitespace is
    trimmed and one trailing ``;`` is removed. What remains must be a single
    identifier.

    Args:
        script: Generated JavaScript glue module.

    Returns:
        The entry-point identifier.

    Raises:
        MalformedScriptError: If there is no default export or it does not
            name a plain identifier.

    Example:
        >>> extract_entry_point("function f(){} export default f;")
        'f'
    """
    _, marker, remainder = script.partition(DEFAULT_EXPORT_MARKER)
    if not marker:
        raise MalformedScriptError(excerpt=excerpt(script[-200:]))

    entry = remainder.strip()
    entry = entry.removesuffix(";").strip()
    if not entry:
        raise MalformedScriptError(excerpt=excerpt(remainder))
    if not _IDENTIFIER.fullmatch(entry):
        raise MalformedScriptError(
            "default export is not a plain identifier",
            excerpt=excerpt(entry),
        )
    return entry


def build_init_expression(entry_point: str, module: bytes) -> str:
    """Format a call to the entry point with the module as a fresh buffer.

    Args:
        entry_point: Identifier of the init function.
        module: Compiled WebAssembly bytes.

    Returns:
        JavaScript expression, e.g. ``f((new Int8Array([1, 2, 3])).buffer)``.
    """
    byte_list = ", ".join(str(b) for b in module)
    return f"{entry_point}((new Int8Array([{byte_list}])).buffer)"


def assemble(response: BackendResponse) -> str:
    """Turn a backend response into the HTML returned to the caller.

    For CompileError the diagnostic message is returned verbatim. It is not
    HTML-escaped here; whoever renders it as a page must do that if the
    message can carry untrusted markup.

    Args:
        response: Decoded backend response.

    Returns:
        HTML text.

    Raises:
        MalformedScriptError: If an Output script has no usable default export.
    """
    if isinstance(response, CompileError):
        get_logger().debug("compile_error_passthrough", message_length=len(response.message))
        return response.message

    if not isinstance(response, Output):
        msg = f"Unsupported response type: {type(response).__name__}"
        raise TypeError(msg)

    entry_point = extract_entry_point(response.script)
    init = build_init_expression(entry_point, response.module)
    get_logger().debug(
        "page_assembled",
        entry_point=entry_point,
        script_length=len(response.script),
        wasm_bytes=len(response.module),
    )
    return render_page(response.script, init)
