"""Job pipeline: submit to the compiler, then assemble the page."""

from __future__ import annotations

from wasm_relay.assembler import assemble
from wasm_relay.client import RelayClient
from wasm_relay.observability import get_logger, relay_operation
from wasm_relay.protocol import CompileError, Job


async def run_job(job: Job, client: RelayClient) -> str:
    """Run one job end to end.

    Assembly starts only after the backend reply has been fully received
    and decoded.

    Args:
        job: Inbound compile request.
        client: Shared relay client.

    Returns:
        HTML for either a successful build or a compile error.

    Raises:
        NetworkError: If the backend cannot be reached.
        BackendError: If the backend returns a non-success status.
        DecodeError: If the backend reply cannot be decoded.
        MalformedScriptError: If the generated script has no default export.
    """
    logger = get_logger()
    response = await client.submit(job.code)

    with relay_operation("assemble"):
        html = assemble(response)

    logger.info(
        "job_completed",
        outcome="compile_error" if isinstance(response, CompileError) else "output",
        code_bytes=len(job.code.encode("utf-8")),
        html_length=len(html),
    )
    return html
