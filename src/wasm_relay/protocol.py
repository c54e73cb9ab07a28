"""Wire models shared with the compiler backend.

The backend answers with a BSON document holding one externally tagged
variant:

- ``{"Output": {"index_html": str, "js": str, "wasm": binary}}``
- ``{"CompileError": str}``

This module provides:
- Job: one inbound compile request
- Output / CompileError: the two BackendResponse variants
- encode_response / decode_response: BSON codec for BackendResponse
- SampleResponse / encode_sample: fixed payload for connectivity checks
"""

from __future__ import annotations

from typing import Any

import bson
from bson.errors import BSONError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wasm_relay.errors import DecodeError

OUTPUT_TAG = "Output"
COMPILE_ERROR_TAG = "CompileError"


class Job(BaseModel):
    """A single compile request.

    Attributes:
        code: Source text forwarded to the backend as-is.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    code: str


class Output(BaseModel):
    """Successful compilation.

    Attributes:
        index_html: HTML page produced by the backend (not used by the relay).
        script: Generated JavaScript glue module (wire key ``js``).
        module: Compiled WebAssembly bytes (wire key ``wasm``).

    Example:
        >>> Output(script="export default f;", module=b"\\x00asm").script
        'export default f;'
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    index_html: str = ""
    script: str = Field(..., alias="js")
    module: bytes = Field(..., alias="wasm")

    @field_validator("module", mode="before")
    @classmethod
    def coerce_byte_array(cls, v: Any) -> Any:
        """Accept an array of integers in 0..255 as well as raw bytes."""
        if isinstance(v, list):
            if not all(isinstance(b, int) and 0 <= b <= 255 for b in v):
                msg = "wasm array must contain integers in 0..255"
                raise ValueError(msg)
            return bytes(v)
        if isinstance(v, str):
            msg = "wasm must be binary, not text"
            raise ValueError(msg)
        return v


class CompileError(BaseModel):
    """Compilation failed; not a relay failure.

    Attributes:
        message: Compiler diagnostic text.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    message: str


BackendResponse = Output | CompileError


def encode_response(response: BackendResponse) -> bytes:
    """Encode a BackendResponse as a tagged BSON document.

    Args:
        response: Either variant.

    Returns:
        BSON bytes.
    """
    if isinstance(response, CompileError):
        return bson.encode({COMPILE_ERROR_TAG: response.message})
    return bson.encode(
        {OUTPUT_TAG: response.model_dump(by_alias=True)},
    )


def decode_response(data: bytes) -> BackendResponse:
    """Decode a tagged BSON document into a BackendResponse.

    Args:
        data: Raw response body from the backend.

    Returns:
        The decoded Output or CompileError.

    Raises:
        DecodeError: If the payload is not BSON, is truncated, or does not
            hold exactly one known variant.

    Example:
        >>> decode_response(encode_response(CompileError(message="oops")))
        CompileError(message='oops')
    """
    size = len(data)
    try:
        document = bson.decode(data)
    except (BSONError, ValueError, TypeError) as exc:
        raise DecodeError(f"invalid BSON: {exc}", payload_size=size) from exc

    if len(document) != 1:
        tags = ", ".join(sorted(document)) or "none"
        raise DecodeError(f"expected exactly one variant, got: {tags}", payload_size=size)

    tag, body = next(iter(document.items()))
    try:
        if tag == OUTPUT_TAG:
            if not isinstance(body, dict):
                raise DecodeError("Output variant must be a document", payload_size=size)
            return Output.model_validate(body)
        if tag == COMPILE_ERROR_TAG:
            return CompileError(message=body)
    except ValidationError as exc:
        raise DecodeError(f"invalid {tag} variant: {exc}", payload_size=size) from exc

    raise DecodeError(f"unknown variant: {tag}", payload_size=size)


class SampleResponse(BaseModel):
    """Fixed payload served by the connectivity check endpoint.

    ``wasm`` is the bytes of ``b"wasm"`` written as an integer array, the
    way the backend's serializer writes byte vectors.
    """

    model_config = ConfigDict(frozen=True)

    index_html: str = "index_html"
    js: str = "js"
    wasm: list[int] = Field(default_factory=lambda: list(b"wasm"))


def encode_sample() -> bytes:
    """Encode the connectivity check payload as BSON."""
    return bson.encode(SampleResponse().model_dump())
