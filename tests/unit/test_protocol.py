"""Unit tests for the BSON wire protocol."""

from __future__ import annotations

import bson
import pytest

from wasm_relay.errors import DecodeError
from wasm_relay.protocol import (
    CompileError,
    Job,
    Output,
    decode_response,
    encode_response,
    encode_sample,
)


class TestRoundTrip:
    """Tests for encode_response / decode_response."""

    def test_output_round_trip(self, sample_output: Output) -> None:
        """Test Output survives encode then decode."""
        assert decode_response(encode_response(sample_output)) == sample_output

    def test_compile_error_round_trip(self, sample_compile_error: CompileError) -> None:
        """Test CompileError survives encode then decode."""
        assert decode_response(encode_response(sample_compile_error)) == sample_compile_error

    def test_output_wire_layout(self, sample_output: Output) -> None:
        """Test Output is externally tagged with backend field names."""
        document = bson.decode(encode_response(sample_output))

        assert list(document) == ["Output"]
        assert document["Output"]["js"] == sample_output.script
        assert document["Output"]["wasm"] == bytes([1, 2, 3])
        assert document["Output"]["index_html"] == "<html></html>"

    def test_compile_error_wire_layout(self) -> None:
        """Test CompileError is a tag holding the message string."""
        document = bson.decode(encode_response(CompileError(message="boom")))

        assert document == {"CompileError": "boom"}


class TestDecode:
    """Tests for decode_response edge cases."""

    def test_wasm_as_integer_array(self) -> None:
        """Test a wasm byte array encoded as integers is accepted."""
        data = bson.encode(
            {"Output": {"index_html": "", "js": "export default f;", "wasm": [0, 97, 115, 109]}}
        )

        response = decode_response(data)

        assert isinstance(response, Output)
        assert response.module == b"\x00asm"

    def test_wasm_integer_out_of_range(self) -> None:
        """Test byte values outside 0..255 are rejected."""
        data = bson.encode({"Output": {"index_html": "", "js": "", "wasm": [256]}})

        with pytest.raises(DecodeError):
            decode_response(data)

    def test_garbage(self) -> None:
        """Test non-BSON bytes raise DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            decode_response(b"not bson at all")

        assert exc_info.value.payload_size == len(b"not bson at all")

    def test_truncated(self, sample_output: Output) -> None:
        """Test a truncated payload raises DecodeError."""
        data = encode_response(sample_output)

        with pytest.raises(DecodeError):
            decode_response(data[: len(data) // 2])

    def test_empty(self) -> None:
        """Test an empty body raises DecodeError."""
        with pytest.raises(DecodeError):
            decode_response(b"")

    def test_unknown_variant(self) -> None:
        """Test an unknown tag raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            decode_response(bson.encode({"Panic": "oops"}))

        assert "unknown variant: Panic" in str(exc_info.value)

    def test_no_variant(self) -> None:
        """Test an empty document raises DecodeError."""
        with pytest.raises(DecodeError) as exc_info:
            decode_response(bson.encode({}))

        assert "none" in str(exc_info.value)

    def test_two_variants(self) -> None:
        """Test an ambiguous document raises DecodeError."""
        data = bson.encode({"CompileError": "a", "Output": {"js": "", "wasm": b""}})

        with pytest.raises(DecodeError):
            decode_response(data)

    def test_output_missing_field(self) -> None:
        """Test an Output without js raises DecodeError."""
        with pytest.raises(DecodeError):
            decode_response(bson.encode({"Output": {"wasm": b"\x00"}}))

    def test_output_not_document(self) -> None:
        """Test an Output tag holding a string raises DecodeError."""
        with pytest.raises(DecodeError):
            decode_response(bson.encode({"Output": "nope"}))

    def test_compile_error_not_string(self) -> None:
        """Test a CompileError tag holding a number raises DecodeError."""
        with pytest.raises(DecodeError):
            decode_response(bson.encode({"CompileError": 42}))


class TestModels:
    """Tests for wire models."""

    def test_job_is_frozen(self) -> None:
        """Test Job cannot be mutated."""
        job = Job(code="fn main() {}")

        with pytest.raises(Exception):  # noqa: B017
            job.code = "other"  # type: ignore[misc]

    def test_output_accepts_wire_names(self) -> None:
        """Test Output can be built from backend field names."""
        output = Output.model_validate({"js": "x", "wasm": b"\x01"})

        assert output.script == "x"
        assert output.module == b"\x01"
        assert output.index_html == ""


class TestSample:
    """Tests for the connectivity-check payload."""

    def test_sample_payload(self) -> None:
        """Test the sample decodes to the fixed values."""
        assert bson.decode(encode_sample()) == {
            "index_html": "index_html",
            "js": "js",
            "wasm": [119, 97, 115, 109],
        }

    def test_sample_module_is_int_array(self) -> None:
        """Test the sample's wasm array reads back as the module bytes."""
        output = Output.model_validate(bson.decode(encode_sample()))

        assert output.module == b"wasm"
