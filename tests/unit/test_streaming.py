"""
Unit tests for the chat SSE protocol decoder.
"""

import json

import pytest

from tests.utils.mocks import chunked, create_streaming_response, sse_body, sse_content, sse_data
from walletchat.streaming import (
    DecodeResult,
    FrameSplitter,
    PlainText,
    SSEStreamParser,
    ToolInvocation,
    TransferParameters,
    decode_payload,
    parse_frame,
)
from walletchat.transfer import observe


class TestFrameSplitter:
    """Test slicing of the byte stream into frames."""

    def test_single_complete_frame(self):
        splitter = FrameSplitter()
        assert splitter.feed(b"data: a\n\n") == ["data: a"]
        assert splitter.pending == ""

    def test_partial_frame_is_buffered(self):
        splitter = FrameSplitter()
        assert splitter.feed(b"data: hel") == []
        assert splitter.pending == "data: hel"
        assert splitter.feed(b"lo\n") == []
        assert splitter.feed(b"\ndata: next") == ["data: hello"]
        assert splitter.pending == "data: next"

    def test_multiple_frames_in_one_chunk_keep_order(self):
        splitter = FrameSplitter()
        frames = splitter.feed(b"data: 1\n\ndata: 2\n\ndata: 3\n\n")
        assert frames == ["data: 1", "data: 2", "data: 3"]

    def test_accepts_text_chunks(self):
        splitter = FrameSplitter()
        assert splitter.feed("data: x\n\n") == ["data: x"]

    def test_multibyte_character_split_across_chunks(self):
        encoded = "data: ✅ done\n\n".encode()
        split_at = encoded.index("✅".encode()) + 1
        splitter = FrameSplitter()
        assert splitter.feed(encoded[:split_at]) == []
        assert splitter.feed(encoded[split_at:]) == ["data: ✅ done"]

    def test_close_discards_leftover(self, caplog):
        splitter = FrameSplitter()
        splitter.feed(b"data: 1\n\ndata: trailing")
        with caplog.at_level("WARNING", logger="walletchat.streaming"):
            leftover = splitter.close()
        assert leftover == "data: trailing"
        assert splitter.pending == ""
        assert "unterminated frame" in caplog.text

    def test_close_with_empty_buffer_is_quiet(self, caplog):
        splitter = FrameSplitter()
        splitter.feed(b"data: 1\n\n")
        with caplog.at_level("WARNING", logger="walletchat.streaming"):
            assert splitter.close() == ""
        assert caplog.text == ""

    @pytest.mark.parametrize("size", [1, 2, 3, 7, 16, 1000])
    def test_chunk_boundary_invariance(self, size):
        """Frames do not depend on how the bytes were chunked."""
        body = sse_body("Hello ", "wörld", {"tool": "nativeTransfer", "parameters": {}})
        reference = FrameSplitter().feed(body)

        splitter = FrameSplitter()
        frames = []
        for chunk in chunked(body, size):
            frames.extend(splitter.feed(chunk))
        assert frames == reference
        assert len(frames) == 4


class TestParseFrame:
    """Test extraction of data payloads."""

    def test_data_line(self):
        assert parse_frame('data: {"content":"hi"}') == ['{"content":"hi"}']

    def test_payload_whitespace_trimmed(self):
        assert parse_frame("data:   padded  ") == ["padded"]

    def test_done_sentinel_dropped(self):
        assert parse_frame("data: [DONE]") == []

    def test_non_data_lines_ignored(self):
        frame = ": keepalive\nevent: message\nid: 7\ndata: one\nretry: 100"
        assert parse_frame(frame) == ["one"]

    def test_multiple_data_lines_yield_separately(self):
        assert parse_frame("data: one\ndata: two") == ["one", "two"]

    def test_prefix_without_space_ignored(self):
        assert parse_frame("data:x") == []


class TestDecodePayload:
    """Test envelope and inner content decoding."""

    def test_plain_text_content(self):
        result = decode_payload(json.dumps({"content": "plain answer"}))
        assert result.ok
        assert result.payload == PlainText("plain answer")
        assert result.error is None

    def test_transfer_as_json_string(self, transfer_content):
        result = decode_payload(json.dumps({"content": json.dumps(transfer_content)}))
        assert result.payload == ToolInvocation(
            tool="nativeTransfer",
            summary="Sent 0.5 ETH to 0xABCDEF1234567890.",
            parameters=TransferParameters(
                amount="0.5", to="0xABCDEF1234567890", tx_hash="0xdeadbeef"
            ),
        )

    def test_transfer_as_literal_object(self, transfer_content):
        result = decode_payload(json.dumps({"content": transfer_content}))
        assert isinstance(result.payload, ToolInvocation)
        assert result.payload.parameters.amount == "0.5"

    def test_missing_tx_hash(self, transfer_content):
        del transfer_content["parameters"]["txHash"]
        result = decode_payload(json.dumps({"content": transfer_content}))
        assert result.payload.parameters.tx_hash is None

    def test_empty_tx_hash_is_none(self, transfer_content):
        transfer_content["parameters"]["txHash"] = ""
        result = decode_payload(json.dumps({"content": transfer_content}))
        assert result.payload.parameters.tx_hash is None

    def test_transfer_without_parameters_is_text(self):
        content = json.dumps({"tool": "nativeTransfer", "parameters": None})
        result = decode_payload(json.dumps({"content": content}))
        assert result.payload == PlainText(content)

    def test_other_tool_keeps_original_text(self):
        content = '{"tool": "swap", "parameters": {"amount": "1"}}'
        result = decode_payload(json.dumps({"content": content}))
        assert result.payload == PlainText(content)

    def test_json_scalar_content_keeps_original_text(self):
        result = decode_payload(json.dumps({"content": "42"}))
        assert result.payload == PlainText("42")

    def test_non_transfer_object_serialised(self):
        result = decode_payload(json.dumps({"content": {"note": "hi"}}))
        assert result.payload == PlainText('{"note": "hi"}')

    def test_malformed_envelope(self):
        result = decode_payload("{not json")
        assert not result.ok
        assert result.payload is None
        assert "Malformed envelope" in result.error

    def test_envelope_without_content(self):
        result = decode_payload(json.dumps({"text": "hi"}))
        assert not result.ok

    def test_envelope_not_an_object(self):
        assert not decode_payload("[1, 2]").ok

    @pytest.mark.parametrize(
        "parameters",
        [
            {},
            {"amount": "1"},
            {"to": "0xabc"},
            {"amount": "", "to": "0xabc"},
            {"amount": 1, "to": None},
        ],
    )
    def test_incomplete_transfer_parameters_stay_text(self, parameters):
        content = json.dumps(
            {"tool": "nativeTransfer", "your_summary": "x", "parameters": parameters}
        )
        result = decode_payload(json.dumps({"content": content}))
        assert result.payload == PlainText(content)
        assert observe(result.payload) is None

    def test_numeric_parameters_coerced(self):
        content = {
            "tool": "nativeTransfer",
            "your_summary": None,
            "parameters": {"amount": 1, "to": "0xABCDEF1234567890"},
        }
        result = decode_payload(json.dumps({"content": content}))
        assert isinstance(result.payload, ToolInvocation)
        assert result.payload.summary == ""
        assert result.payload.parameters.amount == "1"

    def test_inner_failure_degrades_to_text(self, monkeypatch):
        def _boom(data):
            raise RuntimeError("bad shape")

        monkeypatch.setattr("walletchat.streaming._to_invocation", _boom)
        result = decode_payload(json.dumps({"content": '{"tool": "nativeTransfer"}'}))
        assert result.payload == PlainText('{"tool": "nativeTransfer"}')
        assert "bad shape" in result.error


class TestSSEStreamParser:
    """Test the decoding pipeline over chunked input."""

    def test_iter_payloads(self):
        body = sse_body("Hello ", "world")
        results = list(SSEStreamParser.iter_payloads(chunked(body, 5)))
        assert [r.payload for r in results] == [PlainText("Hello "), PlainText("world")]

    def test_failed_envelope_reported(self, caplog):
        body = (sse_data("{oops") + sse_content("ok")).encode()
        with caplog.at_level("WARNING", logger="walletchat.streaming"):
            results = list(SSEStreamParser.iter_payloads([body]))
        assert [r.ok for r in results] == [False, True]
        assert isinstance(results[0], DecodeResult)
        assert "Dropping SSE payload" in caplog.text

    def test_done_never_decoded(self, monkeypatch):
        seen = []
        original = decode_payload

        def _spy(raw):
            seen.append(raw)
            return original(raw)

        monkeypatch.setattr("walletchat.streaming.decode_payload", _spy)
        list(SSEStreamParser.iter_payloads([sse_body("a")]))
        assert seen == [json.dumps({"content": "a"})]

    def test_empty_chunks_skipped(self):
        results = list(SSEStreamParser.iter_payloads([b"", sse_body("x"), b""]))
        assert [r.payload for r in results] == [PlainText("x")]

    def test_parse_stream_from_response(self, transfer_content):
        response = create_streaming_response(chunked(sse_body("hi", transfer_content), 4))
        payloads = list(SSEStreamParser.parse_stream(response))
        assert payloads[0] == PlainText("hi")
        assert isinstance(payloads[1], ToolInvocation)
