"""
Chat stream protocol decoder.

The chat backend answers with Server-Sent Events. Every frame carries one or
more ``data:`` lines whose payload is a JSON envelope ``{"content": ...}``.
The content is either a plain text delta or a JSON-encoded tool invocation
(currently only ``nativeTransfer``), which replaces the assistant message
instead of extending it.

Pipeline: bytes -> FrameSplitter -> parse_frame -> decode_payload.
"""

import codecs
from collections.abc import Generator, Iterable
from dataclasses import dataclass
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

FRAME_DELIMITER = "\n\n"
DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"

NATIVE_TRANSFER = "nativeTransfer"


@dataclass(frozen=True)
class TransferParameters:
    """Arguments of a value transfer reported by the agent."""

    amount: str
    to: str
    tx_hash: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransferParameters":
        tx_hash = data.get("txHash")
        return cls(
            amount=str(data.get("amount", "")),
            to=str(data.get("to", "")),
            tx_hash=str(tx_hash) if tx_hash else None,
        )


@dataclass(frozen=True)
class PlainText:
    """Incremental text fragment to append to the assistant message."""

    text: str


@dataclass(frozen=True)
class ToolInvocation:
    """Completed (or pending) tool action that replaces the assistant message."""

    tool: str
    summary: str
    parameters: TransferParameters


DecodedPayload = PlainText | ToolInvocation


@dataclass(frozen=True)
class DecodeResult:
    """Outcome of decoding one raw ``data:`` payload.

    ``payload`` is None only when the envelope itself could not be decoded.
    ``error`` may be set alongside a payload when the inner content fell back
    to plain text.
    """

    raw: str
    payload: DecodedPayload | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


class FrameSplitter:
    """
    Slice an unbounded byte stream into SSE frames.

    Bytes are decoded incrementally so multi-byte characters split across
    chunks survive. Whatever follows the last delimiter stays buffered until
    the next ``feed``.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._buffer = ""

    @property
    def pending(self) -> str:
        """Text received but not yet terminated by a frame delimiter."""
        return self._buffer

    def feed(self, chunk: bytes | str) -> list[str]:
        """Add a chunk and return every frame it completed, in arrival order."""
        if isinstance(chunk, bytes):
            chunk = self._decoder.decode(chunk)
        self._buffer += chunk

        frames: list[str] = []
        while FRAME_DELIMITER in self._buffer:
            frame, self._buffer = self._buffer.split(FRAME_DELIMITER, 1)
            frames.append(frame)
        return frames

    def close(self) -> str:
        """
        Signal end of stream.

        Leftover text is not a frame; it is discarded and returned so callers
        can inspect it.
        """
        self._buffer += self._decoder.decode(b"", final=True)
        leftover, self._buffer = self._buffer, ""
        if leftover.strip():
            logger.warning("Stream ended with unterminated frame: %s", leftover[:200])
        return leftover


def parse_frame(frame: str) -> list[str]:
    """
    Extract raw payloads from the ``data:`` lines of one frame.

    Non-data lines (comments, ``event:``/``id:`` fields, keepalives) are
    ignored. The ``[DONE]`` sentinel marks the logical end of the stream and
    is never returned.
    """
    payloads: list[str] = []
    for line in frame.split("\n"):
        if not line.startswith(DATA_PREFIX):
            continue
        payload = line[len(DATA_PREFIX) :].strip()
        if payload == DONE_SENTINEL:
            continue
        payloads.append(payload)
    return payloads


def _as_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if content is None:
        return ""
    return json.dumps(content)


def _to_invocation(data: Any) -> ToolInvocation | None:
    if not isinstance(data, dict):
        return None
    if data.get("tool") != NATIVE_TRANSFER:
        return None
    parameters = data.get("parameters")
    if not isinstance(parameters, dict):
        return None
    # A transfer needs an amount and a recipient; anything less stays text.
    for key in ("amount", "to"):
        value = parameters.get(key)
        if isinstance(value, bool) or not isinstance(value, str | int | float) or value == "":
            return None
    return ToolInvocation(
        tool=data["tool"],
        summary=str(data.get("your_summary") or ""),
        parameters=TransferParameters.from_dict(parameters),
    )


def decode_payload(raw: str) -> DecodeResult:
    """
    Decode a raw ``data:`` payload into a PlainText or ToolInvocation.

    Never raises. A malformed envelope yields a result without payload; once
    the envelope is decoded its content always survives, as plain text if
    nothing better applies.

    Args:
        raw: Payload text with the ``data:`` prefix already removed

    Returns:
        DecodeResult carrying the payload and/or an error description
    """
    try:
        envelope = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        return DecodeResult(raw=raw, error=f"Malformed envelope: {e}")
    if not isinstance(envelope, dict) or "content" not in envelope:
        return DecodeResult(raw=raw, error="Envelope has no content field")

    content = envelope["content"]
    try:
        if isinstance(content, str):
            try:
                data = json.loads(content)
            except json.JSONDecodeError:
                return DecodeResult(raw=raw, payload=PlainText(content))
        else:
            data = content

        invocation = _to_invocation(data)
        if invocation is not None:
            return DecodeResult(raw=raw, payload=invocation)
        return DecodeResult(raw=raw, payload=PlainText(_as_text(content)))
    except Exception as e:
        return DecodeResult(
            raw=raw,
            payload=PlainText(_as_text(content)),
            error=f"Content fell back to text: {e}",
        )


class SSEStreamParser:
    """
    Parser for the chat SSE protocol.

    Ties the splitter, line parser and decoder together and applies the
    logging policy for recoverable decode errors.
    """

    @staticmethod
    def decode_frame(frame: str) -> list[DecodeResult]:
        """Decode every payload of one frame."""
        results = []
        for raw in parse_frame(frame):
            result = decode_payload(raw)
            if not result.ok:
                logger.warning("Dropping SSE payload (%s): %s", result.error, raw[:200])
            elif result.error:
                logger.debug("%s: %s", result.error, raw[:200])
            results.append(result)
        return results

    @staticmethod
    def iter_payloads(
        chunks: Iterable[bytes | str], splitter: FrameSplitter | None = None
    ) -> Generator[DecodeResult, None, None]:
        """
        Decode a chunked byte stream.

        Args:
            chunks: Raw transport chunks in arrival order
            splitter: Splitter to use (a fresh one per stream by default)

        Yields:
            DecodeResult for every data payload, including failed envelopes
        """
        splitter = splitter or FrameSplitter()
        for chunk in chunks:
            if not chunk:
                continue
            for frame in splitter.feed(chunk):
                yield from SSEStreamParser.decode_frame(frame)
        splitter.close()

    @staticmethod
    def parse_stream(
        response: object, chunk_size: int = 1024
    ) -> Generator[DecodedPayload, None, None]:
        """
        Parse SSE stream from HTTP response.

        Args:
            response: requests.Response object with streaming enabled
            chunk_size: Bytes per read

        Yields:
            Successfully decoded payloads
        """
        chunks = response.iter_content(chunk_size=chunk_size)  # type: ignore[attr-defined]
        for result in SSEStreamParser.iter_payloads(chunks):
            if result.payload is not None:
                yield result.payload
