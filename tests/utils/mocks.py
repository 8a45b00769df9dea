"""SSE builders and fake streaming responses for walletchat tests."""

import json
from typing import Any
from unittest.mock import MagicMock


def sse_data(payload: str) -> str:
    """One frame with a single data line."""
    return f"data: {payload}\n\n"


def sse_content(content: Any) -> str:
    """One frame carrying ``{"content": content}``."""
    return sse_data(json.dumps({"content": content}))


def sse_body(*contents: Any, done: bool = True) -> bytes:
    """Full reply body; string contents are sent as-is in the envelope."""
    body = "".join(sse_content(c) for c in contents)
    if done:
        body += sse_data("[DONE]")
    return body.encode("utf-8")


def chunked(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


def create_streaming_response(chunks: list[bytes]) -> MagicMock:
    """Mock requests.Response whose iter_content yields ``chunks``."""
    response = MagicMock()
    response.status_code = 200
    response.ok = True
    response.iter_content.side_effect = lambda chunk_size=1024: iter(chunks)
    response.close = MagicMock()
    return response
