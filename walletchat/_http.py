"""requests.Session wrapper for the chat backend: auth, error mapping, retry."""

import logging
import time
from typing import Any

import requests

from ._exceptions import STATUS_MAP, APIError, TransportError

logger = logging.getLogger(__name__)

_MAX_ATTEMPTS = 3
_INITIAL_BACKOFF = 0.5  # seconds
# A GET can always be repeated.
_RETRYABLE_READ = {429, 500, 502, 503, 504}
# A POST /chat delivers a user message; only repeat it when the backend
# never took it in.
_RETRYABLE_SEND = {429, 503}
_IDEMPOTENT = {"GET", "HEAD", "OPTIONS"}


def _error_message(resp: requests.Response) -> tuple[str, str | None]:
    """Pull a message and request id out of a chat backend error body.

    The backend answers with plain text (``Missing chatId``), ``{"error": "..."}``,
    ``{"error": {"message": ..., "request_id": ...}}`` or ``{"detail": ...}``.
    """
    fallback = resp.text or f"HTTP {resp.status_code}"
    try:
        body = resp.json()
    except ValueError:
        return fallback, None
    if not isinstance(body, dict):
        return fallback, None

    error = body.get("error")
    if isinstance(error, dict):
        message = error.get("message") or body.get("detail") or fallback
        return str(message), error.get("request_id", body.get("request_id"))
    return str(error or body.get("detail") or fallback), body.get("request_id")


def _raise_for_status(resp: requests.Response, *, method: str = "", path: str = "") -> None:
    """Close ``resp`` and raise the exception its status maps to."""
    message, request_id = _error_message(resp)
    resp.close()
    exc_cls = STATUS_MAP.get(resp.status_code, APIError)
    raise exc_cls(
        message, status_code=resp.status_code, request_id=request_id, method=method, path=path
    )


def _backoff(attempt: int, resp: requests.Response | None = None) -> float:
    if resp is not None and resp.status_code == 429:
        retry_after = resp.headers.get("Retry-After")
        if retry_after:
            try:
                return float(retry_after)
            except ValueError:
                logger.debug("Unparseable Retry-After header: %s", retry_after)
    return _INITIAL_BACKOFF * (2**attempt)


class HTTPClient:
    """Session bound to one chat backend, with optional Bearer auth and retry."""

    def __init__(self, base_url: str, api_key: str | None = None, timeout: int = 300):
        self._session = requests.Session()
        if api_key:
            self._session.headers["Authorization"] = f"Bearer {api_key}"
        self._session.headers["Content-Type"] = "application/json"
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _send(
        self, method: str, url: str, *, is_stream: bool = False, **kwargs: Any
    ) -> requests.Response:
        idempotent = method.upper() in _IDEMPOTENT
        retryable = _RETRYABLE_READ if idempotent else _RETRYABLE_SEND
        last = _MAX_ATTEMPTS - 1

        for attempt in range(_MAX_ATTEMPTS):
            try:
                resp = self._session.request(
                    method, url, timeout=self._timeout, stream=is_stream, **kwargs
                )
            except (requests.Timeout, requests.ConnectionError) as e:
                # ConnectTimeout is a ConnectionError: the message never left.
                delivered = not isinstance(e, requests.ConnectionError)
                logger.warning(
                    "%s %s failed (attempt %d/%d): %s", method, url, attempt + 1, _MAX_ATTEMPTS, e
                )
                if attempt == last or (delivered and not idempotent):
                    raise TransportError(str(e), method=method, path=url) from e
                time.sleep(_backoff(attempt))
                continue

            if resp.ok:
                return resp
            if resp.status_code not in retryable or attempt == last:
                _raise_for_status(resp, method=method, path=url)

            delay = _backoff(attempt, resp)
            logger.debug(
                "Retrying %s %s after HTTP %d in %.1fs", method, url, resp.status_code, delay
            )
            resp.close()
            time.sleep(delay)

        raise APIError("Max retries exceeded", method=method, path=url)

    def request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Send request and raise typed exception on error."""
        return self._send(method, f"{self._base_url}{path}", **kwargs)

    def stream(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        """Open a response with stream=True so the SSE body can be read incrementally."""
        return self._send(method, f"{self._base_url}{path}", is_stream=True, **kwargs)
