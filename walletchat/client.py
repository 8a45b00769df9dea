"""walletchat client — entry point for the chat API."""

from __future__ import annotations

import os

from ._exceptions import ValidationError
from ._http import HTTPClient
from ._resources import Chats

DEFAULT_BASE_URL = "http://127.0.0.1:3000/api"
DEFAULT_TIMEOUT = 300


def _timeout_from_env() -> int:
    raw = os.environ.get("WALLETCHAT_TIMEOUT")
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"WALLETCHAT_TIMEOUT must be an integer, got {raw!r}") from None


class WalletChat:
    """Client for the wallet assistant chat API.

    Arguments win over environment variables (WALLETCHAT_BASE_URL,
    WALLETCHAT_API_KEY, WALLETCHAT_USER_ID, WALLETCHAT_TIMEOUT).

    Usage:
        client = WalletChat(user_id="did:privy:abc")
        conversation = client.chats.history("chat_1")
        with client.chats.send("chat_1", "hi", conversation=conversation) as stream:
            for _ in stream:
                print(stream.display)
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        user_id: str | None = None,
        timeout: int | None = None,
    ):
        self.base_url = base_url or os.environ.get("WALLETCHAT_BASE_URL") or DEFAULT_BASE_URL
        self.user_id = user_id or os.environ.get("WALLETCHAT_USER_ID")
        api_key = api_key or os.environ.get("WALLETCHAT_API_KEY")
        timeout = timeout if timeout is not None else _timeout_from_env()

        self._http = HTTPClient(base_url=self.base_url, api_key=api_key, timeout=timeout)
        self.chats = Chats(self._http, user_id=self.user_id)

    def __repr__(self) -> str:
        return f"<WalletChat base_url={self.base_url!r}>"
