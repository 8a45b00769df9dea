"""Chats resource — load history and stream replies."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .._exceptions import ValidationError
from .._streaming import ChatStream, TransferCallback
from ..conversation import Conversation, Message

if TYPE_CHECKING:
    from .._http import HTTPClient


class Chats:
    """client.chats — conversation history and streamed replies."""

    def __init__(self, http: HTTPClient, user_id: str | None = None):
        self._http = http
        self._user_id = user_id

    def messages(self, chat_id: str) -> list[Message]:
        """Fetch the stored message log of a chat."""
        resp = self._http.request("GET", "/chat", params={"chatId": chat_id})
        body = resp.json()
        if not isinstance(body, list):
            raise ValidationError(f"Unexpected history payload for chat {chat_id}")
        return [Message.from_dict(d) for d in body if isinstance(d, dict)]

    def history(self, chat_id: str) -> Conversation:
        """Load a chat into a Conversation ready for the next turn."""
        return Conversation(self.messages(chat_id), chat_id=chat_id)

    def send(
        self,
        chat_id: str,
        message: str,
        *,
        conversation: Conversation | None = None,
        user_id: str | None = None,
        on_transfer: TransferCallback | None = None,
    ) -> ChatStream:
        """Send a user message and return the streaming reply.

        The user message and the reply's turn are recorded on ``conversation``
        (a fresh, empty one when omitted). ``isFirstMessage`` is derived from
        the conversation being empty before this message.
        """
        if not message or not message.strip():
            raise ValidationError("Message must not be empty")
        user_id = user_id or self._user_id
        if not user_id:
            raise ValidationError(
                "No user id provided. Pass user_id= or set WALLETCHAT_USER_ID env var."
            )

        conversation = conversation if conversation is not None else Conversation(chat_id=chat_id)
        body = {
            "message": message,
            "userId": user_id,
            "chatId": chat_id,
            "isFirstMessage": len(conversation) == 0,
        }
        turn = conversation.begin_turn(message)
        try:
            resp = self._http.stream("POST", "/chat", json=body)
        except BaseException:
            # Ctrl-C while connecting must not leave the turn open.
            conversation.abandon(turn)
            raise
        return ChatStream(resp, conversation, turn, on_transfer=on_transfer)
