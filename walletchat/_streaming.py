"""ChatStream context manager driving the SSE decoder into a conversation turn."""

from __future__ import annotations

from collections.abc import Callable, Iterator
import logging
from typing import TYPE_CHECKING

import requests

from ._exceptions import StreamUnavailableError, TransportError
from .conversation import AssistantTurn, Conversation, Message, TurnState
from .streaming import DecodedPayload, FrameSplitter, SSEStreamParser
from .transfer import TransferNotice, TransferTrigger

if TYPE_CHECKING:
    from collections.abc import Generator

logger = logging.getLogger(__name__)

TransferCallback = Callable[[TransferNotice], None]


class ChatStream:
    """Iterable stream of decoded reply payloads. Use as context manager or iterate directly.

    The reply is sealed into the conversation only when the transport reaches
    its end. Closing early abandons the turn; the partial reply stays readable
    on ``display`` but is not recorded.

    Usage:
        with client.chats.send("chat_1", "Send 0.1 ETH to bob.eth") as stream:
            for payload in stream:
                print(stream.display)
        print(stream.notice)  # TransferNotice or None
    """

    def __init__(
        self,
        response: requests.Response,
        conversation: Conversation,
        turn: AssistantTurn,
        *,
        on_transfer: TransferCallback | None = None,
        chunk_size: int = 1024,
    ):
        self._response = response
        self._conversation = conversation
        self._turn = turn
        self._on_transfer = on_transfer
        self._chunk_size = chunk_size
        self._splitter = FrameSplitter()
        self._trigger = TransferTrigger()
        self._message: Message | None = None
        self._started = False
        self._closed = False
        self.errors: list[str] = []

    def _close(self, completed: bool = False) -> None:
        """Close the underlying response and settle the turn (idempotent)."""
        if self._turn.is_open and self._conversation.active_turn is self._turn:
            if completed:
                self._message = self._conversation.seal(self._turn)
            else:
                logger.info("Reply stream closed before completion; discarding partial reply")
                self._conversation.abandon(self._turn)
        if not self._closed:
            self._closed = True
            self._response.close()

    def close(self) -> None:
        self._close()

    def _chunks(self) -> Generator[bytes, None, None]:
        if getattr(self._response, "raw", None) is None:
            raise StreamUnavailableError("Response has no readable body")
        try:
            yield from self._response.iter_content(chunk_size=self._chunk_size)
        except requests.RequestException as e:
            raise TransportError(f"Reply stream interrupted: {e}") from e

    def __iter__(self) -> Iterator[DecodedPayload]:
        if self._started:
            return
        self._started = True
        completed = False
        try:
            for result in SSEStreamParser.iter_payloads(self._chunks(), self._splitter):
                if result.error:
                    self.errors.append(result.error)
                if result.payload is None:
                    continue
                self._turn.apply(result.payload)
                notice = self._trigger.observe(result.payload)
                if notice is not None and self._on_transfer is not None:
                    self._on_transfer(notice)
                yield result.payload
            completed = True
        finally:
            self._close(completed=completed)

    def until_done(self) -> ChatStream:
        """Consume the whole stream. Returns self for chaining."""
        for _ in self:
            pass
        return self

    def __enter__(self) -> ChatStream:
        return self

    def __exit__(self, *_: object) -> None:
        self._close()

    @property
    def turn(self) -> AssistantTurn:
        return self._turn

    @property
    def state(self) -> TurnState:
        return self._turn.state

    @property
    def display(self) -> str:
        """Reply as shown to the user."""
        return self._turn.display

    @property
    def text(self) -> str:
        """Alias for display."""
        return self.display

    @property
    def storage_safe(self) -> str:
        """Reply as it will be persisted."""
        return self._turn.storage_safe

    @property
    def notice(self) -> TransferNotice | None:
        return self._trigger.notice

    @property
    def message(self) -> Message | None:
        """The sealed assistant message, once the stream completed."""
        return self._message
