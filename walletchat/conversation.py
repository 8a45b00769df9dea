"""
Conversation state for streamed chat replies.

A Conversation owns the immutable message log. Each streamed reply is built
up in an AssistantTurn, which keeps two projections of the same message:
``display`` is what the user sees, ``storage_safe`` is what gets persisted.
For transfers they always differ (formatted card vs. plain summary).
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Any, Literal

from ._exceptions import ConversationStateError
from .streaming import DecodedPayload, PlainText, ToolInvocation

logger = logging.getLogger(__name__)

Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class Message:
    """One entry of the conversation log."""

    role: Role
    content: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        """Build from a history record (``sender`` becomes ``role``)."""
        sender = data.get("sender", data.get("role"))
        return cls(
            role="user" if sender == "user" else "assistant",
            content=data.get("content") or "",
        )

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class TurnState(str, Enum):
    """Lifecycle of a streamed assistant reply."""

    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"
    SEALED = "sealed"
    ABANDONED = "abandoned"


def shorten_address(address: str) -> str:
    """0xABCDEF1234567890 -> 0xABCD...7890"""
    return f"{address[:6]}...{address[-4:]}"


def format_transfer_card(invocation: ToolInvocation) -> str:
    """Render the confirmation block shown in place of a transfer reply."""
    params = invocation.parameters
    return "\n".join(
        [
            "✅ **Transaction Successful**",
            "",
            invocation.summary,
            "",
            f"**Amount:** {params.amount} ETH",
            f"**To:** {shorten_address(params.to)}",
            f"**Status:** {'Completed' if params.tx_hash else 'Pending'}",
        ]
    )


class AssistantTurn:
    """The in-progress assistant message of one streamed response."""

    def __init__(self) -> None:
        self.display = ""
        self.storage_safe = ""
        self.state = TurnState.EMPTY
        self.invocation: ToolInvocation | None = None
        self._raw = ""

    @property
    def is_open(self) -> bool:
        return self.state in (TurnState.EMPTY, TurnState.ACCUMULATING, TurnState.FINALIZED)

    def apply(self, payload: DecodedPayload) -> None:
        """
        Apply one decoded payload.

        Text extends the reply, which is displayed and stored trimmed; a tool
        invocation replaces the message wholesale. Text arriving after a tool
        invocation is ignored.
        """
        if not self.is_open:
            raise ConversationStateError(f"Cannot apply payload to a {self.state.value} turn")

        if isinstance(payload, ToolInvocation):
            self.display = format_transfer_card(payload)
            self.storage_safe = payload.summary
            self.invocation = payload
            self.state = TurnState.FINALIZED
        elif isinstance(payload, PlainText):
            if self.state == TurnState.FINALIZED:
                logger.debug("Ignoring text after tool invocation: %s", payload.text[:200])
                return
            self._raw += payload.text
            self.display = self._raw.strip()
            self.storage_safe = self.display
            self.state = TurnState.ACCUMULATING
        else:
            raise TypeError(f"Unsupported payload: {payload!r}")

    def finish(self) -> Message:
        """The persisted projection of this turn."""
        return Message(role="assistant", content=self.storage_safe)

    def __repr__(self) -> str:
        return f"<AssistantTurn state={self.state.value} display={self.display[:40]!r}>"


class Conversation:
    """Immutable message log plus at most one active assistant turn."""

    def __init__(self, messages: list[Message] | None = None, chat_id: str | None = None):
        self.chat_id = chat_id
        self._messages: list[Message] = list(messages or [])
        self._active: AssistantTurn | None = None

    @classmethod
    def from_records(
        cls, records: list[dict[str, Any]], chat_id: str | None = None
    ) -> "Conversation":
        return cls([Message.from_dict(r) for r in records], chat_id=chat_id)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def active_turn(self) -> AssistantTurn | None:
        return self._active

    def __len__(self) -> int:
        return len(self._messages)

    def begin_turn(self, user_text: str) -> AssistantTurn:
        """Append the user message and open the assistant turn answering it."""
        if self._active is not None:
            raise ConversationStateError("An assistant turn is already in progress")
        self._messages.append(Message(role="user", content=user_text))
        self._active = AssistantTurn()
        return self._active

    def seal(self, turn: AssistantTurn) -> Message:
        """Close the active turn and append its storage-safe message to the log."""
        self._check_active(turn)
        message = turn.finish()
        self._messages.append(message)
        turn.state = TurnState.SEALED
        self._active = None
        return message

    def abandon(self, turn: AssistantTurn) -> None:
        """Close the active turn without recording a reply."""
        self._check_active(turn)
        turn.state = TurnState.ABANDONED
        self._active = None

    def _check_active(self, turn: AssistantTurn) -> None:
        if turn is not self._active:
            raise ConversationStateError("Turn is not the active turn of this conversation")

    def display_messages(self) -> list[Message]:
        """Log plus the in-progress reply as currently displayed."""
        messages = list(self._messages)
        if self._active is not None:
            messages.append(Message(role="assistant", content=self._active.display))
        return messages

    def to_records(self) -> list[dict[str, str]]:
        return [m.to_dict() for m in self._messages]

    def __repr__(self) -> str:
        return f"<Conversation chat_id={self.chat_id!r} messages={len(self._messages)}>"
