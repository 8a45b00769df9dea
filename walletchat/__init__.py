"""
walletchat - Python SDK for the wallet assistant chat API.

Streams assistant replies over SSE and keeps the displayed and persisted
forms of each reply apart.
"""

__version__ = "0.1.0"

from ._exceptions import (
    APIError,
    AuthenticationError,
    ConversationStateError,
    NotFoundError,
    RateLimitError,
    StreamUnavailableError,
    TransportError,
    ValidationError,
    WalletChatError,
)
from ._streaming import ChatStream
from .client import WalletChat
from .conversation import AssistantTurn, Conversation, Message, TurnState
from .streaming import (
    DecodeResult,
    FrameSplitter,
    PlainText,
    SSEStreamParser,
    ToolInvocation,
    TransferParameters,
    decode_payload,
    parse_frame,
)
from .transfer import TransferNotice, TransferTrigger

__all__ = [
    "APIError",
    "AssistantTurn",
    "AuthenticationError",
    "ChatStream",
    "Conversation",
    "ConversationStateError",
    "DecodeResult",
    "FrameSplitter",
    "Message",
    "NotFoundError",
    "PlainText",
    "RateLimitError",
    "SSEStreamParser",
    "StreamUnavailableError",
    "ToolInvocation",
    "TransferNotice",
    "TransferParameters",
    "TransferTrigger",
    "TransportError",
    "TurnState",
    "ValidationError",
    # Main client
    "WalletChat",
    "WalletChatError",
    "decode_payload",
    "parse_frame",
]
