"""Resource namespaces for the walletchat client."""

from .chats import Chats

__all__ = [
    "Chats",
]
