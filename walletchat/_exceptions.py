"""Typed error hierarchy for the chat API and the stream decoder."""


class WalletChatError(Exception):
    """Base exception for all walletchat errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        request_id: str | None = None,
        method: str | None = None,
        path: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.request_id = request_id
        self.method = method
        self.path = path


class AuthenticationError(WalletChatError):
    """401/403 — the backend refused the API key or the user id."""


class NotFoundError(WalletChatError):
    """404 — no chat with that id."""


class ValidationError(WalletChatError):
    """400/422 — message body rejected (empty message, missing chatId or userId)."""


class RateLimitError(WalletChatError):
    """429 — the assistant is throttling this user."""


class APIError(WalletChatError):
    """Chat backend failed to answer (5xx, or any status without a dedicated class)."""


class TransportError(APIError):
    """The reply stream could not be opened or read."""


class StreamUnavailableError(WalletChatError):
    """The response carries no readable body to stream from."""


class ConversationStateError(WalletChatError):
    """A turn was opened, applied or sealed out of order."""


# Statuses the chat backend answers with; anything else maps to APIError.
STATUS_MAP: dict[int, type[WalletChatError]] = {
    400: ValidationError,
    401: AuthenticationError,
    403: AuthenticationError,
    404: NotFoundError,
    422: ValidationError,
    429: RateLimitError,
}
