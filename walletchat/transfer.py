"""Transfer confirmation notices raised off decoded tool invocations."""

from dataclasses import dataclass

from .streaming import NATIVE_TRANSFER, DecodedPayload, ToolInvocation

PENDING_TX_HASH = "Pending..."


@dataclass(frozen=True)
class TransferNotice:
    """Data handed to the transfer confirmation surface."""

    amount: str
    recipient: str
    tx_hash: str
    summary: str

    @property
    def pending(self) -> bool:
        return self.tx_hash == PENDING_TX_HASH


def observe(payload: DecodedPayload) -> TransferNotice | None:
    """Return a notice when ``payload`` is a native transfer, else None."""
    if not isinstance(payload, ToolInvocation) or payload.tool != NATIVE_TRANSFER:
        return None
    params = payload.parameters
    return TransferNotice(
        amount=params.amount,
        recipient=params.to,
        tx_hash=params.tx_hash or PENDING_TX_HASH,
        summary=payload.summary,
    )


class TransferTrigger:
    """Surfaces at most one transfer notice per stream."""

    def __init__(self) -> None:
        self.notice: TransferNotice | None = None

    @property
    def fired(self) -> bool:
        return self.notice is not None

    def observe(self, payload: DecodedPayload) -> TransferNotice | None:
        """Return the notice for the first transfer only."""
        if self.fired:
            return None
        self.notice = observe(payload)
        return self.notice
