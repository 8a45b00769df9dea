"""
CLI display components for streamed chat replies.

- VerboseDisplay: live text, rendered transfer card and confirmation panel
- JsonDisplay: the persisted record of the finished reply, for scripting
"""

from abc import ABC, abstractmethod
import json

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from .._streaming import ChatStream
from ..conversation import Message, TurnState
from ..streaming import DecodedPayload, ToolInvocation
from ..transfer import TransferNotice


class ChatDisplay(ABC):
    """Base class for reply renderers."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def start(self) -> None:
        """Called before the first payload."""

    @abstractmethod
    def on_payload(self, payload: DecodedPayload, stream: ChatStream) -> None:
        """Handle one decoded payload after it was applied to the turn."""

    @abstractmethod
    def finish(self, stream: ChatStream) -> None:
        """Called after the stream ended, completed or not."""


class VerboseDisplay(ChatDisplay):
    """Streams text as it arrives and renders transfers with rich."""

    def __init__(self, console: Console | None = None) -> None:
        super().__init__(console=console)
        self.printed = ""
        self.notice_shown = False

    def on_payload(self, payload: DecodedPayload, stream: ChatStream) -> None:
        if isinstance(payload, ToolInvocation):
            if self.printed:
                self.console.print()
            self.console.print(Markdown(stream.display))
            self.printed = stream.display
            if stream.notice is not None and not self.notice_shown:
                self.console.print(render_notice(stream.notice))
                self.notice_shown = True
            return

        if stream.state != TurnState.ACCUMULATING:
            return
        # Trimmed display only ever grows at the end while accumulating.
        delta = stream.display[len(self.printed) :]
        if delta:
            self.console.print(
                delta, end="", style="white", markup=False, highlight=False, soft_wrap=True
            )
            self.printed = stream.display

    def finish(self, stream: ChatStream) -> None:
        if self.printed and stream.state == TurnState.SEALED and stream.turn.invocation is None:
            self.console.print()
        if stream.state == TurnState.ABANDONED:
            self.console.print("\n[yellow]⏸️  Reply interrupted, not saved[/yellow]")
        for error in stream.errors:
            self.console.print(f"[dim]⚠️  {error}[/dim]")


class JsonDisplay(ChatDisplay):
    """Prints the persisted record once the reply is sealed."""

    def on_payload(self, payload: DecodedPayload, stream: ChatStream) -> None:
        pass

    def finish(self, stream: ChatStream) -> None:
        record = {
            "message": stream.message.to_dict() if stream.message else None,
            "display": stream.display,
            "state": stream.state.value,
            "notice": (
                {
                    "amount": stream.notice.amount,
                    "recipient": stream.notice.recipient,
                    "txHash": stream.notice.tx_hash,
                    "summary": stream.notice.summary,
                }
                if stream.notice
                else None
            ),
        }
        self.console.print(
            json.dumps(record, ensure_ascii=False),
            soft_wrap=True,
            markup=False,
            highlight=False,
        )


def render_notice(notice: TransferNotice) -> Panel:
    """Confirmation panel for a transfer notice."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("Amount", f"{notice.amount} ETH")
    table.add_row("To", notice.recipient)
    table.add_row("Tx hash", notice.tx_hash)
    if notice.summary:
        table.add_row("Summary", notice.summary)
    return Panel(
        table,
        title="💸 Transfer pending" if notice.pending else "💸 Transfer confirmed",
        border_style="yellow" if notice.pending else "green",
    )


def render_history(messages: list[Message], console: Console | None = None) -> None:
    """Print a message log, user messages right-aligned."""
    console = console or Console()
    if not messages:
        console.print("[dim]Send a message to start chatting[/dim]")
        return
    for message in messages:
        if message.role == "user":
            console.print(
                Panel(message.content, title="You", border_style="blue", expand=False),
                justify="right",
            )
        else:
            console.print(
                Panel(Markdown(message.content), title="Assistant", border_style="orange3")
            )


def create_display(format: str = "verbose", console: Console | None = None) -> ChatDisplay:
    """
    Factory function to create appropriate display.

    Args:
        format: Display format ("verbose" or "json")
    """
    if format == "json":
        return JsonDisplay(console=console)
    return VerboseDisplay(console=console)
