"""
Chat commands for the walletchat CLI.

Send a message and stream the reply, show stored history, or chat
interactively.
"""

from argparse import ArgumentParser, Namespace
from typing import TYPE_CHECKING, ClassVar

from rich.console import Console

from ..._exceptions import WalletChatError
from ...conversation import Conversation
from ..base import Command, CommandGroup
from ..display import create_display, render_history
from ..util import read_message

if TYPE_CHECKING:
    from ...client import WalletChat

EXIT_COMMANDS = ("/exit", "/quit")


def stream_reply(
    client: "WalletChat",
    conversation: Conversation,
    message: str,
    *,
    output_format: str = "verbose",
    user_id: str | None = None,
    console: Console | None = None,
) -> int:
    """Send one message and render its reply. Returns an exit code."""
    display = create_display(output_format, console=console)
    display.start()
    stream = client.chats.send(
        conversation.chat_id or "",
        message,
        conversation=conversation,
        user_id=user_id,
    )
    try:
        with stream:
            for payload in stream:
                display.on_payload(payload, stream)
    finally:
        display.finish(stream)
    return 0


class SendCommand(Command):
    """Send a single message."""

    name = "send"
    aliases: ClassVar[list[str]] = ["s"]
    description = "Send a message and stream the reply"

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("chat_id", help="Chat to post into")
        parser.add_argument("message", help="Message text")
        parser.add_argument(
            "--json", action="store_true", help="Print the persisted reply record as JSON"
        )
        parser.add_argument(
            "--no-history",
            action="store_true",
            help="Do not load prior messages (the message counts as the first one)",
        )

    def execute(self, args: Namespace, client: "WalletChat") -> int:
        try:
            if args.no_history:
                conversation = Conversation(chat_id=args.chat_id)
            else:
                conversation = client.chats.history(args.chat_id)
            return stream_reply(
                client,
                conversation,
                args.message,
                output_format="json" if args.json else "verbose",
                user_id=args.user_id,
            )
        except WalletChatError as e:
            print(f"❌ Failed to send message: {e}")
            return 1


class HistoryCommand(Command):
    """Show chat history."""

    name = "history"
    aliases: ClassVar[list[str]] = ["h"]
    description = "Show the stored messages of a chat"

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("chat_id", help="Chat to load")

    def execute(self, args: Namespace, client: "WalletChat") -> int:
        try:
            messages = client.chats.messages(args.chat_id)
        except WalletChatError as e:
            print(f"❌ Failed to load chat history: {e}")
            return 1
        render_history(messages)
        return 0


class ReplCommand(Command):
    """Interactive chat."""

    name = "repl"
    aliases: ClassVar[list[str]] = ["i"]
    description = "Chat interactively (/exit to quit)"

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument("chat_id", help="Chat to continue")

    def execute(self, args: Namespace, client: "WalletChat") -> int:
        try:
            conversation = client.chats.history(args.chat_id)
        except WalletChatError as e:
            print(f"❌ Failed to load chat history: {e}")
            return 1

        render_history(list(conversation.messages))
        print("💬 Chat Mode - Type /exit to quit")
        while True:
            message = read_message()
            if message is None or message in EXIT_COMMANDS:
                print("\n👋 Chat session ended")
                return 0
            if not message:
                continue
            try:
                stream_reply(client, conversation, message, user_id=args.user_id)
            except KeyboardInterrupt:
                print("\n⏸️  Message interrupted")
            except WalletChatError as e:
                print(f"❌ Failed to send message: {e}")


class ChatCommandGroup(CommandGroup):
    """Chat command group."""

    name = "chat"
    aliases: ClassVar[list[str]] = ["c"]
    description = "Send messages and read chat history"
    subcommand_classes: ClassVar[list[type[Command]]] = [
        SendCommand,
        HistoryCommand,
        ReplCommand,
    ]
