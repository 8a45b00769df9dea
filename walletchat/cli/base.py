"""
Base classes for CLI commands.

Top-level commands are CommandGroups; the registry instantiates them and each
group dispatches to its subcommands.
"""

from abc import ABC, abstractmethod
from argparse import ArgumentParser, Namespace
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from ..client import WalletChat


class Command(ABC):
    """A single CLI action."""

    name: str = ""
    aliases: ClassVar[list[str]] = []
    description: str = ""

    def __init_subclass__(cls, **kwargs: object) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__name__ == "CommandGroup":
            return
        if not cls.name or not cls.description:
            raise ValueError(f"Command class {cls.__name__} must define name and description")

    @abstractmethod
    def add_arguments(self, parser: ArgumentParser) -> None:
        """Add command-specific arguments to its subparser."""

    @abstractmethod
    def execute(self, args: Namespace, client: "WalletChat") -> int:
        """
        Run the command.

        Returns:
            Exit code (0 for success, non-zero for error)
        """

    def get_all_names(self) -> list[str]:
        return [self.name, *self.aliases]


class CommandGroup(Command):
    """Command made of subcommands, e.g. ``chat send`` / ``chat history``."""

    subcommand_classes: ClassVar[list[type[Command]]] = []

    def __init__(self) -> None:
        self.subcommands: list[Command] = [cls() for cls in self.subcommand_classes]

    @property
    def dest(self) -> str:
        return f"{self.name}_command"

    def add_arguments(self, parser: ArgumentParser) -> None:
        subparsers = parser.add_subparsers(dest=self.dest, help=f"{self.description} commands")
        for command in self.subcommands:
            subparser = subparsers.add_parser(
                command.name, aliases=command.aliases, help=command.description
            )
            command.add_arguments(subparser)

    def execute(self, args: Namespace, client: "WalletChat") -> int:
        subcommand_name = getattr(args, self.dest, None)
        for command in self.subcommands:
            if subcommand_name in command.get_all_names():
                return command.execute(args, client)

        if subcommand_name:
            print(f"Error: Unknown subcommand '{subcommand_name}' for '{self.name}'")
        else:
            print(f"Error: No subcommand specified for '{self.name}'")
        print(f"Available subcommands: {', '.join(cmd.name for cmd in self.subcommands)}")
        return 1
