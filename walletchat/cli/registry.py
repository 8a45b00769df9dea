"""
Command registry for CLI command discovery.
"""

import importlib
import inspect

from .base import Command, CommandGroup

COMMAND_MODULES = ("chat",)


class CommandRegistry:
    """Maps command names and aliases to CommandGroup instances."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def register_command(self, command: Command) -> None:
        if not isinstance(command, Command):
            raise TypeError(f"Expected Command instance, got {type(command)}")
        for name in command.get_all_names():
            if name in self._commands:
                raise ValueError(f"Command '{name}' is already registered")
            self._commands[name] = command

    def discover_commands_from_module(self, module_name: str) -> None:
        """Register every concrete CommandGroup defined in a module."""
        module = importlib.import_module(module_name)
        for _name, obj in inspect.getmembers(module, inspect.isclass):
            if (
                issubclass(obj, CommandGroup)
                and obj is not CommandGroup
                and obj.__module__ == module.__name__
                and not inspect.isabstract(obj)
            ):
                self.register_command(obj())

    def auto_discover_commands(self, package_name: str = "walletchat.cli.commands") -> None:
        if self._commands:
            return
        for module in COMMAND_MODULES:
            self.discover_commands_from_module(f"{package_name}.{module}")

    def get_command(self, name: str) -> Command:
        """
        Raises:
            KeyError: If command is not found
        """
        if name not in self._commands:
            raise KeyError(f"Command '{name}' not found")
        return self._commands[name]

    def get_primary_commands(self) -> list[Command]:
        """Unique commands, keyed by primary name (aliases excluded)."""
        return [cmd for name, cmd in self._commands.items() if name == cmd.name]

    def clear(self) -> None:
        self._commands.clear()


# Global command registry instance
registry = CommandRegistry()
