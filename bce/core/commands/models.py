# bce/core/commands/models.py
"""Command grammar data model.

This module defines the in-memory command tree. A Command exclusively owns
its aliases, arguments and sub-commands; an argument owns its options.
The parent_id / command_id / cmd_arg_id fields are lookup keys mirroring the
store's foreign keys and are never followed to reach an owner.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum

# Field limits enforced when records are written to the store
UUID_FIELD_SIZE = 36
NAME_FIELD_SIZE = 50
SHORTNAME_FIELD_SIZE = 5
ARG_TYPE_FIELD_SIZE = 20
DESCRIPTION_FIELD_SIZE = 200


def new_id() -> str:
    """Generate a new record identifier."""
    return str(uuid.uuid4())


class ArgType(str, Enum):
    """Kind of value an argument expects."""

    NONE = "NONE"
    OPTION = "OPTION"
    FILE = "FILE"
    TEXT = "TEXT"


@dataclass
class CommandOpt:
    """One allowed value of an OPTION argument."""

    name: str
    id: str = ""
    cmd_arg_id: str = ""


@dataclass
class CommandAlias:
    """Alternative name of a command."""

    name: str
    id: str = ""
    command_id: str = ""


@dataclass
class CommandArg:
    """A flag or argument accepted by a command.

    Attributes:
        arg_type: Kind of value expected after the flag.
        description: Human readable description.
        long_name: Long form, e.g. "--output" (optional).
        short_name: Short form, e.g. "-o" (optional).
        opts: Allowed values, in store order.
        present_on_cmdline: Set while pruning when the flag was typed.
    """

    arg_type: ArgType = ArgType.NONE
    description: str = ""
    long_name: str | None = None
    short_name: str | None = None
    opts: list[CommandOpt] = field(default_factory=list)
    id: str = ""
    command_id: str = ""
    present_on_cmdline: bool = False

    def names(self) -> list[str]:
        """Return the long and short names that are set."""
        return [n for n in (self.long_name, self.short_name) if n]

    def display_name(self) -> str:
        """Render the argument as a completion candidate.

        Returns:
            "--long (-s)" when both names exist, otherwise whichever is set.
        """
        if self.long_name and self.short_name:
            return f"{self.long_name} ({self.short_name})"
        return self.long_name or self.short_name or ""

    def opt_names(self) -> list[str]:
        return [opt.name for opt in self.opts]


@dataclass
class Command:
    """A node of the command grammar tree.

    Attributes:
        name: Command name, unique among its siblings.
        id: Unique identifier (UUID string).
        parent_id: Identifier of the owning command, None for a root command.
        aliases: Alternative names, in store order.
        sub_commands: Child commands, ordered by name.
        args: Arguments, ordered by long name then short name.
        present_on_cmdline: Set while pruning when the command was typed.

    Example:
        >>> get = Command(name="get", aliases=[CommandAlias(name="g")])
        >>> kubectl = Command(name="kubectl", sub_commands=[get])
        >>> kubectl.sub_commands[0].shortest_alias()
        'g'
    """

    name: str
    id: str = ""
    parent_id: str | None = None
    aliases: list[CommandAlias] = field(default_factory=list)
    sub_commands: list["Command"] = field(default_factory=list)
    args: list[CommandArg] = field(default_factory=list)
    present_on_cmdline: bool = False

    def alias_names(self) -> list[str]:
        return [alias.name for alias in self.aliases]

    def shortest_alias(self) -> str | None:
        """Return the shortest alias name.

        Among aliases of equal length the first one wins, so the store's
        ordering decides ties.
        """
        shortest: str | None = None
        for alias in self.aliases:
            if shortest is None or len(alias.name) < len(shortest):
                shortest = alias.name
        return shortest

    def display_name(self) -> str:
        """Render the command as a completion candidate, e.g. "get (g)"."""
        alias = self.shortest_alias()
        if alias:
            return f"{self.name} ({alias})"
        return self.name

    def arg_names(self) -> set[str]:
        """Return every long and short argument name in this subtree."""
        names = {name for arg in self.args for name in arg.names()}
        for sub_cmd in self.sub_commands:
            names |= sub_cmd.arg_names()
        return names
