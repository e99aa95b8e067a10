"""Prune a loaded command tree against the words already typed.

Pruning annotates the tree in place: every command and argument that was
typed is marked present_on_cmdline, arguments that need nothing more are
dropped, and once a sub-command is typed its siblings are dropped because
they can no longer appear on this command line. Each level is rebuilt as a
new list while walking it.
"""

import logging
from collections.abc import Collection

from bce.core.commands.models import Command, CommandArg

logger = logging.getLogger(__name__)


def matches(name: str | None, words: Collection[str]) -> bool:
    """Check whether a grammar name was typed.

    A word matches when it equals the name, or equals the name followed by
    the '=' the tokenizer keeps attached (e.g. "--output=").
    """
    if not name:
        return False
    return name in words or f"{name}=" in words


def _arg_is_present(arg: CommandArg, words: Collection[str]) -> bool:
    return matches(arg.long_name, words) or matches(arg.short_name, words)


def _command_is_present(cmd: Command, words: Collection[str]) -> bool:
    if matches(cmd.name, words):
        return True
    return any(matches(alias, words) for alias in cmd.alias_names())


def prune_arguments(command: Command, words: Collection[str]) -> None:
    """Mark typed arguments and drop the ones that are fully consumed.

    A typed argument is consumed when it takes no options or when one of
    its options was typed as well. A typed argument still waiting for one
    of its options is kept (and marked present).

    Args:
        command: Command whose args are pruned in place.
        words: Words typed on the command line.
    """
    retained: list[CommandArg] = []
    for arg in command.args:
        arg.present_on_cmdline = _arg_is_present(arg, words)
        if arg.present_on_cmdline:
            if not arg.opts or any(opt.name in words for opt in arg.opts):
                logger.debug("Argument %s consumed", arg.display_name())
                continue
        retained.append(arg)
    command.args = retained


def prune_sub_commands(command: Command, words: Collection[str]) -> None:
    """Prune the sub-command tree below `command`.

    1. Mark each direct sub-command present when its name or an alias was
       typed. The first present one removes all its siblings.
    2. Prune arguments and sub-commands of every remaining sub-command.
    3. Drop remaining sub-commands that are present and have nothing left
       to offer (no sub-commands, no args).

    Args:
        command: Command whose sub-commands are pruned in place.
        words: Words typed on the command line.
    """
    for sub_cmd in command.sub_commands:
        sub_cmd.present_on_cmdline = _command_is_present(sub_cmd, words)

    chosen = next((s for s in command.sub_commands if s.present_on_cmdline), None)
    if chosen is not None:
        command.sub_commands = [chosen]

    for sub_cmd in command.sub_commands:
        prune_arguments(sub_cmd, words)
        prune_sub_commands(sub_cmd, words)

    command.sub_commands = [
        sub_cmd
        for sub_cmd in command.sub_commands
        if not (
            sub_cmd.present_on_cmdline
            and not sub_cmd.sub_commands
            and not sub_cmd.args
        )
    ]


def prune_command(root: Command, words: Collection[str]) -> Command:
    """Prune a freshly loaded tree against the typed words.

    The root is always present (it was found from the first word). With no
    words there is nothing to prune and the tree is left untouched.

    Args:
        root: Root command of the loaded tree.
        words: Words typed after the command name.

    Returns:
        The same root, pruned in place.
    """
    root.present_on_cmdline = True
    if not words:
        return root

    word_set = frozenset(words)
    prune_arguments(root, word_set)
    prune_sub_commands(root, word_set)
    return root
