"""Turn a pruned command tree into completion candidates.

Recommendation has two phases:

1. Required: when the word at (or just before) the cursor is a typed flag
   that takes a value from a fixed list, only those values are offered.
2. Optional: otherwise every remaining sub-command, untyped argument and
   pending option value in the tree is offered, de-duplicated in first-seen
   order.
"""

from collections.abc import Collection

from bce.core.commands.models import ArgType, Command, CommandArg
from bce.core.commands.prune import matches


def find_present_arg(command: Command, word: str) -> CommandArg | None:
    """Depth-first search for a typed argument named `word`."""
    for arg in command.args:
        if arg.present_on_cmdline and matches_arg(arg, word):
            return arg
    for sub_cmd in command.sub_commands:
        found = find_present_arg(sub_cmd, word)
        if found is not None:
            return found
    return None


def matches_arg(arg: CommandArg, word: str) -> bool:
    return any(matches(name, (word,)) for name in arg.names())


def required_recommendations(
    root: Command,
    current_word: str,
    previous_word: str | None = None,
    flag_names: Collection[str] = (),
) -> list[str] | None:
    """Return the option values of the flag being completed, if any.

    The current word is looked up first. When it is not a typed flag the
    previous word is tried, which covers "cmd -o <TAB>". A current word
    naming one of `flag_names` is a flag in its own right, so the previous
    word is not consulted for it.

    Returns:
        Option names in load order, or None when the optional phase should
        run instead.
    """
    arg = find_present_arg(root, current_word) if current_word else None
    if arg is None and previous_word and not _names_flag(current_word, flag_names):
        arg = find_present_arg(root, previous_word)
    if arg is None or arg.arg_type is ArgType.NONE:
        return None
    return arg.opt_names()


def _names_flag(word: str, flag_names: Collection[str]) -> bool:
    return bool(word) and any(matches(name, (word,)) for name in flag_names)


def _collect_optional(command: Command, found: dict[str, None]) -> None:
    for sub_cmd in command.sub_commands:
        if not sub_cmd.present_on_cmdline:
            found.setdefault(sub_cmd.display_name())

    for arg in command.args:
        if arg.present_on_cmdline:
            for opt_name in arg.opt_names():
                found.setdefault(opt_name)
        else:
            found.setdefault(arg.display_name())

    for sub_cmd in command.sub_commands:
        _collect_optional(sub_cmd, found)


def optional_recommendations(root: Command) -> list[str]:
    """Collect every remaining completion in the pruned tree.

    - sub-commands not typed yet, as "name" or "name (shortest-alias)"
    - arguments not typed yet, as "--long (-s)", "--long" or "-s"
    - option values of typed arguments still waiting for one
    """
    found: dict[str, None] = {}
    _collect_optional(root, found)
    return list(found)


def recommend(
    root: Command,
    current_word: str,
    previous_word: str | None = None,
    flag_names: Collection[str] = (),
) -> list[str]:
    """Produce the ordered candidate list for a pruned tree.

    Args:
        root: Pruned root command.
        current_word: Word at the cursor ("" when starting a new word).
        previous_word: Word before the current one, if any.
        flag_names: Every argument name of the unpruned grammar.

    Returns:
        Completion candidates, possibly empty.
    """
    required = required_recommendations(root, current_word, previous_word, flag_names)
    if required is not None:
        return required
    return optional_recommendations(root)
