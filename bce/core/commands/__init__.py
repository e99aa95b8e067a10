"""Command grammar module: storage, tokenizing, pruning and recommendation.

This module provides:
- Command, CommandArg, CommandAlias, CommandOpt: Grammar tree data model
- open_database, open_read_only, ensure_schema: SQLite store setup and version check
- CommandRepository: Recursive load/store/delete of command trees
- tokenize, CompletionInput: Tokenizer for the line being completed
- prune_command: Prune a loaded tree against the typed words
- recommend: Two-phase candidate generation
- CompletionExecutor: One completion request end to end
"""

from bce.core.commands.executor import CompletionExecutor
from bce.core.commands.models import (
    ArgType,
    Command,
    CommandAlias,
    CommandArg,
    CommandOpt,
)
from bce.core.commands.parser import (
    CompletionInput,
    command_name,
    current_word,
    previous_word,
    tokenize,
)
from bce.core.commands.prune import prune_arguments, prune_command, prune_sub_commands
from bce.core.commands.recommend import (
    optional_recommendations,
    recommend,
    required_recommendations,
)
from bce.core.commands.repository import CommandRepository
from bce.core.commands.schema import (
    SCHEMA_VERSION,
    ensure_schema,
    open_database,
    open_read_only,
)

__all__ = [
    "ArgType",
    "Command",
    "CommandAlias",
    "CommandArg",
    "CommandOpt",
    "SCHEMA_VERSION",
    "open_database",
    "open_read_only",
    "ensure_schema",
    "CommandRepository",
    "CompletionInput",
    "tokenize",
    "command_name",
    "current_word",
    "previous_word",
    "prune_arguments",
    "prune_sub_commands",
    "prune_command",
    "required_recommendations",
    "optional_recommendations",
    "recommend",
    "CompletionExecutor",
]
