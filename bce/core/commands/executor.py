# bce/core/commands/executor.py
"""Completion executor for processing one completion request.

This module provides the CompletionExecutor class which loads the grammar
of the command being typed, prunes it against the typed words and builds
the candidate list.
"""

import logging

from bce.core.commands.parser import CompletionInput
from bce.core.commands.prune import prune_command
from bce.core.commands.recommend import recommend
from bce.core.commands.repository import CommandRepository

logger = logging.getLogger(__name__)


class CompletionExecutor:
    """Executor for completion requests.

    The CompletionExecutor looks up the root command named by the first
    word of the line, loads its full subtree, prunes it and returns the
    recommendations. An unknown command yields no recommendations rather
    than an error; store failures propagate to the caller.

    Attributes:
        repository: CommandRepository for grammar lookup.

    Example:
        >>> repo = CommandRepository(open_database("completion.db"))
        >>> executor = CompletionExecutor(repository=repo)
        >>> ci = CompletionInput(line="kubectl get -o ", cursor=15)
        >>> executor.execute(ci)
        ['json', 'wide']
    """

    def __init__(self, repository: CommandRepository) -> None:
        """Initialize the CompletionExecutor.

        Args:
            repository: CommandRepository for grammar lookup.
        """
        self.repository = repository

    def execute(self, completion_input: CompletionInput) -> list[str]:
        """Compute the completion candidates for a command line.

        Args:
            completion_input: Line and cursor of the request.

        Returns:
            Ordered, de-duplicated candidates (possibly empty).

        Raises:
            QueryError: If loading the grammar fails.
        """
        command_name = completion_input.command_name
        if command_name is None:
            return []

        root = self.repository.get_command(command_name)
        if root is None:
            logger.info("No grammar stored for %r", command_name)
            return []

        flag_names = root.arg_names()
        prune_command(root, completion_input.tokens[1:])
        current_word = completion_input.current_word
        previous_word = completion_input.previous_word
        logger.debug(
            "Completing %r (current=%r, previous=%r)",
            command_name,
            current_word,
            previous_word,
        )
        return recommend(root, current_word, previous_word, flag_names)
