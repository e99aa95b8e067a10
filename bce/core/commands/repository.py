# bce/core/commands/repository.py
"""SQLite repository for the command grammar tree.

This module converts between relational rows and the in-memory Command
tree. Loading and storing walk the tree recursively; deleting relies on the
schema's cascading foreign keys.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager

from bce.core.commands.models import (
    ARG_TYPE_FIELD_SIZE,
    DESCRIPTION_FIELD_SIZE,
    NAME_FIELD_SIZE,
    SHORTNAME_FIELD_SIZE,
    UUID_FIELD_SIZE,
    ArgType,
    Command,
    CommandAlias,
    CommandArg,
    CommandOpt,
    new_id,
)
from bce.core.errors import InvalidRecordError, QueryError

logger = logging.getLogger(__name__)

# Queries used while loading a tree
ROOT_COMMAND_READ_SQL = """
    SELECT c.uuid, c.name, c.parent_cmd
    FROM command c
    LEFT JOIN command_alias a ON a.cmd_uuid = c.uuid
    WHERE c.parent_cmd IS NULL
    AND (c.name = ?1 OR a.name = ?1)
    ORDER BY (c.name = ?1) DESC, c.name
    LIMIT 1
"""

COMMAND_ALIAS_READ_SQL = """
    SELECT a.uuid, a.cmd_uuid, a.name
    FROM command_alias a
    WHERE a.cmd_uuid = ?1
    ORDER BY a.name
"""

SUB_COMMAND_READ_SQL = """
    SELECT c.uuid, c.name, c.parent_cmd
    FROM command c
    WHERE c.parent_cmd = ?1
    ORDER BY c.name
"""

COMMAND_ARG_READ_SQL = """
    SELECT ca.uuid, ca.cmd_uuid, ca.arg_type, ca.description,
           ca.long_name, ca.short_name
    FROM command_arg ca
    WHERE ca.cmd_uuid = ?1
    ORDER BY ca.long_name, ca.short_name
"""

COMMAND_OPT_READ_SQL = """
    SELECT co.uuid, co.cmd_arg_uuid, co.name
    FROM command_opt co
    WHERE co.cmd_arg_uuid = ?1
    ORDER BY co.name
"""

ROOT_COMMAND_NAMES_SQL = """
    SELECT c.name
    FROM command c
    WHERE c.parent_cmd IS NULL
    ORDER BY c.name
"""

# Queries used by import/export
DATABASE_LIST_SQL = "PRAGMA database_list"

COMMAND_WRITE_SQL = """
    INSERT INTO command (uuid, name, parent_cmd) VALUES (?, ?, ?)
"""

COMMAND_ALIAS_WRITE_SQL = """
    INSERT INTO command_alias (uuid, cmd_uuid, name) VALUES (?, ?, ?)
"""

COMMAND_ARG_WRITE_SQL = """
    INSERT INTO command_arg (
        uuid, cmd_uuid, arg_type, description, long_name, short_name
    ) VALUES (?, ?, ?, ?, ?, ?)
"""

COMMAND_OPT_WRITE_SQL = """
    INSERT INTO command_opt (uuid, cmd_arg_uuid, name) VALUES (?, ?, ?)
"""

# Child rows are removed by ON DELETE CASCADE
COMMAND_DELETE_SQL = """
    DELETE FROM command WHERE name = ? AND parent_cmd IS NULL
"""


def _check_length(kind: str, field_name: str, value: str | None, limit: int) -> None:
    if value is not None and len(value) > limit:
        raise InvalidRecordError(
            f"{kind} {field_name} exceeds {limit} characters: {value!r}"
        )


class CommandRepository:
    """Repository for loading and storing command trees.

    One repository is created per request. It keeps one cursor per fixed
    query so each statement is compiled once and reused by every recursive
    call of the same request.

    Attributes:
        conn: Open connection (see schema.open_database).

    Example:
        >>> conn = open_database("completion.db")
        >>> ensure_schema(conn)
        >>> repo = CommandRepository(conn)
        >>> cmd = repo.get_command("kubectl")
        >>> if cmd is not None:
        ...     print([sub.name for sub in cmd.sub_commands])
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._cursors: dict[str, sqlite3.Cursor] = {}

    # ------------------------------------------------------------------
    # Statement helpers
    # ------------------------------------------------------------------

    def _cursor(self, sql: str) -> sqlite3.Cursor:
        cursor = self._cursors.get(sql)
        if cursor is None:
            cursor = self.conn.cursor()
            self._cursors[sql] = cursor
        return cursor

    def _query(self, sql: str, params: tuple = ()) -> list[tuple]:
        """Run a cached read query and return all rows.

        Rows are fetched eagerly so the same cursor can be reused by a
        recursive call before the caller is done with the result.
        """
        try:
            return self._cursor(sql).execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise QueryError(f"Query failed: {e}") from e

    def _execute(self, sql: str, params: tuple = ()) -> int:
        try:
            return self._cursor(sql).execute(sql, params).rowcount
        except sqlite3.Error as e:
            raise QueryError(f"Write failed: {e}") from e

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group statements into one transaction.

        Commits on success and rolls back on any exception, so a failed
        subtree write leaves the store unchanged. Nested use joins the
        outer transaction.
        """
        if self.conn.in_transaction:
            yield
            return

        try:
            self.conn.execute("BEGIN")
        except sqlite3.Error as e:
            raise QueryError(f"Unable to begin transaction: {e}") from e
        try:
            yield
        except BaseException:
            self.conn.rollback()
            raise
        try:
            self.conn.commit()
        except sqlite3.Error as e:
            raise QueryError(f"Unable to commit transaction: {e}") from e

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def find_root(self, name_or_alias: str) -> Command | None:
        """Find a top-level command by name or alias.

        An exact name match wins over an alias match.

        Args:
            name_or_alias: Name typed as the first word of the command line.

        Returns:
            The root command without children, or None if not found.
        """
        rows = self._query(ROOT_COMMAND_READ_SQL, (name_or_alias,))
        if not rows:
            return None
        cmd_uuid, name, parent_cmd = rows[0]
        return Command(name=name, id=cmd_uuid, parent_id=parent_cmd)

    def load_subtree(self, root: Command) -> Command:
        """Populate a command with its aliases, args and sub-commands.

        Children are loaded in a fixed order: aliases, then args with their
        options, then sub-commands (each recursively).

        Args:
            root: Command whose id identifies the subtree.

        Returns:
            The same command, fully populated.

        Raises:
            QueryError: If any query fails at any depth.
        """
        root.aliases = self._load_aliases(root.id)
        root.args = self._load_args(root.id)
        root.sub_commands = [
            self.load_subtree(Command(name=name, id=cmd_uuid, parent_id=parent_cmd))
            for cmd_uuid, name, parent_cmd in self._query(
                SUB_COMMAND_READ_SQL, (root.id,)
            )
        ]
        return root

    def _load_aliases(self, cmd_uuid: str) -> list[CommandAlias]:
        return [
            CommandAlias(id=alias_uuid, command_id=owner, name=name)
            for alias_uuid, owner, name in self._query(
                COMMAND_ALIAS_READ_SQL, (cmd_uuid,)
            )
        ]

    def _load_args(self, cmd_uuid: str) -> list[CommandArg]:
        args = []
        for row in self._query(COMMAND_ARG_READ_SQL, (cmd_uuid,)):
            arg_uuid, owner, arg_type, description, long_name, short_name = row
            args.append(
                CommandArg(
                    id=arg_uuid,
                    command_id=owner,
                    arg_type=ArgType(arg_type),
                    description=description or "",
                    long_name=long_name,
                    short_name=short_name,
                    opts=self._load_opts(arg_uuid),
                )
            )
        return args

    def _load_opts(self, arg_uuid: str) -> list[CommandOpt]:
        return [
            CommandOpt(id=opt_uuid, cmd_arg_id=owner, name=name)
            for opt_uuid, owner, name in self._query(COMMAND_OPT_READ_SQL, (arg_uuid,))
        ]

    def get_command(self, name_or_alias: str) -> Command | None:
        """Load the full tree of a root command inside one read transaction.

        Returns:
            The populated root command, or None if no root matches.
        """
        with self.transaction():
            root = self.find_root(name_or_alias)
            if root is None:
                logger.debug("No root command matches %r", name_or_alias)
                return None
            return self.load_subtree(root)

    def root_command_names(self) -> list[str]:
        """List the names of all top-level commands."""
        return [row[0] for row in self._query(ROOT_COMMAND_NAMES_SQL)]

    def database_path(self) -> str:
        """Return the file backing this store ("" for an in-memory store)."""
        for _, name, path in self._query(DATABASE_LIST_SQL):
            if name == "main":
                return path or ""
        return ""

    # ------------------------------------------------------------------
    # Store / delete
    # ------------------------------------------------------------------

    def store_subtree(self, command: Command) -> None:
        """Insert a command and its full subtree.

        Rows are written in order: the command, its aliases, its
        sub-commands (recursively), then its args each followed by its
        options. Missing ids are generated and back-references are filled
        in from the owning record. Call inside transaction() so a failure
        does not leave a partial subtree behind.

        Raises:
            InvalidRecordError: If a field exceeds its maximum length.
            QueryError: If an insert fails (e.g. a uniqueness violation).
        """
        if not command.id:
            command.id = new_id()
        _check_length("command", "id", command.id, UUID_FIELD_SIZE)
        _check_length("command", "name", command.name, NAME_FIELD_SIZE)
        self._execute(COMMAND_WRITE_SQL, (command.id, command.name, command.parent_id))

        for alias in command.aliases:
            alias.id = alias.id or new_id()
            alias.command_id = command.id
            _check_length("alias", "name", alias.name, NAME_FIELD_SIZE)
            self._execute(COMMAND_ALIAS_WRITE_SQL, (alias.id, alias.command_id, alias.name))

        for sub_cmd in command.sub_commands:
            sub_cmd.parent_id = command.id
            self.store_subtree(sub_cmd)

        for arg in command.args:
            self._store_arg(command, arg)

    def _store_arg(self, command: Command, arg: CommandArg) -> None:
        arg.id = arg.id or new_id()
        arg.command_id = command.id
        if not arg.long_name and not arg.short_name:
            raise InvalidRecordError(
                f"Argument of command {command.name!r} has neither a long nor a short name"
            )
        _check_length("arg", "long_name", arg.long_name, NAME_FIELD_SIZE)
        _check_length("arg", "short_name", arg.short_name, SHORTNAME_FIELD_SIZE)
        _check_length("arg", "arg_type", arg.arg_type.value, ARG_TYPE_FIELD_SIZE)
        _check_length("arg", "description", arg.description, DESCRIPTION_FIELD_SIZE)
        self._execute(
            COMMAND_ARG_WRITE_SQL,
            (
                arg.id,
                arg.command_id,
                arg.arg_type.value,
                arg.description,
                arg.long_name or None,
                arg.short_name or None,
            ),
        )

        for opt in arg.opts:
            opt.id = opt.id or new_id()
            opt.cmd_arg_id = arg.id
            _check_length("opt", "name", opt.name, NAME_FIELD_SIZE)
            self._execute(COMMAND_OPT_WRITE_SQL, (opt.id, opt.cmd_arg_id, opt.name))

    def delete_subtree(self, name: str) -> bool:
        """Delete a top-level command and, by cascade, its whole subtree.

        Args:
            name: Name of the root command.

        Returns:
            True if the command was deleted, False if it didn't exist.
        """
        deleted = self._execute(COMMAND_DELETE_SQL, (name,)) > 0
        if deleted:
            logger.debug("Deleted command %r", name)
        return deleted

    def replace_subtree(self, command: Command) -> None:
        """Delete any root command with the same name, then store this one."""
        with self.transaction():
            self.delete_subtree(command.name)
            self.store_subtree(command)
