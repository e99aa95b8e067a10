# bce/interfaces/cli/transfer.py
"""Import and export of command grammars.

Two file formats are supported:

- json: a GrammarDocument (see schemas.py), convenient to write by hand;
- sqlite: another bce store with the same schema version.

Imports replace existing root commands of the same name and run in a single
transaction on the destination store, so a failure leaves it unchanged.
"""

import logging
import os
import sqlite3
from enum import Enum

from pydantic import ValidationError

from bce.core.commands.models import Command, CommandAlias, CommandArg, CommandOpt
from bce.core.commands.repository import CommandRepository
from bce.core.commands.schema import ensure_schema, open_database, open_read_only
from bce.core.errors import InvalidArgumentError, ReadFileError
from bce.interfaces.cli.schemas import ArgDocument, CommandDocument, GrammarDocument

logger = logging.getLogger(__name__)


class FileFormat(str, Enum):
    SQLITE = "sqlite"
    JSON = "json"


def detect_format(filename: str, explicit: str | None = None) -> FileFormat:
    """Pick the file format: explicit choice, else by extension."""
    if explicit:
        return FileFormat(explicit.lower())
    if filename.lower().endswith(".json"):
        return FileFormat.JSON
    return FileFormat.SQLITE


# ============================================================================
# Tree <-> document conversion
# ============================================================================


def command_to_document(cmd: Command) -> CommandDocument:
    return CommandDocument(
        id=cmd.id or None,
        name=cmd.name,
        aliases=cmd.alias_names(),
        args=[
            ArgDocument(
                id=arg.id or None,
                arg_type=arg.arg_type,
                description=arg.description,
                long_name=arg.long_name,
                short_name=arg.short_name,
                opts=arg.opt_names(),
            )
            for arg in cmd.args
        ],
        sub_commands=[command_to_document(sub_cmd) for sub_cmd in cmd.sub_commands],
    )


def command_from_document(doc: CommandDocument, parent_id: str | None = None) -> Command:
    """Build an in-memory command tree from a validated document.

    Ids present in the document are kept; missing ones are generated when
    the tree is stored.
    """
    cmd = Command(name=doc.name, id=doc.id or "", parent_id=parent_id)
    cmd.aliases = [CommandAlias(name=name) for name in doc.aliases]
    cmd.args = [
        CommandArg(
            id=arg.id or "",
            arg_type=arg.arg_type,
            description=arg.description,
            long_name=arg.long_name,
            short_name=arg.short_name,
            opts=[CommandOpt(name=name) for name in arg.opts],
        )
        for arg in doc.args
    ]
    cmd.sub_commands = [
        command_from_document(sub_doc, parent_id=cmd.id or None)
        for sub_doc in doc.sub_commands
    ]
    return cmd


def to_document(commands: list[Command]) -> GrammarDocument:
    return GrammarDocument(commands=[command_to_document(cmd) for cmd in commands])


def from_document(doc: GrammarDocument) -> list[Command]:
    return [command_from_document(cmd_doc) for cmd_doc in doc.commands]


# ============================================================================
# JSON
# ============================================================================


def _load_command(repo: CommandRepository, command_name: str) -> Command:
    cmd = repo.get_command(command_name)
    if cmd is None:
        raise InvalidArgumentError(f"Unknown command: {command_name}")
    return cmd


def _check_not_store(repo: CommandRepository, filename: str) -> None:
    store_path = repo.database_path()
    if store_path and os.path.realpath(filename) == os.path.realpath(store_path):
        raise InvalidArgumentError(f"Refusing to export over the grammar store {filename}")


def export_json(repo: CommandRepository, command_name: str, filename: str) -> None:
    """Write one root command's grammar to a JSON file."""
    _check_not_store(repo, filename)
    cmd = _load_command(repo, command_name)
    doc = to_document([cmd])
    try:
        with open(filename, "w", encoding="utf-8") as f:
            f.write(doc.model_dump_json(indent=2, exclude_none=True))
            f.write("\n")
    except OSError as e:
        raise ReadFileError(f"Unable to write {filename}: {e}") from e
    logger.info("Exported %s to %s", command_name, filename)


def read_json(filename: str) -> GrammarDocument:
    """Read and validate a JSON grammar file.

    Raises:
        ReadFileError: If the file cannot be read or is not a valid document.
    """
    try:
        with open(filename, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ReadFileError(f"Unable to read {filename}: {e}") from e

    try:
        return GrammarDocument.model_validate_json(content)
    except ValidationError as e:
        raise ReadFileError(f"Invalid grammar file {filename}: {e}") from e


def import_commands(repo: CommandRepository, commands: list[Command]) -> list[str]:
    """Replace-or-insert root commands in one transaction.

    Returns:
        Names of the imported commands.
    """
    with repo.transaction():
        for cmd in commands:
            cmd.parent_id = None
            repo.replace_subtree(cmd)
            logger.info("Imported command %s", cmd.name)
    return [cmd.name for cmd in commands]


def import_json(repo: CommandRepository, filename: str) -> list[str]:
    """Import every root command of a JSON grammar file."""
    return import_commands(repo, from_document(read_json(filename)))


# ============================================================================
# SQLite
# ============================================================================


def _create_store(filename: str) -> sqlite3.Connection:
    conn = open_database(filename, journal_mode="DELETE")
    try:
        ensure_schema(conn)
    except Exception:
        conn.close()
        raise
    return conn


def _open_source(filename: str) -> sqlite3.Connection:
    conn = open_read_only(filename)
    try:
        ensure_schema(conn, create=False)
    except Exception:
        conn.close()
        raise
    return conn


def export_sqlite(repo: CommandRepository, command_name: str, filename: str) -> None:
    """Copy one root command's grammar into a new SQLite store."""
    _check_not_store(repo, filename)
    cmd = _load_command(repo, command_name)
    if os.path.exists(filename):
        os.remove(filename)

    conn = _create_store(filename)
    try:
        dest = CommandRepository(conn)
        with dest.transaction():
            dest.store_subtree(cmd)
    finally:
        conn.close()
    logger.info("Exported %s to %s", command_name, filename)


def import_sqlite(repo: CommandRepository, filename: str) -> list[str]:
    """Import every root command of another SQLite store."""
    if not os.path.isfile(filename):
        raise ReadFileError(f"No such file: {filename}")

    conn = _open_source(filename)
    try:
        source = CommandRepository(conn)
        commands = []
        for name in source.root_command_names():
            cmd = source.get_command(name)
            if cmd is not None:
                commands.append(cmd)
    finally:
        conn.close()

    return import_commands(repo, commands)


def export_command(
    repo: CommandRepository, command_name: str, filename: str, file_format: FileFormat
) -> None:
    if file_format is FileFormat.JSON:
        export_json(repo, command_name, filename)
    else:
        export_sqlite(repo, command_name, filename)


def import_file(
    repo: CommandRepository, filename: str, file_format: FileFormat
) -> list[str]:
    if file_format is FileFormat.JSON:
        return import_json(repo, filename)
    return import_sqlite(repo, filename)
