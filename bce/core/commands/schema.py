# bce/core/commands/schema.py
"""SQLite schema management for the command grammar store.

Four tables hold the grammar: command, command_alias, command_arg and
command_opt. Every child table cascades deletes from its owner, so removing
a root command removes its entire subtree. The schema version is kept in
PRAGMA user_version; a store with a different non-zero version is rejected.
"""

import logging
import os
import sqlite3
from pathlib import Path

from bce.core.errors import (
    DatabaseOpenError,
    DatabasePragmaError,
    SchemaError,
    SchemaVersionMismatchError,
)

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
    CREATE TABLE IF NOT EXISTS command (
        uuid TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        parent_cmd TEXT,
        FOREIGN KEY(parent_cmd) REFERENCES command(uuid) ON DELETE CASCADE
    );

    CREATE UNIQUE INDEX IF NOT EXISTS command_parent_name_idx
        ON command (parent_cmd, name);

    -- NULL parents are distinct in the index above
    CREATE UNIQUE INDEX IF NOT EXISTS command_root_name_idx
        ON command (name) WHERE parent_cmd IS NULL;

    CREATE TABLE IF NOT EXISTS command_alias (
        uuid TEXT PRIMARY KEY,
        cmd_uuid TEXT NOT NULL,
        name TEXT NOT NULL,
        FOREIGN KEY(cmd_uuid) REFERENCES command(uuid) ON DELETE CASCADE
    );

    CREATE INDEX IF NOT EXISTS command_alias_name_idx
        ON command_alias (name);

    CREATE UNIQUE INDEX IF NOT EXISTS command_alias_cmd_name_idx
        ON command_alias (cmd_uuid, name);

    CREATE TABLE IF NOT EXISTS command_arg (
        uuid TEXT PRIMARY KEY,
        cmd_uuid TEXT NOT NULL,
        arg_type TEXT NOT NULL
            CHECK (arg_type IN ('NONE', 'OPTION', 'FILE', 'TEXT')),
        description TEXT NOT NULL,
        long_name TEXT,
        short_name TEXT,
        FOREIGN KEY(cmd_uuid) REFERENCES command(uuid) ON DELETE CASCADE,
        CHECK ((long_name IS NOT NULL) OR (short_name IS NOT NULL))
    );

    CREATE INDEX IF NOT EXISTS command_arg_cmd_uuid_idx
        ON command_arg (cmd_uuid);

    CREATE UNIQUE INDEX IF NOT EXISTS command_arg_longname_idx
        ON command_arg (cmd_uuid, long_name);

    CREATE TABLE IF NOT EXISTS command_opt (
        uuid TEXT PRIMARY KEY,
        cmd_arg_uuid TEXT NOT NULL,
        name TEXT NOT NULL,
        FOREIGN KEY(cmd_arg_uuid) REFERENCES command_arg(uuid) ON DELETE CASCADE
    );

    CREATE UNIQUE INDEX IF NOT EXISTS command_opt_arg_name_idx
        ON command_opt (cmd_arg_uuid, name);
"""


def open_database(db_path: str, journal_mode: str = "WAL") -> sqlite3.Connection:
    """Open the grammar store.

    Creates the database directory if needed, enables WAL mode so that
    completion requests from several shells do not block each other, and
    turns on foreign key enforcement (required for cascading deletes).
    The connection runs in autocommit mode; callers group writes with
    CommandRepository.transaction().

    Args:
        db_path: Path to the SQLite database file (or ":memory:").
        journal_mode: SQLite journal mode; exported stores use "DELETE" so
            the file stands alone.

    Returns:
        Open connection.

    Raises:
        DatabaseOpenError: If the file cannot be opened.
        DatabasePragmaError: If a required pragma cannot be applied.
    """
    db_dir = os.path.dirname(db_path)
    try:
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)
        conn = sqlite3.connect(db_path, isolation_level=None)
    except (OSError, sqlite3.Error) as e:
        raise DatabaseOpenError(f"Unable to open database {db_path}: {e}") from e

    try:
        conn.execute(f"PRAGMA journal_mode={journal_mode}")
        conn.execute("PRAGMA foreign_keys=ON")
    except sqlite3.Error as e:
        conn.close()
        raise DatabasePragmaError(f"Unable to configure database {db_path}: {e}") from e

    logger.debug("Opened database %s", db_path)
    return conn


def open_read_only(db_path: str) -> sqlite3.Connection:
    """Open an existing store for reading without changing the file.

    No directory is created and no pragma is written, so read-only files
    and mounts can be opened.

    Raises:
        DatabaseOpenError: If the file cannot be opened.
    """
    uri = f"{Path(db_path).resolve().as_uri()}?mode=ro"
    try:
        conn = sqlite3.connect(uri, uri=True, isolation_level=None)
    except sqlite3.Error as e:
        raise DatabaseOpenError(f"Unable to open database {db_path}: {e}") from e

    logger.debug("Opened database %s read-only", db_path)
    return conn


def get_schema_version(conn: sqlite3.Connection) -> int:
    """Return the schema version stored in the database (0 when fresh)."""
    try:
        row = conn.execute("PRAGMA user_version").fetchone()
    except sqlite3.Error as e:
        raise DatabasePragmaError(f"Unable to read schema version: {e}") from e
    return int(row[0]) if row else 0


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables and stamp the schema version.

    Raises:
        SchemaError: If any statement fails.
    """
    try:
        conn.executescript(SCHEMA_SQL)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    except sqlite3.Error as e:
        raise SchemaError(f"Unable to create database schema: {e}") from e
    logger.info("Created schema version %d", SCHEMA_VERSION)


def ensure_schema(conn: sqlite3.Connection, create: bool = True) -> int:
    """Verify (and, for a fresh store, create) the schema.

    Args:
        conn: Open connection.
        create: Create the schema when the store is empty.

    Returns:
        The schema version in use.

    Raises:
        SchemaVersionMismatchError: If the store uses another schema version.
    """
    version = get_schema_version(conn)
    if version == 0 and create:
        create_schema(conn)
        version = get_schema_version(conn)
    if version != SCHEMA_VERSION:
        raise SchemaVersionMismatchError(expected=SCHEMA_VERSION, found=version)
    return version
