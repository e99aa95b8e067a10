# tests/conftest.py
"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- Temporary database paths and open grammar stores
- A sample kubectl grammar tree
- Mock completion environment variables
"""

import logging
import os
import sqlite3
import tempfile
from collections.abc import Generator

import pytest

from bce.core.commands.models import (
    ArgType,
    Command,
    CommandAlias,
    CommandArg,
    CommandOpt,
)
from bce.core.commands.repository import CommandRepository
from bce.core.commands.schema import ensure_schema, open_database


def build_kubectl() -> Command:
    """Build the kubectl grammar used across tests.

    kubectl (kc)
      describe
      get (g)
        --output (-o) OPTION [json, wide]
        --watch (-w)
      --namespace (-n) TEXT
    """
    get = Command(
        name="get",
        aliases=[CommandAlias(name="g")],
        args=[
            CommandArg(
                arg_type=ArgType.OPTION,
                description="Output format",
                long_name="--output",
                short_name="-o",
                opts=[CommandOpt(name="json"), CommandOpt(name="wide")],
            ),
            CommandArg(description="Watch for changes", long_name="--watch", short_name="-w"),
        ],
    )
    describe = Command(name="describe")
    return Command(
        name="kubectl",
        aliases=[CommandAlias(name="kc")],
        sub_commands=[describe, get],
        args=[
            CommandArg(
                arg_type=ArgType.TEXT,
                description="Namespace",
                long_name="--namespace",
                short_name="-n",
            )
        ],
    )


@pytest.fixture
def temp_db() -> Generator[str, None, None]:
    """Create a temporary database file path.

    Yields:
        Path to temporary SQLite database file.
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name
    os.unlink(db_path)

    yield db_path

    # Cleanup, including WAL side files
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(db_path + suffix):
            os.unlink(db_path + suffix)


@pytest.fixture
def conn(temp_db: str) -> Generator[sqlite3.Connection, None, None]:
    """Open a fresh store with the schema created."""
    connection = open_database(temp_db)
    ensure_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def repo(conn: sqlite3.Connection) -> CommandRepository:
    return CommandRepository(conn)


@pytest.fixture
def kubectl_repo(repo: CommandRepository) -> CommandRepository:
    """Repository holding the sample kubectl grammar."""
    with repo.transaction():
        repo.store_subtree(build_kubectl())
    return repo


@pytest.fixture
def comp_env() -> dict[str, str]:
    """Completion environment as bash sets it for `complete -C`."""
    line = "kubectl get -o "
    return {"COMP_LINE": line, "COMP_POINT": str(len(line))}


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    """Undo configure_logging() calls made by the code under test."""
    handlers = list(logging.root.handlers)
    level = logging.root.level

    yield

    logging.root.handlers[:] = handlers
    logging.root.setLevel(level)


@pytest.fixture
def kubectl() -> Command:
    """Fresh in-memory kubectl grammar (see build_kubectl)."""
    return build_kubectl()
