# bce/core/errors.py
"""Error taxonomy and process exit codes.

Every failure the engine can report derives from BceError and carries the
exit code the CLI terminates with. Exit codes are stable:

- 1-4: completion context / command-line input errors
- 101-106: store errors (open, pragma, schema, version, query, record)
- 201-203: import/export transfer errors

A root command that cannot be found is not an error; lookups return None.
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes returned by the bce command."""

    OK = 0
    MISSING_COMP_LINE = 1
    MISSING_COMP_POINT = 2
    INVALID_COMP_POINT = 3
    INVALID_ARGUMENT = 4
    OPEN_DATABASE = 101
    DATABASE_PRAGMA = 102
    DATABASE_SCHEMA = 103
    SCHEMA_VERSION_MISMATCH = 104
    QUERY_ERROR = 105
    INVALID_RECORD = 106
    READ_FILE = 201
    DOWNLOAD_ERROR = 202
    INVALID_URL = 203


class BceError(Exception):
    """Base class for all bce failures."""

    exit_code: ExitCode = ExitCode.QUERY_ERROR


# ============================================================================
# Input errors
# ============================================================================


class MissingCompletionLineError(BceError):
    """The shell did not provide the command line being completed."""

    exit_code = ExitCode.MISSING_COMP_LINE


class MissingCompletionPointError(BceError):
    """The shell did not provide the cursor position."""

    exit_code = ExitCode.MISSING_COMP_POINT


class InvalidCompletionPointError(BceError):
    """The cursor position is not a non-negative integer."""

    exit_code = ExitCode.INVALID_COMP_POINT


class InvalidArgumentError(BceError):
    """Invalid bce command-line arguments."""

    exit_code = ExitCode.INVALID_ARGUMENT


# ============================================================================
# Store errors
# ============================================================================


class DatabaseOpenError(BceError):
    exit_code = ExitCode.OPEN_DATABASE


class DatabasePragmaError(BceError):
    exit_code = ExitCode.DATABASE_PRAGMA


class SchemaError(BceError):
    exit_code = ExitCode.DATABASE_SCHEMA


class SchemaVersionMismatchError(BceError):
    """The store was written by an incompatible schema version."""

    exit_code = ExitCode.SCHEMA_VERSION_MISMATCH

    def __init__(self, expected: int, found: int) -> None:
        super().__init__(
            f"Schema version mismatch (expected: {expected}, found: {found})"
        )
        self.expected = expected
        self.found = found


class QueryError(BceError):
    """A query or write failed while walking the command tree."""

    exit_code = ExitCode.QUERY_ERROR


class InvalidRecordError(BceError):
    """A record violates a field constraint before reaching the store."""

    exit_code = ExitCode.INVALID_RECORD


# ============================================================================
# Transfer errors
# ============================================================================


class ReadFileError(BceError):
    exit_code = ExitCode.READ_FILE


class DownloadError(BceError):
    exit_code = ExitCode.DOWNLOAD_ERROR


class InvalidUrlError(BceError):
    exit_code = ExitCode.INVALID_URL
