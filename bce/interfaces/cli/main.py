# bce/interfaces/cli/main.py
"""bce command-line entry point.

Without arguments bce answers a bash completion request: bash runs it via
`complete -C bce <command>` with COMP_LINE and COMP_POINT set, and reads one
candidate per line from stdout. With arguments it manages the grammar store:

    bce --import --file kubectl.json
    bce --import --url https://example.com/kubectl.json
    bce --export kubectl --file kubectl.db
"""

import argparse
import contextlib
import logging
import os
import sys
import tempfile
import uuid
from collections.abc import Mapping, Sequence
from typing import TextIO
from urllib.parse import urlparse

from bce.config import Settings, settings as default_settings
from bce.core.commands.executor import CompletionExecutor
from bce.core.commands.parser import CompletionInput
from bce.core.commands.repository import CommandRepository
from bce.core.commands.schema import ensure_schema, open_database
from bce.core.errors import BceError, ExitCode, InvalidArgumentError
from bce.interfaces.cli.download import download_file
from bce.interfaces.cli.transfer import detect_format, export_command, import_file
from bce.utils.logging import configure_logging, set_request_id

logger = logging.getLogger(__name__)

EPILOG = """\
exit codes:
  0 ok, 1 missing COMP_LINE, 2 missing COMP_POINT, 3 invalid COMP_POINT,
  4 invalid arguments, 101 database open, 102 database pragma,
  103 schema error, 104 schema version mismatch, 105 query error,
  106 invalid record, 201 read file, 202 download error, 203 invalid URL
"""


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad arguments."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise InvalidArgumentError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="bce",
        description="bce (bash_complete_extension): grammar-driven tab completion",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    op = parser.add_mutually_exclusive_group()
    op.add_argument(
        "-e", "--export", metavar="COMMAND", help="export command data to file"
    )
    op.add_argument(
        "-i", "--import", dest="import_", action="store_true",
        help="import command data from file",
    )
    parser.add_argument("-f", "--file", help="filename to import/export")
    parser.add_argument(
        "-o", "--format", choices=["sqlite", "json"],
        help="file format (default: json for *.json, otherwise sqlite)",
    )
    parser.add_argument("-u", "--url", help="download the file to import from URL")
    parser.add_argument("-d", "--database", help="grammar store (default: BCE_DATABASE)")
    return parser


# ============================================================================
# Operations
# ============================================================================


def run_completion(
    config: Settings, environ: Mapping[str, str], out: TextIO
) -> ExitCode:
    """Answer one completion request, printing candidates to `out`.

    Nothing is printed unless the whole request succeeds.
    """
    completion_input = CompletionInput.from_env(
        environ, line_var=config.line_var, point_var=config.point_var
    )

    conn = open_database(config.database_path)
    try:
        ensure_schema(conn)
        executor = CompletionExecutor(repository=CommandRepository(conn))
        candidates = executor.execute(completion_input)
    finally:
        conn.close()

    for candidate in candidates:
        print(candidate, file=out)
    return ExitCode.OK


def _url_basename(url: str) -> str:
    return os.path.basename(urlparse(url).path) or "grammar"


def _import_into_store(config: Settings, filename: str, file_format: str | None) -> list[str]:
    conn = open_database(config.database_path)
    try:
        ensure_schema(conn)
        return import_file(
            CommandRepository(conn), filename, detect_format(filename, file_format)
        )
    finally:
        conn.close()


def run_import(config: Settings, args: argparse.Namespace, out: TextIO) -> ExitCode:
    """Import a grammar file, downloading it first when --url is given.

    A download without --file goes to a temporary directory that is removed
    once the import finishes or fails.
    """
    if not args.file and not args.url:
        raise InvalidArgumentError("--import needs --file or --url")

    with contextlib.ExitStack() as stack:
        filename = args.file
        if args.url:
            if not filename:
                tmp_dir = stack.enter_context(tempfile.TemporaryDirectory(prefix="bce-"))
                filename = os.path.join(tmp_dir, _url_basename(args.url))
            download_file(args.url, filename, timeout=config.download_timeout)
        names = _import_into_store(config, filename, args.format)

    for name in names:
        print(f"imported: {name}", file=out)
    return ExitCode.OK


def run_export(config: Settings, args: argparse.Namespace, out: TextIO) -> ExitCode:
    if not args.file:
        raise InvalidArgumentError("--export needs --file")

    conn = open_database(config.database_path)
    try:
        ensure_schema(conn)
        export_command(
            CommandRepository(conn),
            args.export,
            args.file,
            detect_format(args.file, args.format),
        )
    finally:
        conn.close()

    print(f"exported: {args.export} -> {args.file}", file=out)
    return ExitCode.OK


# ============================================================================
# Entry point
# ============================================================================


def main(
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
    config: Settings | None = None,
    out: TextIO | None = None,
) -> int:
    """Run bce and return the process exit code.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:]).
        environ: Environment (defaults to os.environ).
        config: Settings (defaults to the BCE_* environment).
        out: Output stream for results (defaults to stdout).
    """
    if argv is None:
        argv = sys.argv[1:]
    if environ is None:
        environ = os.environ
    if config is None:
        config = default_settings
    if out is None:
        out = sys.stdout

    configure_logging(config.log_level_value, json_format=config.log_json)
    set_request_id(uuid.uuid4().hex[:8])

    parser = build_parser()
    try:
        if not argv:
            return run_completion(config, environ, out)

        args = parser.parse_args(argv)
        if args.database:
            config = config.model_copy(update={"database": args.database})

        if args.import_:
            return run_import(config, args, out)
        if args.export:
            return run_export(config, args, out)

        raise InvalidArgumentError("nothing to do: use --import or --export")
    except InvalidArgumentError as e:
        print(f"bce: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return int(e.exit_code)
    except BceError as e:
        logger.debug("Request failed", exc_info=True)
        print(f"bce: {e}", file=sys.stderr)
        return int(e.exit_code)


if __name__ == "__main__":
    sys.exit(main())
