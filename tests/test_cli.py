"""Tests for the bce command-line entry point."""

import io
import json
import tempfile
from pathlib import Path

import pytest

from bce.config import Settings
from bce.core.commands.models import Command
from bce.core.commands.repository import CommandRepository
from bce.core.commands.schema import ensure_schema, open_database
from bce.core.errors import ExitCode
from bce.interfaces.cli import main as cli
from bce.interfaces.cli.main import build_parser, main


@pytest.fixture
def config(temp_db: str) -> Settings:
    return Settings(database=temp_db, _env_file=None)


@pytest.fixture
def stored_config(config: Settings, kubectl: Command) -> Settings:
    """Settings whose store already holds the kubectl grammar."""
    conn = open_database(config.database_path)
    try:
        ensure_schema(conn)
        CommandRepository(conn).replace_subtree(kubectl)
    finally:
        conn.close()
    return config


def _env(line: str) -> dict[str, str]:
    return {"COMP_LINE": line, "COMP_POINT": str(len(line))}


class TestCompletion:
    """Test suite for the completion mode (no arguments)."""

    def test_prints_candidates(self, stored_config: Settings) -> None:
        out = io.StringIO()
        code = main([], environ=_env("kubectl get -o "), config=stored_config, out=out)
        assert code == ExitCode.OK
        assert out.getvalue() == "json\nwide\n"

    def test_unknown_command_prints_nothing(self, stored_config: Settings) -> None:
        out = io.StringIO()
        code = main([], environ=_env("helm "), config=stored_config, out=out)
        assert code == ExitCode.OK
        assert out.getvalue() == ""

    def test_fresh_store(self, config: Settings) -> None:
        """Test an empty store is created and yields no candidates."""
        out = io.StringIO()
        assert main([], environ=_env("kubectl "), config=config, out=out) == ExitCode.OK
        assert out.getvalue() == ""
        assert Path(config.database_path).exists()

    @pytest.mark.parametrize(
        ("environ", "expected"),
        [
            ({}, ExitCode.MISSING_COMP_LINE),
            ({"COMP_LINE": "kubectl "}, ExitCode.MISSING_COMP_POINT),
            ({"COMP_LINE": "kubectl ", "COMP_POINT": "end"}, ExitCode.INVALID_COMP_POINT),
        ],
    )
    def test_input_errors(
        self,
        config: Settings,
        capsys: pytest.CaptureFixture[str],
        environ: dict[str, str],
        expected: ExitCode,
    ) -> None:
        out = io.StringIO()
        assert main([], environ=environ, config=config, out=out) == expected
        assert out.getvalue() == ""
        assert "bce:" in capsys.readouterr().err

    def test_schema_mismatch(
        self, stored_config: Settings, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test a store with another schema version is fatal and silent on stdout."""
        conn = open_database(stored_config.database_path)
        conn.execute("PRAGMA user_version = 99")
        conn.close()

        out = io.StringIO()
        code = main([], environ=_env("kubectl get -o "), config=stored_config, out=out)
        assert code == ExitCode.SCHEMA_VERSION_MISMATCH
        assert out.getvalue() == ""
        assert "Schema version mismatch" in capsys.readouterr().err

    def test_custom_variable_names(self, stored_config: Settings) -> None:
        config = stored_config.model_copy(update={"line_var": "LINE", "point_var": "POINT"})
        out = io.StringIO()
        environ = {"LINE": "kubectl get -o ", "POINT": "15"}
        assert main([], environ=environ, config=config, out=out) == ExitCode.OK
        assert out.getvalue() == "json\nwide\n"


class TestImportExport:
    """Test suite for --import and --export."""

    def test_export_and_import_json(self, stored_config: Settings, tmp_path: Path) -> None:
        exported = tmp_path / "kubectl.json"
        out = io.StringIO()
        code = main(
            ["--export", "kubectl", "--file", str(exported)], config=stored_config, out=out
        )
        assert code == ExitCode.OK
        assert json.loads(exported.read_text())["commands"][0]["name"] == "kubectl"

        other_db = tmp_path / "other.db"
        code = main(
            ["--import", "--file", str(exported), "--database", str(other_db)],
            config=stored_config,
            out=out,
        )
        assert code == ExitCode.OK
        assert "imported: kubectl" in out.getvalue()

        completion = io.StringIO()
        config = stored_config.model_copy(update={"database": str(other_db)})
        main([], environ=_env("kubectl get -o "), config=config, out=completion)
        assert completion.getvalue() == "json\nwide\n"

    def test_export_sqlite_format(self, stored_config: Settings, tmp_path: Path) -> None:
        exported = tmp_path / "kubectl.bin"
        code = main(
            ["-e", "kubectl", "-f", str(exported), "-o", "sqlite"],
            config=stored_config,
            out=io.StringIO(),
        )
        assert code == ExitCode.OK

        conn = open_database(str(exported))
        try:
            assert CommandRepository(conn).root_command_names() == ["kubectl"]
        finally:
            conn.close()

    def test_export_unknown_command(self, stored_config: Settings, tmp_path: Path) -> None:
        code = main(
            ["--export", "helm", "--file", str(tmp_path / "helm.json")],
            config=stored_config,
            out=io.StringIO(),
        )
        assert code == ExitCode.INVALID_ARGUMENT

    @pytest.mark.parametrize("file_format", ["sqlite", "json"])
    def test_export_over_store_refused(
        self, stored_config: Settings, file_format: str
    ) -> None:
        """Test exporting onto the store's own file leaves the store intact."""
        conn = open_database(stored_config.database_path)
        try:
            CommandRepository(conn).replace_subtree(Command(name="helm"))
        finally:
            conn.close()

        code = main(
            ["--export", "kubectl", "--file", stored_config.database, "--format", file_format],
            config=stored_config,
            out=io.StringIO(),
        )
        assert code == ExitCode.INVALID_ARGUMENT

        conn = open_database(stored_config.database_path)
        try:
            assert CommandRepository(conn).root_command_names() == ["helm", "kubectl"]
        finally:
            conn.close()

    def test_import_unreadable_file(self, config: Settings, tmp_path: Path) -> None:
        code = main(
            ["--import", "--file", str(tmp_path / "missing.json")],
            config=config,
            out=io.StringIO(),
        )
        assert code == ExitCode.READ_FILE

    def test_import_from_url(
        self, config: Settings, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test --url downloads the file before importing it."""
        grammar = {"commands": [{"name": "helm", "sub_commands": [{"name": "install"}]}]}
        requested: list[str] = []

        def fake_download(url: str, filename: str, timeout: float = 30.0) -> str:
            requested.append(url)
            Path(filename).write_text(json.dumps(grammar), encoding="utf-8")
            return filename

        monkeypatch.setattr(cli, "download_file", fake_download)
        target = tmp_path / "helm.json"
        code = main(
            ["--import", "--url", "https://example.com/helm.json", "--file", str(target)],
            config=config,
            out=io.StringIO(),
        )
        assert code == ExitCode.OK
        assert requested == ["https://example.com/helm.json"]

        out = io.StringIO()
        main([], environ=_env("helm "), config=config, out=out)
        assert out.getvalue() == "install\n"

    def test_import_from_url_removes_download(
        self, config: Settings, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a download without --file is deleted after the import."""
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        monkeypatch.setattr(tempfile, "tempdir", str(scratch))
        downloaded: list[Path] = []

        def fake_download(url: str, filename: str, timeout: float = 30.0) -> str:
            downloaded.append(Path(filename))
            Path(filename).write_text('{"commands": [{"name": "helm"}]}', encoding="utf-8")
            return filename

        monkeypatch.setattr(cli, "download_file", fake_download)
        code = main(
            ["--import", "--url", "https://example.com/grammars/helm.json"],
            config=config,
            out=io.StringIO(),
        )
        assert code == ExitCode.OK
        assert downloaded[0].name == "helm.json"
        assert not downloaded[0].exists()
        assert list(scratch.iterdir()) == []

    def test_failed_url_import_removes_download(
        self, config: Settings, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        scratch = tmp_path / "scratch"
        scratch.mkdir()
        monkeypatch.setattr(tempfile, "tempdir", str(scratch))

        def fake_download(url: str, filename: str, timeout: float = 30.0) -> str:
            Path(filename).write_text("{not json", encoding="utf-8")
            return filename

        monkeypatch.setattr(cli, "download_file", fake_download)
        code = main(
            ["--import", "--url", "https://example.com/helm.json"],
            config=config,
            out=io.StringIO(),
        )
        assert code == ExitCode.READ_FILE
        assert list(scratch.iterdir()) == []

    def test_import_invalid_url(self, config: Settings) -> None:
        code = main(["--import", "--url", "ftp://example.com/x.json"], config=config, out=io.StringIO())
        assert code == ExitCode.INVALID_URL


class TestArguments:
    """Test suite for argument handling."""

    @pytest.mark.parametrize(
        "argv",
        [
            ["--bogus"],
            ["--import"],
            ["--export", "kubectl"],
            ["--file", "kubectl.json"],
            ["--import", "--export", "kubectl", "--file", "x.json"],
            ["--export", "kubectl", "--file", "x", "--format", "yaml"],
        ],
    )
    def test_invalid_arguments(
        self, config: Settings, capsys: pytest.CaptureFixture[str], argv: list[str]
    ) -> None:
        assert main(argv, config=config, out=io.StringIO()) == ExitCode.INVALID_ARGUMENT
        assert "usage: bce" in capsys.readouterr().err

    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--help"])
        assert exc_info.value.code == 0
        help_text = capsys.readouterr().out
        assert "--import" in help_text
        assert "exit codes:" in help_text
