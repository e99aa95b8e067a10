"""Tests for the command grammar data model."""

from bce.core.commands.models import (
    Command,
    CommandAlias,
    CommandArg,
    CommandOpt,
    new_id,
)


class TestCommandArg:
    """Test suite for CommandArg."""

    def test_display_name_both(self) -> None:
        arg = CommandArg(long_name="--output", short_name="-o")
        assert arg.display_name() == "--output (-o)"
        assert arg.names() == ["--output", "-o"]

    def test_display_name_single(self) -> None:
        assert CommandArg(long_name="--all").display_name() == "--all"
        assert CommandArg(short_name="-l").display_name() == "-l"

    def test_opt_names(self) -> None:
        arg = CommandArg(opts=[CommandOpt(name="json"), CommandOpt(name="wide")])
        assert arg.opt_names() == ["json", "wide"]


class TestCommand:
    """Test suite for Command."""

    def test_display_name_without_alias(self) -> None:
        assert Command(name="describe").display_name() == "describe"

    def test_shortest_alias_tie_keeps_first(self) -> None:
        """Test the first of several equally short aliases is chosen."""
        cmd = Command(
            name="remove",
            aliases=[CommandAlias(name="rm"), CommandAlias(name="del"), CommandAlias(name="rx")],
        )
        assert cmd.shortest_alias() == "rm"
        assert cmd.display_name() == "remove (rm)"

    def test_arg_names_cover_subtree(self, kubectl: Command) -> None:
        """Test names are collected from every level of the grammar."""
        assert kubectl.arg_names() == {
            "--namespace", "-n", "--output", "-o", "--watch", "-w"
        }

    def test_new_id_is_uuid(self) -> None:
        assert len(new_id()) == 36
        assert new_id() != new_id()
