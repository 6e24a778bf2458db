"""
Unit tests for quote sources.
"""

import random
import shutil
import sys

import pytest

from qotd.errors import ConfigError, ExternalCommandError, UsageError
from qotd.quotes import CommandGenerator, StaticList, load_source


class TestStaticList:
    """Tests for quote files."""

    def test_blank_lines_dropped_and_whitespace_trimmed(self, tmp_path):
        path = tmp_path / "q.txt"
        path.write_text("a\n\nb\n  c  \n")

        source = StaticList.from_file(path)

        assert source.entries == ("a", "b", "c")

    def test_known_size_is_entry_count(self, quote_file):
        source = StaticList.from_file(quote_file)
        assert source.known_size() == 3

    def test_crlf_line_endings_are_trimmed(self, tmp_path):
        path = tmp_path / "q.txt"
        path.write_bytes(b"one\r\ntwo\r\n")

        assert StaticList.from_file(path).entries == ("one", "two")

    def test_invalid_utf8_is_replaced(self, tmp_path):
        path = tmp_path / "q.txt"
        path.write_bytes(b"caf\xff\n")

        assert StaticList.from_file(path).entries == ("caf\ufffd",)

    def test_produce_quote_returns_a_loaded_entry(self, quote_file):
        source = StaticList.from_file(quote_file)
        expected = {entry.encode() for entry in source.entries}
        rng = random.Random(1234)

        seen = {source.produce_quote(rng) for _ in range(300)}

        # Only loaded lines come out, and every line is reachable
        assert seen == expected

    def test_produce_quote_is_driven_by_the_given_rng(self, quote_file):
        source = StaticList.from_file(quote_file)

        first = [source.produce_quote(random.Random(7)) for _ in range(5)]
        second = [source.produce_quote(random.Random(7)) for _ in range(5)]

        assert first == second

    def test_empty_file_is_config_error(self, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("")

        with pytest.raises(ConfigError, match="contains no quotes"):
            StaticList.from_file(path)

    def test_all_blank_file_is_config_error(self, tmp_path):
        path = tmp_path / "blank.txt"
        path.write_text("\n   \n\t\n")

        with pytest.raises(ConfigError):
            StaticList.from_file(path)

    def test_missing_file_is_config_error(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read quote file"):
            StaticList.from_file(tmp_path / "nope.txt")

    def test_direct_construction_rejects_empty(self):
        with pytest.raises(ConfigError):
            StaticList(())


class TestCommandGenerator:
    """Tests for command-backed quotes."""

    @pytest.mark.skipif(shutil.which("echo") is None, reason="needs echo")
    def test_echo_output_is_returned_verbatim(self):
        source = CommandGenerator(("echo", "hello"))

        assert source.produce_quote(random.Random()) == b"hello\n"

    def test_known_size_is_unbounded(self):
        assert CommandGenerator(("fortune",)).known_size() is None

    def test_nonzero_exit_still_returns_stdout(self):
        source = CommandGenerator((
            sys.executable, "-c",
            "import sys; sys.stdout.write('partial'); sys.exit(3)",
        ))

        assert source.produce_quote(random.Random()) == b"partial"

    def test_arguments_are_passed_through(self):
        source = CommandGenerator((
            sys.executable, "-c",
            "import sys; print(' '.join(sys.argv[1:]))",
            "-s", "--long",
        ))

        assert source.produce_quote(random.Random()) == b"-s --long\n"

    def test_unspawnable_command_raises(self, tmp_path):
        source = CommandGenerator((str(tmp_path / "no-such-command"),))

        with pytest.raises(ExternalCommandError, match="cannot run"):
            source.produce_quote(random.Random())

    def test_empty_argv_is_config_error(self):
        with pytest.raises(ConfigError):
            CommandGenerator(())


class TestLoadSource:
    """Tests for the provider selector."""

    def test_file_provider(self, quote_file):
        source = load_source("file", [str(quote_file)])

        assert isinstance(source, StaticList)
        assert source.known_size() == 3

    def test_provider_is_case_insensitive(self, quote_file):
        assert isinstance(load_source("FILE", [str(quote_file)]), StaticList)

    def test_cmd_provider(self):
        source = load_source("cmd", ["fortune", "-s"])

        assert isinstance(source, CommandGenerator)
        assert source.argv == ("fortune", "-s")

    def test_missing_provider(self):
        with pytest.raises(UsageError) as exc_info:
            load_source(None, [])

        assert exc_info.value.usage.splitlines() == [
            "Usage: qotd [provider] [...args]",
            "where provider is one of: file, cmd",
        ]

    def test_unknown_provider(self):
        with pytest.raises(UsageError) as exc_info:
            load_source("http", ["x"])

        assert 'invalid provider "http"' in exc_info.value.usage
        assert "where provider is one of: file, cmd" in exc_info.value.usage

    @pytest.mark.parametrize("args", [[], ["a.txt", "b.txt"]])
    def test_file_needs_exactly_one_path(self, args):
        with pytest.raises(UsageError, match="exactly one path"):
            load_source("file", args)

    def test_cmd_needs_a_command(self):
        with pytest.raises(UsageError):
            load_source("cmd", [])

    def test_usage_error_is_a_config_error(self):
        with pytest.raises(ConfigError):
            load_source("bogus", [])
