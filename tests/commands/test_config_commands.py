"""Unit tests for config management commands (view, get, set, reset)."""

import pytest
from typer.testing import CliRunner

from todoledger.commands.config import _parse_value, app
from todoledger.config import get_config_manager

runner = CliRunner()


class TestHelpFlags:
    @pytest.mark.parametrize("command", [[], ["view"], ["get"], ["set"], ["reset"]])
    def test_help(self, command):
        result = runner.invoke(app, [*command, "--help"])
        assert result.exit_code == 0


class TestParseValue:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("true", True),
            ("False", False),
            ("none", None),
            ("42", 42),
            ("https://lcd.example", "https://lcd.example"),
        ],
    )
    def test_parse(self, raw, expected):
        assert _parse_value(raw) == expected


class TestView:
    def test_view_table(self):
        result = runner.invoke(app, ["view"])
        assert result.exit_code == 0
        assert "chain.lcd_endpoint" in result.stdout
        assert "sync.coalesce_updates" in result.stdout

    def test_view_json(self):
        result = runner.invoke(app, ["view", "-o", "json"])
        assert result.exit_code == 0
        assert '"page_size": 30' in result.stdout


class TestGetSet:
    def test_set_then_get(self):
        result = runner.invoke(app, ["set", "account.owner", "mantra1owner"])
        assert result.exit_code == 0
        assert "Set account.owner" in result.stdout

        result = runner.invoke(app, ["get", "account.owner"])
        assert result.exit_code == 0
        assert "mantra1owner" in result.stdout

    def test_set_bool(self):
        result = runner.invoke(app, ["set", "sync.coalesce_updates", "false"])
        assert result.exit_code == 0
        assert get_config_manager().get("sync.coalesce_updates") is False

    def test_set_unknown_key(self):
        result = runner.invoke(app, ["set", "chain.nope", "1"])
        assert result.exit_code == 2
        assert "Unknown configuration key" in result.stdout

    def test_set_invalid_value(self):
        result = runner.invoke(app, ["set", "chain.page_size", "0"])
        assert result.exit_code == 2
        assert "Invalid value" in result.stdout

    def test_get_unset(self):
        result = runner.invoke(app, ["get", "account.signer"])
        assert result.exit_code == 2

    def test_profiles_are_separate(self):
        runner.invoke(app, ["set", "chain.timeout", "5", "--profile", "work"])
        assert get_config_manager("work").get("chain.timeout") == 5
        assert get_config_manager("default").get("chain.timeout") == 30


class TestReset:
    def test_reset_key(self):
        runner.invoke(app, ["set", "chain.timeout", "5"])
        result = runner.invoke(app, ["reset", "chain.timeout"])
        assert result.exit_code == 0
        assert get_config_manager().get("chain.timeout") == 30

    def test_reset_all(self):
        runner.invoke(app, ["set", "output.format", "json"])
        result = runner.invoke(app, ["reset"])
        assert result.exit_code == 0
        assert "Reset configuration" in result.stdout
        assert get_config_manager().get("output.format") == "table"

    def test_reset_unknown_key(self):
        result = runner.invoke(app, ["reset", "chain.nope"])
        assert result.exit_code == 2


class TestProfiles:
    def test_no_profiles(self):
        result = runner.invoke(app, ["profiles"])
        assert result.exit_code == 0
        assert "No saved profiles" in result.stdout

    def test_lists_saved_profiles(self):
        runner.invoke(app, ["set", "chain.timeout", "5", "--profile", "work"])
        result = runner.invoke(app, ["profiles"])
        assert result.exit_code == 0
        assert "work" in result.stdout
