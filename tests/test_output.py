"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- format_response and print_table in JSON and plain modes
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from okta_auth import output as output_module
from okta_auth.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


@pytest.fixture()
def non_tty(monkeypatch):
    monkeypatch.setattr("okta_auth.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    monkeypatch.setattr("okta_auth.output._is_tty", lambda: True)


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert "hello world" in captured.out
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("Run: okta-auth login")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "Run: okta-auth login" in captured.err

    def test_quiet_suppresses_info_but_not_errors(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.info("progress")
        mgr.success("done")
        mgr.suggest("next")
        mgr.error("broken")
        captured = capfd.readouterr()
        assert "progress" not in captured.err
        assert "done" not in captured.err
        assert "next" not in captured.err
        assert "Error: broken" in captured.err

    def test_debug_only_when_verbose(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("hidden")
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("shown")
        captured = capfd.readouterr()
        assert "hidden" not in captured.err
        assert "[debug] shown" in captured.err


class TestFormatResponse:
    def test_json_dict(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).format_response({"okta": {"authenticated": True}})
        assert json.loads(capfd.readouterr().out) == {"okta": {"authenticated": True}}

    def test_plain_dict_is_tab_separated(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response(
            {"success": True, "services": {"datahub": 1}}
        )
        lines = capfd.readouterr().out.splitlines()
        assert lines == ["success\tTrue", 'services\t{"datahub": 1}']

    def test_plain_list(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).format_response([{"key": "a"}])
        assert capfd.readouterr().out.strip() == '{"key": "a"}'


class TestPrintTable:
    def test_json_records(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_table(["Key", "Name"], [["datahub", "DataHub"]])
        assert json.loads(capfd.readouterr().out) == [{"Key": "datahub", "Name": "DataHub"}]

    def test_plain_tsv(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_table(
            ["Key", "Name"], [["datahub", "DataHub"]]
        )
        assert capfd.readouterr().out.splitlines() == ["Key\tName", "datahub\tDataHub"]

    def test_rich_table_renders(self, capfd, non_tty):
        OutputManager(format=OutputFormat.RICH).print_table(
            ["Key"], [["zeppelin"]], title="Registered Services"
        )
        out = capfd.readouterr().out
        assert "zeppelin" in out
        # Rich wraps the title to the table width.
        assert "Registered" in out
        assert "Services" in out


class TestGlobalInstance:
    def test_get_output_is_lazy_singleton(self, non_tty):
        reset_output()
        assert get_output() is get_output()

    def test_set_output_replaces_instance(self):
        mgr = OutputManager(format=OutputFormat.JSON)
        set_output(mgr)
        assert get_output() is mgr

    def test_module_helpers_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))
        output_module.info("via helper")
        output_module.print_table(["A"], [["1"]])
        captured = capfd.readouterr()
        assert "via helper" in captured.err
        assert "A\n1" in captured.out
