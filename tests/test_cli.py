"""Tests for the ``courier`` command line."""

from __future__ import annotations

import io
import json
from unittest.mock import patch

import pytest
from conftest import make_settings

from courier.__main__ import _build_params, main
from courier.plugins.adapters import PluginOutboundDeps
from courier.plugins.console import ConsoleAdapter


def _run(argv: list[str], settings) -> tuple[int, io.StringIO]:
    stream = io.StringIO()
    deps = PluginOutboundDeps([ConsoleAdapter(stream)])
    with (
        patch("sys.argv", ["courier", *argv]),
        patch("courier.config.get_settings", return_value=settings),
        patch.object(PluginOutboundDeps, "from_plugin_manager", return_value=deps),
        pytest.raises(SystemExit) as exc_info,
    ):
        main()
    return exc_info.value.code, stream


class TestMessageCommand:
    def test_send_json(self, capsys):
        code, stream = _run(
            ["message", "send", "--channel", "console", "--target", "ops", "--message", "hi", "--json"],
            make_settings(("console",)),
        )

        assert code == 0
        assert stream.getvalue() == "[ops] hi\n"
        payload = json.loads(capsys.readouterr().out)
        assert payload["ok"] is True
        assert payload["to"] == "ops"

    def test_send_summary(self, capsys):
        code, _ = _run(
            ["message", "--target", "ops", "--message", "hi"],
            make_settings(("console",)),
        )

        assert code == 0
        assert capsys.readouterr().out.strip() == "send via console → ops [core]"

    def test_dry_run(self, capsys):
        code, stream = _run(
            ["message", "send", "--target", "ops", "--message", "hi", "--dry-run", "--json"],
            make_settings(("console",)),
        )

        assert code == 0
        assert stream.getvalue() == ""
        assert json.loads(capsys.readouterr().out) == {
            "ok": True,
            "dryRun": True,
            "channel": "console",
            "to": "ops",
        }

    def test_broadcast_summary(self, capsys):
        code, stream = _run(
            ["message", "broadcast", "--targets", "ops", "dev", "--message", "hi"],
            make_settings(("console",)),
        )

        assert code == 0
        assert stream.getvalue() == "[ops] hi\n[dev] hi\n"
        out = capsys.readouterr().out
        assert "console → ops: ok" in out
        assert "console → dev: ok" in out

    def test_error_exits_1(self, capsys):
        code, _ = _run(["message", "send", "--message", "hi"], make_settings(("console",)))

        assert code == 1
        assert "Error: Action send requires a target." in capsys.readouterr().err

    def test_no_command_prints_help(self, capsys):
        code, _ = _run([], make_settings())

        assert code == 2
        assert "usage: courier" in capsys.readouterr().out


class TestBuildParams:
    def test_maps_flags_to_params(self):
        import argparse

        args = argparse.Namespace(
            channel="slack",
            target="#ops",
            message="hi",
            media=None,
            account="work",
            reply_to=None,
            buttons=None,
            poll_question="Lunch?",
            poll_duration_hours=None,
            targets=None,
            poll_option=["a", "b"],
            poll_multi=True,
            param=["emoji=tada"],
        )

        assert _build_params(args) == {
            "channel": "slack",
            "target": "#ops",
            "message": "hi",
            "accountId": "work",
            "pollQuestion": "Lunch?",
            "pollOption": ["a", "b"],
            "pollMulti": True,
            "emoji": "tada",
        }
