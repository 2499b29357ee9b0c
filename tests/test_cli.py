# tests/test_cli.py
"""
Unit tests for the command-line entry point.
"""
import io
import json
from unittest.mock import patch

import pytest
from aioresponses import aioresponses
from structlog.testing import capture_logs

from questclient import cli
from questclient.utils.config import Settings


GET_URL = (
    "https://dev.azure.com/test-org/test-project/_apis/wit/workitems/42"
    "?api-version=6.0&expand=Fields"
)
CREATE_URL = (
    "https://dev.azure.com/test-org/test-project/_apis/wit/workitems/$User%20Story"
    "?api-version=6.0&expand=Fields"
)


@pytest.fixture
def cli_settings(test_settings):
    """Route the CLI to test settings and keep logging unconfigured."""
    with patch("questclient.cli.get_settings", return_value=test_settings), \
            patch("questclient.cli.setup_logging"):
        yield test_settings


class TestParser:
    """Tests for argument parsing."""

    def test_get_command(self):
        args = cli.build_parser().parse_args(["get", "42"])

        assert args.command == "get"
        assert args.work_item_id == 42

    def test_create_default_type(self):
        args = cli.build_parser().parse_args(["create", "story.json"])

        assert args.work_item_type == "User Story"

    def test_log_level_case_insensitive(self):
        args = cli.build_parser().parse_args(["--log-level", "debug", "get", "1"])

        assert args.log_level == "DEBUG"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestMain:
    """Tests for main() end to end with mocked HTTP."""

    def test_get_prints_json(self, cli_settings, capsys, sample_work_item):
        with aioresponses() as mock, capture_logs() as logs:
            mock.get(GET_URL, payload=sample_work_item)
            exit_code = cli.main(["get", "42"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == sample_work_item
        assert any(entry["event"] == "work_item_fetch" for entry in logs)

    def test_create_from_file(self, cli_settings, capsys, tmp_path):
        document = tmp_path / "story.json"
        document.write_text(
            json.dumps([{"op": "add", "path": "/fields/System.Title", "value": "New"}]),
            encoding="utf-8",
        )

        with aioresponses() as mock, capture_logs():
            mock.post(CREATE_URL, payload={"id": 101})
            exit_code = cli.main(["create", str(document)])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {"id": 101}

    def test_patch_from_stdin(self, cli_settings, capsys, monkeypatch):
        monkeypatch.setattr(
            "sys.stdin",
            io.StringIO('[{"op": "replace", "path": "/fields/System.State", "value": "Closed"}]'),
        )

        with aioresponses() as mock, capture_logs():
            mock.patch(GET_URL, payload={"id": 42, "fields": {"System.State": "Closed"}})
            exit_code = cli.main(["patch", "42", "-"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["fields"]["System.State"] == "Closed"

    def test_unparseable_response_fails(self, cli_settings, capsys):
        with aioresponses() as mock, capture_logs() as logs:
            mock.get(GET_URL, status=500, body="")
            exit_code = cli.main(["get", "42"])

        assert exit_code == 1
        assert capsys.readouterr().out == ""
        failures = [entry for entry in logs if entry["event"] == "command_failed"]
        assert failures[0]["error_type"] == "WorkItemResponseError"

    def test_invalid_document_fails_without_request(self, cli_settings, tmp_path):
        document = tmp_path / "bad.json"
        document.write_text('{"op": "add"}', encoding="utf-8")

        with aioresponses() as mock, capture_logs() as logs:
            exit_code = cli.main(["create", str(document)])

        assert exit_code == 1
        assert mock.requests == {}
        assert logs[-1]["event"] == "invalid_input"

    def test_missing_file_fails(self, cli_settings, tmp_path):
        with capture_logs() as logs:
            exit_code = cli.main(["create", str(tmp_path / "missing.json")])

        assert exit_code == 1
        assert logs[-1]["error_type"] == "FileNotFoundError"

    def test_missing_configuration(self, clean_env):
        with patch("questclient.cli.get_settings", side_effect=lambda: Settings(_env_file=None)), \
                patch("questclient.cli.setup_logging"), capture_logs() as logs:
            exit_code = cli.main(["get", "42"])

        assert exit_code == 1
        assert logs[-1]["event"] == "configuration_invalid"
