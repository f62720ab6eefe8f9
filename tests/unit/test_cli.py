"""
Unit tests for the command-line interface.
"""

import io
import json

import pytest

from redaction_layer.cli import build_parser, main


DOC = "Write to jane@example.com or call 617-555-1234."


class TestCli:

    def test_redact_file_patterns_only(self, tmp_path, capsys):
        path = tmp_path / "doc.txt"
        path.write_text(DOC, encoding="utf-8")

        exit_code = main(["redact", str(path), "--patterns-only"])

        output = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert output["sanitizedText"] == "Write to [REDACTED_EMAIL] or call [REDACTED_PHONE]."
        assert output["stats"]["byType"] == {"EMAIL": 1, "PHONE": 1}
        assert output["degraded"] is False

    def test_redact_stdin_without_entities(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO(DOC))

        main(["redact", "--patterns-only", "--no-entities", "--strategy", "mask"])

        output = json.loads(capsys.readouterr().out)
        assert "entities" not in output
        assert "jane@example.com" not in output["sanitizedText"]
        assert "***-***-1234" in output["sanitizedText"]

    def test_health_without_context_detection(self, monkeypatch, capsys):
        monkeypatch.setenv("ENABLE_CONTEXT_DETECTION", "false")

        exit_code = main(["health"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["healthy"] is True

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_parser_rejects_unknown_strategy(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["redact", "--strategy", "shred"])

    def test_missing_input_file_is_a_usage_error(self, tmp_path, capsys):
        missing = tmp_path / "missing.txt"

        with pytest.raises(SystemExit) as exc_info:
            main(["redact", str(missing), "--patterns-only"])

        assert exc_info.value.code == 2
        err = capsys.readouterr().err
        assert "cannot read" in err
        assert str(missing) in err

    def test_directory_as_input_is_a_usage_error(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            main(["redact", str(tmp_path), "--patterns-only"])

        assert exc_info.value.code == 2
