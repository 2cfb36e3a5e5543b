"""Tests for the command line interface."""
import json

import pytest
from typer.testing import CliRunner

from docchat.cli.app import app
from docchat.export import read_grid

runner = CliRunner()


@pytest.fixture
def reply_file(tmp_path, payload_reply):
    """Write a reply with slides and a spreadsheet to disk."""
    path = tmp_path / "reply.txt"
    path.write_text(payload_reply, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def session_env(tmp_path, monkeypatch):
    """Point the session store at a temp file and clear CLI settings."""
    monkeypatch.setenv("DOCCHAT_SESSION_PATH", str(tmp_path / "session.json"))
    monkeypatch.delenv("DOCCHAT_SESSION_BACKEND", raising=False)
    monkeypatch.delenv("DOCCHAT_LOG_LEVEL", raising=False)
    monkeypatch.delenv("DOCCHAT_USER_ID", raising=False)


class TestDecodeCommand:
    """Tests for `docchat decode`."""

    def test_summary(self, reply_file):
        """Test the human readable summary."""
        result = runner.invoke(app, ["decode", str(reply_file)])

        assert result.exit_code == 0
        assert "Here is the summary you asked for." in result.output
        assert "sentinel" in result.output
        assert "Name, Score" in result.output

    def test_json_output(self, reply_file):
        """Test that --json prints the decoded reply."""
        result = runner.invoke(app, ["decode", "--json", str(reply_file)])

        assert result.exit_code == 0
        decoded = json.loads(result.output)
        assert len(decoded["slides"]) == 2
        assert decoded["decode_error"] is False

    def test_message_object_input(self, tmp_path):
        """Test that a JSON message object contributes its content."""
        path = tmp_path / "message.json"
        path.write_text(json.dumps({"role": "model", "content": "Just prose."}))
        result = runner.invoke(app, ["decode", "--json", str(path)])

        assert result.exit_code == 0
        assert json.loads(result.output)["prose"] == "Just prose."

    def test_broken_payload(self, tmp_path):
        """Test that an undecodable reply fails unless --fail-open is given."""
        path = tmp_path / "broken.txt"
        path.write_text("Sorry &&json {nope")

        assert runner.invoke(app, ["decode", str(path)]).exit_code == 1

        result = runner.invoke(app, ["decode", "--fail-open", str(path)])
        assert result.exit_code == 0
        assert "Sorry" in result.output


class TestExportCommand:
    """Tests for `docchat export`."""

    def test_requires_target(self, reply_file):
        """Test that at least one output is required."""
        result = runner.invoke(app, ["export", str(reply_file)])
        assert result.exit_code == 1

    def test_writes_files(self, reply_file, tmp_path):
        """Test writing slides, spreadsheet and print view."""
        pptx = tmp_path / "out" / "deck.pptx"
        xlsx = tmp_path / "out" / "table.xlsx"
        html = tmp_path / "out" / "print.html"
        result = runner.invoke(app, [
            "export", str(reply_file),
            "--pptx", str(pptx),
            "--xlsx", str(xlsx),
            "--html", str(html),
        ])

        assert result.exit_code == 0
        assert pptx.stat().st_size > 0
        assert read_grid(xlsx)[0] == ["Name", "Score"]
        assert "Let me know if you need changes." in html.read_text(encoding="utf-8")

    def test_missing_artifact_skipped(self, tmp_path):
        """Test that a reply without slides skips --pptx."""
        path = tmp_path / "plain.txt"
        path.write_text("Nothing structured here.")
        target = tmp_path / "deck.pptx"
        result = runner.invoke(app, ["export", str(path), "--pptx", str(target)])

        assert result.exit_code == 0
        assert "skipping --pptx" in result.output
        assert not target.exists()


class TestSessionCommands:
    """Tests for `docchat session`."""

    def test_show_before_and_after_new(self, tmp_path):
        """Test that `session new` creates an id that `show` prints."""
        result = runner.invoke(app, ["session", "show"])
        assert result.exit_code == 0
        assert "No session yet" in result.output

        result = runner.invoke(app, ["session", "new"])
        assert result.exit_code == 0
        session_id = json.loads((tmp_path / "session.json").read_text())["sessionId"]
        assert session_id in result.output

        result = runner.invoke(app, ["session", "show"])
        assert session_id in result.output

    def test_unknown_backend(self, monkeypatch):
        """Test that an unknown backend is reported."""
        monkeypatch.setenv("DOCCHAT_SESSION_BACKEND", "redis")
        result = runner.invoke(app, ["session", "show"])
        assert result.exit_code == 1
        assert "Unsupported session backend" in result.output


class TestDocumentCommands:
    """Tests for `docchat documents`."""

    def test_upload_needs_user(self, tmp_path):
        """Test that uploads require a user id."""
        path = tmp_path / "a.pdf"
        path.write_bytes(b"%PDF")
        result = runner.invoke(app, ["documents", "upload", str(path)])
        assert result.exit_code == 1
        assert "DOCCHAT_USER_ID" in result.output

    def test_upload_rejects_non_pdf(self, tmp_path):
        """Test that non-PDF files are refused before any request."""
        path = tmp_path / "a.docx"
        path.write_bytes(b"PK")
        result = runner.invoke(app, ["documents", "upload", str(path), "--user", "u1"])
        assert result.exit_code == 1
        assert ".docx files are not supported" in result.output
