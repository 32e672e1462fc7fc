"""
Tests for the command line entry point.
"""

import json
import re

import pytest
from jsonlingo import main as cli


@pytest.fixture
def messages(tmp_path):
    path = tmp_path / "messages.json"
    path.write_text(json.dumps({"a": "Hello", "b": ["Hello", "World"], "id": "MAIN"}))
    return path


@pytest.fixture
def fake_orchestrator(monkeypatch, orchestrator):
    monkeypatch.setattr(cli, "create_orchestrator", lambda settings: orchestrator)
    return orchestrator


class TestCli:
    def test_dry_run(self, messages, capsys):
        assert cli.main([str(messages), "-t", "fr", "--dry-run"]) == 0

        out = capsys.readouterr().out
        assert "Translatable strings: 3" in out
        assert re.search(r"Unique strings:\s+2\b", out)
        assert not (messages.parent / "messages.fr.json").exists()

    def test_invalid_json(self, tmp_path, capsys):
        path = tmp_path / "broken.json"
        path.write_text("{oops")

        assert cli.main([str(path), "-t", "fr"]) == 2
        assert "Invalid JSON" in capsys.readouterr().err

    def test_missing_file(self, tmp_path, capsys):
        assert cli.main([str(tmp_path / "nope.json"), "-t", "fr"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_translate_writes_output_and_patch(self, messages, fake_orchestrator):
        patch_path = messages.parent / "fr.patch.json"

        code = cli.main([str(messages), "-s", "en", "-t", "fr", "--patch", str(patch_path)])

        assert code == 0
        output = json.loads((messages.parent / "messages.fr.json").read_text(encoding="utf-8"))
        assert output == {"a": "Bonjour", "b": ["Bonjour", "Monde"], "id": "MAIN"}
        assert json.loads(patch_path.read_text(encoding="utf-8")) == {
            "a": "Bonjour", "b": ["Bonjour", "Monde"],
        }
        assert fake_orchestrator.backend.closed

    def test_failed_strings_exit_nonzero(self, messages, fake_orchestrator, tmp_path):
        fake_orchestrator.backend.failures = {"World": -1}
        output = tmp_path / "out.json"

        code = cli.main([str(messages), "-s", "en", "-t", "fr", "--max-retries", "0", "-o", str(output)])

        assert code == 1
        assert json.loads(output.read_text(encoding="utf-8"))["b"] == ["Bonjour", "World"]

    def test_no_translatable_content(self, tmp_path, fake_orchestrator, capsys):
        path = tmp_path / "ids.json"
        path.write_text(json.dumps({"id": "MAIN", "url": "https://example.com"}))

        assert cli.main([str(path), "-t", "fr"]) == 1
        assert "No translatable strings" in capsys.readouterr().err

    def test_default_output_path(self, tmp_path):
        assert cli.default_output_path(tmp_path / "en.json", "de") == tmp_path / "en.de.json"
        assert cli.default_output_path(tmp_path / "strings", "de") == tmp_path / "strings.de.json"
