"""
Tests for settings and the command-line interface.
"""

import json
import logging

import pytest

from storeglot.cli import build_parser, main
from storeglot.config import Settings, configure_logging


# =============================================================================
# Settings
# =============================================================================


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.translation_batch_size == 10
        assert settings.batch_delay_seconds == 0.1
        assert settings.retry_delay_seconds == 1.0
        assert settings.translation_memory_max_entries is None

    def test_list_helpers(self):
        settings = Settings(enabled_target_languages="es, fr,,de", cors_origins="http://a.test")
        assert settings.target_languages_list == ["es", "fr", "de"]
        assert settings.cors_origins_list == ["http://a.test"]

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("TRANSLATION_BATCH_SIZE", "25")
        monkeypatch.setenv("ENVIRONMENT", "production")

        settings = Settings()
        assert settings.translation_batch_size == 25
        assert settings.is_production

    def test_configure_logging(self):
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        configure_logging("warning")
        assert logging.getLogger().level == logging.WARNING


# =============================================================================
# CLI
# =============================================================================


class TestCli:
    def test_type_is_case_insensitive(self):
        args = build_parser().parse_args(["extract", "doc.md", "--type", "markdown"])
        assert args.type == "MARKDOWN"

    def test_extract(self, tmp_path, capsys):
        path = tmp_path / "page.html"
        path.write_text('<p>Hello</p><img alt="Red shoes">', encoding="utf-8")

        assert main(["extract", str(path)]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["content_type"] == "HTML"
        assert [f["original_text"] for f in output["fragments"]] == ["Hello", "Red shoes"]

    def test_extract_type_mismatch(self, tmp_path):
        path = tmp_path / "doc.json"
        path.write_text("not json", encoding="utf-8")

        assert main(["extract", str(path), "--type", "editor_js"]) == 1

    def test_translate_to_file(self, tmp_path):
        source = tmp_path / "page.html"
        source.write_text("<p>Hello</p>", encoding="utf-8")
        output = tmp_path / "page.fr.html"

        code = main(["translate", str(source), "-t", "fr", "--backend", "echo", "-o", str(output)])

        assert code == 0
        assert output.read_text(encoding="utf-8") == "<p>Hello</p>"

    def test_missing_file(self, tmp_path):
        assert main(["extract", str(tmp_path / "missing.md")]) == 1

    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])
