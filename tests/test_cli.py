"""Tests for the command line interface."""

import json

import pytest
from rich.console import Console
from typer.testing import CliRunner

from otel_checker.cli import main

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep long links on one line."""
    monkeypatch.setattr(main, "console", Console(width=300))


class TestInfo:
    def test_lists_languages(self):
        result = runner.invoke(main.app, ["info"])
        assert result.exit_code == 0
        assert "java: maven, gradle" in result.output
        assert "ruby: Gemfile.lock presence check" in result.output


class TestMatch:
    """Test single library lookups."""

    def test_maven_library(self):
        result = runner.invoke(main.app, ["match", "maven", "ch.qos.logback:logback-classic", "1.5.16"])
        assert result.exit_code == 0
        assert "instrumentation/logback/logback-mdc-1.0" in result.output
        assert "instrumentation/logback/logback-appender-1.0" in result.output

    def test_no_instrumentation(self):
        result = runner.invoke(main.app, ["match", "npm", "express", "3.0.0"])
        assert result.exit_code == 0
        assert "No instrumentation found for express:3.0.0" in result.output

    def test_java_identity_needs_group(self):
        result = runner.invoke(main.app, ["match", "gradle", "logback-classic", "1.5.16"])
        assert result.exit_code == 1

    def test_unknown_ecosystem(self):
        result = runner.invoke(main.app, ["match", "cargo", "serde", "1.0.0"])
        assert result.exit_code == 1
        assert "unsupported ecosystem cargo" in result.output


class TestCheck:
    """Test the check command exit codes and outputs."""

    def test_language_required(self, tmp_path, monkeypatch):
        monkeypatch.delenv("OTEL_CHECKER_LANGUAGE", raising=False)
        result = runner.invoke(main.app, ["check", "--path", str(tmp_path)])
        assert result.exit_code == 1
        assert "language is required" in result.output

    def test_invalid_catalog_source(self, tmp_path):
        result = runner.invoke(main.app, ["check", "-l", "java", "-p", str(tmp_path), "--catalog", "s3"])
        assert result.exit_code == 1
        assert "catalog_source must be one of" in result.output

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(main.app, ["check", "-l", "java", "--config", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1
        assert "Config file not found" in result.output

    def test_python_project(self, tmp_path):
        (tmp_path / "requirements.txt").write_text("flask==3.0.0\n")
        output = tmp_path / "results.json"
        result = runner.invoke(main.app, ["check", "-l", "python", "-p", str(tmp_path), "-o", str(output)])
        assert result.exit_code == 0
        assert "Found supported library: flask:3.0.0" in result.output

        data = json.loads(output.read_text())
        assert data["summary"]["language"] == "python"
        assert data["summary"]["checks"] == 1
        assert data["metadata"] == {"mode": "auto", "catalog_source": "embedded"}
        assert data["components"]["SDK"]["errors"] == []

    def test_errors_set_exit_code(self, tmp_path):
        (tmp_path / "package.json").write_text(json.dumps({"dependencies": {"express": "^4.18.2"}}))
        result = runner.invoke(main.app, ["check", "--language", "JS", "--path", str(tmp_path)])
        assert result.exit_code == 1
        assert "Dependency @opentelemetry/api missing on package.json" in result.output

    def test_config_file_settings(self, tmp_path):
        (tmp_path / "Gemfile.lock").write_text("opentelemetry-sdk (1.4.0)\nopentelemetry-instrumentation-all (0.60.0)\n")
        config_file = tmp_path / "otel-checker.yaml"
        config_file.write_text(f"language: ruby\nworking-dir: {tmp_path}\n")
        result = runner.invoke(main.app, ["check", "--config", str(config_file)])
        assert result.exit_code == 0
        assert "Found required dependency: opentelemetry-instrumentation-all" in result.output
