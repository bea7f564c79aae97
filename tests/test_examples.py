"""Tests for the runnable examples."""

import importlib.util
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

EXAMPLE = Path(__file__).parent.parent / "examples" / "persisting_jar.py"


@pytest.fixture
def example():
    """Load the persisting_jar example as a module."""
    spec = importlib.util.spec_from_file_location("persisting_jar", EXAMPLE)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestPersistingJar:
    """Tests for examples/persisting_jar.py."""

    def test_runs_and_records_changes(self, example):
        """Test the example records one JSON line per announced change."""
        result = CliRunner().invoke(example.main, [])
        assert result.exit_code == 0, result.output
        records = [json.loads(line) for line in result.output.splitlines() if line.startswith("{")]
        assert records[0]["new"]["name"] == "session"
        assert all(record["author"] == "transport" for record in records)

    def test_header_without_cookie_is_reported(self, example, mocker):
        """Test a header that yields no cookie is reported instead of crashing."""
        mocker.patch.object(example, "RESPONSES", [("example.com", "garbage"), ("example.com", "a=1")])
        result = CliRunner().invoke(example.main, [])
        assert result.exit_code == 0, result.output
        assert "garbage -> ignored" in result.output
        assert "a=1 -> added" in result.output
