"""Tests for the top-level codex CLI."""

import logging
import re

import pytest
from typer.testing import CliRunner

from codex_archive import __version__
from codex_archive.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers bound to CliRunner's captured stderr after each test."""
    yield
    logger = logging.getLogger("codex_archive")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def _out(result) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", result.stdout)


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_subcommands_registered():
    result = runner.invoke(app, ["--help"])
    out = _out(result)
    assert result.exit_code == 0
    assert "items" in out
    assert "groups" in out


def test_verbose_and_quiet_conflict():
    result = runner.invoke(app, ["--verbose", "--quiet", "version"])
    assert result.exit_code == 1


def test_verbose_sets_debug_level():
    result = runner.invoke(app, ["--verbose", "version"])
    assert result.exit_code == 0
    assert logging.getLogger("codex_archive").level == logging.DEBUG


def test_log_level_from_environment():
    result = runner.invoke(app, ["version"], env={"CODEX_LOG_LEVEL": "info"})
    assert result.exit_code == 0
    assert logging.getLogger("codex_archive").level == logging.INFO


def test_invalid_log_level():
    result = runner.invoke(app, ["version"], env={"CODEX_LOG_LEVEL": "LOUD"})
    assert result.exit_code == 1
    assert "Invalid value 'LOUD' for CODEX_LOG_LEVEL" in result.output


def test_invalid_environment_rejected_with_verbose():
    result = runner.invoke(app, ["-v", "version"], env={"CODEX_LOG_LEVEL": "LOUD"})
    assert result.exit_code == 1
    assert "codex version" not in result.output


def test_groups_through_main_app():
    save = runner.invoke(app, ["items", "save", "Clip", "--kind", "audio", "-o", "u1"])
    assert save.exit_code == 0
    item_id = re.search(r"ID: ([0-9a-f]{32})", _out(save)).group(1)

    result = runner.invoke(app, ["groups", "create", "Clips", item_id, "-o", "u1"])
    assert result.exit_code == 0
    assert "Created group" in _out(result)
