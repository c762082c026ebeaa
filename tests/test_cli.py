"""Tests for the CLI module."""

from __future__ import annotations

import json
import logging
from unittest.mock import patch

import pytest
from loguru import logger

from devcritic.cli import _setup_logging, main
from devcritic.config import Config
from devcritic.github import GitHubNotFoundError


@pytest.fixture(autouse=True)
def quiet_setup():
    with patch("devcritic.cli._setup_logging"), patch(
        "devcritic.cli.Config.from_env", return_value=Config(github_token="gh")
    ):
        yield


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as excinfo:
        main([])
    assert excinfo.value.code == 1


@patch("devcritic.service.run_analysis")
def test_analyze_prints_json(mock_run, capsys):
    mock_run.return_value = {"user": {"login": "octocat"}, "score": 61}

    main(["analyze", "octocat"])

    assert json.loads(capsys.readouterr().out) == {"user": {"login": "octocat"}, "score": 61}
    assert mock_run.call_args.args[0] == "octocat"


@patch("devcritic.service.run_analysis")
@patch("devcritic.service.fetch_bundle")
def test_analyze_no_critique_skips_llm(mock_fetch, mock_run, bundle, capsys):
    mock_fetch.return_value = bundle

    main(["analyze", "octocat", "--no-critique"])

    data = json.loads(capsys.readouterr().out)
    assert data["total_stars"] == 55
    assert "score" not in data
    mock_run.assert_not_called()


@patch("devcritic.service.run_analysis")
def test_analyze_writes_output_file(mock_run, tmp_path):
    mock_run.return_value = {"score": 42}
    target = tmp_path / "report.json"

    main(["analyze", "octocat", "-o", str(target)])

    assert json.loads(target.read_text(encoding="utf-8")) == {"score": 42}


@patch("devcritic.service.run_analysis")
def test_analyze_not_found_exits(mock_run):
    mock_run.side_effect = GitHubNotFoundError("ghost")

    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", "ghost"])
    assert excinfo.value.code == 1


@patch("devcritic.service.run_analysis")
def test_analyze_invalid_username_exits(mock_run):
    with pytest.raises(SystemExit) as excinfo:
        main(["analyze", "$$$"])
    assert excinfo.value.code == 1
    mock_run.assert_not_called()


@patch("devcritic.cli.uvicorn.run")
def test_serve_uses_config_defaults(mock_uvicorn):
    main(["serve", "--port", "9001"])

    kwargs = mock_uvicorn.call_args.kwargs
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9001


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    names = ("httpx", "openai", "httpcore", "uvicorn.access")
    levels = {name: logging.getLogger(name).level for name in names}
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, old in levels.items():
        logging.getLogger(name).setLevel(old)


@pytest.mark.parametrize(("verbose", "expected"), [(False, logging.WARNING), (True, logging.DEBUG)])
def test_setup_logging_levels_follow_verbose(restore_logging, verbose, expected):
    _setup_logging(verbose)

    for name in ("httpx", "openai", "httpcore", "uvicorn.access"):
        assert logging.getLogger(name).level == expected


def test_stdlib_records_reach_loguru(restore_logging):
    _setup_logging()
    messages = []
    sink_id = logger.add(messages.append, format="{message}")
    try:
        logging.getLogger("uvicorn.error").warning("Started server process %d", 42)
    finally:
        logger.remove(sink_id)

    assert any("Started server process 42" in m for m in messages)
