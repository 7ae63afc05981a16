from __future__ import annotations

import json

import pytest

from boong_bootstrap.logging_config import get_logger, setup_logging


def test_json_records_go_to_stderr(capsys: pytest.CaptureFixture[str]) -> None:
    setup_logging(log_level="INFO", log_format="json")

    get_logger("boong_bootstrap.test").info("download_started", name="proxy")

    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["event"] == "download_started"
    assert record["name"] == "proxy"
    assert record["level"] == "info"
    assert record["logger"] == "boong_bootstrap.test"


def test_level_from_environment_filters_records(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("LOG_FORMAT", "json")
    setup_logging()

    logger = get_logger("boong_bootstrap.test")
    logger.info("git_clone_started")
    logger.warning("resource_skipped", name="agent")

    events = [json.loads(line)["event"] for line in capsys.readouterr().err.strip().splitlines()]
    assert events == ["resource_skipped"]
