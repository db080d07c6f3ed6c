"""Logger setup and segment progress tracker tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterator, List

import pytest
from loguru import logger

from graphloom.utils.config import LoggingConfig
from graphloom.utils.logger import log_error, log_metric, setup_logger
from graphloom.utils.progress import SegmentProgressTracker


@pytest.fixture
def captured() -> Iterator[List[dict]]:
    records: List[dict] = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)


@pytest.fixture
def restore_logger() -> Iterator[None]:
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_setup_logger_writes_to_configured_file(tmp_path: Path, restore_logger) -> None:
    log_file = tmp_path / "logs" / "run.log"

    setup_logger(LoggingConfig(level="DEBUG", file=str(log_file)))
    logger.debug("segment merged")
    logger.complete()

    assert log_file.exists()
    assert "segment merged" in log_file.read_text(encoding="utf-8")


def test_setup_logger_json_format(tmp_path: Path, restore_logger) -> None:
    log_file = tmp_path / "run.jsonl"

    setup_logger(LoggingConfig(file=str(log_file), format="json"))
    logger.info("batch sg1 applied")

    content = log_file.read_text(encoding="utf-8")
    assert '"message": "batch sg1 applied"' in content


def test_log_metric_binds_tags(captured) -> None:
    log_metric("merge.nodes_inserted", 3, batch_id="sg2")

    record = captured[-1]
    assert record["extra"]["metric"] == "merge.nodes_inserted"
    assert record["extra"]["value"] == 3
    assert record["extra"]["batch_id"] == "sg2"


def test_log_error_includes_exception(captured) -> None:
    try:
        raise ValueError("bad edge")
    except ValueError as exc:
        log_error(exc, context="segment 2")

    record = captured[-1]
    assert record["level"].name == "ERROR"
    assert record["exception"] is not None
    assert record["extra"]["context"] == "segment 2"
    assert record["extra"]["error_type"] == "ValueError"


def test_progress_tracker_accumulates_and_caps(captured) -> None:
    tracker = SegmentProgressTracker(2, heartbeat_seconds=3600)

    tracker.update(nodes_added=2, edges_added=1)
    tracker.update(nodes_added=1)
    tracker.update()

    assert tracker.done == 2
    assert (tracker.nodes_added, tracker.edges_added) == (3, 1)
    messages = [r["message"] for r in captured if r["message"].startswith("Segments merged")]
    assert messages[0].startswith("Segments merged: 1/2 (50%), +2 nodes, +1 edges, ETA")
    assert any(m.startswith("Segments merged: 2/2 (100%)") for m in messages)


def test_format_eta() -> None:
    tracker = SegmentProgressTracker(1)
    assert tracker._format_eta(float("inf")) == "unknown"
    assert tracker._format_eta(42) == "42s"
    assert tracker._format_eta(125) == "2m05s"
    assert tracker._format_eta(3725) == "1h02m"
