"""Tests for structured logging setup."""

import io
import json

from predictlab.utils.logging import configure_logging, get_logger, log_context


def test_json_events_carry_context() -> None:
    """Test JSON output includes bound context variables."""
    stream = io.StringIO()
    configure_logging("INFO", json_output=True, stream=stream)
    log = get_logger("predictlab.test")

    with log_context(dataset="tecator", model="PLS"):
        log.info("Tuning model", n_candidates=3)
    log.debug("Hidden")

    lines = [json.loads(line) for line in stream.getvalue().splitlines()]
    assert len(lines) == 1
    assert lines[0]["event"] == "Tuning model"
    assert lines[0]["dataset"] == "tecator"
    assert lines[0]["model"] == "PLS"
    assert lines[0]["n_candidates"] == 3
    assert lines[0]["level"] == "info"


def test_context_is_unbound_after_block() -> None:
    """Test context variables do not leak past the block."""
    stream = io.StringIO()
    configure_logging("INFO", json_output=True, stream=stream)
    log = get_logger("predictlab.test")

    with log_context(model="KNN"):
        pass
    log.warning("Outside")

    event = json.loads(stream.getvalue().splitlines()[-1])
    assert "model" not in event
