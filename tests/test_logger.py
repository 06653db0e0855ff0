from __future__ import annotations

import json
import logging

from port_prober.logger import LOGGER_NAME, create_logger, get_logger, log_event


def test_create_logger_replaces_handlers(tmp_path) -> None:
    first = create_logger(logging.INFO, str(tmp_path / "a.log"))
    second = create_logger(logging.DEBUG)

    assert first is second
    assert len(second.handlers) == 1
    assert second.level == logging.DEBUG

    second.removeHandler(second.handlers[0])
    second.setLevel(logging.NOTSET)


def test_child_logger_name() -> None:
    assert get_logger("prober").name == f"{LOGGER_NAME}.prober"
    assert get_logger().name == LOGGER_NAME


def test_log_event_writes_one_json_line(caplog) -> None:
    logger = get_logger("test")

    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        log_event(logger, "probe_result", {"host": "10.0.0.1", "port": 22, "outcome": "refused"})

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "probe_result"
    assert payload["port"] == 22
    assert payload["ts"].endswith("Z")


def test_log_event_skips_disabled_levels(caplog) -> None:
    logger = get_logger("test")

    with caplog.at_level(logging.INFO, logger=LOGGER_NAME):
        log_event(logger, "probe_result", {"port": 1}, level=logging.DEBUG)

    assert not caplog.records
