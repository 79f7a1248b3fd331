from __future__ import annotations

import json
import logging

from swift_style_scanner.logging import PACKAGE_LOGGER, StructuredFormatter, get_logger, setup_logging


def test_setup_logging_is_idempotent() -> None:
    logger = setup_logging("INFO")
    setup_logging("DEBUG")

    handlers = [handler for handler in logger.handlers if isinstance(handler, logging.StreamHandler)]
    assert len(handlers) == 1
    assert logger.level == logging.DEBUG
    assert logger.name == PACKAGE_LOGGER


def test_unknown_level_falls_back_to_warning() -> None:
    logger = setup_logging("chatty")

    assert logger.level == logging.WARNING


def test_structured_formatter_emits_json() -> None:
    record = logging.LogRecord(
        name="swift_style_scanner.pipeline",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Could not read %s",
        args=("A.swift",),
        exc_info=None,
    )
    record.path = "A.swift"

    data = json.loads(StructuredFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["message"] == "Could not read A.swift"
    assert data["path"] == "A.swift"
    assert "rule_id" not in data


def test_module_loggers_are_children_of_package_logger() -> None:
    package = logging.getLogger(PACKAGE_LOGGER)

    assert get_logger("swift_style_scanner.pipeline").parent is package
