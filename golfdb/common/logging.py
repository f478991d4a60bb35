"""JSON-lines run log.

Every record carries the full ``JSON_LOG_FIELDS`` set so downstream tooling
can rely on the keys being present; fields a call site does not pass are
``null``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from golfdb.common.constants import JSON_LOG_FIELDS
from golfdb.common.fs import ensure_dir
from golfdb.common.time_utils import utc_timestamp_iso

PACKAGE_LOGGER = "golfdb"


class JsonLineFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {field: getattr(record, field, None) for field in JSON_LOG_FIELDS}
        payload["timestamp"] = utc_timestamp_iso()
        payload["message"] = record.getMessage()
        if payload["status"] is None and record.levelno >= logging.WARNING:
            payload["status"] = record.levelname.lower()
        return json.dumps(payload, ensure_ascii=False)


def build_logger(run_id: str, data_dir: Path, level: str = "INFO") -> logging.Logger:
    """Run logger writing to stderr and ``run_meta/<run_id>.log.jsonl``.

    The same handlers are attached to the ``golfdb`` package logger so
    module-level warnings land in the run log too.
    """
    log_path = data_dir / "run_meta" / f"{run_id}.log.jsonl"
    ensure_dir(log_path.parent)
    formatter = JsonLineFormatter()
    handlers: list[logging.Handler] = [logging.StreamHandler(), logging.FileHandler(log_path, encoding="utf-8")]
    for handler in handlers:
        handler.setFormatter(formatter)

    logger = logging.getLogger(f"{PACKAGE_LOGGER}.run.{run_id}")
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for target in (logger, package_logger):
        target.setLevel(level.upper())
        target.handlers[:] = handlers
    logger.propagate = False
    return logger


def log_event(logger: logging.Logger, message: str, **event_fields: Any) -> None:
    logger.info(message, extra=event_fields)


def close_logger(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logging.getLogger(PACKAGE_LOGGER).handlers.clear()
