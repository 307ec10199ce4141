"""Structured logging for CncToolSelector.

``app.log`` is a rotating human-readable log. Two JSON-lines audit trails
sit beside it:

* ``operations.jsonl``: session and comparison actions
* ``calculations.jsonl``: every completed tool evaluation with its inputs
"""
from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Optional

OPERATIONS_FILE = "operations.jsonl"
CALCULATIONS_FILE = "calculations.jsonl"
APP_LOG_FILE = "app.log"


class StructuredLogger:
    def __init__(self, log_dir: str = "data/logs", level: str = "DEBUG"):
        self._log_dir = log_dir
        self._write_lock = threading.Lock()
        os.makedirs(log_dir, exist_ok=True)
        self._app_logger = self._make_app_logger(level)

    def _make_app_logger(self, level: str) -> logging.Logger:
        app_logger = logging.getLogger("cnc_tool_selector.app.%x" % id(self))
        if not app_logger.handlers:
            handler = RotatingFileHandler(os.path.join(self._log_dir, APP_LOG_FILE),
                                          maxBytes=10 * 1024 * 1024, backupCount=5,
                                          encoding="utf-8")
            handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
            app_logger.addHandler(handler)
            app_logger.setLevel(getattr(logging, str(level).upper(), logging.DEBUG))
        return app_logger

    @property
    def app(self) -> logging.Logger:
        return self._app_logger

    @property
    def log_dir(self) -> str:
        return self._log_dir

    def _append(self, filename: str, session_id: str, event_type: str, **payload) -> None:
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session_id": session_id,
            "event_type": event_type,
        }
        record.update(payload)
        line = json.dumps(record, ensure_ascii=False, default=str) + "\n"
        with self._write_lock:
            with open(os.path.join(self._log_dir, filename), "a", encoding="utf-8") as f:
                f.write(line)

    def log_operation(self, session_id: str, event_type: str, user_action: str = "",
                      data: Optional[dict] = None) -> None:
        self._append(OPERATIONS_FILE, session_id, event_type,
                     user_action=user_action, data=data or {})

    def log_calculation(self, session_id: str, inputs: dict, outputs: dict,
                        intermediate: Optional[dict] = None,
                        validation: Optional[dict] = None,
                        evaluation_id: str = "") -> None:
        """One line per evaluation: inputs, results and the validation outcome."""
        self._append(CALCULATIONS_FILE, session_id, "calculation.completed",
                     evaluation_id=evaluation_id, inputs=inputs, outputs=outputs,
                     intermediate=intermediate or {}, validation=validation or {})

    def close(self) -> None:
        for handler in list(self._app_logger.handlers):
            handler.close()
            self._app_logger.removeHandler(handler)
