# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/observers/logger.py
from __future__ import annotations

import logging
from typing import Optional

from .events import BaseEvent

_SKIP = ("ts", "run_id", "env", "command")


class LoggerObserver:
    """Mirrors every event into the run log file at DEBUG."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("rigger")

    def notify(self, event: BaseEvent) -> None:
        fields = ", ".join(f"{k}={v}" for k, v in event.dict().items() if k not in _SKIP)
        self.logger.debug(
            "[EVENT] %s %s/%s: %s",
            type(event).__name__, event.command, event.env, fields,
        )
