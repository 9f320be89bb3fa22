# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/logging/log.py

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

# libraries that log every packet or task at INFO
_NOISY = ("paramiko", "ansible_runner", "urllib3")


class _RunIdFilter(logging.Filter):
    def __init__(self, run_id: str):
        super().__init__()
        self.short = run_id[:8]

    def filter(self, record: logging.LogRecord) -> bool:
        record.run = self.short
        return True


def _prune(base_dir: Path, name: str, keep: int) -> None:
    logs = sorted(base_dir.glob(f"{name}-*.log"))
    for old in logs[:-keep] if keep > 0 else []:
        old.unlink(missing_ok=True)


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "rigger",
    verbose: bool = False,
    keep: int = 50,
) -> tuple[logging.Logger, str, Path]:
    """
    One log file per command run, named <name>-<utc timestamp>-<run_id>.log:

      - the file gets everything at DEBUG, tagged with the short run id
      - the console gets INFO, or DEBUG with --debug
      - only the newest `keep` run logs are kept in base_dir

    Returns (logger, run_id, log_path); the run id is shared with the
    event bus so traces and logs can be matched up.
    """
    run_id = str(uuid.uuid4())

    if base_dir is None:
        base_dir = Path.home() / ".rigger" / "logs"
    base_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{ts}-{run_id}.log"
    _prune(base_dir, name, keep - 1)

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    logger.propagate = False

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.addFilter(_RunIdFilter(run_id))
    fh.setFormatter(logging.Formatter(
        "%(asctime)s | %(run)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.setFormatter(logging.Formatter("%(levelname)-7s %(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    for noisy in _NOISY:
        logging.getLogger(noisy).setLevel(logging.DEBUG if verbose else logging.WARNING)

    logger.debug("rigger run %s started, log file %s", run_id, log_path)
    return logger, run_id, log_path
