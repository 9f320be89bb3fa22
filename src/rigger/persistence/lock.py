# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/persistence/lock.py
from __future__ import annotations

import fcntl
import logging
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..errors import PersistenceFailure

log = logging.getLogger("rigger")


@contextmanager
def file_lock(target: Path, timeout: float = 10.0, poll: float = 0.1) -> Iterator[Path]:
    """
    Advisory exclusive lock on `<target>.lock`.

    Only rigger processes honour it. It narrows the window for two
    invocations racing on the same environment record; it does not make
    concurrent use of one environment supported.
    """
    lock_path = target.with_name(target.name + ".lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o644)
    deadline = time.monotonic() + timeout
    try:
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise PersistenceFailure(
                        f"timed out after {timeout}s waiting for lock {lock_path}; "
                        "another rigger process is using this environment"
                    )
                time.sleep(poll)

        os.ftruncate(fd, 0)
        os.write(fd, str(os.getpid()).encode())
        log.debug("acquired lock %s", lock_path)
        try:
            yield lock_path
        finally:
            fcntl.flock(fd, fcntl.LOCK_UN)
            log.debug("released lock %s", lock_path)
    finally:
        os.close(fd)
