# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/utils/retry.py

import functools
import time
from typing import Callable, Optional


def retry(
    *,
    retries: int,
    delay: float,
    backoff: float = 1.0,
    max_delay: Optional[float] = None,
    retry_on: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[int, Exception], None] | None = None,
):
    """
    Call the wrapped function up to `retries` times while it raises one of
    `retry_on`. The pause starts at `delay` seconds and is multiplied by
    `backoff` after each failure, capped at `max_delay`. `on_retry(attempt,
    exc)` sees every failed attempt, including the last one.

    When attempts run out the last exception propagates as is, so callers
    keep their own error types.
    """
    if retries < 1:
        raise ValueError("retries must be at least 1")

    def decorator(fn):
        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            pause = delay
            attempt = 1
            while True:
                try:
                    return fn(*args, **kwargs)
                except retry_on as exc:
                    if on_retry:
                        on_retry(attempt, exc)
                    if attempt >= retries:
                        raise
                time.sleep(pause)
                pause = pause * backoff
                if max_delay is not None:
                    pause = min(pause, max_delay)
                attempt += 1
        return wrapper
    return decorator
