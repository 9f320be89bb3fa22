# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/adapters/health.py
from __future__ import annotations

import logging

import requests

from ..errors import AdapterFailure
from ..utils.retry import retry

log = logging.getLogger("rigger")


class HttpHealthChecker:
    """Polls an HTTP endpoint until it answers 200."""

    def __init__(self, attempts: int = 10, delay: float = 3.0, timeout: float = 5.0):
        self.attempts = attempts
        self.delay = delay
        self.timeout = timeout

    def _get(self, url: str) -> None:
        resp = requests.get(url, timeout=self.timeout)
        if resp.status_code != 200:
            raise AdapterFailure("health-check", f"{url} answered HTTP {resp.status_code}")

    def check(self, url: str) -> None:
        def _log(attempt: int, exc: Exception) -> None:
            log.debug("[health] attempt %d/%d for %s: %s", attempt, self.attempts, url, exc)

        get = retry(
            retries=self.attempts,
            delay=self.delay,
            backoff=1.5,
            max_delay=15.0,
            retry_on=(requests.RequestException, AdapterFailure),
            on_retry=_log,
        )(self._get)

        try:
            get(url)
        except requests.RequestException as exc:
            raise AdapterFailure("health-check", f"{url} unreachable: {exc}") from exc
        log.info("[health] %s is healthy", url)
