# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/adapters/runner.py
from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from ..errors import AdapterFailure

log = logging.getLogger("rigger")


@dataclass
class CommandRunner:
    """
    Runs one external tool and logs the full exchange.

    Non-zero exits, a missing executable and timeouts all surface as
    AdapterFailure carrying the tool's stderr.
    """

    tool: str
    timeout: Optional[int] = 1800

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Optional[Path] = None,
        env: Optional[dict[str, str]] = None,
    ) -> subprocess.CompletedProcess:
        argv = [self.tool, *map(str, args)]
        cmd_str = " ".join(argv)
        log.info("[%s] $ %s", self.tool, cmd_str)
        start = time.time()

        try:
            cp = subprocess.run(
                argv,
                capture_output=True,
                check=False,
                text=True,
                cwd=str(cwd) if cwd else None,
                env=env,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise AdapterFailure(self.tool, f"executable not found: {exc}", argv=argv) from exc
        except subprocess.TimeoutExpired as exc:
            raise AdapterFailure(
                self.tool, f"timed out after {self.timeout}s", argv=argv
            ) from exc

        duration = time.time() - start
        if cp.stdout:
            log.debug("[%s][stdout]\n%s", self.tool, cp.stdout.rstrip())
        if cp.stderr:
            log.debug("[%s][stderr]\n%s", self.tool, cp.stderr.rstrip())
        log.debug("[%s][exit %s] (%.2fs)", self.tool, cp.returncode, duration)

        if cp.returncode != 0:
            raise AdapterFailure(
                self.tool,
                f"'{cmd_str}' exited non-zero",
                argv=argv,
                returncode=cp.returncode,
                stderr=cp.stderr or "",
            )
        return cp
