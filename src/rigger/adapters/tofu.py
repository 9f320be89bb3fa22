# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/adapters/tofu.py
from __future__ import annotations

import ipaddress
import json
import logging
from pathlib import Path
from typing import List, Optional

from ..errors import AdapterFailure
from .interface import InstanceInfo
from .runner import CommandRunner

log = logging.getLogger("rigger")


def parse_instance_info(stdout: str) -> InstanceInfo:
    """
    Extract the `instance_info` output from `tofu output -json`:

        {"instance_info": {"value": {"ip_address": "...", "name": "...", ...}}}
    """
    try:
        outputs = json.loads(stdout or "{}")
    except json.JSONDecodeError as exc:
        raise AdapterFailure("tofu", f"output is not valid JSON: {exc}") from exc

    value = (outputs.get("instance_info") or {}).get("value")
    if not isinstance(value, dict):
        raise AdapterFailure("tofu", "instance_info section not found in outputs")

    address = value.get("ip_address")
    if not isinstance(address, str):
        raise AdapterFailure("tofu", "ip_address field missing or not a string")
    try:
        ipaddress.ip_address(address)
    except ValueError as exc:
        raise AdapterFailure("tofu", f"ip_address '{address}' is not an IP address") from exc

    ids = {k: str(v) for k, v in (value.get("ids") or {}).items()}
    return InstanceInfo(
        address=address,
        name=str(value.get("name", "")),
        provider_ids=ids,
    )


class OpenTofuClient:
    """
    A pragmatic wrapper around the `tofu` CLI.
    - Mirrors human CLI usage: 'init', 'validate', 'plan', 'apply', 'destroy', 'output'.
    - Testable by mocking subprocess.run.
    """

    def __init__(self, runner: Optional[CommandRunner] = None):
        self.runner = runner or CommandRunner("tofu")

    # ------------------------- raw commands -------------------------

    def init(self, working_dir: Path) -> str:
        return self.runner.run(["init", "-input=false"], cwd=working_dir).stdout

    def validate(self, working_dir: Path) -> str:
        return self.runner.run(["validate"], cwd=working_dir).stdout

    def plan(self, working_dir: Path, extra_args: Optional[List[str]] = None) -> str:
        args = ["plan", "-input=false", *(extra_args or [])]
        return self.runner.run(args, cwd=working_dir).stdout

    def apply(self, working_dir: Path, auto_approve: bool = True) -> str:
        args = ["apply", "-input=false"]
        if auto_approve:
            args.append("-auto-approve")
        return self.runner.run(args, cwd=working_dir).stdout

    def destroy_infra(self, working_dir: Path, auto_approve: bool = True) -> str:
        args = ["destroy", "-input=false"]
        if auto_approve:
            args.append("-auto-approve")
        return self.runner.run(args, cwd=working_dir).stdout

    def output(self, working_dir: Path) -> InstanceInfo:
        cp = self.runner.run(["output", "-json"], cwd=working_dir)
        return parse_instance_info(cp.stdout)

    # ------------------------- ProvisioningAdapter -------------------------

    def provision(self, working_dir: Path) -> InstanceInfo:
        log.info("provisioning infrastructure from %s", working_dir)
        self.init(working_dir)
        self.validate(working_dir)
        self.plan(working_dir)
        self.apply(working_dir)
        info = self.output(working_dir)
        log.info("instance %s is at %s", info.name or "?", info.address)
        return info

    def destroy(self, working_dir: Path) -> None:
        # the directory may never have been initialised; init is idempotent
        log.info("destroying infrastructure from %s", working_dir)
        self.init(working_dir)
        self.destroy_infra(working_dir)
