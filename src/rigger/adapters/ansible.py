# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/adapters/ansible.py
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import ansible_runner

from ..errors import AdapterFailure
from .interface import Inventory

log = logging.getLogger("rigger")


def to_ansible_inventory(inv: Inventory) -> Dict[str, Any]:
    return {
        "all": {
            "hosts": {
                inv.host: {
                    "ansible_host": inv.address,
                    "ansible_user": inv.username,
                    "ansible_port": inv.port,
                    "ansible_ssh_private_key_file": str(inv.private_key_path),
                    "ansible_python_interpreter": "/usr/bin/python3",
                }
            }
        }
    }


def _tail(runner, lines: int = 40) -> str:
    try:
        out = runner.stdout.read()
    except (AttributeError, OSError):  # artifacts already cleaned up
        return ""
    return "\n".join(out.splitlines()[-lines:])


class AnsibleClient:
    """
    Runs playbooks from a rendered project directory with ansible-runner.
    Playbooks run in the order given; the first failure stops the run.
    """

    def __init__(self, extra_vars: Optional[Dict[str, Any]] = None, quiet: bool = True):
        self.extra_vars = extra_vars or {}
        self.quiet = quiet

    def run_playbook(self, project_dir: Path, inventory: Inventory, playbook: str) -> str:
        path = project_dir / playbook
        if not path.is_file():
            raise AdapterFailure("ansible", f"playbook {path} does not exist")

        env = os.environ.copy()
        env["ANSIBLE_HOST_KEY_CHECKING"] = "False"

        log.info("[ansible] Running playbook: %s", playbook)
        log.info("[ansible] Inventory: %s@%s:%s", inventory.username, inventory.address, inventory.port)

        r = ansible_runner.run(
            private_data_dir=str(project_dir),
            playbook=str(path),
            inventory=to_ansible_inventory(inventory),
            extravars=self.extra_vars,
            envvars=env,
            quiet=self.quiet,
        )

        if r.rc != 0:
            raise AdapterFailure(
                "ansible",
                f"playbook {playbook} finished with status {r.status}",
                argv=["ansible-playbook", str(path)],
                returncode=r.rc,
                stderr=_tail(r),
            )
        return r.status

    def configure(self, project_dir: Path, inventory: Inventory, playbooks: Sequence[str]) -> None:
        for playbook in playbooks:
            self.run_playbook(project_dir, inventory, playbook)
