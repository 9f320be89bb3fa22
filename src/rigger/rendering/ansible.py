# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/rendering/ansible.py
from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import yaml

from ..adapters.ansible import to_ansible_inventory
from ..adapters.interface import Inventory
from ..environment.aggregate import Environment
from ..topology.aggregate import DockerComposeTopology
from .renderer import TemplateRenderer, write_file

PLAYBOOKS: Tuple[str, ...] = (
    "install-docker.yml",
    "install-docker-compose.yml",
    "configure-firewall.yml",
)

INVENTORY_FILE = "inventory.yml"


def inventory_for(env: Environment) -> Inventory:
    ssh = env.user_inputs.ssh
    return Inventory(
        host=env.instance_name,
        address=env.address or "",
        username=ssh.username,
        port=ssh.port,
        private_key_path=ssh.private_key_path,
    )


def firewall_ports(topology: DockerComposeTopology) -> List[dict]:
    """Public host ports the firewall must open; localhost bindings stay closed."""
    ports = []
    for st in topology.services:
        for p in st.ports:
            if p.host_ip in (None, "0.0.0.0"):
                ports.append({"service": st.name, "host_port": p.host_port, "protocol": p.protocol})
    return ports


def render_ansible_project(
    env: Environment,
    topology: DockerComposeTopology,
    out_dir: Path,
    renderer: TemplateRenderer,
) -> List[Path]:
    """
    Write the playbooks, plus an inventory.yml once the instance address is
    known, so the project can also be run by hand with ansible-playbook.
    """
    context = {
        "username": env.user_inputs.ssh.username,
        "ssh_port": env.user_inputs.ssh.port,
        "ports": firewall_ports(topology),
    }
    written = [
        renderer.render_to(f"ansible/{name}.j2", context, out_dir / name)
        for name in PLAYBOOKS
    ]
    if env.address:
        inventory = to_ansible_inventory(inventory_for(env))
        written.append(
            write_file(out_dir / INVENTORY_FILE, yaml.safe_dump(inventory, sort_keys=False))
        )
    return written
