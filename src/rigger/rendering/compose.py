# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/rendering/compose.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

from ..environment.aggregate import Environment
from ..topology.aggregate import DockerComposeTopology
from ..topology.models import Service
from ..topology.network import DEFAULT_DRIVER
from .renderer import TemplateRenderer, make_dirs

log = logging.getLogger("rigger")

IMAGES: Dict[Service, str] = {
    Service.TRACKER: "torrust/tracker:develop",
    Service.MYSQL: "mysql:8.4",
    Service.PROMETHEUS: "prom/prometheus:v3.0.1",
    Service.GRAFANA: "grafana/grafana:11.4.0",
    Service.CADDY: "caddy:2.8",
    Service.BACKUP: "torrust/tracker-backup:latest",
}

# services that read their settings from the shared .env file
USES_ENV_FILE = frozenset({Service.TRACKER, Service.MYSQL, Service.GRAFANA, Service.BACKUP})


def compose_context(env: Environment, topology: DockerComposeTopology) -> dict:
    services: List[dict] = []
    for st in topology.services:
        services.append(
            {
                "name": st.name,
                "image": IMAGES[st.service],
                "env_file": st.service in USES_ENV_FILE,
                "ports": [p.compose_binding() for p in st.ports],
                "volumes": [m.compose_volume() for m in st.mounts],
                "networks": list(st.networks),
            }
        )
    return {
        "environment": env.name,
        "project_name": env.instance_name,
        "services": services,
        "networks": list(topology.networks),
        "driver": DEFAULT_DRIVER,
    }


def render_compose_project(
    env: Environment,
    topology: DockerComposeTopology,
    out_dir: Path,
    renderer: TemplateRenderer,
) -> List[Path]:
    """Write docker-compose.yml and .env for the topology into out_dir."""
    compose = renderer.render_to(
        "docker-compose/docker-compose.yml.j2",
        compose_context(env, topology),
        out_dir / "docker-compose.yml",
    )
    dotenv = renderer.render_to(
        "docker-compose/env.j2",
        {
            "environment": env.name,
            "variables": sorted(env.user_inputs.compose_env.items()),
        },
        out_dir / ".env",
    )

    for st in topology.services:
        for m in st.mounts:
            # parents only: the mount itself may be a file (Caddyfile)
            if m.host_path.startswith("./"):
                make_dirs((out_dir / m.host_path).parent)

    log.info("rendered docker-compose project for %s into %s", env.name, out_dir)
    return [compose, dotenv]
