# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/rendering/services.py
"""
Configuration files of the services themselves (tracker.toml, prometheus.yml,
grafana datasources, Caddyfile, backup.conf).

Each file is written inside the host side of the mount that carries it, so
the compose project can be uploaded as a whole. A service whose mount was
replaced by one outside the project directory is left to the user.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote

from ..environment.aggregate import Environment
from ..errors import ConfigError
from ..topology.aggregate import DockerComposeTopology, ServiceTopology
from ..topology.models import Mount, Service
from .renderer import TemplateRenderer

log = logging.getLogger("rigger")

SQLITE_PATH = "/var/lib/torrust/tracker/database/sqlite3.db"
BACKUP_DATA_PATHS = ("/data/storage/tracker/lib",)


@dataclass(frozen=True)
class ConfigFile:
    service: Service
    mount_target: str           # container path of the mount holding the file
    filename: Optional[str]     # None when the mount is the file itself
    template: str


CONFIG_FILES: Tuple[ConfigFile, ...] = (
    ConfigFile(Service.TRACKER, "/etc/torrust/tracker", "tracker.toml", "services/tracker.toml.j2"),
    ConfigFile(Service.PROMETHEUS, "/etc/prometheus", "prometheus.yml", "services/prometheus.yml.j2"),
    ConfigFile(
        Service.GRAFANA,
        "/etc/grafana/provisioning",
        "datasources/prometheus.yml",
        "services/grafana-datasource.yml.j2",
    ),
    ConfigFile(Service.CADDY, "/etc/caddy/Caddyfile", None, "services/Caddyfile.j2"),
    ConfigFile(Service.BACKUP, "/etc/backup", "backup.conf", "services/backup.conf.j2"),
    ConfigFile(Service.BACKUP, "/etc/backup", "backup-paths.txt", "services/backup-paths.txt.j2"),
)


# ----- contexts -----

def _mysql_settings(env: Environment) -> Dict[str, str]:
    values = env.user_inputs.compose_env
    return {
        "host": "mysql",
        "port": "3306",
        "user": values.get("MYSQL_USER", "tracker_user"),
        "password": values.get("MYSQL_PASSWORD", ""),
        "name": values.get("MYSQL_DATABASE", "torrust_tracker"),
    }


def _tracker_ports(st: ServiceTopology, api_port: int) -> Tuple[List[int], List[int]]:
    udp = [p.container_port for p in st.ports if p.protocol == "udp"]
    http = [
        p.container_port for p in st.ports
        if p.protocol == "tcp" and p.container_port != api_port
    ]
    return udp, http


def tracker_context(env: Environment, topology: DockerComposeTopology) -> dict:
    opts = env.user_inputs.service_options
    if topology.has(Service.MYSQL):
        db = _mysql_settings(env)
        database = {
            "driver": "mysql",
            "path": f"mysql://{quote(db['user'], safe='')}:{quote(db['password'], safe='')}"
                    f"@{db['host']}:{db['port']}/{db['name']}",
        }
    else:
        database = {"driver": "sqlite3", "path": SQLITE_PATH}

    udp, http = _tracker_ports(topology.service(Service.TRACKER), opts.tracker_api_port)
    return {
        "private": opts.tracker_private,
        "database": database,
        "udp_ports": udp,
        "http_ports": http,
        "api_port": opts.tracker_api_port,
        "api_token": opts.tracker_api_token,
    }


def prometheus_context(env: Environment, topology: DockerComposeTopology) -> dict:
    opts = env.user_inputs.service_options
    return {
        "scrape_interval": opts.scrape_interval,
        "api_token": opts.tracker_api_token,
        "api_port": opts.tracker_api_port,
    }


def grafana_context(env: Environment, topology: DockerComposeTopology) -> Optional[dict]:
    if not topology.has(Service.PROMETHEUS):
        return None
    return {"scrape_interval": env.user_inputs.service_options.scrape_interval}


def caddy_context(env: Environment, topology: DockerComposeTopology) -> dict:
    https = env.user_inputs.https
    if https is None:
        raise ConfigError("service 'caddy' requires an 'https' section")
    opts = env.user_inputs.service_options

    sites = []
    if topology.has(Service.TRACKER):
        if https.tracker_api_domain:
            sites.append({"domain": https.tracker_api_domain, "upstream": f"tracker:{opts.tracker_api_port}"})
        _, http = _tracker_ports(topology.service(Service.TRACKER), opts.tracker_api_port)
        if https.http_tracker_domain and http:
            sites.append({"domain": https.http_tracker_domain, "upstream": f"tracker:{http[0]}"})
    if topology.has(Service.GRAFANA) and https.grafana_domain:
        sites.append({"domain": https.grafana_domain, "upstream": "grafana:3000"})

    return {"admin_email": https.admin_email, "use_staging": https.use_staging, "sites": sites}


def backup_context(env: Environment, topology: DockerComposeTopology) -> dict:
    if topology.has(Service.MYSQL):
        database = {"type": "mysql", **_mysql_settings(env)}
    else:
        database = {"type": "sqlite", "path": "/data/storage/tracker/lib/database/sqlite3.db"}
    return {
        "retention_days": env.user_inputs.service_options.backup_retention_days,
        "database": database,
        "paths": list(BACKUP_DATA_PATHS),
    }


ContextFn = Callable[[Environment, DockerComposeTopology], Optional[dict]]

CONTEXTS: Dict[Service, ContextFn] = {
    Service.TRACKER: tracker_context,
    Service.PROMETHEUS: prometheus_context,
    Service.GRAFANA: grafana_context,
    Service.CADDY: caddy_context,
    Service.BACKUP: backup_context,
}


# ----- rendering -----

def _mount_for(st: ServiceTopology, target: str) -> Optional[Mount]:
    for m in st.mounts:
        if m.container_path == target:
            return m
    return None


def config_file_path(out_dir: Path, cf: ConfigFile, mount: Mount) -> Path:
    base = out_dir / mount.host_path
    return base / cf.filename if cf.filename else base


def render_service_configs(
    env: Environment,
    topology: DockerComposeTopology,
    out_dir: Path,
    renderer: TemplateRenderer,
) -> List[Path]:
    """Render the configuration file of every enabled service into out_dir."""
    written: List[Path] = []
    contexts: Dict[Service, Optional[dict]] = {}

    for cf in CONFIG_FILES:
        if not topology.has(cf.service):
            continue
        st = topology.service(cf.service)
        mount = _mount_for(st, cf.mount_target)
        if mount is None or not mount.host_path.startswith("./"):
            log.info("[render] %s: no project mount for %s; skipping %s", st.name, cf.mount_target, cf.template)
            continue

        if cf.service not in contexts:
            contexts[cf.service] = CONTEXTS[cf.service](env, topology)
        context = contexts[cf.service]
        if context is None:
            continue

        dest = config_file_path(out_dir, cf, mount)
        written.append(renderer.render_to(cf.template, {"environment": env.name, **context}, dest))

    log.info("rendered %d service configuration file(s) for %s", len(written), env.name)
    return written
