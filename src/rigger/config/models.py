# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/rigger/config/models.py

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..topology.models import Service, ServiceDeclaration


class SshCredentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str = "torrust"
    private_key_path: Path
    public_key_path: Path
    port: int = Field(default=22, ge=1, le=65535)


class ProviderConfig(BaseModel):
    """Provider-specific settings handed to the OpenTofu templates."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["lxd", "hetzner"] = "lxd"
    profile_name: Optional[str] = None        # lxd
    server_type: str = "cx22"                 # hetzner
    location: str = "nbg1"                    # hetzner
    image: str = "ubuntu-24.04"
    api_token: Optional[str] = None           # hetzner
    settings: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _hetzner_needs_token(self):
        if self.kind == "hetzner" and not self.api_token:
            raise ValueError("provider 'hetzner' requires api_token")
        return self


class HttpsConfig(BaseModel):
    """TLS termination by caddy: one site per public endpoint."""

    model_config = ConfigDict(frozen=True)

    admin_email: str
    use_staging: bool = False
    tracker_api_domain: Optional[str] = None
    http_tracker_domain: Optional[str] = None
    grafana_domain: Optional[str] = None


class ServiceOptions(BaseModel):
    """Settings rendered into the configuration files of the services."""

    model_config = ConfigDict(frozen=True)

    tracker_private: bool = False
    tracker_api_port: int = Field(default=1212, ge=1, le=65535)
    tracker_api_token: str = "MyAccessToken"
    scrape_interval: int = Field(default=15, ge=1)
    backup_retention_days: int = Field(default=7, ge=1)


class UserInputs(BaseModel):
    """
    Everything the user supplies for one environment. Commands read it and
    never change it.
    """

    model_config = ConfigDict(frozen=True)

    ssh: SshCredentials
    provider: ProviderConfig = ProviderConfig()
    services: List[ServiceDeclaration] = Field(default_factory=list)
    networks: Optional[List[str]] = None      # declared network catalogue
    compose_env: Dict[str, str] = Field(default_factory=dict)   # written to .env
    instance_name: Optional[str] = None
    health_check_path: str = "/api/health_check"
    health_check_port: int = 1212
    service_options: ServiceOptions = ServiceOptions()
    https: Optional[HttpsConfig] = None

    @model_validator(mode="after")
    def _caddy_needs_https(self):
        caddy = [d for d in self.services if d.service == Service.CADDY and d.enabled]
        if caddy and self.https is None:
            raise ValueError("service 'caddy' requires an 'https' section")
        return self


class EnvironmentConfig(UserInputs):
    """Shape of the YAML file passed to `rigger create`."""

    name: str
