# provision/features.py
# -*- coding: utf-8 -*-
"""
Works out which services the convergence run installed on this host.
"""

from enum import Enum
from pathlib import Path
from typing import Callable, FrozenSet

from pydantic import BaseModel, ConfigDict

from provision import config as static_config
from provision.config_models import InstallPaths


class Service(str, Enum):
    NGINX = "nginx"
    APPSERVER = "appserver"
    RABBITMQ = "rabbitmq"
    POSTGRESQL = "postgresql"


class DetectedFeatures(BaseModel):
    model_config = ConfigDict(frozen=True)

    has_nginx: bool = False
    has_appserver: bool = False
    has_rabbitmq: bool = False
    has_postgresql: bool = False

    @property
    def services(self) -> FrozenSet[Service]:
        flags = {
            Service.NGINX: self.has_nginx,
            Service.APPSERVER: self.has_appserver,
            Service.RABBITMQ: self.has_rabbitmq,
            Service.POSTGRESQL: self.has_postgresql,
        }
        return frozenset(service for service, present in flags.items() if present)


def detect_features(
    paths: InstallPaths,
    deployment_type: str,
    remote_postgres: bool = False,
    exists: Callable[[Path], bool] = Path.exists,
) -> DetectedFeatures:
    """
    Probes the marker files each service leaves behind after convergence.

    The docker deployment type runs only the application server, whatever
    the probes say. With a remote database the database counts as present
    even though nothing is installed locally.
    """
    if deployment_type == static_config.DOCKER_DEPLOYMENT_TYPE:
        return DetectedFeatures(has_appserver=True)

    return DetectedFeatures(
        has_nginx=exists(paths.nginx_marker),
        has_appserver=exists(paths.appserver_marker),
        has_rabbitmq=exists(paths.rabbitmq_marker),
        has_postgresql=remote_postgres or exists(paths.postgres_marker),
    )
