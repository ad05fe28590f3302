# provision/config_models.py
# -*- coding: utf-8 -*-
"""
Pydantic models for installer configuration.

`InstallerSettings` carries the environment-driven knobs (package options,
deployment type, puppet classes), `InstallPaths` the fixed system paths, and
`InstallOptions` the validated command-line flags. `InstallConfig` combines
options and settings into the single immutable record handed to every step.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from provision import config as static_config

SYMBOLS_DEFAULT: Dict[str, str] = {
    "success": "✅",
    "error": "❌",
    "warning": "⚠️",
    "info": "ℹ️",
    "step": "➡️",
    "gear": "⚙️",
    "package": "📦",
    "rocket": "🚀",
    "sparkles": "✨",
    "critical": "🔥",
    "debug": "🐛",
}

DEPLOYMENT_TYPE_DEFAULT: str = "voyager"
PUPPET_CLASSES_DEFAULT: str = "zulip::voyager"
SERVICE_USER_DEFAULT: str = "zulip"
LOG_PREFIX_DEFAULT: str = "[ZULIP-INSTALL]"


class CertMode(str, Enum):
    """How the TLS certificate is obtained."""

    NONE = "none"
    CERTBOT = "certbot"
    SELF_SIGNED = "self-signed"


class InstallPaths(BaseModel):
    """Filesystem locations read or written by the installer."""

    model_config = ConfigDict(frozen=True)

    conf_dir: Path = Path("/etc/zulip")
    zulip_conf: Path = Path("/etc/zulip/zulip.conf")
    settings_file: Path = Path("/etc/zulip/settings.py")
    ssl_key: Path = Path("/etc/ssl/private/zulip.key")
    ssl_cert: Path = Path("/etc/ssl/certs/zulip.combined-chain.crt")
    os_release: Path = Path("/etc/os-release")
    meminfo: Path = Path("/proc/meminfo")

    nginx_marker: Path = Path("/etc/init.d/nginx")
    appserver_marker: Path = Path("/etc/supervisor/conf.d/zulip.conf")
    rabbitmq_marker: Path = Path("/etc/cron.d/rabbitmq-numconsumers")
    postgres_marker: Path = Path("/etc/init.d/postgresql")

    service_home: Path = Path("/home/zulip")
    deployments_dir: Path = Path("/home/zulip/deployments")
    prod_static_dir: Path = Path("/home/zulip/prod-static")
    log_dir: Path = Path("/var/log/zulip")
    supervisor_socket: Path = Path("/var/run/supervisor.sock")

    @classmethod
    def rooted_at(cls, root: Path) -> "InstallPaths":
        """Returns the default layout re-based under `root`."""
        rebased = {
            name: Path(root) / field.default.relative_to("/")
            for name, field in cls.model_fields.items()
        }
        return cls(**rebased)


class InstallerSettings(BaseSettings):
    """Environment-driven installer settings."""

    model_config = SettingsConfigDict(extra="ignore")

    apt_options: str = Field(
        default="",
        description="Extra options passed to apt-get (whitespace separated).",
    )
    additional_packages: str = Field(
        default="",
        description="Extra packages to install (whitespace separated).",
    )
    deployment_type: str = Field(
        default=DEPLOYMENT_TYPE_DEFAULT,
        description="Deployment type written to [machine] deploy_type.",
    )
    puppet_classes: str = Field(
        default=PUPPET_CLASSES_DEFAULT,
        description="Comma-separated puppet classes to apply.",
    )
    virtualenv_needed: bool = Field(
        default=True,
        description="Whether to create the production virtualenv.",
    )
    zulip_path: Path = Field(
        default_factory=Path.cwd,
        description="Checkout or release tree being installed.",
    )
    service_user: str = Field(
        default=SERVICE_USER_DEFAULT,
        description="Unprivileged account that runs the server.",
    )
    log_level: str = Field(default="INFO", description="Installer log level.")
    log_prefix: str = Field(
        default=LOG_PREFIX_DEFAULT,
        description="Prefix for installer log messages.",
    )
    log_file: Optional[Path] = Field(
        default=None,
        description="File the installer log is also appended to.",
    )

    paths: InstallPaths = Field(default_factory=InstallPaths)

    symbols: Dict[str, str] = Field(
        default_factory=lambda: dict(SYMBOLS_DEFAULT)
    )

    @field_validator("zulip_path")
    @classmethod
    def resolve_zulip_path(cls, v: Path) -> Path:
        # The tree is moved into the deployments directory; "." cannot be.
        return Path(v).resolve()


class InstallOptions(BaseModel):
    """Validated command-line options."""

    model_config = ConfigDict(frozen=True)

    hostname: Optional[str] = None
    email: Optional[str] = None
    cert_mode: CertMode = CertMode.NONE
    cacert: Optional[Path] = None
    no_init_db: bool = False
    no_dist_upgrade: bool = False
    no_overwrite_settings: bool = False
    postgres_missing_dictionaries: bool = False
    remote_postgres: bool = False


class InstallConfig(BaseModel):
    """Immutable configuration for one installer run."""

    model_config = ConfigDict(frozen=True)

    options: InstallOptions
    settings: InstallerSettings

    @property
    def puppet_class_list(self) -> List[str]:
        return [
            cls.strip()
            for cls in self.settings.puppet_classes.split(",")
            if cls.strip()
        ]

    @property
    def apt_option_list(self) -> List[str]:
        return self.settings.apt_options.split()

    @property
    def additional_package_list(self) -> List[str]:
        return self.settings.additional_packages.split()

    @property
    def is_voyager(self) -> bool:
        """Single-node, web-facing deployment."""
        return static_config.VOYAGER_PUPPET_CLASS in self.puppet_class_list

    @property
    def wants_app_frontend(self) -> bool:
        return any(
            cls in static_config.APP_FRONTEND_PUPPET_CLASSES
            for cls in self.puppet_class_list
        )

    @property
    def stops_before_init_db(self) -> bool:
        return self.options.no_init_db or self.options.remote_postgres

    @property
    def zulip_path(self) -> Path:
        return self.settings.zulip_path

    @property
    def symbols(self) -> Dict[str, str]:
        return self.settings.symbols
