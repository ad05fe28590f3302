# provision/config.py
"""
Static constants for the Zulip server installer.

Supported releases, the memory floor, package lists, the documentation
placeholder values and the paths of helper scripts inside the Zulip tree.
"""

from typing import Dict, FrozenSet, List, Tuple

SCRIPT_VERSION: str = "2.1.0"

# Values from the installation docs; a real install must replace them.
PLACEHOLDER_HOSTNAME: str = "zulip.example.com"
PLACEHOLDER_EMAIL: str = "zulip-admin@example.com"

REQUIREMENTS_DOC_URL: str = (
    "https://zulip.readthedocs.io/en/latest/production/requirements.html"
)
SSL_DOC_URL: str = (
    "https://zulip.readthedocs.io/en/latest/production/ssl-certificates.html"
)
RABBITMQ_HOSTS_ISSUE_URL: str = (
    "https://github.com/zulip/zulip/issues/53#issuecomment-143805121"
)

# (os id, version id) -> human readable name.
SUPPORTED_RELEASES: Dict[Tuple[str, str], str] = {
    ("debian", "10"): 'Debian 10 "buster"',
    ("debian", "11"): 'Debian 11 "bullseye"',
    ("ubuntu", "18.04"): 'Ubuntu 18.04 LTS "bionic"',
    ("ubuntu", "20.04"): 'Ubuntu 20.04 LTS "focal"',
    ("ubuntu", "22.04"): 'Ubuntu 22.04 LTS "jammy"',
    ("centos", "7"): "CentOS 7",
    ("rhel", "7"): "RHEL 7",
}

DEBIAN_FAMILY: FrozenSet[str] = frozenset({"debian", "ubuntu"})
RHEL_FAMILY: FrozenSet[str] = frozenset({"centos", "rhel"})

# Cloud providers sometimes report a little less than the advertised 2GB.
MIN_MEMORY_KB: int = 1_860_000

BASE_PACKAGES: List[str] = [
    "puppet",
    "git",
    "curl",
    "wget",
    "jq",
    "python3",
    "crudini",
]

RABBITMQ_PACKAGE: str = "rabbitmq-server"
RABBITMQ_NODENAME: str = "zulip@localhost"

VOYAGER_PUPPET_CLASS: str = "zulip::voyager"
APP_FRONTEND_PUPPET_CLASSES: FrozenSet[str] = frozenset(
    {"zulip::voyager", "zulip::dockervoyager", "zulip::app_frontend"}
)
DOCKER_DEPLOYMENT_TYPE: str = "dockervoyager"

DEPLOY_PATH_FORMAT: str = "%Y-%m-%d-%H-%M-%S"

# Helper scripts, relative to the Zulip tree.
SETUP_CERTBOT: str = "scripts/setup/setup-certbot"
GENERATE_SELF_SIGNED_CERT: str = "scripts/setup/generate-self-signed-cert"
CREATE_PRODUCTION_VENV: str = "scripts/lib/create-production-venv"
GENERATE_SECRETS: str = "scripts/setup/generate_secrets.py"
PUPPET_APPLY: str = "scripts/zulip-puppet-apply"
CONFIGURE_RABBITMQ: str = "scripts/setup/configure-rabbitmq"
POSTGRES_INIT_DB: str = "scripts/setup/postgres-init-db"
INITIALIZE_DATABASE: str = "scripts/setup/initialize-database"
MANAGE_PY: str = "manage.py"
UPDATE_PROD_STATIC: str = "tools/update-prod-static"
SETTINGS_TEMPLATE: str = "zproject/prod_settings_template.py"
SETTINGS_LINK: str = "zproject/prod_settings.py"
PROD_STATIC_SERVE: str = "prod-static/serve"
GENERATED_STATIC_MARKER: str = "generated"
