"""Docker Compose descriptor rendering."""

from __future__ import annotations

import re
from typing import Any

import yaml

from n8n_provisioner.config import AppSettings, DatabaseSettings
from n8n_provisioner.domain.models.deployment import DeploymentMode


APP_SERVICE = "n8n"

_VARIABLE_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?:[:?-][^}]*)?\}")


def _ref(name: str) -> str:
    return "${" + name + "}"


def _app_service(app: AppSettings, db: DatabaseSettings, mode: DeploymentMode) -> dict[str, Any]:
    if mode == DeploymentMode.DEV:
        db_host, db_port = db.service_name, str(db.port)
    else:
        db_host, db_port = _ref("DB_HOST"), _ref("DB_PORT")

    service: dict[str, Any] = {
        "image": app.image,
        "restart": "always",
        "ports": [f"{app.bind_address}:{app.port}:5678"],
        "environment": [
            f"N8N_HOST={_ref('N8N_HOST')}",
            f"WEBHOOK_URL={_ref('WEBHOOK_URL')}",
            "DB_TYPE=postgresdb",
            f"DB_POSTGRESDB_HOST={db_host}",
            f"DB_POSTGRESDB_PORT={db_port}",
            f"DB_POSTGRESDB_USER={_ref('DB_USER')}",
            f"DB_POSTGRESDB_PASSWORD={_ref('DB_PASSWORD')}",
            f"DB_POSTGRESDB_DATABASE={_ref('DB_DATABASE')}",
        ],
        "volumes": [f"{app.data_volume}:{app.data_path}"],
    }
    if mode == DeploymentMode.DEV:
        service["depends_on"] = {db.service_name: {"condition": "service_healthy"}}
    return service


def _database_service(db: DatabaseSettings) -> dict[str, Any]:
    return {
        "image": db.image,
        "restart": "always",
        "environment": [
            f"POSTGRES_USER={_ref('DB_USER')}",
            f"POSTGRES_PASSWORD={_ref('DB_PASSWORD')}",
            f"POSTGRES_DB={_ref('DB_DATABASE')}",
        ],
        "volumes": [f"{db.volume}:/var/lib/postgresql/data"],
        "healthcheck": {
            "test": [
                "CMD-SHELL",
                f"pg_isready -U {_ref('DB_USER')} -d {_ref('DB_DATABASE')}",
            ],
            "interval": f"{db.healthcheck_interval_seconds}s",
            "timeout": f"{db.healthcheck_timeout_seconds}s",
            "retries": db.healthcheck_retries,
        },
    }


def build_compose(app: AppSettings, db: DatabaseSettings, mode: DeploymentMode) -> dict[str, Any]:
    """Build the service topology for the given mode as plain data."""
    services: dict[str, Any] = {}
    volumes: dict[str, Any] = {}
    if mode == DeploymentMode.DEV:
        services[db.service_name] = _database_service(db)
    services[APP_SERVICE] = _app_service(app, db, mode)

    volumes[app.data_volume] = {}
    if mode == DeploymentMode.DEV:
        volumes[db.volume] = {}

    return {"services": services, "volumes": volumes}


def render_compose(app: AppSettings, db: DatabaseSettings, mode: DeploymentMode) -> str:
    return yaml.safe_dump(build_compose(app, db, mode), sort_keys=False, default_flow_style=False)


def referenced_variables(descriptor: str) -> set[str]:
    """Names of every ``${VAR}`` interpolation in a descriptor."""
    return set(_VARIABLE_PATTERN.findall(descriptor))
