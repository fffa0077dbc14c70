"""Secret/config (``.env``) file rendering."""

from __future__ import annotations

from n8n_provisioner.config import DatabaseSettings
from n8n_provisioner.domain.models.deployment import DeploymentConfig


def _render(header: list[str], database: list[tuple[str, str]], config: DeploymentConfig) -> str:
    lines = [*header, "", "# === PostgreSQL Settings ==="]
    lines.extend(f"{key}={value}" for key, value in database)
    lines.extend([
        "",
        "# === n8n Settings ===",
        f"N8N_HOST={config.domain}",
        f"WEBHOOK_URL={config.webhook_url}",
    ])
    return "\n".join(lines) + "\n"


def render_dev_env(config: DeploymentConfig, db: DatabaseSettings, password: str) -> str:
    return _render(
        ["# Development Environment for n8n"],
        [
            ("DB_USER", db.dev_user),
            ("DB_PASSWORD", password),
            ("DB_DATABASE", db.dev_database),
        ],
        config,
    )


def render_live_env(config: DeploymentConfig, db: DatabaseSettings) -> str:
    placeholders = db.placeholders
    return _render(
        [
            "# Production Environment for n8n",
            "# !!! IMPORTANT: Please fill in your production database credentials below !!!",
        ],
        [
            ("DB_HOST", placeholders["DB_HOST"]),
            ("DB_PORT", str(db.port)),
            ("DB_USER", placeholders["DB_USER"]),
            ("DB_PASSWORD", placeholders["DB_PASSWORD"]),
            ("DB_DATABASE", placeholders["DB_DATABASE"]),
        ],
        config,
    )


def defined_variables(env_text: str) -> set[str]:
    keys: set[str] = set()
    for raw in env_text.splitlines():
        stripped = raw.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key = stripped.split("=", 1)[0].strip()
        if key:
            keys.add(key)
    return keys
