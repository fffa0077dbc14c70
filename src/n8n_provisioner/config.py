"""Provisioner configuration using pydantic-settings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class LogFormat(str, Enum):
    CONSOLE = "console"
    JSON = "json"


class AppSettings(BaseSettings):
    """n8n application service configuration."""

    image: str = Field(default="n8nio/n8n", alias="APP_IMAGE")
    port: int = Field(default=5678, alias="APP_PORT")
    bind_address: str = Field(default="127.0.0.1", alias="APP_BIND_ADDRESS")
    data_volume: str = Field(default="n8n_data", alias="APP_DATA_VOLUME")
    data_path: str = Field(default="/home/node/.n8n", alias="APP_DATA_PATH")

    @property
    def local_url(self) -> str:
        return f"http://{self.bind_address}:{self.port}"

    model_config = {"env_prefix": "APP_", "extra": "ignore", "populate_by_name": True}


class DatabaseSettings(BaseSettings):
    """Database configuration for the bundled (dev) and external (live) topologies."""

    image: str = Field(default="postgres:13", alias="DB_IMAGE")
    port: int = Field(default=5432, alias="DB_CONTAINER_PORT")
    service_name: str = Field(default="postgres", alias="DB_SERVICE_NAME")
    volume: str = Field(default="postgres_data", alias="DB_VOLUME")
    dev_user: str = Field(default="n8n_dev_user", alias="DB_DEV_USER")
    dev_database: str = Field(default="n8n_dev_db", alias="DB_DEV_DATABASE")
    password_bytes: int = Field(default=16, ge=16, alias="DB_PASSWORD_BYTES")
    healthcheck_interval_seconds: int = Field(default=5, alias="DB_HEALTHCHECK_INTERVAL")
    healthcheck_timeout_seconds: int = Field(default=5, alias="DB_HEALTHCHECK_TIMEOUT")
    healthcheck_retries: int = Field(default=10, alias="DB_HEALTHCHECK_RETRIES")

    placeholder_host: str = Field(default="your_database_host_or_ip", alias="DB_PLACEHOLDER_HOST")
    placeholder_user: str = Field(default="your_production_user", alias="DB_PLACEHOLDER_USER")
    placeholder_password: str = Field(
        default="your_production_password", alias="DB_PLACEHOLDER_PASSWORD"
    )
    placeholder_database: str = Field(
        default="your_production_database", alias="DB_PLACEHOLDER_DATABASE"
    )

    @property
    def placeholders(self) -> dict[str, str]:
        return {
            "DB_HOST": self.placeholder_host,
            "DB_USER": self.placeholder_user,
            "DB_PASSWORD": self.placeholder_password,
            "DB_DATABASE": self.placeholder_database,
        }

    model_config = {"env_prefix": "DB_", "extra": "ignore", "populate_by_name": True}


class ProxySettings(BaseSettings):
    """Nginx site layout."""

    sites_available: Path = Field(
        default=Path("/etc/nginx/sites-available"), alias="PROXY_SITES_AVAILABLE"
    )
    sites_enabled: Path = Field(
        default=Path("/etc/nginx/sites-enabled"), alias="PROXY_SITES_ENABLED"
    )
    default_site: str = Field(default="default", alias="PROXY_DEFAULT_SITE")
    acme_webroot: str = Field(default="/var/www/html", alias="PROXY_ACME_WEBROOT")

    model_config = {"env_prefix": "PROXY_", "extra": "ignore", "populate_by_name": True}


class DnsSettings(BaseSettings):
    """DNS verification configuration."""

    ip_lookup_url: str = Field(default="https://ifconfig.me", alias="DNS_IP_LOOKUP_URL")

    model_config = {"env_prefix": "DNS_", "extra": "ignore", "populate_by_name": True}


class ObservabilitySettings(BaseSettings):
    """Logging configuration."""

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: LogFormat = Field(default=LogFormat.CONSOLE, alias="LOG_FORMAT")

    model_config = {"env_prefix": "OBS_", "extra": "ignore", "populate_by_name": True}


class ProvisionerSettings(BaseSettings):
    """Main provisioner settings."""

    work_dir: Path = Field(default_factory=Path.cwd, alias="PROVISION_WORK_DIR")
    compose_filename: str = Field(default="docker-compose.yml", alias="PROVISION_COMPOSE_FILE")
    env_filename: str = Field(default=".env", alias="PROVISION_ENV_FILE")
    use_sudo: bool = Field(default=True, alias="PROVISION_USE_SUDO")
    os_release_path: Path = Field(default=Path("/etc/os-release"), alias="PROVISION_OS_RELEASE")
    default_domain: str | None = Field(default=None, alias="PROVISION_DOMAIN")
    default_email: str | None = Field(default=None, alias="PROVISION_EMAIL")

    app: AppSettings = Field(default_factory=AppSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    dns: DnsSettings = Field(default_factory=DnsSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @property
    def compose_path(self) -> Path:
        return self.work_dir / self.compose_filename

    @property
    def env_path(self) -> Path:
        return self.work_dir / self.env_filename

    model_config = {"env_prefix": "", "extra": "ignore", "populate_by_name": True}


@lru_cache
def get_settings() -> ProvisionerSettings:
    """Get cached provisioner settings."""
    return ProvisionerSettings()
