"""Unit tests for compose descriptor rendering."""

from __future__ import annotations

import yaml

from n8n_provisioner.config import AppSettings, DatabaseSettings
from n8n_provisioner.domain.models.deployment import DeploymentMode
from n8n_provisioner.infrastructure.templates.compose import (
    build_compose,
    referenced_variables,
    render_compose,
)


class TestRenderCompose:
    def test_dev_round_trips_through_yaml(self) -> None:
        text = render_compose(AppSettings(), DatabaseSettings(), DeploymentMode.DEV)
        assert yaml.safe_load(text) == build_compose(
            AppSettings(), DatabaseSettings(), DeploymentMode.DEV
        )

    def test_app_never_binds_all_interfaces(self) -> None:
        for mode in DeploymentMode:
            data = build_compose(AppSettings(), DatabaseSettings(), mode)
            assert data["services"]["n8n"]["ports"] == ["127.0.0.1:5678:5678"]

    def test_custom_port_and_images(self) -> None:
        data = build_compose(
            AppSettings(image="n8nio/n8n:1.50.0", port=15678),
            DatabaseSettings(image="postgres:16", healthcheck_retries=3),
            DeploymentMode.DEV,
        )
        assert data["services"]["n8n"]["image"] == "n8nio/n8n:1.50.0"
        assert data["services"]["n8n"]["ports"] == ["127.0.0.1:15678:5678"]
        assert data["services"]["postgres"]["image"] == "postgres:16"
        assert data["services"]["postgres"]["healthcheck"]["retries"] == 3

    def test_live_references_external_database(self) -> None:
        text = render_compose(AppSettings(), DatabaseSettings(), DeploymentMode.LIVE)
        assert referenced_variables(text) == {
            "N8N_HOST", "WEBHOOK_URL", "DB_HOST", "DB_PORT", "DB_USER", "DB_PASSWORD", "DB_DATABASE",
        }

    def test_dev_references(self) -> None:
        text = render_compose(AppSettings(), DatabaseSettings(), DeploymentMode.DEV)
        assert referenced_variables(text) == {
            "N8N_HOST", "WEBHOOK_URL", "DB_USER", "DB_PASSWORD", "DB_DATABASE",
        }


def test_referenced_variables_handles_defaults() -> None:
    assert referenced_variables("a: ${FOO:-bar} ${BAZ} $$notvar") == {"FOO", "BAZ"}
