"""Command-line entrypoint."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import NoReturn

import structlog

from n8n_provisioner.config import get_settings, LogFormat, ProvisionerSettings
from n8n_provisioner.domain.models.deployment import DeploymentMode, RunOutcome
from n8n_provisioner.domain.ports.services import CommandRunner
from n8n_provisioner.domain.services.deployment_service import DeploymentOrchestrator
from n8n_provisioner.infrastructure.observability.logging import setup_logging
from n8n_provisioner.infrastructure.shell.runner import SubprocessCommandRunner


EXIT_FAILURE = 1

EPILOG = """\
examples:
  n8n-provision --domain="dev.n8n.example.com" --email="user@example.com" --mode=dev
  n8n-provision --domain="n8n.example.com" --email="user@example.com" --mode=live
"""


class _ArgumentParser(argparse.ArgumentParser):
    """Argument errors exit with status 1 and the usage text."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FAILURE, f"{self.prog}: error: {message}. Use --help for usage.\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="n8n-provision",
        description="Provision a single-node n8n deployment with Docker, Nginx and Let's Encrypt.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("--domain", help="Domain name for n8n (e.g. n8n.example.com)")
    parser.add_argument("--email", help="Email address for Let's Encrypt registration")
    parser.add_argument(
        "--mode",
        default=DeploymentMode.DEV.value,
        help="Environment mode: 'dev' (bundled PostgreSQL, default) or 'live' (external database)",
    )
    parser.add_argument(
        "--work-dir",
        type=Path,
        help="Directory holding docker-compose.yml and .env (default: current directory)",
    )
    parser.add_argument("--log-level", help="Log level (default: INFO)")
    parser.add_argument(
        "--log-format",
        choices=[f.value for f in LogFormat],
        help="Log output format (default: console)",
    )
    parser.add_argument(
        "--no-sudo",
        action="store_true",
        help="Run host commands directly instead of through sudo (e.g. when already root)",
    )
    return parser


def apply_overrides(settings: ProvisionerSettings, args: argparse.Namespace) -> ProvisionerSettings:
    """Return settings with command-line flags layered on top."""
    update: dict[str, object] = {}
    if args.work_dir is not None:
        update["work_dir"] = args.work_dir.resolve()
    if args.no_sudo:
        update["use_sudo"] = False
    observability: dict[str, object] = {}
    if args.log_level:
        observability["log_level"] = args.log_level
    if args.log_format:
        observability["log_format"] = LogFormat(args.log_format)
    if observability:
        update["observability"] = settings.observability.model_copy(update=observability)
    return settings.model_copy(update=update) if update else settings


def main(argv: list[str] | None = None, runner: CommandRunner | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_overrides(get_settings(), args)
    setup_logging(settings.observability.log_level, settings.observability.log_format)
    logger = structlog.get_logger("n8n_provisioner")

    orchestrator = DeploymentOrchestrator(
        settings,
        runner or SubprocessCommandRunner(),
        logger,
    )
    report = orchestrator.provision(
        args.domain or settings.default_domain,
        args.email or settings.default_email,
        args.mode,
    )

    if report.outcome == RunOutcome.FAILED:
        failed = report.failed_result
        logger.error(
            "provisioning_aborted",
            phase=failed.phase.value if failed else None,
            error_kind=failed.error_kind if failed else None,
            reason=report.message,
        )
    elif report.outcome == RunOutcome.HALTED:
        logger.warning("provisioning_halted", reason=report.message)
    else:
        logger.info("provisioning_completed", reason=report.message)
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
