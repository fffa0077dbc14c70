"""Unit tests for the command-line entrypoint."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from n8n_provisioner.config import get_settings, LogFormat, ProvisionerSettings
from n8n_provisioner.main import apply_overrides, build_parser, main

from fakes import FakeCommandRunner


@pytest.fixture(autouse=True)
def cli_environment(
    monkeypatch: pytest.MonkeyPatch, os_release: Path, tmp_path: Path
) -> Iterator[None]:
    monkeypatch.setenv("PROVISION_OS_RELEASE", str(os_release))
    monkeypatch.setenv("PROXY_SITES_AVAILABLE", str(tmp_path / "sites-available"))
    monkeypatch.setenv("PROXY_SITES_ENABLED", str(tmp_path / "sites-enabled"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestParser:
    def test_equals_syntax(self) -> None:
        args = build_parser().parse_args(
            ["--domain=dev.example.com", "--email=a@b.com", "--mode=live"]
        )
        assert args.domain == "dev.example.com"
        assert args.email == "a@b.com"
        assert args.mode == "live"

    def test_mode_defaults_to_dev(self) -> None:
        assert build_parser().parse_args([]).mode == "dev"

    def test_help_exits_zero(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--help"])
        assert exc_info.value.code == 0
        assert "--domain" in capsys.readouterr().out

    def test_short_help(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["-h"])
        assert exc_info.value.code == 0

    def test_unknown_flag_exits_one_with_usage(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--domain=dev.example.com", "--bogus=1"])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "usage:" in err
        assert "--bogus=1" in err


class TestOverrides:
    def test_flags_override_settings(self, tmp_path: Path) -> None:
        args = build_parser().parse_args(
            ["--work-dir", str(tmp_path), "--no-sudo", "--log-level=DEBUG", "--log-format=json"]
        )
        settings = apply_overrides(ProvisionerSettings(), args)
        assert settings.work_dir == tmp_path.resolve()
        assert settings.use_sudo is False
        assert settings.observability.log_level == "DEBUG"
        assert settings.observability.log_format == LogFormat.JSON

    def test_no_flags_keeps_settings(self) -> None:
        base = ProvisionerSettings()
        assert apply_overrides(base, build_parser().parse_args([])) is base


class TestMain:
    def test_dev_success(self, tmp_path: Path, runner: FakeCommandRunner) -> None:
        work_dir = tmp_path / "deploy"
        work_dir.mkdir()
        code = main(
            [
                "--domain=dev.example.com",
                "--email=a@b.com",
                f"--work-dir={work_dir}",
                "--log-format=json",
            ],
            runner=runner,
        )
        assert code == 0
        assert (work_dir / "docker-compose.yml").exists()
        assert runner.ran("certbot")

    def test_invalid_email_exits_one(self, tmp_path: Path, runner: FakeCommandRunner) -> None:
        code = main(
            ["--domain=dev.example.com", "--email=nope", f"--work-dir={tmp_path}"],
            runner=runner,
        )
        assert code == 1
        assert runner.calls == []

    def test_invalid_mode_exits_one(self, tmp_path: Path, runner: FakeCommandRunner) -> None:
        code = main(
            ["--domain=dev.example.com", "--email=a@b.com", "--mode=prod", f"--work-dir={tmp_path}"],
            runner=runner,
        )
        assert code == 1

    def test_live_halt_exits_zero(self, tmp_path: Path, runner: FakeCommandRunner) -> None:
        code = main(
            ["--domain=n8n.example.com", "--email=a@b.com", "--mode=live", f"--work-dir={tmp_path}"],
            runner=runner,
        )
        assert code == 0
        assert not runner.ran("docker", "compose")

    def test_dns_mismatch_exits_one(self, tmp_path: Path, runner: FakeCommandRunner) -> None:
        runner.on("dig", stdout="198.51.100.1\n")
        code = main(
            ["--domain=dev.example.com", "--email=a@b.com", f"--work-dir={tmp_path}", "--no-sudo"],
            runner=runner,
        )
        assert code == 1
        assert all(call.cmd[0] != "sudo" for call in runner.calls)

    def test_unwritable_work_dir_exits_one(
        self, tmp_path: Path, runner: FakeCommandRunner
    ) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        code = main(
            ["--domain=dev.example.com", "--email=a@b.com", f"--work-dir={blocker / 'deploy'}"],
            runner=runner,
        )
        assert code == 1
        assert not runner.ran("docker", "compose")

    def test_domain_and_email_from_environment(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, runner: FakeCommandRunner
    ) -> None:
        monkeypatch.setenv("PROVISION_DOMAIN", "env.example.com")
        monkeypatch.setenv("PROVISION_EMAIL", "ops@example.com")
        get_settings.cache_clear()
        code = main([f"--work-dir={tmp_path}"], runner=runner)
        assert code == 0
        assert runner.ran("dig", "+short", "env.example.com", "A")
