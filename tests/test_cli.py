"""Tests for the chatstack CLI."""
from unittest.mock import patch

from rich.console import Console
from typer.testing import CliRunner

from chatstack.cli import app
from chatstack.cli_support import get_runtime, print_urls
from chatstack.models.stack import StackConfig

runner = CliRunner()


class TestHelp:

    def test_main_help(self):
        """Main help shows the description and commands."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "Self-hosted Matrix chat stack" in result.stdout
        for command in ["setup", "render", "secrets", "urls", "version"]:
            assert command in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "chatstack v0.1.0" in result.stdout


class TestSetup:
    """Test the setup command with docker mocked out."""

    def test_dry_run(self, tmp_path):
        root = tmp_path / "synapse"
        with patch("chatstack.services.docker.subprocess.run") as mock_run:
            result = runner.invoke(app, [
                "setup",
                "--domain", "example.org",
                "--email", "a@example.org",
                "--root", str(root),
                "--dry-run",
                "--log-file", str(tmp_path / "chatstack.log"),
            ])

        assert result.exit_code == 0, result.stdout
        mock_run.assert_not_called()
        assert (root / ".env").exists()
        assert (root / "data/synapse/homeserver.yaml").exists()
        assert (root / "docker-compose.yml").exists()
        assert "https://app.example.org" in result.stdout
        assert "Start the stack with" in result.stdout

    def test_runs_docker(self, tmp_path):
        root = tmp_path / "synapse"
        homeserver = root / "data" / "synapse" / "homeserver.yaml"
        homeserver.parent.mkdir(parents=True)
        homeserver.write_text("server_name: example.org\n")
        registration = root / "mautrix-whatsapp" / "wa-registration.yaml"
        registration.parent.mkdir(parents=True)
        registration.write_text("id: whatsapp\n")

        with patch("chatstack.services.docker.subprocess.run") as mock_run:
            result = runner.invoke(app, [
                "setup",
                "--domain", "example.org",
                "--email", "a@example.org",
                "--root", str(root),
                "--log-file", str(tmp_path / "chatstack.log"),
            ])

        assert result.exit_code == 0, result.stdout
        commands = [call[0][0] for call in mock_run.call_args_list]
        assert commands[-2][-1] == "pull"
        assert commands[-1][-2:] == ["up", "-d"]
        assert "All services are (re)starting." in result.stdout

    def test_missing_domain(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["setup", "--log-file", str(tmp_path / "chatstack.log")])

        assert result.exit_code == 1
        assert "Missing required setting" in result.stdout

    def test_docker_failure_exits(self, tmp_path):
        import subprocess

        root = tmp_path / "synapse"
        error = subprocess.CalledProcessError(1, ["docker"])
        with patch("chatstack.services.docker.subprocess.run", side_effect=error):
            result = runner.invoke(app, [
                "setup",
                "--domain", "example.org",
                "--email", "a@example.org",
                "--root", str(root),
                "--log-file", str(tmp_path / "chatstack.log"),
            ])

        assert result.exit_code == 1
        assert "Error:" in result.stdout


class TestRender:

    def test_render(self, tmp_path, monkeypatch):
        root = tmp_path / "synapse"
        monkeypatch.setenv("CHATSTACK_DOMAIN", "example.org")
        monkeypatch.setenv("CHATSTACK_ADMIN_EMAIL", "a@example.org")

        result = runner.invoke(app, ["render", "--root", str(root)])

        assert result.exit_code == 0, result.stdout
        assert (root / "traefik" / "traefik.yml").exists()
        assert not (root / "data" / "synapse" / "homeserver.yaml").exists()


class TestSecrets:

    def test_masked_by_default(self, tmp_path, monkeypatch):
        root = tmp_path / "synapse"
        root.mkdir()
        (root / ".env").write_text("SERVER_NAME=example.org\nAUTH_SECRET=abcdef0123456789\n")

        result = runner.invoke(app, ["secrets", "--root", str(root)])

        assert result.exit_code == 0
        assert "example.org" in result.stdout
        assert "abcdef0123456789" not in result.stdout
        assert "abcd" + "*" * 12 in result.stdout

    def test_reveal(self, tmp_path):
        root = tmp_path / "synapse"
        root.mkdir()
        (root / ".env").write_text("AUTH_SECRET=abcdef0123456789\n")

        result = runner.invoke(app, ["secrets", "--root", str(root), "--reveal"])

        assert "abcdef0123456789" in result.stdout

    def test_no_secrets_file(self, tmp_path):
        result = runner.invoke(app, ["secrets", "--root", str(tmp_path)])

        assert result.exit_code == 1
        assert "No secrets file" in result.stdout


class TestUrls:

    def test_urls_for_domain(self):
        result = runner.invoke(app, ["urls", "--domain", "example.org"])

        assert result.exit_code == 0
        assert "https://synapse.example.org" in result.stdout
        assert "https://traefik.example.org" in result.stdout

    def test_urls_without_config(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["urls"])

        assert result.exit_code == 1


class TestCliSupport:

    def test_get_runtime_mock_from_env(self, monkeypatch):
        monkeypatch.setenv("CHATSTACK_MOCK", "1")
        config = StackConfig(domain="example.org", admin_email="a@example.org")

        assert get_runtime(config).mock is True
        assert get_runtime(config, mock=False).mock is False

    def test_print_urls(self):
        console = Console(record=True, width=120)

        print_urls(console, {"Element": "https://app.example.org"})

        assert "Element: https://app.example.org" in console.export_text()
