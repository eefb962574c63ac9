"""Tests für die Typer-CLI (studiolink.py)."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from cli.types import PermissionState
from studiolink import app

from conftest import FAKE_PNG, FakeCaptureProvider, FakeSpeechProvider

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_side_effects():
    """Kein .env-Laden und kein Datei-Logging aus der CLI-Callback."""
    with patch("studiolink.load_environment"), patch("studiolink.setup_logging"):
        yield


class TestPluginCommands:
    def test_install_and_uninstall(self, plugin_env):
        _, plugins_dir = plugin_env

        result = runner.invoke(app, ["install-plugin"])
        assert result.exit_code == 0
        assert (plugins_dir / "DetAI.rbxm").is_file()

        result = runner.invoke(app, ["uninstall-plugin"])
        assert result.exit_code == 0
        assert not (plugins_dir / "DetAI.rbxm").exists()

    def test_install_bakable(self, plugin_env):
        _, plugins_dir = plugin_env
        result = runner.invoke(app, ["install-plugin", "--app", "bakable"])

        assert result.exit_code == 0
        assert (plugins_dir / "Bakable.rbxm").is_file()

    def test_app_from_env(self, plugin_env, monkeypatch):
        _, plugins_dir = plugin_env
        monkeypatch.setenv("STUDIOLINK_APP", "bakable")

        runner.invoke(app, ["install-plugin"])

        assert (plugins_dir / "Bakable.rbxm").is_file()

    def test_invalid_app(self, plugin_env):
        result = runner.invoke(app, ["install-plugin", "--app", "nope"])
        assert result.exit_code != 0

    def test_plugin_status(self, plugin_env):
        _, plugins_dir = plugin_env

        result = runner.invoke(app, ["plugin-status"])
        assert result.exit_code == 0
        assert "nicht installiert" in result.stdout

        runner.invoke(app, ["install-plugin"])
        result = runner.invoke(app, ["plugin-status"])
        assert result.stdout.startswith("installiert")
        assert str(plugins_dir / "DetAI.rbxm") in result.stdout

    def test_install_error_exit_code(self, plugin_env):
        with patch("plugin.installer.RESOURCES_DIR", plugin_env[1] / "missing"):
            result = runner.invoke(app, ["install-plugin"])
        assert result.exit_code == 1


class TestPermissionsCommand:
    def test_lists_states(self, make_gate):
        gate, _ = make_gate(screen=PermissionState.granted, speech=PermissionState.denied)
        with patch("studio_platform.get_permission_gate", return_value=gate):
            result = runner.invoke(app, ["permissions"])

        assert result.exit_code == 0
        assert "screen_capture: granted" in result.stdout
        assert "speech: denied" in result.stdout

    def test_request_missing_only(self, make_gate):
        gate, backends = make_gate(screen=PermissionState.granted, speech=PermissionState.unknown)
        with patch("studio_platform.get_permission_gate", return_value=gate):
            runner.invoke(app, ["permissions", "--request"])

        assert [b.request_count for b in backends.values()] == [0, 1]


class TestCaptureCommand:
    def test_writes_png(self, make_gate, studio_window, tmp_path):
        gate, _ = make_gate()
        output = tmp_path / "shot.png"
        with patch("studio_platform.get_permission_gate", return_value=gate), patch(
            "providers.get_capture_provider", return_value=FakeCaptureProvider(studio_window)
        ):
            result = runner.invoke(app, ["capture", str(output)])

        assert result.exit_code == 0
        assert output.read_bytes() == FAKE_PNG

    def test_permission_denied(self, make_gate, studio_window, tmp_path):
        gate, _ = make_gate(screen=PermissionState.denied)
        with patch("studio_platform.get_permission_gate", return_value=gate), patch(
            "providers.get_capture_provider", return_value=FakeCaptureProvider(studio_window)
        ):
            result = runner.invoke(app, ["capture", str(tmp_path / "shot.png")])

        assert result.exit_code == 1
        assert not (tmp_path / "shot.png").exists()


class TestSayCommand:
    def test_say(self, make_gate):
        gate, _ = make_gate()
        provider = FakeSpeechProvider()
        provider.is_speaking = lambda: False
        with patch("studio_platform.get_permission_gate", return_value=gate), patch(
            "providers.get_speech_provider", return_value=provider
        ), patch("studiolink.time.sleep"):
            result = runner.invoke(app, ["say", "Hello"])

        assert result.exit_code == 0
        assert provider.spoken == ["Hello"]

    def test_say_empty(self, make_gate):
        gate, _ = make_gate()
        with patch("studio_platform.get_permission_gate", return_value=gate), patch(
            "providers.get_speech_provider", return_value=FakeSpeechProvider()
        ):
            result = runner.invoke(app, ["say", ""])

        assert result.exit_code == 1


class TestServeCommand:
    def test_delegates_to_daemon(self):
        with patch("studiolink_daemon.main", return_value=0) as mock_main:
            result = runner.invoke(app, ["serve", "--app", "bakable", "--port", "4851", "--snap"])

        assert result.exit_code == 0
        mock_main.assert_called_once_with(["--app", "bakable", "--port", "4851", "--snap"])

    def test_forwards_global_debug(self):
        with patch("studiolink_daemon.main", return_value=0) as mock_main:
            result = runner.invoke(app, ["--debug", "serve", "--headless"])

        assert result.exit_code == 0
        mock_main.assert_called_once_with(["--headless", "--debug"])
