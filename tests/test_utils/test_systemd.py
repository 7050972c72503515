"""Tests for the systemd user manager integration."""

import subprocess

import pytest
from unittest.mock import AsyncMock, patch

from distrobox.utils.systemd import SystemdDBus, reload_user_manager, run_command


@pytest.mark.asyncio
class TestSystemdDBus:
    """Test DBus reload with CLI fallback."""

    async def test_reload_over_dbus(self):
        systemd_dbus = SystemdDBus()
        systemd_dbus.systemd = AsyncMock()

        with patch("distrobox.utils.systemd.run_command", new_callable=AsyncMock) as mock_run:
            await systemd_dbus.reload_daemon()

        systemd_dbus.systemd.call_reload.assert_awaited_once()
        mock_run.assert_not_called()

    async def test_fallback_when_dbus_fails(self):
        systemd_dbus = SystemdDBus()
        systemd_dbus.systemd = AsyncMock()
        systemd_dbus.systemd.call_reload.side_effect = RuntimeError("access denied")

        with patch("distrobox.utils.systemd.run_command", new_callable=AsyncMock) as mock_run:
            await systemd_dbus.reload_daemon()

        mock_run.assert_called_once_with(["systemctl", "--user", "daemon-reload"])

    async def test_no_session_bus(self):
        with patch("distrobox.utils.systemd.MessageBus") as mock_bus:
            mock_bus.return_value.connect = AsyncMock(side_effect=OSError("no bus"))
            with patch("distrobox.utils.systemd.run_command", new_callable=AsyncMock) as mock_run:
                await reload_user_manager()

        mock_run.assert_called_once_with(["systemctl", "--user", "daemon-reload"])


@pytest.mark.asyncio
class TestRunCommand:
    """Test the subprocess helper shared by the gateway and the relay."""

    async def test_captures_output(self):
        result = await run_command(["sh", "-c", "echo created"])

        assert result.returncode == 0
        assert result.stdout == "created\n"

    async def test_failure_raises_with_stderr(self):
        with pytest.raises(subprocess.CalledProcessError) as exc_info:
            await run_command(["sh", "-c", "echo 'no such image' >&2; exit 125"])

        assert exc_info.value.returncode == 125
        assert exc_info.value.stderr == "no such image\n"

    async def test_unchecked_failure_returns_status(self):
        result = await run_command(["sh", "-c", "exit 3"], check=False)
        assert result.returncode == 3
