"""Tests for the container manager gateway."""

import subprocess
import pytest
from unittest.mock import AsyncMock, patch

from distrobox.errors import CommitFailedError, ExternalToolError, NotFoundError
from distrobox.launch.gateway import ContainerManager, detect_manager
from distrobox.models.plan import LaunchPlan
from distrobox.utils.systemd import CommandResult


class TestDetectManager:
    """Test manager autodetection."""

    def test_explicit_manager(self):
        assert detect_manager("docker") == "docker"

    def test_prefers_podman(self):
        with patch("distrobox.launch.gateway.shutil.which", side_effect=lambda name: f"/usr/bin/{name}"):
            assert detect_manager() == "podman"

    def test_falls_back_to_docker(self):
        with patch(
            "distrobox.launch.gateway.shutil.which",
            side_effect=lambda name: "/usr/bin/docker" if name == "docker" else None,
        ):
            assert detect_manager("autodetect") == "docker"

    def test_none_found(self):
        with patch("distrobox.launch.gateway.shutil.which", return_value=None):
            with pytest.raises(NotFoundError) as exc_info:
                detect_manager()

        assert exc_info.value.exit_code == 127


class TestCommandPrefix:
    """Rootful commands go through sudo unless we already are root."""

    def test_rootless(self):
        assert ContainerManager("podman").command("ps") == ["podman", "ps"]

    def test_rootful_user(self):
        manager = ContainerManager("podman", rootful=True, sudo_program="doas", uid=1000)
        assert manager.command("ps") == ["doas", "podman", "ps"]

    def test_rootful_root(self):
        manager = ContainerManager("docker", rootful=True, uid=0)
        assert manager.command("ps") == ["docker", "ps"]

    def test_unsupported(self):
        with pytest.raises(ValueError):
            ContainerManager("lxc")

    def test_render_quotes_arguments(self):
        plan = LaunchPlan(image="fedora:40", entrypoint_args=["--", "echo hello"])
        rendered = ContainerManager("podman").render(plan)

        assert rendered.startswith("podman create --entrypoint=/usr/bin/entrypoint fedora:40")
        assert rendered.endswith("-- 'echo hello'")


@pytest.mark.asyncio
class TestContainerManager:
    """Test manager commands."""

    async def test_inspect_running_container(self):
        manager = ContainerManager("podman")
        with patch("distrobox.launch.gateway.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout="running|abc123\n")

            result = await manager.inspect("container", "devbox")

            assert result.exists
            assert result.running
            assert result.id == "abc123"
            cmd = mock_run.call_args[0][0]
            assert cmd[:4] == ["podman", "inspect", "--type", "container"]
            assert cmd[-1] == "devbox"
            assert mock_run.call_args[1]["check"] is False

    async def test_inspect_missing(self):
        manager = ContainerManager("docker")
        with patch("distrobox.launch.gateway.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=125, stderr="no such object")

            result = await manager.inspect("image", "fedora:40")

            assert not result.exists
            assert not result.running

    async def test_inspect_image(self):
        manager = ContainerManager("podman")
        with patch("distrobox.launch.gateway.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0, stdout="|sha256:feed\n")

            result = await manager.inspect("image", "fedora:40")

            assert result.exists
            assert result.state == ""
            assert result.id == "sha256:feed"

    async def test_create_failure(self):
        manager = ContainerManager("podman")
        plan = LaunchPlan(image="fedora:40")
        error = subprocess.CalledProcessError(125, ["podman", "create"], stderr="name already in use")
        with patch("distrobox.launch.gateway.run_command", new_callable=AsyncMock, side_effect=error):
            with pytest.raises(ExternalToolError) as exc_info:
                await manager.create(plan)

        assert exc_info.value.exit_code == 125
        assert exc_info.value.stderr == "name already in use"

    async def test_pull_streams_output(self):
        manager = ContainerManager("podman")
        with patch("distrobox.launch.gateway.run_command", new_callable=AsyncMock) as mock_run:
            mock_run.return_value = CommandResult(returncode=0)

            await manager.pull("fedora:40")

            mock_run.assert_called_once_with(["podman", "pull", "fedora:40"], capture_output=False)

    async def test_commit_failure(self):
        manager = ContainerManager("podman")
        error = subprocess.CalledProcessError(1, ["podman", "container", "commit"], stderr="boom")
        with patch("distrobox.launch.gateway.run_command", new_callable=AsyncMock, side_effect=error):
            with pytest.raises(CommitFailedError):
                await manager.commit("abc123", "devbox:2026-10-19")
