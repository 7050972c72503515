"""Subprocess helper and systemd user-manager DBus integration."""

import asyncio
import logging
import shlex
import subprocess
from typing import Optional, List, Any
from dataclasses import dataclass

from dbus_next.aio import MessageBus
from dbus_next import BusType


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Exit status and decoded output of a manager or host command."""
    returncode: int
    stdout: str = ""
    stderr: str = ""


async def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[int] = None,
    **kwargs
) -> CommandResult:
    """Run ``cmd`` without a shell and wait for it.

    With ``capture_output`` false the child inherits the terminal, as pulls
    and host-exec need. A non-zero exit raises ``CalledProcessError`` when
    ``check`` is set.
    """
    logger.debug(f"Running: {shlex.join(cmd)}")

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE if capture_output else None,
        stderr=asyncio.subprocess.PIPE if capture_output else None,
        **kwargs
    )

    try:
        stdout, stderr = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise subprocess.TimeoutExpired(cmd, timeout)

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode() if stdout else "",
        stderr=stderr.decode() if stderr else "",
    )

    if check and process.returncode != 0:
        error = subprocess.CalledProcessError(
            process.returncode, cmd
        )
        error.stdout = result.stdout
        error.stderr = result.stderr
        raise error

    return result


class SystemdDBus:
    """DBus interface to the systemd user manager on the session bus."""

    def __init__(self):
        """Initialize DBus connection."""
        self.bus: Optional[MessageBus] = None
        self.systemd = None

    async def connect(self):
        """Connect to the session bus.

        A missing bus is not fatal: callers fall back to ``systemctl --user``.
        """
        try:
            self.bus = await MessageBus(bus_type=BusType.SESSION).connect()

            introspection = await self.bus.introspect(
                "org.freedesktop.systemd1",
                "/org/freedesktop/systemd1"
            )
            self.systemd = self.bus.get_proxy_object(
                "org.freedesktop.systemd1",
                "/org/freedesktop/systemd1",
                introspection
            ).get_interface("org.freedesktop.systemd1.Manager")

            logger.debug("Connected to systemd user manager over DBus")

        except Exception as e:
            logger.warning(f"Failed to connect to session DBus: {e}")
            self.systemd = None

    async def disconnect(self):
        """Disconnect from DBus."""
        if self.bus:
            self.bus.disconnect()

    async def _execute_fallback(
        self,
        dbus_method_name: str,
        dbus_args: List[Any],
        cli_cmd: List[str],
        success_msg: str,
        error_action: str
    ):
        """Execute a DBus method with CLI fallback."""
        if self.systemd:
            try:
                method = getattr(self.systemd, dbus_method_name)
                await method(*dbus_args)
                logger.debug(success_msg)
                return
            except Exception as e:
                logger.error(f"Failed to {error_action} via DBus: {e}")

        # Fall back to command (executed if systemd is None or if DBus failed)
        await run_command(cli_cmd)

    async def reload_daemon(self):
        """Reload the user manager so freshly written units are visible."""
        await self._execute_fallback(
            "call_reload",
            [],
            ["systemctl", "--user", "daemon-reload"],
            "Reloaded systemd user manager",
            "reload systemd user manager"
        )


async def reload_user_manager() -> None:
    """Connect, reload the user manager and disconnect."""
    systemd_dbus = SystemdDBus()
    await systemd_dbus.connect()
    try:
        await systemd_dbus.reload_daemon()
    finally:
        await systemd_dbus.disconnect()
