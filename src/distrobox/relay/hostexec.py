"""Host execution relay.

Runs a command on the host from inside a container, either through the
``host-spawn`` client (which talks to the host's flatpak-spawn portal) or by
chrooting into the host filesystem mounted at ``/run/host``.
"""

import logging
import shlex
import shutil
from typing import List, Mapping, Optional, Sequence

from distrobox.errors import NotFoundError, WrongContextError
from distrobox.utils.systemd import run_command


logger = logging.getLogger(__name__)

HOST_SPAWN = "host-spawn"
HOST_ROOT = "/run/host/"
_UNSAFE_CHARS = set(" \t\n\r\v\f'\"`$\\")


def filter_environment(env: Mapping[str, str]) -> dict:
    """Environment variables safe to forward to the host.

    Private (underscore-prefixed) names, names that are not identifiers and
    values that would need quoting are dropped.
    """
    forwarded = {}
    for key, value in env.items():
        if key.startswith("_") or not key.isidentifier():
            continue
        if any(char in _UNSAFE_CHARS for char in value):
            continue
        forwarded[key] = value
    return forwarded


def build_host_command(
    command: Sequence[str],
    cwd: str,
    env: Mapping[str, str],
    uid: int,
    gid: int,
    host_spawn_path: Optional[str] = None,
    tty: bool = True,
    sudo_program: str = "sudo",
) -> List[str]:
    """Argument vector that runs ``command`` on the host in ``cwd`` with ``env``."""
    if host_spawn_path:
        args = [host_spawn_path, "-cwd", cwd]
        if env:
            args.extend(["-env", ",".join(sorted(env))])
        if not tty:
            args.append("-no-pty")
        args.extend(command)
        return args

    assignments = [f"{key}={value}" for key, value in sorted(env.items())]
    script = f"cd {shlex.quote(cwd)} && exec {shlex.join(command)}"
    return [
        sudo_program, "-E", "chroot", f"--userspec={uid}:{gid}", HOST_ROOT,
        "/usr/bin/env", *assignments,
        "sh", "-c", script,
    ]


class HostExecRelay:
    """Relays commands from a container to its host."""

    def __init__(self, in_container: bool, sudo_program: str = "sudo"):
        self.in_container = in_container
        self.sudo_program = sudo_program

    def resolve(
        self,
        command: Sequence[str],
        cwd: str,
        env: Mapping[str, str],
        uid: int,
        gid: int,
        tty: bool = True,
    ) -> List[str]:
        """Pick the relay mechanism and build the host command."""
        if not self.in_container:
            raise WrongContextError("distrobox-host-exec must be run from inside a container!")

        if not command:
            command = [env.get("SHELL") or "/bin/sh"]

        forwarded = filter_environment(env)
        host_spawn = shutil.which(HOST_SPAWN)
        if host_spawn:
            logger.debug(f"Relaying through {host_spawn}")
            return build_host_command(command, cwd, forwarded, uid, gid, host_spawn, tty)

        for tool in (self.sudo_program, "chroot"):
            if not shutil.which(tool):
                raise NotFoundError(f"Missing dependency: neither {HOST_SPAWN} nor {tool} is available.")
        logger.debug("host-spawn not found, falling back to chroot into the host")
        return build_host_command(command, cwd, forwarded, uid, gid, tty=tty, sudo_program=self.sudo_program)

    async def run(
        self,
        command: Sequence[str],
        cwd: str,
        env: Mapping[str, str],
        uid: int,
        gid: int,
        tty: bool = True,
    ) -> int:
        """Run ``command`` on the host, attached to our terminal; returns its exit status."""
        args = self.resolve(command, cwd, env, uid, gid, tty)
        result = await run_command(args, check=False, capture_output=False)
        return result.returncode
