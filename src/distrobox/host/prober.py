"""Host capability prober.

Read-only queries against the host filesystem. ``root`` lets the probes run
against a fake tree; every reported path is relative to it, i.e. what the
container manager will see.
"""

import logging
import os
import pwd
import shutil
import socket
from pathlib import Path
from typing import Mapping, Optional

from distrobox.models.host import HostFacts


logger = logging.getLogger(__name__)

CONTAINERENV = "run/.containerenv"
DOCKERENV = ".dockerenv"
COMPANIONS = ("distrobox-init", "distrobox-export", "distrobox-host-exec")


class HostProber:
    """Probes optional host integration points."""

    def __init__(self, root: Path = Path("/")):
        """Initialize prober."""
        self.root = Path(root)

    def _path(self, path: str) -> Path:
        return self.root / path.lstrip("/")

    def _unroot(self, path: Path) -> str:
        """Map a path under ``root`` back to its host-absolute form."""
        try:
            relative = path.relative_to(os.path.realpath(self.root))
        except ValueError:
            return str(path)
        return "/" if str(relative) == "." else f"/{relative}"

    def exists(self, path: str) -> bool:
        return self._path(path).exists()

    def shm_target(self) -> Optional[str]:
        """Resolved target of /dev/shm when it is a symlink."""
        shm = self._path("/dev/shm")
        if not shm.is_symlink():
            return None
        target = Path(os.path.realpath(shm))
        return self._unroot(target)

    def probe(
        self,
        username: str,
        uid: int,
        gid: int,
        home: str,
        shell: str = "/bin/sh",
        hostname: str = "localhost",
        search_path: Optional[str] = None,
    ) -> HostFacts:
        """Collect host facts for one launch."""
        runtime_dir = f"/run/user/{uid}"
        var_home = f"/var/home/{username}"

        facts = HostFacts(
            username=username,
            uid=uid,
            gid=gid,
            home=home,
            shell=shell,
            hostname=hostname,
            selinux=self.exists("/sys/fs/selinux"),
            nix=self.exists("/nix"),
            journal=self.exists("/var/log/journal"),
            shm_target=self.shm_target(),
            runtime_dir=runtime_dir if self._path(runtime_dir).is_dir() else None,
            var_home=var_home if home != var_home and self._path(var_home).is_dir() else None,
            entrypoint_path=shutil.which(COMPANIONS[0], path=search_path),
            export_path=shutil.which(COMPANIONS[1], path=search_path),
            host_exec_path=shutil.which(COMPANIONS[2], path=search_path),
        )
        logger.debug(f"Probed host facts: {facts}")
        return facts

    def probe_current_user(self, env: Mapping[str, str]) -> HostFacts:
        """Probe for the invoking user of this process."""
        uid = os.getuid()
        entry = pwd.getpwuid(uid)
        return self.probe(
            username=env.get("USER") or entry.pw_name,
            uid=uid,
            gid=os.getgid(),
            home=env.get("HOME") or entry.pw_dir,
            shell=env.get("SHELL") or entry.pw_shell or "/bin/sh",
            hostname=socket.gethostname(),
            search_path=env.get("PATH"),
        )

    # Container context, used from inside a container by export and host-exec

    def in_container(self, env: Mapping[str, str]) -> bool:
        """True when running inside a podman or docker container."""
        return (
            self._path(CONTAINERENV).exists()
            or self._path(DOCKERENV).exists()
            or bool(env.get("container"))
        )

    def _containerenv(self) -> dict:
        path = self._path(CONTAINERENV)
        values = {}
        if not path.is_file():
            return values
        for line in path.read_text().splitlines():
            key, sep, value = line.partition("=")
            if sep:
                values[key.strip()] = value.strip().strip('"')
        return values

    def container_name(self, env: Mapping[str, str]) -> Optional[str]:
        """Name of the container we run in."""
        if env.get("CONTAINER_ID"):
            return env["CONTAINER_ID"]
        return self._containerenv().get("name")

    def container_is_rootful(self) -> bool:
        """Podman records rootless=0 for rootful containers."""
        return self._containerenv().get("rootless") == "0"
