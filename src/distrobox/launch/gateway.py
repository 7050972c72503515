"""Container manager gateway.

The only place that talks to podman or docker. It serializes a
:class:`LaunchPlan` into a flat argument vector and reduces manager output to
existence, state and identifiers.
"""

import logging
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Literal, Optional

from distrobox.errors import CommitFailedError, ExternalToolError, NotFoundError
from distrobox.models.plan import LaunchPlan
from distrobox.utils.systemd import run_command


logger = logging.getLogger(__name__)

SUPPORTED_MANAGERS = ("podman", "docker")


@dataclass
class InspectResult:
    """Structured subset of ``inspect`` output."""
    exists: bool
    state: str = ""
    id: str = ""

    @property
    def running(self) -> bool:
        return self.state == "running"


def detect_manager(preferred: str = "autodetect") -> str:
    """Resolve the manager kind; autodetect prefers podman over docker."""
    if preferred in SUPPORTED_MANAGERS:
        return preferred
    for candidate in SUPPORTED_MANAGERS:
        if shutil.which(candidate):
            logger.debug(f"Autodetected container manager: {candidate}")
            return candidate
    raise NotFoundError("Missing dependency: we need a container manager. Please install podman or docker.")


class ContainerManager:
    """Runs manager commands for one invocation."""

    def __init__(self, kind: str, rootful: bool = False, sudo_program: str = "sudo", uid: Optional[int] = None):
        """Initialize gateway."""
        if kind not in SUPPORTED_MANAGERS:
            raise ValueError(f"Unsupported container manager: {kind}")
        self.kind = kind
        self.rootful = rootful
        self.cmd_prefix: List[str] = [kind]
        if rootful and uid != 0:
            self.cmd_prefix = [sudo_program, kind]

    def command(self, *args: str) -> List[str]:
        return [*self.cmd_prefix, *args]

    def create_command(self, plan: LaunchPlan) -> List[str]:
        return self.command("create", *plan.to_args())

    def render(self, plan: LaunchPlan) -> str:
        """Shell-quoted ``create`` command, for dry runs."""
        return shlex.join(self.create_command(plan))

    async def inspect(self, kind: Literal["container", "image"], name: str) -> InspectResult:
        """Inspect a container or image."""
        fmt = "{{.State.Status}}|{{.Id}}" if kind == "container" else "|{{.Id}}"
        result = await run_command(
            self.command("inspect", "--type", kind, "--format", fmt, name),
            check=False,
        )
        if result.returncode != 0:
            logger.debug(f"{kind} {name} not found")
            return InspectResult(exists=False)

        output = result.stdout.strip()
        first_line = output.splitlines()[0] if output else ""
        state, _, object_id = first_line.partition("|")
        return InspectResult(exists=True, state=state.strip(), id=object_id.strip())

    async def pull(self, image: str) -> None:
        """Pull ``image``, streaming progress to the terminal."""
        logger.info(f"Pulling image {image}")
        try:
            await run_command(self.command("pull", image), capture_output=False)
        except subprocess.CalledProcessError as e:
            raise ExternalToolError(f"Failed to pull {image}", e.returncode) from e

    async def create(self, plan: LaunchPlan) -> None:
        """Create a container from ``plan``."""
        try:
            await run_command(self.create_command(plan))
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to create container: {e}. Stderr: {e.stderr}")
            raise ExternalToolError("failed to create container.", e.returncode, e.stderr) from e

    async def commit(self, object_id: str, tag: str) -> None:
        """Commit container ``object_id`` to image ``tag``."""
        try:
            await run_command(self.command("container", "commit", object_id, tag))
        except subprocess.CalledProcessError as e:
            logger.error(f"Failed to commit {object_id}: {e}. Stderr: {e.stderr}")
            raise CommitFailedError(f"Cannot commit container {object_id} to {tag}", e.returncode, e.stderr) from e
