"""Structured launch plan consumed by the container manager gateway."""

import shlex
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ArgumentGroup(Enum):
    """Argument groups, in emission order."""
    BASE = "base"
    NAMESPACE = "namespace"
    ENVIRONMENT = "environment"
    MOUNT = "mount"
    MANAGER = "manager"
    ADDITIONAL = "additional"


@dataclass(frozen=True)
class Flag:
    """A single ``--name[=value]`` manager flag."""
    name: str
    value: Optional[str] = None

    def render(self) -> List[str]:
        if self.value is None:
            return [f"--{self.name}"]
        return [f"--{self.name}={self.value}"]


@dataclass(frozen=True)
class EnvVar:
    """An environment assignment inside the container."""
    key: str
    value: str

    def render(self) -> List[str]:
        return [f"--env={self.key}={self.value}"]


@dataclass(frozen=True)
class Mount:
    """A mount request.

    ``kind`` is ``bind`` (``--volume=src:target[:options]``), ``volume``
    (anonymous ``--volume=target``) or a ``--mount`` type such as ``devpts``
    or ``tmpfs``.
    """
    target: str
    source: Optional[str] = None
    options: str = ""
    kind: str = "bind"

    def render(self) -> List[str]:
        if self.kind == "bind":
            spec = f"{self.source}:{self.target}"
            if self.options:
                spec += f":{self.options}"
            return [f"--volume={spec}"]
        if self.kind == "volume":
            return [f"--volume={self.target}"]
        return [f"--mount=type={self.kind},destination={self.target}"]

    @property
    def key(self) -> str:
        """Normalized in-container target used for uniqueness."""
        return self.target.rstrip("/") or "/"


@dataclass(frozen=True)
class RawFlags:
    """Caller-supplied flags appended verbatim."""
    text: str

    def render(self) -> List[str]:
        return shlex.split(self.text)


@dataclass
class LaunchPlan:
    """Ordered argument groups plus the entrypoint invocation.

    Built fresh per invocation and consumed once. A later mount for a target
    that is already mounted is dropped.
    """
    image: str = ""
    entrypoint: str = "/usr/bin/entrypoint"
    entrypoint_args: List[str] = field(default_factory=list)
    _items: List[Tuple[ArgumentGroup, object]] = field(default_factory=list)
    _mount_targets: Dict[str, Mount] = field(default_factory=dict)

    def add_flag(self, group: ArgumentGroup, name: str, value: Optional[str] = None) -> None:
        self._items.append((group, Flag(name, value)))

    def add_env(self, key: str, value: str) -> None:
        self._items.append((ArgumentGroup.ENVIRONMENT, EnvVar(key, value)))

    def add_mount(self, mount: Mount, group: ArgumentGroup = ArgumentGroup.MOUNT) -> bool:
        """Add a mount unless its target is already covered."""
        if mount.key in self._mount_targets:
            return False
        self._mount_targets[mount.key] = mount
        self._items.append((group, mount))
        return True

    def add_raw(self, text: str) -> None:
        if text.strip():
            self._items.append((ArgumentGroup.ADDITIONAL, RawFlags(text)))

    def items(self, group: Optional[ArgumentGroup] = None) -> list:
        """Plan items, optionally restricted to one group."""
        return [item for g, item in self._items if group is None or g == group]

    @property
    def mounts(self) -> List[Mount]:
        return list(self._mount_targets.values())

    @property
    def environment(self) -> Dict[str, str]:
        """Effective environment; later assignments win."""
        env: Dict[str, str] = {}
        for item in self.items(ArgumentGroup.ENVIRONMENT):
            env[item.key] = item.value
        return env

    def to_args(self) -> List[str]:
        """Serialize to the ``create`` argument vector."""
        args: List[str] = []
        for _, item in self._items:
            args.extend(item.render())
        args.append(f"--entrypoint={self.entrypoint}")
        args.append(self.image)
        args.extend(self.entrypoint_args)
        return args
