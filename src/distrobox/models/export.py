"""Export target and context models."""

from pathlib import Path
from typing import Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


class ApplicationTarget(BaseModel):
    """Desktop application, located by a token in its descriptors."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["application"] = "application"
    token: str = Field(..., min_length=1)
    label: Optional[str] = Field(None, description="Name= suffix; 'none' disables it")
    delete: bool = False


class BinaryTarget(BaseModel):
    """Executable inside the container, exported as a shim."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["binary"] = "binary"
    path: str = Field(..., min_length=1)
    dest_dir: str = Field(..., min_length=1)
    delete: bool = False

    @model_validator(mode="after")
    def check_absolute(self):
        """Shims exec the target by absolute path."""
        if not self.path.startswith("/"):
            raise ValueError(f"Binary path must be absolute: {self.path}")
        return self


class ServiceTarget(BaseModel):
    """Systemd unit, exported as a host user unit."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["service"] = "service"
    unit: str = Field(..., min_length=1)
    delete: bool = False


ExportTarget = Union[ApplicationTarget, BinaryTarget, ServiceTarget]


class ExportContext(BaseModel):
    """Everything an exporter needs, assembled once by the caller.

    ``host_root`` is where the host filesystem is visible from inside the
    container; ``container_root`` is prepended to the canonical in-container
    search directories.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    container_name: str = Field(..., min_length=1)
    host_home: str = Field(..., description="Home directory as seen by the host")
    rootful: bool = False
    enter_path: str = "distrobox-enter"
    enter_flags: str = ""
    extra_flags: str = ""
    sudo: bool = False
    host_root: Path = Path("/run/host")
    container_root: Path = Path("/")
    container_home: Optional[str] = Field(None, description="Home directory inside the container, for user units")

    def host_path(self, *parts: str) -> Path:
        """Location of a host-home relative path as seen from the container."""
        return self.host_root / self.host_home.lstrip("/") / Path(*parts)

    def container_path(self, path: str) -> Path:
        """Location of an absolute in-container path under ``container_root``."""
        return self.container_root / path.lstrip("/")
