"""Pydantic models for configuration and validation."""

from distrobox.models.config import DistroboxConfig, ContainerConfig, ExportConfig, PathsConfig
from distrobox.models.export import (
    ApplicationTarget,
    BinaryTarget,
    ExportContext,
    ExportTarget,
    ServiceTarget,
)
from distrobox.models.host import HostFacts
from distrobox.models.plan import ArgumentGroup, LaunchPlan, Mount
from distrobox.models.request import CreateRequest, DEFAULT_IMAGE, DEFAULT_NAME

__all__ = [
    "DistroboxConfig",
    "ContainerConfig",
    "ExportConfig",
    "PathsConfig",
    "ApplicationTarget",
    "BinaryTarget",
    "ExportContext",
    "ExportTarget",
    "ServiceTarget",
    "HostFacts",
    "ArgumentGroup",
    "LaunchPlan",
    "Mount",
    "CreateRequest",
    "DEFAULT_IMAGE",
    "DEFAULT_NAME",
]
