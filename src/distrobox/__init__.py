"""
Distrobox - host-integrated development containers.

Creates podman or docker containers that share the host's home, devices and
network, and exports applications, binaries and services from them back onto
the host desktop and service manager.
"""

__version__ = "1.0.0"
__author__ = "Distrobox Development Team"

# Re-export key components for easier access
from distrobox.models.config import DistroboxConfig
from distrobox.models.export import ExportContext, ExportTarget
from distrobox.models.host import HostFacts
from distrobox.models.request import CreateRequest

__all__ = [
    "CreateRequest",
    "DistroboxConfig",
    "ExportContext",
    "ExportTarget",
    "HostFacts",
]
