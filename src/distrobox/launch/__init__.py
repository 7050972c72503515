"""Container launch: synthesis, manager gateway, cloning and creation."""

from distrobox.launch.clone import resolve_clone
from distrobox.launch.create import create_container, CreateOutcome
from distrobox.launch.gateway import ContainerManager, InspectResult, detect_manager
from distrobox.launch.synthesizer import synthesize

__all__ = [
    "ContainerManager",
    "CreateOutcome",
    "InspectResult",
    "create_container",
    "detect_manager",
    "resolve_clone",
    "synthesize",
]
