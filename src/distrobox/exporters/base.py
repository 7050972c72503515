"""Base exporter interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List

from pydantic import BaseModel

from distrobox.models.export import ExportContext


class ExportStatus(Enum):
    """Host artifact status."""
    EXPORTED = "exported"
    ABSENT = "absent"
    PARTIAL = "partial"


class ExportAction(Enum):
    """What an export or un-export did."""
    EXPORTED = "exported"
    UNCHANGED = "unchanged"
    REMOVED = "removed"


@dataclass
class ExportResult:
    """Outcome of one export operation."""
    action: ExportAction
    paths: List[Path] = field(default_factory=list)


class BaseExporter(ABC):
    """Base exporter interface that all exporters must implement."""

    def __init__(self, context: ExportContext):
        self.context = context

    @abstractmethod
    def status(self, target: BaseModel) -> ExportStatus:
        """Check whether the host artifact for ``target`` exists."""
        pass

    @abstractmethod
    def present(self, target: BaseModel) -> ExportResult:
        """Export ``target`` to the host."""
        pass

    @abstractmethod
    def absent(self, target: BaseModel) -> ExportResult:
        """Remove the host artifact for ``target``."""
        pass

    def apply(self, target: BaseModel) -> ExportResult:
        """Export or un-export according to ``target.delete``."""
        if target.delete:
            return self.absent(target)
        return self.present(target)

    def artifact_name(self, basename: str) -> str:
        """Host artifact name, attributing it to this container."""
        return f"{self.context.container_name}-{basename}"
