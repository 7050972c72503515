"""Host artifact exporters for distrobox."""

from distrobox.exporters.application import ApplicationExporter
from distrobox.exporters.base import BaseExporter, ExportAction, ExportResult, ExportStatus
from distrobox.exporters.binary import BinaryExporter
from distrobox.exporters.registry import ExporterRegistry
from distrobox.exporters.service import ServiceExporter

__all__ = [
    "ApplicationExporter",
    "BaseExporter",
    "BinaryExporter",
    "ExportAction",
    "ExportResult",
    "ExportStatus",
    "ExporterRegistry",
    "ServiceExporter",
]
