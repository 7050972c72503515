"""Exporter registry, keyed by export target kind."""

import logging
from typing import Dict, Optional, Type

from distrobox.exporters.application import ApplicationExporter
from distrobox.exporters.base import BaseExporter, ExportResult
from distrobox.exporters.binary import BinaryExporter
from distrobox.exporters.service import ServiceExporter
from distrobox.models.export import ExportContext, ExportTarget


logger = logging.getLogger(__name__)


class ExporterRegistry:
    """Registry for managing exporters."""

    def __init__(self, context: ExportContext):
        """Initialize exporter registry."""
        self.context = context
        self._exporters: Dict[str, BaseExporter] = {}
        self._exporter_classes: Dict[str, Type[BaseExporter]] = {
            "application": ApplicationExporter,
            "binary": BinaryExporter,
            "service": ServiceExporter,
        }

    def get_exporter(self, kind: str) -> Optional[BaseExporter]:
        """Get an exporter by target kind, instantiating it on first use."""
        if kind not in self._exporter_classes:
            return None
        if kind not in self._exporters:
            self._exporters[kind] = self._exporter_classes[kind](self.context)
            logger.debug(f"Initialized exporter: {kind}")
        return self._exporters[kind]

    def list_exporters(self) -> list:
        """List available exporter kinds."""
        return list(self._exporter_classes.keys())

    def export(self, target: ExportTarget) -> ExportResult:
        """Export or un-export ``target`` with the matching exporter."""
        exporter = self.get_exporter(target.kind)
        if exporter is None:
            raise ValueError(f"No exporter for {target.kind}")
        return exporter.apply(target)
