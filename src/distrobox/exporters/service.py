"""Service exporter: container systemd units as host user units."""

import logging
from pathlib import Path
from typing import List, Optional

from distrobox.errors import NotExportedError, NotFoundError
from distrobox.exporters.base import BaseExporter, ExportAction, ExportResult, ExportStatus
from distrobox.exporters.lines import LineFile, parse
from distrobox.exporters.reentry import reentry_command, reentry_marker
from distrobox.models.export import ServiceTarget
from distrobox.utils.files import atomic_write, contains


logger = logging.getLogger(__name__)

UNIT_DIRS = (
    "/etc/systemd/system",
    "/lib/systemd/system",
    "/usr/lib/systemd/system",
    "/usr/local/lib/systemd/system",
    "/etc/systemd/user",
    "/usr/lib/systemd/user",
)
HOST_UNITS = ".config/systemd/user"

EXEC_DIRECTIVES = (
    "ExecStart",
    "ExecStartPre",
    "ExecStartPost",
    "ExecReload",
    "ExecStop",
    "ExecStopPost",
)
# systemd command line prefixes ("-", "@", "+", "!", "!!") stay on the host side
EXEC_PREFIX_CHARS = "-@+!:"


class ServiceExporter(BaseExporter):
    """Exports systemd units as host user units."""

    def _search_dirs(self) -> List[Path]:
        dirs = [self.context.container_path(d) for d in UNIT_DIRS]
        if self.context.container_home:
            dirs.append(self.context.container_path(f"{self.context.container_home}/{HOST_UNITS}"))
        return dirs

    def find_unit(self, unit: str) -> Path:
        """Last unit file, by in-container path, whose name starts with ``unit``."""
        matches = []
        for directory in self._search_dirs():
            if not directory.is_dir():
                continue
            matches.extend(
                path for path in directory.rglob(f"{unit}*")
                if path.is_file()
            )
        if not matches:
            raise NotFoundError(f"cannot find any service file for {unit}.")
        root = self.context.container_root
        return sorted(matches, key=lambda path: str(path.relative_to(root)))[-1]

    def destination(self, unit_file: Path) -> Path:
        return self.context.host_path(HOST_UNITS, self.artifact_name(unit_file.name))

    def wrap_exec(self, command: str) -> str:
        """Route an Exec directive value through the container."""
        stripped = command.strip()
        body = stripped.lstrip(EXEC_PREFIX_CHARS)
        prefix = stripped[:len(stripped) - len(body)]
        return prefix + reentry_command(self.context, body)

    def rewrite(self, unit: LineFile, marker: Optional[str] = None) -> LineFile:
        """Wrap every Exec directive not already routed through this container."""
        marker = marker or reentry_marker(self.context)
        lines = []
        for line in unit.lines:
            if line.key in EXEC_DIRECTIVES and marker not in line.raw:
                line = line.with_value(self.wrap_exec(line.value))
            lines.append(line)
        return LineFile(lines=lines, trailing_newline=unit.trailing_newline)

    def status(self, target: ServiceTarget) -> ExportStatus:
        try:
            unit_file = self.find_unit(target.unit)
        except NotFoundError:
            return ExportStatus.ABSENT
        if contains(self.destination(unit_file), reentry_marker(self.context)):
            return ExportStatus.EXPORTED
        return ExportStatus.ABSENT

    def present(self, target: ServiceTarget) -> ExportResult:
        unit_file = self.find_unit(target.unit)
        dest = self.destination(unit_file)
        marker = reentry_marker(self.context)

        if contains(dest, marker):
            logger.info(f"Service {target.unit} already exported to {dest}")
            return ExportResult(ExportAction.UNCHANGED, [dest])

        unit = parse(unit_file.read_text(errors="replace"))
        atomic_write(dest, self.rewrite(unit, marker).serialize())
        logger.info(f"Exported service {unit_file.name} to {dest}")
        return ExportResult(ExportAction.EXPORTED, [dest])

    def absent(self, target: ServiceTarget) -> ExportResult:
        unit_file = self.find_unit(target.unit)
        dest = self.destination(unit_file)
        if not contains(dest, reentry_marker(self.context)):
            raise NotExportedError(f"service {target.unit} is not exported.")

        dest.unlink()
        logger.info(f"Removed exported service {dest}")
        return ExportResult(ExportAction.REMOVED, [dest])
