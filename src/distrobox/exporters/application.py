"""Application exporter: desktop entries and icons on the host."""

import logging
import os
import posixpath
import re
import shutil
from pathlib import Path
from typing import Dict, List, Optional

from distrobox.errors import NotExportedError, NotFoundError
from distrobox.exporters.base import BaseExporter, ExportAction, ExportResult, ExportStatus
from distrobox.exporters.lines import Line, LineFile, parse
from distrobox.exporters.reentry import is_wrapped, reentry_command, reentry_marker
from distrobox.models.export import ApplicationTarget
from distrobox.utils.files import atomic_write, contains


logger = logging.getLogger(__name__)

APPLICATION_DIRS = (
    "/usr/share/applications",
    "/usr/local/share/applications",
    "/var/lib/flatpak/exports/share/applications",
)
ICON_DIRS = (
    "/usr/share/icons",
    "/usr/share/pixmaps",
    "/var/lib/flatpak/exports/share/icons",
)
# Source prefixes mirrored into the host's ~/.local/share
CANONICAL_SHARE_PREFIXES = (
    "/usr/share/",
    "/var/lib/flatpak/exports/share/",
)
HOST_APPLICATIONS = ".local/share/applications"
HOST_SHARE = ".local/share"

MAIN_GROUP = "Desktop Entry"
FIELD_CODE_RE = re.compile(r"(?:^|\s)%[a-zA-Z](?=\s|$)")


def split_field_codes(command: str):
    """Split an Exec value into the command and its trailing field codes."""
    match = FIELD_CODE_RE.search(command)
    if not match:
        return command.strip(), ""
    return command[:match.start()].strip(), command[match.start():].strip()


class ApplicationExporter(BaseExporter):
    """Exports desktop applications to the host menu."""

    def _logical(self, path: Path) -> str:
        """In-container absolute form of a path under ``container_root``."""
        return "/" + str(path.relative_to(self.context.container_root))

    def _label(self, target: ApplicationTarget) -> str:
        if target.label is None:
            return f" (on {self.context.container_name})"
        if target.label == "none":
            return ""
        return f" {target.label}"

    @property
    def applications_dir(self) -> Path:
        return self.context.host_path(HOST_APPLICATIONS)

    # Discovery

    def find_descriptors(self, token: str) -> List[Path]:
        """Descriptors launching ``token`` or named after it, not yet wrapped."""
        found = set()
        for directory in APPLICATION_DIRS:
            root = self.context.container_path(directory)
            if not root.is_dir():
                continue
            for path in root.rglob("*.desktop"):
                if not path.is_file():
                    continue
                entry = parse(path.read_text(errors="replace"))
                commands = entry.values("Exec")
                if any(is_wrapped(command, self.context) for command in commands):
                    continue
                if any(token in command for command in commands) or token.lower() in path.name.lower():
                    found.add(path)
        return sorted(found, key=self._logical)

    def _require_descriptors(self, token: str) -> List[Path]:
        descriptors = self.find_descriptors(token)
        if not descriptors:
            raise NotFoundError(f"cannot find any desktop files for {token}, is the application installed?")
        return descriptors

    # Icons

    def resolve_icons(self, icon: str) -> List[Path]:
        """Icon files for an ``Icon=`` value, as paths under ``container_root``."""
        icon = icon.strip()
        if not icon:
            return []
        if icon.startswith("/"):
            path = self.context.container_path(icon)
            return [path] if path.is_file() else []

        matches = []
        for directory in ICON_DIRS:
            root = self.context.container_path(directory)
            if not root.is_dir():
                continue
            matches.extend(
                path for path in root.rglob("*")
                if path.is_file() and icon.lower() in path.name.lower()
            )
        return sorted(matches, key=self._logical)

    def icon_destination(self, logical: str) -> str:
        """Host path an in-container icon is copied to."""
        directory = posixpath.dirname(logical) + "/"
        for prefix in CANONICAL_SHARE_PREFIXES:
            if directory.startswith(prefix):
                relative = directory[len(prefix):].strip("/")
                segments = ["icons" if part == "pixmaps" else part for part in relative.split("/") if part]
                dest_dir = posixpath.join(self.context.host_home, HOST_SHARE, *segments)
                return posixpath.join(dest_dir, posixpath.basename(logical))
        return posixpath.join(self.context.host_home, HOST_SHARE, "icons", posixpath.basename(logical))

    def copy_icons(self, icons: List[Path]) -> Dict[str, str]:
        """Copy icons to the host; maps in-container path to host path."""
        copied = {}
        for icon in icons:
            logical = self._logical(icon)
            destination = self.icon_destination(logical)
            physical = self.context.host_root / destination.lstrip("/")
            physical.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(icon.resolve(), physical)
            copied[logical] = destination
            logger.debug(f"Copied icon {logical} to {physical}")
        return copied

    # Rewriting

    def wrap_exec(self, command: str) -> str:
        """Route an Exec value through the container, keeping field codes outside the quotes."""
        program, field_codes = split_field_codes(command)
        wrapped = reentry_command(self.context, program)
        return f"{wrapped} {field_codes}" if field_codes else wrapped

    def rewrite(self, entry: LineFile, target: ApplicationTarget, icon_paths: Optional[Dict[str, str]] = None) -> LineFile:
        """Host version of a container desktop entry."""
        icon_paths = icon_paths or {}
        label = self._label(target)
        lines: List[Line] = []

        for line in entry.lines:
            key = line.key
            if key == "TryExec":
                continue
            if key == "DBusActivatable" and line.value.strip().lower() == "true":
                continue
            if key == "Exec":
                line = line.with_value(self.wrap_exec(line.value))
            elif key == "Name" or (key or "").startswith("Name["):
                line = line.with_value(f"{line.value}{label}")
            elif key == "Icon" and line.value.strip() in icon_paths:
                line = line.with_value(icon_paths[line.value.strip()])
            lines.append(line)

        rewritten = LineFile(lines=lines, trailing_newline=True)
        if not rewritten.has_key("StartupWMClass"):
            self._insert_wm_class(rewritten, target.token)
        return rewritten

    def _insert_wm_class(self, entry: LineFile, wm_class: str) -> None:
        """Add StartupWMClass at the end of the main group."""
        position = len(entry.lines)
        last_in_group = None
        for index, line in enumerate(entry.lines):
            if line.group == MAIN_GROUP and line.raw.strip():
                last_in_group = index
        if last_in_group is not None:
            position = last_in_group + 1
        entry.lines.insert(position, Line(raw=f"StartupWMClass={wm_class}", key="StartupWMClass", group=MAIN_GROUP))

    # Provider interface

    def status(self, target: ApplicationTarget) -> ExportStatus:
        descriptors = self.find_descriptors(target.token)
        marker = reentry_marker(self.context)
        exported = [
            path for path in descriptors
            if contains(self.applications_dir / self.artifact_name(path.name), marker)
        ]
        if not descriptors or not exported:
            return ExportStatus.ABSENT
        if len(exported) < len(descriptors):
            return ExportStatus.PARTIAL
        return ExportStatus.EXPORTED

    def present(self, target: ApplicationTarget) -> ExportResult:
        descriptors = self._require_descriptors(target.token)
        written = []

        for descriptor in descriptors:
            entry = parse(descriptor.read_text(errors="replace"))
            icons = []
            for icon in entry.values("Icon"):
                icons.extend(self.resolve_icons(icon))
            copied = self.copy_icons(icons)
            icon_paths = {
                logical: host for logical, host in copied.items()
                if logical in (value.strip() for value in entry.values("Icon"))
            }

            dest = self.applications_dir / self.artifact_name(descriptor.name)
            atomic_write(dest, self.rewrite(entry, target, icon_paths).serialize())
            written.append(dest)
            logger.info(f"Exported {self._logical(descriptor)} to {dest}")

        # Desktop environments rescan the directory when its mtime changes
        os.utime(self.applications_dir)
        return ExportResult(ExportAction.EXPORTED, written)

    def absent(self, target: ApplicationTarget) -> ExportResult:
        descriptors = self._require_descriptors(target.token)
        marker = reentry_marker(self.context)
        removed = []

        for descriptor in descriptors:
            candidates = (
                self.applications_dir / self.artifact_name(descriptor.name),
                # Legacy exports used the bare descriptor name
                self.applications_dir / descriptor.name,
            )
            for candidate in candidates:
                if contains(candidate, marker):
                    candidate.unlink()
                    removed.append(candidate)
                    logger.info(f"Removed exported application {candidate}")
                elif candidate.exists():
                    logger.warning(f"Not removing {candidate}: not exported from {self.context.container_name}")

        if not removed:
            raise NotExportedError(f"application {target.token} is not exported.")

        os.utime(self.applications_dir)
        return ExportResult(ExportAction.REMOVED, removed)

    def list_exported(self) -> List[dict]:
        """Host desktop entries exported from this container."""
        marker = reentry_marker(self.context)
        exported = []
        if not self.applications_dir.is_dir():
            return exported
        for path in sorted(self.applications_dir.glob("*.desktop")):
            if not contains(path, marker):
                continue
            entry = parse(path.read_text(errors="replace"))
            names = entry.values("Name")
            exported.append({"name": names[0] if names else path.stem, "path": str(path)})
        return exported
