"""Binary exporter: re-entry shims on the host PATH."""

import logging
from pathlib import Path
from typing import List

from distrobox.errors import DistroboxError, NotExportedError, NotFoundError
from distrobox.exporters.base import BaseExporter, ExportAction, ExportResult, ExportStatus
from distrobox.exporters.reentry import reentry_command
from distrobox.models.export import BinaryTarget
from distrobox.utils.files import atomic_write, contains
from distrobox.utils.templates import render_template


logger = logging.getLogger(__name__)

BINARY_SENTINEL = "# distrobox_binary"

SHIM_TEMPLATE = """#!/bin/sh
{{ sentinel }}
# name: {{ container_name }}
if [ -z "${CONTAINER_ID}" ]; then
	exec {{ reentry }} "$@"
elif [ -n "${CONTAINER_ID}" ] && [ "${CONTAINER_ID}" != "{{ container_name }}" ]; then
	exec distrobox-host-exec '{{ dest_file }}' "$@"
else
	exec '{{ target }}' "$@"
fi
"""


class BinaryExporter(BaseExporter):
    """Exports container binaries as shell shims."""

    def _dest_file(self, target: BinaryTarget) -> str:
        return f"{target.dest_dir.rstrip('/')}/{Path(target.path).name}"

    def _dest_path(self, target: BinaryTarget) -> Path:
        # The export directory lives in the shared home, same path on both sides
        return self.context.container_path(self._dest_file(target))

    def render_shim(self, target: BinaryTarget) -> str:
        """Shim text for ``target``."""
        return render_template(
            SHIM_TEMPLATE,
            sentinel=BINARY_SENTINEL,
            container_name=self.context.container_name,
            reentry=reentry_command(self.context, target.path),
            dest_file=self._dest_file(target),
            target=target.path,
        )

    def status(self, target: BinaryTarget) -> ExportStatus:
        if contains(self._dest_path(target), BINARY_SENTINEL):
            return ExportStatus.EXPORTED
        return ExportStatus.ABSENT

    def present(self, target: BinaryTarget) -> ExportResult:
        source = self.context.container_path(target.path)
        if not source.is_file():
            raise NotFoundError(f"cannot find {target.path}")

        dest = self._dest_path(target)
        try:
            atomic_write(dest, self.render_shim(target), mode=0o755)
        except OSError as e:
            raise DistroboxError(f"cannot create destination file {dest}: {e}") from e

        logger.info(f"Exported binary {target.path} to {dest}")
        return ExportResult(ExportAction.EXPORTED, [dest])

    def absent(self, target: BinaryTarget) -> ExportResult:
        dest = self._dest_path(target)
        if not contains(dest, BINARY_SENTINEL):
            raise NotExportedError(f"{target.path} is not exported.")

        dest.unlink()
        logger.info(f"Removed exported binary {dest}")
        return ExportResult(ExportAction.REMOVED, [dest])

    def list_exported(self, dest_dir: str) -> List[dict]:
        """Shims in ``dest_dir`` that belong to this container."""
        directory = self.context.container_path(dest_dir)
        owner = f"# name: {self.context.container_name}"
        exported = []
        if not directory.is_dir():
            return exported
        for path in sorted(directory.iterdir()):
            if not path.is_file() or not contains(path, BINARY_SENTINEL):
                continue
            text = path.read_text(errors="replace")
            if owner not in text.splitlines():
                continue
            target = ""
            for line in text.splitlines():
                stripped = line.strip()
                if stripped.startswith("exec '") and stripped.endswith('"$@"'):
                    target = stripped[len("exec '"):].split("'", 1)[0]
            exported.append({"name": path.name, "target": target, "path": str(path)})
        return exported
