"""Re-entry command contract shared by every exported artifact.

A re-entry command looks like::

    distrobox-enter [--root] -n NAME [ENTER_FLAGS] -- '[sudo -S ]TARGET[ EXTRA_FLAGS]'

:func:`reentry_prefix` stops right after the opening quote so each writer
decides what goes between it and the closing quote.
"""

import re
from typing import List, Optional

from distrobox.models.export import ExportContext


SUDO_PREFIX = "sudo -S "

_ANY_ENTER_RE = re.compile(r"distrobox[^\s]*enter")


def _enter_args(context: ExportContext) -> List[str]:
    args = [context.enter_path]
    if context.rootful:
        args.append("--root")
    args.extend(["-n", context.container_name])
    return args


def reentry_marker(context: ExportContext) -> str:
    """Fragment present in every artifact exported from this container.

    The trailing space ends the name, so container ``dev`` never claims
    artifacts of ``devbox``.
    """
    return " ".join(_enter_args(context)) + " "


def reentry_prefix(context: ExportContext) -> str:
    """Re-entry command up to and including the unterminated quote."""
    parts = _enter_args(context)
    if context.enter_flags:
        parts.append(context.enter_flags)
    parts.append("--")
    sudo = SUDO_PREFIX if context.sudo else ""
    return f"{' '.join(parts)} '{sudo}"


def reentry_command(context: ExportContext, target: str, extra_flags: Optional[str] = None) -> str:
    """Full re-entry command for ``target``, quote closed."""
    extra = context.extra_flags if extra_flags is None else extra_flags
    body = target.strip()
    if extra:
        body = f"{body} {extra}"
    return f"{reentry_prefix(context)}{body}'"


def is_wrapped(command: str, context: Optional[ExportContext] = None) -> bool:
    """True when ``command`` already re-enters some container."""
    if context is not None and context.enter_path in command:
        return True
    return bool(_ANY_ENTER_RE.search(command))
