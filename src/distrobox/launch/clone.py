"""Clone resolver: turns a stopped container into an image to create from."""

import logging
from datetime import date
from typing import Optional

from distrobox.errors import NotFoundError, SourceRunningError
from distrobox.launch.gateway import ContainerManager


logger = logging.getLogger(__name__)


def clone_tag(source: str, today: Optional[date] = None) -> str:
    """Image tag for a clone of ``source`` taken on ``today``."""
    today = today or date.today()
    return f"{source}:{today.isoformat()}".lower()


async def resolve_clone(manager: ContainerManager, source: str, today: Optional[date] = None) -> str:
    """Commit ``source`` to a dated image tag and return the tag.

    A running container cannot be committed consistently, so it is refused
    before any commit is attempted.
    """
    info = await manager.inspect("container", source)
    if not info.exists:
        raise NotFoundError(f"Container {source} not found.")

    if info.running:
        raise SourceRunningError(
            f"Container {source} is running.\nPlease stop it first. Cannot clone a running container."
        )

    tag = clone_tag(source, today)
    logger.info(f"Duplicating {source} as {tag}")
    await manager.commit(info.id or source, tag)
    return tag
