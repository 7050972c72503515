"""Container creation flow: clone, pull, synthesize, create."""

import logging
from dataclasses import dataclass
from typing import Callable, Literal, Optional

from distrobox.errors import NotFoundError
from distrobox.launch.clone import clone_tag, resolve_clone
from distrobox.launch.gateway import ContainerManager
from distrobox.launch.synthesizer import synthesize
from distrobox.models.host import HostFacts
from distrobox.models.request import CreateRequest


logger = logging.getLogger(__name__)


@dataclass
class CreateOutcome:
    """What a create invocation ended up doing."""
    status: Literal["created", "exists", "declined", "dry-run"]
    request: CreateRequest
    command: str = ""


async def ensure_image(
    manager: ContainerManager,
    request: CreateRequest,
    confirm_pull: Optional[Callable[[str], bool]] = None,
) -> bool:
    """Make sure the request's image is available locally.

    Returns False when the user declined to pull a missing image.
    """
    if not request.always_pull:
        image = await manager.inspect("image", request.image)
        if image.exists:
            return True
        if confirm_pull is not None and not confirm_pull(request.image):
            logger.info(f"Pull of {request.image} declined")
            return False

    await manager.pull(request.image)
    return True


async def create_container(
    manager: ContainerManager,
    request: CreateRequest,
    facts: HostFacts,
    confirm_pull: Optional[Callable[[str], bool]] = None,
    dry_run: bool = False,
) -> CreateOutcome:
    """Create the container described by ``request``.

    ``confirm_pull`` is asked before pulling a missing image; ``None`` pulls
    without asking.
    """
    missing = facts.companions_missing
    if missing:
        raise NotFoundError(f"missing companion executables: {', '.join(missing)}")

    if request.clone:
        if dry_run:
            request = request.with_image(clone_tag(request.clone))
        else:
            request = request.with_image(await resolve_clone(manager, request.clone))

    if dry_run:
        plan = synthesize(request, facts)
        return CreateOutcome("dry-run", request, manager.render(plan))

    existing = await manager.inspect("container", request.name)
    if existing.exists:
        logger.info(f"Container {request.name} already exists")
        return CreateOutcome("exists", request)

    if not await ensure_image(manager, request, confirm_pull):
        return CreateOutcome("declined", request)

    logger.info(f"Creating '{request.name}' using image {request.image}")
    plan = synthesize(request, facts)
    await manager.create(plan)
    logger.info(f"Container {request.name} created")
    return CreateOutcome("created", request, manager.render(plan))
