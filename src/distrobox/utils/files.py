"""File helpers for writing host artifacts."""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


logger = logging.getLogger(__name__)


@contextmanager
def scratch_file(target: Path) -> Iterator[Path]:
    """Yield a uniquely named scratch file next to ``target``.

    The scratch file is removed on every exit path unless the caller moved it
    into place.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_path = tempfile.mkstemp(
        dir=target.parent,
        prefix=f".{target.name}.",
        suffix=".tmp",
    )
    os.close(fd)
    path = Path(temp_path)
    try:
        yield path
    finally:
        if path.exists():
            path.unlink()
            logger.debug(f"Removed scratch file {path}")


def atomic_write(target: Path, content: str, mode: int = 0o644) -> None:
    """Write ``content`` to ``target`` through a scratch file and rename."""
    with scratch_file(target) as temp_path:
        temp_path.write_text(content)
        temp_path.chmod(mode)
        os.replace(temp_path, target)
    logger.debug(f"Wrote {target}")


def contains(path: Path, marker: str) -> bool:
    """True when ``path`` is a readable file containing ``marker``."""
    if not path.is_file():
        return False
    try:
        return marker in path.read_text(errors="replace")
    except OSError as e:
        logger.warning(f"Cannot read {path}: {e}")
        return False
