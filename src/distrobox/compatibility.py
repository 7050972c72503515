"""Compatible image list, fetched from the project documentation."""

import logging
import os
import time
from pathlib import Path
from typing import List, Mapping, Optional

import httpx

from distrobox.errors import DistroboxError
from distrobox.utils.files import atomic_write


logger = logging.getLogger(__name__)

COMPATIBILITY_URL = "https://raw.githubusercontent.com/89luca89/distrobox/main/docs/compatibility.md"
CACHE_TTL = 3600
CACHE_NAME = "distrobox-compatibility"


def cache_file(env: Mapping[str, str]) -> Path:
    cache_home = env.get("XDG_CACHE_HOME") or os.path.join(env.get("HOME", "~"), ".cache")
    return Path(cache_home).expanduser() / "distrobox" / CACHE_NAME


def parse_image_list(markdown: str) -> List[str]:
    """Images listed in the ``Images`` column of the compatibility table."""
    images: List[str] = []
    column = None
    for line in markdown.splitlines():
        line = line.strip()
        if not line.startswith("|"):
            column = None
            continue
        cells = [cell.strip() for cell in line.strip("|").split("|")]
        if column is None:
            if "Images" in cells:
                column = cells.index("Images")
            continue
        if column >= len(cells) or set(cells[column]) <= set("-: "):
            continue
        for image in cells[column].replace("<br/>", "<br>").split("<br>"):
            image = image.strip().strip("`")
            if image and image not in images:
                images.append(image)
    return images


class CompatibilityList:
    """Fetches the image list, caching it on disk for an hour."""

    def __init__(self, cache_path: Path, url: str = COMPATIBILITY_URL, ttl: int = CACHE_TTL):
        self.cache_path = cache_path
        self.url = url
        self.ttl = ttl

    def _cached(self, now: Optional[float] = None) -> Optional[str]:
        if not self.cache_path.is_file():
            return None
        now = time.time() if now is None else now
        if now - self.cache_path.stat().st_mtime > self.ttl:
            logger.debug(f"Compatibility cache {self.cache_path} expired")
            return None
        return self.cache_path.read_text()

    def fetch(self) -> str:
        """Download the compatibility document."""
        try:
            with httpx.Client(timeout=10.0, follow_redirects=True) as client:
                response = client.get(self.url)
                response.raise_for_status()
                return response.text
        except httpx.RequestError as e:
            raise DistroboxError(f"Connection error: {e}")
        except httpx.HTTPStatusError as e:
            raise DistroboxError(f"HTTP error {e.response.status_code} fetching {self.url}")

    def images(self, now: Optional[float] = None) -> List[str]:
        """Compatible images, from the cache when fresh."""
        markdown = self._cached(now)
        if markdown is None:
            markdown = self.fetch()
            atomic_write(self.cache_path, markdown)
            logger.debug(f"Cached compatibility list at {self.cache_path}")
        return parse_image_list(markdown)
