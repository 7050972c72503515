"""Container creation request model."""

import re
import shlex
from pathlib import PurePosixPath
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_IMAGE = "registry.fedoraproject.org/fedora-toolbox:latest"
DEFAULT_NAME = "my-distrobox"

_NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$")

ManagerKind = Literal["podman", "docker"]


def derive_container_name(image: str) -> str:
    """Derive a container name from an image reference.

    ``docker.io/library/ubuntu:22.04`` becomes ``ubuntu-22-04``.
    """
    if image == DEFAULT_IMAGE:
        return DEFAULT_NAME
    basename = image.rstrip("/").rsplit("/", 1)[-1]
    return re.sub(r"[:.@]", "-", basename)


class CreateRequest(BaseModel):
    """Immutable description of one container to create.

    Exactly one of ``image`` and ``clone`` resolves the image used; when both
    are absent the canonical default image and name apply.
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    image: str = Field(default="", description="Image reference")
    name: str = Field(..., description="Container name")
    custom_home: Optional[str] = None
    rootful: bool = False
    init: bool = False
    manager: ManagerKind = "podman"
    additional_flags: str = Field(default="", description="Raw flags appended verbatim")
    pre_init_hooks: str = ""
    init_hooks: str = ""
    always_pull: bool = False
    clone: Optional[str] = None
    hostname: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def apply_defaults(cls, data: Any) -> Any:
        """Default image and name together."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("image") and not data.get("clone"):
            data["image"] = DEFAULT_IMAGE
        if not data.get("name") and data.get("image"):
            data["name"] = derive_container_name(data["image"])
        return data

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        """Container managers only accept a restricted alphabet."""
        if not v or not _NAME_RE.match(v):
            raise ValueError(f"Invalid container name: {v!r}")
        return v

    @field_validator("additional_flags")
    @classmethod
    def validate_additional_flags(cls, v):
        """Flags are split like a shell would when the command is built."""
        try:
            shlex.split(v)
        except ValueError as e:
            raise ValueError(f"Invalid additional flags {v!r}: {e}") from e
        return v

    @field_validator("custom_home")
    @classmethod
    def validate_custom_home(cls, v):
        """Custom home must be absolute; trailing slashes are dropped."""
        if v is None:
            return v
        if not PurePosixPath(v).is_absolute():
            raise ValueError(f"Custom home must be an absolute path: {v}")
        return v.rstrip("/") or "/"

    @model_validator(mode="after")
    def check_image_source(self):
        """Image and clone are mutually exclusive sources."""
        if self.image and self.clone:
            raise ValueError("image and clone cannot both be set")
        return self

    def with_image(self, image: str) -> "CreateRequest":
        """Return a copy whose image has been resolved, e.g. from a clone."""
        return self.model_copy(update={"image": image, "clone": None})
