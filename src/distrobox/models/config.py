"""Configuration models."""

from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ContainerConfig(BaseModel):
    """Defaults for container creation."""
    model_config = ConfigDict(extra="ignore")

    manager: Literal["autodetect", "podman", "docker"] = Field(default="autodetect")
    image: Optional[str] = None
    name: Optional[str] = None
    custom_home: Optional[str] = None
    home_prefix: Optional[str] = None
    always_pull: bool = Field(default=False)
    additional_flags: List[str] = Field(default_factory=list)
    init_hooks: str = Field(default="")
    pre_init_hooks: str = Field(default="")


class ExportConfig(BaseModel):
    """Defaults for host artifact export."""
    model_config = ConfigDict(extra="ignore")

    enter_path: str = Field(default="distrobox-enter")
    bin_dir: Optional[str] = Field(default=None, description="Defaults to ~/.local/bin")


class PathsConfig(BaseModel):
    """Filesystem roots used from inside a container."""
    model_config = ConfigDict(extra="ignore")

    host_root: str = Field(default="/run/host")
    container_root: str = Field(default="/")


class DistroboxConfig(BaseModel):
    """Main configuration model."""
    model_config = ConfigDict(extra="ignore")

    container: ContainerConfig = Field(default_factory=ContainerConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    sudo_program: str = Field(default="sudo")
    non_interactive: bool = Field(default=False)
    verbose: bool = Field(default=False)
    log_level: str = Field(default="WARNING")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()
