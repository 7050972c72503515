"""Configuration loading for the command line tools."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from distrobox.errors import PreconditionError
from distrobox.models.config import DistroboxConfig
from distrobox.utils.templates import merge_dicts


logger = logging.getLogger(__name__)

SYSTEM_CONFIG_FILES = (
    Path("/usr/share/distrobox/config.yaml"),
    Path("/etc/distrobox/config.yaml"),
)

# Environment variable -> path into the config tree
ENV_OVERRIDES = {
    "DBX_CONTAINER_MANAGER": ("container", "manager"),
    "DBX_CONTAINER_IMAGE": ("container", "image"),
    "DBX_CONTAINER_NAME": ("container", "name"),
    "DBX_CONTAINER_CUSTOM_HOME": ("container", "custom_home"),
    "DBX_CONTAINER_HOME_PREFIX": ("container", "home_prefix"),
    "DBX_CONTAINER_ALWAYS_PULL": ("container", "always_pull"),
    "DBX_NON_INTERACTIVE": ("non_interactive",),
    "DBX_SUDO_PROGRAM": ("sudo_program",),
    "DBX_VERBOSE": ("verbose",),
    "DISTROBOX_ENTER_PATH": ("export", "enter_path"),
    "DISTROBOX_EXPORT_PATH": ("export", "bin_dir"),
}


def user_config_file(env: Mapping[str, str]) -> Path:
    """Per-user config file, honouring XDG_CONFIG_HOME."""
    config_home = env.get("XDG_CONFIG_HOME") or os.path.join(env.get("HOME", "~"), ".config")
    return Path(config_home).expanduser() / "distrobox" / "config.yaml"


class ConfigManager:
    """Loads layered configuration files and environment overrides."""

    def __init__(self, files: Optional[List[Path]] = None, env: Optional[Mapping[str, str]] = None):
        """Initialize configuration manager."""
        self.env = dict(os.environ) if env is None else dict(env)
        self.files = list(files) if files is not None else [*SYSTEM_CONFIG_FILES, user_config_file(self.env)]
        self.yaml = YAML(typ="safe")
        self.config: Optional[DistroboxConfig] = None

    def load(self) -> DistroboxConfig:
        """Load all configuration files, later ones overriding earlier ones."""
        data: Dict[str, Any] = {}
        for config_file in self.files:
            if not config_file.is_file():
                continue
            data = merge_dicts(data, self._read_yaml(config_file))
            logger.debug(f"Loaded config: {config_file}")

        data = merge_dicts(data, self._env_overrides())

        try:
            self.config = DistroboxConfig(**data)
        except ValidationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise PreconditionError(f"Invalid configuration: {e}") from e
        return self.config

    def _read_yaml(self, file_path: Path) -> Dict[str, Any]:
        """Read and parse YAML file."""
        try:
            data = self.yaml.load(file_path.read_text())
        except (OSError, YAMLError) as e:
            raise PreconditionError(f"Cannot read configuration {file_path}: {e}") from e
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise PreconditionError(f"Configuration {file_path} must be a mapping")
        return data

    def _env_overrides(self) -> Dict[str, Any]:
        """Nested dict built from the recognised environment variables."""
        overrides: Dict[str, Any] = {}
        for name, path in ENV_OVERRIDES.items():
            value = self.env.get(name)
            if value is None or value == "":
                continue
            node = overrides
            for key in path[:-1]:
                node = node.setdefault(key, {})
            node[path[-1]] = value
        return overrides
