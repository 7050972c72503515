"""Host fact models."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class HostFacts(BaseModel):
    """Snapshot of the host, probed once per launch.

    Every optional field gates exactly one launch clause. An absent fact
    omits the clause.
    """
    model_config = ConfigDict(frozen=True)

    username: str = Field(..., description="Invoking user name")
    uid: int = Field(..., ge=0)
    gid: int = Field(..., ge=0)
    home: str = Field(..., description="Primary home directory")
    shell: str = Field(default="/bin/sh")
    hostname: str = Field(default="localhost")

    selinux: bool = False
    nix: bool = False
    journal: bool = False
    shm_target: Optional[str] = Field(None, description="Realpath of /dev/shm if it is a symlink")
    runtime_dir: Optional[str] = Field(None, description="/run/user/<uid> if present")
    var_home: Optional[str] = Field(None, description="/var/home/<user> if present and != home")

    entrypoint_path: Optional[str] = Field(None, description="Host path of the container entrypoint")
    export_path: Optional[str] = Field(None, description="Host path of the export helper")
    host_exec_path: Optional[str] = Field(None, description="Host path of the host-exec relay")

    @property
    def companions_missing(self) -> list:
        """Names of companion executables that could not be located."""
        names = {
            "distrobox-init": self.entrypoint_path,
            "distrobox-export": self.export_path,
            "distrobox-host-exec": self.host_exec_path,
        }
        return [name for name, path in names.items() if not path]
