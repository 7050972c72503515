"""Host execution relay for distrobox."""

from distrobox.relay.hostexec import HostExecRelay, build_host_command, filter_environment

__all__ = ["HostExecRelay", "build_host_command", "filter_environment"]
