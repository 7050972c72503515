"""Host capability probing."""

from distrobox.host.prober import HostProber

__all__ = ["HostProber"]
