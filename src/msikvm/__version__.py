"""msikvm version information."""

__version__ = "0.3.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Version history:
# 0.1.0 - Input/KVM get and set over the monitor's interrupt endpoints
# 0.2.0 - Endpoint auto-detection from the descriptor tree, enumeration retry
#         for slow hot-plug, stale-report drain before every command
# 0.3.0 - Typed exceptions, DeviceSession registry for scripting hosts,
#         saved default device, CLI
