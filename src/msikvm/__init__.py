"""
msikvm - MSI monitor input / KVM switching over USB

Talks the monitor's vendor command protocol over its USB interrupt
endpoints (64-byte reports, not DDC/CI).

Features:
- Read and switch the active input source
- Read and switch the active KVM (USB upstream) port
- Endpoint auto-detection and enumeration retry after hot-plug

Usage:
    # As a library
    from msikvm import MsiMonitor
    with MsiMonitor.open(0x1462, 0x3FA4) as mon:
        mon.set_input(2)
        print(mon.get_kvm())

    # Command line
    msikvm status
    msikvm set-kvm 1
"""

from msikvm.__version__ import __version__
from msikvm.device import MsiMonitor, is_connected, open_device
from msikvm.exceptions import (
    ConfigurationError,
    DeviceNotFoundError,
    EndpointNotFoundError,
    MalformedValueError,
    MonitorError,
    ProtocolError,
    TransportError,
    TransportIoError,
    TransportTimeoutError,
    UnexpectedHeaderError,
)
from msikvm.locator import DeviceIdentity
from msikvm.session import DeviceSession

__all__ = [
    # Version
    "__version__",
    # Device
    "MsiMonitor",
    "open_device",
    "is_connected",
    "DeviceIdentity",
    "DeviceSession",
    # Errors
    "MonitorError",
    "DeviceNotFoundError",
    "EndpointNotFoundError",
    "ConfigurationError",
    "TransportError",
    "TransportTimeoutError",
    "TransportIoError",
    "ProtocolError",
    "UnexpectedHeaderError",
    "MalformedValueError",
]
