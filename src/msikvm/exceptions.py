"""Exceptions raised by the msikvm device layer."""

from __future__ import annotations

from typing import Optional


class MonitorError(Exception):
    """Base exception for all monitor control errors."""
    pass


class DeviceNotFoundError(MonitorError):
    """Raised when no attached USB device matches the requested VID:PID."""

    def __init__(self, vendor_id: int, product_id: int):
        self.vendor_id = vendor_id
        self.product_id = product_id
        super().__init__(
            f"USB device not found: VID={vendor_id:#06x} PID={product_id:#06x}"
        )


class EndpointNotFoundError(MonitorError):
    """Raised when the descriptor tree has no endpoint of the required kind."""
    pass


class ConfigurationError(MonitorError):
    """Raised when activating, detaching, claiming or selecting an alt setting fails."""
    pass


class TransportError(MonitorError):
    """Raised when a USB transfer fails."""
    pass


class TransportTimeoutError(TransportError):
    """Raised when a USB transfer does not complete within its timeout."""
    pass


class TransportIoError(TransportError):
    """Raised on any other USB I/O failure (disconnect, pipe error, closed handle)."""
    pass


class ProtocolError(MonitorError):
    """Raised when the monitor's reply cannot be decoded."""

    def __init__(self, message: str, response: Optional[bytes] = None):
        self.response = response
        super().__init__(message)


class UnexpectedHeaderError(ProtocolError):
    """Raised when byte[1] of a reply is not the expected header."""

    def __init__(self, header: int, response: Optional[bytes] = None):
        self.header = header
        super().__init__(f"unexpected reply header 0x{header:02x}", response)


class MalformedValueError(ProtocolError):
    """Raised when the reply's value field is not three ASCII digits."""

    def __init__(self, raw_value: bytes, response: Optional[bytes] = None):
        self.raw_value = raw_value
        super().__init__(f"malformed reply value {raw_value!r}", response)
