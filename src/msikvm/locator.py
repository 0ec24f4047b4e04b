"""
USB device locator.

Enumerates attached USB devices and picks the one matching a VID:PID.
A freshly hot-plugged monitor can take a moment to enumerate, so ``find``
retries a few times before giving up.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

import usb.core

from .constants import FIND_ATTEMPTS, FIND_RETRY_DELAY_S, MSI_PID, MSI_VID
from .exceptions import TransportIoError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeviceIdentity:
    """VID:PID pair identifying the physical monitor."""
    vendor_id: int = MSI_VID
    product_id: int = MSI_PID

    def __str__(self) -> str:
        return f"{self.vendor_id:04x}:{self.product_id:04x}"

    @classmethod
    def parse(cls, text: str) -> DeviceIdentity:
        """Parse a hex ``VID:PID`` string such as ``1462:3fa4``.

        Raises:
            ValueError: If the string is not two 16-bit hex numbers.
        """
        parts = text.strip().split(':')
        if len(parts) != 2:
            raise ValueError(f"expected VID:PID, got {text!r}")
        vid, pid = (int(p, 16) for p in parts)
        if not (0 <= vid <= 0xFFFF and 0 <= pid <= 0xFFFF):
            raise ValueError(f"VID/PID out of range: {text!r}")
        return cls(vid, pid)


def _scan(vendor_id: int, product_id: int) -> Optional[Any]:
    """One enumeration pass.  Returns the first matching device or None."""
    try:
        for dev in usb.core.find(find_all=True):
            if dev.idVendor == vendor_id and dev.idProduct == product_id:
                return dev
    except (usb.core.USBError, usb.core.NoBackendError) as e:
        raise TransportIoError(f"USB enumeration failed: {e}") from e
    return None


def find(vendor_id: int, product_id: int,
         attempts: int = FIND_ATTEMPTS,
         delay: float = FIND_RETRY_DELAY_S) -> Optional[Any]:
    """Find an attached device by VID:PID, retrying while it enumerates.

    Sleeps *delay* seconds between attempts (not after the last one).

    Returns:
        The pyusb device, or None if it never showed up.

    Raises:
        TransportIoError: If USB enumeration itself fails.
    """
    for attempt in range(1, attempts + 1):
        dev = _scan(vendor_id, product_id)
        if dev is not None:
            log.debug("Found %04x:%04x on attempt %d/%d",
                      vendor_id, product_id, attempt, attempts)
            return dev
        if attempt < attempts:
            time.sleep(delay)

    log.debug("%04x:%04x not found after %d attempts",
              vendor_id, product_id, attempts)
    return None


def is_connected(vendor_id: int, product_id: int) -> bool:
    """Whether a matching device is attached right now (single pass)."""
    return _scan(vendor_id, product_id) is not None
