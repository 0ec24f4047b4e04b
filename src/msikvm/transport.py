#!/usr/bin/env python3
"""
USB interrupt transport for the MSI monitor.

The ``UsbTransport`` ABC abstracts the raw USB I/O so that:
  • Tests can inject a mock transport (no real hardware needed).
  • ``PyUsbTransport`` provides real USB via pyusb (libusb backend).

pyusb exceptions never leave this module: timeouts become
``TransportTimeoutError``, everything else ``TransportIoError``.

Linux dependencies:
  • pyusb:  ``pip install pyusb``  (needs libusb1: ``apt install libusb-1.0-0``)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable

import usb.core
import usb.util

from .constants import IO_TIMEOUT_MS, PACKET_SIZE
from .exceptions import TransportIoError, TransportTimeoutError

log = logging.getLogger(__name__)


# =========================================================================
# Abstract USB transport
# =========================================================================

class UsbTransport(ABC):
    """Abstract USB interrupt transport, mockable for testing."""

    @abstractmethod
    def close(self) -> None:
        """Release interfaces and close."""

    @abstractmethod
    def write(self, endpoint: int, data: bytes, timeout: int = IO_TIMEOUT_MS) -> int:
        """Interrupt write to endpoint.  Returns bytes transferred."""

    @abstractmethod
    def read(self, endpoint: int, length: int = PACKET_SIZE,
             timeout: int = IO_TIMEOUT_MS) -> bytes:
        """Interrupt read from endpoint.  Returns data read."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether the device is currently open."""

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


# =========================================================================
# Real transport: PyUSB  (libusb backend)
# =========================================================================

def _translate(err: usb.core.USBError, what: str) -> Exception:
    """Map a pyusb error onto the transport error kinds."""
    if isinstance(err, usb.core.USBTimeoutError):
        return TransportTimeoutError(f"{what} timed out: {err}")
    return TransportIoError(f"{what} failed: {err}")


class PyUsbTransport(UsbTransport):
    """Real USB transport over an already configured pyusb device.

    The device has been located, its configuration activated and its
    interfaces claimed before construction (see ``msikvm.endpoints``).
    ``close()`` releases those interfaces and frees libusb resources.

    Requires: ``pip install pyusb`` + ``apt install libusb-1.0-0``
    """

    def __init__(self, device: Any, interfaces: Iterable[int] = ()):
        self._device = device
        self._interfaces = sorted(set(interfaces))
        self._is_open = device is not None

    def close(self) -> None:
        """Release claimed interfaces and dispose of the handle.

        Release failures are logged; the handle is always dropped.
        """
        if self._device is None:
            self._is_open = False
            return
        for iface in self._interfaces:
            try:
                usb.util.release_interface(self._device, iface)
            except usb.core.USBError as e:
                log.warning("Release of interface %d failed: %s", iface, e)
        try:
            usb.util.dispose_resources(self._device)
        except usb.core.USBError as e:
            log.warning("Dispose of USB resources failed: %s", e)
        self._device = None
        self._is_open = False

    def write(self, endpoint: int, data: bytes, timeout: int = IO_TIMEOUT_MS) -> int:
        """Interrupt write (pyusb picks the transfer type from the endpoint)."""
        if not self._is_open or self._device is None:
            raise TransportIoError("Transport not open")
        try:
            return self._device.write(endpoint, data, timeout=timeout)
        except usb.core.USBError as e:
            raise _translate(e, f"write to 0x{endpoint:02x}") from e

    def read(self, endpoint: int, length: int = PACKET_SIZE,
             timeout: int = IO_TIMEOUT_MS) -> bytes:
        """Interrupt read."""
        if not self._is_open or self._device is None:
            raise TransportIoError("Transport not open")
        try:
            data = self._device.read(endpoint, length, timeout=timeout)
        except usb.core.USBError as e:
            raise _translate(e, f"read from 0x{endpoint:02x}") from e
        return bytes(data)

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def device(self) -> Any:
        return self._device

    @property
    def interfaces(self) -> list[int]:
        return list(self._interfaces)
