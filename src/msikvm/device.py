#!/usr/bin/env python3
"""
Open MSI monitor handle.

Acquisition sequence::

    find VID:PID (with retry)
    → resolve interrupt OUT endpoint → configure (detach, config, claim, alt)
    → resolve interrupt IN endpoint  → configure
    → PyUsbTransport + CommandChannel

The handle keeps its interfaces claimed until ``close()``.  There is no
automatic reconnect: after a transport error the caller closes and opens
again.

Usage::

    from msikvm import MsiMonitor

    with MsiMonitor.open() as mon:
        print(mon.get_input(), mon.get_kvm())
        mon.set_kvm(1)
"""

from __future__ import annotations

import logging
from typing import Optional

import usb.core
import usb.util

from . import locator
from .channel import CommandChannel
from .constants import MSI_PID, MSI_VID
from .controller import MonitorController
from .endpoints import (
    Direction,
    EndpointDescriptor,
    TransferType,
    configure,
    find_endpoint,
    requires_kernel_detach,
)
from .exceptions import DeviceNotFoundError, EndpointNotFoundError, MonitorError
from .locator import DeviceIdentity
from .transport import PyUsbTransport, UsbTransport

log = logging.getLogger(__name__)


def _dispose(dev) -> None:
    """Free a pyusb handle after a failed open; errors are only logged."""
    try:
        usb.util.dispose_resources(dev)
    except usb.core.USBError as e:
        log.warning("Dispose of USB resources failed: %s", e)


class MsiMonitor(MonitorController):
    """An opened monitor: claimed USB handle plus its two endpoints."""

    def __init__(self, identity: DeviceIdentity, transport: UsbTransport,
                 in_endpoint: EndpointDescriptor,
                 out_endpoint: EndpointDescriptor):
        super().__init__(CommandChannel(transport, in_endpoint, out_endpoint))
        self.identity = identity
        self.transport = transport
        self.in_endpoint = in_endpoint
        self.out_endpoint = out_endpoint

    @classmethod
    def open(cls, vendor_id: int = MSI_VID, product_id: int = MSI_PID,
             requires_detach: Optional[bool] = None) -> MsiMonitor:
        """Locate, configure and claim the monitor.

        If resolving or configuring fails, the pyusb handle is disposed
        before the error propagates.  Already applied configuration is not
        undone.

        Raises:
            DeviceNotFoundError: No matching device after the retry window.
            EndpointNotFoundError: No interrupt IN or OUT endpoint.
            ConfigurationError: A detach/config/claim/alt-setting step failed.
            TransportIoError: USB enumeration failed.
        """
        identity = DeviceIdentity(vendor_id, product_id)
        dev = locator.find(vendor_id, product_id)
        if dev is None:
            raise DeviceNotFoundError(vendor_id, product_id)

        if requires_detach is None:
            requires_detach = requires_kernel_detach()

        try:
            out_ep = find_endpoint(dev, Direction.OUT, TransferType.INTERRUPT)
            if out_ep is None:
                raise EndpointNotFoundError(
                    f"{identity}: could not find interrupt-out endpoint")
            configure(dev, out_ep, requires_detach)

            in_ep = find_endpoint(dev, Direction.IN, TransferType.INTERRUPT)
            if in_ep is None:
                raise EndpointNotFoundError(
                    f"{identity}: could not find interrupt-in endpoint")
            configure(dev, in_ep, requires_detach)
        except MonitorError:
            # configuration stays as is; only the handle is freed
            _dispose(dev)
            raise

        transport = PyUsbTransport(
            dev, interfaces=(out_ep.interface_number, in_ep.interface_number),
        )
        log.info("Opened monitor %s (EP OUT=0x%02x, EP IN=0x%02x)",
                 identity, out_ep.address, in_ep.address)
        return cls(identity, transport, in_ep, out_ep)

    def close(self) -> None:
        """Release the interfaces and the USB handle.  Safe to call twice."""
        if self.transport.is_open:
            self.transport.close()
            log.info("Closed monitor %s", self.identity)

    @property
    def is_open(self) -> bool:
        return self.transport.is_open

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<MsiMonitor {self.identity} {state}>"


def open_device(vendor_id: int = MSI_VID, product_id: int = MSI_PID) -> MsiMonitor:
    """Open the monitor identified by *vendor_id*:*product_id*."""
    return MsiMonitor.open(vendor_id, product_id)


def is_connected(vendor_id: int = MSI_VID, product_id: int = MSI_PID) -> bool:
    """Whether the monitor is attached right now."""
    return locator.is_connected(vendor_id, product_id)
