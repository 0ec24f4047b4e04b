"""
Endpoint resolution and interface configuration.

Walks a pyusb device's descriptor tree (configuration → interface /
alternate setting → endpoint) to find the interrupt endpoints the monitor
talks on, then activates the configuration and claims the interface that
owns them.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional

import usb.core
import usb.util

from .exceptions import ConfigurationError

log = logging.getLogger(__name__)


class Direction(IntEnum):
    """Endpoint direction (bit 7 of bEndpointAddress)."""
    OUT = usb.util.ENDPOINT_OUT
    IN = usb.util.ENDPOINT_IN


class TransferType(IntEnum):
    """Endpoint transfer type (bits 0-1 of bmAttributes)."""
    CONTROL = usb.util.ENDPOINT_TYPE_CTRL
    ISOCHRONOUS = usb.util.ENDPOINT_TYPE_ISO
    BULK = usb.util.ENDPOINT_TYPE_BULK
    INTERRUPT = usb.util.ENDPOINT_TYPE_INTR


@dataclass(frozen=True)
class EndpointDescriptor:
    """Where an endpoint lives in the descriptor tree, and what it is."""
    config_number: int     # bConfigurationValue
    interface_number: int  # bInterfaceNumber
    alt_setting: int       # bAlternateSetting
    address: int           # bEndpointAddress
    direction: Direction
    transfer_type: TransferType


def requires_kernel_detach() -> bool:
    """Whether the host OS may bind its own driver to the HID interface.

    Linux (usbhid) and macOS (IOHIDFamily) do; on Windows libusb goes
    through WinUSB/libusbK and there is nothing to detach.
    """
    return sys.platform != "win32"


def find_endpoint(device: Any, direction: Direction,
                  transfer_type: TransferType) -> Optional[EndpointDescriptor]:
    """Return the first endpoint matching *direction* and *transfer_type*.

    Search order is descriptor enumeration order: every configuration,
    every interface and alternate setting, every endpoint.  Configurations
    whose descriptor cannot be read are skipped.

    Returns None if nothing matches.
    """
    for n in range(device.bNumConfigurations):
        try:
            cfg = device[n]
        except usb.core.USBError as e:
            log.debug("Skipping configuration index %d: %s", n, e)
            continue

        for intf in cfg:
            for ep in intf:
                addr = ep.bEndpointAddress
                if (usb.util.endpoint_direction(addr) == direction
                        and usb.util.endpoint_type(ep.bmAttributes) == transfer_type):
                    found = EndpointDescriptor(
                        config_number=cfg.bConfigurationValue,
                        interface_number=intf.bInterfaceNumber,
                        alt_setting=intf.bAlternateSetting,
                        address=addr,
                        direction=Direction(direction),
                        transfer_type=TransferType(transfer_type),
                    )
                    log.debug("Resolved %s %s endpoint: %s",
                              Direction(direction).name,
                              TransferType(transfer_type).name, found)
                    return found
    return None


def _active_configuration(device: Any) -> Optional[int]:
    """bConfigurationValue of the active configuration, None if unconfigured."""
    try:
        return device.get_active_configuration().bConfigurationValue
    except usb.core.USBError:
        return None


def configure(device: Any, endpoint: EndpointDescriptor,
              requires_detach: Optional[bool] = None) -> None:
    """Make *endpoint* usable: detach, activate configuration, claim, alt setting.

    The configuration is only set when it is not already the active one,
    so configuring a second endpoint on the same configuration does not
    reset the device under an interface we already claimed.

    Nothing is rolled back on failure.

    Raises:
        ConfigurationError: naming the step that failed.
    """
    if requires_detach is None:
        requires_detach = requires_kernel_detach()
    iface = endpoint.interface_number

    step = "detach kernel driver"
    try:
        if requires_detach:
            try:
                if device.is_kernel_driver_active(iface):
                    device.detach_kernel_driver(iface)
                    log.debug("Detached kernel driver from interface %d", iface)
            except NotImplementedError:
                log.debug("Kernel driver detach not supported by backend")

        step = "set configuration"
        if _active_configuration(device) != endpoint.config_number:
            device.set_configuration(endpoint.config_number)

        step = "claim interface"
        usb.util.claim_interface(device, iface)

        step = "set alternate setting"
        device.set_interface_altsetting(
            interface=iface, alternate_setting=endpoint.alt_setting,
        )
    except usb.core.USBError as e:
        raise ConfigurationError(
            f"{step} failed for interface {iface} "
            f"(config {endpoint.config_number}): {e}"
        ) from e
