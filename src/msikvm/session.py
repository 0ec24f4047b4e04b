"""Per-host device session.

Pure Python, no scripting-runtime dependencies.  A scripting host (hotkey
daemon, automation runner) creates one ``DeviceSession`` and passes it to
the code it runs instead of keeping process-wide device state.  The session
owns a registry of opened monitors keyed by ``DeviceIdentity`` and a lock
that serializes device I/O, since a monitor handle must not be used from
two threads at once.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, TypeVar

from .constants import MSI_PID, MSI_VID
from .device import MsiMonitor, is_connected
from .locator import DeviceIdentity

log = logging.getLogger(__name__)

T = TypeVar('T')


class DeviceSession:
    """Device registry + serialized access for one scripting host."""

    def __init__(self, opener: Optional[Callable[[int, int], MsiMonitor]] = None) -> None:
        self._opener = opener if opener is not None else MsiMonitor.open
        self._devices: dict[DeviceIdentity, MsiMonitor] = {}
        self._lock = threading.RLock()

    # ── Registry ─────────────────────────────────────────────────────

    def open(self, vendor_id: int = MSI_VID, product_id: int = MSI_PID) -> MsiMonitor:
        """Return the cached monitor for this identity, opening it on first use."""
        identity = DeviceIdentity(vendor_id, product_id)
        with self._lock:
            dev = self._devices.get(identity)
            if dev is not None and dev.is_open:
                return dev
            log.debug("DeviceSession: opening %s", identity)
            dev = self._opener(vendor_id, product_id)
            self._devices[identity] = dev
            return dev

    def is_connected(self, vendor_id: int = MSI_VID, product_id: int = MSI_PID) -> bool:
        return is_connected(vendor_id, product_id)

    def get(self, identity: DeviceIdentity) -> Optional[MsiMonitor]:
        """Cached monitor for *identity*, or None."""
        with self._lock:
            return self._devices.get(identity)

    def forget(self, vendor_id: int, product_id: int) -> None:
        """Close and drop a cached monitor (e.g. on a hot-unplug event)."""
        identity = DeviceIdentity(vendor_id, product_id)
        with self._lock:
            dev = self._devices.pop(identity, None)
            if dev is not None:
                log.debug("DeviceSession: forgetting %s", identity)
                dev.close()

    @property
    def identities(self) -> list[DeviceIdentity]:
        with self._lock:
            return list(self._devices)

    # ── Serialized access ────────────────────────────────────────────

    def call(self, identity: DeviceIdentity, fn: Callable[[MsiMonitor], T]) -> T:
        """Run ``fn(monitor)`` for *identity* while holding the session lock."""
        with self._lock:
            dev = self.open(identity.vendor_id, identity.product_id)
            return fn(dev)

    # ── Lifetime ─────────────────────────────────────────────────────

    def close(self) -> None:
        """Close every cached monitor."""
        with self._lock:
            devices, self._devices = list(self._devices.values()), {}
        for dev in devices:
            dev.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
