#!/usr/bin/env python3
"""
Command channel: the write-then-read exchange with the monitor.

Each ``exchange`` runs the whole sequence synchronously::

    drain (10 × 1 ms reads, results ignored)
    → write 64-byte request (1 s timeout)
    → read 64-byte reply   (1 s timeout)
    → decode

The drain clears interrupt reports still queued from an earlier command
or from device-side eventing, so the reply read next belongs to the
request just written.  Setters use ``send`` instead: the acknowledgment is
discarded by a short drain after the write, which also spaces out
back-to-back writes.

Not thread-safe: one caller per channel.
"""

from __future__ import annotations

import logging
from typing import Tuple

from .constants import (
    DRAIN_AFTER_SEND,
    DRAIN_BEFORE_WRITE,
    DRAIN_TIMEOUT_MS,
    IO_TIMEOUT_MS,
    PACKET_SIZE,
)
from .endpoints import EndpointDescriptor
from .exceptions import TransportError
from .packet import decode, encode
from .transport import UsbTransport

log = logging.getLogger(__name__)


class CommandChannel:
    """Drain/write/read primitive over an interrupt IN/OUT endpoint pair."""

    def __init__(self, transport: UsbTransport,
                 in_endpoint: EndpointDescriptor,
                 out_endpoint: EndpointDescriptor):
        self.transport = transport
        self.in_endpoint = in_endpoint
        self.out_endpoint = out_endpoint

    def drain(self, count: int = DRAIN_BEFORE_WRITE) -> int:
        """Issue up to *count* 1 ms reads, discarding whatever arrives.

        Never raises for transport errors.  Returns the number of stale
        reports that were actually read (for logging only).
        """
        stale = 0
        for _ in range(count):
            try:
                data = self.transport.read(
                    self.in_endpoint.address, PACKET_SIZE, DRAIN_TIMEOUT_MS,
                )
            except TransportError:
                continue
            if data:
                stale += 1
        if stale:
            log.debug("Drained %d stale report(s)", stale)
        return stale

    def _write(self, packet: bytes) -> bytes:
        pkt = encode(packet)
        log.debug("-> %s", pkt[:16].hex(' '))
        self.transport.write(self.out_endpoint.address, pkt, IO_TIMEOUT_MS)
        return pkt

    def exchange(self, packet: bytes) -> Tuple[bytes, int]:
        """Send *packet* and return the decoded reply ``(raw, value)``.

        Raises:
            TransportTimeoutError / TransportIoError: write or read failed.
            UnexpectedHeaderError / MalformedValueError: bad reply.
        """
        self.drain(DRAIN_BEFORE_WRITE)
        self._write(packet)
        resp = self.transport.read(
            self.in_endpoint.address, PACKET_SIZE, IO_TIMEOUT_MS,
        )
        log.debug("<- %s", bytes(resp[:16]).hex(' '))
        return decode(resp)

    def send(self, packet: bytes) -> None:
        """Fire-and-forget write: drain, write, then a short settling drain.

        Only the write can fail; the reply is read and discarded.
        """
        self.drain(DRAIN_BEFORE_WRITE)
        self._write(packet)
        self.drain(DRAIN_AFTER_SEND)
