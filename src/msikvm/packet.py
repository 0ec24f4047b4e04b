#!/usr/bin/env python3
"""
Packet codec for the MSI monitor command protocol.

All traffic is fixed 64-byte interrupt reports.  Requests are short ASCII
commands padded with zeros; replies carry a 3-digit ASCII value.

Request layout::

    [0]    0x01        monitor index
    [1]    0x35        header
    [2]    '8' / 'b'   read / write
    [3:8]  feature     ASCII feature address ("00500" input, "008>0" KVM)
    [8:11] '0' '0' d   write payload (d = '0' + position), writes only
    [..]   0x0D        terminator

Reply layout::

    [0]     monitor index
    [1]     0x35 header
    [2:8]   echo of access marker + feature address (not checked)
    [8:11]  ASCII decimal value, 3 digits
    [11]    0x0D
"""

from __future__ import annotations

from typing import Iterable, Tuple

from .constants import (
    ACCESS_READ,
    ACCESS_WRITE,
    ASCII_ZERO,
    FEATURE_INPUT,
    FEATURE_KVM,
    HEADER,
    MONITOR_INDEX,
    PACKET_SIZE,
    TERMINATOR,
    VALUE_END_INDEX,
    VALUE_START_INDEX,
)
from .exceptions import MalformedValueError, UnexpectedHeaderError


def encode(data: Iterable[int]) -> bytes:
    """Copy *data* into a zeroed 64-byte packet.

    Input longer than 64 bytes is silently truncated.
    """
    buf = bytearray(PACKET_SIZE)
    raw = bytes(data)[:PACKET_SIZE]
    buf[:len(raw)] = raw
    return bytes(buf)


def decode(buf: Iterable[int]) -> Tuple[bytes, int]:
    """Validate a reply and extract its numeric value.

    Returns ``(raw_packet, value)`` where *raw_packet* is the full 64-byte
    reply.  Short replies are zero-padded first, so a truncated value field
    fails as malformed.

    Raises:
        UnexpectedHeaderError: byte[1] is not 0x35.
        MalformedValueError: bytes[8:11] are not three ASCII digits.
    """
    resp = encode(buf)

    if resp[1] != HEADER:
        raise UnexpectedHeaderError(resp[1], resp)

    raw_value = resp[VALUE_START_INDEX:VALUE_END_INDEX + 1]
    if not raw_value.isdigit():
        raise MalformedValueError(raw_value, resp)

    return resp, int(raw_value.decode('ascii'))


class CommandBuilder:
    """Builds the request packets for the supported features."""

    @staticmethod
    def read_request(feature: bytes) -> bytes:
        """Build a read request for *feature*.

        Packet: [0x01, 0x35, '8', feature[5], 0x0D] + zero padding.
        """
        return encode(
            bytes([MONITOR_INDEX, HEADER, ACCESS_READ])
            + feature
            + bytes([TERMINATOR])
        )

    @staticmethod
    def write_request(feature: bytes, position: int) -> bytes:
        """Build a write request setting *feature* to *position*.

        Packet: [0x01, 0x35, 'b', feature[5], '0', '0', '0'+position, 0x0D].

        *position* is expected to be 0-9; larger values encode as a
        non-digit symbol and are passed through unchecked.

        Raises:
            ValueError: If ``0x30 + position`` does not fit in a byte.
        """
        payload = ASCII_ZERO + position
        if position < 0 or payload > 0xFF:
            raise ValueError(f"position out of byte range: {position}")
        return encode(
            bytes([MONITOR_INDEX, HEADER, ACCESS_WRITE])
            + feature
            + bytes([ASCII_ZERO, ASCII_ZERO, payload, TERMINATOR])
        )

    # -- Fixed command templates ------------------------------------------

    @classmethod
    def get_input(cls) -> bytes:
        return cls.read_request(FEATURE_INPUT)

    @classmethod
    def get_kvm(cls) -> bytes:
        return cls.read_request(FEATURE_KVM)

    @classmethod
    def set_input(cls, position: int) -> bytes:
        return cls.write_request(FEATURE_INPUT, position)

    @classmethod
    def set_kvm(cls, position: int) -> bytes:
        return cls.write_request(FEATURE_KVM, position)
