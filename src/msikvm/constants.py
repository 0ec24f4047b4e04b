"""Shared constants for the MSI monitor USB protocol.

Byte values captured from the monitor's vendor command set
(USB interrupt endpoints, 64-byte reports).
"""

# =========================================================================
# USB identity
# =========================================================================

# usb.idVendor == 0x1462 && usb.idProduct == 0x3fa4
MSI_VID = 0x1462
MSI_PID = 0x3FA4

# =========================================================================
# Packet layout
# =========================================================================

# Every report, in or out, is exactly this long (zero-padded)
PACKET_SIZE = 64

# Monitor index; increments when several of these monitors are chained
MONITOR_INDEX = 0x01

# byte[1] of every request and of every valid reply
HEADER = 0x35

# byte[2] access marker
ACCESS_READ = 0x38   # '8'
ACCESS_WRITE = 0x62  # 'b'

# Command terminator (carriage return)
TERMINATOR = 0x0D

# ASCII '0', base for the payload digit and the write padding
ASCII_ZERO = 0x30

# Feature addresses (bytes[3:8], ASCII)
FEATURE_INPUT = b"00500"
FEATURE_KVM = b"008>0"

# Offset of the payload digit in a write request
PAYLOAD_INDEX = 10

# Reply value: 3 ASCII digits ending at byte[10], terminator at byte[11]
RETURN_VALUE_NUM = 3
VALUE_END_INDEX = 10
VALUE_START_INDEX = VALUE_END_INDEX - (RETURN_VALUE_NUM - 1)

# =========================================================================
# Timing
# =========================================================================

# Write / authoritative read timeout (ms)
IO_TIMEOUT_MS = 1000

# Timeout for each non-blocking drain read (ms)
DRAIN_TIMEOUT_MS = 1

# Drain reads before a write, and after a fire-and-forget write
DRAIN_BEFORE_WRITE = 10
DRAIN_AFTER_SEND = 5

# Device enumeration retry (slow enumeration after hot-plug)
FIND_ATTEMPTS = 3
FIND_RETRY_DELAY_S = 0.200
