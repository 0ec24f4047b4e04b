"""Tests for VID:PID lookup with hot-plug retry."""

from unittest.mock import MagicMock, patch

import pytest
import usb.core

from msikvm.constants import FIND_RETRY_DELAY_S, MSI_PID, MSI_VID
from msikvm.exceptions import TransportIoError
from msikvm.locator import DeviceIdentity, find, is_connected


def _dev(vid=MSI_VID, pid=MSI_PID):
    return MagicMock(idVendor=vid, idProduct=pid)


class FakeBus:
    """usb.core.find replacement whose device list appears at a given time."""

    def __init__(self, devices, appears_at=0.0):
        self.devices = devices
        self.appears_at = appears_at
        self.now = 0.0
        self.scans = 0

    def find(self, find_all=False):
        self.scans += 1
        return list(self.devices) if self.now >= self.appears_at else []

    def sleep(self, seconds):
        self.now += seconds


class TestDeviceIdentity:

    def test_defaults(self):
        ident = DeviceIdentity()
        assert (ident.vendor_id, ident.product_id) == (0x1462, 0x3FA4)
        assert str(ident) == "1462:3fa4"

    def test_parse(self):
        assert DeviceIdentity.parse("1462:3FA4") == DeviceIdentity()
        assert DeviceIdentity.parse(" 046d:c52b ") == DeviceIdentity(0x046D, 0xC52B)

    @pytest.mark.parametrize("text", ["1462", "1462:3fa4:1", "zz:3fa4", "10000:0001", ""])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            DeviceIdentity.parse(text)

    def test_hashable(self):
        assert len({DeviceIdentity(), DeviceIdentity.parse("1462:3fa4")}) == 1


class TestFind:

    def test_found_first_attempt(self):
        target = _dev()
        bus = FakeBus([_dev(0x046D, 0xC52B), target])
        with patch("msikvm.locator.usb.core.find", bus.find), \
             patch("msikvm.locator.time.sleep", bus.sleep):
            assert find(MSI_VID, MSI_PID) is target
        assert bus.scans == 1
        assert bus.now == 0.0

    def test_appears_after_250ms(self):
        """Third attempt (t=400 ms) sees a device that enumerated at 250 ms."""
        target = _dev()
        bus = FakeBus([target], appears_at=0.25)
        with patch("msikvm.locator.usb.core.find", bus.find), \
             patch("msikvm.locator.time.sleep", bus.sleep):
            assert find(MSI_VID, MSI_PID) is target
        assert bus.scans == 3
        assert bus.now == pytest.approx(2 * FIND_RETRY_DELAY_S)

    def test_absent_returns_none_without_trailing_sleep(self):
        bus = FakeBus([_dev(0x046D, 0xC52B)])
        sleep = MagicMock(side_effect=bus.sleep)
        with patch("msikvm.locator.usb.core.find", bus.find), \
             patch("msikvm.locator.time.sleep", sleep):
            assert find(MSI_VID, MSI_PID) is None
        assert bus.scans == 3
        assert sleep.call_count == 2
        sleep.assert_called_with(FIND_RETRY_DELAY_S)

    def test_custom_attempts(self):
        bus = FakeBus([])
        with patch("msikvm.locator.usb.core.find", bus.find), \
             patch("msikvm.locator.time.sleep", bus.sleep):
            assert find(MSI_VID, MSI_PID, attempts=1) is None
        assert bus.scans == 1
        assert bus.now == 0.0

    def test_vid_and_pid_must_both_match(self):
        bus = FakeBus([_dev(MSI_VID, 0x0001), _dev(0x0001, MSI_PID)])
        with patch("msikvm.locator.usb.core.find", bus.find), \
             patch("msikvm.locator.time.sleep", bus.sleep):
            assert find(MSI_VID, MSI_PID) is None

    def test_enumeration_error(self):
        with patch("msikvm.locator.usb.core.find",
                   side_effect=usb.core.NoBackendError("No backend available")), \
             patch("msikvm.locator.time.sleep") as sleep:
            with pytest.raises(TransportIoError, match="enumeration"):
                find(MSI_VID, MSI_PID)
        sleep.assert_not_called()


class TestIsConnected:

    def test_connected(self):
        with patch("msikvm.locator.usb.core.find", return_value=[_dev()]):
            assert is_connected(MSI_VID, MSI_PID) is True

    def test_single_pass_no_sleep(self):
        with patch("msikvm.locator.usb.core.find", return_value=[]) as f, \
             patch("msikvm.locator.time.sleep") as sleep:
            assert is_connected(MSI_VID, MSI_PID) is False
        f.assert_called_once_with(find_all=True)
        sleep.assert_not_called()

    def test_enumeration_error(self):
        with patch("msikvm.locator.usb.core.find",
                   side_effect=usb.core.USBError("Access denied")):
            with pytest.raises(TransportIoError):
                is_connected(MSI_VID, MSI_PID)
