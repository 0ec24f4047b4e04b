"""Tests for MonitorController against mocked and simulated transports."""

import pytest

from msikvm.channel import CommandChannel
from msikvm.constants import DRAIN_BEFORE_WRITE, FEATURE_INPUT, FEATURE_KVM, PAYLOAD_INDEX
from msikvm.controller import MonitorController
from msikvm.endpoints import Direction, EndpointDescriptor, TransferType
from msikvm.exceptions import TransportTimeoutError, UnexpectedHeaderError
from msikvm.packet import CommandBuilder
from usb_fakes import SimulatedMonitor, make_mock_transport, make_reply

EP_IN = EndpointDescriptor(1, 0, 0, 0x81, Direction.IN, TransferType.INTERRUPT)
EP_OUT = EndpointDescriptor(1, 0, 0, 0x02, Direction.OUT, TransferType.INTERRUPT)


def _controller(transport):
    return MonitorController(CommandChannel(transport, EP_IN, EP_OUT))


class TestMonitorControllerMocked:
    """Which packet each operation puts on the wire."""

    def _with_reply(self, value):
        t = make_mock_transport()
        t.read.side_effect = [TransportTimeoutError("t")] * DRAIN_BEFORE_WRITE + [make_reply(value)]
        return _controller(t), t

    def test_get_input(self):
        ctl, t = self._with_reply(b'003')
        assert ctl.get_input() == 3
        assert t.write.call_args[0][1] == CommandBuilder.get_input()

    def test_get_kvm(self):
        ctl, t = self._with_reply(b'001')
        assert ctl.get_kvm() == 1
        assert t.write.call_args[0][1] == CommandBuilder.get_kvm()

    def test_set_input_payload(self):
        t = make_mock_transport()
        _controller(t).set_input(3)
        assert t.write.call_args[0][1][PAYLOAD_INDEX] == 0x33

    def test_set_kvm_payload(self):
        t = make_mock_transport()
        _controller(t).set_kvm(9)
        pkt = t.write.call_args[0][1]
        assert pkt[3:8] == FEATURE_KVM
        assert pkt[PAYLOAD_INDEX] == 0x39

    def test_setters_return_none(self):
        t = make_mock_transport()
        assert _controller(t).set_input(1) is None

    def test_errors_propagate_unchanged(self):
        t = make_mock_transport()
        t.read.side_effect = (
            [TransportTimeoutError("t")] * DRAIN_BEFORE_WRITE
            + [make_reply(b'003', header=0x00)]
        )
        with pytest.raises(UnexpectedHeaderError) as exc:
            _controller(t).get_input()
        assert exc.value.header == 0x00

    def test_no_retry_on_failure(self):
        t = make_mock_transport()
        t.write.side_effect = TransportTimeoutError("write timed out")
        with pytest.raises(TransportTimeoutError):
            _controller(t).get_kvm()
        assert t.write.call_count == 1


class TestMonitorControllerSimulated:
    """Write-then-confirm against an in-memory monitor."""

    def test_set_then_get_input(self):
        mon = SimulatedMonitor()
        ctl = _controller(mon)
        ctl.set_input(2)
        assert ctl.get_input() == 2
        assert mon.state[FEATURE_INPUT] == 2

    def test_set_then_get_kvm(self):
        mon = SimulatedMonitor()
        ctl = _controller(mon)
        ctl.set_kvm(1)
        assert ctl.get_kvm() == 1
        assert ctl.get_input() == 0

    def test_back_to_back_setters(self):
        """Each setter's ack is drained, so the next read is not confused."""
        mon = SimulatedMonitor()
        ctl = _controller(mon)
        ctl.set_input(4)
        ctl.set_kvm(2)
        assert ctl.get_input() == 4
        assert ctl.get_kvm() == 2
        assert mon.queue == []

    def test_stale_reports_before_read(self):
        stale = [make_reply(b'777', feature=FEATURE_KVM)] * 4
        mon = SimulatedMonitor(stale=stale)
        ctl = _controller(mon)
        assert ctl.get_kvm() == 0
