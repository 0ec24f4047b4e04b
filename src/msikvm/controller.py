"""Input source / KVM port operations on top of a command channel."""

from __future__ import annotations

import logging

from .channel import CommandChannel
from .packet import CommandBuilder

log = logging.getLogger(__name__)


class MonitorController:
    """The four monitor operations.

    Positions are expected in 0-9; the wire encoding is ``'0' + position``,
    so anything larger turns into a non-digit symbol.  Channel errors
    propagate unchanged and nothing is retried here.
    """

    def __init__(self, channel: CommandChannel):
        self.channel = channel

    def get_input(self) -> int:
        """Active input source index."""
        _, value = self.channel.exchange(CommandBuilder.get_input())
        return value

    def get_kvm(self) -> int:
        """Active KVM (USB upstream) port index."""
        _, value = self.channel.exchange(CommandBuilder.get_kvm())
        return value

    def set_input(self, position: int) -> None:
        log.debug("set_input(%d)", position)
        self.channel.send(CommandBuilder.set_input(position))

    def set_kvm(self, position: int) -> None:
        log.debug("set_kvm(%d)", position)
        self.channel.send(CommandBuilder.set_kvm(position))
