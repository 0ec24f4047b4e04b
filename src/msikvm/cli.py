#!/usr/bin/env python3
"""
msikvm - Command Line Interface

Entry point for the msikvm package.
"""

import argparse
import logging
import sys

from msikvm.__version__ import __version__


def _setup_logging(verbose=0):
    """Configure logging based on verbosity (pyusb's own logger kept quiet)."""
    if verbose >= 2:
        logging.basicConfig(level=logging.DEBUG, format='[%(levelname)s] %(name)s: %(message)s')
    elif verbose == 1:
        logging.basicConfig(level=logging.INFO, format='[%(levelname)s] %(message)s')
        logging.getLogger('usb').setLevel(logging.WARNING)
    else:
        logging.basicConfig(level=logging.WARNING)
        logging.getLogger('usb').setLevel(logging.WARNING)


def _position(value):
    """argparse type for an input/KVM position (single digit)."""
    try:
        pos = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not 0 <= pos <= 9:
        raise argparse.ArgumentTypeError(f"position must be 0-9, got {pos}")
    return pos


def _identity(value):
    """argparse type for a VID:PID pair."""
    from msikvm.locator import DeviceIdentity

    try:
        return DeviceIdentity.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="msikvm",
        description="Switch MSI monitor input source and KVM port over USB",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    msikvm detect             Check whether the monitor is connected
    msikvm status             Show active input and KVM port
    msikvm set-input 2        Switch to input 2
    msikvm set-kvm 1          Hand the KVM to upstream port 1
    msikvm select 1462:3fa4   Remember a different monitor VID:PID
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v, -vv)"
    )
    parser.add_argument(
        "--device", "-d",
        type=_identity,
        help="Monitor VID:PID in hex (default: saved device or 1462:3fa4)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("detect", help="Check whether the monitor is connected")
    subparsers.add_parser("status", help="Show active input and KVM port")
    subparsers.add_parser("get-input", help="Print active input source")
    subparsers.add_parser("get-kvm", help="Print active KVM port")

    set_input_parser = subparsers.add_parser("set-input", help="Switch input source")
    set_input_parser.add_argument("position", type=_position, help="Input position (0-9)")

    set_kvm_parser = subparsers.add_parser("set-kvm", help="Switch KVM port")
    set_kvm_parser.add_argument("position", type=_position, help="KVM position (0-9)")

    select_parser = subparsers.add_parser("select", help="Save the default monitor VID:PID")
    select_parser.add_argument("identity", type=_identity, help="VID:PID in hex, e.g. 1462:3fa4")

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _setup_logging(args.verbose)

    from msikvm.conf import get_default_identity
    identity = args.device or get_default_identity()

    if args.command == "detect":
        return detect(identity)
    elif args.command == "status":
        return status(identity)
    elif args.command == "get-input":
        return get_value(identity, "input")
    elif args.command == "get-kvm":
        return get_value(identity, "kvm")
    elif args.command == "set-input":
        return set_value(identity, "input", args.position)
    elif args.command == "set-kvm":
        return set_value(identity, "kvm", args.position)
    elif args.command == "select":
        return select_device(args.identity)

    return 0


def detect(identity):
    """Report whether the monitor is attached."""
    from msikvm.device import is_connected
    from msikvm.exceptions import MonitorError

    try:
        if is_connected(identity.vendor_id, identity.product_id):
            print(f"Connected: MSI monitor [{identity}]")
            return 0
        print(f"No monitor [{identity}] detected.")
        return 1
    except MonitorError as e:
        print(f"Error: {e}")
        return 1


def status(identity):
    """Print active input and KVM port."""
    from msikvm.device import MsiMonitor
    from msikvm.exceptions import MonitorError

    try:
        with MsiMonitor.open(identity.vendor_id, identity.product_id) as mon:
            print(f"Monitor: [{identity}]")
            print(f"  Input: {mon.get_input()}")
            print(f"  KVM:   {mon.get_kvm()}")
        return 0
    except MonitorError as e:
        print(f"Error: {e}")
        return 1


def get_value(identity, what):
    """Print one property ('input' or 'kvm')."""
    from msikvm.device import MsiMonitor
    from msikvm.exceptions import MonitorError

    try:
        with MsiMonitor.open(identity.vendor_id, identity.product_id) as mon:
            value = mon.get_input() if what == "input" else mon.get_kvm()
        print(value)
        return 0
    except MonitorError as e:
        print(f"Error: {e}")
        return 1


def set_value(identity, what, position):
    """Switch one property ('input' or 'kvm') to *position*."""
    from msikvm.device import MsiMonitor
    from msikvm.exceptions import MonitorError

    try:
        with MsiMonitor.open(identity.vendor_id, identity.product_id) as mon:
            if what == "input":
                mon.set_input(position)
            else:
                mon.set_kvm(position)
        print(f"{what} -> {position}")
        return 0
    except MonitorError as e:
        print(f"Error: {e}")
        return 1


def select_device(identity):
    """Persist the default monitor identity."""
    from msikvm.conf import CONFIG_PATH, save_default_identity

    try:
        save_default_identity(identity)
    except OSError as e:
        print(f"Error: {e}")
        return 1
    print(f"Selected: [{identity}] (saved to {CONFIG_PATH})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
