"""Config persistence for msikvm.

Config is stored at ~/.config/msikvm/config.json (XDG-compliant).

Usage:
    from msikvm.conf import get_default_identity, save_default_identity

    identity = get_default_identity()   # DeviceIdentity(0x1462, 0x3fa4) unless overridden

The ``MSIKVM_DEVICE`` environment variable (``VID:PID`` in hex) overrides
the saved device.
"""
from __future__ import annotations

import json
import logging
import os

from .locator import DeviceIdentity

log = logging.getLogger(__name__)

# =========================================================================
# Config file location (XDG-compliant)
# =========================================================================

_XDG_CONFIG = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
CONFIG_DIR = os.path.join(_XDG_CONFIG, 'msikvm')
CONFIG_PATH = os.path.join(CONFIG_DIR, 'config.json')

DEVICE_ENV_VAR = 'MSIKVM_DEVICE'


# =========================================================================
# Low-level config persistence
# =========================================================================

def load_config() -> dict:
    """Load user config from disk. Returns empty dict on missing/corrupt file."""
    try:
        with open(CONFIG_PATH, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return config if isinstance(config, dict) else {}


def save_config(config: dict):
    """Save user config to disk."""
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_PATH, 'w') as f:
        json.dump(config, f, indent=2)


# =========================================================================
# Default device
# =========================================================================

def get_default_identity() -> DeviceIdentity:
    """Device to talk to: $MSIKVM_DEVICE, then config, then the MSI default."""
    env = os.environ.get(DEVICE_ENV_VAR)
    if env:
        try:
            return DeviceIdentity.parse(env)
        except ValueError:
            log.warning("Ignoring invalid %s=%r", DEVICE_ENV_VAR, env)

    saved = load_config().get('device')
    if isinstance(saved, str):
        try:
            return DeviceIdentity.parse(saved)
        except ValueError:
            log.warning("Ignoring invalid device %r in %s", saved, CONFIG_PATH)
    return DeviceIdentity()


def save_default_identity(identity: DeviceIdentity):
    """Persist the default device as ``VID:PID``."""
    config = load_config()
    config['device'] = str(identity)
    save_config(config)
