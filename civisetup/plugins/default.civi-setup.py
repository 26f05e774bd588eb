"""
Fill in model defaults that every host environment shares.

Runs early in the init phase so host-specific plugins see the defaults.
"""

from pathlib import Path

from civisetup.core.event_bus import PRIORITY_PREPARE
from civisetup.core.events import phase_name
from civisetup.core.lifecycle import Setup

Setup.assert_running()


def register(bus, model):
    bus.on(phase_name("init"), PRIORITY_PREPARE, apply_defaults)


def apply_defaults(event):
    model = event.model
    if not model.lang:
        model.lang = "en_US"
    if not model.setup_path:
        model.setup_path = str(Path(__file__).resolve().parent.parent)
