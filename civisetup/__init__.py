"""
civisetup - Plugin-driven installer core for embedding an application in a CMS.

This is the main package that exports the public API:

    import civisetup

    setup = civisetup.init({'src_path': '/var/www/app', 'cms': 'WordPress'})
    if setup.check_authorized().is_authorized():
        setup.install_settings()
"""

__version__ = "0.1.0"

import logging

from civisetup.core.event_bus import (
    PRIORITY_END,
    PRIORITY_LATE,
    PRIORITY_MAIN,
    PRIORITY_PREPARE,
    PRIORITY_START,
    EventBus,
)
from civisetup.core.lifecycle import (
    PROTOCOL,
    InitError,
    NotInitializedError,
    Setup,
    SetupError,
    init,
    instance,
)
from civisetup.config.model import Model

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "PROTOCOL",
    "PRIORITY_START",
    "PRIORITY_PREPARE",
    "PRIORITY_MAIN",
    "PRIORITY_LATE",
    "PRIORITY_END",
    "EventBus",
    "Model",
    "Setup",
    "SetupError",
    "NotInitializedError",
    "InitError",
    "init",
    "instance",
]
