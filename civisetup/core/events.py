"""
Phase Events - Typed result carriers for each lifecycle phase.

One event object is created per phase invocation, passed by reference to
every listener, and returned to the caller. Listeners record results on it
(authorization, requirement messages, installed flags, form controller).
"""

from dataclasses import dataclass
from typing import Any

from civisetup.config.model import Model

NAMESPACE = "civi.setup"

LEVEL_ERROR = "error"
LEVEL_WARNING = "warning"
LEVEL_INFO = "info"

_LEVELS = (LEVEL_ERROR, LEVEL_WARNING, LEVEL_INFO)


def phase_name(phase: str) -> str:
    """Qualify a bare phase name, e.g. 'init' -> 'civi.setup.init'."""
    return f"{NAMESPACE}.{phase}"


class SetupEvent:
    """
    Base class for all phase events.

    Attributes:
        model: The shared configuration model of the run
    """

    phase = ""

    def __init__(self, model: Model):
        self.model = model
        self._propagation_stopped = False

    def stop_propagation(self) -> None:
        """
        Skip the remaining lower-priority listeners of this dispatch.

        None of the built-in phases depend on this; it is an opt-in for
        plugins that coordinate explicitly.
        """
        self._propagation_stopped = True

    def is_propagation_stopped(self) -> bool:
        return self._propagation_stopped

    def __repr__(self) -> str:
        return f"{type(self).__name__}(phase={self.phase!r})"


class InitEvent(SetupEvent):
    """Fired once per Setup.init(), after all plugins are loaded."""

    phase = "init"


class CheckAuthorizedEvent(SetupEvent):
    """Determine whether the current CMS user may perform installation."""

    phase = "checkAuthorized"

    def __init__(self, model: Model):
        super().__init__(model)
        self.authorized = False

    def is_authorized(self) -> bool:
        return self.authorized

    def set_authorized(self, authorized: bool) -> None:
        self.authorized = bool(authorized)


@dataclass
class RequirementMessage:
    """
    A single finding recorded during a requirements check.

    Attributes:
        section: Grouping, e.g. 'system' or 'database'
        name: Identifier of the check
        message: Human-readable text
        level: One of 'error', 'warning', 'info'
    """

    section: str
    name: str
    message: str
    level: str


class CheckRequirementsEvent(SetupEvent):
    """Determine whether the local environment meets system requirements."""

    phase = "checkRequirements"

    def __init__(self, model: Model):
        super().__init__(model)
        self.messages: list[RequirementMessage] = []

    def add_message(self, level: str, section: str, name: str, message: str) -> None:
        """
        Record a requirement finding.

        Raises:
            ValueError: If level is not error, warning or info
        """
        if level not in _LEVELS:
            raise ValueError(f"Unknown message level {level!r}; expected one of {_LEVELS}")
        self.messages.append(
            RequirementMessage(section=section, name=name, message=message, level=level)
        )

    def add_error(self, section: str, name: str, message: str) -> None:
        self.add_message(LEVEL_ERROR, section, name, message)

    def add_warning(self, section: str, name: str, message: str) -> None:
        self.add_message(LEVEL_WARNING, section, name, message)

    def add_info(self, section: str, name: str, message: str) -> None:
        self.add_message(LEVEL_INFO, section, name, message)

    def get_messages(self) -> list[RequirementMessage]:
        return list(self.messages)

    def get_errors(self) -> list[RequirementMessage]:
        return [m for m in self.messages if m.level == LEVEL_ERROR]

    def get_warnings(self) -> list[RequirementMessage]:
        return [m for m in self.messages if m.level == LEVEL_WARNING]

    def get_infos(self) -> list[RequirementMessage]:
        return [m for m in self.messages if m.level == LEVEL_INFO]


class CheckInstalledEvent(SetupEvent):
    """
    Determine whether the settings and/or schema are already installed.

    Both flags start as None, meaning no listener has checked.
    """

    phase = "checkInstalled"

    def __init__(self, model: Model):
        super().__init__(model)
        self.setting_installed: bool | None = None
        self.database_installed: bool | None = None

    def is_setting_installed(self) -> bool | None:
        return self.setting_installed

    def set_setting_installed(self, installed: bool) -> None:
        self.setting_installed = bool(installed)

    def is_database_installed(self) -> bool | None:
        return self.database_installed

    def set_database_installed(self, installed: bool) -> None:
        self.database_installed = bool(installed)


class InstallSettingsEvent(SetupEvent):
    """Create the settings file."""

    phase = "installSettings"


class InstallSchemaEvent(SetupEvent):
    """Create the database schema."""

    phase = "installSchema"


class UninstallSettingsEvent(SetupEvent):
    """Remove the settings file."""

    phase = "uninstallSettings"


class UninstallSchemaEvent(SetupEvent):
    """Remove the database schema."""

    phase = "uninstallSchema"


class CreateFormEvent(SetupEvent):
    """
    Create a page-controller for a web-based installation form.

    A listener supplies the controller object through set_ctrl(); the core
    never inspects it.
    """

    phase = "createForm"

    def __init__(self, model: Model):
        super().__init__(model)
        self.ctrl: Any = None

    def get_ctrl(self) -> Any:
        return self.ctrl

    def set_ctrl(self, ctrl: Any) -> None:
        self.ctrl = ctrl
