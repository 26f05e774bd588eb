"""
Setup Lifecycle - Entry point of an installation run.

Setup.init() builds the model, the event bus and the plugin set, then fires
the init phase. Each phase method builds a typed event, dispatches it, and
returns it for inspection:

    setup = Setup.init({'src_path': '/var/www/app', 'cms': 'Backdrop'})
    reqs = setup.check_requirements()
    if not reqs.get_errors():
        setup.install_settings()
        setup.install_schema()

The facade holds no business logic; the order of phases is the caller's
concern. The handle returned by init() can be passed around explicitly;
Setup.instance() is a convenience lookup of the most recent one.
"""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from civisetup.config.model import Model
from civisetup.core.event_bus import EventBus
from civisetup.core.events import (
    CheckAuthorizedEvent,
    CheckInstalledEvent,
    CheckRequirementsEvent,
    CreateFormEvent,
    InitEvent,
    InstallSchemaEvent,
    InstallSettingsEvent,
    SetupEvent,
    UninstallSchemaEvent,
    UninstallSettingsEvent,
    phase_name,
)
from civisetup.plugin.loader import PluginCallback, PluginLoader

PROTOCOL = "1.0"


class SetupError(Exception):
    """Base exception for setup lifecycle errors."""

    pass


class NotInitializedError(SetupError):
    """Raised when the setup handle is used before Setup.init()."""

    pass


class InitError(SetupError):
    """Raised when an application expects an incompatible protocol."""

    pass


# Most recent handle built by Setup.init()
_instance: "Setup | None" = None

# Set once Setup.init() has started; plugin files check it at import
_running = False


class Setup:
    """
    Facade over one installation run.

    Attributes:
        model: Shared configuration model
        dispatcher: EventBus holding every plugin listener
        log: Logger used by the core and available to plugins
    """

    def __init__(
        self,
        model: Model,
        dispatcher: EventBus,
        logger: logging.Logger | None = None,
        loader: PluginLoader | None = None,
    ):
        self.model = model
        self.dispatcher = dispatcher
        self.log = logger or logging.getLogger("civisetup")
        self.loader = loader

    # ----- Static initialization -----

    @classmethod
    def init(
        cls,
        model_values: Mapping[str, Any] | None = None,
        plugin_callback: PluginCallback | None = None,
        logger: logging.Logger | None = None,
        plugin_dir: Path | None = None,
    ) -> "Setup":
        """
        Load plugins and fire the init phase.

        Args:
            model_values: Initial model values. Recommended: 'src_path', 'cms'
            plugin_callback: Function which manipulates the plugin mapping,
                e.g. {'hello': Path('/srv/plugins/hello.civi-setup.py')}.
                Use it to add, remove or reorder plugins.
            logger: Logger for the run; defaults to the 'civisetup' logger
            plugin_dir: Directory to scan instead of the bundled plugins/

        Returns:
            The new handle, which also becomes Setup.instance()

        Raises:
            Exception: Any error raised while loading a plugin, unchanged.
                The previous handle stays in place.
        """
        global _instance, _running

        log = logger or logging.getLogger("civisetup")
        model = Model(model_values)
        dispatcher = EventBus()
        loader = PluginLoader(plugin_dir, logger=log)
        setup = cls(model, dispatcher, log, loader)

        # Plugins may reach the new handle through Setup.instance() while loading
        previous, was_running = _instance, _running
        _instance, _running = setup, True
        try:
            plugins = loader.apply_override(loader.discover(), plugin_callback)
            loader.load(plugins, dispatcher, model)
        except Exception:
            _instance, _running = previous, was_running
            raise
        log.debug("Loaded plugins: %s", loader.loaded)

        setup._dispatch(InitEvent(model))
        return setup

    @classmethod
    def instance(cls) -> "Setup":
        """
        Return the handle built by the most recent Setup.init().

        Raises:
            NotInitializedError: If Setup.init() has not been called
        """
        if _instance is None:
            raise NotInitializedError("Setup.init() must be called before Setup.instance()")
        return _instance

    @staticmethod
    def assert_running() -> None:
        """
        Ensure plugin code runs inside an installer.

        Raises:
            NotInitializedError: If Setup.init() has never been called
        """
        if not _running:
            raise NotInitializedError("Installation plugins must only be loaded by the installer.")

    @staticmethod
    def assert_protocol_compatibility(expected_version: str) -> None:
        """
        Ensure the core speaks a protocol the application understands.

        Raises:
            InitError: If PROTOCOL is older than expected_version, or has a
                newer major version
        """
        actual = _parse_version(PROTOCOL)
        expected = _parse_version(expected_version)

        if actual < expected:
            raise InitError(
                f"civisetup is running protocol v{PROTOCOL}. This application "
                f"expects civisetup to support protocol v{expected_version}."
            )
        if actual[0] > expected[0]:
            raise InitError(
                f"civisetup is running protocol v{PROTOCOL}. This application "
                f"requires the older protocol v{expected_version}."
            )

    # ----- Logic -----

    def _dispatch(self, event: SetupEvent) -> SetupEvent:
        name = phase_name(event.phase)
        self.log.debug("Dispatching %s", name)
        return self.dispatcher.dispatch(name, event)

    def check_authorized(self) -> CheckAuthorizedEvent:
        """Determine whether the current CMS user may perform installation."""
        return self._dispatch(CheckAuthorizedEvent(self.model))

    def check_requirements(self) -> CheckRequirementsEvent:
        """Determine whether the local environment meets system requirements."""
        return self._dispatch(CheckRequirementsEvent(self.model))

    def check_installed(self) -> CheckInstalledEvent:
        """Determine whether the settings and/or schema are already installed."""
        return self._dispatch(CheckInstalledEvent(self.model))

    def install_settings(self) -> InstallSettingsEvent:
        return self._dispatch(InstallSettingsEvent(self.model))

    def install_schema(self) -> InstallSchemaEvent:
        return self._dispatch(InstallSchemaEvent(self.model))

    def uninstall_settings(self) -> UninstallSettingsEvent:
        return self._dispatch(UninstallSettingsEvent(self.model))

    def uninstall_schema(self) -> UninstallSchemaEvent:
        return self._dispatch(UninstallSchemaEvent(self.model))

    def create_form(self) -> CreateFormEvent:
        """Create a page-controller for a web-based installation form."""
        return self._dispatch(CreateFormEvent(self.model))

    # ----- Accessors -----

    @property
    def plugins(self) -> list[str]:
        """Keys of the plugins loaded for this run."""
        return self.loader.loaded if self.loader is not None else []


def _parse_version(version: str) -> tuple[int, ...]:
    """Parse a dotted version, padding to major.minor."""
    try:
        parts = [int(x) for x in version.split(".")]
    except ValueError as e:
        raise InitError(f"Invalid protocol version: {version!r}") from e
    parts.extend([0] * (2 - len(parts)))
    return tuple(parts)


def init(
    model_values: Mapping[str, Any] | None = None,
    plugin_callback: PluginCallback | None = None,
    logger: logging.Logger | None = None,
    plugin_dir: Path | None = None,
) -> Setup:
    """Shorthand for Setup.init()."""
    return Setup.init(model_values, plugin_callback, logger, plugin_dir)


def instance() -> Setup:
    """Shorthand for Setup.instance()."""
    return Setup.instance()


def _reset() -> None:
    """Forget the process-wide handle (test support)."""
    global _instance, _running
    _instance = None
    _running = False
