"""
Plugin Loader.

This module discovers and loads setup plugins.

Key features:
- Discovery of '<key>.civi-setup.py' files in a plugin directory
- Key-ordered (or discovery-ordered) plugin registry
- Caller-supplied override to add, remove or reorder plugins
- importlib integration for loading plugin files
- Provider callables accepted in place of files

A plugin file must define ``register(bus, model)``. It is called once,
after the module is executed, with the EventBus and Model of the run.
"""

import hashlib
import importlib.util
import logging
import re
import sys
from collections.abc import Callable, Mapping
from pathlib import Path
from types import ModuleType
from typing import Any

from civisetup.config.model import Model
from civisetup.core.event_bus import EventBus

PLUGIN_SUFFIX = ".civi-setup.py"

DEFAULT_PLUGIN_DIR = Path(__file__).resolve().parent.parent / "plugins"

_MODULE_PREFIX = "civisetup_plugin_"

PluginCallback = Callable[[dict[str, Any]], Mapping[str, Any]]


class LoaderError(Exception):
    """Raised when a plugin cannot be located or has no register() hook."""

    pass


def plugin_key(file_path: Path) -> str:
    """Derive the plugin key from a file name, e.g. 'hello.civi-setup.py' -> 'hello'."""
    name = Path(file_path).name
    if name.endswith(PLUGIN_SUFFIX):
        return name[: -len(PLUGIN_SUFFIX)]
    return name


def _module_name(key: str) -> str:
    """Build a distinct module name per key; 'a-b' and 'a_b' must not collide."""
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:8]
    safe = re.sub(r'\W', '_', key)
    return f"{_MODULE_PREFIX}{safe}_{digest}"


class PluginLoader:
    """
    Discovers, filters and loads plugins for one setup run.

    Each key is loaded at most once per loader instance.
    """

    def __init__(
        self,
        plugin_dir: Path | None = None,
        sort_keys: bool = True,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize PluginLoader.

        Args:
            plugin_dir: Directory to scan (defaults to the bundled plugins/)
            sort_keys: Order discovered plugins by key; if False, keep
                filesystem discovery order
            logger: Logger for load progress
        """
        self.plugin_dir = Path(plugin_dir) if plugin_dir is not None else DEFAULT_PLUGIN_DIR
        self.sort_keys = sort_keys
        self.log = logger or logging.getLogger(__name__)
        self._modules: dict[str, ModuleType | Callable] = {}

    @property
    def loaded(self) -> list[str]:
        """Keys loaded so far, in load order."""
        return list(self._modules)

    def discover(self, directory: Path | None = None) -> dict[str, Path]:
        """
        Scan a directory for plugin files.

        Args:
            directory: Directory to scan (defaults to self.plugin_dir)

        Returns:
            Mapping of plugin key -> file path. A missing directory yields {}.
        """
        directory = Path(directory) if directory is not None else self.plugin_dir

        if not directory.is_dir():
            self.log.debug("Plugin directory %s does not exist", directory)
            return {}

        found = {
            plugin_key(path): path
            for path in directory.glob(f"*{PLUGIN_SUFFIX}")
            if path.is_file()
        }

        if self.sort_keys:
            found = dict(sorted(found.items()))

        self.log.debug("Discovered %d plugin(s) in %s: %s", len(found), directory, list(found))
        return found

    def apply_override(
        self, discovered: dict[str, Any], callback: PluginCallback | None
    ) -> dict[str, Any]:
        """
        Let the caller replace the plugin mapping.

        Args:
            discovered: Mapping from discover()
            callback: Function receiving a copy of the mapping and returning
                the mapping to load; None keeps the mapping as is

        Raises:
            LoaderError: If callback does not return a mapping
        """
        if callback is None:
            return discovered

        result = callback(dict(discovered))
        if not isinstance(result, Mapping):
            raise LoaderError(
                f"Plugin callback must return a mapping. Got: {type(result).__name__}"
            )
        return dict(result)

    def load(self, plugins: Mapping[str, Any], bus: EventBus, model: Model) -> None:
        """
        Load plugins in mapping order.

        Args:
            plugins: Mapping of key -> plugin file path or provider callable
            bus: EventBus passed to each register()
            model: Model passed to each register()

        Raises:
            LoaderError: If a file is missing or lacks register()
            Exception: Whatever a plugin raises, unchanged; later plugins
                are not loaded
        """
        for key, source in plugins.items():
            if key in self._modules:
                continue

            if callable(source):
                self.log.debug("Registering plugin provider %s", key)
                register = source
                loaded: ModuleType | Callable = source
            else:
                loaded = self._load_module(key, Path(source))
                register = loaded.register

            try:
                register(bus, model)
            except Exception:
                if isinstance(loaded, ModuleType):
                    sys.modules.pop(_module_name(key), None)
                self.log.error("Plugin %s failed to register", key)
                raise

            self._modules[key] = loaded

    def _load_module(self, key: str, file_path: Path) -> ModuleType:
        """
        Execute a plugin file as a module.

        Raises:
            LoaderError: If the file is missing or defines no register()
        """
        if not file_path.is_file():
            raise LoaderError(f"Plugin file not found: {file_path}")

        module_name = _module_name(key)
        spec = importlib.util.spec_from_file_location(module_name, file_path)

        if spec is None or spec.loader is None:
            raise LoaderError(f"Failed to create module spec for {file_path}")

        module = importlib.util.module_from_spec(spec)

        # Add to sys.modules before execution
        sys.modules[module_name] = module

        self.log.debug("Loading plugin %s from %s", key, file_path)
        try:
            spec.loader.exec_module(module)
        except Exception:
            # Clean up sys.modules on failure
            sys.modules.pop(module_name, None)
            self.log.error("Plugin %s failed to load from %s", key, file_path)
            raise

        register = getattr(module, "register", None)
        if not callable(register):
            sys.modules.pop(module_name, None)
            raise LoaderError(f"Plugin {key} ({file_path}) does not define register(bus, model)")

        return module
