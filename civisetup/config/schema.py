"""
Model Field Declarations.

This module declares the well-known fields of the setup model:
- Field type and default value
- Human-readable description (used as a comment in generated TOML)

Declarations document conventions shared by plugins; they are not
enforced on write.
"""

import copy
from dataclasses import dataclass
from typing import Any


class SchemaError(Exception):
    """Raised when a field declaration is malformed."""

    pass


@dataclass
class ConfigField:
    """
    Represents a declared model field.

    Attributes:
        type_: The conventional type of the field value
        default: Default value for the field (None means unset)
        description: Human-readable description
    """

    type_: type
    default: Any = None
    description: str = ""

    def __post_init__(self):
        """Validate field definition."""
        if not isinstance(self.type_, type):
            raise SchemaError(f"Field type must be a type. Got: {self.type_!r}")

        if self.default is not None and not isinstance(self.default, self.type_):
            raise SchemaError(
                f"Default value {self.default!r} does not match type {self.type_.__name__}"
            )

    def make_default(self) -> Any:
        """Return a fresh copy of the default, so mutable defaults are never shared."""
        return copy.deepcopy(self.default)


WELL_KNOWN_FIELDS: dict[str, ConfigField] = {
    "src_path": ConfigField(str, None, "Path to the application source tree"),
    "setup_path": ConfigField(str, None, "Path to the setup package"),
    "settings_path": ConfigField(str, None, "Path of the settings file to write"),
    "template_compile_path": ConfigField(
        str, None, "Directory for compiled templates"
    ),
    "cms": ConfigField(str, None, "Host environment, e.g. Drupal, WordPress, Backdrop"),
    "cms_base_url": ConfigField(str, None, "Public base URL of the host environment"),
    "db": ConfigField(dict, None, "Application database credentials"),
    "cms_db": ConfigField(dict, None, "Host environment database credentials"),
    "lang": ConfigField(str, None, "Default language, e.g. en_US"),
    "components": ConfigField(list, [], "Components to enable"),
    "extensions": ConfigField(list, [], "Extensions to enable"),
    "paths": ConfigField(dict, {}, "Named filesystem paths and URLs"),
    "settings": ConfigField(dict, {}, "Settings to apply after installation"),
    "mandatory_settings": ConfigField(
        dict, {}, "Settings that must be applied after installation"
    ),
    "extras": ConfigField(dict, {}, "Free-form data for host-specific plugins"),
}
