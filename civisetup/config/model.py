"""
Setup Model - Shared configuration context for an installation run.

The model is a plain mapping of string keys to arbitrary values. A set of
well-known fields is pre-declared with defaults; any other key may be added
by the caller or by plugins.

Example:
    model = Model()
    model.set_values({'src_path': '/var/www/app', 'cms': 'WordPress'})
    model.lang = 'fr_FR'          # same as model.set('lang', 'fr_FR')
    model.get('missing')          # None
"""

from collections.abc import Mapping
from typing import Any

from civisetup.config.schema import WELL_KNOWN_FIELDS, ConfigField


class Model:
    """
    Mutable key/value configuration shared by all listeners of a run.

    Attribute access maps onto the value store: reading an unknown public
    attribute yields None, writing one stores a new key.
    """

    def __init__(self, values: Mapping[str, Any] | None = None):
        # Use object.__setattr__ to avoid triggering our custom __setattr__
        object.__setattr__(self, "_fields", dict(WELL_KNOWN_FIELDS))
        object.__setattr__(
            self,
            "_values",
            {name: field.make_default() for name, field in WELL_KNOWN_FIELDS.items()},
        )

        if values:
            self.set_values(values)

    def set_values(self, values: Mapping[str, Any]) -> "Model":
        """
        Merge values into the model, overwriting existing keys.

        Returns:
            The model itself
        """
        for key, value in values.items():
            self.set(key, value)
        return self

    def get_values(self) -> dict[str, Any]:
        """Return a shallow copy of all values."""
        return dict(self._values)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        if not isinstance(key, str):
            raise TypeError(f"Model keys must be strings. Got: {key!r}")
        self._values[key] = value

    def add_field(
        self, name: str, type_: type, default: Any = None, description: str = ""
    ) -> ConfigField:
        """
        Declare an additional field.

        The default is applied only if the key has no value yet.

        Returns:
            The new ConfigField
        """
        field = ConfigField(type_=type_, default=default, description=description)
        self._fields[name] = field
        if name not in self._values:
            self._values[name] = field.make_default()
        return field

    def get_fields(self) -> dict[str, ConfigField]:
        """Return the declared field table."""
        return dict(self._fields)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._values.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        self.set(name, value)

    def __repr__(self) -> str:
        return f"Model({self._values})"
