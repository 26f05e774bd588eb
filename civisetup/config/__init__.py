"""
civisetup config - The shared setup model.

This module provides:
- Model: key/value context with well-known fields
- Field declarations with defaults and descriptions
- TOML loading and generation of model values
"""

from civisetup.config.model import Model
from civisetup.config.schema import WELL_KNOWN_FIELDS, ConfigField
from civisetup.config.toml_handler import (
    TOMLError,
    generate_toml_from_model,
    load_model_values,
    save_model,
)

__all__ = [
    "Model",
    "ConfigField",
    "WELL_KNOWN_FIELDS",
    "TOMLError",
    "generate_toml_from_model",
    "load_model_values",
    "save_model",
]
