"""
TOML File I/O Handler.

Model values can be kept in a TOML file and used to seed Setup.init().

Key features:
- Parse TOML files using tomllib (Python 3.11+)
- Write TOML files using tomlkit (preserves comments and formatting)
- Generate an annotated TOML document from a model
"""

import tomllib
from pathlib import Path
from typing import Any

import tomlkit

from civisetup.config.model import Model

DEFAULT_SECTION = "setup"


class TOMLError(Exception):
    """Base exception for TOML-related errors."""

    pass


def read_toml(file_path: Path) -> dict[str, Any]:
    """
    Parse a TOML file into plain Python data.

    Raises:
        TOMLError: If the file is missing, unreadable or not valid TOML
    """
    path = Path(file_path)
    if not path.is_file():
        raise TOMLError(f"TOML file not found: {path}")

    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise TOMLError(f"Failed to parse TOML file {path}: {e}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise TOMLError(f"Cannot read {path}: {e}") from e


def write_toml(file_path: Path, data: Any) -> None:
    """
    Render data with tomlkit and write it, creating parent directories.

    The document is rendered before the file is touched, so a value with
    no TOML form leaves any existing file intact.

    Raises:
        TOMLError: If data cannot be rendered or the file cannot be written
    """
    path = Path(file_path)
    try:
        content = tomlkit.dumps(data)
    except Exception as e:
        raise TOMLError(f"Cannot render TOML for {path}: {e}") from e

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise TOMLError(f"Cannot write {path}: {e}") from e


def load_model_values(file_path: Path, section: str = DEFAULT_SECTION) -> dict[str, Any]:
    """
    Load model values from one table of a TOML file.

    Args:
        file_path: Path to the TOML file
        section: Table holding the values; an absent table yields {}

    Raises:
        TOMLError: If the file is unreadable or the section is not a table
    """
    data = read_toml(file_path)
    values = data.get(section, {})
    if not isinstance(values, dict):
        raise TOMLError(f"Section '{section}' in {file_path} is not a table")
    return values


def _to_item(value: Any) -> Any:
    """Render dicts as inline tables so plain keys never follow a sub-table."""
    if isinstance(value, dict):
        table = tomlkit.inline_table()
        for key, nested in value.items():
            table.append(key, _to_item(nested))
        return table
    if isinstance(value, list):
        return [_to_item(v) for v in value]
    return value


def _build_document(model: Model, section: str) -> tomlkit.TOMLDocument:
    fields = model.get_fields()
    doc = tomlkit.document()

    doc.add(tomlkit.comment("Setup model values"))
    doc.add(tomlkit.nl())

    table = tomlkit.table()

    for key, value in model.get_values().items():
        if value is None:
            continue

        field = fields.get(key)
        if field is not None and field.description:
            table.add(tomlkit.comment(field.description))
        try:
            table.add(key, _to_item(value))
        except Exception as e:
            raise TOMLError(f"Cannot render model value '{key}' as TOML: {e}") from e

    doc.add(section, table)
    return doc


def generate_toml_from_model(model: Model, section: str = DEFAULT_SECTION) -> str:
    """
    Generate TOML content from a model with descriptive comments.

    Keys whose value is None are left out, since TOML has no null.

    Args:
        model: The model to render
        section: Name of the table holding the values

    Returns:
        TOML string with comments

    Raises:
        TOMLError: If a value has no TOML representation
    """
    return tomlkit.dumps(_build_document(model, section))


def save_model(model: Model, file_path: Path, section: str = DEFAULT_SECTION) -> None:
    """Write a model to a TOML file as generated by generate_toml_from_model()."""
    write_toml(file_path, _build_document(model, section))
