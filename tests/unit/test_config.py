"""
Tests for the Setup Model and its TOML handling.

This test suite covers:
1. Well-known field defaults
2. Value merge, get/set and attribute access
3. Run-time field declarations
4. TOML loading and generation
"""

import tomllib

import pytest

from civisetup.config.model import Model
from civisetup.config.schema import WELL_KNOWN_FIELDS, ConfigField, SchemaError
from civisetup.config.toml_handler import (
    TOMLError,
    generate_toml_from_model,
    load_model_values,
    read_toml,
    save_model,
    write_toml,
)


class TestConfigField:
    """Test field declarations."""

    def test_default_type_mismatch(self):
        with pytest.raises(SchemaError, match="does not match type"):
            ConfigField(int, "not an int")

    def test_none_default_allowed(self):
        assert ConfigField(str).default is None

    def test_make_default_returns_copy(self):
        field = ConfigField(list, ["a"])
        value = field.make_default()
        value.append("b")
        assert field.default == ["a"]


class TestModelValues:
    """Test value storage."""

    def test_well_known_defaults(self):
        model = Model()
        assert model.src_path is None
        assert model.cms is None
        assert model.components == []
        assert model.extras == {}
        assert set(WELL_KNOWN_FIELDS) <= set(model.get_values())

    def test_mutable_defaults_not_shared(self):
        first = Model()
        second = Model()
        first.components.append("CiviMail")
        assert second.components == []

    def test_set_values_merges_and_overwrites(self):
        model = Model({"src_path": "/a", "cms": "Drupal"})
        model.set_values({"cms": "WordPress", "custom": 1})

        assert model.src_path == "/a"
        assert model.cms == "WordPress"
        assert model.get("custom") == 1

    def test_set_values_returns_model(self):
        model = Model()
        assert model.set_values({}) is model

    def test_absent_key_is_none(self):
        model = Model()
        assert model.get("nope") is None
        assert model.get("nope", "fallback") == "fallback"
        assert model.nope is None

    def test_attribute_and_item_access_agree(self):
        model = Model()
        model.lang = "fr_FR"
        model.set("cms_base_url", "http://example.org")

        assert model.get("lang") == "fr_FR"
        assert model.cms_base_url == "http://example.org"

    def test_no_validation_on_write(self):
        model = Model()
        model.components = "not a list"
        assert model.components == "not a list"

    def test_contains(self):
        model = Model({"x": None})
        assert "x" in model
        assert "y" not in model

    def test_non_string_key_rejected(self):
        with pytest.raises(TypeError):
            Model().set(1, "value")

    def test_get_values_is_a_copy(self):
        model = Model()
        model.get_values()["cms"] = "Joomla"
        assert model.cms is None

    def test_private_attribute_lookup_raises(self):
        with pytest.raises(AttributeError):
            Model()._missing


class TestAddField:
    """Test run-time field declarations."""

    def test_add_field_applies_default(self):
        model = Model()
        model.add_field("db_prefix", str, "civicrm_", "Table prefix")

        assert model.db_prefix == "civicrm_"
        assert model.get_fields()["db_prefix"].description == "Table prefix"

    def test_add_field_keeps_existing_value(self):
        model = Model({"db_prefix": "x_"})
        model.add_field("db_prefix", str, "civicrm_")
        assert model.db_prefix == "x_"

    def test_add_field_keeps_explicit_none(self):
        model = Model({"db_prefix": None})
        model.add_field("db_prefix", str, "civicrm_")
        assert "db_prefix" in model
        assert model.db_prefix is None

    def test_fields_are_per_model(self):
        first = Model()
        first.add_field("only_here", int, 1)
        assert "only_here" not in Model().get_fields()


class TestTOML:
    """Test TOML loading and generation."""

    def test_load_model_values(self, tmp_path):
        path = tmp_path / "setup.toml"
        path.write_text('[setup]\nsrc_path = "/srv/app"\ncms = "Backdrop"\n')

        values = load_model_values(path)

        assert values == {"src_path": "/srv/app", "cms": "Backdrop"}
        assert Model(values).cms == "Backdrop"

    def test_load_missing_section(self, tmp_path):
        path = tmp_path / "setup.toml"
        path.write_text('[other]\nkey = 1\n')
        assert load_model_values(path) == {}

    def test_load_section_not_a_table(self, tmp_path):
        path = tmp_path / "setup.toml"
        path.write_text('setup = 1\n')
        with pytest.raises(TOMLError, match="not a table"):
            load_model_values(path)

    def test_read_missing_file(self, tmp_path):
        with pytest.raises(TOMLError, match="not found"):
            read_toml(tmp_path / "missing.toml")

    def test_read_invalid_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("this is = = not toml")
        with pytest.raises(TOMLError, match="Failed to parse"):
            read_toml(path)

    def test_generated_toml_has_comments_and_skips_none(self):
        model = Model({"cms": "WordPress", "paths": {"civicrm.root": "/srv/civi"}})

        content = generate_toml_from_model(model)

        assert "# Host environment" in content
        assert "src_path" not in content

        data = tomllib.loads(content)["setup"]
        assert data["cms"] == "WordPress"
        assert data["paths"] == {"civicrm.root": "/srv/civi"}
        assert data["components"] == []

    def test_save_model(self, tmp_path):
        model = Model({"cms": "Drupal", "lang": "de_DE", "extras": {"a": {"b": 1}}})
        path = tmp_path / "out" / "setup.toml"

        save_model(model, path)

        values = load_model_values(path)
        assert values["cms"] == "Drupal"
        assert values["lang"] == "de_DE"
        assert values["extras"] == {"a": {"b": 1}}

    def test_write_failure_keeps_existing_file(self, tmp_path):
        path = tmp_path / "setup.toml"
        path.write_text('[setup]\ncms = "Drupal"\n')

        with pytest.raises(TOMLError, match="Cannot render"):
            write_toml(path, {"setup": {"handle": object()}})

        assert load_model_values(path) == {"cms": "Drupal"}

    def test_unrenderable_value(self):
        model = Model({"handle": object()})
        with pytest.raises(TOMLError, match="handle"):
            generate_toml_from_model(model)
