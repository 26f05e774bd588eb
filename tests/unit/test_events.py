"""
Tests for Phase Events.

This test suite covers:
1. Phase names and namespacing
2. Result fields of each event type
3. Propagation stop flag
"""

import pytest

from civisetup.config.model import Model
from civisetup.core.events import (
    CheckAuthorizedEvent,
    CheckInstalledEvent,
    CheckRequirementsEvent,
    CreateFormEvent,
    InitEvent,
    InstallSchemaEvent,
    InstallSettingsEvent,
    UninstallSchemaEvent,
    UninstallSettingsEvent,
    phase_name,
)


class TestPhaseNames:
    """Test the phase name table."""

    def test_phase_name_is_namespaced(self):
        assert phase_name("init") == "civi.setup.init"

    def test_event_phases(self):
        expected = {
            InitEvent: "init",
            CheckAuthorizedEvent: "checkAuthorized",
            CheckRequirementsEvent: "checkRequirements",
            CheckInstalledEvent: "checkInstalled",
            InstallSettingsEvent: "installSettings",
            InstallSchemaEvent: "installSchema",
            UninstallSettingsEvent: "uninstallSettings",
            UninstallSchemaEvent: "uninstallSchema",
            CreateFormEvent: "createForm",
        }
        for event_class, phase in expected.items():
            assert event_class.phase == phase


class TestSetupEvent:
    """Test behavior shared by all events."""

    def test_event_carries_model(self):
        model = Model()
        assert InstallSchemaEvent(model).model is model

    def test_propagation_flag(self):
        event = InitEvent(Model())
        assert not event.is_propagation_stopped()

        event.stop_propagation()

        assert event.is_propagation_stopped()


class TestCheckAuthorized:
    def test_defaults_to_unauthorized(self):
        assert CheckAuthorizedEvent(Model()).is_authorized() is False

    def test_set_authorized(self):
        event = CheckAuthorizedEvent(Model())
        event.set_authorized(True)
        assert event.is_authorized() is True


class TestCheckRequirements:
    """Test requirement message bookkeeping."""

    def test_messages_keep_insertion_order(self):
        event = CheckRequirementsEvent(Model())
        event.add_info("system", "python", "Python found")
        event.add_error("database", "mysql", "MySQL missing")
        event.add_warning("system", "memory", "Low memory")

        names = [m.name for m in event.get_messages()]
        assert names == ["python", "mysql", "memory"]

    def test_filter_by_level(self):
        event = CheckRequirementsEvent(Model())
        event.add_error("database", "mysql", "MySQL missing")
        event.add_warning("system", "memory", "Low memory")
        event.add_error("system", "disk", "Disk full")
        event.add_info("system", "python", "Python found")

        assert [m.name for m in event.get_errors()] == ["mysql", "disk"]
        assert [m.name for m in event.get_warnings()] == ["memory"]
        assert [m.name for m in event.get_infos()] == ["python"]

    def test_message_fields(self):
        event = CheckRequirementsEvent(Model())
        event.add_message("warning", "system", "memory", "Low memory")

        message = event.get_messages()[0]
        assert message.section == "system"
        assert message.name == "memory"
        assert message.message == "Low memory"
        assert message.level == "warning"

    def test_unknown_level_rejected(self):
        event = CheckRequirementsEvent(Model())
        with pytest.raises(ValueError, match="Unknown message level"):
            event.add_message("fatal", "system", "x", "y")

    def test_get_messages_returns_copy(self):
        event = CheckRequirementsEvent(Model())
        event.get_messages().append("junk")
        assert event.get_messages() == []


class TestCheckInstalled:
    def test_flags_start_unknown(self):
        event = CheckInstalledEvent(Model())
        assert event.is_setting_installed() is None
        assert event.is_database_installed() is None

    def test_set_flags(self):
        event = CheckInstalledEvent(Model())
        event.set_setting_installed(True)
        event.set_database_installed(False)
        assert event.is_setting_installed() is True
        assert event.is_database_installed() is False


class TestCreateForm:
    def test_ctrl(self):
        event = CreateFormEvent(Model())
        assert event.get_ctrl() is None

        ctrl = object()
        event.set_ctrl(ctrl)

        assert event.get_ctrl() is ctrl
