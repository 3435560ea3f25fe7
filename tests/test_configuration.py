"""Tests for UserConfiguration."""

import pytest

from pynexecur.configuration import UserConfiguration
from pynexecur.exceptions import NexecurConfigurationError

FULL_VALUES = {
    "token": "test-token",
    "id_site": "site-123",
    "password": "password",
    "id_device": "device-456",
    "pin": "pin",
    "device_name": "My Device",
}


class TestUserConfigurationDefaults:
    """Tests for UserConfiguration construction."""

    def test_defaults_are_empty_strings(self) -> None:
        """Test that every field defaults to an empty string."""
        config = UserConfiguration()
        assert config.token == ""
        assert config.id_site == ""
        assert config.password == ""
        assert config.id_device == ""
        assert config.pin == ""
        assert config.device_name == ""

    def test_clone_is_independent_copy(self) -> None:
        """Test that clone copies values into a new instance."""
        original = UserConfiguration(**FULL_VALUES)
        clone = original.clone()
        assert clone == original
        assert clone is not original
        clone.token = "other"
        assert original.token == "test-token"


class TestUserConfigurationState:
    """Tests for is_valid, is_device_registered and validate."""

    def test_is_valid_with_site_and_password(self) -> None:
        """Test that id_site and password make a valid configuration."""
        assert UserConfiguration(id_site="site-123", password="password").is_valid is True

    def test_is_valid_false_without_site(self) -> None:
        """Test that a missing id_site is invalid."""
        assert UserConfiguration(password="password").is_valid is False

    def test_is_valid_false_without_password(self) -> None:
        """Test that a missing password is invalid."""
        assert UserConfiguration(id_site="site-123").is_valid is False

    def test_is_device_registered_with_token_and_device(self) -> None:
        """Test that token and id_device mean a registered device."""
        config = UserConfiguration(token="test-token", id_device="device-123")
        assert config.is_device_registered is True

    def test_is_device_registered_false_without_token(self) -> None:
        """Test that a missing token means not registered."""
        assert UserConfiguration(id_device="device-123").is_device_registered is False

    def test_is_device_registered_false_without_device(self) -> None:
        """Test that a missing id_device means not registered."""
        assert UserConfiguration(token="test-token").is_device_registered is False

    def test_validate_raises_configuration_error(self) -> None:
        """Test that validate raises a typed error with its code."""
        with pytest.raises(NexecurConfigurationError, match="Invalid configuration") as exc_info:
            UserConfiguration(password="test").validate()
        assert exc_info.value.code == "INVALID_CONFIGURATION"


class TestUserConfigurationSerialization:
    """Tests for from_dict and to_dict."""

    def test_from_dict_accepts_snake_case(self) -> None:
        """Test loading a record with snake_case keys."""
        config = UserConfiguration.from_dict(
            {
                "token": "test-token",
                "id_site": "site-123",
                "password": "password",
                "id_device": "device-456",
                "pin": "pin",
                "deviceName": "My Device",
            },
        )
        assert config == UserConfiguration(**FULL_VALUES)

    def test_from_dict_accepts_camel_case(self) -> None:
        """Test loading a record with camelCase keys."""
        config = UserConfiguration.from_dict(
            {
                "token": "test-token",
                "idSite": "site-123",
                "password": "password",
                "idDevice": "device-456",
                "pin": "pin",
                "deviceName": "My Device",
            },
        )
        assert config == UserConfiguration(**FULL_VALUES)

    def test_from_dict_handles_missing_and_null_values(self) -> None:
        """Test that missing or null keys become empty strings."""
        config = UserConfiguration.from_dict({"token": "test-token", "pin": None})
        assert config.token == "test-token"
        assert config.id_site == ""
        assert config.pin == ""

    def test_from_dict_stringifies_numeric_ids(self) -> None:
        """Test that numeric identifiers are kept as text."""
        config = UserConfiguration.from_dict({"id_site": 12345, "id_device": 42})
        assert config.id_site == "12345"
        assert config.id_device == "42"

    def test_from_dict_accepts_none(self) -> None:
        """Test that no data gives an empty configuration."""
        assert UserConfiguration.from_dict(None) == UserConfiguration()

    def test_to_dict_uses_persisted_layout(self) -> None:
        """Test that to_dict emits the persisted record keys."""
        assert UserConfiguration(**FULL_VALUES).to_dict() == {
            "token": "test-token",
            "id_site": "site-123",
            "password": "password",
            "id_device": "device-456",
            "pin": "pin",
            "deviceName": "My Device",
        }

    def test_from_dict_keeps_falsy_present_values(self) -> None:
        """Test that a zero identifier is kept rather than skipped."""
        config = UserConfiguration.from_dict({"id_site": 0, "idSite": "other", "id_device": 0})
        assert config.id_site == "0"
        assert config.id_device == "0"
