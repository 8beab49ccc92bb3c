"""Tests for configuration management."""

import json

import pytest
from pydantic import ValidationError

from todoledger.config import Config, ConfigManager, get_config_manager


def test_default_config():
    """Test default configuration."""
    config = Config()
    assert config.chain.lcd_endpoint == "https://api.hongbai.mantrachain.io"
    assert config.chain.timeout == 30
    assert config.chain.page_size == 30
    assert config.account.owner is None
    assert config.account.signer is None
    assert config.sync.serialize_signed_calls is True
    assert config.sync.coalesce_updates is True
    assert config.sync.refresh_on_drift is True
    assert config.output.format == "table"
    assert config.log.level == "INFO"
    assert config.log.file == "todoledger.log"


def test_config_manager_uses_config_dir(isolated_dirs):
    manager = ConfigManager(profile="test")
    assert manager.config_file == isolated_dirs / "config" / "test.json"
    assert manager.config_dir.exists()


def test_config_save_load():
    """Test saving and loading configuration."""
    manager = ConfigManager(profile="test")
    manager.set("chain.contract_address", "mantra1contract")
    assert manager.get("chain.contract_address") == "mantra1contract"

    # A new manager with the same profile reads the saved value
    reloaded = ConfigManager(profile="test")
    assert reloaded.get("chain.contract_address") == "mantra1contract"

    data = json.loads(manager.config_file.read_text())
    assert data["chain"]["contract_address"] == "mantra1contract"


def test_set_unknown_key():
    manager = ConfigManager()
    with pytest.raises(KeyError):
        manager.set("chain.nope", 1)
    with pytest.raises(KeyError):
        manager.set("nope.timeout", 1)


def test_set_invalid_value_is_not_saved():
    manager = ConfigManager()
    with pytest.raises(ValidationError):
        manager.set("chain.page_size", 0)

    assert manager.get("chain.page_size") == 30
    assert not manager.config_file.exists()


def test_get_missing_key_returns_none():
    assert ConfigManager().get("chain.nope") is None
    assert ConfigManager().get("chain.timeout.deeper") is None


def test_reset_single_key():
    manager = ConfigManager()
    manager.set("chain.timeout", 5)
    manager.set("output.format", "json")

    manager.reset("chain.timeout")

    assert manager.get("chain.timeout") == 30
    assert manager.get("output.format") == "json"


def test_reset_all():
    manager = ConfigManager()
    manager.set("account.owner", "mantra1owner")

    manager.reset()

    assert manager.get("account.owner") is None


def test_corrupted_config_falls_back_to_defaults():
    manager = ConfigManager()
    manager.config_file.write_text("{not json")
    assert manager.load_config() == Config()


def test_list_profiles():
    ConfigManager("default").save_config()
    ConfigManager("work").save_config()
    assert ConfigManager().list_profiles() == ["default", "work"]


def test_get_config_manager_is_cached_per_profile():
    first = get_config_manager()
    assert get_config_manager() is first
    other = get_config_manager("work")
    assert other is not first
    assert other.profile == "work"


def test_log_level_is_restricted():
    manager = ConfigManager()
    manager.set("log.level", "DEBUG")
    assert manager.get("log.level") == "DEBUG"
    with pytest.raises(ValidationError):
        manager.set("log.level", "LOUD")
