"""Configuration management for todoledger."""

import json
from pathlib import Path
from typing import Any, Literal, Optional

from platformdirs import user_config_dir
from pydantic import BaseModel, Field


class ChainConfig(BaseModel):
    """Chain and contract configuration."""

    lcd_endpoint: str = Field(default="https://api.hongbai.mantrachain.io")
    rpc_endpoint: str = Field(default="https://rpc.hongbai.mantrachain.io")
    chain_id: str = Field(default="mantra-hongbai-1")
    contract_address: str = Field(default="")
    gas_price: str = Field(default="0.025uaum")
    timeout: int = Field(default=30)
    retry: int = Field(default=3)
    page_size: int = Field(default=30, ge=1)


class AccountConfig(BaseModel):
    """Connected account configuration."""

    owner: Optional[str] = Field(default=None)
    signer: Optional[str] = Field(
        default=None, description="Signer factory as 'package.module:callable'"
    )


class SyncConfig(BaseModel):
    """Sync behaviour."""

    serialize_signed_calls: bool = Field(default=True)
    coalesce_updates: bool = Field(default=True)
    refresh_on_drift: bool = Field(default=True)


class OutputConfig(BaseModel):
    """Output configuration."""

    format: str = Field(default="table")


class LogConfig(BaseModel):
    """Log file settings. The file lives in the platform log directory."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    file: str = Field(default="todoledger.log")
    max_bytes: int = Field(default=5 * 1024 * 1024, ge=0)
    backup_count: int = Field(default=3, ge=0)


class Config(BaseModel):
    """Main configuration."""

    chain: ChainConfig = Field(default_factory=ChainConfig)
    account: AccountConfig = Field(default_factory=AccountConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log: LogConfig = Field(default_factory=LogConfig)


class ConfigManager:
    """Manages todoledger configuration."""

    def __init__(self, profile: str = "default"):
        self.profile = profile
        self.config_dir = Path(user_config_dir("todoledger"))
        self.config_file = self.config_dir / f"{profile}.json"

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: Optional[Config] = None

    @property
    def config(self) -> Config:
        """Get the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> Config:
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                return Config(**data)
            except (OSError, ValueError):
                # Corrupted config falls back to defaults
                return Config()
        return Config()

    def save_config(self, config: Optional[Config] = None) -> None:
        """Save configuration to file."""
        if config is None:
            config = self.config

        with open(self.config_file, "w", encoding="utf-8") as f:
            json.dump(config.model_dump(), f, indent=2)

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self.get_from_config(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key."""
        keys = key.split(".")
        config_dict = self.config.model_dump()

        current = config_dict
        for k in keys[:-1]:
            if k not in current or not isinstance(current[k], dict):
                raise KeyError(key)
            current = current[k]
        if keys[-1] not in current:
            raise KeyError(key)

        current[keys[-1]] = value

        # Re-validate so bad values never reach disk
        self._config = Config(**config_dict)
        self.save_config()

    def reset(self, key: Optional[str] = None) -> None:
        """Reset configuration to defaults."""
        if key is None:
            self._config = Config()
            self.save_config()
        else:
            default_value = self.get_from_config(Config(), key)
            self.set(key, default_value)

    def get_from_config(self, config: Config, key: str) -> Any:
        """Get value from a config object using dot notation."""
        keys = key.split(".")
        value: Any = config
        for k in keys:
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    def list_profiles(self) -> list[str]:
        """List all available profiles."""
        return sorted(
            config_file.stem
            for config_file in self.config_dir.glob("*.json")
            if not config_file.name.startswith(".")
        )


# Global config manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(profile: str = "default") -> ConfigManager:
    """Get or create the global config manager."""
    global _config_manager
    if _config_manager is None or _config_manager.profile != profile:
        _config_manager = ConfigManager(profile)
    return _config_manager
