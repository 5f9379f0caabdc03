"""Configuration management for treesync."""

import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

import javaproperties
from loguru import logger
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from treesync.exceptions import ConfigError
from treesync.models import PathFilter

# field name -> (long key, short key) accepted in a config file
CONFIG_FILE_KEYS = {
    "check_model": ("checkModel", "cm"),
    "src_path": ("srcPath", "s"),
    "dest_path": ("destPath", "d"),
    "preview": ("preview", "p"),
    "include": ("include", "in"),
    "exclude": ("exclude", "ex"),
    "recursive": ("recursive", "r"),
}
BOOLEAN_FIELDS = {"preview", "recursive"}


class CheckModel(str, Enum):
    """How two same-named files are compared."""

    # modification time and size
    SIMPLE = "SIMPLE"
    # content checksum
    CHECKSUM = "CHECKSUM"


class SyncConfig(BaseSettings):
    """Settings for one sync run. Immutable once built."""

    check_model: CheckModel = Field(
        default=CheckModel.SIMPLE,
        description="Change detection policy for files present on both sides",
    )
    src_path: Path = Field(default=Path("."), description="Directory to mirror from")
    dest_path: Path = Field(default=Path("."), description="Directory to mirror onto")
    preview: bool = Field(default=False, description="Only print the plan")
    include: str = Field(default="", description="Regex an absolute path must match")
    exclude: str = Field(default="", description="Regex that drops an absolute path")
    recursive: bool = Field(default=False, description="Descend into subdirectories")
    config_file: Optional[Path] = Field(default=None, description="Properties file used")
    pause_on_exit: bool = Field(default=True, description="Wait for enter before exiting")

    model_config = SettingsConfigDict(
        env_prefix="TREESYNC_",
        extra="ignore",
        frozen=True,
        validate_default=True,
    )

    @field_validator("check_model", mode="before")
    @classmethod
    def normalize_check_model(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("src_path", "dest_path")
    @classmethod
    def make_absolute(cls, v: Path) -> Path:
        return v.expanduser().absolute()

    @field_validator("include", "exclude")
    @classmethod
    def ensure_valid_regex(cls, v: str) -> str:
        if v:
            try:
                re.compile(v)
            except re.error as e:
                raise ValueError(f"Invalid regular expression {v!r}: {e}") from e
        return v

    def path_filter(self) -> PathFilter:
        """Build the include/exclude filter used when loading trees."""
        return PathFilter.from_patterns(self.include, self.exclude)


def parse_strict_bool(value: str, key: str = "value") -> bool:
    """Accept exactly "true" or "false"."""
    if value == "true":
        return True
    if value == "false":
        return False
    raise ConfigError(f"{key} must be 'true' or 'false', got {value!r}")


def read_properties(path: Path) -> Dict[str, str]:
    """
    Read a UTF-8 properties file.

    Raises:
        ConfigError: If the file cannot be read or holds an invalid escape
    """
    try:
        with path.open(encoding="utf-8") as f:
            return javaproperties.load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e
    except ValueError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e


def config_file_values(path: Path) -> Dict[str, Any]:
    """Map a properties file onto SyncConfig field values."""
    properties = read_properties(path)
    values: Dict[str, Any] = {}
    known = set()
    for field_name, keys in CONFIG_FILE_KEYS.items():
        known.update(keys)
        # long key wins over short key
        raw = next((properties[k] for k in keys if k in properties), None)
        if raw is None:
            continue
        if field_name in BOOLEAN_FIELDS:
            values[field_name] = parse_strict_bool(raw, keys[0])
        else:
            values[field_name] = raw

    for key in properties.keys() - known:
        logger.debug(f"Ignoring unknown config key: {key}")
    return values


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> SyncConfig:
    """
    Build the settings for a run.

    Precedence, lowest first: defaults, TREESYNC_* environment variables,
    config file values, explicit overrides. Overrides set to None are ignored.

    Raises:
        ConfigError: If the config file or any value is invalid
    """
    values: Dict[str, Any] = {}
    if config_file is not None:
        values.update(config_file_values(config_file))
    values.update({k: v for k, v in overrides.items() if v is not None})

    try:
        config = SyncConfig(config_file=config_file, **values)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e

    logger.info(f"Loaded config: {config.model_dump(mode='json')}")
    return config
