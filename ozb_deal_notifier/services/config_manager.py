"""
Configuration management for the OzBargain Deal Notifier.

Settings come from built-in defaults, an optional YAML/JSON file and the
process environment, each overriding the previous. The result is an
immutable NotifierConfig handed to every component.
"""

import json
import math
import os
from dataclasses import replace
from typing import Any, Dict, Iterable, Mapping, Optional

import yaml

from ..models.config import NotifierConfig
from ..models.filter import csv_to_keywords
from ..utils.error_handling import ConfigurationError

DEFAULT_CONFIG_PATHS = [
    "config/config.yaml",
    "config/config.yml",
    "config/config.json",
    "config.yaml",
    "config.yml",
    "config.json",
]


def to_number(value: Any) -> Optional[float]:
    """Parse a number permissively; blanks, garbage and non-finite values become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def to_int(value: Any) -> Optional[int]:
    number = to_number(value)
    return int(number) if number is not None else None


def to_bool(value: Any) -> bool:
    """Only an explicit true value enables a flag."""
    if isinstance(value, bool):
        return value
    if not value:
        return False
    return str(value).strip().lower() == "true"


def to_keywords(value: Any) -> frozenset:
    """Keywords from a comma-separated string or a list."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        return csv_to_keywords(value)
    return frozenset(str(k).strip().lower() for k in value if str(k).strip())


def to_hours(value: Any) -> Optional[tuple]:
    if value is None:
        return None
    parts: Iterable[Any] = value.split(",") if isinstance(value, str) else value
    hours = [to_int(part) for part in parts]
    return tuple(sorted({h for h in hours if h is not None}))


# Environment variable -> (config field, converter)
ENV_FIELDS = {
    "RSS_URL": ("rss_url", str),
    "RSS_USER_AGENT": ("user_agent", str),
    "DISCORD_WEBHOOK_URL": ("discord_webhook_url", str),
    "DISCORD_USER_ID": ("discord_user_id", str),
    "DISCORD_PUBLIC_KEY": ("discord_public_key", str),
    "KEYWORDS_INCLUDE": ("keywords_include", to_keywords),
    "KEYWORDS_EXCLUDE": ("keywords_exclude", to_keywords),
    "MIN_DISCOUNT": ("min_discount", to_number),
    "MAX_PRICE": ("max_price", to_number),
    "SEEN_GUIDS_LIMIT": ("seen_guids_limit", to_int),
    "SUMMARY_LIMIT": ("summary_limit", to_int),
    "FIRST_RUN_SEND": ("first_run_send", to_bool),
    "HISTORY_ITEMS": ("history_items", to_int),
    "STATE_FILE": ("state_file", str),
    "POLL_INTERVAL": ("poll_interval", to_int),
    "SUMMARY_HOURS": ("summary_hours", to_hours),
    "HOST": ("host", str),
    "PORT": ("port", to_int),
    "LOG_LEVEL": ("log_level", str),
    "LOG_DIR": ("log_dir", str),
}

# Config file section -> {key: (config field, converter)}
FILE_FIELDS = {
    "feed": {
        "url": ("rss_url", str),
        "user_agent": ("user_agent", str),
        "timeout": ("request_timeout", to_int),
    },
    "discord": {
        "webhook_url": ("discord_webhook_url", str),
        "user_id": ("discord_user_id", str),
        "public_key": ("discord_public_key", str),
    },
    "filters": {
        "include": ("keywords_include", to_keywords),
        "exclude": ("keywords_exclude", to_keywords),
        "min_discount": ("min_discount", to_number),
        "max_price": ("max_price", to_number),
    },
    "state": {
        "file": ("state_file", str),
        "seen_limit": ("seen_guids_limit", to_int),
        "first_run_send": ("first_run_send", to_bool),
        "history_items": ("history_items", to_int),
    },
    "schedule": {
        "poll_interval": ("poll_interval", to_int),
        "summary_hours": ("summary_hours", to_hours),
        "summary_limit": ("summary_limit", to_int),
    },
    "server": {
        "host": ("host", str),
        "port": ("port", to_int),
    },
    "logging": {
        "level": ("log_level", str),
        "dir": ("log_dir", str),
    },
}

# Fields where an unparsable value falls back to the default instead of None
REQUIRED_FIELDS = {
    "seen_guids_limit",
    "history_items",
    "poll_interval",
    "summary_hours",
    "port",
    "request_timeout",
}

# Fields where zero means "use the default"
ZERO_MEANS_DEFAULT = {"seen_guids_limit", "summary_limit"}


class ConfigurationManager:
    """Loads and validates the notifier configuration."""

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to a YAML/JSON file. If None, standard
                locations are searched and a missing file is not an error.
            environ: Environment mapping, defaults to os.environ
        """
        self.environ = os.environ if environ is None else environ
        self.config_path = config_path or self._find_config_file()
        self._config: Optional[NotifierConfig] = None

    def _find_config_file(self) -> Optional[str]:
        """Find the configuration file in standard locations."""
        for path in DEFAULT_CONFIG_PATHS:
            if os.path.exists(path):
                return path
        return None

    def load_config(self) -> NotifierConfig:
        """
        Build the configuration from defaults, file and environment.

        Returns:
            Validated NotifierConfig

        Raises:
            ConfigurationError: If the file is unreadable or a value is invalid
        """
        values: Dict[str, Any] = {}

        if self.config_path:
            values.update(self._load_file(self.config_path))

        values.update(self._load_environment())

        try:
            config = replace(NotifierConfig(), **values)
            config.validate()
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        self._config = config
        return config

    def get_config(self) -> NotifierConfig:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            return self.load_config()
        return self._config

    def _load_file(self, path: str) -> Dict[str, Any]:
        if not os.path.exists(path):
            raise ConfigurationError(f"Configuration file not found: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                if path.endswith(".json"):
                    raw_config = json.load(f)
                else:
                    raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file: {e}") from e

        if raw_config is None:
            return {}
        if not isinstance(raw_config, dict):
            raise ConfigurationError("Configuration file must contain a mapping")

        raw_config = self._expand_env_vars(raw_config)

        values: Dict[str, Any] = {}
        for section, fields in FILE_FIELDS.items():
            section_data = raw_config.get(section) or {}
            if not isinstance(section_data, dict):
                raise ConfigurationError(f"Section '{section}' must be a mapping")
            for key, (field_name, convert) in fields.items():
                if key in section_data:
                    self._set(values, field_name, convert, section_data[key])
        return values

    def _load_environment(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for env_name, (field_name, convert) in ENV_FIELDS.items():
            raw = self.environ.get(env_name)
            if raw is None or raw == "":
                continue
            self._set(values, field_name, convert, raw)
        return values

    @staticmethod
    def _set(values: Dict[str, Any], field_name: str, convert, raw: Any) -> None:
        value = convert(raw) if raw is not None else None
        if value is None and field_name in REQUIRED_FIELDS:
            return
        if value == 0 and field_name in ZERO_MEANS_DEFAULT:
            return
        values[field_name] = value

    def _expand_env_vars(self, obj: Any) -> Any:
        """Recursively expand ${VAR_NAME} values in configuration."""
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            if obj.startswith("${") and obj.endswith("}"):
                var_name = obj[2:-1]
                env_value = self.environ.get(var_name)
                if env_value is None:
                    raise ConfigurationError(
                        f"Environment variable '{var_name}' not found"
                    )
                return env_value
            return obj
        else:
            return obj
