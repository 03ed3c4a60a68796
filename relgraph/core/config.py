"""
RELGRAPH Configuration Management

This module handles configuration for the whole RELGRAPH package.
Values come from built-in defaults, an optional JSON file and the
environment, in that order of precedence (later wins).
"""

import os
import sys
import copy
import json
from typing import Dict, Any, Optional

from .models import ConnectionSettings, InferenceSettings

DEFAULT_CONFIG_FILE = "config.json"

# Environment variable -> dotted config key
ENV_OVERRIDES = {
    "RELGRAPH_DB_HOST": "database.host",
    "RELGRAPH_DB_PORT": "database.port",
    "RELGRAPH_DB_USER": "database.user",
    "RELGRAPH_DB_PASSWORD": "database.password",
    "RELGRAPH_DB_NAME": "database.database",
    "RELGRAPH_DB_SSLMODE": "database.sslmode",
    "RELGRAPH_SCHEMA": "database.schema",
    "RELGRAPH_LOG_LEVEL": "logging.level",
    "RELGRAPH_LOG_FILE": "logging.file",
    "RELGRAPH_BASE_IRI": "output.base_iri",
}


class Config:
    """Configuration manager for RELGRAPH."""

    def __init__(self, config_file: Optional[str] = None, use_env: bool = True):
        """
        Initialize configuration.

        Args:
            config_file (Optional[str]): Path to a JSON config file. Defaults to
                ``RELGRAPH_CONFIG`` or ``config.json`` in the working directory.
            use_env (bool): Whether environment variables override file values
        """
        self.config_file = config_file or os.getenv("RELGRAPH_CONFIG", DEFAULT_CONFIG_FILE)
        self.config = self._load_config()
        if use_env:
            self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, merged over the defaults."""
        config = self._get_default_config()
        if not os.path.exists(self.config_file):
            return config
        try:
            with open(self.config_file, 'r') as f:
                file_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            # Logger depends on Config, so report on stderr directly
            print(f"Error loading config {self.config_file}: {e}", file=sys.stderr)
            return config
        return self._merge(config, file_config)

    @staticmethod
    def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge ``override`` into ``base``."""
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                base[key] = Config._merge(base[key], value)
            else:
                base[key] = value
        return base

    def _apply_env_overrides(self) -> None:
        for env_name, key in ENV_OVERRIDES.items():
            value = os.getenv(env_name)
            if value is not None and value != "":
                self.set(key, value)

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return copy.deepcopy({
            "database": {
                "host": "localhost",
                "port": 5432,
                "user": "postgres",
                "password": "",
                "database": "postgres",
                "sslmode": "disable",
                "schema": "public"
            },
            "inference": {
                "discrete_threshold": 100,
                "strength_threshold": 10,
                "relationship_threshold": 1,
                "scalar_types": ["integer", "numeric"],
                "geo_markers": ["latitude", "longitude"],
                "include_descriptive": True,
                "max_workers": 1
            },
            "output": {
                "base_iri": "http://dooodle/",
                "format": "ntriples"
            },
            "logging": {
                "level": "INFO",
                "file": None
            },
            "api": {
                "host": "0.0.0.0",
                "port": 8000
            }
        })

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dotted key."""
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """Set configuration value by dotted key."""
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def save(self) -> bool:
        """Save configuration to file."""
        try:
            with open(self.config_file, 'w') as f:
                json.dump(self.config, f, indent=2)
            return True
        except OSError as e:
            print(f"Error saving config: {e}", file=sys.stderr)
            return False

    def connection_settings(self) -> ConnectionSettings:
        """Build the explicit connection value handed to a statistics gateway."""
        return ConnectionSettings(**self.get("database", {}))

    def inference_settings(self) -> InferenceSettings:
        """Build the explicit thresholds handed to the inference engine."""
        return InferenceSettings(**self.get("inference", {}))
