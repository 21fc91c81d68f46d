"""
Config Module - Black Box Interface

Purpose: Application configuration management
Interface: get_config(), ConfigModule.get(), ConfigModule.set()
Hidden: Config sources, validation logic, environment parsing

Can be replaced with different config systems (Consul, etcd, AWS Parameter Store).
"""

import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "admin-secret-change-in-production"

# Configuration Contract: Required and Optional Keys

REQUIRED_CONFIG_KEYS = {
    "session_secret": "HMAC secret used to sign admin tokens",
    "storage_backend": "Record store backend (redis or memory)",
    "host": "API server bind address",
    "port": "API server port",
    "log_level": "Logging level (DEBUG, INFO, WARNING, ERROR)",
    "recovery_ttl_minutes": "Lifetime of a customer recovery token in minutes",
    "recovery_link_base": "URL prefix the recovery token is appended to",
    "outbox_dir": "Directory the outbox notifier writes messages to",
}

OPTIONAL_CONFIG_KEYS = {
    "redis_host": {
        "description": "Redis server hostname",
        "default": "localhost",
    },
    "redis_port": {
        "description": "Redis server port number",
        "default": 6379,
    },
    "redis_db": {
        "description": "Redis database number",
        "default": 0,
    },
    "redis_password": {
        "description": "Redis authentication password",
        "default": None,
    },
    "debug": {
        "description": "Enable debug mode",
        "default": False,
    },
}

STORAGE_BACKENDS = ("redis", "memory")


class ConfigModule:
    """Configuration management module."""

    def __init__(self):
        """Initialize with environment variables."""
        self._config = self._load_from_env()
        self._validate_required_keys()

        if self._config["session_secret"] == DEFAULT_SESSION_SECRET:
            logger.warning(
                "SESSION_SECRET is not set; admin tokens are signed with the default secret"
            )

    def _validate_required_keys(self) -> None:
        """
        Validate that all required configuration keys are present.

        Raises:
            ValueError: If required keys are missing or a value is out of range
        """
        missing_keys = []
        for key in REQUIRED_CONFIG_KEYS:
            if key not in self._config or self._config[key] in (None, ""):
                missing_keys.append(key)

        if missing_keys:
            raise ValueError(
                f"Missing required configuration keys: {', '.join(missing_keys)}. "
                f"Check environment variables and deployment configuration."
            )

        if self._config["storage_backend"] not in STORAGE_BACKENDS:
            raise ValueError(
                f"STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got '{self._config['storage_backend']}'"
            )

        if self._config["recovery_ttl_minutes"] < 0:
            raise ValueError("RECOVERY_TTL_MINUTES must not be negative")

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment."""
        # Parse Redis port (might be in tcp://host:port format from K8s)
        redis_port_env = os.getenv("REDIS_PORT", "6379")
        if redis_port_env.startswith("tcp://"):
            redis_port = int(redis_port_env.split(":")[-1])
        else:
            redis_port = int(redis_port_env)

        return {
            # Auth settings
            "session_secret": os.getenv("SESSION_SECRET", DEFAULT_SESSION_SECRET),
            # Storage settings
            "storage_backend": os.getenv("STORAGE_BACKEND", "redis").lower(),
            "redis_host": os.getenv("REDIS_HOST", "localhost"),
            "redis_port": redis_port,
            "redis_db": int(os.getenv("REDIS_DB", "0")),
            "redis_password": os.getenv("REDIS_PASSWORD"),
            # API settings
            "host": os.getenv("API_HOST", "0.0.0.0"),
            "port": int(os.getenv("PORT", "4000")),
            "log_level": os.getenv("LOG_LEVEL", "INFO"),
            "debug": os.getenv("DEBUG", "false").lower() == "true",
            # Recovery settings
            "recovery_ttl_minutes": int(os.getenv("RECOVERY_TTL_MINUTES", "60")),
            "recovery_link_base": os.getenv(
                "RECOVERY_LINK_BASE", "http://localhost:3001/#/recover/"
            ),
            # Notification settings
            "outbox_dir": os.getenv("OUTBOX_DIR", "outbox"),
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value."""
        self._config[key] = value

    def get_all(self) -> Dict[str, Any]:
        """Get all configuration values."""
        return self._config.copy()

    @staticmethod
    def get_config_schema() -> Dict[str, Any]:
        """
        Get the configuration schema (contract) for this module.

        Returns:
            Dictionary with 'required' and 'optional' key specifications

        Example:
            >>> schema = ConfigModule.get_config_schema()
            >>> print(schema['required']['session_secret'])
            'HMAC secret used to sign admin tokens'
        """
        return {
            "required": REQUIRED_CONFIG_KEYS.copy(),
            "optional": OPTIONAL_CONFIG_KEYS.copy(),
        }


# Singleton instance
_instance = None


def get_config() -> ConfigModule:
    """Get the configuration module singleton."""
    global _instance
    if _instance is None:
        _instance = ConfigModule()
    return _instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _instance
    _instance = None


__all__ = ["get_config", "reset_config", "ConfigModule", "DEFAULT_SESSION_SECRET"]
