"""Configuration management for the SPFE CLI."""

import json
import logging
import os
import shutil
import tempfile
from pathlib import Path

from common.constants import CHUNK_SIZE_BYTES, DEFAULT_CONCURRENCY

logger = logging.getLogger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "server_host": os.environ.get("SPFE_SERVER_HOST", "localhost"),
        "server_port": int(os.environ.get("SPFE_SERVER_PORT", "8000")),
        "timeout": 30,
        "max_retries": 2,
        "retry_backoff_multiplier": 2,
        "chunk_size": CHUNK_SIZE_BYTES,
        "concurrency": DEFAULT_CONCURRENCY,
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.spfe/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            self.config_path = Path(tempfile.gettempdir()) / '.spfe' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Config file {self.config_path} unreadable, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError:
                    logger.warning(f"Could not back up config to {backup_path}")
                return self.DEFAULT_CONFIG.copy()
        else:
            config = self.DEFAULT_CONFIG.copy()
            try:
                with open(self.config_path, 'w') as f:
                    json.dump(config, f, indent=2)
            except IOError:
                logger.warning(f"Could not write default config to {self.config_path}")
            return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get_base_url(self) -> str:
        """
        Get server base URL.

        Returns:
            Base URL string (e.g., "http://localhost:8000")
        """
        host = self.data.get('server_host', 'localhost')
        port = self.data.get('server_port', 8000)
        return f"http://{host}:{port}"

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'max_retries' and 'retry_backoff_multiplier'
        """
        return {
            'max_retries': self.data.get('max_retries', 2),
            'retry_backoff_multiplier': self.data.get('retry_backoff_multiplier', 2),
        }

    def get_chunk_size(self) -> int:
        return int(self.data.get('chunk_size', CHUNK_SIZE_BYTES))

    def get_concurrency(self) -> int:
        return max(1, int(self.data.get('concurrency', DEFAULT_CONCURRENCY)))

    def set_value(self, key: str, value) -> None:
        """
        Set a known configuration key and save to file.

        Args:
            key: Configuration key (must exist in DEFAULT_CONFIG)
            value: New value, coerced to the type of the default

        Raises:
            KeyError: If key is not a known configuration key
            ValueError: If value cannot be coerced
        """
        if key not in self.DEFAULT_CONFIG:
            raise KeyError(key)
        default = self.DEFAULT_CONFIG[key]
        self.data[key] = type(default)(value)
        self.save()
