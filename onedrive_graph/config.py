"""OneDrive client settings."""

import os
import logging
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from .chunked_upload import (
    DEFAULT_CHUNK_SIZE,
    MAX_FRAGMENT_SIZE,
    UPLOAD_ALIGNMENT,
)

logger = logging.getLogger(__name__)

# 프로젝트 루트의 .env
_DEFAULT_ENV_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env"
)


class OneDriveSettings:
    """Settings manager: defaults, then .env / environment, then explicit overrides."""

    DEFAULTS = {
        # Graph endpoint
        'graph_base_url': 'https://graph.microsoft.com/v1.0',
        'drive_root': '/me/drive',

        # Identity
        'user_email': None,
        'access_token': None,

        # HTTP
        'request_timeout': 60,

        # Upload
        'upload_chunk_size': DEFAULT_CHUNK_SIZE,
        'max_fragment_size': MAX_FRAGMENT_SIZE,
        'simple_upload_max_size': 4 * 1024 * 1024,  # 4MB
        'enforce_chunk_alignment': False,

        # Logging
        'log_level': 'INFO',
    }

    ENV_MAPPINGS = {
        'GRAPH_BASE_URL': 'graph_base_url',
        'ONEDRIVE_DRIVE_ROOT': 'drive_root',
        'ONEDRIVE_USER_EMAIL': 'user_email',
        'ONEDRIVE_ACCESS_TOKEN': 'access_token',
        'ONEDRIVE_REQUEST_TIMEOUT': 'request_timeout',
        'ONEDRIVE_UPLOAD_CHUNK_SIZE': 'upload_chunk_size',
        'ONEDRIVE_MAX_FRAGMENT_SIZE': 'max_fragment_size',
        'ONEDRIVE_SIMPLE_UPLOAD_MAX_SIZE': 'simple_upload_max_size',
        'ONEDRIVE_ENFORCE_CHUNK_ALIGNMENT': 'enforce_chunk_alignment',
        'LOG_LEVEL': 'log_level',
    }

    INT_KEYS = (
        'request_timeout',
        'upload_chunk_size',
        'max_fragment_size',
        'simple_upload_max_size',
    )
    BOOL_KEYS = ('enforce_chunk_alignment',)

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        env_file: Optional[str] = _DEFAULT_ENV_PATH,
        load_env: bool = True,
    ):
        """
        Initialize settings.

        Args:
            config: explicit overrides, applied last
            env_file: .env file to load before reading the environment (None skips it)
            load_env: False ignores the process environment entirely
        """
        self.config = self.DEFAULTS.copy()

        if load_env:
            if env_file:
                # utf-8-sig: Windows BOM 처리
                load_dotenv(env_file, encoding="utf-8-sig")
            self._load_from_env()

        if config:
            self.config.update(config)

        self.validate()

    def _load_from_env(self):
        """Load settings from environment variables."""
        for env_var, config_key in self.ENV_MAPPINGS.items():
            value = os.environ.get(env_var)
            if not value:
                continue

            if config_key in self.INT_KEYS:
                try:
                    value = int(value)
                except ValueError:
                    logger.warning(f"Ignoring non-integer {env_var}={value!r}")
                    continue
            elif config_key in self.BOOL_KEYS:
                value = value.lower() in ['true', '1', 'yes']

            self.config[config_key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value and re-validate; the old value is kept on failure."""
        previous = self.config.copy()
        self.config[key] = value
        try:
            self.validate()
        except ValueError:
            self.config = previous
            raise

    @property
    def graph_base_url(self) -> str:
        return self.config['graph_base_url'].rstrip('/')

    @property
    def drive_root(self) -> str:
        return '/' + self.config['drive_root'].strip('/')

    def validate(self):
        """
        Check upload sizing and timeouts.

        Raises:
            ValueError: when a size setting breaks the upload session contract
        """
        chunk_size = self.config['upload_chunk_size']
        max_fragment = self.config['max_fragment_size']

        if max_fragment <= 0:
            raise ValueError("max_fragment_size must be positive")
        if chunk_size <= 0 or chunk_size % UPLOAD_ALIGNMENT:
            raise ValueError(
                f"upload_chunk_size must be a positive multiple of {UPLOAD_ALIGNMENT} bytes, "
                f"got {chunk_size}"
            )
        if chunk_size > max_fragment:
            raise ValueError(
                f"upload_chunk_size ({chunk_size}) exceeds max_fragment_size ({max_fragment})"
            )
        if self.config['request_timeout'] <= 0:
            raise ValueError("request_timeout must be positive")
        if self.config['simple_upload_max_size'] < 0:
            raise ValueError("simple_upload_max_size must not be negative")

        level = str(self.config['log_level']).upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            logger.warning(f"Invalid log_level {level!r}, using INFO")
            level = 'INFO'
        self.config['log_level'] = level
