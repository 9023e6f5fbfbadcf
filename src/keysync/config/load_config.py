"""
Configuration loading utilities
"""

import logging
import os
from typing import Dict, Optional
from .settings import Settings

logger = logging.getLogger(__name__)

# Loaded settings per env file, None for the plain environment
_settings: Dict[Optional[str], Settings] = {}


def load_settings(env_file: Optional[str] = None, reload: bool = False) -> Settings:
    """
    Load extractor settings, cached per env file

    Args:
        env_file: Optional .env file whose values override the environment
        reload: Read the environment again instead of using the cached instance

    Raises:
        ValueError: when the env file does not exist or a setting is invalid
    """
    cache_key = os.path.abspath(env_file) if env_file else None

    if reload or cache_key not in _settings:
        if env_file and not os.path.isfile(env_file):
            raise ValueError(f"Env file not found: {env_file}")
        try:
            settings = Settings.from_env(env_file)
        except Exception as e:
            logger.error(f"Failed to load configuration: {e}")
            raise
        _settings[cache_key] = settings
        source = env_file or 'environment'
        logger.info(f"Configuration loaded from {source} for locales: {', '.join(settings.locales)}")

    return _settings[cache_key]
