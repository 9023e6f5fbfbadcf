"""
Configuration module for i18n-keysync
"""

from .settings import Settings, ExtractSettings, UseTranslationHook
from .load_config import load_settings

__all__ = ['Settings', 'ExtractSettings', 'UseTranslationHook', 'load_settings']
