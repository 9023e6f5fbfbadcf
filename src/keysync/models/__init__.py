"""
Data models for i18n-keysync
"""

from .extracted_key import ExtractedKey, KeyLocation, PluralOptions
from .scope import ScopeBinding
from .translation import BuiltTree, KeyEntry, SortEntry, TranslationResult

__all__ = [
    'ExtractedKey', 'KeyLocation', 'PluralOptions', 'ScopeBinding',
    'BuiltTree', 'KeyEntry', 'SortEntry', 'TranslationResult'
]
