"""
Utility modules for i18n-keysync
"""

from .validators import ExtractorError, validate_extractor_config
from .nested_object import set_nested_value
from .default_value import resolve_default_value
from .file_utils import find_source_files, get_output_path, expand_braces, glob_to_regex

__all__ = [
    'ExtractorError', 'validate_extractor_config',
    'set_nested_value',
    'resolve_default_value', 'find_source_files', 'get_output_path', 'expand_braces', 'glob_to_regex'
]
