"""
Default value resolution for secondary locales
"""

import logging
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

DefaultValueSource = Union[str, Callable[..., str], None]


def resolve_default_value(
    default_value: DefaultValueSource,
    key: str,
    namespace: str,
    language: str,
    value: Optional[str] = None
) -> str:
    """
    Resolve the configured default value for one key

    Args:
        default_value: Static string, callable or None
        key: Full key path
        namespace: Namespace of the key
        language: Target locale
        value: Default text found in source, the key when missing

    Returns:
        The resolved text, empty string when the callable fails
    """
    if callable(default_value):
        try:
            return default_value(key, namespace, language, value or key)
        except Exception as e:
            logger.warning(f"Default value function failed for key '{key}': {e}")
            return ''

    return default_value or ''
