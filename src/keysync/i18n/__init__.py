"""
Plural category tables
"""

from .plural_rules import get_plural_categories, is_single_other

__all__ = ['get_plural_categories', 'is_single_other']
