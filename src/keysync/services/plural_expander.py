"""
Plural and context variant generation
"""

import re
from dataclasses import dataclass
from typing import List, Optional

from ..i18n.plural_rules import get_plural_categories, is_single_other
from ..models.extracted_key import PluralOptions

ALL_CATEGORIES = ('zero', 'one', 'two', 'few', 'many', 'other')


@dataclass
class PluralVariant:
    """One generated plural form of a key"""
    key: str
    default_value: str
    explicit: bool
    category: Optional[str] = None


def expand_context(key: str, contexts: List[str], separator: str = '_') -> List[str]:
    """Context variants of a key, empty values skipped"""
    variants: List[str] = []
    for context in contexts:
        if context == '':
            continue
        variant = f"{key}{separator}{context}"
        if variant not in variants:
            variants.append(variant)
    return variants


def resolve_plural_categories(locale: str, primary_language: str, ordinal: bool = False) -> List[str]:
    """
    Categories to generate for one locale

    Categories come back alphabetical, as catalogs are written, not in
    CLDR order. Returns an empty list when the primary language has no
    plural distinction, in which case only the unsuffixed key is written.
    """
    if is_single_other(primary_language, ordinal):
        return []
    return sorted(get_plural_categories(locale, ordinal))


def expand_plural(
    key: str,
    options: PluralOptions,
    locale: str,
    primary_language: str,
    separator: str = '_'
) -> List[PluralVariant]:
    """
    Generate the suffixed keys of a plural request for one locale

    Args:
        key: Base key, context already applied
        options: Defaults collected at the call site
        locale: Target locale
        primary_language: Locale whose rules decide the single-form case
        separator: Plural separator

    Returns:
        Variants in alphabetical category order
    """
    categories = resolve_plural_categories(locale, primary_language, options.ordinal)

    if not categories:
        specific_other = options.forms.get('other')
        default = _first_text(specific_other, options.default, options.call_default, key)
        return [PluralVariant(
            key=key,
            default_value=default,
            explicit=bool(options.explicit_variants or specific_other is not None)
        )]

    infix = f"{separator}ordinal" if options.ordinal else ''
    other_default = options.forms.get('other')
    variants: List[PluralVariant] = []

    for category in categories:
        specific = options.forms.get(category)
        if specific is not None:
            default = specific
        elif category == 'one' and (options.default is not None or options.call_default is not None):
            default = _first_text(options.default, options.call_default)
        else:
            default = _first_text(other_default, options.default, options.call_default, key)

        variants.append(PluralVariant(
            key=f"{key}{infix}{separator}{category}",
            default_value=default,
            explicit=bool(options.explicit_variants or specific is not None or other_default is not None),
            category=category
        ))

    return variants


def plural_variant_pattern(separator: str = '_') -> 're.Pattern[str]':
    """Regex splitting a suffixed plural key into base and category"""
    sep = re.escape(separator)
    categories = '|'.join(ALL_CATEGORIES)
    return re.compile(rf'^(?P<base>.+?)(?:{sep}ordinal)?{sep}(?P<category>{categories})$')


def _first_text(*candidates: Optional[str]) -> str:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return ''
