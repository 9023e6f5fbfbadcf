"""
Build the nested translation tree of one namespace for one locale
"""

import logging
from typing import Dict, Iterable, List, Tuple

from ..config.settings import Settings
from ..models.extracted_key import ExtractedKey
from ..models.translation import BuiltTree, KeyEntry
from ..utils.nested_object import set_nested_value
from .plural_expander import expand_plural

logger = logging.getLogger(__name__)


def build_tree(
    keys: Iterable[ExtractedKey],
    namespace: str,
    locale: str,
    settings: Settings
) -> BuiltTree:
    """
    Turn the flat keys of one namespace into a nested tree

    Plural keys are expanded with the categories of `locale`. A path that
    lies under another key's leaf is stored flat on the root, whatever the
    order the keys were found in. Opaque keys get a fallback leaf only when
    no other key lives below them.

    Args:
        keys: All extracted keys, other namespaces are skipped
        namespace: Namespace to build
        locale: Target locale
        settings: Extractor settings

    Returns:
        BuiltTree with KeyEntry leaves and the paths the reconciler
        treats specially
    """
    extract = settings.extract
    built = BuiltTree(namespace=namespace, locale=locale)
    entries: Dict[str, KeyEntry] = {}

    for extracted in keys:
        if extracted.namespace != namespace:
            continue
        for path, entry in _entries_for(extracted, locale, settings):
            _add_entry(entries, path, entry)

        if extracted.opaque:
            built.opaque_paths.add(extracted.key)
        if extracted.plural is not None:
            built.plural_bases.add(extracted.key)
        if extracted.context_values is not None:
            built.context_bases.add(extracted.key)
        if extracted.context_of:
            built.context_bases.add(extracted.context_of)

    separator = extract.key_separator
    if not separator:
        built.tree = dict(entries)
        return built

    leaf_paths = {path for path, entry in entries.items() if not entry.opaque}
    covering = set()
    for path in entries:
        if _has_leaf_prefix(path, leaf_paths, separator):
            continue
        covering.update(_prefixes(path, separator))

    for path, entry in entries.items():
        if entry.opaque and path in covering:
            # children of an opaque key already give it a subtree
            continue
        if _has_leaf_prefix(path, leaf_paths, separator):
            built.tree[path] = entry
        else:
            set_nested_value(built.tree, path, entry, separator)

    return built


def _entries_for(
    extracted: ExtractedKey,
    locale: str,
    settings: Settings
) -> List[Tuple[str, KeyEntry]]:
    extract = settings.extract

    if extracted.plural is None:
        default = extracted.default_value if extracted.default_value is not None else extracted.key
        return [(extracted.key, KeyEntry(
            key=extracted.key,
            default_value=default,
            explicit_default=extracted.explicit_default,
            opaque=extracted.opaque
        ))]

    variants = expand_plural(
        extracted.key,
        extracted.plural,
        locale,
        settings.primary_language,
        extract.plural_separator
    )
    return [
        (variant.key, KeyEntry(
            key=variant.key,
            default_value=variant.default_value,
            explicit_default=variant.explicit
        ))
        for variant in variants
    ]


def _add_entry(entries: Dict[str, KeyEntry], path: str, entry: KeyEntry) -> None:
    existing = entries.get(path)
    if existing is None:
        entries[path] = entry
        return
    if entry.explicit_default and not existing.explicit_default:
        entries[path] = KeyEntry(
            key=path,
            default_value=entry.default_value,
            explicit_default=True,
            opaque=existing.opaque or entry.opaque
        )
    elif entry.opaque and not existing.opaque:
        existing.opaque = True


def _prefixes(path: str, separator: str) -> List[str]:
    segments = path.split(separator)
    return [separator.join(segments[:index]) for index in range(1, len(segments))]


def _has_leaf_prefix(path: str, leaf_paths: set, separator: str) -> bool:
    return any(prefix in leaf_paths for prefix in _prefixes(path, separator))
