"""
Reconciliation of freshly built trees against existing catalogs
"""

import copy
import functools
import logging
import os
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..config.settings import Settings
from ..models.extracted_key import ExtractedKey
from ..models.translation import BuiltTree, KeyEntry, SortEntry, TranslationResult
from ..utils.default_value import DefaultValueSource, resolve_default_value
from ..utils.file_utils import get_output_path, glob_to_regex, has_namespace_placeholder
from .catalog_store import CatalogStore
from .plural_expander import plural_variant_pattern
from .tree_builder import build_tree

logger = logging.getLogger(__name__)

TranslationTree = Dict[str, Any]

# marks a path that is absent from the existing catalog
_MISSING = object()


@dataclass
class ReconcilePolicy:
    """Everything the merge needs besides the two trees"""
    key_separator: Union[str, bool] = '.'
    ns_separator: Union[str, bool] = ':'
    context_separator: str = '_'
    plural_separator: str = '_'
    preserve_patterns: List['re.Pattern[str]'] = None
    remove_unused_keys: bool = True
    preserve_context_variants: bool = False
    sort: Union[bool, Callable[[SortEntry, SortEntry], int]] = True
    default_value: DefaultValueSource = ''
    sync_primary_with_defaults: bool = False
    sync_all: bool = False

    def __post_init__(self):
        if self.preserve_patterns is None:
            self.preserve_patterns = []

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        sync_primary_with_defaults: bool = False,
        sync_all: bool = False
    ) -> 'ReconcilePolicy':
        extract = settings.extract
        return cls(
            key_separator=extract.key_separator,
            ns_separator=extract.ns_separator,
            context_separator=extract.context_separator,
            plural_separator=extract.plural_separator,
            preserve_patterns=[glob_to_regex(pattern) for pattern in extract.preserve_patterns],
            remove_unused_keys=extract.remove_unused_keys,
            preserve_context_variants=extract.preserve_context_variants,
            sort=extract.sort,
            default_value=extract.default_value,
            sync_primary_with_defaults=sync_primary_with_defaults,
            sync_all=sync_all
        )


class _Merge:
    """Recursive merge of one namespace for one locale"""

    def __init__(self, built: BuiltTree, locale: str, is_primary: bool, policy: ReconcilePolicy):
        self.built = built
        self.namespace = built.namespace
        self.locale = locale
        self.is_primary = is_primary
        self.policy = policy
        self.plural_pattern = plural_variant_pattern(policy.plural_separator)

    def join(self, prefix: str, segment: str) -> str:
        separator = self.policy.key_separator
        if prefix and separator:
            return f"{prefix}{separator}{segment}"
        return segment

    def is_preserved(self, path: str) -> bool:
        candidates = [path]
        if self.policy.ns_separator:
            candidates.append(f"{self.namespace}{self.policy.ns_separator}{path}")
        return any(
            pattern.match(candidate)
            for pattern in self.policy.preserve_patterns
            for candidate in candidates
        )

    def merge(self, new_node: Dict[str, Any], existing_node: Any, prefix: str = '') -> TranslationTree:
        existing = existing_node if isinstance(existing_node, dict) else {}
        result: TranslationTree = {}

        for segment, new_value in new_node.items():
            path = self.join(prefix, segment)
            existing_value = existing.get(segment, _MISSING)

            if existing_value is not _MISSING and self.is_preserved(path):
                result[segment] = copy.deepcopy(existing_value)
            elif existing_value is not _MISSING and path in self.built.opaque_paths:
                result[segment] = copy.deepcopy(existing_value)
            elif isinstance(new_value, KeyEntry):
                result[segment] = self.leaf(path, new_value, existing_value)
            else:
                # an existing leaf here is replaced by the new structure
                result[segment] = self.merge(new_value, existing_value, path)

        for segment, existing_value in existing.items():
            if segment in new_node:
                continue
            kept = self.keep_unused(self.join(prefix, segment), existing_value)
            if kept is not _MISSING:
                result[segment] = kept

        return self.sort(result, prefix)

    def leaf(self, path: str, entry: KeyEntry, existing_value: Any) -> Any:
        has_existing = existing_value is not _MISSING and not isinstance(existing_value, dict)

        if self.is_primary:
            if not has_existing:
                return entry.default_value
            if self.policy.sync_primary_with_defaults and entry.explicit_default:
                return entry.default_value
            return copy.deepcopy(existing_value)

        if has_existing and not self.policy.sync_all:
            return copy.deepcopy(existing_value)
        return resolve_default_value(
            self.policy.default_value, path, self.namespace, self.locale, entry.default_value
        )

    def keep_unused(self, path: str, value: Any) -> Any:
        if self.is_preserved(path) or not self.policy.remove_unused_keys:
            return copy.deepcopy(value)

        if isinstance(value, dict):
            kept_children: TranslationTree = {}
            for segment, child in value.items():
                kept = self.keep_unused(self.join(path, segment), child)
                if kept is not _MISSING:
                    kept_children[segment] = kept
            return kept_children if kept_children else _MISSING

        match = self.plural_pattern.match(path)
        if match and match.group('base') in self.built.plural_bases:
            return copy.deepcopy(value)

        if self.policy.preserve_context_variants:
            separator = self.policy.context_separator
            for base in self.built.context_bases:
                if path.startswith(f"{base}{separator}"):
                    return copy.deepcopy(value)

        return _MISSING

    def sort(self, node: TranslationTree, prefix: str) -> TranslationTree:
        sort = self.policy.sort
        if sort is False or sort is None:
            return node

        if callable(sort):
            records = [
                SortEntry(
                    key=self.join(prefix, segment),
                    segment=segment,
                    namespace=self.namespace,
                    is_leaf=not isinstance(value, dict),
                    default_value=value if isinstance(value, str) else None
                )
                for segment, value in node.items()
            ]
            records.sort(key=functools.cmp_to_key(sort))
            return {record.segment: node[record.segment] for record in records}

        return {segment: node[segment] for segment in sorted(node)}


def reconcile(
    built: BuiltTree,
    existing: Optional[TranslationTree],
    locale: str,
    is_primary: bool,
    policy: ReconcilePolicy
) -> TranslationTree:
    """
    Merge a built tree into the existing catalog content

    Checks run per path in this order: preserve patterns, opaque paths,
    new leaves, existing-only paths. Where the two trees disagree on
    whether a path is a leaf or an object, the built tree wins.

    Args:
        built: Tree of the keys found in source
        existing: Catalog content on disk, None when there is none
        locale: Locale being written
        is_primary: Whether source defaults apply to this locale
        policy: Merge options

    Returns:
        The catalog content to write
    """
    merge = _Merge(built, locale, is_primary, policy)
    return merge.merge(built.tree, existing or {})


def group_by_namespace(keys: Iterable[ExtractedKey], ignore_namespaces: List[str] = None) -> Dict[str, List[ExtractedKey]]:
    """Keys grouped per namespace in discovery order"""
    ignored = set(ignore_namespaces or [])
    grouped: Dict[str, List[ExtractedKey]] = {}
    for key in keys:
        if key.namespace in ignored:
            continue
        grouped.setdefault(key.namespace, []).append(key)
    return grouped


async def get_translations(
    keys: Dict[str, ExtractedKey],
    settings: Settings,
    store: Optional[CatalogStore] = None,
    sync_primary_with_defaults: bool = False,
    sync_all: bool = False,
    cwd: Optional[str] = None
) -> List[TranslationResult]:
    """
    Compute the new content of every catalog file

    Nothing is written; each result carries the loaded and the new content
    and whether the serialized text changed.

    Args:
        keys: Extracted keys by identity
        settings: Extractor settings
        store: Catalog reader and serializer
        sync_primary_with_defaults: Overwrite primary values with explicit source defaults
        sync_all: Recompute every secondary value from the default source
        cwd: Directory relative output paths are resolved against

    Returns:
        One result per locale and namespace, or per locale when merged
    """
    extract = settings.extract
    store = store or CatalogStore(extract.output_format, extract.indentation)
    policy = ReconcilePolicy.from_settings(settings, sync_primary_with_defaults, sync_all)
    base_dir = cwd or os.getcwd()

    grouped = group_by_namespace(keys.values(), extract.ignore_namespaces)
    merged = extract.merge_namespaces or not has_namespace_placeholder(extract.output)
    results: List[TranslationResult] = []

    for locale in settings.locales:
        is_primary = locale == settings.primary_language

        if merged:
            path = os.path.join(base_dir, get_output_path(extract.output, locale))
            loaded = await store.read(path)
            existing = loaded or {}
            new_content: TranslationTree = {}

            for namespace, ns_keys in grouped.items():
                built = build_tree(ns_keys, namespace, locale, settings)
                new_content[namespace] = reconcile(built, existing.get(namespace), locale, is_primary, policy)

            for namespace, value in existing.items():
                if namespace in new_content:
                    continue
                if namespace in extract.ignore_namespaces:
                    new_content[namespace] = copy.deepcopy(value)
                    continue
                kept = reconcile(BuiltTree(namespace=namespace, locale=locale), value, locale, is_primary, policy)
                if kept:
                    new_content[namespace] = kept

            results.append(_result(store, path, None, locale, loaded, new_content))
            continue

        for namespace, ns_keys in grouped.items():
            path = os.path.join(base_dir, get_output_path(extract.output, locale, namespace))
            existing = await store.read(path)
            built = build_tree(ns_keys, namespace, locale, settings)
            new_content = reconcile(built, existing, locale, is_primary, policy)
            results.append(_result(store, path, namespace, locale, existing, new_content))

    return results


def _result(
    store: CatalogStore,
    path: str,
    namespace: Optional[str],
    locale: str,
    existing: Optional[TranslationTree],
    new_content: TranslationTree
) -> TranslationResult:
    old_text = store.serialize(existing) if existing is not None else ''
    new_text = store.serialize(new_content)
    return TranslationResult(
        path=os.path.normpath(path),
        namespace=namespace,
        locale=locale,
        existing_translations=existing or {},
        new_translations=new_content,
        updated=new_text != old_text
    )
