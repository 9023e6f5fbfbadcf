"""
Translation tree and reconciliation result models
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Set


@dataclass
class KeyEntry:
    """Leaf of a freshly built translation tree"""
    key: str
    default_value: str
    explicit_default: bool = False
    opaque: bool = False


@dataclass
class SortEntry:
    """Record handed to a custom sort comparator, one per sibling"""
    key: str
    segment: str
    namespace: str
    is_leaf: bool
    default_value: Optional[str] = None


@dataclass
class BuiltTree:
    """Nested tree of KeyEntry leaves for one namespace and locale"""
    namespace: str
    locale: str
    tree: Dict[str, Any] = None
    opaque_paths: Set[str] = None
    plural_bases: Set[str] = None
    context_bases: Set[str] = None

    def __post_init__(self):
        if self.tree is None:
            self.tree = {}
        if self.opaque_paths is None:
            self.opaque_paths = set()
        if self.plural_bases is None:
            self.plural_bases = set()
        if self.context_bases is None:
            self.context_bases = set()


@dataclass
class TranslationResult:
    """Outcome of reconciling one catalog file"""
    path: str
    namespace: Optional[str]
    locale: str
    existing_translations: Dict[str, Any] = None
    new_translations: Dict[str, Any] = None
    updated: bool = False

    def __post_init__(self):
        if self.existing_translations is None:
            self.existing_translations = {}
        if self.new_translations is None:
            self.new_translations = {}

