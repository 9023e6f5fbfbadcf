"""
Extracted key data models
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class KeyLocation:
    """Place in a source file where a key was found"""
    file: str
    line: int
    column: int = 0

    def __post_init__(self):
        if self.line < 1:
            raise ValueError("Line numbers start at 1")


@dataclass
class PluralOptions:
    """Plural request attached to a key found with a count option"""
    ordinal: bool = False
    forms: Dict[str, str] = None
    default: Optional[str] = None
    call_default: Optional[str] = None
    explicit_variants: bool = False

    def __post_init__(self):
        if self.forms is None:
            self.forms = {}

    @property
    def kind(self) -> str:
        return 'ordinal' if self.ordinal else 'plural'


@dataclass
class ExtractedKey:
    """
    A translation key discovered in source.

    Plain keys, plural keys and ordinal keys with the same text are kept
    apart: plural suffixes are only generated per locale by the tree builder.
    """
    key: str
    namespace: str
    default_value: Optional[str] = None
    explicit_default: bool = False
    plural: Optional[PluralOptions] = None
    context_values: Optional[List[str]] = None
    context_of: Optional[str] = None
    opaque: bool = False
    locations: List[KeyLocation] = None

    def __post_init__(self):
        if self.locations is None:
            self.locations = []

        if not self.key.strip():
            raise ValueError("Key cannot be empty")

    @property
    def identity(self) -> str:
        """Stable map key: namespace, key and plural kind"""
        base = f"{self.namespace}:{self.key}"
        if self.plural is not None:
            return f"{base}#{self.plural.kind}"
        return base

    def merge(self, other: 'ExtractedKey') -> None:
        """Fold another sighting of the same key into this one"""
        if other.explicit_default:
            # the last explicit default overwrites
            self.default_value = other.default_value
            self.explicit_default = True
            if other.plural is not None:
                self.plural = other.plural
        elif self.default_value is None and other.default_value is not None:
            self.default_value = other.default_value

        if self.plural is not None and other.plural is not None and not other.explicit_default:
            for category, text in other.plural.forms.items():
                self.plural.forms.setdefault(category, text)

        if other.context_values is not None:
            merged = list(self.context_values or [])
            for value in other.context_values:
                if value not in merged:
                    merged.append(value)
            self.context_values = merged

        if self.context_of is None:
            self.context_of = other.context_of

        # one returnObjects sighting makes the path opaque
        self.opaque = self.opaque or other.opaque
        self.locations.extend(other.locations)
