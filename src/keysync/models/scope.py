"""
Scope binding data model
"""

from dataclasses import dataclass
from typing import List, Optional, Union


@dataclass
class ScopeBinding:
    """Namespace and key prefix bound to a translation function variable"""
    namespace: Optional[Union[str, List[str]]] = None
    key_prefix: Optional[str] = None
    alias_name: Optional[str] = None
    alias_kind: str = 'hook'

    def __post_init__(self):
        if self.alias_kind not in ['function', 'hook']:
            raise ValueError("Alias kind must be 'function' or 'hook'")

    @property
    def default_namespace(self) -> Optional[str]:
        """Namespace that keys called through this binding land in"""
        if isinstance(self.namespace, list):
            return self.namespace[0] if self.namespace else None
        return self.namespace

    def merged_with(self, other: 'ScopeBinding') -> 'ScopeBinding':
        """Combine two bindings, values of `other` taking precedence"""
        return ScopeBinding(
            namespace=other.namespace if other.namespace is not None else self.namespace,
            key_prefix=other.key_prefix if other.key_prefix is not None else self.key_prefix,
            alias_name=other.alias_name or self.alias_name,
            alias_kind=other.alias_kind
        )
