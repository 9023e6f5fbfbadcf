"""
Lexical scope tracking for translation function bindings
"""

import logging
import re
from typing import Dict, List, Optional

from tree_sitter import Node

from ..config.settings import ExtractSettings, UseTranslationHook
from ..models.scope import ScopeBinding
from .ast_utils import (
    call_arguments, children, get_property, member_chain, node_text,
    string_value, unwrap
)

logger = logging.getLogger(__name__)

LANGUAGE_TAG_RE = re.compile(r'^[a-z]{2,3}([-_][A-Za-z0-9-]+)?$', re.IGNORECASE)


class ScopeManager:
    """
    Stack of lexical scopes mapping variable names to bindings

    A name mapped to None is a local declaration hiding an outer binding.
    """

    def __init__(self, settings: ExtractSettings):
        self.settings = settings
        self.scope_stack: List[Dict[str, Optional[ScopeBinding]]] = []
        self.simple_constants: Dict[str, str] = {}

    def reset(self):
        self.scope_stack = []
        self.simple_constants = {}

    def enter_scope(self, bindings: Optional[Dict[str, ScopeBinding]] = None):
        self.scope_stack.append(dict(bindings or {}))

    def exit_scope(self):
        if self.scope_stack:
            self.scope_stack.pop()

    def set_binding(self, name: str, binding: Optional[ScopeBinding]) -> None:
        if not self.scope_stack:
            self.enter_scope()
        self.scope_stack[-1][name] = binding

    def resolve(self, name: str) -> Optional[ScopeBinding]:
        """Find the innermost binding of a name"""
        for scope in reversed(self.scope_stack):
            if name in scope:
                return scope[name]
        return None

    def _hook_for(self, name: str) -> Optional[UseTranslationHook]:
        for hook in self.settings.hooks:
            if hook.name == name:
                return hook
        return None

    def handle_variable_declarator(self, declarator: Node) -> None:
        """Install bindings for hook calls, fixed-T calls and aliases"""
        target = declarator.child_by_field_name('name')
        init = unwrap(declarator.child_by_field_name('value'))
        if target is None or init is None:
            return

        if target.type == 'identifier':
            value = string_value(init)
            if value is not None:
                self.simple_constants[node_text(target)] = value

        if init.type == 'await_expression' and children(init):
            init = unwrap(children(init)[0])

        if init.type == 'call_expression':
            if self._handle_call_initializer(target, init):
                return
        elif init.type in ('identifier', 'member_expression') and target.type == 'identifier':
            if self._handle_alias(target, init):
                return

        self._shadow(target)

    def _handle_call_initializer(self, target: Node, call: Node) -> bool:
        callee = unwrap(call.child_by_field_name('function'))
        callee_name = member_chain(callee)
        if callee_name is None:
            return False

        if callee.type == 'identifier':
            hook = self._hook_for(callee_name)
            if hook is not None:
                binding = self._binding_from_hook(call, hook)
                for name in self._declared_names(target):
                    self.set_binding(name, binding)
                return True

            source = self.resolve(callee_name)
            if source is not None:
                if target.type != 'identifier':
                    return False
                binding = source.merged_with(self._fixed_t_binding(call))
                self.set_binding(node_text(target), binding)
                return True

        if callee.type == 'member_expression' and callee_name.split('.')[-1] == 'getFixedT':
            if target.type != 'identifier':
                return False
            binding = self._fixed_t_binding(call)
            if binding.namespace is None and binding.key_prefix is None:
                return False
            self.set_binding(node_text(target), binding)
            return True

        return False

    def _handle_alias(self, target: Node, source: Node) -> bool:
        source_name = member_chain(source)
        if source_name is None:
            return False

        bound = self.resolve(source_name)
        if bound is None and not self.matches_function_pattern(source_name):
            return False

        binding = ScopeBinding(
            namespace=bound.namespace if bound else None,
            key_prefix=bound.key_prefix if bound else None,
            alias_name=source_name,
            alias_kind='function'
        )
        self.set_binding(node_text(target), binding)
        return True

    def _shadow(self, target: Node) -> None:
        if target.type != 'identifier':
            return
        name = node_text(target)
        if self.resolve(name) is not None:
            self.set_binding(name, None)

    def matches_function_pattern(self, name: str) -> bool:
        """Check a callee name against the configured function patterns"""
        for pattern in self.settings.functions:
            if pattern.startswith('*.'):
                if name.endswith(pattern[1:]):
                    return True
            elif pattern == name:
                return True
        return False

    def _declared_names(self, target: Node) -> List[str]:
        if target.type == 'identifier':
            return [node_text(target)]

        if target.type == 'array_pattern':
            elements = children(target)
            if elements and elements[0].type == 'identifier':
                return [node_text(elements[0])]
            return []

        names: List[str] = []
        if target.type == 'object_pattern':
            for prop in children(target):
                if prop.type == 'shorthand_property_identifier_pattern':
                    names.append(node_text(prop))
                elif prop.type == 'pair_pattern':
                    value = prop.child_by_field_name('value')
                    if value is not None and value.type == 'identifier':
                        names.append(node_text(value))
                elif prop.type == 'object_assignment_pattern':
                    left = prop.child_by_field_name('left')
                    if left is not None and left.type in ('shorthand_property_identifier_pattern', 'identifier'):
                        names.append(node_text(left))
        return names

    def _binding_from_hook(self, call: Node, hook: UseTranslationHook) -> ScopeBinding:
        args = call_arguments(call)

        def arg(index: int) -> Optional[Node]:
            if index < 0 or index >= len(args):
                return None
            return unwrap(args[index])

        first, second = arg(0), arg(1)
        first_value = string_value(first) if first is not None and first.type == 'string' else None
        second_value = string_value(second) if second is not None and second.type == 'string' else None

        namespace = None
        if (hook.name == 'useTranslation' and first_value is not None and second_value is not None
                and LANGUAGE_TAG_RE.match(first_value)):
            # useTranslation(lng, ns, options)
            namespace = second_value
            prefix_node = arg(2)
        else:
            namespace = self._namespace_from(arg(hook.ns_arg))
            prefix_node = arg(hook.key_prefix_arg)

        return ScopeBinding(namespace=namespace, key_prefix=self._key_prefix_from(prefix_node), alias_kind='hook')

    def _fixed_t_binding(self, call: Node) -> ScopeBinding:
        # getFixedT(lng, ns, keyPrefix), the language is irrelevant for extraction
        args = call_arguments(call)
        namespace = self._namespace_from(unwrap(args[1])) if len(args) > 1 else None
        key_prefix = self._key_prefix_from(unwrap(args[2])) if len(args) > 2 else None
        return ScopeBinding(namespace=namespace, key_prefix=key_prefix, alias_kind='function')

    def _namespace_from(self, node: Optional[Node]):
        if node is None:
            return None
        if node.type == 'array':
            names = [string_value(item) for item in children(node)]
            names = [name for name in names if name]
            return names or None
        return string_value(node) or None

    def _key_prefix_from(self, node: Optional[Node]) -> Optional[str]:
        if node is None:
            return None
        if node.type == 'object':
            return self._key_prefix_from(unwrap(get_property(node, 'keyPrefix')))
        if node.type in ('identifier', 'shorthand_property_identifier'):
            return self.simple_constants.get(node_text(node))
        return string_value(node)
