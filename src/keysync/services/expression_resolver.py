"""
Static resolution of expressions to the string values they can produce
"""

import logging
from typing import Callable, Dict, List, Optional, Union

from tree_sitter import Node

from .ast_utils import (
    children, literal_value, node_text, number_text, object_properties,
    string_value, template_parts, unwrap, UNRESOLVED
)

logger = logging.getLogger(__name__)

Symbol = Union[List[str], Dict[str, str]]
ExpressionHook = Callable[[Node], List[str]]


class ExpressionResolver:
    """
    Resolves expressions to finite sets of strings

    Keeps a per-file table of constants declared with simple initializers
    (string literals, templates, concatenations and objects of those) so
    identifiers and member accesses on them can be resolved later.
    """

    def __init__(self, key_hook: Optional[ExpressionHook] = None,
                 context_hook: Optional[ExpressionHook] = None):
        self.key_hook = key_hook
        self.context_hook = context_hook
        self.symbol_table: Dict[str, Symbol] = {}

    def reset(self):
        """Forget constants of the previous file"""
        self.symbol_table = {}

    def capture_variable_declarator(self, declarator: Node) -> None:
        """Record the value of `const name = <static initializer>`"""
        name_node = declarator.child_by_field_name('name')
        init = unwrap(declarator.child_by_field_name('value'))
        if name_node is None or init is None or name_node.type != 'identifier':
            return
        name = node_text(name_node)

        target = init
        if target.type in ('as_expression', 'satisfies_expression') and children(target):
            inner = unwrap(children(target)[0])
            if inner is not None and inner.type == 'object':
                target = inner

        if target.type == 'object':
            mapping: Dict[str, str] = {}
            for prop_name, value in object_properties(target):
                values = self.resolve_string_values(value)
                if len(values) == 1:
                    mapping[prop_name] = values[0]
            if mapping:
                self.symbol_table[name] = mapping
                return

        values = self.resolve_string_values(init)
        if values:
            self.symbol_table[name] = values

    def resolve_key_values(self, expression: Node) -> List[str]:
        """Keys an expression can produce, plugin results first"""
        found = self._run_hook(self.key_hook, expression)
        return found + self.resolve_string_values(expression)

    def resolve_context_values(self, expression: Node) -> List[str]:
        """Context values an expression can produce, plugin results first"""
        found = self._run_hook(self.context_hook, expression)
        return found + self.resolve_string_values(expression)

    def _run_hook(self, hook: Optional[ExpressionHook], expression: Node) -> List[str]:
        if hook is None:
            return []
        return [value for value in hook(expression) if isinstance(value, str)]

    def resolve_string_values(self, expression: Optional[Node], return_empty: bool = False) -> List[str]:
        """
        Resolve an expression to every string it can statically produce

        Args:
            expression: Expression node
            return_empty: Keep empty strings in the result

        Returns:
            Possible values, empty when the expression is dynamic
        """
        node = unwrap(expression)
        if node is None:
            return []

        if node.type == 'string':
            value = string_value(node)
            return [value] if value or return_empty else []

        if node.type == 'ternary_expression':
            return (
                self.resolve_string_values(node.child_by_field_name('consequence'), return_empty)
                + self.resolve_string_values(node.child_by_field_name('alternative'), return_empty)
            )

        if node.type == 'undefined' or (node.type == 'identifier' and node_text(node) == 'undefined'):
            return []

        if node.type == 'template_string':
            return self._resolve_template(node)

        if node.type == 'member_expression':
            return self._resolve_member(node)

        if node.type == 'subscript_expression':
            return self._resolve_subscript(node)

        if node.type == 'binary_expression':
            operator = node.child_by_field_name('operator')
            if operator is not None and node_text(operator) == '+':
                left = self.resolve_string_values(node.child_by_field_name('left'), return_empty)
                right = self.resolve_string_values(node.child_by_field_name('right'), return_empty)
                if left and right:
                    return [f"{lhs}{rhs}" for lhs in left for rhs in right]
            return []

        if node.type in ('number', 'true', 'false'):
            value = literal_value(node)
            return [] if value is UNRESOLVED else [number_text(value)]

        if node.type in ('as_expression', 'satisfies_expression'):
            parts = children(node)
            if len(parts) < 2:
                return []
            values = self._resolve_type(parts[1], return_empty)
            if values:
                return values
            return self.resolve_string_values(parts[0], return_empty)

        if node.type == 'identifier':
            symbol = self.symbol_table.get(node_text(node))
            if isinstance(symbol, list):
                return list(symbol)
            return []

        return []

    def _resolve_template(self, node: Node) -> List[str]:
        quasis, expressions = template_parts(node)
        results = [quasis[0]]
        for index, expression in enumerate(expressions):
            values = self.resolve_string_values(expression, True)
            tail = quasis[index + 1]
            results = [f"{head}{value}{tail}" for head in results for value in values]
        return results

    def _resolve_member(self, node: Node) -> List[str]:
        obj = unwrap(node.child_by_field_name('object'))
        prop = node.child_by_field_name('property')
        if obj is None or obj.type != 'identifier' or prop is None:
            return []
        return self._lookup_mapping(node_text(obj), node_text(prop))

    def _resolve_subscript(self, node: Node) -> List[str]:
        obj = unwrap(node.child_by_field_name('object'))
        index = string_value(node.child_by_field_name('index'))
        if obj is None or obj.type != 'identifier' or index is None:
            return []
        return self._lookup_mapping(node_text(obj), index)

    def _lookup_mapping(self, name: str, prop: str) -> List[str]:
        symbol = self.symbol_table.get(name)
        if isinstance(symbol, dict) and prop in symbol:
            return [symbol[prop]]
        return []

    def _resolve_type(self, type_node: Optional[Node], return_empty: bool = False) -> List[str]:
        if type_node is None:
            return []

        if type_node.type == 'union_type':
            values: List[str] = []
            for member in children(type_node):
                values.extend(self._resolve_type(member, return_empty))
            return values

        if type_node.type == 'parenthesized_type':
            inner = children(type_node)
            return self._resolve_type(inner[0], return_empty) if inner else []

        if type_node.type == 'literal_type':
            inner = children(type_node)
            if not inner:
                return []
            literal = inner[0]
            if literal.type == 'string':
                value = string_value(literal)
                return [value] if value or return_empty else []
            value = literal_value(literal)
            return [] if value is UNRESOLVED or value is None else [number_text(value)]

        if type_node.type == 'template_literal_type':
            quasis, types = template_parts(type_node)
            results = [quasis[0]]
            for index, member in enumerate(types):
                values = self._resolve_type(member, True)
                tail = quasis[index + 1]
                results = [f"{head}{value}{tail}" for head in results for value in values]
            return results

        return []
