"""
Helpers for reading tree-sitter JavaScript/TypeScript nodes
"""

import re
from typing import Any, List, Optional, Tuple

from tree_sitter import Node

WRAPPER_TYPES = {'parenthesized_expression', 'non_null_expression'}

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_SIMPLE_ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', 'b': '\b', 'f': '\f', 'v': '\v', '0': '\0',
    '\n': '', '\r\n': '', '\r': '', '\u2028': '', '\u2029': ''
}

# marks option values that are present but not statically known
UNRESOLVED = object()


def node_text(node: Node) -> str:
    return node.text.decode('utf-8')


def children(node: Optional[Node]) -> List[Node]:
    """Named children without comments"""
    if node is None:
        return []
    return [child for child in node.named_children if child.type != 'comment']


def unwrap(node: Optional[Node]) -> Optional[Node]:
    """Strip parentheses and non-null assertions"""
    while node is not None and node.type in WRAPPER_TYPES:
        inner = children(node)
        node = inner[0] if inner else None
    return node


def call_arguments(call: Node) -> List[Node]:
    return children(call.child_by_field_name('arguments'))


def unescape_js(raw: str) -> str:
    """Decode JavaScript string escapes"""
    def replace(match: 're.Match[str]') -> str:
        escape = match.group(1)
        if escape.startswith('u{'):
            return chr(int(escape[2:-1], 16))
        if escape.startswith('u') and len(escape) == 5:
            return chr(int(escape[1:], 16))
        if escape.startswith('x') and len(escape) == 3:
            return chr(int(escape[1:], 16))
        return _SIMPLE_ESCAPES.get(escape, escape)

    return _ESCAPE_RE.sub(replace, raw)


def string_value(node: Optional[Node]) -> Optional[str]:
    """Value of a string literal or of a template without substitutions"""
    node = unwrap(node)
    if node is None:
        return None
    if node.type == 'string':
        return unescape_js(node_text(node)[1:-1])
    if node.type == 'template_string' and is_simple_template(node):
        return unescape_js(node_text(node)[1:-1])
    return None


def is_simple_template(node: Node) -> bool:
    return node.type == 'template_string' and not any(
        child.type == 'template_substitution' for child in node.named_children
    )


def template_parts(node: Node) -> Tuple[List[str], List[Node]]:
    """
    Split a template string into static text and embedded expressions

    Works for `template_string` expressions and `template_literal_type` types.
    There is always one more static part than expressions.
    """
    raw = node.text
    base = node.start_byte
    quasis: List[str] = []
    expressions: List[Node] = []
    cursor = 1

    for child in node.named_children:
        if child.type not in ('template_substitution', 'template_type'):
            continue
        quasis.append(unescape_js(raw[cursor:child.start_byte - base].decode('utf-8')))
        inner = children(child)
        if inner:
            expressions.append(inner[0])
        cursor = child.end_byte - base

    quasis.append(unescape_js(raw[cursor:len(raw) - 1].decode('utf-8')))
    return quasis, expressions


def property_name(key: Optional[Node]) -> Optional[str]:
    """Name of an object property key node"""
    if key is None:
        return None
    if key.type in ('property_identifier', 'identifier', 'shorthand_property_identifier',
                    'shorthand_property_identifier_pattern', 'number', 'private_property_identifier'):
        return node_text(key)
    if key.type == 'string':
        return string_value(key)
    if key.type == 'computed_property_name':
        return string_value(children(key)[0]) if children(key) else None
    return None


def object_properties(obj: Node) -> List[Tuple[str, Node]]:
    """(name, value node) pairs of an object literal, shorthand values are the identifier"""
    pairs: List[Tuple[str, Node]] = []
    for child in children(obj):
        if child.type == 'pair':
            name = property_name(child.child_by_field_name('key'))
            value = child.child_by_field_name('value')
            if name is not None and value is not None:
                pairs.append((name, value))
        elif child.type == 'shorthand_property_identifier':
            pairs.append((node_text(child), child))
    return pairs


def get_property(obj: Optional[Node], name: str) -> Optional[Node]:
    obj = unwrap(obj)
    if obj is None or obj.type != 'object':
        return None
    for prop_name, value in object_properties(obj):
        if prop_name == name:
            return value
    return None


def has_property(obj: Optional[Node], name: str) -> bool:
    obj = unwrap(obj)
    if obj is None or obj.type != 'object':
        return False
    return any(prop_name == name for prop_name, _ in object_properties(obj))


def property_names(obj: Optional[Node]) -> List[str]:
    obj = unwrap(obj)
    if obj is None or obj.type != 'object':
        return []
    return [prop_name for prop_name, _ in object_properties(obj)]


def literal_value(node: Optional[Node]) -> Any:
    """
    Python value of a literal expression

    Returns UNRESOLVED when the node is missing or not a literal.
    """
    node = unwrap(node)
    if node is None:
        return UNRESOLVED
    text = string_value(node)
    if text is not None:
        return text
    if node.type == 'true':
        return True
    if node.type == 'false':
        return False
    if node.type == 'null':
        return None
    if node.type == 'number':
        raw = node_text(node).replace('_', '')
        try:
            number = float(raw) if any(c in raw for c in '.eE') and not raw.lower().startswith('0x') else int(raw, 0)
        except ValueError:
            return UNRESOLVED
        return number
    return UNRESOLVED


def get_property_value(obj: Optional[Node], name: str) -> Any:
    return literal_value(get_property(obj, name))


def number_text(value: Any) -> str:
    """Render a literal the way JavaScript stringifies it"""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def member_chain(node: Optional[Node]) -> Optional[str]:
    """
    Dotted name of an identifier or member access chain

    `i18n.t` -> 'i18n.t', `this.props.t` -> 'this.props.t'; computed access gives None.
    """
    node = unwrap(node)
    if node is None:
        return None
    if node.type in ('identifier', 'this'):
        return node_text(node)
    if node.type == 'member_expression':
        prop = node.child_by_field_name('property')
        if prop is None or prop.type not in ('property_identifier', 'private_property_identifier'):
            return None
        base = member_chain(node.child_by_field_name('object'))
        if base is None:
            return None
        return f"{base}.{node_text(prop)}"
    return None


def location_of(node: Node) -> Tuple[int, int]:
    """1-based line and 0-based column"""
    row, column = node.start_point
    return row + 1, column
