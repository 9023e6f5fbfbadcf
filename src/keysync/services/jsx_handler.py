"""
Rich-text component (`<Trans>`) handling
"""

import html
import logging
import re
from typing import Any, Dict, List, Optional, Tuple, Union

from tree_sitter import Node

from ..config.settings import Settings
from ..models.extracted_key import KeyLocation, PluralOptions
from .ast_utils import (
    children, get_property, get_property_value, is_simple_template, location_of,
    node_text, object_properties, property_names, string_value, unwrap
)
from .call_handler import CallHandler
from .expression_resolver import ExpressionResolver
from .scope_manager import ScopeManager

logger = logging.getLogger(__name__)

CHILD_TYPES = ('jsx_expression', 'jsx_element', 'jsx_self_closing_element')

_LEADING_NEWLINE_RE = re.compile(r'^[ \t]*\n[ \t]*')
_TRAILING_NEWLINE_RE = re.compile(r'[ \t]*\n[ \t]*$')
_INNER_NEWLINE_RE = re.compile(r'[ \t]*\n[ \t]*')


class Placeholder:
    """Interpolation object child such as `{name}` or `{{ count }}`"""

    def __init__(self, names: List[str]):
        self.names = names


class Element:
    """Element child of a rich-text component"""

    def __init__(self, name: Optional[str], attribute_count: int, kids: List[Any], is_component: bool):
        self.name = name
        self.attribute_count = attribute_count
        self.children = kids
        self.is_component = is_component


Child = Union[str, Placeholder, Element]


def trim_text(text: str) -> Optional[str]:
    """Normalize JSX text the way React does, None when it disappears"""
    text = text.replace('\r\n', '\n')
    if text.strip() == '' and '\n' in text:
        return None
    text = _LEADING_NEWLINE_RE.sub('', text)
    text = _TRAILING_NEWLINE_RE.sub('', text)
    text = _INNER_NEWLINE_RE.sub(' ', text)
    return text


def element_parts(node: Node) -> Tuple[Optional[Node], List[Node]]:
    """Name node and attribute nodes of a JSX element or self-closing element"""
    opening = node.child_by_field_name('open_tag') if node.type == 'jsx_element' else node
    if opening is None:
        return None, []
    name = opening.child_by_field_name('name')
    attributes = [child for child in children(opening) if child.type == 'jsx_attribute']
    spreads = [child for child in children(opening) if child.type == 'jsx_expression']
    return name, attributes + spreads


def element_name(name_node: Optional[Node]) -> Optional[str]:
    if name_node is None:
        return None
    return node_text(name_node)


def attribute_map(attributes: List[Node]) -> Dict[str, Optional[Node]]:
    """Attribute name to value node, None for valueless attributes"""
    result: Dict[str, Optional[Node]] = {}
    for attribute in attributes:
        if attribute.type != 'jsx_attribute':
            continue
        parts = children(attribute)
        if not parts:
            continue
        result[node_text(parts[0])] = parts[1] if len(parts) > 1 else None
    return result


def attribute_expression(value: Optional[Node]) -> Optional[Node]:
    """Expression inside `attr={...}`, or the string node of `attr="..."`"""
    if value is None:
        return None
    if value.type == 'jsx_expression':
        inner = children(value)
        return unwrap(inner[0]) if inner else None
    return value


def attribute_string(value: Optional[Node]) -> Optional[str]:
    if value is None:
        return None
    if value.type == 'string':
        # JSX attribute strings are not escape-processed
        return node_text(value)[1:-1]
    return string_value(attribute_expression(value))


class JsxHandler:
    """Extracts keys and default text from rich-text components"""

    def __init__(
        self,
        settings: Settings,
        call_handler: CallHandler,
        resolver: ExpressionResolver,
        scope_manager: ScopeManager
    ):
        self.settings = settings
        self.extract = settings.extract
        self.call_handler = call_handler
        self.resolver = resolver
        self.scope_manager = scope_manager

    def is_trans_component(self, node: Node) -> bool:
        name_node, _ = element_parts(node)
        name = element_name(name_node)
        if not name:
            return False
        return name in self.extract.trans_components or name.split('.')[-1] in self.extract.trans_components

    def handle(self, node: Node) -> None:
        if not self.is_trans_component(node):
            return
        try:
            self._handle_trans(node)
        except Exception as e:
            line, column = location_of(node)
            logger.warning(f"Failed to extract <Trans> at {self.call_handler.file_path}:{line}:{column}: {e}")

    def _handle_trans(self, node: Node) -> None:
        _, attribute_nodes = element_parts(node)
        attributes = attribute_map(attribute_nodes)
        extract = self.extract
        ns_separator = extract.ns_separator

        options = attribute_expression(attributes.get('tOptions'))
        if options is not None and options.type != 'object':
            options = None

        namespace = attribute_string(attributes['ns']) if 'ns' in attributes else None
        if namespace is None and options is not None:
            ns_option = get_property_value(options, 'ns')
            namespace = ns_option if isinstance(ns_option, str) else None

        has_count = 'count' in attributes
        if not has_count:
            values = attribute_expression(attributes.get('values'))
            has_count = values is not None and values.type == 'object' and get_property(values, 'count') is not None

        context_node = None
        if 'context' in attributes:
            context_node = attribute_expression(attributes['context'])
        elif options is not None:
            context_node = get_property(options, 'context')

        serialized = self.serialize_children(node)

        defaults_literal = attribute_string(attributes['defaults']) if 'defaults' in attributes else None

        keys: List[str] = []
        literal_key: Optional[str] = None
        if 'i18nKey' in attributes:
            value = attributes['i18nKey']
            if value is not None and value.type == 'string':
                literal_key = attribute_string(value)
                if not literal_key or not literal_key.strip():
                    return
                if namespace and ns_separator and literal_key.startswith(f"{namespace}{ns_separator}"):
                    literal_key = literal_key[len(namespace) + len(ns_separator):]
                    if not literal_key.strip():
                        return
                keys = [literal_key]
            else:
                expression = attribute_expression(value)
                if expression is None:
                    return
                keys = self.resolver.resolve_key_values(expression)
        else:
            keys = [serialized]

        keys = [key for key in keys if key and key.strip()]
        if not keys:
            return

        if defaults_literal is not None:
            default_text = defaults_literal
        elif serialized.strip():
            default_text = serialized
        else:
            default_text = None

        explicit = defaults_literal is not None or any(
            name.startswith('defaultValue') for name in property_names(options)
        )

        binding = None
        t_expression = attribute_expression(attributes.get('t'))
        if t_expression is not None and t_expression.type == 'identifier':
            binding = self.scope_manager.resolve(node_text(t_expression))

        contexts, dynamic_context = self.call_handler.context_values(context_node)
        line, column = location_of(node)
        location = KeyLocation(file=self.call_handler.file_path, line=line, column=column)
        ordinal = 'ordinal' in attributes

        for key in keys:
            key_namespace = namespace
            if key_namespace is None and ns_separator and ns_separator in key:
                parts = key.split(ns_separator)
                key_namespace = parts[0]
                key = ns_separator.join(parts[1:])
                if not key.strip():
                    continue

            if binding is not None and namespace is None:
                if key_namespace is None:
                    key_namespace = binding.default_namespace
                prefixed = self.call_handler.apply_key_prefix(key, binding)
                if prefixed is not None:
                    key = prefixed

            key_namespace = key_namespace or extract.default_ns
            default = default_text if default_text is not None else key

            plural = None
            if has_count and not extract.disable_plurals:
                plural = PluralOptions(
                    ordinal=ordinal,
                    forms=self.call_handler.plural_forms(options, ordinal),
                    default=default_text,
                    explicit_variants=explicit
                )

            self.call_handler.emit_key(
                key_namespace, key, default, explicit, location,
                contexts=contexts, dynamic_context=dynamic_context, plural=plural
            )

    def serialize_children(self, node: Node) -> str:
        """Default text of a component's children with `<N>` tags for elements"""
        if node.type != 'jsx_element':
            return ''
        return self._nodes_to_string(self._children_of(node))

    def _children_of(self, node: Node) -> List[Child]:
        open_tag = node.child_by_field_name('open_tag')
        close_tag = node.child_by_field_name('close_tag')
        if open_tag is None or close_tag is None:
            return []

        raw = node.text
        base = node.start_byte
        cursor = open_tag.end_byte
        result: List[Child] = []

        def add_text(end: int):
            if end <= cursor:
                return
            text = trim_text(html.unescape(raw[cursor - base:end - base].decode('utf-8')))
            if text is not None:
                result.append(text)

        for child in node.named_children:
            if child.type not in CHILD_TYPES or child.start_byte < open_tag.end_byte or child.end_byte > close_tag.start_byte:
                continue
            add_text(child.start_byte)
            converted = self._convert(child)
            if converted is not None:
                result.append(converted)
            cursor = child.end_byte

        add_text(close_tag.start_byte)
        return result

    def _convert(self, node: Node) -> Optional[Child]:
        if node.type == 'jsx_expression':
            inner = children(node)
            if not inner:
                return None
            if inner[0].type == 'spread_element':
                return ''
            return self._convert_expression(inner[0])

        name_node, attributes = element_parts(node)
        name = element_name(name_node)
        is_component = name is None or name_node.type != 'identifier' or any(c.isupper() for c in name)
        kids = self._children_of(node) if node.type == 'jsx_element' else []
        attribute_count = len([item for item in attributes if item.type == 'jsx_attribute'])
        return Element(name, attribute_count, kids, is_component)

    def _convert_expression(self, expression: Node) -> Optional[Child]:
        while expression.type in ('parenthesized_expression', 'as_expression', 'satisfies_expression'):
            inner = children(expression)
            if not inner:
                return None
            expression = inner[0]

        if expression.type == 'ternary_expression':
            consequent = self._convert_expression(expression.child_by_field_name('consequence'))
            alternate = self._convert_expression(expression.child_by_field_name('alternative'))
            if (isinstance(consequent, str) and isinstance(alternate, str)
                    and len(alternate) != len(consequent) and alternate.startswith(consequent)):
                return alternate
            return consequent

        if expression.type == 'string':
            return string_value(expression)

        if expression.type == 'template_string' and is_simple_template(expression):
            return node_text(expression)[1:-1]

        if expression.type == 'identifier':
            return Placeholder([node_text(expression)])

        if expression.type == 'object':
            return Placeholder([name for name, _ in object_properties(expression)])

        return Element('expression', 1, [], False)

    def _nodes_to_string(self, nodes: List[Child]) -> str:
        keep = self.extract.trans_keep_basic_html_nodes_for
        output = ''

        for index, child in enumerate(nodes):
            if isinstance(child, str):
                output += child
                continue

            if isinstance(child, Placeholder):
                names = [name for name in child.names if name != 'format']
                if len(names) == 1:
                    value = f"{names[0]}, format" if 'format' in child.names else names[0]
                    output += f"{{{{{value}}}}}"
                continue

            should_keep = not child.is_component and child.name in keep
            has_children = bool(child.children)

            if not has_children and should_keep and not child.attribute_count:
                output += f"<{child.name}/>"
            elif not has_children:
                output += f"<{index}></{index}>"
            elif should_keep and not child.attribute_count and len(child.children) == 1 and isinstance(child.children[0], str):
                output += f"<{child.name}>{child.children[0]}</{child.name}>"
            else:
                output += f"<{index}>{self._nodes_to_string(child.children)}</{index}>"

        return output
