"""
Translation function call handling
"""

import copy
import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from tree_sitter import Node

from ..config.settings import Settings
from ..models.extracted_key import ExtractedKey, KeyLocation, PluralOptions
from ..models.scope import ScopeBinding
from .ast_utils import (
    call_arguments, children, get_property, get_property_value, has_property,
    literal_value, location_of, member_chain, node_text, number_text,
    property_names, string_value, unwrap, UNRESOLVED
)
from .expression_resolver import ExpressionResolver
from .plugin_manager import PluginContext
from .scope_manager import ScopeManager

logger = logging.getLogger(__name__)

STATIC_CONTEXT_TYPES = ('string', 'number', 'true', 'false')


class CallHandler:
    """Extracts keys from calls such as `t('key', {...})` and `i18n.t(...)`"""

    def __init__(
        self,
        settings: Settings,
        context: PluginContext,
        resolver: ExpressionResolver,
        scope_manager: ScopeManager
    ):
        self.settings = settings
        self.extract = settings.extract
        self.context = context
        self.resolver = resolver
        self.scope_manager = scope_manager
        self.file_path = ''

        prefix = re.escape(self.extract.interpolation_prefix)
        suffix = re.escape(self.extract.interpolation_suffix)
        self._count_placeholder_re = re.compile(rf'{prefix}\s*count\s*{suffix}')

        nest_prefix = re.escape(self.extract.nesting_prefix)
        nest_suffix = re.escape(self.extract.nesting_suffix)
        self._nesting_re = re.compile(
            nest_prefix
            + r'((?:[^()"\']+|"[^"]*"|\'[^\']*\'|\((?:[^()]|"[^"]*"|\'[^\']*\')*\))*?)'
            + nest_suffix
        )

    def handle(
        self,
        node: Node,
        skip_key: Optional[Callable[[str], bool]] = None,
        location: Optional[Tuple[int, int]] = None
    ) -> None:
        """
        Extract keys from one call expression

        Args:
            node: call_expression node
            skip_key: Predicate for keys to leave out
            location: Line and column to record instead of the node position
        """
        callee_name = member_chain(node.child_by_field_name('function'))
        if not callee_name:
            return

        binding = self.scope_manager.resolve(callee_name)
        if binding is None and not self.scope_manager.matches_function_pattern(callee_name):
            return

        args = call_arguments(node)
        if not args:
            return

        keys, is_selector = self._keys_from_argument(args[0])
        if not keys:
            return

        separator = self.extract.plural_separator
        ordinal_suffix = f"{separator}ordinal"
        ordinal_by_key = False
        normalized: List[str] = []
        for key in keys:
            if key.endswith(ordinal_suffix):
                ordinal_by_key = True
                key = key[:-len(ordinal_suffix)]
            if key.strip():
                normalized.append(key)
        keys = normalized
        if skip_key is not None:
            keys = [key for key in keys if not self._skipped(key, skip_key)]
        if not keys:
            return

        call_default, options = self._default_and_options(args)
        self._emit(node, keys, binding, call_default, options, ordinal_by_key, is_selector, location)

    def _skipped(self, key: str, skip_key: Callable[[str], bool]) -> bool:
        if skip_key(key):
            return True
        ns_separator = self.extract.ns_separator
        if ns_separator and ns_separator in key:
            return skip_key(ns_separator.join(key.split(ns_separator)[1:]))
        return False

    def _keys_from_argument(self, argument: Node) -> Tuple[List[str], bool]:
        argument = unwrap(argument)
        if argument.type == 'arrow_function':
            key = self.key_from_selector(argument)
            return ([key] if key else []), True

        values: List[str] = []
        if argument.type == 'array':
            for element in children(argument):
                values.extend(self.resolver.resolve_key_values(element))
        else:
            values.extend(self.resolver.resolve_key_values(argument))

        return [value for value in values if value and value.strip()], False

    def key_from_selector(self, arrow: Node) -> Optional[str]:
        """
        Key of a selector function: `$ => $.a.b` or `$ => { return $.a['b'] }`

        Returns None when the body is not a plain property access chain.
        """
        body = unwrap(arrow.child_by_field_name('body'))
        if body is not None and body.type == 'statement_block':
            returned = next((stmt for stmt in children(body) if stmt.type == 'return_statement'), None)
            inner = children(returned)
            body = unwrap(inner[0]) if inner else None
        if body is None:
            return None

        parts: List[str] = []
        current = body
        while current is not None and current.type in ('member_expression', 'subscript_expression'):
            if current.type == 'member_expression':
                prop = current.child_by_field_name('property')
                if prop is None or prop.type != 'property_identifier':
                    return None
                parts.insert(0, node_text(prop))
            else:
                index = string_value(current.child_by_field_name('index'))
                if index is None:
                    return None
                parts.insert(0, index)
            current = unwrap(current.child_by_field_name('object'))

        if not parts:
            return None

        separator = self.extract.key_separator
        joiner = separator if isinstance(separator, str) and separator else '.'
        return joiner.join(parts)

    def _default_and_options(self, args: List[Node]) -> Tuple[Optional[str], Optional[Node]]:
        call_default: Optional[str] = None
        options: Optional[Node] = None

        if len(args) > 1:
            second = unwrap(args[1])
            if second.type == 'object':
                options = second
            elif second.type == 'string' or second.type == 'template_string':
                call_default = string_value(second)

        if len(args) > 2:
            third = unwrap(args[2])
            if third.type == 'object':
                options = third

        return call_default, options

    def _has_default_props(self, options: Optional[Node]) -> bool:
        return any(name.startswith('defaultValue') for name in property_names(options))

    def plural_forms(self, options: Optional[Node], ordinal: bool) -> Dict[str, str]:
        separator = self.extract.plural_separator
        prefix = f"defaultValue{separator}ordinal{separator}" if ordinal else f"defaultValue{separator}"
        forms: Dict[str, str] = {}
        for name in property_names(options):
            if not name.startswith(prefix):
                continue
            category = name[len(prefix):]
            if not ordinal and category.startswith(f"ordinal{separator}"):
                continue
            value = get_property_value(options, name)
            if isinstance(value, str):
                forms[category] = value
        return forms

    def _resolve_namespace(
        self, key: str, options: Optional[Node], binding: Optional[ScopeBinding]
    ) -> Tuple[Optional[str], str]:
        """Namespace and remaining key: options.ns, then `ns:key`, then scope, then default"""
        namespace: Optional[str] = None
        ns_value = unwrap(get_property(options, 'ns'))
        if ns_value is not None:
            if ns_value.type == 'array':
                first = children(ns_value)
                namespace = string_value(first[0]) if first else None
            else:
                namespace = string_value(ns_value)

        ns_separator = self.extract.ns_separator
        if not namespace and ns_separator and ns_separator in key:
            parts = key.split(ns_separator)
            namespace = parts[0]
            key = ns_separator.join(parts[1:])
            if not key.strip():
                logger.warning(f"Skipping key that became empty after namespace removal: '{namespace}{ns_separator}'")
                return None, ''

        if not namespace and binding is not None:
            namespace = binding.default_namespace
        if not namespace:
            namespace = self.extract.default_ns
        return namespace, key

    def apply_key_prefix(self, key: str, binding: Optional[ScopeBinding]) -> Optional[str]:
        """Prefix a key with the binding's key prefix, None when segments come out empty"""
        if binding is None or not binding.key_prefix:
            return key

        prefix = binding.key_prefix
        separator = self.extract.key_separator
        if not separator:
            return f"{prefix}{key}"

        final_key = f"{prefix}{key}" if prefix.endswith(separator) else f"{prefix}{separator}{key}"
        if any(not segment.strip() for segment in final_key.split(separator)):
            logger.warning(f"Skipping key with empty segments: '{final_key}' (keyPrefix: '{prefix}', key: '{key}')")
            return None
        return final_key

    def context_values(self, context_node: Optional[Node]) -> Tuple[List[str], bool]:
        """Values of a context expression and whether the context is dynamic"""
        context_node = unwrap(context_node)
        if context_node is None:
            return [], False

        if context_node.type in STATIC_CONTEXT_TYPES or (
                context_node.type == 'template_string' and string_value(context_node) is not None):
            value = literal_value(context_node)
            if value is UNRESOLVED:
                return [], False
            text = number_text(value)
            return ([text] if text != '' else []), False

        values = [value for value in self.resolver.resolve_context_values(context_node) if value]
        return values, True

    def _emit(
        self,
        node: Node,
        keys: List[str],
        binding: Optional[ScopeBinding],
        call_default: Optional[str],
        options: Optional[Node],
        ordinal_by_key: bool,
        is_selector: bool,
        location: Optional[Tuple[int, int]] = None
    ) -> None:
        option_default = get_property_value(options, 'defaultValue') if options is not None else UNRESOLVED
        final_default = option_default if isinstance(option_default, str) else call_default

        has_default_props = self._has_default_props(options)
        explicit_for_base = isinstance(final_default, str) or has_default_props
        explicit_for_variants = has_default_props or (
            isinstance(final_default, str) and not self._count_placeholder_re.search(final_default)
        )

        line, column = location or location_of(node)
        ns_separator = self.extract.ns_separator

        for index, original_key in enumerate(keys):
            namespace, key = self._resolve_namespace(original_key, options, binding)
            if namespace is None:
                continue

            final_key = self.apply_key_prefix(key, binding)
            if final_key is None:
                continue

            is_last = index == len(keys) - 1
            if not is_last:
                default = key
            elif isinstance(final_default, str):
                default = final_default
            elif ns_separator and ns_separator in original_key:
                default = original_key
            else:
                default = key

            contexts, dynamic_context = self.context_values(get_property(options, 'context'))

            plural = None
            has_count = has_property(options, 'count')
            if (has_count or ordinal_by_key) and not self.extract.disable_plurals:
                ordinal = get_property_value(options, 'ordinal') is True or ordinal_by_key
                plural = PluralOptions(
                    ordinal=ordinal,
                    forms=self.plural_forms(options, ordinal),
                    default=option_default if isinstance(option_default, str) else None,
                    call_default=call_default if is_last else None,
                    explicit_variants=explicit_for_variants
                )

            opaque = is_selector or get_property_value(options, 'returnObjects') is True
            location = KeyLocation(file=self.file_path, line=line, column=column)
            plain = self.emit_key(
                namespace, final_key, default, explicit_for_base, location,
                contexts=contexts, dynamic_context=dynamic_context, plural=plural, opaque=opaque
            )

            if plain:
                self.extract_nested_keys(final_key)
                if isinstance(final_default, str):
                    self.extract_nested_keys(final_default)

    def emit_key(
        self,
        namespace: str,
        key: str,
        default: str,
        explicit: bool,
        location: KeyLocation,
        contexts: Optional[List[str]] = None,
        dynamic_context: bool = False,
        plural: Optional[PluralOptions] = None,
        opaque: bool = False
    ) -> bool:
        """
        Add a key with its context and plural variants

        Returns:
            True when only the plain key was added
        """
        separator = self.extract.context_separator
        context_keys = [f"{key}{separator}{value}" for value in contexts or []]

        def make(text: str, **extra) -> ExtractedKey:
            return ExtractedKey(
                key=text,
                namespace=namespace,
                default_value=default,
                explicit_default=explicit,
                locations=[location],
                **extra
            )

        if plural is not None:
            targets = [(text, True) for text in context_keys]
            if not context_keys or (dynamic_context and self.extract.generate_base_plural_forms):
                targets.append((key, False))
            for text, is_context in targets:
                self.context.add_key(make(
                    text,
                    plural=copy.deepcopy(plural),
                    context_of=key if (is_context and dynamic_context) else None,
                    context_values=list(contexts or []) if (dynamic_context and not is_context) else None
                ))
            return False

        if context_keys or dynamic_context:
            for text in context_keys:
                self.context.add_key(make(text, context_of=key if dynamic_context else None))
            if dynamic_context:
                self.context.add_key(make(key, context_values=list(contexts or [])))
            return False

        self.context.add_key(make(key, opaque=opaque))
        return True

    def extract_nested_keys(self, text: str) -> None:
        """Add keys referenced as `$t(key, {...})` inside a key or default value"""
        if not text:
            return
        for match in self._nesting_re.finditer(text):
            if match.group(1):
                self._process_nested(match.group(1))

    def _process_nested(self, content: str) -> None:
        separator = self.extract.nesting_options_separator
        options_text = ''

        if separator not in content:
            key = content.strip()
        else:
            parts = re.split(rf'{re.escape(separator)}[ ]*{{', content)
            if len(parts) > 1:
                key = parts[0].strip()
                options_text = '{' + (separator + ' {').join(parts[1:])
            else:
                position = content.index(separator)
                key = content[:position].strip()
                options_text = content[position + 1:].strip()

        if len(key) >= 2 and key[0] == key[-1] and key[0] in ('"', "'"):
            key = key[1:-1]
        if not key.strip():
            return

        ns_separator = self.extract.ns_separator
        namespace = self.extract.default_ns
        if ns_separator and ns_separator in key:
            parts = key.split(ns_separator)
            namespace = parts[0]
            key = ns_separator.join(parts[1:])
            if not key.strip():
                return

        has_count = bool(re.search(r'[\'"]?count[\'"]?\s*:', options_text))
        context_match = re.search(r'[\'"]?context[\'"]?\s*:\s*([\'"])(.*?)\1', options_text)
        context = context_match.group(2) if context_match else None

        def nested(text: str, **extra) -> ExtractedKey:
            return ExtractedKey(key=text, namespace=namespace, default_value=text, **extra)

        if context is not None and not has_count:
            self.context.add_key(nested(key))
            if context:
                self.context.add_key(nested(f"{key}{self.extract.context_separator}{context}"))
            return

        if has_count and not self.extract.disable_plurals:
            target = f"{key}{self.extract.context_separator}{context}" if context else key
            self.context.add_key(nested(target, plural=PluralOptions()))
            return

        self.context.add_key(nested(key))
