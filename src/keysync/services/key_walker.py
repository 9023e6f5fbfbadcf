"""
Syntax tree walker that finds translation keys in one file
"""

import logging
from typing import Any, List

from tree_sitter import Node, Tree

from ..config.settings import Settings
from .ast_utils import children
from .call_handler import CallHandler
from .comment_scanner import CommentScanner
from .expression_resolver import ExpressionResolver
from .jsx_handler import JsxHandler
from .plugin_manager import (
    PluginContext, run_extract_context_from_expression,
    run_extract_keys_from_expression, run_on_visit_node
)
from .scope_manager import ScopeManager

logger = logging.getLogger(__name__)

SCOPE_TYPES = {
    'arrow_function', 'function_expression', 'function_declaration', 'function',
    'generator_function', 'generator_function_declaration', 'method_definition',
    'statement_block', 'class_body'
}
DECLARATION_TYPES = {'lexical_declaration', 'variable_declaration'}
JSX_ELEMENT_TYPES = {'jsx_element', 'jsx_self_closing_element'}


class KeyWalker:
    """
    Walks a syntax tree and reports keys into a plugin context

    One walker may be reused across files; scope and constant tables are
    reset at the start of every walk.
    """

    def __init__(self, settings: Settings, context: PluginContext, plugins: List[Any] = None):
        self.settings = settings
        self.context = context
        self.plugins = plugins if plugins is not None else settings.plugins

        self.scope_manager = ScopeManager(settings.extract)
        self.resolver = ExpressionResolver(
            key_hook=lambda expr: run_extract_keys_from_expression(self.plugins, expr, settings),
            context_hook=lambda expr: run_extract_context_from_expression(self.plugins, expr, settings)
        )
        self.call_handler = CallHandler(settings, context, self.resolver, self.scope_manager)
        self.jsx_handler = JsxHandler(settings, self.call_handler, self.resolver, self.scope_manager)
        self.comment_scanner = CommentScanner(settings, self.call_handler)

        context.scope_resolver = self.scope_manager.resolve

    def walk(self, tree: Tree, file_path: str) -> None:
        """Extract every key of one parsed file"""
        self.scope_manager.reset()
        self.resolver.reset()
        self.call_handler.file_path = file_path
        self.context.current_file = file_path

        self.scope_manager.enter_scope()
        try:
            self._visit(tree.root_node)
        finally:
            self.scope_manager.exit_scope()

    def _visit(self, node: Node) -> None:
        opens_scope = node.type in SCOPE_TYPES
        if opens_scope:
            self.scope_manager.enter_scope()

        try:
            self._capture_declarations(node)

            if node.type == 'call_expression':
                self.call_handler.handle(node)
            elif node.type in JSX_ELEMENT_TYPES:
                self.jsx_handler.handle(node)
            elif node.type == 'comment':
                self.comment_scanner.scan(node)

            if self.plugins:
                run_on_visit_node(self.plugins, node, self.context)

            for child in node.named_children:
                self._visit(child)
        finally:
            if opens_scope:
                self.scope_manager.exit_scope()

    def _capture_declarations(self, node: Node) -> None:
        """Record constants and bindings declared directly in this node"""
        for child in children(node):
            declaration = child
            if child.type == 'export_statement':
                declaration = child.child_by_field_name('declaration')
                if declaration is None:
                    continue
            if declaration.type not in DECLARATION_TYPES:
                continue
            for declarator in children(declaration):
                if declarator.type != 'variable_declarator':
                    continue
                self.resolver.capture_variable_declarator(declarator)
                self.scope_manager.handle_variable_declarator(declarator)
