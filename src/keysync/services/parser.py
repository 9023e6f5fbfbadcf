"""
tree-sitter based JavaScript/TypeScript parsing
"""

import logging
import os
from functools import lru_cache
from typing import Optional

import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser, Tree

from ..utils.validators import ExtractorError

logger = logging.getLogger(__name__)

TS_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())

# plain TypeScript keeps `<T>value` casts unambiguous; everything else may hold JSX
TYPESCRIPT_EXTENSIONS = {'.ts', '.mts', '.cts'}


@lru_cache(maxsize=None)
def _get_parser(typescript: bool) -> Parser:
    return Parser(TS_LANGUAGE if typescript else TSX_LANGUAGE)


def parse_source(code: str, file_path: str) -> Tree:
    """
    Parse source text into a syntax tree

    Raises:
        ExtractorError: when the text has syntax errors
    """
    extension = os.path.splitext(file_path)[1].lower()
    parser = _get_parser(extension in TYPESCRIPT_EXTENSIONS)
    tree = parser.parse(code.encode('utf-8'))

    if tree.root_node.has_error:
        error_node = _first_error(tree.root_node)
        where = ''
        if error_node is not None:
            row, column = error_node.start_point
            where = f" at line {row + 1}, column {column}"
        raise ExtractorError(f"Failed to parse source{where}", file_path)

    return tree


def parse_snippet(code: str) -> Optional[Node]:
    """Parse a short snippet, None when it does not parse cleanly"""
    tree = _get_parser(False).parse(code.encode('utf-8'))
    if tree.root_node.has_error:
        return None
    return tree.root_node


def _first_error(node: Node) -> Optional[Node]:
    if node.type == 'ERROR' or node.is_missing:
        return node
    for child in node.children:
        if child.has_error:
            found = _first_error(child)
            if found is not None:
                return found
    return None
