"""
Reading and writing translation catalog files
"""

import json
import logging
from collections import deque
from typing import Any, Dict, Optional, Union

import aiofiles

from ..config.settings import OUTPUT_FORMATS
from ..utils.file_utils import ensure_directory_exists
from ..utils.validators import ExtractorError
from .ast_utils import UNRESOLVED, children, literal_value, property_name, unwrap
from .parser import parse_source

logger = logging.getLogger(__name__)

TranslationTree = Dict[str, Any]

_WRAPPERS = {
    'js': ('export default ', ';'),
    'js-esm': ('export default ', ';'),
    'js-cjs': ('module.exports = ', ';'),
    'ts': ('export default ', ' as const;'),
}


class CatalogStore:
    """
    Catalog file access for one output format

    JSON files are read with the json module; JavaScript and TypeScript
    catalogs are read back by parsing the exported object literal.
    """

    def __init__(self, output_format: str = 'json', indentation: Union[int, str] = 2):
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Output format must be one of: {', '.join(OUTPUT_FORMATS)}")
        self.output_format = output_format
        self.indentation = indentation

    async def read(self, path: str) -> Optional[TranslationTree]:
        """Load a catalog, None when the file is missing or unreadable"""
        try:
            async with aiofiles.open(path, 'r', encoding='utf-8') as f:
                content = await f.read()
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read catalog {path}: {e}")
            return None

        try:
            data = self.parse(content, path)
        except (ValueError, ExtractorError) as e:
            logger.warning(f"Ignoring malformed catalog {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring catalog {path}: top level is not an object")
            return None
        return data

    def parse(self, content: str, path: str) -> Any:
        """Turn catalog text into a tree"""
        if path.endswith('.json') or self.output_format == 'json':
            if not content.strip():
                return {}
            return json.loads(content)

        tree = parse_source(content, path)
        obj = _first_object(tree.root_node)
        if obj is None:
            raise ValueError("no object literal found")
        return _object_to_dict(obj)

    def serialize(self, tree: TranslationTree) -> str:
        """Render a tree in the configured format"""
        body = json.dumps(tree, indent=self.indentation, ensure_ascii=False)
        if self.output_format == 'json':
            return f"{body}\n"
        prefix, suffix = _WRAPPERS[self.output_format]
        return f"{prefix}{body}{suffix}\n"

    async def write(self, path: str, tree: TranslationTree) -> None:
        """Write a tree, creating missing directories"""
        ensure_directory_exists(path)
        async with aiofiles.open(path, 'w', encoding='utf-8') as f:
            await f.write(self.serialize(tree))


def _first_object(root) -> Any:
    queue = deque([root])
    while queue:
        node = queue.popleft()
        if node.type == 'object':
            return node
        queue.extend(children(node))
    return None


def _convert(node) -> Any:
    node = unwrap(node)
    if node is None:
        return UNRESOLVED
    if node.type in ('as_expression', 'satisfies_expression'):
        return _convert(children(node)[0])
    if node.type == 'object':
        return _object_to_dict(node)
    if node.type == 'array':
        items = [_convert(child) for child in children(node)]
        return [item for item in items if item is not UNRESOLVED]
    if node.type == 'unary_expression' and node.text.startswith(b'-'):
        value = literal_value(children(node)[0]) if children(node) else UNRESOLVED
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return -value
        return UNRESOLVED
    return literal_value(node)


def _object_to_dict(obj) -> Dict[str, Any]:
    result: Dict[str, Any] = {}
    for child in children(obj):
        if child.type != 'pair':
            continue
        name = property_name(child.child_by_field_name('key'))
        if name is None:
            continue
        value = _convert(child.child_by_field_name('value'))
        if value is UNRESOLVED:
            logger.debug(f"Skipping non-literal catalog value for '{name}'")
            continue
        result[name] = value
    return result
