"""
Translation calls written inside comments

Hint comments like `// t('status.active')` document keys that the code
builds dynamically. A candidate is only accepted when the balanced text
after the function name parses as a genuine call with a literal key.
"""

import logging
import re
from typing import List, Optional, Tuple

from tree_sitter import Node

from ..config.settings import Settings
from ..utils.file_utils import glob_to_regex
from .ast_utils import call_arguments, children, location_of, node_text, unwrap
from .call_handler import CallHandler
from .parser import parse_snippet

logger = logging.getLogger(__name__)

QUOTES = ('"', "'", '`')


def find_call_end(text: str, open_index: int) -> Optional[int]:
    """
    Index just past the parenthesis closing the one at `open_index`

    Quoted strings are skipped with their escapes, so parentheses or quotes
    of another kind inside them do not count. None when unbalanced.
    """
    depth = 0
    quote: Optional[str] = None
    index = open_index

    while index < len(text):
        char = text[index]
        if quote is not None:
            if char == '\\':
                index += 2
                continue
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return index + 1
        index += 1

    return None


class CommentScanner:
    """Finds translation calls in comment nodes and feeds them to the call handler"""

    def __init__(self, settings: Settings, call_handler: CallHandler):
        self.settings = settings
        self.call_handler = call_handler
        self.enabled = settings.extract.extract_from_comments
        self.preserve_patterns = [glob_to_regex(p) for p in settings.extract.preserve_patterns]
        self.call_start_re = self._build_call_regex(settings.extract.functions)

    def _build_call_regex(self, functions: List[str]) -> 're.Pattern[str]':
        alternatives = []
        for name in functions:
            if name.startswith('*.'):
                alternatives.append(r'[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*' + re.escape(name[1:]))
            else:
                alternatives.append(re.escape(name))
        pattern = '|'.join(sorted(alternatives, key=len, reverse=True)) or r'(?!)'
        return re.compile(rf'(?<![\w$.])(?:{pattern})\s*\(')

    def is_preserved(self, key: str) -> bool:
        return any(pattern.match(key) for pattern in self.preserve_patterns)

    def scan(self, comment: Node) -> None:
        """Extract keys from one comment node"""
        if not self.enabled:
            return

        text = node_text(comment)
        position = 0
        while True:
            match = self.call_start_re.search(text, position)
            if match is None:
                return

            end = find_call_end(text, match.end() - 1)
            if end is None:
                position = match.end()
                continue

            call = self._parse_call(text[match.start():end])
            if call is not None:
                self.call_handler.handle(
                    call,
                    skip_key=self.is_preserved,
                    location=self._location(comment, text, match.start())
                )
                position = end
            else:
                position = match.end()

    def _parse_call(self, snippet: str) -> Optional[Node]:
        root = parse_snippet(snippet)
        if root is None:
            return None

        statements = children(root)
        if len(statements) != 1 or statements[0].type != 'expression_statement':
            return None

        expression = children(statements[0])
        call = expression[0] if expression else None
        if call is None or call.type != 'call_expression':
            return None

        args = call_arguments(call)
        first = unwrap(args[0]) if args else None
        if first is None or first.type not in ('string', 'template_string'):
            return None
        return call

    def _location(self, comment: Node, text: str, offset: int) -> Tuple[int, int]:
        line, column = location_of(comment)
        before = text[:offset]
        newlines = before.count('\n')
        if newlines:
            return line + newlines, len(before) - before.rfind('\n') - 1
        return line, column + len(before)
