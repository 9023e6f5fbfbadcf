"""
Source discovery and output path utilities
"""

import fnmatch
import glob
import logging
import os
import re
from typing import Callable, Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

OutputTemplate = Union[str, Callable[..., str]]

DEFAULT_IGNORE = ['node_modules/**', '**/node_modules/**']

_BRACE_RE = re.compile(r'\{([^{}]*,[^{}]*)\}')
_NAMESPACE_SEGMENT_RE = re.compile(r'[/\\]?\{\{(?:namespace|ns)\}\}')


def expand_braces(pattern: str) -> List[str]:
    """Expand shell-style `{a,b}` alternatives in a glob pattern"""
    match = _BRACE_RE.search(pattern)
    if not match:
        return [pattern]

    expanded: List[str] = []
    for option in match.group(1).split(','):
        candidate = pattern[:match.start()] + option + pattern[match.end():]
        for item in expand_braces(candidate):
            if item not in expanded:
                expanded.append(item)
    return expanded


def _is_ignored(path: str, ignore_patterns: Iterable[str]) -> bool:
    normalized = path.replace(os.sep, '/')
    for pattern in ignore_patterns:
        if fnmatch.fnmatch(normalized, pattern):
            return True
        # patterns like `**/x` should also match at the root
        if pattern.startswith('**/') and fnmatch.fnmatch(normalized, pattern[3:]):
            return True
    return False


def find_source_files(
    patterns: List[str],
    ignore: Optional[List[str]] = None,
    cwd: Optional[str] = None
) -> List[str]:
    """
    Find candidate source files

    Args:
        patterns: Glob patterns, `**` and `{a,b}` supported
        ignore: Glob patterns of paths to leave out
        cwd: Directory relative patterns are resolved against

    Returns:
        Sorted unique file paths
    """
    base = cwd or os.getcwd()
    ignore_patterns: List[str] = []
    for pattern in DEFAULT_IGNORE + list(ignore or []):
        ignore_patterns.extend(expand_braces(pattern))

    found = set()
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            full_pattern = expanded if os.path.isabs(expanded) else os.path.join(base, expanded)
            for path in glob.glob(full_pattern, recursive=True):
                if not os.path.isfile(path):
                    continue
                relative = os.path.relpath(path, base)
                if _is_ignored(relative, ignore_patterns):
                    continue
                found.add(os.path.normpath(path))

    files = sorted(found)
    logger.debug(f"Found {len(files)} source files")
    return files


def get_output_path(
    output: OutputTemplate,
    locale: str,
    namespace: Optional[str] = None
) -> str:
    """
    Resolve the catalog path for a locale and namespace

    A callable output that raises falls back to the default layout.
    With no namespace the `/{{namespace}}` segment is dropped from the template.
    """
    if callable(output):
        try:
            path = output(locale, namespace)
            if not path:
                raise ValueError("output function returned an empty path")
            return str(path)
        except Exception as e:
            fallback = default_output_path(locale, namespace)
            logger.warning(f"Output path function failed for {locale}/{namespace}: {e}, using {fallback}")
            return fallback

    template = output
    if namespace is None:
        template = _NAMESPACE_SEGMENT_RE.sub('', template)
        namespace = ''

    return (
        template
        .replace('{{language}}', locale).replace('{{lng}}', locale)
        .replace('{{namespace}}', namespace).replace('{{ns}}', namespace)
    )


def default_output_path(locale: str, namespace: Optional[str] = None) -> str:
    """Fallback catalog layout"""
    if namespace is None:
        return f"locales/{locale}.json"
    return f"locales/{locale}/{namespace}.json"


def has_namespace_placeholder(output: OutputTemplate) -> bool:
    """Check whether an output template separates namespaces into files"""
    if callable(output):
        return True
    return '{{namespace}}' in output or '{{ns}}' in output


def ensure_directory_exists(file_path: str) -> None:
    """Create the parent directory of a file"""
    directory = os.path.dirname(file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def glob_to_regex(pattern: str) -> 're.Pattern[str]':
    """Compile a preserve pattern where `*` matches any run of characters"""
    escaped = ''.join('.*' if char == '*' else re.escape(char) for char in pattern)
    return re.compile(f'^{escaped}$')
