"""
Helpers for nested translation dictionaries
"""

from typing import Any, Dict, Union

Separator = Union[str, bool]


def set_nested_value(obj: Dict[str, Any], path: str, value: Any, key_separator: Separator) -> None:
    """
    Set a value at a separated path, creating levels on the way

    When a level on the path already holds a leaf, the whole path is stored
    as a flat key on the root instead of overwriting that leaf.
    """
    if key_separator is False or not key_separator:
        obj[path] = value
        return

    segments = path.split(key_separator)
    current = obj

    for index, segment in enumerate(segments):
        if index == len(segments) - 1:
            current[segment] = value
            return

        next_level = current.get(segment)
        if next_level is not None and not isinstance(next_level, dict):
            obj[path] = value
            return

        if next_level is None:
            current[segment] = {}

        current = current[segment]
