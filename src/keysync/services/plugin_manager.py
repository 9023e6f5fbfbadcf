"""
Plugin pipeline: duck-typed hooks around extraction and reconciliation

A plugin is any object with a `name` and some of these optional methods:

    setup()                                         once before a run
    on_load(code, file_path) -> str | None          before parsing, chained
    on_visit_node(node, context)                    after core handling of each node
    extract_keys_from_expression(expr, config, logger) -> list[str]
    extract_context_from_expression(expr, config, logger) -> list[str]
    on_end(keys, config)                            after all files, may mutate keys
    after_sync(results, config)                     after reconciliation

`setup`, `on_load`, `on_end` and `after_sync` may be coroutines. A failing
hook is logged and treated as having contributed nothing.
"""

import inspect
import logging
from typing import Any, Callable, Dict, List, Optional, Union

from tree_sitter import Node

from ..config.settings import Settings
from ..models.extracted_key import ExtractedKey, KeyLocation
from ..models.scope import ScopeBinding

logger = logging.getLogger(__name__)

# logger handed to plugins
plugin_logger = logging.getLogger('keysync')


class Plugin:
    """Convenience base class; plugins do not have to inherit from it"""
    name = 'plugin'


def plugin_name(plugin: Any) -> str:
    return getattr(plugin, 'name', None) or type(plugin).__name__


class PluginContext:
    """Shared state handed to walkers and plugins during one run"""

    def __init__(
        self,
        settings: Settings,
        keys: Optional[Dict[str, ExtractedKey]] = None,
        scope_resolver: Optional[Callable[[str], Optional[ScopeBinding]]] = None
    ):
        self.config = settings
        self.keys: Dict[str, ExtractedKey] = keys if keys is not None else {}
        self.logger = plugin_logger
        self.scope_resolver = scope_resolver
        self.current_file: Optional[str] = None

    def add_key(self, key: Union[ExtractedKey, Dict[str, Any]]) -> None:
        """
        Add a key or merge it into an existing one with the same identity

        Plugins may pass a dict with `key` and optional `ns`/`namespace`,
        `default_value` and `locations`; blank keys are ignored.
        """
        if isinstance(key, dict):
            text = key.get('key')
            if not isinstance(text, str) or not text.strip():
                return
            namespace = key.get('namespace') or key.get('ns') or self.config.extract.default_ns
            locations = [
                item if isinstance(item, KeyLocation) else KeyLocation(**item)
                for item in key.get('locations') or []
            ]
            key = ExtractedKey(
                key=text,
                namespace=namespace,
                default_value=key.get('default_value', key.get('defaultValue')),
                explicit_default=bool(key.get('explicit_default', False)),
                locations=locations
            )

        existing = self.keys.get(key.identity)
        if existing is None:
            self.keys[key.identity] = key
        else:
            existing.merge(key)

    def get_var_from_scope(self, name: str) -> Optional[ScopeBinding]:
        if self.scope_resolver is None:
            return None
        return self.scope_resolver(name)


async def _call_hook(plugin: Any, hook: str, *args: Any) -> Any:
    method = getattr(plugin, hook, None)
    if not callable(method):
        return None
    try:
        result = method(*args)
        if inspect.isawaitable(result):
            result = await result
        return result
    except Exception as e:
        logger.warning(f"Plugin '{plugin_name(plugin)}' failed in {hook}: {e}")
        return None


def _call_hook_sync(plugin: Any, hook: str, *args: Any) -> Any:
    method = getattr(plugin, hook, None)
    if not callable(method):
        return None
    try:
        result = method(*args)
    except Exception as e:
        logger.warning(f"Plugin '{plugin_name(plugin)}' failed in {hook}: {e}")
        return None
    if inspect.isawaitable(result):
        if inspect.iscoroutine(result):
            result.close()
        logger.warning(f"Plugin '{plugin_name(plugin)}' returned an awaitable from {hook}, which must be synchronous")
        return None
    return result


async def initialize_plugins(plugins: List[Any]) -> None:
    """Run every plugin's setup hook"""
    for plugin in plugins:
        await _call_hook(plugin, 'setup')


async def run_on_load(plugins: List[Any], code: str, file_path: str) -> str:
    """Pass source text through the on_load chain"""
    for plugin in plugins:
        result = await _call_hook(plugin, 'on_load', code, file_path)
        if isinstance(result, str):
            code = result
    return code


def run_on_visit_node(plugins: List[Any], node: Node, context: PluginContext) -> None:
    for plugin in plugins:
        _call_hook_sync(plugin, 'on_visit_node', node, context)


def run_extract_keys_from_expression(plugins: List[Any], expression: Node, settings: Settings) -> List[str]:
    return _collect_strings(plugins, 'extract_keys_from_expression', expression, settings)


def run_extract_context_from_expression(plugins: List[Any], expression: Node, settings: Settings) -> List[str]:
    return _collect_strings(plugins, 'extract_context_from_expression', expression, settings)


def _collect_strings(plugins: List[Any], hook: str, expression: Node, settings: Settings) -> List[str]:
    values: List[str] = []
    for plugin in plugins:
        result = _call_hook_sync(plugin, hook, expression, settings, plugin_logger)
        if isinstance(result, (list, tuple, set)):
            values.extend(item for item in result if isinstance(item, str))
    return values


async def run_on_end(plugins: List[Any], keys: Dict[str, ExtractedKey], settings: Settings) -> None:
    for plugin in plugins:
        await _call_hook(plugin, 'on_end', keys, settings)


async def run_after_sync(plugins: List[Any], results: List[Any], settings: Settings) -> None:
    for plugin in plugins:
        await _call_hook(plugin, 'after_sync', results, settings)
