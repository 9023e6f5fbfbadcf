"""
Services for i18n-keysync
"""

from .catalog_store import CatalogStore
from .extractor import extract, extract_from_source, process_file, run_extractor
from .key_finder import KeyFinderResult, find_keys
from .key_walker import KeyWalker
from .plugin_manager import Plugin, PluginContext
from .reconciler import ReconcilePolicy, get_translations, reconcile
from .tree_builder import build_tree

__all__ = [
    'CatalogStore', 'extract', 'extract_from_source', 'process_file', 'run_extractor',
    'KeyFinderResult', 'find_keys', 'KeyWalker', 'Plugin', 'PluginContext',
    'ReconcilePolicy', 'get_translations', 'reconcile', 'build_tree'
]
