"""
Extraction runner: find keys, reconcile catalogs, write results
"""

import logging
from typing import Dict, List, Optional

from ..config.settings import Settings
from ..models.extracted_key import ExtractedKey
from ..models.translation import TranslationResult
from ..utils.validators import ExtractorError, validate_extractor_config
from .catalog_store import CatalogStore
from .key_finder import find_keys, process_file
from .key_walker import KeyWalker
from .parser import parse_source
from .plugin_manager import PluginContext, initialize_plugins, run_after_sync
from .reconciler import get_translations

logger = logging.getLogger(__name__)

__all__ = ['run_extractor', 'extract', 'process_file', 'extract_from_source']


async def run_extractor(
    settings: Settings,
    is_dry_run: bool = False,
    sync_primary_with_defaults: bool = False,
    sync_all: bool = False,
    cwd: Optional[str] = None
) -> bool:
    """
    Extract keys and bring every catalog up to date

    Args:
        settings: Extractor settings
        is_dry_run: Compute results without writing files
        sync_primary_with_defaults: Overwrite primary values with explicit source defaults
        sync_all: Recompute every secondary value from the default source
        cwd: Project directory, defaults to the working directory

    Returns:
        True when any catalog changed (or would change in a dry run)

    Raises:
        ExtractorError: on invalid settings or when any source file failed
    """
    store = CatalogStore(settings.extract.output_format, settings.extract.indentation)
    results = await extract(
        settings,
        store=store,
        sync_primary_with_defaults=sync_primary_with_defaults,
        sync_all=sync_all,
        cwd=cwd
    )

    any_updated = False
    for result in results:
        if not result.updated:
            continue
        any_updated = True
        if is_dry_run:
            logger.info(f"Would update: {result.path}")
        else:
            await store.write(result.path, result.new_translations)
            logger.info(f"Updated: {result.path}")

    if settings.plugins:
        await run_after_sync(settings.plugins, results, settings)

    if not any_updated:
        logger.info("All catalogs are up to date")
    return any_updated


async def extract(
    settings: Settings,
    store: Optional[CatalogStore] = None,
    sync_primary_with_defaults: bool = False,
    sync_all: bool = False,
    cwd: Optional[str] = None
) -> List[TranslationResult]:
    """
    Find keys and compute catalog contents without writing anything

    When a source file failed, the catalogs that would change are still
    logged before the error is raised, so callers never write from a
    partial key set.

    Raises:
        ExtractorError: on invalid settings or when any source file failed
    """
    validate_extractor_config(settings)

    if settings.plugins:
        await initialize_plugins(settings.plugins)

    found = await find_keys(settings, cwd)
    logger.info(f"Found {len(found.keys)} keys in {len(found.files)} files")

    results = await get_translations(
        found.keys,
        settings,
        store=store,
        sync_primary_with_defaults=sync_primary_with_defaults,
        sync_all=sync_all,
        cwd=cwd
    )

    if found.failed:
        for result in results:
            if result.updated:
                logger.info(f"Would update: {result.path}")
        failed_files = ', '.join(error.file or '?' for error in found.errors)
        raise ExtractorError(f"Extraction stopped, {len(found.errors)} file(s) failed: {failed_files}")

    return results


def extract_from_source(code: str, file_path: str, settings: Settings) -> Dict[str, ExtractedKey]:
    """
    Walk in-memory source text

    No plugin hooks besides the per-node and expression hooks run here.

    Raises:
        ExtractorError: when the text does not parse
    """
    context = PluginContext(settings)
    walker = KeyWalker(settings, context)
    walker.walk(parse_source(code, file_path), file_path)
    return context.keys
