"""
Source discovery and key collection across a project
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiofiles

from ..config.settings import Settings
from ..models.extracted_key import ExtractedKey
from ..utils.file_utils import find_source_files
from ..utils.validators import ExtractorError
from .key_walker import KeyWalker
from .parser import parse_source
from .plugin_manager import PluginContext, run_on_end, run_on_load

logger = logging.getLogger(__name__)


@dataclass
class KeyFinderResult:
    """Keys found in one pass over the source tree"""
    keys: Dict[str, ExtractedKey] = None
    files: List[str] = None
    errors: List[ExtractorError] = None

    def __post_init__(self):
        if self.keys is None:
            self.keys = {}
        if self.files is None:
            self.files = []
        if self.errors is None:
            self.errors = []

    @property
    def failed(self) -> bool:
        return bool(self.errors)


async def read_source(file_path: str) -> str:
    """Read one source file as UTF-8 text"""
    async with aiofiles.open(file_path, 'r', encoding='utf-8') as f:
        return await f.read()


async def process_file(
    file_path: str,
    code: str,
    walker: KeyWalker,
    plugins: Optional[List[Any]] = None
) -> None:
    """
    Run one file through on_load, the parser and the walker

    Raises:
        ExtractorError: when the (possibly transformed) text does not parse
    """
    if plugins:
        code = await run_on_load(plugins, code, file_path)

    tree = parse_source(code, file_path)
    walker.walk(tree, file_path)


async def find_keys(settings: Settings, cwd: Optional[str] = None) -> KeyFinderResult:
    """
    Walk every candidate source file and collect the keys they use

    Files are read concurrently but walked one at a time in sorted order,
    so the resulting key map does not depend on discovery order. A file
    that cannot be read or parsed is recorded in `errors` and the remaining
    files are still processed.

    Args:
        settings: Extractor settings
        cwd: Directory the input globs are resolved against

    Returns:
        KeyFinderResult with the shared key map after on_end hooks ran
    """
    plugins = settings.plugins
    files = find_source_files(settings.extract.input, settings.extract.ignore, cwd)
    logger.info(f"Scanning {len(files)} source files")

    sources = await asyncio.gather(
        *(read_source(path) for path in files),
        return_exceptions=True
    )

    context = PluginContext(settings)
    walker = KeyWalker(settings, context, plugins)
    result = KeyFinderResult(keys=context.keys, files=files)

    for file_path, source in zip(files, sources):
        if isinstance(source, Exception):
            error = ExtractorError("Failed to read source", file_path, source)
            logger.error(str(error))
            result.errors.append(error)
            continue

        try:
            await process_file(file_path, source, walker, plugins)
        except ExtractorError as e:
            logger.error(str(e))
            result.errors.append(e)

    if plugins:
        await run_on_end(plugins, context.keys, settings)

    return result
