"""
Pytest configuration and fixtures
"""

import json
import pytest
from pathlib import Path
from typing import Any, Callable, Dict

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from keysync.config.settings import ExtractSettings, Settings
from keysync.models.extracted_key import ExtractedKey
from keysync.services.extractor import extract_from_source


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory for settings with test friendly defaults."""
    def _make(locales=None, plugins=None, **extract_options) -> Settings:
        extract_options.setdefault('input', ['src/**/*.{js,jsx,ts,tsx}'])
        extract_options.setdefault('output', 'locales/{{language}}/{{namespace}}.json')
        return Settings(
            locales=locales or ['en', 'de'],
            extract=ExtractSettings(**extract_options),
            plugins=plugins
        )
    return _make


@pytest.fixture
def test_settings(make_settings) -> Settings:
    """Default en/de settings."""
    return make_settings()


@pytest.fixture
def extract_keys(test_settings: Settings) -> Callable[..., Dict[str, ExtractedKey]]:
    """Walk a snippet and return the keys by identity."""
    def _extract(code: str, file_path: str = 'src/App.tsx', settings: Settings = None) -> Dict[str, ExtractedKey]:
        return extract_from_source(code, file_path, settings or test_settings)
    return _extract


@pytest.fixture
def project(tmp_path: Path) -> Callable[[Dict[str, Any]], Path]:
    """Write a project tree; dict and list values are stored as JSON."""
    def _write(files: Dict[str, Any]) -> Path:
        for relative, content in files.items():
            path = tmp_path / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, (dict, list)):
                content = json.dumps(content, indent=2, ensure_ascii=False)
            path.write_text(content, encoding='utf-8')
        return tmp_path
    return _write


@pytest.fixture
def read_catalog(tmp_path: Path) -> Callable[[str], Any]:
    """Load a JSON catalog below the temporary project."""
    def _read(relative: str) -> Any:
        return json.loads((tmp_path / relative).read_text(encoding='utf-8'))
    return _read
