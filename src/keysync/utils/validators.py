"""
Extractor errors and configuration validation
"""

from typing import Optional

from ..config.settings import Settings

LANGUAGE_PLACEHOLDERS = ('{{language}}', '{{lng}}')


class ExtractorError(Exception):
    """Raised when extraction cannot proceed or a file cannot be processed"""

    def __init__(self, message: str, file: Optional[str] = None, cause: Optional[BaseException] = None):
        self.message = message
        self.file = file
        self.cause = cause
        text = f"{message} in file {file}" if file else message
        if cause is not None:
            text = f"{text}: {cause}"
        super().__init__(text)


def validate_extractor_config(settings: Settings) -> None:
    """
    Check the settings before any file is read

    Raises:
        ExtractorError: when input, output or locales are unusable
    """
    extract = settings.extract

    if not extract.input:
        raise ExtractorError("extract.input must be specified and non-empty")

    if not extract.output:
        raise ExtractorError("extract.output must be specified")

    if not settings.locales:
        raise ExtractorError("locales must be specified and non-empty")

    if isinstance(extract.output, str) and not any(p in extract.output for p in LANGUAGE_PLACEHOLDERS):
        raise ExtractorError("extract.output must contain {{language}} placeholder")

    if extract.primary_language not in settings.locales:
        raise ExtractorError(f"primary language '{extract.primary_language}' is not one of the locales")
