"""
Configuration settings with validation
"""

import os
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Union
from dotenv import dotenv_values, load_dotenv

# Load environment variables
load_dotenv()

OUTPUT_FORMATS = ['json', 'js', 'js-esm', 'js-cjs', 'ts']


@dataclass
class UseTranslationHook:
    """
    Hook-like function that binds a translation function

    Argument positions are zero based, -1 means the hook takes no such argument.
    """
    name: str
    ns_arg: int = 0
    key_prefix_arg: int = 1

    def __post_init__(self):
        if not self.name:
            raise ValueError("Hook name is required")
        if self.ns_arg < -1 or self.key_prefix_arg < -1:
            raise ValueError("Hook argument positions must be -1 or greater")


@dataclass
class ExtractSettings:
    """Key extraction and catalog output configuration"""
    input: List[str]
    output: Union[str, Callable[..., str]]
    ignore: List[str] = None
    default_ns: str = 'translation'
    key_separator: Union[str, bool] = '.'
    ns_separator: Union[str, bool] = ':'
    context_separator: str = '_'
    plural_separator: str = '_'
    functions: List[str] = None
    trans_components: List[str] = None
    use_translation_names: List[Union[str, UseTranslationHook]] = None
    preserve_patterns: List[str] = None
    remove_unused_keys: bool = True
    sort: Union[bool, Callable[[Any, Any], int]] = True
    indentation: Union[int, str] = 2
    default_value: Union[str, Callable[..., str], None] = ''
    primary_language: Optional[str] = None
    output_format: str = 'json'
    merge_namespaces: bool = False
    ignore_namespaces: List[str] = None
    preserve_context_variants: bool = False
    generate_base_plural_forms: bool = True
    disable_plurals: bool = False
    extract_from_comments: bool = True
    trans_keep_basic_html_nodes_for: List[str] = None
    interpolation_prefix: str = '{{'
    interpolation_suffix: str = '}}'
    nesting_prefix: str = '$t('
    nesting_suffix: str = ')'
    nesting_options_separator: str = ','

    def __post_init__(self):
        if isinstance(self.input, str):
            self.input = [self.input]
        if self.ignore is None:
            self.ignore = []
        elif isinstance(self.ignore, str):
            self.ignore = [self.ignore]
        if self.functions is None:
            self.functions = ['t', '*.t']
        if self.trans_components is None:
            self.trans_components = ['Trans']
        if self.use_translation_names is None:
            self.use_translation_names = ['useTranslation', 'getT', 'useT']
        if self.preserve_patterns is None:
            self.preserve_patterns = []
        if self.ignore_namespaces is None:
            self.ignore_namespaces = []
        if self.trans_keep_basic_html_nodes_for is None:
            self.trans_keep_basic_html_nodes_for = ['br', 'strong', 'i', 'p']

        # Validate output format
        if self.output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Output format must be one of: {', '.join(OUTPUT_FORMATS)}")

        if isinstance(self.indentation, int) and self.indentation < 0:
            raise ValueError("Indentation cannot be negative")

        if not self.default_ns:
            raise ValueError("Default namespace cannot be empty")

    @property
    def hooks(self) -> List[UseTranslationHook]:
        """Hook descriptors with plain names normalized"""
        return [
            item if isinstance(item, UseTranslationHook) else UseTranslationHook(name=item)
            for item in self.use_translation_names
        ]


@dataclass
class Settings:
    """Main configuration settings"""
    locales: List[str]
    extract: ExtractSettings
    plugins: List[Any] = None
    log_level: str = 'INFO'

    def __post_init__(self):
        if self.plugins is None:
            self.plugins = []

        # Validate log level
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {', '.join(valid_levels)}")

        self.log_level = self.log_level.upper()

        if self.extract.primary_language is None and self.locales:
            self.extract.primary_language = self.locales[0]

    @property
    def primary_language(self) -> str:
        return self.extract.primary_language

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> 'Settings':
        """
        Create settings from environment variables

        Values from `env_file`, when given, take precedence over the process
        environment without being exported into it.
        """
        env = dict(os.environ)
        if env_file:
            env.update({name: value for name, value in dotenv_values(env_file).items() if value is not None})

        indentation_str = env.get('KEYSYNC_INDENTATION', '2')
        try:
            indentation: Union[int, str] = int(indentation_str)
        except ValueError:
            indentation = indentation_str

        return cls(
            locales=_split_list(env.get('KEYSYNC_LOCALES', 'en')),
            extract=ExtractSettings(
                input=_split_list(env.get('KEYSYNC_INPUT', 'src/**/*.{js,jsx,ts,tsx}')),
                output=env.get('KEYSYNC_OUTPUT', 'locales/{{language}}/{{namespace}}.json'),
                ignore=_split_list(env.get('KEYSYNC_IGNORE', '')),
                default_ns=env.get('KEYSYNC_DEFAULT_NS', 'translation'),
                key_separator=_separator(env.get('KEYSYNC_KEY_SEPARATOR', '.')),
                ns_separator=_separator(env.get('KEYSYNC_NS_SEPARATOR', ':')),
                functions=_split_list(env.get('KEYSYNC_FUNCTIONS', '')) or None,
                trans_components=_split_list(env.get('KEYSYNC_TRANS_COMPONENTS', '')) or None,
                preserve_patterns=_split_list(env.get('KEYSYNC_PRESERVE_PATTERNS', '')),
                remove_unused_keys=_flag(env.get('KEYSYNC_REMOVE_UNUSED_KEYS', 'true')),
                sort=_flag(env.get('KEYSYNC_SORT', 'true')),
                indentation=indentation,
                output_format=env.get('KEYSYNC_OUTPUT_FORMAT', 'json'),
                merge_namespaces=_flag(env.get('KEYSYNC_MERGE_NAMESPACES', 'false')),
                primary_language=env.get('KEYSYNC_PRIMARY_LANGUAGE') or None
            ),
            log_level=env.get('LOG_LEVEL', 'INFO')
        )


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(',') if item.strip()]


def _flag(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _separator(value: str) -> Union[str, bool]:
    if value.strip().lower() == 'false':
        return False
    return value
