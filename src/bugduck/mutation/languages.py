"""
Grammar registry for the languages bugduck can mutate.

Parsers are built lazily and cached per language; a Parser is cheap to reuse
but must not be shared between threads.
"""

import threading
from pathlib import Path
from typing import Dict, Optional, Union

from tree_sitter import Language, Parser
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript

from bugduck.exceptions import UnsupportedLanguageError
from bugduck.logging_config import logger

DEFAULT_LANGUAGE = "tsx"

# Mapping of file extensions to grammar names
SUPPORTED_EXTENSIONS = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

_GRAMMARS = {
    "javascript": tsjavascript.language,
    "typescript": tstypescript.language_typescript,
    "tsx": tstypescript.language_tsx,
}

# Global cache for loaded languages to avoid repeated loading
_language_cache: Dict[str, Language] = {}
_local = threading.local()


def supported_languages() -> list:
    return sorted(_GRAMMARS)


def get_language(language_name: str) -> Language:
    """
    Load a tree-sitter language, caching the object for reuse.

    Raises:
        UnsupportedLanguageError: If no grammar is registered under the name.
    """
    if language_name in _language_cache:
        return _language_cache[language_name]

    factory = _GRAMMARS.get(language_name)
    if factory is None:
        raise UnsupportedLanguageError(language_name, supported_languages())

    lang = Language(factory())
    _language_cache[language_name] = lang
    logger.debug(f"Loaded tree-sitter grammar '{language_name}'")
    return lang


def get_parser(language_name: str) -> Parser:
    """Return this thread's parser for a language."""
    parsers = getattr(_local, "parsers", None)
    if parsers is None:
        parsers = _local.parsers = {}

    parser = parsers.get(language_name)
    if parser is None:
        parser = Parser()
        parser.language = get_language(language_name)
        parsers[language_name] = parser
    return parser


def detect_language(file_path: Optional[Union[str, Path]]) -> str:
    """
    Pick a grammar from a file extension.

    Unknown or missing paths fall back to tsx, the superset grammar.
    """
    if not file_path:
        return DEFAULT_LANGUAGE
    return SUPPORTED_EXTENSIONS.get(Path(file_path).suffix.lower(), DEFAULT_LANGUAGE)


def is_supported_file(file_path: Union[str, Path]) -> bool:
    return Path(file_path).suffix.lower() in SUPPORTED_EXTENSIONS
