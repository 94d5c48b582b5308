# Custom exceptions for bugduck

from typing import Optional


class BugDuckError(Exception):
    """Base exception for all application-specific errors."""
    pass


class ParseFailure(BugDuckError):
    """Raised when source text cannot be parsed without error nodes."""
    def __init__(self, file_path: Optional[str], message: str, line: int = 0, column: int = 0):
        self.file_path = file_path
        self.message = message
        self.line = line
        self.column = column
        where = file_path or "<buffer>"
        super().__init__(f"Failed to parse {where}: {message}")


class PrinterError(BugDuckError):
    """Raised when a mutated tree no longer regenerates to parseable source."""
    pass


class UnsupportedLanguageError(BugDuckError):
    """Raised when no grammar is registered for a language or file extension."""
    def __init__(self, language: str, supported: list):
        self.language = language
        self.supported = supported
        super().__init__(
            f"Language '{language}' is not supported. Supported: {', '.join(supported)}"
        )


class ConfigError(BugDuckError):
    """Raised for configuration-related problems."""
    pass
