"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from pathlib import Path


class CpdError(Exception):
    """Base exception for CPDScan."""


class ConfigurationError(CpdError):
    """Configuration validation failed."""


class UnsupportedLanguageError(ConfigurationError):
    """No tokenizer is registered for the requested language."""

    __slots__ = ("language",)

    def __init__(self, language: str, *, supported: tuple[str, ...] = ()) -> None:
        message = f"Unsupported language '{language}'"
        if supported:
            message += f" (supported: {', '.join(supported)})"
        super().__init__(message)
        self.language = language


class ValidationError(CpdError):
    """Input validation failed."""


class FileProcessingError(CpdError):
    """Error processing a source file."""


class LexicalError(FileProcessingError):
    """Source text could not be tokenized."""

    __slots__ = ("column", "filepath", "line", "reason")

    def __init__(
        self,
        reason: str,
        *,
        filepath: str,
        line: int,
        column: int,
    ) -> None:
        super().__init__(
            f"Lexical error in file {filepath} at {line}:{column}: {reason}"
        )
        self.reason = reason
        self.filepath = filepath
        self.line = line
        self.column = column


class RenderError(CpdError):
    """A report could not be written to its destination."""

    __slots__ = ("cause", "destination")

    def __init__(self, destination: Path, cause: BaseException) -> None:
        super().__init__(f"Cannot write report {destination}: {cause}")
        self.destination = destination
        self.cause = cause


class DuplicationFoundError(CpdError):
    """Duplicates were found and failures are not ignored."""

    __slots__ = ("match_count",)

    def __init__(self, message: str, *, match_count: int) -> None:
        super().__init__(message)
        self.match_count = match_count
