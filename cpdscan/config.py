"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar

from .contracts import (
    DEFAULT_CSV_SEPARATOR,
    DEFAULT_ENCODING,
    DEFAULT_LANGUAGE,
    DEFAULT_MINIMUM_TOKEN_COUNT,
    DEFAULT_SKIP_BLOCKS_PATTERN,
    DEFAULT_TEXT_LINE_SEPARATOR,
    DEFAULT_XML_ENCODING,
)
from .errors import ConfigurationError
from .languages import Language, get_language
from .normalize import NormalizationConfig
from .tokenizer import parse_skip_blocks_pattern

# =========================
# Report destinations
# =========================


@dataclass(frozen=True, slots=True)
class CsvReport:
    label: ClassVar[str] = "CSV"
    suffix: ClassVar[str | None] = ".csv"

    destination: Path
    separator: str = DEFAULT_CSV_SEPARATOR
    line_count_per_file: bool = False


@dataclass(frozen=True, slots=True)
class TextReport:
    label: ClassVar[str] = "text"
    suffix: ClassVar[str | None] = ".txt"

    destination: Path
    line_separator: str = DEFAULT_TEXT_LINE_SEPARATOR
    trim_leading_whitespace: bool = False


@dataclass(frozen=True, slots=True)
class XmlReport:
    label: ClassVar[str] = "XML"
    suffix: ClassVar[str | None] = ".xml"

    destination: Path
    encoding: str = DEFAULT_XML_ENCODING


@dataclass(frozen=True, slots=True)
class VsReport:
    label: ClassVar[str] = "VS"
    suffix: ClassVar[str | None] = None

    destination: Path


ReportSpec = CsvReport | TextReport | XmlReport | VsReport


# =========================
# Run configuration
# =========================


@dataclass(frozen=True, slots=True)
class CpdConfiguration:
    """
    Options of a single detection run.

    Built once before any file is read and shared read-only with every
    tokenization worker.
    """

    encoding: str = DEFAULT_ENCODING
    language: str = DEFAULT_LANGUAGE
    minimum_token_count: int = DEFAULT_MINIMUM_TOKEN_COUNT
    skip_duplicate_files: bool = False
    skip_lexical_errors: bool = False
    ignore_annotations: bool = False
    ignore_identifiers: bool = False
    ignore_literals: bool = False
    skip_blocks: bool = True
    skip_blocks_pattern: str = DEFAULT_SKIP_BLOCKS_PATTERN
    ignore_failures: bool = False
    reports: tuple[ReportSpec, ...] = ()

    @property
    def normalization(self) -> NormalizationConfig:
        return NormalizationConfig(
            ignore_annotations=self.ignore_annotations,
            ignore_identifiers=self.ignore_identifiers,
            ignore_literals=self.ignore_literals,
        )

    def validate(self) -> Language:
        """
        Check every option and resolve the language.

        Raises ConfigurationError (UnsupportedLanguageError for unknown
        languages) before any source file is touched.
        """
        language = get_language(self.language)

        if (
            isinstance(self.minimum_token_count, bool)
            or not isinstance(self.minimum_token_count, int)
            or self.minimum_token_count <= 0
        ):
            raise ConfigurationError(
                "Minimum token count must be a positive integer, "
                f"got {self.minimum_token_count!r}"
            )

        _require_codec(self.encoding, label="source encoding")

        if self.skip_blocks:
            parse_skip_blocks_pattern(self.skip_blocks_pattern)

        seen: set[Path] = set()
        for report in self.reports:
            _validate_report(report)
            destination = Path(report.destination).expanduser().resolve()
            if destination in seen:
                raise ConfigurationError(
                    f"Report destination used more than once: {destination}"
                )
            seen.add(destination)

        return language


def _require_codec(name: str, *, label: str) -> None:
    try:
        codecs.lookup(name)
    except LookupError as e:
        raise ConfigurationError(f"Unknown {label} '{name}'") from e


def _validate_report(report: ReportSpec) -> None:
    if isinstance(report, CsvReport):
        if len(report.separator) != 1:
            raise ConfigurationError(
                f"CSV separator must be a single character, got {report.separator!r}"
            )
    elif isinstance(report, TextReport):
        if "\n" in report.line_separator or "\r" in report.line_separator:
            raise ConfigurationError("Text report line separator must be one line")
    elif isinstance(report, XmlReport):
        _require_codec(report.encoding, label="XML encoding")
