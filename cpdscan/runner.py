"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path

from .config import CpdConfiguration
from .contracts import DEFAULT_ENCODING, DEFAULT_MINIMUM_TOKEN_COUNT
from .engine import Match, Occurrence, find_matches
from .errors import DuplicationFoundError, FileProcessingError, LexicalError
from .tokenizer import decode_source, tokenize_text
from .tokens import TokenStream

logger = logging.getLogger(__name__)

BATCH_SIZE = 100

ProgressCallback = Callable[[], None]


# =========================
# Data structures
# =========================


@dataclass(frozen=True, slots=True)
class SourceFile:
    path: str
    content: bytes
    encoding: str = DEFAULT_ENCODING

    @classmethod
    def from_path(cls, path: str | Path, *, encoding: str) -> SourceFile:
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            raise FileProcessingError(f"Cannot read file {path}: {e}") from e
        return cls(path=str(path), content=content, encoding=encoding)

    @property
    def digest(self) -> str:
        return hashlib.sha256(self.content).hexdigest()


@dataclass(frozen=True, slots=True)
class ProcessingError:
    filepath: str
    message: str
    line: int | None = None
    column: int | None = None

    def __str__(self) -> str:
        if self.line is None:
            return f"{self.filepath}: {self.message}"
        return f"{self.filepath}:{self.line}:{self.column}: {self.message}"


@dataclass(slots=True)
class ProcessingResult:
    """Result of tokenizing a single file."""

    filepath: str
    success: bool
    stream: TokenStream | None = None
    lines: tuple[str, ...] | None = None
    error: ProcessingError | None = None


@dataclass(frozen=True, slots=True)
class CpdReport:
    """Everything the renderers need: matches plus the analyzed sources."""

    matches: tuple[Match, ...]
    sources: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    token_counts: Mapping[str, int] = field(default_factory=dict)
    processing_errors: tuple[ProcessingError, ...] = ()
    skipped_duplicates: tuple[str, ...] = ()
    minimum_token_count: int = DEFAULT_MINIMUM_TOKEN_COUNT

    @property
    def files_analyzed(self) -> int:
        return len(self.token_counts)

    @property
    def total_tokens(self) -> int:
        return sum(self.token_counts.values())

    def source_slice(self, occurrence: Occurrence) -> tuple[str, ...]:
        lines = self.sources.get(occurrence.filepath, ())
        return lines[occurrence.start_line - 1 : occurrence.end_line]


# =========================
# Tokenization
# =========================


def process_source(source: SourceFile, config: CpdConfiguration) -> ProcessingResult:
    """
    Decode and tokenize one file.

    Runs inside worker processes: lexical failures are returned as data,
    never raised.
    """
    try:
        text = decode_source(source.content, source.encoding, filepath=source.path)
        stream = tokenize_text(text, filepath=source.path, config=config)
    except LexicalError as e:
        return ProcessingResult(
            filepath=source.path,
            success=False,
            error=ProcessingError(
                filepath=source.path, message=e.reason, line=e.line, column=e.column
            ),
        )
    return ProcessingResult(
        filepath=source.path,
        success=True,
        stream=stream,
        lines=tuple(text.splitlines()),
    )


def _tokenize_sequential(
    sources: Sequence[SourceFile],
    config: CpdConfiguration,
    results: dict[str, ProcessingResult],
    progress: ProgressCallback | None,
) -> None:
    for source in sources:
        if source.path in results:
            continue
        results[source.path] = process_source(source, config)
        if progress is not None:
            progress()


def _tokenize_parallel(
    sources: Sequence[SourceFile],
    config: CpdConfiguration,
    results: dict[str, ProcessingResult],
    progress: ProgressCallback | None,
    processes: int,
) -> None:
    with ProcessPoolExecutor(max_workers=processes) as executor:
        for i in range(0, len(sources), BATCH_SIZE):
            batch = sources[i : i + BATCH_SIZE]
            futures = {
                executor.submit(process_source, source, config): source.path
                for source in batch
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
                if progress is not None:
                    progress()


def tokenize_sources(
    sources: Sequence[SourceFile],
    config: CpdConfiguration,
    *,
    processes: int = 1,
    progress: ProgressCallback | None = None,
) -> list[ProcessingResult]:
    """Tokenize every source; results keep the order of ``sources``."""
    results: dict[str, ProcessingResult] = {}
    if processes > 1 and len(sources) > 1:
        try:
            _tokenize_parallel(sources, config, results, progress, processes)
        except (OSError, RuntimeError, PermissionError) as e:
            logger.warning(
                "Parallel processing unavailable, falling back to sequential: %s", e
            )
    _tokenize_sequential(sources, config, results, progress)
    return [results[source.path] for source in sources]


# =========================
# Pipeline
# =========================


def skip_duplicate_files(
    sources: Sequence[SourceFile],
) -> tuple[list[SourceFile], list[str]]:
    """Keep the first of every group of byte-identical files."""
    kept: list[SourceFile] = []
    skipped: list[str] = []
    seen: dict[str, str] = {}
    for source in sources:
        digest = source.digest
        if digest in seen:
            logger.info("Skipping %s: identical to %s", source.path, seen[digest])
            skipped.append(source.path)
            continue
        seen[digest] = source.path
        kept.append(source)
    return kept, skipped


def _unique_paths(sources: Iterable[SourceFile]) -> list[SourceFile]:
    ordered: list[SourceFile] = []
    seen: set[str] = set()
    for source in sorted(sources, key=lambda s: s.path):
        if source.path in seen:
            logger.info("Ignoring repeated source %s", source.path)
            continue
        seen.add(source.path)
        ordered.append(source)
    return ordered


def run_cpd(
    config: CpdConfiguration,
    sources: Iterable[SourceFile],
    *,
    processes: int = 1,
    progress: ProgressCallback | None = None,
) -> CpdReport:
    """
    Tokenize all sources, then search duplicates across the whole corpus.

    Raises ConfigurationError before reading anything when the
    configuration is invalid, and LexicalError for the first file (in path
    order) that cannot be tokenized unless lexical errors are skipped.
    A path given more than once is analyzed once.
    """
    language = config.validate()
    logger.info("Using CPD language '%s' for checking duplicates.", language.label)

    ordered = _unique_paths(sources)
    skipped: list[str] = []
    if config.skip_duplicate_files:
        ordered, skipped = skip_duplicate_files(ordered)

    results = tokenize_sources(ordered, config, processes=processes, progress=progress)

    streams: list[TokenStream] = []
    sources_lines: dict[str, tuple[str, ...]] = {}
    token_counts: dict[str, int] = {}
    errors: list[ProcessingError] = []
    for result in results:
        if result.success and result.stream is not None:
            streams.append(result.stream)
            sources_lines[result.filepath] = result.lines or ()
            token_counts[result.filepath] = len(result.stream)
            continue
        assert result.error is not None
        if not config.skip_lexical_errors:
            raise LexicalError(
                result.error.message,
                filepath=result.error.filepath,
                line=result.error.line or 1,
                column=result.error.column or 1,
            )
        logger.warning("Skipping %s due to lexical error", result.error)
        errors.append(result.error)

    matches = find_matches(streams, config.minimum_token_count)
    return CpdReport(
        matches=tuple(matches),
        sources=sources_lines,
        token_counts=token_counts,
        processing_errors=tuple(errors),
        skipped_duplicates=tuple(skipped),
        minimum_token_count=config.minimum_token_count,
    )


def as_clickable_file_url(path: str | Path) -> str:
    return Path(path).expanduser().resolve().as_uri()


def check_result(report: CpdReport, config: CpdConfiguration) -> None:
    """
    Log the outcome and raise DuplicationFoundError when duplicates were
    found and failures are not ignored.
    """
    if not report.matches:
        logger.info("No duplicates over %d tokens found.", config.minimum_token_count)
        return

    message = "CPD found duplicate code."
    if config.reports:
        url = as_clickable_file_url(config.reports[0].destination)
        message += f" See the report at {url}"
    if config.ignore_failures:
        logger.warning(message)
        return
    raise DuplicationFoundError(message, match_count=len(report.matches))
