"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import platform
import shlex
import sys
import traceback
from pathlib import Path

from . import __version__

BANNER_SUBTITLE = "[italic]Token-based copy/paste detector[/italic]"

MARKER_CONTRACT_ERROR = "[error]CONTRACT ERROR:[/error]"
MARKER_GATING_FAILURE = "[error]GATING FAILURE:[/error]"
MARKER_INTERNAL_ERROR = "[error]INTERNAL ERROR:[/error]"

HELP_VERSION = "Print the CPDScan version and exit."
HELP_PATHS = "Source files or directories to scan."
HELP_LANGUAGE = "Source language ({choices})."
HELP_ENCODING = "Encoding used to read source files."
HELP_MINIMUM_TOKENS = "Minimum duplicated sequence length, in tokens."
HELP_SKIP_DUPLICATE_FILES = "Analyze only one of several byte-identical files."
HELP_SKIP_LEXICAL_ERRORS = "Skip files that cannot be tokenized instead of failing."
HELP_IGNORE_ANNOTATIONS = "Ignore annotations and decorators when comparing."
HELP_IGNORE_IDENTIFIERS = "Treat all identifiers as equal."
HELP_IGNORE_LITERALS = "Treat all literals as equal."
HELP_SKIP_BLOCKS = "Exclude regions between skip-block markers (default: on)."
HELP_NO_SKIP_BLOCKS = "Tokenize skip-block regions as ordinary code."
HELP_SKIP_BLOCKS_PATTERN = "Skip-block markers as '<start>|<end>'."
HELP_IGNORE_FAILURES = "Exit successfully even if duplicates are found."
HELP_PROCESSES = "Number of parallel worker processes."
HELP_CSV = "Generate a CSV report to FILE."
HELP_CSV_SEPARATOR = "Field separator of the CSV report."
HELP_CSV_LINE_COUNT_PER_FILE = "Write a line count per occurrence in the CSV report."
HELP_TEXT = "Generate a plain text report to FILE."
HELP_TEXT_LINE_SEPARATOR = "Line printed between duplications in the text report."
HELP_TEXT_TRIM = "Trim common leading whitespace of code fragments."
HELP_XML = "Generate an XML report to FILE."
HELP_XML_ENCODING = "Encoding of the XML report."
HELP_VS = "Generate a Visual Studio style report to FILE."
HELP_NO_PROGRESS = "Disable the progress bar (recommended for CI logs)."
HELP_NO_COLOR = "Disable ANSI colors in output."
HELP_QUIET = "Minimize output (still shows warnings and errors)."
HELP_VERBOSE = "Log progress messages of the analysis."
HELP_DEBUG = "Print debug logs and details (traceback and environment) on errors."

SUMMARY_TITLE = "Analysis Summary"
CLI_LAYOUT_WIDTH = 40
SUMMARY_LABEL_FILES_FOUND = "Files found"
SUMMARY_LABEL_FILES_ANALYZED = "Files analyzed"
SUMMARY_LABEL_FILES_SKIPPED = "Files skipped"
SUMMARY_LABEL_DUPLICATE_FILES = "Duplicate files skipped"
SUMMARY_LABEL_TOKENS = "Tokens"
SUMMARY_LABEL_DUPLICATIONS = "Duplications"
SUMMARY_COMPACT_INPUT = (
    "Input: found={found} analyzed={analyzed} skipped={skipped} "
    "duplicate_files={duplicate_files}"
)
SUMMARY_COMPACT_MATCHES = "Duplications: {count} (tokens={tokens})"

STATUS_DISCOVERING = "[bold green]Discovering {language} files..."
INFO_TOKENIZING = "[info]Tokenizing {count} files...[/info]"
PROGRESS_TOKENIZING = "Tokenizing {count} files..."
WARN_FILE_TOO_LARGE = "file too large: {size} bytes (max {limit})"

INFO_SCANNING = "[info]Scanning:[/info] {paths}"
INFO_NO_FILES = "[warning]No {language} files found.[/warning]"
INFO_REPORT_SAVED = "[info]{label} report saved:[/info] {path}"
INFO_NO_DUPLICATES = "[success]No duplicates over {tokens} tokens found.[/success]"

WARN_SKIPPING_FILE = "[warning]Skipping file {path}: {error}[/warning]"
WARN_FAILED_FILES_HEADER = "\n[warning]{count} files failed to process:[/warning]"

ERR_INVALID_OUTPUT_EXT = (
    "[error]Invalid {label} output extension: {path} "
    "(expected {expected_suffix}).[/error]"
)
ERR_INVALID_OUTPUT_PATH = (
    "[error]Invalid {label} output path: {path} ({error}).[/error]"
)
ERR_INVALID_CONFIGURATION = "[error]Invalid configuration:[/error] {error}"
ERR_LEXICAL = "[error]{error}[/error]"
ERR_SCAN_FAILED = "[error]Scan failed: {error}[/error]"
ERR_REPORT_WRITE_FAILED = "[error]Failed to write report: {error}[/error]"
ERR_DUPLICATES_FOUND = "[error]{message}[/error]\nDuplications: {count}."


def version_output(version: str) -> str:
    return f"CPDScan {version}"


def banner_title(version: str) -> str:
    return f"[bold white]CPDScan[/bold white] [dim]v{version}[/dim]\n{BANNER_SUBTITLE}"


def fmt_invalid_output_extension(
    *, label: str, path: Path, expected_suffix: str
) -> str:
    return ERR_INVALID_OUTPUT_EXT.format(
        label=label, path=path, expected_suffix=expected_suffix
    )


def fmt_invalid_output_path(*, label: str, path: Path, error: object) -> str:
    return ERR_INVALID_OUTPUT_PATH.format(label=label, path=path, error=error)


def fmt_invalid_configuration(error: object) -> str:
    return ERR_INVALID_CONFIGURATION.format(error=error)


def fmt_lexical_error(error: object) -> str:
    return ERR_LEXICAL.format(error=error)


def fmt_scan_failed(error: object) -> str:
    return ERR_SCAN_FAILED.format(error=error)


def fmt_report_write_failed(error: object) -> str:
    return ERR_REPORT_WRITE_FAILED.format(error=error)


def fmt_report_saved(*, label: str, path: Path) -> str:
    return INFO_REPORT_SAVED.format(label=label, path=path)


def fmt_scanning(paths: list[str]) -> str:
    return INFO_SCANNING.format(paths=", ".join(paths))


def fmt_discovering(language: str) -> str:
    return STATUS_DISCOVERING.format(language=language)


def fmt_no_files(language: str) -> str:
    return INFO_NO_FILES.format(language=language)


def fmt_tokenizing(count: int) -> str:
    return INFO_TOKENIZING.format(count=count)


def fmt_tokenizing_progress(count: int) -> str:
    return PROGRESS_TOKENIZING.format(count=count)


def fmt_file_too_large(*, size: int, limit: int) -> str:
    return WARN_FILE_TOO_LARGE.format(size=size, limit=limit)


def fmt_no_duplicates(tokens: int) -> str:
    return INFO_NO_DUPLICATES.format(tokens=tokens)


def fmt_skipping_file(path: str, error: object) -> str:
    return WARN_SKIPPING_FILE.format(path=path, error=error)


def fmt_failed_files_header(count: int) -> str:
    return WARN_FAILED_FILES_HEADER.format(count=count)


def fmt_duplicates_found(*, message: str, count: int) -> str:
    return ERR_DUPLICATES_FOUND.format(message=message, count=count)


def fmt_summary_compact_input(
    *, found: int, analyzed: int, skipped: int, duplicate_files: int
) -> str:
    return SUMMARY_COMPACT_INPUT.format(
        found=found,
        analyzed=analyzed,
        skipped=skipped,
        duplicate_files=duplicate_files,
    )


def fmt_summary_compact_matches(*, count: int, tokens: int) -> str:
    return SUMMARY_COMPACT_MATCHES.format(count=count, tokens=tokens)


def fmt_contract_error(message: str) -> str:
    return f"{MARKER_CONTRACT_ERROR}\n{message}"


def fmt_gating_failure(message: str) -> str:
    return f"{MARKER_GATING_FAILURE}\n{message}"


def fmt_internal_error(error: BaseException, *, debug: bool = False) -> str:
    error_name = type(error).__name__
    error_text = str(error).strip() or "<no message>"
    lines = [
        MARKER_INTERNAL_ERROR,
        "Unexpected exception.",
        f"Reason: {error_name}: {error_text}",
        "",
        "Next steps:",
        "- Re-run with --debug to include a traceback.",
        (
            "- If this is reproducible, report it with the command line, "
            "CPDScan version, Python version and a minimal source sample."
        ),
    ]
    if not debug:
        return "\n".join(lines)

    traceback_lines = traceback.format_exception(
        type(error), error, error.__traceback__
    )
    command_line = shlex.join(sys.argv)
    lines.extend(
        [
            "",
            "DEBUG DETAILS",
            f"Platform: {platform.platform()}",
            f"Python: {sys.version.split()[0]}",
            f"CPDScan: {__version__}",
            f"Command: {command_line}",
            f"CWD: {Path.cwd()}",
            "Traceback:",
            "".join(traceback_lines).rstrip(),
        ]
    )
    return "\n".join(lines)
