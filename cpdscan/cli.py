"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
import time
from collections.abc import Mapping, Sequence
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.theme import Theme

from . import __version__
from . import ui_messages as ui
from ._cli_args import build_parser
from ._cli_paths import _validate_output_path
from ._cli_summary import _print_summary
from .config import (
    CpdConfiguration,
    CsvReport,
    ReportSpec,
    TextReport,
    VsReport,
    XmlReport,
)
from .contracts import ExitCode
from .errors import (
    ConfigurationError,
    DuplicationFoundError,
    FileProcessingError,
    LexicalError,
    ValidationError,
)
from .report import generate_reports
from .runner import CpdReport, SourceFile, check_result, run_cpd
from .scanner import collect_source_files

# Custom theme for Rich
custom_theme = Theme(
    {
        "info": "cyan",
        "warning": "yellow",
        "error": "bold red",
        "success": "bold green",
        "dim": "dim",
    }
)


def _make_console(*, no_color: bool) -> Console:
    return Console(theme=custom_theme, width=100, no_color=no_color)


console = _make_console(no_color=False)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
MAX_LISTED_FAILURES = 10


def print_banner() -> None:
    console.print(
        Panel(
            ui.banner_title(__version__),
            border_style="blue",
            padding=(0, 2),
            width=ui.CLI_LAYOUT_WIDTH,
            expand=False,
        )
    )


def _is_debug_enabled(
    *,
    argv: Sequence[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> bool:
    args = list(sys.argv[1:] if argv is None else argv)
    debug_from_flag = any(arg == "--debug" for arg in args)
    env = os.environ if environ is None else environ
    debug_from_env = env.get("CPDSCAN_DEBUG") == "1"
    return debug_from_flag or debug_from_env


def _configure_logging(*, verbose: bool, debug: bool) -> None:
    level = logging.WARNING
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO

    package_logger = logging.getLogger("cpdscan")
    for handler in list(package_logger.handlers):
        if isinstance(handler, RichHandler):
            package_logger.removeHandler(handler)
    package_logger.addHandler(
        RichHandler(
            console=console,
            show_time=False,
            show_path=debug,
            markup=False,
            rich_tracebacks=debug,
        )
    )
    package_logger.setLevel(level)


def _build_report_specs(args: argparse.Namespace) -> tuple[ReportSpec, ...]:
    def _out(path: str, label: str, suffix: str | None) -> Path:
        return _validate_output_path(
            path,
            expected_suffix=suffix,
            label=label,
            console=console,
            invalid_message=ui.fmt_invalid_output_extension,
            invalid_path_message=ui.fmt_invalid_output_path,
        )

    specs: list[ReportSpec] = []
    if args.csv_out:
        specs.append(
            CsvReport(
                destination=_out(args.csv_out, CsvReport.label, CsvReport.suffix),
                separator=args.csv_separator,
                line_count_per_file=args.csv_line_count_per_file,
            )
        )
    if args.text_out:
        specs.append(
            TextReport(
                destination=_out(args.text_out, TextReport.label, TextReport.suffix),
                line_separator=args.text_line_separator,
                trim_leading_whitespace=args.text_trim,
            )
        )
    if args.xml_out:
        specs.append(
            XmlReport(
                destination=_out(args.xml_out, XmlReport.label, XmlReport.suffix),
                encoding=args.xml_encoding,
            )
        )
    if args.vs_out:
        specs.append(
            VsReport(destination=_out(args.vs_out, VsReport.label, VsReport.suffix))
        )
    return tuple(specs)


def _read_sources(
    files: Sequence[str], *, encoding: str
) -> tuple[list[SourceFile], list[str]]:
    sources: list[SourceFile] = []
    failures: list[str] = []
    for fp in files:
        try:
            size = os.path.getsize(fp)
            if size > MAX_FILE_SIZE:
                raise FileProcessingError(
                    ui.fmt_file_too_large(size=size, limit=MAX_FILE_SIZE)
                )
            sources.append(SourceFile.from_path(fp, encoding=encoding))
        except (OSError, FileProcessingError) as e:
            console.print(ui.fmt_skipping_file(fp, e))
            failures.append(f"{fp}: {e}")
    return sources, failures


def _run_with_progress(
    config: CpdConfiguration,
    sources: Sequence[SourceFile],
    *,
    processes: int,
    no_progress: bool,
    quiet: bool,
) -> CpdReport:
    total = len(sources)
    if no_progress or total == 0:
        if not quiet and total:
            console.print(ui.fmt_tokenizing(total))
        return run_cpd(config, sources, processes=processes)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(ui.fmt_tokenizing_progress(total), total=total)
        return run_cpd(
            config,
            sources,
            processes=processes,
            progress=lambda: progress.advance(task),
        )


def _main_impl() -> None:
    ap = build_parser(__version__)
    args = ap.parse_args()

    if args.quiet:
        args.no_progress = True

    global console
    console = _make_console(no_color=args.no_color)
    _configure_logging(verbose=args.verbose, debug=args.debug)

    if args.processes < 1:
        console.print(ui.fmt_contract_error("--processes must be a positive integer."))
        sys.exit(ExitCode.CONTRACT_ERROR)

    t0 = time.monotonic()

    if not args.quiet:
        print_banner()

    config = CpdConfiguration(
        encoding=args.encoding,
        language=args.language,
        minimum_token_count=args.minimum_tokens,
        skip_duplicate_files=args.skip_duplicate_files,
        skip_lexical_errors=args.skip_lexical_errors,
        ignore_annotations=args.ignore_annotations,
        ignore_identifiers=args.ignore_identifiers,
        ignore_literals=args.ignore_literals,
        skip_blocks=args.skip_blocks,
        skip_blocks_pattern=args.skip_blocks_pattern,
        ignore_failures=args.ignore_failures,
        reports=_build_report_specs(args),
    )
    try:
        language = config.validate()
    except ConfigurationError as e:
        console.print(ui.fmt_contract_error(ui.fmt_invalid_configuration(e)))
        sys.exit(ExitCode.CONTRACT_ERROR)

    if not args.quiet:
        console.print(ui.fmt_scanning(args.paths))

    # Discovery phase
    try:
        if args.quiet:
            files = collect_source_files(args.paths, language)
        else:
            with console.status(ui.fmt_discovering(language.label), spinner="dots"):
                files = collect_source_files(args.paths, language)
    except (ValidationError, OSError) as e:
        console.print(ui.fmt_contract_error(ui.fmt_scan_failed(e)))
        sys.exit(ExitCode.CONTRACT_ERROR)

    if not files and not args.quiet:
        console.print(ui.fmt_no_files(language.label))

    sources, failed_files = _read_sources(files, encoding=config.encoding)

    # Analysis phase
    try:
        report = _run_with_progress(
            config,
            sources,
            processes=args.processes,
            no_progress=args.no_progress,
            quiet=args.quiet,
        )
    except LexicalError as e:
        console.print(ui.fmt_contract_error(ui.fmt_lexical_error(e)))
        sys.exit(ExitCode.CONTRACT_ERROR)

    failed_files.extend(str(error) for error in report.processing_errors)
    if failed_files:
        console.print(ui.fmt_failed_files_header(len(failed_files)))
        for failure in failed_files[:MAX_LISTED_FAILURES]:
            console.print(f"  • {failure}")
        if len(failed_files) > MAX_LISTED_FAILURES:
            console.print(f"  ... and {len(failed_files) - MAX_LISTED_FAILURES} more")

    _print_summary(
        console=console,
        quiet=args.quiet,
        files_found=len(files),
        files_analyzed=report.files_analyzed,
        files_skipped=len(failed_files),
        duplicate_files=len(report.skipped_duplicates),
        tokens=report.total_tokens,
        duplications=len(report.matches),
    )

    # Reporting phase
    render_failures = generate_reports(config.reports, report)
    failed_destinations = {failure.destination for failure in render_failures}
    if not args.quiet:
        for spec in config.reports:
            if spec.destination not in failed_destinations:
                console.print(
                    ui.fmt_report_saved(label=spec.label, path=spec.destination)
                )
    for failure in render_failures:
        console.print(ui.fmt_contract_error(ui.fmt_report_write_failed(failure)))
    if render_failures and not config.ignore_failures:
        sys.exit(ExitCode.CONTRACT_ERROR)

    # Gating phase
    try:
        check_result(report, config)
    except DuplicationFoundError as e:
        console.print(
            ui.fmt_gating_failure(
                ui.fmt_duplicates_found(message=str(e), count=e.match_count)
            )
        )
        sys.exit(ExitCode.GATING_FAILURE)

    if not report.matches and not args.quiet:
        console.print(ui.fmt_no_duplicates(config.minimum_token_count))

    if not args.quiet:
        elapsed = time.monotonic() - t0
        console.print(f"\n[dim]Done in {elapsed:.1f}s[/dim]")


def main() -> None:
    try:
        _main_impl()
    except SystemExit:
        raise
    except Exception as e:
        console.print(ui.fmt_internal_error(e, debug=_is_debug_enabled()))
        sys.exit(ExitCode.INTERNAL_ERROR)


if __name__ == "__main__":
    main()
