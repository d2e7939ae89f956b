"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from rich.console import Console
from rich.table import Table
from rich.text import Text

from . import ui_messages as ui


def _summary_value_style(*, label: str, value: int) -> str:
    if value == 0:
        return "dim"
    if label == ui.SUMMARY_LABEL_DUPLICATIONS:
        return "bold yellow"
    if label == ui.SUMMARY_LABEL_FILES_SKIPPED:
        return "yellow"
    return "bold"


def _build_summary_rows(
    *,
    files_found: int,
    files_analyzed: int,
    files_skipped: int,
    duplicate_files: int,
    tokens: int,
    duplications: int,
) -> list[tuple[str, int]]:
    return [
        (ui.SUMMARY_LABEL_FILES_FOUND, files_found),
        (ui.SUMMARY_LABEL_FILES_ANALYZED, files_analyzed),
        (ui.SUMMARY_LABEL_FILES_SKIPPED, files_skipped),
        (ui.SUMMARY_LABEL_DUPLICATE_FILES, duplicate_files),
        (ui.SUMMARY_LABEL_TOKENS, tokens),
        (ui.SUMMARY_LABEL_DUPLICATIONS, duplications),
    ]


def _build_summary_table(rows: list[tuple[str, int]]) -> Table:
    summary_table = Table(
        title=ui.SUMMARY_TITLE,
        show_header=True,
        width=ui.CLI_LAYOUT_WIDTH,
    )
    summary_table.add_column("Metric")
    summary_table.add_column("Value", justify="right")
    for label, value in rows:
        summary_table.add_row(
            label,
            Text(str(value), style=_summary_value_style(label=label, value=value)),
        )
    return summary_table


def _print_summary(
    *,
    console: Console,
    quiet: bool,
    files_found: int,
    files_analyzed: int,
    files_skipped: int,
    duplicate_files: int,
    tokens: int,
    duplications: int,
) -> None:
    if quiet:
        console.print(ui.SUMMARY_TITLE)
        console.print(
            ui.fmt_summary_compact_input(
                found=files_found,
                analyzed=files_analyzed,
                skipped=files_skipped,
                duplicate_files=duplicate_files,
            )
        )
        console.print(
            ui.fmt_summary_compact_matches(count=duplications, tokens=tokens)
        )
        return

    rows = _build_summary_rows(
        files_found=files_found,
        files_analyzed=files_analyzed,
        files_skipped=files_skipped,
        duplicate_files=duplicate_files,
        tokens=tokens,
        duplications=duplications,
    )
    console.print(_build_summary_table(rows))
