"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import argparse
from typing import cast

from . import ui_messages as ui
from .contracts import (
    DEFAULT_CSV_SEPARATOR,
    DEFAULT_ENCODING,
    DEFAULT_LANGUAGE,
    DEFAULT_MINIMUM_TOKEN_COUNT,
    DEFAULT_SKIP_BLOCKS_PATTERN,
    DEFAULT_TEXT_LINE_SEPARATOR,
    DEFAULT_XML_ENCODING,
    cli_help_epilog,
)
from .languages import supported_languages

_NO_DEFAULT_HELP = frozenset({"skip_blocks", "text_line_separator"})


class _HelpFormatter(
    argparse.ArgumentDefaultsHelpFormatter, argparse.RawDescriptionHelpFormatter
):
    def _get_help_string(self, action: argparse.Action) -> str:
        if action.dest in _NO_DEFAULT_HELP:
            return action.help or ""
        return cast(str, super()._get_help_string(action))


def build_parser(version: str) -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="cpdscan",
        description="Token-based copy/paste detector.",
        formatter_class=_HelpFormatter,
        epilog=cli_help_epilog(),
    )
    ap.add_argument(
        "--version",
        action="version",
        version=ui.version_output(version),
        help=ui.HELP_VERSION,
    )

    core_group = ap.add_argument_group("Target")
    core_group.add_argument(
        "paths",
        nargs="*",
        default=["."],
        metavar="PATH",
        help=ui.HELP_PATHS,
    )
    core_group.add_argument(
        "--language",
        default=DEFAULT_LANGUAGE,
        help=ui.HELP_LANGUAGE.format(choices=", ".join(supported_languages())),
    )
    core_group.add_argument(
        "--encoding",
        default=DEFAULT_ENCODING,
        help=ui.HELP_ENCODING,
    )

    tune_group = ap.add_argument_group("Analysis Tuning")
    tune_group.add_argument(
        "--minimum-tokens",
        dest="minimum_tokens",
        type=int,
        default=DEFAULT_MINIMUM_TOKEN_COUNT,
        metavar="N",
        help=ui.HELP_MINIMUM_TOKENS,
    )
    tune_group.add_argument(
        "--skip-duplicate-files",
        action="store_true",
        help=ui.HELP_SKIP_DUPLICATE_FILES,
    )
    tune_group.add_argument(
        "--skip-lexical-errors",
        action="store_true",
        help=ui.HELP_SKIP_LEXICAL_ERRORS,
    )
    tune_group.add_argument(
        "--ignore-annotations",
        action="store_true",
        help=ui.HELP_IGNORE_ANNOTATIONS,
    )
    tune_group.add_argument(
        "--ignore-identifiers",
        action="store_true",
        help=ui.HELP_IGNORE_IDENTIFIERS,
    )
    tune_group.add_argument(
        "--ignore-literals",
        action="store_true",
        help=ui.HELP_IGNORE_LITERALS,
    )
    tune_group.add_argument(
        "--skip-blocks",
        dest="skip_blocks",
        action="store_true",
        default=True,
        help=ui.HELP_SKIP_BLOCKS,
    )
    tune_group.add_argument(
        "--no-skip-blocks",
        dest="skip_blocks",
        action="store_false",
        help=ui.HELP_NO_SKIP_BLOCKS,
    )
    tune_group.add_argument(
        "--skip-blocks-pattern",
        default=DEFAULT_SKIP_BLOCKS_PATTERN,
        metavar="PATTERN",
        help=ui.HELP_SKIP_BLOCKS_PATTERN,
    )
    tune_group.add_argument(
        "--processes",
        type=int,
        default=4,
        help=ui.HELP_PROCESSES,
    )

    ci_group = ap.add_argument_group("CI/CD")
    ci_group.add_argument(
        "--ignore-failures",
        action="store_true",
        help=ui.HELP_IGNORE_FAILURES,
    )

    out_group = ap.add_argument_group("Reporting")
    out_group.add_argument(
        "--csv",
        dest="csv_out",
        metavar="FILE",
        help=ui.HELP_CSV,
    )
    out_group.add_argument(
        "--csv-separator",
        default=DEFAULT_CSV_SEPARATOR,
        metavar="CHAR",
        help=ui.HELP_CSV_SEPARATOR,
    )
    out_group.add_argument(
        "--csv-line-count-per-file",
        action="store_true",
        help=ui.HELP_CSV_LINE_COUNT_PER_FILE,
    )
    out_group.add_argument(
        "--text",
        dest="text_out",
        metavar="FILE",
        help=ui.HELP_TEXT,
    )
    out_group.add_argument(
        "--text-line-separator",
        default=DEFAULT_TEXT_LINE_SEPARATOR,
        metavar="LINE",
        help=ui.HELP_TEXT_LINE_SEPARATOR,
    )
    out_group.add_argument(
        "--text-trim",
        action="store_true",
        help=ui.HELP_TEXT_TRIM,
    )
    out_group.add_argument(
        "--xml",
        dest="xml_out",
        metavar="FILE",
        help=ui.HELP_XML,
    )
    out_group.add_argument(
        "--xml-encoding",
        default=DEFAULT_XML_ENCODING,
        help=ui.HELP_XML_ENCODING,
    )
    out_group.add_argument(
        "--vs",
        dest="vs_out",
        metavar="FILE",
        help=ui.HELP_VS,
    )
    out_group.add_argument(
        "--no-progress",
        action="store_true",
        help=ui.HELP_NO_PROGRESS,
    )
    out_group.add_argument(
        "--no-color",
        action="store_true",
        help=ui.HELP_NO_COLOR,
    )
    out_group.add_argument(
        "--quiet",
        action="store_true",
        help=ui.HELP_QUIET,
    )
    out_group.add_argument(
        "--verbose",
        action="store_true",
        help=ui.HELP_VERBOSE,
    )
    out_group.add_argument(
        "--debug",
        action="store_true",
        help=ui.HELP_DEBUG,
    )
    return ap
