"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Final

DEFAULT_ENCODING: Final = "utf-8"
DEFAULT_LANGUAGE: Final = "java"
DEFAULT_MINIMUM_TOKEN_COUNT: Final = 50
DEFAULT_SKIP_BLOCKS_PATTERN: Final = "#if 0|#endif"

DEFAULT_CSV_SEPARATOR: Final = ","
DEFAULT_TEXT_LINE_SEPARATOR: Final = (
    "====================================================================="
)
DEFAULT_XML_ENCODING: Final = "UTF-8"

CPD_XML_NAMESPACE: Final = "https://pmd-code.org/schema/cpd-report"
CPD_XML_SCHEMA_VERSION: Final = "1.0.0"


class ExitCode(IntEnum):
    SUCCESS = 0
    CONTRACT_ERROR = 2
    GATING_FAILURE = 3
    INTERNAL_ERROR = 5


EXIT_CODE_DESCRIPTIONS: Final[tuple[tuple[ExitCode, str], ...]] = (
    (ExitCode.SUCCESS, "success"),
    (
        ExitCode.CONTRACT_ERROR,
        (
            "contract error (invalid configuration, unsupported language, "
            "missing scan paths, lexical errors, report write failures; "
            "unreadable files are skipped with a warning)"
        ),
    ),
    (
        ExitCode.GATING_FAILURE,
        "gating failure (duplicates found and --ignore-failures not set)",
    ),
    (
        ExitCode.INTERNAL_ERROR,
        "internal error (unexpected exception; please report)",
    ),
)


def cli_help_epilog() -> str:
    lines = ["Exit codes"]
    for code, description in EXIT_CODE_DESCRIPTIONS:
        lines.append(f"  - {int(code)} - {description}")
    return "\n".join(lines)
