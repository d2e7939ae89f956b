"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import csv
import re
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Protocol, TextIO

from .contracts import (
    CPD_XML_NAMESPACE,
    CPD_XML_SCHEMA_VERSION,
    DEFAULT_CSV_SEPARATOR,
    DEFAULT_TEXT_LINE_SEPARATOR,
    DEFAULT_XML_ENCODING,
)

if TYPE_CHECKING:
    from .runner import CpdReport

# Characters XML 1.0 forbids even as character references.
_XML_INVALID_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


class Renderer(Protocol):
    encoding: str
    errors: str

    def render(self, report: CpdReport, sink: TextIO) -> None: ...


def trim_common_leading_whitespace(lines: Sequence[str]) -> list[str]:
    """
    Strip the indentation shared by every non-blank line.

    Blank lines do not constrain the common prefix; relative indentation
    is preserved.
    """
    indents = [len(line) - len(line.lstrip()) for line in lines if line.strip()]
    if not indents:
        return [line.strip() for line in lines]
    cut = min(indents)
    return [line[cut:] if line.strip() else line.strip() for line in lines]


# =========================
# CSV
# =========================


@dataclass(frozen=True, slots=True)
class CsvRenderer:
    """
    One row per duplication.

    Default layout: ``lines,tokens,occurrences`` followed by
    ``begin line,path`` pairs. With ``line_count_per_file`` the header is
    ``tokens,occurrences`` and each occurrence carries its own line count:
    ``begin line,line count,path``.
    """

    separator: str = DEFAULT_CSV_SEPARATOR
    line_count_per_file: bool = False
    encoding: str = "utf-8"
    errors: str = "strict"

    def render(self, report: CpdReport, sink: TextIO) -> None:
        writer = csv.writer(sink, delimiter=self.separator, lineterminator="\n")
        if self.line_count_per_file:
            writer.writerow(["tokens", "occurrences"])
        else:
            writer.writerow(["lines", "tokens", "occurrences"])

        for match in report.matches:
            row: list[object] = []
            if not self.line_count_per_file:
                row.append(match.line_count)
            row.extend([match.token_count, len(match.occurrences)])
            for occ in match.occurrences:
                row.append(occ.start_line)
                if self.line_count_per_file:
                    row.append(occ.line_count)
                row.append(occ.filepath)
            writer.writerow(row)


# =========================
# Plain text
# =========================


@dataclass(frozen=True, slots=True)
class TextRenderer:
    line_separator: str = DEFAULT_TEXT_LINE_SEPARATOR
    trim_leading_whitespace: bool = False
    encoding: str = "utf-8"
    errors: str = "strict"

    def render(self, report: CpdReport, sink: TextIO) -> None:
        for index, match in enumerate(report.matches):
            if index:
                sink.write(self.line_separator + "\n")
            sink.write(
                f"Found a {match.line_count} line ({match.token_count} tokens) "
                "duplication in the following files:\n"
            )
            for occ in match.occurrences:
                sink.write(f"Starting at line {occ.start_line} of {occ.filepath}\n")
            sink.write("\n")

            fragment = list(report.source_slice(match.first))
            if self.trim_leading_whitespace:
                fragment = trim_common_leading_whitespace(fragment)
            for line in fragment:
                sink.write(line + "\n")


# =========================
# XML
# =========================


def _xml_text(value: str) -> str:
    return _XML_INVALID_CHARS.sub("", value)


@dataclass(frozen=True, slots=True)
class XmlRenderer:
    """
    CPD report document in the ``pmd-cpd`` schema.

    Characters the output encoding cannot represent are written as
    character references.
    """

    tag: ClassVar[str] = "pmd-cpd"

    encoding: str = DEFAULT_XML_ENCODING
    errors: str = "xmlcharrefreplace"

    def build(self, report: CpdReport) -> ET.Element:
        root = ET.Element(
            self.tag,
            {"xmlns": CPD_XML_NAMESPACE, "version": CPD_XML_SCHEMA_VERSION},
        )
        for path, total in sorted(report.token_counts.items()):
            ET.SubElement(
                root,
                "file",
                {"path": _xml_text(path), "totalNumberOfTokens": str(total)},
            )

        for match in report.matches:
            dup = ET.SubElement(
                root,
                "duplication",
                {"lines": str(match.line_count), "tokens": str(match.token_count)},
            )
            for occ in match.occurrences:
                ET.SubElement(
                    dup,
                    "file",
                    {
                        "path": _xml_text(occ.filepath),
                        "beginline": str(occ.start_line),
                        "endline": str(occ.end_line),
                        "begincolumn": str(occ.start_column),
                        "endcolumn": str(occ.end_column),
                        "begintoken": str(occ.start_token),
                        "endtoken": str(occ.end_token),
                    },
                )
            fragment = ET.SubElement(dup, "codefragment")
            fragment.text = _xml_text("\n".join(report.source_slice(match.first)))

        for error in report.processing_errors:
            ET.SubElement(
                root,
                "error",
                {"filename": _xml_text(error.filepath), "msg": _xml_text(str(error))},
            )
        return root

    def render(self, report: CpdReport, sink: TextIO) -> None:
        root = self.build(report)
        ET.indent(root, space="   ")
        sink.write(f'<?xml version="1.0" encoding="{self.encoding}"?>\n')
        sink.write(ET.tostring(root, encoding="unicode"))
        sink.write("\n")


# =========================
# Visual Studio
# =========================


@dataclass(frozen=True, slots=True)
class VsRenderer:
    """``path(line): Between lines a and b``, one line per occurrence."""

    encoding: str = "utf-8"
    errors: str = "strict"

    def render(self, report: CpdReport, sink: TextIO) -> None:
        for match in report.matches:
            for occ in match.occurrences:
                sink.write(
                    f"{occ.filepath}({occ.start_line}): Between lines "
                    f"{occ.start_line} and {occ.end_line}\n"
                )
