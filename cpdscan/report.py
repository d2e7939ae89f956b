"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import csv
import logging
import os
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager, suppress
from pathlib import Path
from typing import TYPE_CHECKING, Any, TextIO

from .config import CsvReport, ReportSpec, TextReport, VsReport, XmlReport
from .errors import RenderError
from .renderers import CsvRenderer, Renderer, TextRenderer, VsRenderer, XmlRenderer

if TYPE_CHECKING:
    from .runner import CpdReport

logger = logging.getLogger(__name__)


def _csv_renderer(spec: CsvReport) -> Renderer:
    return CsvRenderer(
        separator=spec.separator, line_count_per_file=spec.line_count_per_file
    )


def _text_renderer(spec: TextReport) -> Renderer:
    return TextRenderer(
        line_separator=spec.line_separator,
        trim_leading_whitespace=spec.trim_leading_whitespace,
    )


def _xml_renderer(spec: XmlReport) -> Renderer:
    return XmlRenderer(encoding=spec.encoding)


def _vs_renderer(spec: VsReport) -> Renderer:
    return VsRenderer()


_RENDERER_FACTORIES: dict[type[Any], Callable[[Any], Renderer]] = {
    CsvReport: _csv_renderer,
    TextReport: _text_renderer,
    XmlReport: _xml_renderer,
    VsReport: _vs_renderer,
}


def create_renderer(spec: ReportSpec) -> Renderer:
    try:
        factory = _RENDERER_FACTORIES[type(spec)]
    except KeyError:
        raise TypeError(f"Unknown report type: {type(spec).__name__}") from None
    renderer = factory(spec)
    logger.debug("Creating renderer %s for %s", type(renderer).__name__, spec)
    return renderer


@contextmanager
def open_report_sink(
    destination: Path, *, encoding: str, errors: str = "strict"
) -> Iterator[TextIO]:
    """
    Yield a text sink that replaces ``destination`` only on success.

    Output goes to a temporary file next to the destination; it is fsynced
    and moved over the destination when the block exits normally, and
    removed otherwise. Write failures are raised as RenderError.
    """
    destination = Path(destination)
    tmp_path = destination.with_name(f"{destination.name}.tmp")
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding=encoding, errors=errors, newline="") as sink:
            yield sink
            sink.flush()
            os.fsync(sink.fileno())
        os.replace(tmp_path, destination)
    except (OSError, UnicodeError, csv.Error) as e:
        _discard(tmp_path)
        raise RenderError(destination, e) from e
    except BaseException:
        _discard(tmp_path)
        raise


def _discard(path: Path) -> None:
    with suppress(OSError):
        path.unlink(missing_ok=True)


def write_report(spec: ReportSpec, report: CpdReport) -> None:
    renderer = create_renderer(spec)
    with open_report_sink(
        spec.destination, encoding=renderer.encoding, errors=renderer.errors
    ) as sink:
        renderer.render(report, sink)


def generate_reports(
    specs: Sequence[ReportSpec], report: CpdReport
) -> list[RenderError]:
    """
    Render every configured report.

    A failing destination does not stop the others; its error is returned.
    """
    if specs:
        logger.info("Generating reports")
    failures: list[RenderError] = []
    for spec in specs:
        try:
            write_report(spec, report)
        except RenderError as e:
            logger.error("%s", e)
            failures.append(e)
        else:
            logger.debug("Wrote %s report to %s", spec.label, spec.destination)
    return failures
