from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from cpdscan.config import CsvReport, TextReport, VsReport, XmlReport
from cpdscan.contracts import CPD_XML_NAMESPACE
from cpdscan.engine import Match, Occurrence
from cpdscan.errors import RenderError
from cpdscan.renderers import CsvRenderer, TextRenderer, VsRenderer, XmlRenderer
from cpdscan.report import (
    create_renderer,
    generate_reports,
    open_report_sink,
    write_report,
)
from cpdscan.runner import CpdReport


@pytest.fixture
def report() -> CpdReport:
    occurrences = tuple(
        Occurrence(
            filepath=path,
            start_line=1,
            end_line=2,
            start_token=0,
            end_token=19,
            start_column=1,
            end_column=2,
        )
        for path in ("A.java", "B.java")
    )
    return CpdReport(
        matches=(Match(token_count=20, occurrences=occurrences),),
        sources={"A.java": ("String s = \"жук\";", "}"), "B.java": ("x", "y")},
        token_counts={"A.java": 20, "B.java": 20},
    )


@pytest.mark.parametrize(
    ("spec", "renderer_type"),
    [
        (CsvReport(Path("r.csv")), CsvRenderer),
        (TextReport(Path("r.txt")), TextRenderer),
        (XmlReport(Path("r.xml")), XmlRenderer),
        (VsReport(Path("r.vs")), VsRenderer),
    ],
)
def test_create_renderer_dispatch(spec: object, renderer_type: type) -> None:
    assert isinstance(create_renderer(spec), renderer_type)  # type: ignore[arg-type]


def test_create_renderer_passes_options() -> None:
    renderer = create_renderer(
        CsvReport(Path("r.csv"), separator=";", line_count_per_file=True)
    )
    assert renderer == CsvRenderer(separator=";", line_count_per_file=True)
    xml = create_renderer(XmlReport(Path("r.xml"), encoding="ISO-8859-1"))
    assert xml.encoding == "ISO-8859-1"


def test_create_renderer_unknown_type() -> None:
    with pytest.raises(TypeError):
        create_renderer(object())  # type: ignore[arg-type]


def test_sink_replaces_destination_on_success(tmp_path: Path) -> None:
    dest = tmp_path / "out" / "report.txt"
    with open_report_sink(dest, encoding="utf-8") as sink:
        sink.write("hello\n")
        assert not dest.exists()
    assert dest.read_text("utf-8") == "hello\n"
    assert list(dest.parent.iterdir()) == [dest]


def test_sink_failure_keeps_previous_destination(tmp_path: Path) -> None:
    dest = tmp_path / "report.txt"
    dest.write_text("previous", "utf-8")

    with pytest.raises(RenderError) as exc_info:
        with open_report_sink(dest, encoding="utf-8") as sink:
            sink.write("partial")
            raise OSError("disk full")

    err = exc_info.value
    assert err.destination == dest
    assert isinstance(err.cause, OSError)
    assert "disk full" in str(err)
    assert dest.read_text("utf-8") == "previous"
    assert list(tmp_path.iterdir()) == [dest]


def test_sink_encoding_error_is_render_error(tmp_path: Path) -> None:
    dest = tmp_path / "report.txt"
    with pytest.raises(RenderError) as exc_info:
        with open_report_sink(dest, encoding="ascii") as sink:
            sink.write("жук")
    assert isinstance(exc_info.value.cause, UnicodeError)
    assert not dest.exists()
    assert list(tmp_path.iterdir()) == []


def test_sink_other_errors_propagate_and_clean_up(tmp_path: Path) -> None:
    dest = tmp_path / "report.txt"
    with pytest.raises(KeyError):
        with open_report_sink(dest, encoding="utf-8") as sink:
            sink.write("partial")
            raise KeyError("boom")
    assert list(tmp_path.iterdir()) == []


def test_write_xml_report_with_narrow_encoding(
    tmp_path: Path, report: CpdReport
) -> None:
    dest = tmp_path / "cpd.xml"
    write_report(XmlReport(dest, encoding="ISO-8859-1"), report)

    data = dest.read_bytes()
    assert data.startswith(b'<?xml version="1.0" encoding="ISO-8859-1"?>')
    assert b"&#1078;" in data
    root = ET.parse(dest).getroot()
    fragment = root.find(
        f"{{{CPD_XML_NAMESPACE}}}duplication/{{{CPD_XML_NAMESPACE}}}codefragment"
    )
    assert fragment is not None
    assert "жук" in (fragment.text or "")


def test_generate_reports_isolates_failures(
    tmp_path: Path, report: CpdReport, caplog: pytest.LogCaptureFixture
) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", "utf-8")
    bad = CsvReport(blocker / "cpd.csv")
    good_text = TextReport(tmp_path / "cpd.txt")
    good_vs = VsReport(tmp_path / "cpd.vs")

    with caplog.at_level(logging.INFO, logger="cpdscan.report"):
        failures = generate_reports((bad, good_text, good_vs), report)

    assert len(failures) == 1
    assert failures[0].destination == bad.destination
    assert good_text.destination.read_text("utf-8").startswith("Found a 2 line")
    assert good_vs.destination.read_text("utf-8") == (
        "A.java(1): Between lines 1 and 2\nB.java(1): Between lines 1 and 2\n"
    )
    assert "Generating reports" in caplog.text


def test_generate_reports_without_specs(report: CpdReport) -> None:
    assert generate_reports((), report) == []
