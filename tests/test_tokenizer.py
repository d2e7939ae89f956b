import pytest

from cpdscan.config import CpdConfiguration
from cpdscan.errors import ConfigurationError, LexicalError
from cpdscan.normalize import ANNOTATION_PLACEHOLDER, IDENTIFIER_PLACEHOLDER
from cpdscan.tokenizer import (
    blank_skip_blocks,
    decode_source,
    parse_skip_blocks_pattern,
    tokenize_text,
)


def test_parse_skip_blocks_pattern() -> None:
    assert parse_skip_blocks_pattern("#if 0|#endif") == ("#if 0", "#endif")
    assert parse_skip_blocks_pattern(" BEGIN | END ") == ("BEGIN", "END")


@pytest.mark.parametrize("pattern", ["#if 0", "|#endif", "#if 0|", ""])
def test_parse_skip_blocks_pattern_invalid(pattern: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_skip_blocks_pattern(pattern)


def test_blank_skip_blocks_keeps_line_structure() -> None:
    text = "a\n#if 0\nbb\n  #endif\nc\n"
    out = blank_skip_blocks(text, "#if 0", "#endif", filepath="f")
    assert out == "a\n     \n  \n        \nc\n"
    assert out.count("\n") == text.count("\n")


def test_blank_skip_blocks_unterminated() -> None:
    with pytest.raises(LexicalError) as exc_info:
        blank_skip_blocks("a\n#if 0\nb\n", "#if 0", "#endif", filepath="X.java")
    err = exc_info.value
    assert err.filepath == "X.java"
    assert (err.line, err.column) == (2, 1)


@pytest.mark.parametrize("line", ["#if 01", "#if 0x1", "#if 0_A"])
def test_blank_skip_blocks_start_marker_needs_word_boundary(line: str) -> None:
    text = f"a\n{line}\nb\n"
    assert blank_skip_blocks(text, "#if 0", "#endif", filepath="f") == text


def test_blank_skip_blocks_end_marker_needs_word_boundary() -> None:
    text = "#if 0 // off\nx\n#endifX\n"
    with pytest.raises(LexicalError) as exc_info:
        blank_skip_blocks(text, "#if 0", "#endif", filepath="X.java")
    assert exc_info.value.line == 1

    closed = blank_skip_blocks(
        text + "#endif // done\ny\n", "#if 0", "#endif", filepath="f"
    )
    assert closed.splitlines()[-1] == "y"
    assert closed.splitlines()[2].strip() == ""


def test_tokenize_text_skips_blocks() -> None:
    text = "int a;\n#if 0\nint b;\n#endif\nint c;\n"
    stream = tokenize_text(text, filepath="A.java", config=CpdConfiguration())
    assert [t.image for t in stream] == ["int", "a", ";", "int", "c", ";"]
    assert stream[3].line == 5
    assert stream.filepath == "A.java"


def test_tokenize_text_without_skip_blocks_keeps_region() -> None:
    text = "int a;\n#if 0\nint b;\n#endif\nint c;\n"
    config = CpdConfiguration(skip_blocks=False)
    stream = tokenize_text(text, filepath="A.java", config=config)
    assert "b" in [t.image for t in stream]


def test_tokenize_text_custom_pattern() -> None:
    text = "int a;\n// CPD-OFF\nint b;\n// CPD-ON\n"
    config = CpdConfiguration(skip_blocks_pattern="// CPD-OFF|// CPD-ON")
    stream = tokenize_text(text, filepath="A.java", config=config)
    assert [t.image for t in stream] == ["int", "a", ";"]


def test_tokenize_text_applies_ignore_rules() -> None:
    config = CpdConfiguration(ignore_identifiers=True, ignore_annotations=True)
    stream = tokenize_text("@Test void check() {}", filepath="A.java", config=config)
    images = [t.image for t in stream]
    assert images[0] == ANNOTATION_PLACEHOLDER
    assert images[2] == IDENTIFIER_PLACEHOLDER


def test_tokenize_text_python_language() -> None:
    config = CpdConfiguration(language="python")
    stream = tokenize_text("x = 1\n", filepath="m.py", config=config)
    assert [t.image for t in stream] == ["x", "=", "1"]


def test_decode_source_reports_position() -> None:
    with pytest.raises(LexicalError) as exc_info:
        decode_source(b"ok\nab\xff", "utf-8", filepath="bad.java")
    err = exc_info.value
    assert err.filepath == "bad.java"
    assert (err.line, err.column) == (2, 3)
    assert "utf-8" in err.reason


def test_decode_source_other_encoding() -> None:
    assert decode_source("é".encode("latin-1"), "latin-1", filepath="f") == "é"
