"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import ConfigurationError, LexicalError
from .languages import get_language
from .normalize import normalize_tokens
from .tokens import TokenStream

if TYPE_CHECKING:
    from .config import CpdConfiguration


def parse_skip_blocks_pattern(pattern: str) -> tuple[str, str]:
    """Split a ``"<start>|<end>"`` marker pattern."""
    start, sep, end = pattern.partition("|")
    start, end = start.strip(), end.strip()
    if not sep or not start or not end:
        raise ConfigurationError(
            f"Invalid skip blocks pattern '{pattern}': expected '<start>|<end>'"
        )
    return start, end


def blank_skip_blocks(
    text: str, start_marker: str, end_marker: str, *, filepath: str
) -> str:
    """
    Blank every line from a line starting with ``start_marker`` up to and
    including the next line starting with ``end_marker``. A marker ending in
    a word character must be followed by a non-word character or the line end.

    Line breaks are kept so token positions stay valid.
    """
    out: list[str] = []
    open_line: int | None = None
    for lineno, line in enumerate(text.splitlines(keepends=True), start=1):
        stripped = line.lstrip()
        if open_line is None:
            if _begins_with_marker(stripped, start_marker):
                open_line = lineno
                out.append(_blank(line))
            else:
                out.append(line)
            continue
        out.append(_blank(line))
        if _begins_with_marker(stripped, end_marker):
            open_line = None

    if open_line is not None:
        raise LexicalError(
            f"unterminated skip block ('{start_marker}' without '{end_marker}')",
            filepath=filepath,
            line=open_line,
            column=1,
        )
    return "".join(out)


def _begins_with_marker(line: str, marker: str) -> bool:
    # `#if 0` must not match `#if 01` or `#if 0x1`.
    if not line.startswith(marker):
        return False
    following = line[len(marker) : len(marker) + 1]
    return not (_is_word_char(marker[-1]) and _is_word_char(following))


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def _blank(line: str) -> str:
    body = line.rstrip("\r\n")
    return " " * len(body) + line[len(body) :]


def decode_source(content: bytes, encoding: str, *, filepath: str) -> str:
    try:
        return content.decode(encoding)
    except UnicodeDecodeError as e:
        prefix = content[: e.start]
        line = prefix.count(b"\n") + 1
        column = e.start - (prefix.rfind(b"\n") + 1) + 1
        raise LexicalError(
            f"cannot decode source as {encoding}: {e.reason}",
            filepath=filepath,
            line=line,
            column=column,
        ) from e


def tokenize_text(
    text: str, *, filepath: str, config: CpdConfiguration
) -> TokenStream:
    """
    Turn decoded source text into a normalized token stream.

    Pure function of the text and the configuration.
    """
    language = get_language(config.language)
    if config.skip_blocks:
        start, end = parse_skip_blocks_pattern(config.skip_blocks_pattern)
        text = blank_skip_blocks(text, start, end, filepath=filepath)
    raw = language.lex(text, filepath)
    tokens = normalize_tokens(
        raw, config.normalization, annotations=language.annotations
    )
    return TokenStream(filepath=filepath, tokens=tuple(tokens))
