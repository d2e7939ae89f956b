"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace
from enum import Enum

from .tokens import Token, TokenKind

IDENTIFIER_PLACEHOLDER = "_ID_"
LITERAL_PLACEHOLDER = "_LIT_"
ANNOTATION_PLACEHOLDER = "_ANNOTATION_"


class AnnotationStyle(str, Enum):
    NONE = "none"
    # `@Name` anywhere (Java annotations, JavaScript decorators)
    PREFIX = "prefix"
    # `@name` only as the first token of a line (Python decorators)
    LINE_START = "line_start"
    # `[Name(...)]` starting a line (C# attributes)
    BRACKET = "bracket"


@dataclass(frozen=True, slots=True)
class NormalizationConfig:
    ignore_annotations: bool = False
    ignore_identifiers: bool = False
    ignore_literals: bool = False


def annotation_spans(
    tokens: Sequence[Token], style: AnnotationStyle
) -> list[tuple[int, int]]:
    """
    Return half-open index ranges covering each annotation, including a
    dotted name and a balanced argument list. C# attribute sections span
    their whole bracket.
    """
    if style is AnnotationStyle.NONE:
        return []
    if style is AnnotationStyle.BRACKET:
        return _bracket_spans(tokens)

    spans: list[tuple[int, int]] = []
    n = len(tokens)
    i = 0
    while i < n - 1:
        tok = tokens[i]
        nxt = tokens[i + 1]
        if not (
            tok.kind is TokenKind.OPERATOR
            and tok.image == "@"
            and nxt.kind is TokenKind.IDENTIFIER
        ):
            i += 1
            continue
        if style is AnnotationStyle.LINE_START and not _starts_line(tokens, i):
            i += 1
            continue

        j = i + 2
        while (
            j + 1 < n
            and tokens[j].image == "."
            and tokens[j + 1].kind is TokenKind.IDENTIFIER
        ):
            j += 2
        if j < n and tokens[j].image == "(":
            j = _skip_balanced(tokens, j)
        spans.append((i, j))
        i = j
    return spans


def _starts_line(tokens: Sequence[Token], i: int) -> bool:
    return i == 0 or tokens[i - 1].end_line < tokens[i].line


def _bracket_spans(tokens: Sequence[Token]) -> list[tuple[int, int]]:
    spans: list[tuple[int, int]] = []
    n = len(tokens)
    i = 0
    while i < n - 1:
        tok, nxt = tokens[i], tokens[i + 1]
        is_target = (
            nxt.kind is TokenKind.KEYWORD
            and i + 2 < n
            and tokens[i + 2].image == ":"
        )
        if (
            tok.kind is TokenKind.OPERATOR
            and tok.image == "["
            and (nxt.kind is TokenKind.IDENTIFIER or is_target)
            and _starts_line(tokens, i)
        ):
            j = _skip_balanced(tokens, i, "[", "]")
            spans.append((i, j))
            i = j
            continue
        i += 1
    return spans


def _skip_balanced(
    tokens: Sequence[Token], start: int, opening: str = "(", closing: str = ")"
) -> int:
    depth = 0
    for j in range(start, len(tokens)):
        image = tokens[j].image
        if tokens[j].kind is not TokenKind.OPERATOR:
            continue
        if image == opening:
            depth += 1
        elif image == closing:
            depth -= 1
            if depth == 0:
                return j + 1
    return len(tokens)


def _collapse(tokens: Sequence[Token]) -> Token:
    first, last = tokens[0], tokens[-1]
    return replace(
        first,
        kind=TokenKind.ANNOTATION,
        image=ANNOTATION_PLACEHOLDER,
        end_line=last.end_line,
        end_column=last.end_column,
    )


def _normalize_token(token: Token, cfg: NormalizationConfig) -> Token:
    if cfg.ignore_identifiers and token.kind is TokenKind.IDENTIFIER:
        return replace(token, image=IDENTIFIER_PLACEHOLDER)
    if cfg.ignore_literals and token.kind is TokenKind.LITERAL:
        return replace(token, image=LITERAL_PLACEHOLDER)
    return token


def normalize_tokens(
    tokens: Sequence[Token],
    cfg: NormalizationConfig,
    *,
    annotations: AnnotationStyle = AnnotationStyle.NONE,
) -> list[Token]:
    """
    Replace ignored token classes by canonical placeholders.

    Positions are preserved so that reported line ranges still point at the
    original source. Each ignored annotation collapses into one token.
    """
    spans = annotation_spans(tokens, annotations) if cfg.ignore_annotations else []
    result: list[Token] = []
    i = 0
    for start, end in spans:
        result.extend(_normalize_token(t, cfg) for t in tokens[i:start])
        result.append(_collapse(tokens[start:end]))
        i = end
    result.extend(_normalize_token(t, cfg) for t in tokens[i:])
    return result
