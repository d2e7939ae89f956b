"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import io
import keyword
import re
import tokenize
from dataclasses import dataclass

from .errors import LexicalError
from .tokens import Token, TokenKind

# =========================
# C-family syntax
# =========================


@dataclass(frozen=True, slots=True)
class CFamilySyntax:
    keywords: frozenset[str]
    text_blocks: bool = False
    template_literals: bool = False
    verbatim_strings: bool = False
    preprocessor: bool = False
    dollar_identifiers: bool = False
    interpolated_strings: bool = False
    regex_literals: bool = False


# fmt: off
JAVA_KEYWORDS = frozenset(
    {
        "abstract", "assert", "boolean", "break", "byte", "case", "catch",
        "char", "class", "const", "continue", "default", "do", "double",
        "else", "enum", "extends", "false", "final", "finally", "float",
        "for", "goto", "if", "implements", "import", "instanceof", "int",
        "interface", "long", "native", "new", "null", "package", "private",
        "protected", "public", "record", "return", "sealed", "short",
        "static", "strictfp", "super", "switch", "synchronized", "this",
        "throw", "throws", "transient", "true", "try", "var", "void",
        "volatile", "while", "yield",
    }
)

CPP_KEYWORDS = frozenset(
    {
        "alignas", "alignof", "auto", "bool", "break", "case", "catch",
        "char", "class", "const", "constexpr", "const_cast", "continue",
        "decltype", "default", "delete", "do", "double", "dynamic_cast",
        "else", "enum", "explicit", "extern", "false", "float", "for",
        "friend", "goto", "if", "inline", "int", "long", "mutable",
        "namespace", "new", "noexcept", "nullptr", "operator", "private",
        "protected", "public", "register", "reinterpret_cast", "return",
        "short", "signed", "sizeof", "static", "static_assert",
        "static_cast", "struct", "switch", "template", "this", "throw",
        "true", "try", "typedef", "typeid", "typename", "union",
        "unsigned", "using", "virtual", "void", "volatile", "while",
    }
)

CSHARP_KEYWORDS = frozenset(
    {
        "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
        "char", "checked", "class", "const", "continue", "decimal",
        "default", "delegate", "do", "double", "else", "enum", "event",
        "explicit", "extern", "false", "finally", "fixed", "float", "for",
        "foreach", "goto", "if", "implicit", "in", "int", "interface",
        "internal", "is", "lock", "long", "namespace", "new", "null",
        "object", "operator", "out", "override", "params", "private",
        "protected", "public", "readonly", "ref", "return", "sbyte",
        "sealed", "short", "sizeof", "stackalloc", "static", "string",
        "struct", "switch", "this", "throw", "true", "try", "typeof",
        "uint", "ulong", "unchecked", "unsafe", "ushort", "using",
        "virtual", "void", "volatile", "while",
    }
)

JAVASCRIPT_KEYWORDS = frozenset(
    {
        "async", "await", "break", "case", "catch", "class", "const",
        "continue", "debugger", "default", "delete", "do", "else",
        "export", "extends", "false", "finally", "for", "function", "if",
        "import", "in", "instanceof", "let", "new", "null", "of",
        "return", "static", "super", "switch", "this", "throw", "true",
        "try", "typeof", "undefined", "var", "void", "while", "with",
        "yield",
    }
)
# fmt: on

JAVA_SYNTAX = CFamilySyntax(
    keywords=JAVA_KEYWORDS, text_blocks=True, dollar_identifiers=True
)
CPP_SYNTAX = CFamilySyntax(keywords=CPP_KEYWORDS, preprocessor=True)
CSHARP_SYNTAX = CFamilySyntax(
    keywords=CSHARP_KEYWORDS, verbatim_strings=True, interpolated_strings=True
)
JAVASCRIPT_SYNTAX = CFamilySyntax(
    keywords=JAVASCRIPT_KEYWORDS,
    template_literals=True,
    dollar_identifiers=True,
    regex_literals=True,
)

# A slash after these starts a regular expression, not a division.
# fmt: off
_REGEX_PREFIX_KEYWORDS = frozenset(
    {
        "await", "case", "delete", "do", "else", "in", "instanceof", "new",
        "of", "return", "throw", "typeof", "void", "yield",
    }
)
_DIVISION_PREFIX_OPERATORS = frozenset({")", "]", "}", "++", "--"})

_OPERATORS = (
    ">>>=", "<<=", ">>=", ">>>", "===", "!==", "...", "**=", "??=",
    "->", "::", "++", "--", "&&", "||", "==", "!=", "<=", ">=", "+=",
    "-=", "*=", "/=", "%=", "&=", "|=", "^=", "<<", ">>", "=>", "??",
    "?.", "**",
    "{", "}", "(", ")", "[", "]", ";", ",", ".", "<", ">", "=", "!",
    "~", "?", ":", "+", "-", "*", "/", "&", "|", "^", "%", "@", "#",
    "\\",
)
# fmt: on

_WHITESPACE = re.compile(r"\s+")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)
_PREPROCESSOR = re.compile(r"#(?:[^\n\\]|\\.)*", re.DOTALL)
_TEXT_BLOCK = re.compile(r'"""(?:[^\\]|\\.)*?"""', re.DOTALL)
_VERBATIM_STRING = re.compile(r'@"(?:[^"]|"")*"')
_STRING = re.compile(r'"(?:[^"\\\n]|\\.)*"', re.DOTALL)
_CHAR = re.compile(r"'(?:[^'\\\n]|\\.)*'", re.DOTALL)
_TEMPLATE = re.compile(r"`(?:[^`\\]|\\.)*`", re.DOTALL)
_INTERPOLATED_PREFIXES = ('$"', '$@"', '@$"')
_INTERPOLATED_STRING = re.compile(
    r'\$"(?:[^"\\{\n]|\\.|\{\{|\{(?:[^{}"\n]|"(?:[^"\\\n]|\\.)*")*\})*"'
)
_INTERPOLATED_VERBATIM_STRING = re.compile(
    r'(?:\$@|@\$)"(?:[^"{]|""|\{\{|\{(?:[^{}"]|"(?:[^"\\]|\\.)*")*\})*"'
)
_REGEX = re.compile(r"/(?:[^/\\\[\n]|\\.|\[(?:[^\]\\\n]|\\.)*\])+/[A-Za-z]*")
_NUMBER = re.compile(
    r"0[xX][0-9a-fA-F_]+[lLuU]*"
    r"|0[bB][01_]+[lLuU]*"
    r"|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d[\d_]*)?[fFdDlLuUmMn]*"
)
_IDENTIFIER = re.compile(r"[^\W\d]\w*")
_DOLLAR_IDENTIFIER = re.compile(r"(?:[^\W\d]|\$)(?:\w|\$)*")
_OPERATOR = re.compile(
    "|".join(re.escape(op) for op in sorted(_OPERATORS, key=len, reverse=True))
)


class _Cursor:
    __slots__ = ("filepath", "line", "line_start", "pos", "text")

    def __init__(self, text: str, filepath: str) -> None:
        self.text = text
        self.filepath = filepath
        self.pos = 0
        self.line = 1
        self.line_start = 0

    @property
    def column(self) -> int:
        return self.pos - self.line_start + 1

    def at_line_start(self) -> bool:
        return not self.text[self.line_start : self.pos].strip()

    def advance(self, end: int) -> None:
        newlines = self.text.count("\n", self.pos, end)
        if newlines:
            self.line += newlines
            self.line_start = self.text.rfind("\n", self.pos, end) + 1
        self.pos = end

    def emit(self, kind: TokenKind, end: int) -> Token:
        image = self.text[self.pos : end]
        line, column = self.line, self.column
        self.advance(end)
        return Token(
            kind=kind,
            image=image,
            filepath=self.filepath,
            line=line,
            column=column,
            end_line=self.line,
            end_column=end - self.line_start,
        )

    def error(self, reason: str) -> LexicalError:
        return LexicalError(
            reason, filepath=self.filepath, line=self.line, column=self.column
        )


def _regex_allowed(previous: Token | None) -> bool:
    if previous is None:
        return True
    if previous.kind is TokenKind.OPERATOR:
        return previous.image not in _DIVISION_PREFIX_OPERATORS
    return (
        previous.kind is TokenKind.KEYWORD
        and previous.image in _REGEX_PREFIX_KEYWORDS
    )


def lex_c_family(text: str, filepath: str, *, syntax: CFamilySyntax) -> list[Token]:
    """
    Split C-like source text into tokens.

    Comments, whitespace and preprocessor lines are dropped. Raises
    LexicalError for unterminated comments or literals and for characters
    that do not start any token.
    """
    cursor = _Cursor(text, filepath)
    identifier = _DOLLAR_IDENTIFIER if syntax.dollar_identifiers else _IDENTIFIER
    tokens: list[Token] = []
    n = len(text)

    while cursor.pos < n:
        pos = cursor.pos
        ch = text[pos]

        m = _WHITESPACE.match(text, pos)
        if m:
            cursor.advance(m.end())
            continue

        if text.startswith("//", pos):
            end = text.find("\n", pos)
            cursor.advance(n if end < 0 else end)
            continue

        if text.startswith("/*", pos):
            m = _BLOCK_COMMENT.match(text, pos)
            if m is None:
                raise cursor.error("unterminated comment")
            cursor.advance(m.end())
            continue

        if ch == "#" and syntax.preprocessor and cursor.at_line_start():
            m = _PREPROCESSOR.match(text, pos)
            assert m is not None
            cursor.advance(m.end())
            continue

        if syntax.text_blocks and text.startswith('"""', pos):
            m = _TEXT_BLOCK.match(text, pos)
            if m is None:
                raise cursor.error("unterminated text block")
            tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
            continue

        if syntax.interpolated_strings and text.startswith(
            _INTERPOLATED_PREFIXES, pos
        ):
            pattern = (
                _INTERPOLATED_STRING
                if text[pos + 1] == '"'
                else _INTERPOLATED_VERBATIM_STRING
            )
            m = pattern.match(text, pos)
            if m is None:
                raise cursor.error("unterminated string literal")
            tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
            continue

        if syntax.verbatim_strings and text.startswith('@"', pos):
            m = _VERBATIM_STRING.match(text, pos)
            if m is None:
                raise cursor.error("unterminated string literal")
            tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
            continue

        if ch == '"':
            m = _STRING.match(text, pos)
            if m is None:
                raise cursor.error("unterminated string literal")
            tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
            continue

        if ch == "'":
            m = _CHAR.match(text, pos)
            if m is None:
                raise cursor.error("unterminated character literal")
            tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
            continue

        if (
            ch == "/"
            and syntax.regex_literals
            and _regex_allowed(tokens[-1] if tokens else None)
        ):
            m = _REGEX.match(text, pos)
            if m is None:
                raise cursor.error("unterminated regular expression")
            tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
            continue

        if ch == "`" and syntax.template_literals:
            m = _TEMPLATE.match(text, pos)
            if m is None:
                raise cursor.error("unterminated template literal")
            tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
            continue

        if ch.isdigit() or (ch == "." and text[pos + 1 : pos + 2].isdigit()):
            m = _NUMBER.match(text, pos)
            if m:
                tokens.append(cursor.emit(TokenKind.LITERAL, m.end()))
                continue

        m = identifier.match(text, pos)
        if m:
            word = m.group()
            kind = (
                TokenKind.KEYWORD if word in syntax.keywords else TokenKind.IDENTIFIER
            )
            tokens.append(cursor.emit(kind, m.end()))
            continue

        m = _OPERATOR.match(text, pos)
        if m:
            tokens.append(cursor.emit(TokenKind.OPERATOR, m.end()))
            continue

        raise cursor.error(f"unexpected character {ch!r}")

    return tokens


# =========================
# Python
# =========================

_PYTHON_LITERAL_TOKENS = frozenset(
    {
        "NUMBER",
        "STRING",
        "FSTRING_START",
        "FSTRING_MIDDLE",
        "FSTRING_END",
        "TSTRING_START",
        "TSTRING_MIDDLE",
        "TSTRING_END",
    }
)


def lex_python(text: str, filepath: str) -> list[Token]:
    tokens: list[Token] = []
    readline = io.StringIO(text).readline
    try:
        for tok in tokenize.generate_tokens(readline):
            name = tokenize.tok_name[tok.type]
            if name == "NAME":
                kind = (
                    TokenKind.KEYWORD
                    if keyword.iskeyword(tok.string)
                    else TokenKind.IDENTIFIER
                )
            elif name in _PYTHON_LITERAL_TOKENS:
                kind = TokenKind.LITERAL
            elif name == "OP":
                kind = TokenKind.OPERATOR
            elif name == "ERRORTOKEN" and tok.string.strip():
                raise LexicalError(
                    f"unexpected character {tok.string!r}",
                    filepath=filepath,
                    line=tok.start[0],
                    column=tok.start[1] + 1,
                )
            else:
                continue
            tokens.append(
                Token(
                    kind=kind,
                    image=tok.string,
                    filepath=filepath,
                    line=tok.start[0],
                    column=tok.start[1] + 1,
                    end_line=tok.end[0],
                    end_column=tok.end[1],
                )
            )
    except tokenize.TokenError as e:
        line, column = _token_error_position(e, text)
        raise LexicalError(
            str(e.args[0]), filepath=filepath, line=line, column=column
        ) from e
    except SyntaxError as e:
        raise LexicalError(
            e.msg,
            filepath=filepath,
            line=e.lineno or 1,
            column=e.offset or 1,
        ) from e
    return tokens


def _token_error_position(error: tokenize.TokenError, text: str) -> tuple[int, int]:
    if len(error.args) > 1 and isinstance(error.args[1], tuple):
        line, column = error.args[1]
        return int(line), int(column) + 1
    return text.count("\n") + 1, 1


# =========================
# Any text
# =========================

_ANY_TOKEN = re.compile(r"\w+|[^\w\s]")


def lex_any(text: str, filepath: str) -> list[Token]:
    """Word/punctuation tokenizer used when no grammar is available."""
    cursor = _Cursor(text, filepath)
    tokens: list[Token] = []
    for m in _ANY_TOKEN.finditer(text):
        cursor.advance(m.start())
        word = m.group()
        if word[0].isdigit():
            kind = TokenKind.LITERAL
        elif word[0].isalnum() or word[0] == "_":
            kind = TokenKind.IDENTIFIER
        else:
            kind = TokenKind.OPERATOR
        tokens.append(cursor.emit(kind, m.end()))
    return tokens
