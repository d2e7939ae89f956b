"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from .errors import UnsupportedLanguageError
from .lexers import (
    CPP_SYNTAX,
    CSHARP_SYNTAX,
    JAVA_SYNTAX,
    JAVASCRIPT_SYNTAX,
    lex_any,
    lex_c_family,
    lex_python,
)
from .normalize import AnnotationStyle
from .tokens import Token

Lexer = Callable[[str, str], list[Token]]


@dataclass(frozen=True, slots=True)
class Language:
    name: str
    label: str
    extensions: tuple[str, ...]
    lex: Lexer
    annotations: AnnotationStyle = AnnotationStyle.NONE

    def accepts(self, path: str | Path) -> bool:
        if not self.extensions:
            return True
        return Path(path).suffix.lower() in self.extensions


_LANGUAGES: dict[str, Language] = {
    lang.name: lang
    for lang in (
        Language(
            name="java",
            label="Java",
            extensions=(".java",),
            lex=partial(lex_c_family, syntax=JAVA_SYNTAX),
            annotations=AnnotationStyle.PREFIX,
        ),
        Language(
            name="cpp",
            label="C/C++",
            extensions=(".c", ".cc", ".cpp", ".cxx", ".h", ".hh", ".hpp", ".hxx"),
            lex=partial(lex_c_family, syntax=CPP_SYNTAX),
        ),
        Language(
            name="csharp",
            label="C#",
            extensions=(".cs",),
            lex=partial(lex_c_family, syntax=CSHARP_SYNTAX),
            annotations=AnnotationStyle.BRACKET,
        ),
        Language(
            name="javascript",
            label="JavaScript",
            extensions=(".js", ".mjs", ".cjs"),
            lex=partial(lex_c_family, syntax=JAVASCRIPT_SYNTAX),
            annotations=AnnotationStyle.PREFIX,
        ),
        Language(
            name="python",
            label="Python",
            extensions=(".py",),
            lex=lex_python,
            annotations=AnnotationStyle.LINE_START,
        ),
        Language(
            name="any",
            label="Any text",
            extensions=(),
            lex=lex_any,
        ),
    )
}

_ALIASES = {
    "c": "cpp",
    "c++": "cpp",
    "cs": "csharp",
    "js": "javascript",
    "ecmascript": "javascript",
    "py": "python",
    "text": "any",
}


def supported_languages() -> tuple[str, ...]:
    return tuple(sorted(_LANGUAGES))


def get_language(name: str) -> Language:
    key = name.strip().lower()
    key = _ALIASES.get(key, key)
    try:
        return _LANGUAGES[key]
    except KeyError:
        raise UnsupportedLanguageError(name, supported=supported_languages()) from None
