from cpdscan.lexers import CSHARP_SYNTAX, JAVA_SYNTAX, lex_c_family, lex_python
from cpdscan.normalize import (
    ANNOTATION_PLACEHOLDER,
    IDENTIFIER_PLACEHOLDER,
    LITERAL_PLACEHOLDER,
    AnnotationStyle,
    NormalizationConfig,
    annotation_spans,
    normalize_tokens,
)
from cpdscan.tokens import TokenKind


def _java(text: str) -> list:
    return lex_c_family(text, "A.java", syntax=JAVA_SYNTAX)


def test_default_config_keeps_tokens() -> None:
    tokens = _java("int a = 1;")
    assert normalize_tokens(tokens, NormalizationConfig()) == tokens


def test_ignore_identifiers_and_literals() -> None:
    tokens = _java('String name = "x"; int n = 42;')
    cfg = NormalizationConfig(ignore_identifiers=True, ignore_literals=True)
    images = [t.image for t in normalize_tokens(tokens, cfg)]
    assert images == [
        IDENTIFIER_PLACEHOLDER,
        IDENTIFIER_PLACEHOLDER,
        "=",
        LITERAL_PLACEHOLDER,
        ";",
        "int",
        IDENTIFIER_PLACEHOLDER,
        "=",
        LITERAL_PLACEHOLDER,
        ";",
    ]


def test_normalization_keeps_positions() -> None:
    tokens = _java("int a;\nint bb;")
    cfg = NormalizationConfig(ignore_identifiers=True)
    normalized = normalize_tokens(tokens, cfg)
    assert [(t.line, t.column) for t in normalized] == [
        (t.line, t.column) for t in tokens
    ]


def test_java_annotations_collapse_into_one_token() -> None:
    tokens = _java(
        '@Override\n@SuppressWarnings({"a", "b"})\n@java.lang.Deprecated\n'
        "public void run() {}\n"
    )
    cfg = NormalizationConfig(ignore_annotations=True)
    normalized = normalize_tokens(tokens, cfg, annotations=AnnotationStyle.PREFIX)
    assert [t.image for t in normalized[:4]] == [
        ANNOTATION_PLACEHOLDER,
        ANNOTATION_PLACEHOLDER,
        ANNOTATION_PLACEHOLDER,
        "public",
    ]
    second = normalized[1]
    assert second.kind is TokenKind.ANNOTATION
    assert (second.line, second.end_line) == (2, 2)


def test_annotations_kept_unless_ignored() -> None:
    tokens = _java("@Override void f() {}")
    normalized = normalize_tokens(
        tokens, NormalizationConfig(), annotations=AnnotationStyle.PREFIX
    )
    assert normalized[0].image == "@"


def test_annotation_spans_unbalanced_arguments_run_to_end() -> None:
    tokens = _java("@Foo(1, 2 int x;")
    assert annotation_spans(tokens, AnnotationStyle.PREFIX) == [(0, len(tokens))]


def test_python_decorators_only_at_line_start() -> None:
    tokens = lex_python("@cache\ndef f(a, b):\n    return a @ b\n", "m.py")
    spans = annotation_spans(tokens, AnnotationStyle.LINE_START)
    assert spans == [(0, 2)]

    cfg = NormalizationConfig(ignore_annotations=True)
    normalized = normalize_tokens(tokens, cfg, annotations=AnnotationStyle.LINE_START)
    images = [t.image for t in normalized]
    assert images[0] == ANNOTATION_PLACEHOLDER
    assert images[1] == "def"
    assert "@" in images


def test_no_annotation_style_means_no_spans() -> None:
    tokens = _java("@Override void f() {}")
    assert annotation_spans(tokens, AnnotationStyle.NONE) == []


def test_csharp_attribute_sections_collapse_into_one_token() -> None:
    text = (
        "[Serializable]\n"
        '[Obsolete("old", false), DebuggerStepThrough]\n'
        "[return: NotNull]\n"
        "public int Get(int[] xs) { return xs[0]; }\n"
    )
    tokens = lex_c_family(text, "A.cs", syntax=CSHARP_SYNTAX)

    assert annotation_spans(tokens, AnnotationStyle.BRACKET) == [
        (0, 3),
        (3, 13),
        (13, 18),
    ]

    cfg = NormalizationConfig(ignore_annotations=True)
    normalized = normalize_tokens(tokens, cfg, annotations=AnnotationStyle.BRACKET)
    images = [t.image for t in normalized]
    assert images[:4] == [ANNOTATION_PLACEHOLDER] * 3 + ["public"]
    assert images.count("[") == 2
    assert (normalized[1].line, normalized[1].end_line) == (2, 2)
