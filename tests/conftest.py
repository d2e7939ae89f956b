from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from cpdscan.config import CpdConfiguration
from cpdscan.runner import SourceFile
from cpdscan.tokenizer import tokenize_text
from cpdscan.tokens import TokenStream

JavaBlock = Callable[..., str]
StreamFactory = Callable[..., TokenStream]
SourceFactory = Callable[..., SourceFile]
FileWriter = Callable[..., Path]


def java_block(prefix: str, count: int, *, start: int = 0) -> str:
    """``count`` statements of exactly 5 tokens each, one per line."""
    return "".join(f"int {prefix}{i} = {i};\n" for i in range(start, start + count))


@pytest.fixture(autouse=True)
def _reset_package_logger() -> Iterator[None]:
    package_logger = logging.getLogger("cpdscan")
    yield
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def block() -> JavaBlock:
    return java_block


@pytest.fixture
def make_stream() -> StreamFactory:
    def _make(path: str, text: str, **options: object) -> TokenStream:
        config = CpdConfiguration(**options)  # type: ignore[arg-type]
        return tokenize_text(text, filepath=path, config=config)

    return _make


@pytest.fixture
def make_source() -> SourceFactory:
    def _make(path: str, text: str, encoding: str = "utf-8") -> SourceFile:
        return SourceFile(path=path, content=text.encode(encoding), encoding=encoding)

    return _make


@pytest.fixture
def write_file(tmp_path: Path) -> FileWriter:
    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, "utf-8")
        return path

    return _write
