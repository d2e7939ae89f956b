from __future__ import annotations

import os
from pathlib import Path

import pytest

import cpdscan.scanner as scanner
from cpdscan.errors import ValidationError
from cpdscan.languages import get_language
from cpdscan.scanner import collect_source_files, iter_source_files

JAVA = get_language("java")


def _touch(path: Path, text: str = "class A {}\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, "utf-8")
    return path


def test_iter_source_files_filters_by_language(tmp_path: Path) -> None:
    a = _touch(tmp_path / "src" / "A.java")
    b = _touch(tmp_path / "B.java")
    _touch(tmp_path / "notes.txt")
    _touch(tmp_path / "tool.py")

    files = list(iter_source_files(str(tmp_path), JAVA))

    assert files == sorted([str(a.resolve()), str(b.resolve())])


def test_iter_source_files_default_excludes(tmp_path: Path) -> None:
    kept = _touch(tmp_path / "src" / "A.java")
    _touch(tmp_path / "build" / "Gen.java")
    _touch(tmp_path / "node_modules" / "lib" / "X.java")
    _touch(tmp_path / ".git" / "Y.java")

    assert list(iter_source_files(str(tmp_path), JAVA)) == [str(kept.resolve())]


def test_iter_source_files_custom_excludes(tmp_path: Path) -> None:
    _touch(tmp_path / "generated" / "A.java")
    kept = _touch(tmp_path / "main" / "B.java")
    files = iter_source_files(str(tmp_path), JAVA, excludes=("generated",))
    assert list(files) == [str(kept.resolve())]


def test_iter_source_files_max_files(tmp_path: Path) -> None:
    for i in range(3):
        _touch(tmp_path / f"F{i}.java")
    with pytest.raises(ValidationError, match="File count exceeds limit"):
        list(iter_source_files(str(tmp_path), JAVA, max_files=2))


def test_iter_source_files_requires_directory(tmp_path: Path) -> None:
    f = _touch(tmp_path / "A.java")
    with pytest.raises(ValidationError, match="must be a directory"):
        list(iter_source_files(str(f), JAVA))
    with pytest.raises(ValidationError, match="Invalid root path"):
        list(iter_source_files(str(tmp_path / "missing"), JAVA))


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
def test_iter_source_files_ignores_symlinks_outside_root(tmp_path: Path) -> None:
    outside = _touch(tmp_path / "outside" / "Out.java")
    root = tmp_path / "root"
    inside = _touch(root / "In.java")
    try:
        (root / "Link.java").symlink_to(outside)
    except OSError:
        pytest.skip("cannot create symlink")

    assert list(iter_source_files(str(root), JAVA)) == [str(inside.resolve())]


def test_collect_source_files_mixes_files_and_directories(tmp_path: Path) -> None:
    a = _touch(tmp_path / "dir" / "A.java")
    b = _touch(tmp_path / "dir" / "sub" / "B.java")
    explicit = _touch(tmp_path / "script.txt")

    files = collect_source_files(
        [str(tmp_path / "dir"), str(explicit), str(a)], JAVA
    )

    assert files == sorted(
        [str(a.resolve()), str(b.resolve()), str(explicit.resolve())]
    )


def test_collect_source_files_missing_path(tmp_path: Path) -> None:
    with pytest.raises(ValidationError, match="Invalid source path"):
        collect_source_files([str(tmp_path / "missing")], JAVA)


def test_collect_source_files_empty_directory(tmp_path: Path) -> None:
    assert collect_source_files([str(tmp_path)], JAVA) == []


def test_sensitive_root_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    if not Path("/etc").is_dir():
        pytest.skip("no /etc on this platform")
    monkeypatch.setattr(scanner, "_get_tempdir", lambda: Path("/nonexistent-tmp"))
    with pytest.raises(ValidationError, match="sensitive directory"):
        list(iter_source_files("/etc", JAVA))


def test_sensitive_subdirectory_rejected() -> None:
    with pytest.raises(ValidationError, match="under sensitive directory"):
        scanner._check_not_sensitive(Path("/proc/self"), "/proc/self")


def test_temp_directory_is_allowed(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(scanner, "_get_tempdir", lambda: Path("/var/tmp"))
    scanner._check_not_sensitive(Path("/var/tmp/project"), "/var/tmp/project")
