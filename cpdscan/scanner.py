"""
CPDScan — token-based copy/paste detector with CSV, XML, text
and Visual Studio reports.

Copyright (c) 2026 Den Rozhnovskiy
Licensed under the MIT License.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

from .errors import ValidationError
from .languages import Language

DEFAULT_EXCLUDES = (
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "venv",
    "__pycache__",
    "node_modules",
    "site-packages",
    "dist",
    "build",
    "target",
    ".tox",
)

SENSITIVE_DIRS = {
    "/etc",
    "/sys",
    "/proc",
    "/dev",
    "/root",
    "/boot",
    "/var",
    "/private/var",
    "/usr/bin",
    "/usr/sbin",
    "/private/etc",
}


def _get_tempdir() -> Path:
    return Path(tempfile.gettempdir()).resolve()


def _check_not_sensitive(resolved: Path, original: str) -> None:
    try:
        resolved.relative_to(_get_tempdir())
        return
    except ValueError:
        pass

    path_str = str(resolved)
    if path_str in SENSITIVE_DIRS:
        raise ValidationError(f"Cannot scan sensitive directory: {original}")
    for sensitive in SENSITIVE_DIRS:
        if path_str.startswith(sensitive + "/"):
            raise ValidationError(f"Cannot scan under sensitive directory: {original}")


def iter_source_files(
    root: str,
    language: Language,
    excludes: tuple[str, ...] = DEFAULT_EXCLUDES,
    *,
    max_files: int = 100_000,
) -> Iterable[str]:
    """Yield files under ``root`` the language accepts, in sorted order."""
    try:
        rootp = Path(root).resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise ValidationError(f"Invalid root path '{root}': {e}") from e

    if not rootp.is_dir():
        raise ValidationError(f"Root must be a directory: {root}")
    _check_not_sensitive(rootp, root)

    file_count = 0
    for p in sorted(rootp.rglob("*")):
        if not p.is_file() or not language.accepts(p):
            continue
        # Symlinks must not lead outside the root.
        try:
            p.resolve().relative_to(rootp)
        except ValueError:
            continue

        if any(ex in p.relative_to(rootp).parts for ex in excludes):
            continue

        file_count += 1
        if file_count > max_files:
            raise ValidationError(
                f"File count exceeds limit of {max_files}. "
                "Use more specific root or increase limit."
            )
        yield str(p)


def collect_source_files(
    paths: Sequence[str],
    language: Language,
    *,
    max_files: int = 100_000,
) -> list[str]:
    """
    Expand files and directories into a sorted, de-duplicated file list.

    Explicitly named files are taken as-is, whatever their extension.
    """
    found: set[str] = set()
    for raw in paths:
        try:
            resolved = Path(raw).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise ValidationError(f"Invalid source path '{raw}': {e}") from e
        if resolved.is_file():
            _check_not_sensitive(resolved, raw)
            found.add(str(resolved))
            continue
        found.update(iter_source_files(str(resolved), language, max_files=max_files))
    return sorted(found)
