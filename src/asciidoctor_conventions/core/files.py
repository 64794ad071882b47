"""File tree copy helpers shared by sync tasks and the asset copy hook."""

from __future__ import annotations

import fnmatch
import shutil
import zipfile
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Iterator, MutableSet, Optional, Sequence

from asciidoctor_conventions.errors import StagingError

__all__ = [
    "DuplicatesStrategy",
    "clear_directory",
    "copy_directory",
    "extract_archive",
    "iter_relative_files",
    "matches_patterns",
]


class DuplicatesStrategy(Enum):
    """What to do when a copy pass writes the same relative path twice."""

    INCLUDE = "include"
    EXCLUDE = "exclude"
    FAIL = "fail"


def matches_patterns(relative: str, patterns: Sequence[str]) -> bool:
    """Return ``True`` if ``relative`` matches any Ant-style pattern.

    ``dir/**`` matches everything below ``dir``; other patterns use
    :mod:`fnmatch` against the POSIX form of the path. An empty pattern list
    matches everything.
    """

    if not patterns:
        return True
    for pattern in patterns:
        if pattern.endswith("/**"):
            prefix = pattern[: -len("/**")]
            if relative == prefix or relative.startswith(prefix + "/"):
                return True
            continue
        if fnmatch.fnmatchcase(relative, pattern):
            return True
    return False


def iter_relative_files(root: Path) -> Iterator[tuple[str, Path]]:
    """Yield ``(posix relative path, absolute path)`` for files under ``root``."""

    for candidate in sorted(root.rglob("*")):
        if candidate.is_file():
            yield candidate.relative_to(root).as_posix(), candidate


def clear_directory(path: Path) -> None:
    """Remove ``path`` and everything below it, then recreate it empty."""

    try:
        if path.exists():
            shutil.rmtree(path)
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StagingError(f"Unable to clear directory {path}: {exc}") from exc


def copy_directory(
    source: Path,
    destination: Path,
    *,
    into: str = "",
    includes: Sequence[str] = (),
    duplicates: DuplicatesStrategy = DuplicatesStrategy.INCLUDE,
    claimed: Optional[MutableSet[str]] = None,
) -> list[Path]:
    """Copy files below ``source`` into ``destination/into``.

    ``claimed`` tracks destination-relative paths already written during the
    current copy pass; ``duplicates`` decides what happens on a repeat.
    """

    if not source.is_dir():
        raise StagingError(f"Source directory not found: {source}")
    claimed = set() if claimed is None else claimed
    written: list[Path] = []
    for relative, path in iter_relative_files(source):
        if not matches_patterns(relative, includes):
            continue
        target_relative = _join(into, relative)
        if not _claim(target_relative, claimed, duplicates):
            continue
        target = destination / target_relative
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(path, target)
        except OSError as exc:
            raise StagingError(
                f"Failed to copy {path} to {target}: {exc}"
            ) from exc
        written.append(target)
    return written


def extract_archive(
    archive: Path,
    destination: Path,
    *,
    into: str = "",
    duplicates: DuplicatesStrategy = DuplicatesStrategy.INCLUDE,
    claimed: Optional[MutableSet[str]] = None,
) -> list[Path]:
    """Extract the zip ``archive`` below ``destination/into``."""

    claimed = set() if claimed is None else claimed
    root = destination.resolve()
    written: list[Path] = []
    try:
        with zipfile.ZipFile(archive) as bundle:
            for info in bundle.infolist():
                if info.is_dir():
                    continue
                target_relative = _join(into, info.filename)
                target = (destination / target_relative).resolve()
                if not target.is_relative_to(root):
                    raise StagingError(
                        f"Archive entry escapes destination: {info.filename}"
                    )
                if not _claim(target_relative, claimed, duplicates):
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                with bundle.open(info) as src, target.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
                written.append(target)
    except (OSError, zipfile.BadZipFile) as exc:
        raise StagingError(f"Failed to extract {archive}: {exc}") from exc
    return written


def _claim(
    relative: str, claimed: MutableSet[str], duplicates: DuplicatesStrategy
) -> bool:
    if relative not in claimed:
        claimed.add(relative)
        return True
    if duplicates is DuplicatesStrategy.EXCLUDE:
        return False
    if duplicates is DuplicatesStrategy.FAIL:
        raise StagingError(f"Duplicate path in copy: {relative}")
    return True


def _join(into: str, relative: str) -> str:
    if not into:
        return PurePosixPath(relative).as_posix()
    return (PurePosixPath(into) / relative).as_posix()
