"""Path containment: every store path passes through ``contain_in``."""

from __future__ import annotations

import os
from pathlib import Path

from nodegraph.errors import PathEscapeError


def _normalize(path: str) -> str:
    # normcase lowercases on Windows and is a no-op on POSIX
    return os.path.normcase(os.path.abspath(path))


def is_path_inside(base_dir: Path | str, target: Path | str) -> bool:
    """True when target is base_dir itself or lies underneath it."""
    base = _normalize(os.fspath(base_dir))
    resolved = _normalize(os.fspath(target))
    if resolved == base:
        return True
    prefix = base if base.endswith(os.sep) else base + os.sep
    return resolved.startswith(prefix)


def contain_in(base_dir: Path | str, candidate: Path | str) -> Path:
    """Resolve candidate against base_dir, refusing anything outside it.

    The result is absolute and normalized; symlinks are not followed.
    Raises PathEscapeError without touching the filesystem.
    """
    base = os.path.abspath(os.fspath(base_dir))
    resolved = os.path.abspath(os.path.join(base, os.fspath(candidate)))
    if not is_path_inside(base, resolved):
        raise PathEscapeError(os.fspath(candidate))
    return Path(resolved)


def relative_posix(base_dir: Path | str, path: Path | str) -> str:
    """Render path relative to base_dir with forward slashes."""
    rel = os.path.relpath(os.fspath(path), os.path.abspath(os.fspath(base_dir)))
    return Path(rel).as_posix()
