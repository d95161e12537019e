"""Graph documents stored as JSON files under a graphs root.

GraphStore is the public API:
    store = GraphStore("/path/to/graphs")
    listing = store.list(environment="server")
    graph = store.read("combat/on-hit.json")
    result = store.write("combat/on-hit.json", graph, overwrite=True)

Every path argument is resolved through ``contain_in``; nothing outside the
root is read or written. The JSON helpers here are shared with ProjectStore.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from nodegraph.errors import AlreadyExistsError, NotFoundError, UsageError
from nodegraph.sandbox import contain_in, relative_posix
from nodegraph.schema import Issue, Validation, validate_graph

logger = logging.getLogger("nodegraph.graphs")

GRAPH_SUFFIX = ".json"


# ---------------------------------------------------------------------------
# JSON file primitives
# ---------------------------------------------------------------------------


def read_json(path: Path) -> Any:
    """Parse a JSON file. A missing file raises NotFoundError."""
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as exc:
        msg = f"Not found: {path}"
        raise NotFoundError(msg) from exc


def dump_json(data: Any, *, pretty: bool = True) -> str:
    if pretty:
        return json.dumps(data, indent=2, ensure_ascii=False)
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def write_json(path: Path, data: Any, *, pretty: bool = True, exclusive: bool = False) -> None:
    """Write data as JSON, creating parent directories.

    With exclusive=True the file is created with O_EXCL semantics: an existing
    file raises AlreadyExistsError and keeps its bytes.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    text = dump_json(data, pretty=pretty)
    try:
        with path.open("x" if exclusive else "w", encoding="utf-8") as f:
            f.write(text)
    except FileExistsError as exc:
        msg = f"Already exists: {path}"
        raise AlreadyExistsError(msg) from exc


def collect_files(dir_path: Path, *, recursive: bool, suffix: str) -> list[Path]:
    """Files under dir_path whose name ends with suffix (case-insensitive).

    A missing directory yields an empty list. Symlinks are never followed,
    so a link cannot pull in files from outside dir_path or loop back on it.
    """
    results: list[Path] = []
    try:
        entries = sorted(os.scandir(dir_path), key=lambda e: e.name)
    except FileNotFoundError:
        return []
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if recursive:
                results.extend(collect_files(Path(entry.path), recursive=True, suffix=suffix))
            continue
        if entry.is_file(follow_symlinks=False) and entry.name.lower().endswith(suffix):
            results.append(Path(entry.path))
    return results


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class GraphListing:
    base_dir: Path
    entries: list[dict[str, Any]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {"baseDir": str(self.base_dir), "count": self.count, "graphs": self.entries}


@dataclass
class WriteResult:
    """Outcome of a graph or project write."""

    ok: bool
    path: str | None = None
    issues: list[Issue] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        if not self.ok:
            return {"ok": False, "errors": [i.to_dict() for i in self.issues]}
        d: dict[str, Any] = {"ok": True, "path": self.path}
        if self.warnings:
            d["warnings"] = self.warnings
        return d


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class GraphStore:
    """JSON-file-backed graph store rooted at graphs_dir."""

    def __init__(self, graphs_dir: Path | str) -> None:
        self.graphs_dir = Path(os.path.abspath(graphs_dir))

    def resolve(self, path: str) -> Path:
        return contain_in(self.graphs_dir, path)

    def rel(self, path: Path) -> str:
        return relative_posix(self.graphs_dir, path)

    def list(
        self,
        dir: str | None = None,
        *,
        recursive: bool = True,
        include_details: bool = True,
        environment: str | None = None,
    ) -> GraphListing:
        """List graph files, optionally parsing each for metadata.

        One unreadable or invalid file becomes an ``error`` entry; it never
        aborts the listing. With an environment filter, details are always
        loaded and non-matching graphs are left out.
        """
        base = self.resolve(dir) if dir else self.graphs_dir
        include_details = include_details or bool(environment)
        listing = GraphListing(base_dir=self.graphs_dir)

        for file_path in collect_files(base, recursive=recursive, suffix=GRAPH_SUFFIX):
            rel = self.rel(file_path)
            if not include_details:
                listing.entries.append({"path": rel})
                continue
            try:
                raw = read_json(file_path)
            except (OSError, ValueError) as exc:
                logger.warning("unreadable graph %s: %s", rel, exc)
                listing.entries.append({"path": rel, "error": str(exc)})
                continue
            result = validate_graph(raw)
            if not result.ok:
                listing.entries.append({"path": rel, "error": [i.to_dict() for i in result.issues]})
                continue
            graph = result.value or {}
            if environment and graph.get("environment") != environment:
                continue
            listing.entries.append({
                "path": rel,
                "name": graph["name"],
                "environment": graph.get("environment"),
                "schemaVersion": graph["schemaVersion"],
                "nodeCount": len(graph["nodes"]),
                "edgeCount": len(graph["edges"]),
            })
        return listing

    def read(self, path: str) -> Any:
        """Return the parsed file as-is; no validation."""
        return read_json(self.resolve(path))

    def write(
        self,
        path: str,
        graph: Any,
        *,
        overwrite: bool = False,
        pretty: bool = True,
    ) -> WriteResult:
        """Validate then write the normalized graph.

        Invalid graphs are returned as issues with nothing written. Without
        overwrite an existing file raises AlreadyExistsError.
        """
        target = self.resolve(path)
        result = validate_graph(graph)
        if not result.ok:
            return WriteResult(ok=False, issues=result.issues)
        write_json(target, result.value, pretty=pretty, exclusive=not overwrite)
        rel = self.rel(target)
        logger.info("graph written: %s", rel)
        return WriteResult(ok=True, path=rel)

    def validate(self, path: str | None = None, graph: Any = None) -> Validation:
        """Validate a stored graph (by path) or an inline one; exactly one."""
        if (path is None) == (graph is None):
            msg = "validate_graph requires either path or graph."
            raise UsageError(msg)
        if path is not None:
            graph = self.read(path)
        return validate_graph(graph)
