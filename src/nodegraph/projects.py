"""Projects: a manifest.json plus the graph and struct files it references.

Layout (relative to the projects root):

    <project>/
        manifest.json          # {"project": {...}, "graphs": [...], "structures": [...]}
        graphs/main.json       # any path the manifest declares, inside <project>/
        structs/vec.json

ProjectStore composes such a directory into one document on read:

    {"manifest": {...}, "graphs": {<graphId>: {...}}, "structs": {<structId>: {...}}}

and decomposes it back into files on write. A manifest entry with no payload
is a warning on write, not a failure; a schema violation anywhere in the
document stops the write before any file is touched.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from nodegraph.errors import AlreadyExistsError, UsageError
from nodegraph.graphs import WriteResult, read_json, write_json
from nodegraph.sandbox import contain_in, relative_posix
from nodegraph.schema import Validation, validate_project

logger = logging.getLogger("nodegraph.projects")

MANIFEST_NAME = "manifest.json"


def _entries(
    manifest: Any, list_key: str, id_key: str, skipped: list[str] | None = None
) -> list[tuple[str, str]]:
    """(id, path) pairs for manifest[list_key].

    Entries without an id or a path are left out; when ``skipped`` is given
    each one is reported there by its dotted location.
    """
    if not isinstance(manifest, dict):
        return []
    raw = manifest.get(list_key)
    if not isinstance(raw, list):
        return []
    pairs = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            entry = {}
        entry_id, entry_path = entry.get(id_key), entry.get("path")
        if not entry_id or not entry_path:
            if skipped is not None:
                skipped.append(f"Skipped manifest.{list_key}.{index}: {id_key} and path are required")
            continue
        pairs.append((str(entry_id), str(entry_path)))
    return pairs


class ProjectStore:
    """Directory-per-project store rooted at projects_dir."""

    def __init__(self, projects_dir: Path | str) -> None:
        self.projects_dir = Path(os.path.abspath(projects_dir))

    def resolve(self, path: str) -> Path:
        return contain_in(self.projects_dir, path)

    def rel(self, path: Path) -> str:
        return relative_posix(self.projects_dir, path)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read(self, path: str) -> dict[str, Any]:
        """Compose manifest + referenced files into one project document.

        Files are read verbatim (no validation). ``structs`` is present only
        when at least one struct file was loaded.
        """
        project_root = self.resolve(path)
        manifest = read_json(contain_in(project_root, MANIFEST_NAME))

        graphs: dict[str, Any] = {}
        for graph_id, graph_path in _entries(manifest, "graphs", "graphId"):
            graphs[graph_id] = read_json(contain_in(project_root, graph_path))

        structs: dict[str, Any] = {}
        for struct_id, struct_path in _entries(manifest, "structures", "structId"):
            structs[struct_id] = read_json(contain_in(project_root, struct_path))

        document: dict[str, Any] = {"manifest": manifest, "graphs": graphs}
        if structs:
            document["structs"] = structs
        return document

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write(
        self,
        path: str,
        document: Any,
        *,
        overwrite: bool = False,
        pretty: bool = True,
    ) -> WriteResult:
        """Validate, then write manifest.json and every referenced payload.

        All target paths are resolved before the first write, so an entry that
        escapes the project directory aborts the whole operation.
        Manifest entries missing an id or a path are skipped with a warning.
        """
        project_root = self.resolve(path)
        result = validate_project(document)
        if not result.ok:
            return WriteResult(ok=False, issues=result.issues)
        normalized = result.value or {}
        manifest = normalized["manifest"]
        manifest_path = contain_in(project_root, MANIFEST_NAME)

        if not overwrite and project_root.is_dir() and manifest_path.exists():
            msg = f"Project already exists: {path}"
            raise AlreadyExistsError(msg)

        warnings: list[str] = []
        planned: list[tuple[Path, Any]] = []

        graphs = normalized.get("graphs", {})
        for graph_id, graph_path in _entries(manifest, "graphs", "graphId", warnings):
            target = contain_in(project_root, graph_path)
            if graph_id not in graphs:
                warnings.append(f"Missing graph data for graphId: {graph_id}")
                continue
            planned.append((target, graphs[graph_id]))

        structs = normalized.get("structs") or {}
        for struct_id, struct_path in _entries(manifest, "structures", "structId", warnings):
            target = contain_in(project_root, struct_path)
            if struct_id not in structs or structs[struct_id] is None:
                warnings.append(f"Missing struct data for structId: {struct_id}")
                continue
            planned.append((target, structs[struct_id]))

        project_root.mkdir(parents=True, exist_ok=True)
        write_json(manifest_path, manifest, pretty=pretty, exclusive=not overwrite)
        for target, payload in planned:
            write_json(target, payload, pretty=pretty)

        rel = self.rel(project_root)
        logger.info("project written: %s (%d files, %d warnings)", rel, len(planned) + 1, len(warnings))
        return WriteResult(ok=True, path=rel, warnings=warnings)

    def validate(self, path: str | None = None, document: Any = None) -> Validation:
        """Validate a stored project (by path) or an inline document; exactly one."""
        if (path is None) == (document is None):
            msg = "validate_project requires either path or document."
            raise UsageError(msg)
        if path is not None:
            document = self.read(path)
        return validate_project(document)
