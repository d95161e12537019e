"""Node type catalog: a JSON array of node definitions, loaded once per path.

The cache holds a single (path, definitions) pair and is replaced wholesale,
so pointing NODEGRAPH_NODE_DEFS_PATH somewhere else simply causes a reload.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from nodegraph.errors import MalformedCatalogError
from nodegraph.graphs import read_json

logger = logging.getLogger("nodegraph.catalog")

NODE_DEFS_ENV = "NODEGRAPH_NODE_DEFS_PATH"
SAMPLE_FILENAME = "nodeDefinitions.sample.json"

_PROJECTED_FIELDS = ("id", "displayName", "displayNameEN", "officialID", "category", "kind", "ports")

# Single slot: [(resolved path, definitions)] or [None]
_cache: list[tuple[Path, list[Any]] | None] = [None]


def resolve_definitions_path(default: Path | str) -> Path:
    """The environment variable wins over the configured default."""
    override = os.environ.get(NODE_DEFS_ENV)
    return Path(os.path.abspath(override or default))


def load_node_definitions(path: Path | str) -> list[Any]:
    """Load (or return the cached) definitions array at path."""
    resolved = Path(os.path.abspath(path))
    cached = _cache[0]
    if cached is not None and cached[0] == resolved:
        return cached[1]

    data = read_json(resolved)
    if not isinstance(data, list):
        msg = f"Node definitions file must contain a JSON array: {resolved}"
        raise MalformedCatalogError(msg)
    _cache[0] = (resolved, data)
    logger.info("loaded %d node definitions from %s", len(data), resolved)
    return data


def clear_cache() -> None:
    _cache[0] = None


def _text(node: dict[str, Any], key: str) -> str:
    value = node.get(key)
    return value if isinstance(value, str) else ""


def list_nodes(
    definitions: list[Any],
    *,
    query: str | None = None,
    kind: str | None = None,
    category: str | None = None,
    limit: int | None = None,
    offset: int | None = None,
) -> dict[str, Any]:
    """Linear filter + slice over definitions.

    query matches a substring of id / English name / name, kind matches
    exactly and category by substring; all case-insensitive.
    """
    q = (query or "").strip().lower()
    k = (kind or "").strip().lower()
    c = (category or "").strip().lower()

    filtered = []
    for node in definitions:
        if not isinstance(node, dict):
            continue
        if k and _text(node, "kind").lower() != k:
            continue
        if c and c not in _text(node, "category").lower():
            continue
        if q:
            haystack = f"{_text(node, 'id')} {_text(node, 'displayNameEN')} {_text(node, 'displayName')}"
            if q not in haystack.lower():
                continue
        filtered.append(node)

    start = max(0, int(offset or 0))
    size = max(1, int(limit if limit is not None else len(filtered)))
    page = filtered[start:start + size]
    return {
        "total": len(filtered),
        "count": len(page),
        "nodes": [{key: node[key] for key in _PROJECTED_FIELDS if key in node} for node in page],
    }
