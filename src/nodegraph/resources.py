"""``nodegraph://`` resources: markdown docs and node definition data.

    nodegraph://docs/<relative .md path>      -> file under the docs root
    nodegraph://data/node-definitions         -> the configured catalog
    nodegraph://data/node-definitions-sample  -> the bundled sample file

The category may also be given as the first path segment
(``nodegraph:///docs/guide.md``).
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote, urlsplit

from nodegraph.catalog import load_node_definitions, resolve_definitions_path
from nodegraph.errors import NotFoundError, UnknownResourceError
from nodegraph.graphs import collect_files
from nodegraph.sandbox import contain_in, relative_posix

if TYPE_CHECKING:
    from pathlib import Path

    from nodegraph.config import NodegraphConfig

SCHEME = "nodegraph"
_MARKDOWN = "text/markdown"
_JSON = "application/json"


def parse_uri(uri: str) -> tuple[str, list[str]]:
    """Split a resource URI into (category, remaining path segments)."""
    parts = urlsplit(uri)
    if parts.scheme != SCHEME:
        msg = f"Unsupported resource URI: {uri}"
        raise UnknownResourceError(msg)
    segments = [unquote(s) for s in parts.path.lstrip("/").split("/") if s]
    if parts.hostname:
        return parts.hostname, segments
    if not segments:
        msg = f"Unknown resource URI: {uri}"
        raise UnknownResourceError(msg)
    return segments[0], segments[1:]


def list_resources(cfg: NodegraphConfig) -> list[dict[str, Any]]:
    resources = []
    for doc in collect_files(cfg.docs_dir, recursive=True, suffix=".md"):
        rel = relative_posix(cfg.docs_dir, doc)
        resources.append({
            "uri": f"{SCHEME}://docs/{rel}",
            "name": f"docs/{rel}",
            "description": f"Documentation: {rel}",
            "mimeType": _MARKDOWN,
        })
    resources.append({
        "uri": f"{SCHEME}://data/node-definitions",
        "name": "data/node-definitions",
        "description": "Node definitions loaded from NODEGRAPH_NODE_DEFS_PATH.",
        "mimeType": _JSON,
    })
    resources.append({
        "uri": f"{SCHEME}://data/node-definitions-sample",
        "name": "data/node-definitions-sample",
        "description": "Bundled sample node definitions.",
        "mimeType": _JSON,
    })
    return resources


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        msg = f"Not found: {path}"
        raise NotFoundError(msg) from exc


def read_resource(cfg: NodegraphConfig, uri: str) -> dict[str, Any]:
    """Return MCP ``resources/read`` contents for uri."""
    category, rest = parse_uri(uri)
    if category == "docs" and rest:
        text = _read_text(contain_in(cfg.docs_dir, "/".join(rest)))
        mime = _MARKDOWN
    elif category == "data" and rest[:1] == ["node-definitions"]:
        nodes = load_node_definitions(resolve_definitions_path(cfg.node_defs_path))
        text = json.dumps(nodes, indent=2, ensure_ascii=False)
        mime = _JSON
    elif category == "data" and rest[:1] == ["node-definitions-sample"]:
        text = _read_text(contain_in(cfg.data_dir, cfg.sample_defs_path.name))
        mime = _JSON
    else:
        msg = f"Unknown resource URI: {uri}"
        raise UnknownResourceError(msg)
    return {"contents": [{"uri": uri, "mimeType": mime, "text": text}]}
