"""Sandboxed document store for node graphs and multi-file projects.

Layout:
    graphs/
        **/*.json             # one GraphDocument per file
    projects/
        <project>/
            manifest.json     # project identity + graphId -> path mapping
            <path>.json       # graph / struct files named by the manifest

Every path a caller supplies is resolved against its root and rejected if it
escapes it. Documents are validated against schemaVersion 1 or 2; unknown
top-level keys survive a read-modify-write cycle.
"""

from nodegraph.config import NodegraphConfig, init_config, load_config
from nodegraph.graphs import GraphStore
from nodegraph.projects import ProjectStore
from nodegraph.schema import validate_graph, validate_project

__all__ = [
    "GraphStore",
    "NodegraphConfig",
    "ProjectStore",
    "init_config",
    "load_config",
    "validate_graph",
    "validate_project",
]
