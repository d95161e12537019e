"""Shared fixtures: temporary workspace roots and sample documents."""

import copy
import json

import pytest

from nodegraph import catalog
from nodegraph.graphs import GraphStore
from nodegraph.projects import ProjectStore

SAMPLE_GRAPH = {
    "schemaVersion": 2,
    "name": "On hit heal",
    "environment": "server",
    "nodes": [
        {"id": "n1", "type": "event.on_hit", "position": {"x": 0, "y": 0}},
        {
            "id": "n2",
            "type": "entity.set_health",
            "position": {"x": 240, "y": 16.5},
            "label": "Heal",
            "data": {"overrides": {"value": 10}, "sequenceFlowOutCount": 1},
        },
    ],
    "edges": [
        {
            "id": "e1",
            "source": {"nodeId": "n1", "portId": "flow_out"},
            "target": {"nodeId": "n2", "portId": "flow_in"},
        }
    ],
    "comments": [{"id": "c1", "nodeId": "n2", "text": "restore 10 hp"}],
}


@pytest.fixture(autouse=True)
def _clear_catalog_cache():
    catalog.clear_cache()
    yield
    catalog.clear_cache()


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for key in (
        "NODEGRAPH_WORKSPACE",
        "NODEGRAPH_GRAPHS_DIR",
        "NODEGRAPH_PROJECTS_DIR",
        "NODEGRAPH_DOCS_DIR",
        "NODEGRAPH_DATA_DIR",
        "NODEGRAPH_NODE_DEFS_PATH",
        "NODEGRAPH_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def graph():
    return copy.deepcopy(SAMPLE_GRAPH)


@pytest.fixture
def graphs_dir(tmp_path):
    d = tmp_path / "graphs"
    d.mkdir()
    return d


@pytest.fixture
def graph_store(graphs_dir):
    return GraphStore(graphs_dir)


@pytest.fixture
def projects_dir(tmp_path):
    d = tmp_path / "projects"
    d.mkdir()
    return d


@pytest.fixture
def project_store(projects_dir):
    return ProjectStore(projects_dir)


def write_file(path, data):
    """Write raw JSON (or text) to path, creating parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(data if isinstance(data, str) else json.dumps(data), encoding="utf-8")
    return path
