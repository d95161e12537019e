"""Tests for nodegraph:// resource addressing."""

import json

import pytest
from conftest import write_file

from nodegraph.config import load_config
from nodegraph.errors import NotFoundError, PathEscapeError, UnknownResourceError
from nodegraph.resources import list_resources, parse_uri, read_resource


@pytest.fixture
def cfg(tmp_path):
    cfg = load_config(tmp_path)
    write_file(cfg.docs_dir / "guide.md", "# Guide\n")
    write_file(cfg.docs_dir / "nodes" / "flow.md", "# Flow\n")
    write_file(cfg.docs_dir / "ignored.txt", "nope")
    return cfg


class TestParseUri:
    def test_host_category(self):
        assert parse_uri("nodegraph://docs/a/b.md") == ("docs", ["a", "b.md"])

    def test_path_category(self):
        assert parse_uri("nodegraph:///data/node-definitions") == ("data", ["node-definitions"])

    def test_host_category_is_case_insensitive(self):
        assert parse_uri("nodegraph://DOCS/Guide.md") == ("docs", ["Guide.md"])

    def test_percent_decoding(self):
        assert parse_uri("nodegraph://docs/my%20notes.md") == ("docs", ["my notes.md"])

    def test_wrong_scheme(self):
        with pytest.raises(UnknownResourceError):
            parse_uri("file:///etc/passwd")


class TestListResources:
    def test_docs_and_data(self, cfg):
        uris = [r["uri"] for r in list_resources(cfg)]
        assert uris == [
            "nodegraph://docs/guide.md",
            "nodegraph://docs/nodes/flow.md",
            "nodegraph://data/node-definitions",
            "nodegraph://data/node-definitions-sample",
        ]

    def test_missing_docs_dir(self, tmp_path):
        cfg = load_config(tmp_path)
        assert len(list_resources(cfg)) == 2


class TestReadResource:
    def test_doc(self, cfg):
        result = read_resource(cfg, "nodegraph://docs/nodes/flow.md")
        content = result["contents"][0]
        assert content == {"uri": "nodegraph://docs/nodes/flow.md", "mimeType": "text/markdown", "text": "# Flow\n"}

    def test_missing_doc(self, cfg):
        with pytest.raises(NotFoundError):
            read_resource(cfg, "nodegraph://docs/nothing.md")

    def test_doc_escape(self, cfg):
        with pytest.raises(PathEscapeError):
            read_resource(cfg, "nodegraph://docs/..%2F..%2Fsecret.md")

    def test_node_definitions(self, cfg):
        content = read_resource(cfg, "nodegraph://data/node-definitions")["contents"][0]
        assert content["mimeType"] == "application/json"
        assert isinstance(json.loads(content["text"]), list)

    def test_node_definitions_sample(self, cfg):
        content = read_resource(cfg, "nodegraph://data/node-definitions-sample")["contents"][0]
        assert content["text"] == cfg.sample_defs_path.read_text(encoding="utf-8")

    @pytest.mark.parametrize("uri", [
        "nodegraph://data/unknown",
        "nodegraph://data",
        "nodegraph://images/logo.png",
        "nodegraph://docs",
    ])
    def test_unknown(self, cfg, uri):
        with pytest.raises(UnknownResourceError):
            read_resource(cfg, uri)
