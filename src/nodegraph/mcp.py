"""Stdio MCP server for nodegraph.

Tools:
    list_graphs(dir?, recursive?, includeDetails?, environment?)  → {baseDir, count, graphs}
    read_graph(path)                                               → {path, graph}
    write_graph(path, graph, pretty?, overwrite?)                  → {ok, path} | {ok: false, errors}
    validate_graph(path? | graph?)                                 → {valid} | {valid: false, errors}
    list_nodes(query?, kind?, category?, limit?, offset?)          → {total, count, nodes}
    read_project(path)                                             → {path, document}
    write_project(path, document, pretty?, overwrite?)             → {ok, path, warnings?}
    validate_project(path? | document?)                            → {valid} | {valid: false, errors}

Resources:
    nodegraph://docs/<path>.md, nodegraph://data/node-definitions[-sample]

Protocol: JSON-RPC 2.0 over stdin/stdout (Model Context Protocol). Logs go to stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from nodegraph.models import GRAPH_ENVIRONMENTS

logger = logging.getLogger("nodegraph.mcp")

_VERSION = "0.1.0"
_PROTOCOL_VERSION = "2024-11-05"


def _tool_defs() -> list[dict[str, Any]]:
    return [
        {
            "name": "list_graphs",
            "description": "List graph JSON files under the graphs directory.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "dir": {"type": "string", "description": "Optional subdirectory under the graphs root."},
                    "recursive": {"type": "boolean", "description": "Recurse into subdirectories (default true)."},
                    "includeDetails": {
                        "type": "boolean",
                        "description": "Parse graphs and include metadata (default true).",
                    },
                    "environment": {
                        "type": "string",
                        "description": "Filter by graph environment.",
                        "enum": list(GRAPH_ENVIRONMENTS),
                    },
                },
            },
        },
        {
            "name": "read_graph",
            "description": "Read a graph JSON file relative to the graphs root.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Graph file path."},
                },
                "required": ["path"],
            },
        },
        {
            "name": "write_graph",
            "description": "Validate and write a graph JSON file under the graphs root.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Graph file path."},
                    "graph": {"type": "object", "description": "GraphDocument payload."},
                    "pretty": {"type": "boolean", "description": "Pretty-print JSON (default true)."},
                    "overwrite": {"type": "boolean", "description": "Allow overwriting an existing file."},
                },
                "required": ["path", "graph"],
            },
        },
        {
            "name": "validate_graph",
            "description": "Validate a GraphDocument from a file path or inline payload.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Graph file path."},
                    "graph": {"type": "object", "description": "GraphDocument payload."},
                },
            },
        },
        {
            "name": "list_nodes",
            "description": "List node definitions for building graphs.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "query": {"type": "string", "description": "Search by id or name."},
                    "kind": {"type": "string", "description": "Filter by node kind."},
                    "category": {"type": "string", "description": "Filter by category substring."},
                    "limit": {"type": "integer", "description": "Max results (default all)."},
                    "offset": {"type": "integer", "description": "Skip results (default 0)."},
                },
            },
        },
        {
            "name": "read_project",
            "description": "Read a project folder containing manifest.json and graph files.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Project folder path."},
                },
                "required": ["path"],
            },
        },
        {
            "name": "write_project",
            "description": "Write a project document to a folder with manifest.json and graphs.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Project folder path."},
                    "document": {"type": "object", "description": "ProjectDocument payload."},
                    "pretty": {"type": "boolean", "description": "Pretty-print JSON (default true)."},
                    "overwrite": {"type": "boolean", "description": "Allow overwriting an existing project."},
                },
                "required": ["path", "document"],
            },
        },
        {
            "name": "validate_project",
            "description": "Validate a ProjectDocument from a folder or inline payload.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    "path": {"type": "string", "description": "Project folder path."},
                    "document": {"type": "object", "description": "ProjectDocument payload."},
                },
            },
        },
    ]


class NodegraphServer:
    def __init__(self, config_root: Path | None = None) -> None:
        from nodegraph.config import load_config
        from nodegraph.graphs import GraphStore
        from nodegraph.projects import ProjectStore
        self._cfg = load_config(config_root)
        self._graphs = GraphStore(self._cfg.graphs_dir)
        self._projects = ProjectStore(self._cfg.projects_dir)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def _call_list_graphs(self, args: dict[str, Any]) -> dict[str, Any]:
        listing = self._graphs.list(
            args.get("dir") or None,
            recursive=args.get("recursive") is not False,
            include_details=args.get("includeDetails") is not False,
            environment=args.get("environment") or None,
        )
        return listing.to_dict()

    def _call_read_graph(self, args: dict[str, Any]) -> dict[str, Any]:
        path = args["path"]
        graph = self._graphs.read(path)
        return {"path": self._graphs.rel(self._graphs.resolve(path)), "graph": graph}

    def _call_write_graph(self, args: dict[str, Any]) -> dict[str, Any]:
        result = self._graphs.write(
            args["path"],
            args.get("graph"),
            overwrite=bool(args.get("overwrite", False)),
            pretty=args.get("pretty") is not False,
        )
        return result.to_dict()

    def _call_validate_graph(self, args: dict[str, Any]) -> dict[str, Any]:
        return self._graphs.validate(args.get("path"), args.get("graph")).report()

    def _call_list_nodes(self, args: dict[str, Any]) -> dict[str, Any]:
        from nodegraph.catalog import list_nodes, load_node_definitions, resolve_definitions_path
        definitions = load_node_definitions(resolve_definitions_path(self._cfg.node_defs_path))
        return list_nodes(
            definitions,
            query=args.get("query"),
            kind=args.get("kind"),
            category=args.get("category"),
            limit=args.get("limit"),
            offset=args.get("offset"),
        )

    def _call_read_project(self, args: dict[str, Any]) -> dict[str, Any]:
        path = args["path"]
        document = self._projects.read(path)
        return {"path": self._projects.rel(self._projects.resolve(path)), "document": document}

    def _call_write_project(self, args: dict[str, Any]) -> dict[str, Any]:
        result = self._projects.write(
            args["path"],
            args.get("document"),
            overwrite=bool(args.get("overwrite", False)),
            pretty=args.get("pretty") is not False,
        )
        return result.to_dict()

    def _call_validate_project(self, args: dict[str, Any]) -> dict[str, Any]:
        return self._projects.validate(args.get("path"), args.get("document")).report()

    def call_tool(self, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        dispatch = {
            "list_graphs": self._call_list_graphs,
            "read_graph": self._call_read_graph,
            "write_graph": self._call_write_graph,
            "validate_graph": self._call_validate_graph,
            "list_nodes": self._call_list_nodes,
            "read_project": self._call_read_project,
            "write_project": self._call_write_project,
            "validate_project": self._call_validate_project,
        }
        if name not in dispatch:
            msg = f"Unknown tool: {name}"
            raise ValueError(msg)
        return dispatch[name](arguments)

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    def list_resources(self) -> list[dict[str, Any]]:
        from nodegraph.resources import list_resources
        return list_resources(self._cfg)

    def read_resource(self, uri: str) -> dict[str, Any]:
        from nodegraph.resources import read_resource
        return read_resource(self._cfg, uri)

    # ------------------------------------------------------------------
    # JSON-RPC
    # ------------------------------------------------------------------

    def handle_message(self, msg: dict[str, Any]) -> dict[str, Any] | None:
        """Answer one JSON-RPC message; None for notifications."""
        method = msg.get("method", "")
        msg_id = msg.get("id")

        if method == "initialize":
            return _result(msg_id, {
                "protocolVersion": _PROTOCOL_VERSION,
                "capabilities": {"tools": {}, "resources": {}},
                "serverInfo": {"name": self._cfg.server.name, "version": _VERSION},
            })

        if method == "notifications/initialized":
            return None

        if method == "tools/list":
            return _result(msg_id, {"tools": _tool_defs()})

        if method == "tools/call":
            params = msg.get("params", {})
            tool_name = params.get("name", "")
            arguments = params.get("arguments") or {}
            try:
                payload = self.call_tool(tool_name, arguments)
            except Exception as exc:
                logger.warning("tool %s failed: %s", tool_name, exc)
                return _result(msg_id, {
                    "content": [{"type": "text", "text": f"Error: {exc}"}],
                    "isError": True,
                })
            return _result(msg_id, {
                "content": [{"type": "text", "text": json.dumps(payload, indent=2, ensure_ascii=False)}],
                "isError": False,
            })

        if method == "resources/list":
            try:
                return _result(msg_id, {"resources": self.list_resources()})
            except Exception as exc:
                logger.warning("resource listing failed: %s", exc)
                return _error(msg_id, -32603, str(exc))

        if method == "resources/read":
            uri = msg.get("params", {}).get("uri", "")
            try:
                return _result(msg_id, self.read_resource(uri))
            except Exception as exc:
                logger.warning("resource %s failed: %s", uri, exc)
                return _error(msg_id, -32602, str(exc))

        if msg_id is not None:
            return _error(msg_id, -32601, f"Method not found: {method}")
        return None


def _result(msg_id: Any, result: dict[str, Any]) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "result": result}


def _error(msg_id: Any, code: int, message: str) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": msg_id, "error": {"code": code, "message": message}}


async def _run_server(config_root: Path | None = None) -> None:
    server = NodegraphServer(config_root)
    logging.basicConfig(
        level=server._cfg.server.log_level,
        format="%(asctime)s %(name)s %(message)s",
        stream=sys.stderr,
    )
    logger.info("serving graphs=%s projects=%s", server._cfg.graphs_dir, server._cfg.projects_dir)

    reader = asyncio.StreamReader()
    loop = asyncio.get_running_loop()
    await loop.connect_read_pipe(lambda: asyncio.StreamReaderProtocol(reader), sys.stdin)

    writer_transport, writer_protocol = await loop.connect_write_pipe(
        asyncio.BaseProtocol, sys.stdout.buffer
    )

    def write_json(obj: Any) -> None:
        line = json.dumps(obj) + "\n"
        writer_transport.write(line.encode())

    while True:
        try:
            line = await reader.readline()
        except (asyncio.IncompleteReadError, EOFError):
            break
        if not line:
            break
        try:
            msg = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(msg, dict):
            continue
        response = server.handle_message(msg)
        if response is not None:
            write_json(response)


def run_server(config_root: Path | None = None) -> None:
    """Entry point for `nodegraph serve`."""
    asyncio.run(_run_server(config_root))
