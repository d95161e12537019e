"""NodegraphConfig: workspace config for the graph/project store.

Default layout (all relative to the workspace root):

    nodegraph.toml        # workspace config (optional)
    .env                  # optional: NODEGRAPH_* overrides
    graphs/               # standalone graph documents, any nesting
    projects/
        <project>/
            manifest.json
            ...           # graph / struct files named by the manifest
    docs/                 # markdown served as nodegraph://docs/...

nodegraph.toml example:

    [nodegraph]
    name = "my-workspace"
    # graphs_dir = "graphs"       # default
    # projects_dir = "projects"   # default
    # docs_dir = "docs"           # default
    # data_dir = ""               # default: bundled package data
    # node_defs_path = ""         # default: <data_dir>/nodeDefinitions.sample.json

    [server]
    name = "nodegraph"
    log_level = "INFO"

Precedence for every directory: process environment, then .env, then
nodegraph.toml, then the default.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

_CONFIG_FILENAME = "nodegraph.toml"
_DEFAULT_GRAPHS_DIR = "graphs"
_DEFAULT_PROJECTS_DIR = "projects"
_DEFAULT_DOCS_DIR = "docs"
_PACKAGE_DATA_DIR = Path(__file__).parent / "data"
_SAMPLE_DEFS = "nodeDefinitions.sample.json"

# env var -> [nodegraph] key
_ENV_KEYS = {
    "NODEGRAPH_GRAPHS_DIR": "graphs_dir",
    "NODEGRAPH_PROJECTS_DIR": "projects_dir",
    "NODEGRAPH_DOCS_DIR": "docs_dir",
    "NODEGRAPH_DATA_DIR": "data_dir",
    "NODEGRAPH_NODE_DEFS_PATH": "node_defs_path",
}


@dataclass
class ServerConfig:
    name: str = "nodegraph"
    log_level: str = "INFO"


@dataclass
class NodegraphConfig:
    """Resolved configuration for a nodegraph workspace."""

    root: Path                      # workspace root (contains nodegraph.toml if any)
    name: str = ""
    graphs_dir: Path = field(default_factory=Path)
    projects_dir: Path = field(default_factory=Path)
    docs_dir: Path = field(default_factory=Path)
    data_dir: Path = field(default_factory=lambda: _PACKAGE_DATA_DIR)
    node_defs_path: Path = field(default_factory=lambda: _PACKAGE_DATA_DIR / _SAMPLE_DEFS)
    server: ServerConfig = field(default_factory=ServerConfig)

    @property
    def sample_defs_path(self) -> Path:
        return self.data_dir / _SAMPLE_DEFS

    def ensure_dirs(self) -> None:
        """Create graphs_dir, projects_dir and docs_dir if they don't exist."""
        for d in (self.graphs_dir, self.projects_dir, self.docs_dir):
            d.mkdir(parents=True, exist_ok=True)


def _load_env(root: Path) -> dict[str, str]:
    """Parse a simple KEY=VALUE .env file (no external dependency)."""
    env_file = root / ".env"
    if not env_file.exists():
        return {}
    env: dict[str, str] = {}
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            k, _, v = line.partition("=")
            env[k.strip()] = v.strip().strip('"').strip("'")
    return env


def _dir(root: Path, value: str | os.PathLike[str]) -> Path:
    # relative entries are anchored at the workspace root
    return Path(os.path.abspath(root / Path(value).expanduser()))


def load_config(root: Path | str | None = None) -> NodegraphConfig:
    """Load nodegraph.toml from root (or search upward from cwd if root is None).

    NODEGRAPH_WORKSPACE, when set, replaces the root search entirely.
    """
    workspace = os.environ.get("NODEGRAPH_WORKSPACE")
    if root is None and workspace:
        root_path = Path(os.path.abspath(workspace))
    else:
        root_path = _find_root(Path(os.path.abspath(root)) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            raw = tomllib.load(f)

    section: dict[str, Any] = dict(raw.get("nodegraph", {}))
    srv_section = raw.get("server", {})

    env = _load_env(root_path)
    for env_key, cfg_key in _ENV_KEYS.items():
        value = os.environ.get(env_key) or env.get(env_key)
        if value:
            section[cfg_key] = value

    data_dir = _dir(root_path, section["data_dir"]) if section.get("data_dir") else _PACKAGE_DATA_DIR
    node_defs = section.get("node_defs_path")
    log_level = os.environ.get("NODEGRAPH_LOG_LEVEL") or env.get("NODEGRAPH_LOG_LEVEL")

    return NodegraphConfig(
        root=root_path,
        name=section.get("name", root_path.name),
        graphs_dir=_dir(root_path, section.get("graphs_dir", _DEFAULT_GRAPHS_DIR)),
        projects_dir=_dir(root_path, section.get("projects_dir", _DEFAULT_PROJECTS_DIR)),
        docs_dir=_dir(root_path, section.get("docs_dir", _DEFAULT_DOCS_DIR)),
        data_dir=data_dir,
        node_defs_path=_dir(root_path, node_defs) if node_defs else data_dir / _SAMPLE_DEFS,
        server=ServerConfig(
            name=srv_section.get("name", "nodegraph"),
            log_level=(log_level or srv_section.get("log_level", "INFO")).upper(),
        ),
    )


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for nodegraph.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(root: Path, name: str | None = None) -> Path:
    """Write a default nodegraph.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"nodegraph.toml already exists at {config_path}"
        raise FileExistsError(msg)

    workspace_name = name or root.name
    content = f"""\
[nodegraph]
name = "{workspace_name}"
# graphs_dir = "graphs"       # default
# projects_dir = "projects"   # default
# docs_dir = "docs"           # default
# data_dir = ""               # default: bundled sample data
# node_defs_path = ""         # default: <data_dir>/nodeDefinitions.sample.json

# [server]
# name = "nodegraph"
# log_level = "INFO"
"""
    config_path.write_text(content)
    return config_path
