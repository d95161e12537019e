"""nodegraph CLI — graph/project document store with a stdio MCP server.

Commands:
    nodegraph init [NAME]          create nodegraph.toml + graphs/ projects/ docs/
    nodegraph serve                start stdio MCP server
    nodegraph graphs               list graph files with metadata
    nodegraph validate PATH        validate a graph file (or --project directory)
    nodegraph nodes [QUERY]        search node definitions
    nodegraph status               show configured roots
"""

from __future__ import annotations

from pathlib import Path

import click

from nodegraph.catalog import list_nodes, load_node_definitions, resolve_definitions_path
from nodegraph.config import NodegraphConfig, init_config, load_config
from nodegraph.errors import NodegraphError
from nodegraph.graphs import GraphStore
from nodegraph.mcp import run_server
from nodegraph.models import GRAPH_ENVIRONMENTS
from nodegraph.projects import ProjectStore

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg() -> NodegraphConfig:
    try:
        return load_config()
    except Exception as exc:
        raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="nodegraph")
def cli() -> None:
    """nodegraph — sandboxed store for node graph documents."""


# ---------------------------------------------------------------------------
# nodegraph init
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name", required=False)
@click.option("--dir", "root", default=".", show_default=True, help="Workspace root")
def init(name: str | None, root: str) -> None:
    """Create nodegraph.toml and the graphs/projects/docs directories."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, name=name)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("nodegraph.toml already exists — skipping init")

    cfg = load_config(root_path)
    cfg.ensure_dirs()
    click.echo(f"Graphs dir   : {cfg.graphs_dir}")
    click.echo(f"Projects dir : {cfg.projects_dir}")
    click.echo(f"Docs dir     : {cfg.docs_dir}")


# ---------------------------------------------------------------------------
# nodegraph serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--root", default=None, help="Override workspace root (default: auto-detect from cwd)")
def serve(root: str | None) -> None:
    """Start stdio MCP server."""
    root_path = Path(root).resolve() if root else None
    run_server(root_path)


# ---------------------------------------------------------------------------
# nodegraph graphs
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--dir", "subdir", default=None, help="Subdirectory under the graphs root")
@click.option("--no-recursive", is_flag=True, help="Only list files directly in the directory")
@click.option("--environment", "-e", type=click.Choice(GRAPH_ENVIRONMENTS), default=None)
def graphs(subdir: str | None, no_recursive: bool, environment: str | None) -> None:
    """List graph documents under the graphs root."""
    from rich.console import Console
    from rich.markup import escape
    from rich.table import Table

    cfg = _load_cfg()
    try:
        listing = GraphStore(cfg.graphs_dir).list(
            subdir, recursive=not no_recursive, environment=environment
        )
    except NodegraphError as exc:
        raise click.ClickException(str(exc)) from exc

    table = Table(title=f"graphs — {listing.count}", show_header=True, header_style="bold")
    table.add_column("Path", no_wrap=True)
    table.add_column("Name")
    table.add_column("Environment", style="dim")
    table.add_column("Nodes", justify="right")
    table.add_column("Edges", justify="right")
    for entry in listing.entries:
        if "error" in entry:
            err = entry["error"]
            detail = err if isinstance(err, str) else f"{len(err)} schema issue(s)"
            table.add_row(escape(entry["path"]), f"[red]{escape(detail)}[/red]", "", "", "")
            continue
        table.add_row(
            escape(entry["path"]),
            escape(entry["name"]),
            entry.get("environment") or "",
            str(entry["nodeCount"]),
            str(entry["edgeCount"]),
        )
    Console().print(table)


# ---------------------------------------------------------------------------
# nodegraph validate
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("path")
@click.option("--project", is_flag=True, help="PATH is a project directory under the projects root")
def validate(path: str, project: bool) -> None:
    """Validate a graph file (relative to the graphs root) or a project."""
    cfg = _load_cfg()
    try:
        if project:
            result = ProjectStore(cfg.projects_dir).validate(path)
        else:
            result = GraphStore(cfg.graphs_dir).validate(path)
    except (NodegraphError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    if result.ok:
        click.echo(f"{path}: valid")
        return
    click.echo(f"{path}: {len(result.issues)} issue(s)")
    for issue in result.issues:
        click.echo(f"  {issue.path or '<root>'}: {issue.message}")
    raise SystemExit(1)


# ---------------------------------------------------------------------------
# nodegraph nodes
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("query", required=False)
@click.option("--kind", default=None, help="Exact node kind")
@click.option("--category", default=None, help="Category substring")
@click.option("--limit", "-l", default=20, show_default=True)
@click.option("--offset", default=0, show_default=True)
def nodes(query: str | None, kind: str | None, category: str | None, limit: int, offset: int) -> None:
    """Search node definitions."""
    cfg = _load_cfg()
    try:
        definitions = load_node_definitions(resolve_definitions_path(cfg.node_defs_path))
    except (NodegraphError, ValueError) as exc:
        raise click.ClickException(str(exc)) from exc

    result = list_nodes(definitions, query=query, kind=kind, category=category, limit=limit, offset=offset)
    for node in result["nodes"]:
        name = node.get("displayNameEN") or node.get("displayName") or ""
        click.echo(f"{node.get('id', '?'):<28} {node.get('kind', ''):<8} {name}  [{node.get('category', '')}]")
    click.echo(f"({result['count']} of {result['total']})")


# ---------------------------------------------------------------------------
# nodegraph status
# ---------------------------------------------------------------------------


@cli.command()
def status() -> None:
    """Show configured roots and document counts."""
    from rich.console import Console
    from rich.table import Table

    cfg = _load_cfg()
    table = Table(title=f"nodegraph — {cfg.name}", show_header=True, header_style="bold")
    table.add_column("Setting", style="dim", no_wrap=True)
    table.add_column("Value")

    graph_count = GraphStore(cfg.graphs_dir).list(include_details=False).count
    project_count = 0
    if cfg.projects_dir.is_dir():
        project_count = sum(1 for d in cfg.projects_dir.iterdir() if (d / "manifest.json").is_file())

    table.add_row("Root", str(cfg.root))
    table.add_row("Graphs", f"{cfg.graphs_dir}  ({graph_count} files)")
    table.add_row("Projects", f"{cfg.projects_dir}  ({project_count} projects)")
    table.add_row("Docs", str(cfg.docs_dir))
    table.add_row("Node defs", str(resolve_definitions_path(cfg.node_defs_path)))
    Console().print(table)
