"""Document models for graph and project files.

On disk every key is camelCase; the models use snake_case attributes with a
camelCase alias so ``model_dump(by_alias=True)`` gives back the file form.

Top-level records (GraphDocument, ProjectManifest, ProjectDocument) keep unknown
keys so a read-modify-write cycle never drops fields written by newer tools.
Nested records (nodes, edges, comments, ...) drop unknown keys.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, PlainValidator, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

GraphEnvironment = Literal[
    "server",
    "client",
    "client:role-skill",
    "client:creation-skill",
    "client:creation-state",
    "client:creation-state-decision",
    "client:boolean",
    "client:integer",
]

GRAPH_ENVIRONMENTS: tuple[str, ...] = get_args(GraphEnvironment)


def _number(value: Any) -> Any:
    # ints stay ints on a round trip; bools are not numbers
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise PydanticCustomError("number_type", "Input should be a number")
    return value


Number = Annotated[Union[int, float], PlainValidator(_number)]


class _Record(BaseModel):
    """Strict camelCase record; no str→number or number→str coercion.

    A declared key may be absent but never ``null``.
    """

    model_config = ConfigDict(alias_generator=to_camel, strict=True)

    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        if value is None:
            raise PydanticCustomError("null_value", "Input should not be null")
        return value


class _OpenRecord(_Record):
    model_config = ConfigDict(alias_generator=to_camel, strict=True, extra="allow")


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


class Position(_Record):
    x: Number
    y: Number


class NodeData(_Record):
    overrides: Optional[dict[str, Any]] = None
    controls: Optional[dict[str, Any]] = None
    sequence_flow_out_count: Optional[Number] = None
    branch_flow_out_labels: Optional[list[str]] = None


class GraphNode(_Record):
    """A node instance placed on the canvas."""

    id: str
    type: str
    position: Position
    label: Optional[str] = None
    data: Optional[NodeData] = None


class PortRef(_Record):
    node_id: str
    port_id: str = Field(min_length=1)


class GraphEdge(_Record):
    """A port-to-port connection."""

    id: str
    source: PortRef
    target: PortRef


class GraphComment(_Record):
    """A sticky note, attached to a node or placed at a canvas position."""

    id: Optional[str] = None
    node_id: Optional[str] = Field(default=None, min_length=1)
    position: Optional[Position] = None
    text: Optional[str] = None
    pinned: Optional[bool] = None
    collapsed: Optional[bool] = None

    @model_validator(mode="after")
    def _require_anchor(self) -> GraphComment:
        if (self.node_id and self.node_id.strip()) or self.position is not None:
            return self
        raise PydanticCustomError("comment_anchor", "Comment requires nodeId or position.")


class GraphDocument(_OpenRecord):
    """A single visual program: nodes, edges, comments and metadata."""

    schema_version: Literal[1, 2]
    name: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
    comments: list[GraphComment] = Field(default_factory=list)
    environment: Optional[GraphEnvironment] = None
    execution_interval_seconds: Optional[Number] = None

    @field_validator("schema_version", mode="before")
    @classmethod
    def _integer_tag(cls, value: Any) -> Any:
        # true == 1 in Python; the tag must be an actual integer
        if isinstance(value, bool):
            raise PydanticCustomError("literal_error", "Input should be 1 or 2")
        return value

    def to_document(self) -> dict[str, Any]:
        """Plain dict in file form: defaults applied, absent optionals left out."""
        doc = self.model_dump(by_alias=True, exclude_unset=True)
        for key in ("nodes", "edges", "comments"):
            doc.setdefault(key, [])
        return doc


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------


class ProjectIdentity(_Record):
    id: str
    name: str


class ManifestGraphEntry(_Record):
    """Maps a logical graph id to its file inside the project directory."""

    graph_id: str
    name: str
    path: str
    group_name: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ManifestGroup(_Record):
    top_folder: Optional[Literal["server", "client"]] = None
    category_key: Optional[str] = None
    group_slug: Optional[str] = None
    group_name: Optional[str] = None


class ProjectManifest(_OpenRecord):
    """Contents of a project's manifest.json."""

    manifest_version: Optional[Number] = None
    app_version: Optional[str] = None
    project: ProjectIdentity
    graphs: list[ManifestGraphEntry] = Field(default_factory=list)
    groups: list[ManifestGroup] = Field(default_factory=list)
    struct_groups: Optional[list[Any]] = None
    structures: Optional[list[Any]] = None

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(by_alias=True, exclude_unset=True)
        doc.setdefault("graphs", [])
        doc.setdefault("groups", [])
        return doc


class ProjectDocument(_OpenRecord):
    """A manifest plus the graph and struct payloads it references."""

    manifest: ProjectManifest
    graphs: dict[str, GraphDocument] = Field(default_factory=dict)
    structs: Optional[dict[str, Any]] = None

    def to_document(self) -> dict[str, Any]:
        doc = self.model_dump(by_alias=True, exclude_unset=True)
        doc["manifest"] = self.manifest.to_document()
        doc["graphs"] = {graph_id: graph.to_document() for graph_id, graph in self.graphs.items()}
        return doc
