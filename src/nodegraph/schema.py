"""Validation entry points that turn pydantic errors into located issues.

    result = validate_graph(candidate)
    if result.ok:
        write(result.value)
    else:
        for issue in result.issues:
            print(issue.path, issue.message)   # e.g. "nodes.2.position.x"

Validation never raises for bad documents and never mutates the candidate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from nodegraph.models import GraphDocument, ProjectDocument

if TYPE_CHECKING:
    from pydantic import BaseModel


@dataclass
class Issue:
    """One schema violation, located by a dotted path into the document."""

    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass
class Validation:
    ok: bool
    value: dict[str, Any] | None = None
    issues: list[Issue] = field(default_factory=list)

    def report(self) -> dict[str, Any]:
        """Wire form used by validate_* tools: {valid} or {valid, errors}."""
        if self.ok:
            return {"valid": True}
        return {"valid": False, "errors": [i.to_dict() for i in self.issues]}


def _issues(exc: ValidationError) -> list[Issue]:
    return [
        Issue(path=".".join(str(part) for part in err["loc"]), message=err["msg"])
        for err in exc.errors()
    ]


def _validate(model: type[BaseModel], candidate: Any) -> Validation:
    try:
        parsed = model.model_validate(candidate)
    except ValidationError as exc:
        return Validation(ok=False, issues=_issues(exc))
    return Validation(ok=True, value=parsed.to_document())  # type: ignore[attr-defined]


def validate_graph(candidate: Any) -> Validation:
    return _validate(GraphDocument, candidate)


def validate_project(candidate: Any) -> Validation:
    return _validate(ProjectDocument, candidate)
