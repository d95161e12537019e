"""Exception types raised by the stores, catalog and resource layer.

Each error also subclasses the closest builtin so callers that only know about
``FileExistsError`` or ``ValueError`` keep working.

Schema violations are never raised: they come back as data (see
``nodegraph.schema.Validation``).
"""

from __future__ import annotations


class NodegraphError(Exception):
    """Base class for all nodegraph errors."""


class PathEscapeError(NodegraphError, ValueError):
    """A supplied path resolves outside its designated root."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Path escapes base directory: {path}")


class NotFoundError(NodegraphError, FileNotFoundError):
    """A file or directory named by the caller does not exist."""


class AlreadyExistsError(NodegraphError, FileExistsError):
    """A write without overwrite targets an existing document or project."""


class MalformedCatalogError(NodegraphError, ValueError):
    """The node definitions source is not a JSON array."""


class UnknownResourceError(NodegraphError, LookupError):
    """A resource URI matches no known category or sub-resource."""


class UsageError(NodegraphError, ValueError):
    """Mutually exclusive arguments were both given, or neither was."""
