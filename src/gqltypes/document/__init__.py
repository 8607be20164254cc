"""Canonical GraphQL documents with source locations."""

from .builder import DocumentBuilder, from_document_node, from_schema
from .document import DefinitionKind, FilteredDefinitions, GraphQlDocument, NameCollisionPolicy
from .errors import ErrorCode, ErrorFormat, GraphQlError, format_error
from .location import (
    FileLocationSource,
    Location,
    LocationRange,
    LocationSource,
    SchemaLocationSource,
    StringLocationSource,
)

__all__ = [
    "DefinitionKind",
    "DocumentBuilder",
    "ErrorCode",
    "ErrorFormat",
    "FileLocationSource",
    "FilteredDefinitions",
    "GraphQlDocument",
    "GraphQlError",
    "Location",
    "LocationRange",
    "LocationSource",
    "NameCollisionPolicy",
    "SchemaLocationSource",
    "StringLocationSource",
    "format_error",
    "from_document_node",
    "from_schema",
]
