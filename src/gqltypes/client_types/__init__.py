"""Client type resolution for GraphQL operations and fragments."""

from .algebra import nullable, types_equal, union_of_types
from .resolver import (
    ClientTypeResolver,
    ResolvedDefinition,
    get_input_type_for_operation,
    get_result_type_for_operation,
    resolve_definition,
    resolve_document,
)
from .serialize import client_type_to_dict, format_client_type
from .types import ClientField, ClientType, ListType, NullableType, ObjectType, TypeNameType, UnionType

__all__ = [
    "ClientField",
    "ClientType",
    "ClientTypeResolver",
    "ListType",
    "NullableType",
    "ObjectType",
    "ResolvedDefinition",
    "TypeNameType",
    "UnionType",
    "client_type_to_dict",
    "format_client_type",
    "get_input_type_for_operation",
    "get_result_type_for_operation",
    "nullable",
    "resolve_definition",
    "resolve_document",
    "types_equal",
    "union_of_types",
]
