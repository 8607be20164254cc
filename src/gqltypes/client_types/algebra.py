"""Structural equality and union simplification for client types."""

from collections.abc import Iterable
from typing import assert_never

from gqltypes.client_types.types import (
    ClientType,
    ListType,
    NonNullClientType,
    NullableType,
    ObjectType,
    TypeNameType,
    UnionMemberType,
    UnionType,
)
from gqltypes.document.nodes import (
    BooleanTypeNode,
    EnumTypeDefinitionNode,
    FloatTypeNode,
    IdTypeNode,
    IntTypeNode,
    ScalarTypeDefinitionNode,
    StringTypeNode,
)


def types_equal(a: ClientType, b: ClientType) -> bool:
    """Structural equality.

    Object types are never equal, not even to themselves when resolved twice.
    Unions are equal when each member of one side equals a member of the other.
    """
    if type(a) is not type(b):
        return False
    match a:
        case NullableType():
            return types_equal(a.of_type, b.of_type)  # type: ignore[union-attr]
        case ListType():
            return types_equal(a.of_type, b.of_type)  # type: ignore[union-attr]
        case UnionType():
            b_types = b.types  # type: ignore[union-attr]
            return all(any(types_equal(ta, tb) for tb in b_types) for ta in a.types) and all(
                any(types_equal(ta, tb) for ta in a.types) for tb in b_types
            )
        case ObjectType():
            return False
        case TypeNameType() | ScalarTypeDefinitionNode() | EnumTypeDefinitionNode():
            return a.name.value == b.name.value  # type: ignore[union-attr]
        case BooleanTypeNode() | FloatTypeNode() | IdTypeNode() | IntTypeNode() | StringTypeNode():
            return True
        case _:
            assert_never(a)


def nullable(client_type: ClientType) -> NullableType:
    """Mark a type as nullable, at most once."""
    if isinstance(client_type, NullableType):
        return client_type
    return NullableType(of_type=client_type)


def union_of_types(types: Iterable[ClientType]) -> ClientType:
    """Build the simplest type covering all of `types`.

    Nested unions are flattened and structurally equal members dropped. A
    single remaining member is returned bare. If any input was nullable the
    result is wrapped in one `NullableType`.

    Raises:
        ValueError: If `types` is empty
    """
    is_nullable = False
    members: list[UnionMemberType] = []

    for client_type in types:
        inner: NonNullClientType
        if isinstance(client_type, NullableType):
            is_nullable = True
            inner = client_type.of_type
        else:
            inner = client_type

        for member in inner.types if isinstance(inner, UnionType) else (inner,):
            if not any(types_equal(member, existing) for existing in members):
                members.append(member)

    if not members:
        raise ValueError("Cannot build a union of no types")

    result: NonNullClientType = members[0] if len(members) == 1 else UnionType(types=tuple(members))
    return nullable(result) if is_nullable else result
