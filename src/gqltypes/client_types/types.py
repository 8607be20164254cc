"""Structural result and input types computed for operations and fragments.

Client types compare with `types_equal`, never with `==`: they are built with
`eq=False`, so two separately resolved object types stay distinct.
"""

from dataclasses import dataclass, field

from gqltypes.document.location import Location
from gqltypes.document.nodes import (
    BooleanTypeNode,
    EnumTypeDefinitionNode,
    FloatTypeNode,
    IdTypeNode,
    IntTypeNode,
    NameNode,
    ScalarTypeDefinitionNode,
    StringTypeNode,
    StringValueNode,
)


@dataclass(frozen=True, eq=False, kw_only=True)
class TypeNameType:
    """The literal name of an object type, as returned by `__typename`."""

    name: NameNode


@dataclass(frozen=True, eq=False, kw_only=True)
class ClientField:
    name: NameNode
    type: "ClientType"
    loc: Location = field(repr=False)
    description: StringValueNode | None = None


@dataclass(frozen=True, eq=False, kw_only=True)
class ObjectType:
    fields: tuple[ClientField, ...]
    name: NameNode | None = None

    def get_field(self, name: str) -> ClientField | None:
        return next((f for f in self.fields if f.name.value == name), None)


@dataclass(frozen=True, eq=False, kw_only=True)
class ListType:
    of_type: "ClientType"


@dataclass(frozen=True, eq=False, kw_only=True)
class UnionType:
    types: tuple["UnionMemberType", ...]


@dataclass(frozen=True, eq=False, kw_only=True)
class NullableType:
    of_type: "NonNullClientType"


LeafType = (
    BooleanTypeNode
    | FloatTypeNode
    | IdTypeNode
    | IntTypeNode
    | StringTypeNode
    | ScalarTypeDefinitionNode
    | EnumTypeDefinitionNode
)

UnionMemberType = TypeNameType | ObjectType | ListType | LeafType

NonNullClientType = UnionType | UnionMemberType

ClientType = NullableType | NonNullClientType
