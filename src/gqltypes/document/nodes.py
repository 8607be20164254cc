"""Canonical, immutable GraphQL syntax tree.

Every node carries a `loc` that is excluded from equality. Sequences are
tuples so nodes stay immutable. Type references separate nullability from the
inner type: a nullable position is a `NullableTypeNode`, a non-null position is
the bare inner node, and the five built-in scalars have dedicated nodes.
"""

from dataclasses import dataclass, field
from typing import Any, assert_never

from graphql import DirectiveLocation, OperationType

from gqltypes.document.location import Location


@dataclass(frozen=True, kw_only=True)
class Node:
    loc: Location = field(compare=False, repr=False)


@dataclass(frozen=True, kw_only=True)
class NameNode(Node):
    value: str


# Values
# ----------
@dataclass(frozen=True, kw_only=True)
class VariableNode(Node):
    name: NameNode


@dataclass(frozen=True, kw_only=True)
class IntValueNode(Node):
    value: str


@dataclass(frozen=True, kw_only=True)
class FloatValueNode(Node):
    value: str


@dataclass(frozen=True, kw_only=True)
class StringValueNode(Node):
    value: str
    block: bool = False


@dataclass(frozen=True, kw_only=True)
class BooleanValueNode(Node):
    value: bool


@dataclass(frozen=True, kw_only=True)
class NullValueNode(Node):
    pass


@dataclass(frozen=True, kw_only=True)
class EnumValueNode(Node):
    value: str


@dataclass(frozen=True, kw_only=True)
class ListValueNode(Node):
    values: tuple["ValueNode", ...]


@dataclass(frozen=True, kw_only=True)
class ObjectFieldNode(Node):
    name: NameNode
    value: "ValueNode"


@dataclass(frozen=True, kw_only=True)
class ObjectValueNode(Node):
    fields: tuple[ObjectFieldNode, ...]


@dataclass(frozen=True, kw_only=True)
class ConstantValueNode(Node):
    """A default value that only exists as a Python value in a built schema."""

    value: Any


ValueNode = (
    VariableNode
    | IntValueNode
    | FloatValueNode
    | StringValueNode
    | BooleanValueNode
    | NullValueNode
    | EnumValueNode
    | ListValueNode
    | ObjectValueNode
    | ConstantValueNode
)


@dataclass(frozen=True, kw_only=True)
class ArgumentNode(Node):
    name: NameNode
    value: ValueNode


@dataclass(frozen=True, kw_only=True)
class DirectiveNode(Node):
    name: NameNode
    arguments: tuple[ArgumentNode, ...] = ()


# Type references
# ----------
@dataclass(frozen=True, kw_only=True)
class BooleanTypeNode(Node):
    pass


@dataclass(frozen=True, kw_only=True)
class FloatTypeNode(Node):
    pass


@dataclass(frozen=True, kw_only=True)
class IdTypeNode(Node):
    pass


@dataclass(frozen=True, kw_only=True)
class IntTypeNode(Node):
    pass


@dataclass(frozen=True, kw_only=True)
class StringTypeNode(Node):
    pass


PrimitiveTypeNode = BooleanTypeNode | FloatTypeNode | IdTypeNode | IntTypeNode | StringTypeNode

PRIMITIVE_TYPE_NODES: dict[str, type[PrimitiveTypeNode]] = {
    "Boolean": BooleanTypeNode,
    "Float": FloatTypeNode,
    "ID": IdTypeNode,
    "Int": IntTypeNode,
    "String": StringTypeNode,
}


@dataclass(frozen=True, kw_only=True)
class ListTypeNode(Node):
    of_type: "TypeNode"


NonNullTypeNode = NameNode | ListTypeNode | PrimitiveTypeNode


@dataclass(frozen=True, kw_only=True)
class NullableTypeNode(Node):
    of_type: NonNullTypeNode


TypeNode = NullableTypeNode | NonNullTypeNode


# Selections
# ----------
@dataclass(frozen=True, kw_only=True)
class FieldNode(Node):
    """A selected field. `alias` falls back to the field name."""

    alias: NameNode
    name: NameNode
    arguments: tuple[ArgumentNode, ...] = ()
    directives: tuple[DirectiveNode, ...] = ()
    selection_set: "SelectionSetNode | None" = None


@dataclass(frozen=True, kw_only=True)
class FragmentSpreadNode(Node):
    name: NameNode
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class InlineFragmentNode(Node):
    type_condition: NameNode | None
    selection_set: "SelectionSetNode"
    directives: tuple[DirectiveNode, ...] = ()


SelectionNode = FieldNode | FragmentSpreadNode | InlineFragmentNode


@dataclass(frozen=True, kw_only=True)
class SelectionSetNode(Node):
    selections: tuple[SelectionNode, ...]


# Executable definitions
# ----------
@dataclass(frozen=True, kw_only=True)
class VariableDefinitionNode(Node):
    variable: VariableNode
    type: TypeNode
    default_value: ValueNode | None = None
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class OperationDefinitionNode(Node):
    operation: OperationType
    name: NameNode | None
    selection_set: SelectionSetNode
    variable_definitions: tuple[VariableDefinitionNode, ...] = ()
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class FragmentDefinitionNode(Node):
    name: NameNode
    type_condition: NameNode
    selection_set: SelectionSetNode
    variable_definitions: tuple[VariableDefinitionNode, ...] = ()
    directives: tuple[DirectiveNode, ...] = ()


ExecutableDefinitionNode = OperationDefinitionNode | FragmentDefinitionNode


# Type system definitions
# ----------
@dataclass(frozen=True, kw_only=True)
class InputValueDefinitionNode(Node):
    name: NameNode
    type: TypeNode
    description: StringValueNode | None = None
    default_value: ValueNode | None = None
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class FieldDefinitionNode(Node):
    name: NameNode
    type: TypeNode
    arguments: tuple[InputValueDefinitionNode, ...] = ()
    description: StringValueNode | None = None
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ScalarTypeDefinitionNode(Node):
    name: NameNode
    description: StringValueNode | None = None
    extend: bool = False
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class ObjectTypeDefinitionNode(Node):
    name: NameNode
    fields: tuple[FieldDefinitionNode, ...] = ()
    interfaces: tuple[NameNode, ...] = ()
    description: StringValueNode | None = None
    extend: bool = False
    directives: tuple[DirectiveNode, ...] = ()

    def get_field(self, name: str) -> FieldDefinitionNode | None:
        return next((f for f in self.fields if f.name.value == name), None)

    def implements(self, interface_name: str) -> bool:
        return any(i.value == interface_name for i in self.interfaces)


@dataclass(frozen=True, kw_only=True)
class InterfaceTypeDefinitionNode(Node):
    name: NameNode
    fields: tuple[FieldDefinitionNode, ...] = ()
    interfaces: tuple[NameNode, ...] = ()
    description: StringValueNode | None = None
    extend: bool = False
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class UnionTypeDefinitionNode(Node):
    name: NameNode
    types: tuple[NameNode, ...] = ()
    description: StringValueNode | None = None
    extend: bool = False
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class EnumValueDefinitionNode(Node):
    name: NameNode
    description: StringValueNode | None = None
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class EnumTypeDefinitionNode(Node):
    name: NameNode
    values: tuple[EnumValueDefinitionNode, ...] = ()
    description: StringValueNode | None = None
    extend: bool = False
    directives: tuple[DirectiveNode, ...] = ()


@dataclass(frozen=True, kw_only=True)
class InputObjectTypeDefinitionNode(Node):
    name: NameNode
    fields: tuple[InputValueDefinitionNode, ...] = ()
    description: StringValueNode | None = None
    extend: bool = False
    directives: tuple[DirectiveNode, ...] = ()


TypeDefinitionNode = (
    ScalarTypeDefinitionNode
    | ObjectTypeDefinitionNode
    | InterfaceTypeDefinitionNode
    | UnionTypeDefinitionNode
    | EnumTypeDefinitionNode
    | InputObjectTypeDefinitionNode
)

InputTypeDefinitionNode = ScalarTypeDefinitionNode | EnumTypeDefinitionNode | InputObjectTypeDefinitionNode

CompositeTypeDefinitionNode = ObjectTypeDefinitionNode | InterfaceTypeDefinitionNode | UnionTypeDefinitionNode


@dataclass(frozen=True, kw_only=True)
class DirectiveLocationNode(Node):
    value: DirectiveLocation


@dataclass(frozen=True, kw_only=True)
class DirectiveDefinitionNode(Node):
    name: NameNode
    locations: tuple[DirectiveLocationNode, ...]
    arguments: tuple[InputValueDefinitionNode, ...] = ()
    description: StringValueNode | None = None
    is_repeatable: bool = False


@dataclass(frozen=True, kw_only=True)
class RootOperationTypeNode(Node):
    operation: OperationType
    type: NameNode


@dataclass(frozen=True, kw_only=True)
class SchemaDefinitionNode(Node):
    """A `schema { ... }` definition or extension naming the root types."""

    operation_types: tuple[RootOperationTypeNode, ...] = ()
    description: StringValueNode | None = None
    extend: bool = False
    directives: tuple[DirectiveNode, ...] = ()


DefinitionNode = ExecutableDefinitionNode | TypeDefinitionNode | DirectiveDefinitionNode | SchemaDefinitionNode


def print_type_node(type_node: TypeNode) -> str:
    """Render a type reference in GraphQL notation, e.g. `[String!]`."""
    if isinstance(type_node, NullableTypeNode):
        return _print_non_null_type_node(type_node.of_type)
    return f"{_print_non_null_type_node(type_node)}!"


def _print_non_null_type_node(type_node: NonNullTypeNode) -> str:
    match type_node:
        case NameNode():
            return type_node.value
        case ListTypeNode():
            return f"[{print_type_node(type_node.of_type)}]"
        case BooleanTypeNode():
            return "Boolean"
        case FloatTypeNode():
            return "Float"
        case IdTypeNode():
            return "ID"
        case IntTypeNode():
            return "Int"
        case StringTypeNode():
            return "String"
        case _:
            assert_never(type_node)
