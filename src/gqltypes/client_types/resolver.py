"""Output and input type resolution for operations and fragments.

The resolver walks selection sets against the type definitions of a
`GraphQlDocument` and produces client types. It never mutates the document,
so one document can be resolved from several threads at once.
"""

from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import assert_never

from gqltypes import log
from gqltypes.client_types.algebra import nullable, union_of_types
from gqltypes.client_types.types import ClientField, ClientType, ListType, ObjectType, TypeNameType, UnionType
from gqltypes.document.document import GraphQlDocument
from gqltypes.document.errors import ErrorCode, GraphQlError
from gqltypes.document.graphql_type import is_typename_field
from gqltypes.document.nodes import (
    BooleanTypeNode,
    CompositeTypeDefinitionNode,
    EnumTypeDefinitionNode,
    ExecutableDefinitionNode,
    FieldNode,
    FloatTypeNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    IdTypeNode,
    InlineFragmentNode,
    InputObjectTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    IntTypeNode,
    ListTypeNode,
    NameNode,
    NullableTypeNode,
    ObjectTypeDefinitionNode,
    OperationDefinitionNode,
    PrimitiveTypeNode,
    ScalarTypeDefinitionNode,
    SelectionSetNode,
    StringTypeNode,
    TypeNode,
    UnionTypeDefinitionNode,
)

FRAGMENT_KIND = "fragment"


@dataclass(frozen=True, eq=False)
class ResolvedDefinition:
    """Result and variable types of one operation or fragment."""

    definition: ExecutableDefinitionNode
    result: ClientType
    variables: ObjectType

    @property
    def name(self) -> str | None:
        return self.definition.name.value if self.definition.name else None

    @property
    def kind(self) -> str:
        """`query`, `mutation`, `subscription` or `fragment`."""
        if isinstance(self.definition, FragmentDefinitionNode):
            return FRAGMENT_KIND
        return self.definition.operation.value


class ClientTypeResolver:
    """
    Resolver of client types against one document.

    Resolution is fail-fast: the first problem found raises a `GraphQlError`
    located at the offending node.

    Args:
        document: Document holding the operations, fragments and (directly or
            through its referenced documents) the schema definitions
    """

    def __init__(self, document: GraphQlDocument) -> None:
        self.document = document

    def get_result_type(self, definition: ExecutableDefinitionNode) -> ClientType:
        """Structural type of the data an operation or fragment selects."""
        root_type = self._get_root_type(definition)
        log.debug(f"Resolving result type against {root_type.name.value}")
        return self._get_result_type_for_selection_set(root_type, definition.selection_set)

    def get_input_type(self, definition: ExecutableDefinitionNode) -> ObjectType:
        """Object type with one field per variable.

        A variable with a default value may be omitted, so its type is
        nullable whatever its declared type.
        """
        fields: list[ClientField] = []
        for variable_definition in definition.variable_definitions:
            client_type = self._resolve_input_type(variable_definition.type)
            if variable_definition.default_value is not None:
                client_type = nullable(client_type)
            fields.append(
                ClientField(
                    name=variable_definition.variable.name,
                    loc=variable_definition.loc,
                    type=client_type,
                )
            )
        return ObjectType(fields=tuple(fields))

    # Root types
    # ----------
    def _get_root_type(self, definition: ExecutableDefinitionNode) -> CompositeTypeDefinitionNode:
        match definition:
            case FragmentDefinitionNode():
                type_definition = self.document.get_type_x(definition.type_condition)
                if not isinstance(
                    type_definition,
                    ObjectTypeDefinitionNode | InterfaceTypeDefinitionNode | UnionTypeDefinitionNode,
                ):
                    kind = type(type_definition).__name__.removesuffix("DefinitionNode")
                    raise GraphQlError(
                        ErrorCode.INVALID_TYPE_CONDITION,
                        f'A fragment cannot reference the {kind}, "{definition.type_condition.value}"',
                        definition.type_condition.loc,
                    )
                return type_definition
            case OperationDefinitionNode():
                root_type_name = self.document.get_root_type_name(definition.operation)
                return self.document.object_types.get_one_x(NameNode(loc=definition.loc, value=root_type_name))
            case _:
                assert_never(definition)

    # Polymorphic types
    # ----------
    def _get_object_types(self, type_definition: CompositeTypeDefinitionNode) -> list[ObjectTypeDefinitionNode]:
        """Object types a value of `type_definition` can have, in declaration order."""
        match type_definition:
            case ObjectTypeDefinitionNode():
                return [type_definition]
            case InterfaceTypeDefinitionNode():
                return list(self.document.get_interface_implementations(type_definition))
            case UnionTypeDefinitionNode():
                object_types: dict[str, ObjectTypeDefinitionNode] = {}
                for member in type_definition.types:
                    member_definition: CompositeTypeDefinitionNode | None = (
                        self.document.interface_types.get_one(member) or self.document.union_types.get_one(member)
                    )
                    if member_definition is None:
                        member_definition = self.document.object_types.get_one_x(member)
                    for object_type in self._get_object_types(member_definition):
                        object_types.setdefault(object_type.name.value, object_type)
                return list(object_types.values())
            case _:
                assert_never(type_definition)

    def _get_referenced_type_names(self, selection_set: SelectionSetNode) -> list[NameNode]:
        """Type conditions of the fragments selected at this level, nested inline fragments included."""
        names: dict[str, NameNode] = {}
        for selection in selection_set.selections:
            match selection:
                case FieldNode():
                    pass
                case FragmentSpreadNode():
                    type_condition = self.document.get_fragment_x(selection.name).type_condition
                    names.setdefault(type_condition.value, type_condition)
                case InlineFragmentNode():
                    if selection.type_condition is not None:
                        names.setdefault(selection.type_condition.value, selection.type_condition)
                    for name in self._get_referenced_type_names(selection.selection_set):
                        names.setdefault(name.value, name)
                case _:
                    assert_never(selection)
        return list(names.values())

    def _group_object_types(
        self, type_definition: CompositeTypeDefinitionNode, selection_set: SelectionSetNode
    ) -> tuple[list[ObjectTypeDefinitionNode], list[ObjectTypeDefinitionNode]]:
        """Split the possible object types into (referenced, other).

        Referenced object types are named by a type condition in the
        selection set, the others are only reached through the abstract type.
        """
        referenced_names = {name.value for name in self._get_referenced_type_names(selection_set)}
        referenced: list[ObjectTypeDefinitionNode] = []
        other: list[ObjectTypeDefinitionNode] = []
        for object_type in self._get_object_types(type_definition):
            (referenced if object_type.name.value in referenced_names else other).append(object_type)
        return referenced, other

    def _object_type_matches_condition(self, object_type: ObjectTypeDefinitionNode, type_condition: NameNode) -> bool:
        condition = self.document.get_type_x(type_condition)
        match condition:
            case ObjectTypeDefinitionNode():
                return object_type.name.value == condition.name.value
            case InterfaceTypeDefinitionNode():
                return object_type.implements(condition.name.value)
            case UnionTypeDefinitionNode():
                return any(self._object_type_matches_condition(object_type, member) for member in condition.types)
            case _:
                raise GraphQlError(
                    ErrorCode.INVALID_TYPE_CONDITION,
                    "Expected type condition to refer to an object, interface or union",
                    type_condition.loc,
                )

    # Selection sets
    # ----------
    def _get_result_type_for_selection_set(
        self, type_definition: CompositeTypeDefinitionNode, selection_set: SelectionSetNode
    ) -> ClientType:
        if isinstance(type_definition, ObjectTypeDefinitionNode):
            for name in self._get_referenced_type_names(selection_set):
                if name.value != type_definition.name.value:
                    raise GraphQlError(
                        ErrorCode.TYPE_CONFLICT,
                        f"The selection of {name.value} does not match the type {type_definition.name.value}",
                        name.loc,
                    )
            return self._get_result_type_for_object(type_definition, selection_set)

        referenced, other = self._group_object_types(type_definition, selection_set)
        log.debug(
            f"{type_definition.name.value} resolves to {len(referenced)} narrowed "
            f"and {len(other)} merged object type(s)"
        )

        variants: list[ObjectType] = []
        if other:
            variants.append(
                self._merge_object_types([self._get_result_type_for_object(o, selection_set) for o in other])
            )
        variants.extend(self._get_result_type_for_object(o, selection_set) for o in referenced)

        if len(variants) == 1:
            return variants[0]
        # An abstract type without object types resolves to an empty union
        return UnionType(types=tuple(variants))

    def _merge_object_types(self, object_types: list[ObjectType]) -> ObjectType:
        """Keep the fields every object type has, typed with the union of their types."""
        base, *rest = object_types
        fields: list[ClientField] = []
        for base_field in base.fields:
            matching = [o.get_field(base_field.name.value) for o in rest]
            others = [f for f in matching if f is not None]
            if len(others) != len(rest):
                continue
            fields.append(replace(base_field, type=union_of_types([base_field.type, *(f.type for f in others)])))
        return ObjectType(fields=tuple(fields))

    def _collect_fields(
        self,
        object_type: ObjectTypeDefinitionNode,
        selection_set: SelectionSetNode,
        collected: dict[str, list[FieldNode]],
    ) -> None:
        """Group the field selections that apply to `object_type` by response name."""
        for selection in selection_set.selections:
            match selection:
                case FieldNode():
                    collected.setdefault(selection.alias.value, []).append(selection)
                case InlineFragmentNode():
                    if selection.type_condition is None or self._object_type_matches_condition(
                        object_type, selection.type_condition
                    ):
                        self._collect_fields(object_type, selection.selection_set, collected)
                case FragmentSpreadNode():
                    fragment = self.document.get_fragment_x(selection.name)
                    if self._object_type_matches_condition(object_type, fragment.type_condition):
                        self._collect_fields(object_type, fragment.selection_set, collected)
                case _:
                    assert_never(selection)

    def _get_result_type_for_object(
        self, object_type: ObjectTypeDefinitionNode, selection_set: SelectionSetNode
    ) -> ObjectType:
        collected: dict[str, list[FieldNode]] = {}
        self._collect_fields(object_type, selection_set, collected)
        return ObjectType(fields=tuple(self._resolve_field(object_type, nodes) for nodes in collected.values()))

    def _resolve_field(self, object_type: ObjectTypeDefinitionNode, field_nodes: list[FieldNode]) -> ClientField:
        field_node = _merge_field_nodes(field_nodes)

        if is_typename_field(field_node.name.value):
            with_arguments = next((n for n in field_nodes if n.arguments), None)
            if with_arguments is not None:
                raise GraphQlError(
                    ErrorCode.INVALID_ARGS,
                    'Cannot pass arguments to the builtin field "__typename"',
                    with_arguments.loc,
                )
            if field_node.selection_set is not None:
                raise GraphQlError(
                    ErrorCode.UNEXPECTED_SELECTION_SET,
                    'Cannot pass a selection set to the builtin field "__typename"',
                    field_node.loc,
                )
            return ClientField(name=field_node.alias, loc=field_node.loc, type=TypeNameType(name=object_type.name))

        field_definition = object_type.get_field(field_node.name.value)
        if field_definition is None:
            raise GraphQlError(
                ErrorCode.MISSING_FIELD,
                f'Unable to find field "{field_node.name.value}" on object "{object_type.name.value}"',
                field_node.loc,
            )
        return ClientField(
            name=field_node.alias,
            loc=field_node.loc,
            description=field_definition.description,
            type=self._resolve_output_type(field_definition.type, field_node),
        )

    # Type references
    # ----------
    def _resolve_type(
        self,
        type_node: TypeNode,
        resolve_primitive: Callable[[PrimitiveTypeNode], ClientType],
        resolve_named: Callable[[NameNode], ClientType],
    ) -> ClientType:
        match type_node:
            case NullableTypeNode():
                return nullable(self._resolve_type(type_node.of_type, resolve_primitive, resolve_named))
            case ListTypeNode():
                return ListType(of_type=self._resolve_type(type_node.of_type, resolve_primitive, resolve_named))
            case NameNode():
                return resolve_named(type_node)
            case BooleanTypeNode() | FloatTypeNode() | IdTypeNode() | IntTypeNode() | StringTypeNode():
                return resolve_primitive(type_node)
            case _:
                assert_never(type_node)

    def _resolve_output_type(self, type_node: TypeNode, field_node: FieldNode) -> ClientType:
        def forbid_selection_set() -> None:
            if field_node.selection_set is not None:
                raise GraphQlError(
                    ErrorCode.UNEXPECTED_SELECTION_SET,
                    f'Cannot pass a selection set to the field "{field_node.name.value}"',
                    field_node.loc,
                )

        def resolve_primitive(primitive: PrimitiveTypeNode) -> ClientType:
            forbid_selection_set()
            return primitive

        def resolve_named(name: NameNode) -> ClientType:
            type_definition = self.document.get_type_x(name)
            match type_definition:
                case InputObjectTypeDefinitionNode():
                    raise GraphQlError(
                        ErrorCode.INVALID_OUTPUT_TYPE,
                        f'Cannot have an input object as the return type for "{field_node.name.value}"',
                        field_node.loc,
                    )
                case ScalarTypeDefinitionNode() | EnumTypeDefinitionNode():
                    forbid_selection_set()
                    return type_definition
                case ObjectTypeDefinitionNode() | InterfaceTypeDefinitionNode() | UnionTypeDefinitionNode():
                    if field_node.selection_set is None:
                        raise GraphQlError(
                            ErrorCode.MISSING_SELECTION_SET,
                            f'You must pass a selection set to the field "{field_node.name.value}"',
                            field_node.loc,
                        )
                    return self._get_result_type_for_selection_set(type_definition, field_node.selection_set)
                case _:
                    assert_never(type_definition)

        return self._resolve_type(type_node, resolve_primitive, resolve_named)

    def _resolve_input_type(self, type_node: TypeNode, expanding: frozenset[str] = frozenset()) -> ClientType:
        return self._resolve_type(
            type_node,
            lambda primitive: primitive,
            lambda name: self._resolve_named_input_type(name, expanding),
        )

    def _resolve_named_input_type(self, name: NameNode, expanding: frozenset[str]) -> ClientType:
        type_definition = self.document.get_type_x(name)
        match type_definition:
            case InputObjectTypeDefinitionNode():
                if type_definition.name.value in expanding:
                    raise GraphQlError(
                        ErrorCode.INVALID_INPUT_TYPE,
                        f'The input object "{name.value}" references itself and cannot be flattened',
                        name.loc,
                    )
                expanding = expanding | {type_definition.name.value}
                fields = tuple(
                    ClientField(
                        name=f.name,
                        loc=f.loc,
                        description=f.description,
                        type=self._resolve_input_type(f.type, expanding),
                    )
                    for f in type_definition.fields
                )
                return ObjectType(name=type_definition.name, fields=fields)
            case ScalarTypeDefinitionNode() | EnumTypeDefinitionNode():
                return type_definition
            case ObjectTypeDefinitionNode() | InterfaceTypeDefinitionNode() | UnionTypeDefinitionNode():
                raise GraphQlError(
                    ErrorCode.INVALID_INPUT_TYPE,
                    "You cannot use an interface, object or union as an input",
                    name.loc,
                )
            case _:
                assert_never(type_definition)


def _merge_field_nodes(field_nodes: list[FieldNode]) -> FieldNode:
    """Combine selections of one response name into a single field."""
    first = field_nodes[0]
    selection_sets = [n.selection_set for n in field_nodes if n.selection_set is not None]
    if len(field_nodes) == 1 or not selection_sets:
        return first
    return replace(
        first,
        selection_set=SelectionSetNode(
            loc=selection_sets[0].loc,
            selections=tuple(s for selection_set in selection_sets for s in selection_set.selections),
        ),
    )


def get_result_type_for_operation(definition: ExecutableDefinitionNode, document: GraphQlDocument) -> ClientType:
    return ClientTypeResolver(document).get_result_type(definition)


def get_input_type_for_operation(definition: ExecutableDefinitionNode, document: GraphQlDocument) -> ObjectType:
    return ClientTypeResolver(document).get_input_type(definition)


def resolve_definition(definition: ExecutableDefinitionNode, document: GraphQlDocument) -> ResolvedDefinition:
    resolver = ClientTypeResolver(document)
    return ResolvedDefinition(
        definition=definition,
        result=resolver.get_result_type(definition),
        variables=resolver.get_input_type(definition),
    )


def resolve_document(document: GraphQlDocument) -> list[ResolvedDefinition]:
    """
    Resolve every local operation and fragment of a document.

    Args:
        document: Operations document referencing the schema document

    Returns:
        One entry per definition, in document order

    Raises:
        GraphQlError: On the first definition that cannot be resolved
    """
    resolver = ClientTypeResolver(document)
    resolved: list[ResolvedDefinition] = []
    for definition in document.get_definitions():
        if not isinstance(definition, OperationDefinitionNode | FragmentDefinitionNode):
            continue
        resolved.append(
            ResolvedDefinition(
                definition=definition,
                result=resolver.get_result_type(definition),
                variables=resolver.get_input_type(definition),
            )
        )
        log.debug(f"Resolved {resolved[-1].kind} {resolved[-1].name or '<anonymous>'}")

    log.info(f"Resolved {len(resolved)} operation(s) and fragment(s)")
    return resolved
