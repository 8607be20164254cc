from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from functools import cached_property
from typing import Generic, TypeVar

from graphql import OperationType

from gqltypes import log
from gqltypes.document.errors import ErrorCode, GraphQlError
from gqltypes.document.location import Location
from gqltypes.document.nodes import (
    DefinitionNode,
    DirectiveDefinitionNode,
    EnumTypeDefinitionNode,
    FragmentDefinitionNode,
    InputObjectTypeDefinitionNode,
    InputTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    NameNode,
    ObjectTypeDefinitionNode,
    OperationDefinitionNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    TypeDefinitionNode,
    UnionTypeDefinitionNode,
)

T = TypeVar("T", bound=DefinitionNode)

DEFAULT_ROOT_TYPE_NAMES = {
    OperationType.QUERY: "Query",
    OperationType.MUTATION: "Mutation",
    OperationType.SUBSCRIPTION: "Subscription",
}


class NameCollisionPolicy(str, Enum):
    """What to do when two definitions of one kind share a name.

    SHADOW keeps the definition inserted last (local definitions win over
    referenced ones). ERROR raises NAME_COLLISION.
    """

    SHADOW = "shadow"
    ERROR = "error"


class DefinitionKind(str, Enum):
    OPERATION = "operation"
    FRAGMENT = "fragment"
    TYPE = "type"
    INPUT_TYPE = "input_type"
    SCALAR = "scalar"
    OBJECT = "object"
    INTERFACE = "interface"
    UNION = "union"
    ENUM = "enum"
    INPUT_OBJECT = "input_object"
    DIRECTIVE = "directive"


def get_definition_name(definition: DefinitionNode) -> NameNode | None:
    if isinstance(definition, SchemaDefinitionNode):
        return None
    return definition.name


def _of_type(*classes: type) -> Callable[[DefinitionNode], bool]:
    return lambda definition: isinstance(definition, classes)


class FilteredDefinitions(Generic[T]):
    """Definitions of one kind, with a name index over local and referenced ones.

    Args:
        description: Used in error messages, e.g. "an ObjectType"
        all_definitions: Referenced definitions followed by local ones
        local_definitions: Definitions of the document itself
        predicate: Selects the definitions of this kind
        collisions: Name collision policy
    """

    def __init__(
        self,
        description: str,
        all_definitions: Sequence[DefinitionNode],
        local_definitions: Sequence[DefinitionNode],
        predicate: Callable[[DefinitionNode], bool],
        collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
    ) -> None:
        self._description = description
        self._all: tuple[T, ...] = tuple(d for d in all_definitions if predicate(d))  # type: ignore[misc]
        self._local: tuple[T, ...] = tuple(d for d in local_definitions if predicate(d))  # type: ignore[misc]
        self._by_name: dict[str, T] = {}

        duplicates: list[GraphQlError] = []
        for definition in self._all:
            name = get_definition_name(definition)
            if name is None:
                continue
            previous = self._by_name.get(name.value)
            if previous is not None:
                if collisions == NameCollisionPolicy.ERROR:
                    duplicates.append(
                        GraphQlError(
                            ErrorCode.NAME_COLLISION,
                            f'There is already {description} called "{name.value}"',
                            name.loc,
                        )
                    )
                    continue
                log.debug(f'Definition of {description} "{name.value}" shadows an earlier definition')
            self._by_name[name.value] = definition

        if duplicates:
            raise GraphQlError(
                ErrorCode.NAME_COLLISION,
                f"Found {len(duplicates)} duplicate name(s) for {description}",
                duplicates[0].loc,
                duplicates,
            )

    def get_many(self, include_referenced: bool = False) -> tuple[T, ...]:
        return self._all if include_referenced else self._local

    def get_one(self, name: str | NameNode) -> T | None:
        return self._by_name.get(name if isinstance(name, str) else name.value)

    def get_one_x(self, name: NameNode) -> T:
        """Look up a definition, failing with an error located at `name`."""
        definition = self.get_one(name)
        if definition is None:
            raise GraphQlError(
                ErrorCode.MISSING_NAMED_NODE,
                f'Could not find {self._description} called "{name.value}"',
                name.loc,
            )
        return definition


class GraphQlDocument:
    """An immutable, indexed collection of GraphQL definitions.

    Lookups by name search this document and every referenced document. A
    local definition shadows a referenced one of the same name. Listing
    definitions only returns local ones unless `include_referenced` is set.

    Args:
        definitions: Definitions of this document
        loc: Location of the document itself
        referenced_documents: Documents whose definitions are visible here
        collisions: Name collision policy
    """

    def __init__(
        self,
        definitions: Iterable[DefinitionNode],
        loc: Location,
        referenced_documents: Sequence["GraphQlDocument"] = (),
        collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
    ) -> None:
        self.loc = loc
        self.referenced_documents = tuple(referenced_documents)

        self._local_definitions: tuple[DefinitionNode, ...] = tuple(
            sorted(definitions, key=_definition_sort_key)
        )

        seen: set[int] = set()
        all_definitions: list[DefinitionNode] = []
        for definition in [
            *(d for document in self.referenced_documents for d in document._all_definitions),
            *self._local_definitions,
        ]:
            if id(definition) in seen:
                continue
            seen.add(id(definition))
            all_definitions.append(definition)
        self._all_definitions = tuple(all_definitions)

        def filtered(description: str, predicate: Callable[[DefinitionNode], bool]) -> FilteredDefinitions:
            return FilteredDefinitions(
                description, self._all_definitions, self._local_definitions, predicate, collisions
            )

        self.operations: FilteredDefinitions[OperationDefinitionNode] = filtered(
            "an Operation", _of_type(OperationDefinitionNode)
        )
        self.fragments: FilteredDefinitions[FragmentDefinitionNode] = filtered(
            "a Fragment", _of_type(FragmentDefinitionNode)
        )
        self.types: FilteredDefinitions[TypeDefinitionNode] = filtered(
            "a Type",
            _of_type(
                ScalarTypeDefinitionNode,
                ObjectTypeDefinitionNode,
                InterfaceTypeDefinitionNode,
                UnionTypeDefinitionNode,
                EnumTypeDefinitionNode,
                InputObjectTypeDefinitionNode,
            ),
        )
        self.input_types: FilteredDefinitions[InputTypeDefinitionNode] = filtered(
            "an InputType",
            _of_type(ScalarTypeDefinitionNode, EnumTypeDefinitionNode, InputObjectTypeDefinitionNode),
        )
        self.scalar_types: FilteredDefinitions[ScalarTypeDefinitionNode] = filtered(
            "a ScalarType", _of_type(ScalarTypeDefinitionNode)
        )
        self.object_types: FilteredDefinitions[ObjectTypeDefinitionNode] = filtered(
            "an ObjectType", _of_type(ObjectTypeDefinitionNode)
        )
        self.interface_types: FilteredDefinitions[InterfaceTypeDefinitionNode] = filtered(
            "an InterfaceType", _of_type(InterfaceTypeDefinitionNode)
        )
        self.union_types: FilteredDefinitions[UnionTypeDefinitionNode] = filtered(
            "a UnionType", _of_type(UnionTypeDefinitionNode)
        )
        self.enum_types: FilteredDefinitions[EnumTypeDefinitionNode] = filtered(
            "an EnumType", _of_type(EnumTypeDefinitionNode)
        )
        self.input_object_types: FilteredDefinitions[InputObjectTypeDefinitionNode] = filtered(
            "an InputObjectType", _of_type(InputObjectTypeDefinitionNode)
        )
        self.directives: FilteredDefinitions[DirectiveDefinitionNode] = filtered(
            "a Directive", _of_type(DirectiveDefinitionNode)
        )

        self._by_kind: dict[DefinitionKind, FilteredDefinitions] = {
            DefinitionKind.OPERATION: self.operations,
            DefinitionKind.FRAGMENT: self.fragments,
            DefinitionKind.TYPE: self.types,
            DefinitionKind.INPUT_TYPE: self.input_types,
            DefinitionKind.SCALAR: self.scalar_types,
            DefinitionKind.OBJECT: self.object_types,
            DefinitionKind.INTERFACE: self.interface_types,
            DefinitionKind.UNION: self.union_types,
            DefinitionKind.ENUM: self.enum_types,
            DefinitionKind.INPUT_OBJECT: self.input_object_types,
            DefinitionKind.DIRECTIVE: self.directives,
        }

    def get_definitions(self, include_referenced: bool = False) -> tuple[DefinitionNode, ...]:
        return self._all_definitions if include_referenced else self._local_definitions

    def get_many(self, kind: DefinitionKind, include_referenced: bool = False) -> tuple[DefinitionNode, ...]:
        return self._by_kind[kind].get_many(include_referenced)

    def get_one(self, kind: DefinitionKind, name: str | NameNode) -> DefinitionNode | None:
        return self._by_kind[kind].get_one(name)

    def get_one_x(self, kind: DefinitionKind, name: NameNode) -> DefinitionNode:
        return self._by_kind[kind].get_one_x(name)

    def get_type_x(self, name: NameNode) -> TypeDefinitionNode:
        return self.types.get_one_x(name)

    def get_fragment_x(self, name: NameNode) -> FragmentDefinitionNode:
        return self.fragments.get_one_x(name)

    @cached_property
    def _implementations_by_interface(self) -> dict[str, tuple[ObjectTypeDefinitionNode, ...]]:
        implementations: dict[str, list[ObjectTypeDefinitionNode]] = {}
        for object_type in self.object_types.get_many(include_referenced=True):
            # Shadowed definitions are not visible by name
            if self.object_types.get_one(object_type.name) is not object_type:
                continue
            for interface in object_type.interfaces:
                implementations.setdefault(interface.value, []).append(object_type)
        return {name: tuple(objects) for name, objects in implementations.items()}

    def get_interface_implementations(
        self, interface: InterfaceTypeDefinitionNode
    ) -> tuple[ObjectTypeDefinitionNode, ...]:
        """Object types, local or referenced, that declare `interface`.

        Only the definition visible by name counts, so a local object that
        shadows a referenced one is listed once.
        """
        return self._implementations_by_interface.get(interface.name.value, ())

    @cached_property
    def _root_type_names(self) -> dict[OperationType, str]:
        names: dict[OperationType, str] = {}
        for definition in self._all_definitions:
            if isinstance(definition, SchemaDefinitionNode):
                names.update({o.operation: o.type.value for o in definition.operation_types})
        return names

    def get_root_type_name(self, operation: OperationType) -> str:
        """Name of the root type for an operation, `Query` etc. unless a schema definition renames it."""
        return self._root_type_names.get(operation, DEFAULT_ROOT_TYPE_NAMES[operation])


def _definition_sort_key(definition: DefinitionNode) -> tuple[bool, str]:
    name = get_definition_name(definition)
    return (name is not None, name.value if name is not None else "")
