import pytest
from graphql import OperationType

from gqltypes.document import DefinitionKind, ErrorCode, GraphQlDocument, GraphQlError, NameCollisionPolicy
from gqltypes.document.location import get_start
from gqltypes.document.nodes import (
    FragmentDefinitionNode,
    NameNode,
    ObjectTypeDefinitionNode,
    OperationDefinitionNode,
)
from tests.conftest import document_from_string


def test_local_definitions_are_ordered_unnamed_first_then_by_name() -> None:
    document = document_from_string(
        """
        query Zebra { a }
        fragment Beta on Query { a }
        { a }
        query Alpha { a }
        """
    )
    names = [d.name.value if d.name else None for d in document.get_definitions()]  # type: ignore[union-attr]
    assert names == [None, "Alpha", "Beta", "Zebra"]


def test_filters_definitions_by_kind(schema_document: GraphQlDocument) -> None:
    object_names = [d.name.value for d in schema_document.object_types.get_many()]
    assert object_names == ["Cat", "Dog", "Mutation", "Person", "Query"]
    assert [d.name.value for d in schema_document.union_types.get_many()] == ["SearchResult"]
    assert [d.name.value for d in schema_document.get_many(DefinitionKind.INPUT_OBJECT)] == [  # type: ignore[union-attr]
        "PetFilter",
        "TreeFilter",
    ]
    assert schema_document.get_one(DefinitionKind.ENUM, "Color") is schema_document.enum_types.get_one("Color")
    assert schema_document.scalar_types.get_one("DateTime") is not None
    assert schema_document.types.get_one("Animal") is schema_document.interface_types.get_one("Animal")


def test_input_types_include_scalars_enums_and_input_objects(schema_document: GraphQlDocument) -> None:
    names = {d.name.value for d in schema_document.input_types.get_many()}
    assert names == {"Color", "DateTime", "PetFilter", "TreeFilter"}


def test_lookup_sees_referenced_definitions_but_listing_does_not(schema_document: GraphQlDocument) -> None:
    document = document_from_string("query GetAnimal { animal { name } }", [schema_document])

    assert document.object_types.get_one("Dog") is schema_document.object_types.get_one("Dog")
    assert document.object_types.get_many() == ()
    assert len(document.object_types.get_many(include_referenced=True)) == 5
    assert len(document.get_definitions()) == 1


def test_get_one_x_reports_the_lookup_site() -> None:
    document = document_from_string("query Q { a }")
    lookup = document_from_string("fragment F on Missing { a }")
    fragment = lookup.fragments.get_one_x(NameNode(loc=lookup.loc, value="F"))
    assert isinstance(fragment, FragmentDefinitionNode)

    with pytest.raises(GraphQlError) as exc_info:
        document.get_type_x(fragment.type_condition)

    assert exc_info.value.code == ErrorCode.MISSING_NAMED_NODE
    assert exc_info.value.message == 'Could not find a Type called "Missing"'
    assert exc_info.value.loc is fragment.type_condition.loc
    assert get_start(exc_info.value.loc) is not None


def test_local_definition_shadows_referenced_one() -> None:
    referenced = document_from_string("fragment Shared on Query { a }")
    document = document_from_string("fragment Shared on Query { b }", [referenced])

    fragment = document.fragments.get_one("Shared")
    assert fragment is document.fragments.get_many()[0]
    assert len(document.fragments.get_many(include_referenced=True)) == 2


def test_error_collision_policy_reports_duplicates() -> None:
    referenced = document_from_string("fragment Shared on Query { a }\nfragment Other on Query { a }")

    with pytest.raises(GraphQlError) as exc_info:
        document_from_string(
            "fragment Shared on Query { b }\nfragment Other on Query { b }",
            [referenced],
            NameCollisionPolicy.ERROR,
        )

    error = exc_info.value
    assert error.code == ErrorCode.NAME_COLLISION
    assert [e.message for e in error.errors] == [
        'There is already a Fragment called "Other"',
        'There is already a Fragment called "Shared"',
    ]


def test_all_definitions_are_deduplicated_by_identity() -> None:
    base = document_from_string("type Query { a: Int }")
    middle = document_from_string("fragment F on Query { a }", [base])
    document = document_from_string("query Q { ...F }", [base, middle])

    all_definitions = document.get_definitions(include_referenced=True)
    assert len(all_definitions) == 3
    assert sum(isinstance(d, ObjectTypeDefinitionNode) for d in all_definitions) == 1


def test_interface_implementations_include_referenced_objects(schema_document: GraphQlDocument) -> None:
    document = document_from_string("type Bird implements Animal { name: String! }", [schema_document])
    animal = document.interface_types.get_one("Animal")
    assert animal is not None

    names = [o.name.value for o in document.get_interface_implementations(animal)]
    assert names == ["Cat", "Dog", "Bird"]
    assert [o.name.value for o in schema_document.get_interface_implementations(animal)] == ["Cat", "Dog"]


def test_root_type_names_default_to_conventional_names(schema_document: GraphQlDocument) -> None:
    assert schema_document.get_root_type_name(OperationType.QUERY) == "Query"
    assert schema_document.get_root_type_name(OperationType.SUBSCRIPTION) == "Subscription"


def test_root_type_names_follow_schema_definition() -> None:
    schema = document_from_string(
        """
        schema { query: Root }
        extend schema { mutation: Change }
        type Root { a: Int }
        type Change { b: Int }
        """
    )
    document = document_from_string("{ a }", [schema])

    assert document.get_root_type_name(OperationType.QUERY) == "Root"
    assert document.get_root_type_name(OperationType.MUTATION) == "Change"
    operation = document.operations.get_many()[0]
    assert isinstance(operation, OperationDefinitionNode)
    assert operation.name is None


def test_interface_implementations_follow_shadowing(schema_document: GraphQlDocument) -> None:
    document = document_from_string(
        "type Dog implements Animal { name: String! wags: Boolean }\ntype Cat { name: String! }",
        [schema_document],
    )
    animal = document.interface_types.get_one("Animal")
    assert animal is not None

    implementations = document.get_interface_implementations(animal)
    assert [o.name.value for o in implementations] == ["Dog"]
    assert implementations[0] is document.object_types.get_one("Dog")
