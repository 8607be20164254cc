from collections.abc import Callable, Sequence
from pathlib import Path

import pytest
from ariadne import gql
from graphql import parse
from hypothesis import strategies as st

from gqltypes.client_types import ClientType, ListType, NullableType, ObjectType, TypeNameType, UnionType
from gqltypes.document import GraphQlDocument, NameCollisionPolicy, StringLocationSource, from_document_node
from gqltypes.document.nodes import (
    BooleanTypeNode,
    EnumTypeDefinitionNode,
    FloatTypeNode,
    IdTypeNode,
    IntTypeNode,
    NameNode,
    ScalarTypeDefinitionNode,
    StringTypeNode,
)


class TestSchemaData:
    TESTS_DATA_DIR: Path = Path(__file__).parent / "data"
    SCHEMA_DIR: Path = TESTS_DATA_DIR / "schema"
    ANIMALS_SCHEMA: Path = SCHEMA_DIR / "animals.graphql"
    MUTATIONS_SCHEMA: Path = SCHEMA_DIR / "mutations.graphql"
    OPERATIONS_DIR: Path = TESTS_DATA_DIR / "operations"
    QUERIES: Path = OPERATIONS_DIR / "queries.graphql"
    FRAGMENTS: Path = OPERATIONS_DIR / "fragments.graphql"
    INVALID_DIR: Path = TESTS_DATA_DIR / "invalid"
    SYNTAX_ERROR: Path = INVALID_DIR / "syntax_error.graphql"
    INVALID_SCHEMA: Path = INVALID_DIR / "invalid_schema.graphql"
    UNKNOWN_FIELD: Path = INVALID_DIR / "unknown_field.graphql"
    CONFIG: Path = TESTS_DATA_DIR / "gqltypes.yaml"


ANIMALS_SCHEMA = gql(
    """
    interface Animal {
      name: String!
    }

    type Dog implements Animal {
      name: String!
      "Whether the dog barks"
      bark: Boolean!
      owner: Person
    }

    type Cat implements Animal {
      name: String!
      lives: Int
    }

    type Person {
      name: String!
      nickname: String
      pets: [Animal!]!
    }

    union SearchResult = Dog | Person

    enum Color {
      RED
      GREEN
    }

    scalar DateTime

    input PetFilter {
      "Only pets with this name"
      name: String
      color: Color = RED
      tags: [String!]
    }

    input TreeFilter {
      and: [TreeFilter!]
    }

    type Query {
      animal: Animal
      animals: [Animal!]!
      dog(id: ID!): Dog
      search(text: String!): [SearchResult!]!
      person: Person!
      now: DateTime!
      color: Color
    }

    type Mutation {
      renamePet(name: String!, filter: PetFilter): Animal
    }
    """
)


def document_from_string(
    text: str,
    referenced_documents: Sequence[GraphQlDocument] = (),
    collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
) -> GraphQlDocument:
    return from_document_node(parse(text), StringLocationSource(source=text), referenced_documents, collisions)


@pytest.fixture(scope="module")
def schema_document() -> GraphQlDocument:
    return document_from_string(ANIMALS_SCHEMA)


@pytest.fixture
def operations_document(schema_document: GraphQlDocument) -> Callable[[str], GraphQlDocument]:
    """Build an operations document referencing the animals schema."""

    def _build(operations: str) -> GraphQlDocument:
        return document_from_string(gql(operations), [schema_document])

    return _build


# Client type strategies
# ----------
TEST_LOCATION = StringLocationSource(source="")


def name_node(value: str) -> NameNode:
    return NameNode(loc=TEST_LOCATION, value=value)


PRIMITIVE_NODE_CLASSES = [BooleanTypeNode, FloatTypeNode, IdTypeNode, IntTypeNode, StringTypeNode]

comparable_leaf_types: st.SearchStrategy[ClientType] = st.one_of(
    st.sampled_from(PRIMITIVE_NODE_CLASSES).map(lambda node_class: node_class(loc=TEST_LOCATION)),
    st.sampled_from(["Dog", "Cat", "Person"]).map(lambda name: TypeNameType(name=name_node(name))),
    st.sampled_from(["DateTime", "JSON"]).map(
        lambda name: ScalarTypeDefinitionNode(loc=TEST_LOCATION, name=name_node(name))
    ),
    st.just("Color").map(lambda name: EnumTypeDefinitionNode(loc=TEST_LOCATION, name=name_node(name))),
)

comparable_member_types: st.SearchStrategy[ClientType] = st.one_of(
    comparable_leaf_types,
    comparable_leaf_types.map(lambda t: ListType(of_type=t)),
)

comparable_client_types: st.SearchStrategy[ClientType] = st.one_of(
    comparable_member_types,
    comparable_member_types.map(lambda t: NullableType(of_type=t)),  # type: ignore[arg-type]
    st.lists(comparable_member_types, min_size=2, max_size=4).map(
        lambda types: UnionType(types=tuple(types))  # type: ignore[arg-type]
    ),
)

client_types: st.SearchStrategy[ClientType] = st.one_of(
    comparable_client_types,
    st.just(()).map(lambda fields: ObjectType(fields=fields)),
)
