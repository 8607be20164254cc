import json

from gqltypes.client_types import (
    ClientField,
    ClientType,
    ListType,
    NullableType,
    ObjectType,
    TypeNameType,
    UnionType,
    client_type_to_dict,
    format_client_type,
)
from gqltypes.document.nodes import (
    EnumTypeDefinitionNode,
    EnumValueDefinitionNode,
    IdTypeNode,
    IntTypeNode,
    ScalarTypeDefinitionNode,
    StringTypeNode,
    StringValueNode,
)
from tests.conftest import TEST_LOCATION, name_node

DATE_TIME = ScalarTypeDefinitionNode(loc=TEST_LOCATION, name=name_node("DateTime"))
COLOR = EnumTypeDefinitionNode(
    loc=TEST_LOCATION,
    name=name_node("Color"),
    values=(
        EnumValueDefinitionNode(loc=TEST_LOCATION, name=name_node("RED")),
        EnumValueDefinitionNode(loc=TEST_LOCATION, name=name_node("GREEN")),
    ),
)


def field(name: str, client_type: ClientType, description: str | None = None) -> ClientField:
    return ClientField(
        name=name_node(name),
        loc=TEST_LOCATION,
        type=client_type,
        description=StringValueNode(loc=TEST_LOCATION, value=description) if description else None,
    )


PET = ObjectType(
    fields=(
        field("__typename", TypeNameType(name=name_node("Dog"))),
        field("id", IdTypeNode(loc=TEST_LOCATION), "Unique id"),
        field("born", NullableType(of_type=DATE_TIME)),
        field("colors", ListType(of_type=COLOR)),
    )
)


def test_object_to_dict() -> None:
    assert client_type_to_dict(PET) == {
        "kind": "object",
        "fields": [
            {"name": "__typename", "type": {"kind": "typename", "name": "Dog"}},
            {"name": "id", "type": {"kind": "primitive", "name": "ID"}, "description": "Unique id"},
            {"name": "born", "type": {"kind": "nullable", "of_type": {"kind": "scalar", "name": "DateTime"}}},
            {
                "name": "colors",
                "type": {"kind": "list", "of_type": {"kind": "enum", "name": "Color", "values": ["RED", "GREEN"]}},
            },
        ],
    }


def test_named_object_to_dict() -> None:
    filter_type = ObjectType(name=name_node("PetFilter"), fields=(field("limit", IntTypeNode(loc=TEST_LOCATION)),))
    assert client_type_to_dict(filter_type) == {
        "kind": "object",
        "name": "PetFilter",
        "fields": [{"name": "limit", "type": {"kind": "primitive", "name": "Int"}}],
    }


def test_union_to_dict_is_json_serializable() -> None:
    union = UnionType(types=(StringTypeNode(loc=TEST_LOCATION), PET))
    data = client_type_to_dict(NullableType(of_type=union))

    assert data["kind"] == "nullable"
    assert [t["kind"] for t in data["of_type"]["types"]] == ["primitive", "object"]
    assert json.loads(json.dumps(data)) == data


def test_format_object() -> None:
    assert format_client_type(PET) == '{__typename: "Dog", id: ID, born: DateTime | null, colors: [Color]}'


def test_format_nullable_union_is_parenthesized() -> None:
    union = UnionType(types=(TypeNameType(name=name_node("Cat")), TypeNameType(name=name_node("Dog"))))
    assert format_client_type(union) == '"Cat" | "Dog"'
    assert format_client_type(NullableType(of_type=union)) == '("Cat" | "Dog") | null'
    assert format_client_type(ListType(of_type=NullableType(of_type=union))) == '[("Cat" | "Dog") | null]'


def test_format_empty_and_named_objects() -> None:
    assert format_client_type(ObjectType(fields=())) == "{}"
    assert format_client_type(ObjectType(name=name_node("Empty"), fields=())) == "Empty {}"
