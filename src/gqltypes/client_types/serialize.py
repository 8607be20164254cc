"""Language-neutral renderings of client types.

`client_type_to_dict` produces the JSON shape handed to code emitters.
`format_client_type` produces a compact one-line notation for logs, e.g.
`{animal: {name: String} | null}`.
"""

from typing import Any, assert_never

from gqltypes.client_types.types import (
    ClientField,
    ClientType,
    ListType,
    NullableType,
    ObjectType,
    TypeNameType,
    UnionType,
)
from gqltypes.document.nodes import (
    PRIMITIVE_TYPE_NODES,
    BooleanTypeNode,
    EnumTypeDefinitionNode,
    FloatTypeNode,
    IdTypeNode,
    IntTypeNode,
    ScalarTypeDefinitionNode,
    StringTypeNode,
)

PRIMITIVE_TYPE_NAMES = {node_class: name for name, node_class in PRIMITIVE_TYPE_NODES.items()}


def client_type_to_dict(client_type: ClientType) -> dict[str, Any]:
    match client_type:
        case NullableType():
            return {"kind": "nullable", "of_type": client_type_to_dict(client_type.of_type)}
        case ListType():
            return {"kind": "list", "of_type": client_type_to_dict(client_type.of_type)}
        case UnionType():
            return {"kind": "union", "types": [client_type_to_dict(t) for t in client_type.types]}
        case ObjectType():
            result: dict[str, Any] = {"kind": "object"}
            if client_type.name is not None:
                result["name"] = client_type.name.value
            result["fields"] = [_field_to_dict(f) for f in client_type.fields]
            return result
        case TypeNameType():
            return {"kind": "typename", "name": client_type.name.value}
        case BooleanTypeNode() | FloatTypeNode() | IdTypeNode() | IntTypeNode() | StringTypeNode():
            return {"kind": "primitive", "name": PRIMITIVE_TYPE_NAMES[type(client_type)]}
        case ScalarTypeDefinitionNode():
            return {"kind": "scalar", "name": client_type.name.value}
        case EnumTypeDefinitionNode():
            return {
                "kind": "enum",
                "name": client_type.name.value,
                "values": [v.name.value for v in client_type.values],
            }
        case _:
            assert_never(client_type)


def _field_to_dict(client_field: ClientField) -> dict[str, Any]:
    result: dict[str, Any] = {"name": client_field.name.value, "type": client_type_to_dict(client_field.type)}
    if client_field.description is not None:
        result["description"] = client_field.description.value
    return result


def format_client_type(client_type: ClientType) -> str:
    match client_type:
        case NullableType():
            inner = format_client_type(client_type.of_type)
            if isinstance(client_type.of_type, UnionType):
                inner = f"({inner})"
            return f"{inner} | null"
        case ListType():
            return f"[{format_client_type(client_type.of_type)}]"
        case UnionType():
            return " | ".join(format_client_type(t) for t in client_type.types)
        case ObjectType():
            fields = ", ".join(f"{f.name.value}: {format_client_type(f.type)}" for f in client_type.fields)
            prefix = f"{client_type.name.value} " if client_type.name is not None else ""
            return f"{prefix}{{{fields}}}"
        case TypeNameType():
            return f'"{client_type.name.value}"'
        case BooleanTypeNode() | FloatTypeNode() | IdTypeNode() | IntTypeNode() | StringTypeNode():
            return PRIMITIVE_TYPE_NAMES[type(client_type)]
        case ScalarTypeDefinitionNode() | EnumTypeDefinitionNode():
            return client_type.name.value
        case _:
            assert_never(client_type)
