TYPENAME_FIELD = "__typename"

BUILTIN_SCALAR_TYPES = frozenset({"ID", "String", "Int", "Float", "Boolean"})


def is_introspection_type(type_name: str) -> bool:
    return type_name.startswith("__")


def is_typename_field(field_name: str) -> bool:
    return field_name == TYPENAME_FIELD


def is_builtin_scalar_type(type_name: str) -> bool:
    return type_name in BUILTIN_SCALAR_TYPES
