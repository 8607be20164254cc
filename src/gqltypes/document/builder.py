from collections.abc import Iterable, Sequence
from typing import cast

from graphql import (
    DirectiveLocation,
    GraphQLArgument,
    GraphQLDirective,
    GraphQLEnumType,
    GraphQLEnumValue,
    GraphQLField,
    GraphQLInputField,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLList,
    GraphQLNamedType,
    GraphQLNonNull,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLType,
    GraphQLUnionType,
    OperationType,
    Source,
    Undefined,
    is_enum_type,
    is_input_object_type,
    is_interface_type,
    is_list_type,
    is_non_null_type,
    is_object_type,
    is_scalar_type,
    is_union_type,
)
from graphql.language import ast

from gqltypes import log
from gqltypes.document.document import GraphQlDocument, NameCollisionPolicy
from gqltypes.document.errors import ErrorCode, GraphQlError
from gqltypes.document.graphql_type import is_builtin_scalar_type, is_introspection_type
from gqltypes.document.location import Location, LocationRange, LocationSource, from_graphql_source
from gqltypes.document.nodes import (
    PRIMITIVE_TYPE_NODES,
    ArgumentNode,
    BooleanValueNode,
    ConstantValueNode,
    DefinitionNode,
    DirectiveDefinitionNode,
    DirectiveLocationNode,
    DirectiveNode,
    EnumTypeDefinitionNode,
    EnumValueDefinitionNode,
    EnumValueNode,
    FieldDefinitionNode,
    FieldNode,
    FloatValueNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    InputObjectTypeDefinitionNode,
    InputValueDefinitionNode,
    InterfaceTypeDefinitionNode,
    IntValueNode,
    ListTypeNode,
    ListValueNode,
    NameNode,
    NonNullTypeNode,
    NullableTypeNode,
    NullValueNode,
    ObjectFieldNode,
    ObjectTypeDefinitionNode,
    ObjectValueNode,
    OperationDefinitionNode,
    RootOperationTypeNode,
    ScalarTypeDefinitionNode,
    SchemaDefinitionNode,
    SelectionNode,
    SelectionSetNode,
    StringValueNode,
    TypeDefinitionNode,
    TypeNode,
    UnionTypeDefinitionNode,
    ValueNode,
    VariableDefinitionNode,
    VariableNode,
)


class DocumentBuilder:
    """
    Builds canonical documents from graphql-core syntax trees and schemas.

    The builder never parses text. Every node it produces carries a location:
    a range into the text the graphql-core node was parsed from, or the
    builder's own source when the graphql-core node has no location.

    Args:
        source: Source attached to nodes without a parsed location
    """

    def __init__(self, source: LocationSource) -> None:
        self._source = source
        self._sources: dict[int, tuple[Source, LocationSource]] = {}

    def from_document_node(
        self,
        node: ast.DocumentNode,
        referenced_documents: Sequence[GraphQlDocument] = (),
        collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
    ) -> GraphQlDocument:
        definitions = [self._from_definition_node(d) for d in node.definitions]
        log.debug(f"Built {len(definitions)} definition(s) from a parsed document")
        return GraphQlDocument(definitions, self._location(node.loc), referenced_documents, collisions)

    def from_schema(
        self,
        schema: GraphQLSchema,
        referenced_documents: Sequence[GraphQlDocument] = (),
        collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
    ) -> GraphQlDocument:
        definitions: list[DefinitionNode] = [self._from_graphql_directive(d) for d in schema.directives]
        definitions.extend(
            self._from_graphql_named_type(named_type)
            for named_type in schema.type_map.values()
            if not is_introspection_type(named_type.name)
        )
        schema_definition = self._from_graphql_root_types(schema)
        if schema_definition is not None:
            definitions.append(schema_definition)

        log.debug(f"Built {len(definitions)} definition(s) from a GraphQL schema")
        return GraphQlDocument(definitions, self._source, referenced_documents, collisions)

    # Locations
    # ----------
    def _location(self, loc: ast.Location | None) -> Location:
        if loc is None or loc.source is None:
            return self._source
        return LocationRange(source=self._location_source(loc.source), start=loc.start, end=loc.end)

    def _location_source(self, source: Source) -> LocationSource:
        cached = self._sources.get(id(source))
        if cached is None:
            cached = (source, from_graphql_source(source, self._source))
            self._sources[id(source)] = cached
        return cached[1]

    def _ast_location(self, node: ast.Node | None) -> Location:
        return self._location(node.loc) if node is not None else self._source

    # Parsed documents
    # ----------
    def _from_definition_node(self, node: ast.DefinitionNode) -> DefinitionNode:
        match node:
            case ast.OperationDefinitionNode():
                return self._from_operation_definition_node(node)
            case ast.FragmentDefinitionNode():
                return self._from_fragment_definition_node(node)
            case ast.ScalarTypeDefinitionNode() | ast.ScalarTypeExtensionNode():
                return ScalarTypeDefinitionNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    description=self._description(node),
                    extend=isinstance(node, ast.ScalarTypeExtensionNode),
                    directives=self._from_directive_nodes(node.directives),
                )
            case ast.ObjectTypeDefinitionNode() | ast.ObjectTypeExtensionNode():
                return ObjectTypeDefinitionNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    fields=tuple(self._from_field_definition_node(f) for f in node.fields or ()),
                    interfaces=tuple(self._from_name_node(i.name) for i in node.interfaces or ()),
                    description=self._description(node),
                    extend=isinstance(node, ast.ObjectTypeExtensionNode),
                    directives=self._from_directive_nodes(node.directives),
                )
            case ast.InterfaceTypeDefinitionNode() | ast.InterfaceTypeExtensionNode():
                return InterfaceTypeDefinitionNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    fields=tuple(self._from_field_definition_node(f) for f in node.fields or ()),
                    interfaces=tuple(self._from_name_node(i.name) for i in node.interfaces or ()),
                    description=self._description(node),
                    extend=isinstance(node, ast.InterfaceTypeExtensionNode),
                    directives=self._from_directive_nodes(node.directives),
                )
            case ast.UnionTypeDefinitionNode() | ast.UnionTypeExtensionNode():
                return UnionTypeDefinitionNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    types=tuple(self._from_name_node(t.name) for t in node.types or ()),
                    description=self._description(node),
                    extend=isinstance(node, ast.UnionTypeExtensionNode),
                    directives=self._from_directive_nodes(node.directives),
                )
            case ast.EnumTypeDefinitionNode() | ast.EnumTypeExtensionNode():
                return EnumTypeDefinitionNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    values=tuple(self._from_enum_value_definition_node(v) for v in node.values or ()),
                    description=self._description(node),
                    extend=isinstance(node, ast.EnumTypeExtensionNode),
                    directives=self._from_directive_nodes(node.directives),
                )
            case ast.InputObjectTypeDefinitionNode() | ast.InputObjectTypeExtensionNode():
                return InputObjectTypeDefinitionNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    fields=tuple(self._from_input_value_definition_node(f) for f in node.fields or ()),
                    description=self._description(node),
                    extend=isinstance(node, ast.InputObjectTypeExtensionNode),
                    directives=self._from_directive_nodes(node.directives),
                )
            case ast.DirectiveDefinitionNode():
                return DirectiveDefinitionNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    locations=tuple(
                        DirectiveLocationNode(loc=self._location(n.loc), value=DirectiveLocation[n.value])
                        for n in node.locations
                    ),
                    arguments=tuple(self._from_input_value_definition_node(a) for a in node.arguments or ()),
                    description=self._from_optional_string_value_node(node.description),
                    is_repeatable=node.repeatable,
                )
            case ast.SchemaDefinitionNode() | ast.SchemaExtensionNode():
                return SchemaDefinitionNode(
                    loc=self._location(node.loc),
                    operation_types=tuple(
                        RootOperationTypeNode(
                            loc=self._location(o.loc),
                            operation=o.operation,
                            type=self._from_name_node(o.type.name),
                        )
                        for o in node.operation_types or ()
                    ),
                    description=self._description(node),
                    extend=isinstance(node, ast.SchemaExtensionNode),
                    directives=self._from_directive_nodes(node.directives),
                )
            case _:
                raise GraphQlError(
                    ErrorCode.UNSUPPORTED_NODE,
                    f"Unsupported node: {node.kind}",
                    self._location(node.loc),
                )

    def _description(self, node: ast.Node) -> StringValueNode | None:
        # Extension nodes have no description
        return self._from_optional_string_value_node(getattr(node, "description", None))

    def _from_operation_definition_node(self, node: ast.OperationDefinitionNode) -> OperationDefinitionNode:
        return OperationDefinitionNode(
            loc=self._location(node.loc),
            operation=node.operation,
            name=self._from_name_node(node.name) if node.name else None,
            selection_set=self._from_selection_set_node(node.selection_set),
            variable_definitions=tuple(
                self._from_variable_definition_node(v) for v in node.variable_definitions or ()
            ),
            directives=self._from_directive_nodes(node.directives),
        )

    def _from_fragment_definition_node(self, node: ast.FragmentDefinitionNode) -> FragmentDefinitionNode:
        return FragmentDefinitionNode(
            loc=self._location(node.loc),
            name=self._from_name_node(node.name),
            type_condition=self._from_name_node(node.type_condition.name),
            selection_set=self._from_selection_set_node(node.selection_set),
            # Fragment variables are experimental in graphql-core
            variable_definitions=tuple(
                self._from_variable_definition_node(v) for v in node.variable_definitions or ()
            ),
            directives=self._from_directive_nodes(node.directives),
        )

    def _from_variable_definition_node(self, node: ast.VariableDefinitionNode) -> VariableDefinitionNode:
        return VariableDefinitionNode(
            loc=self._location(node.loc),
            variable=self._from_variable_node(node.variable),
            type=self._from_type_node(node.type),
            default_value=self._from_value_node(node.default_value) if node.default_value else None,
            directives=self._from_directive_nodes(node.directives),
        )

    def _from_name_node(self, node: ast.NameNode) -> NameNode:
        return NameNode(loc=self._location(node.loc), value=node.value)

    def _from_selection_set_node(self, node: ast.SelectionSetNode) -> SelectionSetNode:
        return SelectionSetNode(
            loc=self._location(node.loc),
            selections=tuple(self._from_selection_node(s) for s in node.selections),
        )

    def _from_selection_node(self, node: ast.SelectionNode) -> SelectionNode:
        match node:
            case ast.FieldNode():
                return FieldNode(
                    loc=self._location(node.loc),
                    alias=self._from_name_node(node.alias or node.name),
                    name=self._from_name_node(node.name),
                    arguments=tuple(self._from_argument_node(a) for a in node.arguments or ()),
                    directives=self._from_directive_nodes(node.directives),
                    selection_set=self._from_selection_set_node(node.selection_set) if node.selection_set else None,
                )
            case ast.FragmentSpreadNode():
                return FragmentSpreadNode(
                    loc=self._location(node.loc),
                    name=self._from_name_node(node.name),
                    directives=self._from_directive_nodes(node.directives),
                )
            case ast.InlineFragmentNode():
                return InlineFragmentNode(
                    loc=self._location(node.loc),
                    type_condition=self._from_name_node(node.type_condition.name) if node.type_condition else None,
                    selection_set=self._from_selection_set_node(node.selection_set),
                    directives=self._from_directive_nodes(node.directives),
                )
            case _:
                raise TypeError(f"Unexpected selection node: {node.kind}")

    def _from_argument_node(self, node: ast.ArgumentNode) -> ArgumentNode:
        return ArgumentNode(
            loc=self._location(node.loc),
            name=self._from_name_node(node.name),
            value=self._from_value_node(node.value),
        )

    def _from_directive_nodes(self, nodes: Iterable[ast.DirectiveNode] | None) -> tuple[DirectiveNode, ...]:
        return tuple(
            DirectiveNode(
                loc=self._location(node.loc),
                name=self._from_name_node(node.name),
                arguments=tuple(self._from_argument_node(a) for a in node.arguments or ()),
            )
            for node in nodes or ()
        )

    def _from_field_definition_node(self, node: ast.FieldDefinitionNode) -> FieldDefinitionNode:
        return FieldDefinitionNode(
            loc=self._location(node.loc),
            name=self._from_name_node(node.name),
            type=self._from_type_node(node.type),
            arguments=tuple(self._from_input_value_definition_node(a) for a in node.arguments or ()),
            description=self._from_optional_string_value_node(node.description),
            directives=self._from_directive_nodes(node.directives),
        )

    def _from_input_value_definition_node(self, node: ast.InputValueDefinitionNode) -> InputValueDefinitionNode:
        return InputValueDefinitionNode(
            loc=self._location(node.loc),
            name=self._from_name_node(node.name),
            type=self._from_type_node(node.type),
            description=self._from_optional_string_value_node(node.description),
            default_value=self._from_value_node(node.default_value) if node.default_value else None,
            directives=self._from_directive_nodes(node.directives),
        )

    def _from_enum_value_definition_node(self, node: ast.EnumValueDefinitionNode) -> EnumValueDefinitionNode:
        return EnumValueDefinitionNode(
            loc=self._location(node.loc),
            name=self._from_name_node(node.name),
            description=self._from_optional_string_value_node(node.description),
            directives=self._from_directive_nodes(node.directives),
        )

    def _from_type_node(self, node: ast.TypeNode) -> TypeNode:
        if isinstance(node, ast.NonNullTypeNode):
            return self._from_nullable_type_node_as_non_null(node.type)
        return NullableTypeNode(
            loc=self._location(node.loc),
            of_type=self._from_nullable_type_node_as_non_null(node),
        )

    def _from_nullable_type_node_as_non_null(self, node: ast.TypeNode) -> NonNullTypeNode:
        match node:
            case ast.ListTypeNode():
                return ListTypeNode(loc=self._location(node.loc), of_type=self._from_type_node(node.type))
            case ast.NamedTypeNode():
                primitive = PRIMITIVE_TYPE_NODES.get(node.name.value)
                if primitive is not None:
                    return primitive(loc=self._location(node.loc))
                return self._from_name_node(node.name)
            case _:
                raise TypeError(f"Unexpected type node: {node.kind}")

    def _from_value_node(self, node: ast.ValueNode) -> ValueNode:
        loc = self._location(node.loc)
        match node:
            case ast.VariableNode():
                return self._from_variable_node(node)
            case ast.IntValueNode():
                return IntValueNode(loc=loc, value=node.value)
            case ast.FloatValueNode():
                return FloatValueNode(loc=loc, value=node.value)
            case ast.StringValueNode():
                return StringValueNode(loc=loc, value=node.value, block=bool(node.block))
            case ast.BooleanValueNode():
                return BooleanValueNode(loc=loc, value=node.value)
            case ast.NullValueNode():
                return NullValueNode(loc=loc)
            case ast.EnumValueNode():
                return EnumValueNode(loc=loc, value=node.value)
            case ast.ListValueNode():
                return ListValueNode(loc=loc, values=tuple(self._from_value_node(v) for v in node.values))
            case ast.ObjectValueNode():
                return ObjectValueNode(
                    loc=loc,
                    fields=tuple(
                        ObjectFieldNode(
                            loc=self._location(f.loc),
                            name=self._from_name_node(f.name),
                            value=self._from_value_node(f.value),
                        )
                        for f in node.fields
                    ),
                )
            case _:
                raise TypeError(f"Unexpected value node: {node.kind}")

    def _from_optional_string_value_node(self, node: ast.StringValueNode | None) -> StringValueNode | None:
        if node is None:
            return None
        return StringValueNode(loc=self._location(node.loc), value=node.value, block=bool(node.block))

    def _from_variable_node(self, node: ast.VariableNode) -> VariableNode:
        return VariableNode(loc=self._location(node.loc), name=self._from_name_node(node.name))

    # Built schemas
    # ----------
    def _from_graphql_root_types(self, schema: GraphQLSchema) -> SchemaDefinitionNode | None:
        root_types = [
            (OperationType.QUERY, schema.query_type),
            (OperationType.MUTATION, schema.mutation_type),
            (OperationType.SUBSCRIPTION, schema.subscription_type),
        ]
        operation_types = tuple(
            RootOperationTypeNode(loc=self._source, operation=operation, type=self._name_node(root_type.name))
            for operation, root_type in root_types
            if root_type is not None
        )
        if not operation_types:
            return None
        return SchemaDefinitionNode(loc=self._ast_location(schema.ast_node), operation_types=operation_types)

    def _from_graphql_directive(self, directive: GraphQLDirective) -> DirectiveDefinitionNode:
        loc = self._ast_location(directive.ast_node)
        return DirectiveDefinitionNode(
            loc=loc,
            name=self._name_node(directive.name, loc),
            locations=tuple(DirectiveLocationNode(loc=loc, value=value) for value in directive.locations),
            arguments=tuple(self._from_graphql_input_value(name, arg) for name, arg in directive.args.items()),
            description=self._string_value(directive.description, loc),
            is_repeatable=directive.is_repeatable,
        )

    def _from_graphql_named_type(self, named_type: GraphQLNamedType) -> TypeDefinitionNode:
        loc = self._ast_location(named_type.ast_node)
        name = self._name_node(named_type.name, loc)
        description = self._string_value(named_type.description, loc)

        if is_scalar_type(named_type):
            return ScalarTypeDefinitionNode(loc=loc, name=name, description=description)
        if is_object_type(named_type):
            object_type = cast(GraphQLObjectType, named_type)
            return ObjectTypeDefinitionNode(
                loc=loc,
                name=name,
                fields=tuple(self._from_graphql_field(n, f) for n, f in object_type.fields.items()),
                interfaces=tuple(self._name_node(i.name, loc) for i in object_type.interfaces),
                description=description,
            )
        if is_interface_type(named_type):
            interface_type = cast(GraphQLInterfaceType, named_type)
            return InterfaceTypeDefinitionNode(
                loc=loc,
                name=name,
                fields=tuple(self._from_graphql_field(n, f) for n, f in interface_type.fields.items()),
                interfaces=tuple(self._name_node(i.name, loc) for i in interface_type.interfaces),
                description=description,
            )
        if is_union_type(named_type):
            union_type = cast(GraphQLUnionType, named_type)
            return UnionTypeDefinitionNode(
                loc=loc,
                name=name,
                types=tuple(self._name_node(t.name, loc) for t in union_type.types),
                description=description,
            )
        if is_enum_type(named_type):
            enum_type = cast(GraphQLEnumType, named_type)
            return EnumTypeDefinitionNode(
                loc=loc,
                name=name,
                values=tuple(self._from_graphql_enum_value(n, v) for n, v in enum_type.values.items()),
                description=description,
            )
        if is_input_object_type(named_type):
            input_type = cast(GraphQLInputObjectType, named_type)
            return InputObjectTypeDefinitionNode(
                loc=loc,
                name=name,
                fields=tuple(self._from_graphql_input_value(n, f) for n, f in input_type.fields.items()),
                description=description,
            )
        raise TypeError(f"Unexpected GraphQL type: {type(named_type).__name__}")

    def _from_graphql_enum_value(self, name: str, value: GraphQLEnumValue) -> EnumValueDefinitionNode:
        loc = self._ast_location(value.ast_node)
        return EnumValueDefinitionNode(
            loc=loc,
            name=self._name_node(name, loc),
            description=self._string_value(value.description, loc),
        )

    def _from_graphql_field(self, name: str, field: GraphQLField) -> FieldDefinitionNode:
        loc = self._ast_location(field.ast_node)
        return FieldDefinitionNode(
            loc=loc,
            name=self._name_node(name, loc),
            type=self._type_of(field),
            arguments=tuple(self._from_graphql_input_value(n, a) for n, a in field.args.items()),
            description=self._string_value(field.description, loc),
        )

    def _from_graphql_input_value(
        self, name: str, value: GraphQLInputField | GraphQLArgument
    ) -> InputValueDefinitionNode:
        loc = self._ast_location(value.ast_node)
        return InputValueDefinitionNode(
            loc=loc,
            name=self._name_node(name, loc),
            type=self._type_of(value),
            description=self._string_value(value.description, loc),
            default_value=self._default_value(value, loc),
        )

    def _default_value(self, value: GraphQLInputField | GraphQLArgument, loc: Location) -> ValueNode | None:
        if value.ast_node is not None and value.ast_node.default_value is not None:
            return self._from_value_node(value.ast_node.default_value)
        if value.default_value is Undefined:
            return None
        if value.default_value is None:
            return NullValueNode(loc=loc)
        return ConstantValueNode(loc=loc, value=value.default_value)

    def _type_of(self, element: GraphQLField | GraphQLInputField | GraphQLArgument) -> TypeNode:
        # Prefer the parsed type reference, it points at the exact text
        if element.ast_node is not None:
            return self._from_type_node(element.ast_node.type)
        return self._from_graphql_type(element.type, self._source)

    def _from_graphql_type(self, graphql_type: GraphQLType, loc: Location) -> TypeNode:
        if is_non_null_type(graphql_type):
            return self._from_nullable_graphql_type_as_non_null(
                cast(GraphQLNonNull, graphql_type).of_type, loc
            )
        return NullableTypeNode(loc=loc, of_type=self._from_nullable_graphql_type_as_non_null(graphql_type, loc))

    def _from_nullable_graphql_type_as_non_null(self, graphql_type: GraphQLType, loc: Location) -> NonNullTypeNode:
        if is_list_type(graphql_type):
            return ListTypeNode(
                loc=loc, of_type=self._from_graphql_type(cast(GraphQLList, graphql_type).of_type, loc)
            )
        named_type = cast(GraphQLNamedType, graphql_type)
        primitive = PRIMITIVE_TYPE_NODES.get(named_type.name)
        if primitive is not None and is_builtin_scalar_type(named_type.name):
            return primitive(loc=loc)
        return self._name_node(named_type.name, loc)

    def _name_node(self, value: str, loc: Location | None = None) -> NameNode:
        return NameNode(loc=loc if loc is not None else self._source, value=value)

    def _string_value(self, value: str | None, loc: Location) -> StringValueNode | None:
        if value is None:
            return None
        return StringValueNode(loc=loc, value=value)


def from_document_node(
    node: ast.DocumentNode,
    source: LocationSource,
    referenced_documents: Sequence[GraphQlDocument] = (),
    collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
) -> GraphQlDocument:
    """Build a document from a parsed graphql-core document.

    Args:
        node: Parsed document, with locations
        source: Used for error messages when a node has no location
        referenced_documents: Documents searched when looking up names
        collisions: Name collision policy

    Returns:
        The indexed document
    """
    return DocumentBuilder(source).from_document_node(node, referenced_documents, collisions)


def from_schema(
    schema: GraphQLSchema,
    source: LocationSource,
    referenced_documents: Sequence[GraphQlDocument] = (),
    collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
) -> GraphQlDocument:
    """Build a document holding every directive and named type of a built schema.

    Introspection types are left out. Types, fields and arguments that still
    carry their graphql-core `ast_node` keep its location.
    """
    return DocumentBuilder(source).from_schema(schema, referenced_documents, collisions)
