"""Read GraphQL files, validate them with graphql-core and build documents.

Unlike resolution, loading reports every problem it finds: syntax errors of
all files, then all schema validation errors, then all operation validation
errors, each batch aggregated into one `GraphQlError`.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path

from graphql import (
    DocumentNode,
    GraphQLError,
    GraphQLSchema,
    NoUnusedFragmentsRule,
    Source,
    build_ast_schema,
    is_executable_definition_node,
    parse,
    specified_rules,
    validate,
    validate_schema,
)
from graphql.validation.validate import validate_sdl

from gqltypes import log
from gqltypes.document.builder import from_document_node, from_schema
from gqltypes.document.document import GraphQlDocument, NameCollisionPolicy
from gqltypes.document.errors import ErrorCode, GraphQlError
from gqltypes.document.location import (
    FileLocationSource,
    LocationRange,
    LocationSource,
    SchemaLocationSource,
    StringLocationSource,
    from_graphql_source,
)

GRAPHQL_FILE_PATTERN = "*.graphql"

# Operations files may hold fragments that only other files spread
OPERATION_RULES = [rule for rule in specified_rules if rule is not NoUnusedFragmentsRule]


@dataclass(frozen=True)
class LoadedSchema:
    schema: GraphQLSchema
    document: GraphQlDocument


def resolve_graphql_files(paths: Iterable[Path]) -> list[Path]:
    """Resolve a list of paths (files and directories) into a flat list of unique GraphQL files.

    Args:
        paths: List of file or directory paths

    Returns:
        Flat list of unique GraphQL file paths (deduplicated and sorted)

    Raises:
        GraphQlError: FILE_NOT_FOUND if a path does not exist
    """
    resolved_files: set[Path] = set()

    for path in paths:
        if path.is_file():
            resolved_files.add(path)
        elif path.is_dir():
            resolved_files.update(path.rglob(GRAPHQL_FILE_PATTERN))
        else:
            raise GraphQlError(
                ErrorCode.FILE_NOT_FOUND,
                f'The path "{path}" does not exist',
                FileLocationSource(filename=str(path), source=""),
            )

    return sorted(resolved_files)


def read_sources(paths: Iterable[Path]) -> list[Source]:
    sources = [Source(path.read_text(encoding="utf-8"), str(path)) for path in resolve_graphql_files(paths)]
    log.debug(f"Read {len(sources)} GraphQL file(s)")
    return sources


def combined_source(sources: Sequence[Source]) -> LocationSource:
    """Location source for a document made of several files."""
    if len(sources) == 1:
        return from_graphql_source(sources[0])
    return StringLocationSource(source="\n".join(source.body for source in sources))


def parse_sources(sources: Sequence[Source]) -> DocumentNode:
    """Parse every source and concatenate their definitions.

    Nodes keep pointing at the source they were parsed from.

    Raises:
        GraphQlError: GRAPHQL_SYNTAX_ERROR for the files that do not parse
    """
    document_nodes: list[DocumentNode] = []
    errors: list[GraphQlError] = []
    for source in sources:
        try:
            document_nodes.append(parse(source))
        except GraphQLError as e:
            errors.append(
                GraphQlError.from_graphql_core(e, ErrorCode.GRAPHQL_SYNTAX_ERROR, from_graphql_source(source))
            )

    if errors:
        raise _aggregate(ErrorCode.GRAPHQL_SYNTAX_ERROR, "syntax", errors)

    return DocumentNode(definitions=tuple(d for node in document_nodes for d in node.definitions))


def build_schema_from_sources(sources: Sequence[Source]) -> GraphQLSchema:
    """Build and validate a schema from SDL sources.

    Raises:
        GraphQlError: GRAPHQL_SYNTAX_ERROR or GRAPHQL_SCHEMA_ERROR
    """
    document_node = parse_sources(sources)
    fallback = combined_source(sources)

    sdl_errors = validate_sdl(document_node)
    if sdl_errors:
        raise _aggregate(
            ErrorCode.GRAPHQL_SCHEMA_ERROR, "schema", _convert(sdl_errors, ErrorCode.GRAPHQL_SCHEMA_ERROR, fallback)
        )

    schema = build_ast_schema(document_node, assume_valid_sdl=True)
    schema_errors = validate_schema(schema)
    if schema_errors:
        raise _aggregate(
            ErrorCode.GRAPHQL_SCHEMA_ERROR, "schema", _convert(schema_errors, ErrorCode.GRAPHQL_SCHEMA_ERROR, fallback)
        )

    log.info(f"Successfully built the GraphQL schema with {len(schema.type_map)} types")
    return schema


def load_schema_document(
    paths: Iterable[Path], collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW
) -> LoadedSchema:
    """Load schema files into a validated schema and its document.

    Type extensions are already merged by graphql-core when the document is
    built, and definitions keep the locations of the files they come from.
    """
    schema = build_schema_from_sources(read_sources(paths))
    return LoadedSchema(schema=schema, document=from_schema(schema, SchemaLocationSource(), collisions=collisions))


def load_operations_document(
    paths: Iterable[Path],
    schema: LoadedSchema,
    collisions: NameCollisionPolicy = NameCollisionPolicy.SHADOW,
) -> GraphQlDocument:
    """Load operation and fragment files validated against `schema`.

    All files form one document, so fragments may be spread across files.

    Raises:
        GraphQlError: GRAPHQL_SYNTAX_ERROR or GRAPHQL_OPERATIONS_ERROR
    """
    sources = read_sources(paths)
    document_node = parse_sources(sources)
    fallback = combined_source(sources)

    errors: list[GraphQlError] = []
    for definition in document_node.definitions:
        if not is_executable_definition_node(definition):
            loc = definition.loc
            errors.append(
                GraphQlError(
                    ErrorCode.GRAPHQL_OPERATIONS_ERROR,
                    f"Operations files may only contain operations and fragments, found {definition.kind}",
                    LocationRange(source=from_graphql_source(loc.source), start=loc.start, end=loc.end)
                    if loc is not None and loc.source is not None
                    else fallback,
                )
            )
    if errors:
        raise _aggregate(ErrorCode.GRAPHQL_OPERATIONS_ERROR, "operations", errors)

    validation_errors = validate(schema.schema, document_node, OPERATION_RULES)
    if validation_errors:
        raise _aggregate(
            ErrorCode.GRAPHQL_OPERATIONS_ERROR,
            "operations",
            _convert(validation_errors, ErrorCode.GRAPHQL_OPERATIONS_ERROR, fallback),
        )

    document = from_document_node(document_node, fallback, [schema.document], collisions)
    log.info(
        f"Loaded {len(document.operations.get_many())} operation(s) "
        f"and {len(document.fragments.get_many())} fragment(s)"
    )
    return document


def _convert(errors: Iterable[GraphQLError], code: ErrorCode, fallback: LocationSource) -> list[GraphQlError]:
    return [GraphQlError.from_graphql_core(error, code, fallback) for error in errors]


def _aggregate(code: ErrorCode, what: str, errors: Sequence[GraphQlError]) -> GraphQlError:
    if len(errors) == 1:
        return errors[0]
    return GraphQlError(code, f"Found {len(errors)} {what} error(s)", errors[0].loc, errors)
