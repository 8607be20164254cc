from pathlib import Path

import pytest
from graphql import OperationType

from gqltypes.client_types import format_client_type, resolve_document
from gqltypes.document import ErrorCode, FileLocationSource, GraphQlError, NameCollisionPolicy
from gqltypes.document.location import get_filename, get_start
from gqltypes.loader import (
    LoadedSchema,
    build_schema_from_sources,
    load_operations_document,
    load_schema_document,
    read_sources,
    resolve_graphql_files,
)
from tests.conftest import TestSchemaData


@pytest.fixture(scope="module")
def loaded_schema() -> LoadedSchema:
    return load_schema_document([TestSchemaData.SCHEMA_DIR])


def write(directory: Path, name: str, text: str) -> Path:
    path = directory / name
    path.write_text(text, encoding="utf-8")
    return path


class TestResolveGraphqlFiles:
    def test_directory_is_expanded_and_sorted(self) -> None:
        assert resolve_graphql_files([TestSchemaData.SCHEMA_DIR]) == [
            TestSchemaData.ANIMALS_SCHEMA,
            TestSchemaData.MUTATIONS_SCHEMA,
        ]

    def test_duplicates_are_removed(self) -> None:
        files = resolve_graphql_files([TestSchemaData.ANIMALS_SCHEMA, TestSchemaData.SCHEMA_DIR])
        assert files == [TestSchemaData.ANIMALS_SCHEMA, TestSchemaData.MUTATIONS_SCHEMA]

    def test_missing_path(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.graphql"
        with pytest.raises(GraphQlError) as exc_info:
            resolve_graphql_files([missing])

        assert exc_info.value.code == ErrorCode.FILE_NOT_FOUND
        assert get_filename(exc_info.value.loc) == str(missing)

    def test_sources_are_named_after_files(self) -> None:
        sources = read_sources([TestSchemaData.ANIMALS_SCHEMA])
        assert [source.name for source in sources] == [str(TestSchemaData.ANIMALS_SCHEMA)]


class TestLoadSchema:
    def test_extensions_are_merged(self, loaded_schema: LoadedSchema) -> None:
        query = loaded_schema.document.object_types.get_one("Query")
        assert query is not None
        assert [f.name.value for f in query.fields] == ["animal", "search", "cat"]

    def test_definitions_point_at_their_files(self, loaded_schema: LoadedSchema) -> None:
        query = loaded_schema.document.object_types.get_one("Query")
        assert query is not None
        assert get_filename(query.loc) == str(TestSchemaData.ANIMALS_SCHEMA)

        cat = query.get_field("cat")
        assert cat is not None
        assert get_filename(cat.loc) == str(TestSchemaData.MUTATIONS_SCHEMA)

    def test_descriptions_and_root_types(self, loaded_schema: LoadedSchema) -> None:
        animal = loaded_schema.document.interface_types.get_one("Animal")
        assert animal is not None and animal.description is not None
        assert animal.description.value == "A named pet"
        assert loaded_schema.document.get_root_type_name(OperationType.MUTATION) == "Mutation"

    def test_introspection_types_are_skipped(self, loaded_schema: LoadedSchema) -> None:
        assert loaded_schema.document.scalar_types.get_one("String") is not None
        assert loaded_schema.document.types.get_one("__Schema") is None
        assert "__Schema" in loaded_schema.schema.type_map

    def test_syntax_error(self) -> None:
        with pytest.raises(GraphQlError) as exc_info:
            load_schema_document([TestSchemaData.SYNTAX_ERROR])

        error = exc_info.value
        assert error.code == ErrorCode.GRAPHQL_SYNTAX_ERROR
        assert error.message.startswith("Syntax Error")
        assert get_filename(error.loc) == str(TestSchemaData.SYNTAX_ERROR)
        start = get_start(error.loc)
        assert start is not None and start.line == 3

    def test_syntax_errors_of_every_file_are_reported(self, tmp_path: Path) -> None:
        write(tmp_path, "a.graphql", "type A {")
        write(tmp_path, "b.graphql", "type B { b: }")

        with pytest.raises(GraphQlError) as exc_info:
            load_schema_document([tmp_path])

        error = exc_info.value
        assert error.code == ErrorCode.GRAPHQL_SYNTAX_ERROR
        assert error.message == "Found 2 syntax error(s)"
        assert [get_filename(e.loc) for e in error.errors] == [
            str(tmp_path / "a.graphql"),
            str(tmp_path / "b.graphql"),
        ]

    def test_unknown_types(self) -> None:
        with pytest.raises(GraphQlError) as exc_info:
            load_schema_document([TestSchemaData.INVALID_SCHEMA])

        error = exc_info.value
        assert error.code == ErrorCode.GRAPHQL_SCHEMA_ERROR
        assert error.message == "Found 2 schema error(s)"
        assert len(error.errors) == 2
        assert "Animal" in error.errors[0].message
        assert "Person" in error.errors[1].message
        assert all(get_filename(e.loc) == str(TestSchemaData.INVALID_SCHEMA) for e in error.errors)

    def test_schema_without_query_type(self, tmp_path: Path) -> None:
        text = "type Dog { name: String }"
        path = write(tmp_path, "schema.graphql", text)

        with pytest.raises(GraphQlError) as exc_info:
            build_schema_from_sources(read_sources([path]))

        error = exc_info.value
        assert error.code == ErrorCode.GRAPHQL_SCHEMA_ERROR
        assert error.message == "Query root type must be provided."
        assert error.loc == FileLocationSource(filename=str(path), source=text)

    def test_name_collision_policy_is_applied(self, tmp_path: Path) -> None:
        path = write(tmp_path, "schema.graphql", "type Query { a: Int }")
        loaded = load_schema_document([path], NameCollisionPolicy.ERROR)
        assert loaded.document.object_types.get_one("Query") is not None


class TestLoadOperations:
    def test_operations_and_fragments_across_files(self, loaded_schema: LoadedSchema) -> None:
        document = load_operations_document([TestSchemaData.OPERATIONS_DIR], loaded_schema)

        assert [o.name.value for o in document.operations.get_many() if o.name] == ["GetAnimal", "RenamePet", "Search"]
        assert [f.name.value for f in document.fragments.get_many()] == ["DogFields"]

        fragment = document.fragments.get_one("DogFields")
        assert fragment is not None
        assert get_filename(fragment.loc) == str(TestSchemaData.FRAGMENTS)

    def test_loaded_operations_resolve(self, loaded_schema: LoadedSchema) -> None:
        document = load_operations_document([TestSchemaData.OPERATIONS_DIR], loaded_schema)
        resolved = {r.name: r for r in resolve_document(document)}

        assert format_client_type(resolved["GetAnimal"].result) == (
            '{animal: ({__typename: "Cat", name: String} | '
            '{__typename: "Dog", name: String, bark: Boolean, owner: {name: String} | null}) | null}'
        )
        assert format_client_type(resolved["Search"].variables) == "{text: String | null}"
        assert format_client_type(resolved["RenamePet"].variables) == (
            "{name: String, filter: PetFilter {name: String | null, color: Color | null} | null}"
        )
        assert format_client_type(resolved["DogFields"].result) == "{bark: Boolean, owner: {name: String} | null}"

    def test_fragments_may_be_unused(self, loaded_schema: LoadedSchema) -> None:
        document = load_operations_document([TestSchemaData.FRAGMENTS], loaded_schema)
        assert document.operations.get_many() == ()

    def test_unknown_field(self, loaded_schema: LoadedSchema) -> None:
        with pytest.raises(GraphQlError) as exc_info:
            load_operations_document([TestSchemaData.UNKNOWN_FIELD], loaded_schema)

        error = exc_info.value
        assert error.code == ErrorCode.GRAPHQL_OPERATIONS_ERROR
        assert error.message.startswith("Cannot query field")
        assert "color" in error.message and "Animal" in error.message
        assert get_filename(error.loc) == str(TestSchemaData.UNKNOWN_FIELD)
        start = get_start(error.loc)
        assert start is not None and start.line == 3

    def test_type_definitions_are_rejected(self, loaded_schema: LoadedSchema, tmp_path: Path) -> None:
        path = write(tmp_path, "operations.graphql", "type Extra { a: Int }\nquery Q { animal { name } }")

        with pytest.raises(GraphQlError) as exc_info:
            load_operations_document([path], loaded_schema)

        assert exc_info.value.code == ErrorCode.GRAPHQL_OPERATIONS_ERROR
        assert get_filename(exc_info.value.loc) == str(path)

    def test_syntax_error(self, loaded_schema: LoadedSchema) -> None:
        with pytest.raises(GraphQlError) as exc_info:
            load_operations_document([TestSchemaData.SYNTAX_ERROR], loaded_schema)
        assert exc_info.value.code == ErrorCode.GRAPHQL_SYNTAX_ERROR
