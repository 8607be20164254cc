"""Provenance of documents, nodes and errors.

A location is either a bare source or a range of characters inside a source.
Locations are only used for diagnostics. They never take part in equality.
"""

from dataclasses import dataclass
from typing import NamedTuple, assert_never

from graphql import Source


@dataclass(frozen=True)
class FileLocationSource:
    filename: str
    source: str


@dataclass(frozen=True)
class StringLocationSource:
    """GraphQL text that did not come from a named file."""

    source: str


@dataclass(frozen=True)
class SchemaLocationSource:
    """A definition taken from an already built GraphQLSchema."""


LocationSource = FileLocationSource | StringLocationSource | SchemaLocationSource


@dataclass(frozen=True)
class LocationRange:
    source: LocationSource
    start: int
    end: int | None = None


Location = LocationRange | LocationSource


class LineAndColumn(NamedTuple):
    line: int
    column: int


def get_location_source(loc: Location) -> LocationSource:
    match loc:
        case LocationRange():
            return loc.source
        case FileLocationSource() | StringLocationSource() | SchemaLocationSource():
            return loc
        case _:
            assert_never(loc)


def get_source_text(loc: Location) -> str | None:
    source = get_location_source(loc)
    match source:
        case FileLocationSource() | StringLocationSource():
            return source.source
        case SchemaLocationSource():
            return None
        case _:
            assert_never(source)


def get_filename(loc: Location) -> str | None:
    source = get_location_source(loc)
    return source.filename if isinstance(source, FileLocationSource) else None


def index_to_line_and_column(source: str, index: int) -> LineAndColumn:
    """Convert a character offset into a 1-based line and column.

    Offsets past the end of the text are clamped to the end.
    """
    index = max(0, min(index, len(source)))
    line = source.count("\n", 0, index) + 1
    line_start = source.rfind("\n", 0, index) + 1
    return LineAndColumn(line, index - line_start + 1)


def get_start(loc: Location) -> LineAndColumn | None:
    if not isinstance(loc, LocationRange):
        return None
    text = get_source_text(loc)
    if text is None:
        return None
    return index_to_line_and_column(text, loc.start)


def get_end(loc: Location) -> LineAndColumn | None:
    if not isinstance(loc, LocationRange) or loc.end is None:
        return None
    text = get_source_text(loc)
    if text is None:
        return None
    return index_to_line_and_column(text, loc.end)


def print_location(loc: Location) -> str:
    """Render a location as `file(line:col)`.

    Sources without a file name render as `GraphQL String`, and definitions
    taken from a built schema as `GraphQL Schema`.
    """
    source = get_location_source(loc)
    match source:
        case FileLocationSource():
            name = source.filename
        case StringLocationSource():
            name = "GraphQL String"
        case SchemaLocationSource():
            return "GraphQL Schema"
        case _:
            assert_never(source)

    start = get_start(loc)
    if start is None:
        return name
    return f"{name}({start.line}:{start.column})"


def from_graphql_source(source: Source, preferred: LocationSource | None = None) -> LocationSource:
    """Map a graphql-core Source onto a location source.

    The preferred source is reused when it holds the same text, so nodes keep
    pointing at the source a document was built with.
    """
    if preferred is not None and get_source_text(preferred) == source.body:
        return preferred
    return FileLocationSource(filename=source.name, source=source.body)
