"""Structured, located errors and their renderings."""

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from graphql import GraphQLError

from gqltypes.document.location import (
    LineAndColumn,
    Location,
    LocationRange,
    LocationSource,
    from_graphql_source,
    get_end,
    get_filename,
    get_source_text,
    get_start,
    print_location,
)


class ErrorCode(str, Enum):
    MISSING_NAMED_NODE = "MISSING_NAMED_NODE"
    TYPE_CONFLICT = "TYPE_CONFLICT"
    MISSING_FIELD = "MISSING_FIELD"
    MISSING_SELECTION_SET = "MISSING_SELECTION_SET"
    UNEXPECTED_SELECTION_SET = "UNEXPECTED_SELECTION_SET"
    INVALID_OUTPUT_TYPE = "INVALID_OUTPUT_TYPE"
    INVALID_INPUT_TYPE = "INVALID_INPUT_TYPE"
    INVALID_TYPE_CONDITION = "INVALID_TYPE_CONDITION"
    INVALID_ARGS = "INVALID_ARGS"
    NAME_COLLISION = "NAME_COLLISION"
    UNSUPPORTED_NODE = "UNSUPPORTED_NODE"
    GRAPHQL_SYNTAX_ERROR = "GRAPHQL_SYNTAX_ERROR"
    GRAPHQL_SCHEMA_ERROR = "GRAPHQL_SCHEMA_ERROR"
    GRAPHQL_OPERATIONS_ERROR = "GRAPHQL_OPERATIONS_ERROR"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"


class ErrorFormat(str, Enum):
    PRETTY = "pretty"
    CONCISE = "concise"
    JSON = "json"


class GraphQlError(Exception):
    """A user-facing problem with a schema or an operation.

    Args:
        code: Machine readable error kind
        message: Human readable description, without location
        loc: Where the problem was found
        errors: Independent violations aggregated under this error
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        loc: Location,
        errors: Sequence["GraphQlError"] = (),
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.loc = loc
        self.errors = tuple(errors)

    def __str__(self) -> str:
        return format_concise(self)

    @classmethod
    def from_graphql_core(cls, error: GraphQLError, code: ErrorCode, fallback: LocationSource) -> "GraphQlError":
        """Convert a graphql-core syntax or validation error into a located error."""
        loc: Location = fallback
        if error.source is not None:
            source = from_graphql_source(error.source, fallback)
            loc = LocationRange(source=source, start=error.positions[0]) if error.positions else source
        return cls(code, error.message, loc)


def format_concise(error: GraphQlError) -> str:
    """Render `ERROR(CODE): file(line:col): message`, one line per error."""
    lines = [f"ERROR({error.code.value}): {print_location(error.loc)}: {error.message}"]
    for sub_error in error.errors:
        lines.extend(f"  {line}" for line in format_concise(sub_error).splitlines())
    return "\n".join(lines)


def error_to_dict(error: GraphQlError) -> dict[str, Any]:
    result: dict[str, Any] = {"code": error.code.value, "message": error.message}

    filename = get_filename(error.loc)
    if filename is not None:
        result["filename"] = filename

    start = get_start(error.loc)
    result["location"] = {"line": start.line, "column": start.column} if start else None

    if error.errors:
        result["errors"] = [error_to_dict(sub_error) for sub_error in error.errors]
    return result


def format_json(error: GraphQlError) -> str:
    return json.dumps(error_to_dict(error), indent=2)


def code_frame(
    source: str,
    start: LineAndColumn,
    end: LineAndColumn | None = None,
    lines_above: int = 2,
    lines_below: int = 3,
) -> str:
    """Render the lines around `start` with a marker and carets under the range.

    Carets stop at `end` when it is on the same line, otherwise at the end of
    the starting line.

    Example:
          1 | type Query {
        > 2 |   animal: Animal
            |   ^^^^^^
          3 | }
    """
    lines = source.split("\n")
    first = max(start.line - lines_above, 1)
    last = min(start.line + lines_below, len(lines))
    gutter_width = len(str(last))

    frame: list[str] = []
    for number in range(first, last + 1):
        text = lines[number - 1]
        marker = ">" if number == start.line else " "
        frame.append(f"{marker} {number:>{gutter_width}} | {text}".rstrip())

        if number == start.line:
            stop = end.column if end is not None and end.line == start.line else len(text) + 1
            width = max(stop - start.column, 1)
            frame.append(f"  {' ' * gutter_width} | {' ' * (start.column - 1)}{'^' * width}")

    return "\n".join(frame)


def format_pretty(error: GraphQlError) -> str:
    """Render a multi-line report with a code frame for terminals."""
    lines = [f"ERROR({error.code.value}): {print_location(error.loc)}", "", error.message]

    text = get_source_text(error.loc)
    start = get_start(error.loc)
    if text is not None and start is not None:
        lines.extend(["", code_frame(text, start, get_end(error.loc))])

    for sub_error in error.errors:
        lines.append("")
        lines.extend(f"  {line}".rstrip() for line in format_pretty(sub_error).splitlines())

    return "\n".join(lines)


def format_error(error: GraphQlError, error_format: ErrorFormat = ErrorFormat.PRETTY) -> str:
    if error_format == ErrorFormat.CONCISE:
        return format_concise(error)
    if error_format == ErrorFormat.JSON:
        return format_json(error)
    return format_pretty(error)
