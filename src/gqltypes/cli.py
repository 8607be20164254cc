import json
import logging
import sys
from pathlib import Path
from typing import Any

import rich_click as click
from pydantic import ValidationError
from rich.traceback import install
from yaml import YAMLError

from gqltypes import __version__, log
from gqltypes.client_types import ResolvedDefinition, client_type_to_dict, format_client_type, resolve_document
from gqltypes.config import GqlTypesConfig, load_config
from gqltypes.document.document import GraphQlDocument
from gqltypes.document.errors import ErrorFormat, GraphQlError, format_error
from gqltypes.loader import LoadedSchema, load_operations_document, load_schema_document

ANONYMOUS_OPERATION = "<anonymous>"


def schema_option(required: bool) -> Any:
    return click.option(
        "--schema",
        "-s",
        "schemas",
        type=click.Path(exists=True, path_type=Path),
        required=required,
        multiple=True,
        help="The GraphQL schema file or directory containing schema files. Can be specified multiple times.",
    )


operations_option = click.option(
    "--operations",
    "-q",
    "operations",
    type=click.Path(exists=True, path_type=Path),
    multiple=True,
    help="GraphQL file or directory with operations and fragments. Can be specified multiple times.",
)


error_format_option = click.option(
    "--error-format",
    "-f",
    type=click.Choice([f.value for f in ErrorFormat], case_sensitive=False),
    default=None,
    help="How to print errors [default: pretty]",
)


config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file containing gqltypes configuration",
)


def merge_config(
    config: GqlTypesConfig, schemas: tuple[Path, ...], operations: tuple[Path, ...], error_format: str | None
) -> GqlTypesConfig:
    """Command line values win over configured ones."""
    update: dict[str, Any] = {}
    if schemas:
        update["schema_paths"] = list(schemas)
    if operations:
        update["operations"] = list(operations)
    if error_format:
        update["error_format"] = ErrorFormat(error_format.lower())
    return config.model_copy(update=update)


def load_documents(config: GqlTypesConfig) -> tuple[LoadedSchema, GraphQlDocument | None]:
    if not config.schema_paths:
        raise click.UsageError("No schema given, pass --schema or set 'schema' in the config file")

    schema = load_schema_document(config.schema_paths, config.name_collisions)
    if not config.operations:
        return schema, None
    return schema, load_operations_document(config.operations, schema, config.name_collisions)


def exit_with_error(error: GraphQlError, error_format: ErrorFormat) -> None:
    log.print(format_error(error, error_format), markup=False)
    sys.exit(1)


def resolved_to_dict(resolved: list[ResolvedDefinition]) -> dict[str, dict[str, Any]]:
    """Group resolved definitions by kind, then name.

    Operations and fragments live in separate namespaces, so one name may
    appear under both `query` and `fragment`.
    """
    by_kind: dict[str, dict[str, Any]] = {}
    for r in resolved:
        by_kind.setdefault(r.kind, {})[r.name or ANONYMOUS_OPERATION] = {
            "result": client_type_to_dict(r.result),
            "variables": client_type_to_dict(r.variables),
        }
    return by_kind


@click.group(context_settings={"auto_envvar_prefix": "gqltypes"})
@click.option(
    "-l",
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    help="Log level",
    show_default=True,
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    help="Log file",
)
@click.version_option(__version__)
def cli(log_level: str, log_file: Path | None) -> None:
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)


@click.command()
@schema_option(required=False)
@operations_option
@error_format_option
@config_option
def validate(
    schemas: tuple[Path, ...], operations: tuple[Path, ...], error_format: str | None, config_path: Path | None
) -> None:
    """Validate a schema and, optionally, operations against it."""
    try:
        config = merge_config(load_config(config_path), schemas, operations, error_format)
    except (OSError, YAMLError, TypeError, ValidationError) as e:
        log.error(f"Invalid config: {e}")
        sys.exit(1)

    try:
        schema, document = load_documents(config)
    except GraphQlError as e:
        exit_with_error(e, config.error_format)
        return

    log.success(f"Schema is valid ({len(schema.schema.type_map)} types)")
    if document is not None:
        log.success(
            f"Operations are valid ({len(document.operations.get_many())} operation(s), "
            f"{len(document.fragments.get_many())} fragment(s))"
        )


@click.command()
@schema_option(required=False)
@operations_option
@error_format_option
@config_option
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, writable=True, path_type=Path),
    required=False,
    help="Output file, printed to stdout when omitted",
)
def resolve(
    schemas: tuple[Path, ...],
    operations: tuple[Path, ...],
    error_format: str | None,
    config_path: Path | None,
    output: Path | None,
) -> None:
    """Resolve the result and variable types of every operation and fragment."""
    try:
        config = merge_config(load_config(config_path), schemas, operations, error_format)
    except (OSError, YAMLError, TypeError, ValidationError) as e:
        log.error(f"Invalid config: {e}")
        sys.exit(1)

    if not config.schema_paths:
        raise click.UsageError("No schema given, pass --schema or set 'schema' in the config file")
    if not config.operations:
        raise click.UsageError("No operations given, pass --operations or set 'operations' in the config file")

    try:
        schema = load_schema_document(config.schema_paths, config.name_collisions)
        document = load_operations_document(config.operations, schema, config.name_collisions)
        resolved = resolve_document(document)
    except GraphQlError as e:
        exit_with_error(e, config.error_format)
        return

    for r in resolved:
        log.debug(f"{r.kind} {r.name or ANONYMOUS_OPERATION}: {format_client_type(r.result)}")

    result = json.dumps(resolved_to_dict(resolved), indent=2)
    if output:
        try:
            output.write_text(result + "\n", encoding="utf-8")
        except OSError as e:
            log.error(f"Could not write {output}: {e}")
            sys.exit(1)
        log.success(f"Resolved {len(resolved)} definition(s) into {output}")
    else:
        click.echo(result)


cli.add_command(validate)
cli.add_command(resolve)

if __name__ == "__main__":
    cli()
