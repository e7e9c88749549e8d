"""Command-line interface for filterexpr.

This module provides commands for rendering filters as canonical JSON and
for filtering JSON records locally.
"""

import json
from typing import Any, NoReturn

import click

from filterexpr import __version__
from filterexpr.core.config import get_settings
from filterexpr.core.logging import LoggingContext, configure_logging, get_logger
from filterexpr.core.predicates import PredicateError, create_predicate, to_function, to_json_string
from filterexpr.domain.entities.entity_type import (
    NAMING_CONVENTIONS,
    EntityType,
    StringComparisonOptions,
)

logger = get_logger(__name__)


def parse_filter(text: str) -> Any:
    """Filter input from the command line: JSON text, or a passthrough string."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def load_schema(path: str | None) -> EntityType | None:
    """Load an entity type document, applying the configured naming convention."""
    if path is None:
        return None
    with open(path, encoding="utf-8") as f:
        document = json.load(f)
    try:
        schema = EntityType.from_dict(document)
    except ValueError as e:
        raise click.ClickException(f"Invalid schema {path}: {e}") from e
    if "namingConvention" not in document:
        schema.naming_convention = NAMING_CONVENTIONS[get_settings().naming_convention]
    return schema


@click.group()
@click.version_option(version=__version__, prog_name="filterexpr")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    default=None,
    help="Set log level (overrides FILTEREXPR_LOG_LEVEL)",
)
def cli(log_level: str | None) -> None:
    """filterexpr - Filter expressions for entity queries.

    Filters are given as JSON (object or tuple form) or as a passthrough
    string.
    """
    settings = get_settings()
    if log_level is not None:
        settings = settings.model_copy(update={"log_level": log_level})
    configure_logging(settings)


@cli.command()
@click.argument("filter_text", metavar="FILTER")
@click.option(
    "--schema",
    "schema_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Entity type document to validate against",
)
@click.option(
    "--server",
    is_flag=True,
    default=False,
    help="Translate property paths to server names",
)
@click.option(
    "--explicit-data-type/--no-explicit-data-type",
    default=None,
    help="Serialize literals as {value, dataType}",
)
def serialize(
    filter_text: str, schema_path: str | None, server: bool, explicit_data_type: bool | None
) -> None:
    """Print the canonical JSON form of FILTER."""
    if explicit_data_type is None:
        explicit_data_type = get_settings().explicit_data_type

    with LoggingContext(command="serialize"):
        schema = load_schema(schema_path)
        try:
            predicate = create_predicate(parse_filter(filter_text))
            output = to_json_string(
                predicate,
                {"schema": schema, "server": server, "explicit_data_type": explicit_data_type},
            )
        except PredicateError as e:
            raise click.ClickException(str(e)) from e

    click.echo(output)


@cli.command()
@click.argument("filter_text", metavar="FILTER")
@click.argument("records_file", metavar="RECORDS", type=click.File("r", encoding="utf-8"))
@click.option(
    "--schema",
    "schema_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Entity type document to validate against",
)
@click.option(
    "--case-sensitive/--case-insensitive",
    default=None,
    help="Override the string comparison policy",
)
def evaluate(
    filter_text: str, records_file: Any, schema_path: str | None, case_sensitive: bool | None
) -> None:
    """Print the records in RECORDS (a JSON array, or - for stdin) matching FILTER."""
    try:
        records = json.load(records_file)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"RECORDS is not valid JSON: {e}") from e
    if not isinstance(records, list):
        raise click.ClickException("RECORDS must be a JSON array")

    with LoggingContext(command="evaluate"):
        schema = load_schema(schema_path)
        context: dict[str, Any] = {"schema": schema}
        if case_sensitive is not None:
            context["comparison_options"] = StringComparisonOptions(
                case_sensitive=case_sensitive,
                trim_before_compare=get_settings().string_trim_before_compare,
            )
        try:
            predicate = create_predicate(parse_filter(filter_text))
            matches = to_function(predicate, context)
            selected = [record for record in records if matches(record)]
        except PredicateError as e:
            raise click.ClickException(str(e)) from e

        logger.info("Filtered records", total=len(records), matched=len(selected))

    click.echo(json.dumps(selected))


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `filterexpr` command is run
    or when using `python -m filterexpr`.
    """
    cli()


if __name__ == "__main__":
    main()
