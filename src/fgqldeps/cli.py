import json
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import rich_click as click
import yaml
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table
from rich.traceback import install

from fgqldeps import __version__, log
from fgqldeps.analyzer.analysis import analyze_schema_file
from fgqldeps.analyzer.models import AnalysisResult, Dependency
from fgqldeps.analyzer.query import TypeNotFoundError, query_dependencies, query_type_details, query_types
from fgqldeps.config import AnalyzerConfig, load_analyzer_config
from fgqldeps.schema.directive import DirectiveUsage, format_directive
from fgqldeps.schema.loader import SchemaFileSyntaxError
from fgqldeps.store import DEFAULT_CACHE_DIR, AnalysisNotFoundError, AnalysisStore


@dataclass
class CliContext:
    store: AnalysisStore
    config: AnalyzerConfig


pass_cli_context = click.make_pass_decorator(CliContext)


schema_option = click.option(
    "--schema",
    "-s",
    type=click.Path(path_type=Path),
    help="Analyzed schema to query (defaults to the most recently analyzed one)",
)


json_option = click.option(
    "--json",
    "-j",
    "as_json",
    is_flag=True,
    default=False,
    help="Output results as JSON",
)


def schema_identifier(schema: Path) -> str:
    return str(schema.resolve())


def load_result(context: CliContext, schema: Path | None) -> AnalysisResult:
    try:
        return context.store.resolve(schema_identifier(schema) if schema else None)
    except AnalysisNotFoundError as e:
        raise click.ClickException(str(e)) from e


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def print_summary(result: AnalysisResult) -> None:
    metadata = result.metadata
    log.key_value("Schema", metadata.schema_identifier)
    log.key_value("Subgraph", metadata.subgraph)
    log.key_value("Total types", metadata.total_types)
    log.key_value("Total dependencies", metadata.total_dependencies)
    log.key_value("Analyzed at", metadata.analyzed_at.isoformat(timespec="seconds"))


def dependencies_table(dependencies: list[Dependency]) -> Table:
    table = Table(header_style="cyan")
    for column in ("Depending Type", "Depending Field", "Subgraph", "Depended Type", "Depended Field", "Path", "Via"):
        table.add_column(column)
    for dependency in dependencies:
        table.add_row(
            dependency.depending_type,
            dependency.depending_field,
            dependency.depending_subgraph,
            dependency.depended_type,
            dependency.depended_field,
            dependency.field_path,
            f"@{dependency.directive.value}",
        )
    return table


def format_directives(directives: list[DirectiveUsage]) -> str:
    return " ".join(format_directive(directive) for directive in directives)


@click.group(context_settings={"auto_envvar_prefix": "FGQLDEPS"})
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
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML file containing analyzer configuration",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help=f"Directory for stored analyses [default: {DEFAULT_CACHE_DIR}]",
)
@click.version_option(__version__)
@click.pass_context
def cli(
    ctx: click.Context, log_level: str, log_file: Path | None, config_path: Path | None, cache_dir: Path | None
) -> None:
    """Analyze federated GraphQL schemas for field-level dependencies."""
    if log_file:
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setFormatter(logging.Formatter("%(asctime)s:%(levelname)s:%(message)s"))
        log.addHandler(file_handler)

    log.setLevel(log_level.upper())
    if log_level.upper() == "DEBUG":
        _ = install(show_locals=True)

    try:
        config = load_analyzer_config(config_path)
    except (OSError, yaml.YAMLError, TypeError, ValidationError) as e:
        raise click.ClickException(f"Invalid config file: {e}") from e

    store = AnalysisStore(cache_dir or config.cache_dir or DEFAULT_CACHE_DIR)
    ctx.obj = CliContext(store=store, config=config)


@cli.command()
@click.argument("schema", type=click.Path(exists=True, path_type=Path))
@click.option("--force", "-f", is_flag=True, default=False, help="Re-analyze even if a stored analysis exists")
@click.option("--subgraph", type=str, help="Subgraph name (inferred from comments or the file name by default)")
@pass_cli_context
def analyze(context: CliContext, schema: Path, force: bool, subgraph: str | None) -> None:
    """Analyze a federated schema file or directory and store the results."""
    identifier = schema_identifier(schema)

    if context.store.has(identifier) and not force:
        log.warning("Schema already analyzed. Use --force to re-analyze.")
        print_summary(context.store.get(identifier))
        return

    try:
        result = analyze_schema_file(schema, subgraph or context.config.subgraph)
    except SchemaFileSyntaxError as e:
        log.error(f"Invalid schema: {e}")
        sys.exit(1)
    except OSError as e:
        log.error(f"File I/O error: {e}")
        sys.exit(1)

    context.store.put(result)
    log.success("Analysis complete!")
    print_summary(result)


@cli.command()
@click.argument("type_name", metavar="TYPE")
@schema_option
@click.option("--field", "-f", type=str, help="Only dependencies on this field of the type")
@click.option("--direct", "-d", is_flag=True, default=False, help="Only direct dependencies (single-segment paths)")
@click.option(
    "--include-same-type",
    is_flag=True,
    default=False,
    help="Include dependencies declared on the queried type itself",
)
@click.option("--count", "-c", is_flag=True, default=False, help="Only print the number of dependencies")
@json_option
@pass_cli_context
def query(
    context: CliContext,
    type_name: str,
    schema: Path | None,
    field: str | None,
    direct: bool,
    include_same_type: bool,
    count: bool,
    as_json: bool,
) -> None:
    """Query the fields that depend on a type (or one of its fields)."""
    result = load_result(context, schema)
    try:
        dependencies = query_dependencies(result, type_name, field, direct, include_same_type)
    except TypeNotFoundError as e:
        log.error(str(e))
        sys.exit(1)

    target = f"{type_name}.{field}" if field else type_name
    if count:
        if as_json:
            echo_json({"type": type_name, "field": field, "count": len(dependencies)})
        else:
            log.print(f"{len(dependencies)} dependencies on {target}")
        return

    if as_json:
        echo_json([dependency.to_json_dict() for dependency in dependencies])
        return

    if not dependencies:
        log.warning(f"No dependencies found for: {target}")
        return

    log.rule(f"Fields that depend on {target}")
    log.print(dependencies_table(dependencies))


@cli.command()
@schema_option
@json_option
@pass_cli_context
def types(context: CliContext, schema: Path | None, as_json: bool) -> None:
    """List the types of an analyzed schema."""
    result = load_result(context, schema)
    type_names = query_types(result)

    if as_json:
        echo_json(type_names)
        return

    log.rule(f"Types ({len(type_names)})")
    for type_name in type_names:
        type_def = result.types[type_name]
        suffix = " (interface)" if type_def.is_interface else ""
        log.list_item(f"{type_name}{suffix}")


@cli.command()
@click.argument("type_name", metavar="TYPE")
@schema_option
@json_option
@pass_cli_context
def show(context: CliContext, type_name: str, schema: Path | None, as_json: bool) -> None:
    """Show a type with its fields, keys and dependencies."""
    result = load_result(context, schema)
    try:
        details = query_type_details(result, type_name)
    except TypeNotFoundError as e:
        log.error(str(e))
        sys.exit(1)

    if as_json:
        echo_json(details)
        return

    type_def = result.types[type_name]
    log.rule(type_name)
    log.key_value("Kind", "interface" if type_def.is_interface else "object")
    log.key_value("Extension", type_def.is_extension)
    if type_def.interfaces:
        log.key_value("Implements", ", ".join(type_def.interfaces))
    if type_def.key_fields:
        log.key_value("Key fields", ", ".join(type_def.key_fields))
    if type_def.is_interface:
        log.key_value("Implementations", ", ".join(result.implementations.get(type_name, [])) or "-")
    if type_def.directives:
        log.key_value("Directives", escape(format_directives(type_def.directives)))

    log.print("")
    for field_def in type_def.fields.values():
        directives = escape(format_directives(field_def.directives))
        log.list_item(f"{field_def.name}: {field_def.named_type} {directives}".rstrip())

    log.print("")
    log.key_value("Dependencies", len(details["dependencies"]))


@cli.command(name="list")
@pass_cli_context
def list_schemas(context: CliContext) -> None:
    """List analyzed schemas, most recent first."""
    entries = context.store.list_entries()
    if not entries:
        log.warning('No analyzed schemas found. Run "fgqldeps analyze <schema>" first.')
        return

    log.rule("Analyzed schemas")
    for entry in entries:
        log.colored(entry.schema_identifier)
        log.key_value("  Analyzed", entry.analyzed_at)
        log.key_value("  Types", entry.total_types)
        log.key_value("  Dependencies", entry.total_dependencies)


@cli.command()
@pass_cli_context
def clear(context: CliContext) -> None:
    """Remove every stored analysis."""
    context.store.clear()
    log.success("Cache cleared")


if __name__ == "__main__":
    cli()
