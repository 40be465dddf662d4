#!/usr/bin/env python3
"""oas-insight - Entry point."""
import sys
import os
import json
import logging

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import click
from colorama import Fore, init

from config import app_config
from oas_insight.cli.report import ReportPrinter
from oas_insight.exporter.json_exporter import JsonExporter
from oas_insight.introspection import SchemaAnalyzer, load_openapi_spec
from oas_insight.reducer import ArrayResolutionError, ReduceOptions, reduce_response

# Initialize colorama
init(autoreset=True)


def _load_json(path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path} is not valid JSON: {e}")


def _load_catalog(spec_file: str):
    try:
        spec = load_openapi_spec(spec_file)
    except (FileNotFoundError, ValueError) as e:
        raise click.ClickException(str(e))
    return SchemaAnalyzer(max_depth=app_config.schema.max_depth).analyze_openapi_spec(spec)


@click.group()
@click.version_option(version="0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose):
    """oas-insight - Group-by insight and field metadata from OpenAPI-described APIs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else app_config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("response_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--array-path", required=True, help='Path to the list in the response (e.g. "orders")')
@click.option("--group-by", "group_by", help='Group-by path, [] expands arrays (e.g. "items[].title")')
@click.option("--fallback", "fallbacks", multiple=True, help="Fallback group-by path (repeatable)")
@click.option(
    "--normalize",
    type=click.Choice(["lower-trim", "none"]),
    default=app_config.reducer.normalize,
    show_default=True,
)
@click.option("--top-n", type=int, default=app_config.reducer.top_n, show_default=True)
@click.option("--output", type=click.Path(dir_okay=False), help="Write the result to a JSON file (relative to the output dir)")
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON")
def reduce(response_file, array_path, group_by, fallbacks, normalize, top_n, output, as_json):
    """Group the items of a saved JSON response."""
    response = _load_json(response_file)
    options = ReduceOptions(
        array_path=array_path,
        group_by_path=group_by,
        fallback_group_by=list(fallbacks),
        normalize=normalize,
        top_n=top_n,
    )

    try:
        result = reduce_response(response, options)
    except ArrayResolutionError as e:
        raise click.ClickException(
            f"{e}. Check --array-path against the response envelope."
        )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        ReportPrinter().print_reduce_result(result)

    if output:
        written = JsonExporter(app_config.output_dir).export(output, result.to_dict(), kind="reduce")
        click.echo(f"{Fore.GREEN}✅ Result saved to {written}", err=as_json)


@cli.command()
@click.argument("spec_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--tag", "tags", multiple=True, help="Only operations with this tag (repeatable)")
@click.option("--method", "methods", multiple=True, help="Only operations using this method (repeatable)")
@click.option("--search", "query", help="Keyword search query")
@click.option("--limit", type=int, default=10, show_default=True, help="Maximum search results")
def operations(spec_file, tags, methods, query, limit):
    """List or search the operations of an OpenAPI document."""
    catalog = _load_catalog(spec_file)

    if query:
        found = catalog.search(query, tags=list(tags), methods=list(methods), limit=limit)
    else:
        found = catalog.filter_operations(tags=list(tags), methods=list(methods))

    if not found:
        click.echo(f"{Fore.YELLOW}No operations found")
        return
    ReportPrinter().print_operations(found)


@cli.command()
@click.argument("spec_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("operation_id")
@click.option("--output", type=click.Path(dir_okay=False), help="Write the description to a JSON file (relative to the output dir)")
@click.option("--json", "as_json", is_flag=True, help="Print the description as JSON")
def schema(spec_file, operation_id, output, as_json):
    """Describe parameters and body field metadata of an operation."""
    catalog = _load_catalog(spec_file)

    try:
        described = catalog.describe_operation(operation_id)
    except ValueError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(described.to_dict(), indent=2, ensure_ascii=False, default=str))
    else:
        ReportPrinter().print_operation_schema(described)

    if output:
        written = JsonExporter(app_config.output_dir).export(output, described.to_dict(), kind="schema")
        click.echo(f"{Fore.GREEN}✅ Description saved to {written}", err=as_json)


if __name__ == "__main__":
    cli()
