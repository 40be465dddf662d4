"""Console reports for the oas-insight CLI."""
from typing import List

import click
from colorama import Fore, Style

from oas_insight.introspection.schema_analyzer import Operation, OperationSchema
from oas_insight.reducer.aggregator import ReduceResult


class ReportPrinter:
    """Renders results with colours."""

    BAR_WIDTH = 30

    def print_header(self, title: str):
        """Print a section header."""
        click.echo(f"\n{Fore.CYAN}{'━' * 45}")
        click.echo(f"{Fore.CYAN}{title}")
        click.echo(f"{Fore.CYAN}{'━' * 45}{Style.RESET_ALL}\n")

    def print_reduce_result(self, result: ReduceResult):
        """Print grouped counts as a bar table."""
        self.print_header(f"Groups for '{result.array_path}'")

        if result.group_by_path_used:
            click.echo(f"Group-by path: {result.group_by_path_used}")
        click.echo(f"Items: {result.total}   Missing: {result.missing}")

        if result.note:
            click.echo(f"{Fore.YELLOW}⚠️  {result.note}")

        width = max((len(g.key) for g in result.top), default=0)
        for group in result.top:
            bar = "█" * round(group.percent / 100 * self.BAR_WIDTH)
            click.echo(
                f"  {group.key:<{width}}  {group.count:>6}  {group.percent:6.2f}%  {Fore.GREEN}{bar}{Style.RESET_ALL}"
            )

        hidden = len(result.groups) - len(result.top)
        if hidden > 0:
            click.echo(f"  ... +{hidden} more groups")

        if result.multi_valued:
            click.echo(f"{Fore.YELLOW}Some items contributed several keys; counts exceed the item total")
        if result.incomplete:
            click.echo(f"{Fore.YELLOW}⚠️  Response looks paginated: counts may cover only part of the collection")

    def print_operations(self, operations: List[Operation]):
        """Print an operation listing grouped by path."""
        self.print_header(f"Operations ({len(operations)})")

        by_path = {}
        for op in operations:
            by_path.setdefault(op.path, []).append(op)

        for path in sorted(by_path):
            click.echo(f"📍 {path}")
            for op in by_path[path]:
                click.echo(f"  {op.method.upper():7} | {op.operation_id}  {Fore.WHITE}{op.summary}{Style.RESET_ALL}")
            click.echo()

    def print_operation_schema(self, described: OperationSchema):
        """Print parameters and body field metadata of an operation."""
        op = described.operation
        self.print_header(f"{op.method.upper()} {op.path}  ({op.operation_id})")

        if op.summary:
            click.echo(op.summary)
        click.echo(f"Example path: {op.example_path}")
        if described.example_url:
            click.echo(f"Example URL:  {described.example_url}")

        for location in ("path", "query", "header"):
            params = op.params_in(location)
            if not params:
                continue
            click.echo(f"\n{Fore.CYAN}{location.capitalize()} parameters:{Style.RESET_ALL}")
            for p in params:
                flag = f"{Fore.RED}*{Style.RESET_ALL}" if p.required else " "
                click.echo(f"  {flag} {p.name}: {p.type or 'any'}")

        body = described.body
        if described.request_body_schema is None:
            return

        click.echo(f"\n{Fore.CYAN}Body fields:{Style.RESET_ALL}")
        paths = list(dict.fromkeys([*body.required, *body.enums, *body.examples, *body.read_only_fields]))
        if not paths:
            click.echo("  (no field metadata)")
        for path in paths:
            notes = []
            if path in body.required:
                notes.append(f"{Fore.RED}required{Style.RESET_ALL}")
            if path in body.read_only_fields:
                notes.append("read-only")
            if path in body.enums:
                notes.append(f"enum={body.enums[path]}")
            if path in body.examples:
                notes.append(f"example={body.examples[path]!r}")
            click.echo(f"  ├─ {path}: {', '.join(notes)}")
