"""
`libtoggle errors` - what has been failing lately, and for which groups.

Reads ~/.libtoggle/errors.jsonl (written by every command that exits 1)
and renders three tables: counts per error type, counts per kind/group,
and the most recent entries.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

import click
from rich.console import Console
from rich.table import Table

from libtoggle.error_logging import ErrorLogger, ErrorType
from libtoggle.json_output import SCHEMA_VERSION, to_json


def _when(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp.rstrip('Z')).strftime('%Y-%m-%d %H:%M')
    except ValueError:
        return timestamp[:16] or '?'


def _target(entry: Dict[str, Any]) -> str:
    """kind/group an entry was about, or '-' for commands without a group."""
    context = entry.get('context') or {}
    group = context.get('group')
    if not group:
        return '-'
    return f"{context.get('kind', '?')}/{group}"


def _counts_table(title: str, heading: str, counts: Dict[str, int], total: int) -> Table:
    table = Table(title=title)
    table.add_column(heading, style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    for name, count in sorted(counts.items(), key=lambda item: (-item[1], item[0])):
        table.add_row(name, str(count), f"{count / total:.0%}")
    return table


def _recent_table(recent: List[Dict[str, Any]]) -> Table:
    table = Table(title="Recent errors")
    table.add_column("When")
    table.add_column("Command", style="cyan")
    table.add_column("Group")
    table.add_column("Type", style="red")
    table.add_column("Message", overflow="fold")
    for entry in recent:
        table.add_row(
            _when(entry.get('timestamp', '')),
            entry.get('subcommand', '?'),
            _target(entry),
            entry.get('error_type', '?'),
            entry.get('message', ''),
        )
    return table


def register_error_commands(cli):
    """Register the errors command with the CLI."""

    @cli.command()
    @click.option('--days', default=7, type=int, help='Number of days to include in stats (default: 7)')
    @click.option('--type', 'error_type', default=None, type=click.Choice([t.value for t in ErrorType]),
                  help='Only show errors of this type')
    @click.option('--limit', default=10, type=int, help='Number of recent errors to show (default: 10)')
    @click.option('--json', 'output_json', is_flag=True, help='Output as JSON for programmatic access')
    def errors(days: int, error_type: Optional[str], limit: int, output_json: bool):
        """Show which operations and groups have been failing.

        \b
        Examples:
          libtoggle errors                   # Last 7 days
          libtoggle errors --days 30         # Last 30 days
          libtoggle errors --type COLLISION  # Only move/import collisions
          libtoggle errors --json            # Machine readable
        """
        error_log = ErrorLogger()
        stats = error_log.get_error_stats(days=days, error_type=error_type)
        recent = error_log.get_recent_errors(limit=limit, error_type=error_type)

        if output_json:
            click.echo(to_json({
                "schema_version": SCHEMA_VERSION,
                "days": days,
                "error_type": error_type,
                "stats": stats,
                "recent_errors": recent,
            }))
            return

        total = stats['total']
        if total == 0:
            label = f"{error_type} errors" if error_type else "errors"
            click.echo(f"No {label} in the last {days} days.")
            return

        console = Console()
        console.print(_counts_table(f"Errors by type (last {days} days)", "Type", stats['by_type'], total))
        if stats['by_group']:
            console.print(_counts_table("Errors by group", "Group", stats['by_group'], total))
        if recent:
            console.print(_recent_table(recent))
