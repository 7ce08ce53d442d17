import click
from typing import List, Optional

from rich.console import Console
from rich.table import Table

from libtoggle import __version__
from libtoggle.cli_context import RESTART_HINT, get_library, kind_label, reports_errors
from libtoggle.inspector import GroupStatus
from libtoggle.json_output import serialize_drift, serialize_status, to_json
from libtoggle.kinds import AssetKind

# Import command modules for registration
from libtoggle.organize_commands import register_organize_commands
from libtoggle.import_commands import register_import_commands
from libtoggle.error_commands import register_error_commands


@click.group()
@click.version_option(version=__version__, prog_name="libtoggle")
@click.option('--root', type=click.Path(file_okay=False), envvar='LIBTOGGLE_ROOT',
              help='Project root holding .library/ and .claude/ (default: auto-detect)')
@click.pass_context
def cli(ctx, root):
    """Switch groups of Claude commands and skills on and off.

    \b
    Assets live in .library/<kind>s/<group>/ and are exposed to Claude
    Code as symlinks in .claude/<kind>s/.
    """
    ctx.ensure_object(dict)
    ctx.obj['root'] = root


register_organize_commands(cli)
register_import_commands(cli)
register_error_commands(cli)


def print_status_table(console: Console, kind: AssetKind, statuses: List[GroupStatus]) -> None:
    if not statuses:
        console.print(f"[yellow]No {kind.value} groups in {kind.dirname} library[/yellow]")
        return

    table = Table(title=f"{kind_label(kind)} Library")
    table.add_column("Group", style="cyan")
    table.add_column("Active", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Status")

    for status in statuses:
        state = "[green]ON[/green]" if status.enabled else "[dim]off[/dim]"
        table.add_row(status.name, str(status.active), str(status.total), state)

    console.print(table)


def _make_toggle_command(kind: AssetKind):
    @click.argument('group', required=False)
    @click.argument('action', required=False, type=click.Choice(['on', 'off', 'list']))
    @click.pass_context
    @reports_errors
    def toggle(ctx, group: Optional[str], action: Optional[str]):
        library = get_library(ctx)
        console = Console()

        if group is None or group == 'list' or action == 'list':
            print_status_table(console, kind, library.status(kind))
            return

        if action is None:
            raise click.UsageError(f"Missing action for group '{group}' (use on or off)")

        if action == 'on':
            count = library.enable(kind, group)
            click.echo(f"Enabled {count} {group} {kind.dirname} (symlinked)")
        else:
            count = library.disable(kind, group)
            click.echo(f"Disabled {count} {group} {kind.dirname} (symlinks removed)")

        click.echo()
        print_status_table(console, kind, library.status(kind))
        click.echo(RESTART_HINT)

    toggle.__doc__ = f"""Turn a {kind.value} group on or off.

    \b
    Examples:
      libtoggle {kind.dirname}                # Show {kind.value} groups
      libtoggle {kind.dirname} GROUP on       # Symlink every {kind.value} in GROUP
      libtoggle {kind.dirname} GROUP off      # Remove GROUP's symlinks
    """
    return toggle


cli.command(name='commands')(_make_toggle_command(AssetKind.COMMAND))
cli.command(name='skills')(_make_toggle_command(AssetKind.SKILL))


@cli.command(name='list')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON for programmatic access')
@click.pass_context
@reports_errors
def list_groups(ctx, output_json: bool):
    """Show active vs available assets for every group."""
    library = get_library(ctx)
    statuses = {kind: library.status(kind) for kind in AssetKind}

    if output_json:
        click.echo(to_json(serialize_status(statuses)))
        return

    console = Console()
    for kind, kind_statuses in statuses.items():
        print_status_table(console, kind, kind_statuses)


@cli.command()
@click.option('--prune', is_flag=True, help='Remove symlinks whose targets are gone')
@click.option('--json', 'output_json', is_flag=True, help='Output as JSON for programmatic access')
@click.pass_context
@reports_errors
def doctor(ctx, prune: bool, output_json: bool):
    """Report drift between the runtime links and the library.

    \b
    stray   - real files/directories in .claude/ (organize with move-command/move-skill)
    broken  - symlinks whose target no longer exists
    orphan  - symlinks pointing outside every known group
    """
    library = get_library(ctx)

    pruned = {}
    if prune:
        for kind in AssetKind:
            pruned[kind] = library.inspectors[kind].prune_broken()

    reports = [library.drift(kind) for kind in AssetKind]

    if output_json:
        click.echo(to_json(serialize_drift(reports)))
        return

    for kind, names in pruned.items():
        for name in names:
            click.echo(f"Removed broken {kind.value} link: {name}")

    if all(report.clean for report in reports):
        click.echo("✅ No drift: runtime directories hold only links into the library")
        return

    for report in reports:
        for label, names in (("stray", report.stray), ("broken", report.broken), ("orphan", report.orphan)):
            for name in names:
                click.echo(f"  [{report.kind.value}] {name} ({label})")


@cli.command()
@click.option('--limit', default=20, type=int, help='Number of entries to show (default: 20)')
@click.option('--operation', default=None,
              help='Filter by operation (enable, disable, move, register, import)')
@click.option('--level', default=None, type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Only show entries of this level, e.g. ERROR for failed links')
@click.pass_context
def history(ctx, limit: int, operation: Optional[str], level: Optional[str]):
    """Show recent library operations from the operation log."""
    library = get_library(ctx)
    if library.event_log is None:
        click.echo("Operation log is disabled")
        return

    entries = library.event_log.read_logs(limit=limit, operation_filter=operation, level_filter=level)
    if not entries:
        click.echo("No operations logged yet")
        return

    for entry in entries:
        click.echo(f"{entry['timestamp']}  {entry['operation']:9} {entry['message']}")


if __name__ == '__main__':
    cli()
