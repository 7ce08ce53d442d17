"""
CLI commands for organizing real files dropped into .claude/.
"""
import os

import click

from libtoggle.cli_context import RESTART_HINT, get_library, reports_errors
from libtoggle.json_output import serialize_scan, to_json
from libtoggle.kinds import AssetKind


def register_organize_commands(cli):
    """Register scan/move/register commands with the CLI."""

    @cli.command()
    @click.option('--json', 'output_json', is_flag=True, help='Output as JSON for programmatic access')
    @click.pass_context
    @reports_errors
    def scan(ctx, output_json: bool):
        """Find real (non-symlink) files and directories in .claude/.

        \b
        Examples:
          libtoggle scan          # List unorganized items and available groups
          libtoggle scan --json   # Same, machine readable
        """
        report = get_library(ctx).scan()

        if output_json:
            click.echo(to_json(serialize_scan(report)))
            return

        click.echo("Scanning for unorganized items...")
        click.echo()
        for item in report.items:
            suffix = "/ (real directory)" if item.is_dir else " (real file)"
            click.echo(f"  [{item.kind.value}]".ljust(12) + f"{item.identity}{suffix}")
        click.echo()
        click.echo(f"{len(report.items)} unorganized item(s) found")

        if not report.items:
            return

        for kind in AssetKind:
            click.echo()
            click.echo(f"Available {kind.value} groups:")
            for name in report.groups.get(kind, []):
                click.echo(f"  - {name}")

        click.echo()
        click.echo("Use:")
        click.echo("  libtoggle move-command <file.md> <group>")
        click.echo("  libtoggle move-skill <dir-name> <group>")
        click.echo("  libtoggle register-command-group <name>")
        click.echo("  libtoggle register-skill-group <name>")

    def _move(ctx, kind: AssetKind, identity: str, group: str):
        library = get_library(ctx)
        result = library.move(kind, identity, group)
        rel_dest = os.path.relpath(result.destination, library.paths.root)
        rel_link = os.path.relpath(result.link, library.paths.root)
        click.echo(f"Moved {identity} -> {rel_dest}")
        click.echo(f"Created symlink: {rel_link} -> {result.link_target}")

    @cli.command('move-command')
    @click.argument('file')
    @click.argument('group')
    @click.pass_context
    @reports_errors
    def move_command(ctx, file: str, group: str):
        """Move a real .md file from .claude/commands/ into a command group.

        The file is replaced by a symlink, so it stays active.
        """
        _move(ctx, AssetKind.COMMAND, file, group)

    @cli.command('move-skill')
    @click.argument('name')
    @click.argument('group')
    @click.pass_context
    @reports_errors
    def move_skill(ctx, name: str, group: str):
        """Move a real skill directory from .claude/skills/ into a skill group.

        The directory is replaced by a symlink, so it stays active.
        """
        _move(ctx, AssetKind.SKILL, name, group)

    def _register(ctx, kind: AssetKind, name: str):
        result = get_library(ctx).register_group(kind, name)
        if result.created:
            click.echo(f"Created group '{name}' at {result.path}")
        else:
            click.echo(f"Group '{name}' already exists")
        click.echo(f"Enabled {result.linked} {name} {kind.dirname} (symlinked)")
        click.echo(RESTART_HINT)

    @cli.command('register-command-group')
    @click.argument('name')
    @click.pass_context
    @reports_errors
    def register_command_group(ctx, name: str):
        """Create a command group and enable it."""
        _register(ctx, AssetKind.COMMAND, name)

    @cli.command('register-skill-group')
    @click.argument('name')
    @click.pass_context
    @reports_errors
    def register_skill_group(ctx, name: str):
        """Create a skill group and enable it."""
        _register(ctx, AssetKind.SKILL, name)
