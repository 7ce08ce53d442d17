"""
CLI commands for importing skills and commands from GitHub repositories.

Typical flow:
  libtoggle import clone https://github.com/user/repo
  libtoggle import analyze /tmp/import-repo-abc123
  libtoggle import import-skill /tmp/import-repo-abc123 my-skill repo
  libtoggle import cleanup /tmp/import-repo-abc123
  libtoggle skills repo on
"""
from pathlib import Path

import click

from libtoggle import importer
from libtoggle.cli_context import get_library, reports_errors
from libtoggle.errors import CollisionError
from libtoggle.kinds import AssetKind


def register_import_commands(cli):
    """Register the `import` command group with the CLI."""

    @cli.group(name='import')
    def import_group():
        """Import skills and commands from a GitHub repository into .library/.

        \b
        Subcommands:
          clone           - Shallow-clone a repo into a temp directory
          analyze         - Classify its contents as skill/command/unknown
          import-skill    - Copy a skill into a skill group
          import-command  - Copy a command into a command group
          suggest-group   - Suggest a group name from the URL
          cleanup         - Remove the temp directory
        """
        pass

    @import_group.command('clone')
    @click.argument('url')
    @reports_errors
    def clone(url: str):
        """Clone a GitHub repo (optionally /tree/<branch>/<path>) to a temp directory."""
        source = importer.parse_github_url(url)
        click.echo(f"Cloning {source.repo}...")
        cloned = importer.clone_repo(url)
        click.echo()
        click.echo(f"TMPDIR={cloned.tmp_dir}")
        click.echo(f"CONTENTDIR={cloned.content_dir}")

    @import_group.command('analyze')
    @click.argument('tmp_dir', type=click.Path(exists=True, file_okay=False))
    @reports_errors
    def analyze(tmp_dir: str):
        """Classify the cloned contents as skills, commands or unknown items."""
        content_dir = importer.read_content_root(Path(tmp_dir))
        candidates = importer.analyze(content_dir)

        click.echo("Analyzing contents...")
        click.echo()
        for candidate in candidates:
            trailing = "/" if candidate.path.is_dir() else ""
            if candidate.kind is None:
                click.echo(f"  [unknown] {candidate.name}{trailing} ({candidate.reason})")
            else:
                click.echo(f"  [{candidate.kind.value}]".ljust(12) + f"{candidate.name}{trailing}")

        skills = sum(1 for c in candidates if c.kind is AssetKind.SKILL)
        commands = sum(1 for c in candidates if c.kind is AssetKind.COMMAND)
        unknown = sum(1 for c in candidates if c.kind is None)
        click.echo()
        click.echo(f"Found: {skills} skill(s), {commands} command(s), {unknown} unknown(s)")

        if unknown:
            click.echo()
            click.echo("Items marked [unknown] need manual classification.")

    def _import(ctx, kind: AssetKind, tmp_dir: str, name: str, group: str):
        content_dir = importer.read_content_root(Path(tmp_dir))
        source = importer.locate(content_dir, kind, name)
        try:
            destination = get_library(ctx).import_asset(kind, source, name, group)
        except CollisionError:
            click.echo(f"  Skipped {name} (already exists in {group})")
            return
        click.echo(f"  Imported {name} -> {destination}")

    @import_group.command('import-skill')
    @click.argument('tmp_dir', type=click.Path(exists=True, file_okay=False))
    @click.argument('name')
    @click.argument('group')
    @click.pass_context
    @reports_errors
    def import_skill(ctx, tmp_dir: str, name: str, group: str):
        """Copy a skill directory from the clone into .library/skills/GROUP/."""
        _import(ctx, AssetKind.SKILL, tmp_dir, name, group)

    @import_group.command('import-command')
    @click.argument('tmp_dir', type=click.Path(exists=True, file_okay=False))
    @click.argument('name')
    @click.argument('group')
    @click.pass_context
    @reports_errors
    def import_command(ctx, tmp_dir: str, name: str, group: str):
        """Copy a command file from the clone into .library/commands/GROUP/."""
        _import(ctx, AssetKind.COMMAND, tmp_dir, name, group)

    @import_group.command('suggest-group')
    @click.argument('url')
    @reports_errors
    def suggest_group(url: str):
        """Print a group name derived from the URL."""
        click.echo(importer.suggest_group(url))

    @import_group.command('cleanup')
    @click.argument('tmp_dir')
    @reports_errors
    def cleanup(tmp_dir: str):
        """Remove a temporary clone directory."""
        if importer.cleanup(Path(tmp_dir)):
            click.echo("Cleaned up temporary files")
        else:
            click.echo(f"Warning: Directory not found: {tmp_dir}")
