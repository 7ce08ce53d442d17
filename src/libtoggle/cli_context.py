"""
Shared plumbing for CLI command modules.

Kept out of cli.py so command modules can import it without a cycle
(cli -> organize_commands -> cli).
"""

import functools
from typing import Optional

import click

from libtoggle.config import get_config, get_project_config
from libtoggle.error_logging import classify_error, log_error
from libtoggle.errors import LibraryError
from libtoggle.kinds import AssetKind
from libtoggle.library import Library
from libtoggle.path_utils import resolve_project_root


RESTART_HINT = "Restart Claude Code or run /clear for changes to take effect."


def get_library(ctx: Optional[click.Context] = None) -> Library:
    """Build (once per invocation) the Library for the selected project root."""
    if ctx is None:
        ctx = click.get_current_context()
    obj = ctx.find_root().ensure_object(dict)

    if 'library' not in obj:
        library_dir = str(get_config().get('library_dir', '.library'))
        root = resolve_project_root(obj.get('root'), library_dir=library_dir)
        try:
            obj['library'] = Library.from_config(root, get_project_config(root))
        except ValueError as e:
            raise click.UsageError(str(e))
    return obj['library']


def reports_errors(func):
    """
    Turn LibraryError into a one-line message, an errors.jsonl entry and exit 1.

    Anything else propagates so bugs still show a traceback.
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except LibraryError as e:
            ctx = click.get_current_context()
            params = [str(v) for v in ctx.params.values() if v not in (None, False, ())]
            context = {k: str(v) for k, v in ctx.params.items() if v is not None}
            kind = getattr(e, "kind", None) or kind_for_command(ctx.info_name or "")
            if kind is not None:
                context["kind"] = kind.value
            log_error(
                command=" ".join([ctx.command_path, *params]),
                subcommand=ctx.info_name or "",
                error_type=classify_error(e),
                message=str(e),
                context=context,
            )
            click.echo(f"❌ {e}", err=True)
            raise SystemExit(1)
    return wrapper


def kind_label(kind: AssetKind) -> str:
    return kind.dirname.capitalize()


def kind_for_command(name: str) -> Optional[AssetKind]:
    """Asset kind a subcommand works on, e.g. move-skill -> SKILL."""
    for kind in AssetKind:
        if kind.value in name.split("-") or kind.dirname in name.split("-"):
            return kind
    return None
