"""
brewplan — CLI entrypoint.

Usage:
    python -m brewplan.main --help
    python -m brewplan.main formula list
    python -m brewplan.main formula plan boost --with mpi --without single
    python -m brewplan.main facts > host.yml
"""

from __future__ import annotations

import json
import os

import click
import yaml

from brewplan import __version__
from brewplan.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)


@click.group()
@click.version_option(version=__version__, prog_name="brewplan")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """brewplan — compile package descriptors into build plans."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug=debug, verbose=verbose, quiet=quiet),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def facts(as_json: bool) -> None:
    """Detect this host's platform facts.

    The YAML output can be saved and passed back with
    ``formula plan --facts`` to plan for this host from elsewhere.
    """
    from brewplan.core.services.planner import detect_platform_facts

    snapshot = detect_platform_facts().model_dump(mode="json")
    if as_json:
        click.echo(json.dumps(snapshot, indent=2, sort_keys=True))
        return
    click.echo(yaml.safe_dump({"facts": snapshot}, sort_keys=True), nl=False)


# ── Register sub-command groups from brewplan/ui/cli/ ─────────────

from brewplan.ui.cli.formula import formula  # noqa: E402

cli.add_command(formula)


if __name__ == "__main__":
    cli()
