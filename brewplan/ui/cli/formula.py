"""
CLI commands for formula planning.

Thin wrappers over ``brewplan.core.services.planner`` and the config
loader. ``TARGET`` is a built-in formula name or a descriptor YAML path.
"""

from __future__ import annotations

import json
import shlex
import sys
from pathlib import Path

import click

from brewplan.core.config.loader import ConfigError


def _fail(message: str, as_json: bool, payload: dict | None = None) -> None:
    """Report an error and exit 1."""
    if as_json:
        click.echo(json.dumps(payload or {"error": message}, indent=2))
    else:
        click.secho(f"❌ {message}", fg="red")
    sys.exit(1)


def _parse_option_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    selections: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected NAME=VALUE, got '{pair}'", param_hint="--option")
        name, value = pair.split("=", 1)
        selections[name.strip()] = value.strip()
    return selections


@click.group()
def formula() -> None:
    """Formulas — list, options, check, plan."""


# ── Inspect ─────────────────────────────────────────────────────


@formula.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def list_formulas_cmd(as_json: bool) -> None:
    """List built-in formulas."""
    from brewplan.core.config.loader import get_formula, list_formulas

    items = []
    for name in list_formulas():
        d = get_formula(name)
        items.append({"name": d.name, "version": d.pkg_version, "desc": d.desc})

    if as_json:
        click.echo(json.dumps(items, indent=2))
        return

    click.secho(f"📦 Built-in formulas ({len(items)}):", fg="cyan", bold=True)
    for item in items:
        click.echo(f"   {item['name']:<12} {item['version']:<12} {item['desc']}")


@formula.command()
@click.argument("target")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def options(target: str, as_json: bool) -> None:
    """Show the options a formula accepts."""
    from brewplan.core.config.loader import load_target

    try:
        descriptor = load_target(target)
    except ConfigError as e:
        _fail(str(e), as_json)
        return

    rows = [
        {
            "name": opt.name,
            "kind": opt.kind,
            "default": opt.default,
            "choices": list(opt.choices),
            "description": opt.description,
            "deprecated_names": list(opt.deprecated_names),
        }
        for opt in descriptor.options
    ]

    if as_json:
        click.echo(json.dumps({"name": descriptor.name, "options": rows}, indent=2))
        return

    if not rows:
        click.secho(f"ℹ️  {descriptor.name} has no options", fg="yellow")
        return

    click.secho(f"⚙️  {descriptor.name} options:", fg="cyan", bold=True)
    for row in rows:
        if row["kind"] == "bool":
            flag = f"--without-{row['name']}" if row["default"] else f"--with-{row['name']}"
        else:
            flag = f"--{row['name']}=<{'|'.join(row['choices'])}>"
        click.echo(f"   {flag:<28} {row['description']}")
        for alias in row["deprecated_names"]:
            click.echo(f"   {'':<28} (deprecated name: {alias})")


@formula.command()
@click.argument("target", required=False)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def check(target: str | None, as_json: bool) -> None:
    """Validate a descriptor, or every built-in formula."""
    from brewplan.core.config.loader import get_formula, list_formulas, load_target

    errors: dict[str, list[str]] = {}
    names = [target] if target else list_formulas()
    load = load_target if target else get_formula
    for name in names:
        try:
            load(name)
        except ConfigError as e:
            errors[name] = [str(e)]

    if as_json:
        click.echo(json.dumps({"valid": not errors, "errors": errors}, indent=2))
        sys.exit(0 if not errors else 1)
        return

    if not errors:
        click.secho(f"✅ {len(names)} descriptor(s) valid", fg="green", bold=True)
        return

    click.secho("❌ Descriptor errors:", fg="red", bold=True)
    for name, errs in errors.items():
        for err in errs:
            click.echo(f"   • {name}: {err}")
    sys.exit(1)


# ── Plan ────────────────────────────────────────────────────────


def _echo_plan(plan) -> None:
    label = "prebuilt bottle" if plan.mode == "bottle" else "source"
    click.secho(f"\n📋 {plan.name} {plan.version} ({label})", fg="cyan", bold=True)

    if plan.bottle is not None:
        click.echo(f"   🍾 Bottle: {plan.bottle.tag} ({plan.bottle.digest_type} {plan.bottle.digest})")
    elif plan.source is not None:
        click.echo(f"   📦 Source: {plan.source.url}")

    if plan.dependencies:
        click.echo()
        click.secho("   Dependencies:", fg="white", bold=True)
        for dep in plan.dependencies:
            extra = " (build)" if dep.build_only else ""
            tags = f" [{', '.join(dep.tags)}]" if dep.tags else ""
            click.echo(f"     • {dep.name}{tags}{extra}")

    click.echo()
    click.secho("   Steps:", fg="white", bold=True)
    n = 0
    for step in plan.steps:
        if step.kind == "caveat":
            continue
        n += 1
        where = f" (in {step.cwd})" if step.cwd != "." else ""
        click.echo(f"   {n:>3}. [{step.kind}] $ {shlex.join(step.argv)}{where}")
        if step.url:
            click.echo(f"        fetch {step.url}")
        for key, value in sorted(step.env.items()):
            click.echo(f"        env {key}={value}")

    for note in plan.advisories:
        click.secho(f"\n⚠️  {note}", fg="yellow")
    for caveat in plan.caveats:
        click.secho(f"\nℹ️  {caveat}", fg="blue")
    click.echo()


@formula.command()
@click.argument("target")
@click.option("--with", "with_", multiple=True, metavar="OPTION", help="Enable a boolean option.")
@click.option("--without", multiple=True, metavar="OPTION", help="Disable a boolean option.")
@click.option("--option", "-o", "pairs", multiple=True, metavar="NAME=VALUE", help="Set any option.")
@click.option(
    "--facts", "facts_path",
    type=click.Path(dir_okay=False), default=None,
    help="Host facts YAML (default: detect this host).",
)
@click.option("--head", is_flag=True, help="Build the VCS head.")
@click.option("--build-from-source", "-s", is_flag=True, help="Never use a bottle.")
@click.option(
    "--root", envvar="BREWPLAN_ROOT", default="/usr/local", show_default=True,
    help="Install root (env: BREWPLAN_ROOT).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def plan(
    target: str,
    with_: tuple[str, ...],
    without: tuple[str, ...],
    pairs: tuple[str, ...],
    facts_path: str | None,
    head: bool,
    build_from_source: bool,
    root: str,
    as_json: bool,
) -> None:
    """Compile the build plan of a formula."""
    from brewplan.core.config.loader import load_facts, load_target
    from brewplan.core.models.layout import Layout
    from brewplan.core.services.planner import PlanError, compile_plan, detect_platform_facts

    raw_flags = [f"--with-{n}" for n in with_] + [f"--without-{n}" for n in without]
    selections = _parse_option_pairs(pairs)

    try:
        descriptor = load_target(target)
        facts = load_facts(Path(facts_path)) if facts_path else detect_platform_facts()
    except ConfigError as e:
        _fail(str(e), as_json)
        return

    try:
        result = compile_plan(
            descriptor,
            selections,
            facts,
            raw_flags=raw_flags,
            layout=Layout(root=root),
            head=head,
            build_from_source=build_from_source,
        )
    except PlanError as e:
        _fail(e.message, as_json, e.to_dict())
        return

    if as_json:
        click.echo(result.to_json())
        return
    _echo_plan(result)
