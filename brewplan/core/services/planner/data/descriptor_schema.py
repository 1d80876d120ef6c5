"""
L0 Data — Descriptor semantic validator.

Pydantic checks the *shape* of a descriptor (types, required fields,
unknown keys). This module checks what a schema cannot express: option
names are unique, aliases do not collide, every condition refers to a
declared option or a known fact, flag tables name real steps and real
values, rules are complete, and patch ranges parse.

Runs when a descriptor is loaded, before any resolver sees it.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator

from brewplan.core.models.descriptor import (
    ArgSpec,
    CompatibilityRule,
    OptionSpec,
    PackageDescriptor,
)
from brewplan.core.models.facts import FACT_KEYS
from brewplan.core.services.planner.data.compilers import COMPILER_FEATURES

logger = logging.getLogger(__name__)

# Operators a dict condition may carry alongside ``option``/``fact``.
CONDITION_OPERATORS = {
    "equals", "not_equals", "in", "not_in", "present",
    "version_lt", "version_lte", "version_gt", "version_gte",
}

_RANGE_CLAUSE = re.compile(r"^(<=|>=|==|!=|~=|<|>)?\s*v?\d+(\.\d+)*[A-Za-z0-9.+-]*$")


# ── Condition walking ──────────────────────────────────────────


def condition_refs(cond: Any, where: str) -> Iterator[tuple[str, str, str]]:
    """Yield ``(kind, name, where)`` for every reference in a condition.

    ``kind`` is ``"option"``, ``"fact"`` or ``"error"`` (malformed
    condition; ``name`` then holds the message).
    """
    if cond is None or isinstance(cond, bool):
        return
    if isinstance(cond, str):
        yield ("option", cond[1:] if cond.startswith("!") else cond, where)
        return
    if not isinstance(cond, dict):
        yield ("error", f"condition must be bool, str or dict, got {type(cond).__name__}", where)
        return

    for combinator in ("all", "any"):
        if combinator in cond:
            items = cond[combinator]
            if not isinstance(items, list | tuple):
                yield ("error", f"'{combinator}' must be a list", where)
                return
            for item in items:
                yield from condition_refs(item, where)
            return
    if "not" in cond:
        yield from condition_refs(cond["not"], where)
        return

    if "option" in cond:
        yield ("option", str(cond["option"]), where)
    elif "fact" in cond:
        yield ("fact", str(cond["fact"]), where)
    else:
        yield ("error", f"condition has no 'option', 'fact' or combinator: {cond!r}", where)
        return

    for key in cond:
        if key not in ("option", "fact") and key not in CONDITION_OPERATORS:
            yield ("error", f"unknown condition operator '{key}'", where)


def _arg_conditions(args: tuple, where: str) -> Iterator[tuple[Any, str]]:
    for arg in args:
        if isinstance(arg, ArgSpec):
            yield (arg.when, where)
            yield from _arg_conditions(arg.items, where)


# ── Section validators ─────────────────────────────────────────


def _validate_option(opt: OptionSpec, step_ids: set[str]) -> list[str]:
    prefix = f"option '{opt.name}'"
    errors: list[str] = []

    if opt.kind == "bool":
        if not isinstance(opt.default, bool):
            errors.append(f"{prefix}: boolean default must be true or false")
        if opt.choices:
            errors.append(f"{prefix}: boolean option cannot declare choices")
        valid_values = {"true", "false"}
    else:
        if not opt.choices:
            errors.append(f"{prefix}: choice option needs at least one choice")
        if opt.default not in opt.choices:
            errors.append(
                f"{prefix}: default {opt.default!r} is not one of {list(opt.choices)}"
            )
        valid_values = set(opt.choices)

    for step_id, by_value in opt.flags.items():
        if step_id not in step_ids:
            errors.append(f"{prefix}: flags refer to unknown step '{step_id}'")
        for value in by_value:
            if value not in valid_values:
                errors.append(
                    f"{prefix}: flags for step '{step_id}' use invalid value '{value}'"
                )
    return errors


def _validate_rule(
    index: int,
    rule: CompatibilityRule,
    options: dict[str, OptionSpec],
) -> list[str]:
    prefix = f"rule #{index} ({rule.kind})"
    errors: list[str] = []

    if rule.kind == "conflict":
        if len(rule.options) < 2:
            errors.append(f"{prefix}: a conflict needs at least two option values")
        for ov in rule.options:
            opt = options.get(ov.option)
            if opt is None:
                errors.append(f"{prefix}: unknown option '{ov.option}'")
            elif opt.kind == "bool" and not isinstance(ov.equals, bool):
                errors.append(f"{prefix}: '{ov.option}' is boolean, got {ov.equals!r}")
            elif opt.kind == "choice" and ov.equals not in opt.choices:
                errors.append(f"{prefix}: {ov.equals!r} is not a choice of '{ov.option}'")
    elif rule.kind == "toolchain":
        if not rule.compiler:
            errors.append(f"{prefix}: missing 'compiler'")
        if rule.build is None and not rule.min_version and not rule.max_version:
            errors.append(
                f"{prefix}: needs at least one of 'build', 'min_version', 'max_version'"
            )
    elif rule.kind == "needs":
        if rule.feature not in COMPILER_FEATURES:
            errors.append(
                f"{prefix}: unknown feature '{rule.feature}' "
                f"(known: {', '.join(sorted(COMPILER_FEATURES))})"
            )
    return errors


def _validate_range(expr: str) -> bool:
    # HEAD gating is ``spec: head``; a range only ever holds numeric clauses
    if not expr:
        return True
    return all(_RANGE_CLAUSE.match(c.strip()) for c in expr.split(","))


# ── Public API ─────────────────────────────────────────────────


def validate_descriptor(descriptor: PackageDescriptor) -> list[str]:
    """Validate one descriptor. Returns a list of error strings (empty = valid)."""
    errors: list[str] = []

    # Options and aliases
    options: dict[str, OptionSpec] = {}
    for opt in descriptor.options:
        if opt.name in options:
            errors.append(f"duplicate option '{opt.name}'")
        options[opt.name] = opt

    seen_aliases: dict[str, str] = {}
    for opt in descriptor.options:
        for alias in opt.deprecated_names:
            if alias in options:
                errors.append(
                    f"option '{opt.name}': alias '{alias}' collides with a declared option"
                )
            if alias in seen_aliases and seen_aliases[alias] != opt.name:
                errors.append(
                    f"alias '{alias}' claimed by both '{seen_aliases[alias]}' and '{opt.name}'"
                )
            seen_aliases[alias] = opt.name

    # Steps
    step_ids: set[str] = set()
    for step in descriptor.build.steps:
        if step.id in step_ids:
            errors.append(f"duplicate build step id '{step.id}'")
        step_ids.add(step.id)

    for opt in descriptor.options:
        errors.extend(_validate_option(opt, step_ids))

    # Rules
    for i, rule in enumerate(descriptor.rules):
        errors.extend(_validate_rule(i, rule, options))

    # Dependencies
    for dep in descriptor.dependencies:
        if dep.option:
            opt = options.get(dep.option)
            if opt is None:
                errors.append(f"dependency '{dep.name}': unknown option '{dep.option}'")
            elif opt.kind != "bool":
                errors.append(
                    f"dependency '{dep.name}': option '{dep.option}' must be boolean"
                )

    # Patches
    for i, patch in enumerate(descriptor.patches):
        if not _validate_range(patch.applies):
            errors.append(f"patch #{i}: cannot parse version range '{patch.applies}'")

    # Conditions everywhere
    conditions: list[tuple[Any, str]] = []
    for i, rule in enumerate(descriptor.rules):
        conditions.append((rule.when, f"rule #{i}"))
    for dep in descriptor.dependencies:
        conditions.append((dep.when, f"dependency '{dep.name}'"))
        conditions.append((dep.exclude_when, f"dependency '{dep.name}'"))
    for fs in descriptor.build.prepare:
        conditions.append((fs.when, f"prepare '{fs.path}'"))
        conditions.extend(_arg_conditions(fs.lines, f"prepare '{fs.path}'"))
    for env in descriptor.build.env:
        conditions.append((env.when, f"env '{env.name}'"))
    for step in descriptor.build.steps:
        conditions.append((step.when, f"step '{step.id}'"))
        conditions.extend(_arg_conditions(step.args, f"step '{step.id}'"))
    for override in descriptor.build.job_overrides:
        conditions.append((override.when, "job override"))
    for caveat in descriptor.caveats:
        conditions.append((caveat.when, "caveat"))

    for cond, where in conditions:
        for kind, name, ref_where in condition_refs(cond, where):
            if kind == "error":
                errors.append(f"{ref_where}: {name}")
            elif kind == "option" and name not in options:
                errors.append(f"{ref_where}: condition refers to unknown option '{name}'")
            elif kind == "fact" and name not in FACT_KEYS and not name.startswith("env."):
                errors.append(f"{ref_where}: condition refers to unknown fact '{name}'")

    return errors


def validate_all_formulas(formulas: dict[str, PackageDescriptor]) -> dict[str, list[str]]:
    """Validate every descriptor of a catalog.

    Returns:
        Dict mapping formula name → list of errors. Only formulas with
        errors are included.
    """
    all_errors: dict[str, list[str]] = {}
    for name, descriptor in formulas.items():
        errs = validate_descriptor(descriptor)
        if errs:
            logger.warning("Formula '%s' has %d schema error(s)", name, len(errs))
            all_errors[name] = errs
    return all_errors
