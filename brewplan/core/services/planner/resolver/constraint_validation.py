"""
L2 Resolver — Constraint validation.

Checks a resolved option set and the host toolchain against the
descriptor's compatibility rules. Rules run in declaration order and
the first violation raises, so the reported error is deterministic.
"""

from __future__ import annotations

import logging

from brewplan.core.models.descriptor import CompatibilityRule
from brewplan.core.models.facts import PlatformFacts
from brewplan.core.models.plan import ResolvedOptionSet
from brewplan.core.services.planner.data.compilers import COMPILER_FEATURES, FEATURE_LABELS
from brewplan.core.services.planner.domain.conditions import evaluate_condition
from brewplan.core.services.planner.domain.version_constraint import check_version_constraint
from brewplan.core.services.planner.errors import (
    OptionConflictError,
    UnresolvedFactError,
    UnsupportedToolchainError,
)

logger = logging.getLogger(__name__)


def _compiler_label(facts: PlatformFacts) -> str:
    if facts.compiler_build is not None:
        return f"build {facts.compiler_build}"
    return facts.compiler_version


def _check_conflict(rule: CompatibilityRule, resolved: ResolvedOptionSet) -> None:
    if all(resolved.values.get(ov.option) == ov.equals for ov in rule.options):
        raise OptionConflictError([ov.option for ov in rule.options], rule.hint)


def _check_toolchain(rule: CompatibilityRule, facts: PlatformFacts) -> None:
    if facts.compiler != rule.compiler:
        return

    # Fails with this compiler at or below the given build
    if rule.build is not None:
        if facts.compiler_build is None:
            logger.warning(
                "Cannot check %s build <= %d: compiler build unknown",
                rule.compiler, rule.build,
            )
        elif facts.compiler_build <= rule.build:
            raise UnsupportedToolchainError(
                facts.compiler, f"build {facts.compiler_build}", rule.cause,
            )

    if not facts.compiler_version:
        return
    for ctype, ref in (("gte", rule.min_version), ("lte", rule.max_version)):
        if not ref:
            continue
        result = check_version_constraint(
            facts.compiler_version, {"type": ctype, "reference": ref},
        )
        if not result["valid"]:
            cause = rule.cause or result["message"]
            raise UnsupportedToolchainError(facts.compiler, facts.compiler_version, cause)


def _check_feature(rule: CompatibilityRule, facts: PlatformFacts, context: str) -> None:
    if not facts.compiler:
        raise UnresolvedFactError("compiler", context)

    label = FEATURE_LABELS.get(rule.feature, rule.feature)
    entry = COMPILER_FEATURES.get(rule.feature, {}).get(facts.compiler)
    if entry is None:
        raise UnsupportedToolchainError(
            facts.compiler, _compiler_label(facts), rule.cause, feature=label,
        )

    # Apple clang is gated on its build number when we know it
    if "min_build" in entry and facts.compiler_build is not None:
        if facts.compiler_build < entry["min_build"]:
            raise UnsupportedToolchainError(
                facts.compiler, f"build {facts.compiler_build}", rule.cause, feature=label,
            )
        return

    if "min_version" in entry:
        if not facts.compiler_version:
            raise UnresolvedFactError("compiler_version", context)
        result = check_version_constraint(
            facts.compiler_version, {"type": "gte", "reference": entry["min_version"]},
        )
        if not result["valid"]:
            raise UnsupportedToolchainError(
                facts.compiler, facts.compiler_version, rule.cause, feature=label,
            )


def validate_constraints(
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    rules: tuple[CompatibilityRule, ...] | list[CompatibilityRule],
    *,
    toolchain: bool = True,
) -> None:
    """Validate every rule in declaration order.

    Args:
        resolved: The resolved option set.
        facts: Host snapshot.
        rules: ``descriptor.rules``.
        toolchain: When False, ``toolchain`` and ``needs`` rules are
            skipped (a prebuilt bottle does not use the host compiler).

    Raises:
        OptionConflictError: a conflict rule matched.
        UnsupportedToolchainError: the host compiler is rejected.
        UnresolvedFactError: a rule needs a fact the snapshot lacks.
    """
    for i, rule in enumerate(rules):
        context = f"rule #{i} ({rule.kind})"
        if not evaluate_condition(rule.when, resolved, facts, context):
            continue

        if rule.kind == "conflict":
            _check_conflict(rule, resolved)
        elif not toolchain:
            continue
        elif rule.kind == "toolchain":
            _check_toolchain(rule, facts)
        elif rule.kind == "needs":
            _check_feature(rule, facts, context)

    logger.debug("All %d rule(s) passed", len(rules))
