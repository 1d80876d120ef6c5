"""
L2 Resolver — Dependency resolution.

Decides, for each declared dependency, whether this build needs it.
No version negotiation and no transitive walk: the external package
manager resolves each dependency on its own.
"""

from __future__ import annotations

import logging

from brewplan.core.models.descriptor import DependencySpec
from brewplan.core.models.facts import PlatformFacts
from brewplan.core.models.plan import DependencyDecision, ResolvedOptionSet
from brewplan.core.services.planner.domain.conditions import evaluate_condition
from brewplan.core.services.planner.errors import (
    UnresolvedDependencyPredicateError,
    UnresolvedFactError,
)

logger = logging.getLogger(__name__)


def _classify(
    dep: DependencySpec,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
) -> tuple[str, str]:
    """Return ``(status, reason)`` for one dependency spec."""
    context = f"dependency '{dep.name}'"
    try:
        if dep.exclude_when is not None and evaluate_condition(
            dep.exclude_when, resolved, facts, context,
        ):
            return "excluded", "excluded on this platform"
        if not evaluate_condition(dep.when, resolved, facts, context):
            return "excluded", "condition not met"
    except UnresolvedDependencyPredicateError:
        raise
    except UnresolvedFactError as e:
        raise UnresolvedDependencyPredicateError(dep.name, e.subject) from e

    if dep.option:
        if resolved.enabled(dep.option):
            return "optional_enabled", f"--with-{dep.option}"
        return "optional_disabled", f"--with-{dep.option} not selected"
    return "required", ""


def resolve_dependencies(
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    dependencies: tuple[DependencySpec, ...] | list[DependencySpec],
) -> tuple[DependencyDecision, ...]:
    """Classify every dependency spec, in declaration order.

    A name that is already included is recorded again with status
    ``duplicate`` so it never appears twice among included entries.

    Raises:
        UnresolvedDependencyPredicateError: a predicate refers to an
            option or fact that cannot be supplied.
    """
    decisions: list[DependencyDecision] = []
    included: set[str] = set()

    for dep in dependencies:
        status, reason = _classify(dep, resolved, facts)
        if status in ("required", "optional_enabled"):
            if dep.name in included:
                status, reason = "duplicate", "already included"
            else:
                included.add(dep.name)

        decisions.append(DependencyDecision(
            name=dep.name,
            status=status,
            tags=dep.tags,
            build_only=dep.build_only,
            reason=reason,
        ))
        logger.debug("Dependency %s: %s %s", dep.name, status, reason)

    return tuple(decisions)


def split_decisions(
    decisions: tuple[DependencyDecision, ...],
) -> tuple[tuple[DependencyDecision, ...], tuple[DependencyDecision, ...]]:
    """Split decisions into ``(included, omitted)``, both in order."""
    included = tuple(d for d in decisions if d.included)
    omitted = tuple(d for d in decisions if not d.included)
    return included, omitted
