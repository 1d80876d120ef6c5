"""
L5 Orchestration — The build-plan compiler.

Ties the layers together for one descriptor:

    facts → options → rules → bottle? → dependencies + patches → commands

Every check runs before the first CommandStep is built, so a failure
never leaves a partial plan behind.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from brewplan.core.models.descriptor import PackageDescriptor
from brewplan.core.models.facts import PlatformFacts
from brewplan.core.models.layout import Layout
from brewplan.core.models.plan import BuildPlan
from brewplan.core.services.planner.detection.host import detect_platform_facts
from brewplan.core.services.planner.errors import PlanError
from brewplan.core.services.planner.resolver.bottle_selection import select_bottle
from brewplan.core.services.planner.resolver.constraint_validation import validate_constraints
from brewplan.core.services.planner.resolver.dependency_resolution import resolve_dependencies
from brewplan.core.services.planner.resolver.option_resolution import resolve_options
from brewplan.core.services.planner.resolver.patch_selection import HEAD_VERSION, select_patches
from brewplan.core.services.planner.synthesis.command_synthesis import (
    synthesize_bottle_plan,
    synthesize_plan,
)

logger = logging.getLogger(__name__)


def compile_plan(
    descriptor: PackageDescriptor,
    selections: Mapping[str, Any] | None = None,
    facts: PlatformFacts | None = None,
    *,
    raw_flags: Iterable[str] = (),
    layout: Layout | None = None,
    head: bool = False,
    build_from_source: bool = False,
) -> BuildPlan:
    """Compile one descriptor into a BuildPlan.

    Args:
        descriptor: The package to plan.
        selections: Option name → value.
        facts: Host snapshot; detected once when omitted.
        raw_flags: Raw option strings (``--with-mpi``, ``--without-single``).
        layout: Install locations.
        head: Build from the VCS head. Never uses a bottle.
        build_from_source: Ignore bottles even when one matches.

    Returns:
        The plan. Identical inputs always give a byte-identical plan.

    Raises:
        PlanError: any resolution failure (see ``planner.errors``).
    """
    if head and descriptor.head is None:
        raise PlanError(f"{descriptor.name} has no HEAD source", formula=descriptor.name)

    if facts is None:
        facts = detect_platform_facts()
    layout = layout or Layout()

    logger.debug("Resolving options for %s", descriptor.name)
    resolved = resolve_options(descriptor, selections, raw_flags)

    ref = None
    if head or build_from_source:
        logger.debug("Bottle lookup skipped (head=%s, build_from_source=%s)", head, build_from_source)
    else:
        ref = select_bottle(descriptor.bottle, facts.os_version_tag)

    logger.debug("Validating %d rule(s)", len(descriptor.rules))
    validate_constraints(resolved, facts, descriptor.rules, toolchain=ref is None)

    if ref is not None:
        plan = synthesize_bottle_plan(descriptor, resolved, facts, ref, layout)
        logger.info(
            "Planned %s %s from bottle %s", descriptor.name, descriptor.pkg_version, ref.tag,
        )
        return plan

    decisions = resolve_dependencies(resolved, facts, descriptor.dependencies)
    patches = select_patches(
        descriptor.patches, HEAD_VERSION if head else descriptor.version,
    )
    plan = synthesize_plan(
        descriptor, resolved, facts, decisions, patches, layout, head=head,
    )
    logger.info(
        "Planned %s %s from source: %d step(s), %d dependenc%s",
        descriptor.name, plan.version, len(plan.steps),
        len(plan.dependencies), "y" if len(plan.dependencies) == 1 else "ies",
    )
    return plan
