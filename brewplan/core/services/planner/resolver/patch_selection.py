"""
L2 Resolver — Patch selection.

Filters patches by the version being built. Declaration order is kept
since later patches may assume earlier ones were applied.
"""

from __future__ import annotations

import logging

from brewplan.core.models.descriptor import PatchSpec
from brewplan.core.services.planner.domain.version_constraint import version_matches
from brewplan.core.services.planner.errors import PlanError

logger = logging.getLogger(__name__)

HEAD_VERSION = "HEAD"


def _applies(patch: PatchSpec, version: str) -> bool:
    try:
        return version_matches(version, patch.applies)
    except ValueError as e:
        raise PlanError(
            f"Cannot match version {version} against range '{patch.applies}' "
            f"of patch {patch.url}: {e}",
            patch=patch.url,
            applies=patch.applies,
        ) from e


def select_patches(
    patches: tuple[PatchSpec, ...] | list[PatchSpec],
    version: str,
) -> tuple[PatchSpec, ...]:
    """Return the patches that apply to ``version``.

    For a ``HEAD`` build only ``head`` and ``any`` patches apply and
    version ranges are ignored. An empty result is valid.

    Raises:
        PlanError: a range (or the version) cannot be parsed.
    """
    if version == HEAD_VERSION:
        selected = tuple(p for p in patches if p.spec in ("head", "any"))
    else:
        selected = tuple(
            p for p in patches
            if p.spec in ("stable", "any") and _applies(p, version)
        )
    logger.debug("%d of %d patch(es) apply to %s", len(selected), len(patches), version)
    return selected
