"""
L2 Resolver — Bottle selection.

Exact-match lookup of the host's OS-version tag in a bottle table.
A Linux host against a macOS-only table is simply no match.
"""

from __future__ import annotations

import logging

from brewplan.core.models.descriptor import BottleSpec
from brewplan.core.models.plan import BottleRef

logger = logging.getLogger(__name__)


def select_bottle(bottle: BottleSpec | None, os_version_tag: str) -> BottleRef | None:
    """Return the bottle for ``os_version_tag``, or ``None``."""
    if bottle is None or not os_version_tag:
        return None
    digest = bottle.digests.get(os_version_tag)
    if digest is None:
        logger.debug(
            "No bottle for %s (available: %s)",
            os_version_tag, ", ".join(sorted(bottle.digests)) or "none",
        )
        return None
    return BottleRef(
        tag=os_version_tag,
        digest=digest,
        digest_type=bottle.digest_type,
        cellar=bottle.cellar,
        root_url=bottle.root_url,
        rebuild=bottle.rebuild,
    )


def bottle_filename(name: str, pkg_version: str, ref: BottleRef) -> str:
    """``boost-1.61.0_1.el_capitan.bottle.tar.gz`` (``.bottle.N`` on rebuild)."""
    suffix = f".{ref.rebuild}" if ref.rebuild else ""
    return f"{name}-{pkg_version}.{ref.tag}.bottle{suffix}.tar.gz"


def bottle_url(name: str, pkg_version: str, ref: BottleRef) -> str:
    return f"{ref.root_url.rstrip('/')}/{bottle_filename(name, pkg_version, ref)}"
