"""
L3 Detection — ``__init__.py`` re-exports read-only host probes.
"""

from brewplan.core.services.planner.detection.host import (  # noqa: F401
    RELEVANT_ENV,
    _parse_compiler_version,
    detect_compiler,
    detect_platform_facts,
    macos_version_tag,
)
