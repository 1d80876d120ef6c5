"""
L5 Orchestration — ``__init__.py`` re-exports top-level coordinators.

These are the entry points that external code calls.
"""

from brewplan.core.services.planner.orchestration.compiler import (  # noqa: F401
    compile_plan,
)
