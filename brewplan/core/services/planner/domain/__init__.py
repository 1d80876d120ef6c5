"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from brewplan.core.services.planner.domain.conditions import (  # noqa: F401
    evaluate_condition,
)
from brewplan.core.services.planner.domain.templating import (  # noqa: F401
    check_unsubstituted,
    render,
    render_all,
    substitute,
)
from brewplan.core.services.planner.domain.version_constraint import (  # noqa: F401
    check_version_constraint,
    compare_versions,
    parse_version,
    version_matches,
)
