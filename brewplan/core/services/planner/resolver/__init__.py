"""
L2 Resolver — ``__init__.py`` re-exports all resolver functions.

These functions turn a descriptor (L0 data) and the pure L1 helpers
into resolved decisions: options, rules, dependencies, patches, bottle.
"""

from brewplan.core.services.planner.resolver.bottle_selection import (  # noqa: F401
    bottle_filename,
    bottle_url,
    select_bottle,
)
from brewplan.core.services.planner.resolver.constraint_validation import (  # noqa: F401
    validate_constraints,
)
from brewplan.core.services.planner.resolver.dependency_resolution import (  # noqa: F401
    resolve_dependencies,
    split_decisions,
)
from brewplan.core.services.planner.resolver.option_resolution import (  # noqa: F401
    parse_raw_flag,
    resolve_options,
)
from brewplan.core.services.planner.resolver.patch_selection import (  # noqa: F401
    HEAD_VERSION,
    select_patches,
)
