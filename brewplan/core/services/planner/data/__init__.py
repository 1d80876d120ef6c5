"""
L0 Data — ``__init__.py`` re-exports all data constants.
"""

from brewplan.core.services.planner.data.compilers import (  # noqa: F401
    COMPILER_FEATURES,
    FEATURE_LABELS,
)
from brewplan.core.services.planner.data.formulas import (  # noqa: F401
    FORMULAS,
    STD_CMAKE_ARGS,
)
from brewplan.core.services.planner.data.os_versions import (  # noqa: F401
    ARCH_ALIASES,
    MACOS_CODENAMES,
)
