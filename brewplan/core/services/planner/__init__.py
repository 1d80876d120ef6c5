"""
Build-plan compiler — package re-exports.

This ``__init__.py`` re-exports every public symbol::

    from brewplan.core.services.planner import compile_plan

Each symbol lives in its single-responsibility module inside the
appropriate onion layer (data → domain → resolver → detection →
synthesis → orchestration).
"""

# ── L0: Data ──
from brewplan.core.services.planner.data.descriptor_schema import (  # noqa: F401
    validate_all_formulas,
    validate_descriptor,
)
from brewplan.core.services.planner.data.formulas import FORMULAS  # noqa: F401

# ── L2: Resolver ──
from brewplan.core.services.planner.resolver.bottle_selection import (  # noqa: F401
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
    resolve_options,
)
from brewplan.core.services.planner.resolver.patch_selection import (  # noqa: F401
    select_patches,
)

# ── L3: Detection ──
from brewplan.core.services.planner.detection.host import (  # noqa: F401
    detect_platform_facts,
)

# ── L4: Synthesis ──
from brewplan.core.services.planner.synthesis.command_synthesis import (  # noqa: F401
    synthesize_bottle_plan,
    synthesize_plan,
)

# ── L5: Orchestration ──
from brewplan.core.services.planner.orchestration.compiler import (  # noqa: F401
    compile_plan,
)

# ── Errors ──
from brewplan.core.services.planner.errors import (  # noqa: F401
    InvalidChoiceError,
    OptionConflictError,
    PlanError,
    TemplateError,
    UnknownOptionError,
    UnresolvedDependencyPredicateError,
    UnresolvedFactError,
    UnsupportedToolchainError,
)
