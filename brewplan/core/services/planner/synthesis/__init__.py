"""
L4 Synthesis — ``__init__.py`` re-exports command synthesis.
"""

from brewplan.core.services.planner.synthesis.command_synthesis import (  # noqa: F401
    JOB_OVERRIDE_VARS,
    build_variables,
    caveat_messages,
    compute_jobs,
    option_flags,
    render_args,
    synthesize_bottle_plan,
    synthesize_plan,
    unused_options_advisory,
)
