"""
Domain models — Pydantic types for the build-plan compiler.

All models are re-exported here for convenient access:

    from brewplan.core.models import PackageDescriptor, PlatformFacts, BuildPlan
"""

from brewplan.core.models.descriptor import (
    ArgSpec,
    BottleSpec,
    BuildSpec,
    Caveat,
    CompatibilityRule,
    Condition,
    DependencySpec,
    EnvSetting,
    FileSpec,
    JobOverride,
    OptionSpec,
    OptionValue,
    PackageDescriptor,
    PatchSpec,
    ResourceSpec,
    SmokeCommand,
    SmokeTest,
    SourceRef,
    StepTemplate,
    flag_key,
)
from brewplan.core.models.facts import FACT_KEYS, PlatformFacts, UnknownFact
from brewplan.core.models.frozen import FrozenDict
from brewplan.core.models.layout import Layout
from brewplan.core.models.plan import (
    BottleRef,
    BuildPlan,
    CommandStep,
    DependencyDecision,
    ResolvedOptionSet,
    StepExpectation,
)

__all__ = [
    # descriptor.py
    "ArgSpec",
    "BottleSpec",
    "BuildSpec",
    "Caveat",
    "CompatibilityRule",
    "Condition",
    "DependencySpec",
    "EnvSetting",
    "FileSpec",
    "JobOverride",
    "OptionSpec",
    "OptionValue",
    "PackageDescriptor",
    "PatchSpec",
    "ResourceSpec",
    "SmokeCommand",
    "SmokeTest",
    "SourceRef",
    "StepTemplate",
    "flag_key",
    # facts.py
    "FACT_KEYS",
    "PlatformFacts",
    "UnknownFact",
    # frozen.py
    "FrozenDict",
    # layout.py
    "Layout",
    # plan.py
    "BottleRef",
    "BuildPlan",
    "CommandStep",
    "DependencyDecision",
    "ResolvedOptionSet",
    "StepExpectation",
]
