"""
Plan models — resolver outputs and the final BuildPlan.

BuildPlan is the only artifact handed to the external executor. It is
immutable and serialises deterministically (``to_json``).
"""

from __future__ import annotations

import json
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from brewplan.core.models.descriptor import PatchSpec, ResourceSpec, SourceRef
from brewplan.core.models.frozen import FrozenDict, OptionValueMap, StrMap

OptionValueT = bool | str

DependencyStatus = Literal[
    "required", "optional_enabled", "optional_disabled", "excluded", "duplicate",
]

StepKind = Literal[
    "patch", "prepare", "configure", "build", "pour", "caveat", "test_setup", "test",
]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class ResolvedOptionSet(_Frozen):
    """Effective option values after aliasing and defaulting.

    ``explicit`` lists the (current) names the user actually selected;
    ``advisories`` holds non-fatal notes such as deprecated names used.
    """

    values: OptionValueMap = Field(default_factory=FrozenDict)
    explicit: tuple[str, ...] = ()
    advisories: tuple[str, ...] = ()

    def __getitem__(self, name: str) -> OptionValueT:
        return self.values[name]

    def __contains__(self, name: object) -> bool:
        return name in self.values

    def enabled(self, name: str) -> bool:
        """True when a boolean option is on (``build.with?``)."""
        return self.values.get(name) is True


class DependencyDecision(_Frozen):
    name: str
    status: DependencyStatus
    tags: tuple[str, ...] = ()
    build_only: bool = False
    reason: str = ""

    @property
    def included(self) -> bool:
        return self.status in ("required", "optional_enabled")


class BottleRef(_Frozen):
    """A matched prebuilt artifact."""

    tag: str
    digest: str
    digest_type: str = "sha256"
    cellar: str = "any"
    root_url: str = ""
    rebuild: int = 0


class StepExpectation(_Frozen):
    """What the external test runner compares a test step against."""

    stdout: str | None = None
    exit_code: int = 0
    strip: bool = True


class CommandStep(_Frozen):
    """One executable command of a plan.

    ``stdin`` carries file content for ``tee`` steps; ``url`` and
    ``digest`` tell the fetcher what to download and verify before the
    command runs. Caveat steps never execute: they only carry ``message``.
    """

    kind: StepKind
    label: str
    executable: str = ""
    args: tuple[str, ...] = ()
    cwd: str = "."
    env: StrMap = Field(default_factory=FrozenDict)
    stdin: str | None = None
    url: str | None = None
    digest: str | None = None
    digest_type: str | None = None
    message: str | None = None
    expect: StepExpectation | None = None

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]


class BuildPlan(_Frozen):
    """Ordered, immutable output of one compilation."""

    name: str
    version: str
    mode: Literal["source", "bottle"]
    source: SourceRef | None = None
    resources: tuple[ResourceSpec, ...] = ()
    patches: tuple[PatchSpec, ...] = ()
    bottle: BottleRef | None = None
    options: OptionValueMap = Field(default_factory=FrozenDict)
    steps: tuple[CommandStep, ...] = ()
    dependencies: tuple[DependencyDecision, ...] = ()
    diagnostics: tuple[DependencyDecision, ...] = ()
    advisories: tuple[str, ...] = ()
    caveats: tuple[str, ...] = ()

    @property
    def dependency_names(self) -> list[str]:
        return [d.name for d in self.dependencies]

    def steps_of(self, *kinds: str) -> list[CommandStep]:
        """Steps whose kind is one of ``kinds``, in plan order."""
        return [s for s in self.steps if s.kind in kinds]

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Byte-stable JSON: sorted keys, fixed separators."""
        return json.dumps(self.to_dict(), indent=2, sort_keys=True)
