"""
Descriptor model — the declarative record of one package.

A descriptor names the package, where its sources live, which patches
apply, which prebuilt bottles exist, which options a user may select,
which dependencies and compatibility rules hold, and how the build
commands are put together. Loaded from YAML or the built-in catalog.

Conditions (``when`` / ``exclude_when`` fields) are plain data and are
evaluated by ``planner.domain.conditions``::

    "cxx11"                                   # option is enabled
    "!cxx11"                                  # option is disabled
    {"option": "variant", "equals": "debug"}
    {"fact": "os_family", "not_equals": "macos"}
    {"fact": "env.CIRCLECI", "present": True}
    {"any": [...]}, {"all": [...]}, {"not": ...}
"""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from brewplan.core.models.frozen import FlagTable, FrozenDict, StrMap

Condition = Union[bool, str, dict[str, Any], None]


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class SourceRef(_Frozen):
    """Where a source archive (or VCS checkout) comes from."""

    url: str
    digest: str = ""
    digest_type: Literal["sha256", "sha1"] = "sha256"
    mirrors: tuple[str, ...] = ()
    branch: str = ""                  # VCS heads only


class ResourceSpec(_Frozen):
    """An extra archive fetched alongside the source (test data etc.)."""

    name: str
    url: str
    digest: str = ""
    digest_type: Literal["sha256", "sha1"] = "sha256"


class PatchSpec(_Frozen):
    """A source patch gated by the version being built."""

    url: str
    digest: str = ""
    digest_type: Literal["sha256", "sha1"] = "sha256"
    strip: int = 1                    # patch -pN
    applies: str = ""                 # version range, e.g. "<1.62.0"
    spec: Literal["stable", "head", "any"] = "stable"


class BottleSpec(_Frozen):
    """Prebuilt artifacts keyed by OS-version tag."""

    root_url: str = "https://homebrew.bintray.com/bottles"
    cellar: str = "any"
    rebuild: int = 0
    digest_type: Literal["sha256", "sha1"] = "sha256"
    digests: StrMap = Field(default_factory=FrozenDict)


class OptionSpec(_Frozen):
    """A user-selectable build option.

    ``flags`` maps a build step id to the argument fragments appended
    to that step for each option value, after all template arguments.
    Boolean options use the keys ``"true"`` and ``"false"``::

        flags:
          install:
            "true": ["threading=multi,single"]
            "false": ["threading=multi"]
    """

    name: str
    kind: Literal["bool", "choice"] = "bool"
    description: str = ""
    default: bool | str = False
    choices: tuple[str, ...] = ()
    deprecated_names: tuple[str, ...] = ()
    flags: FlagTable = Field(default_factory=FrozenDict)

    @field_validator("flags", mode="before")
    @classmethod
    def _normalise_value_keys(cls, value: Any) -> Any:
        # YAML turns unquoted true/false keys into booleans
        if not isinstance(value, dict):
            return value
        return {
            step: (
                {flag_key(k): v for k, v in by_value.items()}
                if isinstance(by_value, dict) else by_value
            )
            for step, by_value in value.items()
        }


def flag_key(value: bool | str) -> str:
    """Key under which an option value's flags are declared."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class DependencySpec(_Frozen):
    """A package this one may need, and the predicate deciding it."""

    name: str
    tags: tuple[str, ...] = ()        # e.g. ("c++11",)
    build_only: bool = False
    option: str = ""                  # boolean option making it optional
    when: Condition = None
    exclude_when: Condition = None


class OptionValue(_Frozen):
    option: str
    equals: bool | str = True


class CompatibilityRule(_Frozen):
    """A validity rule checked before any command is synthesized.

    Kinds:
        - ``conflict``: the listed option values may not all hold.
        - ``toolchain``: the named compiler fails at or below ``build``,
          or outside ``min_version``/``max_version``.
        - ``needs``: the active compiler must support ``feature``.
    """

    kind: Literal["conflict", "toolchain", "needs"]
    when: Condition = None
    # conflict
    options: tuple[OptionValue, ...] = ()
    hint: str = ""
    # toolchain
    compiler: str = ""
    build: int | None = None
    min_version: str = ""
    max_version: str = ""
    cause: str = ""
    # needs
    feature: str = ""


class ArgSpec(_Frozen):
    """A conditional argument, or a joined list of conditional items."""

    value: str = ""
    when: Condition = None
    format: str = ""                  # e.g. "--without-libraries={items}"
    separator: str = ","
    items: tuple[Union[str, "ArgSpec"], ...] = ()


class StepTemplate(_Frozen):
    """One configure or build command before rendering."""

    id: str
    phase: Literal["configure", "build"] = "build"
    executable: str
    args: tuple[Union[str, ArgSpec], ...] = ()
    cwd: str = "."
    when: Condition = None


class FileSpec(_Frozen):
    """A file written (or appended to) before configure runs."""

    path: str
    mode: Literal["write", "append"] = "write"
    lines: tuple[Union[str, ArgSpec], ...] = ()
    when: Condition = None


class EnvSetting(_Frozen):
    name: str
    value: str
    when: Condition = None


class JobOverride(_Frozen):
    """Replaces the job count when ``when`` holds.

    May go above ``job_slots``; the first matching override wins.
    """

    jobs: int
    when: Condition = None


class BuildSpec(_Frozen):
    prepare: tuple[FileSpec, ...] = ()
    env: tuple[EnvSetting, ...] = ()
    steps: tuple[StepTemplate, ...] = ()
    job_overrides: tuple[JobOverride, ...] = ()


class Caveat(_Frozen):
    text: str
    when: Condition = None
    source_only: bool = False         # describes a from-source build only


class SmokeCommand(_Frozen):
    executable: str
    args: tuple[str, ...] = ()


class SmokeTest(_Frozen):
    """Post-install smoke test.

    ``files`` are written into the test directory, ``setup`` commands run
    in order, then ``command`` runs and its output is compared (by the
    external runner) with ``expect_stdout`` and ``expect_exit_code``.
    """

    files: tuple[FileSpec, ...] = ()
    setup: tuple[SmokeCommand, ...] = ()
    command: SmokeCommand
    expect_stdout: str | None = None
    expect_exit_code: int = 0
    strip_output: bool = True


class PackageDescriptor(_Frozen):
    """Root record of one package. Immutable once loaded."""

    name: str
    version: str
    desc: str = ""
    homepage: str = ""
    revision: int = 0
    source: SourceRef
    head: SourceRef | None = None
    resources: tuple[ResourceSpec, ...] = ()
    patches: tuple[PatchSpec, ...] = ()
    bottle: BottleSpec | None = None
    options: tuple[OptionSpec, ...] = ()
    dependencies: tuple[DependencySpec, ...] = ()
    rules: tuple[CompatibilityRule, ...] = ()
    build: BuildSpec = Field(default_factory=BuildSpec)
    caveats: tuple[Caveat, ...] = ()
    test: SmokeTest | None = None

    @property
    def pkg_version(self) -> str:
        """Version with the ``_N`` revision suffix, as installed."""
        if self.revision:
            return f"{self.version}_{self.revision}"
        return self.version

    def get_option(self, name: str) -> OptionSpec | None:
        """Look up an option by its current name."""
        for opt in self.options:
            if opt.name == name:
                return opt
        return None

    def alias_table(self) -> dict[str, str]:
        """Map every deprecated option name to its replacement."""
        table: dict[str, str] = {}
        for opt in self.options:
            for old in opt.deprecated_names:
                table[old] = opt.name
        return table

    @property
    def option_names(self) -> list[str]:
        return [o.name for o in self.options]


ArgSpec.model_rebuild()
