"""
L4 Synthesis — Command synthesis.

Renders resolved options, dependency decisions and selected patches
into the ordered CommandStep list of a BuildPlan.

Phase order is fixed:

    patch → prepare → configure → build → caveat → test_setup → test

Within configure/build each step's arguments are its template
arguments in declaration order, followed by the flag fragments of every
option in option declaration order. Options without flags for a step
contribute nothing. A fragment that has to sit between template
arguments is written as a conditional template argument instead.
Nothing here reads the environment: every host detail comes from the
PlatformFacts snapshot.
"""

from __future__ import annotations

import logging

from brewplan.core.models.descriptor import (
    ArgSpec,
    FileSpec,
    PackageDescriptor,
    PatchSpec,
    flag_key,
)
from brewplan.core.models.facts import PlatformFacts
from brewplan.core.models.layout import Layout
from brewplan.core.models.plan import (
    BottleRef,
    BuildPlan,
    CommandStep,
    DependencyDecision,
    ResolvedOptionSet,
    StepExpectation,
)
from brewplan.core.services.planner.domain.conditions import evaluate_condition
from brewplan.core.services.planner.domain.templating import render, render_all
from brewplan.core.services.planner.resolver.bottle_selection import (
    bottle_filename,
    bottle_url,
)
from brewplan.core.services.planner.resolver.dependency_resolution import split_decisions

logger = logging.getLogger(__name__)

# Environment signals overriding the detected job count, first wins.
JOB_OVERRIDE_VARS = ("BREWPLAN_MAKE_JOBS", "HOMEBREW_MAKE_JOBS")

TEST_DIR = "test"


# ── Variables ──────────────────────────────────────────────────


def compute_jobs(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
) -> int:
    """Parallelism for build steps.

    Starts from ``facts.job_slots``; a ``*_MAKE_JOBS`` variable in the
    snapshot replaces it; the first matching descriptor job override
    replaces both, even when it is above ``job_slots``.
    """
    jobs = max(facts.job_slots, 1)
    for var in JOB_OVERRIDE_VARS:
        raw = facts.env.get(var)
        if not raw:
            continue
        try:
            jobs = max(int(raw), 1)
            break
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", var, raw)

    for override in descriptor.build.job_overrides:
        if evaluate_condition(override.when, resolved, facts, "job override"):
            jobs = override.jobs
            break
    return jobs


def build_variables(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    layout: Layout,
    *,
    version: str,
    included: tuple[DependencyDecision, ...] = (),
    jobs: int = 1,
) -> dict[str, str]:
    """Template variables for one plan."""
    pkg_version = descriptor.pkg_version if version == descriptor.version else version
    variables = layout.variables(descriptor.name, pkg_version)
    variables.update({
        "name": descriptor.name,
        "version": version,
        "pkg_version": pkg_version,
        "jobs": str(jobs),
        "cxx": facts.cxx,
    })
    for name, value in resolved.values.items():
        variables[f"opt.{name}"] = flag_key(value)
    for dep in included:
        variables[f"deps.{dep.name}"] = layout.opt_prefix(dep.name)
    return variables


# ── Argument rendering ─────────────────────────────────────────


def _render_arg(
    arg: str | ArgSpec,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    variables: dict[str, str],
    context: str,
    strict: bool = True,
) -> str | None:
    """Render one argument; ``None`` when its condition drops it."""
    if isinstance(arg, str):
        return render(arg, variables, context, strict)
    if not evaluate_condition(arg.when, resolved, facts, context):
        return None

    if arg.items:
        values = [
            v for v in (
                _render_arg(item, resolved, facts, variables, context, strict)
                for item in arg.items
            )
            if v
        ]
        if not values:
            return None
        joined = arg.separator.join(values)
        return render(
            (arg.format or "{items}").replace("{items}", joined), variables, context, strict
        )

    return render(arg.value, variables, context, strict)


def render_args(
    args: tuple,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    variables: dict[str, str],
    context: str,
    strict: bool = True,
) -> list[str]:
    """Render an argument list, dropping arguments whose condition fails.

    ``strict=False`` is for file content, see :func:`render`.
    """
    rendered: list[str] = []
    for arg in args:
        value = _render_arg(arg, resolved, facts, variables, context, strict)
        if value is not None:
            rendered.append(value)
    return rendered


def option_flags(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    step_id: str,
) -> list[str]:
    """Flag fragments for ``step_id``, in option declaration order."""
    fragments: list[str] = []
    for opt in descriptor.options:
        value = resolved.values.get(opt.name, opt.default)
        fragments.extend(opt.flags.get(step_id, {}).get(flag_key(value), ()))
    return fragments


# ── Phase builders ─────────────────────────────────────────────


def _patch_steps(patches: tuple[PatchSpec, ...]) -> list[CommandStep]:
    steps: list[CommandStep] = []
    for patch in patches:
        filename = patch.url.rsplit("/", 1)[-1]
        steps.append(CommandStep(
            kind="patch",
            label=f"patch {filename}",
            executable="patch",
            args=(f"-p{patch.strip}", "-i", filename),
            url=patch.url,
            digest=patch.digest,
            digest_type=patch.digest_type,
        ))
    return steps


def _file_step(
    fs: FileSpec,
    kind: str,
    cwd: str,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    variables: dict[str, str],
) -> CommandStep | None:
    context = f"file '{fs.path}'"
    if not evaluate_condition(fs.when, resolved, facts, context):
        return None
    lines = render_args(fs.lines, resolved, facts, variables, context, strict=False)
    if not lines:
        return None
    append = fs.mode == "append"
    return CommandStep(
        kind=kind,
        label=f"{'append to' if append else 'write'} {fs.path}",
        executable="tee",
        args=("-a", fs.path) if append else (fs.path,),
        cwd=cwd,
        stdin="\n".join(lines) + "\n",
    )


def _prepare_steps(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    variables: dict[str, str],
) -> list[CommandStep]:
    steps = []
    for fs in descriptor.build.prepare:
        step = _file_step(fs, "prepare", ".", resolved, facts, variables)
        if step is not None:
            steps.append(step)
    return steps


def _build_env(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    variables: dict[str, str],
) -> dict[str, str]:
    env: dict[str, str] = {}
    for setting in descriptor.build.env:
        context = f"env '{setting.name}'"
        if evaluate_condition(setting.when, resolved, facts, context):
            env[setting.name] = render(setting.value, variables, context)
    return env


def _phase_steps(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    variables: dict[str, str],
    env: dict[str, str],
) -> list[CommandStep]:
    steps: list[CommandStep] = []
    for phase in ("configure", "build"):
        for tpl in descriptor.build.steps:
            if tpl.phase != phase:
                continue
            context = f"step '{tpl.id}'"
            if not evaluate_condition(tpl.when, resolved, facts, context):
                logger.debug("Skipping step %s: condition not met", tpl.id)
                continue
            args = render_args(tpl.args, resolved, facts, variables, context)
            args.extend(render_all(option_flags(descriptor, resolved, tpl.id), variables, context))
            steps.append(CommandStep(
                kind=phase,
                label=tpl.id,
                executable=render(tpl.executable, variables, context),
                args=tuple(args),
                cwd=render(tpl.cwd, variables, context),
                env=dict(env),
            ))
    return steps


def caveat_messages(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    *,
    from_source: bool = True,
) -> list[str]:
    """Caveats that apply; build-only caveats are dropped for bottles."""
    messages = []
    for caveat in descriptor.caveats:
        if caveat.source_only and not from_source:
            continue
        if evaluate_condition(caveat.when, resolved, facts, "caveat"):
            messages.append(caveat.text)
    return messages


def _caveat_steps(messages: list[str]) -> list[CommandStep]:
    return [CommandStep(kind="caveat", label="caveat", message=m) for m in messages]


def _test_steps(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    variables: dict[str, str],
) -> list[CommandStep]:
    test = descriptor.test
    if test is None:
        return []

    steps: list[CommandStep] = []
    for fs in test.files:
        step = _file_step(fs, "test_setup", TEST_DIR, resolved, facts, variables)
        if step is not None:
            steps.append(step)
    for i, cmd in enumerate(test.setup):
        context = f"test setup #{i}"
        steps.append(CommandStep(
            kind="test_setup",
            label=f"test setup #{i}",
            executable=render(cmd.executable, variables, context),
            args=render_all(cmd.args, variables, context),
            cwd=TEST_DIR,
        ))
    steps.append(CommandStep(
        kind="test",
        label="test",
        executable=render(test.command.executable, variables, "test"),
        args=render_all(test.command.args, variables, "test"),
        cwd=TEST_DIR,
        expect=StepExpectation(
            stdout=test.expect_stdout,
            exit_code=test.expect_exit_code,
            strip=test.strip_output,
        ),
    ))
    return steps


# ── Public API ─────────────────────────────────────────────────


def synthesize_plan(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    decisions: tuple[DependencyDecision, ...],
    patches: tuple[PatchSpec, ...],
    layout: Layout | None = None,
    *,
    head: bool = False,
    advisories: tuple[str, ...] = (),
) -> BuildPlan:
    """Build the from-source plan.

    Args:
        descriptor: The package.
        resolved: Validated option set.
        facts: Host snapshot.
        decisions: Output of ``resolve_dependencies``.
        patches: Output of ``select_patches``.
        layout: Install locations (default ``/usr/local``).
        head: Build the VCS head instead of the stable source.
        advisories: Extra advisories to carry into the plan.

    Returns:
        An immutable BuildPlan.

    Raises:
        TemplateError: a rendered argument keeps a ``{placeholder}``.
        UnresolvedFactError: a build condition needs an unknown fact.
    """
    layout = layout or Layout()
    version = "HEAD" if head else descriptor.version
    included, omitted = split_decisions(decisions)
    jobs = compute_jobs(descriptor, resolved, facts)
    variables = build_variables(
        descriptor, resolved, facts, layout,
        version=version, included=included, jobs=jobs,
    )
    env = _build_env(descriptor, resolved, facts, variables)
    caveats = caveat_messages(descriptor, resolved, facts, from_source=True)

    steps: list[CommandStep] = []
    steps.extend(_patch_steps(patches))
    steps.extend(_prepare_steps(descriptor, resolved, facts, variables))
    steps.extend(_phase_steps(descriptor, resolved, facts, variables, env))
    steps.extend(_caveat_steps(caveats))
    steps.extend(_test_steps(descriptor, resolved, facts, variables))

    logger.debug("Synthesized %d step(s) for %s %s", len(steps), descriptor.name, version)
    return BuildPlan(
        name=descriptor.name,
        version=version,
        mode="source",
        source=descriptor.head if head else descriptor.source,
        resources=descriptor.resources,
        patches=patches,
        options=dict(resolved.values),
        steps=tuple(steps),
        dependencies=included,
        diagnostics=omitted,
        advisories=tuple(resolved.advisories) + tuple(advisories),
        caveats=tuple(caveats),
    )


def unused_options_advisory(resolved: ResolvedOptionSet, ref: BottleRef) -> str | None:
    """Advisory naming explicitly selected options a bottle ignores."""
    if not resolved.explicit:
        return None
    return (
        f"Options had no effect; using prebuilt artifact for {ref.tag}: "
        f"{', '.join(resolved.explicit)}"
    )


def synthesize_bottle_plan(
    descriptor: PackageDescriptor,
    resolved: ResolvedOptionSet,
    facts: PlatformFacts,
    ref: BottleRef,
    layout: Layout | None = None,
) -> BuildPlan:
    """Build the prebuilt-artifact plan: one ``pour`` step.

    Caveats that describe a from-source build are left out; the smoke
    test, if declared, still follows the pour step.
    """
    layout = layout or Layout()
    variables = build_variables(
        descriptor, resolved, facts, layout,
        version=descriptor.version,
        jobs=compute_jobs(descriptor, resolved, facts),
    )
    filename = bottle_filename(descriptor.name, descriptor.pkg_version, ref)
    caveats = caveat_messages(descriptor, resolved, facts, from_source=False)

    steps: list[CommandStep] = [CommandStep(
        kind="pour",
        label=f"pour {filename}",
        executable="tar",
        args=("-xzf", filename, "-C", layout.cellar),
        url=bottle_url(descriptor.name, descriptor.pkg_version, ref),
        digest=ref.digest,
        digest_type=ref.digest_type,
    )]
    steps.extend(_caveat_steps(caveats))
    steps.extend(_test_steps(descriptor, resolved, facts, variables))

    advisories: list[str] = list(resolved.advisories)
    note = unused_options_advisory(resolved, ref)
    if note:
        advisories.append(note)

    return BuildPlan(
        name=descriptor.name,
        version=descriptor.version,
        mode="bottle",
        bottle=ref,
        options=dict(resolved.values),
        steps=tuple(steps),
        advisories=tuple(advisories),
        caveats=tuple(caveats),
    )
