"""
Planner errors — everything that stops a plan from being produced.

All of them are raised before the first CommandStep exists, so a caller
never sees a partial plan. Each error names the options, rules or facts
involved and serialises with ``to_dict()`` for JSON output.
"""

from __future__ import annotations

from typing import Any


class PlanError(Exception):
    """Base class for resolution failures."""

    code = "plan_error"

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, **self.details}


class UnknownOptionError(PlanError):
    """A selected option name (after alias rewriting) is not declared."""

    code = "unknown_option"

    def __init__(self, option: str, known: list[str]) -> None:
        super().__init__(
            f"Unknown option '{option}'. Valid options: "
            f"{', '.join(known) if known else '(none)'}",
            option=option,
            known=known,
        )
        self.option = option


class InvalidChoiceError(PlanError):
    """A value is outside the option's declared choice set."""

    code = "invalid_choice"

    def __init__(self, option: str, value: Any, choices: list[str]) -> None:
        super().__init__(
            f"Invalid value {value!r} for option '{option}'. "
            f"Must be one of: {', '.join(choices)}",
            option=option,
            value=value,
            choices=choices,
        )
        self.option = option
        self.value = value


class OptionConflictError(PlanError):
    """A mutual-exclusion rule matched the resolved options."""

    code = "option_conflict"

    def __init__(self, options: list[str], hint: str = "") -> None:
        message = f"Options {' and '.join(options)} cannot be combined."
        if hint:
            message = f"{message} {hint}"
        super().__init__(message, options=options, hint=hint)
        self.options = options
        self.hint = hint


class UnsupportedToolchainError(PlanError):
    """The active compiler is rejected by a toolchain rule."""

    code = "unsupported_toolchain"

    def __init__(
        self,
        compiler: str,
        version: str,
        cause: str = "",
        feature: str = "",
    ) -> None:
        subject = f"{compiler} {version}".strip()
        if feature:
            message = f"Compiler {subject} does not support {feature}."
        else:
            message = f"Compiler {subject} is not supported."
        if cause:
            message = f"{message} {cause}"
        super().__init__(
            message,
            compiler=compiler,
            version=version,
            cause=cause,
            feature=feature,
        )
        self.compiler = compiler
        self.version = version


class UnresolvedFactError(PlanError):
    """A condition refers to a fact or option nobody can supply."""

    code = "unresolved_fact"

    def __init__(self, subject: str, context: str = "") -> None:
        where = f" (in {context})" if context else ""
        super().__init__(
            f"Cannot evaluate condition: '{subject}' is unknown{where}.",
            subject=subject,
            context=context,
        )
        self.subject = subject


class UnresolvedDependencyPredicateError(UnresolvedFactError):
    """A dependency predicate needs a fact the provider cannot supply."""

    code = "unresolved_dependency_predicate"

    def __init__(self, dependency: str, subject: str) -> None:
        super().__init__(subject, context=f"dependency '{dependency}'")
        self.dependency = dependency
        self.details["dependency"] = dependency


class TemplateError(PlanError):
    """A rendered command still contains ``{placeholders}``."""

    code = "template_error"

    def __init__(self, placeholders: list[str], context: str) -> None:
        super().__init__(
            f"Unresolved placeholders {', '.join(placeholders)} in {context}.",
            placeholders=placeholders,
            context=context,
        )
