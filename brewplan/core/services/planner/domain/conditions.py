"""
L1 Domain — Declarative condition evaluation (pure).

Evaluates the ``when`` / ``exclude_when`` predicates of a descriptor
against a resolved option set and a platform facts snapshot.

Condition forms::

    None / True / False
    "name"  /  "!name"                         # option on / off
    {"option": "name", "equals": value}
    {"fact": "key", <operator>: value}
    {"all": [...]}  {"any": [...]}  {"not": cond}

Fact operators: ``equals``, ``not_equals``, ``in``, ``not_in``,
``present``, ``version_lt``, ``version_lte``, ``version_gt``,
``version_gte``. With no operator the value's truthiness is used.
"""

from __future__ import annotations

from typing import Any

from brewplan.core.models.facts import PlatformFacts, UnknownFact
from brewplan.core.models.plan import ResolvedOptionSet
from brewplan.core.services.planner.domain.version_constraint import compare_versions
from brewplan.core.services.planner.errors import PlanError, UnresolvedFactError

_VERSION_OPS = {
    "version_lt": lambda c: c < 0,
    "version_lte": lambda c: c <= 0,
    "version_gt": lambda c: c > 0,
    "version_gte": lambda c: c >= 0,
}


def _option_value(name: str, options: ResolvedOptionSet, context: str) -> Any:
    if name not in options:
        raise UnresolvedFactError(name, context)
    return options[name]


def _fact_value(key: str, facts: PlatformFacts, context: str) -> Any:
    try:
        return facts.lookup(key)
    except UnknownFact as e:
        raise UnresolvedFactError(e.key, context) from e


def _apply_operator(subject: Any, cond: dict) -> bool:
    if "equals" in cond:
        return subject == cond["equals"]
    if "not_equals" in cond:
        return subject != cond["not_equals"]
    if "in" in cond:
        return subject in cond["in"]
    if "not_in" in cond:
        return subject not in cond["not_in"]
    if "present" in cond:
        is_present = subject is not None and subject != ""
        return is_present == bool(cond["present"])
    for op, test in _VERSION_OPS.items():
        if op in cond:
            if subject is None or subject == "":
                return False
            return test(compare_versions(str(subject), str(cond[op])))
    return bool(subject)


def evaluate_condition(
    cond: Any,
    options: ResolvedOptionSet,
    facts: PlatformFacts,
    context: str = "",
) -> bool:
    """Evaluate one condition.

    Args:
        cond: The condition, in any of the forms above.
        options: Resolved option values.
        facts: Host snapshot.
        context: Where the condition lives, used in error messages.

    Returns:
        True if the condition holds.

    Raises:
        UnresolvedFactError: when the condition names an option that is
            not declared or a fact the snapshot cannot supply.
    """
    if cond is None:
        return True
    if isinstance(cond, bool):
        return cond
    if isinstance(cond, str):
        if cond.startswith("!"):
            return not bool(_option_value(cond[1:], options, context))
        return bool(_option_value(cond, options, context))
    if not isinstance(cond, dict):
        raise PlanError(f"Malformed condition {cond!r} in {context or 'descriptor'}")

    if "all" in cond:
        return all(evaluate_condition(c, options, facts, context) for c in cond["all"])
    if "any" in cond:
        return any(evaluate_condition(c, options, facts, context) for c in cond["any"])
    if "not" in cond:
        return not evaluate_condition(cond["not"], options, facts, context)

    if "option" in cond:
        subject = _option_value(cond["option"], options, context)
    elif "fact" in cond:
        subject = _fact_value(cond["fact"], facts, context)
    else:
        raise PlanError(f"Malformed condition {cond!r} in {context or 'descriptor'}")
    return _apply_operator(subject, cond)
