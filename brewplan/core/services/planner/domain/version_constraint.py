"""
L1 Domain — Version parsing and range matching (pure).

Used by the patch selector (``applies: "<1.62.0"``), by version
conditions (``version_lt: "10.9"``) and by toolchain rules
(``min_version`` / ``max_version``). No I/O, no subprocess.
"""

from __future__ import annotations

import re

_LEADING_DIGITS = re.compile(r"^(\d+)")
_CLAUSE = re.compile(r"^(<=|>=|==|!=|~=|<|>)?\s*(.+)$")


def parse_version(v: str) -> tuple[int, ...]:
    """Parse ``"1.61.0"`` → ``(1, 61, 0)``.

    A leading ``v`` is ignored and each component keeps only its leading
    digits, so ``"7.3.0svn"`` → ``(7, 3, 0)``.

    Raises:
        ValueError: when the first component has no digits.
    """
    parts: list[int] = []
    for comp in v.strip().lstrip("v").split("."):
        m = _LEADING_DIGITS.match(comp)
        if not m:
            break
        parts.append(int(m.group(1)))
    if not parts:
        raise ValueError(f"Not a version: {v!r}")
    return tuple(parts)


def compare_versions(a: str, b: str) -> int:
    """Return -1, 0 or 1. Missing components count as zero."""
    pa, pb = parse_version(a), parse_version(b)
    width = max(len(pa), len(pb))
    pa = pa + (0,) * (width - len(pa))
    pb = pb + (0,) * (width - len(pb))
    return (pa > pb) - (pa < pb)


def _match_clause(version: str, clause: str) -> bool:
    m = _CLAUSE.match(clause.strip())
    if not m:
        raise ValueError(f"Cannot parse version clause: {clause!r}")
    op, ref = m.group(1) or "==", m.group(2).strip()
    cmp = compare_versions(version, ref)

    if op == "<":
        return cmp < 0
    if op == "<=":
        return cmp <= 0
    if op == ">":
        return cmp > 0
    if op == ">=":
        return cmp >= 0
    if op == "!=":
        return cmp != 0
    if op == "~=":
        # same leading components, at least ref
        ref_parts = parse_version(ref)
        prefix = ref_parts[:-1] if len(ref_parts) > 1 else ref_parts
        return cmp >= 0 and parse_version(version)[: len(prefix)] == prefix
    return cmp == 0


def version_matches(version: str, expr: str) -> bool:
    """Check ``version`` against a comma-separated range expression.

    ``">=1.0,<2.0"`` means both clauses must hold. An empty expression
    matches everything.
    """
    if not expr or not expr.strip():
        return True
    return all(_match_clause(version, c) for c in expr.split(",") if c.strip())


def check_version_constraint(
    selected_version: str,
    constraint: dict,
) -> dict:
    """Validate a version against a toolchain bound.

    Constraint types:
        - ``gte``: >= a minimum version
        - ``lte``: <= a maximum version

    Args:
        selected_version: The version string to check, e.g. ``"4.2.1"``.
        constraint: Dict with ``type`` and ``reference``. Examples::

                {"type": "gte", "reference": "4.8"}
                {"type": "lte", "reference": "7.0"}

    Returns:
        ``{"valid": True}`` or ``{"valid": False, "message": "..."}``.
        An unparseable version gives ``{"valid": True, "parse_error": True}``.
    """
    ctype = constraint.get("type", "gte")
    ref = constraint.get("reference", "")
    if ctype not in ("gte", "lte"):
        raise ValueError(f"Unknown constraint type: {ctype!r}")

    try:
        cmp = compare_versions(selected_version, ref)
    except ValueError:
        return {"valid": True, "parse_error": True}

    if ctype == "gte":
        if cmp >= 0:
            return {"valid": True}
        return {
            "valid": False,
            "message": f"Version {selected_version} < {ref}. Minimum required: {ref}.",
        }

    if cmp <= 0:
        return {"valid": True}
    return {
        "valid": False,
        "message": f"Version {selected_version} > {ref}. Maximum allowed: {ref}.",
    }
