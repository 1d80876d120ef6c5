"""
L1 Domain — ``{var}`` substitution for command templates (pure).

Descriptor arguments carry placeholders such as ``{prefix}``,
``{jobs}``, ``{opt.mpi}`` or ``{deps.icu4c}``. They are replaced by
plain string substitution; anything still shaped like ``{name}``
afterwards is an error, so a plan never ships a literal placeholder.

File content (``build.prepare`` and smoke-test sources) is rendered
leniently: source code such as ``int v{x};`` is kept as written, and
only leftovers in the ``opt.``/``deps.`` namespaces are errors.
"""

from __future__ import annotations

import re

from brewplan.core.services.planner.errors import TemplateError

_PLACEHOLDER = re.compile(r"\{([a-zA-Z_][a-zA-Z0-9_.+-]*)\}")

# Namespaces that are always meant as template variables.
TEMPLATE_NAMESPACES = ("opt.", "deps.")


def substitute(text: str, variables: dict[str, str]) -> str:
    """Replace every ``{key}`` in ``text`` with its variable value."""
    for key, value in variables.items():
        text = text.replace(f"{{{key}}}", str(value))
    return text


def check_unsubstituted(rendered: str, strict: bool = True) -> list[str]:
    """Return the names of ``{var}`` placeholders left in ``rendered``.

    Empty braces, ``{0}``-style indices and code blocks (``{\\n``) do
    not count. With ``strict=False`` only names in
    :data:`TEMPLATE_NAMESPACES` are reported.
    """
    names = _PLACEHOLDER.findall(rendered)
    if strict:
        return names
    return [n for n in names if n.startswith(TEMPLATE_NAMESPACES)]


def render(text: str, variables: dict[str, str], context: str, strict: bool = True) -> str:
    """Substitute and verify one string.

    ``strict=False`` is for file content: only ``opt.``/``deps.``
    leftovers are errors, other braces are kept as written.

    Raises:
        TemplateError: if a placeholder survives substitution.
    """
    rendered = substitute(text, variables)
    leftover = check_unsubstituted(rendered, strict)
    if leftover:
        raise TemplateError(sorted(set(leftover)), context)
    return rendered


def render_all(tokens: list[str] | tuple[str, ...], variables: dict[str, str], context: str) -> tuple[str, ...]:
    """Render a list of arguments, preserving order."""
    return tuple(render(t, variables, context) for t in tokens)
