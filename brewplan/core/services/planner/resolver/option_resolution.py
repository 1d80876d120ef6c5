"""
L2 Resolver — Option resolution.

Turns user selections (a name → value mapping plus raw flag strings
such as ``--with-mpi``) into a ResolvedOptionSet: deprecated names are
rewritten first, then declared defaults fill every option left unset.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from brewplan.core.models.descriptor import OptionSpec, PackageDescriptor
from brewplan.core.models.plan import OptionValueT, ResolvedOptionSet
from brewplan.core.services.planner.errors import InvalidChoiceError, UnknownOptionError

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "yes", "on", "1"}
_FALSE_STRINGS = {"false", "no", "off", "0"}


def parse_raw_flag(flag: str) -> tuple[str, Any]:
    """Parse one raw option string into ``(name, value)``.

    ``--with-mpi`` → ``("mpi", True)``,
    ``--without-single`` → ``("single", False)``,
    ``--variant=debug`` → ``("variant", "debug")``,
    ``--cxx11`` → ``("cxx11", True)``.
    """
    text = flag.strip().lstrip("-")
    if "=" in text:
        name, value = text.split("=", 1)
        return name, value
    if text.startswith("without-"):
        return text[len("without-"):], False
    if text.startswith("with-"):
        return text[len("with-"):], True
    return text, True


def _coerce(opt: OptionSpec, value: Any) -> OptionValueT:
    if opt.kind == "bool":
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.lower() in _TRUE_STRINGS:
            return True
        if isinstance(value, str) and value.lower() in _FALSE_STRINGS:
            return False
        raise InvalidChoiceError(opt.name, value, ["true", "false"])

    if not isinstance(value, str) or value not in opt.choices:
        raise InvalidChoiceError(opt.name, value, list(opt.choices))
    return value


def resolve_options(
    descriptor: PackageDescriptor,
    selections: Mapping[str, Any] | None = None,
    raw_flags: Iterable[str] = (),
) -> ResolvedOptionSet:
    """Resolve the effective option set for one compilation.

    Raw flags are applied first, then ``selections`` (which win on a
    repeated name).

    Returns:
        The resolved set, with one advisory per deprecated name used.

    Raises:
        UnknownOptionError: a name (after alias rewriting) is not declared.
        InvalidChoiceError: a value is outside the option's choices, or a
            boolean option got a non-boolean value.
    """
    requested: list[tuple[str, Any]] = [parse_raw_flag(f) for f in raw_flags]
    requested.extend((selections or {}).items())

    aliases = descriptor.alias_table()
    advisories: list[str] = []
    chosen: dict[str, OptionValueT] = {}
    explicit: list[str] = []

    for name, value in requested:
        if name in aliases:
            new_name = aliases[name]
            note = f"Option '{name}' is deprecated; using '{new_name}'"
            if note not in advisories:
                advisories.append(note)
            logger.info(note)
            name = new_name

        opt = descriptor.get_option(name)
        if opt is None:
            raise UnknownOptionError(name, descriptor.option_names)

        chosen[name] = _coerce(opt, value)
        if name not in explicit:
            explicit.append(name)

    values: dict[str, OptionValueT] = {}
    for opt in descriptor.options:
        values[opt.name] = chosen.get(opt.name, opt.default)

    logger.debug("Resolved options for %s: %s", descriptor.name, values)
    return ResolvedOptionSet(
        values=values,
        explicit=tuple(explicit),
        advisories=tuple(advisories),
    )
