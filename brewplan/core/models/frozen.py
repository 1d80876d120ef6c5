"""
Read-only mapping fields for frozen models.

``frozen=True`` stops attribute assignment but not ``plan.options["x"] = 1``.
Mapping fields are stored as :class:`FrozenDict` instead. It is a ``dict``
subclass, so serialisation and equality are unchanged, but every mutator
raises ``TypeError``.
"""

from __future__ import annotations

from typing import Annotated, NoReturn

from pydantic import AfterValidator


class FrozenDict(dict):
    """A ``dict`` that cannot be changed after construction."""

    def _readonly(self, *args, **kwargs) -> NoReturn:
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = _readonly
    __delitem__ = _readonly
    __ior__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

    def __hash__(self) -> int:  # type: ignore[override]
        return hash(frozenset(self.items()))

    def __reduce__(self):
        # copy/deepcopy/pickle rebuild through __init__, not __setitem__
        return (type(self), (dict(self),))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict.__repr__(self)})"


StrMap = Annotated[dict[str, str], AfterValidator(FrozenDict)]
OptionValueMap = Annotated[dict[str, bool | str], AfterValidator(FrozenDict)]
FlagTable = Annotated[
    dict[str, Annotated[dict[str, tuple[str, ...]], AfterValidator(FrozenDict)]],
    AfterValidator(FrozenDict),
]
