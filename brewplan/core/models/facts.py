"""
Platform facts — read-only snapshot of the host a plan is built for.

Captured once per compilation (detected or loaded from YAML) and passed
by value into every resolver, so bottle choice and flag synthesis always
agree on what the host looks like.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from brewplan.core.models.frozen import FrozenDict, StrMap

# Fact keys usable in descriptor conditions. ``env.<NAME>`` is also valid.
FACT_KEYS = (
    "os_family",
    "os_version",
    "os_version_tag",
    "arch",
    "word_size",
    "compiler",
    "compiler_version",
    "compiler_build",
    "cxx",
    "job_slots",
)


class UnknownFact(LookupError):
    """Raised by :meth:`PlatformFacts.lookup` for a fact it cannot supply."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key


class PlatformFacts(BaseModel):
    """Host facts: OS, CPU, active compiler and relevant environment."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    os_family: Literal["macos", "linux"] = "linux"
    os_version: str = ""
    os_version_tag: str = ""
    arch: str = "x86_64"
    word_size: int = 64
    compiler: str = ""
    compiler_version: str = ""
    compiler_build: int | None = None
    cxx: str = "c++"
    job_slots: int = 1
    env: StrMap = Field(default_factory=FrozenDict)

    def lookup(self, key: str) -> Any:
        """Return the value of a fact key.

        ``env.<NAME>`` returns the variable or ``None`` when unset; an
        unset variable is a valid answer. Any other key whose value is
        unknown (empty or ``None``) raises :class:`UnknownFact`.
        """
        if key.startswith("env."):
            return self.env.get(key[4:])
        if key not in FACT_KEYS:
            raise UnknownFact(key)
        value = getattr(self, key)
        if value is None or value == "":
            raise UnknownFact(key)
        return value
