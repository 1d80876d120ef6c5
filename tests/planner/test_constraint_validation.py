"""
Planner — Constraint validator tests.
"""

from __future__ import annotations

import pytest

from brewplan.core.models.descriptor import CompatibilityRule
from brewplan.core.models.plan import ResolvedOptionSet
from brewplan.core.services.planner.errors import (
    OptionConflictError,
    UnresolvedFactError,
    UnsupportedToolchainError,
)
from brewplan.core.services.planner.resolver.constraint_validation import validate_constraints
from tests.planner.simulated_facts import FACTS


def _rule(**kwargs) -> CompatibilityRule:
    return CompatibilityRule.model_validate(kwargs)


CONFLICT = _rule(
    kind="conflict",
    options=[{"option": "mpi", "equals": True}, {"option": "single", "equals": True}],
    hint="Use --without-single.",
)
LLVM_2335 = _rule(kind="toolchain", compiler="llvm", build=2335, cause="Dropped arguments")
NEEDS_CXX11 = _rule(kind="needs", feature="cxx11", when="cxx11")


class TestConflictRules:
    def test_conflict_raises_with_names_and_hint(self, make_options):
        with pytest.raises(OptionConflictError) as exc:
            validate_constraints(
                make_options(mpi=True, single=True), FACTS["sierra-clang"], [CONFLICT],
            )
        assert exc.value.options == ["mpi", "single"]
        assert "mpi and single" in str(exc.value)
        assert "Use --without-single." in str(exc.value)

    def test_partial_match_passes(self, make_options):
        validate_constraints(
            make_options(mpi=True, single=False), FACTS["sierra-clang"], [CONFLICT],
        )

    def test_first_violation_in_declaration_order(self, make_options):
        other = _rule(
            kind="conflict",
            options=[{"option": "single", "equals": True}, {"option": "static", "equals": True}],
        )
        with pytest.raises(OptionConflictError) as exc:
            validate_constraints(
                make_options(mpi=True, single=True, static=True),
                FACTS["sierra-clang"],
                [other, CONFLICT],
            )
        assert exc.value.options == ["single", "static"]

    def test_when_gate_skips_rule(self, make_options):
        gated = _rule(
            kind="conflict",
            when={"fact": "os_family", "equals": "linux"},
            options=[{"option": "mpi", "equals": True}, {"option": "single", "equals": True}],
        )
        validate_constraints(make_options(mpi=True, single=True), FACTS["sierra-clang"], [gated])


class TestToolchainRules:
    def test_build_at_limit_fails(self, make_options):
        with pytest.raises(UnsupportedToolchainError) as exc:
            validate_constraints(make_options(), FACTS["mountain-lion-llvm"], [LLVM_2335])
        assert exc.value.compiler == "llvm"
        assert exc.value.version == "build 2335"
        assert "Dropped arguments" in str(exc.value)

    def test_newer_build_passes(self, make_options):
        facts = FACTS["mountain-lion-llvm"].model_copy(update={"compiler_build": 2336})
        validate_constraints(make_options(), facts, [LLVM_2335])

    def test_other_compiler_unaffected(self, make_options):
        validate_constraints(make_options(), FACTS["sierra-clang"], [LLVM_2335])

    def test_min_version(self, make_options):
        rule = _rule(kind="toolchain", compiler="gcc", min_version="12.0")
        with pytest.raises(UnsupportedToolchainError):
            validate_constraints(make_options(), FACTS["ubuntu-gcc"], [rule])
        validate_constraints(make_options(), FACTS["ubuntu-arm64-gcc"], [rule])

    def test_max_version(self, make_options):
        rule = _rule(kind="toolchain", compiler="gcc", max_version="11.9")
        validate_constraints(make_options(), FACTS["ubuntu-gcc"], [rule])
        with pytest.raises(UnsupportedToolchainError):
            validate_constraints(make_options(), FACTS["ubuntu-arm64-gcc"], [rule])

    def test_toolchain_rules_can_be_skipped(self, make_options):
        validate_constraints(
            make_options(), FACTS["mountain-lion-llvm"], [LLVM_2335], toolchain=False,
        )

    def test_conflicts_still_checked_without_toolchain(self, make_options):
        with pytest.raises(OptionConflictError):
            validate_constraints(
                make_options(mpi=True, single=True), FACTS["el-capitan-clang"],
                [LLVM_2335, CONFLICT], toolchain=False,
            )


class TestFeatureRules:
    def test_not_requested(self, make_options):
        validate_constraints(make_options(cxx11=False), FACTS["leopard-ppc-gcc42"], [NEEDS_CXX11])

    def test_gcc42_has_no_cxx11(self, make_options):
        with pytest.raises(UnsupportedToolchainError) as exc:
            validate_constraints(
                make_options(cxx11=True), FACTS["leopard-ppc-gcc42"], [NEEDS_CXX11],
            )
        assert "C++11" in str(exc.value)

    def test_apple_clang_uses_build_number(self, make_options):
        validate_constraints(make_options(cxx11=True), FACTS["el-capitan-clang"], [NEEDS_CXX11])
        old = FACTS["el-capitan-clang"].model_copy(update={"compiler_build": 318})
        with pytest.raises(UnsupportedToolchainError):
            validate_constraints(make_options(cxx11=True), old, [NEEDS_CXX11])

    def test_gcc_uses_version(self, make_options):
        validate_constraints(make_options(cxx11=True), FACTS["ubuntu-gcc"], [NEEDS_CXX11])
        old = FACTS["ubuntu-gcc"].model_copy(update={"compiler_version": "4.6.3"})
        with pytest.raises(UnsupportedToolchainError):
            validate_constraints(make_options(cxx11=True), old, [NEEDS_CXX11])

    def test_unknown_compiler_is_unresolved(self, make_options):
        facts = FACTS["ubuntu-gcc"].model_copy(update={"compiler": ""})
        with pytest.raises(UnresolvedFactError):
            validate_constraints(make_options(cxx11=True), facts, [NEEDS_CXX11])

    def test_gate_on_unknown_option(self):
        with pytest.raises(UnresolvedFactError):
            validate_constraints(ResolvedOptionSet(), FACTS["ubuntu-gcc"], [NEEDS_CXX11])
