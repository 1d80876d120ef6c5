"""
Planner — End-to-end compilation tests.

Covers the pipeline properties: determinism, fail-closed validation,
bottle short-circuit and the threading/patch scenarios.
"""

from __future__ import annotations

import copy
from unittest.mock import patch

import pytest

from brewplan.core.config.loader import get_formula, list_formulas
from brewplan.core.models.descriptor import PackageDescriptor
from brewplan.core.services.planner.errors import (
    OptionConflictError,
    PlanError,
    TemplateError,
    UnsupportedToolchainError,
)
from brewplan.core.services.planner.orchestration.compiler import compile_plan
from tests.conftest import THREADING_DESCRIPTOR
from tests.planner.simulated_facts import FACTS

ALL_FORMULAS = list_formulas()
ALL_FACTS = sorted(FACTS)


class TestThreadingScenario:
    """mpi and single may not both be on."""

    def test_mpi_with_default_single_conflicts(self, threading_descriptor):
        with pytest.raises(OptionConflictError) as exc:
            compile_plan(threading_descriptor, {"mpi": True}, FACTS["ubuntu-gcc"])
        assert exc.value.options == ["mpi", "single"]

    def test_mpi_without_single(self, threading_descriptor):
        plan = compile_plan(
            threading_descriptor, {"mpi": True, "single": False}, FACTS["ubuntu-gcc"],
        )
        assert plan.dependency_names == ["open-mpi", "zlib"]
        install = plan.steps_of("build")[0]
        assert "threading=multi" in install.args
        assert not any(",single" in a for a in install.args)

    def test_patch_applies_below_1_62(self, threading_descriptor):
        plan = compile_plan(threading_descriptor, facts=FACTS["ubuntu-gcc"])
        assert len(plan.patches) == 1
        assert plan.steps[0].kind == "patch"

    def test_patch_skipped_at_1_62(self, threading_descriptor):
        newer = threading_descriptor.model_copy(update={"version": "1.62.0"})
        plan = compile_plan(newer, facts=FACTS["ubuntu-gcc"])
        assert plan.patches == ()
        assert plan.steps_of("patch") == []


class TestFailClosed:
    def test_no_plan_on_conflict(self):
        boost = get_formula("boost")
        with patch(
            "brewplan.core.services.planner.orchestration.compiler.synthesize_plan",
        ) as synth:
            with pytest.raises(OptionConflictError):
                compile_plan(boost, {"mpi": True}, FACTS["sierra-clang"])
        synth.assert_not_called()

    def test_conflict_still_checked_for_bottles(self):
        boost = get_formula("boost")
        with pytest.raises(OptionConflictError):
            compile_plan(boost, raw_flags=["--with-mpi"], facts=FACTS["el-capitan-clang"])

    def test_llvm_build_rejected(self):
        boost = get_formula("boost")
        with pytest.raises(UnsupportedToolchainError) as exc:
            compile_plan(boost, facts=FACTS["mountain-lion-llvm"])
        assert exc.value.to_dict()["code"] == "unsupported_toolchain"

    def test_cxx11_needs_modern_compiler(self):
        boost = get_formula("boost")
        with pytest.raises(UnsupportedToolchainError):
            compile_plan(boost, {"cxx11": True}, FACTS["leopard-ppc-gcc42"])

    def test_unparseable_patch_range_is_plan_error(self):
        descriptor = PackageDescriptor.model_validate({
            **THREADING_DESCRIPTOR,
            "patches": [{"url": "https://example.org/head-only.patch", "applies": "HEAD"}],
        })
        with pytest.raises(PlanError) as exc:
            compile_plan(descriptor, facts=FACTS["ubuntu-gcc"])
        assert exc.value.to_dict()["patch"] == "https://example.org/head-only.patch"

    def test_head_without_head_source(self):
        with pytest.raises(PlanError):
            compile_plan(get_formula("libsoxr"), facts=FACTS["sierra-clang"], head=True)


class TestBottleShortCircuit:
    def test_single_pour_step(self):
        boost = get_formula("boost")
        plan = compile_plan(boost, facts=FACTS["el-capitan-clang"])
        assert plan.mode == "bottle"
        pours = plan.steps_of("pour")
        assert len(pours) == 1
        assert pours[0].digest == boost.bottle.digests["el_capitan"]
        assert pours[0].argv == [
            "tar", "-xzf", "boost-1.61.0_1.el_capitan.bottle.tar.gz", "-C", "/usr/local/Cellar",
        ]
        assert pours[0].url == (
            "https://homebrew.bintray.com/bottles/boost-1.61.0_1.el_capitan.bottle.tar.gz"
        )
        assert plan.steps_of("patch", "prepare", "configure", "build") == []
        assert plan.dependencies == ()

    def test_options_only_change_advisory(self):
        boost = get_formula("boost")
        plain = compile_plan(boost, facts=FACTS["el-capitan-clang"])
        opted = compile_plan(
            boost, {"mpi": True, "single": False}, FACTS["el-capitan-clang"],
        )
        assert plain.steps == opted.steps
        assert plain.advisories == ()
        assert opted.advisories == (
            "Options had no effect; using prebuilt artifact for el_capitan: mpi, single",
        )

    def test_toolchain_rules_skipped(self):
        sysdig = get_formula("sysdig")
        plan = compile_plan(sysdig, facts=FACTS["mountain-lion-llvm"])
        assert plan.mode == "bottle"
        assert plan.bottle.digest_type == "sha1"

    def test_smoke_test_follows_pour(self):
        plan = compile_plan(get_formula("apel"), facts=FACTS["ubuntu-gcc"])
        assert [s.kind for s in plan.steps] == ["pour", "test_setup", "test"]
        assert plan.bottle.cellar == "any_skip_relocation"
        assert "/usr/local/Cellar/apel/10.8/share/emacs/site-lisp/apel/emu" in plan.steps[1].stdin

    def test_build_from_source_ignores_bottle(self):
        plan = compile_plan(
            get_formula("boost"), facts=FACTS["el-capitan-clang"], build_from_source=True,
        )
        assert plan.mode == "source"
        assert plan.bottle is None
        assert plan.steps_of("pour") == []

    def test_source_only_caveats_dropped(self):
        boost = get_formula("boost")
        facts = FACTS["el-capitan-clang"].model_copy(update={"word_size": 32})
        source = compile_plan(boost, facts=facts, build_from_source=True)
        bottle = compile_plan(boost, facts=facts)
        assert len(source.caveats) == 1
        assert bottle.mode == "bottle"
        assert bottle.caveats == ()
        assert bottle.steps_of("caveat") == []


class TestHead:
    def test_head_build(self):
        boost = get_formula("boost")
        plan = compile_plan(boost, facts=FACTS["el-capitan-clang"], head=True)
        assert plan.mode == "source"
        assert plan.version == "HEAD"
        assert plan.source == boost.head
        assert plan.patches == ()
        bootstrap = plan.steps_of("configure")[0]
        assert bootstrap.args[0] == "--prefix=/usr/local/Cellar/boost/HEAD"


class TestDeterminism:
    @pytest.mark.parametrize("facts_id", ALL_FACTS)
    @pytest.mark.parametrize("name", ALL_FORMULAS)
    def test_byte_identical(self, name: str, facts_id: str) -> None:
        descriptor = get_formula(name)
        try:
            first = compile_plan(descriptor, facts=FACTS[facts_id], build_from_source=True)
        except PlanError:
            with pytest.raises(PlanError):
                compile_plan(descriptor, facts=FACTS[facts_id], build_from_source=True)
            return
        second = compile_plan(get_formula(name), facts=FACTS[facts_id], build_from_source=True)
        assert first.to_json() == second.to_json()

    def test_detects_facts_once_when_omitted(self):
        with patch(
            "brewplan.core.services.planner.orchestration.compiler.detect_platform_facts",
            return_value=FACTS["ubuntu-gcc"],
        ) as detect:
            plan = compile_plan(get_formula("libsoxr"))
        detect.assert_called_once_with()
        assert plan.mode == "bottle"


class TestFormulaCoverage:
    """Every built-in formula plans on every simulated host."""

    @pytest.mark.parametrize("facts_id", ALL_FACTS)
    @pytest.mark.parametrize("name", ALL_FORMULAS)
    def test_plans_or_fails_cleanly(self, name: str, facts_id: str) -> None:
        try:
            plan = compile_plan(get_formula(name), facts=FACTS[facts_id])
        except PlanError as e:
            assert e.to_dict()["error"]
            return
        assert plan.steps
        install_like = plan.steps_of("pour", "build")
        assert install_like, f"{name} on {facts_id} has nothing that installs"
        if plan.mode == "bottle":
            assert len(plan.steps_of("pour")) == 1


class TestFileContent:
    """Test sources are shipped as written; only option/dependency variables are resolved."""

    def _with_test_file(self, line: str) -> PackageDescriptor:
        return PackageDescriptor.model_validate({
            **THREADING_DESCRIPTOR,
            "test": {
                "files": [{"path": "t.cpp", "lines": [line]}],
                "command": {"executable": "./t"},
            },
        })

    def test_brace_initializer_kept(self):
        descriptor = self._with_test_file("int main() { int v{x}; return v; }")
        plan = compile_plan(descriptor, facts=FACTS["ubuntu-gcc"])
        setup = plan.steps_of("test_setup")[0]
        assert setup.stdin == "int main() { int v{x}; return v; }\n"

    def test_known_variables_substituted(self):
        descriptor = self._with_test_file("// {name} {version} {opt.mpi}")
        plan = compile_plan(descriptor, facts=FACTS["ubuntu-gcc"])
        assert plan.steps_of("test_setup")[0].stdin == "// threadlib 1.61.0 false\n"

    def test_unknown_dependency_variable_still_fails(self):
        descriptor = self._with_test_file("#include <{deps.boost}/x.h>")
        with pytest.raises(TemplateError) as exc:
            compile_plan(descriptor, facts=FACTS["ubuntu-gcc"])
        assert exc.value.details["placeholders"] == ["deps.boost"]


class TestPlanImmutable:
    """A compiled plan cannot be changed through its mapping fields."""

    def test_options_read_only(self, threading_descriptor):
        plan = compile_plan(
            threading_descriptor, {"single": False}, FACTS["ubuntu-gcc"],
        )
        before = plan.to_json()
        with pytest.raises(TypeError):
            plan.options["mpi"] = True
        with pytest.raises(TypeError):
            plan.options.update(mpi=True)
        with pytest.raises(TypeError):
            plan.steps[0].env["CFLAGS"] = "-O0"
        assert plan.to_json() == before
        assert '"mpi": false' in before

    def test_descriptor_tables_read_only(self):
        boost = get_formula("boost")
        with pytest.raises(TypeError):
            boost.bottle.digests["el_capitan"] = "00" * 32
        with pytest.raises(TypeError):
            boost.options[1].flags.pop("bootstrap", None)

    def test_copies_stay_usable(self, threading_descriptor):
        plan = compile_plan(threading_descriptor, facts=FACTS["ubuntu-gcc"])
        clone = copy.deepcopy(plan)
        assert clone == plan
        assert dict(clone.options) == {"single": True, "mpi": False, "variant": "release"}
