"""
Planner — Patch selector and bottle selector tests.
"""

from __future__ import annotations

import pytest

from brewplan.core.config.loader import get_formula
from brewplan.core.models.descriptor import BottleSpec, PatchSpec
from brewplan.core.services.planner.errors import PlanError
from brewplan.core.services.planner.resolver.bottle_selection import (
    bottle_filename,
    bottle_url,
    select_bottle,
)
from brewplan.core.services.planner.resolver.patch_selection import select_patches


def _patch(url: str, applies: str = "", spec: str = "stable") -> PatchSpec:
    return PatchSpec(url=url, applies=applies, spec=spec)


class TestSelectPatches:
    def test_below_bound_applies(self):
        p = _patch("https://example.org/a.patch", "<1.62.0")
        assert select_patches([p], "1.61.0") == (p,)

    def test_at_bound_does_not_apply(self):
        p = _patch("https://example.org/a.patch", "<1.62.0")
        assert select_patches([p], "1.62.0") == ()

    def test_empty_range_always_applies(self):
        p = _patch("https://example.org/a.patch")
        assert select_patches([p], "0.0.1") == (p,)

    def test_compound_range(self):
        p = _patch("https://example.org/a.patch", ">=1.0,<2.0")
        assert select_patches([p], "1.5") == (p,)
        assert select_patches([p], "2.0") == ()
        assert select_patches([p], "0.9") == ()

    def test_order_preserved(self):
        a = _patch("https://example.org/a.patch")
        b = _patch("https://example.org/b.patch", "<2")
        c = _patch("https://example.org/c.patch", ">=3")
        d = _patch("https://example.org/d.patch", spec="any")
        assert select_patches([a, b, c, d], "1.0") == (a, b, d)

    def test_head_selects_head_and_any(self):
        stable = _patch("https://example.org/stable.patch")
        head = _patch("https://example.org/head.patch", spec="head")
        both = _patch("https://example.org/any.patch", spec="any")
        assert select_patches([stable, head, both], "HEAD") == (head, both)

    def test_no_patches_is_silent(self):
        assert select_patches([], "1.0") == ()


class TestSelectBottle:
    def test_exact_tag_match(self):
        boost = get_formula("boost")
        ref = select_bottle(boost.bottle, "el_capitan")
        assert ref is not None
        assert ref.tag == "el_capitan"
        assert ref.digest == boost.bottle.digests["el_capitan"]
        assert ref.cellar == "any"

    def test_no_match_is_none(self):
        boost = get_formula("boost")
        assert select_bottle(boost.bottle, "sierra") is None

    def test_linux_host_against_macos_table(self):
        sysdig = get_formula("sysdig")
        assert select_bottle(sysdig.bottle, "x86_64_linux") is None

    def test_no_bottle_table(self):
        assert select_bottle(None, "el_capitan") is None

    def test_empty_tag(self):
        assert select_bottle(BottleSpec(digests={"": "x"}), "") is None

    def test_sha1_digest_type_carried(self):
        sysdig = get_formula("sysdig")
        ref = select_bottle(sysdig.bottle, "mavericks")
        assert ref.digest_type == "sha1"


class TestBottleNaming:
    def test_filename_and_url(self):
        spec = BottleSpec(digests={"yosemite": "abc"})
        ref = select_bottle(spec, "yosemite")
        assert bottle_filename("boost", "1.61.0_1", ref) == "boost-1.61.0_1.yosemite.bottle.tar.gz"
        assert bottle_url("boost", "1.61.0_1", ref) == (
            "https://homebrew.bintray.com/bottles/boost-1.61.0_1.yosemite.bottle.tar.gz"
        )

    def test_rebuild_suffix(self):
        spec = BottleSpec(rebuild=2, root_url="https://bottles.example.org/", digests={"sonoma": "abc"})
        ref = select_bottle(spec, "sonoma")
        assert bottle_filename("apel", "10.8", ref) == "apel-10.8.sonoma.bottle.2.tar.gz"
        assert bottle_url("apel", "10.8", ref).startswith("https://bottles.example.org/apel-")


class TestUnparseableRanges:
    def test_non_numeric_range_is_plan_error(self):
        p = _patch("https://example.org/head-only.patch", "HEAD")
        with pytest.raises(PlanError) as exc:
            select_patches([p], "1.61.0")
        assert exc.value.details["patch"] == "https://example.org/head-only.patch"
        assert "HEAD" in str(exc.value)

    def test_non_numeric_version_is_plan_error(self):
        p = _patch("https://example.org/a.patch", "<2.0")
        with pytest.raises(PlanError):
            select_patches([p], "trunk")

    def test_head_build_ignores_ranges(self):
        p = _patch("https://example.org/head.patch", "HEAD", spec="head")
        assert select_patches([p], "HEAD") == (p,)
