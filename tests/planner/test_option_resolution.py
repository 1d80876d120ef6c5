"""
Planner — Option model tests.

Covers raw flag parsing, alias rewriting, defaults and the two option
errors.
"""

from __future__ import annotations

import pytest

from brewplan.core.config.loader import get_formula
from brewplan.core.services.planner.errors import InvalidChoiceError, UnknownOptionError
from brewplan.core.services.planner.resolver.option_resolution import (
    parse_raw_flag,
    resolve_options,
)


class TestParseRawFlag:
    @pytest.mark.parametrize("flag, expected", [
        ("--with-mpi", ("mpi", True)),
        ("--without-single", ("single", False)),
        ("--variant=debug", ("variant", "debug")),
        ("--cxx11", ("cxx11", True)),
        ("universal", ("universal", True)),
    ])
    def test_forms(self, flag, expected):
        assert parse_raw_flag(flag) == expected


class TestResolveOptions:
    def test_defaults_fill_everything(self, threading_descriptor):
        resolved = resolve_options(threading_descriptor)
        assert resolved.values == {"single": True, "mpi": False, "variant": "release"}
        assert resolved.explicit == ()
        assert resolved.advisories == ()

    def test_selection_overrides_default(self, threading_descriptor):
        resolved = resolve_options(threading_descriptor, {"single": False})
        assert resolved["single"] is False
        assert resolved.explicit == ("single",)

    def test_raw_flags(self, threading_descriptor):
        resolved = resolve_options(
            threading_descriptor, raw_flags=["--with-mpi", "--without-single"],
        )
        assert resolved.enabled("mpi")
        assert not resolved.enabled("single")
        assert resolved.explicit == ("mpi", "single")

    def test_selections_win_over_raw_flags(self, threading_descriptor):
        resolved = resolve_options(
            threading_descriptor, {"mpi": False}, raw_flags=["--with-mpi"],
        )
        assert resolved["mpi"] is False

    def test_string_booleans_accepted(self, threading_descriptor):
        resolved = resolve_options(threading_descriptor, {"single": "no", "mpi": "yes"})
        assert resolved.values["single"] is False
        assert resolved.values["mpi"] is True

    def test_choice_value(self, threading_descriptor):
        resolved = resolve_options(threading_descriptor, raw_flags=["--variant=debug"])
        assert resolved["variant"] == "debug"

    def test_every_key_is_declared(self, threading_descriptor):
        resolved = resolve_options(threading_descriptor, {"mpi": True})
        assert set(resolved.values) == set(threading_descriptor.option_names)


class TestAliases:
    def test_alias_rewritten_with_advisory(self, threading_descriptor):
        resolved = resolve_options(threading_descriptor, {"openmpi": True})
        assert resolved.enabled("mpi")
        assert "openmpi" not in resolved
        assert resolved.advisories == ("Option 'openmpi' is deprecated; using 'mpi'",)

    def test_alias_transparency(self, threading_descriptor):
        """Old and new names resolve identically apart from the advisory."""
        via_alias = resolve_options(threading_descriptor, {"openmpi": True})
        via_name = resolve_options(threading_descriptor, {"mpi": True})
        assert via_alias.values == via_name.values
        assert via_alias.explicit == via_name.explicit
        assert via_name.advisories == ()
        assert len(via_alias.advisories) == 1

    def test_boost_icu_alias(self):
        boost = get_formula("boost")
        resolved = resolve_options(boost, raw_flags=["--with-icu"])
        assert resolved.enabled("icu4c")
        assert "deprecated" in resolved.advisories[0]


class TestOptionErrors:
    def test_unknown_option(self, threading_descriptor):
        with pytest.raises(UnknownOptionError) as exc:
            resolve_options(threading_descriptor, {"python": True})
        assert exc.value.option == "python"
        assert "single" in str(exc.value)

    def test_unknown_raw_flag(self, threading_descriptor):
        with pytest.raises(UnknownOptionError):
            resolve_options(threading_descriptor, raw_flags=["--with-python"])

    def test_invalid_choice(self, threading_descriptor):
        with pytest.raises(InvalidChoiceError) as exc:
            resolve_options(threading_descriptor, {"variant": "profile"})
        assert exc.value.option == "variant"
        assert exc.value.value == "profile"
        assert exc.value.to_dict()["choices"] == ["release", "debug"]

    def test_bool_option_rejects_other_values(self, threading_descriptor):
        with pytest.raises(InvalidChoiceError):
            resolve_options(threading_descriptor, {"mpi": "maybe"})

    def test_choice_option_rejects_bool(self, threading_descriptor):
        with pytest.raises(InvalidChoiceError):
            resolve_options(threading_descriptor, {"variant": True})
