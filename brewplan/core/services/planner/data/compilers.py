"""
L0 Data — Compiler feature matrix.

For each language feature a ``needs`` rule may ask for, the minimum
build or version of each compiler that supports it. A compiler absent
from a feature's table (or mapped to ``None``) never supports it.
Apple clang is gated on its build number; others on version.
"""

from __future__ import annotations

COMPILER_FEATURES: dict[str, dict[str, dict | None]] = {
    "cxx11": {
        "clang": {"min_build": 425, "min_version": "3.3"},
        "gcc": {"min_version": "4.8"},
        "llvm": None,
        "gcc-4.2": None,
    },
    "cxx14": {
        "clang": {"min_build": 600, "min_version": "3.4"},
        "gcc": {"min_version": "5.0"},
    },
    "openmp": {
        "gcc": {"min_version": "4.2"},
        "clang": {"min_version": "3.8"},
    },
}

FEATURE_LABELS: dict[str, str] = {
    "cxx11": "C++11",
    "cxx14": "C++14",
    "openmp": "OpenMP",
}
