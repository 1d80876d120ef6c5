"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from brewplan.core.models.descriptor import PackageDescriptor
from brewplan.core.models.plan import ResolvedOptionSet

# Small descriptor with the mpi/single conflict, an optional dependency
# and a version-gated patch.
THREADING_DESCRIPTOR = {
    "name": "threadlib",
    "version": "1.61.0",
    "source": {"url": "https://example.org/threadlib-1.61.0.tar.gz", "digest": "aa" * 32},
    "patches": [
        {
            "url": "https://example.org/fix-config-order.patch",
            "digest": "bb" * 32,
            "strip": 2,
            "applies": "<1.62.0",
        },
    ],
    "options": [
        {
            "name": "single",
            "default": True,
            "flags": {
                "install": {"true": ["threading=multi,single"], "false": ["threading=multi"]},
            },
        },
        {"name": "mpi", "deprecated_names": ["openmpi"]},
        {
            "name": "variant",
            "kind": "choice",
            "choices": ["release", "debug"],
            "default": "release",
            "flags": {"install": {"debug": ["variant=debug"]}},
        },
    ],
    "dependencies": [
        {"name": "open-mpi", "option": "mpi"},
        {"name": "zlib"},
    ],
    "rules": [
        {
            "kind": "conflict",
            "options": [
                {"option": "mpi", "equals": True},
                {"option": "single", "equals": True},
            ],
            "hint": "Use --with-mpi together with --without-single.",
        },
    ],
    "build": {
        "steps": [
            {"id": "install", "executable": "./b2", "args": ["--prefix={prefix}", "install"]},
        ],
    },
}


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def threading_descriptor() -> PackageDescriptor:
    """The mpi/single conflict descriptor."""
    return PackageDescriptor.model_validate(THREADING_DESCRIPTOR)


@pytest.fixture
def make_options():
    """Factory for a ResolvedOptionSet from plain values."""

    def _make(**values) -> ResolvedOptionSet:
        return ResolvedOptionSet(values=values)

    return _make
