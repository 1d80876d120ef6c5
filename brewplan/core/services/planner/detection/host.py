"""
L3 Detection — Host platform facts.

Read-only probes: platform module, ``<cxx> --version``, CPU count and a
handful of environment variables. Everything is captured once into a
frozen PlatformFacts so later decisions never re-read the environment.
"""

from __future__ import annotations

import logging
import os
import platform
import re
import shutil
import struct
import subprocess
from typing import Mapping

from brewplan.core.models.facts import PlatformFacts
from brewplan.core.services.planner.data.os_versions import ARCH_ALIASES, MACOS_CODENAMES

logger = logging.getLogger(__name__)

# Environment variables copied into the snapshot.
RELEVANT_ENV = (
    "CI",
    "CIRCLECI",
    "GITHUB_ACTIONS",
    "HOMEBREW_MAKE_JOBS",
    "BREWPLAN_MAKE_JOBS",
)

_CXX_CANDIDATES = ("clang++", "g++", "c++")


# ── Compiler ───────────────────────────────────────────────

def _parse_compiler_version(output: str) -> dict:
    """Identify a C++ compiler from its ``--version`` output.

    Examples::

        Apple LLVM version 7.3.0 (clang-703.0.31)
            → {"compiler": "clang", "compiler_version": "7.3.0", "compiler_build": 703}
        g++ (Ubuntu 11.4.0-1ubuntu1~22.04) 11.4.0
            → {"compiler": "gcc", "compiler_version": "11.4.0", "compiler_build": None}
        i686-apple-darwin11-llvm-g++-4.2 (GCC) 4.2.1 (... (LLVM build 2336.11.00)
            → {"compiler": "llvm", "compiler_version": "4.2.1", "compiler_build": 2336}

    Returns:
        Dict with ``compiler``, ``compiler_version``, ``compiler_build``.
        ``compiler`` is ``""`` when the output is not recognised.
    """
    result: dict = {"compiler": "", "compiler_version": "", "compiler_build": None}
    first = output.strip().splitlines()[0] if output.strip() else ""

    m = re.search(r"LLVM build (\d+)", output)
    if m:
        v = re.search(r"\)\s+(\d+\.\d+(?:\.\d+)?)", first)
        result.update(
            compiler="llvm",
            compiler_version=v.group(1) if v else "",
            compiler_build=int(m.group(1)),
        )
        return result

    if "clang" in output:
        v = re.search(r"version (\d+\.\d+(?:\.\d+)?)", output)
        b = re.search(r"\(clang-(\d+)", output)
        result.update(
            compiler="clang",
            compiler_version=v.group(1) if v else "",
            compiler_build=int(b.group(1)) if b else None,
        )
        return result

    if "GCC" in output or "g++" in first or "Free Software Foundation" in output:
        v = re.search(r"\)\s+(\d+\.\d+(?:\.\d+)?)", first) or re.search(
            r"(\d+\.\d+\.\d+)", first,
        )
        version = v.group(1) if v else ""
        b = re.search(r"Apple Inc\. build (\d+)", output)
        if b and version.startswith("4.2"):
            result.update(
                compiler="gcc-4.2", compiler_version=version, compiler_build=int(b.group(1)),
            )
        else:
            result.update(compiler="gcc", compiler_version=version)
        return result

    return result


def _find_cxx(environ: Mapping[str, str]) -> str:
    cxx = environ.get("CXX", "").strip()
    if cxx:
        return cxx
    for candidate in _CXX_CANDIDATES:
        if shutil.which(candidate):
            return candidate
    return ""


def detect_compiler(environ: Mapping[str, str] | None = None) -> dict:
    """Detect the active C++ compiler.

    Returns:
        Dict with ``cxx`` (executable) plus the keys of
        :func:`_parse_compiler_version`.
    """
    env = os.environ if environ is None else environ
    cxx = _find_cxx(env)
    info: dict = {"cxx": cxx or "c++", "compiler": "", "compiler_version": "", "compiler_build": None}
    if not cxx:
        logger.warning("No C++ compiler found on PATH")
        return info

    try:
        r = subprocess.run(
            [cxx, "--version"],
            capture_output=True, text=True, timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Cannot run %s --version: %s", cxx, e)
        return info

    info.update(_parse_compiler_version(r.stdout + r.stderr))
    logger.debug("Compiler: %s", info)
    return info


# ── OS ─────────────────────────────────────────────────────

def macos_version_tag(version: str) -> str:
    """``"10.11.6"`` → ``"el_capitan"``; ``"14.4"`` → ``"sonoma"``."""
    parts = version.split(".")
    if not parts or not parts[0].isdigit():
        return ""
    key = ".".join(parts[:2]) if parts[0] == "10" else parts[0]
    return MACOS_CODENAMES.get(key, "")


def _detect_os(arch: str) -> dict:
    system = platform.system()
    if system == "Darwin":
        full = platform.mac_ver()[0]
        return {
            "os_family": "macos",
            "os_version": ".".join(full.split(".")[:2]),
            "os_version_tag": macos_version_tag(full),
        }
    if system != "Linux":
        logger.warning("Unsupported OS %s, planning as Linux", system)
    return {
        "os_family": "linux",
        "os_version": platform.release().split("-")[0],
        "os_version_tag": f"{arch}_linux",
    }


# ── Public API ─────────────────────────────────────────────

def detect_platform_facts(environ: Mapping[str, str] | None = None) -> PlatformFacts:
    """Take one snapshot of the host.

    Args:
        environ: Environment to read; defaults to ``os.environ``.

    Returns:
        Frozen PlatformFacts.
    """
    env = os.environ if environ is None else environ
    machine = platform.machine()
    arch = ARCH_ALIASES.get(machine, machine.lower() or "x86_64")

    facts = PlatformFacts(
        **_detect_os(arch),
        arch=arch,
        word_size=struct.calcsize("P") * 8,
        **detect_compiler(env),
        job_slots=os.cpu_count() or 1,
        env={k: env[k] for k in RELEVANT_ENV if k in env},
    )
    logger.info(
        "Host: %s %s (%s), %s %s",
        facts.os_family, facts.os_version, facts.os_version_tag,
        facts.compiler or "no compiler", facts.compiler_version,
    )
    return facts
