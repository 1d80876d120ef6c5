"""
Configuration loader — reads descriptors and facts into models.

Descriptors come from a YAML file or from the built-in catalog;
facts snapshots come from YAML so a plan can be reproduced for a host
other than the one running the compiler. Everything is validated with
Pydantic first, then descriptors go through the semantic validator.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from brewplan.core.models.descriptor import PackageDescriptor
from brewplan.core.models.facts import PlatformFacts
from brewplan.core.services.planner.data.descriptor_schema import validate_descriptor
from brewplan.core.services.planner.data.formulas import FORMULAS

logger = logging.getLogger(__name__)

DESCRIPTOR_SUFFIXES = (".yml", ".yaml")


class ConfigError(Exception):
    """Raised when a descriptor or facts file is invalid or missing."""


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise ConfigError(f"File not found: {path}")

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _build_descriptor(data: dict[str, Any], origin: str) -> PackageDescriptor:
    # The YAML may wrap everything under a "formula" key or be flat
    if "formula" in data and isinstance(data["formula"], dict):
        data = data["formula"]

    try:
        descriptor = PackageDescriptor.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid descriptor {origin}: {e}") from e

    errors = validate_descriptor(descriptor)
    if errors:
        raise ConfigError(
            f"Invalid descriptor {origin}:\n" + "\n".join(f"  • {err}" for err in errors)
        )
    return descriptor


def load_descriptor(path: Path) -> PackageDescriptor:
    """Load and validate a descriptor file.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    logger.debug("Loading descriptor from %s", path)
    descriptor = _build_descriptor(_read_yaml(path), str(path))
    logger.info("Loaded descriptor '%s' %s", descriptor.name, descriptor.pkg_version)
    return descriptor


def list_formulas() -> list[str]:
    """Names of the built-in formulas, sorted."""
    return sorted(FORMULAS)


def get_formula(name: str) -> PackageDescriptor:
    """Build a descriptor from the built-in catalog.

    Raises:
        ConfigError: If ``name`` is not in the catalog.
    """
    data = FORMULAS.get(name)
    if data is None:
        raise ConfigError(
            f"Unknown formula '{name}'. Built-in formulas: {', '.join(list_formulas())}"
        )
    return _build_descriptor(data, f"'{name}'")


def load_target(target: str) -> PackageDescriptor:
    """Resolve a CLI target: a descriptor path or a built-in formula name."""
    path = Path(target)
    if path.suffix in DESCRIPTOR_SUFFIXES or path.is_file():
        return load_descriptor(path)
    return get_formula(target)


def load_facts(path: Path) -> PlatformFacts:
    """Load a facts snapshot.

    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    data = _read_yaml(path)
    if "facts" in data and isinstance(data["facts"], dict):
        data = data["facts"]

    # Environment values are strings even when YAML reads them as numbers
    env = data.get("env")
    if isinstance(env, dict):
        data = {**data, "env": {str(k): str(v) for k, v in env.items()}}

    try:
        facts = PlatformFacts.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid facts in {path}: {e}") from e

    logger.debug("Loaded facts from %s: %s %s", path, facts.os_family, facts.os_version_tag)
    return facts
