"""Configuration loading and validation."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from permithub.common.errors import ConfigError
from permithub.common.fs import read_yaml
from permithub.common.models import ServiceDescriptor
from permithub.common.schema import (
    validate_districts_config,
    validate_regions_config,
    validate_services_config,
)


@dataclass(frozen=True)
class ConfigBundle:
    base_url: str
    defaults: dict
    services: tuple[ServiceDescriptor, ...]
    regions: dict
    districts: dict


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _load_yaml_with_overlay(path: Path, overlay_path: Path | None) -> dict:
    if not path.exists():
        raise ConfigError(f"Missing config file: {path}")
    base = read_yaml(path)
    if overlay_path is None or not overlay_path.exists():
        return base
    overlay = read_yaml(overlay_path)
    if overlay is None:
        return base
    return _deep_merge(base, overlay)


def load_all_configs(
    config_dir: Path,
    *,
    allow_unknown: bool = False,
    overlay_config_dir: Path | None = None,
) -> ConfigBundle:
    def _load(name: str) -> dict:
        overlay_path = (overlay_config_dir / name) if overlay_config_dir is not None else None
        return _load_yaml_with_overlay(config_dir / name, overlay_path)

    services_cfg = validate_services_config(_load("services.yml"), allow_unknown=allow_unknown)
    regions_cfg = validate_regions_config(_load("regions.yml"))
    districts_cfg = validate_districts_config(_load("districts.yml"))

    return ConfigBundle(
        base_url=str(services_cfg["base_url"]).rstrip("/"),
        defaults=dict(services_cfg["defaults"]),
        services=tuple(ServiceDescriptor.from_config(item) for item in services_cfg["services"]),
        regions=regions_cfg,
        districts=districts_cfg,
    )
