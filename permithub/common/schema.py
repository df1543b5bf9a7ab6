"""Minimal strict schemas for YAML config validation."""

from __future__ import annotations

import re

from permithub.common.errors import ConfigError

_CODE_RE = re.compile(r"^\d{5}$")
_KNOWN_PARAMS = {"sigunguCd", "bjdongCd", "platGbCd", "bun", "ji", "startDate", "endDate", "pmsGbCd"}


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_code(value: object, ctx: str) -> None:
    if not isinstance(value, str) or not _CODE_RE.match(value):
        raise ConfigError(f"{ctx} must be a quoted 5-digit code, got {value!r}")


def validate_services_config(cfg: dict, *, allow_unknown: bool = False) -> dict:
    top_required = {"base_url", "defaults", "services"}
    _assert_required_keys(cfg, top_required, "services config")
    _assert_no_unknown_keys(cfg, top_required, "services config", allow_unknown)
    _assert_required_keys(
        cfg["defaults"],
        {"page_size", "page_index", "simulated_record_count", "district_delay_sec"},
        "defaults",
    )

    services = cfg["services"]
    if not isinstance(services, list) or not services:
        raise ConfigError("services must be a non-empty list")

    service_known = {
        "id",
        "name",
        "endpoint_path",
        "category",
        "description",
        "required_params",
        "optional_params",
        "main_fields",
    }
    ids: list[str] = []
    for idx, service in enumerate(services):
        ctx = f"services[{idx}]"
        _assert_required_keys(service, {"id", "name", "required_params"}, ctx)
        _assert_no_unknown_keys(service, service_known, ctx, allow_unknown)
        params = set(service["required_params"]) | set(service.get("optional_params") or [])
        unknown_params = params - _KNOWN_PARAMS
        if unknown_params:
            raise ConfigError(f"Unknown request parameters in {ctx}: {', '.join(sorted(unknown_params))}")
        ids.append(service["id"])

    dupes = {service_id for service_id in ids if ids.count(service_id) > 1}
    if dupes:
        raise ConfigError(f"Duplicate service ids: {', '.join(sorted(dupes))}")

    return cfg


def validate_regions_config(cfg: dict) -> dict:
    _assert_required_keys(cfg, {"provinces", "sub_regions"}, "regions config")
    provinces = cfg["provinces"]
    if not isinstance(provinces, dict) or not provinces:
        raise ConfigError("regions.provinces must be a non-empty mapping")

    seen: set[str] = set()
    for province, sigungu in provinces.items():
        _assert_required_keys(sigungu, set(), f"provinces.{province}")
        for code in sigungu:
            _assert_code(code, f"provinces.{province}")
            if code in seen:
                raise ConfigError(f"Sigungu code {code} listed under more than one province")
            seen.add(code)

    for sigungu_code, bjdongs in (cfg["sub_regions"] or {}).items():
        _assert_code(sigungu_code, "sub_regions")
        if sigungu_code not in seen:
            raise ConfigError(f"sub_regions.{sigungu_code} has no matching sigungu entry")
        _assert_required_keys(bjdongs, set(), f"sub_regions.{sigungu_code}")
        for code in bjdongs:
            _assert_code(code, f"sub_regions.{sigungu_code}")

    return cfg


def validate_districts_config(cfg: dict) -> dict:
    _assert_required_keys(cfg, {"categories"}, "districts config")
    categories = cfg["categories"]
    if not isinstance(categories, dict) or not categories:
        raise ConfigError("districts.categories must be a non-empty mapping")
    for category, districts in categories.items():
        _assert_required_keys(districts, set(), f"categories.{category}")
        for name, district in districts.items():
            ctx = f"categories.{category}.{name}"
            _assert_required_keys(district, {"sigunguCd", "bjdongCd", "region"}, ctx)
            _assert_code(district["sigunguCd"], f"{ctx}.sigunguCd")
            _assert_code(district["bjdongCd"], f"{ctx}.bjdongCd")
    return cfg
