"""Static region lookups built from ``config/regions.yml`` and ``config/districts.yml``."""

from __future__ import annotations

from dataclasses import dataclass

from permithub.common.constants import UNKNOWN_REGION_LABEL, UNKNOWN_SUB_REGION_LABEL
from permithub.common.errors import ConfigError
from permithub.common.models import RegionLabels


@dataclass(frozen=True)
class District:
    category: str
    name: str
    sigungu_code: str
    bjdong_code: str
    region: str


class RegionDirectory:
    def __init__(self, regions_config: dict, districts_config: dict | None = None) -> None:
        self._provinces: dict[str, dict[str, str]] = {
            province: dict(sigungu) for province, sigungu in regions_config["provinces"].items()
        }
        self._province_by_sigungu: dict[str, str] = {}
        self._sigungu_names: dict[str, str] = {}
        for province, sigungu in self._provinces.items():
            for code, name in sigungu.items():
                self._province_by_sigungu[code] = province
                self._sigungu_names[code] = name
        self._sub_regions: dict[str, dict[str, str]] = {
            code: dict(bjdongs) for code, bjdongs in (regions_config.get("sub_regions") or {}).items()
        }
        self._districts: dict[str, list[District]] = {}
        for category, districts in ((districts_config or {}).get("categories") or {}).items():
            self._districts[category] = [
                District(
                    category=category,
                    name=name,
                    sigungu_code=entry["sigunguCd"],
                    bjdong_code=entry["bjdongCd"],
                    region=entry["region"],
                )
                for name, entry in districts.items()
            ]

    @classmethod
    def from_bundle(cls, bundle) -> "RegionDirectory":
        return cls(bundle.regions, bundle.districts)

    def provinces(self) -> list[str]:
        return list(self._provinces)

    def sigungu_in(self, province: str) -> dict[str, str]:
        return dict(self._provinces.get(province, {}))

    def sub_regions(self, sigungu_code: str) -> dict[str, str]:
        return dict(self._sub_regions.get(sigungu_code, {}))

    def province_of(self, sigungu_code: str) -> str:
        return self._province_by_sigungu.get(sigungu_code, UNKNOWN_REGION_LABEL)

    def sigungu_name(self, sigungu_code: str) -> str:
        return self._sigungu_names.get(sigungu_code, UNKNOWN_REGION_LABEL)

    def bjdong_name(self, sigungu_code: str, bjdong_code: str) -> str:
        return self._sub_regions.get(sigungu_code, {}).get(bjdong_code, UNKNOWN_SUB_REGION_LABEL)

    def labels(self, sigungu_code: str, bjdong_code: str) -> RegionLabels:
        return RegionLabels(
            province=self.province_of(sigungu_code),
            region=self.sigungu_name(sigungu_code),
            sub_region=self.bjdong_name(sigungu_code, bjdong_code),
        )

    def categories(self) -> list[str]:
        return list(self._districts)

    def districts(self, category: str) -> list[District]:
        if category not in self._districts:
            known = ", ".join(self._districts) or "none"
            raise ConfigError(f"Unknown district category {category!r} (known: {known})")
        return list(self._districts[category])
