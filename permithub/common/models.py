"""Data models used across the aggregator."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterator, Union

from permithub.common.constants import DEFAULT_PAGE_INDEX, DEFAULT_PAGE_SIZE

FieldValue = Union[str, int]
Record = dict[str, FieldValue]


class Provenance(str, Enum):
    REAL = "real"
    SIMULATED = "simulated"


class FailureReason(str, Enum):
    MISSING_CREDENTIAL = "missing_credential"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    AUTH = "auth"
    PARSE = "parse"


@dataclass(frozen=True)
class ServiceDescriptor:
    id: str
    display_name: str
    endpoint_path: str
    required_param_keys: frozenset[str]
    optional_param_keys: frozenset[str]
    category: str = ""
    description: str = ""
    main_fields: tuple[str, ...] = ()

    @classmethod
    def from_config(cls, cfg: dict) -> "ServiceDescriptor":
        return cls(
            id=cfg["id"],
            display_name=cfg["name"],
            endpoint_path=cfg.get("endpoint_path") or f"/{cfg['id']}",
            required_param_keys=frozenset(cfg.get("required_params") or ()),
            optional_param_keys=frozenset(cfg.get("optional_params") or ()),
            category=cfg.get("category", ""),
            description=cfg.get("description", ""),
            main_fields=tuple(cfg.get("main_fields") or ()),
        )


@dataclass(frozen=True)
class QueryParameters:
    region_code: str
    sub_region_code: str
    plot_type_code: str | None = None
    lot_number: str | None = None
    lot_sub_number: str | None = None
    date_range_start: str | None = None
    date_range_end: str | None = None
    permit_kind_code: str | None = None
    page_size: int = DEFAULT_PAGE_SIZE
    page_index: int = DEFAULT_PAGE_INDEX

    def to_request_params(self) -> dict[str, str]:
        params = {
            "numOfRows": str(self.page_size),
            "pageNo": str(self.page_index),
            "sigunguCd": self.region_code,
            "bjdongCd": self.sub_region_code,
        }
        optional = {
            "platGbCd": self.plot_type_code,
            "bun": self.lot_number,
            "ji": self.lot_sub_number,
            "startDate": self.date_range_start,
            "endDate": self.date_range_end,
            "pmsGbCd": self.permit_kind_code,
        }
        for key, value in optional.items():
            if value:
                params[key] = value
        return params


@dataclass(frozen=True)
class RegionLabels:
    province: str
    region: str
    sub_region: str


@dataclass(frozen=True)
class FetchOutcome:
    """Either the flattened records of a successful call or the reason it failed."""

    records: list[Record] | None = None
    failure: FailureReason | None = None
    detail: str | None = None
    total_count: int | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @classmethod
    def success(cls, records: list[Record], total_count: int | None = None) -> "FetchOutcome":
        return cls(records=records, total_count=total_count)

    @classmethod
    def failed(cls, reason: FailureReason, detail: str | None = None) -> "FetchOutcome":
        return cls(failure=reason, detail=detail)


@dataclass(frozen=True)
class ServiceResult:
    service_id: str
    service_name: str
    provenance: Provenance
    records: list[Record]
    failure: FailureReason | None = None
    detail: str | None = None
    total_count: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["provenance"] = self.provenance.value
        out["failure"] = self.failure.value if self.failure else None
        return out


@dataclass
class ResultSet:
    run_id: str
    query: QueryParameters
    results: dict[str, ServiceResult] = field(default_factory=dict)

    def __getitem__(self, service_id: str) -> ServiceResult:
        return self.results[service_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def records(self, service_id: str) -> list[Record]:
        return self.results[service_id].records

    def total_records(self) -> int:
        return sum(len(result.records) for result in self.results.values())

    def count_by_provenance(self) -> dict[Provenance, int]:
        counts = {Provenance.REAL: 0, Provenance.SIMULATED: 0}
        for result in self.results.values():
            counts[result.provenance] += len(result.records)
        return counts


@dataclass(frozen=True)
class TargetSite:
    id: str
    address: str
    contractor: str
    completion_date: str
    contact: str
    email: str
    note: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "TargetSite":
        return cls(
            id=str(payload["id"]),
            address=payload.get("address", ""),
            contractor=payload.get("contractor", ""),
            completion_date=payload.get("completion_date", ""),
            contact=payload.get("contact", ""),
            email=payload.get("email", ""),
            note=payload.get("note", "") or "",
        )
