"""Per-service fetch with sample-data fallback.

Every configured service yields exactly one entry in the returned ``ResultSet``: the real
records when the call succeeds, otherwise generated sample records. Nothing a single service
does can abort the remaining services.
"""

from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass, replace
from typing import Callable, Iterable

from permithub.common.constants import (
    CREDENTIAL_PROBE_SIGUNGU,
    DEFAULT_BASE_URL,
    DISTRICT_DELAY_SEC,
    MIN_CREDENTIAL_LENGTH,
    NORMAL_AUTH_MESSAGE,
    PLACEHOLDER_SERVICE_KEY,
    SIMULATED_RECORD_COUNT,
)
from permithub.common.errors import (
    AuthError,
    ConfigError,
    FetchError,
    MissingCredentialError,
    ProtocolError,
    ResponseParseError,
    TransportError,
)
from permithub.common.http import HttpClient
from permithub.common.ids import generate_run_id
from permithub.common.logging import log_event
from permithub.common.models import (
    FailureReason,
    FetchOutcome,
    Provenance,
    QueryParameters,
    Record,
    RegionLabels,
    ResultSet,
    ServiceDescriptor,
    ServiceResult,
)
from permithub.common.time_utils import utc_timestamp_iso
from permithub.harvest.simulation import generate_sample_records
from permithub.harvest.xml_response import ParsedResponse, parse_response, raise_for_failure
from permithub.reference.regions import RegionDirectory

DISTRICT_SERVICE_ID = "getApDongOulnInfo"
CREDENTIAL_PROBE_SERVICE_ID = "getApBasisOulnInfo"

# Subclasses come before their bases.
_FAILURE_BY_ERROR = (
    (MissingCredentialError, FailureReason.MISSING_CREDENTIAL),
    (AuthError, FailureReason.AUTH),
    (ProtocolError, FailureReason.PROTOCOL),
    (ResponseParseError, FailureReason.PARSE),
    (TransportError, FailureReason.TRANSPORT),
)


def failure_reason_for(exc: FetchError) -> FailureReason:
    for error_type, reason in _FAILURE_BY_ERROR:
        if isinstance(exc, error_type):
            return reason
    return FailureReason.TRANSPORT


@dataclass(frozen=True)
class CredentialCheck:
    is_valid: bool
    message: str


def enrich_records(
    records: Iterable[Record],
    *,
    labels: RegionLabels,
    service_name: str,
    provenance: Provenance,
    retrieved_at: str,
) -> list[Record]:
    extra = {
        "sidoNm": labels.province,
        "sigunguNm": labels.region,
        "bjdongNm": labels.sub_region,
        "serviceNm": service_name,
        "provenance": provenance.value,
        "retrievedAt": retrieved_at,
    }
    return [{**record, **extra} for record in records]


class DataAggregator:
    def __init__(
        self,
        credential: str | None,
        services: Iterable[ServiceDescriptor],
        regions: RegionDirectory,
        *,
        base_url: str = DEFAULT_BASE_URL,
        http_client: HttpClient | None = None,
        logger: logging.Logger | None = None,
        simulated_count: int = SIMULATED_RECORD_COUNT,
        rng: random.Random | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.credential = (credential or "").strip()
        self.services = tuple(services)
        self.regions = regions
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client
        self.logger = logger or logging.getLogger("permithub.aggregator")
        self.simulated_count = simulated_count
        self.rng = rng or random.Random()
        self.sleep = sleep

    @property
    def has_credential(self) -> bool:
        return bool(self.credential)

    def service(self, service_id: str) -> ServiceDescriptor:
        for service in self.services:
            if service.id == service_id:
                return service
        raise ConfigError(f"Unknown service id: {service_id}")

    def endpoint_url(self, service: ServiceDescriptor) -> str:
        return f"{self.base_url}/{service.endpoint_path.lstrip('/')}"

    def request_params(self, query: QueryParameters) -> dict[str, str]:
        return {"serviceKey": self.credential or PLACEHOLDER_SERVICE_KEY, **query.to_request_params()}

    def _open_client(self) -> tuple[HttpClient, bool]:
        if self.http_client is not None:
            return self.http_client, False
        return HttpClient(), True

    def _request(self, client: HttpClient, url: str, params: dict[str, str]) -> ParsedResponse:
        body = client.get_text(url, params=params)
        parsed = parse_response(body)
        raise_for_failure(parsed)
        return parsed

    def fetch_service(
        self,
        service: ServiceDescriptor,
        query: QueryParameters,
        *,
        client: HttpClient | None = None,
    ) -> FetchOutcome:
        owns_client = False
        try:
            if not self.has_credential:
                raise MissingCredentialError("no credential configured")
            owns_client = client is None and self.http_client is None
            client = client or self.http_client or HttpClient()
            parsed = self._request(client, self.endpoint_url(service), self.request_params(query))
        except FetchError as exc:
            return FetchOutcome.failed(failure_reason_for(exc), str(exc))
        finally:
            if owns_client:
                client.close()
        return FetchOutcome.success(parsed.items, parsed.total_count)

    def degrade(
        self,
        service: ServiceDescriptor,
        outcome: FetchOutcome,
        labels: RegionLabels,
        *,
        retrieved_at: str | None = None,
    ) -> ServiceResult:
        retrieved_at = retrieved_at or utc_timestamp_iso()
        if outcome.ok:
            provenance = Provenance.REAL
            raw_records = outcome.records or []
        else:
            provenance = Provenance.SIMULATED
            raw_records = generate_sample_records(service.id, self.simulated_count, self.rng)
        return ServiceResult(
            service_id=service.id,
            service_name=service.display_name,
            provenance=provenance,
            records=enrich_records(
                raw_records,
                labels=labels,
                service_name=service.display_name,
                provenance=provenance,
                retrieved_at=retrieved_at,
            ),
            failure=outcome.failure,
            detail=outcome.detail,
            total_count=outcome.total_count,
        )

    def _fetch_and_degrade(
        self,
        service: ServiceDescriptor,
        query: QueryParameters,
        labels: RegionLabels,
        client: HttpClient,
        run_id: str,
        retrieved_at: str,
    ) -> ServiceResult:
        started = time.monotonic()
        try:
            outcome = self.fetch_service(service, query, client=client)
        except Exception as exc:
            outcome = FetchOutcome.failed(FailureReason.TRANSPORT, f"{type(exc).__name__}: {exc}")
        result = self.degrade(service, outcome, labels, retrieved_at=retrieved_at)
        duration_ms = int((time.monotonic() - started) * 1000)

        if outcome.ok:
            log_event(
                self.logger,
                f"{service.id} returned {len(result.records)} records",
                run_id=run_id,
                service=service.id,
                region=f"{query.region_code}/{query.sub_region_code}",
                event="SERVICE_OK",
                status="ok",
                provenance=result.provenance.value,
                duration_ms=duration_ms,
                rows_out=len(result.records),
            )
        elif outcome.failure is not FailureReason.MISSING_CREDENTIAL:
            log_event(
                self.logger,
                f"{service.id} failed ({outcome.detail}); serving sample data",
                level=logging.WARNING,
                run_id=run_id,
                service=service.id,
                region=f"{query.region_code}/{query.sub_region_code}",
                event="SERVICE_FALLBACK",
                status=outcome.failure.value,
                provenance=result.provenance.value,
                duration_ms=duration_ms,
                rows_out=len(result.records),
                error_code=outcome.failure.value,
            )
        return result

    def search(self, query: QueryParameters, *, run_id: str | None = None) -> ResultSet:
        run_id = run_id or generate_run_id()
        region = f"{query.region_code}/{query.sub_region_code}"
        labels = self.regions.labels(query.region_code, query.sub_region_code)
        retrieved_at = utc_timestamp_iso()
        log_event(
            self.logger,
            f"Searching {len(self.services)} services for {labels.province} {labels.region} {labels.sub_region}",
            run_id=run_id,
            region=region,
            event="SEARCH_START",
            status="started",
        )
        if not self.has_credential:
            log_event(
                self.logger,
                "No API credential configured; every service will return sample data",
                level=logging.WARNING,
                run_id=run_id,
                region=region,
                event="CREDENTIAL_MISSING",
                status="skipped",
                provenance=Provenance.SIMULATED.value,
                error_code=FailureReason.MISSING_CREDENTIAL.value,
            )

        result_set = ResultSet(run_id=run_id, query=query)
        client, owns_client = self._open_client()
        try:
            for service in self.services:
                result_set.results[service.id] = self._fetch_and_degrade(
                    service, query, labels, client, run_id, retrieved_at
                )
        finally:
            if owns_client:
                client.close()

        counts = result_set.count_by_provenance()
        log_event(
            self.logger,
            f"Search finished: {counts[Provenance.REAL]} real, {counts[Provenance.SIMULATED]} simulated",
            run_id=run_id,
            region=region,
            event="SEARCH_END",
            status="ok",
            rows_out=result_set.total_records(),
        )
        return result_set

    def fetch_all(self, region_code: str, sub_region_code: str) -> ResultSet:
        return self.search(QueryParameters(region_code=region_code, sub_region_code=sub_region_code))

    def fetch_districts(
        self,
        category: str,
        service_id: str = DISTRICT_SERVICE_ID,
        delay_sec: float = DISTRICT_DELAY_SEC,
        *,
        run_id: str | None = None,
    ) -> dict[str, ServiceResult]:
        """Query one service for every district of a new-town category.

        Requests go out one at a time with a fixed ``delay_sec`` pause between them.
        """
        run_id = run_id or generate_run_id()
        service = self.service(service_id)
        districts = self.regions.districts(category)
        retrieved_at = utc_timestamp_iso()
        log_event(
            self.logger,
            f"Searching {len(districts)} districts in {category}",
            run_id=run_id,
            service=service.id,
            event="SEARCH_START",
            status="started",
        )

        results: dict[str, ServiceResult] = {}
        client, owns_client = self._open_client()
        try:
            for index, district in enumerate(districts):
                if index and delay_sec > 0:
                    self.sleep(delay_sec)
                query = QueryParameters(region_code=district.sigungu_code, sub_region_code=district.bjdong_code)
                labels = self.regions.labels(district.sigungu_code, district.bjdong_code)
                result = self._fetch_and_degrade(service, query, labels, client, run_id, retrieved_at)
                tagged = [
                    {**record, "districtNm": district.name, "regionDesc": district.region}
                    for record in result.records
                ]
                results[district.name] = replace(result, records=tagged)
        finally:
            if owns_client:
                client.close()

        log_event(
            self.logger,
            f"District search finished for {category}",
            run_id=run_id,
            service=service.id,
            event="SEARCH_END",
            status="ok",
            rows_out=sum(len(result.records) for result in results.values()),
        )
        return results

    def check_credential(self, key: str | None) -> CredentialCheck:
        key = (key or "").strip()
        if len(key) < MIN_CREDENTIAL_LENGTH:
            return CredentialCheck(False, "API 키가 너무 짧습니다.")

        params = {
            "serviceKey": key,
            "numOfRows": "1",
            "pageNo": "1",
            "sigunguCd": CREDENTIAL_PROBE_SIGUNGU,
        }
        client, owns_client = self._open_client()
        try:
            parsed = self._request(client, f"{self.base_url}/{CREDENTIAL_PROBE_SERVICE_ID}", params)
        except AuthError:
            return CredentialCheck(False, "등록되지 않은 API 키입니다.")
        except (ProtocolError, ResponseParseError):
            return CredentialCheck(False, "API 키 검증에 실패했습니다.")
        except Exception as exc:
            log_event(
                self.logger,
                f"Credential check request failed: {exc}",
                level=logging.WARNING,
                service=CREDENTIAL_PROBE_SERVICE_ID,
                event="CREDENTIAL_CHECK",
                status="error",
                error_code=getattr(exc, "error_code", type(exc).__name__),
            )
            return CredentialCheck(False, "네트워크 오류로 검증에 실패했습니다.")
        finally:
            if owns_client:
                client.close()

        if parsed.auth_msg == NORMAL_AUTH_MESSAGE:
            return CredentialCheck(True, "API 키가 유효합니다!")
        if parsed.result_code is not None or parsed.reason_code is not None:
            return CredentialCheck(True, "API 키가 설정되었습니다.")
        # Parsed, but not an ArchPmsHubService envelope (gateway or proxy page).
        return CredentialCheck(False, "API 키 검증에 실패했습니다.")
