"""Search summaries."""

from __future__ import annotations

from pathlib import Path

from permithub.common.fs import write_json
from permithub.common.models import Provenance, ResultSet

OUTCOME_MESSAGES = {
    "real": "실제 API 데이터를 성공적으로 조회했습니다.",
    "simulated": "API 호출에 실패하여 시뮬레이션 데이터를 표시합니다.",
    "mixed": "일부 서비스는 실제 데이터, 일부는 시뮬레이션 데이터입니다.",
    "empty": "조회된 데이터가 없습니다.",
}


def classify_outcome(real_count: int, simulated_count: int) -> str:
    if real_count and simulated_count:
        return "mixed"
    if simulated_count:
        return "simulated"
    if real_count:
        return "real"
    return "empty"


def summarize_result_set(result_set: ResultSet) -> dict:
    services = {}
    for service_id in result_set:
        result = result_set[service_id]
        services[service_id] = {
            "name": result.service_name,
            "provenance": result.provenance.value,
            "records": len(result.records),
            "total_count": result.total_count,
            "failure": result.failure.value if result.failure else None,
            "detail": result.detail,
        }

    counts = result_set.count_by_provenance()
    real_count = counts[Provenance.REAL]
    simulated_count = counts[Provenance.SIMULATED]
    outcome = classify_outcome(real_count, simulated_count)
    query = result_set.query
    return {
        "run_id": result_set.run_id,
        "query": {"sigunguCd": query.region_code, "bjdongCd": query.sub_region_code},
        "outcome": outcome,
        "message": OUTCOME_MESSAGES[outcome],
        "totals": {
            "records": real_count + simulated_count,
            "real": real_count,
            "simulated": simulated_count,
        },
        "services": services,
    }


def write_search_summary(data_dir: Path, run_id: str, result_set: ResultSet) -> Path:
    summary_path = data_dir / "out" / "reports" / f"{run_id}_summary.json"
    write_json(summary_path, summarize_result_set(result_set))
    return summary_path
