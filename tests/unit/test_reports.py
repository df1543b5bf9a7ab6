from pathlib import Path

from permithub.common.fs import read_json
from permithub.common.models import FailureReason, Provenance, QueryParameters, ResultSet, ServiceResult
from permithub.pipeline.reports import classify_outcome, summarize_result_set, write_search_summary


def _result(service_id: str, provenance: Provenance, count: int) -> ServiceResult:
    return ServiceResult(
        service_id=service_id,
        service_name=service_id,
        provenance=provenance,
        records=[{"n": str(i)} for i in range(count)],
        failure=FailureReason.AUTH if provenance is Provenance.SIMULATED else None,
    )


def test_classify_outcome():
    assert classify_outcome(3, 0) == "real"
    assert classify_outcome(0, 8) == "simulated"
    assert classify_outcome(3, 8) == "mixed"
    assert classify_outcome(0, 0) == "empty"


def test_summarize_and_write_mixed_result_set(tmp_path: Path):
    result_set = ResultSet(run_id="search-r1", query=QueryParameters("11110", "10100"))
    result_set.results["a"] = _result("a", Provenance.REAL, 3)
    result_set.results["b"] = _result("b", Provenance.SIMULATED, 8)

    summary = summarize_result_set(result_set)
    assert summary["outcome"] == "mixed"
    assert summary["totals"] == {"records": 11, "real": 3, "simulated": 8}
    assert summary["services"]["b"]["failure"] == "auth"

    path = write_search_summary(tmp_path, "search-r1", result_set)
    assert path == tmp_path / "out" / "reports" / "search-r1_summary.json"
    assert read_json(path)["query"] == {"sigunguCd": "11110", "bjdongCd": "10100"}
