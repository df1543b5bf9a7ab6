import csv
from pathlib import Path

import pandas as pd

from permithub.common.models import Provenance, QueryParameters, ResultSet, ServiceResult, TargetSite
from permithub.pipeline.export import (
    FIELD_LABELS,
    default_filename,
    export_csv,
    export_targets,
    export_xlsx,
    flatten_result_set,
    records_to_frame,
    result_set_frames,
)


def _result_set() -> ResultSet:
    result_set = ResultSet(run_id="search-test", query=QueryParameters("11110", "10100"))
    result_set.results["getApBasisOulnInfo"] = ServiceResult(
        service_id="getApBasisOulnInfo",
        service_name="건축인허가 기본개요",
        provenance=Provenance.REAL,
        records=[{"bldNm": "청운 아파트", "pmsDay": "20240315", "provenance": "real"}],
    )
    result_set.results["getApDongOulnInfo"] = ServiceResult(
        service_id="getApDongOulnInfo",
        service_name="동별개요",
        provenance=Provenance.SIMULATED,
        records=[{"dongNm": "101동", "provenance": "simulated"}],
    )
    return result_set


def test_flatten_result_set_keeps_service_order():
    rows = flatten_result_set(_result_set())

    assert [row.get("bldNm") or row.get("dongNm") for row in rows] == ["청운 아파트", "101동"]


def test_export_csv_writes_bom_and_korean_labels(tmp_path: Path):
    out = export_csv(flatten_result_set(_result_set()), tmp_path / "out" / "result.csv")

    raw = out.read_bytes()
    assert raw.startswith(b"\xef\xbb\xbf")
    with out.open("r", encoding="utf-8-sig", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["건물명", "허가일", "데이터출처", "동명칭"]
    assert rows[1] == ["청운 아파트", "2024-03-15", "실제 API", ""]
    assert rows[2] == ["", "", "시뮬레이션", "101동"]


def test_unlabelled_fields_keep_raw_name():
    frame = records_to_frame([{"mysteryField": "x", "bldNm": "y"}])

    assert list(frame.columns) == ["mysteryField", FIELD_LABELS["bldNm"]]


def test_export_xlsx_one_sheet_per_service(tmp_path: Path):
    out = export_xlsx(result_set_frames(_result_set()), tmp_path / "result.xlsx")

    sheets = pd.read_excel(out, sheet_name=None)
    assert list(sheets) == ["건축인허가 기본개요", "동별개요"]
    assert sheets["동별개요"]["동명칭"].tolist() == ["101동"]


def test_export_xlsx_truncates_and_dedupes_sheet_names(tmp_path: Path):
    long_name = "가" * 40
    frames = {long_name: pd.DataFrame({"a": [1]}), long_name + "나": pd.DataFrame({"a": [2]})}

    sheets = pd.read_excel(export_xlsx(frames, tmp_path / "long.xlsx"), sheet_name=None)

    assert all(len(name) <= 31 for name in sheets)
    assert len(sheets) == 2


def test_export_targets_csv_labels(tmp_path: Path):
    targets = [
        TargetSite(
            id="target-1",
            address="경기도 김포시 장기동 100",
            contractor="대우건설",
            completion_date="2025-06-30",
            contact="김담당",
            email="kim@example.com",
        )
    ]

    out = export_targets(targets, tmp_path / "targets.csv")

    with out.open("r", encoding="utf-8-sig", newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0] == ["주소", "시공사", "준공예정일", "담당자", "이메일", "메모"]
    assert rows[1][1] == "대우건설"


def test_export_targets_xlsx(tmp_path: Path):
    out = export_targets([], tmp_path / "targets.xlsx")

    sheets = pd.read_excel(out, sheet_name=None)
    assert list(sheets) == ["타겟현장"]
    assert list(sheets["타겟현장"].columns) == ["주소", "시공사", "준공예정일", "담당자", "이메일", "메모"]


def test_default_filename_uses_date():
    assert default_filename("건축허가착공", "csv", today="2025-01-02") == "건축허가착공_2025-01-02.csv"
    assert default_filename("a/b", ".xlsx", today="2025-01-02") == "ab_2025-01-02.xlsx"


def test_field_labels_are_unique_column_headers():
    labels = list(FIELD_LABELS.values())

    assert len(labels) == len(set(labels))
    assert FIELD_LABELS["ji"] != FIELD_LABELS["jibun"]
