"""CSV and Excel export with Korean display labels."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping

import pandas as pd

from permithub.common.fs import ensure_dir, write_csv
from permithub.common.models import Record, ResultSet, TargetSite
from permithub.common.time_utils import format_yyyymmdd, utc_today_iso

FIELD_LABELS: dict[str, str] = {
    # Shared fields
    "mgmBldrgstPk": "관리건축물대장PK",
    "platPlc": "대지위치",
    "sigunguCd": "시군구코드",
    "bjdongCd": "법정동코드",
    "platGbCd": "대지구분코드",
    "bun": "번지",
    "ji": "지번",
    "newPlatPlc": "도로명대지위치",
    "dongNm": "동명칭",
    "constructionCompany": "시공업체",
    "constructionLicense": "건설업면허번호",
    # getApBasisOulnInfo
    "bldNm": "건물명",
    "splotNm": "특수지명",
    "block": "블록",
    "lot": "로트",
    "bylotCnt": "외필지수",
    "naRoadCd": "새주소도로코드",
    "naPlatPlc": "새주소대지위치",
    "mainAtchGbCd": "주부속구분코드",
    "mainAtchGbCdNm": "주부속구분",
    "platArea": "대지면적(㎡)",
    "archArea": "건축면적(㎡)",
    "bcRat": "건폐율(%)",
    "totArea": "연면적(㎡)",
    "vlRatEstmTotArea": "용적률산정연면적(㎡)",
    "vlRat": "용적률(%)",
    "mainPurpsCd": "주용도코드",
    "mainPurpsCdNm": "주용도",
    "etcPurps": "기타용도",
    "hhldCnt": "세대수",
    "fmlyCnt": "가구수",
    "heit": "높이(m)",
    "grndFlrCnt": "지상층수",
    "ugrndFlrCnt": "지하층수",
    "rideUseElvtCnt": "승용승강기수",
    "emgenUseElvtCnt": "비상용승강기수",
    "atchBldCnt": "부속건축물수",
    "atchBldArea": "부속건축물면적(㎡)",
    "totDongTotArea": "총동연면적(㎡)",
    "indrMechUtcnt": "옥내기계식대수",
    "indrMechArea": "옥내기계식면적(㎡)",
    "oudrMechUtcnt": "옥외기계식대수",
    "oudrMechArea": "옥외기계식면적(㎡)",
    "pmsDay": "허가일",
    "stcnsDay": "착공일",
    "useAprDay": "사용승인일",
    "pmsnoYear": "허가번호년",
    "pmsnoKikCd": "허가번호기관코드",
    "pmsnoKikCdNm": "허가번호기관명",
    "pmsnoGbCd": "허가번호구분코드",
    "pmsnoGbCdNm": "허가구분",
    "ho": "호수",
    "engrGrade": "에너지효율등급",
    "engrRat": "에너지절약계획서점수",
    "crtnDay": "생성일",
    # getApDongOulnInfo
    "dongPurpsCd": "동용도코드",
    "dongPurpsCdNm": "동용도",
    "strctCd": "구조코드",
    "strctCdNm": "구조",
    "etcStrct": "기타구조",
    "mainBldCnt": "주건축물수",
    # getApFlrOulnInfo
    "flrNo": "층번호",
    "flrNoNm": "층명칭",
    "area": "면적(㎡)",
    "areaExctYn": "면적제외여부",
    # getApHoOulnInfo
    "hoNm": "호명칭",
    # getApJijiguInfo
    "jiyukGuyukCd": "지역지구구역코드",
    "jiyukGuyukCdNm": "지역지구구역명",
    "jiyukGuyukGbCd": "지역지구구역구분코드",
    "jiyukGuyukGbCdNm": "지역지구구역구분",
    "reprYn": "대표여부",
    "etcJiyukGuyukNm": "기타지역지구구역명",
    # getApPlatPlcInfo
    "jibun": "지번주소",
    "roadNm": "도로명",
    "buldMnnm": "건물본번",
    "buldSlno": "건물부번",
    # Enrichment
    "sidoNm": "시도명",
    "sigunguNm": "시군구명",
    "bjdongNm": "법정동명",
    "serviceNm": "서비스명",
    "provenance": "데이터출처",
    "retrievedAt": "조회시간",
    "districtNm": "신도시명",
    "regionDesc": "지역",
}

PROVENANCE_LABELS = {"real": "실제 API", "simulated": "시뮬레이션"}

DATE_FIELDS = frozenset({"pmsDay", "stcnsDay", "useAprDay", "crtnDay"})

TARGET_HEADERS = ["address", "contractor", "completion_date", "contact", "email", "note"]
TARGET_LABELS = {
    "address": "주소",
    "contractor": "시공사",
    "completion_date": "준공예정일",
    "contact": "담당자",
    "email": "이메일",
    "note": "메모",
}

RESULT_FILE_STEM = "건축허가착공"
TARGET_FILE_STEM = "타겟현장"
_UNSAFE_FILENAME_CHARS = '\\/:*?"<>|\r\n\t'


def default_filename(stem: str, suffix: str, today: str | None = None) -> str:
    safe_stem = "".join(ch for ch in stem if ch not in _UNSAFE_FILENAME_CHARS).strip() or "export"
    return f"{safe_stem}_{today or utc_today_iso()}.{suffix.lstrip('.')}"


def _display_value(field: str, value: object) -> object:
    if value is None:
        return ""
    if field in DATE_FIELDS:
        return format_yyyymmdd(value)
    if field == "provenance":
        return PROVENANCE_LABELS.get(str(value), value)
    return value


def _ordered_headers(rows: Iterable[Mapping[str, object]]) -> list[str]:
    headers: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            if key not in seen:
                seen.add(key)
                headers.append(key)
    return headers


def flatten_result_set(result_set: ResultSet | Mapping[str, object]) -> list[Record]:
    """Concatenate every service's records in service order."""
    rows: list[Record] = []
    for service_id in result_set:
        result = result_set[service_id]
        records = result.records if hasattr(result, "records") else result
        rows.extend(records)
    return rows


def export_csv(rows: list[Record], path: Path, *, labels: Mapping[str, str] | None = None) -> Path:
    headers = _ordered_headers(rows)
    labels = FIELD_LABELS if labels is None else labels
    display_rows = [{key: _display_value(key, row.get(key)) for key in headers} for row in rows]
    write_csv(path, headers, display_rows, labels={key: labels.get(key, key) for key in headers}, bom=True)
    return path


def records_to_frame(records: list[Record], *, labels: Mapping[str, str] | None = None) -> pd.DataFrame:
    headers = _ordered_headers(records)
    labels = FIELD_LABELS if labels is None else labels
    frame = pd.DataFrame(
        [[_display_value(key, record.get(key)) for key in headers] for record in records],
        columns=headers,
    )
    return frame.rename(columns={key: labels.get(key, key) for key in headers})


def _sheet_name(name: str, used: set[str]) -> str:
    base = "".join(ch for ch in name if ch not in "[]:*?/\\").strip()[:31] or "Sheet"
    candidate = base
    counter = 2
    while candidate in used:
        tail = f"_{counter}"
        candidate = f"{base[: 31 - len(tail)]}{tail}"
        counter += 1
    used.add(candidate)
    return candidate


def export_xlsx(frames: Mapping[str, pd.DataFrame], path: Path) -> Path:
    ensure_dir(path.parent)
    used: set[str] = set()
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet_name, frame in frames.items():
            frame.to_excel(writer, sheet_name=_sheet_name(sheet_name, used), index=False)
    return path


def result_set_frames(result_set: ResultSet) -> dict[str, pd.DataFrame]:
    return {
        result_set[service_id].service_name: records_to_frame(result_set.records(service_id))
        for service_id in result_set
    }


def export_targets(targets: list[TargetSite], path: Path) -> Path:
    rows = [target.to_dict() for target in targets]
    if path.suffix.lower() == ".xlsx":
        frame = pd.DataFrame(
            [[row.get(key, "") for key in TARGET_HEADERS] for row in rows],
            columns=[TARGET_LABELS[key] for key in TARGET_HEADERS],
        )
        return export_xlsx({TARGET_FILE_STEM: frame}, path)
    write_csv(path, TARGET_HEADERS, rows, labels=TARGET_LABELS, bom=True)
    return path
