"""Sample records served when a service cannot return real data.

Field names and shapes follow the real service payloads so downstream tables and exports
work the same on both. Values are randomized; pass a seeded ``random.Random`` for repeatable
output.
"""

from __future__ import annotations

import random

from permithub.common.models import Record

CONSTRUCTION_COMPANIES = (
    "대우건설",
    "현대건설",
    "삼성물산",
    "GS건설",
    "포스코건설",
    "롯데건설",
    "SK건설",
    "한화건설",
)
SAMPLE_DISTRICTS = (
    "김포한강신도시",
    "하남교산신도시",
    "과천지구",
    "인천검단신도시",
    "위례신도시",
    "광명시흥신도시",
)
ZONE_NAMES = ("준주거지역", "일반상업지역", "근린상업지역", "준공업지역")


def _random_day(rng: random.Random, year: int) -> str:
    return f"{year}{rng.randint(1, 12):02d}{rng.randint(1, 28):02d}"


def _between(rng: random.Random, low: int, span: int) -> str:
    return str(rng.randrange(span) + low)


def _district_stem(district: str) -> str:
    return district.replace("신도시", "").replace("지구", "")


def _base_record(i: int, rng: random.Random) -> Record:
    district = SAMPLE_DISTRICTS[i % len(SAMPLE_DISTRICTS)]
    sigungu = 41000 + (i % 10)
    return {
        "mgmBldrgstPk": f"{11000 + i}-{100000 + i}",
        "platPlc": f"{district} {100 + i}번지",
        "sigunguCd": str(sigungu),
        "bjdongCd": f"{sigungu}{i % 100:02d}00",
        "platGbCd": "0",
        "bun": str(100 + i),
        "ji": str(i % 10),
        "newPlatPlc": f"{district} 신도시로 {100 + i}",
        "constructionCompany": CONSTRUCTION_COMPANIES[i % len(CONSTRUCTION_COMPANIES)],
        "constructionLicense": f"{i % 100:02d}-{rng.randrange(9999):04d}",
    }


def _basis_fields(i: int, rng: random.Random) -> Record:
    district = SAMPLE_DISTRICTS[i % len(SAMPLE_DISTRICTS)]
    return {
        "bldNm": f"{district} {i + 1}단지",
        "splotNm": district,
        "mainPurpsCdNm": "공동주택",
        "etcPurps": "아파트",
        "hhldCnt": _between(rng, 200, 800),
        "heit": _between(rng, 30, 50),
        "grndFlrCnt": _between(rng, 10, 20),
        "ugrndFlrCnt": _between(rng, 2, 3),
        "pmsDay": _random_day(rng, 2024),
        "stcnsDay": _random_day(rng, 2024),
        "useAprDay": _random_day(rng, 2025),
        "pmsnoGbCdNm": "건축허가",
        "crtnDay": _random_day(rng, 2024),
        "totArea": _between(rng, 20000, 50000),
        "archArea": _between(rng, 2000, 5000),
        "platArea": _between(rng, 3000, 8000),
    }


def _dong_fields(i: int, rng: random.Random) -> Record:
    return {
        "dongNm": f"{i // 4 + 1}0{i % 4 + 1}동",
        "mainAtchGbCdNm": "주건축물",
        "dongPurpsCdNm": "공동주택",
        "etcPurps": "아파트",
        "heit": _between(rng, 30, 50),
        "grndFlrCnt": _between(rng, 10, 20),
        "ugrndFlrCnt": _between(rng, 2, 3),
        "strctCdNm": "철근콘크리트구조",
        "totArea": _between(rng, 5000, 10000),
        "hhldCnt": _between(rng, 50, 200),
        "fmlyCnt": _between(rng, 50, 200),
    }


def _floor_fields(i: int, rng: random.Random) -> Record:
    floor = i % 15 + 1
    return {
        "dongNm": f"{i // 15 + 1}0{(i % 15) // 3 + 1}동",
        "flrNo": str(floor),
        "flrNoNm": f"{floor}층",
        "mainAtchGbCdNm": "주건축물",
        "strctCdNm": "철근콘크리트구조",
        "mainPurpsCdNm": "공동주택",
        "etcPurps": "아파트",
        "area": _between(rng, 300, 500),
        "areaExctYn": "Y",
    }


def _unit_fields(i: int, rng: random.Random) -> Record:
    floor = (i % 20) // 4 + 1
    return {
        "dongNm": f"{i // 20 + 1}0{floor}동",
        "flrNo": str(floor),
        "flrNoNm": f"{floor}층",
        "hoNm": f"{floor:02d}0{i % 4 + 1}호",
        "mainAtchGbCdNm": "주건축물",
        "mainPurpsCdNm": "공동주택",
        "etcPurps": "아파트",
        "area": _between(rng, 60, 100),
        "areaExctYn": "Y",
    }


def _zoning_fields(i: int, rng: random.Random) -> Record:
    return {
        "jiyukGuyukCd": f"UQ{chr(ord('A') + i % 4)}",
        "jiyukGuyukCdNm": ZONE_NAMES[i % len(ZONE_NAMES)],
        "jiyukGuyukGbCdNm": "용도지역",
        "reprYn": "Y" if i % 3 == 0 else "N",
    }


def _location_fields(i: int, rng: random.Random) -> Record:
    stem = _district_stem(SAMPLE_DISTRICTS[i % len(SAMPLE_DISTRICTS)])
    return {
        "dongNm": f"{stem}동",
        "jibun": f"{100 + i}-{i % 10}",
        "roadNm": f"{stem}로",
        "buldMnnm": str(100 + i),
        "buldSlno": str(i % 10),
    }


SERVICE_FIELD_BUILDERS = {
    "getApBasisOulnInfo": _basis_fields,
    "getApDongOulnInfo": _dong_fields,
    "getApFlrOulnInfo": _floor_fields,
    "getApHoOulnInfo": _unit_fields,
    "getApJijiguInfo": _zoning_fields,
    "getApPlatPlcInfo": _location_fields,
}


def generate_sample_records(service_id: str, count: int, rng: random.Random | None = None) -> list[Record]:
    """Return ``count`` records shaped like ``service_id``'s payload.

    Unknown service ids get the shared base fields only.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    rng = rng or random.Random()
    builder = SERVICE_FIELD_BUILDERS.get(service_id)
    records: list[Record] = []
    for i in range(count):
        record = _base_record(i, rng)
        if builder is not None:
            record.update(builder(i, rng))
        records.append(record)
    return records
