import json
import logging
from datetime import date
from pathlib import Path

import pytest

from permithub.common.ids import generate_run_id, generate_target_id
from permithub.common.logging import build_logger, log_event
from permithub.common.models import QueryParameters
from permithub.common.time_utils import format_yyyymmdd, parse_date_like, to_compact_date


def test_generate_ids_prefix():
    assert generate_run_id().startswith("search-")
    assert generate_target_id().startswith("target-")


def test_to_compact_date_accepts_iso_and_compact():
    assert to_compact_date("2025-03-01") == "20250301"
    assert to_compact_date("20250301") == "20250301"
    assert to_compact_date(None) is None
    with pytest.raises(ValueError):
        to_compact_date("20251340")


def test_format_yyyymmdd_only_touches_eight_digit_strings():
    assert format_yyyymmdd("20240315") == "2024-03-15"
    assert format_yyyymmdd("2024031") == "2024031"
    assert format_yyyymmdd(20240315) == 20240315


def test_parse_date_like():
    assert parse_date_like("20240315") == date(2024, 3, 15)
    assert parse_date_like("2024-03-15") == date(2024, 3, 15)
    assert parse_date_like("20241399") is None
    assert parse_date_like("") is None


def test_query_parameters_wire_names_omit_unset_optionals():
    params = QueryParameters("11110", "10100", lot_number="12", date_range_start="20250101").to_request_params()

    assert params == {
        "numOfRows": "100",
        "pageNo": "1",
        "sigunguCd": "11110",
        "bjdongCd": "10100",
        "bun": "12",
        "startDate": "20250101",
    }


def test_build_logger_writes_json_lines(tmp_path: Path):
    logger = build_logger("search-log-test", data_dir=tmp_path, level="DEBUG")
    log_event(logger, "hello", level=logging.WARNING, event="SERVICE_FALLBACK", service="getApDongOulnInfo")
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "run_meta" / "search-log-test.log.jsonl").read_text(encoding="utf-8").splitlines()
    payload = json.loads(lines[-1])
    assert payload["event"] == "SERVICE_FALLBACK"
    assert payload["service"] == "getApDongOulnInfo"
    assert payload["level"] == "WARNING"
    assert payload["message"] == "hello"
    assert payload["rows_out"] is None
