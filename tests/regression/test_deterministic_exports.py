from __future__ import annotations

import random
from pathlib import Path

import pytest

from permithub.common.config_loader import load_all_configs
from permithub.harvest import aggregator as aggregator_module
from permithub.harvest.aggregator import DataAggregator
from permithub.pipeline.export import export_csv, flatten_result_set
from permithub.pipeline.reports import summarize_result_set
from permithub.reference.regions import RegionDirectory


def _export_once(out_path: Path, seed: int) -> bytes:
    bundle = load_all_configs(Path("config"))
    aggregator = DataAggregator(
        "",
        bundle.services,
        RegionDirectory.from_bundle(bundle),
        base_url=bundle.base_url,
        rng=random.Random(seed),
    )
    result_set = aggregator.fetch_all("11110", "10100")
    export_csv(flatten_result_set(result_set), out_path)
    return out_path.read_bytes()


@pytest.mark.regression
def test_seeded_simulated_export_is_byte_stable(tmp_path: Path, monkeypatch):
    monkeypatch.setattr(aggregator_module, "utc_timestamp_iso", lambda: "2025-01-01T00:00:00.000+00:00")

    first = _export_once(tmp_path / "first.csv", seed=11)
    second = _export_once(tmp_path / "second.csv", seed=11)

    assert first == second


@pytest.mark.regression
def test_simulated_summary_shape_is_stable():
    bundle = load_all_configs(Path("config"))
    aggregator = DataAggregator("", bundle.services, RegionDirectory.from_bundle(bundle), rng=random.Random(0))

    summary = summarize_result_set(aggregator.fetch_all("11110", "10100"))

    assert summary["outcome"] == "simulated"
    assert summary["message"] == "API 호출에 실패하여 시뮬레이션 데이터를 표시합니다."
    assert summary["totals"] == {"records": 48, "real": 0, "simulated": 48}
    assert {service["failure"] for service in summary["services"].values()} == {"missing_credential"}
