import csv
import json
from pathlib import Path

import pytest

from permithub.cli import parse_args, run_command
from permithub.storage.local_store import LocalStore


def _base_args(tmp_path: Path) -> list[str]:
    return [
        "--config-dir",
        "config",
        "--data-dir",
        str(tmp_path / "data"),
        "--store",
        str(tmp_path / "store.json"),
        "--run-id",
        "search-test",
    ]


@pytest.mark.integration
def test_cli_search_without_credential_exports_simulated_data(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.delenv("PUBLIC_DATA_API_KEY", raising=False)
    export_path = tmp_path / "out.csv"
    args = parse_args(
        [*_base_args(tmp_path), "search", "--sigungu", "11110", "--bjdong", "10100", "--export", str(export_path)]
    )

    exit_code = run_command(args)

    assert exit_code == 10
    summary = json.loads(capsys.readouterr().out)
    assert summary["outcome"] == "simulated"
    assert summary["totals"] == {"records": 48, "real": 0, "simulated": 48}
    assert (tmp_path / "data" / "out" / "reports" / "search-test_summary.json").exists()
    with export_path.open("r", encoding="utf-8-sig", newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 49
    assert "시군구명" in rows[0]


@pytest.mark.integration
def test_cli_targets_add_list_export(tmp_path: Path, capsys):
    add_args = [
        "targets",
        "add",
        "--address",
        "경기도 과천시 과천동 1",
        "--contractor",
        "GS건설",
        "--completion-date",
        "2025-09-30",
        "--contact",
        "정담당",
        "--email",
        "jung@example.com",
    ]
    assert run_command(parse_args([*_base_args(tmp_path), *add_args])) == 0
    capsys.readouterr()

    assert run_command(parse_args([*_base_args(tmp_path), "targets", "list"])) == 0
    listed = json.loads(capsys.readouterr().out)
    assert [item["contractor"] for item in listed] == ["GS건설"]

    output = tmp_path / "targets.xlsx"
    assert run_command(parse_args([*_base_args(tmp_path), "targets", "export", "--output", str(output)])) == 0
    assert output.exists()


@pytest.mark.integration
def test_cli_set_key_without_check_persists(tmp_path: Path):
    args = parse_args([*_base_args(tmp_path), "set-key", "  new-key-0123456  ", "--no-check"])

    assert run_command(args) == 0
    assert LocalStore(tmp_path / "store.json").get("PUBLIC_DATA_API_KEY") == "new-key-0123456"


@pytest.mark.integration
def test_cli_regions_lists_sub_regions(tmp_path: Path, capsys):
    assert run_command(parse_args([*_base_args(tmp_path), "regions", "--sigungu", "11110"])) == 0

    assert json.loads(capsys.readouterr().out)["10100"] == "청운효자동"


@pytest.mark.integration
def test_cli_search_export_applies_completion_window_and_sort(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.delenv("PUBLIC_DATA_API_KEY", raising=False)
    export_path = tmp_path / "basis.csv"
    argv = [
        *_base_args(tmp_path),
        "search",
        "--sigungu",
        "11110",
        "--bjdong",
        "10100",
        "--export",
        str(export_path),
        "--completion",
        "year",
        "--completion-year",
        "2025",
        "--sort",
        "useAprDay:desc",
    ]

    assert run_command(parse_args(argv)) == 10
    capsys.readouterr()

    with export_path.open("r", encoding="utf-8-sig", newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 8
    dates = [row["사용승인일"] for row in rows]
    assert dates == sorted(dates, reverse=True)
    assert all(value.startswith("2025-") for value in dates)
