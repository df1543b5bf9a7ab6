import pytest

from permithub.cli import main, parse_args


def test_parse_args_search_defaults():
    args = parse_args(["search", "--sigungu", "11110", "--bjdong", "10100"])
    assert args.command == "search"
    assert args.config_dir == "./config"
    assert args.overlay_config_dir is None
    assert args.store is None
    assert args.page_size is None
    assert args.export is None


def test_parse_args_accepts_overlay_config_dir():
    args = parse_args(["--overlay-config-dir", "config/live", "regions"])
    assert args.overlay_config_dir == "config/live"


def test_parse_args_targets_add():
    args = parse_args(
        [
            "targets",
            "add",
            "--address",
            "서울 종로구 1",
            "--contractor",
            "삼성물산",
            "--completion-date",
            "2025-12-31",
            "--contact",
            "최담당",
            "--email",
            "choi@example.com",
        ]
    )
    assert args.target_command == "add"
    assert args.note == ""


def test_parse_args_districts_flag_without_category():
    args = parse_args(["regions", "--districts"])
    assert args.districts == ""


def test_parse_args_requires_command():
    with pytest.raises(SystemExit):
        parse_args([])


@pytest.mark.parametrize(
    "argv",
    [
        ["search", "--sigungu", "1111", "--bjdong", "10100"],
        ["search", "--sigungu", "11110", "--bjdong", "10100", "--start-date", "2025-13-40"],
    ],
)
def test_invalid_search_input_is_usage_error(tmp_path, argv):
    code = main(["--data-dir", str(tmp_path / "data"), "--store", str(tmp_path / "store.json"), *argv])
    assert code == 2
