"""CLI entrypoint for the building-permit lookup."""

from __future__ import annotations

import argparse
import json
import re
import sys
from datetime import date
from pathlib import Path

from permithub.common.config_loader import load_all_configs
from permithub.common.constants import EXIT_HARD_FAIL, EXIT_PARTIAL, EXIT_SUCCESS, EXIT_USAGE
from permithub.common.errors import PermitHubError, ValidationError
from permithub.common.ids import generate_run_id
from permithub.common.logging import build_logger, log_event
from permithub.common.models import Provenance, Record
from permithub.common.time_utils import to_compact_date
from permithub.pipeline.export import (
    RESULT_FILE_STEM,
    TARGET_FILE_STEM,
    default_filename,
    export_csv,
    export_targets,
    export_xlsx,
    records_to_frame,
)
from permithub.pipeline.filters import COMPLETION_WINDOWS, filter_by_completion, sort_records
from permithub.pipeline.reports import summarize_result_set, write_search_summary
from permithub.reference.regions import RegionDirectory
from permithub.session import SearchSession
from permithub.storage.local_store import DEFAULT_STORE_PATH, LocalStore
from permithub.storage.targets import TargetList

_CODE_PATTERN = re.compile(r"^\d{5}$")


def _add_refine_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--completion", default="all", choices=COMPLETION_WINDOWS, help="사용승인일 window")
    parser.add_argument("--completion-year", type=int, default=None)
    parser.add_argument("--sort", default=None, metavar="FIELD[:desc]")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config-dir", default="./config")
    parser.add_argument("--overlay-config-dir", default=None)
    parser.add_argument("--data-dir", default="./data")
    parser.add_argument("--store", default=None, help=f"Key/value store file (default: {DEFAULT_STORE_PATH})")
    parser.add_argument("--run-id", default=None)
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARN", "ERROR"])

    sub = parser.add_subparsers(dest="command", required=True)

    search = sub.add_parser("search", help="Query every service for one 시군구/법정동")
    search.add_argument("--sigungu", required=True, help="5-digit 시군구 code, e.g. 11110")
    search.add_argument("--bjdong", required=True, help="5-digit 법정동 code, e.g. 10100")
    search.add_argument("--plat-gb", default=None, help="대지구분코드 (0 대지, 1 산, 2 블록)")
    search.add_argument("--bun", default=None)
    search.add_argument("--ji", default=None)
    search.add_argument("--start-date", default=None, help="YYYY-MM-DD or YYYYMMDD")
    search.add_argument("--end-date", default=None, help="YYYY-MM-DD or YYYYMMDD")
    search.add_argument("--pms-gb", default=None, help="허가구분코드")
    search.add_argument("--page-size", type=int, default=None)
    search.add_argument("--page", type=int, default=None)
    search.add_argument("--export", default=None, help="Write results to a .csv or .xlsx file")
    _add_refine_args(search)

    districts = sub.add_parser("search-districts", help="Query every district of a new-town category")
    districts.add_argument("--category", required=True)
    districts.add_argument("--service", default="getApDongOulnInfo")
    districts.add_argument("--delay", type=float, default=None, help="Seconds between requests")
    districts.add_argument("--export", default=None, help="Write results to a .csv or .xlsx file")
    _add_refine_args(districts)

    set_key = sub.add_parser("set-key", help="Store the data.go.kr service key")
    set_key.add_argument("key")
    set_key.add_argument("--no-check", action="store_true")

    check_key = sub.add_parser("check-key", help="Probe the API with a service key")
    check_key.add_argument("key", nargs="?", default=None)

    regions = sub.add_parser("regions", help="List provinces, 시군구 or 법정동 codes")
    regions.add_argument("--province", default=None)
    regions.add_argument("--sigungu", default=None)
    regions.add_argument("--districts", default=None, metavar="CATEGORY", nargs="?", const="")

    targets = sub.add_parser("targets", help="Manage the target-site list")
    target_sub = targets.add_subparsers(dest="target_command", required=True)
    target_sub.add_parser("list")
    add = target_sub.add_parser("add")
    add.add_argument("--address", required=True)
    add.add_argument("--contractor", required=True)
    add.add_argument("--completion-date", required=True)
    add.add_argument("--contact", required=True)
    add.add_argument("--email", required=True)
    add.add_argument("--note", default="")
    remove = target_sub.add_parser("remove")
    remove.add_argument("target_id")
    target_sub.add_parser("clear")
    export = target_sub.add_parser("export")
    export.add_argument("--output", default=None, help="Destination .csv or .xlsx")

    return parser.parse_args(argv)


def _emit(payload) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _require_code(value: str, label: str) -> str:
    value = (value or "").strip()
    if not _CODE_PATTERN.match(value):
        raise ValidationError(f"{label} must be a 5-digit code, got {value!r}")
    return value


def _compact_date(value: str | None, label: str) -> str | None:
    try:
        return to_compact_date(value)
    except ValueError as exc:
        raise ValidationError(f"{label} must be a date (YYYY-MM-DD or YYYYMMDD), got {value!r}") from exc


def _export_path(requested: str | None, data_dir: Path, stem: str) -> Path | None:
    if requested is None:
        return None
    if requested in ("csv", "xlsx"):
        return data_dir / "out" / default_filename(stem, requested)
    return Path(requested)


def _refine(records: list[Record], args: argparse.Namespace) -> list[Record]:
    records = filter_by_completion(records, args.completion, date.today(), year=args.completion_year)
    if args.sort:
        field, _, direction = args.sort.partition(":")
        records = sort_records(records, field, direction or "asc")
    return records


def _write_export(path: Path, groups: dict[str, list[Record]], args: argparse.Namespace) -> None:
    refined = {name: _refine(records, args) for name, records in groups.items()}
    if path.suffix.lower() == ".xlsx":
        export_xlsx({name: records_to_frame(records) for name, records in refined.items()}, path)
    else:
        export_csv([record for records in refined.values() for record in records], path)


def _run_search(args: argparse.Namespace, session: SearchSession, data_dir: Path, run_id: str) -> int:
    options = {
        "plot_type_code": args.plat_gb,
        "lot_number": args.bun,
        "lot_sub_number": args.ji,
        "date_range_start": _compact_date(args.start_date, "--start-date"),
        "date_range_end": _compact_date(args.end_date, "--end-date"),
        "permit_kind_code": args.pms_gb,
    }
    if args.page_size is not None:
        options["page_size"] = args.page_size
    if args.page is not None:
        options["page_index"] = args.page

    result_set = session.search(
        _require_code(args.sigungu, "--sigungu"),
        _require_code(args.bjdong, "--bjdong"),
        run_id=run_id,
        **options,
    )
    write_search_summary(data_dir, run_id, result_set)

    export_path = _export_path(args.export, data_dir, RESULT_FILE_STEM)
    if export_path is not None:
        groups = {result_set[service_id].service_name: result_set.records(service_id) for service_id in result_set}
        _write_export(export_path, groups, args)

    summary = summarize_result_set(result_set)
    if export_path is not None:
        summary["export"] = str(export_path)
    _emit(summary)
    if result_set.count_by_provenance()[Provenance.SIMULATED]:
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def _run_search_districts(args: argparse.Namespace, session: SearchSession, data_dir: Path, run_id: str) -> int:
    delay = args.delay
    if delay is None:
        delay = float(session.bundle.defaults.get("district_delay_sec", 0.2))
    results = session.aggregator.fetch_districts(args.category, args.service, delay, run_id=run_id)

    export_path = _export_path(args.export, data_dir, f"{args.category}_{args.service}")
    if export_path is not None:
        _write_export(export_path, {name: result.records for name, result in results.items()}, args)

    _emit(
        {
            "run_id": run_id,
            "category": args.category,
            "service": args.service,
            "districts": {
                name: {"provenance": result.provenance.value, "records": len(result.records)}
                for name, result in results.items()
            },
            "export": str(export_path) if export_path else None,
        }
    )
    if any(result.provenance is Provenance.SIMULATED for result in results.values()):
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def _run_regions(args: argparse.Namespace, directory: RegionDirectory) -> int:
    if args.districts is not None:
        if args.districts:
            payload = {
                district.name: {
                    "sigunguCd": district.sigungu_code,
                    "bjdongCd": district.bjdong_code,
                    "region": district.region,
                }
                for district in directory.districts(args.districts)
            }
        else:
            payload = directory.categories()
    elif args.sigungu:
        payload = directory.sub_regions(args.sigungu)
    elif args.province:
        payload = directory.sigungu_in(args.province)
    else:
        payload = directory.provinces()
    _emit(payload)
    return EXIT_SUCCESS


def _run_targets(args: argparse.Namespace, store: LocalStore, data_dir: Path) -> int:
    targets = TargetList(store)
    if args.target_command == "list":
        _emit([target.to_dict() for target in targets.all()])
    elif args.target_command == "add":
        site = targets.add(
            address=args.address,
            contractor=args.contractor,
            completion_date=args.completion_date,
            contact=args.contact,
            email=args.email,
            note=args.note,
        )
        _emit(site.to_dict())
    elif args.target_command == "remove":
        if not targets.remove(args.target_id):
            raise ValidationError(f"No target with id {args.target_id!r}")
    elif args.target_command == "clear":
        targets.clear()
    elif args.target_command == "export":
        output = _export_path(args.output or "csv", data_dir, TARGET_FILE_STEM)
        export_targets(targets.all(), output)
        _emit({"export": str(output), "count": len(targets.all())})
    return EXIT_SUCCESS


def run_command(args: argparse.Namespace) -> int:
    run_id = args.run_id or generate_run_id()
    data_dir = Path(args.data_dir)
    store = LocalStore(Path(args.store) if args.store else None)
    logger = build_logger(run_id, data_dir=data_dir, level=args.log_level)

    if args.command == "targets":
        return _run_targets(args, store, data_dir)

    overlay_config_dir = Path(args.overlay_config_dir) if args.overlay_config_dir else None
    bundle = load_all_configs(Path(args.config_dir), overlay_config_dir=overlay_config_dir)

    if args.command == "regions":
        return _run_regions(args, RegionDirectory.from_bundle(bundle))

    session = SearchSession(bundle, store, logger=logger)
    if args.command == "search":
        return _run_search(args, session, data_dir, run_id)
    if args.command == "search-districts":
        return _run_search_districts(args, session, data_dir, run_id)
    if args.command == "check-key":
        check = session.check_credential(args.key if args.key is not None else session.credential)
        _emit({"valid": check.is_valid, "message": check.message})
        return EXIT_SUCCESS if check.is_valid else EXIT_HARD_FAIL
    if args.command == "set-key":
        if not args.no_check:
            check = session.check_credential(args.key)
            if not check.is_valid:
                _emit({"valid": False, "message": check.message})
                return EXIT_HARD_FAIL
        session.update_credential(args.key)
        log_event(logger, "service key stored", run_id=run_id, event="CREDENTIAL_UPDATED", status="ok")
        _emit({"stored": True, "store": str(store.path)})
        return EXIT_SUCCESS
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        return run_command(args)
    except ValidationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    except PermitHubError as exc:
        print(f"error [{exc.error_code}]: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL
    except Exception as exc:
        print(f"unexpected error: {exc}", file=sys.stderr)
        return EXIT_HARD_FAIL


if __name__ == "__main__":
    raise SystemExit(main())
