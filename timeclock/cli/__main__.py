from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from timeclock.config.loader import ConfigError, load_config_or_default
from timeclock.excel.reader import WorkbookError, drop_blank_rows, read_first_sheet
from timeclock.logging.init import log_summary, set_debug, setup_logging
from timeclock.logging.issue_log import IssueLogBuffer
from timeclock.models.holiday_calendar import ProtectedHolidayError
from timeclock.parsing.columns import infer_columns
from timeclock.services.holidays import load_calendar
from timeclock.services.orchestrator import IngestError
from timeclock.services.recompute import AttendanceSession, EditRejected
from timeclock.services.summary import format_hours_korean, record_rows, render_summary_line

"""CLI entrypoint.

Flow:
- .env (python-dotenv) -> config/attendance.yml -> holiday calendar (API or fallback)
- ingest the workbook's first sheet, classify, summarise
- apply --set-time / --set-leave / --holiday edits through the recompute path
- print the per-record table and a SUMMARY line (or JSON with --json)
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_EDIT_REJECTED = 2


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv (holiday API key). Missing file is fine."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_date_arg(text: str) -> date:
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD: {text}") from e


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Monthly attendance summary from a time-clock workbook")
    p.add_argument("file", type=Path, help="Workbook (.xlsx / .xls); first sheet is read")
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default config/attendance.yml)")
    p.add_argument("--today", type=_parse_date_arg, default=None, help="Reference date (default: today)")
    p.add_argument("--year", type=int, default=None, help="Holiday calendar year (default: year of --today)")
    p.add_argument("--no-holiday-api", action="store_true", help="Use the built-in holiday table only")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print column mapping & first rows then exit")
    p.add_argument("--issue-log", action="store_true", help="Write parse issues as JSON Lines under logs_dir")
    p.add_argument("--json", action="store_true", help="Print summary and rows as JSON")
    p.add_argument(
        "--set-time", nargs=3, action="append", default=[], metavar=("INDEX", "FIELD", "HH:MM"),
        help="Edit start/end time of record INDEX",
    )
    p.add_argument(
        "--set-leave", nargs=2, action="append", default=[], metavar=("INDEX", "HOURS"),
        help="Edit leave hours of record INDEX",
    )
    p.add_argument(
        "--holiday", nargs=2, action="append", default=[], metavar=("INDEX", "on|off"),
        help="Toggle the holiday flag of weekday record INDEX",
    )
    return p.parse_args(argv)


def _inspect_data(path: Path, leave_source_column: int) -> int:
    try:
        rows = drop_blank_rows(read_first_sheet(path))
    except WorkbookError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not rows:
        print("inspect: no rows")
        return EXIT_SUCCESS
    column_map = infer_columns(rows[0], leave_source_column=leave_source_column)
    print(f"FILE: {path.name} rows={len(rows)}")
    print(f"  header={rows[0]}")
    print(f"  columns={column_map.as_dict()}")
    for row in rows[1:4]:
        print("  sample_row=", [v.isoformat() if hasattr(v, "isoformat") else v for v in row])
    return EXIT_SUCCESS


def _apply_edits(session: AttendanceSession, args: argparse.Namespace, logger: logging.Logger) -> bool:
    """Apply CLI edits in order: times, leave hours, holiday flags. False if any was rejected."""
    ok = True
    edits = (
        [("time", e) for e in args.set_time]
        + [("leave", e) for e in args.set_leave]
        + [("holiday", e) for e in args.holiday]
    )
    for kind, values in edits:
        try:
            index = int(values[0])
            if kind == "time":
                session.edit_time(index, values[1], values[2])
            elif kind == "leave":
                session.edit_leave_hours(index, values[1])
            else:
                flag = values[1].strip().lower()
                if flag not in ("on", "off"):
                    raise EditRejected(f"holiday flag must be on|off: {values[1]!r}")
                session.toggle_holiday(index, flag == "on")
        except (EditRejected, ProtectedHolidayError) as e:
            logger.warning(f"edit rejected ({kind} {' '.join(values)}): {e}")
            ok = False
        except ValueError:
            logger.warning(f"edit rejected ({kind} {' '.join(values)}): invalid record index")
            ok = False
    return ok


def _print_table(session: AttendanceSession) -> None:
    for row in record_rows(session.records, session.calendar):
        holiday = "" if row["holiday"] is None else ("[x]" if row["holiday"] else "[ ]")
        end = row["end"] + ("*" if row["end_auto"] else "")
        print(
            f"{row['index']:>3} {row['date']} {row['start']:>5} {end:>6} "
            f"{row['work']:>9} {row['break']:>9} {row['leave']:>5} {row['actual']:>9} "
            f"{holiday:>3} {row['status']}"
        )


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # 빈 리스트([])는 그대로 사용, None 일 때만 sys.argv 를 읽음
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    set_debug(args.debug)
    if args.debug:
        logger.debug("debug mode enabled")
    elif args.json:
        # JSON 출력과 섞이지 않도록 오류만 출력
        logger.setLevel(logging.ERROR)

    _load_env_file(Path(".env"))
    try:
        cfg = load_config_or_default(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.file, cfg.leave_source_column)

    today = args.today or date.today()
    api_cfg = cfg.holiday_api
    if args.no_holiday_api:
        api_cfg = replace(api_cfg, enabled=False)
    calendar = load_calendar(args.year or today.year, api_cfg)

    session = AttendanceSession(calendar, today, cfg)
    try:
        session.load(args.file, show_progress=not args.json)
    except IngestError as e:
        logger.error(str(e))
        return EXIT_FATAL

    if args.issue_log and session.issues:
        buffer = IssueLogBuffer(cfg.logs_dir)
        buffer.extend(session.issues)
        written = buffer.flush()
        logger.info(f"issue log: {written}")

    edits_ok = _apply_edits(session, args, logger)
    summary = session.summary
    if summary is None:
        logger.error("no attendance data loaded")
        return EXIT_FATAL

    if args.json:
        payload = {
            "file": session.source_name,
            "summary": summary.totals(),
            "records": record_rows(session.records, session.calendar),
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        _print_table(session)
        logger.info(f"부족분 가용시간: {format_hours_korean(summary.shortage_hours)}")
        log_summary(render_summary_line(summary)[len("SUMMARY "):])

    return EXIT_SUCCESS if edits_ok else EXIT_EDIT_REJECTED


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
