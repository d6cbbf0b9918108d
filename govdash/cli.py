from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from govdash.config import load_settings
from govdash.models import record_to_dict
from govdash.parser import parse_excel_file
from govdash.store import StoreError, snapshot_store_from_settings
from govdash.workbook import WorkbookReadError


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="govdash", description="Data-governance dashboard extraction.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log section-level details.")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Parse a workbook and print the dashboard record as JSON.")
    p_parse.add_argument("path", help="Path to the .xlsx workbook.")
    p_parse.add_argument("--save", action="store_true", help="Also store the record as the latest snapshot.")
    p_parse.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2).")

    p_show = sub.add_parser("show", help="Print the latest stored snapshot.")
    p_show.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2).")
    return parser.parse_args(argv)


def _print(payload: object, indent: int) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False, indent=indent) + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )
    settings = load_settings()

    if args.command == "parse":
        try:
            record = parse_excel_file(args.path, scan_limit=settings.header_scan_limit)
        except WorkbookReadError as exc:
            sys.stderr.write(f"error: {exc}. Please provide a valid .xlsx workbook.\n")
            return 2
        _print(record_to_dict(record), args.indent)
        if args.save:
            try:
                snapshot_store_from_settings(settings).save(record)
            except StoreError as exc:
                sys.stderr.write(f"error: parsed OK but saving failed: {exc}\n")
                return 3
        return 0

    try:
        record = snapshot_store_from_settings(settings).load_latest()
    except StoreError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 3
    if record is None:
        sys.stderr.write("no stored snapshot\n")
        return 1
    _print(record_to_dict(record), args.indent)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
