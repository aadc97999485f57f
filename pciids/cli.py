#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import logging
import string
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import pciids


@dataclass
class ProgramArgs:
    db_path: Optional[str]
    ids: List[Tuple[int, ...]] = field(default_factory=list)
    class_codes: List[Tuple[int, ...]] = field(default_factory=list)


def _hex(digits: str, arg: str) -> int:
    if not digits or any(c not in string.hexdigits for c in digits):
        raise argparse.ArgumentTypeError(f"not hex: {arg!r}")
    return int(digits, 16)


def parse_id_arg(s: str) -> Tuple[int, ...]:
    """'vvvv', 'vvvv:dddd' or 'vvvv:dddd:ssss:ssss' -> tuple of ints."""
    parts = s.split(":")
    if len(parts) not in (1, 2, 4) or any(len(p) != 4 for p in parts):
        raise argparse.ArgumentTypeError(f"expected VVVV[:DDDD[:SSSS:SSSS]]: {s!r}")
    return tuple(_hex(p, s) for p in parts)


def parse_class_arg(s: str) -> Tuple[int, ...]:
    """'cc', 'ccss' or 'ccsspp' -> tuple of ints."""
    if len(s) not in (2, 4, 6):
        raise argparse.ArgumentTypeError(f"expected CC[SS[PP]]: {s!r}")
    return tuple(_hex(s[i : i + 2], s) for i in range(0, len(s), 2))


def format_id_line(table: pciids.PciIdTable, ids: Tuple[int, ...]) -> str:
    ven = ids[0]
    if len(ids) == 1:
        vname = table.get_vendor_name(ven) or "Unknown vendor"
        return f"{ven:04x}  {vname}"

    dev = ids[1]
    line = f"{ven:04x}:{dev:04x}  {table.describe_device_best_effort(ven, dev, None)}"
    if len(ids) == 4:
        sven, sdev = ids[2], ids[3]
        sname = table.get_subsystem_name(ven, dev, sven, sdev) or "Unknown subsystem"
        line += f" / {sven:04x}:{sdev:04x}  {sname}"
    return line


def format_class_line(table: pciids.PciIdTable, code: Tuple[int, ...]) -> str:
    cname = table.get_class_name(*code) or "Unknown class"
    return "".join(f"{c:02x}" for c in code) + f"  {cname}"


def run(args: ProgramArgs) -> None:
    table = (
        pciids.open_table(args.db_path) if args.db_path else pciids.default_table()
    )

    out_lines = []
    for ids in args.ids:
        out_lines.append(format_id_line(table, ids))
    for code in args.class_codes:
        out_lines.append(format_class_line(table, code))

    for line in out_lines:
        print(line)


def main() -> None:  # pragma: no cover
    ap = argparse.ArgumentParser(description="Look up names in the PCI ID database")
    ap.add_argument(
        "ids", nargs="*", type=parse_id_arg, help="VVVV[:DDDD[:SSSS:SSSS]] (hex)"
    )
    ap.add_argument(
        "-c",
        "--class",
        dest="class_codes",
        action="append",
        type=parse_class_arg,
        default=[],
        help="class code CC[SS[PP]] (hex); may be repeated",
    )
    ap.add_argument("--db", dest="db_path", default=None, help="path to pci.ids")
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="warning",
    )
    ns = ap.parse_args()
    logging.basicConfig(level=ns.log_level.upper())

    run(ProgramArgs(db_path=ns.db_path, ids=ns.ids, class_codes=ns.class_codes))


if __name__ == "__main__":  # pragma: no cover
    main()
