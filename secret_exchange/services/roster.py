from __future__ import annotations

import csv
from dataclasses import dataclass


@dataclass(frozen=True)
class RosterRow:
    name: str
    address: str


def _is_header(line: str) -> bool:
    low = line.lower()
    return "name" in low and "email" in low


def parse_roster(text: str) -> tuple[list[RosterRow], list[dict]]:
    """
    Parses `name,email` lines. Blank lines are dropped and a leading header
    line is skipped. Errors carry the 1-based data line number.
    """
    lines = [line.strip() for line in (text or "").splitlines()]
    lines = [line for line in lines if line]
    if lines and _is_header(lines[0]):
        lines = lines[1:]

    rows: list[RosterRow] = []
    errors: list[dict] = []
    for number, fields in enumerate(csv.reader(lines), start=1):
        parts = [f.strip() for f in fields]
        if len(parts) != 2:
            errors.append({"line": number, "error": "Invalid format - expected name,email"})
            continue
        name, address = parts
        if not name or not address:
            errors.append({"line": number, "error": "Name and email cannot be empty"})
            continue
        rows.append(RosterRow(name=name, address=address))
    return rows, errors
