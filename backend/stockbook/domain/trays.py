# backend/stockbook/domain/trays.py
"""
Positional tray packing.

The Nth device of a shipment (0-indexed) always lives in tray
``start + N // TRAY_CAPACITY``; removing a device re-packs everything
behind it, so trays are never sparse.
"""
from __future__ import annotations
from typing import Dict, List, Sequence

from stockbook.domain.constants import TRAY_CAPACITY
from stockbook.domain.identifiers import format_tray_code, parse_tray_code


def tray_for_index(start_tray: str, index: int, capacity: int = TRAY_CAPACITY) -> str:
    if index < 0:
        raise ValueError(f"index must be >= 0, got {index}")
    return format_tray_code(parse_tray_code(start_tray) + index // capacity)


def assign_trays(entries: Sequence, start_tray: str, capacity: int = TRAY_CAPACITY) -> None:
    """Rewrite ``location`` of every entry from its position in the list."""
    for i, entry in enumerate(entries):
        entry.location = tray_for_index(start_tray, i, capacity)


def group_by_tray(entries: Sequence) -> Dict[str, List]:
    # dicts keep insertion order, and positional packing keeps trays ascending
    groups: Dict[str, List] = {}
    for entry in entries:
        groups.setdefault(entry.location, []).append(entry)
    return groups


def tray_summary(entries: Sequence, capacity: int = TRAY_CAPACITY) -> List[dict]:
    return [
        {"code": code, "count": len(items), "capacity": capacity}
        for code, items in group_by_tray(entries).items()
    ]
