# backend/stockbook/domain/identifiers.py
from __future__ import annotations
import re
from typing import Optional

from stockbook.domain.constants import IMEI_LENGTH, TAC_LENGTH, TRAY_PREFIX, TRAY_DIGITS

IMEI_RE = re.compile(rf"^\d{{{IMEI_LENGTH}}}$", re.ASCII)
TRAY_RE = re.compile(rf"^{TRAY_PREFIX}(\d{{{TRAY_DIGITS},}})$", re.ASCII)


def normalize_identifier(raw: Optional[str]) -> str:
    """Scanners usually append a newline or pad with spaces."""
    return (raw or "").strip()


def is_valid_imei(value: str) -> bool:
    # re.match + $ would accept a trailing newline, fullmatch does not
    return bool(IMEI_RE.fullmatch(value or ""))


def tac_of(imei: str) -> str:
    return imei[:TAC_LENGTH]


def format_tray_code(number: int) -> str:
    if number < 1:
        raise ValueError(f"tray number must be >= 1, got {number}")
    return f"{TRAY_PREFIX}{number:0{TRAY_DIGITS}d}"


def parse_tray_code(code: str) -> int:
    m = TRAY_RE.fullmatch(code or "")
    if not m:
        raise ValueError(f"not a tray code: {code!r}")
    return int(m.group(1))


def is_tray_code(code: str) -> bool:
    return bool(TRAY_RE.fullmatch(code or ""))
