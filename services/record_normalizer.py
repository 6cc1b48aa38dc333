#!/usr/bin/env python3
"""
Record Normalizer - turn raw EVN table rows into ReservoirReading values
"""
import logging
import math
import re
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from models import NUMERIC_NAME_PATTERN, ReservoirReading

logger = logging.getLogger(__name__)

# Plain decimal as rendered in EVN cells, after "," -> "."
DECIMAL_PATTERN = re.compile(r"^[+-]?[0-9]+(\.[0-9]+)?$")

# Name cell carries a "synced at" timestamp after the reservoir name
SYNC_SUFFIX_PATTERN = re.compile(r"\(?\s*Đồng bộ lúc:.*$", re.IGNORECASE | re.DOTALL)

# Summary / header rows the two-row header skip can miss
TOTAL_MARKER = "tổng"
ROW_NUMBER_MARKER = "stt"

# EVN table structure:
# [0] Tên hồ + timestamp, [1] Ngày, [2] Htl, [3] Hdbt, [4] Hc,
# [5] Qve, [6] ΣQx, [7] Qxt, [8] Qxm, [9] Ncxs, [10] Ncxm
MEASUREMENT_COLUMNS = (
    ("current_level", 2),
    ("normal_level", 3),
    ("dead_level", 4),
    ("inflow", 5),
    ("total_outflow", 6),
    ("turbine_outflow", 7),
    ("surface_outflow", 8),
    ("deep_gates_open", 9),
    ("surface_gates_open", 10),
)


def parse_number(value: Optional[str]) -> Optional[float]:
    """Parse an EVN cell as float; blank, "-" and garbage become None"""
    if value is None:
        return None
    text = value.strip()
    if not text or text == "-":
        return None
    text = text.replace(",", ".")
    if not DECIMAL_PATTERN.match(text):
        return None
    number = float(text)
    return number if math.isfinite(number) else None


def clean_name(raw: str) -> str:
    return SYNC_SUFFIX_PATTERN.sub("", raw or "").strip()


def is_reservoir_name(name: str) -> bool:
    """False for empty names, total/STT rows and numbers from misaligned columns"""
    if not name:
        return False
    lowered = name.lower()
    if TOTAL_MARKER in lowered or ROW_NUMBER_MARKER in lowered:
        return False
    return not NUMERIC_NAME_PATTERN.match(name)


def normalize_row(row: Sequence[str], captured_at: str) -> Optional[ReservoirReading]:
    """Convert one raw row, or return None if it is not a data row"""
    if not row:
        return None

    name = clean_name(row[0])
    if not is_reservoir_name(name):
        logger.debug("[EVN] Dropping non-data row %r", row[0])
        return None

    values = {
        field: parse_number(row[index]) if index < len(row) else None
        for field, index in MEASUREMENT_COLUMNS
    }
    return ReservoirReading(name=name, captured_at=captured_at, **values)


def normalize_rows(
    rows: Sequence[Sequence[str]],
    captured_at: Optional[str] = None,
) -> List[ReservoirReading]:
    """
    Normalize a scraped batch.

    Args:
        rows: Cell texts per table row
        captured_at: ISO timestamp stamped on every record (default: now, UTC)

    Returns:
        Readings in table order, one per reservoir name
    """
    if captured_at is None:
        captured_at = datetime.now(timezone.utc).isoformat()

    readings = []
    seen = set()
    for row in rows:
        reading = normalize_row(row, captured_at)
        if reading is None:
            continue
        if reading.name in seen:
            logger.debug("[EVN] Duplicate reservoir row '%s' ignored", reading.name)
            continue
        seen.add(reading.name)
        readings.append(reading)

    return readings
