"""
Unit Summary

Aggregates normalized units into counts per status, bedrooms, floor and
tower, plus a heuristic confidence score. One linear pass, no I/O.
"""
from collections import Counter
from typing import Dict, Iterable, Sequence

from realty_crm.schemas.unit import SummaryConfidence, UnitRow, UnitStatus, UnitSummary
from realty_crm.services.spreadsheet_reader import placeholder_header

UNKNOWN_BEDROOMS_KEY = "unknown"
UNSPECIFIED_TOWER = "Unspecified"


def header_mapping_score(headers: Sequence, header_mapping: Dict[str, str]) -> float:
    """
    Fraction of this ingestion's named headers that mapped to a canonical field.

    Blank header cells, and the placeholder names the reader gives them, do
    not count.
    """
    named = [
        str(h) for position, h in enumerate(headers, start=1)
        if h is not None and str(h).strip() and str(h) != placeholder_header(position)
    ]
    if not named:
        return 0.0
    # A repeated header maps only once
    mapped = len(set(named) & set(header_mapping))
    return mapped / len(named)


def _bedrooms_key(unit: UnitRow) -> str:
    return UNKNOWN_BEDROOMS_KEY if unit.bedrooms is None else str(unit.bedrooms)


def _floor_key(unit: UnitRow) -> str:
    return str(unit.floor if unit.floor is not None else 0)


def generate_summary(units: Iterable[UnitRow], header_mapping: float = 1.0) -> UnitSummary:
    """
    Build a UnitSummary.

    Args:
        units: Normalized units
        header_mapping: Header-mapping confidence for the batch; 1.0 for
            units that are already stored in canonical form
    """
    by_status: Counter = Counter()
    by_bedrooms: Counter = Counter()
    by_floor: Counter = Counter()
    by_tower: Counter = Counter()
    with_identity = 0
    with_status = 0
    with_bedrooms = 0
    total = 0

    for unit in units:
        total += 1
        by_status[unit.status.value] += 1
        by_bedrooms[_bedrooms_key(unit)] += 1
        by_floor[_floor_key(unit)] += 1
        by_tower[unit.tower or UNSPECIFIED_TOWER] += 1

        if unit.has_identity:
            with_identity += 1
        if unit.status != UnitStatus.UNKNOWN:
            with_status += 1
        if unit.bedrooms is not None:
            with_bedrooms += 1

    if total:
        data_quality = (with_identity + with_status + with_bedrooms) / (3 * total)
        header_score = min(1.0, max(0.0, header_mapping))
        overall = (header_score + data_quality) / 2
    else:
        data_quality = header_score = overall = 0.0

    return UnitSummary(
        total=total,
        by_status=dict(by_status),
        by_bedrooms=dict(by_bedrooms),
        by_floor=dict(by_floor),
        by_tower=dict(by_tower),
        confidence=SummaryConfidence(
            header_mapping=header_score,
            data_quality=data_quality,
            overall=overall,
        ),
    )
