"""
Unit Normalizer

Turns arbitrary spreadsheet exports into canonical unit rows:
1. Map raw headers to canonical fields (regex rules, Levenshtein fallback)
2. Normalize cell values (bedrooms, status, floor, numbers)
3. Build UnitRow objects, dropping rows without a unit identifier

Cell-level normalizers never raise. Vendor exports are inconsistent, so a bad
cell degrades to 0 / unknown / None instead of rejecting the row.
"""
import logging
import math
import re
from typing import Any, Dict, List, Optional, Pattern, Sequence, Tuple

from realty_crm.schemas.unit import UnitRow, UnitStatus, UnitSummary
from realty_crm.services.spreadsheet_reader import placeholder_header
from realty_crm.services.unit_summary import generate_summary, header_mapping_score

logger = logging.getLogger(__name__)


# Ordered catalog; earlier rules win ties.
HEADER_RULES: List[Tuple[Pattern, str]] = [
    # Tower/Project
    (re.compile(r"tower|building|block|project|tower\s*name|building\s*name", re.I), "tower"),
    # Unit identification
    (re.compile(r"unit\s*(no|#|code|number|numb)|flat\s*no|apartment", re.I), "unit_number"),
    # Floor/Level
    (re.compile(r"floor|level|storey", re.I), "floor"),
    # Bedrooms/Unit type
    (re.compile(r"bedroom|br|bhk|unit\s*type|number\s*of\s*rooms|room|^type$|unit\s*category", re.I), "bedrooms_raw"),
    # Areas
    (re.compile(r"total\s*area|saleable\s*area|area(\s*sq|\s*sq\.?ft\.?)?$", re.I), "area_total"),
    (re.compile(r"suite\s*area|suite/sqf|suite(\s*sq\.?ft\.?)?", re.I), "area_suite"),
    (re.compile(r"balcony\s*area|terrace\s*area|balcony/sqf|terrace/sqf", re.I), "area_balcony"),
    # Price
    (re.compile(r"price|unit\s*price|phpp\s*price|per\s*sq", re.I), "price"),
    # Status
    (re.compile(r"status|availability|available|sold|reserved", re.I), "status_raw"),
    # View/Location
    (re.compile(r"view|location|unit\s*view", re.I), "unit_view"),
    # Unit code/identifier
    (re.compile(r"unit\s*code|code", re.I), "unit_code"),
    # Unit sub type
    (re.compile(r"unit\s*sub\s*type|sub\s*type", re.I), "unit_type"),
]

SIMILARITY_THRESHOLD = 0.6

NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}
MAX_BEDROOMS = 10

STUDIO_RE = re.compile(r"studio|sstudio|stduio", re.I)
WORD_BEDROOM_RE = re.compile(r"(one|two|three|four|five|six|seven|eight|nine|ten)\s*(bed|bedroom|br|b)", re.I)
DIGIT_BEDROOM_RE = re.compile(r"(\d+)\s*(br|bhk|bed|bedroom|b)", re.I)

NUMBER_PREFIX_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")

BEDROOM_KEY_RE = re.compile(r"bed|bhk|room|type|category", re.I)
BEDROOM_VALUE_RE = re.compile(r"(\d+)\s*(bhk|br|bed|bedroom|b)", re.I)


# ============================================
# HEADER MAPPING
# ============================================

def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(min(
                previous[j - 1] + cost,
                previous[j] + 1,
                current[j - 1] + 1,
            ))
        previous = current
    return previous[-1]


def calculate_similarity(a: str, b: str) -> float:
    """Similarity in [0, 1] from normalized Levenshtein distance."""
    max_length = max(len(a), len(b))
    if max_length == 0:
        return 1.0
    distance = levenshtein_distance(a.lower(), b.lower())
    return (max_length - distance) / max_length


def _best_field(header: str, used_fields: set, direct_only: bool) -> Optional[str]:
    cleaned = header.strip()
    best_field = None
    best_score = 0.0

    for pattern, field in HEADER_RULES:
        if field in used_fields:
            continue
        if pattern.search(cleaned):
            score = 1.0
        elif direct_only:
            continue
        else:
            score = calculate_similarity(cleaned.lower(), pattern.pattern)

        if score > best_score and score > SIMILARITY_THRESHOLD:
            best_field = field
            best_score = score

    return best_field


def map_headers(headers: Sequence[Any]) -> Dict[str, str]:
    """
    Map raw headers to canonical field names.

    Direct regex matches are assigned first, in header order, so a header
    like "Unit No" keeps its field no matter where fuzzy candidates sit.
    Remaining headers then fall back to similarity scoring. Each canonical
    field is used at most once. Unmatched headers are left out.
    """
    mapping: Dict[str, str] = {}
    used_fields: set = set()
    pending: List[str] = []

    for raw_header in headers:
        header = "" if raw_header is None else str(raw_header)
        if not header.strip() or header in mapping or header in pending:
            continue
        field = _best_field(header, used_fields, direct_only=True)
        if field:
            mapping[header] = field
            used_fields.add(field)
        else:
            pending.append(header)

    for header in pending:
        field = _best_field(header, used_fields, direct_only=False)
        if field:
            mapping[header] = field
            used_fields.add(field)

    return mapping


# ============================================
# VALUE NORMALIZERS
# ============================================

def _clamp_bedrooms(count: int) -> int:
    return min(MAX_BEDROOMS, max(0, count))


def normalize_bedrooms(value: Any) -> Optional[int]:
    """
    Bedroom count from free text, or None when it cannot be recognized.

    "Studio" -> 0, "2 BHK" -> 2, "onebedroom" -> 1, "1B-E" -> 1.
    """
    if value is None:
        return None
    text = str(value).strip().lower()
    if not text:
        return None

    if STUDIO_RE.search(text):
        return 0

    # "two bed room", "onebedroom"
    word_match = WORD_BEDROOM_RE.search(text)
    if word_match:
        return _clamp_bedrooms(NUMBER_WORDS[word_match.group(1).lower()])

    # "1 BR", "2 BHK", "3 Bedroom", "1B-E"
    digit_match = DIGIT_BEDROOM_RE.search(text)
    if digit_match:
        return _clamp_bedrooms(int(digit_match.group(1)))

    return None


def normalize_status(value: Any) -> UnitStatus:
    """Availability status from free text; unknown when unrecognized."""
    if value is None:
        return UnitStatus.UNKNOWN
    text = str(value).strip().lower()
    if not text:
        return UnitStatus.UNKNOWN

    if re.search(r"avail", text):
        return UnitStatus.AVAILABLE
    if re.search(r"sold|sale", text):
        return UnitStatus.SOLD
    if re.search(r"reserv|book", text):
        return UnitStatus.RESERVED
    if re.search(r"block|hold", text):
        return UnitStatus.BLOCKED

    return UnitStatus.UNKNOWN


def normalize_floor(value: Any) -> int:
    """Floor number; "L04", "Level 4" and "Floor 4" all give 4."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    if value is None:
        return 0

    match = re.search(r"\d+", str(value))
    return int(match.group()) if match else 0


def normalize_number(value: Any) -> float:
    """Area or price as a non-negative float; 0 when it cannot be parsed."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    elif value is None:
        return 0.0
    else:
        cleaned = re.sub(r"[,\s]", "", str(value))
        match = NUMBER_PREFIX_RE.match(cleaned)
        if not match:
            return 0.0
        number = float(match.group())

    if not math.isfinite(number):
        return 0.0
    return max(0.0, number)


def find_bedroom_source(
    custom_fields: Optional[Dict[str, Any]],
    unit_type: Optional[str] = None,
) -> Optional[str]:
    """
    Find bedroom-bearing text among a persisted unit's custom fields.

    Keys that look like bedroom/type columns win, then any value shaped like
    "2BR" or "1 BHK", then the unit type.
    """
    if not custom_fields:
        return unit_type

    for key, value in custom_fields.items():
        if BEDROOM_KEY_RE.search(key) and isinstance(value, str) and value.strip():
            return value

    for value in custom_fields.values():
        if isinstance(value, str) and BEDROOM_VALUE_RE.search(value):
            return value

    return unit_type


# ============================================
# ROW PROCESSING
# ============================================

def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _text(value: Any) -> Optional[str]:
    if _is_empty(value):
        return None
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        # Excel hands back unit numbers like 101 as 101.0
        return str(int(value))
    return str(value).strip()


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _number_field(values: Dict[str, Any], field: str) -> Optional[float]:
    if field not in values:
        return None
    return normalize_number(values[field])


def _column_fields(headers: Sequence[str], header_mapping: Dict[str, str]) -> List[Optional[str]]:
    """Canonical field per column; repeated headers only map their first column."""
    seen: set = set()
    fields: List[Optional[str]] = []
    for header in headers:
        if header in seen:
            fields.append(None)
            continue
        seen.add(header)
        fields.append(header_mapping.get(header))
    return fields


def _build_unit(
    values: Dict[str, Any],
    custom_fields: Dict[str, Any],
    raw_data: Dict[str, Any],
    project_name: Optional[str],
) -> UnitRow:
    bedrooms_raw = _text(values.get("bedrooms_raw"))
    status_raw = _text(values.get("status_raw"))

    return UnitRow(
        tower=_text(values.get("tower")) or project_name or None,
        unit_number=_text(values.get("unit_number")),
        unit_code=_text(values.get("unit_code")),
        floor=normalize_floor(values["floor"]) if "floor" in values else None,
        bedrooms=normalize_bedrooms(bedrooms_raw),
        bedrooms_raw=bedrooms_raw,
        area_total=_number_field(values, "area_total"),
        area_suite=_number_field(values, "area_suite"),
        area_balcony=_number_field(values, "area_balcony"),
        price=_number_field(values, "price"),
        status=normalize_status(status_raw),
        status_raw=status_raw,
        unit_view=_text(values.get("unit_view")),
        unit_type=_text(values.get("unit_type")),
        raw_data=raw_data,
        custom_fields=custom_fields,
    )


def process_rows(
    raw_rows: Sequence[Sequence[Any]],
    headers: Sequence[str],
    header_mapping: Dict[str, str],
    project_name: Optional[str] = None,
) -> List[UnitRow]:
    """
    Build UnitRow objects from raw cell rows.

    Rows without a unit number or unit code are dropped.
    """
    headers = [str(h) if h is not None else "" for h in headers]
    column_fields = _column_fields(headers, header_mapping)
    units: List[UnitRow] = []

    for row in raw_rows:
        values: Dict[str, Any] = {}
        custom_fields: Dict[str, Any] = {}
        raw_data: Dict[str, Any] = {}

        for index, cell in enumerate(row):
            header = headers[index] if index < len(headers) and headers[index] else placeholder_header(index + 1)
            cell = _json_safe(cell)
            raw_data[header] = cell
            if _is_empty(cell):
                continue

            field = column_fields[index] if index < len(column_fields) else None
            if field:
                values[field] = cell
            else:
                custom_fields[header] = cell

        unit = _build_unit(values, custom_fields, raw_data, project_name)
        if unit.has_identity:
            units.append(unit)

    logger.debug("Processed %d of %d rows into units", len(units), len(raw_rows))
    return units


def process_unit_data(
    raw_rows: Sequence[Sequence[Any]],
    headers: Sequence[str],
    project_name: Optional[str] = None,
) -> Tuple[List[UnitRow], UnitSummary, Dict[str, str]]:
    """Run header mapping, row processing and aggregation in one pass."""
    header_mapping = map_headers(headers)
    logger.info("Header mapping: %s", header_mapping)

    units = process_rows(raw_rows, headers, header_mapping, project_name)
    summary = generate_summary(units, header_mapping_score(headers, header_mapping))
    logger.info(
        "Processed %d units from %d rows (confidence %.2f)",
        len(units), len(raw_rows), summary.confidence.overall,
    )
    return units, summary, header_mapping
