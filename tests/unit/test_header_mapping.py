from realty_crm.services.unit_normalizer import (
    calculate_similarity,
    levenshtein_distance,
    map_headers,
)


def test_levenshtein_distance_basic_edits():
    assert levenshtein_distance("kitten", "sitting") == 3
    assert levenshtein_distance("", "abc") == 3
    assert levenshtein_distance("floor", "floor") == 0


def test_similarity_is_one_for_identical_and_empty():
    assert calculate_similarity("Price", "price") == 1.0
    assert calculate_similarity("", "") == 1.0
    assert 0.0 <= calculate_similarity("abc", "xyz") < 0.5


def test_typical_export_maps_each_header(tower_a_sheet):
    headers, _ = tower_a_sheet

    mapping = map_headers(headers)

    assert mapping == {
        "Tower": "tower",
        "Unit No": "unit_number",
        "Floor": "floor",
        "Type": "bedrooms_raw",
        "Area": "area_total",
        "Price": "price",
        "Status": "status_raw",
    }


def test_each_canonical_field_is_used_once():
    headers = ["Tower", "Building", "Unit No", "Flat No", "Price", "Unit Price", "Status"]

    mapping = map_headers(headers)

    fields = list(mapping.values())
    assert len(fields) == len(set(fields))
    assert mapping["Tower"] == "tower"
    assert "Building" not in mapping
    assert mapping["Unit No"] == "unit_number"


def test_direct_match_wins_regardless_of_order():
    headers = ["Unt No", "Floor", "Unit No", "Status"]

    forward = map_headers(headers)
    backward = map_headers(list(reversed(headers)))

    assert forward["Unit No"] == "unit_number"
    assert forward == backward


def test_unmatched_and_blank_headers_are_omitted():
    mapping = map_headers(["Unit No", "", None, "Parking Spaces", "Remarks"])

    assert mapping == {"Unit No": "unit_number"}


def test_code_sub_type_and_area_headers():
    mapping = map_headers(["Code", "Unit Sub Type", "Total Area", "Suite Area", "Balcony Area", "View"])

    assert mapping["Code"] == "unit_code"
    assert mapping["Unit Sub Type"] == "unit_type"
    assert mapping["Total Area"] == "area_total"
    assert mapping["Suite Area"] == "area_suite"
    assert mapping["Balcony Area"] == "area_balcony"
    assert mapping["View"] == "unit_view"
