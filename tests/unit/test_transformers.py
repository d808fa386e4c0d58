"""
Unit tests for row flattening and nested extraction
"""

from ingestion.transformers.normalizer import (
    extract_nested,
    flatten_row,
    flatten_rows,
    merge_representative,
)


class TestFlattenRow:
    """Test nested object flattening"""

    def test_flattens_nested_objects(self):
        record = {"id": 1, "address": {"city": "X", "geo": {"lat": 0.5}}}

        assert flatten_row(record) == {"id": 1, "address_city": "X", "address_geo_lat": 0.5}

    def test_drops_arrays(self):
        record = {"id": 1, "tags": ["a", "b"], "meta": {"codes": [1, 2], "kind": "k"}}

        assert flatten_row(record) == {"id": 1, "meta_kind": "k"}

    def test_keeps_null_values(self):
        record = {"id": 1, "address": None}

        assert flatten_row(record) == {"id": 1, "address": None}

    def test_empty_nested_object_contributes_nothing(self):
        assert flatten_row({"id": 1, "extra": {}}) == {"id": 1}

    def test_prefix(self):
        assert flatten_row({"a": 1}, prefix="p") == {"p_a": 1}

    def test_later_key_wins_on_collision(self):
        """Differently nested fields flattening to one name: the later one overwrites"""
        assert flatten_row({"a_b": 1, "a": {"b": 2}}) == {"a_b": 2}
        assert flatten_row({"a": {"b": 2}, "a_b": 1}) == {"a_b": 1}

    def test_flatten_is_idempotent_on_flat_input(self):
        record = {"id": 1, "name": "x", "price": 9.5, "active": True, "note": None}

        once = flatten_row(record)
        assert flatten_row(once) == once == record

    def test_flatten_twice_equals_flatten_once(self, warehouse_records):
        for record in warehouse_records:
            once = flatten_row(record)
            assert flatten_row(once) == once


def test_flatten_rows_skips_non_objects():
    rows = flatten_rows([{"a": {"b": 1}}, "junk", 3, {"c": 2}])

    assert rows == [{"a_b": 1}, {"c": 2}]


class TestExtractNested:
    """Test nested array extraction"""

    def test_warehouse_locations(self):
        records = [{"warehouse_code": "W1", "locations": [{"zone": "A"}, {"zone": "B"}]}]

        nested = extract_nested(records, "warehouse_code", "locations")

        assert nested == [
            {"zone": "A", "_parent_warehouse_code": "W1"},
            {"zone": "B", "_parent_warehouse_code": "W1"},
        ]

    def test_extraction_completeness(self, warehouse_records):
        nested = extract_nested(warehouse_records, "warehouse_code", "locations")

        expected = sum(len(r.get("locations", [])) for r in warehouse_records)
        assert len(nested) == expected == 3
        assert [n["_parent_warehouse_code"] for n in nested] == ["W1", "W1", "W2"]

    def test_missing_or_non_list_values_contribute_nothing(self):
        records = [
            {"code": "A"},
            {"code": "B", "items": None},
            {"code": "C", "items": {"not": "a list"}},
            {"code": "D", "items": []},
        ]

        assert extract_nested(records, "code", "items") == []

    def test_does_not_mutate_source_elements(self):
        element = {"zone": "A"}
        extract_nested([{"code": "W", "locations": [element]}], "code", "locations")

        assert element == {"zone": "A"}

    def test_scalar_elements_become_value_rows(self):
        nested = extract_nested([{"code": "W", "tags": ["x", "y"]}], "code", "tags")

        assert nested == [
            {"value": "x", "_parent_code": "W"},
            {"value": "y", "_parent_code": "W"},
        ]

    def test_missing_parent_key_yields_none(self):
        nested = extract_nested([{"items": [{"sku": 1}]}], "receipt_no", "items")

        assert nested == [{"sku": 1, "_parent_receipt_no": None}]

    def test_nested_objects_in_elements_flatten_afterwards(self, warehouse_records):
        nested = extract_nested(warehouse_records, "warehouse_code", "locations")

        rows = flatten_rows(nested)
        assert rows[2] == {"zone": "C", "bin_row": 1, "bin_level": 2, "_parent_warehouse_code": "W2"}


class TestMergeRepresentative:

    def test_first_non_null_value_wins(self):
        merged = merge_representative([{"a": None, "b": 1}, {"a": "x", "b": 2, "c": True}])

        assert merged == {"a": "x", "b": 1, "c": True}

    def test_excluded_keys_are_case_insensitive(self):
        merged = merge_representative([{"ID": 1, "notes": "n"}], exclude={"id"})

        assert merged == {"notes": "n"}
