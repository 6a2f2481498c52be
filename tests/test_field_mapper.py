"""
Tests for FieldMapper.

Slot assignment follows the order fields are supplied in. These tests pin
that behavior, including the fact that reordering the same field set moves
fields to different slots unless sorted ordering is configured.
"""

import pytest

from lakebench.core.field_mapper import ATTRIBUTE_NAMES, FieldMapper
from lakebench.errors import FieldMappingError


class TestMapFields:
    """Tests for positional slot assignment."""

    def test_first_field_goes_to_slot_zero(self):
        mapping = FieldMapper().map_fields(["a", "b"])
        assert mapping == {"a": "FIELD0", "b": "FIELD1"}

    @pytest.mark.parametrize("n", [1, 5, 10])
    def test_mapping_is_bijection_onto_leading_slots(self, n):
        fields = [f"f{i}" for i in range(n)]
        mapping = FieldMapper().map_fields(fields)

        assert set(mapping) == set(fields)
        assert sorted(mapping.values()) == sorted(ATTRIBUTE_NAMES[:n])
        assert len(set(mapping.values())) == n

    def test_set_input_has_no_collisions(self):
        fields = {"field3", "field1", "field7"}
        mapping = FieldMapper().map_fields(fields)
        assert len(set(mapping.values())) == 3
        assert set(mapping.values()) == {"FIELD0", "FIELD1", "FIELD2"}

    def test_duplicates_are_dropped(self):
        mapping = FieldMapper().map_fields(["a", "b", "a"])
        assert mapping == {"a": "FIELD0", "b": "FIELD1"}

    def test_too_many_fields_is_an_error(self):
        with pytest.raises(FieldMappingError):
            FieldMapper().map_fields([f"f{i}" for i in range(11)])

    @pytest.mark.parametrize("fields", [None, [], set(), ()])
    def test_no_fields_means_all_fields(self, fields):
        assert FieldMapper().map_fields(fields) is None

    def test_unknown_order_rejected(self):
        with pytest.raises(ValueError):
            FieldMapper(order="random")


class TestOrderingCaveat:
    """Slot assignment depends on the caller's ordering."""

    def test_insertion_order_moves_fields_between_slots(self):
        mapper = FieldMapper(order="insertion")
        first = mapper.map_fields(["a", "b"])
        second = mapper.map_fields(["b", "a"])

        # Same field set, different slots: an update issued with the second
        # ordering writes "a" into the column the first insert used for "b".
        assert first["a"] == "FIELD0"
        assert second["a"] == "FIELD1"

    def test_sorted_order_is_stable_across_orderings(self):
        mapper = FieldMapper(order="sorted")
        assert mapper.map_fields(["b", "a"]) == mapper.map_fields(["a", "b"])
        assert mapper.map_fields(["b", "a"]) == {"a": "FIELD0", "b": "FIELD1"}

    def test_repeated_calls_with_same_order_are_deterministic(self):
        mapper = FieldMapper()
        fields = ["x", "y", "z"]
        assert mapper.map_fields(fields) == mapper.map_fields(list(fields))
