"""
Unit tests for diff_utils module.
"""

import pytest

from schemaform.diff_utils import calculate_diff, get_changed_paths, has_changes, values_equal


class TestValuesEqual:
    """Test class for structural equality."""

    def test_equal_structures(self):
        assert values_equal({'a': [1, {'b': 'x'}]}, {'a': [1, {'b': 'x'}]}) is True
        assert values_equal({'a': 1, 'b': 2}, {'b': 2, 'a': 1}) is True

    def test_list_order_matters(self):
        assert values_equal([1, 2], [2, 1]) is False

    def test_numeric_types(self):
        """Test that ints and floats of equal magnitude are equal but booleans are not numbers."""
        assert values_equal(1, 1.0) is True
        assert values_equal({'n': 0}, {'n': 0.0}) is True
        assert values_equal(False, 0) is False
        assert values_equal(True, True) is True

    def test_none_and_empty(self):
        assert values_equal(None, None) is True
        assert values_equal(None, '') is False
        assert values_equal([], {}) is False


class TestDiffUtils:
    """Test class for diff utilities."""

    def test_calculate_diff_no_changes(self):
        """Test calculating diff with no changes."""
        original = {"name": "John", "age": 30}
        modified = {"name": "John", "age": 30.0}

        diff = calculate_diff(original, modified)

        assert not has_changes(diff)
        assert get_changed_paths(diff) == []

    def test_calculate_diff_value_changed(self):
        """Test calculating diff with value changes."""
        original = {"user": {"name": "John", "age": 30}}
        modified = {"user": {"name": "Jane", "age": 30}}

        diff = calculate_diff(original, modified)

        assert diff['values_changed'] == {'user.name': {'old_value': 'John', 'new_value': 'Jane'}}
        assert has_changes(diff)

    def test_calculate_diff_type_change_is_value_change(self):
        diff = calculate_diff({"age": 30}, {"age": "thirty"})

        assert diff['values_changed']['age'] == {'old_value': 30, 'new_value': 'thirty'}

    def test_calculate_diff_items_added_and_removed(self):
        """Test keys and list elements that appear or disappear."""
        original = {"tags": ["a"], "old": 1}
        modified = {"tags": ["a", "b"], "new": 2}

        diff = calculate_diff(original, modified)

        assert diff['items_added'] == {'tags.1': 'b', 'new': 2}
        assert diff['items_removed'] == {'old': 1}
        assert get_changed_paths(diff) == ['new', 'old', 'tags.1']

    def test_calculate_diff_with_field_filter(self):
        original = {"a": 1, "b": 2}
        modified = {"a": 5, "b": 6}

        diff = calculate_diff(original, modified, fields={"a"})

        assert get_changed_paths(diff) == ['a']

    @pytest.mark.parametrize('diff,expected', [
        ({'values_changed': {}, 'items_added': {}, 'items_removed': {}}, False),
        ({'values_changed': {'a': {}}}, True),
        ({'items_removed': {'x': 1}}, True),
        ({}, False),
    ])
    def test_has_changes(self, diff, expected):
        assert has_changes(diff) is expected
