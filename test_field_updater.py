"""
Unit tests for value propagation and error application.
"""

import pytest

from schemaform.field_creators import FieldCreatorFactory
from schemaform.field_updater import FieldUpdater


SCHEMA = {
    'type': 'object',
    'properties': {
        'order': {
            'type': 'object',
            'properties': {
                'customer': {'type': 'string'},
                'lines': {
                    'type': 'array',
                    'items': {
                        'type': 'object',
                        'properties': {'sku': {'type': 'string'}, 'qty': {'type': 'integer'}}
                    }
                }
            }
        }
    }
}


@pytest.fixture
def updater():
    return FieldUpdater(FieldCreatorFactory())


@pytest.fixture
def fields(updater):
    registry = {}
    updater.factory.create_field(registry, '', SCHEMA)
    return registry


class TestUpdateFieldValue:
    """Test cases for update_field_value."""

    def test_leaf_update_propagates(self, fields, updater):
        """Test write-through, dirty and change propagation for a leaf."""
        updater.update_field_value(fields, 'order.customer', 'ACME')

        assert fields['order'].value['customer'] == 'ACME'
        assert fields[''].value['order']['customer'] == 'ACME'
        for path in ('order.customer', 'order', ''):
            assert fields[path].dirty_count == 1
            assert fields[path].has_changes is True
        assert fields['order.lines'].dirty is False

    def test_unregistered_path_is_ignored(self, fields, updater):
        """Test that updating a missing field leaves the registry unchanged."""
        updater.update_field_value(fields, 'order.unknown', 'x')

        assert 'order.unknown' not in fields
        assert fields[''].dirty is False

    def test_array_update_creates_item_fields(self, fields, updater):
        """Test that setting an array registers its elements."""
        updater.update_field_value(fields, 'order.lines', [{'sku': 'A1'}, {'sku': 'B2', 'qty': 3}])

        assert fields['order.lines.0.qty'].value == 0
        assert fields['order.lines.1.qty'].value == 3
        assert fields['order.lines'].value == [{'sku': 'A1', 'qty': 0}, {'sku': 'B2', 'qty': 3}]
        assert fields[''].value['order']['lines'][1]['sku'] == 'B2'

    def test_shrinking_array_removes_item_fields(self, fields, updater):
        """Test that item fields past the new length are dropped."""
        updater.update_field_value(fields, 'order.lines', [{'sku': 'A1'}, {'sku': 'B2'}])

        updater.update_field_value(fields, 'order.lines', [{'sku': 'C3'}])

        assert fields['order.lines.0.sku'].value == 'C3'
        assert not any(path.startswith('order.lines.1') for path in fields)

    def test_container_update_does_not_dirty_children(self, fields, updater):
        """Test that children refreshed from a container keep their dirty state."""
        updater.update_field_value(fields, 'order', {'customer': 'ACME', 'lines': []})

        assert fields['order.customer'].value == 'ACME'
        assert fields['order.customer'].has_changes is True
        assert fields['order.customer'].dirty is False
        assert fields['order'].dirty_count == 1


class TestUpdateParentStructures:
    """Test cases for update_parent_structures."""

    def test_create_missing_false_skips_absent_keys(self, fields, updater):
        """Test that absent keys are not added when create_missing is False."""
        del fields['order'].value['customer']
        fields['order.customer'].value = 'X'

        updater.update_parent_structures(fields, 'order.customer', create_missing=False)

        assert 'customer' not in fields['order'].value

    def test_create_missing_true_adds_keys(self, fields, updater):
        """Test that absent keys are written by default."""
        del fields['order'].value['customer']
        fields['order.customer'].value = 'X'

        updater.update_parent_structures(fields, 'order.customer')

        assert fields['order'].value['customer'] == 'X'
        assert fields[''].value['order']['customer'] == 'X'


class TestValidationErrors:
    """Test cases for error application and state resets."""

    def test_apply_validation_errors_aggregates(self, fields, updater):
        """Test own errors and ancestor counts with de-duplicated messages."""
        updater.update_field_value(fields, 'order.lines', [{}, {}])

        updater.apply_validation_errors(fields, {
            'order.customer': ['Field is required'],
            'order.lines.0.sku': ['Field is required'],
            'order.lines.1.qty': ['Must be at least 1']
        })

        assert fields['order.customer'].errors == ['Field is required']
        assert fields['order.customer'].error_count == 1
        assert fields['order.lines'].error_count == 2
        assert fields['order'].error_count == 3
        assert fields['order'].errors == ['Field is required', 'Must be at least 1']
        assert fields[''].error_count == 3

    def test_apply_validation_errors_replaces_previous(self, fields, updater):
        """Test that a second application starts from a clean state."""
        updater.apply_validation_errors(fields, {'order.customer': ['Field is required']})

        updater.apply_validation_errors(fields, {})

        assert fields['order.customer'].errors == []
        assert fields['order'].error_count == 0

    def test_unknown_paths_are_ignored(self, fields, updater):
        updater.apply_validation_errors(fields, {'nope': ['x']})

        assert fields[''].error_count == 0

    def test_reset_all_field_states(self, fields, updater):
        """Test that dirty and error state is cleared without touching values."""
        updater.update_field_value(fields, 'order.customer', 'ACME')
        updater.apply_validation_errors(fields, {'order.customer': ['bad']})

        updater.reset_all_field_states(fields)

        field = fields['order.customer']
        assert field.value == 'ACME'
        assert field.dirty is False
        assert field.dirty_count == 0
        assert field.errors == []
        assert fields['order'].error_count == 0
