"""
Unit tests for field records and the field creators.
"""

import pytest

from schemaform.exceptions import UnsupportedSchemaError
from schemaform.field_creators import (
    ArrayFieldCreator, FieldCreatorFactory, ObjectFieldCreator, PrimitiveFieldCreator
)
from schemaform.field_initializer import FieldInitializer


USER_SCHEMA = {
    'type': 'object',
    'properties': {
        'name': {'type': 'string'},
        'active': {'type': 'boolean'},
        'tags': {'type': 'array', 'items': {'type': 'string'}}
    },
    'required': ['name']
}


class TestFieldInitializer:
    """Test cases for FieldInitializer."""

    def test_create_field_uses_schema_default(self):
        """Test that a missing value falls back to the schema default."""
        field = FieldInitializer.create_field('age', {'type': 'number', 'default': 18})

        assert field.value == 18
        assert field.pristine_value == 18
        assert field.dirty is False
        assert field.dirty_count == 0
        assert field.has_changes is False
        assert field.errors == []
        assert field.is_valid is True

    def test_create_field_copies_value(self):
        """Test that the field owns a copy of the seed value."""
        seed = ['a']

        field = FieldInitializer.create_field('tags', {'type': 'array', 'items': {'type': 'string'}}, seed)
        seed.append('b')

        assert field.value == ['a']
        assert field.pristine_value is not field.value

    def test_required_resolution(self):
        """Test explicit and schema-derived required flags."""
        assert FieldInitializer.create_field('a', {'type': 'string', 'isRequired': True}).required is True
        assert FieldInitializer.create_field('a', {'type': 'string'}, required=True).required is True
        assert FieldInitializer.create_field('a', {'type': 'string'}).required is False

    def test_update_and_revert(self):
        """Test value updates, change detection and revert."""
        field = FieldInitializer.create_field('name', {'type': 'string'})

        FieldInitializer.update_field_value(field, 'John')
        assert field.value == 'John'
        assert field.dirty is True
        assert field.dirty_count == 1
        assert field.has_changes is True

        FieldInitializer.revert_field_value(field)
        assert field.value == ''
        assert field.dirty is False
        assert field.dirty_count == 0
        assert field.has_changes is False

    def test_set_pristine_value(self):
        """Test that committing a baseline recomputes has_changes."""
        field = FieldInitializer.create_field('name', {'type': 'string'})
        FieldInitializer.update_field_value(field, 'John')

        FieldInitializer.set_pristine_value(field, 'John')

        assert field.has_changes is False
        assert field.dirty is True

    def test_errors(self):
        """Test setting and clearing errors."""
        field = FieldInitializer.create_field('name', {'type': 'string'})

        FieldInitializer.set_field_errors(field, ['bad', 'worse'])
        assert field.error_count == 2
        assert field.is_valid is False

        FieldInitializer.clear_field_errors(field)
        assert field.errors == []
        assert field.error_count == 0

    def test_values_equal(self):
        """Test structural equality rules."""
        assert FieldInitializer.values_equal({'a': [1, 2]}, {'a': [1, 2]}) is True
        assert FieldInitializer.values_equal([1, 2], [2, 1]) is False
        assert FieldInitializer.values_equal(1, 1.0) is True
        assert FieldInitializer.values_equal(True, 1) is False


class TestFieldCreatorFactory:
    """Test cases for FieldCreatorFactory dispatch."""

    @pytest.fixture
    def factory(self):
        return FieldCreatorFactory()

    def test_get_creator(self, factory):
        """Test that each schema kind maps to its creator."""
        assert isinstance(factory.get_creator(USER_SCHEMA), ObjectFieldCreator)
        assert isinstance(factory.get_creator({'type': 'array', 'items': {'type': 'string'}}), ArrayFieldCreator)
        assert isinstance(factory.get_creator({'type': 'integer'}), PrimitiveFieldCreator)
        assert factory.get_creator({'type': 'null'}) is None

    def test_get_field_type(self, factory):
        assert factory.get_field_type(USER_SCHEMA) == 'object'
        assert factory.get_field_type({'type': 'string'}) == 'primitive'

    def test_unsupported_schema_raises(self, factory):
        """Test that an unknown node type cannot be created."""
        fields = {}

        with pytest.raises(UnsupportedSchemaError) as exc_info:
            factory.create_field(fields, 'x', {'type': 'null'})

        assert exc_info.value.path == 'x'
        assert exc_info.value.code == 'UNSUPPORTED_SCHEMA'
        assert fields == {}

    def test_object_creates_all_properties(self, factory):
        """Test that every declared property is registered and written into the object."""
        fields = {}

        field = factory.create_field(fields, 'user', USER_SCHEMA, {'name': 'Ann'})

        assert list(fields) == ['user', 'user.name', 'user.active', 'user.tags']
        assert field.value == {'name': 'Ann', 'active': False, 'tags': []}
        assert field.pristine_value == field.value
        assert fields['user.name'].required is True
        assert fields['user.active'].required is False

    def test_object_seed_is_not_mutated(self, factory):
        """Test that completing an object value leaves the caller's dict alone."""
        seed = {'name': 'Ann'}

        factory.create_field({}, 'user', USER_SCHEMA, seed)

        assert seed == {'name': 'Ann'}

    def test_array_creates_item_fields(self, factory):
        """Test that one field is created per existing element."""
        fields = {}
        schema = {
            'type': 'array',
            'items': {'type': 'object', 'properties': {'sku': {'type': 'string'}, 'qty': {'type': 'integer'}}}
        }

        field = factory.create_field(fields, 'lines', schema, [{'sku': 'A1'}, {'qty': 2}])

        assert field.value == [{'sku': 'A1', 'qty': 0}, {'sku': '', 'qty': 2}]
        assert fields['lines.1.qty'].value == 2
        assert 'lines.2' not in fields

    def test_unsupported_children_are_skipped(self, factory):
        """Test that properties and items without a creator are left out."""
        fields = {}

        factory.create_field(fields, 'root', {
            'type': 'object',
            'properties': {'ok': {'type': 'string'}, 'odd': {'type': 'null'}}
        })
        factory.create_field(fields, 'list', {'type': 'array', 'items': {'type': 'null'}}, ['x'])

        assert 'root.ok' in fields
        assert 'root.odd' not in fields
        assert fields['list'].value == ['x']
        assert 'list.0' not in fields

    def test_create_fields_for_schema(self, factory):
        """Test the registry-only entry point."""
        fields = {}

        factory.create_fields_for_schema(fields, 'user', USER_SCHEMA)

        assert fields['user.tags'].value == []
