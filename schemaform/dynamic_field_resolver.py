"""
On-demand resolution of field paths.

Read resolution (resolve_field) only creates fields for declared object
properties and for array indices inside the current array length. The
mutation helpers (expand_array_to_index, ensure_object_property,
materialize_path) may grow arrays and seed object keys and are only used
by write operations.
"""

import logging
from copy import deepcopy
from typing import Any, Optional

from .default_value_provider import DefaultValueProvider
from .field_creators import FieldCreatorFactory
from .models import FieldRegistry, FormField
from .path_utils import PathBuilder, PathResolver, ROOT_PATH
from .schema_analyzer import SchemaAnalyzer

logger = logging.getLogger(__name__)


class DynamicFieldResolver:
    """Resolves and materializes fields for paths missing from the registry."""

    def __init__(self, factory: Optional[FieldCreatorFactory] = None):
        self.factory = factory or FieldCreatorFactory()

    def resolve_field(self, fields: FieldRegistry, path: str) -> Optional[FormField]:
        """
        Look up a field, creating missing fields along a nested path.

        Never extends arrays and never writes into parent values.

        Args:
            fields: Field registry
            path: Requested path

        Returns:
            The field, or None if any segment cannot be resolved
        """
        field = fields.get(path)
        if field is not None:
            return field

        if not PathResolver.is_nested_path(path):
            return None

        current_path = ROOT_PATH
        parent = fields.get(ROOT_PATH)

        for segment in PathResolver.parse_path(path):
            next_path = PathBuilder.build_child_path(current_path, segment)
            existing = fields.get(next_path)
            if existing is not None:
                parent, current_path = existing, next_path
                continue

            if parent is None:
                return None

            if PathResolver.is_array_index(segment):
                created = self._create_existing_item(fields, parent, next_path, int(segment))
            else:
                created = self._create_property(fields, parent, next_path, segment)

            if created is None:
                logger.debug(f"Cannot resolve '{path}' at segment '{segment}'")
                return None
            parent, current_path = created, next_path

        return fields.get(path)

    def _create_existing_item(self, fields: FieldRegistry, array_field: FormField,
                              item_path: str, index: int) -> Optional[FormField]:
        if not SchemaAnalyzer.is_array_schema(array_field.schema):
            return None
        if not isinstance(array_field.value, list) or index >= len(array_field.value):
            return None
        item_schema = SchemaAnalyzer.get_array_item_schema(array_field.schema)
        if not self.factory.can_create_field(item_schema):
            return None
        return self.factory.create_field(fields, item_path, item_schema, array_field.value[index])

    def _create_property(self, fields: FieldRegistry, object_field: FormField,
                         property_path: str, name: str) -> Optional[FormField]:
        schema = object_field.schema
        if not SchemaAnalyzer.is_object_schema(schema) or name not in schema['properties']:
            return None
        prop_schema = schema['properties'][name]
        if not self.factory.can_create_field(prop_schema):
            return None

        seed = None
        if isinstance(object_field.value, dict):
            seed = object_field.value.get(name)
        if seed is None:
            seed = DefaultValueProvider.get_default_value(prop_schema)

        required = (SchemaAnalyzer.is_required_schema(prop_schema)
                    or name in SchemaAnalyzer.get_required_properties(schema))
        return self.factory.create_field(fields, property_path, prop_schema, seed, required)

    def expand_array_to_index(self, fields: FieldRegistry, array_path: str,
                              index: int) -> Optional[FormField]:
        """
        Grow an array with item defaults until index exists, registering each new slot.

        Returns:
            The item field at index, or None if array_path is not an array field
        """
        array_field = fields.get(array_path)
        if array_field is None or not SchemaAnalyzer.is_array_schema(array_field.schema):
            return None

        item_schema = SchemaAnalyzer.get_array_item_schema(array_field.schema)
        if not self.factory.can_create_field(item_schema):
            return None

        if not isinstance(array_field.value, list):
            array_field.value = []

        while len(array_field.value) <= index:
            new_index = len(array_field.value)
            array_field.value.append(DefaultValueProvider.get_default_value(item_schema))
            item_path = PathBuilder.build_array_item_path(array_path, new_index)
            item_field = self.factory.create_field(fields, item_path, item_schema,
                                                   array_field.value[new_index])
            array_field.value[new_index] = deepcopy(item_field.value)
            logger.debug(f"Expanded '{array_path}' to index {new_index}")

        item_path = PathBuilder.build_array_item_path(array_path, index)
        if item_path not in fields:
            item_field = self.factory.create_field(fields, item_path, item_schema,
                                                   array_field.value[index])
            array_field.value[index] = deepcopy(item_field.value)
        return fields[item_path]

    def ensure_object_property(self, fields: FieldRegistry, object_path: str,
                               name: str) -> Optional[FormField]:
        """
        Seed a declared property into an object's value and register its field.

        Returns:
            The property field, or None if the property is not declared
        """
        object_field = fields.get(object_path)
        if object_field is None or not SchemaAnalyzer.is_object_schema(object_field.schema):
            return None

        prop_schema = object_field.schema['properties'].get(name)
        if prop_schema is None or not self.factory.can_create_field(prop_schema):
            return None

        if not isinstance(object_field.value, dict):
            object_field.value = {}
        if name not in object_field.value:
            object_field.value[name] = DefaultValueProvider.get_default_value(prop_schema)

        property_path = PathBuilder.build_property_path(object_path, name)
        if property_path not in fields:
            required = (SchemaAnalyzer.is_required_schema(prop_schema)
                        or name in SchemaAnalyzer.get_required_properties(object_field.schema))
            property_field = self.factory.create_field(fields, property_path, prop_schema,
                                                       object_field.value[name], required)
            object_field.value[name] = deepcopy(property_field.value)
        return fields[property_path]

    def materialize_path(self, fields: FieldRegistry, path: str) -> Optional[FormField]:
        """
        Create every missing field along path, growing arrays and seeding object keys.

        Returns:
            The field at path, or None if the path leaves the schema
        """
        current_path = ROOT_PATH
        if current_path not in fields:
            return None

        for segment in PathResolver.parse_path(path):
            next_path = PathBuilder.build_child_path(current_path, segment)
            if next_path not in fields:
                if PathResolver.is_array_index(segment):
                    created: Any = self.expand_array_to_index(fields, current_path, int(segment))
                else:
                    created = self.ensure_object_property(fields, current_path, segment)
                if created is None:
                    logger.debug(f"Cannot materialize '{path}' at segment '{segment}'")
                    return None
            current_path = next_path

        return fields.get(path)
