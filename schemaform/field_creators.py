"""
Field creators for object, array and primitive schema nodes.

Creators register fields directly into the shared registry (path -> FormField).
Object creators recurse into every declared property and array creators into
every existing element, always through the factory so that nested nodes are
dispatched on their own schema kind. A container's value (and pristine
value) is completed with its children's values once they are created.
"""

import logging
from copy import deepcopy
from typing import Any, Dict, List, Optional

from .exceptions import UnsupportedSchemaError
from .field_initializer import FieldInitializer
from .models import FieldRegistry, FormField
from .path_utils import PathBuilder
from .schema_analyzer import SchemaAnalyzer
from .default_value_provider import DefaultValueProvider

logger = logging.getLogger(__name__)


class ObjectFieldCreator:
    """Creates an object field and the fields of all its declared properties."""

    def __init__(self, factory: 'FieldCreatorFactory'):
        self.factory = factory

    def can_handle(self, schema: Dict[str, Any]) -> bool:
        return SchemaAnalyzer.is_object_schema(schema)

    def create_field(self, fields: FieldRegistry, path: str, schema: Dict[str, Any],
                     value: Any = None, required: Optional[bool] = None) -> FormField:
        if isinstance(value, dict):
            object_value = value
        else:
            object_value = DefaultValueProvider.get_default_value(schema)
            if not isinstance(object_value, dict):
                object_value = {}

        field = FieldInitializer.create_field(path, schema, object_value, required)
        fields[path] = field

        required_names = SchemaAnalyzer.get_required_properties(schema)
        for name, prop_schema in schema['properties'].items():
            if not self.factory.can_create_field(prop_schema):
                logger.warning(f"Skipping property '{name}' of '{path}': unsupported schema")
                continue
            child_path = PathBuilder.build_property_path(path, name)
            child_required = SchemaAnalyzer.is_required_schema(prop_schema) or name in required_names
            child = self.factory.create_field(fields, child_path, prop_schema,
                                              field.value.get(name), child_required)
            field.value[name] = deepcopy(child.value)

        field.pristine_value = deepcopy(field.value)
        return field

    def create_fields_for_schema(self, fields: FieldRegistry, path: str,
                                 schema: Dict[str, Any], value: Any = None) -> None:
        self.create_field(fields, path, schema, value)


class ArrayFieldCreator:
    """Creates an array field and one item field per existing element."""

    def __init__(self, factory: 'FieldCreatorFactory'):
        self.factory = factory

    def can_handle(self, schema: Dict[str, Any]) -> bool:
        return SchemaAnalyzer.is_array_schema(schema)

    def create_field(self, fields: FieldRegistry, path: str, schema: Dict[str, Any],
                     value: Any = None, required: Optional[bool] = None) -> FormField:
        if isinstance(value, list):
            array_value = value
        else:
            array_value = DefaultValueProvider.get_default_value(schema)
            if not isinstance(array_value, list):
                array_value = []

        field = FieldInitializer.create_field(path, schema, array_value, required)
        fields[path] = field

        item_schema = SchemaAnalyzer.get_array_item_schema(schema)
        if not self.factory.can_create_field(item_schema):
            logger.warning(f"Array '{path}' has an unsupported item schema; items not registered")
            return field

        for index, item in enumerate(field.value):
            item_path = PathBuilder.build_array_item_path(path, index)
            item_field = self.factory.create_field(fields, item_path, item_schema, item)
            field.value[index] = deepcopy(item_field.value)

        field.pristine_value = deepcopy(field.value)
        return field

    def create_fields_for_schema(self, fields: FieldRegistry, path: str,
                                 schema: Dict[str, Any], value: Any = None) -> None:
        self.create_field(fields, path, schema, value)


class PrimitiveFieldCreator:
    """Creates a single string/number/integer/boolean field."""

    def can_handle(self, schema: Dict[str, Any]) -> bool:
        return SchemaAnalyzer.is_primitive_schema(schema)

    def create_field(self, fields: FieldRegistry, path: str, schema: Dict[str, Any],
                     value: Any = None, required: Optional[bool] = None) -> FormField:
        field = FieldInitializer.create_field(path, schema, value, required)
        fields[path] = field
        return field

    def create_fields_for_schema(self, fields: FieldRegistry, path: str,
                                 schema: Dict[str, Any], value: Any = None) -> None:
        self.create_field(fields, path, schema, value)


class FieldCreatorFactory:
    """Dispatches field creation to the creator that handles a schema node."""

    def __init__(self):
        self.creators: List[Any] = [
            ObjectFieldCreator(self),
            ArrayFieldCreator(self),
            PrimitiveFieldCreator(),
        ]

    def get_creator(self, schema: Any) -> Optional[Any]:
        for creator in self.creators:
            if creator.can_handle(schema):
                return creator
        return None

    def can_create_field(self, schema: Any) -> bool:
        return self.get_creator(schema) is not None

    def get_field_type(self, schema: Any) -> str:
        return SchemaAnalyzer.get_schema_kind(schema)

    def create_field(self, fields: FieldRegistry, path: str, schema: Dict[str, Any],
                     value: Any = None, required: Optional[bool] = None) -> FormField:
        """
        Create the field for a schema node (and its descendants) in the registry.

        Args:
            fields: Registry to write into
            path: Path of the new field
            schema: Schema node
            value: Optional seed value
            required: Optional resolved required flag

        Returns:
            The field registered at path

        Raises:
            UnsupportedSchemaError: If no creator handles the schema node
        """
        creator = self.get_creator(schema)
        if creator is None:
            raise UnsupportedSchemaError(path, schema)
        logger.debug(f"Creating {self.get_field_type(schema)} field at '{path}'")
        return creator.create_field(fields, path, schema, value, required)

    def create_fields_for_schema(self, fields: FieldRegistry, path: str,
                                 schema: Dict[str, Any], value: Any = None) -> None:
        creator = self.get_creator(schema)
        if creator is None:
            raise UnsupportedSchemaError(path, schema)
        creator.create_fields_for_schema(fields, path, schema, value)
