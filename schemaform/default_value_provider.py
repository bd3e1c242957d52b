"""
Default values for schema nodes.
"""

import logging
from typing import Any, Dict

from .schema_analyzer import SchemaAnalyzer

logger = logging.getLogger(__name__)


class DefaultValueProvider:
    """Computes the initial value of a field that has no supplied value."""

    @staticmethod
    def get_default_value(schema: Dict[str, Any]) -> Any:
        """
        Get the default value for a schema node.

        An explicit 'default' wins and is deep-copied. Otherwise:
        string -> "", number/integer -> 0, boolean -> False, array -> [],
        object -> the subset of properties that have a default or are required.
        Anything else has no default (None).

        Args:
            schema: Schema node

        Returns:
            Default value (an independent copy)
        """
        if not isinstance(schema, dict):
            return None

        if 'default' in schema:
            return DefaultValueProvider.convert_form_value(schema['default'])

        schema_type = schema.get('type')
        if schema_type == 'string':
            return ''
        if schema_type in ('number', 'integer'):
            return 0
        if schema_type == 'boolean':
            return False
        if schema_type == 'array':
            return []
        if schema_type == 'object':
            return DefaultValueProvider.get_default_object_value(schema)

        logger.debug(f"No default for schema type: {schema_type}")
        return None

    @staticmethod
    def get_default_object_value(schema: Dict[str, Any]) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        properties = schema.get('properties')
        if not isinstance(properties, dict):
            return result

        required_names = SchemaAnalyzer.get_required_properties(schema)
        for name, prop_schema in properties.items():
            if name in required_names or DefaultValueProvider.should_initialize_property(prop_schema):
                result[name] = DefaultValueProvider.get_default_value(prop_schema)
        return result

    @staticmethod
    def should_initialize_property(schema: Any) -> bool:
        """A property is materialized in its parent's default if it has a default or is required."""
        if not isinstance(schema, dict):
            return False
        return 'default' in schema or SchemaAnalyzer.is_required_schema(schema)

    @staticmethod
    def convert_form_value(value: Any) -> Any:
        """Deep-convert a value into an independent copy of plain lists and dicts."""
        if isinstance(value, dict):
            return {key: DefaultValueProvider.convert_form_value(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [DefaultValueProvider.convert_form_value(item) for item in value]
        return value
