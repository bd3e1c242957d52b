"""
Schema node classification.
"""

from typing import Any, Dict, List, Optional

PRIMITIVE_TYPES = {'string', 'number', 'integer', 'boolean'}
NUMERIC_TYPES = {'number', 'integer'}
COMBINATOR_KEYS = ('oneOf', 'anyOf', 'allOf')


class SchemaAnalyzer:
    """Predicates over schema nodes used by field creation and validation."""

    @staticmethod
    def is_object_schema(schema: Any) -> bool:
        return (
            isinstance(schema, dict)
            and schema.get('type') == 'object'
            and isinstance(schema.get('properties'), dict)
        )

    @staticmethod
    def is_array_schema(schema: Any) -> bool:
        return (
            isinstance(schema, dict)
            and schema.get('type') == 'array'
            and schema.get('items') is not None
        )

    @staticmethod
    def is_primitive_schema(schema: Any) -> bool:
        return isinstance(schema, dict) and schema.get('type') in PRIMITIVE_TYPES

    @staticmethod
    def has_nested_structure(schema: Any) -> bool:
        return SchemaAnalyzer.is_object_schema(schema) or SchemaAnalyzer.is_array_schema(schema)

    @staticmethod
    def get_array_item_schema(schema: Any) -> Optional[Dict[str, Any]]:
        if not SchemaAnalyzer.is_array_schema(schema):
            return None
        return schema['items']

    @staticmethod
    def get_required_properties(schema: Any) -> List[str]:
        """Return the JSON-Schema style list of required property names."""
        if not isinstance(schema, dict):
            return []
        required = schema.get('required')
        if isinstance(required, list):
            return list(required)
        return []

    @staticmethod
    def is_required_schema(schema: Any) -> bool:
        """Whether the node itself is flagged required (required: true or isRequired: true)."""
        if not isinstance(schema, dict):
            return False
        return schema.get('required') is True or schema.get('isRequired') is True

    @staticmethod
    def is_read_only(schema: Any) -> bool:
        return isinstance(schema, dict) and schema.get('readOnly') is True

    @staticmethod
    def has_combinators(schema: Any) -> bool:
        return isinstance(schema, dict) and any(
            isinstance(schema.get(key), list) for key in COMBINATOR_KEYS
        )

    @staticmethod
    def get_schema_kind(schema: Any) -> str:
        """Classify a node as 'object', 'array', 'primitive' or 'unknown'."""
        if SchemaAnalyzer.is_object_schema(schema):
            return 'object'
        if SchemaAnalyzer.is_array_schema(schema):
            return 'array'
        if SchemaAnalyzer.is_primitive_schema(schema):
            return 'primitive'
        return 'unknown'
