"""
Form validation.

Two entry points share the same per-field rules:
- validate_all walks the field registry (the form model uses this)
- validate_form / validate_object / validate_field walk a schema and a plain value

Neither mutates fields. Results map paths to lists of catalog messages.
"""

import logging
import math
from typing import Any, Dict, List, Optional, Set

from . import validation_messages as messages
from .config_loader import DEFAULT_MAX_DEPTH
from .models import FieldRegistry
from .path_utils import PathBuilder, PathResolver
from .schema_analyzer import SchemaAnalyzer, NUMERIC_TYPES

logger = logging.getLogger(__name__)


def is_empty_value(value: Any) -> bool:
    """None, blank strings, empty lists and empty dicts count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ''
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def is_numeric_value(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        try:
            return not math.isnan(float(value))
        except ValueError:
            return False
    return False


def _to_number(value: Any) -> float:
    return value if isinstance(value, (int, float)) else float(value)


class FormValidator:
    """Applies required, length and numeric rules with depth and cycle guards."""

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH):
        self.max_depth = max_depth

    def validate_all(self, fields: FieldRegistry) -> Dict[str, List[str]]:
        """
        Validate every registered field.

        Read-only fields are skipped. Each field gets its own cycle-detection set.

        Args:
            fields: Field registry

        Returns:
            Errors keyed by path, for invalid fields only
        """
        results: Dict[str, List[str]] = {}
        for path, field in fields.items():
            if SchemaAnalyzer.is_read_only(field.schema):
                continue
            visited: Set[str] = set()
            errors = self._check(field.schema, field.value, path, field.required,
                                 PathResolver.get_path_depth(path), visited)
            if errors:
                results[path] = errors

        logger.debug(f"Validated {len(fields)} fields, {len(results)} invalid")
        return results

    def validate_field(self, properties: Dict[str, Any], path: str, value: Any) -> List[str]:
        """
        Validate one value against the schema found at path within properties.

        Returns:
            Error messages (empty if valid, read-only or if path has no schema)
        """
        schema = self.get_nested_schema(properties, path)
        if schema is None or SchemaAnalyzer.is_read_only(schema):
            return []
        return self._check(schema, value, path, False, 0, set())

    def validate_object(self, properties: Dict[str, Any], value: Any, prefix: str = '',
                        required_names: Optional[List[str]] = None, depth: int = 0,
                        visited: Optional[Set[str]] = None) -> Dict[str, List[str]]:
        """
        Validate an object value property by property, descending into nested objects and arrays.

        Args:
            properties: Property schemas of the object
            value: Object value (missing keys validate as None)
            prefix: Path of the object itself
            required_names: Names listed as required by the object schema
            depth: Current nesting depth
            visited: Paths already validated in this pass

        Returns:
            Errors keyed by path, for invalid paths only
        """
        if visited is None:
            visited = set()
        required_names = required_names or []
        data = value if isinstance(value, dict) else {}
        results: Dict[str, List[str]] = {}

        for name, prop_schema in properties.items():
            path = PathBuilder.build_property_path(prefix, name)
            prop_value = data.get(name)
            self._validate_node(prop_schema, prop_value, path, name in required_names,
                                depth + 1, visited, results)

        return results

    def _validate_node(self, schema: Dict[str, Any], value: Any, path: str, required: bool,
                       depth: int, visited: Set[str], results: Dict[str, List[str]]) -> None:
        if SchemaAnalyzer.is_read_only(schema):
            return
        errors = self._check(schema, value, path, required, depth, visited)
        if errors:
            results[path] = errors
            return

        if SchemaAnalyzer.is_object_schema(schema):
            if value is not None and not isinstance(value, dict):
                results[path] = [messages.OBJECT_REQUIRED]
            elif isinstance(value, dict):
                results.update(self.validate_object(
                    schema['properties'], value, path,
                    SchemaAnalyzer.get_required_properties(schema), depth, visited))

        elif SchemaAnalyzer.is_array_schema(schema) and isinstance(value, list):
            item_schema = schema['items']
            for index, item in enumerate(value):
                item_path = PathBuilder.build_array_item_path(path, index)
                self._validate_node(item_schema, item, item_path, False,
                                    depth + 1, visited, results)

    def validate_form(self, form_data: Dict[str, Any], properties: Dict[str, Any],
                      required_names: Optional[List[str]] = None) -> Dict[str, List[str]]:
        """Validate a whole document against top-level property schemas."""
        return self.validate_object(properties, form_data, '', required_names, 0, set())

    @staticmethod
    def get_nested_schema(properties: Dict[str, Any], path: str) -> Optional[Dict[str, Any]]:
        """Find the schema at path, stepping into 'items' for numeric segments."""
        schema: Optional[Dict[str, Any]] = {'type': 'object', 'properties': properties}
        for segment in PathResolver.parse_path(path):
            if schema is None:
                return None
            if PathResolver.is_array_index(segment):
                schema = SchemaAnalyzer.get_array_item_schema(schema)
            elif SchemaAnalyzer.is_object_schema(schema):
                schema = schema['properties'].get(segment)
            else:
                return None
        return schema

    def _check(self, schema: Dict[str, Any], value: Any, path: str, required: bool,
               depth: int, visited: Set[str]) -> List[str]:
        if depth > self.max_depth:
            logger.warning(f"Validation depth exceeded at '{path}'")
            return [messages.MAX_DEPTH_EXCEEDED(self.max_depth)]
        if path in visited:
            logger.warning(f"Circular reference while validating '{path}'")
            return [messages.CIRCULAR_REFERENCE(path)]
        visited.add(path)
        return self.check_rules(schema, value, required)

    @staticmethod
    def check_rules(schema: Dict[str, Any], value: Any, required: bool = False) -> List[str]:
        """
        Apply the per-field rules to a single value.

        A string with minLength 1 counts as required, so an empty value
        reports REQUIRED rather than a length error.
        """
        schema_type = schema.get('type')
        is_required = (
            required
            or SchemaAnalyzer.is_required_schema(schema)
            or (schema_type == 'string' and schema.get('minLength') == 1)
        )

        if is_empty_value(value):
            return [messages.REQUIRED] if is_required else []

        errors: List[str] = []

        if schema_type == 'string' and isinstance(value, str):
            min_length = schema.get('minLength')
            max_length = schema.get('maxLength')
            if min_length is not None and len(value) < min_length:
                errors.append(messages.MIN_LENGTH(min_length))
            if max_length is not None and len(value) > max_length:
                errors.append(messages.MAX_LENGTH(max_length))

        elif schema_type in NUMERIC_TYPES:
            if not is_numeric_value(value):
                return [messages.NUMBER_REQUIRED]
            number = _to_number(value)
            minimum = schema.get('minimum')
            maximum = schema.get('maximum')
            if minimum is not None and number < minimum:
                errors.append(messages.MIN_NUMBER(minimum))
            if maximum is not None and number > maximum:
                errors.append(messages.MAX_NUMBER(maximum))

        return errors
