"""
Construction of single field records and value-level operations on them.
"""

from copy import deepcopy
from datetime import datetime
from typing import Any, Dict, List, Optional

from .default_value_provider import DefaultValueProvider
from .diff_utils import values_equal
from .models import FormField
from .schema_analyzer import SchemaAnalyzer


class FieldInitializer:
    """Creates FormField records and applies value operations to one field at a time."""

    @staticmethod
    def create_field(path: str, schema: Dict[str, Any], value: Any = None,
                     required: Optional[bool] = None) -> FormField:
        """
        Build a field record.

        Args:
            path: Field path
            schema: Schema node for the field (kept by reference)
            value: Seed value; None means "use the schema default"
            required: Resolved required flag; None means "read it from the schema"

        Returns:
            A clean field whose pristine value equals its value
        """
        if value is None:
            value = DefaultValueProvider.get_default_value(schema)
        else:
            value = deepcopy(value)

        if required is None:
            required = SchemaAnalyzer.is_required_schema(schema)

        return FormField(
            path=path,
            value=value,
            pristine_value=deepcopy(value),
            schema=schema,
            required=bool(required),
        )

    @staticmethod
    def update_field_value(field: FormField, new_value: Any) -> None:
        field.value = deepcopy(new_value)
        field.dirty = True
        field.dirty_count += 1
        field.has_changes = not FieldInitializer.values_equal(field.value, field.pristine_value)
        field.last_modified = datetime.now()

    @staticmethod
    def mark_field_dirty(field: FormField) -> None:
        field.dirty = True
        field.dirty_count += 1
        field.last_modified = datetime.now()

    @staticmethod
    def refresh_has_changes(field: FormField) -> bool:
        """Recompute has_changes against the pristine value and return it."""
        field.has_changes = not FieldInitializer.values_equal(field.value, field.pristine_value)
        return field.has_changes

    @staticmethod
    def revert_field_value(field: FormField) -> None:
        field.value = deepcopy(field.pristine_value)
        field.has_changes = False
        field.dirty = False
        field.dirty_count = 0
        field.last_modified = datetime.now()

    @staticmethod
    def set_pristine_value(field: FormField, value: Any) -> None:
        """Commit a new baseline; has_changes is recomputed against the unchanged current value."""
        field.pristine_value = deepcopy(value)
        FieldInitializer.refresh_has_changes(field)

    @staticmethod
    def values_equal(a: Any, b: Any) -> bool:
        return values_equal(a, b)

    @staticmethod
    def clear_field_errors(field: FormField) -> None:
        field.errors = []
        field.error_count = 0

    @staticmethod
    def set_field_errors(field: FormField, errors: List[str]) -> None:
        field.errors = list(errors)
        field.error_count = len(field.errors)
