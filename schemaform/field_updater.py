"""
Value updates with upward propagation, and error application.

Every update keeps composite parent values consistent with their children:
the new value is written into the parent container, then the parent's
refreshed value into the grandparent, up to the root field at "".
"""

import logging
from copy import deepcopy
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from .default_value_provider import DefaultValueProvider
from .field_creators import FieldCreatorFactory
from .field_initializer import FieldInitializer
from .models import FieldRegistry, FormField
from .path_utils import PathBuilder, PathResolver, ROOT_PATH
from .schema_analyzer import SchemaAnalyzer

logger = logging.getLogger(__name__)


class FieldUpdater:
    """Applies value changes and derived state across the field registry."""

    def __init__(self, factory: Optional[FieldCreatorFactory] = None):
        self.factory = factory or FieldCreatorFactory()

    def update_field_value(self, fields: FieldRegistry, path: str, value: Any) -> None:
        """
        Set a field's value and propagate it.

        The field becomes dirty; its value is written through to every
        ancestor; every ancestor is marked dirty once and has its
        has_changes recomputed. Writing a container into an object or array
        field also refreshes the values of existing descendant fields.

        Args:
            fields: Field registry
            path: Path of an already registered field
            value: New value
        """
        field = fields.get(path)
        if field is None:
            logger.warning(f"Cannot update unregistered field: {path}")
            return

        FieldInitializer.update_field_value(field, value)
        if SchemaAnalyzer.has_nested_structure(field.schema):
            self.sync_descendants(fields, path)
            FieldInitializer.refresh_has_changes(field)

        self.update_parent_structures(fields, path)
        self.propagate_dirty_state(fields, path)
        self.propagate_changes_state(fields, path)
        logger.debug(f"Updated '{path}' (dirty_count={field.dirty_count})")

    def update_parent_structures(self, fields: FieldRegistry, path: str,
                                 create_missing: bool = True) -> None:
        """
        Write a field's value into its parent container, repeating up to the root.

        Args:
            fields: Field registry
            path: Path whose value is pushed upward
            create_missing: If False, object keys and array slots absent from a
                parent container are left absent
        """
        current_path = path
        while current_path != ROOT_PATH:
            parent_path = PathResolver.get_parent_path(current_path)
            parent = fields.get(parent_path)
            child = fields.get(current_path)
            if parent is None or child is None:
                break
            self._write_into_container(parent, PathResolver.get_property_name(current_path),
                                       child.value, create_missing)
            parent.last_modified = datetime.now()
            current_path = parent_path

    @staticmethod
    def _write_into_container(parent: FormField, key: str, value: Any,
                              create_missing: bool = True) -> None:
        if SchemaAnalyzer.is_array_schema(parent.schema) and PathResolver.is_array_index(key):
            if not isinstance(parent.value, list):
                parent.value = []
            index = int(key)
            if index < len(parent.value):
                parent.value[index] = deepcopy(value)
            elif create_missing:
                while len(parent.value) < index:
                    parent.value.append(None)
                parent.value.append(deepcopy(value))
        else:
            if not isinstance(parent.value, dict):
                parent.value = {}
            if create_missing or key in parent.value:
                parent.value[key] = deepcopy(value)

    def propagate_dirty_state(self, fields: FieldRegistry, path: str) -> None:
        """Mark every ancestor dirty, incrementing each ancestor's dirty_count exactly once."""
        touched: Set[str] = set()
        for ancestor_path in PathResolver.get_ancestor_paths(path):
            if ancestor_path in touched:
                continue
            touched.add(ancestor_path)
            ancestor = fields.get(ancestor_path)
            if ancestor is not None:
                FieldInitializer.mark_field_dirty(ancestor)

    def propagate_changes_state(self, fields: FieldRegistry, path: str) -> None:
        for ancestor_path in PathResolver.get_ancestor_paths(path):
            ancestor = fields.get(ancestor_path)
            if ancestor is not None:
                FieldInitializer.refresh_has_changes(ancestor)

    def sync_descendants(self, fields: FieldRegistry, path: str) -> None:
        """
        Refresh descendant fields from a container field's value.

        Descendants keep their dirty state. Object properties absent from the
        value fall back to their defaults, missing item fields are created and
        item fields past the end of the array are removed. The container
        value is then completed with the children's values.
        """
        field = fields[path]

        if SchemaAnalyzer.is_object_schema(field.schema):
            if not isinstance(field.value, dict):
                field.value = {}
            required_names = SchemaAnalyzer.get_required_properties(field.schema)
            for name, prop_schema in field.schema['properties'].items():
                if not self.factory.can_create_field(prop_schema):
                    continue
                child_path = PathBuilder.build_property_path(path, name)
                child_value = field.value.get(name)
                if child_value is None:
                    child_value = DefaultValueProvider.get_default_value(prop_schema)
                if child_path in fields:
                    self._sync_child(fields, child_path, child_value)
                else:
                    required = SchemaAnalyzer.is_required_schema(prop_schema) or name in required_names
                    self.factory.create_field(fields, child_path, prop_schema, child_value, required)
                field.value[name] = deepcopy(fields[child_path].value)

        elif SchemaAnalyzer.is_array_schema(field.schema):
            if not isinstance(field.value, list):
                field.value = []
            item_schema = SchemaAnalyzer.get_array_item_schema(field.schema)
            if self.factory.can_create_field(item_schema):
                for index, item in enumerate(field.value):
                    item_path = PathBuilder.build_array_item_path(path, index)
                    if item_path in fields:
                        self._sync_child(fields, item_path, item)
                    else:
                        self.factory.create_field(fields, item_path, item_schema, item)
                    field.value[index] = deepcopy(fields[item_path].value)
            self._remove_items_from(fields, path, len(field.value))

    def _sync_child(self, fields: FieldRegistry, child_path: str, child_value: Any) -> None:
        child = fields[child_path]
        child.value = deepcopy(child_value)
        if SchemaAnalyzer.has_nested_structure(child.schema):
            self.sync_descendants(fields, child_path)
        FieldInitializer.refresh_has_changes(child)
        child.last_modified = datetime.now()

    @staticmethod
    def _remove_items_from(fields: FieldRegistry, array_path: str, length: int) -> None:
        prefix = array_path + '.'
        stale = []
        for field_path in fields:
            if not field_path.startswith(prefix):
                continue
            first_segment = field_path[len(prefix):].split('.', 1)[0]
            if PathResolver.is_array_index(first_segment) and int(first_segment) >= length:
                stale.append(field_path)
        for field_path in stale:
            del fields[field_path]

    def clear_all_errors(self, fields: FieldRegistry) -> None:
        for field in fields.values():
            FieldInitializer.clear_field_errors(field)

    def apply_validation_errors(self, fields: FieldRegistry,
                                errors_by_path: Dict[str, List[str]]) -> None:
        """
        Replace all error state with the given per-path errors.

        Each field gets its own errors; every ancestor of an invalid field
        gets error_count incremented by one and the field's messages merged
        into its errors without duplicates.

        Args:
            fields: Field registry
            errors_by_path: Validation result keyed by field path
        """
        self.clear_all_errors(fields)

        invalid = {path: errors for path, errors in errors_by_path.items()
                   if errors and path in fields}

        for path, errors in invalid.items():
            FieldInitializer.set_field_errors(fields[path], errors)

        for path, errors in invalid.items():
            for ancestor_path in PathResolver.get_ancestor_paths(path):
                ancestor = fields.get(ancestor_path)
                if ancestor is None:
                    continue
                ancestor.error_count += 1
                for message in errors:
                    if message not in ancestor.errors:
                        ancestor.errors.append(message)

    @staticmethod
    def reset_field_state(field: FormField) -> None:
        field.dirty = False
        field.dirty_count = 0
        FieldInitializer.clear_field_errors(field)

    def reset_all_field_states(self, fields: FieldRegistry) -> None:
        for field in fields.values():
            self.reset_field_state(field)
