"""
ArrayFieldManager for the form model

Structural array operations (add, insert, remove, move). Each operation
keeps registry path keys aligned with the live array contents: element
paths stay contiguous and zero-based, and renumbering of element paths
and all their descendants is applied as one batch.
"""

import logging
from copy import deepcopy
from typing import Any, Dict, Optional

from .default_value_provider import DefaultValueProvider
from .exceptions import ArrayOperationError
from .field_creators import FieldCreatorFactory
from .field_initializer import FieldInitializer
from .field_updater import FieldUpdater
from .models import FieldRegistry, FormField
from .path_utils import PathBuilder, PathResolver
from .schema_analyzer import SchemaAnalyzer

logger = logging.getLogger(__name__)


class ArrayFieldManager:
    """Manager for structural operations on array fields"""

    def __init__(self, factory: Optional[FieldCreatorFactory] = None,
                 updater: Optional[FieldUpdater] = None):
        self.factory = factory or FieldCreatorFactory()
        self.updater = updater or FieldUpdater(self.factory)

    def add_item(self, fields: FieldRegistry, array_path: str, value: Any = None) -> str:
        """
        Append an element to an array field.

        Args:
            fields: Field registry
            array_path: Path of the array field
            value: Element value; None appends the item schema's default

        Returns:
            Path of the new element

        Raises:
            ArrayOperationError: If array_path is not an array field
        """
        array_field = self._get_array_field(fields, array_path, 'add')
        item_schema = SchemaAnalyzer.get_array_item_schema(array_field.schema)

        array_field.value.append(self._item_value(item_schema, value))
        index = len(array_field.value) - 1
        item_path = PathBuilder.build_array_item_path(array_path, index)
        item_field = self.factory.create_field(fields, item_path, item_schema, array_field.value[index])
        array_field.value[index] = deepcopy(item_field.value)

        self._finish_operation(fields, array_path)
        logger.debug(f"Added item {item_path}")
        return item_path

    def remove_item(self, fields: FieldRegistry, element_path: str) -> int:
        """
        Remove an array element and renumber the following elements.

        Args:
            fields: Field registry
            element_path: Path of the element, ending with its index

        Returns:
            New array length

        Raises:
            ArrayOperationError: If the path does not address an existing element
        """
        index_segment = PathResolver.get_property_name(element_path)
        if not PathResolver.is_nested_path(element_path) or not PathResolver.is_array_index(index_segment):
            raise ArrayOperationError(element_path, 'remove',
                                      'path does not end with an array index')

        array_path = PathResolver.get_parent_path(element_path)
        array_field = self._get_array_field(fields, array_path, 'remove')
        index = int(index_segment)
        if index >= len(array_field.value):
            raise ArrayOperationError(element_path, 'remove',
                                      f"index {index} out of range (length {len(array_field.value)})")

        del array_field.value[index]

        subtree_prefix = element_path + '.'
        for path in [p for p in fields if p == element_path or p.startswith(subtree_prefix)]:
            del fields[path]

        renames = self._collect_renames(
            fields, array_path, lambda i: i - 1 if i > index else i)
        self._apply_renames(fields, renames)

        self._finish_operation(fields, array_path)
        logger.debug(f"Removed {element_path}; '{array_path}' now has {len(array_field.value)} items")
        return len(array_field.value)

    def move_item(self, fields: FieldRegistry, array_path: str, from_index: int, to_index: int) -> None:
        """
        Move an element to a new index, shifting the elements in between.

        Raises:
            ArrayOperationError: If array_path is not an array field or an index is out of range
        """
        array_field = self._get_array_field(fields, array_path, 'move')
        length = len(array_field.value)
        for index in (from_index, to_index):
            if not 0 <= index < length:
                raise ArrayOperationError(array_path, 'move',
                                          f"index {index} out of range (length {length})")

        if from_index == to_index:
            return

        item = array_field.value.pop(from_index)
        array_field.value.insert(to_index, item)

        def new_index(i: int) -> int:
            if i == from_index:
                return to_index
            if from_index < to_index and from_index < i <= to_index:
                return i - 1
            if to_index < from_index and to_index <= i < from_index:
                return i + 1
            return i

        self._apply_renames(fields, self._collect_renames(fields, array_path, new_index))
        self._finish_operation(fields, array_path)
        logger.debug(f"Moved {array_path}.{from_index} to index {to_index}")

    def insert_item(self, fields: FieldRegistry, array_path: str, index: int, value: Any = None) -> str:
        """
        Insert an element at index, shifting existing elements up by one.

        Returns:
            Path of the inserted element

        Raises:
            ArrayOperationError: If array_path is not an array field or index is outside 0..length
        """
        array_field = self._get_array_field(fields, array_path, 'insert')
        length = len(array_field.value)
        if not 0 <= index <= length:
            raise ArrayOperationError(array_path, 'insert',
                                      f"index {index} out of range (length {length})")

        item_schema = SchemaAnalyzer.get_array_item_schema(array_field.schema)
        array_field.value.insert(index, self._item_value(item_schema, value))

        self._apply_renames(fields, self._collect_renames(
            fields, array_path, lambda i: i + 1 if i >= index else i))

        item_path = PathBuilder.build_array_item_path(array_path, index)
        item_field = self.factory.create_field(fields, item_path, item_schema, array_field.value[index])
        array_field.value[index] = deepcopy(item_field.value)

        self._finish_operation(fields, array_path)
        logger.debug(f"Inserted {item_path}")
        return item_path

    @staticmethod
    def get_array_length(fields: FieldRegistry, array_path: str) -> int:
        field = fields.get(array_path)
        if field is None or not isinstance(field.value, list):
            return 0
        return len(field.value)

    @staticmethod
    def is_valid_array_index(fields: FieldRegistry, array_path: str, index: int) -> bool:
        return 0 <= index < ArrayFieldManager.get_array_length(fields, array_path)

    @staticmethod
    def _get_array_field(fields: FieldRegistry, array_path: str, operation: str) -> FormField:
        field = fields.get(array_path)
        if field is None:
            raise ArrayOperationError(array_path, operation, 'field not found')
        if not SchemaAnalyzer.is_array_schema(field.schema):
            raise ArrayOperationError(array_path, operation, 'field is not an array')
        if not isinstance(field.value, list):
            field.value = []
        return field

    @staticmethod
    def _item_value(item_schema: Dict[str, Any], value: Any) -> Any:
        if value is None:
            return DefaultValueProvider.get_default_value(item_schema)
        return deepcopy(value)

    @staticmethod
    def _collect_renames(fields: FieldRegistry, array_path: str, remap) -> Dict[str, str]:
        """Map old paths to new paths for every element field whose index changes under remap."""
        prefix = array_path + '.'
        renames: Dict[str, str] = {}
        for path in fields:
            if not path.startswith(prefix):
                continue
            first_segment, separator, rest = path[len(prefix):].partition('.')
            if not PathResolver.is_array_index(first_segment):
                continue
            old_index = int(first_segment)
            target = remap(old_index)
            if target != old_index:
                renames[path] = f"{prefix}{target}{separator}{rest}"
        return renames

    @staticmethod
    def _apply_renames(fields: FieldRegistry, renames: Dict[str, str]) -> None:
        """Re-key fields in one pass, keeping registry order."""
        if not renames:
            return
        entries = list(fields.items())
        fields.clear()
        for path, field in entries:
            new_path = renames.get(path, path)
            field.path = new_path
            fields[new_path] = field

    def _finish_operation(self, fields: FieldRegistry, array_path: str) -> None:
        array_field = fields[array_path]
        FieldInitializer.mark_field_dirty(array_field)
        FieldInitializer.refresh_has_changes(array_field)
        self.updater.update_parent_structures(fields, array_path)
        self.updater.propagate_dirty_state(fields, array_path)
        self.updater.propagate_changes_state(fields, array_path)
