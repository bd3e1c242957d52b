"""
FormModel: the public form-state API.

Owns the field registry and the listener list, and composes field creation,
resolution, updates, array operations, validation and buffering.
"""

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .array_field_manager import ArrayFieldManager
from .buffering_manager import BufferingManager
from .config_loader import DEFAULT_MAX_DEPTH, get_config_value, get_default_config, load_config
from .diff_utils import calculate_diff
from .dynamic_field_resolver import DynamicFieldResolver
from .exceptions import FieldNotFoundError
from .field_creators import FieldCreatorFactory
from .field_updater import FieldUpdater
from .form_validator import FormValidator
from .models import ChangeStatistics, FieldRegistry, FormField
from .path_utils import ROOT_PATH
from .schema_loader import load_schema
from .schema_processor import prepare_schema

logger = logging.getLogger(__name__)

Listener = Callable[[Dict[str, FormField]], None]


class FormModel:
    """
    In-memory form state built from a JSON-Schema-like description.

    The schema may be a full object node or a shorthand map of top-level
    property schemas. Every field is addressed by a dot path; the root
    object lives at "".

    Listeners receive a shallow copy of the registry after every mutating
    operation.

    Settings come from a config dict such as the one returned by
    config_loader.load_config; applications call config_loader.setup_logging
    with the same dict to configure logging.
    """

    def __init__(self, schema: Dict[str, Any], config: Optional[Dict[str, Any]] = None):
        self.config = config if config is not None else get_default_config()
        self.schema = prepare_schema(schema)

        self.fields: FieldRegistry = {}
        self._field_cache: Dict[str, FormField] = {}
        self._listeners: List[Listener] = []

        self.factory = FieldCreatorFactory()
        self.resolver = DynamicFieldResolver(self.factory)
        self.updater = FieldUpdater(self.factory)
        self.array_manager = ArrayFieldManager(self.factory, self.updater)
        self.buffering = BufferingManager(self.updater)
        self.validator = FormValidator(
            max_depth=get_config_value(self.config, 'validation', 'max_depth', DEFAULT_MAX_DEPTH))

        self.factory.create_field(self.fields, ROOT_PATH, self.schema)
        logger.info(f"Form model created with {len(self.fields)} fields")

    @classmethod
    def from_file(cls, schema_path: Union[str, Path],
                  config: Optional[Dict[str, Any]] = None,
                  config_path: Optional[Union[str, Path]] = None) -> 'FormModel':
        """
        Build a model from a YAML or JSON schema file.

        Without an explicit config dict the settings are read with
        load_config from config_path, or schemaform.yaml in the working
        directory.
        """
        if config is None:
            config = load_config(Path(config_path) if config_path else None)
        return cls(load_schema(schema_path), config)

    # Field access

    def get_field(self, path: str) -> Optional[FormField]:
        """
        Get the live field at path.

        Nested fields implied by the schema are created on first access, but
        arrays are never extended by a read.

        Returns:
            The field, or None if the path does not resolve
        """
        field = self._field_cache.get(path)
        if field is not None:
            return field

        field = self.fields.get(path)
        if field is None:
            field = self.resolver.resolve_field(self.fields, path)
        if field is not None:
            self._field_cache[path] = field
        return field

    def get_fields(self) -> Dict[str, FormField]:
        return dict(self.fields)

    def get_value(self) -> Any:
        """Current value of the whole document."""
        return deepcopy(self.fields[ROOT_PATH].value)

    def set_value(self, path: str, value: Any) -> None:
        """
        Set the value at path, creating intermediate fields as needed.

        Raises:
            FieldNotFoundError: If the path does not map to a schema location
        """
        field = self.resolver.resolve_field(self.fields, path)
        if field is None:
            field = self.resolver.materialize_path(self.fields, path)
        if field is None:
            logger.error(f"Field not found: {path}")
            raise FieldNotFoundError(path)

        self.updater.update_field_value(self.fields, path, value)
        self._notify_listeners()

    # Validation

    def validate(self) -> bool:
        """Validate every field, replacing all error state. Returns overall validity."""
        errors = self.validator.validate_all(self.fields)
        self.updater.apply_validation_errors(self.fields, errors)
        self._notify_listeners()
        if errors:
            logger.info(f"Validation failed for {len(errors)} fields")
        return not errors

    # Arrays

    def add_value(self, array_path: str, value: Any = None) -> str:
        self.get_field(array_path)
        item_path = self.array_manager.add_item(self.fields, array_path, value)
        self._notify_listeners()
        return item_path

    def delete_value(self, element_path: str) -> int:
        self.get_field(element_path)
        length = self.array_manager.remove_item(self.fields, element_path)
        self._notify_listeners()
        return length

    def insert_array_item(self, array_path: str, index: int, value: Any = None) -> str:
        self.get_field(array_path)
        item_path = self.array_manager.insert_item(self.fields, array_path, index, value)
        self._notify_listeners()
        return item_path

    def move_array_item(self, array_path: str, from_index: int, to_index: int) -> None:
        self.get_field(array_path)
        self.array_manager.move_item(self.fields, array_path, from_index, to_index)
        self._notify_listeners()

    def get_array_length(self, array_path: str) -> int:
        self.get_field(array_path)
        return self.array_manager.get_array_length(self.fields, array_path)

    # Buffering

    def revert_field(self, path: str) -> bool:
        self.get_field(path)
        reverted = self.buffering.revert_field(self.fields, path)
        if reverted:
            self._notify_listeners()
        return reverted

    def revert_branch(self, path: str) -> bool:
        self.get_field(path)
        reverted = self.buffering.revert_branch(self.fields, path)
        if reverted:
            self._notify_listeners()
        return reverted

    def revert_all(self) -> None:
        self.buffering.revert_all(self.fields)
        self._notify_listeners()

    def has_unsaved_changes(self) -> bool:
        return self.buffering.has_unsaved_changes(self.fields)

    def get_changed_fields(self) -> List[FormField]:
        return self.buffering.get_changed_fields(self.fields)

    def get_changed_paths(self) -> List[str]:
        return self.buffering.get_changed_paths(self.fields)

    def get_changed_values(self) -> Dict[str, Any]:
        return self.buffering.get_changed_values(self.fields)

    def get_dirty_paths(self) -> List[str]:
        return self.buffering.get_dirty_paths(self.fields)

    def create_snapshot(self) -> Dict[str, Any]:
        return self.buffering.create_snapshot(self.fields)

    def restore_from_snapshot(self, snapshot: Dict[str, Any]) -> None:
        self.buffering.restore_from_snapshot(self.fields, snapshot)
        self._notify_listeners()

    def set_pristine_values(self) -> None:
        self.buffering.set_pristine_values(self.fields)
        self._notify_listeners()

    def get_change_statistics(self) -> ChangeStatistics:
        return self.buffering.get_change_statistics(self.fields)

    def get_diff(self) -> Dict[str, Any]:
        """Differences between the pristine and the current document, keyed by path."""
        root = self.fields[ROOT_PATH]
        return calculate_diff(root.pristine_value, root.value)

    # State reset

    def reset_form(self) -> None:
        """Clear dirty and error state on every field without touching values."""
        self.updater.reset_all_field_states(self.fields)
        self._notify_listeners()

    def clear_errors(self) -> None:
        self.updater.clear_all_errors(self.fields)
        self._notify_listeners()

    # Listeners

    def add_listener(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify_listeners(self) -> None:
        self._field_cache.clear()
        snapshot = dict(self.fields)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Form listener {listener!r} failed: {e}")
