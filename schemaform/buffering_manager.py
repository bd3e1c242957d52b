"""
Buffering of field values: pristine tracking, reverts, snapshots and change statistics.

Change queries report over addressable fields only; the root container at
"" mirrors the whole document and is left out of counts.
"""

import logging
from copy import deepcopy
from typing import Any, Dict, List, Optional

from .field_initializer import FieldInitializer
from .field_updater import FieldUpdater
from .models import ChangeStatistics, FieldRegistry, FormField
from .path_utils import PathResolver, PathBuilder, ROOT_PATH
from .schema_analyzer import SchemaAnalyzer

logger = logging.getLogger(__name__)


def get_leaf_paths(fields: FieldRegistry) -> List[str]:
    """Paths with no registered descendant, in registry order."""
    parents = {PathResolver.get_parent_path(path) for path in fields if path != ROOT_PATH}
    return [path for path in fields if path not in parents]


class BufferingManager:
    """Revert, snapshot and change tracking over a field registry."""

    def __init__(self, updater: Optional[FieldUpdater] = None):
        self.updater = updater or FieldUpdater()

    def revert_field(self, fields: FieldRegistry, path: str) -> bool:
        """
        Revert one field to its pristine value and write it through to its ancestors.

        Reverting a container refreshes its descendant fields from the
        pristine value; descendants keep their dirty state unless an array
        below it changed shape, in which case its item fields are recreated.

        Returns:
            False if the field is not registered
        """
        field = fields.get(path)
        if field is None:
            logger.warning(f"Cannot revert unregistered field: {path}")
            return False

        FieldInitializer.revert_field_value(field)
        if SchemaAnalyzer.has_nested_structure(field.schema):
            self.updater.sync_descendants(fields, path)
            self._rebuild_changed_arrays(fields, path)
            FieldInitializer.refresh_has_changes(field)
        self.updater.update_parent_structures(fields, path)
        self.updater.propagate_changes_state(fields, path)
        return True

    def revert_branch(self, fields: FieldRegistry, path: str) -> bool:
        """
        Revert every descendant of path, then path itself.

        Arrays in the branch whose item fields no longer match the pristine
        elements get them recreated, then the branch leaves are written up
        through the ancestors.

        Returns:
            False if the branch root is not registered
        """
        if path not in fields:
            logger.warning(f"Cannot revert unregistered branch: {path}")
            return False

        descendants = [p for p in fields if PathResolver.is_child_path(path, p)]
        for child_path in descendants:
            FieldInitializer.revert_field_value(fields[child_path])
        FieldInitializer.revert_field_value(fields[path])

        self._rebuild_changed_arrays(fields, path)

        branch = [p for p in fields if p == path or PathResolver.is_child_path(path, p)]
        branch_paths = set(branch)
        for leaf_path in get_leaf_paths(fields):
            if leaf_path in branch_paths:
                self.updater.update_parent_structures(fields, leaf_path, create_missing=False)
        for branch_path in branch:
            FieldInitializer.refresh_has_changes(fields[branch_path])
        self.updater.propagate_changes_state(fields, path)

        logger.debug(f"Reverted branch '{path}' ({len(descendants)} descendants)")
        return True

    def revert_all(self, fields: FieldRegistry) -> None:
        """
        Revert every field, then rebuild parent containers from the leaves.

        Arrays whose registered items no longer match their pristine
        elements (after add, insert, remove or move) get their item fields
        recreated from the pristine value first.
        """
        for field in fields.values():
            FieldInitializer.revert_field_value(field)

        self._rebuild_changed_arrays(fields)

        for leaf_path in get_leaf_paths(fields):
            self.updater.update_parent_structures(fields, leaf_path, create_missing=False)
        for field in fields.values():
            FieldInitializer.refresh_has_changes(field)

        logger.info(f"Reverted all {len(fields)} fields")

    def _rebuild_changed_arrays(self, fields: FieldRegistry, branch_path: str = ROOT_PATH) -> None:
        rebuilt: List[str] = []
        for path in list(fields):
            if path != branch_path and not PathResolver.is_child_path(branch_path, path):
                continue
            if path not in fields or any(PathResolver.is_child_path(r, path) for r in rebuilt):
                continue
            field = fields[path]
            if not SchemaAnalyzer.is_array_schema(field.schema):
                continue
            if self._array_items_match(fields, field):
                continue
            self._recreate_items(fields, field)
            rebuilt.append(path)

    @staticmethod
    def _array_items_match(fields: FieldRegistry, array_field: FormField) -> bool:
        """Check that the item fields line up with the pristine elements, index for index."""
        pristine = array_field.pristine_value
        items = pristine if isinstance(pristine, list) else []
        prefix = array_field.path + '.'
        registered = [p for p in fields
                      if p.startswith(prefix) and PathResolver.is_array_index(p[len(prefix):])]
        if len(registered) != len(items):
            return False
        for index, item in enumerate(items):
            item_field = fields.get(PathBuilder.build_array_item_path(array_field.path, index))
            if item_field is None or not FieldInitializer.values_equal(item_field.pristine_value, item):
                return False
        return True

    def _recreate_items(self, fields: FieldRegistry, array_field: FormField) -> None:
        prefix = array_field.path + '.'
        for path in [p for p in fields if p.startswith(prefix)]:
            del fields[path]
        item_schema = SchemaAnalyzer.get_array_item_schema(array_field.schema)
        factory = self.updater.factory
        if not factory.can_create_field(item_schema):
            return
        for index, item in enumerate(array_field.value or []):
            item_path = PathBuilder.build_array_item_path(array_field.path, index)
            factory.create_field(fields, item_path, item_schema, item)
        logger.debug(f"Recreated item fields of '{array_field.path}'")

    def has_unsaved_changes(self, fields: FieldRegistry) -> bool:
        return any(field.has_changes for path, field in fields.items() if path != ROOT_PATH)

    def get_changed_fields(self, fields: FieldRegistry) -> List[FormField]:
        return [field for path, field in fields.items() if path != ROOT_PATH and field.has_changes]

    def get_changed_paths(self, fields: FieldRegistry) -> List[str]:
        return [field.path for field in self.get_changed_fields(fields)]

    def get_dirty_paths(self, fields: FieldRegistry) -> List[str]:
        """Paths of dirty leaf fields; containers are dirty only through their leaves."""
        return [path for path in get_leaf_paths(fields)
                if path != ROOT_PATH and fields[path].dirty]

    def get_changed_values(self, fields: FieldRegistry) -> Dict[str, Any]:
        """Current values of changed leaf fields, keyed by path."""
        return {
            path: deepcopy(fields[path].value)
            for path in get_leaf_paths(fields)
            if path != ROOT_PATH and fields[path].has_changes
        }

    def create_snapshot(self, fields: FieldRegistry) -> Dict[str, Any]:
        """Capture every field's current value."""
        return {path: deepcopy(field.value) for path, field in fields.items()}

    def restore_from_snapshot(self, fields: FieldRegistry, snapshot: Dict[str, Any]) -> None:
        """
        Restore values captured by create_snapshot.

        Dirty state is left as it is; has_changes is recomputed. Fields
        created after the snapshot are dropped and fields removed since are
        registered again with the snapshot value as their baseline.
        """
        for path in [p for p in fields if p not in snapshot]:
            del fields[path]

        for path, value in snapshot.items():
            field = fields.get(path)
            if field is None:
                field = self._register_from_snapshot(fields, path, value)
                if field is None:
                    continue
            field.value = deepcopy(value)

        for leaf_path in get_leaf_paths(fields):
            self.updater.update_parent_structures(fields, leaf_path, create_missing=False)
        for field in fields.values():
            FieldInitializer.refresh_has_changes(field)

        logger.info(f"Restored {len(snapshot)} fields from snapshot")

    @staticmethod
    def _register_from_snapshot(fields: FieldRegistry, path: str, value: Any) -> Optional[FormField]:
        parent = fields.get(PathResolver.get_parent_path(path))
        if parent is None or path == ROOT_PATH:
            logger.warning(f"Cannot restore '{path}': parent not registered")
            return None
        name = PathResolver.get_property_name(path)
        if SchemaAnalyzer.is_array_schema(parent.schema):
            schema = SchemaAnalyzer.get_array_item_schema(parent.schema)
        elif SchemaAnalyzer.is_object_schema(parent.schema):
            schema = parent.schema['properties'].get(name)
        else:
            schema = None
        if schema is None:
            logger.warning(f"Cannot restore '{path}': no schema")
            return None
        field = FieldInitializer.create_field(path, schema, value)
        fields[path] = field
        return field

    def set_pristine_values(self, fields: FieldRegistry) -> None:
        """Commit current values as the new baseline and clear dirty state."""
        for field in fields.values():
            FieldInitializer.set_pristine_value(field, field.value)
            field.dirty = False
            field.dirty_count = 0

    def get_change_statistics(self, fields: FieldRegistry) -> ChangeStatistics:
        total = changed = dirty = 0
        for path, field in fields.items():
            if path == ROOT_PATH:
                continue
            total += 1
            if field.has_changes:
                changed += 1
            if field.dirty:
                dirty += 1
        return ChangeStatistics(
            total_fields=total,
            changed_fields=changed,
            dirty_fields=dirty,
            has_unsaved_changes=changed > 0,
        )
