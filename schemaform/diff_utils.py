"""
Diff utilities for the form model.
Provides structural value equality and document comparison using the DeepDiff
library, reporting changes keyed by dot-separated field paths.
"""

from typing import Dict, Any, List, Optional, Set
from deepdiff import DeepDiff
import logging

logger = logging.getLogger(__name__)

_CHANGED_TYPES = ('values_changed', 'type_changes')
_ADDED_TYPES = ('dictionary_item_added', 'iterable_item_added')
_REMOVED_TYPES = ('dictionary_item_removed', 'iterable_item_removed')


def values_equal(a: Any, b: Any) -> bool:
    """
    Structural deep equality.

    Lists compare in order, dict key order is ignored and int/float values
    with the same magnitude are equal. Booleans never equal numbers.
    """
    if a is b:
        return True
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return not DeepDiff(a, b, ignore_numeric_type_changes=True)


def _level_path(level) -> str:
    return '.'.join(str(part) for part in level.path(output_format='list'))


def calculate_diff(original: Any, modified: Any, fields: Optional[Set[str]] = None) -> Dict[str, Any]:
    """
    Calculate differences between an original and a modified document.

    If `fields` is provided and both documents are dictionaries, only those
    top-level keys take part in the comparison.

    Args:
        original: Baseline document
        modified: Current document

    Returns:
        Dict with three sections keyed by dot path:
        - values_changed: {path: {'old_value': ..., 'new_value': ...}}
        - items_added: {path: value}
        - items_removed: {path: value}
    """
    if fields is not None and isinstance(original, dict) and isinstance(modified, dict):
        original = {k: v for k, v in original.items() if k in fields}
        modified = {k: v for k, v in modified.items() if k in fields}

    result: Dict[str, Dict[str, Any]] = {
        'values_changed': {},
        'items_added': {},
        'items_removed': {}
    }

    tree = DeepDiff(original, modified, ignore_numeric_type_changes=True, view='tree')

    for report_type, levels in tree.items():
        for level in levels:
            path = _level_path(level)
            if report_type in _CHANGED_TYPES:
                result['values_changed'][path] = {
                    'old_value': level.t1,
                    'new_value': level.t2
                }
            elif report_type in _ADDED_TYPES:
                result['items_added'][path] = level.t2
            elif report_type in _REMOVED_TYPES:
                result['items_removed'][path] = level.t1
            else:
                logger.debug(f"Ignoring diff report type {report_type} at {path}")

    return result


def has_changes(diff: Dict[str, Any]) -> bool:
    """Return True if a diff produced by calculate_diff reports anything."""
    return any(diff.get(section) for section in ('values_changed', 'items_added', 'items_removed'))


def get_changed_paths(diff: Dict[str, Any]) -> List[str]:
    """List every path mentioned in a diff, sorted."""
    paths: Set[str] = set()
    for section in ('values_changed', 'items_added', 'items_removed'):
        paths.update(diff.get(section, {}).keys())
    return sorted(paths)
