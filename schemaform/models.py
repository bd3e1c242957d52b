"""
Data records shared across the form model: the field record and change statistics.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel


@dataclass(eq=False)
class FormField:
    """
    Runtime record for one addressable position in the form document.

    Attributes:
        path: Dot-separated path ("" for the root container)
        value: Current value (owned copy)
        pristine_value: Baseline value for change detection
        schema: Schema node describing this position (shared reference)
        errors: Validation messages, own first then descendants'
        error_count: Own errors plus one per invalid descendant
        required: Whether a value must be present
        dirty: Whether the field was ever edited since the last reset
        dirty_count: Number of edits at or below this field
        has_changes: Whether value differs from pristine_value
        last_modified: Time of the last value or state change
    """
    path: str
    value: Any
    pristine_value: Any
    schema: Dict[str, Any]
    errors: List[str] = field(default_factory=list)
    error_count: int = 0
    required: bool = False
    dirty: bool = False
    dirty_count: int = 0
    has_changes: bool = False
    last_modified: datetime = field(default_factory=datetime.now)

    @property
    def is_valid(self) -> bool:
        return self.error_count == 0


class ChangeStatistics(BaseModel):
    """Summary counts over addressable fields."""
    total_fields: int
    changed_fields: int
    dirty_fields: int
    has_unsaved_changes: bool


FieldRegistry = Dict[str, FormField]
