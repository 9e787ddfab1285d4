"""Checklist template merging and entry validation."""

from .engine import (
    apply_template, checklist_progress, merge_checklist_items,
    unchecked_required, validate_entry
)

__all__ = [
    "apply_template",
    "checklist_progress",
    "merge_checklist_items",
    "unchecked_required",
    "validate_entry"
]
