"""
Checklist template engine.

Merges a log template's checklist into an entry and validates entries
against their required checklist items.
"""

import uuid
from typing import Callable, Iterable, List, Optional, Tuple

from ..core.exceptions import ValidationError
from ..core.logging import get_logger
from ..store.schemas import ChecklistItem, DraftTarget, EditTarget, LogEntryPatch
from ..store.service import LogStore


logger = get_logger(__name__)


def merge_checklist_items(
    existing: Iterable[ChecklistItem],
    template_items: Iterable[ChecklistItem],
    id_factory: Optional[Callable[[], str]] = None
) -> List[ChecklistItem]:
    """
    Merge template items into an entry's checklist, deduplicating by text.

    Existing items come first and are kept untouched. Each template item whose
    text is not present yet is appended as a fresh copy: new ID, unchecked,
    ``required`` copied from the template. The first item with a given text
    wins, so a later duplicate never changes an earlier item's ``required``.

    Args:
        existing: Items already on the entry
        template_items: Items of the template being applied
        id_factory: Source of IDs for the copied items

    Returns:
        The merged checklist
    """
    new_id = id_factory or (lambda: str(uuid.uuid4()))
    merged = [item.model_copy() for item in existing]
    seen = {item.text for item in merged}

    for item in template_items:
        if item.text in seen:
            continue
        seen.add(item.text)
        merged.append(
            ChecklistItem(id=new_id(), text=item.text, checked=False, required=item.required)
        )

    return merged


def apply_template(store: LogStore, target: EditTarget, template_id: str) -> bool:
    """
    Apply a log template's checklist to the draft or a saved entry.

    Applying to a missing draft starts one. The entry's ``template_id`` is set
    to the applied template.

    Returns:
        False when the template or the saved entry does not exist
    """
    template = store.get_template(template_id)
    if template is None:
        logger.warning(f"Cannot apply template {template_id}: not found")
        return False

    if isinstance(target, DraftTarget):
        draft = store.draft
        existing = draft.checklist_items if draft else []
        store.save_draft(LogEntryPatch(
            checklist_items=merge_checklist_items(existing, template.checklist_items),
            template_id=template_id,
        ))
        logger.info(f"Applied template {template.name!r} to the draft")
        return True

    entry = store.get_log(target.log_id)
    if entry is None:
        logger.warning(f"Cannot apply template {template_id}: log {target.log_id} not found")
        return False

    store.update_log(entry.id, LogEntryPatch(
        checklist_items=merge_checklist_items(entry.checklist_items, template.checklist_items),
        template_id=template_id,
    ))
    logger.info(f"Applied template {template.name!r} to log {entry.id}")
    return True


def unchecked_required(items: Iterable[ChecklistItem]) -> List[ChecklistItem]:
    """Required items that are not checked yet."""
    return [item for item in items if item.required and not item.checked]


def checklist_progress(items: Iterable[ChecklistItem]) -> Tuple[int, int]:
    """Return (checked, total) for a checklist."""
    items = list(items)
    return sum(1 for item in items if item.checked), len(items)


def validate_entry(title: str, checklist_items: Iterable[ChecklistItem]) -> None:
    """
    Validate an entry before it is saved.

    Raises:
        ValidationError: If the title is blank or a required item is unchecked
    """
    if not (title or "").strip():
        raise ValidationError("제목을 입력하세요", field_name="title", invalid_value=title)

    missing = unchecked_required(checklist_items)
    if missing:
        raise ValidationError(
            "필수 체크리스트 항목을 모두 체크해주세요.",
            field_name="checklist_items",
            invalid_value=[item.text for item in missing],
        )
