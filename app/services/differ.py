"""Field-level diff between two content snapshots.

:func:`diff_content` is pure: it never mutates its inputs and every value it
places into a change is a deep copy.
"""

from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.models.content import (
    METADATA_SECTION_ID,
    ChangeSource,
    PreviewChange,
    Section,
    WebsiteContent,
)
from app.services.normalizer import canonical_json

WHOLE_SECTION_FIELD = "*"
METADATA_LABEL = "Metadata"
METADATA_FIELDS = ("title", "description")


def values_equal(before: Any, after: Any) -> bool:
    """Compare strings directly and everything else by canonical JSON."""
    if isinstance(before, str) and isinstance(after, str):
        return before == after
    return canonical_json(before) == canonical_json(after)


def _by_id(sections: List[Section]) -> Dict[str, Section]:
    mapping: Dict[str, Section] = {}
    for section in sections:
        mapping.setdefault(section.id, section)
    return mapping


def diff_sections(previous: Optional[Section], updated: Optional[Section]) -> List[PreviewChange]:
    if previous is None and updated is None:
        return []

    if previous is None:
        return [
            PreviewChange(
                section_id=updated.id,
                section_label=updated.label,
                field=WHOLE_SECTION_FIELD,
                change_type="add",
                current_value=None,
                proposed_value=deepcopy(updated.content),
            )
        ]

    if updated is None:
        return [
            PreviewChange(
                section_id=previous.id,
                section_label=previous.label,
                field=WHOLE_SECTION_FIELD,
                change_type="remove",
                current_value=deepcopy(previous.content),
                proposed_value=None,
            )
        ]

    changes = []
    fields = list(previous.content) + [key for key in updated.content if key not in previous.content]
    for field in fields:
        before = previous.content.get(field)
        after = updated.content.get(field)
        if not values_equal(before, after):
            changes.append(
                PreviewChange(
                    section_id=updated.id,
                    section_label=updated.label,
                    field=field,
                    change_type="update",
                    current_value=deepcopy(before),
                    proposed_value=deepcopy(after),
                )
            )
    return changes


def diff_content(previous: WebsiteContent, updated: WebsiteContent) -> List[PreviewChange]:
    """Return the ordered changes that turn *previous* into *updated*.

    Order: metadata title, metadata description, then sections in
    *previous*'s order followed by sections only present in *updated*.
    """
    changes: List[PreviewChange] = []

    for field in METADATA_FIELDS:
        before = getattr(previous.metadata, field)
        after = getattr(updated.metadata, field)
        if not values_equal(before, after):
            changes.append(
                PreviewChange(
                    section_id=METADATA_SECTION_ID,
                    section_label=METADATA_LABEL,
                    field=field,
                    change_type="update",
                    current_value=before,
                    proposed_value=after,
                )
            )

    previous_sections = _by_id(previous.sections)
    updated_sections = _by_id(updated.sections)
    section_ids = list(previous_sections) + [
        section_id for section_id in updated_sections if section_id not in previous_sections
    ]

    for section_id in section_ids:
        changes.extend(
            diff_sections(previous_sections.get(section_id), updated_sections.get(section_id))
        )

    return changes


def attribute_changes(
    changes: List[PreviewChange], source: ChangeSource, timestamp: Optional[str] = None
) -> List[PreviewChange]:
    """Return copies of *changes* stamped with *source* and *timestamp* (now by default)."""
    stamp = timestamp or datetime.now(timezone.utc).isoformat()
    return [change.model_copy(update={"source": source, "timestamp": stamp}) for change in changes]


def apply_changes_to_content(content: WebsiteContent, changes: List[PreviewChange]) -> WebsiteContent:
    """Replay *changes* onto a copy of *content*.

    The inverse of :func:`diff_content`: applying ``diff_content(a, b)`` to
    ``a`` yields the metadata and section contents of ``b``.  Updates for an
    unknown section are ignored.
    """
    result = content.model_copy(deep=True)

    for change in changes:
        if change.section_id == METADATA_SECTION_ID:
            if change.field in METADATA_FIELDS:
                setattr(result.metadata, change.field, change.proposed_value or "")
            continue

        section = result.section(change.section_id)

        if change.field == WHOLE_SECTION_FIELD:
            if change.change_type == "remove":
                result.sections = [s for s in result.sections if s.id != change.section_id]
            elif section is None:
                result.sections.append(
                    Section(
                        id=change.section_id,
                        label=change.section_label,
                        content=deepcopy(change.proposed_value or {}),
                    )
                )
            else:
                section.content = deepcopy(change.proposed_value or {})
            continue

        if section is None:
            continue
        if change.proposed_value is None:
            section.content.pop(change.field, None)
        else:
            section.content[change.field] = deepcopy(change.proposed_value)

    return result
