from datetime import datetime
from typing import Optional
from pydantic import BaseModel

from app.models.activity_log import ACTION_LABELS, ActivityLogEntry, AuditAction


class ActivityEntryOut(BaseModel):
    id: int
    timestamp: datetime
    actor_id: str
    actor_name: str
    action: AuditAction
    label: str
    subject_item_id: Optional[str]
    subject_item_type: Optional[str]
    details: str

    @classmethod
    def from_entry(cls, entry: ActivityLogEntry) -> "ActivityEntryOut":
        return cls(
            id=entry.id,
            timestamp=entry.timestamp,
            actor_id=entry.actor_id,
            actor_name=entry.actor_name,
            action=entry.action,
            label=ACTION_LABELS.get(entry.action, entry.action.value),
            subject_item_id=entry.subject_item_id,
            subject_item_type=entry.subject_item_type,
            details=entry.details,
        )
