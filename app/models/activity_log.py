from enum import Enum
from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class AuditAction(str, Enum):
    item_reported = "item_reported"
    item_verified = "item_verified"
    item_rejected = "item_rejected"
    claim_submitted = "claim_submitted"
    claim_approved = "claim_approved"
    claim_rejected = "claim_rejected"
    failed_claim_attempt = "failed_claim_attempt"
    item_status_changed = "item_status_changed"  # reserved for direct status edits


ACTION_LABELS = {
    AuditAction.item_reported: "Item Reported",
    AuditAction.item_verified: "Item Verified",
    AuditAction.item_rejected: "Item Rejected",
    AuditAction.claim_submitted: "Claim Submitted",
    AuditAction.claim_approved: "Claim Approved",
    AuditAction.claim_rejected: "Claim Rejected",
    AuditAction.failed_claim_attempt: "Failed Claim Attempt",
    AuditAction.item_status_changed: "Item Status Changed",
}


class ActivityLogEntry(SQLModel, table=True):
    __tablename__ = "activity_log"

    # Autoincrement id doubles as insertion order for timestamp ties
    id: Optional[int] = Field(default=None, primary_key=True)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    actor_id: str = Field(index=True)
    actor_name: str

    action: AuditAction = Field(index=True)

    # Plain identifiers, no foreign keys: entries outlive the records they describe
    subject_item_id: Optional[str] = Field(default=None, index=True)
    subject_item_type: Optional[str] = None

    details: str
