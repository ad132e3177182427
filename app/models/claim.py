from enum import Enum
from typing import List, Optional
import uuid
from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class ClaimStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


CLAIM_TRANSITIONS = {
    ClaimStatus.pending: {ClaimStatus.approved, ClaimStatus.rejected},
    ClaimStatus.approved: set(),
    ClaimStatus.rejected: set(),
}


class Claim(SQLModel, table=True):
    __tablename__ = "claims"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    # Claimant
    claimant_id: str = Field(index=True)

    # Linked report
    item_id: uuid.UUID = Field(foreign_key="item_reports.id", index=True)

    # Shown to the claimant for tracking
    claim_code: str = Field(unique=True, index=True)

    # Same order as the item's security questions
    answers: List[str] = Field(sa_column=Column(JSON, nullable=False))

    status: ClaimStatus = Field(default=ClaimStatus.pending, index=True)
    decided_at: Optional[datetime] = None
