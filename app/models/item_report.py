from enum import Enum
from typing import List
import uuid
from sqlalchemy import Column, JSON
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class ItemStatus(str, Enum):
    pending = "pending"
    verified = "verified"
    claimed = "claimed"


# Legal status edges; pending -> pending is the explicit no-op used when a report is rejected
ITEM_TRANSITIONS = {
    ItemStatus.pending: {ItemStatus.pending, ItemStatus.verified},
    ItemStatus.verified: {ItemStatus.claimed},
    ItemStatus.claimed: set(),
}


class ItemReport(SQLModel, table=True):
    __tablename__ = "item_reports"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)

    # Finder info
    reporter_id: str = Field(index=True)

    # Item fields
    item_type: str
    location: str
    date_found: str
    time_found: str
    photo_ref: str

    # [{"question": ..., "answer": ...}, ...] in the order the finder set them
    security_questions: List[dict] = Field(sa_column=Column(JSON, nullable=False))

    status: ItemStatus = Field(default=ItemStatus.pending, index=True)
