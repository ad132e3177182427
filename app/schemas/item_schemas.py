import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from app.models.item_report import ItemReport, ItemStatus
from app.utils.s3_service import generate_signed_url


class SecurityQuestionIn(BaseModel):
    question: str = Field(max_length=200)
    answer: str = Field(max_length=200)


class ItemReportCreateRequest(BaseModel):
    item_type: str = Field(max_length=60)
    location: str = Field(max_length=120)
    date_found: str = Field(max_length=32)
    time_found: str = Field(default="", max_length=32)
    photo_ref: str = Field(default="", max_length=500)
    security_questions: List[SecurityQuestionIn]


class ItemDecisionRequest(BaseModel):
    approve: bool


# What claimants see: questions only, never the answers
class ItemPublic(BaseModel):
    id: uuid.UUID
    item_type: str
    location: str
    date_found: str
    time_found: str
    photo_url: Optional[str]
    status: ItemStatus
    questions: List[str]

    @classmethod
    def from_item(cls, item: ItemReport) -> "ItemPublic":
        return cls(
            id=item.id,
            item_type=item.item_type,
            location=item.location,
            date_found=item.date_found,
            time_found=item.time_found,
            photo_url=generate_signed_url(item.photo_ref),
            status=item.status,
            questions=[pair["question"] for pair in item.security_questions],
        )


class ItemAdminView(BaseModel):
    id: uuid.UUID
    created_at: datetime
    reporter_id: str
    item_type: str
    location: str
    date_found: str
    time_found: str
    photo_url: Optional[str]
    status: ItemStatus
    security_questions: List[SecurityQuestionIn]

    @classmethod
    def from_item(cls, item: ItemReport) -> "ItemAdminView":
        return cls(
            id=item.id,
            created_at=item.created_at,
            reporter_id=item.reporter_id,
            item_type=item.item_type,
            location=item.location,
            date_found=item.date_found,
            time_found=item.time_found,
            photo_url=generate_signed_url(item.photo_ref),
            status=item.status,
            security_questions=item.security_questions,
        )


class StatsOut(BaseModel):
    pending_items: int
    verified_items: int
    claimed_items: int
    pending_claims: int
