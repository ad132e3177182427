import uuid
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel

from app.models.claim import ClaimStatus
from app.schemas.item_schemas import ItemAdminView


class ClaimCreateRequest(BaseModel):
    item_id: uuid.UUID
    answers: List[str]


class ClaimDecisionRequest(BaseModel):
    approve: bool


class ClaimReceipt(BaseModel):
    id: uuid.UUID
    claim_code: str
    item_id: uuid.UUID
    status: ClaimStatus
    created_at: datetime
    decided_at: Optional[datetime]


class AnswerComparison(BaseModel):
    question: str
    expected_answer: str
    submitted_answer: Optional[str]


class ClaimReview(BaseModel):
    id: uuid.UUID
    claim_code: str
    claimant_id: str
    status: ClaimStatus
    created_at: datetime
    decided_at: Optional[datetime]
    item: ItemAdminView
    comparisons: List[AnswerComparison]
