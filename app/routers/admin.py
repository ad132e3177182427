from typing import List, Optional
import uuid
from fastapi import APIRouter, Depends, Query

from app.models.activity_log import AuditAction
from app.models.claim import ClaimStatus
from app.models.item_report import ItemStatus
from app.schemas.activity_schemas import ActivityEntryOut
from app.schemas.claim_schemas import ClaimDecisionRequest, ClaimReview
from app.schemas.item_schemas import ItemAdminView, ItemDecisionRequest, StatsOut
from app.services.verification_service import VerificationService, get_verification_service
from app.utils.auth_helper import CurrentUser, require_admin

router = APIRouter()


def build_claim_review(service: VerificationService, claim) -> ClaimReview:
    review = service.claim_review(claim)

    return ClaimReview(
        id=claim.id,
        claim_code=claim.claim_code,
        claimant_id=claim.claimant_id,
        status=claim.status,
        created_at=claim.created_at,
        decided_at=claim.decided_at,
        item=ItemAdminView.from_item(review["item"]),
        comparisons=review["comparisons"],
    )


@router.get("/stats", response_model=StatsOut)
def get_overview_stats(
    service: VerificationService = Depends(get_verification_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Counts for the admin dashboard cards"""
    return StatsOut(**service.stats())


@router.get("/items", response_model=List[ItemAdminView])
def get_items_for_verification(
    status: Optional[ItemStatus] = None,
    service: VerificationService = Depends(get_verification_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Item reports, optionally filtered by status"""
    return [ItemAdminView.from_item(item) for item in service.list_items(status=status)]


@router.get("/claims", response_model=List[ClaimReview])
def get_claims_for_moderation(
    status: Optional[ClaimStatus] = None,
    service: VerificationService = Depends(get_verification_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Claims with the expected and submitted answers side by side"""
    return [build_claim_review(service, claim) for claim in service.list_claims(status=status)]


@router.get("/claims/{claim_id}", response_model=ClaimReview)
def get_claim_for_review(
    claim_id: uuid.UUID,
    service: VerificationService = Depends(get_verification_service),
    admin: CurrentUser = Depends(require_admin),
):
    return build_claim_review(service, service.get_claim(claim_id))


@router.get("/activity", response_model=List[ActivityEntryOut])
def get_recent_activity(
    action: Optional[AuditAction] = None,
    item_id: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    service: VerificationService = Depends(get_verification_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Audit trail, newest first"""
    entries = service.list_activity(action=action, item_id=item_id, limit=limit)
    return [ActivityEntryOut.from_entry(entry) for entry in entries]


@router.post("/items/{item_id}/decide")
def decide_item(
    item_id: uuid.UUID,
    payload: ItemDecisionRequest,
    service: VerificationService = Depends(get_verification_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Verify (publish) or reject an item report"""
    item = service.decide_item(admin.id, admin.name, item_id, payload.approve)

    return {
        "ok": True,
        "message": "Item verified and published" if payload.approve else "Item report rejected",
        "status": item.status,
    }


@router.post("/claims/{claim_id}/decide")
def decide_claim(
    claim_id: uuid.UUID,
    payload: ClaimDecisionRequest,
    service: VerificationService = Depends(get_verification_service),
    admin: CurrentUser = Depends(require_admin),
):
    """Approve or reject a claim; approval marks the item claimed"""
    claim = service.decide_claim(admin.id, admin.name, claim_id, payload.approve)

    return {
        "ok": True,
        "message": "Claim approved" if payload.approve else "Claim rejected",
        "status": claim.status,
        "claim_code": claim.claim_code,
    }
