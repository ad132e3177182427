from fastapi import APIRouter, Depends, HTTPException

from app.schemas.claim_schemas import ClaimCreateRequest, ClaimReceipt
from app.schemas.item_schemas import ItemPublic
from app.services.verification_service import VerificationService, get_verification_service
from app.utils.auth_helper import CurrentUser, require_member


router = APIRouter()


@router.post("/create")
def create_claim(
    payload: ClaimCreateRequest,
    service: VerificationService = Depends(get_verification_service),
    current_user: CurrentUser = Depends(require_member),
):
    claim = service.submit_claim(
        claimant_id=current_user.id,
        claimant_name=current_user.name,
        item_id=payload.item_id,
        answers=payload.answers,
    )

    return {
        "ok": True,
        "claim_id": str(claim.id),
        "claim_code": claim.claim_code,
    }


@router.get("/mine")
def get_my_claims(
    service: VerificationService = Depends(get_verification_service),
    current_user: CurrentUser = Depends(require_member),
):
    claims = service.list_claims(claimant_id=current_user.id)

    return {
        "claims": [ClaimReceipt.model_validate(claim, from_attributes=True) for claim in claims],
    }


@router.get("/code/{claim_code}")
def get_claim_status(
    claim_code: str,
    service: VerificationService = Depends(get_verification_service),
    current_user: CurrentUser = Depends(require_member),
):
    """
    Track a claim by its code - accessible only by the claimant.
    """
    claim = service.get_claim_by_code(claim_code)

    # Someone else's code looks the same as an unknown one
    if claim.claimant_id != current_user.id:
        raise HTTPException(status_code=404, detail="Claim not found")

    item = service.get_item(claim.item_id)

    return {
        "claim": ClaimReceipt.model_validate(claim, from_attributes=True),
        "item": ItemPublic.from_item(item),
    }
