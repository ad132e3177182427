import uuid
from fastapi import APIRouter, Depends, HTTPException

from app.models.item_report import ItemStatus
from app.schemas.item_schemas import ItemAdminView, ItemPublic, ItemReportCreateRequest
from app.services.verification_service import VerificationService, get_verification_service
from app.utils.auth_helper import CurrentUser, get_current_user_required, require_member


router = APIRouter()


@router.post("/create")
def add_item(
    payload: ItemReportCreateRequest,
    service: VerificationService = Depends(get_verification_service),
    current_user: CurrentUser = Depends(require_member),
):
    item = service.submit_item_report(
        reporter_id=current_user.id,
        reporter_name=current_user.name,
        item_type=payload.item_type,
        location=payload.location,
        date_found=payload.date_found,
        time_found=payload.time_found,
        photo_ref=payload.photo_ref,
        security_questions=[sq.model_dump() for sq in payload.security_questions],
    )

    return {
        "ok": True,
        "item_id": str(item.id),
        "status": item.status,
    }


@router.get("/all")
def get_all_items(
    service: VerificationService = Depends(get_verification_service),
    current_user: CurrentUser = Depends(get_current_user_required),
):
    # Only verified items are on the board
    items = service.list_items(status=ItemStatus.verified)

    return {
        "items": [ItemPublic.from_item(item) for item in items],
    }


@router.get("/mine")
def get_my_items(
    service: VerificationService = Depends(get_verification_service),
    current_user: CurrentUser = Depends(require_member),
):
    items = service.list_items(reporter_id=current_user.id)

    return {
        "items": [ItemAdminView.from_item(item) for item in items],
    }


@router.get("/{item_id}")
def get_item(
    item_id: uuid.UUID,
    service: VerificationService = Depends(get_verification_service),
    current_user: CurrentUser = Depends(get_current_user_required),
):
    item = service.get_item(item_id)

    # Unverified reports stay private to their reporter and staff
    if item.status != ItemStatus.verified and item.reporter_id != current_user.id and current_user.role != "admin":
        raise HTTPException(status_code=404, detail="Item not found")

    return {
        "item": ItemPublic.from_item(item),
    }
