"""
Verification and approval workflow.

Every mutating operation here is one unit of work: the record changes and
exactly one audit entry are committed together, or the session is rolled back
and nothing persists. Per-record locks serialize the read-check-write of each
operation, so two staff members approving different claims on the same item
cannot both win.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, List, Optional, Sequence

from fastapi import Depends
from sqlmodel import Session

from app.core.clock import MonotonicClock, audit_clock
from app.core.exceptions import Conflict, IllegalTransition, InvalidTarget, NotFound, VerificationError
from app.core.locks import CLAIM_CODES_KEY, RecordLocks, claim_key, item_key, record_locks
from app.db.db import get_session
from app.models.activity_log import ActivityLogEntry, AuditAction
from app.models.claim import Claim, ClaimStatus
from app.models.item_report import ItemReport, ItemStatus
from app.stores.audit_log import AuditLog
from app.stores.claim_store import ClaimStore, generate_claim_code
from app.stores.item_store import ItemReportStore, as_uuid


logger = logging.getLogger(__name__)


class VerificationService:
    def __init__(
        self,
        session: Session,
        locks: RecordLocks = record_locks,
        code_factory=generate_claim_code,
        clock: MonotonicClock = audit_clock,
    ):
        self.session = session
        self.locks = locks
        self.items = ItemReportStore(session)
        self.claims = ClaimStore(session, self.items, code_factory)
        self.audit = AuditLog(session, clock)

    @contextmanager
    def _unit(self):
        try:
            yield
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    # Submissions

    def submit_item_report(
        self,
        reporter_id: str,
        reporter_name: str,
        item_type: str,
        location: str,
        date_found: str,
        security_questions: Sequence[dict],
        time_found: str = "",
        photo_ref: str = "",
    ) -> ItemReport:
        with self._unit():
            item = self.items.create(
                reporter_id=reporter_id,
                item_type=item_type,
                location=location,
                date_found=date_found,
                time_found=time_found,
                photo_ref=photo_ref,
                security_questions=security_questions,
            )
            self.audit.append(
                reporter_id,
                reporter_name,
                AuditAction.item_reported,
                f"Reported found {item.item_type} at {item.location}",
                subject_item_id=item.id,
                subject_item_type=item.item_type,
            )

        logger.info(f"Item report {item.id} submitted by {reporter_id}")
        return item

    def submit_claim(
        self,
        claimant_id: str,
        claimant_name: str,
        item_id,
        answers: Sequence[str],
    ) -> Claim:
        with self.locks.hold(self._item_lock_key(item_id), CLAIM_CODES_KEY):
            try:
                with self._unit():
                    claim = self.claims.create(claimant_id, item_id, answers)
                    item = self.items.get(claim.item_id)
                    self.audit.append(
                        claimant_id,
                        claimant_name,
                        AuditAction.claim_submitted,
                        f"Submitted claim for {item.item_type} (Code: {claim.claim_code})",
                        subject_item_id=item.id,
                        subject_item_type=item.item_type,
                    )
            except InvalidTarget as exc:
                try:
                    self._record_failed_attempt(claimant_id, claimant_name, item_id, exc)
                except Exception:
                    # the caller still gets the InvalidTarget below
                    logger.exception(f"Could not record failed claim attempt by {claimant_id} on item {item_id}")
                raise

        logger.info(f"Claim {claim.claim_code} submitted by {claimant_id} for item {claim.item_id}")
        return claim

    def _record_failed_attempt(self, claimant_id, claimant_name, item_id, exc: InvalidTarget):
        item = self._find_item(item_id)
        item_type = item.item_type if item else None

        with self._unit():
            self.audit.append(
                claimant_id,
                claimant_name,
                AuditAction.failed_claim_attempt,
                f"Claim attempt against {item_type or 'unknown item'} refused: {exc.message}",
                subject_item_id=item.id if item else item_id,
                subject_item_type=item_type,
            )

        logger.warning(f"Failed claim attempt by {claimant_id} on item {item_id}: {exc.message}")

    def _item_lock_key(self, item_id) -> str:
        try:
            return item_key(as_uuid(item_id, "item"))
        except NotFound:
            return item_key(item_id)

    def _find_item(self, item_id) -> Optional[ItemReport]:
        try:
            return self.items.get(item_id)
        except NotFound:
            return None

    # Staff decisions

    def decide_item(self, actor_id: str, actor_name: str, item_id, approve: bool) -> ItemReport:
        item_id = as_uuid(item_id, "item")
        target = ItemStatus.verified if approve else ItemStatus.pending

        with self.locks.hold(item_key(item_id)):
            try:
                with self._unit():
                    item = self.items.get(item_id, for_update=True)

                    # pending -> pending is legal for the store, but deciding twice is not
                    if item.status != ItemStatus.pending:
                        raise IllegalTransition(
                            f"Item is already {item.status.value}",
                            entity="item",
                            entity_id=item.id,
                            transition=f"{item.status.value}->{target.value}",
                        )

                    self.items.set_status(item_id, target)

                    if approve:
                        action = AuditAction.item_verified
                        details = f"Verified item report for {item.item_type}"
                    else:
                        action = AuditAction.item_rejected
                        details = f"Rejected item report for {item.item_type}"

                    self.audit.append(
                        actor_id,
                        actor_name,
                        action,
                        details,
                        subject_item_id=item.id,
                        subject_item_type=item.item_type,
                    )
            except VerificationError as exc:
                logger.warning(f"Decision on item {item_id} by {actor_id} refused: {exc.message}")
                raise

        logger.info(f"Item {item_id} {'verified' if approve else 'rejected'} by {actor_id}")
        return item

    def decide_claim(self, actor_id: str, actor_name: str, claim_id, approve: bool) -> Claim:
        """
        Approve or reject a pending claim.

        Approval also moves the item from verified to claimed; if another claim
        got there first the whole decision fails with Conflict and nothing
        changes. The submitted answers are shown to staff by claim_review() and
        are never compared automatically: the decision is the reviewer's.
        """
        claim_id = as_uuid(claim_id, "claim")
        item_id = self.claims.get(claim_id).item_id

        with self.locks.hold(claim_key(claim_id), item_key(item_id)):
            try:
                with self._unit():
                    claim = self.claims.get(claim_id, for_update=True)
                    item = self.items.get(item_id, for_update=True)

                    if claim.status != ClaimStatus.pending:
                        target = ClaimStatus.approved if approve else ClaimStatus.rejected
                        raise IllegalTransition(
                            f"Claim is already {claim.status.value}",
                            entity="claim",
                            entity_id=claim.id,
                            transition=f"{claim.status.value}->{target.value}",
                        )

                    if approve and item.status != ItemStatus.verified:
                        raise Conflict(
                            f"Item is {item.status.value}, it can no longer be claimed",
                            entity="item",
                            entity_id=item.id,
                            transition=f"{item.status.value}->{ItemStatus.claimed.value}",
                        )

                    if approve:
                        self.claims.set_status(claim_id, ClaimStatus.approved)
                        self.items.set_status(item_id, ItemStatus.claimed)
                        action = AuditAction.claim_approved
                        details = f"Approved claim for {item.item_type} (Code: {claim.claim_code})"
                    else:
                        self.claims.set_status(claim_id, ClaimStatus.rejected)
                        action = AuditAction.claim_rejected
                        details = f"Rejected claim for {item.item_type} (Code: {claim.claim_code})"

                    self.audit.append(
                        actor_id,
                        actor_name,
                        action,
                        details,
                        subject_item_id=item.id,
                        subject_item_type=item.item_type,
                    )
            except VerificationError as exc:
                logger.warning(f"Decision on claim {claim_id} by {actor_id} refused: {exc.message}")
                raise

        logger.info(f"Claim {claim_id} {'approved' if approve else 'rejected'} by {actor_id}")
        return claim

    # Reads

    def get_item(self, item_id) -> ItemReport:
        return self.items.get(item_id)

    def list_items(self, status: Optional[ItemStatus] = None, reporter_id: Optional[str] = None) -> Iterator[ItemReport]:
        return self.items.list(status=status, reporter_id=reporter_id)

    def get_claim(self, claim_id) -> Claim:
        return self.claims.get(claim_id)

    def get_claim_by_code(self, claim_code: str) -> Claim:
        return self.claims.get_by_code(claim_code)

    def list_claims(self, status: Optional[ClaimStatus] = None, claimant_id: Optional[str] = None) -> Iterator[Claim]:
        return self.claims.list(status=status, claimant_id=claimant_id)

    def list_activity(self, action: Optional[AuditAction] = None, item_id=None, limit: Optional[int] = None) -> Iterator[ActivityLogEntry]:
        return self.audit.list(action=action, item_id=item_id, limit=limit)

    def claim_review(self, claim: Claim) -> dict:
        """Claim, its item, and each question with expected and submitted answers side by side."""
        item = self.items.get(claim.item_id)

        comparisons: List[dict] = []
        for idx, pair in enumerate(item.security_questions):
            comparisons.append({
                "question": pair["question"],
                "expected_answer": pair["answer"],
                "submitted_answer": claim.answers[idx] if idx < len(claim.answers) else None,
            })

        return {
            "claim": claim,
            "item": item,
            "comparisons": comparisons,
        }

    def stats(self) -> dict:
        return {
            "pending_items": self.items.count(ItemStatus.pending),
            "verified_items": self.items.count(ItemStatus.verified),
            "claimed_items": self.items.count(ItemStatus.claimed),
            "pending_claims": self.claims.count(ClaimStatus.pending),
        }


def get_verification_service(session: Session = Depends(get_session)) -> VerificationService:
    return VerificationService(session)
