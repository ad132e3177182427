import secrets
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional, Sequence

from sqlmodel import Session, func, select

from app.core.clock import MonotonicClock, record_clock
from app.core.exceptions import IllegalTransition, InvalidTarget, NotFound, ValidationError
from app.models.claim import CLAIM_TRANSITIONS, Claim, ClaimStatus
from app.models.item_report import ItemStatus
from app.stores.item_store import ItemReportStore, as_uuid


# No 0/O or 1/I so codes survive being read aloud or copied by hand
CLAIM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CLAIM_CODE_LENGTH = 6


def generate_claim_code() -> str:
    token = "".join(secrets.choice(CLAIM_CODE_ALPHABET) for _ in range(CLAIM_CODE_LENGTH))
    return f"CLM-{token}"


class ClaimStore:
    """
    Owns claims and their status transitions. Never commits.

    Callers creating claims concurrently must hold the claim-codes lock until
    their transaction commits; the code check and reservation happen here.
    """

    def __init__(
        self,
        session: Session,
        items: ItemReportStore,
        code_factory: Callable[[], str] = generate_claim_code,
        clock: MonotonicClock = record_clock,
    ):
        self.session = session
        self.items = items
        self.code_factory = code_factory
        self.clock = clock

    def create(self, claimant_id: str, item_id, answers: Sequence[str]) -> Claim:
        try:
            item = self.items.get(item_id, for_update=True)
        except NotFound:
            raise InvalidTarget(
                "Item does not exist",
                entity="item",
                entity_id=item_id,
            )

        if item.status != ItemStatus.verified:
            raise InvalidTarget(
                f"Item is {item.status.value}, only verified items can be claimed",
                entity="item",
                entity_id=item.id,
            )

        if answers is None or isinstance(answers, str) or len(answers) != len(item.security_questions):
            raise ValidationError(
                f"Expected {len(item.security_questions)} answers",
                entity="claim",
            )

        cleaned = [str(answer or "").strip() for answer in answers]
        if not all(cleaned):
            raise ValidationError("Every security question needs an answer", entity="claim")

        claim = Claim(
            created_at=self.clock.tick(),
            claimant_id=str(claimant_id),
            item_id=item.id,
            claim_code=self._reserve_code(),
            answers=cleaned,
        )

        self.session.add(claim)
        self.session.flush()

        return claim

    def _reserve_code(self) -> str:
        while True:
            code = self.code_factory()
            if not self.code_taken(code):
                return code

    def code_taken(self, code: str) -> bool:
        return self.session.exec(
            select(Claim.id).where(Claim.claim_code == code)
        ).first() is not None

    def get(self, claim_id, for_update: bool = False) -> Claim:
        claim = self.session.get(
            Claim,
            as_uuid(claim_id, "claim"),
            populate_existing=for_update,
            with_for_update=True if for_update else None,
        )
        if not claim:
            raise NotFound("Claim not found", entity="claim", entity_id=claim_id)
        return claim

    def get_by_code(self, claim_code: str) -> Claim:
        claim = self.session.exec(
            select(Claim).where(Claim.claim_code == claim_code.strip().upper())
        ).first()
        if not claim:
            raise NotFound("Claim not found", entity="claim", entity_id=claim_code)
        return claim

    def set_status(self, claim_id, new_status: ClaimStatus) -> Claim:
        new_status = ClaimStatus(new_status)
        claim = self.get(claim_id, for_update=True)

        if new_status not in CLAIM_TRANSITIONS[claim.status]:
            raise IllegalTransition(
                f"Claim already {claim.status.value}",
                entity="claim",
                entity_id=claim.id,
                transition=f"{claim.status.value}->{new_status.value}",
            )

        claim.status = new_status
        claim.decided_at = datetime.now(timezone.utc)
        self.session.add(claim)
        self.session.flush()

        return claim

    def list(
        self,
        status: Optional[ClaimStatus] = None,
        claimant_id: Optional[str] = None,
        item_id=None,
    ) -> Iterator[Claim]:
        query = select(Claim).order_by(Claim.created_at, Claim.id)

        if status:
            query = query.where(Claim.status == ClaimStatus(status))

        if claimant_id is not None:
            query = query.where(Claim.claimant_id == str(claimant_id))

        if item_id is not None:
            query = query.where(Claim.item_id == as_uuid(item_id, "item"))

        yield from self.session.exec(query)

    def count(self, status: Optional[ClaimStatus] = None) -> int:
        query = select(func.count(Claim.id))
        if status:
            query = query.where(Claim.status == ClaimStatus(status))
        return self.session.exec(query).one()
