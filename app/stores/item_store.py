import uuid
from typing import Iterator, Optional, Sequence

from sqlmodel import Session, func, select

from app.core.clock import MonotonicClock, record_clock
from app.core.exceptions import IllegalTransition, NotFound, ValidationError
from app.models.item_report import ITEM_TRANSITIONS, ItemReport, ItemStatus


def as_uuid(value, entity: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise NotFound(f"{entity.capitalize()} not found", entity=entity, entity_id=value)


def _clean_questions(security_questions: Sequence[dict]) -> list:
    if not security_questions:
        raise ValidationError(
            "At least one security question is required",
            entity="item",
        )

    cleaned = []
    for idx, pair in enumerate(security_questions, start=1):
        if not isinstance(pair, dict):
            raise ValidationError(
                f"Security question {idx} must have a question and an answer",
                entity="item",
            )

        question = str(pair.get("question") or "").strip()
        answer = str(pair.get("answer") or "").strip()

        if not question or not answer:
            raise ValidationError(
                f"Security question {idx} needs both a question and an answer",
                entity="item",
            )

        cleaned.append({"question": question, "answer": answer})

    return cleaned


class ItemReportStore:
    """Owns item reports and their status transitions. Never commits."""

    def __init__(self, session: Session, clock: MonotonicClock = record_clock):
        self.session = session
        self.clock = clock

    def create(
        self,
        reporter_id: str,
        item_type: str,
        location: str,
        date_found: str,
        security_questions: Sequence[dict],
        time_found: str = "",
        photo_ref: str = "",
    ) -> ItemReport:
        # clean strings
        reporter_id = str(reporter_id or "").strip()
        item_type = (item_type or "").strip()
        location = (location or "").strip()
        date_found = (date_found or "").strip()

        for field, value in (
            ("reporter_id", reporter_id),
            ("item_type", item_type),
            ("location", location),
            ("date_found", date_found),
        ):
            if not value:
                raise ValidationError(f"Field '{field}' is required", entity="item")

        item = ItemReport(
            created_at=self.clock.tick(),
            reporter_id=reporter_id,
            item_type=item_type,
            location=location,
            date_found=date_found,
            time_found=(time_found or "").strip(),
            photo_ref=(photo_ref or "").strip(),
            security_questions=_clean_questions(security_questions),
        )

        self.session.add(item)
        self.session.flush()

        return item

    def get(self, item_id, for_update: bool = False) -> ItemReport:
        """
        Load one report. With for_update the row is re-read from the database
        (and row-locked where the backend supports it) so the caller sees the
        latest committed status.
        """
        item = self.session.get(
            ItemReport,
            as_uuid(item_id, "item"),
            populate_existing=for_update,
            with_for_update=True if for_update else None,
        )
        if not item:
            raise NotFound("Item not found", entity="item", entity_id=item_id)
        return item

    def set_status(self, item_id, new_status: ItemStatus) -> ItemReport:
        new_status = ItemStatus(new_status)
        item = self.get(item_id, for_update=True)

        if new_status not in ITEM_TRANSITIONS[item.status]:
            raise IllegalTransition(
                f"Item cannot move from {item.status.value} to {new_status.value}",
                entity="item",
                entity_id=item.id,
                transition=f"{item.status.value}->{new_status.value}",
            )

        item.status = new_status
        self.session.add(item)
        self.session.flush()

        return item

    def list(
        self,
        status: Optional[ItemStatus] = None,
        reporter_id: Optional[str] = None,
    ) -> Iterator[ItemReport]:
        query = select(ItemReport).order_by(ItemReport.created_at, ItemReport.id)

        if status:
            query = query.where(ItemReport.status == ItemStatus(status))

        if reporter_id is not None:
            query = query.where(ItemReport.reporter_id == str(reporter_id))

        yield from self.session.exec(query)

    def count(self, status: Optional[ItemStatus] = None) -> int:
        query = select(func.count(ItemReport.id))
        if status:
            query = query.where(ItemReport.status == ItemStatus(status))
        return self.session.exec(query).one()
