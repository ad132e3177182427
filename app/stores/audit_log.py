from typing import Iterator, Optional

from sqlmodel import Session, select

from app.core.clock import MonotonicClock, audit_clock
from app.models.activity_log import ActivityLogEntry, AuditAction


class AuditLog:
    """
    Append-only store of activity entries.

    Entries are added to the caller's session and become durable with the
    caller's commit, together with the mutation they describe.
    """

    def __init__(self, session: Session, clock: MonotonicClock = audit_clock):
        self.session = session
        self.clock = clock

    def append(
        self,
        actor_id: str,
        actor_name: str,
        action: AuditAction,
        details: str,
        subject_item_id=None,
        subject_item_type: Optional[str] = None,
    ) -> ActivityLogEntry:
        entry = ActivityLogEntry(
            timestamp=self.clock.tick(),
            actor_id=str(actor_id),
            actor_name=actor_name,
            action=AuditAction(action),
            subject_item_id=str(subject_item_id) if subject_item_id is not None else None,
            subject_item_type=subject_item_type,
            details=details,
        )

        self.session.add(entry)
        self.session.flush()

        return entry

    def list(
        self,
        action: Optional[AuditAction] = None,
        item_id=None,
        limit: Optional[int] = None,
    ) -> Iterator[ActivityLogEntry]:
        """Newest first; entries sharing a timestamp come out latest-inserted first."""
        query = select(ActivityLogEntry).order_by(
            ActivityLogEntry.timestamp.desc(),
            ActivityLogEntry.id.desc(),
        )

        if action:
            query = query.where(ActivityLogEntry.action == AuditAction(action))

        if item_id is not None:
            query = query.where(ActivityLogEntry.subject_item_id == str(item_id))

        if limit is not None:
            query = query.limit(limit)

        yield from self.session.exec(query)
