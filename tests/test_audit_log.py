from datetime import datetime, timedelta, timezone

from app.models.activity_log import AuditAction
from app.core.clock import MonotonicClock
from app.stores.audit_log import AuditLog


BASE = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


def test_clock_never_goes_backwards():
    readings = iter([BASE, BASE - timedelta(seconds=5), BASE + timedelta(seconds=1)])
    clock = MonotonicClock(now=lambda: next(readings))

    first = clock.tick()
    second = clock.tick()
    third = clock.tick()

    assert first == BASE
    assert second == BASE
    assert third == BASE + timedelta(seconds=1)


def test_list_is_newest_first(session):
    readings = iter([BASE, BASE + timedelta(seconds=1), BASE + timedelta(seconds=2)])
    audit = AuditLog(session, clock=MonotonicClock(now=lambda: next(readings)))

    audit.append("u1", "User", AuditAction.item_reported, "first", subject_item_id="a")
    audit.append("u1", "User", AuditAction.item_verified, "second", subject_item_id="a")
    audit.append("u1", "User", AuditAction.item_reported, "third", subject_item_id="b")

    assert [e.details for e in audit.list()] == ["third", "second", "first"]


def test_timestamp_ties_keep_insertion_order(session):
    audit = AuditLog(session, clock=MonotonicClock(now=lambda: BASE))

    for name in ("one", "two", "three"):
        audit.append("u1", "User", AuditAction.claim_submitted, name)

    assert [e.details for e in audit.list()] == ["three", "two", "one"]


def test_list_filters(session):
    audit = AuditLog(session)

    audit.append("u1", "User", AuditAction.item_reported, "a reported", subject_item_id="a")
    audit.append("u2", "Admin", AuditAction.item_verified, "a verified", subject_item_id="a")
    audit.append("u1", "User", AuditAction.item_reported, "b reported", subject_item_id="b")

    reported = list(audit.list(action=AuditAction.item_reported))
    assert {e.details for e in reported} == {"a reported", "b reported"}

    for_a = list(audit.list(item_id="a"))
    assert {e.details for e in for_a} == {"a reported", "a verified"}

    assert len(list(audit.list(limit=1))) == 1
    assert list(audit.list(limit=0)) == []


def test_entries_store_item_id_as_plain_identifier(session):
    audit = AuditLog(session)

    entry = audit.append(
        "u1",
        "User",
        AuditAction.failed_claim_attempt,
        "no such item",
        subject_item_id="does-not-exist",
    )

    assert entry.id is not None
    assert entry.subject_item_id == "does-not-exist"
    assert entry.subject_item_type is None


def test_strict_clock_separates_equal_and_backward_readings():
    readings = iter([BASE, BASE, BASE - timedelta(seconds=1)])
    clock = MonotonicClock(now=lambda: next(readings), strict=True)

    stamps = [clock.tick() for _ in range(3)]

    assert stamps == [
        BASE,
        BASE + timedelta(microseconds=1),
        BASE + timedelta(microseconds=2),
    ]
