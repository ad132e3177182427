import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.core.clock import MonotonicClock
from app.core.exceptions import IllegalTransition, NotFound, ValidationError
from app.models.item_report import ItemStatus
from app.stores.item_store import ItemReportStore


def create(store, questions, **overrides):
    fields = dict(
        reporter_id="finder-1",
        item_type="Umbrella",
        location="Cafeteria",
        date_found="2026-10-02",
        time_found="09:15",
        photo_ref="uploads/umbrella.webp",
        security_questions=questions,
    )
    fields.update(overrides)
    return store.create(**fields)


def test_create_starts_pending(session, sample_questions):
    store = ItemReportStore(session)

    item = create(store, sample_questions)

    assert item.status == ItemStatus.pending
    assert item.security_questions == sample_questions
    assert store.get(item.id) is item


def test_create_strips_strings(session):
    store = ItemReportStore(session)

    item = create(
        store,
        [{"question": "  Brand? ", "answer": " Totes  "}],
        item_type="  Umbrella ",
    )

    assert item.item_type == "Umbrella"
    assert item.security_questions == [{"question": "Brand?", "answer": "Totes"}]


@pytest.mark.parametrize(
    "questions",
    [
        [],
        [{"question": "Colour?", "answer": "   "}],
        [{"question": "", "answer": "Red"}],
        [{"question": "Colour?"}],
        ["Colour?"],
    ],
)
def test_create_rejects_bad_security_questions(session, questions):
    store = ItemReportStore(session)

    with pytest.raises(ValidationError):
        create(store, questions)

    assert list(store.list()) == []


def test_create_requires_item_type(session, sample_questions):
    with pytest.raises(ValidationError):
        create(ItemReportStore(session), sample_questions, item_type=" ")


def test_get_unknown_item(session):
    store = ItemReportStore(session)

    with pytest.raises(NotFound):
        store.get(uuid.uuid4())

    with pytest.raises(NotFound):
        store.get("not-a-uuid")


def test_legal_transitions(session, sample_questions):
    store = ItemReportStore(session)
    item = create(store, sample_questions)

    assert store.set_status(item.id, ItemStatus.pending).status == ItemStatus.pending
    assert store.set_status(item.id, ItemStatus.verified).status == ItemStatus.verified
    assert store.set_status(item.id, ItemStatus.claimed).status == ItemStatus.claimed


@pytest.mark.parametrize(
    "path, illegal",
    [
        ([], ItemStatus.claimed),
        ([ItemStatus.verified], ItemStatus.pending),
        ([ItemStatus.verified], ItemStatus.verified),
        ([ItemStatus.verified, ItemStatus.claimed], ItemStatus.verified),
        ([ItemStatus.verified, ItemStatus.claimed], ItemStatus.pending),
        ([ItemStatus.verified, ItemStatus.claimed], ItemStatus.claimed),
    ],
)
def test_illegal_transitions(session, sample_questions, path, illegal):
    store = ItemReportStore(session)
    item = create(store, sample_questions)
    for status in path:
        store.set_status(item.id, status)
    before = item.status

    with pytest.raises(IllegalTransition) as exc_info:
        store.set_status(item.id, illegal)

    assert exc_info.value.transition == f"{before.value}->{illegal.value}"
    assert store.get(item.id).status == before


def test_list_filters_and_restarts(session, sample_questions):
    store = ItemReportStore(session)
    first = create(store, sample_questions)
    second = create(store, sample_questions, reporter_id="finder-2")
    store.set_status(second.id, ItemStatus.verified)

    pending = store.list(status=ItemStatus.pending)
    assert [i.id for i in pending] == [first.id]

    # each call is a fresh sequence reflecting current state
    store.set_status(first.id, ItemStatus.verified)
    assert list(store.list(status=ItemStatus.pending)) == []
    assert {i.id for i in store.list(status=ItemStatus.verified)} == {first.id, second.id}
    assert [i.id for i in store.list(reporter_id="finder-2")] == [second.id]


def test_count(session, sample_questions):
    store = ItemReportStore(session)
    create(store, sample_questions)
    item = create(store, sample_questions)
    store.set_status(item.id, ItemStatus.verified)

    assert store.count() == 2
    assert store.count(ItemStatus.pending) == 1
    assert store.count(ItemStatus.claimed) == 0


def test_list_keeps_creation_order_when_wall_clock_steps_back(session, sample_questions):
    base = datetime(2026, 10, 2, 9, 0, tzinfo=timezone.utc)
    readings = iter([base, base - timedelta(seconds=1), base - timedelta(seconds=1)])
    store = ItemReportStore(session, clock=MonotonicClock(now=lambda: next(readings), strict=True))

    first = create(store, sample_questions, item_type="First")
    second = create(store, sample_questions, item_type="Second")
    third = create(store, sample_questions, item_type="Third")

    assert first.created_at < second.created_at < third.created_at
    assert [i.item_type for i in store.list()] == ["First", "Second", "Third"]
