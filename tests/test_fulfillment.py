"""Request lifecycle — Pending -> Approved/Rejected -> Fulfilled."""

from datetime import datetime, timezone

import pytest

from bloodbank import records
from bloodbank.errors import (
    InsufficientStockError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from bloodbank.models import RequestStatus


def _submit(bank, user, group="A+", quantity=2, urgency="High"):
    return bank.requests.submit(user.id, group, quantity, urgency, "General Hospital", "Surgery")


def _snapshot(bank):
    return {name: bank.store.get_all(name) for name in records.COLLECTIONS}


# ── 1. Submission ───────────────────────────────────────────────────


def test_submit_creates_pending_without_stock_check(bank, receiver):
    request = _submit(bank, receiver, quantity=50)
    assert request.status == RequestStatus.pending
    assert bank.requests.get(request.id) == request
    assert bank.requests.pending() == [request]


@pytest.mark.parametrize("kwargs", [
    {"quantity": 0},
    {"hospital_name": ""},
    {"reason": "   "},
    {"urgency": "Critical"},
    {"blood_group": "Z+"},
])
def test_submit_validation(bank, receiver, kwargs):
    args = {
        "user_id": receiver.id, "blood_group": "A+", "quantity": 1, "urgency": "Low",
        "hospital_name": "General Hospital", "reason": "Surgery",
    }
    args.update(kwargs)
    with pytest.raises(ValidationError):
        bank.requests.submit(**args)
    assert bank.store.get_all(records.REQUESTS) == []


# ── 2. Approval ─────────────────────────────────────────────────────


def test_approve_insufficient_stock_keeps_pending(bank, receiver):
    bank.ledger.set_quantity("O+", 3)
    request = _submit(bank, receiver, group="O+", quantity=5)

    with pytest.raises(InsufficientStockError) as excinfo:
        bank.requests.approve(request.id)
    assert excinfo.value.available == 3
    assert bank.requests.get(request.id).status == RequestStatus.pending
    assert bank.notifications.list_for_user(receiver.id) == []


def test_approve_does_not_touch_stock(bank, receiver):
    bank.ledger.set_quantity("A+", 10)
    request = _submit(bank, receiver)
    approved = bank.requests.approve(request.id)

    assert approved.status == RequestStatus.approved
    assert bank.ledger.get_by_group("A+").quantity == 10
    [note] = bank.notifications.list_for_user(receiver.id)
    assert note.type.value == "success"
    assert note.title == "Blood Request Approved"


def test_approve_with_exactly_enough_stock(bank, receiver):
    bank.ledger.set_quantity("A+", 2)
    assert bank.requests.approve(_submit(bank, receiver).id).status == RequestStatus.approved


def test_reject(bank, receiver):
    request = _submit(bank, receiver)
    rejected = bank.requests.reject(request.id)
    assert rejected.status == RequestStatus.rejected
    [note] = bank.notifications.list_for_user(receiver.id)
    assert note.type.value == "error"


# ── 3. Fulfillment ──────────────────────────────────────────────────


def test_full_lifecycle(bank, receiver, clock):
    bank.ledger.set_quantity("A+", 10)
    request = _submit(bank, receiver)
    bank.requests.approve(request.id)
    clock.advance(minutes=5)

    supply_date = datetime(2026, 3, 16, tzinfo=timezone.utc)
    fulfilled, supply = bank.requests.fulfill(request.id, "Central Blood Bank", supply_date, "Ward 4")

    assert fulfilled.status == RequestStatus.fulfilled
    assert fulfilled.delivery_date == supply_date
    assert bank.ledger.get_by_group("A+").quantity == 8
    assert bank.store.filter(records.SUPPLIES, request_id=request.id) == [supply]
    assert supply.quantity == 2 and supply.user_id == receiver.id
    assert bank.requests.supply_for_request(request.id) == supply

    types = [n.type.value for n in reversed(bank.notifications.list_for_user(receiver.id))]
    assert types == ["success", "info"]


def test_fulfill_defaults_supply_date_to_now(bank, receiver, clock):
    bank.ledger.set_quantity("A+", 5)
    request = _submit(bank, receiver)
    bank.requests.approve(request.id)
    fulfilled, supply = bank.requests.fulfill(request.id, "City Hospital")
    assert supply.supply_date == clock.now
    assert fulfilled.delivery_date == clock.now


def test_fulfill_clamps_when_stock_consumed_after_approval(bank, receiver):
    bank.ledger.set_quantity("A+", 3)
    first = _submit(bank, receiver, quantity=3)
    second = _submit(bank, receiver, quantity=3)
    bank.requests.approve(first.id)
    bank.requests.approve(second.id)

    bank.requests.fulfill(first.id, "Central Blood Bank")
    bank.requests.fulfill(second.id, "Central Blood Bank")
    assert bank.ledger.get_by_group("A+").quantity == 0


def test_fulfill_requires_collection_center(bank, receiver):
    bank.ledger.set_quantity("A+", 5)
    request = _submit(bank, receiver)
    bank.requests.approve(request.id)
    before = _snapshot(bank)
    with pytest.raises(ValidationError):
        bank.requests.fulfill(request.id, "  ")
    assert _snapshot(bank) == before


# ── 4. Invalid transitions leave everything unchanged ──────────────


@pytest.mark.parametrize("setup,attempt", [
    ([], "fulfill"),
    (["reject"], "approve"),
    (["reject"], "reject"),
    (["reject"], "fulfill"),
    (["approve"], "approve"),
    (["approve"], "reject"),
    (["approve", "fulfill"], "fulfill"),
    (["approve", "fulfill"], "approve"),
])
def test_invalid_transition(bank, receiver, setup, attempt):
    bank.ledger.set_quantity("A+", 10)
    request = _submit(bank, receiver)
    for step in setup:
        if step == "fulfill":
            bank.requests.fulfill(request.id, "Central Blood Bank")
        else:
            getattr(bank.requests, step)(request.id)
    current = bank.requests.get(request.id).status.value

    before = _snapshot(bank)
    with pytest.raises(InvalidTransitionError) as excinfo:
        if attempt == "fulfill":
            bank.requests.fulfill(request.id, "Central Blood Bank")
        else:
            getattr(bank.requests, attempt)(request.id)
    assert excinfo.value.current == current
    assert excinfo.value.attempted == attempt
    assert _snapshot(bank) == before


def test_unknown_request(bank):
    with pytest.raises(NotFoundError):
        bank.requests.approve("nope")


# ── 5. Queries ──────────────────────────────────────────────────────


def test_listing_is_newest_first(bank, receiver, donor, clock):
    first = _submit(bank, receiver)
    clock.advance(days=1)
    second = _submit(bank, donor)
    clock.advance(days=1)
    third = _submit(bank, receiver)
    bank.requests.reject(second.id)

    assert [r.id for r in bank.requests.list_requests()] == [third.id, second.id, first.id]
    assert [r.id for r in bank.requests.list_requests("Rejected")] == [second.id]
    assert [r.id for r in bank.requests.list_for_user(receiver.id)] == [third.id, first.id]


def test_fulfill_without_stock_row_writes_nothing(bank, receiver):
    bank.ledger.set_quantity("A+", 5)
    request = _submit(bank, receiver)
    bank.requests.approve(request.id)
    stock = bank.ledger.get_by_group("A+")
    bank.store.delete(records.STOCK, stock.id)
    before = _snapshot(bank)

    with pytest.raises(NotFoundError):
        bank.requests.fulfill(request.id, "Central Blood Bank")
    assert _snapshot(bank) == before

    bank.store.add(records.STOCK, stock)
    fulfilled, _ = bank.requests.fulfill(request.id, "Central Blood Bank")
    assert fulfilled.status == RequestStatus.fulfilled


def test_fulfill_supply_date_without_timezone_is_utc(bank, receiver):
    bank.ledger.set_quantity("A+", 5)
    request = _submit(bank, receiver)
    bank.requests.approve(request.id)
    fulfilled, supply = bank.requests.fulfill(request.id, "City Hospital", datetime(2026, 3, 16, 10))

    assert supply.supply_date == datetime(2026, 3, 16, 10, tzinfo=timezone.utc)
    assert fulfilled.delivery_date == supply.supply_date
