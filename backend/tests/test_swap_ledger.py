import pytest

from conftest import at
from slotswap.models import SlotStatus, SwapStatus
from slotswap.services.errors import NotFoundError, StateError, ValidationError
from slotswap.services.swaps import SwapLedger


@pytest.fixture
def market(make_user, make_slot):
    alice = make_user("Alice")
    bob = make_user("Bob")
    carol = make_user("Carol")
    slots = {
        "a": make_slot(alice, "Gym", at(17), at(18), status=SlotStatus.SWAP_PENDING),
        "b": make_slot(bob, "Call", at(18), at(19), status=SlotStatus.SWAP_PENDING),
        "c": make_slot(carol, "Lunch", at(12), at(13), status=SlotStatus.SWAP_PENDING),
    }
    return alice, bob, carol, slots


def test_create_pending_is_populated(db, market):
    alice, bob, _, slots = market
    ledger = SwapLedger(db)

    swap = ledger.create_pending(slots["a"], slots["b"], alice.id, bob.id)
    db.commit()

    assert swap.status == SwapStatus.PENDING
    assert swap.my_slot.title == "Gym"
    assert swap.their_slot.title == "Call"
    assert swap.requester.name == "Alice"
    assert swap.responder.name == "Bob"
    assert swap.resolved_at is None


def test_create_pending_refuses_same_slot(db, market):
    alice, _, _, slots = market
    with pytest.raises(ValidationError):
        SwapLedger(db).create_pending(slots["a"], slots["a"], alice.id, alice.id)


def test_incoming_and_outgoing_only_list_pending_newest_first(db, market):
    alice, bob, carol, slots = market
    ledger = SwapLedger(db)

    first = ledger.create_pending(slots["b"], slots["a"], bob.id, alice.id)
    second = ledger.create_pending(slots["c"], slots["a"], carol.id, alice.id)
    resolved = ledger.create_pending(slots["b"], slots["c"], bob.id, carol.id)
    ledger.resolve(resolved, SwapStatus.REJECTED)
    db.commit()

    assert [s.id for s in ledger.list_incoming(alice.id)] == [second.id, first.id]
    assert [s.id for s in ledger.list_outgoing(bob.id)] == [first.id]
    assert ledger.list_incoming(carol.id) == []
    assert [s.id for s in ledger.list_history(bob.id)] == [resolved.id, first.id]


def test_resolve_is_terminal_and_retained(db, market):
    alice, bob, _, slots = market
    ledger = SwapLedger(db)
    swap = ledger.create_pending(slots["a"], slots["b"], alice.id, bob.id)

    ledger.resolve(swap, SwapStatus.ACCEPTED)
    db.commit()

    kept = ledger.require(swap.id)
    assert kept.status == SwapStatus.ACCEPTED
    assert kept.resolved_at is not None

    with pytest.raises(StateError):
        ledger.resolve(kept, SwapStatus.REJECTED)
    with pytest.raises(ValidationError):
        ledger.resolve(kept, SwapStatus.PENDING)


def test_find_conflicting_pending_matches_either_side(db, market):
    alice, bob, carol, slots = market
    ledger = SwapLedger(db)
    offered = ledger.create_pending(slots["a"], slots["b"], alice.id, bob.id)
    targeted = ledger.create_pending(slots["c"], slots["a"], carol.id, alice.id)
    unrelated = ledger.create_pending(slots["b"], slots["c"], bob.id, carol.id)
    db.commit()

    found = ledger.find_conflicting_pending(slots["a"].id)
    assert [s.id for s in found] == [offered.id, targeted.id]

    found = ledger.find_conflicting_pending(slots["a"].id, exclude_id=offered.id)
    assert [s.id for s in found] == [targeted.id]
    assert unrelated.id not in [s.id for s in found]


def test_require_missing_request(db):
    with pytest.raises(NotFoundError):
        SwapLedger(db).require(999)
