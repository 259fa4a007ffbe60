# tests/test_proposals.py

import pytest

from creditvote_node.errors import (
    InvalidAmount,
    InvalidDuration,
    ProposalClosed,
    ProposalNotFound,
    ProposalStillOpen,
)
from creditvote_node.runtime.proposals import Outcome, ProposalStore


def test_ids_are_sequential_from_zero(store, t0):
    assert store.create("P1", 10, "@alice", t0) == 0
    assert store.create("P1", 10, "@bob", t0) == 1  # names need not be unique
    assert store.create("P3", 5, "@alice", t0 + 30) == 2
    assert len(store) == 3


def test_create_sets_deadline_and_zero_tallies(store, t0):
    pid = store.create("P1", 10, "@alice", t0)
    p = store.get(pid)
    assert p.name == "P1"
    assert p.chairman == "@alice"
    assert p.deadline == t0 + 600
    assert (p.votes_for_yes, p.votes_for_no) == (0, 0)


def test_open_until_deadline(store, t0):
    """
    Scenario A:
    - open one second before the deadline
    - closed exactly at the deadline and after it
    """
    pid = store.create("P1", 10, "@alice", t0)
    assert store.is_open(pid, t0) is True
    assert store.is_open(pid, t0 + 599) is True
    assert store.is_open(pid, t0 + 600) is False
    assert store.is_open(pid, t0 + 10_000) is False


def test_seconds_remaining_goes_negative(store, t0):
    pid = store.create("P1", 10, "@alice", t0)
    assert store.seconds_remaining(pid, t0) == 600
    assert store.seconds_remaining(pid, t0 + 600) == 0
    assert store.seconds_remaining(pid, t0 + 601) == -1


def test_zero_duration_is_closed_immediately(store, t0):
    pid = store.create("instant", 0, "@alice", t0)
    assert store.is_open(pid, t0) is False
    assert store.result(pid, t0) == Outcome.TIE


@pytest.mark.parametrize("bad", [-1, 2.5, "10", None])
def test_bad_duration_rejected(store, t0, bad):
    with pytest.raises(InvalidDuration):
        store.create("P", bad, "@alice", t0)
    assert len(store) == 0


def test_invalid_duration_is_an_invalid_amount():
    assert issubclass(InvalidDuration, InvalidAmount)


@pytest.mark.parametrize("pid", [1, -1, 99, "0", None])
def test_unknown_ids(store, t0, pid):
    store.create("P1", 10, "@alice", t0)
    with pytest.raises(ProposalNotFound):
        store.is_open(pid, t0)
    with pytest.raises(ProposalNotFound):
        store.seconds_remaining(pid, t0)
    with pytest.raises(ProposalNotFound):
        store.result(pid, t0 + 601)
    with pytest.raises(ProposalNotFound):
        store.apply_vote(pid, 1, True, t0)


def test_apply_vote_adds_to_matching_tally(store, t0):
    pid = store.create("P1", 10, "@alice", t0)
    store.apply_vote(pid, 3, True, t0 + 1)
    store.apply_vote(pid, 2, False, t0 + 2)
    store.apply_vote(pid, 4, True, t0 + 3)
    p = store.get(pid)
    assert p.votes_for_yes == 7
    assert p.votes_for_no == 2


def test_apply_vote_rechecks_deadline(store, t0):
    pid = store.create("P1", 10, "@alice", t0)
    with pytest.raises(ProposalClosed):
        store.apply_vote(pid, 1, True, t0 + 600)
    p = store.get(pid)
    assert (p.votes_for_yes, p.votes_for_no) == (0, 0)


def test_result_while_open_fails(store, t0):
    pid = store.create("P1", 10, "@alice", t0)
    with pytest.raises(ProposalStillOpen):
        store.result(pid, t0 + 599)


@pytest.mark.parametrize(
    "yes,no,expected",
    [
        (0, 0, Outcome.TIE),
        (5, 5, Outcome.TIE),
        (3, 0, Outcome.YES_WINS),
        (4, 3, Outcome.YES_WINS),
        (0, 1, Outcome.NO_WINS),
        (2, 9, Outcome.NO_WINS),
    ],
)
def test_result_compares_tallies(store, t0, yes, no, expected):
    pid = store.create("P1", 1, "@alice", t0)
    if yes:
        store.apply_vote(pid, yes, True, t0)
    if no:
        store.apply_vote(pid, no, False, t0)
    assert store.result(pid, t0 + 60) == expected


def test_get_returns_a_copy(store, t0):
    pid = store.create("P1", 10, "@alice", t0)
    copy = store.get(pid)
    copy.votes_for_yes = 100
    assert store.get(pid).votes_for_yes == 0


def test_export_and_restore(store, t0):
    a = store.create("A", 10, "@alice", t0)
    store.create("B", 0, "@bob", t0)
    store.apply_vote(a, 3, True, t0 + 1)

    restored = ProposalStore.restore(store.export())
    assert [p.to_dict() for p in restored.list()] == store.export()
    # ids keep counting from where the snapshot stopped
    assert restored.create("C", 1, "@carol", t0) == 2


def test_restore_rejects_out_of_order_rows():
    rows = [{"id": 1, "name": "x", "chairman": "@a", "deadline": 10}]
    with pytest.raises(ValueError):
        ProposalStore.restore(rows)
