"""
creditvote_node/runtime/proposals.py
------------------------------------

Time-boxed proposals with yes/no credit tallies.

A proposal is **open** while ``now < deadline`` and **closed** from the
deadline on. The state is always derived from the stored deadline and the
``now`` passed by the caller; nothing is cached and there is no close action.

Tallies only grow, and only while the proposal is open. ``apply_vote`` re-checks
openness under the proposal's lock, so a vote cannot land after the deadline
used for the check.

Ids are 0-based indexes in creation order and are never reused.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List

from creditvote_node.errors import ProposalClosed, ProposalStillOpen
from creditvote_node.runtime.validation import (
    require_amount,
    require_duration,
    require_proposal_id,
)

log = logging.getLogger(__name__)

SECONDS_PER_MINUTE = 60


class Outcome(str, Enum):
    TIE = "tie"
    YES_WINS = "yes_wins"
    NO_WINS = "no_wins"


@dataclass
class Proposal:
    id: int
    name: str
    chairman: str
    deadline: int
    votes_for_yes: int = 0
    votes_for_no: int = 0

    def is_open(self, now: int) -> bool:
        return now < self.deadline

    def seconds_remaining(self, now: int) -> int:
        # negative once closed: seconds past the deadline
        return self.deadline - now

    def outcome(self) -> Outcome:
        if self.votes_for_yes == self.votes_for_no:
            return Outcome.TIE
        if self.votes_for_yes > self.votes_for_no:
            return Outcome.YES_WINS
        return Outcome.NO_WINS

    def add_votes(self, amount: int, in_favor: bool) -> None:
        if in_favor:
            self.votes_for_yes += amount
        else:
            self.votes_for_no += amount

    def to_dict(self) -> Dict[str, Any]:
        return dataclasses.asdict(self)


@dataclass
class _ProposalRecord:
    proposal: Proposal
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class ProposalStore:
    """Ordered collection of proposals, indexed by creation order."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: List[_ProposalRecord] = []

    def _get(self, proposal_id: int) -> _ProposalRecord:
        with self._lock:
            require_proposal_id(proposal_id, len(self._records))
            return self._records[proposal_id]

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create(self, name: str, duration_minutes: int, chairman: str, now: int) -> int:
        """
        Append a proposal closing at ``now + duration_minutes * 60``.

        A duration of 0 is accepted and yields a proposal that is already
        closed. Returns the new proposal's id.
        """
        duration_minutes = require_duration(duration_minutes)
        deadline = int(now) + duration_minutes * SECONDS_PER_MINUTE
        with self._lock:
            proposal_id = len(self._records)
            self._records.append(
                _ProposalRecord(
                    proposal=Proposal(
                        id=proposal_id,
                        name=str(name),
                        chairman=str(chairman),
                        deadline=deadline,
                    )
                )
            )
        log.info(
            "proposal %d %r created by %s (deadline=%d)",
            proposal_id,
            name,
            chairman,
            deadline,
        )
        return proposal_id

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def seconds_remaining(self, proposal_id: int, now: int) -> int:
        record = self._get(proposal_id)
        with record.lock:
            return record.proposal.seconds_remaining(now)

    def is_open(self, proposal_id: int, now: int) -> bool:
        record = self._get(proposal_id)
        with record.lock:
            return record.proposal.is_open(now)

    def result(self, proposal_id: int, now: int) -> Outcome:
        record = self._get(proposal_id)
        with record.lock:
            proposal = record.proposal
            if proposal.is_open(now):
                raise ProposalStillOpen(
                    f"proposal {proposal_id} is open for another {proposal.seconds_remaining(now)}s",
                    proposal_id=proposal_id,
                )
            return proposal.outcome()

    def get(self, proposal_id: int) -> Proposal:
        """Return a copy of the proposal as it is right now."""
        record = self._get(proposal_id)
        with record.lock:
            return dataclasses.replace(record.proposal)

    def list(self) -> List[Proposal]:
        with self._lock:
            records = list(self._records)
        out = []
        for record in records:
            with record.lock:
                out.append(dataclasses.replace(record.proposal))
        return out

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    # ------------------------------------------------------------------
    # Voting
    # ------------------------------------------------------------------

    @contextmanager
    def voting_window(self, proposal_id: int, now: int) -> Iterator[Proposal]:
        """
        Hold the proposal's lock and yield it, provided it is open at ``now``.

        Anything done inside the block is ordered against other votes on the
        same proposal, and the deadline cannot pass in between.
        """
        record = self._get(proposal_id)
        with record.lock:
            if not record.proposal.is_open(now):
                raise ProposalClosed(
                    f"proposal {proposal_id} closed {-record.proposal.seconds_remaining(now)}s ago",
                    proposal_id=proposal_id,
                )
            yield record.proposal

    def apply_vote(self, proposal_id: int, amount: int, in_favor: bool, now: int) -> None:
        amount = require_amount(amount)
        with self.voting_window(proposal_id, now) as proposal:
            proposal.add_votes(amount, bool(in_favor))

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def export(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.list()]

    @classmethod
    def restore(cls, rows: List[Dict[str, Any]]) -> "ProposalStore":
        store = cls()
        for expected_id, row in enumerate(rows or []):
            if int(row.get("id", expected_id)) != expected_id:
                raise ValueError(f"proposal snapshot out of order at index {expected_id}")
            store._records.append(
                _ProposalRecord(
                    proposal=Proposal(
                        id=expected_id,
                        name=str(row.get("name", "")),
                        chairman=str(row.get("chairman", "")),
                        deadline=int(row["deadline"]),
                        votes_for_yes=require_amount(row.get("votes_for_yes", 0)),
                        votes_for_no=require_amount(row.get("votes_for_no", 0)),
                    )
                )
            )
        return store
