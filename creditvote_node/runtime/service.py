"""
creditvote_node/runtime/service.py
----------------------------------

VotingService binds a VoterLedger and a ProposalStore.

``vote`` is the only operation touching both. It runs inside the target
proposal's voting window (proposal lock held, openness checked at ``now``),
debits the caller under the voter's lock, then increments the tally. The
tally increment cannot fail once the debit succeeded, so a vote either
fully happens or leaves both records untouched.

Lock order is always proposal -> voter. Grants take only the voter lock and
proposal creation only the store lock, so there is no cycle.

On top of that, every mutation passes through ``self._gate`` in shared mode
and ``export_state`` holds it exclusively, so a snapshot never sees a debit
without its matching tally.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from creditvote_node.errors import VotingError
from creditvote_node.runtime.proposals import Outcome, Proposal, ProposalStore
from creditvote_node.runtime.validation import require_amount
from creditvote_node.runtime.voters import VoterLedger

log = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


class _SnapshotGate:
    """
    Shared/exclusive gate.

    Mutations enter shared and still run concurrently with each other. The
    exclusive side waits for them to drain. A waiting exclusive caller blocks
    new shared entries so it cannot be starved by a steady stream of votes.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._active = 0
        self._exclusive = False
        self._waiting_exclusive = 0

    @contextmanager
    def shared(self) -> Iterator[None]:
        with self._cond:
            while self._exclusive or self._waiting_exclusive:
                self._cond.wait()
            self._active += 1
        try:
            yield
        finally:
            with self._cond:
                self._active -= 1
                if self._active == 0:
                    self._cond.notify_all()

    @contextmanager
    def exclusive(self) -> Iterator[None]:
        with self._cond:
            self._waiting_exclusive += 1
            try:
                while self._exclusive or self._active:
                    self._cond.wait()
            finally:
                self._waiting_exclusive -= 1
            self._exclusive = True
        try:
            yield
        finally:
            with self._cond:
                self._exclusive = False
                self._cond.notify_all()


class VotingService:
    def __init__(
        self,
        voters: Optional[VoterLedger] = None,
        proposals: Optional[ProposalStore] = None,
    ) -> None:
        self.voters = voters if voters is not None else VoterLedger()
        self.proposals = proposals if proposals is not None else ProposalStore()
        self._gate = _SnapshotGate()

    # ------------------------------------------------------------------
    # Proposals
    # ------------------------------------------------------------------

    def create_proposal(self, name: str, duration_minutes: int, chairman: str, now: int) -> int:
        with self._gate.shared():
            return self.proposals.create(name, duration_minutes, chairman, now)

    def seconds_remaining(self, proposal_id: int, now: int) -> int:
        return self.proposals.seconds_remaining(proposal_id, now)

    def is_open(self, proposal_id: int, now: int) -> bool:
        return self.proposals.is_open(proposal_id, now)

    def result(self, proposal_id: int, now: int) -> Outcome:
        return self.proposals.result(proposal_id, now)

    def get_proposal(self, proposal_id: int) -> Proposal:
        return self.proposals.get(proposal_id)

    def list_proposals(self) -> List[Proposal]:
        return self.proposals.list()

    # ------------------------------------------------------------------
    # Credits
    # ------------------------------------------------------------------

    def grant_credits(self, identity: str, amount: int) -> int:
        with self._gate.shared():
            return self.voters.grant(identity, amount)

    def balance(self, identity: str) -> int:
        return self.voters.balance(identity)

    # ------------------------------------------------------------------
    # Voting
    # ------------------------------------------------------------------

    def vote(self, proposal_id: int, amount: int, in_favor: bool, caller: str, now: int) -> int:
        """
        Spend ``amount`` of ``caller``'s credits for or against a proposal.

        Raises ProposalNotFound, ProposalClosed, VoterNotFound,
        InsufficientCredits or InvalidAmount; on any of them neither the
        balance nor the tallies change. Returns the caller's remaining balance.
        """
        try:
            amount = require_amount(amount)
            with self._gate.shared(), self.proposals.voting_window(proposal_id, now) as proposal:
                remaining = self.voters.check_and_debit(caller, amount)
                proposal.add_votes(amount, bool(in_favor))
        except VotingError as e:
            log.info("vote by %s on proposal %r rejected: %s", caller, proposal_id, e.code)
            raise

        log.info(
            "vote by %s on proposal %d: %d %s (balance=%d)",
            caller,
            proposal_id,
            amount,
            "yes" if in_favor else "no",
            remaining,
        )
        return remaining

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def export_state(self) -> Dict[str, Any]:
        """
        Plain-JSON snapshot of both components.

        Mutations through this service are held off while it runs, so every
        spent credit appears exactly once: in a balance or in a tally.
        Calls made directly on ``self.voters`` or ``self.proposals`` bypass
        the gate.
        """
        with self._gate.exclusive():
            return {
                "version": SNAPSHOT_VERSION,
                "voters": self.voters.export(),
                "proposals": self.proposals.export(),
            }

    @classmethod
    def from_state(cls, state: Optional[Dict[str, Any]]) -> "VotingService":
        state = state or {}
        version = int(state.get("version", SNAPSHOT_VERSION))
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"unsupported snapshot version {version}")
        return cls(
            voters=VoterLedger.restore(state.get("voters", {})),
            proposals=ProposalStore.restore(state.get("proposals", [])),
        )
