"""
creditvote_node/runtime/voters.py
---------------------------------

Voting credit ledger.

Maps an opaque caller identity to its remaining voting credits.

- A voter record is created lazily by the first ``grant`` (even a grant of 0).
- Credits only go down through ``check_and_debit``, which the voting service
  calls while it holds the target proposal's lock.
- Records are never deleted.

Locking:
- ``self._lock`` guards the identity -> record mapping (record creation).
- each ``_VoterRecord.lock`` guards that voter's balance.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from creditvote_node.errors import InsufficientCredits, VoterNotFound
from creditvote_node.runtime.validation import require_amount

log = logging.getLogger(__name__)


@dataclass
class _VoterRecord:
    identity: str
    credits: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)


class VoterLedger:
    """
    Identity -> credit balance.

    Public entrypoints used by the voting service:

        grant(identity, amount)
        check_and_debit(identity, amount)
        balance(identity)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._voters: Dict[str, _VoterRecord] = {}

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find(self, identity: str) -> Optional[_VoterRecord]:
        with self._lock:
            return self._voters.get(identity)

    def _get_or_create(self, identity: str) -> _VoterRecord:
        with self._lock:
            record = self._voters.get(identity)
            if record is None:
                record = _VoterRecord(identity=identity)
                self._voters[identity] = record
                log.debug("voter %s created", identity)
            return record

    # ------------------------------------------------------------------
    # Credits
    # ------------------------------------------------------------------

    def grant(self, identity: str, amount: int) -> int:
        """
        Add ``amount`` credits to ``identity``, creating the voter if needed.

        There is no cap and no one-time restriction. Returns the new balance.
        """
        amount = require_amount(amount)
        record = self._get_or_create(identity)
        with record.lock:
            record.credits += amount
            balance = record.credits
        log.info("granted %d credits to %s (balance=%d)", amount, identity, balance)
        return balance

    def check_and_debit(self, identity: str, amount: int) -> int:
        """
        Debit ``amount`` credits in one step under the voter's lock.

        Raises VoterNotFound if the identity was never granted credits and
        InsufficientCredits if its balance is below ``amount``. Returns the
        remaining balance.
        """
        amount = require_amount(amount)
        record = self._find(identity)
        if record is None:
            raise VoterNotFound(f"voter {identity!r} has never been granted credits", identity=identity)
        with record.lock:
            if record.credits < amount:
                raise InsufficientCredits(
                    f"voter {identity!r} holds {record.credits} credits, needs {amount}",
                    identity=identity,
                    balance=record.credits,
                    requested=amount,
                )
            record.credits -= amount
            return record.credits

    def balance(self, identity: str) -> int:
        record = self._find(identity)
        if record is None:
            raise VoterNotFound(f"voter {identity!r} has never been granted credits", identity=identity)
        with record.lock:
            return record.credits

    def has_voter(self, identity: str) -> bool:
        return self._find(identity) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._voters)

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def export(self) -> Dict[str, int]:
        with self._lock:
            records = list(self._voters.values())
        out: Dict[str, int] = {}
        for record in records:
            with record.lock:
                out[record.identity] = record.credits
        return out

    @classmethod
    def restore(cls, data: Dict[str, Any]) -> "VoterLedger":
        ledger = cls()
        for identity, credits in (data or {}).items():
            ledger._voters[str(identity)] = _VoterRecord(
                identity=str(identity), credits=require_amount(credits)
            )
        return ledger
