# creditvote_node/errors.py
from __future__ import annotations

"""
Error taxonomy for the voting runtime.

Every error is a caller-input or precondition violation. None of them are
transient, and an operation that raises has not changed any state.

Each class carries:
- ``code``: stable snake_case string, used as the ``error`` field in API
  responses (same vocabulary as ``{"ok": False, "error": "proposal_closed"}``)
- ``status_code``: HTTP status the API layer answers with
"""

from typing import Any, Dict


class VotingError(Exception):
    code: str = "voting_error"
    status_code: int = 400

    def __init__(self, message: str = "", **context: Any) -> None:
        super().__init__(message or self.code)
        self.message = message or self.code
        self.context: Dict[str, Any] = dict(context)

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.code, "detail": self.message}


class ProposalNotFound(VotingError):
    code = "proposal_not_found"
    status_code = 404


class ProposalClosed(VotingError):
    code = "proposal_closed"
    status_code = 409


class ProposalStillOpen(VotingError):
    code = "proposal_still_open"
    status_code = 409


class VoterNotFound(VotingError):
    code = "voter_not_found"
    status_code = 404


class InsufficientCredits(VotingError):
    code = "insufficient_credits"
    status_code = 409


class InvalidAmount(VotingError):
    code = "invalid_amount"
    status_code = 400


class InvalidDuration(InvalidAmount):
    code = "invalid_duration"


__all__ = [
    "VotingError",
    "ProposalNotFound",
    "ProposalClosed",
    "ProposalStillOpen",
    "VoterNotFound",
    "InsufficientCredits",
    "InvalidAmount",
    "InvalidDuration",
]
