# creditvote_node/runtime/validation.py
from __future__ import annotations

from typing import Any

from creditvote_node.errors import InvalidAmount, InvalidDuration, ProposalNotFound


def _is_plain_int(value: Any) -> bool:
    # bool is an int subclass; True must not count as one credit
    return isinstance(value, int) and not isinstance(value, bool)


def require_amount(amount: Any) -> int:
    """Return ``amount`` if it is a non-negative int, else raise InvalidAmount."""
    if not _is_plain_int(amount):
        raise InvalidAmount(f"amount must be an integer, got {type(amount).__name__}", amount=amount)
    if amount < 0:
        raise InvalidAmount(f"amount must be non-negative, got {amount}", amount=amount)
    return amount


def require_duration(duration_minutes: Any) -> int:
    if not _is_plain_int(duration_minutes):
        raise InvalidDuration(
            f"duration_minutes must be an integer, got {type(duration_minutes).__name__}",
            duration_minutes=duration_minutes,
        )
    if duration_minutes < 0:
        raise InvalidDuration(
            f"duration_minutes must be non-negative, got {duration_minutes}",
            duration_minutes=duration_minutes,
        )
    return duration_minutes


def require_proposal_id(proposal_id: Any, count: int) -> int:
    """Proposal ids are 0-based indexes into the creation sequence."""
    if not _is_plain_int(proposal_id) or not (0 <= proposal_id < count):
        raise ProposalNotFound(f"no proposal with id {proposal_id!r}", proposal_id=proposal_id)
    return proposal_id
