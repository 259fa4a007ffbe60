# creditvote_node/runtime/__init__.py
from __future__ import annotations

"""
Voting runtime (lazy import).

The core classes are re-exported lazily via __getattr__ (PEP 562), so
importing ``creditvote_node.runtime.validation`` on its own does not pull in
the rest of the package.
"""

from importlib import import_module
from typing import Any

__all__ = [
    "VoterLedger",
    "ProposalStore",
    "Proposal",
    "Outcome",
    "VotingService",
    "AtomicStateStore",
]

_LAZY_MAP = {
    "VoterLedger": "creditvote_node.runtime.voters",
    "ProposalStore": "creditvote_node.runtime.proposals",
    "Proposal": "creditvote_node.runtime.proposals",
    "Outcome": "creditvote_node.runtime.proposals",
    "VotingService": "creditvote_node.runtime.service",
    "AtomicStateStore": "creditvote_node.runtime.atomic_store",
}


def __getattr__(name: str) -> Any:
    mod_path = _LAZY_MAP.get(name)
    if not mod_path:
        raise AttributeError(name)
    return getattr(import_module(mod_path), name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_MAP.keys()))
