from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, Field

from creditvote_node.api.deps import (
    get_now,
    get_service,
    get_store,
    persist,
    require_caller,
)
from creditvote_node.runtime.atomic_store import AtomicStateStore
from creditvote_node.runtime.proposals import Proposal
from creditvote_node.runtime.service import VotingService

__all__ = [
    "router",
    "ProposalCreate",
    "VoteRequest",
]

router = APIRouter(prefix="/proposals", tags=["governance"])


class ProposalCreate(BaseModel):
    name: str
    duration_minutes: int = Field(..., ge=0)


class VoteRequest(BaseModel):
    amount: int = Field(..., ge=0)
    in_favor: bool


def _proposal_view(proposal: Proposal, now: int) -> Dict[str, Any]:
    out = proposal.to_dict()
    out["open"] = proposal.is_open(now)
    out["seconds_remaining"] = proposal.seconds_remaining(now)
    return out


@router.post("", name="create_proposal")
def create_proposal(
    payload: ProposalCreate = Body(...),
    chairman: str = Depends(require_caller),
    now: int = Depends(get_now),
    service: VotingService = Depends(get_service),
    store: Optional[AtomicStateStore] = Depends(get_store),
) -> Dict[str, Any]:
    proposal_id = service.create_proposal(payload.name, payload.duration_minutes, chairman, now)
    persist(service, store)
    return {
        "ok": True,
        "proposal_id": proposal_id,
        "proposal": _proposal_view(service.get_proposal(proposal_id), now),
    }


@router.get("", name="list_proposals")
def list_proposals(
    now: int = Depends(get_now),
    service: VotingService = Depends(get_service),
) -> Dict[str, List[Dict[str, Any]]]:
    return {"proposals": [_proposal_view(p, now) for p in service.list_proposals()]}


@router.get("/{proposal_id}", name="get_proposal")
def get_proposal(
    proposal_id: int,
    now: int = Depends(get_now),
    service: VotingService = Depends(get_service),
) -> Dict[str, Any]:
    return {"proposal": _proposal_view(service.get_proposal(proposal_id), now)}


@router.get("/{proposal_id}/remaining", name="seconds_remaining")
def seconds_remaining(
    proposal_id: int,
    now: int = Depends(get_now),
    service: VotingService = Depends(get_service),
) -> Dict[str, Any]:
    return {"proposal_id": proposal_id, "seconds_remaining": service.seconds_remaining(proposal_id, now)}


@router.get("/{proposal_id}/open", name="is_open")
def is_open(
    proposal_id: int,
    now: int = Depends(get_now),
    service: VotingService = Depends(get_service),
) -> Dict[str, Any]:
    return {"proposal_id": proposal_id, "open": service.is_open(proposal_id, now)}


@router.post("/{proposal_id}/votes", name="vote")
def vote(
    proposal_id: int,
    payload: VoteRequest = Body(...),
    caller: str = Depends(require_caller),
    now: int = Depends(get_now),
    service: VotingService = Depends(get_service),
    store: Optional[AtomicStateStore] = Depends(get_store),
) -> Dict[str, Any]:
    balance = service.vote(proposal_id, payload.amount, payload.in_favor, caller, now)
    persist(service, store)
    return {
        "ok": True,
        "balance": balance,
        "proposal": _proposal_view(service.get_proposal(proposal_id), now),
    }


@router.get("/{proposal_id}/result", name="result")
def result(
    proposal_id: int,
    now: int = Depends(get_now),
    service: VotingService = Depends(get_service),
) -> Dict[str, Any]:
    return {"proposal_id": proposal_id, "result": service.result(proposal_id, now).value}
