"""
creditvote_node/api/credits.py
------------------------------

Credit issuance over HTTP.

Granting is intentionally permissive: any caller may grant any identity any
non-negative number of credits, any number of times.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field

from creditvote_node.api.deps import get_service, get_store, persist
from creditvote_node.runtime.atomic_store import AtomicStateStore
from creditvote_node.runtime.service import VotingService

router = APIRouter(prefix="/credits", tags=["credits"])


class GrantRequest(BaseModel):
    user_id: str = Field(..., description="Opaque voter identity")
    amount: int = Field(..., ge=0, description="Credits to add; 0 registers the voter")


@router.post("/grant", name="grant_credits")
def grant_credits(
    req: GrantRequest = Body(...),
    service: VotingService = Depends(get_service),
    store: Optional[AtomicStateStore] = Depends(get_store),
) -> Dict[str, Any]:
    """
    POST /credits/grant

    Example body:
      {"user_id": "@bob", "amount": 5}

    Response:
      {"ok": true, "user_id": "@bob", "credited": 5, "balance": 5}
    """
    user_id = (req.user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=400, detail="user_id is required")

    balance = service.grant_credits(user_id, req.amount)
    persist(service, store)

    return {"ok": True, "user_id": user_id, "credited": req.amount, "balance": balance}


@router.get("/{user_id}", name="credit_balance")
def credit_balance(user_id: str, service: VotingService = Depends(get_service)) -> Dict[str, Any]:
    return {"ok": True, "user_id": user_id, "balance": service.balance(user_id)}
