"""
creditvote_node/api/deps.py
---------------------------

FastAPI dependencies shared by the routers.

The service and the optional snapshot store live on ``app.state`` (set by
``create_app``). The clock is a dependency of its own so tests can pin
``now`` with ``app.dependency_overrides[get_now]``.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import Header, HTTPException, Request, status

from creditvote_node.runtime.atomic_store import AtomicStateStore
from creditvote_node.runtime.service import VotingService

CALLER_HEADER = "X-CreditVote-User"

log = logging.getLogger(__name__)


def get_service(request: Request) -> VotingService:
    return request.app.state.service


def get_store(request: Request) -> Optional[AtomicStateStore]:
    return getattr(request.app.state, "store", None)


def get_now() -> int:
    return int(time.time())


def require_caller(
    x_creditvote_user: str = Header(
        ...,
        alias=CALLER_HEADER,
        description="Opaque caller identity; trusted as given.",
    )
) -> str:
    caller = (x_creditvote_user or "").strip()
    if not caller:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{CALLER_HEADER} header is required",
        )
    return caller


def persist(service: VotingService, store: Optional[AtomicStateStore]) -> None:
    """
    Write a snapshot after a successful mutation, if persistence is on.

    The in-memory state is authoritative and the mutation has already been
    applied, so a failed write is logged and the request still succeeds.
    The next successful save carries the change to disk.
    """
    if store is None:
        return
    try:
        store.save_from(service.export_state)
    except OSError as e:
        log.warning("snapshot to %s failed, state kept in memory only: %s", store.path, e)
