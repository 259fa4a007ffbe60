from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from creditvote_node.api import credits, governance
from creditvote_node.config import (
    configure_logging,
    get_cors_origins,
    get_persistence_settings,
    load_config,
    persistence_enabled,
)
from creditvote_node.errors import VotingError
from creditvote_node.runtime.atomic_store import AtomicStateStore
from creditvote_node.runtime.service import VotingService

log = logging.getLogger(__name__)


def _load_service(store: Optional[AtomicStateStore]) -> VotingService:
    if store is None:
        return VotingService()
    state = store.load()
    if state is None:
        log.info("no snapshot at %s, starting empty", store.path)
        return VotingService()
    service = VotingService.from_state(state)
    log.info(
        "restored %d proposals and %d voters from %s",
        len(service.proposals),
        len(service.voters),
        store.path,
    )
    return service


def create_app(
    cfg: Optional[Dict[str, Any]] = None,
    service: Optional[VotingService] = None,
    store: Optional[AtomicStateStore] = None,
) -> FastAPI:
    if cfg is None:
        cfg = load_config(os.getcwd())
    configure_logging(cfg)

    if store is None and persistence_enabled(cfg):
        store = AtomicStateStore(**get_persistence_settings(cfg))
    if service is None:
        service = _load_service(store)

    app = FastAPI(title="CreditVote Node API")
    app.state.service = service
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(cfg),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(VotingError)
    async def _voting_error(_request: Request, exc: VotingError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    app.include_router(governance.router)
    app.include_router(credits.router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
