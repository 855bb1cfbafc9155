"""FastAPI server for balances, notifications and settlement requests."""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from sidebet.bets.timing import parse_timestamp
from sidebet.config import Settings, get_settings
from sidebet.ledger import (
    BalanceSummary,
    LedgerIntegrityError,
    SettlementError,
    load_balances,
    request_settlement,
)
from sidebet.notifications import NotificationDispatcher
from sidebet.storage import (
    COLLECTION_NOTIFICATIONS,
    COLLECTION_SETTLEMENTS,
    DocumentNotFoundError,
    DocumentStore,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class SettlementRequest(BaseModel):
    counterparty_id: str


def _is_unread(data: dict[str, Any]) -> bool:
    # Trigger notifications carry isRead, panel notifications carry read
    if "isRead" in data:
        return not data["isRead"]
    return not data.get("read", False)


def create_app(
    store: DocumentStore,
    settings: Settings | None = None,
    dispatcher: NotificationDispatcher | None = None,
) -> FastAPI:
    """Build the API around a document store.

    Args:
        store: Where bets, notifications and settlements live
        settings: Defaults to ``get_settings()``
        dispatcher: When given, settlement requests are dispatched in-process.
            Leave unset on Firestore, where the settlement trigger does it.
    """
    settings = settings or get_settings()

    app = FastAPI(title="SideBet API", version="0.1.0")
    app.state.store = store
    app.state.settings = settings
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def _balances(request: Request, user_id: str) -> BalanceSummary:
        try:
            return load_balances(
                request.app.state.store,
                user_id,
                integrity_policy=request.app.state.settings.balances.integrity_policy,
            )
        except LedgerIntegrityError as e:
            raise HTTPException(status_code=422, detail=str(e))

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    @app.get("/api/users/{user_id}/balances")
    def get_balances(user_id: str, request: Request):
        """Owed-to-you / you-owe breakdown for a user."""
        return _balances(request, user_id).model_dump(mode="json")

    @app.get("/api/users/{user_id}/notifications")
    def list_notifications(user_id: str, request: Request, unread_only: bool = False):
        """A user's notifications, newest first."""
        docs = request.app.state.store.query(
            COLLECTION_NOTIFICATIONS, [("userId", "==", user_id)]
        )
        results = [
            {"id": doc.id, **doc.data}
            for doc in docs
            if not unread_only or _is_unread(doc.data)
        ]
        results.sort(
            key=lambda n: parse_timestamp(n.get("createdAt")) or _EPOCH,
            reverse=True,
        )
        return results

    @app.post("/api/users/{user_id}/settlements", status_code=201)
    def create_settlement(user_id: str, body: SettlementRequest, request: Request):
        """Ask a counterparty who owes this user to settle up."""
        summary = _balances(request, user_id)
        balance = summary.counterparty(body.counterparty_id)
        if balance is None:
            raise HTTPException(
                status_code=422,
                detail=f"No open balance between {user_id} and {body.counterparty_id}",
            )

        store = request.app.state.store
        try:
            settlement_id = request_settlement(store, balance, user_id)
        except SettlementError as e:
            raise HTTPException(status_code=422, detail=str(e))

        local_dispatcher = request.app.state.dispatcher
        if local_dispatcher is not None:
            data = store.get(COLLECTION_SETTLEMENTS, settlement_id) or {}
            logger.info(str(local_dispatcher.on_settlement_created(settlement_id, data)))

        return {"id": settlement_id, "amount": balance.amount}

    @app.exception_handler(DocumentNotFoundError)
    async def not_found_handler(request: Request, exc: DocumentNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    return app
