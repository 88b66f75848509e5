"""
api/routes/v1/table_sessions.py -- Table-session REST endpoints.

Routes:
  POST /api/v1/table-sessions                    -- open a session (201)
  GET  /api/v1/table-sessions/{id}               -- read a session
  POST /api/v1/table-sessions/{id}/deactivate    -- end a session (one way)
  PUT  /api/v1/table-sessions/{id}/checkout      -- attach or clear a checkout

All routes require a bearer token. Path ids are parsed as UUIDs by FastAPI,
so a malformed id is a 422 before any service call. A well-formed id with no
row is 404.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import CheckoutUpdate, TableSessionCreate, TableSessionResponse
from auth.dependencies import get_current_admin
from sessions.models import TableSession
from sessions.service import TableSessionService

router = APIRouter(dependencies=[Depends(get_current_admin)])


def _service(request: Request) -> TableSessionService:
    return request.app.state.table_session_service


def _found(session: TableSession | None) -> TableSessionResponse:
    if session is None:
        raise HTTPException(
            status_code=404,
            detail={"code": "not_found", "message": "Table session not found."},
        )
    return TableSessionResponse.from_session(session)


@router.post("/table-sessions", response_model=TableSessionResponse, status_code=201)
def create_table_session(request: Request, body: TableSessionCreate) -> TableSessionResponse:
    """Open a new active session for a table and order.

    409 table_occupied only when ALLOW_CONCURRENT_TABLE_SESSIONS is false and
    the table already has an active session.
    """
    session = _service(request).create_session(body.table_id, body.order_id)
    return TableSessionResponse.from_session(session)


@router.get("/table-sessions/{session_id}", response_model=TableSessionResponse)
def get_table_session(request: Request, session_id: uuid.UUID) -> TableSessionResponse:
    return _found(_service(request).find_by_id(session_id))


@router.post("/table-sessions/{session_id}/deactivate", response_model=TableSessionResponse)
def deactivate_table_session(request: Request, session_id: uuid.UUID) -> TableSessionResponse:
    """Mark a session inactive. Deactivating twice is harmless."""
    return _found(_service(request).deactivate_session(session_id))


@router.put("/table-sessions/{session_id}/checkout", response_model=TableSessionResponse)
def set_table_session_checkout(
    request: Request,
    session_id: uuid.UUID,
    body: CheckoutUpdate,
) -> TableSessionResponse:
    """Attach body.checkout_id to the session, or detach with null. Works on inactive sessions too."""
    return _found(_service(request).set_checkout_id(session_id, body.checkout_id))
