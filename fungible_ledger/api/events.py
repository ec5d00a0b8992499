"""
Event history and audit endpoints
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends, Query

from .system import LedgerSystem, get_ledger_system
from ..events import EventKind


router = APIRouter()


@router.get("/events")
async def list_events(
    token_id: Optional[int] = None,
    kind: Optional[str] = None,
    limit: int = Query(100, ge=1, le=10_000),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Recent ledger events, oldest first"""
    if kind is not None:
        try:
            event_kind = EventKind(kind)
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown event kind: {kind}")
        events = system.event_log.events(event_kind)
    else:
        events = system.event_log.events()

    if token_id is not None:
        events = [e for e in events if e.token_id == token_id]

    return {"events": [e.to_dict() for e in events[-limit:]]}


def _require_audit(system: LedgerSystem):
    if system.audit_trail is None:
        raise HTTPException(status_code=404, detail="Audit logging is disabled")
    return system.audit_trail


@router.get("/audit/events")
async def list_audit_records(
    token_id: Optional[int] = None,
    limit: Optional[int] = Query(None, ge=1),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Hash-chained audit records"""
    audit_trail = _require_audit(system)
    if token_id is not None:
        records = audit_trail.get_events_for_token(token_id, limit=limit)
    else:
        records = audit_trail.get_all_events(limit=limit)
    return {"records": [r.to_dict() for r in records]}


@router.get("/audit/verify")
async def verify_audit_chain(system: LedgerSystem = Depends(get_ledger_system)):
    """Recompute every hash and check chain continuity"""
    return _require_audit(system).verify_integrity()
