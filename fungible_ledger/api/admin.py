"""
Address alias administration
"""

from fastapi import APIRouter, HTTPException, Depends

from .schemas import RegisterAliasRequest
from .system import LedgerSystem, get_ledger_system


router = APIRouter()


@router.post("/aliases", status_code=201)
async def register_alias(
    request: RegisterAliasRequest,
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Make `alias` resolve to `account` for transfer and approve"""
    try:
        system.resolver.register(request.alias, request.account)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"alias": request.alias, "account": request.account}


@router.delete("/aliases/{alias}")
async def remove_alias(alias: str, system: LedgerSystem = Depends(get_ledger_system)):
    if not system.resolver.unregister(alias):
        raise HTTPException(status_code=404, detail="Alias not found")
    return {"alias": alias, "message": "Alias removed"}
