"""
Token endpoints
"""

from fastapi import APIRouter, HTTPException, Depends

from .schemas import CreateTokenRequest, TransferRequest, ApproveRequest, TransferFromRequest
from .system import LedgerSystem, get_ledger_system, get_origin
from ..errors import LedgerError
from ..runtime import Origin


router = APIRouter()


STATUS_BY_CODE = {
    "UNAUTHENTICATED": 401,
    "UNRESOLVABLE_ADDRESS": 404,
    "ZERO_AMOUNT": 400,
    "INVALID_AMOUNT": 400,
    "INSUFFICIENT_BALANCE": 409,
    "INSUFFICIENT_ALLOWANCE": 409,
    "BALANCE_OVERFLOW": 409,
    "COUNTER_OVERFLOW": 409,
}


def to_http_error(error: LedgerError) -> HTTPException:
    """Map a ledger failure to an HTTP error carrying its code and message"""
    return HTTPException(
        status_code=STATUS_BY_CODE.get(error.code, 400),
        detail={"code": error.code, "message": error.message}
    )


@router.post("", status_code=201)
async def create_token(
    request: CreateTokenRequest,
    origin: Origin = Depends(get_origin),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Create a token class; the caller receives the whole supply"""
    try:
        supply = system.amounts.parse(request.supply)
        token_id = system.module.create_token(origin, supply)
    except LedgerError as e:
        raise to_http_error(e)

    return {
        "token_id": token_id,
        "owner": origin.account,
        "supply": system.amounts.encode(supply)
    }


@router.get("/count")
async def get_token_count(system: LedgerSystem = Depends(get_ledger_system)):
    """Number of tokens created so far (the next token id)"""
    return {"count": system.ledger.count()}


@router.post("/{token_id}/transfer")
async def transfer(
    token_id: int,
    request: TransferRequest,
    origin: Origin = Depends(get_origin),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Transfer from the caller's balance"""
    try:
        amount = system.amounts.parse(request.amount)
        system.module.transfer(origin, token_id, request.to, amount)
    except LedgerError as e:
        raise to_http_error(e)

    return {"token_id": token_id, "message": "Transfer completed"}


@router.post("/{token_id}/approve")
async def approve(
    token_id: int,
    request: ApproveRequest,
    origin: Origin = Depends(get_origin),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Set a spender's allowance over the caller's balance"""
    try:
        value = system.amounts.parse(request.value)
        system.module.approve(origin, token_id, request.spender, value)
    except LedgerError as e:
        raise to_http_error(e)

    return {"token_id": token_id, "message": "Allowance set"}


@router.post("/{token_id}/transfer-from")
async def transfer_from(
    token_id: int,
    request: TransferFromRequest,
    origin: Origin = Depends(get_origin),
    system: LedgerSystem = Depends(get_ledger_system)
):
    """Spend the caller's allowance over another account"""
    try:
        value = system.amounts.parse(request.value)
        system.module.transfer_from(origin, token_id, request.from_account, request.to, value)
    except LedgerError as e:
        raise to_http_error(e)

    return {"token_id": token_id, "message": "Delegated transfer completed"}


@router.get("/{token_id}/supply")
async def get_total_supply(token_id: int, system: LedgerSystem = Depends(get_ledger_system)):
    return {
        "token_id": token_id,
        "total_supply": system.amounts.encode(system.ledger.total_supply(token_id))
    }


@router.get("/{token_id}/balances/{account}")
async def get_balance(token_id: int, account: str, system: LedgerSystem = Depends(get_ledger_system)):
    return {
        "token_id": token_id,
        "account": account,
        "balance": system.amounts.encode(system.ledger.balance_of(token_id, account))
    }


@router.get("/{token_id}/allowances/{owner}/{spender}")
async def get_allowance(
    token_id: int,
    owner: str,
    spender: str,
    system: LedgerSystem = Depends(get_ledger_system)
):
    return {
        "token_id": token_id,
        "owner": owner,
        "spender": spender,
        "allowance": system.amounts.encode(system.ledger.allowance_of(token_id, owner, spender))
    }
