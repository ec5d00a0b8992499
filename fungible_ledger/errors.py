"""
Ledger Error Module

Typed failures raised by ledger operations. Every error aborts the operation
with no state change and no event. Errors subclass ValueError so callers that
treat bad input generically keep working.

Hierarchy
---------
LedgerError
 ├─ CounterOverflow       : token identifier space exhausted
 ├─ ZeroAmount            : transfer of zero requested
 ├─ InsufficientBalance   : source balance below transfer amount
 ├─ BalanceOverflow       : crediting the destination would overflow
 ├─ InsufficientAllowance : delegated amount above remaining allowance
 ├─ InvalidAmount         : value outside the configured Amount domain
 ├─ Unauthenticated       : origin is not a signed account (host supplied)
 └─ UnresolvableAddress   : address source has no account (host supplied)
"""

from typing import Any, Dict, Optional


class LedgerError(ValueError):
    """
    Base ledger error.

    Attributes:
        message: Human-readable explanation
        code:    Stable machine code (e.g. 'ZERO_AMOUNT')
        data:    Optional JSON-safe details
    """

    code = "LEDGER_ERROR"
    default_message = "ledger error"

    def __init__(self, message: Optional[str] = None, *, data: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.data:
            return f"{self.code}: {self.message} ({self.data})"
        return f"{self.code}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-safe dict for logs and API responses"""
        out: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


class CounterOverflow(LedgerError):
    code = "COUNTER_OVERFLOW"
    default_message = "overflow when adding new token"


class ZeroAmount(LedgerError):
    code = "ZERO_AMOUNT"
    default_message = "transfer amount should be non-zero"


class InsufficientBalance(LedgerError):
    code = "INSUFFICIENT_BALANCE"
    default_message = "origin account balance must be greater than or equal to the transfer amount"


class BalanceOverflow(LedgerError):
    code = "BALANCE_OVERFLOW"
    default_message = "overflow when crediting destination balance"


class InsufficientAllowance(LedgerError):
    code = "INSUFFICIENT_ALLOWANCE"
    default_message = "underflow in calculating allowance"


class InvalidAmount(LedgerError):
    code = "INVALID_AMOUNT"
    default_message = "amount outside the supported range"


class Unauthenticated(LedgerError):
    code = "UNAUTHENTICATED"
    default_message = "origin is not a signed account"


class UnresolvableAddress(LedgerError):
    code = "UNRESOLVABLE_ADDRESS"
    default_message = "address could not be resolved to an account"


__all__ = [
    "LedgerError",
    "CounterOverflow",
    "ZeroAmount",
    "InsufficientBalance",
    "BalanceOverflow",
    "InsufficientAllowance",
    "InvalidAmount",
    "Unauthenticated",
    "UnresolvableAddress",
]
