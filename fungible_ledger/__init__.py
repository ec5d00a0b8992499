"""
Fungible Ledger

A multi-asset fungible token ledger: anyone can mint a token class, holders
transfer balances directly or through approved allowances. Balances are
conserved per token, never negative and never wrap.
"""

__version__ = "1.0.0"

from .amounts import AmountArithmetic, UIntArithmetic, DecimalArithmetic, U32, U64, U128, U256
from .errors import (
    LedgerError, CounterOverflow, ZeroAmount, InsufficientBalance, BalanceOverflow,
    InsufficientAllowance, InvalidAmount, Unauthenticated, UnresolvableAddress
)
from .events import NewToken, Transfer, Approval, EventKind, EventDispatcher, EventLog
from .ledger import FungibleLedger
from .runtime import Origin, FungibleModule, IdentityLookup, IndexedLookup, SignedOriginAuthenticator
from .storage import InMemoryStorage, SQLiteStorage
