"""
Host Runtime Adapters

The ledger itself trusts its `caller` argument. Hosts reach it through
FungibleModule, which authenticates an origin and resolves caller-supplied
addresses before invoking the ledger. Both collaborators are injected:

- Authenticator:   origin -> Account, or Unauthenticated
- AddressResolver: address source -> Account, or UnresolvableAddress
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional
import threading

from .errors import Unauthenticated, UnresolvableAddress
from .ledger import FungibleLedger
from .logging_config import get_logger


class OriginKind(Enum):
    SIGNED = "signed"
    ROOT = "root"
    NONE = "none"


@dataclass(frozen=True)
class Origin:
    """Who dispatched a call, as reported by the host"""
    kind: OriginKind
    account: Optional[str] = None

    @classmethod
    def signed(cls, account: str) -> 'Origin':
        return cls(OriginKind.SIGNED, account)

    @classmethod
    def root(cls) -> 'Origin':
        return cls(OriginKind.ROOT)

    @classmethod
    def none(cls) -> 'Origin':
        return cls(OriginKind.NONE)


class Authenticator(ABC):
    """Turns an origin into an authenticated account"""

    @abstractmethod
    def ensure_signed(self, origin: Any) -> str:
        """Raises Unauthenticated when the origin carries no account"""


class SignedOriginAuthenticator(Authenticator):
    """Accepts only Origin.signed(account) with a non-empty account"""

    def ensure_signed(self, origin: Any) -> str:
        if not isinstance(origin, Origin) or origin.kind != OriginKind.SIGNED:
            raise Unauthenticated(data={"origin": repr(origin)})
        if not isinstance(origin.account, str) or not origin.account:
            raise Unauthenticated("signed origin has no account")
        return origin.account


class AddressResolver(ABC):
    """Turns a caller-supplied address into a concrete account"""

    @abstractmethod
    def lookup(self, source: Any) -> str:
        """Raises UnresolvableAddress when no account matches"""


class IdentityLookup(AddressResolver):
    """The address is the account itself"""

    def lookup(self, source: Any) -> str:
        if not isinstance(source, str) or not source:
            raise UnresolvableAddress(data={"source": repr(source)})
        return source


class IndexedLookup(AddressResolver):
    """
    Alias table in front of raw accounts.

    A registered alias resolves to its account; any other non-empty string
    is accepted as a raw account only if `allow_raw` is set.
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None, allow_raw: bool = True):
        self._aliases: Dict[str, str] = dict(aliases or {})
        self._allow_raw = allow_raw
        self._lock = threading.RLock()

    def register(self, alias: str, account: str) -> None:
        if not alias or not account:
            raise ValueError("alias and account must be non-empty")
        with self._lock:
            self._aliases[alias] = account

    def unregister(self, alias: str) -> bool:
        with self._lock:
            return self._aliases.pop(alias, None) is not None

    def lookup(self, source: Any) -> str:
        if not isinstance(source, str) or not source:
            raise UnresolvableAddress(data={"source": repr(source)})
        with self._lock:
            if source in self._aliases:
                return self._aliases[source]
        if self._allow_raw:
            return source
        raise UnresolvableAddress(data={"source": source})


class FungibleModule:
    """
    Dispatchable surface of the ledger: authenticate, resolve, invoke.

    Args:
        ledger: The ledger receiving calls
        authenticator: Origin check (signed origins by default)
        resolver: Address lookup for `to` and `spender` (identity by default)
    """

    def __init__(
        self,
        ledger: FungibleLedger,
        authenticator: Optional[Authenticator] = None,
        resolver: Optional[AddressResolver] = None
    ):
        self.ledger = ledger
        self.authenticator = authenticator or SignedOriginAuthenticator()
        self.resolver = resolver or IdentityLookup()
        self.logger = get_logger("fungible.runtime")

    def _ensure_signed(self, origin: Any, call: str) -> str:
        try:
            return self.authenticator.ensure_signed(origin)
        except Unauthenticated:
            self.logger.warning(f"Rejected unsigned origin for {call}")
            raise

    def create_token(self, origin: Any, supply: Any) -> int:
        sender = self._ensure_signed(origin, "create_token")
        return self.ledger.create_token(sender, supply)

    def transfer(self, origin: Any, token_id: int, to: Any, amount: Any) -> None:
        sender = self._ensure_signed(origin, "transfer")
        to = self.resolver.lookup(to)
        self.ledger.transfer(sender, token_id, to, amount)

    def approve(self, origin: Any, token_id: int, spender: Any, value: Any) -> None:
        sender = self._ensure_signed(origin, "approve")
        spender = self.resolver.lookup(spender)
        self.ledger.approve(sender, token_id, spender, value)

    def transfer_from(self, origin: Any, token_id: int, from_account: str, to: str, value: Any) -> None:
        # from/to are concrete accounts here, not lookup sources
        sender = self._ensure_signed(origin, "transfer_from")
        self.ledger.transfer_from(sender, token_id, from_account, to, value)
