"""
Ledger system wiring and request dependencies
"""

from typing import Optional

from fastapi import Header

from ..amounts import amount_from_config, token_id_from_config
from ..audit import AuditTrail
from ..config import LedgerConfig, get_config
from ..events import EventDispatcher, EventLog
from ..ledger import FungibleLedger
from ..runtime import FungibleModule, IndexedLookup, Origin
from ..storage import StorageInterface, create_storage


class LedgerSystem:
    """Ledger with storage, arithmetic, event fan-out and audit trail initialized"""

    def __init__(self, config: Optional[LedgerConfig] = None, storage: Optional[StorageInterface] = None):
        self.config = config or get_config()

        self.storage = storage if storage is not None else create_storage(self.config)
        self.amounts = amount_from_config(self.config)
        self.token_ids = token_id_from_config(self.config)

        # Every event goes to the dispatcher; the log and audit trail subscribe to it
        self.dispatcher = EventDispatcher()
        self.event_log = EventLog(capacity=10_000)
        self.dispatcher.subscribe_all(self.event_log)

        self.audit_trail: Optional[AuditTrail] = None
        if self.config.enable_audit_logging:
            self.audit_trail = AuditTrail(self.storage)
            self.dispatcher.subscribe_all(self.audit_trail)

        self.ledger = FungibleLedger(
            self.storage, self.amounts, self.token_ids, event_sink=self.dispatcher
        )
        self.resolver = IndexedLookup()
        self.module = FungibleModule(self.ledger, resolver=self.resolver)

    def close(self) -> None:
        self.storage.close()


_system: Optional[LedgerSystem] = None


def get_ledger_system() -> LedgerSystem:
    """Dependency returning the process-wide ledger system"""
    global _system
    if _system is None:
        _system = LedgerSystem()
    return _system


def set_ledger_system(system: Optional[LedgerSystem]) -> None:
    global _system
    _system = system


def get_origin(x_ledger_account: Optional[str] = Header(None)) -> Origin:
    """The calling account arrives in the X-Ledger-Account header"""
    if x_ledger_account:
        return Origin.signed(x_ledger_account)
    return Origin.none()
