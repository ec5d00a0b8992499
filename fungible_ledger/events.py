"""
Event System Module

Ledger events are a plain tagged union (NewToken | Transfer | Approval)
handed to an injected sink, one per successful operation. The dispatcher
fans a single sink out to any number of subscribers using a
publish/subscribe mechanism.
"""

from enum import Enum
from typing import Callable, Dict, List, Any, Optional, Union
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
import logging
from threading import RLock


class EventKind(Enum):
    """Kinds of events the ledger emits"""
    NEW_TOKEN = "NewToken"
    TRANSFER = "Transfer"
    APPROVAL = "Approval"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _amount_text(amount: Any) -> str:
    """Plain decimal string, never exponent notation"""
    if isinstance(amount, Decimal):
        return format(amount, "f")
    return str(amount)


@dataclass(frozen=True)
class NewToken:
    """A token class was created with its whole supply credited to `account`"""
    token_id: int
    account: str
    amount: Any
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    kind = EventKind.NEW_TOKEN

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'token_id': self.token_id,
            'account': self.account,
            'amount': _amount_text(self.amount),
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Transfer:
    """`amount` moved from `from_account` to `to_account`"""
    token_id: int
    from_account: str
    to_account: str
    amount: Any
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    kind = EventKind.TRANSFER

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'token_id': self.token_id,
            'from': self.from_account,
            'to': self.to_account,
            'amount': _amount_text(self.amount),
            'timestamp': self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class Approval:
    """`owner` set the allowance of `spender` to `amount`"""
    token_id: int
    owner: str
    spender: str
    amount: Any
    timestamp: datetime = field(default_factory=_utcnow, compare=False)

    kind = EventKind.APPROVAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'token_id': self.token_id,
            'owner': self.owner,
            'spender': self.spender,
            'amount': _amount_text(self.amount),
            'timestamp': self.timestamp.isoformat(),
        }


LedgerEvent = Union[NewToken, Transfer, Approval]
EventSink = Callable[[LedgerEvent], None]


def event_from_dict(data: Dict[str, Any], decode: Callable[[str], Any] = int) -> LedgerEvent:
    """
    Rebuild an event from its dict form.

    Args:
        data: Output of an event's to_dict()
        decode: Parser for the amount string (the ledger's Amount decoder)
    """
    kind = EventKind(data['kind'])
    timestamp = datetime.fromisoformat(data['timestamp']) if 'timestamp' in data else _utcnow()
    amount = decode(data['amount'])
    token_id = int(data['token_id'])

    if kind == EventKind.NEW_TOKEN:
        return NewToken(token_id, data['account'], amount, timestamp)
    if kind == EventKind.TRANSFER:
        return Transfer(token_id, data['from'], data['to'], amount, timestamp)
    return Approval(token_id, data['owner'], data['spender'], amount, timestamp)


def discard_event(event: LedgerEvent) -> None:
    """Sink for hosts that do not observe events"""


class EventDispatcher:
    """Central event dispatcher using publish/subscribe"""

    def __init__(self):
        self._handlers: Dict[EventKind, List[Callable]] = {}
        self._global_handlers: List[Callable] = []  # catch-all handlers
        self._lock = RLock()
        self.logger = logging.getLogger("fungible.events")

    @staticmethod
    def _name(handler: Callable) -> str:
        return getattr(handler, "__name__", repr(handler))

    def subscribe(self, kind: EventKind, handler: Callable) -> None:
        """Subscribe to a specific event kind"""
        with self._lock:
            self._handlers.setdefault(kind, []).append(handler)
            self.logger.debug(f"Subscribed handler {self._name(handler)} to {kind.value}")

    def subscribe_all(self, handler: Callable) -> None:
        """Subscribe to ALL events"""
        with self._lock:
            self._global_handlers.append(handler)
            self.logger.debug(f"Subscribed global handler {self._name(handler)}")

    def unsubscribe(self, kind: EventKind, handler: Callable) -> None:
        """Unsubscribe from a specific event kind"""
        with self._lock:
            try:
                self._handlers.get(kind, []).remove(handler)
                self.logger.debug(f"Unsubscribed handler {self._name(handler)} from {kind.value}")
            except ValueError:
                self.logger.warning(f"Handler {self._name(handler)} was not subscribed to {kind.value}")

    def unsubscribe_all(self, handler: Callable) -> None:
        """Unsubscribe a catch-all handler"""
        with self._lock:
            try:
                self._global_handlers.remove(handler)
                self.logger.debug(f"Unsubscribed global handler {self._name(handler)}")
            except ValueError:
                self.logger.warning(f"Global handler {self._name(handler)} was not subscribed")

    def publish(self, event: LedgerEvent) -> None:
        """Publish event to all subscribers"""
        with self._lock:
            self.logger.debug(f"Publishing event {event.kind.value} for token {event.token_id}")

            handlers = list(self._handlers.get(event.kind, [])) + list(self._global_handlers)
            for handler in handlers:
                try:
                    handler(event)
                except Exception as e:
                    # Subscribers never fail the publisher
                    self.logger.error(f"Error in event handler {self._name(handler)} for {event.kind.value}: {e}")

    __call__ = publish

    def clear(self) -> None:
        """Clear all handlers"""
        with self._lock:
            self._handlers.clear()
            self._global_handlers.clear()
            self.logger.info("All event handlers cleared")

    def get_handler_count(self, kind: Optional[EventKind] = None) -> int:
        """Get count of handlers for a specific event kind or all"""
        with self._lock:
            if kind:
                return len(self._handlers.get(kind, []))
            total = sum(len(handlers) for handlers in self._handlers.values())
            return total + len(self._global_handlers)


class EventLog:
    """Recording sink that keeps every event in emission order"""

    def __init__(self, capacity: Optional[int] = None):
        self._events: List[LedgerEvent] = []
        self._capacity = capacity
        self._lock = RLock()

    def __call__(self, event: LedgerEvent) -> None:
        with self._lock:
            self._events.append(event)
            if self._capacity is not None and len(self._events) > self._capacity:
                del self._events[: len(self._events) - self._capacity]

    def __len__(self) -> int:
        return len(self._events)

    def events(self, kind: Optional[EventKind] = None) -> List[LedgerEvent]:
        with self._lock:
            if kind is None:
                return list(self._events)
            return [e for e in self._events if e.kind == kind]

    def for_token(self, token_id: int) -> List[LedgerEvent]:
        with self._lock:
            return [e for e in self._events if e.token_id == token_id]

    def last(self) -> Optional[LedgerEvent]:
        with self._lock:
            return self._events[-1] if self._events else None

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
