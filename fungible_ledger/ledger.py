"""
Fungible Token Ledger

Multi-asset balance/allowance state machine. Anyone can mint a new token
class; holders move balances directly (transfer) or through a delegated
allowance (approve / transfer_from).

State lives in four keyed tables of the storage backend:

    ledger_meta   "count"                     -> next TokenId to assign
    total_supply  [token_id]                  -> Amount
    balances      [token_id, account]         -> Amount
    allowances    [token_id, owner, spender]  -> Amount

Absent keys read as zero. Every operation runs under one lock and one
storage transaction and either commits completely and emits exactly one
event, or raises a LedgerError and changes nothing.
"""

import json
import threading
from contextlib import contextmanager
from typing import Any, Dict, Optional

from .amounts import AmountArithmetic, UIntArithmetic, U32, U128
from .errors import (
    LedgerError, CounterOverflow, ZeroAmount, InsufficientBalance,
    BalanceOverflow, InsufficientAllowance, InvalidAmount
)
from .events import NewToken, Transfer, Approval, LedgerEvent, EventSink, discard_event
from .logging_config import get_logger, log_action
from .storage import StorageInterface, InMemoryStorage


META_TABLE = "ledger_meta"
SUPPLY_TABLE = "total_supply"
BALANCE_TABLE = "balances"
ALLOWANCE_TABLE = "allowances"

COUNT_KEY = "count"


def _key(*parts: Any) -> str:
    """Composite record id; JSON arrays keep account strings from colliding"""
    return json.dumps(list(parts), separators=(',', ':'))


class FungibleLedger:
    """
    Ledger of fungible token classes, balances and allowances.

    Args:
        storage: Backend owning the ledger tables (in-memory when omitted)
        amounts: Arithmetic policy for balances, supplies and allowances
        token_ids: Arithmetic policy for token identifiers
        event_sink: Callable receiving one event per successful operation
    """

    def __init__(
        self,
        storage: Optional[StorageInterface] = None,
        amounts: Optional[AmountArithmetic] = None,
        token_ids: Optional[UIntArithmetic] = None,
        event_sink: Optional[EventSink] = None
    ):
        self.storage = storage if storage is not None else InMemoryStorage()
        self.amounts = amounts if amounts is not None else U128
        self.token_ids = token_ids if token_ids is not None else U32
        self._event_sink = event_sink if event_sink is not None else discard_event
        self._lock = threading.RLock()
        self.logger = get_logger("fungible.ledger")

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    def count(self) -> int:
        """Next token id to be assigned (= number of tokens ever created)"""
        record = self.storage.load(META_TABLE, COUNT_KEY)
        return int(record['value']) if record else 0

    def total_supply(self, token_id: int) -> Any:
        record = self.storage.load(SUPPLY_TABLE, _key(token_id))
        return self.amounts.decode(record['amount']) if record else self.amounts.zero()

    def balance_of(self, token_id: int, account: str) -> Any:
        record = self.storage.load(BALANCE_TABLE, _key(token_id, account))
        return self.amounts.decode(record['amount']) if record else self.amounts.zero()

    def allowance_of(self, token_id: int, owner: str, spender: str) -> Any:
        record = self.storage.load(ALLOWANCE_TABLE, _key(token_id, owner, spender))
        return self.amounts.decode(record['amount']) if record else self.amounts.zero()

    def balances(self, token_id: int) -> Dict[str, Any]:
        """Every stored balance of a token, keyed by account (zero entries included)"""
        return {
            record['account']: self.amounts.decode(record['amount'])
            for record in self.storage.find(BALANCE_TABLE, {'token_id': token_id})
        }

    # ------------------------------------------------------------------
    # Storage writers
    # ------------------------------------------------------------------

    def _set_count(self, value: int) -> None:
        self.storage.save(META_TABLE, COUNT_KEY, {'value': value})

    def _set_total_supply(self, token_id: int, amount: Any) -> None:
        self.storage.save(SUPPLY_TABLE, _key(token_id), {
            'token_id': token_id,
            'amount': self.amounts.encode(amount)
        })

    def _set_balance(self, token_id: int, account: str, amount: Any) -> None:
        self.storage.save(BALANCE_TABLE, _key(token_id, account), {
            'token_id': token_id,
            'account': account,
            'amount': self.amounts.encode(amount)
        })

    def _set_allowance(self, token_id: int, owner: str, spender: str, amount: Any) -> None:
        self.storage.save(ALLOWANCE_TABLE, _key(token_id, owner, spender), {
            'token_id': token_id,
            'owner': owner,
            'spender': spender,
            'amount': self.amounts.encode(amount)
        })

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, action: str, caller: str):
        """One atomic step; failures are logged and re-raised untouched"""
        try:
            with self.storage.atomic():
                yield
        except LedgerError as e:
            log_action(
                self.logger, "warning", f"{action} rejected: {e.code}",
                account=caller, action=action, extra=e.to_dict()
            )
            raise

    def _check_token_id(self, token_id: int) -> int:
        try:
            return self.token_ids.validate(token_id)
        except InvalidAmount:
            raise InvalidAmount("invalid token id", data={"token_id": repr(token_id)})

    def create_token(self, caller: str, supply: Any) -> int:
        """
        Mint a new token class with its whole supply held by `caller`.

        Returns:
            The newly assigned token id

        Raises:
            CounterOverflow: if the token id space is exhausted
            InvalidAmount: if `supply` is not a valid Amount
        """
        with self._lock:
            with self._operation("create_token", caller):
                supply = self.amounts.validate(supply)
                token_id = self.count()
                next_id = self.token_ids.checked_add(token_id, 1)
                if next_id is None:
                    raise CounterOverflow(data={"count": token_id})

                self._set_balance(token_id, caller, supply)
                self._set_total_supply(token_id, supply)
                self._set_count(next_id)

            log_action(
                self.logger, "info", "Token created",
                account=caller, action="create_token", resource=f"token:{token_id}",
                extra={"token_id": token_id, "supply": self.amounts.encode(supply)}
            )
            self._emit(NewToken(token_id, caller, supply))
            return token_id

    def transfer(self, caller: str, token_id: int, to: str, amount: Any) -> None:
        """
        Move `amount` of a token from `caller` to `to`.

        Raises:
            ZeroAmount, InsufficientBalance, BalanceOverflow, InvalidAmount
        """
        with self._lock:
            with self._operation("transfer", caller):
                token_id = self._check_token_id(token_id)
                amount = self.amounts.validate(amount)
                event = self._make_transfer(token_id, caller, to, amount)

            log_action(
                self.logger, "info", "Transfer completed",
                account=caller, action="transfer", resource=f"token:{token_id}",
                extra={"to": to, "amount": self.amounts.encode(amount)}
            )
            self._emit(event)

    def approve(self, caller: str, token_id: int, spender: str, value: Any) -> None:
        """
        Set the allowance of `spender` over `caller`'s balance to `value`.

        Replaces any previous allowance. No balance check is made here;
        the allowance is enforced when it is spent.
        """
        with self._lock:
            with self._operation("approve", caller):
                token_id = self._check_token_id(token_id)
                value = self.amounts.validate(value)
                self._set_allowance(token_id, caller, spender, value)

            log_action(
                self.logger, "info", "Allowance set",
                account=caller, action="approve", resource=f"token:{token_id}",
                extra={"spender": spender, "value": self.amounts.encode(value)}
            )
            self._emit(Approval(token_id, caller, spender, value))

    def transfer_from(self, caller: str, token_id: int, from_account: str, to: str, value: Any) -> None:
        """
        Spend `caller`'s allowance over `from_account` by moving `value` to `to`.

        The allowance is decremented only once the transfer itself succeeded.

        Raises:
            InsufficientAllowance: if `value` exceeds the remaining allowance
            ZeroAmount, InsufficientBalance, BalanceOverflow: from the transfer
        """
        with self._lock:
            with self._operation("transfer_from", caller):
                token_id = self._check_token_id(token_id)
                value = self.amounts.validate(value)

                allowance = self.allowance_of(token_id, from_account, caller)
                updated_allowance = self.amounts.checked_sub(allowance, value)
                if updated_allowance is None:
                    raise InsufficientAllowance(data={
                        "allowance": self.amounts.encode(allowance),
                        "requested": self.amounts.encode(value)
                    })

                event = self._make_transfer(token_id, from_account, to, value)

                self._set_allowance(token_id, from_account, caller, updated_allowance)

            log_action(
                self.logger, "info", "Delegated transfer completed",
                account=caller, action="transfer_from", resource=f"token:{token_id}",
                extra={
                    "from": from_account,
                    "to": to,
                    "value": self.amounts.encode(value),
                    "remaining_allowance": self.amounts.encode(updated_allowance)
                }
            )
            self._emit(event)

    def _make_transfer(self, token_id: int, from_account: str, to: str, amount: Any) -> Transfer:
        """
        Shared transfer primitive. All checks run before the first write.

        Returns:
            The Transfer event to emit once the enclosing operation commits
        """
        if self.amounts.is_zero(amount):
            raise ZeroAmount()

        from_balance = self.balance_of(token_id, from_account)
        new_from_balance = self.amounts.checked_sub(from_balance, amount)
        if new_from_balance is None:
            raise InsufficientBalance(data={
                "balance": self.amounts.encode(from_balance),
                "requested": self.amounts.encode(amount)
            })

        # Self-transfer credits the already-debited balance
        to_balance = new_from_balance if to == from_account else self.balance_of(token_id, to)
        new_to_balance = self.amounts.checked_add(to_balance, amount)
        if new_to_balance is None:
            raise BalanceOverflow(data={"account": to})

        self._set_balance(token_id, from_account, new_from_balance)
        self._set_balance(token_id, to, new_to_balance)

        return Transfer(token_id, from_account, to, amount)

    def _emit(self, event: LedgerEvent) -> None:
        try:
            self._event_sink(event)
        except Exception as e:
            self.logger.error(f"Error delivering event {event.kind.value}: {e}")
