"""
Tests for host runtime adapters

Tests origin authentication, address resolution and the dispatchable module
wrapping the ledger.
"""

import pytest

from fungible_ledger.errors import Unauthenticated, UnresolvableAddress, InsufficientAllowance
from fungible_ledger.events import EventLog, Transfer
from fungible_ledger.ledger import FungibleLedger
from fungible_ledger.runtime import (
    Origin, OriginKind, SignedOriginAuthenticator, IdentityLookup, IndexedLookup, FungibleModule
)
from fungible_ledger.storage import InMemoryStorage


class TestAuthentication:
    """Test origin checks"""

    def setup_method(self):
        self.auth = SignedOriginAuthenticator()

    def test_signed_origin(self):
        assert self.auth.ensure_signed(Origin.signed("alice")) == "alice"

    def test_unsigned_origins_rejected(self):
        """Test that root, none and foreign origins are not accounts"""
        for origin in (Origin.root(), Origin.none(), "alice", None, Origin(OriginKind.SIGNED, "")):
            with pytest.raises(Unauthenticated):
                self.auth.ensure_signed(origin)


class TestAddressResolution:
    """Test address lookups"""

    def test_identity_lookup(self):
        lookup = IdentityLookup()

        assert lookup.lookup("bob") == "bob"
        with pytest.raises(UnresolvableAddress):
            lookup.lookup("")
        with pytest.raises(UnresolvableAddress):
            lookup.lookup(42)

    def test_indexed_lookup(self):
        """Test that aliases resolve and raw accounts pass through"""
        lookup = IndexedLookup({"treasury": "acct-001"})

        assert lookup.lookup("treasury") == "acct-001"
        assert lookup.lookup("bob") == "bob"

    def test_indexed_lookup_without_raw(self):
        lookup = IndexedLookup(allow_raw=False)
        lookup.register("ops", "acct-002")

        assert lookup.lookup("ops") == "acct-002"
        with pytest.raises(UnresolvableAddress):
            lookup.lookup("bob")

    def test_register_and_unregister(self):
        lookup = IndexedLookup(allow_raw=False)
        lookup.register("ops", "acct-002")

        assert lookup.unregister("ops") is True
        assert lookup.unregister("ops") is False
        with pytest.raises(UnresolvableAddress):
            lookup.lookup("ops")
        with pytest.raises(ValueError):
            lookup.register("", "acct-003")


class TestFungibleModule:
    """Test the dispatchable ledger surface"""

    def setup_method(self):
        self.events = EventLog()
        self.ledger = FungibleLedger(InMemoryStorage(), event_sink=self.events)
        self.resolver = IndexedLookup({"bobby": "bob"})
        self.module = FungibleModule(self.ledger, resolver=self.resolver)
        self.alice = Origin.signed("alice")

    def test_create_token(self):
        token = self.module.create_token(self.alice, 500)

        assert token == 0
        assert self.ledger.balance_of(token, "alice") == 500

    def test_unsigned_calls_rejected(self):
        """Test that no operation runs without a signed origin"""
        token = self.module.create_token(self.alice, 500)

        with pytest.raises(Unauthenticated):
            self.module.create_token(Origin.none(), 1)
        with pytest.raises(Unauthenticated):
            self.module.transfer(Origin.root(), token, "bob", 1)
        with pytest.raises(Unauthenticated):
            self.module.approve(Origin.none(), token, "bob", 1)
        with pytest.raises(Unauthenticated):
            self.module.transfer_from(Origin.none(), token, "alice", "bob", 1)

        assert self.ledger.count() == 1
        assert len(self.events) == 1

    def test_transfer_resolves_recipient(self):
        token = self.module.create_token(self.alice, 500)
        self.module.transfer(self.alice, token, "bobby", 20)

        assert self.ledger.balance_of(token, "bob") == 20
        assert self.ledger.balance_of(token, "bobby") == 0
        assert self.events.last() == Transfer(token, "alice", "bob", 20)

    def test_approve_resolves_spender(self):
        token = self.module.create_token(self.alice, 500)
        self.module.approve(self.alice, token, "bobby", 30)

        assert self.ledger.allowance_of(token, "alice", "bob") == 30

    def test_unresolvable_recipient(self):
        module = FungibleModule(self.ledger, resolver=IndexedLookup(allow_raw=False))
        token = module.create_token(self.alice, 500)

        with pytest.raises(UnresolvableAddress):
            module.transfer(self.alice, token, "nobody", 5)

        assert self.ledger.balance_of(token, "alice") == 500

    def test_transfer_from_uses_accounts_directly(self):
        """Test that delegated transfers take concrete accounts, not aliases"""
        token = self.module.create_token(self.alice, 500)
        self.module.approve(self.alice, token, "bob", 50)
        bob = Origin.signed("bob")

        self.module.transfer_from(bob, token, "alice", "bobby", 10)
        assert self.ledger.balance_of(token, "bobby") == 10
        assert self.ledger.allowance_of(token, "alice", "bob") == 40

        with pytest.raises(InsufficientAllowance):
            self.module.transfer_from(Origin.signed("bobby"), token, "alice", "bob", 10)

    def test_default_collaborators(self):
        module = FungibleModule(self.ledger)

        assert isinstance(module.authenticator, SignedOriginAuthenticator)
        assert isinstance(module.resolver, IdentityLookup)
