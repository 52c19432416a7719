"""Shared fixtures: an in-memory stand-in for aptos_sdk's RestClient."""

import itertools

import pytest

from aptosfeed.wallet import FeedWallet

# Public throwaway testnet key.
TEST_PRIVATE_KEY = "0x5a0fa5377c25b0187bffa20d577715c53067c6d929e261343e7915da849f266d"


class FakeRestClient:
    """Records submitted entry functions; every tx succeeds unless its function is in `fail`."""

    def __init__(self, fail=(), pending_polls=0, resources=None, balance=0):
        self.fail = set(fail)
        self.pending_polls = pending_polls
        self.resources = resources or {}
        self.balance = balance
        self.submitted = []
        self.transfers = []
        self.closed = False
        self._status = {}
        self._counter = itertools.count(1)

    def _new_hash(self, ok):
        txn_hash = f"0x{next(self._counter):064x}"
        self._status[txn_hash] = {"polls": self.pending_polls, "success": ok}
        return txn_hash

    def add_committed(self, txn_hash, ok=True):
        self._status[txn_hash] = {"polls": 0, "success": ok}

    async def create_bcs_signed_transaction(self, sender, payload):
        return {"sender": sender, "payload": payload}

    async def submit_bcs_transaction(self, signed):
        entry = signed["payload"].value
        name = f"{str(entry.module).split('::')[-1]}::{entry.function}"
        self.submitted.append((name, entry))
        return self._new_hash(name not in self.fail)

    async def transaction_pending(self, txn_hash):
        status = self._status[txn_hash]
        if status["polls"] > 0:
            status["polls"] -= 1
            return True
        return False

    async def transaction_by_hash(self, txn_hash):
        ok = self._status[txn_hash]["success"]
        return {"hash": txn_hash, "success": ok, "vm_status": "Executed successfully" if ok else "Move abort: E_INVALID_QUEUE"}

    async def account_resource(self, address, resource_type):
        return self.resources[resource_type]

    async def account_balance(self, address):
        return self.balance

    async def bcs_transfer(self, sender, recipient, amount):
        self.transfers.append((str(recipient), amount))
        return self._new_hash(True)

    async def close(self):
        self.closed = True


@pytest.fixture
def wallet():
    return FeedWallet.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def rest_client():
    return FakeRestClient()


@pytest.fixture(autouse=True)
def no_key_env(monkeypatch):
    """Tests decide explicitly whether a private key is configured."""
    monkeypatch.delenv("APTOSFEED_PRIVATE_KEY", raising=False)
    monkeypatch.delenv("APTOS_PRIVATE_KEY", raising=False)


@pytest.fixture(autouse=True)
def fast_polling(monkeypatch):
    monkeypatch.setattr("aptosfeed.chain.POLL_INTERVAL", 0)
