"""
Feed wallet: local Ed25519 keypair, no API keys.

Key is loaded from APTOSFEED_PRIVATE_KEY (env) or .env file; APTOS_PRIVATE_KEY is accepted as fallback.
Never read/write a key file.
"""

import os
from typing import Optional

from aptos_sdk import ed25519
from aptos_sdk.account import Account
from aptos_sdk.account_address import AccountAddress

from aptosfeed.errors import ConfigError

ENV_PRIVATE_KEY = "APTOSFEED_PRIVATE_KEY"
ENV_PRIVATE_KEY_FALLBACK = "APTOS_PRIVATE_KEY"
AIP80_PREFIX = "ed25519-priv-"


def private_key_from_env() -> Optional[str]:
    """Return the configured private key string, or None when neither env var is set."""
    pk = os.getenv(ENV_PRIVATE_KEY) or os.getenv(ENV_PRIVATE_KEY_FALLBACK)
    if not pk or not pk.strip():
        return None
    return pk.strip()


def _load_account(private_key: str) -> Account:
    """Accepts raw hex (0x optional) or an AIP-80 key (ed25519-priv-0x...)."""
    pk = private_key.strip()
    if not pk.startswith(("0x", AIP80_PREFIX)):
        pk = "0x" + pk
    try:
        # strict=False: no AIP-80 recommendation printed for plain hex keys
        key = ed25519.PrivateKey.from_str(pk, strict=False)
    except (ValueError, TypeError) as e:
        raise ConfigError(f"Invalid Ed25519 private key: {e}") from e
    return Account(AccountAddress.from_key(key.public_key()), key)


class FeedWallet:
    """
    Account that signs the create-feed and open-round transactions.

    FeedWallet() loads the key from APTOSFEED_PRIVATE_KEY (or APTOS_PRIVATE_KEY) and raises
    ConfigError if neither is set. Use FeedWallet.generate() for a throwaway account that
    is funded from the faucet instead.
    """

    def __init__(self, account: Optional[Account] = None):
        if account is None:
            pk = private_key_from_env()
            if pk is None:
                raise ConfigError(
                    f"Set {ENV_PRIVATE_KEY} in the environment (never commit it), "
                    "or run 'aptosfeed account --generate' for a fresh key."
                )
            account = _load_account(pk)
        self._account = account

    @property
    def address(self) -> str:
        """Account address (0x + 64 hex chars). The aggregator authority and fee payer."""
        return str(self._account.address())

    @property
    def account_address(self) -> AccountAddress:
        return self._account.address()

    @property
    def account(self) -> Account:
        return self._account

    @property
    def private_key_hex(self) -> str:
        return self._account.private_key.hex()

    @classmethod
    def from_key(cls, private_key: str) -> "FeedWallet":
        """Create wallet from a private key: hex (0x prefix optional) or AIP-80 (ed25519-priv-0x...)."""
        return cls(account=_load_account(private_key))

    @classmethod
    def generate(cls) -> "FeedWallet":
        """New random keypair. Caller must fund it before submitting transactions."""
        return cls(account=Account.generate())

    def __repr__(self) -> str:
        return f"FeedWallet({self.address})"
