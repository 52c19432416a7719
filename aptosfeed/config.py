"""
Network profiles and Switchboard addresses.

Values come from the environment (or a .env file in the working directory,
the package directory or the repo root). Variables already set in the
environment win over .env.

  APTOSFEED_NETWORK               testnet (default) or devnet
  APTOSFEED_NODE_URL              override the profile's full-node URL
  APTOSFEED_FAUCET_URL            override the profile's faucet URL
  APTOSFEED_SWITCHBOARD_ADDRESS   Switchboard program address
  APTOSFEED_QUEUE_ADDRESS         account holding the OracleQueue resource
  APTOSFEED_CRANK_ADDRESS         account holding the Crank resource
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

from aptosfeed.errors import ConfigError


def load_env() -> bool:
    """Load the first .env found (cwd, package dir, repo root). Returns True if one was loaded."""
    from dotenv import load_dotenv

    for _dir in [Path.cwd(), Path(__file__).parent, Path(__file__).parent.parent]:
        env_file = _dir / ".env"
        if env_file.exists():
            load_dotenv(env_file, override=False)
            return True
    return False


load_env()

DEFAULT_SWITCHBOARD_ADDRESS = "0x34e2eead0aefbc3d0af13c0522be94b002658f4bef8e0740a21086d22236ad77"

SWITCHBOARD_ADDRESS = os.getenv("APTOSFEED_SWITCHBOARD_ADDRESS", DEFAULT_SWITCHBOARD_ADDRESS)
# account with OracleQueue resource
SWITCHBOARD_QUEUE_ADDRESS = os.getenv("APTOSFEED_QUEUE_ADDRESS", DEFAULT_SWITCHBOARD_ADDRESS)
# account with Crank resource
SWITCHBOARD_CRANK_ADDRESS = os.getenv("APTOSFEED_CRANK_ADDRESS", DEFAULT_SWITCHBOARD_ADDRESS)

# CoinType of the queue (only AptosCoin is supported by Switchboard on Aptos)
APTOS_COIN_TYPE = "0x1::aptos_coin::AptosCoin"


@dataclass(frozen=True)
class NetworkProfile:
    name: str
    node_url: str
    faucet_url: Optional[str]
    job_url: str
    job_path: str
    initial_load_amount: int
    faucet_amount: int


PROFILES: Dict[str, NetworkProfile] = {
    "testnet": NetworkProfile(
        name="testnet",
        node_url="https://fullnode.testnet.aptoslabs.com/v1",
        faucet_url="https://faucet.testnet.aptoslabs.com",
        job_url="https://data-server-aptos.onrender.com/odds/1268085",
        job_path="$.home",
        initial_load_amount=10_000_000,
        faucet_amount=100_000_000,
    ),
    "devnet": NetworkProfile(
        name="devnet",
        node_url="https://fullnode.devnet.aptoslabs.com/v1",
        faucet_url="https://faucet.devnet.aptoslabs.com",
        job_url="https://www.binance.us/api/v3/ticker/price?symbol=BTCUSD",
        job_path="$.price",
        initial_load_amount=1000,
        faucet_amount=50_000,
    ),
}

DEFAULT_NETWORK = "testnet"


def get_profile(name: Optional[str] = None) -> NetworkProfile:
    """
    Resolve a network profile by name (or APTOSFEED_NETWORK), applying endpoint overrides.
    Raises ConfigError for an unknown network.
    """
    name = (name or os.getenv("APTOSFEED_NETWORK") or DEFAULT_NETWORK).strip().lower()
    profile = PROFILES.get(name)
    if profile is None:
        raise ConfigError(f"Unknown network {name!r}. Use one of: {', '.join(sorted(PROFILES))}")

    node_url = (os.getenv("APTOSFEED_NODE_URL") or "").strip()
    faucet_url = (os.getenv("APTOSFEED_FAUCET_URL") or "").strip()
    if node_url:
        profile = replace(profile, node_url=node_url.rstrip("/"))
    if faucet_url:
        profile = replace(profile, faucet_url=faucet_url.rstrip("/"))
    return profile
