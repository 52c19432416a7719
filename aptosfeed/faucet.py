"""
Funding helpers: faucet (fresh accounts on devnet/testnet) and coin transfer
from an already-funded account.

The testnet faucet may require a captcha; in that case fund the address by
hand (https://aptos.dev/network/faucet) and use APTOSFEED_PRIVATE_KEY.
"""

import asyncio
from typing import Any, List, Optional

import requests
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.async_client import RestClient

from aptosfeed.chain import wait_for_success
from aptosfeed.config import NetworkProfile
from aptosfeed.errors import FundingError
from aptosfeed.logger import get_logger
from aptosfeed.wallet import FeedWallet

log = get_logger(__name__)

FAUCET_TIMEOUT = 30


def _hashes_from_response(body: Any) -> List[str]:
    # /mint returns a bare list; /fund returns {"txn_hashes": [...]}
    if isinstance(body, list):
        return [str(h) for h in body]
    if isinstance(body, dict):
        return [str(h) for h in body.get("txn_hashes", [])]
    return []


def request_faucet_funds(faucet_url: str, address: str, amount: int) -> List[str]:
    """
    Ask the faucet to mint `amount` octas to `address`.
    Returns the faucet transaction hashes. Raises FundingError on a non-200 response.
    """
    try:
        response = requests.post(
            f"{faucet_url.rstrip('/')}/mint",
            params={"amount": amount, "address": address},
            timeout=FAUCET_TIMEOUT,
        )
    except requests.RequestException as e:
        raise FundingError(f"Faucet request failed: {e}") from e
    if response.status_code != 200:
        raise FundingError(f"Faucet returned {response.status_code}: {response.text}")
    return _hashes_from_response(response.json())


async def fund_from_faucet(
    rest_client: RestClient,
    wallet: FeedWallet,
    profile: NetworkProfile,
    amount: Optional[int] = None,
) -> List[str]:
    """Fund `wallet` from the profile's faucet and wait until every faucet tx is committed."""
    if not profile.faucet_url:
        raise FundingError(f"No faucet configured for {profile.name}; fund {wallet.address} manually.")
    amount = profile.faucet_amount if amount is None else amount
    log.info("Requesting %d octas from %s for %s", amount, profile.faucet_url, wallet.address)
    hashes = await asyncio.to_thread(request_faucet_funds, profile.faucet_url, wallet.address, amount)
    for txn_hash in hashes:
        await wait_for_success(rest_client, txn_hash, FundingError)
    log.info("Faucet funded %s (%d tx)", wallet.address, len(hashes))
    return hashes


async def fund_from_account(
    rest_client: RestClient,
    sender: FeedWallet,
    recipient: str,
    amount: int,
) -> str:
    """Transfer `amount` octas of AptosCoin from `sender` to `recipient`. Returns the tx hash."""
    txn_hash = await rest_client.bcs_transfer(sender.account, AccountAddress.from_str(recipient), amount)
    await wait_for_success(rest_client, txn_hash, FundingError)
    log.info("Transferred %d octas %s -> %s (tx %s)", amount, sender.address, recipient, txn_hash)
    return txn_hash


async def check_balance(rest_client: RestClient, wallet: FeedWallet) -> int:
    """AptosCoin balance in octas."""
    return await rest_client.account_balance(wallet.account_address)
