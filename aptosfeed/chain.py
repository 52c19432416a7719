"""
Submit entry-function transactions and wait for them.

The account signs and broadcasts; the node executes. A transaction that
is committed but aborted (e.g. a Move assert in the Switchboard program)
is reported with its vm_status.
"""

import asyncio
from typing import Any, List, Type

from aptos_sdk.async_client import RestClient
from aptos_sdk.transactions import EntryFunction, TransactionArgument, TransactionPayload
from aptos_sdk.type_tag import StructTag, TypeTag

from aptosfeed.errors import AptosFeedError
from aptosfeed.logger import get_logger
from aptosfeed.wallet import FeedWallet

log = get_logger(__name__)

TX_WAIT_SECONDS = 60
POLL_INTERVAL = 1.0


def coin_type_tag(coin_type: str) -> TypeTag:
    return TypeTag(StructTag.from_str(coin_type))


async def wait_for_success(
    rest_client: RestClient,
    txn_hash: str,
    error_cls: Type[AptosFeedError] = AptosFeedError,
    max_wait: int = TX_WAIT_SECONDS,
) -> dict:
    """Poll until the tx is committed. Raises error_cls if it timed out or was aborted."""
    waited = 0.0
    while await rest_client.transaction_pending(txn_hash):
        if waited >= max_wait:
            raise error_cls(f"Tx {txn_hash} still pending after {max_wait}s")
        await asyncio.sleep(POLL_INTERVAL)
        waited += POLL_INTERVAL
    txn = await rest_client.transaction_by_hash(txn_hash)
    if not txn.get("success"):
        raise error_cls(f"Tx {txn_hash} failed: {txn.get('vm_status', 'unknown status')}")
    return txn


async def submit_entry_function(
    rest_client: RestClient,
    wallet: FeedWallet,
    function: str,
    args: List[TransactionArgument],
    type_args: List[str],
    error_cls: Type[AptosFeedError] = AptosFeedError,
) -> str:
    """
    Sign and submit `function` ("0xADDR::module::name") as `wallet`, wait for it.
    Returns the tx hash. API errors from the node propagate unchanged.
    """
    module, name = function.rsplit("::", 1)
    payload = EntryFunction.natural(module, name, [coin_type_tag(t) for t in type_args], args)
    signed = await rest_client.create_bcs_signed_transaction(wallet.account, TransactionPayload(payload))
    txn_hash = await rest_client.submit_bcs_transaction(signed)
    log.debug("Submitted %s as %s: %s", function, wallet.address, txn_hash)
    await wait_for_success(rest_client, txn_hash, error_cls)
    return txn_hash


def decode_move_string(value: Any) -> str:
    """vector<u8> fields come back from the REST API as 0x-hex; decode them as UTF-8."""
    if not isinstance(value, str):
        return ""
    if value.startswith("0x"):
        try:
            return bytes.fromhex(value[2:]).decode("utf-8", errors="replace").rstrip("\x00")
        except ValueError:
            return value
    return value
