"""
Feed bootstrap: account → job → create feed → open round.

One forward pass. Every step is awaited before the next one starts and any
exception propagates to the caller; nothing is retried or rolled back, so a
failed feed creation never reaches the open-round step.

Account selection:
  - an explicit wallet is used as-is;
  - else APTOSFEED_PRIVATE_KEY / APTOS_PRIVATE_KEY is loaded;
  - else a fresh key is generated and funded from the network faucet.
"""

from typing import Callable, Optional, Tuple

from aptos_sdk.async_client import RestClient

from aptosfeed import config
from aptosfeed.aggregator import create_feed
from aptosfeed.config import NetworkProfile, get_profile
from aptosfeed.faucet import fund_from_faucet
from aptosfeed.job import build_price_job, serialize_job
from aptosfeed.logger import get_logger
from aptosfeed.schema import CreateFeedParams, FeedJob, FeedResult
from aptosfeed.wallet import FeedWallet, private_key_from_env

log = get_logger(__name__)

DEFAULT_JOB_NAME = "BTC/USD"
DEFAULT_JOB_METADATA = "binance"


async def obtain_wallet(
    rest_client: RestClient,
    profile: NetworkProfile,
    wallet: Optional[FeedWallet] = None,
) -> Tuple[FeedWallet, bool]:
    """Returns (wallet, funded) where funded is True if the faucet was used."""
    if wallet is not None:
        return wallet, False
    if private_key_from_env() is not None:
        return FeedWallet(), False
    wallet = FeedWallet.generate()
    await fund_from_faucet(rest_client, wallet, profile)
    return wallet, True


def build_feed_params(
    wallet: FeedWallet,
    job_data: str,
    initial_load_amount: int,
    queue_address: str,
    crank_address: str,
    job_name: str = DEFAULT_JOB_NAME,
    job_metadata: str = DEFAULT_JOB_METADATA,
) -> CreateFeedParams:
    """Single-job feed answered by one oracle, updatable every 5s."""
    return CreateFeedParams(
        authority=wallet.address,
        queue_address=queue_address,
        crank_address=crank_address,
        batch_size=1,
        min_job_results=1,
        min_oracle_results=1,
        min_update_delay_seconds=5,
        coin_type=config.APTOS_COIN_TYPE,
        initial_load_amount=initial_load_amount,
        jobs=[
            FeedJob(
                name=job_name,
                metadata=job_metadata,
                authority=wallet.address,
                data=job_data,
                weight=1,
            )
        ],
    )


async def bootstrap_feed(
    profile: Optional[NetworkProfile] = None,
    wallet: Optional[FeedWallet] = None,
    rest_client: Optional[RestClient] = None,
    job_url: Optional[str] = None,
    job_path: Optional[str] = None,
    switchboard_address: Optional[str] = None,
    queue_address: Optional[str] = None,
    crank_address: Optional[str] = None,
    open_round: bool = True,
    report: Optional[Callable[[str], None]] = None,
) -> FeedResult:
    """
    Create one funded/loaded account, one job, one feed; then open one round.

    report: called with each progress line (default: the module logger).
    rest_client: pass one to reuse it; otherwise one is created for profile.node_url and closed at the end.
    """
    profile = profile or get_profile()
    report = report or log.info
    switchboard_address = switchboard_address or config.SWITCHBOARD_ADDRESS
    owns_client = rest_client is None
    if rest_client is None:
        rest_client = RestClient(profile.node_url)

    try:
        wallet, funded = await obtain_wallet(rest_client, profile, wallet)
        if funded:
            report(f"User account {wallet.address} created + funded.")
        else:
            report(f"User account {wallet.address} loaded.")

        job = build_price_job(job_url or profile.job_url, job_path or profile.job_path)
        params = build_feed_params(
            wallet,
            serialize_job(job),
            profile.initial_load_amount,
            queue_address or config.SWITCHBOARD_QUEUE_ADDRESS,
            crank_address or config.SWITCHBOARD_CRANK_ADDRESS,
        )

        aggregator, create_feed_tx = await create_feed(rest_client, wallet, params, switchboard_address)
        report(
            f"Created Aggregator and Lease resources at account address {aggregator.address}. "
            f"Tx hash {create_feed_tx}"
        )

        result = FeedResult(
            account_address=wallet.address,
            aggregator_address=aggregator.address,
            tx_hash=create_feed_tx,
        )
        if open_round:
            # Manually trigger an update
            result.round_tx_hash = await aggregator.open_round(wallet)
            report(f"Opened round on {aggregator.address}. Tx hash {result.round_tx_hash}")
        return result
    finally:
        if owns_client:
            await rest_client.close()
