"""
Switchboard aggregator (feed) on Aptos: create a feed, open a round, read it back.

create_feed calls {switchboard}::create_feed_action::run<CoinType>, which
creates the Aggregator, its jobs and its Lease in one transaction, in a
resource account derived from the signer and a seed. The program takes a
fixed number of job slots; unused slots are sent empty.
"""

from decimal import Decimal
from typing import List, Optional, Tuple

from aptos_sdk.account import Account
from aptos_sdk.account_address import AccountAddress
from aptos_sdk.async_client import RestClient
from aptos_sdk.bcs import Serializer
from aptos_sdk.transactions import TransactionArgument

from aptosfeed.chain import decode_move_string, submit_entry_function
from aptosfeed.config import APTOS_COIN_TYPE
from aptosfeed.errors import ConfigError, FeedCreationError, RoundError
from aptosfeed.logger import get_logger
from aptosfeed.schema import MAX_JOBS, AggregatorData, CreateFeedParams, FeedJob, parse_address
from aptosfeed.wallet import FeedWallet

log = get_logger(__name__)

# Switchboard stores variance thresholds with at most 9 decimals
MAX_DECIMAL_SCALE = 9


def _address(value: str) -> TransactionArgument:
    return TransactionArgument(AccountAddress.from_str(value), Serializer.struct)


def _u64(value: int) -> TransactionArgument:
    return TransactionArgument(value, Serializer.u64)


def _str(value: str) -> TransactionArgument:
    return TransactionArgument(value, Serializer.str)


def _bool(value: bool) -> TransactionArgument:
    return TransactionArgument(value, Serializer.bool)


def decimal_to_mantissa(value: Decimal) -> Tuple[int, int]:
    """Decimal -> (mantissa, scale), e.g. Decimal("0.25") -> (25, 2)."""
    value = Decimal(value).normalize()
    exponent = value.as_tuple().exponent
    scale = min(max(-exponent, 0), MAX_DECIMAL_SCALE)
    return int(value.scaleb(scale)), scale


def _job_args(jobs: List[FeedJob]) -> List[TransactionArgument]:
    args: List[TransactionArgument] = []
    for job in jobs:
        args += [_str(job.name), _str(job.metadata), _str(job.data), _u64(job.weight)]
    for _ in range(MAX_JOBS - len(jobs)):
        args += [_str(""), _str(""), _str(""), _u64(1)]
    return args


def create_feed_args(params: CreateFeedParams, signer: str, seed: str) -> List[TransactionArgument]:
    """Arguments of create_feed_action::run, in the program's order."""
    vt_mantissa, vt_scale = decimal_to_mantissa(params.variance_threshold)
    return [
        _address(params.authority),
        _str(params.name),
        _str(params.metadata),
        _address(params.queue_address),
        _u64(params.batch_size),
        _u64(params.min_oracle_results),
        _u64(params.min_job_results),
        _u64(params.min_update_delay_seconds),
        _u64(params.start_after),
        TransactionArgument(vt_mantissa, Serializer.u128),
        TransactionArgument(vt_scale, Serializer.u8),
        _u64(params.force_report_period),
        _u64(params.expiration),
        _bool(params.disable_crank),
        _u64(params.history_size),
        _u64(params.read_charge),
        _address(params.reward_escrow or signer),
        TransactionArgument(
            [AccountAddress.from_str(a) for a in params.read_whitelist],
            Serializer.sequence_serializer(Serializer.struct),
        ),
        _bool(params.limit_reads_to_whitelist),
        _u64(params.initial_load_amount),
        _address(params.crank_address),
        *_job_args(params.jobs),
        _address(seed),
    ]


def resource_address(creator: str, seed: str) -> str:
    """Address of the resource account create_feed_action creates for (creator, seed)."""
    seed_bytes = AccountAddress.from_str(seed).address
    return str(AccountAddress.for_resource_account(AccountAddress.from_str(creator), seed_bytes))


class AggregatorAccount:
    """Handle on an on-chain aggregator. Its value and round history live on chain."""

    def __init__(
        self,
        rest_client: RestClient,
        address: str,
        switchboard_address: str,
        coin_type: str = APTOS_COIN_TYPE,
    ):
        try:
            address = str(parse_address(address))
        except ValueError as e:
            raise ConfigError(str(e)) from e
        self.rest_client = rest_client
        self.address = address
        self.switchboard_address = switchboard_address
        self.coin_type = coin_type

    def __repr__(self) -> str:
        return f"AggregatorAccount({self.address})"

    async def open_round(self, wallet: FeedWallet, jitter: int = 1) -> str:
        """Ask the queue's oracles for a fresh value now. Returns the tx hash."""
        txn_hash = await submit_entry_function(
            self.rest_client,
            wallet,
            f"{self.switchboard_address}::aggregator_open_round_action::run",
            [_address(self.address), _u64(jitter)],
            [self.coin_type],
            error_cls=RoundError,
        )
        log.debug("Opened round on %s (tx %s)", self.address, txn_hash)
        return txn_hash

    async def load_data(self) -> AggregatorData:
        resource = await self.rest_client.account_resource(
            AccountAddress.from_str(self.address),
            f"{self.switchboard_address}::aggregator::Aggregator",
        )
        return parse_aggregator(self.address, resource.get("data", {}))

    async def latest_value(self) -> Optional[Decimal]:
        return (await self.load_data()).latest_value


def _switchboard_decimal(value: dict) -> Optional[Decimal]:
    if not isinstance(value, dict) or "value" not in value:
        return None
    result = Decimal(int(value["value"])).scaleb(-int(value.get("dec", 0)))
    return -result if value.get("neg") else result


def parse_aggregator(address: str, data: dict) -> AggregatorData:
    """Pick the fields we show out of the Aggregator resource JSON."""
    latest = data.get("latest_confirmed_round") or {}
    timestamp = latest.get("round_open_timestamp")
    return AggregatorData(
        address=address,
        name=decode_move_string(data.get("name")),
        metadata=decode_move_string(data.get("metadata")),
        queue_address=data.get("queue_addr", ""),
        batch_size=int(data.get("batch_size", 0)),
        min_oracle_results=int(data.get("min_oracle_results", 0)),
        min_job_results=int(data.get("min_job_results", 0)),
        min_update_delay_seconds=int(data.get("min_update_delay_seconds", 0)),
        latest_value=_switchboard_decimal(latest.get("result")),
        latest_round_timestamp=int(timestamp) if timestamp is not None else None,
    )


async def create_feed(
    rest_client: RestClient,
    wallet: FeedWallet,
    params: CreateFeedParams,
    switchboard_address: str,
) -> Tuple[AggregatorAccount, str]:
    """
    Create Aggregator + Lease (+ jobs) in one transaction.
    Returns (aggregator, tx_hash). Raises FeedCreationError if the tx aborts on chain.
    """
    if not params.jobs:
        raise FeedCreationError("A feed needs at least one job")
    seed = params.seed or str(Account.generate().address())
    aggregator_address = resource_address(wallet.address, seed)
    txn_hash = await submit_entry_function(
        rest_client,
        wallet,
        f"{switchboard_address}::create_feed_action::run",
        create_feed_args(params, wallet.address, seed),
        [params.coin_type],
        error_cls=FeedCreationError,
    )
    log.debug("Created feed %s (tx %s)", aggregator_address, txn_hash)
    return AggregatorAccount(rest_client, aggregator_address, switchboard_address, params.coin_type), txn_hash
