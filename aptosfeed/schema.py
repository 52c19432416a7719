"""
Feed configuration and results.

CreateFeedParams mirrors the arguments of Switchboard's create_feed_action.
Local validation only covers what the entry function can't accept at all
(job count, zero thresholds, malformed addresses); everything else is
checked on chain.
"""

from decimal import Decimal
from typing import List, Optional

from aptos_sdk.account_address import AccountAddress
from pydantic import BaseModel, Field, field_validator

from aptosfeed.config import APTOS_COIN_TYPE

MAX_JOBS = 8


def parse_address(value: str) -> AccountAddress:
    """
    Strict Aptos address: 0x + 64 hex chars, or a special address (0x0 .. 0xf).
    Raises ValueError otherwise.
    """
    try:
        return AccountAddress.from_str(value.strip())
    except (RuntimeError, ValueError) as e:
        raise ValueError(f"not an Aptos address: {value!r} ({e})") from e


def _check_address(value: str) -> str:
    return str(parse_address(value))


class FeedJob(BaseModel):
    """One job slot on the aggregator."""

    name: str = Field(..., description="Job name, e.g. BTC/USD")
    metadata: str = Field("", description="Free-form job metadata, e.g. the data source")
    authority: str = Field(..., description="Address allowed to edit the job")
    data: str = Field(..., description="base64 of the length-delimited OracleJob")
    weight: int = Field(1, ge=1, le=255, description="Job weight when oracles combine results")

    @field_validator("authority")
    @classmethod
    def check_authority(cls, value: str) -> str:
        return _check_address(value)


class CreateFeedParams(BaseModel):
    """Everything create_feed_action::run needs besides the signer and CoinType."""

    authority: str = Field(..., description="Aggregator authority (usually the signer)")
    queue_address: str = Field(..., description="Account with the OracleQueue resource")
    crank_address: str = Field(..., description="Account with the Crank resource")
    batch_size: int = Field(1, ge=1, description="Number of oracles to respond to each round")
    min_job_results: int = Field(1, ge=1, description="Minimum # of jobs that need to return a result")
    min_oracle_results: int = Field(1, ge=1, description="Minimum # of oracles that need to respond for a result")
    min_update_delay_seconds: int = Field(5, ge=1, description="Minimum delay between rounds")
    coin_type: str = Field(APTOS_COIN_TYPE, description="CoinType of the queue")
    initial_load_amount: int = Field(..., ge=0, description="Initial lease funding, in octas")
    jobs: List[FeedJob] = Field(default_factory=list)

    name: str = ""
    metadata: str = ""
    start_after: int = Field(0, ge=0)
    variance_threshold: Decimal = Field(Decimal(0), ge=0)
    force_report_period: int = Field(0, ge=0)
    expiration: int = Field(0, ge=0)
    disable_crank: bool = False
    history_size: int = Field(0, ge=0)
    read_charge: int = Field(0, ge=0)
    reward_escrow: Optional[str] = Field(None, description="Defaults to the signer")
    read_whitelist: List[str] = Field(default_factory=list)
    limit_reads_to_whitelist: bool = False
    seed: Optional[str] = Field(None, description="Resource account seed; random when unset")

    @field_validator("authority", "queue_address", "crank_address")
    @classmethod
    def check_addresses(cls, value: str) -> str:
        return _check_address(value)

    @field_validator("reward_escrow", "seed")
    @classmethod
    def check_optional_address(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _check_address(value)

    @field_validator("read_whitelist")
    @classmethod
    def check_whitelist(cls, value: List[str]) -> List[str]:
        return [_check_address(v) for v in value]

    @field_validator("jobs")
    @classmethod
    def check_job_limit(cls, value: List[FeedJob]) -> List[FeedJob]:
        if len(value) > MAX_JOBS:
            raise ValueError(f"create_feed_action can only create up to {MAX_JOBS} jobs at a time")
        return value


class FeedResult(BaseModel):
    """What one bootstrap run produced."""

    account_address: str
    aggregator_address: str = Field(..., min_length=1)
    tx_hash: str = Field(..., min_length=1, description="create_feed_action transaction hash")
    round_tx_hash: Optional[str] = Field(None, description="open-round transaction hash, if a round was opened")


class AggregatorData(BaseModel):
    """Subset of the on-chain Aggregator resource shown by `aptosfeed show`."""

    address: str
    name: str = ""
    metadata: str = ""
    queue_address: str = ""
    batch_size: int = 0
    min_oracle_results: int = 0
    min_job_results: int = 0
    min_update_delay_seconds: int = 0
    latest_value: Optional[Decimal] = None
    latest_round_timestamp: Optional[int] = None
