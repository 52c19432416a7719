"""
aptosfeed: bootstrap Switchboard oracle feeds on Aptos.

Creates (or loads) an account, builds an HTTP + JSON-path oracle job,
registers it as a feed with the Switchboard aggregator program and opens
one update round. Signing and submission go through aptos-sdk; the job
itself runs on Switchboard's oracle operators.

  aptosfeed create --network testnet   # then watch the feed update
"""

__version__ = "0.1.0"

from aptosfeed.aggregator import AggregatorAccount, create_feed
from aptosfeed.config import NetworkProfile, get_profile
from aptosfeed.errors import (
    AptosFeedError,
    ConfigError,
    FeedCreationError,
    FundingError,
    JobEncodingError,
    RoundError,
)
from aptosfeed.flow import bootstrap_feed
from aptosfeed.job import OracleJob, build_job, build_price_job, deserialize_job, serialize_job
from aptosfeed.schema import AggregatorData, CreateFeedParams, FeedJob, FeedResult
from aptosfeed.wallet import FeedWallet

__all__ = [
    "__version__",
    "AggregatorAccount",
    "create_feed",
    "NetworkProfile",
    "get_profile",
    "AptosFeedError",
    "ConfigError",
    "FeedCreationError",
    "FundingError",
    "JobEncodingError",
    "RoundError",
    "bootstrap_feed",
    "OracleJob",
    "build_job",
    "build_price_job",
    "serialize_job",
    "deserialize_job",
    "AggregatorData",
    "CreateFeedParams",
    "FeedJob",
    "FeedResult",
    "FeedWallet",
]
