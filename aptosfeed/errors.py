"""
Errors raised by aptosfeed.

Network/RPC errors from aptos-sdk (ApiError, httpx errors) are not wrapped;
they propagate to the caller as-is.
"""


class AptosFeedError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(AptosFeedError):
    """Missing or invalid configuration: unknown network, bad address, bad key."""


class FundingError(AptosFeedError):
    """Faucet or transfer funding failed."""


class JobEncodingError(AptosFeedError):
    """Oracle job could not be built, encoded or decoded."""


class FeedCreationError(AptosFeedError):
    """Feed parameters rejected locally, or the create-feed transaction failed on chain."""


class RoundError(AptosFeedError):
    """The open-round transaction failed on chain."""
