"""Tests for the Switchboard create-feed / open-round calls."""

from decimal import Decimal

import pytest
from aptos_sdk.account_address import AccountAddress

from aptosfeed.aggregator import (
    AggregatorAccount,
    create_feed,
    create_feed_args,
    decimal_to_mantissa,
    parse_aggregator,
    resource_address,
)
from aptosfeed.config import DEFAULT_SWITCHBOARD_ADDRESS
from aptosfeed.errors import ConfigError, FeedCreationError, RoundError
from aptosfeed.flow import build_feed_params
from aptosfeed.job import build_price_job, serialize_job

from tests.conftest import FakeRestClient

SEED = "0x" + "ab" * 32


@pytest.fixture
def params(wallet):
    data = serialize_job(build_price_job("https://example.com/price", "$.price"))
    return build_feed_params(wallet, data, 1000, DEFAULT_SWITCHBOARD_ADDRESS, DEFAULT_SWITCHBOARD_ADDRESS)


def test_args_layout(params, wallet):
    args = create_feed_args(params, wallet.address, SEED)
    # 21 aggregator/lease/crank args + 8 job slots x 4 + seed
    assert len(args) == 21 + 8 * 4 + 1
    assert args[0].encode() == AccountAddress.from_str(wallet.address).address
    assert args[4].encode() == (1).to_bytes(8, "little")  # batch size
    assert args[7].encode() == (5).to_bytes(8, "little")  # min update delay
    assert args[19].encode() == (1000).to_bytes(8, "little")  # initial load
    assert args[-1].encode() == AccountAddress.from_str(SEED).address


def test_unused_job_slots_are_empty(params, wallet):
    args = create_feed_args(params, wallet.address, SEED)
    job_slots = args[21:-1]
    first_name = job_slots[0].encode()
    assert first_name == b"\x07BTC/USD"
    for slot in range(1, 8):
        name, metadata, data, weight = job_slots[slot * 4:slot * 4 + 4]
        assert name.encode() == b"\x00"
        assert data.encode() == b"\x00"
        assert weight.encode() == (1).to_bytes(8, "little")


def test_reward_escrow_defaults_to_signer(params, wallet):
    args = create_feed_args(params, wallet.address, SEED)
    assert args[16].encode() == AccountAddress.from_str(wallet.address).address


@pytest.mark.parametrize(
    "value, expected",
    [(Decimal(0), (0, 0)), (Decimal("0.25"), (25, 2)), (Decimal("3"), (3, 0)), (Decimal("1E+2"), (100, 0))],
)
def test_decimal_to_mantissa(value, expected):
    assert decimal_to_mantissa(value) == expected


def test_resource_address_depends_on_seed(wallet):
    a = resource_address(wallet.address, SEED)
    assert a == resource_address(wallet.address, SEED)
    assert a != resource_address(wallet.address, "0x" + "cd" * 32)
    assert a != wallet.address


async def test_create_feed_returns_handle_and_hash(params, wallet, rest_client):
    params.seed = SEED
    aggregator, tx_hash = await create_feed(rest_client, wallet, params, DEFAULT_SWITCHBOARD_ADDRESS)
    assert tx_hash.startswith("0x")
    assert aggregator.address == resource_address(wallet.address, SEED)
    assert [name for name, _ in rest_client.submitted] == ["create_feed_action::run"]
    entry = rest_client.submitted[0][1]
    assert len(entry.args) == 54
    assert len(entry.ty_args) == 1


async def test_create_feed_waits_for_pending_tx(params, wallet):
    client = FakeRestClient(pending_polls=3)
    _, tx_hash = await create_feed(client, wallet, params, DEFAULT_SWITCHBOARD_ADDRESS)
    assert client._status[tx_hash]["polls"] == 0


async def test_create_feed_abort_raises(params, wallet):
    client = FakeRestClient(fail={"create_feed_action::run"})
    with pytest.raises(FeedCreationError, match="E_INVALID_QUEUE"):
        await create_feed(client, wallet, params, DEFAULT_SWITCHBOARD_ADDRESS)


async def test_create_feed_needs_a_job(params, wallet, rest_client):
    params.jobs = []
    with pytest.raises(FeedCreationError):
        await create_feed(rest_client, wallet, params, DEFAULT_SWITCHBOARD_ADDRESS)
    assert rest_client.submitted == []


async def test_open_round(wallet, rest_client):
    aggregator = AggregatorAccount(rest_client, "0x" + "11" * 32, DEFAULT_SWITCHBOARD_ADDRESS)
    tx_hash = await aggregator.open_round(wallet)
    assert tx_hash
    name, entry = rest_client.submitted[0]
    assert name == "aggregator_open_round_action::run"
    assert entry.args[0] == bytes.fromhex("11" * 32)
    assert entry.args[1] == (1).to_bytes(8, "little")


async def test_open_round_failure(wallet):
    client = FakeRestClient(fail={"aggregator_open_round_action::run"})
    aggregator = AggregatorAccount(client, "0x" + "11" * 32, DEFAULT_SWITCHBOARD_ADDRESS)
    with pytest.raises(RoundError):
        await aggregator.open_round(wallet)


AGGREGATOR_DATA = {
    "name": "0x" + b"BTC/USD".hex(),
    "metadata": "0x",
    "queue_addr": DEFAULT_SWITCHBOARD_ADDRESS,
    "batch_size": "1",
    "min_oracle_results": "1",
    "min_job_results": "1",
    "min_update_delay_seconds": "5",
    "latest_confirmed_round": {
        "round_open_timestamp": "1700000000",
        "result": {"value": "2512345", "dec": 3, "neg": False},
    },
}


def test_parse_aggregator():
    data = parse_aggregator("0x2", AGGREGATOR_DATA)
    assert data.name == "BTC/USD"
    assert data.metadata == ""
    assert data.batch_size == 1
    assert data.min_update_delay_seconds == 5
    assert data.latest_value == Decimal("2512.345")
    assert data.latest_round_timestamp == 1700000000


def test_parse_aggregator_without_rounds():
    data = parse_aggregator("0x2", {"name": "0x"})
    assert data.latest_value is None
    assert data.latest_round_timestamp is None


async def test_load_data_reads_aggregator_resource():
    resource_type = f"{DEFAULT_SWITCHBOARD_ADDRESS}::aggregator::Aggregator"
    client = FakeRestClient(resources={resource_type: {"type": resource_type, "data": AGGREGATOR_DATA}})
    aggregator = AggregatorAccount(client, "0x" + "22" * 32, DEFAULT_SWITCHBOARD_ADDRESS)
    assert await aggregator.latest_value() == Decimal("2512.345")


def test_aggregator_rejects_short_address(rest_client):
    with pytest.raises(ConfigError, match="not an Aptos address"):
        AggregatorAccount(rest_client, "0xabc", DEFAULT_SWITCHBOARD_ADDRESS)


def test_short_queue_address_rejected_before_submission(wallet):
    from pydantic import ValidationError

    with pytest.raises(ValidationError):
        build_feed_params(wallet, "AA==", 1000, "0xabc", DEFAULT_SWITCHBOARD_ADDRESS)
