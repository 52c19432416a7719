"""
aptosfeed CLI: bootstrap and poke Switchboard feeds on Aptos.

Commands:
  aptosfeed create        Account → job → create feed → open one round
  aptosfeed account       Show the configured account (or --generate a new key)
  aptosfeed fund          Fund the configured account from the network faucet
  aptosfeed job           Print the base64 oracle job for --url/--path
  aptosfeed decode-job    Print the tasks inside a base64 oracle job
  aptosfeed open-round    Open a round on an existing aggregator
  aptosfeed show          Print an aggregator's on-chain config and latest value

Any failure prints the error to stderr and exits 1.
"""
import asyncio
import json
import os
import sys
import traceback
from typing import List, Optional

from aptos_sdk.async_client import RestClient

from aptosfeed.config import get_profile, load_env

USAGE = """aptosfeed CLI

Commands:
  aptosfeed create [--network testnet|devnet] [--url URL] [--path PATH] [--no-open-round]
  aptosfeed account [--generate]
  aptosfeed fund [--network N] [--amount OCTAS]
  aptosfeed job [--network N] [--url URL] [--path PATH]
  aptosfeed decode-job <base64>
  aptosfeed open-round <aggregator-address> [--network N]
  aptosfeed show <aggregator-address> [--network N]

Set APTOSFEED_PRIVATE_KEY (or put it in .env) to use an existing account;
without it, 'create' generates a key and funds it from the faucet."""


def _option(args: List[str], name: str, default: Optional[str] = None) -> Optional[str]:
    if name in args:
        idx = args.index(name)
        if idx + 1 < len(args) and not args[idx + 1].startswith("--"):
            return args[idx + 1]
    return default


def _positional(args: List[str]) -> Optional[str]:
    """First argument after the command that is neither a flag nor a flag's value."""
    skip = False
    for arg in args:
        if skip:
            skip = False
            continue
        if arg.startswith("--"):
            skip = arg in ("--network", "--url", "--path", "--amount")
            continue
        return arg
    return None


def create_command(args: List[str]):
    """Full bootstrap: one account, one job, one feed, one round."""
    from aptosfeed.flow import bootstrap_feed

    profile = get_profile(_option(args, "--network"))
    print("=" * 70)
    print(f"aptosfeed: creating a Switchboard feed on {profile.name}")
    print(f"  Node: {profile.node_url}")
    print("=" * 70)
    result = asyncio.run(
        bootstrap_feed(
            profile=profile,
            job_url=_option(args, "--url"),
            job_path=_option(args, "--path"),
            open_round="--no-open-round" not in args,
            report=print,
        )
    )
    print("=" * 70)
    print(f"✅ Feed: {result.aggregator_address}")
    print("=" * 70)


def account_command(args: List[str]):
    """Show the configured account; --generate prints a fresh key pair instead."""
    from aptosfeed.wallet import ENV_PRIVATE_KEY, FeedWallet

    if "--generate" in args:
        wallet = FeedWallet.generate()
        print(f"Address:     {wallet.address}")
        print(f"Private key: {wallet.private_key_hex}")
        print(f"\n💡 Save it: export {ENV_PRIVATE_KEY}={wallet.private_key_hex}   (never commit it)")
        return
    wallet = FeedWallet()
    print(f"Address: {wallet.address}")


def fund_command(args: List[str]):
    from aptosfeed.faucet import check_balance, fund_from_faucet
    from aptosfeed.wallet import FeedWallet

    profile = get_profile(_option(args, "--network"))
    amount = _option(args, "--amount")
    wallet = FeedWallet()

    async def _fund():
        rest_client = RestClient(profile.node_url)
        try:
            hashes = await fund_from_faucet(rest_client, wallet, profile, int(amount) if amount else None)
            return hashes, await check_balance(rest_client, wallet)
        finally:
            await rest_client.close()

    hashes, balance = asyncio.run(_fund())
    print(f"✅ Funded {wallet.address} ({len(hashes)} faucet tx). Balance: {balance} octas")


def job_command(args: List[str]):
    from aptosfeed.job import build_price_job, serialize_job

    profile = get_profile(_option(args, "--network"))
    job = build_price_job(_option(args, "--url", profile.job_url), _option(args, "--path", profile.job_path))
    print(serialize_job(job))


def decode_job_command(args: List[str]):
    from aptosfeed.job import describe_job, deserialize_job

    data = _positional(args)
    if not data:
        raise ValueError("Usage: aptosfeed decode-job <base64>")
    print(json.dumps(describe_job(deserialize_job(data)), indent=2))


def _aggregator_command(args: List[str], action: str):
    from aptosfeed import config
    from aptosfeed.aggregator import AggregatorAccount
    from aptosfeed.wallet import FeedWallet

    address = _positional(args)
    if not address:
        raise ValueError(f"Usage: aptosfeed {action} <aggregator-address>")
    profile = get_profile(_option(args, "--network"))

    async def _run():
        rest_client = RestClient(profile.node_url)
        try:
            aggregator = AggregatorAccount(rest_client, address, config.SWITCHBOARD_ADDRESS)
            if action == "open-round":
                return await aggregator.open_round(FeedWallet())
            return await aggregator.load_data()
        finally:
            await rest_client.close()

    out = asyncio.run(_run())
    if action == "open-round":
        print(f"✅ Opened round on {address}. Tx hash {out}")
    else:
        print(out.model_dump_json(indent=2))


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    load_env()
    argv = sys.argv[1:] if argv is None else argv
    if not argv:
        print(USAGE)
        sys.exit(1)

    command, args = argv[0], argv[1:]
    commands = {
        "create": create_command,
        "account": account_command,
        "fund": fund_command,
        "job": job_command,
        "decode-job": decode_job_command,
        "open-round": lambda a: _aggregator_command(a, "open-round"),
        "show": lambda a: _aggregator_command(a, "show"),
    }
    if command not in commands:
        print(f"Unknown command: {command}")
        print(USAGE)
        sys.exit(1)

    try:
        commands[command](args)
    except Exception as e:
        if os.getenv("APTOSFEED_DEBUG"):
            traceback.print_exc()
        print(f"❌ {type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
