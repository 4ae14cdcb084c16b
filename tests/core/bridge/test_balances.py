"""
Tests for balance reads and pre-validation of funds.
"""

from decimal import Decimal

import pytest

from solbridge.core.bridge import BridgeableToken, InvalidAddressError, NetworkUnavailableError
from solbridge.core.bridge.balances import BalanceReader, check_funds
from solbridge.core.bridge.models import BalanceSnapshot
from solbridge.core.bridge.quote import QuoteEngine
from solbridge.providers.solana_rpc import INVALID_PARAMS


def _token_account(pubkey, mint, amount):
    return {
        "pubkey": pubkey,
        "account": {
            "data": {
                "parsed": {
                    "info": {
                        "mint": mint,
                        "owner": "owner",
                        "tokenAmount": {"amount": str(amount), "decimals": 6},
                    }
                }
            }
        },
    }


def _snapshot(native_units, stable_units=0):
    return BalanceSnapshot(
        address="wallet",
        native=Decimal(native_units).scaleb(-9),
        tokens={BridgeableToken.STABLE: Decimal(stable_units).scaleb(-6)},
        native_units=native_units,
        token_units={BridgeableToken.STABLE: stable_units},
    )


@pytest.mark.asyncio
async def test_fresh_wallet_reports_zero(profile, rpc, fake_rpc, source_address):
    fake_rpc.results["getBalance"] = {"context": {"slot": 1}, "value": 0}
    fake_rpc.results["getTokenAccountsByOwner"] = {"context": {"slot": 1}, "value": []}

    snapshot = await BalanceReader(profile, rpc).balances(source_address)

    assert snapshot.native == Decimal("0")
    assert snapshot.tokens == {BridgeableToken.STABLE: Decimal("0")}
    assert snapshot.to_dict() == {"address": source_address, "native": "0", "tokens": {"STABLE": "0"}}


@pytest.mark.asyncio
async def test_token_accounts_are_summed(profile, rpc, fake_rpc, source_address):
    mint = profile.deployment(BridgeableToken.STABLE).source_mint
    fake_rpc.results["getBalance"] = {"context": {"slot": 1}, "value": 2_500_000_000}
    fake_rpc.results["getTokenAccountsByOwner"] = {
        "context": {"slot": 1},
        "value": [_token_account("acct1", mint, 1_250_000), _token_account("acct2", mint, 750_000)],
    }

    snapshot = await BalanceReader(profile, rpc).balances(source_address)

    assert snapshot.native == Decimal("2.5")
    assert snapshot.tokens[BridgeableToken.STABLE] == Decimal("2")
    assert snapshot.units_of(BridgeableToken.STABLE) == 2_000_000
    method, params = fake_rpc.calls[-1]
    assert method == "getTokenAccountsByOwner"
    assert params[1] == {"mint": mint}


@pytest.mark.asyncio
async def test_missing_mint_reports_zero(profile, rpc, fake_rpc, source_address):
    fake_rpc.results["getBalance"] = {"context": {"slot": 1}, "value": 5}
    fake_rpc.errors["getTokenAccountsByOwner"] = {"code": INVALID_PARAMS, "message": "Invalid param: could not find mint"}

    snapshot = await BalanceReader(profile, rpc).balances(source_address)

    assert snapshot.units_of(BridgeableToken.STABLE) == 0
    assert snapshot.units_of(BridgeableToken.NATIVE) == 5


@pytest.mark.asyncio
async def test_node_errors_propagate(profile, rpc, fake_rpc, source_address):
    fake_rpc.results["getBalance"] = {"context": {"slot": 1}, "value": 5}
    fake_rpc.errors["getTokenAccountsByOwner"] = {"code": -32005, "message": "Node is behind"}

    with pytest.raises(NetworkUnavailableError):
        await BalanceReader(profile, rpc).balances(source_address)


@pytest.mark.asyncio
async def test_invalid_address_rejected(profile, rpc, fake_rpc):
    with pytest.raises(InvalidAddressError):
        await BalanceReader(profile, rpc).balances("0x" + "ab" * 20)
    assert fake_rpc.calls == []


def test_native_transfer_needs_principal_plus_fee(profile):
    quote = QuoteEngine(profile).quote("SOL", "1")

    assert check_funds(_snapshot(1_001_000_000), quote).sufficient

    short = check_funds(_snapshot(1_000_500_000), quote)
    assert not short.sufficient
    assert short.required_native_units == 1_001_000_000
    assert short.shortfall == "Need 0.0005 more SOL for the transfer and relay fee"


def test_stable_transfer_needs_tokens_and_sol_fee(profile):
    quote = QuoteEngine(profile).quote("USDC", "10")

    assert check_funds(_snapshot(1_000_000, 10_000_000), quote).sufficient

    no_tokens = check_funds(_snapshot(1_000_000, 9_000_000), quote)
    assert no_tokens.shortfall == "Need 1 more USDC"

    no_fee = check_funds(_snapshot(999_999, 10_000_000), quote)
    assert not no_fee.sufficient
    assert no_fee.required_native_units == 1_000_000
