"""
Tests for amount handling and fee-aware quotes.
"""

from decimal import Decimal
import copy

import pytest

from solbridge.core.bridge import (
    BridgeableToken,
    InvalidAmountError,
    UnsupportedTokenError,
)
from solbridge.core.bridge.amounts import MAX_UNITS, format_amount, from_units, to_units
from solbridge.core.bridge.network import TESTNET_CONTRACTS, NetworkEnvironment, build_profile
from solbridge.core.bridge.quote import QuoteEngine


@pytest.fixture
def engine(profile):
    return QuoteEngine(profile)


def test_stable_quote_keeps_full_amount(engine):
    quote = engine.quote("USDC", "10")

    assert quote.token is BridgeableToken.STABLE
    assert quote.estimated_receive_amount == Decimal("10")
    assert quote.receive_units == 10_000_000
    assert quote.relay_fee == Decimal("0.001")
    assert quote.relay_fee_token is BridgeableToken.NATIVE
    assert not quote.fee_in_same_asset
    assert quote.destination_token_address == TESTNET_CONTRACTS["base"]["usdc_token"]


def test_native_quote_deducts_relay_fee(engine):
    quote = engine.quote("SOL", "1.5")

    assert quote.estimated_receive_amount == Decimal("1.499")
    assert quote.estimated_receive_amount + quote.relay_fee == quote.requested_amount
    assert quote.fee_in_same_asset
    assert quote.to_dict() == {
        "token": "NATIVE",
        "amount": "1.5",
        "estimatedReceiveAmount": "1.499",
        "relayFee": "0.001",
        "relayFeeToken": "NATIVE",
        "gasFee": "0.0001",
        "estimatedTime": "~30 seconds",
        "estimatedSeconds": 30,
        "baseAddress": TESTNET_CONTRACTS["base"]["sol_token"],
    }


def test_native_amount_must_exceed_fee(engine):
    with pytest.raises(InvalidAmountError, match="relay fee"):
        engine.quote(BridgeableToken.NATIVE, "0.001")

    assert engine.quote(BridgeableToken.NATIVE, "0.001000001").receive_units == 1


@pytest.mark.parametrize("amount", ["0", "-1", "abc", "NaN", "Infinity", 1.5, True])
def test_invalid_amounts_rejected(engine, amount):
    with pytest.raises(InvalidAmountError):
        engine.quote("SOL", amount)


def test_excess_precision_rejected(engine):
    with pytest.raises(InvalidAmountError, match="decimal places"):
        engine.quote("USDC", "1.0000001")
    with pytest.raises(InvalidAmountError):
        engine.quote("SOL", "1.0000000001")


def test_precision_beyond_decimal_context_is_not_rounded(engine):
    with pytest.raises(InvalidAmountError, match="decimal places"):
        engine.quote("USDC", "1.0000000000000000000000000000001")
    with pytest.raises(InvalidAmountError, match="decimal places"):
        to_units("1.0000000000000000000000000000001", 6)
    with pytest.raises(InvalidAmountError, match="decimal places"):
        to_units("1E-40", 9)
    assert to_units("1.000000000000000000000000000000000", 6) == 1_000_000


def test_amount_must_fit_u64():
    assert to_units("18446744073.709551615", 9) == MAX_UNITS
    with pytest.raises(InvalidAmountError, match="maximum transferable amount"):
        to_units("18446744073.709551616", 9)
    with pytest.raises(InvalidAmountError, match="maximum transferable amount"):
        to_units("1E+400", 6)


def test_unknown_token_rejected(engine):
    with pytest.raises(UnsupportedTokenError, match="BTC"):
        engine.quote("BTC", "1")


def test_token_without_destination_mapping_rejected():
    contracts = copy.deepcopy(TESTNET_CONTRACTS)
    del contracts["base"]["sol_token"]
    profile = build_profile(NetworkEnvironment.TEST, rpc_url="http://localhost:8899", contracts=contracts)

    with pytest.raises(UnsupportedTokenError, match="no destination mapping"):
        QuoteEngine(profile).quote("SOL", "1")
    assert QuoteEngine(profile).quote("USDC", "1").receive_units == 1_000_000


def test_unit_conversion():
    assert to_units("1.5", 9) == 1_500_000_000
    assert to_units(Decimal("0.000001"), 6) == 1
    assert to_units(2, 6) == 2_000_000
    assert from_units(1_000_000, 9) == Decimal("0.001")
    assert format_amount(from_units(10_000_000, 6)) == "10"
    assert format_amount(Decimal("1.500000000")) == "1.5"
