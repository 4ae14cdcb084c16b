"""
Tests for network profile resolution and validation.
"""

import copy
import dataclasses

import pytest

from solbridge.config import Settings
from solbridge.core.bridge import BridgeableToken, ConfigurationError
from solbridge.core.bridge.network import (
    TESTNET_CONTRACTS,
    NetworkEnvironment,
    build_profile,
    evm_address_validator,
    resolve,
)


def test_resolve_test_profile(test_settings):
    profile = resolve("test", test_settings)

    assert profile.environment is NetworkEnvironment.TEST
    assert not profile.is_mainnet
    assert profile.rpc_url == "https://api.devnet.solana.com"
    assert profile.fee_receiver == "AFs1LCbodhvwpgX3u3URLsud6R1XMSaMiQ5LtXw4GKYT"
    assert profile.deployment(BridgeableToken.STABLE).source_mint == "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU"
    assert profile.deployment(BridgeableToken.NATIVE).decimals == 9
    assert profile.deployment(BridgeableToken.STABLE).decimals == 6
    assert (profile.source_chain, profile.destination_chain) == ("Solana", "Base")


def test_resolve_main_profile_accepts_aliases(test_settings):
    profile = resolve("mainnet", test_settings)

    assert profile.is_mainnet
    assert profile.rpc_url == "https://api.mainnet-beta.solana.com"
    assert profile.fee_receiver == profile.bridge_program
    assert profile.deployment(BridgeableToken.STABLE).source_mint == "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
    assert NetworkEnvironment.parse("devnet") is NetworkEnvironment.TEST


def test_unknown_environment_is_configuration_error(test_settings):
    with pytest.raises(ConfigurationError):
        resolve("staging", test_settings)


def test_missing_rpc_url_is_configuration_error():
    settings = Settings(_env_file=None, solana_devnet_rpc="")

    with pytest.raises(ConfigurationError, match="rpc_url"):
        resolve("test", settings)


def test_malformed_program_id_is_configuration_error():
    contracts = copy.deepcopy(TESTNET_CONTRACTS)
    contracts["solana"]["gas_fee_receiver"] = "not-a-key"

    with pytest.raises(ConfigurationError, match="gas_fee_receiver"):
        build_profile(NetworkEnvironment.TEST, rpc_url="http://localhost:8899", contracts=contracts)


def test_missing_mint_is_configuration_error():
    contracts = copy.deepcopy(TESTNET_CONTRACTS)
    del contracts["solana"]["usdc_mint"]

    with pytest.raises(ConfigurationError, match="usdc_mint"):
        build_profile(NetworkEnvironment.TEST, rpc_url="http://localhost:8899", contracts=contracts)


def test_stable_destination_override(test_settings):
    override = "0x" + "12" * 20
    settings = test_settings.model_copy(update={"stable_destination_token": override})

    profile = resolve("test", settings)

    assert profile.deployment(BridgeableToken.STABLE).destination_token == override


def test_profile_is_immutable(profile):
    with pytest.raises(dataclasses.FrozenInstanceError):
        profile.rpc_url = "http://elsewhere"
    with pytest.raises(TypeError):
        profile.tokens[BridgeableToken.NATIVE] = None


@pytest.mark.parametrize(
    "address, valid",
    [
        ("0x" + "ab" * 20, True),
        ("0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed", True),
        ("0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAeD", False),
        ("0x" + "ab" * 19, False),
        ("ab" * 21, False),
        ("0x" + "zz" * 20, False),
        ("", False),
    ],
)
def test_destination_address_validation(address, valid):
    assert evm_address_validator(address) is valid


def test_settings_accept_solana_network_alias(monkeypatch):
    monkeypatch.delenv("BRIDGE_ENVIRONMENT", raising=False)
    monkeypatch.setenv("SOLANA_NETWORK", "mainnet")

    settings = Settings(_env_file=None)

    assert settings.bridge_environment == "mainnet"
    assert resolve(settings.bridge_environment, settings).is_mainnet
