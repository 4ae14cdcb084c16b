"""
Network profiles for the Solana -> Base bridge.

A profile bundles everything environment specific: the Solana RPC endpoint,
the bridge/relayer programs, the fee-receiver vault, token mints on both
ledgers and the rule for validating destination addresses. Profiles are
resolved once and injected; nothing here is mutated at runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

from eth_utils import is_address, is_hex_address
from solders.pubkey import Pubkey

from ..solana import is_valid_public_key, parse_public_key
from .constants import BridgeableToken
from .errors import ConfigurationError

AddressValidator = Callable[[str], bool]


class NetworkEnvironment(str, Enum):
    TEST = "test"
    MAIN = "main"

    @classmethod
    def parse(cls, value: "NetworkEnvironment | str") -> "NetworkEnvironment":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        if key in {"main", "mainnet", "mainnet-beta", "production"}:
            return cls.MAIN
        if key in {"test", "testnet", "devnet", "sepolia"}:
            return cls.TEST
        raise ConfigurationError(f"Unknown bridge environment: {value!r}")


def evm_address_validator(address: str) -> bool:
    """``0x`` + 40 hex characters; mixed-case input must carry a valid EIP-55 checksum."""

    if not isinstance(address, str) or len(address) != 42 or not address.startswith("0x"):
        return False
    return bool(is_address(address))


@dataclass(frozen=True)
class TokenDeployment:
    token: BridgeableToken
    source_mint: str
    destination_token: Optional[str]
    decimals: int

    @property
    def mint_key(self) -> Pubkey:
        return parse_public_key(self.source_mint)


@dataclass(frozen=True)
class DestinationContracts:
    bridge: str
    bridge_validator: str
    token_factory: str


@dataclass(frozen=True)
class NetworkProfile:
    environment: NetworkEnvironment
    rpc_url: str
    bridge_program: str
    relayer_program: str
    fee_receiver: str
    tokens: Mapping[BridgeableToken, TokenDeployment]
    destination: DestinationContracts
    commitment: str = "confirmed"
    source_chain: str = "Solana"
    destination_chain: str = "Base"
    destination_address_validator: AddressValidator = field(default=evm_address_validator, compare=False)

    @property
    def fee_receiver_key(self) -> Pubkey:
        return parse_public_key(self.fee_receiver)

    @property
    def is_mainnet(self) -> bool:
        return self.environment is NetworkEnvironment.MAIN

    def deployment(self, token: BridgeableToken) -> Optional[TokenDeployment]:
        return self.tokens.get(token)

    def is_valid_destination(self, address: str) -> bool:
        return bool(self.destination_address_validator(address))


TESTNET_CONTRACTS: Dict[str, Dict[str, Any]] = {
    "solana": {
        "bridge_program": "7c6mteAcTXaQ1MFBCrnuzoZVTTAEfZwa6wgy4bqX3KXC",
        "relayer_program": "56MBBEYAtQAdjT4e1NzHD8XaoyRSTvfgbSVVcEcHj51H",
        "gas_fee_receiver": "AFs1LCbodhvwpgX3u3URLsud6R1XMSaMiQ5LtXw4GKYT",
        "wrapped_sol_mint": "So11111111111111111111111111111111111111112",
        "usdc_mint": "4zMMC9srt5Ri5X14GAgXhaHii3GnPAEERYPJgZJDncDU",
    },
    "base": {
        "bridge": "0x01824a90d32A69022DdAEcC6C5C14Ed08dB4EB9B",
        "bridge_validator": "0xa80C07DF38fB1A5b3E6a4f4FAAB71E7a056a4EC7",
        "token_factory": "0x488EB7F7cb2568e31595D48cb26F63963Cc7565D",
        "sol_token": "0xCace0c896714DaF7098FFD8CC54aFCFe0338b4BC",
        "usdc_token": "0x036CbD53842c5426634e7929541eC2318f3dCF7e",
    },
}

MAINNET_CONTRACTS: Dict[str, Dict[str, Any]] = {
    "solana": {
        "bridge_program": "HNCne2FkVaNghhjKXapxJzPaBvAKDG1Ge3gqhZyfVWLM",
        "relayer_program": "g1et5VenhfJHJwsdJsDbxWZuotD5H4iELNG61kS4fb9",
        # No dedicated receiver published yet; the bridge program doubles as the vault.
        "gas_fee_receiver": "HNCne2FkVaNghhjKXapxJzPaBvAKDG1Ge3gqhZyfVWLM",
        "wrapped_sol_mint": "So11111111111111111111111111111111111111112",
        "usdc_mint": "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v",
    },
    "base": {
        "bridge": "0x3eff766C76a1be2Ce1aCF2B69c78bCae257D5188",
        "bridge_validator": "0xAF24c1c24Ff3BF1e6D882518120fC25442d6794B",
        "token_factory": "0xDD56781d0509650f8C2981231B6C917f2d5d7dF2",
        "sol_token": "0x311935Cd80B76769bF2ecC9D8Ab7635b2139cf82",
        "usdc_token": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
    },
}

CONTRACTS_BY_ENVIRONMENT: Dict[NetworkEnvironment, Dict[str, Dict[str, Any]]] = {
    NetworkEnvironment.TEST: TESTNET_CONTRACTS,
    NetworkEnvironment.MAIN: MAINNET_CONTRACTS,
}


def _require(value: Optional[str], label: str) -> str:
    if not value or not str(value).strip():
        raise ConfigurationError(f"Missing required profile field: {label}")
    return str(value).strip()


def _require_solana_key(value: Optional[str], label: str) -> str:
    key = _require(value, label)
    if not is_valid_public_key(key):
        raise ConfigurationError(f"Profile field {label} is not a valid Solana public key: {key}")
    return key


def _optional_evm(value: Optional[str], label: str) -> Optional[str]:
    if not value:
        return None
    if not is_hex_address(value):
        raise ConfigurationError(f"Profile field {label} is not a valid destination address: {value}")
    return value


def build_profile(
    environment: NetworkEnvironment,
    *,
    rpc_url: Optional[str],
    contracts: Mapping[str, Mapping[str, Any]],
    commitment: str = "confirmed",
    stable_destination_token: Optional[str] = None,
    destination_address_validator: AddressValidator = evm_address_validator,
) -> NetworkProfile:
    """Assemble and validate a profile from raw contract tables."""

    solana = contracts.get("solana") or {}
    base = contracts.get("base") or {}

    tokens = {
        BridgeableToken.NATIVE: TokenDeployment(
            token=BridgeableToken.NATIVE,
            source_mint=_require_solana_key(solana.get("wrapped_sol_mint"), "solana.wrapped_sol_mint"),
            destination_token=_optional_evm(base.get("sol_token"), "base.sol_token"),
            decimals=BridgeableToken.NATIVE.decimals,
        ),
        BridgeableToken.STABLE: TokenDeployment(
            token=BridgeableToken.STABLE,
            source_mint=_require_solana_key(solana.get("usdc_mint"), "solana.usdc_mint"),
            destination_token=_optional_evm(
                stable_destination_token or base.get("usdc_token"), "base.usdc_token"
            ),
            decimals=BridgeableToken.STABLE.decimals,
        ),
    }

    return NetworkProfile(
        environment=environment,
        rpc_url=_require(rpc_url, "rpc_url"),
        bridge_program=_require_solana_key(solana.get("bridge_program"), "solana.bridge_program"),
        relayer_program=_require_solana_key(solana.get("relayer_program"), "solana.relayer_program"),
        fee_receiver=_require_solana_key(solana.get("gas_fee_receiver"), "solana.gas_fee_receiver"),
        tokens=MappingProxyType(tokens),
        destination=DestinationContracts(
            bridge=_require(base.get("bridge"), "base.bridge"),
            bridge_validator=_require(base.get("bridge_validator"), "base.bridge_validator"),
            token_factory=_require(base.get("token_factory"), "base.token_factory"),
        ),
        commitment=_require(commitment, "commitment"),
        destination_address_validator=destination_address_validator,
    )


def resolve(environment: "NetworkEnvironment | str", settings: Any = None) -> NetworkProfile:
    """Return the validated profile for ``environment``.

    Raises ConfigurationError when a required field (RPC URL, program ids,
    fee receiver, mints) is absent or malformed.
    """

    env = NetworkEnvironment.parse(environment)
    if settings is None:
        from ...config import settings as default_settings

        settings = default_settings

    rpc_url = settings.solana_mainnet_rpc if env is NetworkEnvironment.MAIN else settings.solana_devnet_rpc
    return build_profile(
        env,
        rpc_url=rpc_url,
        contracts=CONTRACTS_BY_ENVIRONMENT[env],
        commitment=getattr(settings, "solana_commitment", "confirmed"),
        stable_destination_token=getattr(settings, "stable_destination_token", None),
    )
