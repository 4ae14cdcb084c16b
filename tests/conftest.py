"""Shared fixtures: network profiles, wallet keys and a scripted Solana RPC node."""

import json
from typing import Any, Dict, List, Set, Tuple

import httpx
import pytest
from nacl.signing import SigningKey

from solbridge.config import Settings
from solbridge.core.bridge.network import NetworkProfile, resolve
from solbridge.core.solana import b58encode
from solbridge.providers.solana_rpc import SolanaRpcClient


BLOCKHASH = b58encode(bytes(range(1, 33)))
DESTINATION = "0x" + "ab" * 20
SIGNATURE = b58encode(bytes([7]) * 64)


class FakeSolanaRpc:
    """Answers JSON-RPC calls from per-method results, errors or outages."""

    def __init__(self) -> None:
        self.results: Dict[str, Any] = {
            "getLatestBlockhash": {
                "context": {"slot": 1},
                "value": {"blockhash": BLOCKHASH, "lastValidBlockHeight": 1234},
            },
            "getHealth": "ok",
        }
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.down: Set[str] = set()
        self.calls: List[Tuple[str, List[Any]]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        method = payload["method"]
        self.calls.append((method, payload["params"]))

        if method in self.down:
            raise httpx.ConnectError("node unreachable", request=request)
        if method in self.errors:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": payload["id"], "error": self.errors[method]}
            )

        result = self.results.get(method)
        if callable(result):
            result = result(payload["params"])
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})

    def client(self, profile: NetworkProfile) -> SolanaRpcClient:
        return SolanaRpcClient(
            profile.rpc_url,
            commitment=profile.commitment,
            transport=httpx.MockTransport(self.handler),
        )

    @property
    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]


@pytest.fixture
def test_settings() -> Settings:
    return Settings(_env_file=None, bridge_environment="test", bridge_indexer_url="")


@pytest.fixture
def profile(test_settings: Settings) -> NetworkProfile:
    return resolve("test", test_settings)


@pytest.fixture
def fake_rpc() -> FakeSolanaRpc:
    return FakeSolanaRpc()


@pytest.fixture
def rpc(fake_rpc: FakeSolanaRpc, profile: NetworkProfile) -> SolanaRpcClient:
    return fake_rpc.client(profile)


@pytest.fixture
def signing_key() -> SigningKey:
    return SigningKey.generate()


@pytest.fixture
def source_address(signing_key: SigningKey) -> str:
    return b58encode(signing_key.verify_key.encode())
