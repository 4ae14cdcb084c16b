import httpx
import pytest

from solbridge.core.bridge import NetworkUnavailableError
from solbridge.providers.solana_rpc import SolanaRpcClient, SolanaRpcError


RPC_URL = "https://rpc.test"


def _client(handler) -> SolanaRpcClient:
    return SolanaRpcClient(RPC_URL, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_call_returns_result_member(fake_rpc, profile):
    client = fake_rpc.client(profile)

    latest = await client.get_latest_blockhash()

    assert latest.last_valid_block_height == 1234
    method, params = fake_rpc.calls[0]
    assert method == "getLatestBlockhash"
    assert params == [{"commitment": "confirmed"}]
    await client.close()


@pytest.mark.asyncio
async def test_rpc_error_carries_code():
    def handler(request):
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "bad"}})

    client = _client(handler)
    with pytest.raises(SolanaRpcError) as excinfo:
        await client.get_balance("wallet")

    assert excinfo.value.code == -32602
    assert excinfo.value.method == "getBalance"
    assert excinfo.value.retryable


@pytest.mark.asyncio
async def test_http_failure_is_network_unavailable():
    client = _client(lambda request: httpx.Response(429, text="slow down"))

    with pytest.raises(NetworkUnavailableError, match="429"):
        await client.get_signature_status("sig")


@pytest.mark.asyncio
async def test_non_json_body_is_network_unavailable():
    client = _client(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(NetworkUnavailableError, match="non-JSON"):
        await client.get_balance("wallet")


@pytest.mark.asyncio
async def test_missing_blockhash_is_network_unavailable(fake_rpc, profile):
    fake_rpc.results["getLatestBlockhash"] = {"context": {"slot": 1}, "value": {}}

    with pytest.raises(NetworkUnavailableError):
        await fake_rpc.client(profile).get_latest_blockhash()


@pytest.mark.asyncio
async def test_signature_status_parsing(fake_rpc, profile):
    fake_rpc.results["getSignatureStatuses"] = {
        "context": {"slot": 5},
        "value": [{"slot": 4, "confirmations": None, "confirmationStatus": "finalized", "err": None}],
    }

    status = await fake_rpc.client(profile).get_signature_status("sig")

    assert status.confirmation_status == "finalized"
    assert status.err is None
    assert fake_rpc.calls[0][1] == [["sig"], {"searchTransactionHistory": True}]


@pytest.mark.asyncio
async def test_health_check_reports_degraded_node(fake_rpc, profile):
    client = fake_rpc.client(profile)
    assert await client.health_check() == {"status": "healthy"}

    fake_rpc.down.add("getHealth")
    health = await client.health_check()

    assert health["status"] == "degraded"
