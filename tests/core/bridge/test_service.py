import pytest

from solbridge.core.bridge import BridgeService, BridgeableToken
from solbridge.providers.destination import (
    IndexerDestinationStatusProvider,
    NullDestinationStatusProvider,
)


def test_from_settings_without_indexer(test_settings):
    service = BridgeService.from_settings(test_settings)

    assert service.profile.environment.value == "test"
    assert isinstance(service.destination, NullDestinationStatusProvider)
    assert service.rpc.rpc_url == test_settings.solana_devnet_rpc


def test_from_settings_with_indexer(test_settings):
    settings = test_settings.model_copy(
        update={"bridge_indexer_url": "https://indexer.test", "request_timeout_seconds": 5.0}
    )

    service = BridgeService.from_settings(settings)

    assert isinstance(service.destination, IndexerDestinationStatusProvider)
    assert service.rpc.timeout_s == 5.0


@pytest.mark.asyncio
async def test_check_funds_reads_balances(profile, fake_rpc, source_address):
    fake_rpc.results["getBalance"] = {"context": {"slot": 1}, "value": 500_000}
    fake_rpc.results["getTokenAccountsByOwner"] = {"context": {"slot": 1}, "value": []}
    service = BridgeService(profile, rpc=fake_rpc.client(profile))

    result = await service.check_funds(source_address, BridgeableToken.STABLE, "1")

    assert not result.sufficient
    assert result.shortfall == "Need 1 more USDC"
    assert fake_rpc.methods == ["getBalance", "getTokenAccountsByOwner"]
    await service.close()


@pytest.mark.asyncio
async def test_quote_build_status_flow(profile, fake_rpc, source_address):
    service = BridgeService(profile, rpc=fake_rpc.client(profile))

    quote = service.quote("SOL", "2")
    built = await service.build(source_address, "0x" + "ab" * 20, "SOL", "2")
    status = await service.status(built.correlation_id)

    assert quote.receive_units == 1_999_000_000
    assert status.correlation_id == built.correlation_id
    assert status.state.value == "pending"
