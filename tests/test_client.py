"""
Tests for the LaunchpadClient facade.
"""
from unittest.mock import MagicMock, patch

import pytest

from launchpad_sdk.client import LaunchpadClient
from launchpad_sdk.exceptions import ChainError, ValidationError
from launchpad_sdk.models import RegisteredToken
from tests.test_helpers import (
    ENTRY_POINT, FACTORY_ADDRESS, INDEXER_ADDRESS, MONAD_CHAIN_ID, SMART_ACCOUNT,
    TEST_BUNDLER_URL, TEST_PRIV_KEY, TEST_RPC_URL, TOKEN_ADDRESS, TX_HASH
)


def create_test_client(registry, **kwargs):
    params = dict(
        rpc_url=TEST_RPC_URL,
        bundler_url=TEST_BUNDLER_URL,
        chain_id=MONAD_CHAIN_ID,
        factory_address=FACTORY_ADDRESS,
        indexer_address=INDEXER_ADDRESS,
        entry_point=ENTRY_POINT,
        priv_key=TEST_PRIV_KEY,
        smart_account_address=SMART_ACCOUNT,
        registry=registry,
        explorer_url="https://testnet.monadexplorer.com",
    )
    params.update(kwargs)
    return LaunchpadClient(**params)


def test_client_wiring(registry):
    client = create_test_client(registry)

    assert client.address == SMART_ACCOUNT
    assert client.chain_id == MONAD_CHAIN_ID
    assert client.submitter.account is client.account
    assert client.submitter.chain is client.chain
    assert client.orchestrator.registry is registry
    assert client.bundler.entry_point == ENTRY_POINT


@pytest.mark.parametrize("chain_id", [1, 137, 0])
def test_unsupported_chain_rejected(registry, chain_id):
    with pytest.raises(ValidationError):
        create_test_client(registry, chain_id=chain_id)


def test_sepolia_accepted(registry):
    assert create_test_client(registry, chain_id=11155111).chain_id == 11155111


@pytest.mark.parametrize("field", ["rpc_url", "bundler_url"])
def test_http_rejected(registry, field):
    with pytest.raises(ValidationError) as exc_info:
        create_test_client(registry, **{field: "http://remote.example.com"})
    assert field in str(exc_info.value)


@pytest.mark.parametrize("url", ["http://localhost:8545", "http://127.0.0.1:4337"])
def test_localhost_http_allowed(registry, url):
    create_test_client(registry, rpc_url=url, bundler_url=url)


def test_owner_key_required(registry):
    with pytest.raises(ValidationError):
        create_test_client(registry, priv_key=None)


def test_tx_url(registry):
    client = create_test_client(registry)
    assert client.tx_url(TX_HASH) == f"https://testnet.monadexplorer.com/tx/{TX_HASH}"
    assert create_test_client(registry, explorer_url=None).tx_url(TX_HASH) is None


def test_assert_chain_id_matches_stubbed_provider(registry):
    # The stubbed provider reports 0x279f (10143)
    create_test_client(registry).assert_chain_id()


def test_assert_chain_id_mismatch(registry):
    client = create_test_client(registry, chain_id=11155111)
    with pytest.raises(ChainError):
        client.assert_chain_id()


def test_actions_delegate_to_orchestrator(registry):
    client = create_test_client(registry)
    client.orchestrator = MagicMock()

    client.deploy_token("Launch", "LCH", "1000")
    client.mint_token(TOKEN_ADDRESS, "1")
    client.transfer("native", SMART_ACCOUNT, "1")
    client.refresh_balances()

    client.orchestrator.deploy_token.assert_called_once_with("Launch", "LCH", "1000")
    client.orchestrator.mint_token.assert_called_once_with(TOKEN_ADDRESS, "1")
    client.orchestrator.transfer.assert_called_once_with("native", SMART_ACCOUNT, "1")
    client.orchestrator.refresh_balances.assert_called_once_with()


def test_list_tokens(registry):
    client = create_test_client(registry)
    registry.record_deployed(RegisteredToken(
        name="Launch", symbol="LCH", address=TOKEN_ADDRESS, chain_id=MONAD_CHAIN_ID,
        owner_smart_account=SMART_ACCOUNT, created_at="2026-01-01T00:00:00+00:00",
    ))

    assert [t.symbol for t in client.list_tokens()] == ["LCH"]
    assert [t.symbol for t in client.list_known_tokens()] == ["LCH"]


def test_get_native_balance(registry):
    client = create_test_client(registry)
    client.chain = MagicMock()
    client.chain.get_native_balance.return_value = 10**18

    assert client.get_native_balance() == 10**18
    client.chain.get_native_balance.assert_called_once_with(SMART_ACCOUNT)


def test_from_network(registry):
    client = LaunchpadClient.from_network(
        "monad-testnet", priv_key=TEST_PRIV_KEY, smart_account_address=SMART_ACCOUNT, registry=registry
    )

    assert client.chain_id == 10143
    assert client.bundler.url == "https://api.pimlico.io/v2/10143/rpc"
    assert client.orchestrator.factory_address.lower() == FACTORY_ADDRESS.lower()
    assert client.orchestrator.indexer_address.lower() == INDEXER_ADDRESS.lower()
    assert client.tx_url(TX_HASH).startswith("https://testnet.monadexplorer.com/tx/")


def test_from_network_overrides(registry):
    client = LaunchpadClient.from_network(
        "sepolia",
        priv_key=TEST_PRIV_KEY,
        rpc_url="https://sepolia.example.com",
        bundler_url="https://bundler.example.com/sepolia",
        smart_account_address=SMART_ACCOUNT,
        registry=registry,
    )
    assert client.chain.rpc_url == "https://sepolia.example.com"
    assert client.bundler.url == "https://bundler.example.com/sepolia"


def test_from_network_unknown(registry):
    with pytest.raises(ValueError):
        LaunchpadClient.from_network("mainnet", priv_key=TEST_PRIV_KEY, registry=registry)


def test_from_network_rejects_unsupported_chain(registry):
    networks = {"custom": {
        "chainId": 1, "rpc": TEST_RPC_URL, "bundler": TEST_BUNDLER_URL, "entryPoint": ENTRY_POINT,
        "factory": FACTORY_ADDRESS, "indexer": INDEXER_ADDRESS,
    }}
    with patch("launchpad_sdk.config.NetworkConfig._networks_cache", networks):
        with pytest.raises(ValidationError):
            LaunchpadClient.from_network("custom", priv_key=TEST_PRIV_KEY, registry=registry)
