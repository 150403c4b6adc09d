"""
Pytest fixtures for the Launchpad SDK tests.
"""
import time
from unittest.mock import MagicMock

import pytest
from eth_account import Account
from web3.providers.rpc import HTTPProvider

from launchpad_sdk.config import NetworkConfig
from launchpad_sdk.registry import LocalTokenRegistry
from tests.test_helpers import SMART_ACCOUNT, TEST_PRIV_KEY

# ─────────────────────────────────────────────────────────────────────────
#  FAST POLLING BEHAVIOUR FOR TESTS
# ─────────────────────────────────────────────────────────────────────────

# Make time.sleep instantaneous so receipt polling and the fallback grace
# period don't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    Works for all tests because it is autouse.
    """
    def _dummy(self, method, params=None, _=None):      # signature match
        if method == "eth_chainId":
            return {"jsonrpc": "2.0", "id": 1, "result": "0x279f"}      # Monad testnet
        if method == "eth_gasPrice":
            return {"jsonrpc": "2.0", "id": 1, "result": "0x3b9aca00"}  # 1 gwei
        if method == "eth_call":
            return {"jsonrpc": "2.0", "id": 1, "result": "0x" + "00" * 32}
        if method == "eth_getCode":
            return {"jsonrpc": "2.0", "id": 1, "result": "0x"}
        # everything else – return something harmless
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


@pytest.fixture(autouse=True)
def _reset_network_cache():
    NetworkConfig._networks_cache = None
    yield
    NetworkConfig._networks_cache = None


@pytest.fixture
def owner_account():
    """Deterministic owner key for the smart account"""
    return Account.from_key(TEST_PRIV_KEY)


@pytest.fixture
def registry(tmp_path):
    """Registry backed by a throwaway file"""
    return LocalTokenRegistry(store_path=str(tmp_path / "tokens.json"))


@pytest.fixture
def mock_submitter():
    """Submitter double bound to the test smart account"""
    submitter = MagicMock()
    submitter.account.address = SMART_ACCOUNT
    return submitter


@pytest.fixture
def mock_chain():
    chain = MagicMock()
    chain.get_token_balance.return_value = 0
    return chain
