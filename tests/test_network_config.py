"""
Tests for the NetworkConfig module.
"""
import os
from unittest.mock import patch

import pytest

from launchpad_sdk.config import SUPPORTED_CHAIN_IDS, NetworkConfig
from launchpad_sdk.exceptions import ValidationError

# Sample network configuration
MOCK_NETWORKS = {
    "test-network": {
        "chainId": 10143,
        "rpc": "https://test.example.com",
        "bundler": "https://bundler.test.example.com",
        "explorer": "https://explorer.test.example.com",
        "nativeSymbol": "TST",
        "entryPoint": "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789",
        "accountFactory": "0x9406Cc6185a346906296840746125a0E44976454",
        "factory": "0x1234567890123456789012345678901234567890",
        "indexer": "0x0987654321098765432109876543210987654321"
    }
}


class TestNetworkConfig:
    """Test NetworkConfig class."""

    def test_load_networks_cached(self):
        """Test that networks are cached after first load."""
        NetworkConfig._networks_cache = MOCK_NETWORKS

        # This should return from cache without opening the file
        with patch("importlib.resources.files") as mock_files:
            result = NetworkConfig.load_networks()
            mock_files.assert_not_called()

        assert result == MOCK_NETWORKS

    def test_packaged_networks(self):
        """The shipped networks.json covers exactly the supported chains."""
        networks = NetworkConfig.load_networks()

        assert sorted(n["chainId"] for n in networks.values()) == sorted(SUPPORTED_CHAIN_IDS)
        assert NetworkConfig.get_chain_id("monad-testnet") == 10143
        assert NetworkConfig.get_chain_id("sepolia") == 11155111
        assert NetworkConfig.get_native_symbol("monad-testnet") == "MON"
        assert NetworkConfig.get_factory_address("monad-testnet").lower() == \
            "0x71fca30b945dd1bc30fe7a8bec63656213bc8a74"
        for name in networks:
            assert NetworkConfig.get_rpc_url(name).startswith("https://")
            assert NetworkConfig.get_bundler_url(name).startswith("https://")

    def test_get_network(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS

        result = NetworkConfig.get_network("test-network")

        assert result == MOCK_NETWORKS["test-network"]
        assert result["rpc"] == "https://test.example.com"

    def test_get_network_not_found(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS

        with pytest.raises(ValueError) as exc_info:
            NetworkConfig.get_network("non-existent-network")

        # Verify error message includes available networks
        assert "test-network" in str(exc_info.value)

    def test_get_network_by_chain_id(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_network_by_chain_id(10143) == "test-network"

    def test_get_network_by_unsupported_chain_id(self):
        with pytest.raises(ValidationError):
            NetworkConfig.get_network_by_chain_id(1)

    def test_supported_chain_without_network(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with pytest.raises(ValidationError):
            NetworkConfig.get_network_by_chain_id(11155111)

    def test_get_rpc_url_default(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_rpc_url("test-network") == "https://test.example.com"

    def test_get_rpc_url_override(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        result = NetworkConfig.get_rpc_url("test-network", override="https://override.example.com")
        assert result == "https://override.example.com"

    def test_get_rpc_url_env_var(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with patch.dict(os.environ, {"TEST_NETWORK_RPC_URL": "https://env.example.com"}):
            assert NetworkConfig.get_rpc_url("test-network") == "https://env.example.com"

    def test_get_bundler_url_env_var(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.get_bundler_url("test-network") == "https://bundler.test.example.com"
        with patch.dict(os.environ, {"TEST_NETWORK_BUNDLER_URL": "https://pimlico.example.com?apikey=x"}):
            assert NetworkConfig.get_bundler_url("test-network") == "https://pimlico.example.com?apikey=x"
        assert NetworkConfig.get_bundler_url("test-network", "https://o.example.com") == "https://o.example.com"

    def test_address_getters(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS

        assert NetworkConfig.get_factory_address("test-network") == "0x1234567890123456789012345678901234567890"
        assert NetworkConfig.get_indexer_address("test-network") == "0x0987654321098765432109876543210987654321"
        assert NetworkConfig.get_entry_point("test-network") == "0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789"
        assert NetworkConfig.get_account_factory("test-network") == "0x9406Cc6185a346906296840746125a0E44976454"
        assert NetworkConfig.get_explorer_url("test-network") == "https://explorer.test.example.com"
        assert NetworkConfig.get_native_symbol("test-network") == "TST"
