"""
Network configuration for the Launchpad SDK.
"""
import importlib.resources
import json
import os
from typing import Any, Dict, Optional

from .exceptions import ValidationError

SUPPORTED_CHAIN_IDS = (10143, 11155111)


class NetworkConfig:
    """Network configuration manager"""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load the packaged network definitions

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is None:
            with importlib.resources.files("launchpad_sdk").joinpath("networks.json").open("r") as f:
                cls._networks_cache = json.load(f)
        return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get configuration for a specific network

        Raises:
            ValueError: If the network is not defined
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(networks.keys())
            raise ValueError(f"Network '{network}' not found. Available networks: {available}")
        return networks[network]

    @classmethod
    def get_network_by_chain_id(cls, chain_id: int) -> str:
        """
        Name of the network serving a chain ID

        Raises:
            ValidationError: If the chain is unsupported or not configured
        """
        if chain_id not in SUPPORTED_CHAIN_IDS:
            raise ValidationError(
                f"Unsupported chain ID {chain_id}; supported: {', '.join(map(str, SUPPORTED_CHAIN_IDS))}"
            )
        for name, config in cls.load_networks().items():
            if config.get("chainId") == chain_id:
                return name
        raise ValidationError(f"No network configured for chain ID {chain_id}")

    @staticmethod
    def _env_prefix(network: str) -> str:
        return network.upper().replace("-", "_")

    @classmethod
    def get_rpc_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        RPC URL for a network

        Precedence: ``override``, then ``<NETWORK>_RPC_URL``, then networks.json.
        """
        if override:
            return override
        env_url = os.environ.get(f"{cls._env_prefix(network)}_RPC_URL")
        if env_url:
            return env_url
        return cls.get_network(network)["rpc"]

    @classmethod
    def get_bundler_url(cls, network: str, override: Optional[str] = None) -> str:
        """
        Bundler URL for a network

        Precedence: ``override``, then ``<NETWORK>_BUNDLER_URL``, then networks.json.
        """
        if override:
            return override
        env_url = os.environ.get(f"{cls._env_prefix(network)}_BUNDLER_URL")
        if env_url:
            return env_url
        return cls.get_network(network)["bundler"]

    @classmethod
    def get_chain_id(cls, network: str) -> int:
        return int(cls.get_network(network)["chainId"])

    @classmethod
    def get_factory_address(cls, network: str) -> str:
        """Token factory contract address"""
        return cls.get_network(network)["factory"]

    @classmethod
    def get_indexer_address(cls, network: str) -> str:
        """Indexing (record) contract address"""
        return cls.get_network(network)["indexer"]

    @classmethod
    def get_entry_point(cls, network: str) -> str:
        return cls.get_network(network)["entryPoint"]

    @classmethod
    def get_account_factory(cls, network: str) -> Optional[str]:
        return cls.get_network(network).get("accountFactory")

    @classmethod
    def get_explorer_url(cls, network: str) -> Optional[str]:
        return cls.get_network(network).get("explorer")

    @classmethod
    def get_native_symbol(cls, network: str) -> str:
        return cls.get_network(network).get("nativeSymbol", "ETH")
