"""
LaunchpadClient - one smart account on one network, fully wired.
"""
import logging
import urllib.parse
from typing import Dict, List, Optional

from eth_account import Account
from eth_account.signers.base import BaseAccount

from .account import SimpleSmartAccount
from .bundler import BundlerClient
from .chain import ChainClient
from .config import SUPPORTED_CHAIN_IDS, NetworkConfig
from .exceptions import ValidationError
from .gas import GasPolicy
from .models import ActionResult, RegisteredToken
from .orchestrator import ActionOrchestrator
from .registry import LocalTokenRegistry
from .submitter import OperationSubmitter


def _validate_url(url_name: str, url: str):
    parsed = urllib.parse.urlparse(url)
    # Check if it's a localhost or 127.0.0.1 address (with or without port)
    host = parsed.netloc.split(":")[0] if parsed.netloc else ""
    is_local = host in ("localhost", "127.0.0.1")
    if parsed.scheme != "https" and not is_local:
        raise ValidationError(f"{url_name} must use https:// for security (got: {parsed.scheme}://)")


class LaunchpadClient:
    """
    Client for deploying, minting and transferring tokens through an
    ERC-4337 smart account.

    To use this client, you'll need:
    - A chain RPC endpoint and a bundler endpoint
    - An owner private key (or an eth-account signer)
    - The token factory and indexer contract addresses
    - Either the smart account address or its account factory
    """

    def __init__(
        self,
        rpc_url: str,
        bundler_url: str,
        chain_id: int,
        factory_address: str,
        indexer_address: str,
        entry_point: str,
        priv_key: Optional[str] = None,
        owner: Optional[BaseAccount] = None,
        smart_account_address: Optional[str] = None,
        account_factory: Optional[str] = None,
        registry: Optional[LocalTokenRegistry] = None,
        explorer_url: Optional[str] = None,
        gas_policy: Optional[GasPolicy] = None,
        bundler_headers: Optional[Dict[str, str]] = None,
        retry_count: int = 3,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the LaunchpadClient

        Args:
            rpc_url: Chain RPC endpoint URL
            bundler_url: ERC-4337 bundler endpoint URL
            chain_id: Chain the client operates on (10143 or 11155111)
            factory_address: Token factory contract address
            indexer_address: Indexing (record) contract address
            entry_point: EntryPoint contract address
            priv_key: Owner private key (optional if owner provided)
            owner: eth-account signer owning the smart account
            smart_account_address: Smart account address; derived if omitted
            account_factory: Account factory for counterfactual accounts
            registry: Token registry (defaults to LAUNCHPAD_REGISTRY_PATH)
            explorer_url: Block explorer base URL
            gas_policy: Gas policy override
            bundler_headers: Extra HTTP headers for the bundler
            retry_count: Number of retries for HTTP requests
            timeout: Timeout for HTTP requests in seconds
            logger: Optional logger instance

        Raises:
            ValidationError: If the chain is unsupported, a URL is not https,
                or no owner key is given
        """
        if chain_id not in SUPPORTED_CHAIN_IDS:
            raise ValidationError(
                f"Unsupported chain ID {chain_id}; supported: {', '.join(map(str, SUPPORTED_CHAIN_IDS))}"
            )
        if not priv_key and owner is None:
            raise ValidationError("Either priv_key or owner must be provided")

        # Validate URLs for security
        for url_name, url in [("rpc_url", rpc_url), ("bundler_url", bundler_url)]:
            _validate_url(url_name, url)

        self.chain_id = chain_id
        self.logger = logger or logging.getLogger(__name__)

        self.chain = ChainClient(rpc_url, expected_chain_id=chain_id, timeout=timeout, logger=self.logger)
        self.bundler = BundlerClient(
            bundler_url, entry_point, retry_count=retry_count, timeout=timeout,
            headers=bundler_headers, logger=self.logger
        )
        self.account = SimpleSmartAccount(
            owner=owner if owner is not None else Account.from_key(priv_key),
            chain=self.chain,
            entry_point=entry_point,
            chain_id=chain_id,
            address=smart_account_address,
            factory_address=account_factory,
        )
        self.registry = registry or LocalTokenRegistry()
        self.submitter = OperationSubmitter(
            self.bundler, self.account, chain_id,
            chain=self.chain, gas_policy=gas_policy, logger=self.logger
        )
        self.orchestrator = ActionOrchestrator(
            self.submitter,
            self.registry,
            chain_id,
            factory_address,
            indexer_address,
            chain=self.chain,
            explorer_url=explorer_url,
            logger=self.logger,
        )

    @classmethod
    def from_network(
        cls,
        network: str,
        priv_key: Optional[str] = None,
        rpc_url: Optional[str] = None,
        bundler_url: Optional[str] = None,
        **kwargs
    ) -> "LaunchpadClient":
        """
        Create a client from a packaged network definition

        Args:
            network: Network name (e.g. ``"monad-testnet"``)
            priv_key: Owner private key
            rpc_url: RPC URL override
            bundler_url: Bundler URL override
            **kwargs: Further constructor arguments

        Returns:
            Configured LaunchpadClient
        """
        config = NetworkConfig.get_network(network)
        NetworkConfig.get_network_by_chain_id(int(config["chainId"]))
        kwargs.setdefault("account_factory", config.get("accountFactory"))
        kwargs.setdefault("explorer_url", config.get("explorer"))
        return cls(
            rpc_url=NetworkConfig.get_rpc_url(network, rpc_url),
            bundler_url=NetworkConfig.get_bundler_url(network, bundler_url),
            chain_id=int(config["chainId"]),
            factory_address=config["factory"],
            indexer_address=config["indexer"],
            entry_point=config["entryPoint"],
            priv_key=priv_key,
            **kwargs
        )

    @property
    def address(self) -> str:
        """Smart account address"""
        return self.account.address

    def assert_chain_id(self) -> None:
        """
        Verify the RPC endpoint serves the configured chain

        Raises:
            ChainError: If the chain ID doesn't match
        """
        self.chain.assert_chain_id()

    def tx_url(self, tx_hash: str) -> Optional[str]:
        """Explorer link for a transaction, or None without an explorer"""
        return self.orchestrator.tx_url(tx_hash)

    def deploy_token(self, name: str, symbol: str, supply: str) -> ActionResult:
        return self.orchestrator.deploy_token(name, symbol, supply)

    def mint_token(self, token_address: str, amount: str) -> ActionResult:
        return self.orchestrator.mint_token(token_address, amount)

    def transfer(self, asset: str, recipient: str, amount: str) -> ActionResult:
        return self.orchestrator.transfer(asset, recipient, amount)

    def list_tokens(self) -> List[RegisteredToken]:
        """Tokens this smart account deployed on this chain"""
        return self.registry.list(self.chain_id, self.address)

    def list_known_tokens(self) -> List[RegisteredToken]:
        """Every token recorded on this chain, regardless of owner"""
        return self.registry.list_known(self.chain_id)

    def refresh_balances(self) -> List[RegisteredToken]:
        return self.orchestrator.refresh_balances()

    def get_native_balance(self, address: Optional[str] = None) -> int:
        """Native balance in wei, of the smart account unless ``address`` is given"""
        return self.chain.get_native_balance(address or self.address)
