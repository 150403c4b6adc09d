"""
Direct chain access over web3.py.

Used for the confirmation fallback, smart-account nonce and code lookups,
and balance reads.
"""
import logging
from typing import Optional

from web3 import Web3
from web3.exceptions import TransactionNotFound, Web3Exception

from .contracts import encode_balance_of, encode_call
from .exceptions import ChainError
from .models import Receipt

GET_NONCE = "getNonce(address,uint192)"


class ChainClient:
    """Thin wrapper over a web3 HTTP provider."""

    def __init__(
        self,
        rpc_url: str,
        expected_chain_id: Optional[int] = None,
        timeout: int = 30,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the chain client

        Args:
            rpc_url: JSON-RPC endpoint of the chain
            expected_chain_id: Chain ID the endpoint must report (checked lazily)
            timeout: HTTP timeout in seconds
            logger: Optional logger instance
        """
        self.rpc_url = rpc_url
        self.expected_chain_id = expected_chain_id
        self.logger = logger or logging.getLogger(__name__)
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))

    @property
    def chain_id(self) -> int:
        try:
            return int(self.w3.eth.chain_id)
        except (Web3Exception, OSError) as e:
            raise ChainError(f"Failed to read chain ID: {str(e)}") from e

    def assert_chain_id(self) -> None:
        """
        Verify the RPC endpoint serves the expected chain

        Raises:
            ChainError: If the reported chain ID differs
        """
        if self.expected_chain_id is None:
            return
        actual = self.chain_id
        if actual != self.expected_chain_id:
            raise ChainError(
                f"Chain ID mismatch: expected {self.expected_chain_id}, RPC reports {actual}"
            )

    def get_transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        """
        Fetch a transaction receipt

        Returns:
            Receipt, or None if the chain does not know the transaction

        Raises:
            ChainError: If the query itself fails
        """
        try:
            web3_receipt = self.w3.eth.get_transaction_receipt(tx_hash)
        except TransactionNotFound:
            return None
        except (Web3Exception, OSError, ValueError) as e:
            raise ChainError(f"Failed to fetch receipt for {tx_hash}: {str(e)}") from e
        if web3_receipt is None:
            return None
        return Receipt.from_transaction_receipt(web3_receipt)

    def get_code(self, address: str) -> bytes:
        try:
            return bytes(self.w3.eth.get_code(Web3.to_checksum_address(address)))
        except (Web3Exception, OSError) as e:
            raise ChainError(f"Failed to fetch code at {address}: {str(e)}") from e

    def call(self, to: str, data: str) -> bytes:
        """Perform an ``eth_call`` against the latest block"""
        try:
            result = self.w3.eth.call({"to": Web3.to_checksum_address(to), "data": data})
        except (Web3Exception, OSError) as e:
            raise ChainError(f"eth_call to {to} failed: {str(e)}") from e
        return bytes(result)

    def get_native_balance(self, address: str) -> int:
        try:
            return int(self.w3.eth.get_balance(Web3.to_checksum_address(address)))
        except (Web3Exception, OSError) as e:
            raise ChainError(f"Failed to fetch balance of {address}: {str(e)}") from e

    def get_token_balance(self, token: str, holder: str) -> int:
        """ERC-20 ``balanceOf`` in base units"""
        raw = self.call(token, encode_balance_of(holder))
        return int.from_bytes(raw[:32], "big") if raw else 0

    def get_entry_point_nonce(self, entry_point: str, sender: str, key: int = 0) -> int:
        """Current EntryPoint nonce for a smart account"""
        raw = self.call(entry_point, encode_call(GET_NONCE, [Web3.to_checksum_address(sender), key]))
        return int.from_bytes(raw[:32], "big") if raw else 0

