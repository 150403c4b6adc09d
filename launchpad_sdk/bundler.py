"""
JSON-RPC client for ERC-4337 bundlers.
"""
import itertools
import json
import logging
import time
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .exceptions import BundlerError, BundlerTimeoutError
from .models import UserOperationRequest, parse_quantity

if TYPE_CHECKING:
    from .account import SmartAccount

GAS_ESTIMATE_KEYS = ("callGasLimit", "verificationGasLimit", "preVerificationGas")
# Floor for a single receipt poll near the deadline, in seconds
MIN_POLL_TIMEOUT = 1.0

# JSON-RPC error codes bundlers use for validation/simulation failures
SIMULATION_ERROR_CODES = {-32500, -32501, -32502, -32521, -32602}


def _detect_simulation_error(error: Dict[str, Any]) -> bool:
    """Best-effort detection of simulation failures from bundler error payloads"""
    message = str(error.get("message") or "").lower()
    if "simulation" in message or "failedop" in message or message.startswith("aa"):
        return True
    code = error.get("code")
    if isinstance(code, int) and code in SIMULATION_ERROR_CODES:
        return True
    data = error.get("data")
    if isinstance(data, dict) and "failedop" in json.dumps(data).lower():
        return True
    return False


class BundlerClient:
    """
    Client for a bundler's ERC-4337 JSON-RPC namespace.

    Bundlers also proxy standard ``eth_`` methods, which is how fee data is
    fetched when preparing an operation.
    """

    def __init__(
        self,
        url: str,
        entry_point: str,
        retry_count: int = 3,
        timeout: int = 30,
        headers: Optional[Dict[str, str]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the bundler client

        Args:
            url: Bundler RPC endpoint
            entry_point: EntryPoint contract address the bundler serves
            retry_count: Number of retries for transient HTTP failures
            timeout: Timeout for each HTTP request in seconds
            headers: Extra HTTP headers (API keys and the like)
            logger: Optional logger instance
        """
        self.url = url
        self.entry_point = entry_point
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._ids = itertools.count(1)

        self.session = requests.Session()
        if headers:
            self.session.headers.update(headers)
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["POST"],
            raise_on_status=False,
            connect=retry_count,
            read=retry_count,
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    def _rpc(self, method: str, params: List[Any], timeout: Optional[float] = None) -> Any:
        """
        Perform one JSON-RPC call

        ``timeout`` overrides the client-wide request timeout for this call.

        Raises:
            BundlerError: On transport failure, HTTP error status, malformed
                response, or a JSON-RPC error object
        """
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        self.logger.debug(f"Bundler request: {method}")

        try:
            response = self.session.post(self.url, json=payload, timeout=timeout or self.timeout)
        except requests.RequestException as e:
            raise BundlerError(f"Bundler request {method} failed: {str(e)}") from e

        if response.status_code >= 400:
            raise BundlerError(
                f"Bundler responded with HTTP {response.status_code} to {method}",
                code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BundlerError(f"Invalid JSON response from bundler: {str(e)}") from e

        if not isinstance(data, dict):
            raise BundlerError(f"Unexpected bundler response for {method}: {data!r}")

        if data.get("error"):
            error = data["error"] if isinstance(data["error"], dict) else {"message": str(data["error"])}
            raise BundlerError(
                str(error.get("message") or "Bundler error"),
                code=error.get("code"),
                simulation=_detect_simulation_error(error)
            )
        return data.get("result")

    def get_fee_data(self) -> Dict[str, int]:
        """
        Current fee suggestion for user operations

        Returns:
            Dict with ``maxFeePerGas`` and ``maxPriorityFeePerGas`` in wei
        """
        gas_price = parse_quantity(self._rpc("eth_gasPrice", [])) or 0
        try:
            priority = parse_quantity(self._rpc("eth_maxPriorityFeePerGas", []))
        except BundlerError as e:
            self.logger.debug(f"eth_maxPriorityFeePerGas unavailable, using gas price: {e}")
            priority = None
        if priority is None or priority > gas_price:
            priority = gas_price
        return {"maxFeePerGas": gas_price, "maxPriorityFeePerGas": priority}

    def prepare_user_operation(
        self,
        account: "SmartAccount",
        request: UserOperationRequest
    ) -> Dict[str, Any]:
        """
        Build an unsigned user operation and ask the bundler for gas estimates

        The returned operation carries the bundler's estimates under the
        usual camelCase keys; a key is None when the bundler omitted it.

        Args:
            account: Smart account that will send the operation
            request: Calls to batch

        Returns:
            Unsigned user operation dict

        Raises:
            BundlerError: If the bundler rejects the estimation
        """
        fees = self.get_fee_data()
        user_op: Dict[str, Any] = {
            "sender": account.address,
            "nonce": hex(account.get_nonce()),
            "initCode": account.get_init_code(),
            "callData": account.encode_calls(request.calls),
            "callGasLimit": "0x0",
            "verificationGasLimit": "0x0",
            "preVerificationGas": "0x0",
            "maxFeePerGas": hex(fees["maxFeePerGas"]),
            "maxPriorityFeePerGas": hex(fees["maxPriorityFeePerGas"]),
            "paymasterAndData": "0x",
            "signature": account.dummy_signature,
        }

        estimate = self.estimate_user_operation_gas(user_op)
        for key in GAS_ESTIMATE_KEYS:
            user_op[key] = estimate.get(key)
        return user_op

    def estimate_user_operation_gas(self, user_op: Dict[str, Any]) -> Dict[str, Any]:
        """Call ``eth_estimateUserOperationGas``"""
        result = self._rpc("eth_estimateUserOperationGas", [user_op, self.entry_point])
        if result is None:
            return {}
        if not isinstance(result, dict):
            raise BundlerError("Bundler returned an invalid gas estimate")
        self.logger.debug(f"Bundler gas estimate: {result}")
        return result

    def send_user_operation(self, user_op: Dict[str, Any]) -> str:
        """
        Submit a signed user operation

        Returns:
            User operation hash
        """
        result = self._rpc("eth_sendUserOperation", [user_op, self.entry_point])
        if not isinstance(result, str) or not result.startswith("0x"):
            raise BundlerError(f"Bundler returned an invalid user operation hash: {result!r}")
        return result

    def get_user_operation_receipt(
        self,
        user_op_hash: str,
        timeout: Optional[float] = None
    ) -> Optional[Dict[str, Any]]:
        """Return the receipt payload for a user operation, or None while pending"""
        result = self._rpc("eth_getUserOperationReceipt", [user_op_hash], timeout=timeout)
        if result is None:
            return None
        if not isinstance(result, dict):
            raise BundlerError("Bundler returned an invalid receipt payload")
        return result

    def wait_for_user_operation_receipt(
        self,
        user_op_hash: str,
        timeout: float,
        poll_interval: float = 1.0
    ) -> Dict[str, Any]:
        """
        Poll the bundler until the operation's receipt is available

        Args:
            user_op_hash: Hash returned by ``send_user_operation``
            timeout: Seconds to wait before giving up
            poll_interval: Seconds between polls

        Returns:
            Receipt payload

        Raises:
            BundlerTimeoutError: If no receipt appears within ``timeout``
            BundlerError: If a poll fails
        """
        deadline = time.monotonic() + timeout
        remaining = timeout
        while True:
            # a single poll may not outlast the caller's deadline
            request_timeout = min(self.timeout, max(remaining, MIN_POLL_TIMEOUT))
            receipt = self.get_user_operation_receipt(user_op_hash, timeout=request_timeout)
            if receipt is not None:
                return receipt
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                raise BundlerTimeoutError(
                    f"Timed out after {timeout}s waiting for user operation {user_op_hash}"
                )
            time.sleep(min(poll_interval, remaining))
