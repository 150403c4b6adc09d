"""
Constants and receipt builders shared by the test suite.
"""
from typing import Any, Dict, List, Optional

from web3 import Web3

from launchpad_sdk.contracts import TOKEN_CREATED_EVENT, TOKEN_TRANSFERRED_EVENT, event_topic
from launchpad_sdk.models import Receipt

# Test constants used throughout tests
TEST_RPC_URL = "https://rpc.example.com"
TEST_BUNDLER_URL = "https://bundler.example.com"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
MONAD_CHAIN_ID = 10143
SEPOLIA_CHAIN_ID = 11155111

ENTRY_POINT = Web3.to_checksum_address("0x5ff137d4b0fdcd49dca30c7cf57e578a026d2789")
FACTORY_ADDRESS = Web3.to_checksum_address("0x71fca30b945dd1bc30fe7a8bec63656213bc8a74")
INDEXER_ADDRESS = Web3.to_checksum_address("0xbae9f76833aaaafb2833ad258b75909601a35c80")
SMART_ACCOUNT = Web3.to_checksum_address("0x" + "ab" * 20)
TOKEN_ADDRESS = Web3.to_checksum_address("0x" + "12" * 20)
RECIPIENT = Web3.to_checksum_address("0x" + "34" * 20)

TX_HASH = "0x" + "aa" * 32
USER_OP_HASH = "0x" + "bb" * 32


def address_topic(address: str) -> str:
    """Left-pad an address into a 32-byte topic"""
    return "0x" + "0" * 24 + address[2:].lower()


def word(value: int) -> str:
    return format(value, "064x")


def creation_log(token: str, emitter: str = FACTORY_ADDRESS) -> Dict[str, Any]:
    return {
        "address": emitter,
        "topics": [event_topic(TOKEN_CREATED_EVENT), address_topic(token)],
        "data": "0x" + word(0),
    }


def transfer_log(
    caller: str,
    token: str,
    to: str,
    amount: int,
    timestamp: int,
    emitter: str = INDEXER_ADDRESS
) -> Dict[str, Any]:
    return {
        "address": emitter,
        "topics": [
            event_topic(TOKEN_TRANSFERRED_EVENT),
            address_topic(caller),
            address_topic(token),
            address_topic(to),
        ],
        "data": "0x" + word(amount) + word(timestamp),
    }


def bundler_receipt(
    logs: Optional[List[Dict[str, Any]]] = None,
    success: bool = True,
    tx_hash: str = TX_HASH,
    user_op_hash: str = USER_OP_HASH
) -> Dict[str, Any]:
    """Payload shaped like an ``eth_getUserOperationReceipt`` result"""
    return {
        "userOpHash": user_op_hash,
        "success": success,
        "logs": [],
        "receipt": {
            "transactionHash": tx_hash,
            "status": "0x1" if success else "0x0",
            "logs": logs or [],
        },
    }


def make_receipt(
    logs: Optional[List[Dict[str, Any]]] = None,
    success: bool = True,
    tx_hash: str = TX_HASH
) -> Receipt:
    return Receipt.from_user_operation_receipt(bundler_receipt(logs, success=success, tx_hash=tx_hash))
