"""
Smart accounts that sign ERC-4337 user operations.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

from eth_abi import encode
from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.base import BaseAccount
from web3 import Web3

from .chain import ChainClient
from .contracts import encode_call
from .models import Call, parse_quantity, to_hex

logger = logging.getLogger(__name__)

EXECUTE = "execute(address,uint256,bytes)"
EXECUTE_BATCH = "executeBatch(address[],uint256[],bytes[])"
CREATE_ACCOUNT = "createAccount(address,uint256)"
GET_ADDRESS = "getAddress(address,uint256)"

# Well-formed 65-byte signature that passes ECDSA parsing during gas estimation
DUMMY_SIGNATURE = (
    "0xfffffffffffffffffffffffffffffff000000000000000000000000000000000"
    "7aaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa1c"
)


class SmartAccount(Protocol):
    """Protocol for smart accounts driven by the operation submitter"""
    address: str
    dummy_signature: str

    def get_nonce(self) -> int:
        """Current EntryPoint nonce"""
        ...

    def get_init_code(self) -> str:
        """Deployment code for a counterfactual account, ``0x`` once deployed"""
        ...

    def encode_calls(self, calls: Sequence[Call]) -> str:
        """Encode calls into the account's execute calldata"""
        ...

    def sign_user_operation(self, user_op: Dict[str, Any]) -> str:
        """Sign a gas-adjusted user operation and return the signature hex"""
        ...


def get_user_operation_hash(user_op: Dict[str, Any], entry_point: str, chain_id: int) -> bytes:
    """
    EntryPoint v0.6 user operation hash

    Args:
        user_op: User operation with hex-encoded fields
        entry_point: EntryPoint address
        chain_id: Chain the operation targets

    Returns:
        32-byte hash the owner signs
    """
    def _q(key: str) -> int:
        return parse_quantity(user_op.get(key)) or 0

    def _h(key: str) -> bytes:
        return bytes(Web3.keccak(hexstr=user_op.get(key) or "0x"))

    packed = encode(
        ["address", "uint256", "bytes32", "bytes32", "uint256", "uint256",
         "uint256", "uint256", "uint256", "bytes32"],
        [
            Web3.to_checksum_address(user_op["sender"]),
            _q("nonce"),
            _h("initCode"),
            _h("callData"),
            _q("callGasLimit"),
            _q("verificationGasLimit"),
            _q("preVerificationGas"),
            _q("maxFeePerGas"),
            _q("maxPriorityFeePerGas"),
            _h("paymasterAndData"),
        ],
    )
    return bytes(Web3.keccak(encode(
        ["bytes32", "address", "uint256"],
        [bytes(Web3.keccak(packed)), Web3.to_checksum_address(entry_point), chain_id],
    )))


class SimpleSmartAccount:
    """
    SimpleAccount-style smart account owned by a single ECDSA key.

    Single calls go through ``execute``; batches use the value-carrying
    ``executeBatch(address[],uint256[],bytes[])`` layout.
    """

    dummy_signature = DUMMY_SIGNATURE

    def __init__(
        self,
        owner: BaseAccount,
        chain: ChainClient,
        entry_point: str,
        chain_id: int,
        address: Optional[str] = None,
        factory_address: Optional[str] = None,
        salt: int = 0
    ):
        """
        Initialize the smart account

        Args:
            owner: Owner key that signs user operations
            chain: Chain client used for nonce, code and address lookups
            entry_point: EntryPoint contract address
            chain_id: Chain the account lives on
            address: Smart account address; derived from the factory if omitted
            factory_address: Account factory, required for counterfactual accounts
            salt: Factory salt

        Raises:
            ValueError: If neither address nor factory_address is provided
        """
        if not address and not factory_address:
            raise ValueError("Either address or factory_address must be provided")

        self.owner = owner
        self.chain = chain
        self.entry_point = Web3.to_checksum_address(entry_point)
        self.chain_id = chain_id
        self.factory_address = Web3.to_checksum_address(factory_address) if factory_address else None
        self.salt = salt
        self._deployed = False
        self.address = Web3.to_checksum_address(address) if address else self._resolve_address()

    @classmethod
    def from_key(cls, priv_key: str, **kwargs) -> "SimpleSmartAccount":
        """Create an account owned by a raw private key"""
        return cls(owner=Account.from_key(priv_key), **kwargs)

    def _resolve_address(self) -> str:
        raw = self.chain.call(
            self.factory_address,
            encode_call(GET_ADDRESS, [self.owner.address, self.salt])
        )
        address = Web3.to_checksum_address("0x" + raw[12:32].hex())
        logger.debug(f"Resolved counterfactual smart account {address}")
        return address

    def get_nonce(self) -> int:
        return self.chain.get_entry_point_nonce(self.entry_point, self.address)

    def is_deployed(self) -> bool:
        if not self._deployed:
            self._deployed = len(self.chain.get_code(self.address)) > 0
        return self._deployed

    def get_init_code(self) -> str:
        if self.is_deployed() or not self.factory_address:
            return "0x"
        create = encode_call(CREATE_ACCOUNT, [self.owner.address, self.salt])
        return self.factory_address.lower() + create[2:]

    def encode_calls(self, calls: Sequence[Call]) -> str:
        if len(calls) == 1:
            call = calls[0]
            return encode_call(EXECUTE, [
                Web3.to_checksum_address(call.destination),
                call.value,
                bytes.fromhex(call.call_data[2:]),
            ])

        destinations: List[str] = []
        values: List[int] = []
        payloads: List[bytes] = []
        for call in calls:
            destinations.append(Web3.to_checksum_address(call.destination))
            values.append(call.value)
            payloads.append(bytes.fromhex(call.call_data[2:]))
        return encode_call(EXECUTE_BATCH, [destinations, values, payloads])

    def sign_user_operation(self, user_op: Dict[str, Any]) -> str:
        op_hash = get_user_operation_hash(user_op, self.entry_point, self.chain_id)
        signed = self.owner.sign_message(encode_defunct(primitive=op_hash))
        return to_hex(signed.signature)
