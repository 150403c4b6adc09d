"""
Call encoding for the factory, token and indexing contracts.

Only the handful of entry points the orchestrator drives are described here,
as plain function signatures encoded with eth_abi.
"""
from decimal import Decimal, InvalidOperation, localcontext
from typing import Any, List, Sequence, Union

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from web3 import Web3

from .exceptions import ValidationError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
NATIVE_ASSET = "native"
TOKEN_DECIMALS = 18
UINT256_MAX = 2**256 - 1

# Factory
DEPLOY_TOKEN = "deployToken(string,string,uint256)"
# ERC-20 token
MINT = "mint(address,uint256)"
APPROVE = "approve(address,uint256)"
TRANSFER = "transfer(address,uint256)"
BALANCE_OF = "balanceOf(address)"
# Indexing contract
RECORD_DEPLOY = "recordDeploy(address,string,string,uint256)"
RECORD_MINT = "recordMint(address,address,uint256)"
RECORD_TRANSFER = "recordTransfer(address,address,uint256)"

# Event signatures emitted by the factory and indexing contract
TOKEN_CREATED_EVENT = "TokenCreated(address,string,string,uint256)"
TOKEN_TRANSFERRED_EVENT = "TokenTransferred(address,address,address,uint256,uint256)"


def _arg_types(signature: str) -> List[str]:
    inner = signature[signature.index("(") + 1:-1]
    return [t for t in inner.split(",") if t]


def function_selector(signature: str) -> bytes:
    """First four bytes of the keccak hash of a function signature"""
    return bytes(Web3.keccak(text=signature)[:4])


def event_topic(signature: str) -> str:
    """Topic 0 for an event signature"""
    return "0x" + bytes(Web3.keccak(text=signature)).hex()


def encode_call(signature: str, args: Sequence[Any]) -> str:
    """
    ABI-encode a function call

    Args:
        signature: Canonical function signature, e.g. ``transfer(address,uint256)``
        args: Positional arguments matching the signature

    Returns:
        0x-prefixed calldata
    """
    types = _arg_types(signature)
    if len(types) != len(args):
        raise ValueError(f"{signature} takes {len(types)} arguments, got {len(args)}")
    try:
        encoded = encode(types, list(args))
    except EncodingError as e:
        raise ValidationError(f"Cannot encode {signature}: {str(e)}") from e
    return "0x" + (function_selector(signature) + encoded).hex()


def is_address(value: Any) -> bool:
    """True for a well-formed 20-byte hex address"""
    return isinstance(value, str) and Web3.is_address(value)


def checksum(address: str) -> str:
    """EIP-55 checksum an address, raising ValidationError when malformed"""
    if not is_address(address):
        raise ValidationError(f"Invalid address: {address!r}")
    return Web3.to_checksum_address(address)


def parse_amount(amount: Union[str, int, Decimal], allow_zero: bool = False) -> int:
    """
    Convert a human token amount (18 decimals) to base units

    Args:
        amount: Decimal amount such as ``"1000"`` or ``"0.5"``
        allow_zero: Whether zero is acceptable

    Returns:
        Amount in base units

    Raises:
        ValidationError: If the amount is not a finite decimal, is negative,
            has more than 18 fractional digits, exceeds uint256, or is zero when
            not allowed
    """
    if amount is None or (isinstance(amount, str) and not amount.strip()):
        raise ValidationError("Amount is required")
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise ValidationError(f"Invalid amount: {amount!r}")
    if not value.is_finite():
        raise ValidationError(f"Invalid amount: {amount!r}")

    # precision covers every input digit so scaling never rounds
    with localcontext() as ctx:
        ctx.prec = max(80, len(value.as_tuple().digits))
        if value > Decimal(UINT256_MAX).scaleb(-TOKEN_DECIMALS):
            raise ValidationError(f"Amount {amount!r} exceeds the uint256 range")
        base_units = value.scaleb(TOKEN_DECIMALS)
    if base_units != base_units.to_integral_value():
        raise ValidationError(f"Amount {amount!r} has more than {TOKEN_DECIMALS} decimal places")
    if base_units < 0 or (base_units == 0 and not allow_zero):
        raise ValidationError(f"Amount must be {'non-negative' if allow_zero else 'positive'}: {amount!r}")
    return int(base_units)


def encode_deploy_token(name: str, symbol: str, initial_supply: int = 0) -> str:
    return encode_call(DEPLOY_TOKEN, [name, symbol, initial_supply])


def encode_mint(to: str, amount: int) -> str:
    return encode_call(MINT, [checksum(to), amount])


def encode_approve(spender: str, amount: int) -> str:
    return encode_call(APPROVE, [checksum(spender), amount])


def encode_transfer(to: str, amount: int) -> str:
    return encode_call(TRANSFER, [checksum(to), amount])


def encode_balance_of(holder: str) -> str:
    return encode_call(BALANCE_OF, [checksum(holder)])


def encode_record_deploy(token: str, name: str, symbol: str, supply: int) -> str:
    return encode_call(RECORD_DEPLOY, [checksum(token), name, symbol, supply])


def encode_record_mint(token: str, to: str, amount: int) -> str:
    return encode_call(RECORD_MINT, [checksum(token), checksum(to), amount])


def encode_record_transfer(token: str, to: str, amount: int) -> str:
    return encode_call(RECORD_TRANSFER, [checksum(token), checksum(to), amount])
