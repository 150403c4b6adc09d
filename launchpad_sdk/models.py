"""
Data models for the Launchpad SDK.
"""
import re
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator

HEX_DATA = re.compile(r"0[xX](?:[0-9a-fA-F]{2})*")


def parse_quantity(value: Any) -> Optional[int]:
    """
    Parse a JSON-RPC quantity into an int

    Args:
        value: Hex string, decimal string, int or None

    Returns:
        Integer value, or None when the value is absent
    """
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.startswith(("0x", "0X")):
        return int(text, 16)
    return int(text)


def to_hex(value: Any) -> str:
    """Normalise bytes-like values (HexBytes included) to a 0x-prefixed hex string"""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    text = str(value)
    return text if text.startswith("0x") else "0x" + text


class Call(BaseModel):
    """One call inside a batched user operation"""
    destination: str = Field(..., alias="to")
    call_data: str = Field("0x", alias="data")
    value: int = Field(0, ge=0)

    class Config:
        populate_by_name = True

    @field_validator("call_data")
    @classmethod
    def require_hex_bytes(cls, value: str) -> str:
        if not HEX_DATA.fullmatch(value):
            raise ValueError(f"call data must be 0x-prefixed hex bytes, got {value!r}")
        return "0x" + value[2:]


class UserOperationRequest(BaseModel):
    """Unsigned description of one batched on-chain action"""
    sender: str
    chain_id: int
    calls: List[Call]


class GasEstimate(BaseModel):
    """Raw gas estimate as returned by the bundler; any field may be missing"""
    call_gas_limit: Optional[int] = Field(None, alias="callGasLimit")
    verification_gas_limit: Optional[int] = Field(None, alias="verificationGasLimit")
    pre_verification_gas: Optional[int] = Field(None, alias="preVerificationGas")

    class Config:
        populate_by_name = True

    @classmethod
    def from_user_op(cls, user_op: Dict[str, Any]) -> "GasEstimate":
        return cls(
            call_gas_limit=parse_quantity(user_op.get("callGasLimit")),
            verification_gas_limit=parse_quantity(user_op.get("verificationGasLimit")),
            pre_verification_gas=parse_quantity(user_op.get("preVerificationGas")),
        )


class GasEnvelope(BaseModel):
    """Gas limits applied to a user operation before signing"""
    call_gas_limit: int = Field(..., ge=0, alias="callGasLimit")
    verification_gas_limit: int = Field(..., ge=0, alias="verificationGasLimit")
    pre_verification_gas: int = Field(..., ge=0, alias="preVerificationGas")

    class Config:
        populate_by_name = True
        frozen = True

    def to_rpc(self) -> Dict[str, str]:
        """Hex-encoded fields ready to merge into a user operation"""
        return {
            "callGasLimit": hex(self.call_gas_limit),
            "verificationGasLimit": hex(self.verification_gas_limit),
            "preVerificationGas": hex(self.pre_verification_gas),
        }


class SubmittedOperation(BaseModel):
    """A signed operation accepted by the bundler"""
    hash: str
    signature: str
    envelope: GasEnvelope
    request: UserOperationRequest


class RawLog(BaseModel):
    """Undecoded event log"""
    address: str
    topics: Tuple[str, ...] = ()
    data: str = "0x"

    class Config:
        frozen = True

    @classmethod
    def from_rpc(cls, log: Dict[str, Any]) -> "RawLog":
        return cls(
            address=str(log.get("address") or ""),
            topics=tuple(to_hex(topic) for topic in (log.get("topics") or [])),
            data=to_hex(log.get("data") or "0x"),
        )


class Receipt(BaseModel):
    """
    Receipt of a confirmed user operation.

    ``synthesized`` is set when the receipt was assembled by the chain-query
    fallback; its status is then assumed rather than read from the chain.
    """
    transaction_hash: str
    status: Literal["success", "failure"]
    logs: Tuple[RawLog, ...] = ()
    user_op_hash: Optional[str] = None
    synthesized: bool = False

    class Config:
        frozen = True

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    @classmethod
    def from_user_operation_receipt(cls, payload: Dict[str, Any]) -> "Receipt":
        """
        Build a receipt from an ``eth_getUserOperationReceipt`` result

        Args:
            payload: Bundler receipt payload

        Returns:
            Receipt with the bundled transaction's logs
        """
        inner = payload.get("receipt") or {}
        tx_hash = inner.get("transactionHash") or payload.get("transactionHash")
        if tx_hash is None:
            raise ValueError("User operation receipt has no transaction hash")

        if "success" in payload:
            ok = bool(payload["success"])
        else:
            ok = parse_quantity(inner.get("status")) == 1

        logs = inner.get("logs")
        if logs is None:
            logs = payload.get("logs") or []

        return cls(
            transaction_hash=to_hex(tx_hash),
            status="success" if ok else "failure",
            logs=tuple(RawLog.from_rpc(log) for log in logs),
            user_op_hash=payload.get("userOpHash"),
        )

    @classmethod
    def from_transaction_receipt(cls, web3_receipt: Any) -> "Receipt":
        """Build a receipt from a web3.py transaction receipt"""
        receipt_dict = dict(web3_receipt)
        return cls(
            transaction_hash=to_hex(receipt_dict["transactionHash"]),
            status="success" if parse_quantity(receipt_dict.get("status")) == 1 else "failure",
            logs=tuple(RawLog.from_rpc(dict(log)) for log in receipt_dict.get("logs") or []),
        )


class TokenCreated(BaseModel):
    """A token contract created by the factory"""
    kind: Literal["token_created"] = "token_created"
    token_address: str

    class Config:
        frozen = True


class TokenTransferred(BaseModel):
    """A transfer recorded by the indexing contract"""
    kind: Literal["token_transferred"] = "token_transferred"
    caller: str
    token_address: str
    to: str
    amount: int
    timestamp: int

    class Config:
        frozen = True


class Unrecognized(BaseModel):
    """No qualifying log was found"""
    kind: Literal["unrecognized"] = "unrecognized"

    class Config:
        frozen = True


DecodedEvent = Union[TokenCreated, TokenTransferred, Unrecognized]


class RegisteredToken(BaseModel):
    """A token known to the local registry"""
    name: str
    symbol: str
    address: str
    chain_id: int = Field(..., alias="chainId")
    owner_smart_account: str = Field(..., alias="ownerSmartAccount")
    created_at: str = Field(..., alias="createdAt")
    last_known_balance: str = Field("0", alias="lastKnownBalance")
    supply: Optional[str] = None
    deploy_tx_hash: Optional[str] = Field(None, alias="deployTxHash")

    class Config:
        populate_by_name = True


class ActionResult(BaseModel):
    """Outcome of a deploy, mint or transfer action"""
    action: str
    transaction_hash: str
    user_op_hash: Optional[str] = None
    receipt: Receipt
    event: Optional[DecodedEvent] = None
    token: Optional[RegisteredToken] = None
    warnings: List[str] = Field(default_factory=list)
    explorer_url: Optional[str] = None
