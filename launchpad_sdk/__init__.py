"""
Launchpad SDK - ERC-20 token launches through ERC-4337 smart accounts.
"""
from .account import SimpleSmartAccount, SmartAccount
from .bundler import BundlerClient
from .chain import ChainClient
from .client import LaunchpadClient
from .config import SUPPORTED_CHAIN_IDS, NetworkConfig
from .decoder import EventShape, ReceiptLogDecoder
from .exceptions import (
    BundlerError, BundlerTimeoutError, ChainError, ConfirmationTimeout, DecodingError,
    InvalidRequest, LaunchpadError, OperationReverted, RegistryError,
    SecondaryOperationWarning, SigningRejected, SubmissionError, SubmissionRejected,
    ValidationError
)
from .gas import ActionKind, GasPolicy
from .models import (
    ActionResult, Call, GasEnvelope, GasEstimate, RawLog, Receipt, RegisteredToken,
    TokenCreated, TokenTransferred, Unrecognized, UserOperationRequest
)
from .orchestrator import ActionOrchestrator
from .registry import LocalTokenRegistry
from .submitter import OperationSubmitter, SubmissionState
from .version import __version__

__all__ = [
    "LaunchpadClient",
    "ActionOrchestrator",
    "OperationSubmitter",
    "SubmissionState",
    "ReceiptLogDecoder",
    "EventShape",
    "GasPolicy",
    "ActionKind",
    "LocalTokenRegistry",
    "BundlerClient",
    "ChainClient",
    "SmartAccount",
    "SimpleSmartAccount",
    "NetworkConfig",
    "SUPPORTED_CHAIN_IDS",
    "Call",
    "UserOperationRequest",
    "GasEstimate",
    "GasEnvelope",
    "RawLog",
    "Receipt",
    "TokenCreated",
    "TokenTransferred",
    "Unrecognized",
    "RegisteredToken",
    "ActionResult",
    "LaunchpadError",
    "ValidationError",
    "SubmissionError",
    "InvalidRequest",
    "SigningRejected",
    "SubmissionRejected",
    "ConfirmationTimeout",
    "OperationReverted",
    "DecodingError",
    "ChainError",
    "RegistryError",
    "SecondaryOperationWarning",
    "BundlerError",
    "BundlerTimeoutError",
    "__version__",
]
