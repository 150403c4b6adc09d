"""
Exceptions for the Launchpad SDK.
"""
from typing import Optional


class LaunchpadError(Exception):
    """Base exception for all Launchpad SDK errors."""
    pass


class ValidationError(LaunchpadError):
    """Raised when action input is invalid. Never retried."""
    pass


class SubmissionError(LaunchpadError):
    """
    Raised when a user operation cannot be driven to confirmation.

    Attributes:
        state: Submission state the operation was in when it failed
        user_op_hash: Bundler-assigned hash, if the operation got that far
    """

    def __init__(
        self,
        message: str,
        state: Optional[str] = None,
        user_op_hash: Optional[str] = None
    ):
        self.state = state
        self.user_op_hash = user_op_hash
        super().__init__(message)


class InvalidRequest(SubmissionError):
    """Raised when the call list is empty or holds a malformed destination."""
    pass


class SigningRejected(SubmissionError):
    """Raised when the smart account declines to sign the operation."""
    pass


class SubmissionRejected(SubmissionError):
    """Raised when the bundler rejects estimation or submission."""
    pass


class ConfirmationTimeout(SubmissionError):
    """Raised when neither the bundler nor the chain fallback confirms the operation."""
    pass


class OperationReverted(SubmissionError):
    """Raised when a primary operation was mined with a failed status."""
    pass


class DecodingError(LaunchpadError):
    """Raised when a required event is absent from a receipt."""
    pass


class ChainError(LaunchpadError):
    """Raised when a direct chain query fails."""
    pass


class RegistryError(LaunchpadError):
    """Raised when the local token registry cannot be read or written."""
    pass


class SecondaryOperationWarning(LaunchpadError):
    """
    Failure of a best-effort record operation.

    Built and logged by the orchestrator, collected on the action result,
    and never raised to the caller.
    """

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")


class BundlerError(LaunchpadError):
    """Raised when the bundler RPC returns an error or cannot be reached."""

    def __init__(self, message: str, code: Optional[int] = None, simulation: bool = False):
        self.code = code
        self.is_simulation_error = simulation
        super().__init__(message)


class BundlerTimeoutError(BundlerError):
    """Raised when a user operation receipt does not appear within the timeout."""
    pass
