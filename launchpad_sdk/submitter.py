"""
Drives one user operation from call list to confirmed receipt.

Building → GasAdjusted → Signed → Submitted → Confirmed, with a single
direct-chain fallback when the bundler never reports a receipt.
"""
import logging
import time
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from web3 import Web3

from .account import SmartAccount
from .bundler import BundlerClient
from .chain import ChainClient
from .exceptions import (
    BundlerError, BundlerTimeoutError, ChainError, ConfirmationTimeout,
    InvalidRequest, SigningRejected, SubmissionError, SubmissionRejected
)
from .gas import ActionKind, GasPolicy
from .models import Call, GasEnvelope, GasEstimate, Receipt, SubmittedOperation, UserOperationRequest

DEFAULT_TIMEOUTS = {
    ActionKind.DEPLOY: 60.0,
    ActionKind.TRANSFER: 60.0,
    ActionKind.MINT: 120.0,
    ActionKind.RECORD: 30.0,
}
FALLBACK_GRACE_PERIOD = 15.0


class SubmissionState(str, Enum):
    """States of a single submission."""
    BUILDING = "building"
    GAS_ADJUSTED = "gas_adjusted"
    SIGNED = "signed"
    SUBMITTED = "submitted"
    CONFIRMATION_FALLBACK = "confirmation_fallback"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class OperationSubmitter:
    """
    Submits user operations for one smart account.

    The submitter keeps no per-operation state between calls, so a single
    instance can serve concurrent actions.
    """

    def __init__(
        self,
        bundler: BundlerClient,
        account: SmartAccount,
        chain_id: int,
        chain: Optional[ChainClient] = None,
        gas_policy: Optional[GasPolicy] = None,
        grace_period: float = FALLBACK_GRACE_PERIOD,
        poll_interval: float = 1.0,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the submitter

        Args:
            bundler: Bundler client
            account: Smart account that builds and signs operations
            chain_id: Chain the operations target
            chain: Chain client for the confirmation fallback (no fallback if None)
            gas_policy: Gas policy (defaults to the standard margins and floors)
            grace_period: Seconds to wait before the fallback chain query
            poll_interval: Seconds between bundler receipt polls
            logger: Optional logger instance
        """
        self.bundler = bundler
        self.account = account
        self.chain_id = chain_id
        self.chain = chain
        self.gas_policy = gas_policy or GasPolicy()
        self.grace_period = grace_period
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)

    def submit(
        self,
        calls: Sequence[Union[Call, Dict[str, Any]]],
        action_kind: ActionKind,
        timeout: Optional[float] = None
    ) -> Receipt:
        """
        Build, gas-adjust, sign, send and confirm one user operation

        Args:
            calls: Ordered calls to batch into the operation
            action_kind: Kind of action (selects gas floors and default timeout)
            timeout: Receipt timeout in seconds, overriding the action default

        Returns:
            Receipt of the bundled transaction

        Raises:
            InvalidRequest: If the call list is empty or malformed
            SubmissionRejected: If the bundler rejects estimation or submission
            SigningRejected: If the account declines to sign
            ConfirmationTimeout: If neither bundler nor chain confirms the operation
        """
        action_kind = ActionKind(action_kind)
        if timeout is None:
            timeout = DEFAULT_TIMEOUTS[action_kind]

        self._transition(action_kind, SubmissionState.BUILDING)
        try:
            request = self._build(calls)

            user_op, envelope = self._prepare(request, action_kind)
            self._transition(action_kind, SubmissionState.GAS_ADJUSTED)

            signature = self._sign(user_op)
            user_op["signature"] = signature
            self._transition(action_kind, SubmissionState.SIGNED)

            submitted = self._send(user_op, envelope, request)
            self._transition(action_kind, SubmissionState.SUBMITTED, submitted.hash)

            receipt = self._confirm(submitted.hash, timeout)
        except SubmissionError as e:
            self._transition(action_kind, SubmissionState.FAILED, e.user_op_hash)
            raise

        self._transition(action_kind, SubmissionState.CONFIRMED, submitted.hash)
        return receipt

    def _transition(self, action_kind: ActionKind, state: SubmissionState, op_hash: Optional[str] = None):
        suffix = f" ({op_hash})" if op_hash else ""
        self.logger.debug(f"{action_kind.value} operation -> {state.value}{suffix}")

    def _build(self, calls: Sequence[Union[Call, Dict[str, Any]]]) -> UserOperationRequest:
        if not calls:
            raise InvalidRequest("User operation needs at least one call", state=SubmissionState.BUILDING.value)

        normalized = []
        for index, call in enumerate(calls):
            try:
                item = call if isinstance(call, Call) else Call.model_validate(call)
            except ValueError as e:
                raise InvalidRequest(
                    f"Call {index} is malformed: {str(e)}",
                    state=SubmissionState.BUILDING.value
                ) from e
            if not Web3.is_address(item.destination):
                raise InvalidRequest(
                    f"Call {index} has an invalid destination: {item.destination!r}",
                    state=SubmissionState.BUILDING.value
                )
            normalized.append(item)

        return UserOperationRequest(sender=self.account.address, chain_id=self.chain_id, calls=normalized)

    def _prepare(self, request: UserOperationRequest, action_kind: ActionKind) -> Tuple[Dict[str, Any], GasEnvelope]:
        try:
            user_op = self.bundler.prepare_user_operation(self.account, request)
        except (BundlerError, ChainError) as e:
            self.logger.error(f"Failed to prepare {action_kind.value} operation: {e}")
            raise SubmissionRejected(
                f"Bundler rejected {action_kind.value} operation during estimation: {str(e)}",
                state=SubmissionState.BUILDING.value
            ) from e

        estimate = GasEstimate.from_user_op(user_op)
        envelope = self.gas_policy.adjust(estimate, action_kind)
        if None in (estimate.call_gas_limit, estimate.verification_gas_limit, estimate.pre_verification_gas):
            self.logger.warning(f"Incomplete gas estimate for {action_kind.value}, floors applied: {envelope.to_rpc()}")
        user_op.update(envelope.to_rpc())
        return user_op, envelope

    def _sign(self, user_op: Dict[str, Any]) -> str:
        try:
            return self.account.sign_user_operation(dict(user_op))
        except Exception as e:
            self.logger.error(f"User operation signing failed: {e}")
            raise SigningRejected(
                f"Failed to sign user operation: {str(e)}",
                state=SubmissionState.GAS_ADJUSTED.value
            ) from e

    def _send(
        self,
        user_op: Dict[str, Any],
        envelope: GasEnvelope,
        request: UserOperationRequest
    ) -> SubmittedOperation:
        try:
            op_hash = self.bundler.send_user_operation(user_op)
        except BundlerError as e:
            self.logger.error(f"Bundler rejected user operation: {e}")
            raise SubmissionRejected(
                f"Bundler rejected user operation: {str(e)}",
                state=SubmissionState.SIGNED.value
            ) from e

        self.logger.info(f"User operation sent: {op_hash}")
        return SubmittedOperation(
            hash=op_hash, signature=user_op["signature"], envelope=envelope, request=request
        )

    def _confirm(self, op_hash: str, timeout: float) -> Receipt:
        try:
            payload = self.bundler.wait_for_user_operation_receipt(
                op_hash, timeout=timeout, poll_interval=self.poll_interval
            )
        except BundlerTimeoutError as e:
            self.logger.warning(f"No bundler receipt for {op_hash} after {timeout}s, trying chain fallback")
            return self._fallback(op_hash, e)
        except BundlerError as e:
            self.logger.warning(f"Bundler receipt polling failed for {op_hash}: {e}; trying chain fallback")
            return self._fallback(op_hash, e)

        try:
            receipt = Receipt.from_user_operation_receipt(payload)
        except ValueError as e:
            return self._fallback(op_hash, e)
        if receipt.user_op_hash is None:
            receipt = receipt.model_copy(update={"user_op_hash": op_hash})
        self.logger.info(f"User operation {op_hash} confirmed in {receipt.transaction_hash} ({receipt.status})")
        return receipt

    def _fallback(self, op_hash: str, cause: Exception) -> Receipt:
        """
        Wait out the grace period, then look the hash up directly on chain.

        The status of a receipt found here is forced to success without
        checking the chain's status field; a reverted transaction would be
        reported as successful.
        """
        state = SubmissionState.CONFIRMATION_FALLBACK.value
        if self.chain is None:
            raise ConfirmationTimeout(
                f"User operation {op_hash} not confirmed and no chain fallback configured: {cause}",
                state=state, user_op_hash=op_hash
            ) from cause

        time.sleep(self.grace_period)
        try:
            found = self.chain.get_transaction_receipt(op_hash)
        except ChainError as e:
            raise ConfirmationTimeout(
                f"User operation {op_hash} not confirmed; chain fallback failed: {str(e)}",
                state=state, user_op_hash=op_hash
            ) from e

        if found is None:
            raise ConfirmationTimeout(
                f"User operation {op_hash} not confirmed by bundler or chain",
                state=state, user_op_hash=op_hash
            ) from cause

        self.logger.warning(f"Assuming success for {op_hash} from chain receipt {found.transaction_hash}")
        return Receipt(
            transaction_hash=found.transaction_hash,
            status="success",
            logs=found.logs,
            user_op_hash=op_hash,
            synthesized=True,
        )
