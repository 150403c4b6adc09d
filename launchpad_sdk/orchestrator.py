"""
ActionOrchestrator - deploy, mint and transfer through a smart account.

Each action is one primary user operation plus, for deploy and mint, a
separate best-effort record operation that feeds the off-chain indexer.
Primary failures abort the action; record failures become warnings.
"""
import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from .chain import ChainClient
from .contracts import (
    NATIVE_ASSET, checksum, encode_approve, encode_deploy_token, encode_mint,
    encode_record_deploy, encode_record_mint, encode_record_transfer, encode_transfer,
    is_address, parse_amount
)
from .decoder import EventShape, ReceiptLogDecoder
from .exceptions import (
    ChainError, DecodingError, OperationReverted, RegistryError,
    SecondaryOperationWarning, SubmissionError, ValidationError
)
from .gas import ActionKind
from .models import ActionResult, Call, Receipt, RegisteredToken, TokenCreated
from .registry import LocalTokenRegistry
from .submitter import OperationSubmitter


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


class ActionOrchestrator:
    """Composes user operations into user-facing token actions."""

    def __init__(
        self,
        submitter: OperationSubmitter,
        registry: LocalTokenRegistry,
        chain_id: int,
        factory_address: str,
        indexer_address: str,
        decoder: Optional[ReceiptLogDecoder] = None,
        chain: Optional[ChainClient] = None,
        explorer_url: Optional[str] = None,
        clock: Callable[[], str] = _utc_now,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the orchestrator

        Args:
            submitter: Submitter bound to the user's smart account
            registry: Token registry to update
            chain_id: Chain the actions run on (validated by the caller)
            factory_address: Token factory contract
            indexer_address: Indexing (record) contract
            decoder: Receipt log decoder
            chain: Chain client for balance refreshes (skipped if None)
            explorer_url: Block explorer base URL for result links
            clock: Returns the ISO timestamp stored on new registry entries
            logger: Optional logger instance
        """
        self.submitter = submitter
        self.registry = registry
        self.chain_id = chain_id
        self.factory_address = checksum(factory_address)
        self.indexer_address = checksum(indexer_address)
        self.decoder = decoder or ReceiptLogDecoder()
        self.chain = chain
        self.explorer_url = explorer_url.rstrip("/") if explorer_url else None
        self.clock = clock
        self.logger = logger or logging.getLogger(__name__)

    @property
    def account_address(self) -> str:
        return self.submitter.account.address

    def tx_url(self, tx_hash: str) -> Optional[str]:
        if not self.explorer_url:
            return None
        return f"{self.explorer_url}/tx/{tx_hash}"

    def deploy_token(self, name: str, symbol: str, supply: str) -> ActionResult:
        """
        Deploy a token through the factory and register it locally

        The token is created with zero supply; minting is a separate action.
        The requested supply is passed to the indexer and kept on the
        registry entry.

        Args:
            name: Token name
            symbol: Token symbol
            supply: Intended supply as a decimal string

        Returns:
            ActionResult carrying the registered token

        Raises:
            ValidationError: If a field is missing or the supply is malformed
            SubmissionError: If the deploy operation fails
            DecodingError: If the created token address cannot be found
            RegistryError: If the token cannot be recorded locally
        """
        name = _require(name, "name")
        symbol = _require(symbol, "symbol")
        supply = _require(supply, "supply")
        supply_units = parse_amount(supply, allow_zero=True)

        receipt = self.submitter.submit(
            [Call(to=self.factory_address, data=encode_deploy_token(name, symbol, 0))],
            ActionKind.DEPLOY
        )
        self._require_success(receipt, "deploy")

        token_address = self._created_address(receipt)
        self.logger.info(f"Token {symbol} deployed at {token_address} (tx {receipt.transaction_hash})")

        warnings: List[str] = []
        self._record(
            "recordDeploy",
            lambda: encode_record_deploy(token_address, name, symbol, supply_units),
            warnings
        )

        token = RegisteredToken(
            name=name,
            symbol=symbol,
            address=token_address,
            chain_id=self.chain_id,
            owner_smart_account=self.account_address,
            created_at=self.clock(),
            last_known_balance="0",
            supply=supply,
            deploy_tx_hash=receipt.transaction_hash,
        )
        try:
            self.registry.record_deployed(token)
        except RegistryError as e:
            self.logger.error(f"Token {token_address} deployed but not recorded locally: {e}")
            raise

        return self._result("deploy", receipt, warnings, event=TokenCreated(token_address=token_address), token=token)

    def mint_token(self, token_address: str, amount: str) -> ActionResult:
        """
        Mint tokens to the smart account

        Args:
            token_address: Token contract
            amount: Amount as a decimal string

        Returns:
            ActionResult

        Raises:
            ValidationError: If the token address or amount is invalid
            SubmissionError: If the mint operation fails or reverts
        """
        token_address = checksum(_require(token_address, "token_address"))
        amount_units = parse_amount(_require(amount, "amount"))

        receipt = self.submitter.submit(
            [Call(to=token_address, data=encode_mint(self.account_address, amount_units))],
            ActionKind.MINT
        )
        self._require_success(receipt, "mint")
        self.logger.info(f"Minted {amount} of {token_address} (tx {receipt.transaction_hash})")

        warnings: List[str] = []
        self._record(
            "recordMint",
            lambda: encode_record_mint(token_address, self.account_address, amount_units),
            warnings
        )
        self._refresh_balance(token_address, warnings)

        return self._result("mint", receipt, warnings)

    def transfer(self, asset: str, recipient: str, amount: str) -> ActionResult:
        """
        Transfer native currency or a token from the smart account

        Token transfers batch approve, transfer and recordTransfer into a
        single operation, so the record call succeeds or fails with the
        transfer itself.

        Args:
            asset: ``"native"`` or a token contract address
            recipient: Receiving address
            amount: Amount as a decimal string

        Returns:
            ActionResult; for tokens ``event`` holds the decoded transfer
            (Unrecognized if the indexer log was not found)

        Raises:
            ValidationError: If a field is missing or malformed
            SubmissionError: If the transfer operation fails or reverts
        """
        asset = _require(asset, "asset")
        recipient = checksum(_require(recipient, "recipient"))
        amount_units = parse_amount(_require(amount, "amount"))

        if asset.lower() == NATIVE_ASSET:
            receipt = self.submitter.submit([Call(to=recipient, value=amount_units)], ActionKind.TRANSFER)
            self._require_success(receipt, "transfer")
            self.logger.info(f"Transferred {amount} native to {recipient} (tx {receipt.transaction_hash})")
            return self._result("transfer", receipt, [])

        if not is_address(asset):
            raise ValidationError(f"Asset must be 'native' or a token address, got {asset!r}")
        token_address = checksum(asset)

        calls = [
            Call(to=token_address, data=encode_approve(self.account_address, amount_units)),
            Call(to=token_address, data=encode_transfer(recipient, amount_units)),
            Call(to=self.indexer_address, data=encode_record_transfer(token_address, recipient, amount_units)),
        ]
        receipt = self.submitter.submit(calls, ActionKind.TRANSFER)
        self._require_success(receipt, "transfer")

        event = self.decoder.decode(receipt, self.indexer_address, EventShape.TRANSFER)
        if event.kind == "unrecognized":
            self.logger.warning(f"No TokenTransferred event in {receipt.transaction_hash}")
        self.logger.info(f"Transferred {amount} of {token_address} to {recipient} (tx {receipt.transaction_hash})")
        return self._result("transfer", receipt, [], event=event)

    def refresh_balances(self) -> List[RegisteredToken]:
        """
        Re-read the smart account's balance of every registered token

        Tokens whose balance cannot be read keep their previous value.

        Returns:
            Registry entries after the refresh
        """
        if self.chain is None:
            raise ValidationError("Balance refresh needs a chain client")
        warnings: List[str] = []
        seen = set()
        for token in self.registry.list(self.chain_id, self.account_address):
            if token.address.lower() in seen:
                continue
            seen.add(token.address.lower())
            self._refresh_balance(token.address, warnings)
        return self.registry.list(self.chain_id, self.account_address)

    def _require_success(self, receipt: Receipt, action: str):
        if not receipt.succeeded:
            self.logger.error(f"{action} operation reverted in {receipt.transaction_hash}")
            raise OperationReverted(
                f"{action} operation failed on chain (tx {receipt.transaction_hash})",
                state="confirmed",
                user_op_hash=receipt.user_op_hash
            )

    def _created_address(self, receipt: Receipt) -> str:
        event = self.decoder.decode(receipt, self.factory_address, EventShape.CREATION)
        if isinstance(event, TokenCreated):
            return event.token_address

        fallback = self.decoder.fallback_created_address(receipt, self.factory_address)
        if fallback:
            self.logger.warning(f"No TokenCreated log from factory; assuming {fallback} from other logs")
            return fallback
        raise DecodingError(
            f"Contract deployment failed: no TokenCreated event found in {receipt.transaction_hash}"
        )

    def _record(self, operation: str, encode_data: Callable[[], str], warnings: List[str]):
        """
        Submit a best-effort record operation

        The calldata is encoded inside the guarded block, so encoding errors
        are handled like submission errors: logged and appended to
        ``warnings``, never propagated.
        """
        try:
            call = Call(to=self.indexer_address, data=encode_data())
            receipt = self.submitter.submit([call], ActionKind.RECORD)
        except (SubmissionError, ValidationError) as e:
            self._warn(SecondaryOperationWarning(operation, e), warnings)
            return
        if not receipt.succeeded:
            self._warn(
                SecondaryOperationWarning(operation, OperationReverted(f"reverted in {receipt.transaction_hash}")),
                warnings
            )
            return
        self.logger.debug(f"{operation} recorded in {receipt.transaction_hash}")

    def _refresh_balance(self, token_address: str, warnings: List[str]):
        if self.chain is None:
            return
        try:
            balance = self.chain.get_token_balance(token_address, self.account_address)
            self.registry.update_balance(self.chain_id, self.account_address, token_address, str(balance))
        except (ChainError, RegistryError) as e:
            self._warn(SecondaryOperationWarning("balance refresh", e), warnings)

    def _warn(self, warning: SecondaryOperationWarning, warnings: List[str]):
        self.logger.warning(str(warning))
        warnings.append(str(warning))

    def _result(self, action, receipt, warnings, event=None, token=None) -> ActionResult:
        return ActionResult(
            action=action,
            transaction_hash=receipt.transaction_hash,
            user_op_hash=receipt.user_op_hash,
            receipt=receipt,
            event=event,
            token=token,
            warnings=warnings,
            explorer_url=self.tx_url(receipt.transaction_hash),
        )
