"""
Narrow receipt log decoder.

Only one event per action is of interest and its indexed layout is known,
so values are sliced out of topics and data at fixed offsets instead of
going through a full ABI decoder. The offsets below are part of the
contract with the factory and indexing contracts.
"""
import logging
from enum import Enum
from typing import Optional

from web3 import Web3

from .contracts import ZERO_ADDRESS
from .models import DecodedEvent, RawLog, Receipt, TokenCreated, TokenTransferred, Unrecognized

logger = logging.getLogger(__name__)

# Hex characters in one 32-byte word, and in a 20-byte address
WORD_HEX = 64
ADDRESS_HEX = 40

# Creation fallback: characters [26:66) of the 0x-prefixed data string,
# i.e. the low 20 bytes of the first data word.
CREATION_DATA_START = 26
CREATION_DATA_END = 66


class EventShape(str, Enum):
    """Known event layouts."""
    # TokenCreated(address indexed token, string name, string symbol, uint256 supply)
    CREATION = "creation"
    # TokenTransferred(address indexed caller, address indexed token, address indexed to,
    #                  uint256 amount, uint256 timestamp)
    TRANSFER = "transfer"


def _address_from_topic(topic: str) -> str:
    return Web3.to_checksum_address("0x" + topic[-ADDRESS_HEX:])


def _strip(hex_text: str) -> str:
    return hex_text[2:] if hex_text.startswith(("0x", "0X")) else hex_text


class ReceiptLogDecoder:
    """Extracts creation and transfer facts from raw receipt logs."""

    def decode(self, receipt: Receipt, expected_emitter: str, shape: EventShape) -> DecodedEvent:
        """
        Decode the first qualifying log of a receipt

        A log qualifies when its emitter equals ``expected_emitter``
        (case-insensitive) and it carries at least one topic.

        Args:
            receipt: Confirmed receipt
            expected_emitter: Address of the contract that emits the event
            shape: Layout of the expected event

        Returns:
            TokenCreated, TokenTransferred, or Unrecognized
        """
        log = self._first_qualifying(receipt, expected_emitter)
        if log is None:
            return Unrecognized()

        if EventShape(shape) is EventShape.CREATION:
            return self._decode_creation(log)
        return self._decode_transfer(log)

    def fallback_created_address(self, receipt: Receipt, expected_emitter: str) -> Optional[str]:
        """
        Last-resort guess at a created contract's address

        Returns the emitter of the first log that is neither the expected
        emitter nor the zero address. A freshly deployed token usually emits
        its own events during construction.
        """
        expected = expected_emitter.lower()
        for log in receipt.logs:
            address = log.address.lower()
            if address != expected and address != ZERO_ADDRESS and Web3.is_address(log.address):
                return Web3.to_checksum_address(log.address)
        return None

    @staticmethod
    def _first_qualifying(receipt: Receipt, expected_emitter: str) -> Optional[RawLog]:
        expected = expected_emitter.lower()
        for log in receipt.logs:
            if log.address.lower() == expected and len(log.topics) > 0:
                return log
        return None

    @staticmethod
    def _decode_creation(log: RawLog) -> DecodedEvent:
        if len(log.topics) >= 2:
            try:
                return TokenCreated(token_address=_address_from_topic(log.topics[1]))
            except ValueError:
                logger.debug(f"Creation log topic is not an address: {log.topics[1]}")
                return Unrecognized()

        # Assumes the first non-indexed word holds the address
        candidate = log.data[CREATION_DATA_START:CREATION_DATA_END]
        if len(candidate) != ADDRESS_HEX:
            logger.debug(f"Creation log from {log.address} has no address in topics or data")
            return Unrecognized()
        try:
            return TokenCreated(token_address=Web3.to_checksum_address("0x" + candidate))
        except ValueError:
            logger.debug(f"Creation log data is not hex: {log.data[:CREATION_DATA_END]}")
            return Unrecognized()

    @staticmethod
    def _decode_transfer(log: RawLog) -> DecodedEvent:
        if len(log.topics) < 4:
            logger.debug(f"Transfer log from {log.address} has {len(log.topics)} topics, need 4")
            return Unrecognized()

        data = _strip(log.data)
        if len(data) < 2 * WORD_HEX:
            logger.debug(f"Transfer log from {log.address} has short data ({len(data)} hex chars)")
            return Unrecognized()

        try:
            return TokenTransferred(
                caller=_address_from_topic(log.topics[1]),
                token_address=_address_from_topic(log.topics[2]),
                to=_address_from_topic(log.topics[3]),
                amount=int(data[:WORD_HEX], 16),
                timestamp=int(data[WORD_HEX:2 * WORD_HEX], 16),
            )
        except ValueError:
            logger.debug(f"Transfer log from {log.address} has non-hex topics or data")
            return Unrecognized()
