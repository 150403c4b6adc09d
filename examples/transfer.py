#!/usr/bin/env python3
"""
Example of transferring native currency or a token from the smart account.
"""
import logging
import os
import sys

from launchpad_sdk import LaunchpadClient, LaunchpadError, NetworkConfig, TokenTransferred


def main():
    """
    Transfer ASSET ("native" or a token address) to RECIPIENT.
    """
    logging.basicConfig(level=logging.INFO)

    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    RECIPIENT = os.environ.get("RECIPIENT")
    ASSET = os.environ.get("ASSET", "native")
    AMOUNT = os.environ.get("AMOUNT", "0.01")
    NETWORK = os.environ.get("NETWORK", "monad-testnet")

    if not PRIVATE_KEY or not RECIPIENT:
        print("ERROR: PRIVATE_KEY and RECIPIENT environment variables are required")
        return 1

    client = LaunchpadClient.from_network(NETWORK, priv_key=PRIVATE_KEY)
    symbol = NetworkConfig.get_native_symbol(NETWORK)
    balance = client.get_native_balance()
    print(f"Smart account {client.address} holds {balance / 10**18} {symbol}")

    try:
        result = client.transfer(ASSET, RECIPIENT, AMOUNT)
    except LaunchpadError as e:
        print(f"Transfer failed: {e}")
        return 1

    if result.receipt.synthesized:
        print("Bundler did not confirm in time; transaction found directly on chain")
    if isinstance(result.event, TokenTransferred):
        print(f"Indexed transfer of {result.event.amount} base units at {result.event.timestamp}")
    print(f"View transaction: {result.explorer_url or result.transaction_hash}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
