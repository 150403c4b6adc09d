#!/usr/bin/env python3
"""
Example of minting tokens to the smart account.
"""
import logging
import os
import sys

from launchpad_sdk import LaunchpadClient, LaunchpadError


def main():
    logging.basicConfig(level=logging.INFO)

    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    TOKEN_ADDRESS = os.environ.get("TOKEN_ADDRESS")
    AMOUNT = os.environ.get("AMOUNT", "100")
    NETWORK = os.environ.get("NETWORK", "monad-testnet")

    if not PRIVATE_KEY or not TOKEN_ADDRESS:
        print("ERROR: PRIVATE_KEY and TOKEN_ADDRESS environment variables are required")
        return 1

    client = LaunchpadClient.from_network(NETWORK, priv_key=PRIVATE_KEY)
    print(f"Minting {AMOUNT} of {TOKEN_ADDRESS} to {client.address}")

    try:
        result = client.mint_token(TOKEN_ADDRESS, AMOUNT)
    except LaunchpadError as e:
        print(f"Mint failed: {e}")
        return 1

    print(f"View transaction: {result.explorer_url or result.transaction_hash}")
    for warning in result.warnings:
        print(f"Warning: {warning}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
