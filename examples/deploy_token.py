#!/usr/bin/env python3
"""
Example of deploying an ERC-20 token through a smart account.
"""
import logging
import os
import sys

from launchpad_sdk import LaunchpadClient, LaunchpadError, NetworkConfig


def main():
    """
    Deploy a token and show the local registry afterwards.

    Environment:
        PRIVATE_KEY: owner key of the smart account (required)
        NETWORK: network name (default: monad-testnet)
        TOKEN_NAME / TOKEN_SYMBOL / TOKEN_SUPPLY: token parameters
        <NETWORK>_BUNDLER_URL: bundler endpoint including any API key
    """
    logging.basicConfig(level=logging.INFO)

    PRIVATE_KEY = os.environ.get("PRIVATE_KEY")
    NETWORK = os.environ.get("NETWORK", "monad-testnet")
    if not PRIVATE_KEY:
        print("ERROR: PRIVATE_KEY environment variable is required")
        return 1

    print("Available networks:")
    for network_name in NetworkConfig.load_networks().keys():
        print(f"  - {network_name}")
    print()

    client = LaunchpadClient.from_network(NETWORK, priv_key=PRIVATE_KEY)
    client.assert_chain_id()
    print(f"Smart account: {client.address} on {NETWORK}")

    try:
        result = client.deploy_token(
            os.environ.get("TOKEN_NAME", "Launchpad Demo"),
            os.environ.get("TOKEN_SYMBOL", "LPD"),
            os.environ.get("TOKEN_SUPPLY", "1000000"),
        )
    except LaunchpadError as e:
        print(f"Deployment failed: {e}")
        return 1

    print(f"Token deployed at {result.token.address}")
    print(f"View transaction: {result.explorer_url or result.transaction_hash}")
    for warning in result.warnings:
        print(f"Warning: {warning}")

    print("\nYour tokens:")
    for token in client.list_tokens():
        print(f"  {token.symbol:<8} {token.address}  balance={token.last_known_balance}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
