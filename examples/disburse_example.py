#!/usr/bin/env python3
"""
Example of disbursing one token to an address.

Reads the treasury configuration from the environment (RPC_URL, PRIVATE_KEY,
CONTRACT_ADDRESS, ADMIN_ADDRESS, TOKEN_ID, AMOUNT_PER_USER) and sends to the
address given on the command line.
"""
import json
import logging
import sys

from tokendrop import DisbursementOrchestrator, TreasuryConfig, ConfigError


def main():
    """
    Demonstrate a single disbursement.

    This example shows how to:
    1. Build and validate the configuration once
    2. Create an orchestrator
    3. Disburse to a recipient and inspect the result
    """
    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) != 2:
        print("usage: disburse_example.py 0xRecipient")
        return 2

    try:
        config = TreasuryConfig.from_env()
    except ConfigError as e:
        print(f"ERROR: {e}")
        return 2

    orchestrator = DisbursementOrchestrator(config)
    result = orchestrator.disburse(sys.argv[1])

    print(json.dumps(result.to_dict(), indent=2))
    if result.tx_hash:
        print(f"Block explorer: {result.diagnostics.get('explorer_url')}")
        print(f"Confirmed within {config.inclusion_deadline}s: {result.confirmed}")
    return 1 if result.is_error else 0


if __name__ == "__main__":
    sys.exit(main())
