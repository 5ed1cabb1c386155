#!/usr/bin/env python3
"""
Run the disbursement pipeline against the in-memory chain, no node needed.
"""
from eth_account import Account

from tokendrop import DisbursementOrchestrator, StubChainClient, TreasuryConfig

# Throwaway key, never fund it
TREASURY_KEY = "0x" + "11" * 32
RECIPIENT = "0x" + "aa" * 20
TOKEN_ID = 7


def main():
    treasury = Account.from_key(TREASURY_KEY).address
    config = TreasuryConfig(
        rpc_url="http://localhost:8545",
        private_key=TREASURY_KEY,
        contract_address="0x" + "12" * 20,
        treasury_address=treasury,
        token_id=TOKEN_ID,
        inclusion_deadline=1.0
    )
    chain = StubChainClient(signer=treasury, balances={(treasury, TOKEN_ID): 2})
    orchestrator = DisbursementOrchestrator(config, client=chain)

    for label, address in [("first", RECIPIENT), ("again", RECIPIENT), ("bad", "not-an-address")]:
        result = orchestrator.disburse(address)
        print(f"{label:>6}: {result.status.value} {result.tx_hash or ''}")


if __name__ == "__main__":
    main()
