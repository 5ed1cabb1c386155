"""
tokendrop - one-per-address ERC-1155 disbursement from a custodial treasury.
"""
from .address import Address, normalize
from .chain import ChainClient, StubChainClient, Web3ChainClient, get_chain_client
from .config import TreasuryConfig
from .eligibility import Eligibility, HoldingPolicy
from .exceptions import (
    TokenDropError, ConfigError, InvalidAddress, ChainError, ChainUnavailable, ContractError, SubmissionError
)
from .models import (
    DisbursementResult, DisbursementStatus, FeeFloors, FeeQuote,
    NetworkIdentity, SimulationOutcome, TransactionHandle
)
from .networks import NetworkConfig
from .orchestrator import DisbursementOrchestrator
from .version import __version__

__all__ = [
    "Address",
    "normalize",
    "ChainClient",
    "StubChainClient",
    "Web3ChainClient",
    "get_chain_client",
    "TreasuryConfig",
    "Eligibility",
    "HoldingPolicy",
    "TokenDropError",
    "ConfigError",
    "InvalidAddress",
    "ChainError",
    "ChainUnavailable",
    "ContractError",
    "SubmissionError",
    "DisbursementResult",
    "DisbursementStatus",
    "FeeFloors",
    "FeeQuote",
    "NetworkIdentity",
    "SimulationOutcome",
    "TransactionHandle",
    "NetworkConfig",
    "DisbursementOrchestrator",
    "__version__",
]
