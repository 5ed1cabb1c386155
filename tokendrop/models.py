"""
Data models for the tokendrop package.
"""
from enum import Enum
from typing import Dict, Any, Optional

from pydantic import BaseModel, Field, model_validator

# Width of the ERC-1155 id and amount types
UINT256_MAX = 2**256 - 1


class NetworkIdentity(BaseModel):
    """Chain the client is connected to"""
    chain_id: int
    name: str = "unknown"


class FeeQuote(BaseModel):
    """
    Price terms for a transaction.

    Either the EIP-1559 pair (tip + cap) or a single legacy gas price is set.
    Any field may be missing on a network suggestion.
    """
    max_priority_fee_per_gas: Optional[int] = Field(None, ge=0)
    max_fee_per_gas: Optional[int] = Field(None, ge=0)
    gas_price: Optional[int] = Field(None, ge=0)

    @property
    def is_eip1559(self) -> bool:
        return self.max_priority_fee_per_gas is not None or self.max_fee_per_gas is not None

    def to_tx_params(self) -> Dict[str, int]:
        """Transaction fields for web3's build_transaction"""
        if self.is_eip1559:
            return {
                "maxPriorityFeePerGas": self.max_priority_fee_per_gas or 0,
                "maxFeePerGas": self.max_fee_per_gas or 0,
            }
        return {"gasPrice": self.gas_price or 0}

    def as_strings(self) -> Dict[str, str]:
        """Non-null fields as decimal strings, for diagnostics"""
        return {k: str(v) for k, v in self.model_dump().items() if v is not None}


class FeeFloors(BaseModel):
    """Configured minimum price terms, validated at startup"""
    max_priority_fee_per_gas: Optional[int] = Field(None, gt=0)
    max_fee_per_gas: Optional[int] = Field(None, gt=0)
    gas_price: Optional[int] = Field(None, gt=0)

    @model_validator(mode="after")
    def _check_mode(self) -> "FeeFloors":
        has_tip = self.max_priority_fee_per_gas is not None
        has_cap = self.max_fee_per_gas is not None
        if has_tip != has_cap:
            raise ValueError("max_priority_fee_per_gas and max_fee_per_gas floors must be set together")
        if has_tip and self.gas_price is not None:
            raise ValueError("Set either EIP-1559 floors or a legacy gas_price floor, not both")
        if not has_tip and self.gas_price is None:
            raise ValueError("No fee floor configured")
        if has_tip and self.max_fee_per_gas < self.max_priority_fee_per_gas:
            raise ValueError("max_fee_per_gas floor must not be below max_priority_fee_per_gas floor")
        return self

    @property
    def is_eip1559(self) -> bool:
        return self.max_priority_fee_per_gas is not None


class SimulationOutcome(BaseModel):
    """Predicted result of a transfer executed without committing"""
    ok: bool
    reason: Optional[str] = None

    @classmethod
    def success(cls) -> "SimulationOutcome":
        return cls(ok=True)

    @classmethod
    def would_fail(cls, reason: str) -> "SimulationOutcome":
        return cls(ok=False, reason=reason)


class TransactionHandle(BaseModel):
    """Opaque reference to a submitted transaction"""
    tx_hash: str


class DisbursementStatus(str, Enum):
    """Terminal status of one disbursement request."""
    SENT = "sent"
    ALREADY = "already"
    NONE_AVAILABLE = "none_available"
    INVALID_INPUT = "invalid_input"
    WRONG_NETWORK = "wrong_network"
    SIGNER_MISMATCH = "signer_mismatch"
    WOULD_REVERT = "would_revert"
    SUBMISSION_FAILED = "submission_failed"
    # Also covers unexpected internal errors; those set diagnostics["unexpected"]
    CHAIN_UNAVAILABLE = "chain_unavailable"
    CONTRACT_ERROR = "contract_error"


# Terminal states that are not failures
SUCCESS_STATUSES = frozenset({
    DisbursementStatus.SENT,
    DisbursementStatus.ALREADY,
    DisbursementStatus.NONE_AVAILABLE,
})


class DisbursementResult(BaseModel):
    """Outcome returned to the caller of ``disburse``"""
    status: DisbursementStatus
    message: str = ""
    tx_hash: Optional[str] = None
    token_id: Optional[int] = None
    amount: Optional[int] = None
    confirmed: Optional[bool] = None
    diagnostics: Dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return self.status not in SUCCESS_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation; large integers become strings"""
        data = self.model_dump(mode="json", exclude_none=True)
        for key in ("token_id", "amount"):
            if key in data:
                data[key] = str(data[key])
        return data
