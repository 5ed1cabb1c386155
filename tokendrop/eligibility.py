"""
Eligibility gate: decides from on-chain balances whether to disburse.
"""
import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .address import Address
from .chain.base import ChainClient

logger = logging.getLogger(__name__)


class Eligibility(str, Enum):
    PROCEED = "proceed"
    ALREADY_SATISFIED = "already_satisfied"
    INSUFFICIENT_SUPPLY = "insufficient_supply"


class HoldingPolicy(str, Enum):
    """
    When a recipient counts as already served.

    ANY: any positive holding of the token id.
    FULL_AMOUNT: a holding of at least the configured amount.
    """
    ANY = "any"
    FULL_AMOUNT = "full_amount"


class EligibilityDecision(BaseModel):
    """Outcome of the gate plus the balances it read"""
    eligibility: Eligibility
    recipient_balance: int
    treasury_balance: Optional[int] = None


def evaluate(
    recipient: Address,
    treasury: Address,
    token_id: int,
    amount: int,
    client: ChainClient,
    policy: HoldingPolicy = HoldingPolicy.ANY
) -> EligibilityDecision:
    """
    Evaluate whether ``recipient`` should receive ``amount`` of ``token_id``.

    The recipient is checked first; the treasury is only read for recipients
    that have not been served yet.

    Raises:
        ChainUnavailable: If a balance read fails
    """
    held = client.balance_of(recipient, token_id)
    threshold = 1 if policy == HoldingPolicy.ANY else amount
    if held >= threshold:
        logger.debug(f"{recipient} already holds {held} of token {token_id}")
        return EligibilityDecision(eligibility=Eligibility.ALREADY_SATISFIED, recipient_balance=held)

    supply = client.balance_of(treasury, token_id)
    if supply < amount:
        logger.debug(f"Treasury holds {supply} of token {token_id}, {amount} required")
        return EligibilityDecision(
            eligibility=Eligibility.INSUFFICIENT_SUPPLY,
            recipient_balance=held,
            treasury_balance=supply
        )

    return EligibilityDecision(
        eligibility=Eligibility.PROCEED,
        recipient_balance=held,
        treasury_balance=supply
    )
