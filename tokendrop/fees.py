"""
Fee strategy: never price a transaction below the configured floors.
"""
from typing import Optional

from .models import FeeQuote, FeeFloors

# Base fee can double over a few full blocks; cap covers that headroom
BASE_FEE_MULTIPLIER = 2


def _at_least(value: Optional[int], floor: int) -> int:
    if not value or value < floor:
        return floor
    return value


def quote(suggested: Optional[FeeQuote], floors: FeeFloors) -> FeeQuote:
    """
    Derive the fee terms to submit with.

    The live network suggestion wins when it is above the floor; otherwise
    the floor is used. The fee model (EIP-1559 or legacy) follows the floors.

    Args:
        suggested: Network suggestion, or None when unavailable
        floors: Configured minimums

    Returns:
        FeeQuote with every component at or above its floor
    """
    suggested = suggested or FeeQuote()

    if floors.is_eip1559:
        tip = _at_least(suggested.max_priority_fee_per_gas, floors.max_priority_fee_per_gas)
        cap = _at_least(suggested.max_fee_per_gas, floors.max_fee_per_gas)
        # A cap below the tip is rejected by nodes
        cap = max(cap, tip)
        return FeeQuote(max_priority_fee_per_gas=tip, max_fee_per_gas=cap)

    return FeeQuote(gas_price=_at_least(suggested.gas_price, floors.gas_price))


def suggest_from_block(
    base_fee_per_gas: Optional[int],
    max_priority_fee_per_gas: Optional[int],
    gas_price: Optional[int] = None
) -> Optional[FeeQuote]:
    """
    Build a suggestion from raw node values.

    Returns an EIP-1559 suggestion when the latest block has a base fee,
    a legacy one when only ``gas_price`` is known, else None.
    """
    if base_fee_per_gas is not None and max_priority_fee_per_gas is not None:
        return FeeQuote(
            max_priority_fee_per_gas=max_priority_fee_per_gas,
            max_fee_per_gas=BASE_FEE_MULTIPLIER * base_fee_per_gas + max_priority_fee_per_gas,
            gas_price=gas_price
        )
    if gas_price is not None:
        return FeeQuote(gas_price=gas_price)
    return None
