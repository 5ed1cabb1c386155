"""
Recipient address normalization.
"""
import re
from typing import Any

from pydantic_core import core_schema
from web3 import Web3

from .exceptions import InvalidAddress

_HEX_ADDRESS_RE = re.compile(r"^0[xX][0-9a-fA-F]{40}$")


class Address(str):
    """A 20-byte account address in EIP-55 checksummed form."""

    @property
    def raw(self) -> bytes:
        return bytes.fromhex(self[2:])

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            normalize,
            serialization=core_schema.to_string_ser_schema()
        )


def normalize(raw: Any) -> Address:
    """
    Validate and checksum a recipient identifier.

    Args:
        raw: The identifier as received from the caller

    Returns:
        Checksummed Address

    Raises:
        InvalidAddress: If the input is missing, not a string, malformed,
            or mixed-case with a bad checksum
    """
    if raw is None:
        raise InvalidAddress("Missing recipient address", raw=raw)
    if not isinstance(raw, str):
        raise InvalidAddress(f"Recipient address must be a string, got {type(raw).__name__}", raw=raw)

    candidate = raw.strip()
    if not candidate:
        raise InvalidAddress("Missing recipient address", raw=raw)
    if not _HEX_ADDRESS_RE.match(candidate):
        raise InvalidAddress(f"Malformed address: {candidate!r}", raw=raw)

    body = candidate[2:]
    candidate = "0x" + body
    # Single-case input carries no checksum; mixed case must match EIP-55
    if body != body.lower() and body != body.upper():
        if not Web3.is_checksum_address(candidate):
            raise InvalidAddress(f"Bad address checksum: {candidate}", raw=raw)

    return Address(Web3.to_checksum_address(candidate.lower()))


def is_valid(raw: Any) -> bool:
    """Return True if ``raw`` would normalize without error."""
    try:
        normalize(raw)
    except InvalidAddress:
        return False
    return True
