"""
Treasury configuration.

Built once at process start; every field is validated before any
disbursement logic runs.
"""
import os
import urllib.parse
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, SecretStr, ValidationError, field_validator
from web3 import Web3

from .address import Address
from .chain.base import DEFAULT_INCLUSION_DEADLINE
from .eligibility import HoldingPolicy
from .exceptions import ConfigError
from .models import FeeFloors, UINT256_MAX

# Polygon PoS mainnet
DEFAULT_CHAIN_ID = 137

# Polygon rejects or strands transactions priced far below these
DEFAULT_FEE_FLOORS = FeeFloors(
    max_priority_fee_per_gas=Web3.to_wei(40, "gwei"),
    max_fee_per_gas=Web3.to_wei(80, "gwei")
)


def _is_local(url: str) -> bool:
    host = urllib.parse.urlparse(url).hostname or ""
    return host in ("localhost", "127.0.0.1")


class TreasuryConfig(BaseModel):
    """Validated settings for one treasury / token deployment"""
    rpc_url: str
    private_key: SecretStr
    contract_address: Address
    treasury_address: Address
    token_id: int = Field(1, ge=0, le=UINT256_MAX)
    amount_per_recipient: int = Field(1, gt=0, le=UINT256_MAX)
    expected_chain_id: int = Field(DEFAULT_CHAIN_ID, gt=0)
    fee_floors: FeeFloors = DEFAULT_FEE_FLOORS
    gas_limit: Optional[int] = Field(200000, gt=21000)
    inclusion_deadline: float = Field(DEFAULT_INCLUSION_DEADLINE, gt=0)
    request_timeout: int = Field(10, gt=0)
    holding_policy: HoldingPolicy = HoldingPolicy.ANY

    @field_validator("rpc_url")
    @classmethod
    def _check_rpc_url(cls, value: str) -> str:
        parsed = urllib.parse.urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"rpc_url is not a valid URL: {value!r}")
        if parsed.scheme != "https" and not _is_local(value):
            raise ValueError(f"rpc_url must use https:// for security (got: {parsed.scheme}://)")
        return value

    @field_validator("private_key")
    @classmethod
    def _check_private_key(cls, value: SecretStr) -> SecretStr:
        key = value.get_secret_value().strip()
        body = key[2:] if key.lower().startswith("0x") else key
        if len(body) != 64:
            raise ValueError("private_key must be 32 bytes of hex")
        try:
            bytes.fromhex(body)
        except ValueError:
            raise ValueError("private_key must be 32 bytes of hex")
        return SecretStr("0x" + body)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "TreasuryConfig":
        """
        Build the configuration from environment variables.

        Recognized variables: RPC_URL, PRIVATE_KEY, CONTRACT_ADDRESS,
        ADMIN_ADDRESS (or TREASURY_ADDRESS), TOKEN_ID, AMOUNT_PER_USER,
        EXPECTED_CHAIN_ID, MIN_PRIORITY_FEE_GWEI, MIN_MAX_FEE_GWEI,
        GAS_PRICE_GWEI, GAS_LIMIT, INCLUSION_DEADLINE_SECONDS,
        RPC_TIMEOUT_SECONDS, HOLDING_POLICY.

        Raises:
            ConfigError: If a variable is missing or invalid
        """
        env = os.environ if environ is None else environ

        missing = [name for name in ("RPC_URL", "PRIVATE_KEY", "CONTRACT_ADDRESS") if not env.get(name)]
        treasury = env.get("ADMIN_ADDRESS") or env.get("TREASURY_ADDRESS")
        if not treasury:
            missing.append("ADMIN_ADDRESS")
        if missing:
            raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

        values: Dict[str, Any] = {
            "rpc_url": env["RPC_URL"],
            "private_key": env["PRIVATE_KEY"],
            "contract_address": env["CONTRACT_ADDRESS"],
            "treasury_address": treasury,
        }
        optional = {
            "TOKEN_ID": "token_id",
            "AMOUNT_PER_USER": "amount_per_recipient",
            "EXPECTED_CHAIN_ID": "expected_chain_id",
            "INCLUSION_DEADLINE_SECONDS": "inclusion_deadline",
            "RPC_TIMEOUT_SECONDS": "request_timeout",
            "HOLDING_POLICY": "holding_policy",
        }
        for var, field in optional.items():
            if env.get(var):
                values[field] = env[var].strip()

        if env.get("GAS_LIMIT"):
            gas_limit = env["GAS_LIMIT"].strip().lower()
            values["gas_limit"] = None if gas_limit in ("auto", "estimate") else gas_limit

        floors = _fee_floors_from_env(env)
        if floors is not None:
            values["fee_floors"] = floors

        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise ConfigError(f"Invalid treasury configuration: {e}") from e


def _gwei(env: Mapping[str, str], name: str) -> Optional[int]:
    raw = env.get(name)
    if not raw:
        return None
    try:
        return Web3.to_wei(Decimal(raw.strip()), "gwei")
    except (InvalidOperation, ValueError) as e:
        raise ConfigError(f"{name} must be a number of gwei, got {raw!r}") from e


def _fee_floors_from_env(env: Mapping[str, str]) -> Optional[FeeFloors]:
    tip = _gwei(env, "MIN_PRIORITY_FEE_GWEI")
    cap = _gwei(env, "MIN_MAX_FEE_GWEI")
    price = _gwei(env, "GAS_PRICE_GWEI")
    if tip is None and cap is None and price is None:
        return None
    try:
        if price is not None and tip is None and cap is None:
            return FeeFloors(gas_price=price)
        return FeeFloors(
            max_priority_fee_per_gas=tip if tip is not None else DEFAULT_FEE_FLOORS.max_priority_fee_per_gas,
            max_fee_per_gas=cap if cap is not None else DEFAULT_FEE_FLOORS.max_fee_per_gas,
            gas_price=price
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid fee floors: {e}") from e
