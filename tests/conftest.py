"""
Pytest fixtures for the tokendrop tests.
"""
import pytest
from unittest.mock import MagicMock
from eth_account import Account
from web3 import Web3
from web3.providers.rpc import HTTPProvider

from tokendrop import _rate_limited_log
from tokendrop.chain import StubChainClient, clear_client_cache
from tokendrop.config import TreasuryConfig
from tokendrop.models import FeeFloors
from tokendrop.networks import NetworkConfig
from tokendrop.orchestrator import DisbursementOrchestrator

# Constants for testing
TEST_RPC_URL = "https://rpc.example.com"
TEST_PRIV_KEY = "0x0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"
TEST_TREASURY = Account.from_key(TEST_PRIV_KEY).address
TEST_CONTRACT = Web3.to_checksum_address("0x1234567890123456789012345678901234567890")
TEST_RECIPIENT = Web3.to_checksum_address("0x" + "aa" * 20)
OTHER_ADDRESS = Web3.to_checksum_address("0x" + "bb" * 20)
TEST_TOKEN_ID = 7
GWEI = 10**9


@pytest.fixture(autouse=True)
def _patch_http_provider(monkeypatch):
    """
    Stub every Web3 HTTP call so no DNS / network traffic is triggered.
    """
    def _dummy(self, method, params=None, _=None):
        if method == "eth_chainId":
            return {"jsonrpc": "2.0", "id": 1, "result": "0x89"}        # Polygon
        if method == "eth_gasPrice":
            return {"jsonrpc": "2.0", "id": 1, "result": "0x3b9aca00"}  # 1 gwei
        return {"jsonrpc": "2.0", "id": 1, "result": "0x0"}

    monkeypatch.setattr(HTTPProvider, "make_request", _dummy, raising=True)


@pytest.fixture(autouse=True)
def _reset_caches():
    """Module-level caches must not leak between tests."""
    _rate_limited_log.reset()
    clear_client_cache()
    NetworkConfig._networks_cache = None
    yield
    _rate_limited_log.reset()
    clear_client_cache()


@pytest.fixture
def make_config():
    """Factory for a valid TreasuryConfig with overridable fields"""
    def _make(**overrides) -> TreasuryConfig:
        values = {
            "rpc_url": TEST_RPC_URL,
            "private_key": TEST_PRIV_KEY,
            "contract_address": TEST_CONTRACT,
            "treasury_address": TEST_TREASURY,
            "token_id": TEST_TOKEN_ID,
            "amount_per_recipient": 1,
            "expected_chain_id": 137,
            "fee_floors": FeeFloors(max_priority_fee_per_gas=40 * GWEI, max_fee_per_gas=80 * GWEI),
            "inclusion_deadline": 0.5,
        }
        values.update(overrides)
        return TreasuryConfig.model_validate(values)
    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def stub_client():
    """In-memory chain: treasury holds 50 of the test token, recipient none"""
    return StubChainClient(
        signer=TEST_TREASURY,
        chain_id=137,
        balances={(TEST_TREASURY, TEST_TOKEN_ID): 50},
        native=10**18
    )


@pytest.fixture
def orchestrator(config, stub_client):
    return DisbursementOrchestrator(config, client=stub_client)


@pytest.fixture
def mock_w3():
    """Web3 stand-in with a realistic Polygon-ish eth namespace"""
    w3 = MagicMock(spec=Web3)
    eth = MagicMock()
    eth.chain_id = 137
    eth.gas_price = 30 * GWEI
    eth.max_priority_fee = 35 * GWEI
    eth.get_block.return_value = {"number": 100, "baseFeePerGas": 50 * GWEI}
    eth.get_transaction_count.return_value = 12
    eth.send_raw_transaction.return_value = bytes.fromhex("ab" * 32)
    eth.block_number = 100
    w3.eth = eth
    return w3
