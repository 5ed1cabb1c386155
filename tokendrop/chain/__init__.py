"""
Ledger clients for tokendrop.

``get_chain_client`` returns one shared Web3ChainClient per
(endpoint, signer, contract), so every request in a process submits
through the same nonce lock.
"""
import logging
import threading
from typing import Dict, Tuple

from .base import ChainClient, DEFAULT_INCLUSION_DEADLINE
from .stub_client import StubChainClient
from .web3_client import Web3ChainClient

__all__ = ['ChainClient', 'Web3ChainClient', 'StubChainClient',
           'DEFAULT_INCLUSION_DEADLINE', 'get_chain_client', 'clear_client_cache']

logger = logging.getLogger(__name__)

# Module-level client cache with thread safety
_client_cache: Dict[Tuple[str, str, str], Web3ChainClient] = {}
_cache_lock = threading.RLock()


def get_chain_client(config) -> Web3ChainClient:
    """
    Get or create the shared client for a treasury configuration.

    Args:
        config: TreasuryConfig to connect with

    Returns:
        Web3ChainClient instance
    """
    cache_key = (config.rpc_url, str(config.treasury_address), str(config.contract_address))
    with _cache_lock:
        if cache_key not in _client_cache:
            logger.debug(f"Creating chain client for {config.rpc_url}")
            _client_cache[cache_key] = Web3ChainClient(
                rpc_url=config.rpc_url,
                private_key=config.private_key,
                contract_address=config.contract_address,
                gas_limit=config.gas_limit,
                request_timeout=config.request_timeout
            )
        return _client_cache[cache_key]


def clear_client_cache() -> None:
    with _cache_lock:
        _client_cache.clear()
