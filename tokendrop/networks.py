"""
Known networks, loaded from the packaged networks.json.
"""
import json
import importlib.resources
import threading
from typing import Dict, Any, Optional


class NetworkConfig:
    """Lookup of chain ids, names and block explorers."""

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None
    _lock = threading.Lock()

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load all network definitions.

        Returns:
            Mapping of network key to its definition
        """
        with cls._lock:
            if cls._networks_cache is None:
                resource = importlib.resources.files("tokendrop").joinpath("networks.json")
                with resource.open("r", encoding="utf-8") as f:
                    cls._networks_cache = json.load(f)
            return cls._networks_cache

    @classmethod
    def get_network(cls, network: str) -> Dict[str, Any]:
        """
        Get one network definition by key.

        Raises:
            ValueError: If the network is unknown
        """
        networks = cls.load_networks()
        if network not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Unknown network {network!r}. Available networks: {available}")
        return networks[network]

    @classmethod
    def by_chain_id(cls, chain_id: int) -> Optional[Dict[str, Any]]:
        for entry in cls.load_networks().values():
            if entry.get("chainId") == chain_id:
                return entry
        return None

    @classmethod
    def name_for(cls, chain_id: int) -> str:
        """Short network name for ``chain_id``, or "unknown"."""
        entry = cls.by_chain_id(chain_id)
        return entry["name"] if entry else "unknown"

    @classmethod
    def tx_url(cls, chain_id: int, tx_hash: str) -> Optional[str]:
        """Block explorer URL for a transaction, if the chain is known."""
        entry = cls.by_chain_id(chain_id)
        if not entry or not entry.get("explorer"):
            return None
        if not tx_hash.startswith("0x"):
            tx_hash = "0x" + tx_hash
        return f"{entry['explorer'].rstrip('/')}/tx/{tx_hash}"
