"""
Tests for the NetworkConfig lookup.
"""
import pytest
from unittest.mock import patch

from tokendrop.networks import NetworkConfig

MOCK_NETWORKS = {
    "test-network": {
        "chainId": 123,
        "name": "testnet",
        "explorer": "https://explorer.example.com/"
    }
}


class TestNetworkConfig:
    """Test NetworkConfig class."""

    def test_packaged_networks(self):
        networks = NetworkConfig.load_networks()
        assert networks["polygon"]["chainId"] == 137
        assert networks["polygon"]["name"] == "matic"

    def test_load_networks_cached(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with patch("importlib.resources.files") as mock_files:
            result = NetworkConfig.load_networks()
            mock_files.assert_not_called()
        assert result == MOCK_NETWORKS

    def test_get_network_not_found(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        with pytest.raises(ValueError) as exc_info:
            NetworkConfig.get_network("non-existent-network")
        assert "test-network" in str(exc_info.value)

    def test_name_for(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.name_for(123) == "testnet"
        assert NetworkConfig.name_for(999) == "unknown"

    def test_tx_url(self):
        NetworkConfig._networks_cache = MOCK_NETWORKS
        assert NetworkConfig.tx_url(123, "0xabc") == "https://explorer.example.com/tx/0xabc"
        assert NetworkConfig.tx_url(123, "abc") == "https://explorer.example.com/tx/0xabc"
        assert NetworkConfig.tx_url(999, "0xabc") is None
