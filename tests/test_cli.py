"""
Tests for the tokendrop command line.
"""
import json
import pytest
from unittest.mock import patch

from tokendrop import cli
from tokendrop.exceptions import ConfigError
from tests.conftest import TEST_RECIPIENT


def test_networks(capsys):
    assert cli.main(["networks"]) == 0
    out = capsys.readouterr().out
    assert "polygon" in out
    assert "137" in out


def test_disburse_prints_result(config, stub_client, capsys):
    with patch.object(cli.TreasuryConfig, "from_env", return_value=config), \
         patch("tokendrop.orchestrator.get_chain_client", return_value=stub_client):
        code = cli.main(["disburse", TEST_RECIPIENT])

    assert code == 0
    result = json.loads(capsys.readouterr().out)
    assert result["status"] == "sent"


def test_disburse_error_exit_code(config, stub_client, capsys):
    with patch.object(cli.TreasuryConfig, "from_env", return_value=config), \
         patch("tokendrop.orchestrator.get_chain_client", return_value=stub_client):
        code = cli.main(["disburse", "not-an-address"])

    assert code == 1
    assert json.loads(capsys.readouterr().out)["status"] == "invalid_input"


def test_disburse_config_error(capsys):
    with patch.object(cli.TreasuryConfig, "from_env", side_effect=ConfigError("Missing RPC_URL")):
        assert cli.main(["disburse", TEST_RECIPIENT]) == 2
    assert "Missing RPC_URL" in capsys.readouterr().err


def test_command_required():
    with pytest.raises(SystemExit):
        cli.main([])
