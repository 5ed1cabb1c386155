"""
Tests for the eligibility gate.
"""
import pytest
from unittest.mock import MagicMock

from tokendrop.chain import ChainClient
from tokendrop.eligibility import Eligibility, HoldingPolicy, evaluate
from tokendrop.exceptions import ChainUnavailable
from tests.conftest import TEST_RECIPIENT, TEST_TREASURY, TEST_TOKEN_ID


def _client(recipient_balance, treasury_balance):
    balances = {TEST_RECIPIENT: recipient_balance, TEST_TREASURY: treasury_balance}
    client = MagicMock(spec=ChainClient)
    client.balance_of.side_effect = lambda holder, token_id: balances[holder]
    return client


@pytest.mark.parametrize("policy, held, supply, amount, expected", [
    (HoldingPolicy.ANY, 0, 50, 1, Eligibility.PROCEED),
    (HoldingPolicy.ANY, 1, 50, 1, Eligibility.ALREADY_SATISFIED),
    (HoldingPolicy.ANY, 1, 50, 5, Eligibility.ALREADY_SATISFIED),
    (HoldingPolicy.ANY, 0, 0, 1, Eligibility.INSUFFICIENT_SUPPLY),
    (HoldingPolicy.ANY, 0, 4, 5, Eligibility.INSUFFICIENT_SUPPLY),
    (HoldingPolicy.ANY, 0, 5, 5, Eligibility.PROCEED),
    (HoldingPolicy.FULL_AMOUNT, 1, 50, 5, Eligibility.PROCEED),
    (HoldingPolicy.FULL_AMOUNT, 5, 50, 5, Eligibility.ALREADY_SATISFIED),
    (HoldingPolicy.FULL_AMOUNT, 4, 3, 5, Eligibility.INSUFFICIENT_SUPPLY),
    (HoldingPolicy.FULL_AMOUNT, 1, 50, 1, Eligibility.ALREADY_SATISFIED),
])
def test_evaluate(policy, held, supply, amount, expected):
    decision = evaluate(TEST_RECIPIENT, TEST_TREASURY, TEST_TOKEN_ID, amount, _client(held, supply), policy=policy)
    assert decision.eligibility == expected
    assert decision.recipient_balance == held


def test_treasury_not_read_when_already_satisfied():
    client = _client(3, 50)

    decision = evaluate(TEST_RECIPIENT, TEST_TREASURY, TEST_TOKEN_ID, 1, client)

    client.balance_of.assert_called_once_with(TEST_RECIPIENT, TEST_TOKEN_ID)
    assert decision.treasury_balance is None


def test_recipient_read_first():
    client = _client(0, 50)

    decision = evaluate(TEST_RECIPIENT, TEST_TREASURY, TEST_TOKEN_ID, 1, client)

    assert [c.args[0] for c in client.balance_of.call_args_list] == [TEST_RECIPIENT, TEST_TREASURY]
    assert decision.treasury_balance == 50


def test_read_failure_propagates():
    client = MagicMock(spec=ChainClient)
    client.balance_of.side_effect = ChainUnavailable("timeout", operation="balanceOf")

    with pytest.raises(ChainUnavailable):
        evaluate(TEST_RECIPIENT, TEST_TREASURY, TEST_TOKEN_ID, 1, client)
