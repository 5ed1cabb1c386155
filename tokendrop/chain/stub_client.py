"""
In-memory ChainClient.

Keeps ERC-1155 balances in a dict and applies transfers locally, so the
disbursement pipeline can be run end to end without a node.
"""
import logging
import threading
import time
from typing import Dict, Iterable, List, Optional, Tuple

from web3 import Web3

from ..address import Address, normalize
from ..exceptions import ChainUnavailable, SubmissionError
from ..models import FeeQuote, NetworkIdentity, SimulationOutcome, TransactionHandle
from ..networks import NetworkConfig
from .base import ChainClient, DEFAULT_INCLUSION_DEADLINE

logger = logging.getLogger(__name__)

# Balance key: (checksummed holder, token id)
BalanceKey = Tuple[str, int]


class StubChainClient(ChainClient):
    """
    A scriptable in-memory ledger.

    Attributes:
        balances: Token balances keyed by (holder, token_id)
        calls: Names of the operations invoked, in order
        submitted: Transfers accepted by ``submit_transfer``
    """

    def __init__(
        self,
        signer: str,
        chain_id: int = 137,
        balances: Optional[Dict[BalanceKey, int]] = None,
        suggested: Optional[FeeQuote] = None,
        revert_reason: Optional[str] = None,
        submit_error: Optional[str] = None,
        auto_mine: bool = True,
        unavailable: Iterable[str] = (),
        native: Optional[int] = None
    ):
        """
        Args:
            signer: Address the stub credential controls
            chain_id: Chain id reported by ``network_identity``
            balances: Initial balances keyed by (holder, token_id)
            suggested: Fee suggestion to return, None for none
            revert_reason: If set, every simulation fails with this reason
            submit_error: If set, every submission fails with this message
            auto_mine: Mine transfers as soon as they are submitted
            unavailable: Operation names that raise ChainUnavailable
            native: Gas token balance reported for every holder
        """
        self.signer = normalize(signer)
        self.chain_id = chain_id
        self.balances: Dict[BalanceKey, int] = {}
        for (holder, token_id), amount in (balances or {}).items():
            self.balances[(normalize(holder), token_id)] = amount
        self.suggested = suggested
        self.revert_reason = revert_reason
        self.submit_error = submit_error
        self.auto_mine = auto_mine
        self.unavailable = set(unavailable)
        self.native = native

        self.calls: List[str] = []
        self.submitted: List[Dict[str, object]] = []
        self._pending: Dict[str, Tuple[Address, Address, int, int]] = {}
        self._mined: set = set()
        self._nonce = 0
        self._lock = threading.Lock()

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.unavailable:
            raise ChainUnavailable(f"RPC {operation} failed: stub endpoint unavailable", operation=operation)

    def set_balance(self, holder: str, token_id: int, amount: int) -> None:
        with self._lock:
            self.balances[(normalize(holder), token_id)] = amount

    def network_identity(self) -> NetworkIdentity:
        self._enter("network_identity")
        return NetworkIdentity(chain_id=self.chain_id, name=NetworkConfig.name_for(self.chain_id))

    def balance_of(self, holder: Address, token_id: int) -> int:
        self._enter("balance_of")
        with self._lock:
            return self.balances.get((normalize(holder), token_id), 0)

    def signer_address(self) -> Address:
        self._enter("signer_address")
        return self.signer

    def native_balance(self, holder: Address) -> Optional[int]:
        self.calls.append("native_balance")
        return self.native

    def suggested_fees(self) -> Optional[FeeQuote]:
        self.calls.append("suggested_fees")
        if "suggested_fees" in self.unavailable:
            return None
        return self.suggested

    def _check_transfer(self, sender: Address, token_id: int, amount: int) -> Optional[str]:
        if self.revert_reason:
            return self.revert_reason
        if self.balances.get((normalize(sender), token_id), 0) < amount:
            return "ERC1155: insufficient balance for transfer"
        return None

    def simulate_transfer(
        self,
        sender: Address,
        recipient: Address,
        token_id: int,
        amount: int
    ) -> SimulationOutcome:
        self._enter("simulate_transfer")
        with self._lock:
            reason = self._check_transfer(sender, token_id, amount)
        if reason:
            return SimulationOutcome.would_fail(reason)
        return SimulationOutcome.success()

    def submit_transfer(
        self,
        sender: Address,
        recipient: Address,
        token_id: int,
        amount: int,
        fee: FeeQuote
    ) -> TransactionHandle:
        self.calls.append("submit_transfer")
        if self.submit_error:
            raise SubmissionError(self.submit_error)
        if normalize(sender) != self.signer:
            raise SubmissionError(f"Cannot sign for {sender}")

        with self._lock:
            nonce = self._nonce
            self._nonce += 1
            tx_hash = Web3.to_hex(Web3.keccak(text=f"{sender}:{recipient}:{token_id}:{amount}:{nonce}"))
            self._pending[tx_hash] = (normalize(sender), normalize(recipient), token_id, amount)
            self.submitted.append({
                "tx_hash": tx_hash,
                "sender": sender,
                "recipient": recipient,
                "token_id": token_id,
                "amount": amount,
                "fee": fee,
                "nonce": nonce,
            })

        logger.debug(f"Stub accepted {tx_hash}")
        if self.auto_mine:
            self.mine(tx_hash)
        return TransactionHandle(tx_hash=tx_hash)

    def mine(self, tx_hash: Optional[str] = None) -> List[str]:
        """
        Apply pending transfers to the balances.

        Args:
            tx_hash: Mine only this transaction; all pending when None

        Returns:
            Hashes of the transactions mined
        """
        with self._lock:
            hashes = [tx_hash] if tx_hash else list(self._pending)
            mined = []
            for h in hashes:
                transfer = self._pending.pop(h, None)
                if transfer is None:
                    continue
                sender, recipient, token_id, amount = transfer
                if self.balances.get((sender, token_id), 0) >= amount:
                    self.balances[(sender, token_id)] -= amount
                    self.balances[(recipient, token_id)] = self.balances.get((recipient, token_id), 0) + amount
                self._mined.add(h)
                mined.append(h)
            return mined

    def await_inclusion(
        self,
        handle: TransactionHandle,
        confirmations: int = 1,
        deadline: float = DEFAULT_INCLUSION_DEADLINE
    ) -> bool:
        self.calls.append("await_inclusion")
        give_up_at = time.monotonic() + deadline
        while handle.tx_hash not in self._mined:
            if time.monotonic() >= give_up_at:
                return False
            time.sleep(min(0.01, deadline))
        return True
