"""
Ledger access abstraction.

Every read and write the disbursement pipeline makes against the ledger goes
through a ChainClient, so the pipeline itself stays free of transport code.
"""
from abc import ABC, abstractmethod
from typing import Optional

from ..address import Address
from ..models import FeeQuote, NetworkIdentity, SimulationOutcome, TransactionHandle

# Default upper bound, in seconds, on waiting for a transaction to be mined
DEFAULT_INCLUSION_DEADLINE = 8.0


class ChainClient(ABC):
    """
    Abstract base class for ledger clients.

    Operations raise ChainUnavailable on transport failure, except the
    best-effort ones (``suggested_fees``, ``native_balance``,
    ``await_inclusion``), which degrade to None/False instead.
    """

    @abstractmethod
    def network_identity(self) -> NetworkIdentity:
        """
        Query the chain id of the connected endpoint.

        Raises:
            ChainUnavailable: If the endpoint cannot be reached
        """
        pass

    @abstractmethod
    def balance_of(self, holder: Address, token_id: int) -> int:
        """
        Read how many units of ``token_id`` ``holder`` owns.

        Raises:
            ChainUnavailable: If the read fails
        """
        pass

    @abstractmethod
    def signer_address(self) -> Address:
        """Address controlled by the configured signing credential."""
        pass

    @abstractmethod
    def suggested_fees(self) -> Optional[FeeQuote]:
        """Best-effort fee suggestion; None when the node gives none."""
        pass

    @abstractmethod
    def simulate_transfer(
        self,
        sender: Address,
        recipient: Address,
        token_id: int,
        amount: int
    ) -> SimulationOutcome:
        """
        Execute the transfer against current state without committing it.

        Returns:
            SimulationOutcome carrying the revert reason on failure

        Raises:
            ChainUnavailable: If the call could not be made at all
        """
        pass

    @abstractmethod
    def submit_transfer(
        self,
        sender: Address,
        recipient: Address,
        token_id: int,
        amount: int,
        fee: FeeQuote
    ) -> TransactionHandle:
        """
        Sign and broadcast the transfer.

        Returns as soon as the node accepts the transaction. Concurrent calls
        for the same signer must be serialized by the implementation so that
        nonces are assigned one at a time.

        Raises:
            SubmissionError: If signing fails or the node rejects the transaction
        """
        pass

    @abstractmethod
    def await_inclusion(
        self,
        handle: TransactionHandle,
        confirmations: int = 1,
        deadline: float = DEFAULT_INCLUSION_DEADLINE
    ) -> bool:
        """
        Wait up to ``deadline`` seconds for the transaction to be mined.

        Returns:
            True if inclusion was observed in time, False otherwise. Never raises.
        """
        pass

    def native_balance(self, holder: Address) -> Optional[int]:
        """Best-effort gas token balance of ``holder``; None if unknown."""
        return None

    def close(self) -> None:
        """Release any open connections or resources."""
        pass
