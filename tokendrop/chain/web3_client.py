"""
Web3ChainClient - ChainClient backed by web3.py over JSON-RPC.
"""
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, TypeVar, Union

from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import SecretStr
from web3 import Web3
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, TimeExhausted

from .._rate_limited_log import rate_limited_log
from ..address import Address
from ..exceptions import ChainError, ChainUnavailable, ContractError, SubmissionError
from ..fees import suggest_from_block
from ..models import FeeQuote, NetworkIdentity, SimulationOutcome, TransactionHandle
from ..networks import NetworkConfig
from .base import ChainClient, DEFAULT_INCLUSION_DEADLINE

T = TypeVar('T')

# Prefix nodes put in front of the contract's own revert string
_REVERT_PREFIX = "execution reverted: "


class Web3ChainClient(ChainClient):
    """
    ChainClient for an ERC-1155 contract on an EVM network.

    To use this client, you'll need:
    - An RPC endpoint
    - The private key of the treasury account
    - The ERC-1155 contract address
    """

    # Minimal ERC-1155 ABI
    ERC1155_ABI = [
        {
            "inputs": [
                {"internalType": "address", "name": "account", "type": "address"},
                {"internalType": "uint256", "name": "id", "type": "uint256"}
            ],
            "name": "balanceOf",
            "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
            "stateMutability": "view",
            "type": "function"
        },
        {
            "inputs": [
                {"internalType": "address", "name": "from", "type": "address"},
                {"internalType": "address", "name": "to", "type": "address"},
                {"internalType": "uint256", "name": "id", "type": "uint256"},
                {"internalType": "uint256", "name": "amount", "type": "uint256"},
                {"internalType": "bytes", "name": "data", "type": "bytes"}
            ],
            "name": "safeTransferFrom",
            "outputs": [],
            "stateMutability": "nonpayable",
            "type": "function"
        }
    ]

    DEFAULT_GAS_LIMIT = 200000

    def __init__(
        self,
        rpc_url: str,
        private_key: Union[str, SecretStr],
        contract_address: str,
        gas_limit: Optional[int] = DEFAULT_GAS_LIMIT,
        request_timeout: int = 10,
        poll_interval: float = 0.5,
        logger: Optional[logging.Logger] = None,
        w3: Optional[Web3] = None
    ):
        """
        Initialize the client

        Args:
            rpc_url: JSON-RPC endpoint URL
            private_key: Treasury private key
            contract_address: ERC-1155 contract address
            gas_limit: Fixed gas limit, or None to estimate per transaction
            request_timeout: Per-request HTTP timeout in seconds
            poll_interval: Receipt polling interval in seconds
            logger: Optional logger instance
            w3: Pre-built Web3 instance (mainly for tests)
        """
        if isinstance(private_key, SecretStr):
            private_key = private_key.get_secret_value()

        self.rpc_url = rpc_url
        self.gas_limit = gas_limit
        self.poll_interval = poll_interval
        self.logger = logger or logging.getLogger(__name__)

        self.w3 = w3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": request_timeout}))
        self.account: LocalAccount = Account.from_key(private_key)
        self.contract = self.w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=self.ERC1155_ABI
        )

        # Nonce lookup, signing and broadcast happen under this lock
        self._nonce_lock = threading.Lock()

    def _rpc(self, operation: str, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except ChainError:
            raise
        except (ContractLogicError, BadFunctionCallOutput) as e:
            # The node answered; the contract (or its address) is at fault
            self.logger.error(f"Contract call {operation} failed: {e}")
            raise ContractError(f"Contract call {operation} failed: {str(e)}", operation=operation) from e
        except Exception as e:
            self.logger.error(f"RPC {operation} failed: {e}")
            raise ChainUnavailable(f"RPC {operation} failed: {str(e)}", operation=operation) from e

    def network_identity(self) -> NetworkIdentity:
        chain_id = self._rpc("chain_id", lambda: self.w3.eth.chain_id)
        return NetworkIdentity(chain_id=chain_id, name=NetworkConfig.name_for(chain_id))

    def balance_of(self, holder: Address, token_id: int) -> int:
        return self._rpc(
            "balanceOf",
            lambda: self.contract.functions.balanceOf(holder, token_id).call()
        )

    def signer_address(self) -> Address:
        return Address(self.account.address)

    def native_balance(self, holder: Address) -> Optional[int]:
        try:
            return self.w3.eth.get_balance(holder)
        except Exception as e:
            rate_limited_log(f"Native balance read failed: {e}", logger_instance=self.logger)
            return None

    def suggested_fees(self) -> Optional[FeeQuote]:
        try:
            block = self.w3.eth.get_block("latest")
            base_fee = block.get("baseFeePerGas")
            if base_fee is not None:
                # Legacy price as eth_gasPrice reports it, without another round trip
                tip = self.w3.eth.max_priority_fee
                gas_price = base_fee + tip
            else:
                tip, gas_price = None, self.w3.eth.gas_price
        except Exception as e:
            rate_limited_log(f"Fee suggestion unavailable, using floors: {e}", logger_instance=self.logger)
            return None

        suggestion = suggest_from_block(base_fee, tip, gas_price)
        self.logger.debug(f"Suggested fees: {suggestion}")
        return suggestion

    def simulate_transfer(
        self,
        sender: Address,
        recipient: Address,
        token_id: int,
        amount: int
    ) -> SimulationOutcome:
        transfer = self.contract.functions.safeTransferFrom(sender, recipient, token_id, amount, b"")
        try:
            transfer.call({"from": sender})
        except ContractLogicError as e:
            reason = getattr(e, "message", None) or str(e)
            if reason.startswith(_REVERT_PREFIX):
                reason = reason[len(_REVERT_PREFIX):]
            self.logger.info(f"Simulated transfer to {recipient} would revert: {reason}")
            return SimulationOutcome.would_fail(reason)
        except Exception as e:
            self.logger.error(f"RPC eth_call failed: {e}")
            raise ChainUnavailable(f"RPC eth_call failed: {str(e)}", operation="eth_call") from e
        return SimulationOutcome.success()

    def _estimate_gas(self, transfer: Any, sender: Address) -> int:
        try:
            gas = transfer.estimate_gas({"from": sender})
            # Add 10% buffer to gas estimate
            return int(gas * 1.1)
        except Exception as e:
            self.logger.warning(f"Gas estimation failed, using default: {self.DEFAULT_GAS_LIMIT}. Error: {e}")
            return self.DEFAULT_GAS_LIMIT

    def submit_transfer(
        self,
        sender: Address,
        recipient: Address,
        token_id: int,
        amount: int,
        fee: FeeQuote
    ) -> TransactionHandle:
        if sender != self.account.address:
            raise SubmissionError(f"Cannot sign for {sender}: credential controls {self.account.address}")

        transfer = self.contract.functions.safeTransferFrom(sender, recipient, token_id, amount, b"")

        with self._nonce_lock:
            try:
                nonce = self.w3.eth.get_transaction_count(sender, "pending")
                gas = self.gas_limit or self._estimate_gas(transfer, sender)
                tx_params: Dict[str, Any] = {
                    "from": sender,
                    "nonce": nonce,
                    "gas": gas,
                    **fee.to_tx_params()
                }
                tx = transfer.build_transaction(tx_params)
            except Exception as e:
                self.logger.error(f"Failed to build transaction: {e}")
                raise SubmissionError(f"Failed to build transaction: {str(e)}") from e

            try:
                signed_tx = self.account.sign_transaction(tx)
            except Exception as e:
                self.logger.error(f"Transaction signing failed: {e}")
                raise SubmissionError(f"Failed to sign transaction: {str(e)}") from e

            try:
                tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
            except Exception as e:
                self.logger.error(f"Failed to send transaction: {e}")
                raise SubmissionError(f"Failed to send transaction: {str(e)}") from e

        tx_hash_hex = Web3.to_hex(tx_hash)
        self.logger.info(f"Transaction sent: {tx_hash_hex} (nonce {nonce})")
        return TransactionHandle(tx_hash=tx_hash_hex)

    def await_inclusion(
        self,
        handle: TransactionHandle,
        confirmations: int = 1,
        deadline: float = DEFAULT_INCLUSION_DEADLINE
    ) -> bool:
        give_up_at = time.monotonic() + deadline
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(
                handle.tx_hash,
                timeout=deadline,
                poll_latency=self.poll_interval
            )
        except TimeExhausted:
            self.logger.debug(f"{handle.tx_hash} not mined within {deadline}s")
            return False
        except Exception as e:
            rate_limited_log(f"Receipt polling failed: {e}", logger_instance=self.logger)
            return False

        if receipt.get("status") == 0:
            self.logger.warning(f"Transaction {handle.tx_hash} was mined but reverted")

        if confirmations <= 1:
            return True

        mined_in = receipt["blockNumber"]
        while True:
            try:
                depth = self.w3.eth.block_number - mined_in + 1
            except Exception as e:
                rate_limited_log(f"Block number read failed: {e}", logger_instance=self.logger)
                return False
            if depth >= confirmations:
                return True
            if time.monotonic() + self.poll_interval > give_up_at:
                return False
            time.sleep(self.poll_interval)

