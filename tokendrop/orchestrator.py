"""
DisbursementOrchestrator - runs one disbursement request end to end.
"""
import logging
import threading
from enum import Enum
from typing import Any, Dict, Optional

from . import eligibility, fees
from ._rate_limited_log import rate_limited_log
from .address import normalize
from .chain import ChainClient, get_chain_client
from .config import TreasuryConfig
from .eligibility import Eligibility
from .exceptions import ChainUnavailable, ContractError, InvalidAddress
from .models import DisbursementResult, DisbursementStatus, TransactionHandle
from .networks import NetworkConfig

logger = logging.getLogger(__name__)

class Stage(str, Enum):
    """Pipeline stages, in execution order."""
    VALIDATING = "validating"
    CHECKING_NETWORK = "checking_network"
    CHECKING_SIGNER = "checking_signer"
    CHECKING_ELIGIBILITY = "checking_eligibility"
    SIMULATING = "simulating"
    PRICING = "pricing"
    SUBMITTING = "submitting"
    AWAITING_INCLUSION = "awaiting_inclusion"


class DisbursementOrchestrator:
    """
    Issues ``amount_per_recipient`` of the configured token to a recipient.

    Checks run cheapest and most decisive first; nothing that costs a fee
    happens until the network, the signer, eligibility and a dry run have
    all passed. Every outcome, including failures, is returned as a
    DisbursementResult.
    """

    def __init__(
        self,
        config: TreasuryConfig,
        client: Optional[ChainClient] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            config: Validated treasury configuration
            client: Ledger client (defaults to the shared Web3ChainClient)
            logger: Optional logger instance
        """
        self.config = config
        self.client = client or get_chain_client(config)
        self.logger = logger or logging.getLogger(__name__)

    def disburse(self, raw_recipient: Any) -> DisbursementResult:
        """
        Disburse the configured amount to ``raw_recipient``.

        Args:
            raw_recipient: Recipient address as supplied by the caller

        Returns:
            DisbursementResult with exactly one terminal status
        """
        config = self.config
        stage = Stage.VALIDATING
        try:
            # 1. Validate the recipient
            try:
                recipient = normalize(raw_recipient)
            except InvalidAddress as e:
                self.logger.debug(f"Rejected recipient {raw_recipient!r}: {e}")
                return self._finish(DisbursementResult(
                    status=DisbursementStatus.INVALID_INPUT,
                    message=str(e),
                    diagnostics={"input": raw_recipient if isinstance(raw_recipient, str) else None}
                ))

            # 2. Make sure we talk to the expected chain
            stage = Stage.CHECKING_NETWORK
            network = self.client.network_identity()
            if network.chain_id != config.expected_chain_id:
                self.logger.warning(
                    f"Connected to chain {network.chain_id}, expected {config.expected_chain_id}"
                )
                return self._finish(DisbursementResult(
                    status=DisbursementStatus.WRONG_NETWORK,
                    message="Wrong RPC network",
                    diagnostics={
                        "expected": config.expected_chain_id,
                        "got": network.chain_id,
                        "network": network.name,
                    }
                ))

            # 3. The credential must control the treasury
            stage = Stage.CHECKING_SIGNER
            signer = self.client.signer_address()
            if signer != config.treasury_address:
                self.logger.warning(f"Signer {signer} does not control treasury {config.treasury_address}")
                return self._finish(DisbursementResult(
                    status=DisbursementStatus.SIGNER_MISMATCH,
                    message="Signer address does not match the treasury address",
                    diagnostics={"signer": signer, "treasury": config.treasury_address}
                ))

            # 4. One disbursement per recipient, and only while supply lasts
            stage = Stage.CHECKING_ELIGIBILITY
            decision = eligibility.evaluate(
                recipient,
                config.treasury_address,
                config.token_id,
                config.amount_per_recipient,
                self.client,
                policy=config.holding_policy
            )
            if decision.eligibility == Eligibility.ALREADY_SATISFIED:
                return self._finish(DisbursementResult(
                    status=DisbursementStatus.ALREADY,
                    message="Recipient already holds this token",
                    token_id=config.token_id,
                    diagnostics={"recipient": recipient, "balance": str(decision.recipient_balance)}
                ))
            if decision.eligibility == Eligibility.INSUFFICIENT_SUPPLY:
                return self._finish(DisbursementResult(
                    status=DisbursementStatus.NONE_AVAILABLE,
                    message="Treasury holds insufficient token balance",
                    token_id=config.token_id,
                    diagnostics={
                        "treasury_balance": str(decision.treasury_balance),
                        "required": str(config.amount_per_recipient),
                        "token_id": str(config.token_id),
                    }
                ))

            # 5. Dry run, so a doomed transfer costs nothing
            stage = Stage.SIMULATING
            outcome = self.client.simulate_transfer(
                config.treasury_address, recipient, config.token_id, config.amount_per_recipient
            )
            if not outcome.ok:
                return self._finish(DisbursementResult(
                    status=DisbursementStatus.WOULD_REVERT,
                    message="Transfer would revert",
                    diagnostics={"reason": outcome.reason}
                ))

            # 6. Price it, never below the floors
            stage = Stage.PRICING
            fee = fees.quote(self.client.suggested_fees(), config.fee_floors)

            # 7. Broadcast
            stage = Stage.SUBMITTING
            try:
                handle = self.client.submit_transfer(
                    config.treasury_address, recipient, config.token_id, config.amount_per_recipient, fee
                )
            except Exception as e:
                self.logger.error(f"Submission to {recipient} failed: {e}")
                return self._finish(DisbursementResult(
                    status=DisbursementStatus.SUBMISSION_FAILED,
                    message="Transaction submission failed",
                    diagnostics={"error": str(e), "stage": stage.value}
                ))
            self.logger.info(f"Submitted {handle.tx_hash} to {recipient}")

            # 8. Short, bounded look for inclusion
            stage = Stage.AWAITING_INCLUSION
            confirmed = self._await_inclusion(handle)

            native = self.client.native_balance(config.treasury_address)
            diagnostics: Dict[str, Any] = {
                "network": {"chainId": network.chain_id, "name": network.name},
                "fees": fee.as_strings(),
                "contract": config.contract_address,
                "treasury_native_balance": str(native) if native is not None else None,
                "explorer_url": NetworkConfig.tx_url(network.chain_id, handle.tx_hash),
            }
            return self._finish(DisbursementResult(
                status=DisbursementStatus.SENT,
                message="Transaction broadcast",
                tx_hash=handle.tx_hash,
                token_id=config.token_id,
                amount=config.amount_per_recipient,
                confirmed=confirmed,
                diagnostics=diagnostics
            ))

        except ContractError as e:
            self.logger.error(f"Contract call failed while {stage.value}: {e}")
            return self._finish(DisbursementResult(
                status=DisbursementStatus.CONTRACT_ERROR,
                message="Token contract call failed",
                diagnostics={"error": str(e), "stage": stage.value, "contract": config.contract_address}
            ))
        except ChainUnavailable as e:
            self.logger.error(f"Chain unavailable while {stage.value}: {e}")
            return self._finish(DisbursementResult(
                status=DisbursementStatus.CHAIN_UNAVAILABLE,
                message="Ledger node unavailable",
                diagnostics={"error": str(e), "stage": stage.value}
            ))
        except Exception as e:
            self.logger.exception(f"Unexpected error while {stage.value}: {e}")
            return self._finish(DisbursementResult(
                status=DisbursementStatus.CHAIN_UNAVAILABLE,
                message="Unexpected error",
                diagnostics={"error": str(e), "stage": stage.value, "unexpected": True}
            ))

    def _await_inclusion(self, handle: TransactionHandle) -> bool:
        """
        Wait for inclusion on a dedicated daemon thread, for at most the
        configured deadline.

        A wait still running at the deadline is left to finish on its own;
        the transaction itself is unaffected.
        """
        deadline = self.config.inclusion_deadline
        outcome: Dict[str, Any] = {}

        def wait() -> None:
            try:
                outcome["confirmed"] = bool(self.client.await_inclusion(handle, 1, deadline))
            except Exception as e:
                outcome["error"] = e

        worker = threading.Thread(
            target=wait,
            name=f"tokendrop-inclusion-{handle.tx_hash[:10]}",
            daemon=True
        )
        worker.start()
        worker.join(timeout=deadline)

        if worker.is_alive():
            self.logger.debug(f"{handle.tx_hash} not confirmed within {deadline}s")
            return False
        if "error" in outcome:
            rate_limited_log(f"Inclusion wait failed: {outcome['error']}", logger_instance=self.logger)
            return False
        return outcome.get("confirmed", False)

    def _finish(self, result: DisbursementResult) -> DisbursementResult:
        log = self.logger.info if not result.is_error else self.logger.warning
        log(f"Disbursement finished: {result.status.value}")
        return result
