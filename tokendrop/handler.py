"""
Serverless-style HTTP adapter.

Takes an event shaped like ``{"httpMethod", "headers", "body"}`` and returns
``{"statusCode", "headers", "body"}``. The orchestrator is built once per
process from the environment and reused across invocations.
"""
import json
import logging
import threading
from typing import Any, Dict, Optional

from .config import TreasuryConfig
from .exceptions import ConfigError
from .models import DisbursementResult, DisbursementStatus
from .orchestrator import DisbursementOrchestrator

logger = logging.getLogger(__name__)

# Wire status for each terminal disbursement status
HTTP_STATUS = {
    DisbursementStatus.SENT: 200,
    DisbursementStatus.ALREADY: 200,
    DisbursementStatus.NONE_AVAILABLE: 200,
    DisbursementStatus.INVALID_INPUT: 400,
    DisbursementStatus.WRONG_NETWORK: 400,
    DisbursementStatus.SIGNER_MISMATCH: 400,
    DisbursementStatus.WOULD_REVERT: 400,
    DisbursementStatus.SUBMISSION_FAILED: 502,
    DisbursementStatus.CHAIN_UNAVAILABLE: 503,
    DisbursementStatus.CONTRACT_ERROR: 500,
}

_orchestrator: Optional[DisbursementOrchestrator] = None
_orchestrator_lock = threading.RLock()


def cors_headers() -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "content-type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Content-Type": "application/json",
    }


def respond(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": status_code,
        "headers": cors_headers(),
        "body": json.dumps(body),
    }


def get_orchestrator() -> DisbursementOrchestrator:
    """
    Get or create the process-wide orchestrator.

    Raises:
        ConfigError: If the environment does not hold a valid configuration
    """
    global _orchestrator
    with _orchestrator_lock:
        if _orchestrator is None:
            _orchestrator = DisbursementOrchestrator(TreasuryConfig.from_env())
        return _orchestrator


def set_orchestrator(orchestrator: Optional[DisbursementOrchestrator]) -> None:
    """Install (or with None, reset) the orchestrator used by ``handle``."""
    global _orchestrator
    with _orchestrator_lock:
        _orchestrator = orchestrator


def to_response(result: DisbursementResult) -> Dict[str, Any]:
    """Map a disbursement result onto an HTTP response."""
    body = result.to_dict()
    if result.is_error:
        body["error"] = result.message
    return respond(HTTP_STATUS[result.status], body)


def handle(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Handle one disbursement request.

    Args:
        event: Request with ``httpMethod`` and a JSON ``body`` holding ``to``

    Returns:
        Response dictionary
    """
    method = (event.get("httpMethod") or "").upper()
    if method == "OPTIONS":
        return respond(200, {})
    if method != "POST":
        return respond(405, {"error": "Method Not Allowed"})

    try:
        payload = json.loads(event.get("body") or "{}")
    except ValueError:
        return respond(400, {"error": "Request body must be JSON"})
    if not isinstance(payload, dict) or not payload.get("to"):
        return respond(400, {"error": "Missing 'to' address in body."})

    try:
        orchestrator = get_orchestrator()
    except ConfigError as e:
        logger.error(f"Cannot start disbursement service: {e}")
        return respond(500, {"error": "Service is misconfigured"})

    return to_response(orchestrator.disburse(payload["to"]))


def ping(event: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Health check."""
    return respond(200, {"ok": True, "message": "Functions are working."})
