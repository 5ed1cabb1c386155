"""
Thread-safe rate-limited logging.

Best-effort RPC reads can fail on every request while a node is degraded;
this keeps one line per distinct message per interval.
"""
import logging
import threading
from typing import Dict, Optional

from cachetools import TTLCache

logger = logging.getLogger(__name__)

_MAX_KEYS = 100

# One cache per interval so each entry expires after its own window
_caches: Dict[int, TTLCache] = {}
_caches_lock = threading.RLock()


def _cache_for(interval: int) -> TTLCache:
    cache = _caches.get(interval)
    if cache is None:
        cache = TTLCache(maxsize=_MAX_KEYS, ttl=interval)
        _caches[interval] = cache
    return cache


def rate_limited_log(
    message: str,
    level: str = "warning",
    interval: int = 60,
    logger_instance: Optional[logging.Logger] = None
) -> bool:
    """
    Log ``message`` unless the same message was logged within ``interval`` seconds.

    Args:
        message: Message to log
        level: Log level name (debug, info, warning, error, critical)
        interval: Suppression window in seconds
        logger_instance: Logger to use (defaults to module logger)

    Returns:
        True if the message was emitted, False if suppressed
    """
    log_instance = logger_instance or logger
    log_method = getattr(log_instance, level.lower(), log_instance.warning)
    key = f"{level}:{message}"

    with _caches_lock:
        cache = _cache_for(interval)
        if key in cache:
            return False
        cache[key] = True

    log_method(message)
    return True


def reset() -> None:
    """Forget all suppressed messages."""
    with _caches_lock:
        _caches.clear()
