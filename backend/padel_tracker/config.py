import logging
import os

logger = logging.getLogger(__name__)


def _canon_prefix(val):
    """
    Normalize API prefix to always be exactly like '/api':
      - defaults to '/api' when unset/empty
      - ensures a single leading slash
      - removes any trailing slash (except for root)
    """
    val = (val or "/api").strip()
    if not val.startswith("/"):
        val = "/" + val
    if len(val) > 1 and val.endswith("/"):
        val = val[:-1]
    return val


def _int_env(name: str, default: int, *, minimum: int = 0) -> int:
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        value = int(raw_value)
    except ValueError:
        logger.warning(
            "%s is not a valid integer (got %r); defaulting to %d",
            name,
            raw_value,
            default,
        )
        return default
    if value < minimum:
        logger.warning("%s must be >= %d; defaulting to %d", name, minimum, default)
        return default
    return value


API_PREFIX = _canon_prefix(os.getenv("API_PREFIX"))

# Matches older than this many days cannot be recorded.
MATCH_MAX_BACKDATE_DAYS = _int_env("MATCH_MAX_BACKDATE_DAYS", 30)

STATS_CACHE_TTL_SECONDS = _int_env("STATS_CACHE_TTL_SECONDS", 120)

MATCH_RATE_LIMIT = os.getenv("MATCH_RATE_LIMIT") or "30/minute"


def rate_limits_disabled() -> bool:
    return (os.getenv("DISABLE_RATE_LIMITS") or "").lower() == "true"
