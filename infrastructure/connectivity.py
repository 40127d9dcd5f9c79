import logging

import requests

log = logging.getLogger(__name__)


def is_online(url: str, timeout: float = 3) -> bool:
    """True when `url` answers at all. Any HTTP status counts as reachable."""
    if not url:
        # Nothing to check; operations will fail on their own.
        return True
    try:
        requests.head(url, timeout=timeout)
    except requests.RequestException as e:
        log.warning(f"⚠️ Backend unreachable: {e}")
        return False
    return True
