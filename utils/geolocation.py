"""Best-effort public IP lookup for session metadata."""

import logging
from typing import Optional

import requests

from config import IP_LOOKUP_URL, IP_LOOKUP_TIMEOUT

logger = logging.getLogger(__name__)


def get_ip_address(timeout: float = IP_LOOKUP_TIMEOUT, http=None) -> Optional[str]:
    """Return the caller's public IP, or None if the lookup fails or times out."""
    http = http or requests
    try:
        resp = http.get(IP_LOOKUP_URL, timeout=timeout)
        resp.raise_for_status()
        origin = resp.json().get("origin")
    except requests.Timeout:
        logger.warning("IP lookup timed out")
        return None
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Failed to get IP address: {e}")
        return None
    logger.debug(f"IP address retrieved: {origin}")
    return origin or None
