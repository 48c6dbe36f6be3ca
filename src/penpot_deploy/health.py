"""HTTP health probe against the launched service."""

from __future__ import annotations

import requests

from .constants import HEALTH_TIMEOUT_SECONDS

USER_AGENT = 'penpot-deploy-healthcheck/1.0'


def probe_health(url: str, timeout: float = HEALTH_TIMEOUT_SECONDS) -> tuple[bool, str]:
    """
    Issue one GET against the health endpoint.

    Any non-2xx response or connection problem is "not healthy"; this
    function never raises for network errors.

    Returns:
        Tuple of (ok, message)
    """
    try:
        response = requests.get(url, headers={'User-Agent': USER_AGENT}, timeout=timeout)
    except requests.exceptions.Timeout:
        return False, f"Timed out after {timeout}s"
    except requests.exceptions.ConnectionError as e:
        return False, f"Connection failed: {e}"
    except requests.exceptions.RequestException as e:
        return False, f"Error: {e}"

    if not response.ok:
        return False, f"HTTP {response.status_code}: {response.reason}"
    return True, f"HTTP {response.status_code}"
