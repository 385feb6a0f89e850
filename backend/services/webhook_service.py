"""
Webhook service for sending notifications to external services.

Used by the analytics layer to forward gameplay events to a collector
(Zapier, a custom endpoint, ...) when one is configured.
"""

import requests
import logging
from typing import Dict, Any
from datetime import datetime, timezone


logger = logging.getLogger(__name__)


def send_webhook(url: str, data: Dict[str, Any], timeout: int = 10) -> bool:
    """
    Send a POST request with JSON data to a webhook URL.

    Args:
        url: The webhook URL to send data to
        data: Dictionary of data to send as JSON
        timeout: Request timeout in seconds (default: 10)

    Returns:
        True if webhook was sent successfully, False otherwise
    """
    if not url:
        logger.warning("No webhook URL provided, skipping webhook")
        return False

    try:
        response = requests.post(
            url,
            json=data,
            timeout=timeout,
            headers={'Content-Type': 'application/json'}
        )
        response.raise_for_status()
        logger.debug(f"Webhook sent successfully to {url}")
        return True

    except requests.exceptions.RequestException as e:
        logger.error(f"Failed to send webhook to {url}: {e}")
        return False


def build_event_payload(event_name: str, params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Wrap an analytics event in the envelope the collector expects.
    """
    return {
        'event': event_name,
        'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
        'params': params,
    }
