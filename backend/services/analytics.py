"""
Analytics for gameplay events.

Events are always logged; when a webhook URL is configured (argument or the
ANALYTICS_WEBHOOK_URL env var) they are also posted through the webhook service.
The service is injected into the session, never imported as a singleton.
"""

import logging
import os
from typing import Any, Dict, Optional

from services.webhook_service import build_event_payload, send_webhook

logger = logging.getLogger(__name__)


class AnalyticsService:
    def __init__(self, webhook_url: Optional[str] = None, enabled: bool = True):
        self.webhook_url = webhook_url or os.getenv("ANALYTICS_WEBHOOK_URL")
        self.enabled = enabled

    def log_event(self, event_name: str, params: Optional[Dict[str, Any]] = None) -> bool:
        """
        Record a gameplay event. Returns True if it was forwarded to the webhook.
        """
        if not self.enabled:
            return False
        params = params or {}
        logger.info("[analytics] %s %s", event_name, params)
        if not self.webhook_url:
            return False
        return send_webhook(self.webhook_url, build_event_payload(event_name, params))

    def track_game_start(self, difficulty: float) -> bool:
        return self.log_event('game_start', {'difficulty_speed': difficulty})

    def track_game_over(self, score: int, reason: str, close_calls: int) -> bool:
        return self.log_event('game_over', {
            'score': score,
            'death_reason': reason,
            'close_calls': close_calls,
        })

    def track_power_up_collected(self, kind: str, current_score: int) -> bool:
        return self.log_event('power_up_collected', {
            'type': kind,
            'score_at_collection': current_score,
        })

    def track_ai_feature_used(self, feature_name: str) -> bool:
        return self.log_event('ai_feature_used', {'feature': feature_name})
