# arrivals/services/pickup_requests.py
"""
Pickup-request log — which security codes a kiosk or admin has called for an
(event, date) scope, and when.

Only the codes are remembered. Notifications are never stored: the
aggregator re-joins these codes against live check-ins on every fetch, so a
child checked out upstream disappears on the next poll. Entries expire after
PICKUP_REQUEST_TTL_MINUTES.
"""

from datetime import datetime, timedelta
from typing import Optional
from arrivals.config import settings
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


class PickupRequestLog:
    def __init__(self, ttl_minutes: int = None, clock=datetime.utcnow):
        self.ttl = timedelta(minutes=ttl_minutes if ttl_minutes is not None else settings.PICKUP_REQUEST_TTL_MINUTES)
        self._clock = clock
        self._requests = {}   # (event_id, event_date) -> {code: requested_at}

    def record(self, event_id: str, event_date: Optional[str], code: str) -> datetime:
        """
        Remember a called code. A repeat submission keeps the original time so
        the board order does not jump around.
        """
        self._prune()
        now = self._clock()
        scope = self._requests.setdefault((event_id, event_date), {})
        code = code.strip().upper()
        previous = scope.get(code)
        if previous is not None and now - previous < self.ttl:
            return previous
        scope[code] = now
        return now

    def codes_for(self, event_id: str, event_date: Optional[str]) -> dict:
        """Unexpired {code: requested_at} for the scope."""
        self._prune()
        return dict(self._requests.get((event_id, event_date), {}))

    def clear(self) -> int:
        count = sum(len(codes) for codes in self._requests.values())
        self._requests = {}
        if count:
            logger.info(f"Cleared {count} pickup request(s)")
        return count

    def _prune(self):
        cutoff = self._clock() - self.ttl
        expired = 0
        for scope in list(self._requests):
            codes = self._requests[scope]
            for code in [c for c, at in codes.items() if at <= cutoff]:
                del codes[code]
                expired += 1
            if not codes:
                del self._requests[scope]
        if expired:
            logger.info(f"Expired {expired} pickup request(s) older than {self.ttl}")
