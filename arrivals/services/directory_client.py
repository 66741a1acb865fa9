# arrivals/services/directory_client.py
"""
Upstream directory client — wraps the Planning Center Check-Ins API.

Every list call follows `links.next` until the upstream stops returning one,
so callers always see the complete result set. Failures are translated here:

  timeout / network / 429 / 5xx  → UpstreamUnavailable
  401                            → UpstreamAuthExpired
  404 on a list endpoint         → empty result (nothing found is not an error)
"""

from typing import Optional
import httpx
from arrivals.config import settings
from arrivals.errors import UpstreamAuthExpired, UpstreamUnavailable
from arrivals.services.checkin_parser import IncludedIndex, parse_check_in, parse_event, parse_location
from arrivals.utils.dates import next_day, utc_date_of
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)

ALL_LOCATIONS = "all"


class _NotFoundPage(Exception):
    pass


class DirectoryClient:
    def __init__(self, base_url: str = None, token: str = None, secret: str = None,
                 timeout: float = None, page_size: int = None,
                 transport: httpx.AsyncBaseTransport = None):
        self.base_url = (base_url or settings.PCO_API_BASE).rstrip("/")
        self.page_size = page_size or settings.UPSTREAM_PAGE_SIZE
        self._client = httpx.AsyncClient(
            auth=httpx.BasicAuth(
                token if token is not None else settings.PCO_ACCESS_TOKEN,
                secret if secret is not None else settings.PCO_ACCESS_SECRET,
            ),
            headers={"Accept": "application/json"},
            timeout=httpx.Timeout(timeout or settings.UPSTREAM_TIMEOUT_SECONDS),
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    # ── Transport ─────────────────────────────────────────────────────────

    async def _get(self, url: str, params: dict = None) -> dict:
        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException:
            logger.warning(f"⏱  Upstream timeout: {url}")
            raise UpstreamUnavailable("Check-in service timed out")
        except httpx.HTTPError as e:
            logger.warning(f"❌ Upstream unreachable: {url} ({e})")
            raise UpstreamUnavailable("Check-in service is unreachable")

        if response.status_code == 401:
            logger.error(f"Upstream rejected credentials for {url}")
            raise UpstreamAuthExpired("Check-in service authentication failed")
        if response.status_code == 404:
            raise _NotFoundPage(url)
        if response.status_code == 429:
            logger.warning(f"Upstream rate limited: {url}")
            raise UpstreamUnavailable("Check-in service is rate limiting requests, try again shortly")
        if response.status_code >= 400:
            logger.warning(f"Upstream HTTP {response.status_code} for {url}")
            raise UpstreamUnavailable(f"Check-in service returned HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError:
            raise UpstreamUnavailable("Check-in service returned a malformed response")

    async def _paginate(self, path: str, params: dict = None) -> tuple:
        """Fetch every page of a collection. Returns (data, IncludedIndex)."""
        url = f"{self.base_url}{path}"
        data, index = [], IncludedIndex()
        seen = set()
        pages = 0
        while url:
            if url in seen:
                logger.warning(f"Pagination loop detected at {url} — stopping")
                break
            seen.add(url)
            try:
                doc = await self._get(url, params)
            except _NotFoundPage:
                logger.info(f"Upstream 404 for {url} — treating as empty")
                break
            params = None   # `next` links already carry the query string
            pages += 1
            data.extend(doc.get("data") or [])
            index.add_all(doc.get("included") or [])
            url = (doc.get("links") or {}).get("next")
        logger.debug(f"{path}: {len(data)} records over {pages} page(s)")
        return data, index

    # ── Queries ───────────────────────────────────────────────────────────

    async def list_events(self, date: Optional[str] = None) -> list:
        """Non-archived events, optionally limited to one date, sorted by start time."""
        params = {"per_page": self.page_size}
        if date:
            params["where[starts_at]"] = date
            params["include"] = "event_times"
        data, _ = await self._paginate("/events", params)
        events = [parse_event(r) for r in data]
        active = [e for e in events if not e.archived]
        logger.info(f"Events{' on ' + date if date else ''}: {len(active)} active, "
                    f"{len(events) - len(active)} archived skipped")
        return sorted(active, key=lambda e: e.starts_at or "")

    async def list_locations(self, event_id: str) -> list:
        data, _ = await self._paginate(f"/events/{event_id}/locations", {"per_page": self.page_size})
        return [parse_location(r) for r in data]

    async def list_check_ins(self, event_id: str, location_id: Optional[str] = None,
                             date: Optional[str] = None, security_code: Optional[str] = None,
                             include_checked_out: bool = False) -> list:
        """
        All check-ins of an event, newest pages included.
        - date: only check-ins created on that UTC calendar date. Sent upstream
          as a created_at range and re-checked locally on every record.
        - location_id: that location plus check-ins with no location; "all" or
          None returns everything.
        - security_code: case-insensitive exact match.
        """
        params = {"include": "person,locations", "per_page": self.page_size}
        if date:
            params["where[created_at][gte]"] = f"{date}T00:00:00Z"
            params["where[created_at][lt]"] = f"{next_day(date)}T00:00:00Z"
        code = security_code.strip().upper() if security_code else None
        if code:
            params["where[security_code]"] = code

        wanted_location = location_id if location_id and location_id != ALL_LOCATIONS else None
        data, index = await self._paginate(f"/events/{event_id}/check_ins", params)

        records = []
        skipped_out = 0
        for resource in data:
            record = parse_check_in(resource, index, wanted_location)
            if record.checked_out and not include_checked_out:
                skipped_out += 1
                continue
            if date and utc_date_of(record.check_in_time) != date:
                continue
            if code and record.security_code != code:
                continue
            if wanted_location and record.location_id not in (wanted_location, None):
                continue
            records.append(record)

        logger.debug(f"Event {event_id}: {len(records)} check-ins kept, {skipped_out} checked out skipped")
        return records
