# arrivals/clients/api.py
"""
Async client for the Arrivals REST API used by the admin panel, billboards
and kiosk.

Dates are validated before a request leaves the process. HTTP failures are
mapped back onto the shared error taxonomy:
  401/403          → UpstreamAuthExpired (caller must log in again)
  other 4xx        → ValidationError
  5xx / transport  → UpstreamUnavailable
"""

from typing import Optional
import httpx
from arrivals.config import settings
from arrivals.errors import UpstreamAuthExpired, UpstreamUnavailable, ValidationError
from arrivals.utils.dates import optional_event_date, validate_event_date
from arrivals.utils.logger import get_logger

logger = get_logger(__name__)


def _detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return body.get("detail") or body.get("message") or body.get("error") or f"HTTP {response.status_code}"
    return f"HTTP {response.status_code}"


class BoardApi:
    def __init__(self, base_url: str = None, user_id: str = None, user_name: str = None,
                 api_key: str = None, timeout: float = 10.0,
                 transport: httpx.AsyncBaseTransport = None):
        headers = {"Accept": "application/json"}
        if user_id:
            headers["X-User-ID"] = user_id
        if user_name:
            headers["X-User-Name"] = user_name
        api_key = api_key if api_key is not None else settings.API_KEY
        if api_key:
            headers["X-API-Key"] = api_key
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.API_BASE_URL).rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, params: dict = None, json: dict = None):
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.TimeoutException:
            raise UpstreamUnavailable(f"{method} {path} timed out")
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"{method} {path} failed: {e}")

        if response.status_code in (401, 403):
            raise UpstreamAuthExpired(_detail(response))
        if 400 <= response.status_code < 500:
            raise ValidationError(_detail(response))
        if response.status_code >= 500:
            raise UpstreamUnavailable(_detail(response))
        try:
            return response.json()
        except ValueError:
            raise UpstreamUnavailable(f"{method} {path} returned a non-JSON body")

    # ── Global billboard ──────────────────────────────────────────────────

    async def get_global_billboard(self) -> Optional[dict]:
        """The active billboard payload or None, whichever shape the server answers with."""
        body = await self._request("GET", "/global-billboard")
        if isinstance(body, dict) and "activeBillboard" in body:
            return body["activeBillboard"]
        if isinstance(body, dict) and body.get("eventId"):
            return body
        return None

    async def set_global_billboard(self, event_id: str, event_name: str, security_codes: list,
                                   event_date: Optional[str]) -> dict:
        event_date = optional_event_date(event_date, "eventDate")
        return await self._request("POST", "/set-global-billboard", json={
            "eventId": event_id,
            "eventName": event_name,
            "securityCodes": list(security_codes),
            "eventDate": event_date,
        })

    async def clear_global_billboard(self) -> dict:
        return await self._request("POST", "/clear-global-billboard")

    async def delete_global_billboard(self) -> dict:
        return await self._request("DELETE", "/global-billboard")

    # ── Notifications / codes ─────────────────────────────────────────────

    async def active_notifications(self, event_id: Optional[str] = None,
                                   event_date: Optional[str] = None) -> list:
        event_date = optional_event_date(event_date, "eventDate")
        return await self._request("GET", "/active-notifications",
                                   params={"eventId": event_id, "eventDate": event_date})

    async def submit_security_code(self, code: str, event_id: str, event_date: str) -> dict:
        validate_event_date(event_date, "eventDate")
        return await self._request("POST", "/security-code-entry", json={
            "securityCode": code.strip().upper(),
            "eventId": event_id,
            "eventDate": event_date,
        })

    async def lookup_security_codes(self, event_id: str, security_codes: list) -> list:
        return await self._request("POST", "/security-codes",
                                   json={"eventId": event_id, "securityCodes": list(security_codes)})

    # ── Directory views ───────────────────────────────────────────────────

    async def events_by_date(self, date: str) -> list:
        validate_event_date(date)
        return await self._request("GET", "/events-by-date", params={"date": date})

    async def locations(self, event_id: str) -> list:
        return await self._request("GET", f"/events/{event_id}/locations")

    async def check_ins(self, event_id: str, location_id: Optional[str] = None,
                        date: Optional[str] = None) -> list:
        date = optional_event_date(date)
        return await self._request("GET", "/billboard/check-ins",
                                   params={"eventId": event_id, "locationId": location_id, "date": date})

    async def location_status(self, event_id: str, date: Optional[str] = None) -> list:
        date = optional_event_date(date)
        return await self._request("GET", "/location-status", params={"eventId": event_id, "date": date})
